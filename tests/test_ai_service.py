from datetime import date
from types import SimpleNamespace

import pytest

from pawcare.errors import UpstreamProviderError
from pawcare.models import Dog, DogHealthCondition, User
from pawcare.services.ai_service import (
    AIService, AdvisoryProvider, AnthropicProvider, EMPTY_REPLY, OpenAIProvider, ProviderReply,
    SYSTEM_PROMPT, build_dog_context, build_provider_registry, extract_citations, select_provider
)


class RecordingProvider(AdvisoryProvider):
    def __init__(self, name, reply='Fine. [Source: AKC]'):
        self.name = name
        self.reply = reply
        self.prompts = []

    def ask(self, system, prompt):
        self.prompts.append((system, prompt))
        return ProviderReply(text=self.reply, model=f'{self.name}-model')


class BrokenProvider(AdvisoryProvider):
    name = 'broken'

    def ask(self, system, prompt):
        raise ConnectionError('timeout')


class TestProviderSelection:
    def test_requested_then_default_then_first(self):
        registry = {'anthropic': RecordingProvider('anthropic'), 'openai': RecordingProvider('openai')}
        assert select_provider(registry, 'openai', 'anthropic').name == 'openai'
        assert select_provider(registry, 'unknown', 'openai').name == 'openai'
        assert select_provider(registry, None, None).name == 'anthropic'

    def test_empty_registry(self):
        with pytest.raises(UpstreamProviderError):
            select_provider({}, 'openai')

    def test_registry_only_holds_configured_providers(self):
        config = {'OPENAI_API_KEY': 'sk-test', 'OPENAI_MODEL': 'gpt-test', 'ANTHROPIC_API_KEY': None}
        assert list(build_provider_registry(config)) == ['openai']
        assert build_provider_registry({}) == {}


def test_extract_citations_keeps_first_occurrence_order():
    text = 'Avoid it [Source: ASPCA]. Also [source: AKC] and again [Source: ASPCA ]'
    assert extract_citations(text) == ['ASPCA', 'AKC']
    assert extract_citations(None) == []


class TestSdkProviders:
    def test_openai_reply(self):
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content='Yes'))])
        calls = []
        client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
            create=lambda **kwargs: calls.append(kwargs) or response)))

        reply = OpenAIProvider('key', 'gpt-test', client=client).ask('system', 'question')

        assert reply.text == 'Yes'
        assert calls[0]['messages'][0] == {'role': 'system', 'content': 'system'}

    def test_anthropic_reply_takes_first_text_block(self):
        response = SimpleNamespace(content=[SimpleNamespace(type='tool_use'), SimpleNamespace(type='text', text='No')])
        client = SimpleNamespace(messages=SimpleNamespace(create=lambda **kwargs: response))
        assert AnthropicProvider('key', 'claude-test', client=client).ask('s', 'q').text == 'No'

    def test_empty_reply_placeholder(self):
        client = SimpleNamespace(messages=SimpleNamespace(create=lambda **kwargs: SimpleNamespace(content=[])))
        assert AnthropicProvider('key', 'claude-test', client=client).ask('s', 'q').text == EMPTY_REPLY


@pytest.fixture
def owner_dog(session):
    user = User(email='ai@example.com', password_hash='x', name='Asker')
    session.add(user)
    session.flush()
    dog = Dog(user_id=user.id, name='Biscuit', breed='Beagle', date_of_birth=date(2020, 1, 1))
    session.add(dog)
    session.flush()
    session.add(DogHealthCondition(dog_id=dog.id, condition_name='Hip dysplasia'))
    session.commit()
    return dog


class TestAIService:
    def test_food_and_dog_context_reach_the_provider(self, session, owner_dog):
        provider = RecordingProvider('anthropic')
        service = AIService(session, {'anthropic': provider})

        answer = service.ask('Can dogs eat chocolate?', dog=owner_dog, today=date(2024, 6, 1))

        system, prompt = provider.prompts[0]
        assert system == SYSTEM_PROMPT
        assert prompt.startswith('Can dogs eat chocolate?')
        assert 'RELEVANT FOOD DATABASE INFORMATION' in prompt
        assert '- Age: 4 years' in prompt
        assert 'Hip dysplasia' in prompt
        assert answer.sources == ['AKC']
        assert answer.model == 'anthropic-model'

    def test_provider_failure_becomes_upstream_error(self, session):
        with pytest.raises(UpstreamProviderError):
            AIService(session, {'broken': BrokenProvider()}).ask('How much exercise?')

    def test_history_is_newest_first_and_scoped(self, session, owner_dog):
        service = AIService(session, {'openai': RecordingProvider('openai')})
        for question in ('first', 'second'):
            service.log_query(owner_dog.user_id, question, service.ask(question), dog_id=owner_dog.id)

        history = service.history(owner_dog.user_id, limit=5)
        assert [entry['query'] for entry in history] == ['second', 'first']
        assert history[0]['dog_name'] == 'Biscuit'
        assert service.history('someone-else') == []


def test_dog_context_without_birth_date():
    dog = Dog(name='Mystery', breed=None, date_of_birth=None)
    context = build_dog_context(dog, date(2024, 1, 1))
    assert '- Age: Unknown' in context
    assert '- Breed: Unknown' in context
    assert '- Health Conditions: None reported' in context
