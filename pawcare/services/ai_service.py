"""
AI Service
Advisory gateway over the configured LLM providers. Questions are enriched
with food reference entries and the dog's profile, sent to one provider,
and the ``[Source: ...]`` citations in the reply are collected.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from anthropic import Anthropic
from flask import current_app
from openai import OpenAI
from sqlalchemy.orm import Session

from pawcare import db
from pawcare.errors import UpstreamProviderError
from pawcare.models.ai_query import AIQuery
from pawcare.models.dog import Dog
from pawcare.services.food_service import FoodService
from pawcare.services.reminder_rules import age_in_years

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are PawCare AI, an expert veterinary assistant helping dog owners with pet care questions.

IMPORTANT GUIDELINES:
1. Always prioritize the safety and health of dogs
2. For food-related questions, be VERY clear about what is safe vs toxic
3. When uncertain, recommend consulting a veterinarian
4. Cite reputable sources like ASPCA, AKC, FDA, VCA Hospitals, PetMD
5. Consider the specific dog's breed, age, and health conditions when relevant
6. Be concise but thorough in your explanations
7. For emergencies, always recommend immediate veterinary care
8. Never recommend unverified home remedies that could be harmful

When providing information:
- Start with the most important safety information
- Explain WHY something is safe or dangerous
- Provide practical, actionable advice
- Include source citations at the end of your response

Format sources as: [Source: Organization Name]"""

NO_PROVIDER_MESSAGE = 'No AI provider configured. Please set OPENAI_API_KEY or ANTHROPIC_API_KEY.'
EMPTY_REPLY = 'Unable to generate response'

AI_DISCLAIMER = 'This information is AI-generated. Always consult your veterinarian for dietary advice.'
SYMPTOM_DISCLAIMER = ('This is not a substitute for professional veterinary care. If your dog is in distress, '
                      'please contact your veterinarian or emergency animal hospital immediately.')

_SOURCE_PATTERN = re.compile(r'\[Source:\s*([^\]]+)\]', re.IGNORECASE)


@dataclass
class ProviderReply:
    text: str
    model: str


@dataclass
class AdvisoryAnswer:
    answer: str
    provider: str
    model: str
    sources: List[str] = field(default_factory=list)


# ==================== PROVIDERS ====================

class AdvisoryProvider:
    """A chat model that answers one prompt under a system prompt"""
    name = None

    def ask(self, system: str, prompt: str) -> ProviderReply:
        raise NotImplementedError


class OpenAIProvider(AdvisoryProvider):
    name = 'openai'

    def __init__(self, api_key: str, model: str, max_tokens: int = 1500, temperature: float = 0.7, client=None):
        self.client = client or OpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def ask(self, system: str, prompt: str) -> ProviderReply:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt}
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )
        text = response.choices[0].message.content if response.choices else None
        return ProviderReply(text=text or EMPTY_REPLY, model=self.model)


class AnthropicProvider(AdvisoryProvider):
    name = 'anthropic'

    def __init__(self, api_key: str, model: str, max_tokens: int = 1500, client=None):
        self.client = client or Anthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    def ask(self, system: str, prompt: str) -> ProviderReply:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}]
        )
        text = next((block.text for block in response.content if getattr(block, 'type', None) == 'text'), None)
        return ProviderReply(text=text or EMPTY_REPLY, model=self.model)


def build_provider_registry(config) -> Dict[str, AdvisoryProvider]:
    """Providers with an API key, Anthropic first"""
    registry: Dict[str, AdvisoryProvider] = {}
    if config.get('ANTHROPIC_API_KEY'):
        registry['anthropic'] = AnthropicProvider(config['ANTHROPIC_API_KEY'], config['ANTHROPIC_MODEL'],
                                                  max_tokens=config.get('AI_MAX_TOKENS', 1500))
    if config.get('OPENAI_API_KEY'):
        registry['openai'] = OpenAIProvider(config['OPENAI_API_KEY'], config['OPENAI_MODEL'],
                                            max_tokens=config.get('AI_MAX_TOKENS', 1500),
                                            temperature=config.get('AI_TEMPERATURE', 0.7))
    return registry


def select_provider(registry: Dict[str, AdvisoryProvider], requested: Optional[str] = None,
                    default: Optional[str] = None) -> AdvisoryProvider:
    """Requested provider, else the default, else the first one registered"""
    if not registry:
        raise UpstreamProviderError(NO_PROVIDER_MESSAGE)
    for name in (requested, default):
        if name and name in registry:
            return registry[name]
    return next(iter(registry.values()))


def extract_citations(text: str) -> List[str]:
    """Unique ``[Source: X]`` names in order of first appearance"""
    seen: List[str] = []
    for match in _SOURCE_PATTERN.finditer(text or ''):
        source = match.group(1).strip()
        if source and source not in seen:
            seen.append(source)
    return seen


def build_dog_context(dog: Dog, today: Optional[date] = None) -> str:
    age = age_in_years(dog.date_of_birth, today or date.today())
    conditions = ', '.join(c.condition_name for c in dog.health_conditions) or 'None reported'
    return (
        "\n\nDOG PROFILE CONTEXT:\n"
        f"- Name: {dog.name}\n"
        f"- Breed: {dog.breed or 'Unknown'}\n"
        f"- Age: {f'{age} years' if age is not None else 'Unknown'}\n"
        f"- Health Conditions: {conditions}\n"
        "\n"
        "Please consider this dog's specific characteristics in your response."
    )


# ==================== SERVICE ====================

class AIService:
    def __init__(self, db_session: Session, registry: Dict[str, AdvisoryProvider],
                 default_provider: Optional[str] = None):
        self.db = db_session
        self.registry = registry
        self.default_provider = default_provider
        self.food = FoodService(db_session)

    def available_providers(self) -> List[str]:
        return list(self.registry)

    def ask(self, question: str, provider: Optional[str] = None, dog: Optional[Dog] = None,
            today: Optional[date] = None) -> AdvisoryAnswer:
        context = self.food.build_context(question)
        if dog is not None:
            context += build_dog_context(dog, today)

        chosen = select_provider(self.registry, provider, self.default_provider)
        logger.info(f"Sending advisory question to {chosen.name}")
        try:
            reply = chosen.ask(SYSTEM_PROMPT, f"{question}{context}")
        except Exception as e:
            logger.error(f"AI provider {chosen.name} failed: {str(e)}")
            raise UpstreamProviderError(f'AI provider {chosen.name} request failed') from e

        return AdvisoryAnswer(answer=reply.text, provider=chosen.name, model=reply.model,
                              sources=extract_citations(reply.text))

    def log_query(self, user_id: str, question: str, answer: AdvisoryAnswer, dog_id: Optional[str] = None) -> AIQuery:
        entry = AIQuery(user_id=user_id, dog_id=dog_id, question=question, response=answer.answer,
                        provider=answer.provider, model=answer.model, sources=answer.sources)
        try:
            self.db.add(entry)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return entry

    def history(self, user_id: str, limit: int = 20, dog_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (self.db.query(AIQuery, Dog.name)
                 .outerjoin(Dog, AIQuery.dog_id == Dog.id)
                 .filter(AIQuery.user_id == user_id))
        if dog_id:
            query = query.filter(AIQuery.dog_id == dog_id)
        rows = query.order_by(AIQuery.created_at.desc()).limit(limit).all()
        return [entry.to_dict(dog_name=dog_name) for entry, dog_name in rows]


def get_ai_service(db_session: Optional[Session] = None) -> AIService:
    """AI service over the app's provider registry, built once per app"""
    registry = current_app.extensions.get('pawcare_ai_providers')
    if registry is None:
        registry = build_provider_registry(current_app.config)
        current_app.extensions['pawcare_ai_providers'] = registry
    return AIService(db_session or db.session, registry, current_app.config.get('DEFAULT_AI_PROVIDER'))
