import pytest

from pawcare.errors import Conflict, NotFound, ValidationError
from pawcare.models.food import FOOD_SEED, FoodItem, normalize_food_id, seed_food_database
from pawcare.services.food_service import FoodService, format_food_context, is_food_question


def test_seed_loads_reference_foods_once(session):
    assert session.query(FoodItem).count() == len(FOOD_SEED) == 24
    assert seed_food_database(session) == 0
    assert session.query(FoodItem).filter(FoodItem.is_safe.is_(True)).count() == 12


def test_normalize_food_id():
    assert normalize_food_id('Peanut  Butter') == 'peanut-butter'
    assert normalize_food_id(' Raw Yeast Dough ') == 'raw-yeast-dough'


class TestLookups:
    def test_find_by_name_is_case_insensitive(self, session):
        service = FoodService(session)
        assert service.find_by_name('chocolate').food_name == 'Chocolate'
        assert service.find_by_name('PEANUT BUTTER').safety_level.value == 'safe_in_moderation'
        assert service.find_by_name('durian') is None

    def test_get_by_name_raises_for_unknown_food(self, session):
        with pytest.raises(NotFound):
            FoodService(session).get_by_name('durian')

    def test_search_matches_name_and_category(self, session):
        service = FoodService(session)
        assert [f.food_name for f in service.search('pot')] == ['Sweet Potato']
        assert {f.category for f in service.search('fruit')} == {'fruit'}

        with pytest.raises(ValidationError):
            service.search('  ')

    def test_search_is_case_insensitive(self, session):
        results = FoodService(session).search('CHOCOLATE')
        assert [f.food_name for f in results] == ['Chocolate']
        assert results[0].safety_level.value == 'toxic'

    def test_search_without_matches(self, session):
        assert FoodService(session).search('durian') == []

    def test_safe_and_toxic_lists(self, session):
        service = FoodService(session)
        assert all(f.is_safe for f in service.list_safe())
        toxic = service.list_toxic()
        assert len(toxic) == 12
        assert not any(f.is_safe for f in toxic)

    def test_categories(self, session):
        assert FoodService(session).list_categories() == ['fruit', 'grain', 'other', 'protein', 'toxic', 'vegetable']


class TestAddFood:
    def test_add_new_food(self, session):
        food = FoodService(session).add_food({'food_name': 'Blackberries', 'is_safe': True,
                                              'safety_level': 'safe', 'category': 'fruit'})
        assert food.id == 'blackberries'
        assert session.get(FoodItem, 'blackberries') is not None

    def test_existing_food_is_rejected(self, session):
        with pytest.raises(Conflict):
            FoodService(session).add_food({'food_name': 'chocolate', 'is_safe': True, 'safety_level': 'safe'})
        assert session.get(FoodItem, 'chocolate').is_safe is False

    def test_unknown_safety_level(self, session):
        with pytest.raises(ValidationError):
            FoodService(session).add_food({'food_name': 'Kale', 'is_safe': True, 'safety_level': 'fine'})


class TestPromptContext:
    def test_is_food_question(self):
        assert is_food_question('Can dogs eat chocolate?')
        assert is_food_question('Is this TREAT ok')
        assert not is_food_question('How often should I walk my husky')

    def test_falls_back_to_single_words(self, session):
        foods = FoodService(session).find_relevant('can dogs eat chocolate')
        assert [f.food_name for f in foods] == ['Chocolate']

    def test_punctuation_around_words_is_ignored(self, session):
        foods = FoodService(session).find_relevant('Can dogs eat chocolate?')
        assert [f.food_name for f in foods] == ['Chocolate']
        assert FoodService(session).find_relevant('?! ...') == []

    def test_short_words_are_ignored(self, session):
        assert FoodService(session).find_relevant('zz qq') == []
        assert FoodService(session).find_relevant('') == []

    def test_context_block(self, session):
        context = FoodService(session).build_context('Is it safe to feed my dog grapes')
        assert context.startswith('\n\nRELEVANT FOOD DATABASE INFORMATION:\n')
        assert '- Grapes: NOT SAFE (dangerous)' in context

    def test_context_block_for_question_with_punctuation(self, session):
        context = FoodService(session).build_context('Can my dog eat grapes?')
        assert '- Grapes: NOT SAFE (dangerous)' in context

    def test_no_context_for_other_questions(self, session):
        assert FoodService(session).build_context('How do I trim grapes off a vine') == ''

    def test_duplicates_are_rendered_once(self, session):
        chocolate = FoodService(session).find_by_name('Chocolate')
        assert format_food_context([chocolate, chocolate]).count('- Chocolate:') == 1
        assert format_food_context([]) == ''
