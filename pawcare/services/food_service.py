"""
Food Service
Lookups over the food safety reference table, and the retriever that turns
a free-text question into a block of matching reference entries for the
advisory prompt.
"""

import logging
import string
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from pawcare.errors import Conflict, NotFound, ValidationError
from pawcare.middleware.validation import ValidationMiddleware
from pawcare.models.food import FoodItem, SafetyLevel, normalize_food_id

logger = logging.getLogger(__name__)

FOOD_KEYWORDS = ('food', 'eat', 'feed', 'safe', 'toxic', 'can dogs', 'give my dog', 'snack', 'treat')


def is_food_question(question: str) -> bool:
    text = (question or '').lower()
    return any(keyword in text for keyword in FOOD_KEYWORDS)


def format_food_context(foods: List[FoodItem]) -> str:
    """Render entries as the prompt block, one entry per food name (last one wins)"""
    unique: Dict[str, FoodItem] = {}
    for food in foods:
        unique[food.food_name] = food
    if not unique:
        return ''

    entries = []
    for food in unique.values():
        level = food.safety_level.value if food.safety_level else 'varies'
        entries.append(
            f"- {food.food_name}: {'SAFE' if food.is_safe else 'NOT SAFE'} ({level})\n"
            f"   Description: {food.description}\n"
            f"   Benefits: {food.benefits}\n"
            f"   Risks: {food.risks}\n"
            f"   Serving: {food.serving_suggestion}\n"
            f"   Sources: {food.sources}"
        )
    return "\n\nRELEVANT FOOD DATABASE INFORMATION:\n" + "\n\n".join(entries)


class FoodService:
    def __init__(self, db_session: Session):
        self.db = db_session

    # ==================== LOOKUPS ====================

    def search(self, query: str) -> List[FoodItem]:
        if not query or not query.strip():
            raise ValidationError('Search query is required')
        pattern = f"%{query.strip().lower()}%"
        return (self.db.query(FoodItem)
                .filter(or_(func.lower(FoodItem.food_name).like(pattern),
                            func.lower(FoodItem.category).like(pattern)))
                .order_by(FoodItem.food_name.asc())
                .all())

    def list_safe(self) -> List[FoodItem]:
        return self.db.query(FoodItem).filter(FoodItem.is_safe.is_(True)).order_by(FoodItem.food_name.asc()).all()

    def list_toxic(self) -> List[FoodItem]:
        return (self.db.query(FoodItem)
                .filter(FoodItem.is_safe.is_(False))
                .order_by(FoodItem.safety_level.desc(), FoodItem.food_name.asc())
                .all())

    def list_by_category(self, category: str) -> List[FoodItem]:
        return (self.db.query(FoodItem)
                .filter(FoodItem.category == category)
                .order_by(FoodItem.food_name.asc())
                .all())

    def list_categories(self) -> List[str]:
        rows = self.db.query(FoodItem.category).distinct().order_by(FoodItem.category.asc()).all()
        return [row[0] for row in rows if row[0] is not None]

    def find_by_name(self, food_name: str) -> Optional[FoodItem]:
        """Case-insensitive exact match, None when absent"""
        return (self.db.query(FoodItem)
                .filter(func.lower(FoodItem.food_name) == (food_name or '').strip().lower())
                .first())

    def get_by_name(self, food_name: str) -> FoodItem:
        food = self.find_by_name(food_name)
        if not food:
            raise NotFound('Food not found in database')
        return food

    def add_food(self, data: Dict[str, Any]) -> FoodItem:
        """Append a new reference entry. Existing ids are never overwritten."""
        if data.get('is_safe') is None:
            raise ValidationError('food_name, is_safe, and safety_level are required')
        food_name = ValidationMiddleware.parse_text(data.get('food_name'), 'food_name')
        food_id = normalize_food_id(food_name)
        if self.db.get(FoodItem, food_id) is not None:
            raise Conflict('Food already exists in database')

        food = FoodItem(
            id=food_id,
            food_name=food_name,
            category=data.get('category') or 'other',
            is_safe=ValidationMiddleware.parse_bool(data['is_safe'], 'is_safe'),
            safety_level=ValidationMiddleware.parse_enum(SafetyLevel, data.get('safety_level'), 'safety_level'),
            description=data.get('description') or '',
            benefits=data.get('benefits') or '',
            risks=data.get('risks') or '',
            serving_suggestion=data.get('serving_suggestion') or '',
            sources=data.get('sources') or ''
        )
        try:
            self.db.add(food)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Added food '{food.food_name}' to the reference table")
        return food

    # ==================== PROMPT CONTEXT ====================

    def find_relevant(self, question: str) -> List[FoodItem]:
        """
        Entries matching the whole question as one ordered pattern, or, when
        that finds nothing, entries whose name contains any word longer than
        two characters. Surrounding punctuation is dropped from each word.
        """
        words = (question or '').lower().split()
        tokens = [t for t in (w.strip(string.punctuation) for w in words) if t]
        if not tokens:
            return []

        combined = f"%{'%'.join(tokens)}%"
        foods = (self.db.query(FoodItem)
                 .filter(or_(func.lower(FoodItem.food_name).like(combined),
                             func.lower(FoodItem.description).like(combined)))
                 .all())
        if foods:
            return foods

        matches: List[FoodItem] = []
        for token in tokens:
            if len(token) > 2:
                matches.extend(self.db.query(FoodItem)
                               .filter(func.lower(FoodItem.food_name).like(f"%{token}%"))
                               .all())
        return matches

    def build_context(self, question: str) -> str:
        """Food reference block for a food-related question, otherwise ''"""
        if not is_food_question(question):
            return ''
        foods = self.find_relevant(question)
        logger.debug(f"Food context matched {len(foods)} entries")
        return format_food_context(foods)
