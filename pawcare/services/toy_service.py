import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from pawcare.errors import NotFound
from pawcare.middleware.validation import ValidationMiddleware
from pawcare.models.dog import Dog
from pawcare.models.toy import Toy, ToyCategory, ToyCondition
from pawcare.services.dog_service import get_owned_dog
from pawcare.utils.dates import parse_date

logger = logging.getLogger(__name__)


class ToyService:
    """Toy and supply inventory across a user's dogs"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _user_toys(self, user_id: str):
        return self.db.query(Toy).join(Dog, Toy.dog_id == Dog.id).filter(Dog.user_id == user_id)

    def get_toy(self, user_id: str, toy_id: str) -> Toy:
        toy = self._user_toys(user_id).filter(Toy.id == toy_id).first()
        if not toy:
            raise NotFound('Item not found')
        return toy

    def list_toys(self, user_id: str) -> List[Toy]:
        return self._user_toys(user_id).order_by(Toy.name.asc()).all()

    def list_for_dog(self, user_id: str, dog_id: str) -> Dict[str, Any]:
        get_owned_dog(self.db, user_id, dog_id)
        toys = (self.db.query(Toy)
                .filter(Toy.dog_id == dog_id)
                .order_by(Toy.category.asc(), Toy.name.asc())
                .all())
        grouped: Dict[str, List[Toy]] = {}
        for toy in toys:
            grouped.setdefault(toy.category.value, []).append(toy)
        return {'toys': toys, 'grouped': grouped}

    def list_by_category(self, user_id: str, category: str) -> List[Toy]:
        kind = ValidationMiddleware.parse_enum(ToyCategory, category, 'category')
        return self._user_toys(user_id).filter(Toy.category == kind).order_by(Toy.name.asc()).all()

    def list_favorites(self, user_id: str) -> List[Toy]:
        return self._user_toys(user_id).filter(Toy.is_favorite.is_(True)).order_by(Toy.name.asc()).all()

    def list_needing_replacement(self, user_id: str) -> List[Toy]:
        """Worn items and those flagged for replacement, the latter first"""
        items = (self._user_toys(user_id)
                 .filter(Toy.condition.in_([ToyCondition.WORN, ToyCondition.NEEDS_REPLACEMENT]))
                 .order_by(Toy.name.asc())
                 .all())
        return sorted(items, key=lambda t: t.condition != ToyCondition.NEEDS_REPLACEMENT)

    def spending_summary(self, user_id: str) -> Dict[str, Any]:
        rows = (self.db.query(Toy.category, func.count(Toy.id), func.sum(Toy.purchase_price))
                .join(Dog, Toy.dog_id == Dog.id)
                .filter(Dog.user_id == user_id, Toy.purchase_price.isnot(None))
                .group_by(Toy.category)
                .all())
        by_category = [{
            'category': category.value if category else None,
            'item_count': count,
            'total_spent': round(total or 0, 2)
        } for category, count, total in rows]
        return {
            'by_category': by_category,
            'grand_total': round(sum(row['total_spent'] for row in by_category), 2)
        }

    def create_toy(self, user_id: str, data: Dict[str, Any]) -> Toy:
        dog = get_owned_dog(self.db, user_id, data.get('dog_id'))
        toy = Toy(
            dog_id=dog.id,
            name=data['name'],
            category=ValidationMiddleware.parse_enum(ToyCategory, data.get('category'), 'category',
                                                     default=ToyCategory.TOY),
            brand=data.get('brand'),
            purchase_date=parse_date(data.get('purchase_date'), 'purchase_date'),
            purchase_price=ValidationMiddleware.parse_float(data.get('purchase_price'), 'purchase_price'),
            condition=ValidationMiddleware.parse_enum(ToyCondition, data.get('condition'), 'condition',
                                                      default=ToyCondition.NEW),
            is_favorite=ValidationMiddleware.parse_bool(data.get('is_favorite'), 'is_favorite', default=False),
            notes=data.get('notes'),
            photo_url=data.get('photo_url')
        )
        self.db.add(toy)
        self._commit()
        logger.info(f"Added item {toy.id} for dog {dog.id}")
        return toy

    def update_toy(self, user_id: str, toy_id: str, data: Dict[str, Any]) -> Toy:
        toy = self.get_toy(user_id, toy_id)
        if data.get('category') is not None:
            toy.category = ValidationMiddleware.parse_enum(ToyCategory, data['category'], 'category')
        if data.get('condition') is not None:
            toy.condition = ValidationMiddleware.parse_enum(ToyCondition, data['condition'], 'condition')
        if data.get('purchase_date') is not None:
            toy.purchase_date = parse_date(data['purchase_date'], 'purchase_date')
        if data.get('purchase_price') is not None:
            toy.purchase_price = ValidationMiddleware.parse_float(data['purchase_price'], 'purchase_price')
        if data.get('is_favorite') is not None:
            toy.is_favorite = ValidationMiddleware.parse_bool(data['is_favorite'], 'is_favorite')
        for field in ('name', 'brand', 'notes', 'photo_url'):
            if data.get(field) is not None:
                setattr(toy, field, data[field])
        self._commit()
        return toy

    def delete_toy(self, user_id: str, toy_id: str) -> None:
        toy = self.get_toy(user_id, toy_id)
        self.db.delete(toy)
        self._commit()

    def toggle_favorite(self, user_id: str, toy_id: str) -> Toy:
        toy = self.get_toy(user_id, toy_id)
        toy.is_favorite = not toy.is_favorite
        self._commit()
        return toy
