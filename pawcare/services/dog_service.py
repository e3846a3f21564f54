import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from pawcare.errors import NotFound, ValidationError
from pawcare.middleware.validation import ValidationMiddleware
from pawcare.models.dog import (
    Dog, DogAllergy, DogHealthCondition, WeightHistory, Gender, AllergySeverity, ConditionStatus
)
from pawcare.models.health_models import EventType
from pawcare.services.event_service import EventService
from pawcare.services.reminder_rules import ReminderWindows, next_anniversary
from pawcare.utils.dates import parse_date

logger = logging.getLogger(__name__)

# Plain text columns copied straight from the request body
_TEXT_FIELDS = ('breed', 'color', 'microchip_number', 'photo_url', 'notes', 'weight_unit')


def get_owned_dog(db_session: Session, user_id: str, dog_id: str) -> Dog:
    """The dog, if it belongs to the user. Anything else is a 404."""
    dog = db_session.query(Dog).filter_by(id=dog_id, user_id=user_id).first() if dog_id else None
    if not dog:
        raise NotFound('Dog not found')
    return dog


class DogService:
    """Dog profiles with their allergies, conditions and weight history"""

    def __init__(self, db_session: Session, windows: Optional[ReminderWindows] = None):
        self.db = db_session
        self.windows = windows or ReminderWindows()
        self.events = EventService(db_session, self.windows)

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ==================== PROFILES ====================

    def list_dogs(self, user_id: str) -> List[Dog]:
        return self.db.query(Dog).filter_by(user_id=user_id).order_by(Dog.name.asc()).all()

    def get_dog(self, user_id: str, dog_id: str) -> Dog:
        return get_owned_dog(self.db, user_id, dog_id)

    def get_dog_details(self, user_id: str, dog_id: str) -> Dict[str, Any]:
        dog = self.get_dog(user_id, dog_id)
        data = dog.to_dict(include_details=True)
        data['weight_history'] = [w.to_dict() for w in dog.weight_history[:10]]
        return data

    def create_dog(self, user_id: str, data: Dict[str, Any], today: Optional[date] = None) -> Dog:
        """
        Create a profile with nested allergies/conditions, an initial weight
        entry and the birthday / gotcha day events.
        """
        today = today or date.today()
        name = ValidationMiddleware.parse_text(data.get('name'), 'name')
        if not name:
            raise ValidationError('Dog name is required')

        dog = Dog(
            user_id=user_id,
            name=name,
            date_of_birth=parse_date(data.get('date_of_birth'), 'date_of_birth'),
            adoption_date=parse_date(data.get('adoption_date'), 'adoption_date'),
            gender=ValidationMiddleware.parse_enum(Gender, data.get('gender'), 'gender', default=Gender.UNKNOWN),
            weight=ValidationMiddleware.parse_float(data.get('weight'), 'weight'),
            is_neutered=ValidationMiddleware.parse_bool(data.get('is_neutered'), 'is_neutered', default=False)
        )
        for field in _TEXT_FIELDS:
            if data.get(field) is not None:
                setattr(dog, field, data[field])
        dog.weight_unit = dog.weight_unit or 'kg'

        self.db.add(dog)
        self.db.flush()

        for allergy in data.get('allergies') or []:
            self._build_allergy(dog, allergy)
        for condition in data.get('health_conditions') or []:
            self._build_condition(dog, condition)

        if dog.weight:
            self.db.add(WeightHistory(dog_id=dog.id, weight=dog.weight, weight_unit=dog.weight_unit,
                                      recorded_date=today))

        self._materialize_anniversaries(dog, today)
        self._commit()
        logger.info(f"Created dog {dog.id} for user {user_id}")
        return dog

    def update_dog(self, user_id: str, dog_id: str, data: Dict[str, Any], today: Optional[date] = None) -> Dog:
        """Partial update. A changed weight is appended to the history."""
        today = today or date.today()
        dog = self.get_dog(user_id, dog_id)
        previous_weight = dog.weight

        if data.get('name') is not None:
            name = ValidationMiddleware.parse_text(data['name'], 'name')
            if not name:
                raise ValidationError('Dog name is required')
            dog.name = name
        for field in _TEXT_FIELDS:
            if data.get(field) is not None:
                setattr(dog, field, data[field])
        if data.get('gender') is not None:
            dog.gender = ValidationMiddleware.parse_enum(Gender, data['gender'], 'gender')
        if data.get('is_neutered') is not None:
            dog.is_neutered = ValidationMiddleware.parse_bool(data['is_neutered'], 'is_neutered')
        if data.get('date_of_birth') is not None:
            dog.date_of_birth = parse_date(data['date_of_birth'], 'date_of_birth')
        if data.get('adoption_date') is not None:
            dog.adoption_date = parse_date(data['adoption_date'], 'adoption_date')

        weight = ValidationMiddleware.parse_float(data.get('weight'), 'weight')
        if weight is not None:
            dog.weight = weight
            if weight != previous_weight:
                self.db.add(WeightHistory(dog_id=dog.id, weight=weight, weight_unit=dog.weight_unit or 'kg',
                                          recorded_date=today))

        if data.get('date_of_birth') is not None or data.get('adoption_date') is not None:
            self._materialize_anniversaries(dog, today)

        self._commit()
        return dog

    def delete_dog(self, user_id: str, dog_id: str) -> None:
        dog = self.get_dog(user_id, dog_id)
        self.db.delete(dog)
        self._commit()
        logger.info(f"Deleted dog {dog_id} for user {user_id}")

    # ==================== CHILD RECORDS ====================

    def _build_allergy(self, dog: Dog, data: Dict[str, Any]) -> DogAllergy:
        if not data.get('allergen'):
            raise ValidationError('Allergen is required')
        allergy = DogAllergy(
            dog_id=dog.id,
            allergen=data['allergen'],
            severity=ValidationMiddleware.parse_enum(AllergySeverity, data.get('severity'), 'severity',
                                                     default=AllergySeverity.MODERATE),
            notes=data.get('notes')
        )
        self.db.add(allergy)
        return allergy

    def _build_condition(self, dog: Dog, data: Dict[str, Any]) -> DogHealthCondition:
        if not data.get('condition_name'):
            raise ValidationError('Condition name is required')
        condition = DogHealthCondition(
            dog_id=dog.id,
            condition_name=data['condition_name'],
            diagnosed_date=parse_date(data.get('diagnosed_date'), 'diagnosed_date'),
            status=ValidationMiddleware.parse_enum(ConditionStatus, data.get('status'), 'status',
                                                   default=ConditionStatus.ACTIVE),
            notes=data.get('notes')
        )
        self.db.add(condition)
        return condition

    def add_allergy(self, user_id: str, dog_id: str, data: Dict[str, Any]) -> DogAllergy:
        dog = self.get_dog(user_id, dog_id)
        allergy = self._build_allergy(dog, data)
        self._commit()
        return allergy

    def add_condition(self, user_id: str, dog_id: str, data: Dict[str, Any]) -> DogHealthCondition:
        dog = self.get_dog(user_id, dog_id)
        condition = self._build_condition(dog, data)
        self._commit()
        return condition

    def record_weight(self, user_id: str, dog_id: str, data: Dict[str, Any],
                      today: Optional[date] = None) -> WeightHistory:
        """Append a weight entry and cache it as the dog's current weight"""
        dog = self.get_dog(user_id, dog_id)
        weight = ValidationMiddleware.parse_float(data.get('weight'), 'weight')
        if not weight:
            raise ValidationError('Weight is required')

        entry = WeightHistory(
            dog_id=dog.id,
            weight=weight,
            weight_unit=data.get('weight_unit') or 'kg',
            recorded_date=parse_date(data.get('recorded_date'), 'recorded_date') or today or date.today(),
            notes=data.get('notes')
        )
        self.db.add(entry)
        dog.weight = weight
        dog.weight_unit = data.get('weight_unit') or dog.weight_unit
        self._commit()
        return entry

    # ==================== ANNIVERSARIES ====================

    def _materialize_anniversaries(self, dog: Dog, today: date) -> None:
        """Upsert the yearly birthday and gotcha day events for the next occurrence"""
        anniversaries = (
            (EventType.BIRTHDAY, dog.date_of_birth, f"{dog.name}'s Birthday"),
            (EventType.ADOPTION_ANNIVERSARY, dog.adoption_date, f"{dog.name}'s Gotcha Day"),
        )
        for event_type, source, title in anniversaries:
            if source is None:
                continue
            self.events.upsert_companion_event(
                dog.user_id, dog.id, event_type, dog.id,
                title=title,
                event_date=next_anniversary(source, today),
                is_recurring=True,
                recurrence_pattern='yearly',
                reminder_days_before=self.windows.anniversary_lead_days
            )
