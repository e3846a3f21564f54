import calendar
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import extract
from sqlalchemy.orm import Session

from pawcare.errors import NotFound, ValidationError
from pawcare.middleware.validation import ValidationMiddleware
from pawcare.models.dog import Dog
from pawcare.models.health_models import Event, EventType, Vaccination
from pawcare.services.reminder_rules import (
    ReminderWindows, companion_source_key, is_due_within, window_end
)
from pawcare.utils.dates import parse_date

logger = logging.getLogger(__name__)


class EventService:
    """
    Calendar events, the per-user reminder view, and the companion events
    other services generate from vaccinations, medications and dog profiles.
    """

    def __init__(self, db_session: Session, windows: Optional[ReminderWindows] = None):
        self.db = db_session
        self.windows = windows or ReminderWindows()

    # ==================== LOOKUPS ====================

    def _owned_dog(self, user_id: str, dog_id: str) -> Dog:
        dog = self.db.query(Dog).filter_by(id=dog_id, user_id=user_id).first()
        if not dog:
            raise NotFound('Dog not found')
        return dog

    def get_event(self, user_id: str, event_id: str) -> Event:
        event = self.db.query(Event).filter_by(id=event_id, user_id=user_id).first()
        if not event:
            raise NotFound('Event not found')
        return event

    def list_events(self, user_id: str) -> List[Event]:
        return (self.db.query(Event)
                .filter(Event.user_id == user_id)
                .order_by(Event.event_date.asc())
                .all())

    def list_upcoming(self, user_id: str, today: Optional[date] = None) -> Dict[str, List[Event]]:
        """Active events in the dashboard window, plus those falling on today"""
        today = today or date.today()
        end = window_end(today, self.windows.dashboard_events_days)
        upcoming = (self.db.query(Event)
                    .filter(Event.user_id == user_id,
                            Event.is_active.is_(True),
                            Event.event_date >= today,
                            Event.event_date <= end)
                    .order_by(Event.event_date.asc())
                    .all())
        return {
            'upcoming': upcoming,
            'today': [e for e in upcoming if e.event_date == today]
        }

    def list_for_dog(self, user_id: str, dog_id: str) -> List[Event]:
        self._owned_dog(user_id, dog_id)
        return (self.db.query(Event)
                .filter(Event.dog_id == dog_id)
                .order_by(Event.event_date.asc())
                .all())

    def list_by_type(self, user_id: str, event_type: str) -> List[Event]:
        kind = ValidationMiddleware.parse_enum(EventType, event_type, 'event_type')
        return (self.db.query(Event)
                .filter(Event.user_id == user_id, Event.event_type == kind)
                .order_by(Event.event_date.asc())
                .all())

    def birthdays_this_month(self, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        dogs = (self.db.query(Dog)
                .filter(Dog.user_id == user_id,
                        Dog.date_of_birth.isnot(None),
                        extract('month', Dog.date_of_birth) == today.month)
                .order_by(Dog.name.asc())
                .all())
        return {
            'month': calendar.month_name[today.month],
            'birthdays': [{
                'id': dog.id,
                'name': dog.name,
                'date_of_birth': dog.date_of_birth.isoformat(),
                'breed': dog.breed,
                'photo_url': dog.photo_url
            } for dog in dogs]
        }

    def get_upcoming_reminders(self, user_id: str, today: Optional[date] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Vaccinations and active events due within the reminder summary window"""
        today = today or date.today()
        days = self.windows.reminder_summary_days(today)
        end = window_end(today, days)

        vaccinations = (self.db.query(Vaccination)
                        .join(Dog, Vaccination.dog_id == Dog.id)
                        .filter(Dog.user_id == user_id,
                                Vaccination.next_due_date >= today,
                                Vaccination.next_due_date <= end)
                        .order_by(Vaccination.next_due_date.asc())
                        .all())
        events = (self.db.query(Event)
                  .filter(Event.user_id == user_id,
                          Event.is_active.is_(True),
                          Event.event_date >= today,
                          Event.event_date <= end)
                  .order_by(Event.event_date.asc())
                  .all())

        return {
            'vaccinations': [{
                'id': v.id,
                'dog_name': v.dog.name,
                'vaccine_name': v.vaccine_name,
                'next_due_date': v.next_due_date.isoformat(),
                'user_id': user_id
            } for v in vaccinations if is_due_within(today, v.next_due_date, days)],
            'events': [{
                'id': e.id,
                'title': e.title,
                'event_date': e.event_date.isoformat(),
                'dog_name': e.dog.name if e.dog else None,
                'user_id': user_id
            } for e in events if is_due_within(today, e.event_date, days)]
        }

    # ==================== WRITES ====================

    def create_event(self, user_id: str, data: Dict[str, Any]) -> Event:
        if data.get('dog_id'):
            self._owned_dog(user_id, data['dog_id'])

        event = Event(
            user_id=user_id,
            dog_id=data.get('dog_id') or None,
            title=data['title'],
            description=data.get('description'),
            event_type=ValidationMiddleware.parse_enum(EventType, data.get('event_type'), 'event_type',
                                                       default=EventType.CUSTOM),
            event_date=parse_date(data['event_date'], 'event_date'),
            is_recurring=ValidationMiddleware.parse_bool(data.get('is_recurring'), 'is_recurring', default=False),
            recurrence_pattern=data.get('recurrence_pattern'),
            reminder_days_before=ValidationMiddleware.parse_int(data.get('reminder_days_before'),
                                                                'reminder_days_before', default=1, minimum=0)
        )
        try:
            self.db.add(event)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Created event {event.id} for user {user_id}")
        return event

    def update_event(self, user_id: str, event_id: str, data: Dict[str, Any]) -> Event:
        """Partial update; absent or null fields keep their value"""
        event = self.get_event(user_id, event_id)

        if data.get('title') is not None:
            event.title = data['title']
        if data.get('description') is not None:
            event.description = data['description']
        if data.get('event_type') is not None:
            event.event_type = ValidationMiddleware.parse_enum(EventType, data['event_type'], 'event_type')
        if data.get('event_date') is not None:
            event.event_date = parse_date(data['event_date'], 'event_date')
        if data.get('is_recurring') is not None:
            event.is_recurring = ValidationMiddleware.parse_bool(data['is_recurring'], 'is_recurring')
        if data.get('recurrence_pattern') is not None:
            event.recurrence_pattern = data['recurrence_pattern']
        if data.get('reminder_days_before') is not None:
            event.reminder_days_before = ValidationMiddleware.parse_int(
                data['reminder_days_before'], 'reminder_days_before', minimum=0)
        if data.get('is_active') is not None:
            event.is_active = ValidationMiddleware.parse_bool(data['is_active'], 'is_active')

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return event

    def delete_event(self, user_id: str, event_id: str) -> None:
        event = self.get_event(user_id, event_id)
        try:
            self.db.delete(event)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Deleted event {event_id} for user {user_id}")

    def upsert_companion_event(self, user_id: str, dog_id: str, event_type: EventType, source_record_id: str,
                               **fields) -> Event:
        """
        Create or refresh the event generated from another record. The
        caller owns the transaction; nothing is committed here.
        """
        if event_type is None:
            raise ValidationError('Companion events need an event type')
        key = companion_source_key(dog_id, event_type.value, source_record_id)
        event = self.db.query(Event).filter_by(source_key=key).first()
        if event is None:
            event = Event(user_id=user_id, dog_id=dog_id, event_type=event_type, source_key=key, is_active=True)
            self.db.add(event)
            logger.info(f"Creating companion {event_type.value} event for dog {dog_id}")
        for name, value in fields.items():
            setattr(event, name, value)
        return event
