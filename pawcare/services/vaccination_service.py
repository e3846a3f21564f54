import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from pawcare.errors import NotFound
from pawcare.models.dog import Dog
from pawcare.models.health_models import Vaccination, EventType
from pawcare.services.dog_service import get_owned_dog
from pawcare.services.event_service import EventService
from pawcare.services.reminder_rules import DueStatus, ReminderWindows, partition_by_due
from pawcare.utils.dates import parse_date

logger = logging.getLogger(__name__)

VACCINATION_SCHEDULES = {
    'puppy': [
        {'name': 'DHPP (Distemper, Hepatitis, Parvo, Parainfluenza)', 'weeks': [6, 10, 14, 18], 'booster': 'yearly'},
        {'name': 'Rabies', 'weeks': [16], 'booster': 'every 1-3 years depending on local law'},
        {'name': 'Bordetella (Kennel Cough)', 'weeks': [8], 'booster': 'every 6-12 months'},
        {'name': 'Leptospirosis', 'weeks': [12, 16], 'booster': 'yearly'},
        {'name': 'Lyme Disease', 'weeks': [12, 16], 'booster': 'yearly', 'note': 'if in endemic area'},
        {'name': 'Canine Influenza', 'weeks': [8, 12], 'booster': 'yearly', 'note': 'if high risk'},
    ],
    'adult': [
        {'name': 'DHPP', 'frequency': 'Every 1-3 years'},
        {'name': 'Rabies', 'frequency': 'Every 1-3 years (per local law)'},
        {'name': 'Bordetella', 'frequency': 'Every 6-12 months'},
        {'name': 'Leptospirosis', 'frequency': 'Yearly'},
        {'name': 'Lyme Disease', 'frequency': 'Yearly (if needed)'},
        {'name': 'Canine Influenza', 'frequency': 'Yearly (if needed)'},
    ]
}

SCHEDULE_DISCLAIMER = ("This is general guidance. Always consult your veterinarian for your dog's "
                       "specific vaccination needs.")
SCHEDULE_SOURCES = ['AAHA (American Animal Hospital Association)',
                    'AVMA (American Veterinary Medical Association)']


class VaccinationService:
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

    @staticmethod
    def schedule_reference() -> Dict[str, Any]:
        return {
            'schedules': VACCINATION_SCHEDULES,
            'disclaimer': SCHEDULE_DISCLAIMER,
            'sources': SCHEDULE_SOURCES
        }

    def get_vaccination(self, user_id: str, vaccination_id: str) -> Vaccination:
        vaccination = (self.db.query(Vaccination)
                       .join(Dog, Vaccination.dog_id == Dog.id)
                       .filter(Vaccination.id == vaccination_id, Dog.user_id == user_id)
                       .first())
        if not vaccination:
            raise NotFound('Vaccination record not found')
        return vaccination

    def list_for_dog(self, user_id: str, dog_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """All doses, newest first, with the upcoming and overdue splits"""
        today = today or date.today()
        get_owned_dog(self.db, user_id, dog_id)
        vaccinations = (self.db.query(Vaccination)
                        .filter(Vaccination.dog_id == dog_id)
                        .order_by(Vaccination.date_administered.desc())
                        .all())

        by_due = sorted((v for v in vaccinations if v.next_due_date), key=lambda v: v.next_due_date)
        groups = partition_by_due(today, by_due, lambda v: v.next_due_date, 0)

        return {
            'vaccinations': vaccinations,
            # unbounded: due today first, then everything later
            'upcoming': groups[DueStatus.DUE_WITHIN_WINDOW] + groups[DueStatus.NOT_DUE],
            'overdue': groups[DueStatus.OVERDUE],
            'total': len(vaccinations)
        }

    def upcoming_for_user(self, user_id: str, today: Optional[date] = None) -> Dict[str, List[Vaccination]]:
        """Dashboard view: due within the vaccination window, plus everything overdue"""
        today = today or date.today()
        vaccinations = (self.db.query(Vaccination)
                        .join(Dog, Vaccination.dog_id == Dog.id)
                        .filter(Dog.user_id == user_id, Vaccination.next_due_date.isnot(None))
                        .order_by(Vaccination.next_due_date.asc())
                        .all())
        groups = partition_by_due(today, vaccinations, lambda v: v.next_due_date,
                                  self.windows.dashboard_vaccination_days(today))
        return {
            'upcoming': groups[DueStatus.DUE_WITHIN_WINDOW],
            'overdue': groups[DueStatus.OVERDUE]
        }

    def create_vaccination(self, user_id: str, data: Dict[str, Any]) -> Vaccination:
        dog = get_owned_dog(self.db, user_id, data.get('dog_id'))

        vaccination = Vaccination(
            dog_id=dog.id,
            vaccine_name=data['vaccine_name'],
            date_administered=parse_date(data['date_administered'], 'date_administered'),
            next_due_date=parse_date(data.get('next_due_date'), 'next_due_date'),
            administered_by=data.get('administered_by'),
            lot_number=data.get('lot_number'),
            notes=data.get('notes')
        )
        self.db.add(vaccination)
        self.db.flush()

        if vaccination.next_due_date:
            self._sync_due_event(user_id, vaccination)

        self._commit()
        logger.info(f"Recorded vaccination {vaccination.id} for dog {dog.id}")
        return vaccination

    def update_vaccination(self, user_id: str, vaccination_id: str, data: Dict[str, Any]) -> Vaccination:
        """
        Partial update. A new due date refreshes the companion event but
        leaves ``reminder_sent`` as it was.
        """
        vaccination = self.get_vaccination(user_id, vaccination_id)
        previous_due = vaccination.next_due_date
        previous_name = vaccination.vaccine_name

        if data.get('vaccine_name') is not None:
            vaccination.vaccine_name = data['vaccine_name']
        if data.get('date_administered') is not None:
            vaccination.date_administered = parse_date(data['date_administered'], 'date_administered')
        if data.get('next_due_date') is not None:
            vaccination.next_due_date = parse_date(data['next_due_date'], 'next_due_date')
        for field in ('administered_by', 'lot_number', 'notes'):
            if data.get(field) is not None:
                setattr(vaccination, field, data[field])

        if vaccination.next_due_date and (vaccination.next_due_date != previous_due
                                          or vaccination.vaccine_name != previous_name):
            self._sync_due_event(user_id, vaccination)

        self._commit()
        return vaccination

    def delete_vaccination(self, user_id: str, vaccination_id: str) -> None:
        vaccination = self.get_vaccination(user_id, vaccination_id)
        self.db.delete(vaccination)
        self._commit()

    def _sync_due_event(self, user_id: str, vaccination: Vaccination) -> None:
        self.events.upsert_companion_event(
            user_id, vaccination.dog_id, EventType.VET_APPOINTMENT, vaccination.id,
            title=f"{vaccination.vaccine_name} Vaccination Due",
            description='Vaccination reminder for your dog',
            event_date=vaccination.next_due_date,
            reminder_days_before=self.windows.vaccination_event_lead_days
        )
