import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from pawcare.errors import NotFound
from pawcare.middleware.validation import ValidationMiddleware
from pawcare.models.dog import Dog, DogHealthCondition, WeightHistory, ConditionStatus
from pawcare.models.health_models import HealthRecord, HealthRecordType, Medication, Vaccination, EventType
from pawcare.services.dog_service import get_owned_dog
from pawcare.services.event_service import EventService
from pawcare.services.reminder_rules import DueStatus, ReminderWindows, partition_by_due
from pawcare.utils.dates import parse_date

logger = logging.getLogger(__name__)


class HealthService:
    """
    Health records, medications and the per-dog health summary.
    Every lookup goes through the owning dog, so records of other users
    surface as NotFound.
    """

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

    # ==================== OVERVIEW ====================

    def dog_overview(self, user_id: str, dog_id: str) -> Dict[str, Any]:
        get_owned_dog(self.db, user_id, dog_id)
        records = (self.db.query(HealthRecord)
                   .filter(HealthRecord.dog_id == dog_id)
                   .order_by(HealthRecord.record_date.desc())
                   .all())
        weight_history = (self.db.query(WeightHistory)
                          .filter(WeightHistory.dog_id == dog_id)
                          .order_by(WeightHistory.recorded_date.desc())
                          .limit(20)
                          .all())
        conditions = self.db.query(DogHealthCondition).filter(DogHealthCondition.dog_id == dog_id).all()
        return {
            'records': [r.to_dict() for r in records],
            'medications': [m.to_dict() for m in self._medications_for(dog_id)],
            'weight_history': [w.to_dict() for w in weight_history],
            'conditions': [c.to_dict() for c in conditions]
        }

    def summary(self, user_id: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Dashboard counts per dog"""
        today = today or date.today()
        summaries = []
        for dog in self.db.query(Dog).filter_by(user_id=user_id).order_by(Dog.name.asc()).all():
            vaccinations = self.db.query(Vaccination).filter(Vaccination.dog_id == dog.id).all()
            groups = partition_by_due(today, vaccinations, lambda v: v.next_due_date,
                                      self.windows.dashboard_events_days)
            active_meds = (self.db.query(Medication)
                           .filter(Medication.dog_id == dog.id, Medication.is_active.is_(True))
                           .count())
            recent = (self.db.query(HealthRecord)
                      .filter(HealthRecord.dog_id == dog.id)
                      .order_by(HealthRecord.record_date.desc())
                      .limit(3)
                      .all())
            active_conditions = [c for c in dog.health_conditions if c.status == ConditionStatus.ACTIVE]

            summaries.append({
                'id': dog.id,
                'name': dog.name,
                'breed': dog.breed,
                'date_of_birth': dog.date_of_birth.isoformat() if dog.date_of_birth else None,
                'weight': dog.weight,
                'weight_unit': dog.weight_unit,
                'active_medications': active_meds,
                'upcoming_vaccinations': len(groups[DueStatus.DUE_WITHIN_WINDOW]),
                'overdue_vaccinations': len(groups[DueStatus.OVERDUE]),
                'recent_records': [r.to_dict() for r in recent],
                'active_conditions': [c.to_dict() for c in active_conditions]
            })
        return summaries

    # ==================== HEALTH RECORDS ====================

    def get_record(self, user_id: str, record_id: str) -> HealthRecord:
        record = (self.db.query(HealthRecord)
                  .join(Dog, HealthRecord.dog_id == Dog.id)
                  .filter(HealthRecord.id == record_id, Dog.user_id == user_id)
                  .first())
        if not record:
            raise NotFound('Health record not found')
        return record

    def create_record(self, user_id: str, data: Dict[str, Any]) -> HealthRecord:
        dog = get_owned_dog(self.db, user_id, data.get('dog_id'))
        record = HealthRecord(
            dog_id=dog.id,
            record_type=ValidationMiddleware.parse_enum(HealthRecordType, data['record_type'], 'record_type'),
            record_date=parse_date(data['record_date'], 'record_date'),
            title=data['title'],
            description=data.get('description'),
            vet_name=data.get('vet_name'),
            vet_clinic=data.get('vet_clinic'),
            cost=ValidationMiddleware.parse_float(data.get('cost'), 'cost'),
            attachments=data.get('attachments')
        )
        self.db.add(record)
        self._commit()
        logger.info(f"Created health record {record.id} for dog {dog.id}")
        return record

    def update_record(self, user_id: str, record_id: str, data: Dict[str, Any]) -> HealthRecord:
        record = self.get_record(user_id, record_id)
        if data.get('record_type') is not None:
            record.record_type = ValidationMiddleware.parse_enum(HealthRecordType, data['record_type'], 'record_type')
        if data.get('record_date') is not None:
            record.record_date = parse_date(data['record_date'], 'record_date')
        if data.get('cost') is not None:
            record.cost = ValidationMiddleware.parse_float(data['cost'], 'cost')
        for field in ('title', 'description', 'vet_name', 'vet_clinic', 'attachments'):
            if data.get(field) is not None:
                setattr(record, field, data[field])
        self._commit()
        return record

    def delete_record(self, user_id: str, record_id: str) -> None:
        record = self.get_record(user_id, record_id)
        self.db.delete(record)
        self._commit()

    # ==================== MEDICATIONS ====================

    def _medications_for(self, dog_id: str) -> List[Medication]:
        return (self.db.query(Medication)
                .filter(Medication.dog_id == dog_id)
                .order_by(Medication.is_active.desc(), Medication.start_date.desc())
                .all())

    def list_medications(self, user_id: str, dog_id: str) -> Dict[str, List[Medication]]:
        get_owned_dog(self.db, user_id, dog_id)
        medications = self._medications_for(dog_id)
        return {
            'medications': medications,
            'active': [m for m in medications if m.is_active],
            'inactive': [m for m in medications if not m.is_active]
        }

    def get_medication(self, user_id: str, medication_id: str) -> Medication:
        medication = (self.db.query(Medication)
                      .join(Dog, Medication.dog_id == Dog.id)
                      .filter(Medication.id == medication_id, Dog.user_id == user_id)
                      .first())
        if not medication:
            raise NotFound('Medication not found')
        return medication

    def create_medication(self, user_id: str, data: Dict[str, Any]) -> Medication:
        """A medication with a frequency also gets a recurring reminder event"""
        dog = get_owned_dog(self.db, user_id, data.get('dog_id'))
        medication = Medication(
            dog_id=dog.id,
            name=data['name'],
            dosage=data.get('dosage'),
            frequency=data.get('frequency'),
            start_date=parse_date(data['start_date'], 'start_date'),
            end_date=parse_date(data.get('end_date'), 'end_date'),
            prescribed_by=data.get('prescribed_by'),
            reason=data.get('reason'),
            is_active=True,
            notes=data.get('notes')
        )
        self.db.add(medication)
        self.db.flush()

        if medication.frequency:
            self.events.upsert_companion_event(
                user_id, dog.id, EventType.MEDICATION, medication.id,
                title=f"Give {medication.name} medication",
                description=f"Dosage: {medication.dosage or 'As prescribed'}. Frequency: {medication.frequency}",
                event_date=medication.start_date,
                is_recurring=True,
                recurrence_pattern=medication.frequency,
                reminder_days_before=0
            )

        self._commit()
        logger.info(f"Added medication {medication.id} for dog {dog.id}")
        return medication

    def update_medication(self, user_id: str, medication_id: str, data: Dict[str, Any]) -> Medication:
        medication = self.get_medication(user_id, medication_id)
        if data.get('start_date') is not None:
            medication.start_date = parse_date(data['start_date'], 'start_date')
        if data.get('end_date') is not None:
            medication.end_date = parse_date(data['end_date'], 'end_date')
        if data.get('is_active') is not None:
            medication.is_active = ValidationMiddleware.parse_bool(data['is_active'], 'is_active')
        for field in ('name', 'dosage', 'frequency', 'prescribed_by', 'reason', 'notes'):
            if data.get(field) is not None:
                setattr(medication, field, data[field])
        self._commit()
        return medication

    def delete_medication(self, user_id: str, medication_id: str) -> None:
        medication = self.get_medication(user_id, medication_id)
        self.db.delete(medication)
        self._commit()
