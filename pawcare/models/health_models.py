import enum

from pawcare import db
from pawcare.models.user import _uuid, _now
from pawcare.models.dog import enum_column, iso


class EventType(enum.Enum):
    BIRTHDAY = "birthday"
    ADOPTION_ANNIVERSARY = "adoption_anniversary"
    VET_APPOINTMENT = "vet_appointment"
    GROOMING = "grooming"
    MEDICATION = "medication"
    CUSTOM = "custom"


class HealthRecordType(enum.Enum):
    VET_VISIT = "vet_visit"
    WEIGHT = "weight"
    MEDICATION = "medication"
    SURGERY = "surgery"
    DENTAL = "dental"
    LAB_WORK = "lab_work"
    OTHER = "other"


class Vaccination(db.Model):
    """
    A logged vaccine dose. ``reminder_sent`` only ever goes from False to True.
    """
    __tablename__ = 'vaccinations'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    vaccine_name = db.Column(db.String(200), nullable=False)
    date_administered = db.Column(db.Date, nullable=False)
    next_due_date = db.Column(db.Date, index=True)
    administered_by = db.Column(db.String(100))
    lot_number = db.Column(db.String(50))
    notes = db.Column(db.Text)
    reminder_sent = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=_now)

    def __repr__(self):
        return f"<Vaccination(id={self.id}, vaccine='{self.vaccine_name}', due={self.next_due_date})>"

    def mark_reminder_sent(self):
        self.reminder_sent = True

    def to_dict(self, include_dog_name=False):
        data = {
            'id': self.id,
            'dog_id': self.dog_id,
            'vaccine_name': self.vaccine_name,
            'date_administered': iso(self.date_administered),
            'next_due_date': iso(self.next_due_date),
            'administered_by': self.administered_by,
            'lot_number': self.lot_number,
            'notes': self.notes,
            'reminder_sent': bool(self.reminder_sent),
            'created_at': iso(self.created_at)
        }
        if include_dog_name:
            data['dog_name'] = self.dog.name if self.dog else None
        return data


class Event(db.Model):
    """
    Calendar entry. Companion events generated from another record carry a
    ``source_key`` so that regenerating them updates instead of duplicating.
    """
    __tablename__ = 'events'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='SET NULL'), nullable=True, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    event_type = enum_column(EventType, default=EventType.CUSTOM, nullable=False)
    event_date = db.Column(db.Date, nullable=False, index=True)
    is_recurring = db.Column(db.Boolean, default=False)
    recurrence_pattern = db.Column(db.String(100))
    reminder_days_before = db.Column(db.Integer, default=1, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    source_key = db.Column(db.String(160), unique=True, nullable=True)
    created_at = db.Column(db.DateTime, default=_now)

    def __repr__(self):
        return f"<Event(id={self.id}, type={self.event_type.value}, date={self.event_date})>"

    def to_dict(self, include_dog_name=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'dog_id': self.dog_id,
            'title': self.title,
            'description': self.description,
            'event_type': self.event_type.value,
            'event_date': iso(self.event_date),
            'is_recurring': bool(self.is_recurring),
            'recurrence_pattern': self.recurrence_pattern,
            'reminder_days_before': self.reminder_days_before,
            'is_active': bool(self.is_active),
            'created_at': iso(self.created_at)
        }
        if include_dog_name:
            data['dog_name'] = self.dog.name if self.dog else None
        return data


class HealthRecord(db.Model):
    __tablename__ = 'health_records'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    record_type = enum_column(HealthRecordType, nullable=False)
    record_date = db.Column(db.Date, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    vet_name = db.Column(db.String(100))
    vet_clinic = db.Column(db.String(100))
    cost = db.Column(db.Float)
    attachments = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=_now)

    def __repr__(self):
        return f"<HealthRecord(id={self.id}, type={self.record_type.value}, title='{self.title}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'dog_id': self.dog_id,
            'record_type': self.record_type.value,
            'record_date': iso(self.record_date),
            'title': self.title,
            'description': self.description,
            'vet_name': self.vet_name,
            'vet_clinic': self.vet_clinic,
            'cost': self.cost,
            'attachments': self.attachments,
            'created_at': iso(self.created_at)
        }


class Medication(db.Model):
    __tablename__ = 'medications'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    dosage = db.Column(db.String(100))
    frequency = db.Column(db.String(100))  # free text, e.g. "twice daily"
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date)
    prescribed_by = db.Column(db.String(100))
    reason = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=_now)

    def __repr__(self):
        return f"<Medication(id={self.id}, name='{self.name}', active={self.is_active})>"

    def to_dict(self):
        return {
            'id': self.id,
            'dog_id': self.dog_id,
            'name': self.name,
            'dosage': self.dosage,
            'frequency': self.frequency,
            'start_date': iso(self.start_date),
            'end_date': iso(self.end_date),
            'prescribed_by': self.prescribed_by,
            'reason': self.reason,
            'is_active': bool(self.is_active),
            'notes': self.notes,
            'created_at': iso(self.created_at)
        }
