import enum

from pawcare import db
from pawcare.models.user import _uuid, _now


class Gender(enum.Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class AllergySeverity(enum.Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class ConditionStatus(enum.Enum):
    ACTIVE = "active"
    MANAGED = "managed"
    RESOLVED = "resolved"


def enum_column(enum_cls, **kwargs):
    """Enum stored by value, so the database and the JSON API agree"""
    return db.Column(db.Enum(enum_cls, values_callable=lambda members: [m.value for m in members],
                             native_enum=False, validate_strings=True), **kwargs)


def iso(value):
    return value.isoformat() if value else None


class Dog(db.Model):
    __tablename__ = 'dogs'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    breed = db.Column(db.String(100))
    date_of_birth = db.Column(db.Date)
    gender = enum_column(Gender, default=Gender.UNKNOWN)
    weight = db.Column(db.Float)
    weight_unit = db.Column(db.String(10), default='kg')
    color = db.Column(db.String(50))
    microchip_number = db.Column(db.String(50))
    photo_url = db.Column(db.String(512))
    notes = db.Column(db.Text)
    is_neutered = db.Column(db.Boolean, default=False)
    adoption_date = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=_now)
    updated_at = db.Column(db.DateTime, default=_now, onupdate=_now)

    # Child records go with the dog
    allergies = db.relationship('DogAllergy', backref='dog', lazy=True, cascade='all, delete-orphan',
                                passive_deletes=True)
    health_conditions = db.relationship('DogHealthCondition', backref='dog', lazy=True,
                                        cascade='all, delete-orphan', passive_deletes=True)
    weight_history = db.relationship('WeightHistory', backref='dog', lazy=True, cascade='all, delete-orphan',
                                     passive_deletes=True, order_by='WeightHistory.recorded_date.desc()')
    vaccinations = db.relationship('Vaccination', backref='dog', lazy=True, cascade='all, delete-orphan',
                                   passive_deletes=True)
    toys = db.relationship('Toy', backref='dog', lazy=True, cascade='all, delete-orphan', passive_deletes=True)
    health_records = db.relationship('HealthRecord', backref='dog', lazy=True, cascade='all, delete-orphan',
                                     passive_deletes=True)
    medications = db.relationship('Medication', backref='dog', lazy=True, cascade='all, delete-orphan',
                                  passive_deletes=True)
    # Events outlive the dog (dog_id is set to NULL by the database)
    events = db.relationship('Event', backref='dog', lazy=True, passive_deletes='all')

    def __repr__(self):
        return f"<Dog(id={self.id}, name='{self.name}')>"

    def to_dict(self, include_details=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'breed': self.breed,
            'date_of_birth': iso(self.date_of_birth),
            'gender': self.gender.value if self.gender else None,
            'weight': self.weight,
            'weight_unit': self.weight_unit,
            'color': self.color,
            'microchip_number': self.microchip_number,
            'photo_url': self.photo_url,
            'notes': self.notes,
            'is_neutered': bool(self.is_neutered),
            'adoption_date': iso(self.adoption_date),
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at)
        }
        if include_details:
            data['allergies'] = [a.to_dict() for a in self.allergies]
            data['health_conditions'] = [c.to_dict() for c in self.health_conditions]
        return data


class DogAllergy(db.Model):
    __tablename__ = 'dog_allergies'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    allergen = db.Column(db.String(100), nullable=False)
    severity = enum_column(AllergySeverity, default=AllergySeverity.MODERATE)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=_now)

    def to_dict(self):
        return {
            'id': self.id,
            'dog_id': self.dog_id,
            'allergen': self.allergen,
            'severity': self.severity.value if self.severity else None,
            'notes': self.notes
        }


class DogHealthCondition(db.Model):
    __tablename__ = 'dog_health_conditions'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    condition_name = db.Column(db.String(200), nullable=False)
    diagnosed_date = db.Column(db.Date)
    status = enum_column(ConditionStatus, default=ConditionStatus.ACTIVE)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=_now)

    def to_dict(self):
        return {
            'id': self.id,
            'dog_id': self.dog_id,
            'condition_name': self.condition_name,
            'diagnosed_date': iso(self.diagnosed_date),
            'status': self.status.value if self.status else None,
            'notes': self.notes
        }


class WeightHistory(db.Model):
    __tablename__ = 'weight_history'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    weight = db.Column(db.Float, nullable=False)
    weight_unit = db.Column(db.String(10), default='kg')
    recorded_date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=_now)

    def to_dict(self):
        return {
            'id': self.id,
            'dog_id': self.dog_id,
            'weight': self.weight,
            'weight_unit': self.weight_unit,
            'recorded_date': iso(self.recorded_date),
            'notes': self.notes
        }
