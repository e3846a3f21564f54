import enum

from pawcare import db
from pawcare.models.user import _uuid, _now
from pawcare.models.dog import enum_column, iso


class ToyCategory(enum.Enum):
    TOY = "toy"
    BED = "bed"
    COLLAR = "collar"
    LEASH = "leash"
    BOWL = "bowl"
    GROOMING = "grooming"
    CLOTHING = "clothing"
    OTHER = "other"


class ToyCondition(enum.Enum):
    NEW = "new"
    GOOD = "good"
    FAIR = "fair"
    WORN = "worn"
    NEEDS_REPLACEMENT = "needs_replacement"


class Toy(db.Model):
    """Toys and supplies owned by a dog"""
    __tablename__ = 'toys'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    dog_id = db.Column(db.String(36), db.ForeignKey('dogs.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    category = enum_column(ToyCategory, default=ToyCategory.TOY)
    brand = db.Column(db.String(100))
    purchase_date = db.Column(db.Date)
    purchase_price = db.Column(db.Float)
    condition = enum_column(ToyCondition, default=ToyCondition.NEW)
    is_favorite = db.Column(db.Boolean, default=False)
    notes = db.Column(db.Text)
    photo_url = db.Column(db.String(512))
    created_at = db.Column(db.DateTime, default=_now)

    def __repr__(self):
        return f"<Toy(id={self.id}, name='{self.name}')>"

    def to_dict(self, include_dog_name=False):
        data = {
            'id': self.id,
            'dog_id': self.dog_id,
            'name': self.name,
            'category': self.category.value if self.category else None,
            'brand': self.brand,
            'purchase_date': iso(self.purchase_date),
            'purchase_price': self.purchase_price,
            'condition': self.condition.value if self.condition else None,
            'is_favorite': bool(self.is_favorite),
            'notes': self.notes,
            'photo_url': self.photo_url,
            'created_at': iso(self.created_at)
        }
        if include_dog_name:
            data['dog_name'] = self.dog.name if self.dog else None
        return data
