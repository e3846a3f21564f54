import uuid
from datetime import datetime, timezone

from pawcare import db


def _uuid():
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=_now)
    updated_at = db.Column(db.DateTime, default=_now, onupdate=_now)

    dogs = db.relationship('Dog', backref='owner', lazy=True, cascade='all, delete-orphan', passive_deletes=True)
    events = db.relationship('Event', backref='user', lazy=True, cascade='all, delete-orphan', passive_deletes=True)
    ai_queries = db.relationship('AIQuery', backref='user', lazy=True, cascade='all, delete-orphan',
                                 passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
