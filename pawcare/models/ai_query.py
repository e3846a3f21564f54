from pawcare import db
from pawcare.models.user import _uuid, _now
from pawcare.models.dog import iso


class AIQuery(db.Model):
    """Append-only log of advisory questions and answers"""
    __tablename__ = 'ai_queries'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    dog_id = db.Column(db.String(36), nullable=True, index=True)
    question = db.Column('query', db.Text, nullable=False)
    response = db.Column(db.Text, nullable=False)
    provider = db.Column(db.String(50))
    model = db.Column(db.String(100))
    sources = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=_now, index=True)

    def to_dict(self, dog_name=None):
        return {
            'id': self.id,
            'dog_id': self.dog_id,
            'dog_name': dog_name,
            'query': self.question,
            'response': self.response,
            'provider': self.provider,
            'model': self.model,
            'sources': self.sources or [],
            'created_at': iso(self.created_at)
        }
