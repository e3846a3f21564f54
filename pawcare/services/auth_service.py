import logging
from typing import Any, Dict, Optional

from flask_jwt_extended import create_access_token
from sqlalchemy.orm import Session

from pawcare import bcrypt
from pawcare.errors import Conflict, NotFound, PawCareError, ValidationError
from pawcare.middleware.validation import ValidationMiddleware
from pawcare.models.user import User

logger = logging.getLogger(__name__)


class InvalidCredentials(PawCareError):
    status_code = 401
    default_message = 'Invalid email or password'


class AuthService:
    """Account registration, login and profile updates"""

    def __init__(self, db_session: Session):
        self.db = db_session

    @staticmethod
    def _hash(password: str) -> str:
        return bcrypt.generate_password_hash(password).decode('utf-8')

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(identity=user.id)

    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        email = ValidationMiddleware.parse_text(email, 'email').lower()
        name = ValidationMiddleware.parse_text(name, 'name')
        if not ValidationMiddleware.validate_email(email):
            raise ValidationError('Invalid email format')
        valid, message = ValidationMiddleware.validate_password(password)
        if not valid:
            raise ValidationError(message)

        if self.db.query(User).filter_by(email=email).first():
            raise Conflict('Email already registered')

        user = User(email=email, password_hash=self._hash(password), name=name)
        try:
            self.db.add(user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Registered user {user.id}")
        return {'token': self.issue_token(user), 'user': user.to_dict()}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        email = ValidationMiddleware.parse_text(email, 'email').lower()
        if not isinstance(password, str):
            raise ValidationError('password must be a string')
        user = self.db.query(User).filter_by(email=email).first()
        if not user or not bcrypt.check_password_hash(user.password_hash, password):
            raise InvalidCredentials()
        return {'token': self.issue_token(user), 'user': user.to_dict()}

    def get_user(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound('User not found')
        return user

    def update_profile(self, user_id: str, name: Optional[str] = None,
                       current_password: Optional[str] = None, new_password: Optional[str] = None) -> User:
        """Change the display name and/or password. A new password needs the current one."""
        user = self.get_user(user_id)

        if new_password:
            if not current_password:
                raise ValidationError('Current password required to change password')
            if not bcrypt.check_password_hash(user.password_hash, current_password):
                raise InvalidCredentials('Current password is incorrect')
            valid, message = ValidationMiddleware.validate_password(new_password)
            if not valid:
                raise ValidationError(message)
            user.password_hash = self._hash(new_password)

        name = ValidationMiddleware.parse_text(name, 'name')
        if name:
            user.name = name

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return user
