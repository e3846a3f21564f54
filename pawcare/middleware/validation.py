import re
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from flask import request

from pawcare.errors import ValidationError


class ValidationMiddleware:
    """Request validation helpers shared by the blueprints"""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email or '') is not None

    @staticmethod
    def validate_password(password: str) -> tuple[bool, str]:
        if not isinstance(password, str) or len(password) < 6:
            return False, "Password must be at least 6 characters long"
        return True, "Password is valid"

    @staticmethod
    def parse_enum(enum_cls: Type[Enum], value: Any, field: str, default: Optional[Enum] = None):
        """Map a request string onto an enum member, 400 on anything unknown"""
        if value is None or value == '':
            return default
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ', '.join(m.value for m in enum_cls)
            raise ValidationError(f'Invalid {field}. Must be one of: {allowed}')

    @staticmethod
    def parse_int(value: Any, field: str, default: Optional[int] = None, minimum: Optional[int] = None):
        if value is None or value == '':
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f'{field} must be an integer')
        if minimum is not None and number < minimum:
            raise ValidationError(f'{field} must be at least {minimum}')
        return number

    @staticmethod
    def parse_bool(value: Any, field: str, default: Optional[bool] = None):
        """JSON true/false only; strings such as "false" are rejected"""
        if value is None:
            return default
        if not isinstance(value, bool):
            raise ValidationError(f'{field} must be true or false')
        return value

    @staticmethod
    def parse_text(value: Any, field: str, default: str = '') -> str:
        if value is None:
            return default
        if not isinstance(value, str):
            raise ValidationError(f'{field} must be a string')
        return value.strip()

    @staticmethod
    def parse_float(value: Any, field: str):
        if value is None or value == '':
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f'{field} must be a number')


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Optional[str]:
    """Simple validation for required fields"""
    for field in required_fields:
        if field not in data or data[field] is None or str(data[field]).strip() == '':
            return f'Field {field} is required'
    return None


def get_json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data
