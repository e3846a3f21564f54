import os
from datetime import timedelta
from dotenv import load_dotenv

from pawcare.services.reminder_rules import ReminderWindows

load_dotenv()

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def _env_bool(name, default):
    return os.getenv(name, str(default)).lower() in ('true', '1', 'yes')


class Config:
    """Settings shared by every environment"""
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///' + os.path.join(basedir, 'data', 'pawcare.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', os.getenv('SECRET_KEY', 'dev-secret-key'))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_EXPIRY_DAYS', 7)))
    JWT_TOKEN_LOCATION = ['headers']

    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:5173')
    FLASK_HOST = os.getenv('FLASK_HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '3001'))

    # Advisory providers (both optional)
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4-turbo-preview')
    ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY')
    ANTHROPIC_MODEL = os.getenv('ANTHROPIC_MODEL', 'claude-3-sonnet-20240229')
    DEFAULT_AI_PROVIDER = os.getenv('DEFAULT_AI_PROVIDER', 'anthropic')
    AI_MAX_TOKENS = int(os.getenv('AI_MAX_TOKENS', '1500'))
    AI_TEMPERATURE = float(os.getenv('AI_TEMPERATURE', '0.7'))

    # Reminder scheduler
    SCHEDULER_ENABLED = _env_bool('SCHEDULER_ENABLED', True)
    SCHEDULER_TIMEZONE = os.getenv('SCHEDULER_TIMEZONE', 'UTC')
    REMINDER_SCAN_HOUR = int(os.getenv('REMINDER_SCAN_HOUR', '9'))
    REMINDER_SCAN_MINUTE = int(os.getenv('REMINDER_SCAN_MINUTE', '0'))
    REMINDER_WINDOWS = ReminderWindows()

    AUTO_CREATE_TABLES = True


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SCHEDULER_ENABLED = False
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length'
    OPENAI_API_KEY = None
    ANTHROPIC_API_KEY = None
    BCRYPT_LOG_ROUNDS = 4


class ProductionConfig(Config):
    DEBUG = False


config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
