from .auth import auth_bp
from .dogs import dogs_bp
from .food import food_bp
from .vaccinations import vaccinations_bp
from .events import events_bp
from .toys import toys_bp
from .health import health_bp
from .ai import ai_bp

__all__ = ['auth_bp', 'dogs_bp', 'food_bp', 'vaccinations_bp', 'events_bp', 'toys_bp', 'health_bp', 'ai_bp']
