from .user import User
from .dog import Dog, DogAllergy, DogHealthCondition, WeightHistory, Gender, AllergySeverity, ConditionStatus
from .health_models import Vaccination, Event, HealthRecord, Medication, EventType, HealthRecordType
from .toy import Toy, ToyCategory, ToyCondition
from .food import FoodItem, SafetyLevel, seed_food_database, normalize_food_id
from .ai_query import AIQuery

__all__ = [
    'User',
    'Dog', 'DogAllergy', 'DogHealthCondition', 'WeightHistory', 'Gender', 'AllergySeverity', 'ConditionStatus',
    'Vaccination', 'Event', 'HealthRecord', 'Medication', 'EventType', 'HealthRecordType',
    'Toy', 'ToyCategory', 'ToyCondition',
    'FoodItem', 'SafetyLevel', 'seed_food_database', 'normalize_food_id',
    'AIQuery',
]
