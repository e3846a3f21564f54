import enum
import logging
import re

from sqlalchemy.exc import SQLAlchemyError

from pawcare import db
from pawcare.models.user import _now
from pawcare.models.dog import enum_column, iso

logger = logging.getLogger(__name__)


class SafetyLevel(enum.Enum):
    SAFE = "safe"
    SAFE_IN_MODERATION = "safe_in_moderation"
    TOXIC = "toxic"
    DANGEROUS = "dangerous"
    VARIES = "varies"


def normalize_food_id(food_name):
    """'Peanut Butter' -> 'peanut-butter'"""
    return re.sub(r'\s+', '-', food_name.strip().lower())


class FoodItem(db.Model):
    """Global food safety reference entry"""
    __tablename__ = 'food_database'

    id = db.Column(db.String(100), primary_key=True)
    food_name = db.Column(db.String(100), unique=True, nullable=False)
    category = db.Column(db.String(50), index=True)
    is_safe = db.Column(db.Boolean, nullable=False)
    safety_level = enum_column(SafetyLevel)
    description = db.Column(db.Text)
    benefits = db.Column(db.Text)
    risks = db.Column(db.Text)
    serving_suggestion = db.Column(db.Text)
    sources = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=_now)

    def __repr__(self):
        return f"<FoodItem(id={self.id}, safe={self.is_safe})>"

    def to_dict(self):
        return {
            'id': self.id,
            'food_name': self.food_name,
            'category': self.category,
            'is_safe': bool(self.is_safe),
            'safety_level': self.safety_level.value if self.safety_level else None,
            'description': self.description,
            'benefits': self.benefits,
            'risks': self.risks,
            'serving_suggestion': self.serving_suggestion,
            'sources': self.sources,
            'created_at': iso(self.created_at)
        }


# (food_name, category, is_safe, safety_level, description, benefits, risks, serving_suggestion, sources)
FOOD_SEED = [
    # Safe foods
    ('Carrots', 'vegetable', True, 'safe', 'Excellent low-calorie snack',
     'Good source of beta-carotene, fiber, vitamin K1, potassium. Good for dental health.',
     'Choking hazard if not cut properly', 'Raw or cooked, cut into bite-size pieces', 'ASPCA, AKC, PetMD'),
    ('Blueberries', 'fruit', True, 'safe', 'Superfood packed with antioxidants',
     'Rich in antioxidants, fiber, vitamins C and K', 'Can be a choking hazard for small dogs',
     'Fresh or frozen, a few at a time as treats', 'AKC, VCA Hospitals'),
    ('Chicken', 'protein', True, 'safe', 'Excellent source of lean protein',
     'High-quality protein, easy to digest', 'Never feed cooked bones, avoid seasoning',
     'Cooked, plain, boneless, skinless', 'AKC, ASPCA'),
    ('Peanut Butter', 'other', True, 'safe_in_moderation', 'Popular treat, but check ingredients',
     'Good source of protein and healthy fats', 'MUST be xylitol-free. High in calories.',
     'Small amounts, unsalted, xylitol-free only', 'AKC, ASPCA, FDA'),
    ('Pumpkin', 'vegetable', True, 'safe', 'Great for digestive health',
     'High in fiber, helps with digestive issues', 'Avoid pumpkin pie filling with spices',
     'Plain, cooked or canned (100% pumpkin)', 'AKC, PetMD'),
    ('Sweet Potato', 'vegetable', True, 'safe', 'Nutritious and delicious',
     'Rich in dietary fiber, vitamin A, vitamin C', 'Always cook before serving, never raw',
     'Cooked, plain, no seasoning', 'AKC, ASPCA'),
    ('Apples', 'fruit', True, 'safe', 'Crunchy, healthy snack', 'Good source of vitamins A and C, fiber',
     'Remove seeds and core (contain cyanide)', 'Sliced, without seeds or core', 'AKC, ASPCA'),
    ('Salmon', 'protein', True, 'safe', 'Omega-3 rich protein source',
     'Excellent source of omega-3 fatty acids, good for coat and skin',
     'Must be fully cooked, never raw (risk of parasites)', 'Fully cooked, boneless, plain', 'AKC, PetMD, FDA'),
    ('Rice', 'grain', True, 'safe', 'Easy to digest carbohydrate', 'Good for upset stomachs, easy to digest',
     'Can raise blood sugar in diabetic dogs', 'Plain, cooked white or brown rice', 'AKC, VCA Hospitals'),
    ('Watermelon', 'fruit', True, 'safe', 'Hydrating summer treat',
     'Low calorie, high in vitamins A, B6, C, and potassium', 'Remove seeds and rind',
     'Seedless chunks, no rind', 'AKC, ASPCA'),
    ('Green Beans', 'vegetable', True, 'safe', 'Low-calorie, filling snack',
     'Low calorie, high in fiber and vitamins', 'Avoid canned with added salt',
     'Plain, fresh, frozen, or canned (no salt)', 'AKC, PetMD'),
    ('Eggs', 'protein', True, 'safe', 'Complete protein source', 'High-quality protein, fatty acids, vitamins',
     'Should be fully cooked to avoid salmonella', 'Cooked (scrambled, boiled), no oil or seasoning',
     'AKC, ASPCA'),

    # Toxic / dangerous foods
    ('Chocolate', 'toxic', False, 'toxic', 'TOXIC - Never give to dogs', 'None',
     'Contains theobromine and caffeine, toxic to dogs. Dark chocolate is most dangerous.',
     'NEVER feed to dogs', 'ASPCA Poison Control, AKC, FDA'),
    ('Grapes', 'toxic', False, 'dangerous', 'DANGEROUS - Can cause kidney failure', 'None',
     'Can cause acute kidney failure even in small amounts. Mechanism unknown.', 'NEVER feed to dogs',
     'ASPCA Poison Control, AKC, VCA Hospitals'),
    ('Raisins', 'toxic', False, 'dangerous', 'DANGEROUS - Can cause kidney failure', 'None',
     'Same as grapes - can cause acute kidney failure', 'NEVER feed to dogs', 'ASPCA Poison Control, AKC'),
    ('Onions', 'toxic', False, 'toxic', 'TOXIC - Damages red blood cells', 'None',
     'Contains N-propyl disulfide, can cause anemia and red blood cell damage',
     'NEVER feed to dogs, including in cooked foods', 'ASPCA Poison Control, AKC, PetMD'),
    ('Garlic', 'toxic', False, 'toxic', 'TOXIC - More potent than onions', 'None',
     '5x more toxic than onions. Causes oxidative damage to red blood cells.', 'NEVER feed to dogs',
     'ASPCA Poison Control, AKC'),
    ('Xylitol', 'toxic', False, 'dangerous', 'EXTREMELY DANGEROUS artificial sweetener', 'None',
     'Can cause rapid insulin release, leading to hypoglycemia, liver failure, and death',
     'NEVER - check all peanut butter, candy, gum labels', 'FDA, ASPCA Poison Control, VCA Hospitals'),
    ('Alcohol', 'toxic', False, 'dangerous', 'DANGEROUS - Highly toxic', 'None',
     'Can cause vomiting, diarrhea, breathing problems, coma, death', 'NEVER give any alcohol to dogs',
     'ASPCA Poison Control, AKC'),
    ('Avocado', 'toxic', False, 'toxic', 'Contains persin, toxic to dogs', 'None',
     'Contains persin which can cause vomiting and diarrhea. Pit is choking hazard.', 'Avoid completely',
     'ASPCA, AKC'),
    ('Macadamia Nuts', 'toxic', False, 'toxic', 'TOXIC - Affects nervous system', 'None',
     'Can cause weakness, vomiting, tremors, hyperthermia', 'NEVER feed to dogs', 'ASPCA Poison Control, AKC'),
    ('Caffeine', 'toxic', False, 'toxic', 'TOXIC - Found in coffee, tea, energy drinks', 'None',
     'Stimulant toxic to dogs, can cause rapid heart rate, seizures',
     'NEVER - includes coffee, tea, soda, energy drinks', 'ASPCA Poison Control, FDA'),
    ('Raw Yeast Dough', 'toxic', False, 'dangerous', 'DANGEROUS - Expands in stomach', 'None',
     'Can expand in stomach causing bloat, and produces alcohol as it ferments', 'NEVER feed raw dough',
     'ASPCA, AKC'),
    ('Cooked Bones', 'toxic', False, 'dangerous', 'DANGEROUS - Can splinter', 'None',
     'Can splinter and cause choking, internal punctures, or blockages', 'NEVER feed cooked bones',
     'FDA, AKC, AVMA'),
]


def seed_food_database(session):
    """
    Insert the reference foods that are not there yet. Existing rows are
    left untouched. Returns the number of rows added.
    """
    existing = {row[0] for row in session.query(FoodItem.id).all()}
    added = 0
    for (name, category, is_safe, level, description, benefits, risks, serving, sources) in FOOD_SEED:
        food_id = normalize_food_id(name)
        if food_id in existing:
            continue
        session.add(FoodItem(
            id=food_id,
            food_name=name,
            category=category,
            is_safe=is_safe,
            safety_level=SafetyLevel(level),
            description=description,
            benefits=benefits,
            risks=risks,
            serving_suggestion=serving,
            sources=sources
        ))
        existing.add(food_id)
        added += 1

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error seeding food database: {str(e)}")
        raise
    return added
