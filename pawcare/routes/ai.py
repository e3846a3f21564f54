import logging
from datetime import date

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import ValidationMiddleware, get_json_body, validate_required_fields
from pawcare.services.ai_service import AI_DISCLAIMER, SYMPTOM_DISCLAIMER, get_ai_service
from pawcare.services.dog_service import get_owned_dog
from pawcare.services.food_service import FoodService
from pawcare.services.reminder_rules import age_in_years

logger = logging.getLogger(__name__)

ai_bp = Blueprint('ai', __name__)


@ai_bp.route('/ask', methods=['POST'])
@jwt_required()
def ask():
    """
    Ask the assistant a question

    Expected JSON:
    {
        "question": "string",
        "dog_id": "string (optional, adds the dog's profile as context)",
        "provider": "anthropic|openai (optional)"
    }
    """
    user_id = get_jwt_identity()
    data = get_json_body()
    validation_error = validate_required_fields(data, ['question'])
    if validation_error:
        return jsonify({'error': 'Question is required'}), 400

    dog = get_owned_dog(db.session, user_id, data['dog_id']) if data.get('dog_id') else None

    service = get_ai_service()
    answer = service.ask(data['question'], provider=data.get('provider'), dog=dog)
    service.log_query(user_id, data['question'], answer, dog_id=dog.id if dog else None)

    return jsonify({
        'answer': answer.answer,
        'sources': answer.sources,
        'provider': answer.provider,
        'model': answer.model
    })


@ai_bp.route('/food-check/<food_name>', methods=['GET'])
@jwt_required()
def food_check(food_name):
    """Reference table first, the assistant only for foods it does not know"""
    food = FoodService(db.session).find_by_name(food_name)
    if food:
        verdict = 'is generally safe for dogs' if food.is_safe else 'is NOT safe for dogs'
        return jsonify({
            'food': food_name,
            'from_database': True,
            'is_safe': bool(food.is_safe),
            'safety_level': food.safety_level.value if food.safety_level else None,
            'quick_answer': f"{food_name} {verdict}. {food.description}",
            'details': {
                'risks': food.risks,
                'serving_suggestion': food.serving_suggestion
            },
            'sources': [s.strip() for s in (food.sources or '').split(',') if s.strip()]
        })

    answer = get_ai_service().ask(
        f"Is {food_name} safe for dogs to eat? Please provide a brief, direct answer with safety "
        f"information and sources."
    )
    return jsonify({
        'food': food_name,
        'from_database': False,
        'ai_response': answer.answer,
        'sources': answer.sources,
        'provider': answer.provider,
        'disclaimer': AI_DISCLAIMER
    })


@ai_bp.route('/breed-advice', methods=['POST'])
@jwt_required()
def breed_advice():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['breed'])
    if validation_error:
        return jsonify({'error': 'Breed is required'}), 400

    breed, topic = data['breed'], data.get('topic')
    if topic:
        question = (f"What specific advice do you have about {topic} for {breed} dogs? "
                    f"Include breed-specific considerations and cite sources.")
    else:
        question = (f"What are the most important things a {breed} owner should know? Cover health "
                    f"predispositions, exercise needs, grooming requirements, and dietary considerations. "
                    f"Cite sources.")

    answer = get_ai_service().ask(question)
    return jsonify({
        'breed': breed,
        'topic': topic or 'general',
        'advice': answer.answer,
        'sources': answer.sources,
        'provider': answer.provider
    })


@ai_bp.route('/analyze-symptoms', methods=['POST'])
@jwt_required()
def analyze_symptoms():
    user_id = get_jwt_identity()
    data = get_json_body()
    symptoms = data.get('symptoms')
    if not symptoms or not isinstance(symptoms, list):
        return jsonify({'error': 'Symptoms array is required'}), 400

    dog_info = ''
    if data.get('dog_id'):
        dog = get_owned_dog(db.session, user_id, data['dog_id'])
        years = age_in_years(dog.date_of_birth, date.today())
        age = f"{years} years" if years is not None else 'unknown'
        dog_info = f"\nDog info: {dog.name}, {dog.breed or 'unknown breed'}, {age} old"

    question = f"""My dog is showing these symptoms: {', '.join(str(s) for s in symptoms)}.{dog_info}

Please analyze these symptoms and provide:
1. Possible causes (from most to least likely)
2. Whether this requires immediate veterinary attention (emergency vs can wait)
3. What information I should gather before calling the vet
4. Any safe first-aid measures while waiting to see a vet

IMPORTANT: Always err on the side of caution and recommend veterinary consultation. Cite medical sources."""

    answer = get_ai_service().ask(question)
    return jsonify({
        'symptoms': symptoms,
        'analysis': answer.answer,
        'sources': answer.sources,
        'provider': answer.provider,
        'disclaimer': SYMPTOM_DISCLAIMER
    })


@ai_bp.route('/providers', methods=['GET'])
@jwt_required()
def providers():
    available = get_ai_service().available_providers()
    return jsonify({
        'available_providers': available,
        'default_provider': current_app.config.get('DEFAULT_AI_PROVIDER'),
        'configured': len(available) > 0
    })


@ai_bp.route('/history', methods=['GET'])
@jwt_required()
def history():
    limit = ValidationMiddleware.parse_int(request.args.get('limit'), 'limit', default=20, minimum=1)
    entries = get_ai_service().history(get_jwt_identity(), limit=limit, dog_id=request.args.get('dog_id'))
    return jsonify({'history': entries})
