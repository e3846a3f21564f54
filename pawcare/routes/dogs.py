from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.dog_service import DogService

dogs_bp = Blueprint('dogs', __name__)


def get_dog_service():
    return DogService(db.session, current_app.config['REMINDER_WINDOWS'])


@dogs_bp.route('', methods=['GET'])
@jwt_required()
def list_dogs():
    dogs = get_dog_service().list_dogs(get_jwt_identity())
    return jsonify({'dogs': [dog.to_dict(include_details=True) for dog in dogs]})


@dogs_bp.route('/<dog_id>', methods=['GET'])
@jwt_required()
def get_dog(dog_id):
    return jsonify({'dog': get_dog_service().get_dog_details(get_jwt_identity(), dog_id)})


@dogs_bp.route('', methods=['POST'])
@jwt_required()
def create_dog():
    """
    Create a dog profile

    Expected JSON:
    {
        "name": "string",
        "breed": "string (optional)",
        "date_of_birth": "YYYY-MM-DD (optional)",
        "adoption_date": "YYYY-MM-DD (optional)",
        "gender": "male|female|unknown (optional)",
        "weight": float (optional),
        "allergies": [{"allergen": "...", "severity": "mild|moderate|severe"}] (optional),
        "health_conditions": [{"condition_name": "...", "status": "active|managed|resolved"}] (optional)
    }
    """
    data = get_json_body()
    validation_error = validate_required_fields(data, ['name'])
    if validation_error:
        return jsonify({'error': 'Dog name is required'}), 400

    dog = get_dog_service().create_dog(get_jwt_identity(), data)
    return jsonify({'message': 'Dog profile created', 'dog': dog.to_dict(include_details=True)}), 201


@dogs_bp.route('/<dog_id>', methods=['PUT'])
@jwt_required()
def update_dog(dog_id):
    dog = get_dog_service().update_dog(get_jwt_identity(), dog_id, get_json_body())
    return jsonify({'message': 'Dog profile updated', 'dog': dog.to_dict(include_details=True)})


@dogs_bp.route('/<dog_id>', methods=['DELETE'])
@jwt_required()
def delete_dog(dog_id):
    get_dog_service().delete_dog(get_jwt_identity(), dog_id)
    return jsonify({'message': 'Dog profile deleted'})


@dogs_bp.route('/<dog_id>/allergies', methods=['POST'])
@jwt_required()
def add_allergy(dog_id):
    allergy = get_dog_service().add_allergy(get_jwt_identity(), dog_id, get_json_body())
    return jsonify({'message': 'Allergy added', 'allergy': allergy.to_dict()}), 201


@dogs_bp.route('/<dog_id>/conditions', methods=['POST'])
@jwt_required()
def add_condition(dog_id):
    condition = get_dog_service().add_condition(get_jwt_identity(), dog_id, get_json_body())
    return jsonify({'message': 'Health condition added', 'condition': condition.to_dict()}), 201


@dogs_bp.route('/<dog_id>/weight', methods=['POST'])
@jwt_required()
def record_weight(dog_id):
    entry = get_dog_service().record_weight(get_jwt_identity(), dog_id, get_json_body())
    return jsonify({'message': 'Weight recorded', 'weight': entry.to_dict()}), 201
