from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.vaccination_service import VaccinationService

vaccinations_bp = Blueprint('vaccinations', __name__)


def get_vaccination_service():
    return VaccinationService(db.session, current_app.config['REMINDER_WINDOWS'])


@vaccinations_bp.route('/schedule', methods=['GET'])
@jwt_required()
def get_schedule():
    return jsonify(VaccinationService.schedule_reference())


@vaccinations_bp.route('/upcoming', methods=['GET'])
@jwt_required()
def get_upcoming():
    """Due within the next three months, plus everything overdue"""
    view = get_vaccination_service().upcoming_for_user(get_jwt_identity())
    return jsonify({
        'upcoming': [v.to_dict(include_dog_name=True) for v in view['upcoming']],
        'overdue': [v.to_dict(include_dog_name=True) for v in view['overdue']]
    })


@vaccinations_bp.route('/dog/<dog_id>', methods=['GET'])
@jwt_required()
def get_dog_vaccinations(dog_id):
    view = get_vaccination_service().list_for_dog(get_jwt_identity(), dog_id)
    return jsonify({
        'vaccinations': [v.to_dict() for v in view['vaccinations']],
        'upcoming': [v.to_dict() for v in view['upcoming']],
        'overdue': [v.to_dict() for v in view['overdue']],
        'total': view['total']
    })


@vaccinations_bp.route('', methods=['POST'])
@jwt_required()
def create_vaccination():
    """
    Record a vaccination

    Expected JSON:
    {
        "dog_id": "string",
        "vaccine_name": "string",
        "date_administered": "YYYY-MM-DD",
        "next_due_date": "YYYY-MM-DD (optional, adds a reminder event)",
        "administered_by": "string (optional)",
        "lot_number": "string (optional)",
        "notes": "string (optional)"
    }
    """
    data = get_json_body()
    validation_error = validate_required_fields(data, ['dog_id', 'vaccine_name', 'date_administered'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    vaccination = get_vaccination_service().create_vaccination(get_jwt_identity(), data)
    return jsonify({'message': 'Vaccination recorded', 'vaccination': vaccination.to_dict()}), 201


@vaccinations_bp.route('/<vaccination_id>', methods=['PUT'])
@jwt_required()
def update_vaccination(vaccination_id):
    vaccination = get_vaccination_service().update_vaccination(get_jwt_identity(), vaccination_id, get_json_body())
    return jsonify({'message': 'Vaccination updated', 'vaccination': vaccination.to_dict()})


@vaccinations_bp.route('/<vaccination_id>', methods=['DELETE'])
@jwt_required()
def delete_vaccination(vaccination_id):
    get_vaccination_service().delete_vaccination(get_jwt_identity(), vaccination_id)
    return jsonify({'message': 'Vaccination record deleted'})
