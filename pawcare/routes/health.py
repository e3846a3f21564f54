from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.health_service import HealthService

health_bp = Blueprint('health', __name__)


def get_health_service():
    """Get health service instance with database session"""
    return HealthService(db.session, current_app.config['REMINDER_WINDOWS'])


# ==================== HEALTH RECORD ENDPOINTS ====================

@health_bp.route('/dog/<dog_id>', methods=['GET'])
@jwt_required()
def dog_health(dog_id):
    return jsonify(get_health_service().dog_overview(get_jwt_identity(), dog_id))


@health_bp.route('/record/<record_id>', methods=['GET'])
@jwt_required()
def get_health_record(record_id):
    record = get_health_service().get_record(get_jwt_identity(), record_id)
    return jsonify({'record': record.to_dict()})


@health_bp.route('/record', methods=['POST'])
@jwt_required()
def create_health_record():
    """
    Create a new health record

    Expected JSON:
    {
        "dog_id": "string",
        "record_type": "vet_visit|weight|medication|surgery|dental|lab_work|other",
        "record_date": "YYYY-MM-DD",
        "title": "string",
        "description": "string (optional)",
        "vet_name": "string (optional)",
        "vet_clinic": "string (optional)",
        "cost": float (optional),
        "attachments": [...] (optional)
    }
    """
    data = get_json_body()
    validation_error = validate_required_fields(data, ['dog_id', 'record_type', 'record_date', 'title'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    record = get_health_service().create_record(get_jwt_identity(), data)
    return jsonify({'message': 'Health record created', 'record': record.to_dict()}), 201


@health_bp.route('/record/<record_id>', methods=['PUT'])
@jwt_required()
def update_health_record(record_id):
    record = get_health_service().update_record(get_jwt_identity(), record_id, get_json_body())
    return jsonify({'message': 'Health record updated', 'record': record.to_dict()})


@health_bp.route('/record/<record_id>', methods=['DELETE'])
@jwt_required()
def delete_health_record(record_id):
    get_health_service().delete_record(get_jwt_identity(), record_id)
    return jsonify({'message': 'Health record deleted'})


# ==================== MEDICATION ENDPOINTS ====================

@health_bp.route('/medications/dog/<dog_id>', methods=['GET'])
@jwt_required()
def dog_medications(dog_id):
    view = get_health_service().list_medications(get_jwt_identity(), dog_id)
    return jsonify({name: [m.to_dict() for m in meds] for name, meds in view.items()})


@health_bp.route('/medication', methods=['POST'])
@jwt_required()
def create_medication():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['dog_id', 'name', 'start_date'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    medication = get_health_service().create_medication(get_jwt_identity(), data)
    return jsonify({'message': 'Medication added', 'medication': medication.to_dict()}), 201


@health_bp.route('/medication/<medication_id>', methods=['PUT'])
@jwt_required()
def update_medication(medication_id):
    medication = get_health_service().update_medication(get_jwt_identity(), medication_id, get_json_body())
    return jsonify({'message': 'Medication updated', 'medication': medication.to_dict()})


@health_bp.route('/medication/<medication_id>', methods=['DELETE'])
@jwt_required()
def delete_medication(medication_id):
    get_health_service().delete_medication(get_jwt_identity(), medication_id)
    return jsonify({'message': 'Medication deleted'})


# ==================== DASHBOARD ====================

@health_bp.route('/summary', methods=['GET'])
@jwt_required()
def health_summary():
    return jsonify({'summaries': get_health_service().summary(get_jwt_identity())})
