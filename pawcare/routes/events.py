from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.event_service import EventService

events_bp = Blueprint('events', __name__)


def get_event_service():
    return EventService(db.session, current_app.config['REMINDER_WINDOWS'])


def _serialize(events):
    return [event.to_dict(include_dog_name=True) for event in events]


@events_bp.route('', methods=['GET'])
@jwt_required()
def list_events():
    return jsonify({'events': _serialize(get_event_service().list_events(get_jwt_identity()))})


@events_bp.route('/upcoming', methods=['GET'])
@jwt_required()
def upcoming_events():
    view = get_event_service().list_upcoming(get_jwt_identity())
    return jsonify({'upcoming': _serialize(view['upcoming']), 'today': _serialize(view['today'])})


@events_bp.route('/reminders', methods=['GET'])
@jwt_required()
def upcoming_reminders():
    return jsonify(get_event_service().get_upcoming_reminders(get_jwt_identity()))


@events_bp.route('/birthdays', methods=['GET'])
@jwt_required()
def birthdays_this_month():
    return jsonify(get_event_service().birthdays_this_month(get_jwt_identity()))


@events_bp.route('/type/<event_type>', methods=['GET'])
@jwt_required()
def events_by_type(event_type):
    return jsonify({'events': _serialize(get_event_service().list_by_type(get_jwt_identity(), event_type))})


@events_bp.route('/dog/<dog_id>', methods=['GET'])
@jwt_required()
def events_for_dog(dog_id):
    events = get_event_service().list_for_dog(get_jwt_identity(), dog_id)
    return jsonify({'events': [event.to_dict() for event in events]})


@events_bp.route('', methods=['POST'])
@jwt_required()
def create_event():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['title', 'event_date'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    event = get_event_service().create_event(get_jwt_identity(), data)
    return jsonify({'message': 'Event created', 'event': event.to_dict()}), 201


@events_bp.route('/<event_id>', methods=['PUT'])
@jwt_required()
def update_event(event_id):
    event = get_event_service().update_event(get_jwt_identity(), event_id, get_json_body())
    return jsonify({'message': 'Event updated', 'event': event.to_dict()})


@events_bp.route('/<event_id>', methods=['DELETE'])
@jwt_required()
def delete_event(event_id):
    get_event_service().delete_event(get_jwt_identity(), event_id)
    return jsonify({'message': 'Event deleted'})
