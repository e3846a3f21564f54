from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.auth_service import AuthService

auth_bp = Blueprint('auth', __name__)


def get_auth_service():
    return AuthService(db.session)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['email', 'password', 'name'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    session = get_auth_service().register(data['email'], data['password'], data['name'])
    return jsonify({'message': 'User registered successfully', **session}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['email', 'password'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    session = get_auth_service().login(data['email'], data['password'])
    return jsonify({'message': 'Login successful', **session})


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    user = get_auth_service().get_user(get_jwt_identity())
    return jsonify({'user': user.to_dict()})


@auth_bp.route('/me', methods=['PUT'])
@jwt_required()
def update_current_user():
    """
    Update the profile.

    Expected JSON (all optional):
    {
        "name": "string",
        "currentPassword": "string (required with newPassword)",
        "newPassword": "string"
    }
    """
    data = get_json_body()
    user = get_auth_service().update_profile(
        get_jwt_identity(),
        name=data.get('name'),
        current_password=data.get('currentPassword') or data.get('current_password'),
        new_password=data.get('newPassword') or data.get('new_password')
    )
    return jsonify({'message': 'Profile updated', 'user': user.to_dict()})
