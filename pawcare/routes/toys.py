from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.toy_service import ToyService

toys_bp = Blueprint('toys', __name__)


def get_toy_service():
    return ToyService(db.session)


def _serialize(toys):
    return [toy.to_dict(include_dog_name=True) for toy in toys]


@toys_bp.route('', methods=['GET'])
@jwt_required()
def list_toys():
    return jsonify({'toys': _serialize(get_toy_service().list_toys(get_jwt_identity()))})


@toys_bp.route('/dog/<dog_id>', methods=['GET'])
@jwt_required()
def toys_for_dog(dog_id):
    view = get_toy_service().list_for_dog(get_jwt_identity(), dog_id)
    return jsonify({
        'toys': [toy.to_dict() for toy in view['toys']],
        'grouped': {category: [toy.to_dict() for toy in toys] for category, toys in view['grouped'].items()}
    })


@toys_bp.route('/category/<category>', methods=['GET'])
@jwt_required()
def toys_by_category(category):
    toys = get_toy_service().list_by_category(get_jwt_identity(), category)
    return jsonify({'category': category, 'toys': _serialize(toys)})


@toys_bp.route('/favorites', methods=['GET'])
@jwt_required()
def favorite_toys():
    return jsonify({'favorites': _serialize(get_toy_service().list_favorites(get_jwt_identity()))})


@toys_bp.route('/needs-replacement', methods=['GET'])
@jwt_required()
def toys_needing_replacement():
    return jsonify({'items': _serialize(get_toy_service().list_needing_replacement(get_jwt_identity()))})


@toys_bp.route('/spending-summary', methods=['GET'])
@jwt_required()
def spending_summary():
    return jsonify(get_toy_service().spending_summary(get_jwt_identity()))


@toys_bp.route('', methods=['POST'])
@jwt_required()
def create_toy():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['dog_id', 'name'])
    if validation_error:
        return jsonify({'error': validation_error}), 400

    toy = get_toy_service().create_toy(get_jwt_identity(), data)
    return jsonify({'message': 'Item added', 'toy': toy.to_dict()}), 201


@toys_bp.route('/<toy_id>', methods=['PUT'])
@jwt_required()
def update_toy(toy_id):
    toy = get_toy_service().update_toy(get_jwt_identity(), toy_id, get_json_body())
    return jsonify({'message': 'Item updated', 'toy': toy.to_dict()})


@toys_bp.route('/<toy_id>', methods=['DELETE'])
@jwt_required()
def delete_toy(toy_id):
    get_toy_service().delete_toy(get_jwt_identity(), toy_id)
    return jsonify({'message': 'Item deleted'})


@toys_bp.route('/<toy_id>/favorite', methods=['POST'])
@jwt_required()
def toggle_favorite(toy_id):
    toy = get_toy_service().toggle_favorite(get_jwt_identity(), toy_id)
    return jsonify({
        'message': 'Added to favorites' if toy.is_favorite else 'Removed from favorites',
        'is_favorite': bool(toy.is_favorite)
    })
