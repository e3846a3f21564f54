from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from pawcare import db
from pawcare.middleware.validation import get_json_body, validate_required_fields
from pawcare.services.food_service import FoodService

food_bp = Blueprint('food', __name__)


def get_food_service():
    return FoodService(db.session)


def _serialize(foods):
    return [food.to_dict() for food in foods]


@food_bp.route('/search', methods=['GET'])
def search_foods():
    query = request.args.get('q', '')
    if not query.strip():
        return jsonify({'error': 'Search query is required'}), 400
    return jsonify({'results': _serialize(get_food_service().search(query)), 'query': query})


@food_bp.route('/safe', methods=['GET'])
def safe_foods():
    return jsonify({'foods': _serialize(get_food_service().list_safe())})


@food_bp.route('/toxic', methods=['GET'])
def toxic_foods():
    return jsonify({'foods': _serialize(get_food_service().list_toxic())})


@food_bp.route('/categories/list', methods=['GET'])
def food_categories():
    return jsonify({'categories': get_food_service().list_categories()})


@food_bp.route('/category/<category>', methods=['GET'])
def foods_by_category(category):
    return jsonify({'category': category, 'foods': _serialize(get_food_service().list_by_category(category))})


@food_bp.route('/<food_name>', methods=['GET'])
def get_food(food_name):
    food = get_food_service().find_by_name(food_name)
    if not food:
        return jsonify({
            'error': 'Food not found in database',
            'suggestion': 'Try using the AI assistant for information about this food'
        }), 404
    return jsonify({'food': food.to_dict()})


@food_bp.route('', methods=['POST'])
@jwt_required()
def add_food():
    data = get_json_body()
    validation_error = validate_required_fields(data, ['food_name', 'is_safe', 'safety_level'])
    if validation_error:
        return jsonify({'error': 'food_name, is_safe, and safety_level are required'}), 400

    food = get_food_service().add_food(data)
    return jsonify({'message': 'Food added to database', 'id': food.id}), 201
