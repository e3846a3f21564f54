"""
PawCare Hub Flask application

Application factory plus the shared extension instances (database, bcrypt, JWT).
"""

import os
import logging
import sqlite3
from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()
bcrypt = Bcrypt()
jwt = JWTManager()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Cascades on dog/user deletion rely on SQLite enforcing foreign keys"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(config_name=None, start_scheduler=True):
    """
    Application factory. `start_scheduler=False` leaves the reminder scheduler
    to the caller even when SCHEDULER_ENABLED is set.
    """
    from .config import config_by_name

    config_name = config_name or os.getenv('FLASK_ENV', 'development')
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
        db_path = app.config['SQLALCHEMY_DATABASE_URI'][len('sqlite:///'):]
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    # Initialize extensions with app
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    CORS(app,
        resources={
            r"/api/*": {
                "origins": [app.config['FRONTEND_URL'], "http://localhost:3000", "http://localhost:5173"],
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
            }
        }
    )

    # Configure logging
    if not app.testing:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    from .errors import register_error_handlers
    register_error_handlers(app)
    _register_jwt_loaders()

    # Register blueprints
    from .routes import auth_bp, dogs_bp, food_bp, vaccinations_bp, events_bp, toys_bp, health_bp, ai_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(dogs_bp, url_prefix='/api/dogs')
    app.register_blueprint(food_bp, url_prefix='/api/food')
    app.register_blueprint(vaccinations_bp, url_prefix='/api/vaccinations')
    app.register_blueprint(events_bp, url_prefix='/api/events')
    app.register_blueprint(toys_bp, url_prefix='/api/toys')
    app.register_blueprint(health_bp, url_prefix='/api/health')
    app.register_blueprint(ai_bp, url_prefix='/api/ai')

    @app.route('/api/health-check')
    def health_check():
        return jsonify({'status': 'ok', 'message': 'PawCare Hub API is running'})

    if app.config.get('AUTO_CREATE_TABLES', True):
        from .models.food import seed_food_database
        with app.app_context():
            db.create_all()
            seeded = seed_food_database(db.session)
            app.logger.info(f"Database ready ({seeded} reference foods added)")

    if start_scheduler and app.config.get('SCHEDULER_ENABLED'):
        try:
            from .services.reminder_scheduler_service import start_reminder_scheduler
            start_reminder_scheduler(app)
            app.logger.info("✅ Reminder scheduler initialized successfully")
        except Exception as e:
            app.logger.error(f"❌ Failed to initialize reminder scheduler: {str(e)}")

    app.logger.info(f"PawCare Hub app created for '{config_name}' environment")
    return app


def _register_jwt_loaders():
    """Every token failure is a plain 401 with a short message"""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': 'Access token required'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': 'Invalid or expired token'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Invalid or expired token'}), 401
