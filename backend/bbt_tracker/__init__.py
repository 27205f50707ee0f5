import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from config import config

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('bbt_tracker').setLevel(level)


def create_app(config_name='development'):
    """Application factory pattern"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    CORS(app)

    # Import models
    from bbt_tracker.models import User, UserSettings, Cycle, CycleDay

    # Register blueprints
    from bbt_tracker.routes.auth import auth_bp
    from bbt_tracker.routes.cycles import cycles_bp
    from bbt_tracker.routes.cycle_days import cycle_days_bp
    from bbt_tracker.routes.charts import charts_bp
    from bbt_tracker.routes.data_transfer import data_transfer_bp
    from bbt_tracker.routes.settings import settings_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(cycles_bp, url_prefix='/api/cycles')
    app.register_blueprint(cycle_days_bp, url_prefix='/api')
    app.register_blueprint(charts_bp, url_prefix='/api/cycles')
    app.register_blueprint(data_transfer_bp, url_prefix='/api/cycles')
    app.register_blueprint(settings_bp, url_prefix='/api/settings')

    register_error_handlers(app)

    # Health check endpoint
    @app.route('/api/health')
    def health_check():
        return {'status': 'healthy', 'message': 'BBT Tracker API is running'}

    logging.getLogger(__name__).debug("Application created with %s config", config_name)
    return app


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'error': 'Uploaded file is too large'}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        logging.getLogger(__name__).error("Unhandled server error: %s", error)
        return jsonify({'error': 'Internal server error'}), 500
