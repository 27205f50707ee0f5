import logging

from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt_identity, jwt_required
from marshmallow import ValidationError

from bbt_tracker import db
from bbt_tracker.models.user import User
from bbt_tracker.schemas.user_schemas import UserRegistrationSchema, UserLoginSchema
from bbt_tracker.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    try:
        data = request.get_json(silent=True) or {}

        schema = UserRegistrationSchema()
        try:
            validated_data = schema.load(data)
        except ValidationError as err:
            return jsonify({'error': 'Validation failed', 'details': err.messages}), 400

        username = validated_data['username']
        email = validated_data['email']
        password = validated_data['password']

        if User.query.filter_by(username=username).first():
            return jsonify({'error': 'Username already exists'}), 409

        if User.query.filter_by(email=email).first():
            return jsonify({'error': 'Email already exists'}), 409

        user = User(username=username, email=email)
        user.set_password(password)

        db.session.add(user)
        db.session.commit()
        logger.info("Registered user %s", user.id)

        # Settings row with the configured default unit
        SettingsService.get_user_settings(user.id)

        return jsonify({
            'message': 'User registered successfully',
            'user': user.to_dict(include_settings=True)
        }), 201

    except Exception:
        db.session.rollback()
        logger.exception("Registration failed")
        return jsonify({'error': 'Registration failed'}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        data = request.get_json(silent=True) or {}

        schema = UserLoginSchema()
        try:
            validated_data = schema.load(data)
        except ValidationError as err:
            return jsonify({'error': 'Validation failed', 'details': err.messages}), 400

        email = validated_data['email']
        password = validated_data['password']

        user = User.query.filter_by(email=email).first()

        if not user or not user.check_password(password):
            logger.info("Failed login attempt for %s", email)
            return jsonify({'error': 'Invalid email or password'}), 401

        user_identity = str(user.id)
        access_token = create_access_token(identity=user_identity)
        refresh_token = create_refresh_token(identity=user_identity)

        return jsonify({
            'message': 'Login successful',
            'access_token': access_token,
            'refresh_token': refresh_token,
            'user': user.to_dict(include_settings=True)
        }), 200

    except Exception:
        logger.exception("Login failed")
        return jsonify({'error': 'Login failed'}), 500


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """
    Tokens are stateless; the client discards them.
    """
    current_user_id = get_jwt_identity()

    return jsonify({
        'message': 'Logout successful',
        'user_id': current_user_id,
        'note': 'Please delete the JWT token from client storage'
    }), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    current_user_id = get_jwt_identity()
    new_access_token = create_access_token(identity=current_user_id)

    return jsonify({
        'message': 'Token refreshed successfully',
        'access_token': new_access_token
    }), 200
