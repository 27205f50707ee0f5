from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from bbt_tracker.routes.helpers import get_current_user, error_response, success_response
from bbt_tracker.schemas.cycle_schemas import TemperaturePreferenceSchema
from bbt_tracker.services.settings_service import SettingsService

settings_bp = Blueprint('settings', __name__)


@settings_bp.route('', methods=['GET'])
@jwt_required()
def get_settings():
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        settings = SettingsService.get_user_settings(user_id)
        return success_response("Settings retrieved successfully", {'settings': settings.to_dict()})
    except Exception as e:
        return error_response(f"Failed to get settings: {str(e)}", 500)


@settings_bp.route('/temperature-unit', methods=['PUT'])
@jwt_required()
def update_temperature_unit():
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        data = TemperaturePreferenceSchema().load(request.get_json(silent=True) or {})
        settings = SettingsService.update_temperature_preference(user_id, data['temperature_unit'])
        return success_response("Temperature unit updated successfully", {'settings': settings.to_dict()})
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        return error_response(f"Failed to update temperature unit: {str(e)}", 500)
