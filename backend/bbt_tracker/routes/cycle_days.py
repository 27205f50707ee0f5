import logging

from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from bbt_tracker.models.cycle_day import CycleDay
from bbt_tracker.routes.helpers import (
    get_current_user,
    verify_cycle_ownership,
    verify_cycle_day_ownership,
    error_response,
    success_response,
    serialize_cycle_day
)
from bbt_tracker.schemas.cycle_schemas import CycleDaySchema
from bbt_tracker.services.cycle_day_service import CycleDayService
from bbt_tracker.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

cycle_days_bp = Blueprint('cycle_days', __name__)


@cycle_days_bp.route('/cycles/<int:cycle_id>/days', methods=['POST'])
@jwt_required()
def save_cycle_day(cycle_id: int):
    """Create the day, or replace it when the cycle already has that day number."""
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        data = CycleDaySchema().load(request.get_json(silent=True) or {})

        display_unit = SettingsService.get_temperature_unit(user_id)
        temperature_unit = data.get('temperature_unit') or display_unit

        # Check if entry exists to determine response (before service call)
        day_number = data.get('day_number')
        if day_number is None:
            day_number = CycleDayService.resolve_day_number(cycle, data['date'])
        existed = CycleDay.query.filter_by(cycle_id=cycle.id, day_number=day_number).first() is not None

        cycle_day = CycleDayService.create_or_update_cycle_day(
            cycle=cycle,
            entry_date=data['date'],
            day_number=day_number,
            bbt=data.get('bbt'),
            temperature_unit=temperature_unit,
            bbt_time=data.get('bbt_time'),
            had_intercourse=data.get('had_intercourse', False),
            exclude_from_interpretation=data.get('exclude_from_interpretation', False),
            cervical_appearance=data.get('cervical_appearance'),
            cervical_sensation=data.get('cervical_sensation'),
            menstrual_flow=data.get('menstrual_flow'),
            opk_result=data.get('opk_result')
        )

        return success_response(
            "Cycle day updated successfully" if existed else "Cycle day created successfully",
            {
                'cycle_day': serialize_cycle_day(cycle_day, display_unit),
                'created': not existed
            },
            200 if existed else 201
        )
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.exception("Failed to save day for cycle %s", cycle_id)
        return error_response(f"Failed to save cycle day: {str(e)}", 500)


@cycle_days_bp.route('/cycle-days/<int:cycle_day_id>', methods=['DELETE'])
@jwt_required()
def delete_cycle_day(cycle_day_id: int):
    try:
        _, user_id = get_current_user()
        cycle_day = verify_cycle_day_ownership(cycle_day_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)
    except PermissionError as e:
        return error_response(str(e), 403)

    try:
        CycleDayService.delete_cycle_day(cycle_day)
        return success_response("Cycle day deleted successfully", {'cycle_day_id': cycle_day_id})
    except Exception as e:
        logger.exception("Failed to delete cycle day %s", cycle_day_id)
        return error_response(f"Failed to delete cycle day: {str(e)}", 500)
