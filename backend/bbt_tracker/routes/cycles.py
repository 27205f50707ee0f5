import logging

from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from bbt_tracker.routes.helpers import (
    get_current_user,
    verify_cycle_ownership,
    error_response,
    success_response,
    serialize_cycle_day
)
from bbt_tracker.schemas.cycle_schemas import CreateCycleSchema, EndCycleSchema, UpdateCycleSchema
from bbt_tracker.services.cycle_service import CycleService
from bbt_tracker.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

cycles_bp = Blueprint('cycles', __name__)


def _cycle_summary(cycle):
    if cycle is None:
        return None
    return {'id': cycle.id, 'cycle_number': cycle.cycle_number}


# ============================================================================
# CYCLE ROUTES
# ============================================================================

@cycles_bp.route('', methods=['GET'])
@jwt_required()
def get_cycles():
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        cycles = CycleService.get_user_cycles(user_id)
        return success_response(
            "Cycles retrieved successfully",
            {
                'cycles': [cycle.to_dict() for cycle in cycles],
                'count': len(cycles)
            }
        )
    except Exception as e:
        logger.exception("Failed to list cycles for user %s", user_id)
        return error_response(f"Failed to get cycles: {str(e)}", 500)


@cycles_bp.route('', methods=['POST'])
@jwt_required()
def create_cycle():
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        data = CreateCycleSchema().load(request.get_json(silent=True) or {})

        cycle = CycleService.create_cycle(
            user_id,
            start_date=data['start_date'],
            first_day=data.get('first_day')
        )
        return success_response(
            "Cycle created successfully",
            {'cycle': cycle.to_dict()},
            201
        )
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.exception("Failed to create cycle for user %s", user_id)
        return error_response(f"Failed to create cycle: {str(e)}", 500)


@cycles_bp.route('/active', methods=['GET'])
@jwt_required()
def get_active_cycle():
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    cycle = CycleService.get_active_cycle(user_id)
    return success_response(
        "Active cycle retrieved successfully" if cycle else "No active cycle",
        {'cycle': cycle.to_dict() if cycle else None}
    )


@cycles_bp.route('/<int:cycle_id>', methods=['GET'])
@jwt_required()
def get_cycle(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        CycleService.ensure_cycle_end_date(cycle)
        previous_cycle, next_cycle = CycleService.get_adjacent_cycles(cycle)

        return success_response(
            "Cycle retrieved successfully",
            {
                'cycle': cycle.to_dict(),
                'suggested_day_number': CycleService.suggest_next_day_number(cycle),
                'previous_cycle': _cycle_summary(previous_cycle),
                'next_cycle': _cycle_summary(next_cycle)
            }
        )
    except Exception as e:
        logger.exception("Failed to load cycle %s", cycle_id)
        return error_response(f"Failed to get cycle: {str(e)}", 500)


@cycles_bp.route('/<int:cycle_id>', methods=['PATCH'])
@jwt_required()
def update_cycle(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        changes = UpdateCycleSchema().load(request.get_json(silent=True) or {})
        cycle = CycleService.update_cycle(cycle, changes)
        return success_response("Cycle updated successfully", {'cycle': cycle.to_dict()})
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.exception("Failed to update cycle %s", cycle_id)
        return error_response(f"Failed to update cycle: {str(e)}", 500)


@cycles_bp.route('/<int:cycle_id>/end', methods=['POST'])
@jwt_required()
def end_cycle(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        data = EndCycleSchema().load(request.get_json(silent=True) or {})
        cycle = CycleService.end_cycle(cycle, data['end_date'])
        return success_response("Cycle ended successfully", {'cycle': cycle.to_dict()})
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.exception("Failed to end cycle %s", cycle_id)
        return error_response(f"Failed to end cycle: {str(e)}", 500)


@cycles_bp.route('/<int:cycle_id>', methods=['DELETE'])
@jwt_required()
def delete_cycle(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        CycleService.delete_cycle(cycle)
        return success_response("Cycle deleted successfully", {'cycle_id': cycle_id})
    except Exception as e:
        logger.exception("Failed to delete cycle %s", cycle_id)
        return error_response(f"Failed to delete cycle: {str(e)}", 500)


#--------------------------------------------
#CYCLE DAYS

@cycles_bp.route('/<int:cycle_id>/days', methods=['GET'])
@jwt_required()
def get_cycle_days(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        unit = SettingsService.get_temperature_unit(user_id)
        days = [
            serialize_cycle_day(day, unit)
            for day in CycleService.get_cycle_days(user_id, cycle.id)
        ]
        return success_response(
            "Cycle days retrieved successfully",
            {
                'cycle_id': cycle.id,
                'temperature_unit': unit,
                'days': days,
                'count': len(days),
                'suggested_day_number': CycleService.suggest_next_day_number(cycle)
            }
        )
    except Exception as e:
        logger.exception("Failed to list days of cycle %s", cycle_id)
        return error_response(f"Failed to get cycle days: {str(e)}", 500)
