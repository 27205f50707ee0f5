from flask import jsonify
from flask_jwt_extended import get_jwt_identity
from typing import Tuple, Dict, Any

from bbt_tracker.models.user import User
from bbt_tracker.models.cycle import Cycle
from bbt_tracker.models.cycle_day import CycleDay
from bbt_tracker.services.cycle_service import CycleService
from bbt_tracker.utils.temperature import convert_from_fahrenheit, format_temperature


def get_current_user() -> Tuple[User, int]:
    user_id = int(get_jwt_identity())
    user = User.query.filter_by(id=user_id).first()
    if not user:
        raise ValueError("User not found")
    return user, user_id


def verify_cycle_ownership(cycle_id: int, user_id: int) -> Cycle:
    return CycleService.get_cycle(user_id, cycle_id)


def verify_cycle_day_ownership(cycle_day_id: int, user_id: int) -> CycleDay:
    """
    Missing days raise ValueError, days in another user's cycle raise
    PermissionError.
    """
    cycle_day = CycleDay.query.filter_by(id=cycle_day_id).first()
    if not cycle_day:
        raise ValueError("Cycle day not found")
    if cycle_day.cycle.user_id != user_id:
        raise PermissionError("Unauthorized - cycle day does not belong to your cycle")
    return cycle_day


def error_response(message: str, status_code: int = 400,
                   details: Dict[str, Any] = None) -> Tuple[Dict, int]:
    response = {'error': message}
    if details:
        response['details'] = details
    return jsonify(response), status_code


def success_response(message: str, data: Dict[str, Any] = None,
                     status_code: int = 200) -> Tuple[Dict, int]:
    response = {'message': message}
    if data:
        response['data'] = data
    return jsonify(response), status_code


def serialize_cycle_day(cycle_day: CycleDay, unit: str) -> Dict[str, Any]:
    """Day dict with the stored Fahrenheit reading also given in `unit`."""
    result = cycle_day.to_dict()
    result['temperature_unit'] = unit
    result['bbt_display'] = (
        round(convert_from_fahrenheit(cycle_day.bbt, unit), 2) if cycle_day.bbt is not None else None
    )
    result['bbt_formatted'] = format_temperature(cycle_day.bbt, unit)
    return result
