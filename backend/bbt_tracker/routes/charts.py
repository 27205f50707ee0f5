import logging

from flask import Blueprint, request, Response
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from bbt_tracker.routes.helpers import (
    get_current_user,
    verify_cycle_ownership,
    error_response,
    success_response
)
from bbt_tracker.schemas.cycle_schemas import OverlayQuerySchema
from bbt_tracker.services.bbt_chart_image_service import BBTChartImageService
from bbt_tracker.services.bbt_chart_service import BBTChartService
from bbt_tracker.services.chart_overlay_service import ChartOverlayService
from bbt_tracker.services.cycle_service import CycleService
from bbt_tracker.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

charts_bp = Blueprint('charts', __name__)


def _chart_data_for(cycle, user_id):
    unit = SettingsService.get_temperature_unit(user_id)
    previous_cycle, next_cycle = CycleService.get_adjacent_cycles(cycle)
    return BBTChartService.build_chart_data(
        cycle, unit, previous_cycle=previous_cycle, next_cycle=next_cycle
    )


@charts_bp.route('/<int:cycle_id>/chart', methods=['GET'])
@jwt_required()
def get_chart(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        return success_response("Chart data retrieved successfully", {'chart': _chart_data_for(cycle, user_id)})
    except Exception as e:
        logger.exception("Failed to build chart for cycle %s", cycle_id)
        return error_response(f"Failed to get chart data: {str(e)}", 500)


@charts_bp.route('/<int:cycle_id>/chart/overlay', methods=['GET'])
@jwt_required()
def get_chart_overlay(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        measurements = OverlayQuerySchema().load(request.args.to_dict())
        chart_data = _chart_data_for(cycle, user_id)

        overlay = ChartOverlayService.build_overlay(
            chart_data,
            plot_offset=measurements['plot_offset'],
            plot_width=measurements['plot_width'],
            plot_top=measurements['plot_top'],
            chart_height=measurements['chart_height'],
            hovered_day=measurements['hovered_day']
        )
        return success_response("Chart overlay retrieved successfully", {'overlay': overlay})
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)
    except Exception as e:
        logger.exception("Failed to build chart overlay for cycle %s", cycle_id)
        return error_response(f"Failed to get chart overlay: {str(e)}", 500)


@charts_bp.route('/<int:cycle_id>/chart.png', methods=['GET'])
@jwt_required()
def get_chart_image(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        image_data = BBTChartImageService.generate_chart_image(_chart_data_for(cycle, user_id))

        # Return image as response (not JSON!)
        return Response(
            image_data,
            mimetype='image/png',
            headers={
                'Content-Disposition': f'inline; filename=bbt_chart_cycle_{cycle.cycle_number}.png'
            }
        )
    except Exception as e:
        logger.exception("Failed to render chart image for cycle %s", cycle_id)
        return error_response(f"Failed to render chart: {str(e)}", 500)
