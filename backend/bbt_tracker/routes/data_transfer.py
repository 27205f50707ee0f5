import logging

from flask import Blueprint, request, Response, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from bbt_tracker.routes.helpers import (
    get_current_user,
    verify_cycle_ownership,
    error_response,
    success_response,
    serialize_cycle_day
)
from bbt_tracker.schemas.cycle_schemas import CsvImportOptionsSchema
from bbt_tracker.services.csv_transfer_service import CsvTransferService
from bbt_tracker.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

data_transfer_bp = Blueprint('data_transfer', __name__)


#bulk create cycle days (imported from a csv file)
@data_transfer_bp.route('/import', methods=['POST'])
@jwt_required()
def import_cycle_days():
    try:
        _, user_id = get_current_user()
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        options = CsvImportOptionsSchema().load(request.form.to_dict())
    except ValidationError as e:
        return error_response("Validation failed", 400, e.messages)

    cycle = None
    if 'cycle_id' in options:
        try:
            cycle = verify_cycle_ownership(options['cycle_id'], user_id)
        except ValueError as e:
            return error_response(str(e), 404)

    try:
        csv_file = request.files.get('csv_file')
        if not csv_file:
            return error_response("csv_file is required", 400)

        try:
            csv_data = csv_file.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            return error_response("CSV file must be UTF-8 encoded", 400)

        display_unit = SettingsService.get_temperature_unit(user_id)
        result = CsvTransferService.import_cycle_days(
            user_id,
            csv_data,
            cycle=cycle,
            temperature_unit=options.get('temperature_unit'),
            date_order=options.get('date_order'),
            fallback_unit=display_unit,
            max_rows=current_app.config.get('CSV_IMPORT_MAX_ROWS', 400)
        )

        errors = result['errors']
        if not result['entries']:
            return error_response(
                f"Failed to import any cycle days. {len(errors)} error(s) occurred.",
                400,
                {'errors': errors}
            )

        response_data = {
            'cycle': result['cycle'].to_dict(include_days=False),
            'created_cycle': result['created_cycle'],
            'count': result['count'],
            'created_count': result['created_count'],
            'updated_count': result['updated_count'],
            'entries': [serialize_cycle_day(day, display_unit) for day in result['entries']],
            'detected_temperature_unit': result['temperature_unit'],
            'temperature_unit_source': result['temperature_unit_source'],
            'detected_date_order': result['date_order'],
            'date_order_source': result['date_order_source']
        }
        if errors:
            response_data['errors'] = errors
            response_data['error_count'] = len(errors)

        message = f"Successfully imported {result['count']} cycle days"
        if errors:
            message += f" ({len(errors)} error(s) occurred)"

        return success_response(message, response_data, 201 if result['created_cycle'] else 200)

    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.exception("CSV import failed for user %s", user_id)
        return error_response(f"Failed to import cycle days: {str(e)}", 500)


#Export a cycle's days as a csv file
@data_transfer_bp.route('/<int:cycle_id>/export', methods=['GET'])
@jwt_required()
def export_cycle_days(cycle_id: int):
    try:
        _, user_id = get_current_user()
        cycle = verify_cycle_ownership(cycle_id, user_id)
    except ValueError as e:
        return error_response(str(e), 404)

    try:
        unit = SettingsService.get_temperature_unit(user_id)
        csv_content = CsvTransferService.export_cycle_days(cycle, unit)

        return Response(
            csv_content,
            mimetype='text/csv',
            headers={
                'Content-Disposition': (
                    f'attachment; filename=cycle_{cycle.cycle_number}_{cycle.start_date.isoformat()}.csv'
                )
            }
        )
    except Exception as e:
        logger.exception("CSV export failed for cycle %s", cycle_id)
        return error_response(f"Failed to export cycle days: {str(e)}", 500)
