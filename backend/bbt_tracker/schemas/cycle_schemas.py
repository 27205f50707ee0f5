from datetime import date

from marshmallow import Schema, fields, validate, validates_schema, ValidationError, post_load, pre_load

from bbt_tracker.services.cycle_constants import (
    TEMPERATURE_UNITS,
    CERVICAL_APPEARANCES,
    CERVICAL_SENSATIONS,
    MENSTRUAL_FLOWS,
    OPK_RESULTS,
    normalize_choice
)

CHOICE_FIELDS = {
    'temperature_unit': TEMPERATURE_UNITS,
    'cervical_appearance': CERVICAL_APPEARANCES,
    'cervical_sensation': CERVICAL_SENSATIONS,
    'menstrual_flow': MENSTRUAL_FLOWS,
    'opk_result': OPK_RESULTS,
}


def _normalize_choices(data):
    """Upper-case choice fields so 'eggwhite' and 'very heavy' are accepted."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for field_name, choices in CHOICE_FIELDS.items():
        value = data.get(field_name)
        if isinstance(value, str):
            if not value.strip():
                data[field_name] = None
            else:
                data[field_name] = normalize_choice(value, choices) or value
    return data


class CycleDayDataSchema(Schema):
    """Daily observations. Shared by day recording and a new cycle's first day."""
    bbt = fields.Float(allow_none=True, load_default=None, allow_nan=False)
    temperature_unit = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.OneOf(TEMPERATURE_UNITS, error="temperature_unit must be FAHRENHEIT or CELSIUS")
    )
    bbt_time = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Regexp(
            r'^([01]\d|2[0-3]):[0-5]\d$',
            error="bbt_time must be in HH:MM format"
        )
    )
    had_intercourse = fields.Bool(load_default=False)
    exclude_from_interpretation = fields.Bool(load_default=False)
    cervical_appearance = fields.Str(
        allow_none=True, load_default=None, validate=validate.OneOf(CERVICAL_APPEARANCES)
    )
    cervical_sensation = fields.Str(
        allow_none=True, load_default=None, validate=validate.OneOf(CERVICAL_SENSATIONS)
    )
    menstrual_flow = fields.Str(
        allow_none=True, load_default=None, validate=validate.OneOf(MENSTRUAL_FLOWS)
    )
    opk_result = fields.Str(
        allow_none=True, load_default=None, validate=validate.OneOf(OPK_RESULTS)
    )

    @pre_load
    def normalize(self, data, **kwargs):
        data = _normalize_choices(data)
        if isinstance(data, dict) and data.get('bbt_time') == '':
            data['bbt_time'] = None
        if isinstance(data, dict) and data.get('bbt') == '':
            data['bbt'] = None
        return data


class CycleDaySchema(CycleDayDataSchema):
    date = fields.Date(required=True)
    day_number = fields.Int(
        allow_none=True,
        load_default=None,
        validate=validate.Range(min=1, error="day_number must be at least 1")
    )


class CreateCycleSchema(Schema):
    start_date = fields.Date(load_default=date.today)
    first_day = fields.Nested(CycleDayDataSchema, allow_none=True, load_default=None)


class EndCycleSchema(Schema):
    end_date = fields.Date(required=True)


class UpdateCycleSchema(Schema):
    start_date = fields.Date()
    end_date = fields.Date(allow_none=True)
    is_active = fields.Bool()

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide at least one of start_date, end_date or is_active")

    @validates_schema
    def validate_date_order(self, data, **kwargs):
        start_date = data.get('start_date')
        end_date = data.get('end_date')
        if start_date and end_date and end_date < start_date:
            raise ValidationError("end_date cannot be before start_date", field_name='end_date')


class TemperaturePreferenceSchema(Schema):
    temperature_unit = fields.Str(
        required=True,
        validate=validate.OneOf(TEMPERATURE_UNITS, error="temperature_unit must be FAHRENHEIT or CELSIUS")
    )

    @pre_load
    def normalize(self, data, **kwargs):
        return _normalize_choices(data)


class OverlayQuerySchema(Schema):
    """Plot-area measurements taken by the client from the rendered chart."""
    plot_offset = fields.Float(load_default=0.0)
    plot_width = fields.Float(load_default=0.0)
    plot_top = fields.Float(load_default=0.0)
    chart_height = fields.Float(load_default=0.0)
    hovered_day = fields.Int(allow_none=True, load_default=None)


class CsvImportOptionsSchema(Schema):
    cycle_id = fields.Int(allow_none=True, load_default=None)
    temperature_unit = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.OneOf(TEMPERATURE_UNITS, error="temperature_unit must be FAHRENHEIT or CELSIUS")
    )
    date_order = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.OneOf(('DMY', 'MDY'), error="date_order must be DMY or MDY")
    )

    @pre_load
    def normalize(self, data, **kwargs):
        data = _normalize_choices({key: value for key, value in data.items()})
        for key in ('cycle_id', 'date_order'):
            if data.get(key) == '':
                data[key] = None
        if isinstance(data.get('date_order'), str):
            data['date_order'] = data['date_order'].strip().upper()
        return data

    @post_load
    def clean_data(self, data, **kwargs):
        return {key: value for key, value in data.items() if value is not None}
