"""Utility functions and helpers for the BBT tracker application."""

from .temperature import (
    fahrenheit_to_celsius,
    celsius_to_fahrenheit,
    convert_from_fahrenheit,
    convert_to_fahrenheit_for_storage,
    format_temperature,
    unit_symbol,
    validate_bbt
)
from .dates import (
    get_day_of_week,
    get_day_of_week_abbreviation,
    format_date,
    format_date_long,
    format_date_for_input,
    parse_date_from_input,
    calculate_day_number,
    date_for_day_number
)

__all__ = [
    'fahrenheit_to_celsius',
    'celsius_to_fahrenheit',
    'convert_from_fahrenheit',
    'convert_to_fahrenheit_for_storage',
    'format_temperature',
    'unit_symbol',
    'validate_bbt',
    'get_day_of_week',
    'get_day_of_week_abbreviation',
    'format_date',
    'format_date_long',
    'format_date_for_input',
    'parse_date_from_input',
    'calculate_day_number',
    'date_for_day_number'
]
