"""
Temperature conversion utilities for BBT tracking.
All temperatures are stored in Fahrenheit in the database.
Conversions are applied on input/output based on user preferences.
"""

from bbt_tracker.services.cycle_constants import BBT_RANGES, CELSIUS, FAHRENHEIT


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    if fahrenheit is None:
        return None
    return (fahrenheit - 32) * (5 / 9)


def celsius_to_fahrenheit(celsius: float) -> float:
    if celsius is None:
        return None
    return (celsius * 9 / 5) + 32


def unit_symbol(unit: str) -> str:
    return '°C' if unit == CELSIUS else '°F'


def convert_from_fahrenheit(temp_f: float, unit: str) -> float:
    if temp_f is None:
        return None

    if unit == CELSIUS:
        return fahrenheit_to_celsius(temp_f)
    return temp_f


def convert_to_fahrenheit_for_storage(temp: float, input_unit: str) -> float:
    if temp is None:
        return None

    if input_unit == CELSIUS:
        return celsius_to_fahrenheit(temp)
    return temp


def format_temperature(temp_f: float, unit: str) -> str:
    """Format a stored Fahrenheit value in the user's unit, e.g. '36.39°C'."""
    if temp_f is None:
        return None
    value = convert_from_fahrenheit(temp_f, unit)
    return f"{value:.2f}{unit_symbol(unit)}"


def validate_bbt(value, unit: str = FAHRENHEIT) -> float:
    """
    Validate a BBT reading given in `unit` and return it as a float.
    Raises ValueError when it is not numeric or outside the unit's range.
    """
    try:
        temp = float(value)
    except (TypeError, ValueError):
        raise ValueError('BBT must be a valid number')
    if temp != temp:  # NaN
        raise ValueError('BBT must be a valid number')

    low, high = BBT_RANGES.get(unit, BBT_RANGES[FAHRENHEIT])
    if temp < low or temp > high:
        symbol = unit_symbol(unit)
        raise ValueError(
            f'BBT must be a valid temperature between {low:g}{symbol} and {high:g}{symbol}'
        )
    return temp
