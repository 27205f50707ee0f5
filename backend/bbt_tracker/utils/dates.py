"""
Date helpers for cycle day numbering and display labels.
"""

from datetime import date, datetime, timedelta

DAY_ABBREVIATIONS = {
    'Monday': 'M',
    'Tuesday': 'T',
    'Wednesday': 'W',
    'Thursday': 'Th',
    'Friday': 'F',
    'Saturday': 'Sat',
    'Sunday': 'Sun'
}


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return parse_date_from_input(value)
    return value


def get_day_of_week(value) -> str:
    return _as_date(value).strftime('%A')


def get_day_of_week_abbreviation(day_name: str) -> str:
    return DAY_ABBREVIATIONS.get(day_name, day_name)


def format_date(value) -> str:
    # e.g. "Oct 24 2025"
    d = _as_date(value)
    return f"{d.strftime('%b')} {d.day} {d.year}"


def format_date_long(value) -> str:
    # e.g. "October 24, 2025"
    d = _as_date(value)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def format_date_for_input(value) -> str:
    return _as_date(value).strftime('%Y-%m-%d')


def parse_date_from_input(date_string: str) -> date:
    try:
        return datetime.strptime(date_string.strip(), '%Y-%m-%d').date()
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid date '{date_string}'. Use YYYY-MM-DD")


def calculate_day_number(start_date, entry_date) -> int:
    """Cycle day of `entry_date`, where the start date is day 1."""
    return (_as_date(entry_date) - _as_date(start_date)).days + 1


def date_for_day_number(start_date, day_number: int) -> date:
    return _as_date(start_date) + timedelta(days=day_number - 1)
