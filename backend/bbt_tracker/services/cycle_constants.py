"""
Constants shared by cycle models, schemas and services.
Extracted to avoid circular dependencies.
"""

# Temperature units (BBT is always stored in Fahrenheit)
FAHRENHEIT = 'FAHRENHEIT'
CELSIUS = 'CELSIUS'
TEMPERATURE_UNITS = (FAHRENHEIT, CELSIUS)

# Daily observation choices
CERVICAL_APPEARANCES = ('NONE', 'STICKY', 'CREAMY', 'WATERY', 'EGGWHITE')
CERVICAL_SENSATIONS = ('DRY', 'DAMP', 'WET', 'SLIPPERY')
MENSTRUAL_FLOWS = ('SPOTTING', 'LIGHT', 'MEDIUM', 'HEAVY', 'VERY_HEAVY')
OPK_RESULTS = ('NEGATIVE', 'FAINT', 'POSITIVE', 'PEAK')

# Valid BBT ranges per unit, inclusive
BBT_RANGES = {
    CELSIUS: (35.0, 40.0),
    FAHRENHEIT: (95.0, 105.0),
}

# Chart
DEFAULT_CHART_DAYS = 28
DEFAULT_Y_RANGES = {
    CELSIUS: (36.0, 37.5),
    FAHRENHEIT: (96.8, 99.5),
}
Y_TICK_STEP = 0.1
MIN_Y_TICKS = 8
MAX_Y_TICKS = 30

SOLID_COLOR = '#3b82f6'
DASHED_COLOR = '#9CA3AF'
INTERCOURSE_COLOR = '#ec4899'
MARKER_STROKE_COLOR = '#fff'
MARKER_SIZE = 5
STROKE_WIDTH = 2
DASH_LENGTH = 5

# Overlay table geometry, in pixels
HEADER_ROW_HEIGHT = 36
TIMESTAMP_ROW_HEIGHT = 48
HEADER_ROWS = ('Date', 'Week Day', 'Cycle Day')


def normalize_choice(value, choices):
    """Map free text like 'very heavy' or 'Egg-White' onto a choice name, or None."""
    if value is None:
        return None
    key = str(value).strip().upper().replace('-', '_').replace(' ', '_')
    if not key:
        return None
    if key in choices:
        return key
    # 'EGG_WHITE' style spellings of single-word choices
    compact = key.replace('_', '')
    for choice in choices:
        if choice.replace('_', '') == compact:
            return choice
    return None
