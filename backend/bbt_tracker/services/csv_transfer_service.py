"""
CSV import and export of cycle days.

Imports accept spreadsheets exported from other charting apps: column names
are matched loosely, the temperature unit and the day/month order of numeric
dates are inferred from the file as a whole, and each row is reported on
individually.
"""

import csv
import io
import logging
import re
from datetime import date, datetime
from typing import Dict, Any, List, Optional, Tuple

import numpy as np

from bbt_tracker.models.cycle import Cycle
from bbt_tracker.models.cycle_day import CycleDay
from bbt_tracker.services.cycle_constants import (
    CELSIUS,
    FAHRENHEIT,
    TEMPERATURE_UNITS,
    CERVICAL_APPEARANCES,
    CERVICAL_SENSATIONS,
    MENSTRUAL_FLOWS,
    OPK_RESULTS,
    normalize_choice
)
from bbt_tracker.services.cycle_day_service import CycleDayService
from bbt_tracker.services.cycle_service import CycleService
from bbt_tracker.utils.temperature import convert_from_fahrenheit, validate_bbt

logger = logging.getLogger(__name__)

DAY_FIRST = 'DMY'
MONTH_FIRST = 'MDY'

# Readings at or below this are taken to be Celsius
CELSIUS_CEILING = 45.0

COLUMN_ALIASES = {
    'date': ('date', 'entry_date', 'observation_date', 'recorded_on'),
    'bbt': ('bbt', 'temp', 'temperature', 'basal_temp', 'basal_temperature',
            'basal_body_temperature', 'waking_temperature'),
    'temperature_unit': ('temperature_unit', 'temp_unit', 'unit', 'units'),
    'bbt_time': ('bbt_time', 'time', 'time_taken', 'temp_time', 'temperature_time'),
    'had_intercourse': ('had_intercourse', 'intercourse', 'sex', 'bd'),
    'exclude_from_interpretation': ('exclude_from_interpretation', 'exclude', 'excluded',
                                    'disturbed', 'discard'),
    'cervical_appearance': ('cervical_appearance', 'cervical_fluid', 'cf', 'appearance', 'mucus'),
    'cervical_sensation': ('cervical_sensation', 'sensation'),
    'menstrual_flow': ('menstrual_flow', 'flow', 'period', 'bleeding'),
    'opk_result': ('opk_result', 'opk', 'lh', 'lh_test', 'ovulation_test'),
}

CHOICE_COLUMNS = {
    'cervical_appearance': CERVICAL_APPEARANCES,
    'cervical_sensation': CERVICAL_SENSATIONS,
    'menstrual_flow': MENSTRUAL_FLOWS,
    'opk_result': OPK_RESULTS,
}

TRUE_VALUES = {'1', 'true', 'yes', 'y', 'x', 't'}
FALSE_VALUES = {'', '0', 'false', 'no', 'n', 'f'}

EXPORT_COLUMNS = [
    'date', 'day_number', 'day_of_week', 'bbt', 'temperature_unit', 'bbt_time',
    'had_intercourse', 'exclude_from_interpretation', 'cervical_appearance',
    'cervical_sensation', 'menstrual_flow', 'opk_result'
]

CSV_DELIMITERS = (',', ';', '\t')

NAMED_DATE_FORMATS = (
    '%b %d %Y', '%b %d, %Y', '%B %d %Y', '%B %d, %Y',
    '%d %b %Y', '%d %B %Y', '%d-%b-%Y', '%d-%b-%y'
)

NUMERIC_DATE = re.compile(r'^(\d{1,4})[/\-.](\d{1,2})[/\-.](\d{1,4})$')
CELSIUS_HINT = re.compile(r'(°\s*c\b|\(c\)|\[c\]|celsius|_c$|\bc$)', re.IGNORECASE)
FAHRENHEIT_HINT = re.compile(r'(°\s*f\b|\(f\)|\[f\]|fahrenheit|_f$|\bf$)', re.IGNORECASE)
TIME_PATTERN = re.compile(r'^(\d{1,2})[:.h]?(\d{2})(?::\d{2})?\s*([ap]\.?m\.?)?$', re.IGNORECASE)


# ---------------------------------------------------------------------------
# Column handling
# ---------------------------------------------------------------------------

def normalize_header(header: str) -> str:
    key = header.strip().lower().replace('°', ' ')
    key = re.sub(r'[^a-z0-9]+', '_', key).strip('_')
    return key


def header_unit(header: str) -> Optional[str]:
    """Unit named in a column header such as 'BBT (°C)' or 'temp_f'."""
    text = header.strip()
    if CELSIUS_HINT.search(text):
        return CELSIUS
    if FAHRENHEIT_HINT.search(text):
        return FAHRENHEIT
    return None


def map_columns(headers: List[str]) -> Tuple[Dict[str, int], Optional[str]]:
    """
    Map canonical field names to column indexes.
    Returns (columns, unit named in the BBT header or None).
    """
    columns = {}
    bbt_header_unit = None

    for index, header in enumerate(headers):
        key = normalize_header(header)
        stripped = re.sub(r'_(c|f|celsius|fahrenheit)$', '', key)
        for field_name, aliases in COLUMN_ALIASES.items():
            if field_name in columns:
                continue
            if key in aliases or stripped in aliases:
                columns[field_name] = index
                if field_name == 'bbt':
                    bbt_header_unit = header_unit(header)
                break

    return columns, bbt_header_unit


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------

def parse_temperature_value(raw: str) -> Optional[float]:
    text = (raw or '').strip()
    if not text:
        return None
    text = re.sub(r'\s*°?\s*[cfCF]$', '', text).replace('°', '').strip()
    if ',' in text and '.' not in text:
        # decimal comma
        text = text.replace(',', '.')
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"Invalid temperature '{raw.strip()}'")


def detect_temperature_unit(
    values: List[float],
    explicit_unit: Optional[str] = None,
    bbt_header_unit: Optional[str] = None,
    column_units: Optional[List[str]] = None,
    fallback_unit: str = FAHRENHEIT
) -> Tuple[str, str]:
    """
    Decide which unit the file's readings are in.

    Precedence: caller-supplied unit, unit in the BBT header, a unit column
    holding a single unit, then the median reading (<= 45 means Celsius),
    then `fallback_unit`. Returns (unit, how it was decided).
    """
    if explicit_unit in TEMPERATURE_UNITS:
        return explicit_unit, 'requested'
    if bbt_header_unit in TEMPERATURE_UNITS:
        return bbt_header_unit, 'header'

    distinct = {unit for unit in (column_units or []) if unit}
    if len(distinct) == 1:
        return distinct.pop(), 'unit_column'

    if values:
        median = float(np.median(np.array(values, dtype=float)))
        return (CELSIUS if median <= CELSIUS_CEILING else FAHRENHEIT), 'values'

    return fallback_unit, 'preference'


def parse_unit_value(raw: str) -> Optional[str]:
    text = (raw or '').strip()
    if not text:
        return None
    unit = normalize_choice(text, TEMPERATURE_UNITS)
    if unit:
        return unit
    return header_unit(text) or header_unit(f'({text})')


def detect_date_order(date_strings: List[str], default_order: Optional[str] = None) -> Tuple[str, str]:
    """
    Infer day/month order of numeric dates from the whole column.
    A first component above 12 can only be a day, a second component above
    12 can only be a day too. Mixed evidence is an error.
    Returns (order, how it was decided).
    """
    day_first_evidence = False
    month_first_evidence = False

    for value in date_strings:
        match = NUMERIC_DATE.match((value or '').strip())
        if not match or len(match.group(1)) == 4:
            continue
        first, second = int(match.group(1)), int(match.group(2))
        if first > 12:
            day_first_evidence = True
        if second > 12:
            month_first_evidence = True

    if day_first_evidence and month_first_evidence:
        raise ValueError("Dates mix day-first and month-first formats")
    if day_first_evidence:
        return DAY_FIRST, 'values'
    if month_first_evidence:
        return MONTH_FIRST, 'values'
    if default_order in (DAY_FIRST, MONTH_FIRST):
        return default_order, 'requested'
    return MONTH_FIRST, 'default'


def parse_date_value(raw: str, order: str = MONTH_FIRST) -> date:
    text = (raw or '').strip()
    if not text:
        raise ValueError("Missing date")

    match = NUMERIC_DATE.match(text)
    if match:
        a, b, c = match.groups()
        if len(a) == 4:
            year, month, day = int(a), int(b), int(c)
        else:
            if order == DAY_FIRST:
                day, month = int(a), int(b)
            else:
                month, day = int(a), int(b)
            year = int(c)
            if len(c) == 2:
                year += 2000
        try:
            return date(year, month, day)
        except ValueError:
            raise ValueError(f"Invalid date '{text}'")

    # ISO timestamps
    if re.match(r'^\d{4}-\d{2}-\d{2}[T ]', text):
        try:
            return datetime.fromisoformat(text[:10]).date()
        except ValueError:
            pass

    cleaned = re.sub(r'\s+', ' ', text.replace('.', ''))
    for fmt in NAMED_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"Invalid date '{text}'")


def parse_time_value(raw: str) -> Optional[str]:
    """Normalize '6:30', '06.30', '0630', '6:30 am' and '18:30:00' to HH:MM."""
    text = (raw or '').strip()
    if not text:
        return None
    match = TIME_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid time '{text}'")

    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
    if meridiem:
        if not 1 <= hours <= 12:
            raise ValueError(f"Invalid time '{text}'")
        is_pm = meridiem.lower().startswith('p')
        hours = hours % 12 + (12 if is_pm else 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time '{text}'")
    return f'{hours:02d}:{minutes:02d}'


def parse_bool_value(raw: str, field_name: str) -> bool:
    text = (raw or '').strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid value '{raw.strip()}' for {field_name}")


def parse_choice_value(raw: str, field_name: str) -> Optional[str]:
    text = (raw or '').strip()
    if not text:
        return None
    value = normalize_choice(text, CHOICE_COLUMNS[field_name])
    if value is None:
        raise ValueError(f"Invalid value '{text}' for {field_name}")
    return value


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class CsvTransferService:

    @staticmethod
    def read_rows(csv_text: str) -> Tuple[List[str], List[Tuple[int, List[str]]]]:
        """
        Split CSV text into (header, [(line number, cells), ...]). Line numbers
        are physical lines of the file, so blank lines are skipped but still
        counted. The delimiter is whichever of ',', ';' or tab occurs most
        in the header line.
        """
        lines = csv_text.lstrip('\ufeff').splitlines()
        header_index = next((i for i, line in enumerate(lines) if line.strip()), None)
        if header_index is None:
            raise ValueError("CSV file is empty")

        header_line = lines[header_index]
        delimiter = max(CSV_DELIMITERS, key=lambda candidate: header_line.count(candidate))
        if header_line.count(delimiter) == 0:
            delimiter = ','

        reader = csv.reader(lines[header_index:], delimiter=delimiter)
        headers = [header.strip() for header in next(reader)]
        rows = []
        for line_num, row in enumerate(reader, start=header_index + 2):
            if not any(value.strip() for value in row):
                continue
            rows.append((line_num, row))
        return headers, rows

    @staticmethod
    def import_cycle_days(
        user_id: int,
        csv_text: str,
        cycle: Optional[Cycle] = None,
        temperature_unit: Optional[str] = None,
        date_order: Optional[str] = None,
        fallback_unit: str = FAHRENHEIT,
        max_rows: int = 400
    ) -> Dict[str, Any]:
        """
        Import daily entries from CSV text.

        Args:
            user_id: Owner of the cycle
            csv_text: File content, header row first
            cycle: Target cycle; a new cycle starting on the earliest imported
                date is created when None
            temperature_unit: Force the unit of the BBT column
            date_order: Force 'DMY' or 'MDY' for ambiguous numeric dates
            fallback_unit: Unit to assume when nothing else decides it
            max_rows: Upper bound on data rows

        Returns:
            Dict with the target cycle, saved entries, detection results and
            per-row errors ("Row N: ..." where N is the line in the file, header
            first)
        """
        headers, rows = CsvTransferService.read_rows(csv_text)
        if len(rows) > max_rows:
            raise ValueError(f"CSV file has {len(rows)} rows; the limit is {max_rows}")

        columns, bbt_header_unit = map_columns(headers)
        if 'date' not in columns:
            raise ValueError("CSV file must have a date column")

        def cell(row, field_name):
            index = columns.get(field_name)
            if index is None or index >= len(row):
                return ''
            return row[index]

        errors = []

        # Whole-file inference first
        temperatures = []
        for _, row in rows:
            try:
                value = parse_temperature_value(cell(row, 'bbt'))
            except ValueError:
                continue
            if value is not None:
                temperatures.append(value)

        column_units = [parse_unit_value(cell(row, 'temperature_unit')) for _, row in rows] \
            if 'temperature_unit' in columns else []

        unit, unit_source = detect_temperature_unit(
            temperatures,
            explicit_unit=temperature_unit,
            bbt_header_unit=bbt_header_unit,
            column_units=column_units,
            fallback_unit=fallback_unit
        )
        order, order_source = detect_date_order([cell(row, 'date') for _, row in rows], date_order)

        entries = []
        for row_num, row in rows:
            try:
                entry_date = parse_date_value(cell(row, 'date'), order)
                bbt = parse_temperature_value(cell(row, 'bbt'))
                if bbt is not None:
                    validate_bbt(bbt, unit)
                entries.append({
                    'row_num': row_num,
                    'entry_date': entry_date,
                    'bbt': bbt,
                    'bbt_time': parse_time_value(cell(row, 'bbt_time')),
                    'had_intercourse': parse_bool_value(cell(row, 'had_intercourse'), 'had_intercourse'),
                    'exclude_from_interpretation': parse_bool_value(
                        cell(row, 'exclude_from_interpretation'), 'exclude_from_interpretation'
                    ),
                    'cervical_appearance': parse_choice_value(cell(row, 'cervical_appearance'), 'cervical_appearance'),
                    'cervical_sensation': parse_choice_value(cell(row, 'cervical_sensation'), 'cervical_sensation'),
                    'menstrual_flow': parse_choice_value(cell(row, 'menstrual_flow'), 'menstrual_flow'),
                    'opk_result': parse_choice_value(cell(row, 'opk_result'), 'opk_result')
                })
            except ValueError as e:
                errors.append(f"Row {row_num}: {str(e)}")

        entries.sort(key=lambda entry: entry['entry_date'])

        result = {
            'cycle': None,
            'created_cycle': False,
            'count': 0,
            'created_count': 0,
            'updated_count': 0,
            'entries': [],
            'temperature_unit': unit,
            'temperature_unit_source': unit_source,
            'date_order': order,
            'date_order_source': order_source,
            'errors': errors
        }

        if not entries:
            return result

        if cycle is None:
            cycle = CycleService.create_cycle(user_id, entries[0]['entry_date'])
            result['created_cycle'] = True

        existing_numbers = {day.day_number for day in cycle.days}
        saved = []
        for entry in entries:
            row_num = entry.pop('row_num')
            try:
                cycle_day = CycleDayService.create_or_update_cycle_day(
                    cycle=cycle,
                    temperature_unit=unit,
                    **entry
                )
            except ValueError as e:
                errors.append(f"Row {row_num}: {str(e)}")
                continue

            if cycle_day.day_number in existing_numbers:
                result['updated_count'] += 1
            else:
                result['created_count'] += 1
                existing_numbers.add(cycle_day.day_number)
            saved.append(cycle_day)

        result['cycle'] = cycle
        result['count'] = len(saved)
        result['entries'] = saved
        logger.info(
            "Imported %s rows into cycle %s (unit=%s via %s, order=%s via %s, %s errors)",
            len(saved), cycle.id, unit, unit_source, order, order_source, len(errors)
        )
        return result

    @staticmethod
    def export_cycle_days(cycle: Cycle, unit: str) -> str:
        """A cycle's days as CSV, temperatures in `unit`. Readable by the importer."""
        days = CycleDay.query.filter_by(cycle_id=cycle.id).order_by(CycleDay.day_number.asc()).all()

        with io.StringIO() as output:
            csv_writer = csv.writer(output)
            csv_writer.writerow(EXPORT_COLUMNS)

            for day in days:
                bbt = convert_from_fahrenheit(day.bbt, unit)
                csv_writer.writerow([
                    day.date.strftime('%Y-%m-%d'),
                    day.day_number,
                    day.day_of_week,
                    f'{bbt:.2f}' if bbt is not None else '',
                    unit if bbt is not None else '',
                    day.bbt_time or '',
                    'true' if day.had_intercourse else 'false',
                    'true' if day.exclude_from_interpretation else 'false',
                    day.cervical_appearance or '',
                    day.cervical_sensation or '',
                    day.menstrual_flow or '',
                    day.opk_result or ''
                ])

            csv_content = output.getvalue()

        return csv_content
