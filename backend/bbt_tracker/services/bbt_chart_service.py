"""
BBT Chart Service

Derives the data behind a cycle's temperature chart: the plotted series
(solid runs of included readings, dashed connectors around excluded ones),
series styling and discrete markers for the chart library, axis ranges, and
the per-day label rows drawn in the table around the plot.
"""

import math
from typing import Dict, Any, List, Optional, Tuple

import numpy as np

from bbt_tracker.services.cycle_constants import (
    CELSIUS,
    DEFAULT_CHART_DAYS,
    DEFAULT_Y_RANGES,
    FAHRENHEIT,
    Y_TICK_STEP,
    MIN_Y_TICKS,
    MAX_Y_TICKS,
    SOLID_COLOR,
    DASHED_COLOR,
    INTERCOURSE_COLOR,
    MARKER_STROKE_COLOR,
    MARKER_SIZE,
    STROKE_WIDTH,
    DASH_LENGTH
)
from bbt_tracker.utils.dates import (
    date_for_day_number,
    format_date,
    format_date_long,
    get_day_of_week,
    get_day_of_week_abbreviation
)
from bbt_tracker.utils.temperature import convert_from_fahrenheit, format_temperature, unit_symbol


class BBTChartService:
    """Service for deriving BBT chart data for a cycle."""

    @staticmethod
    def bbt_days(days) -> List[Any]:
        """Days that carry a temperature reading."""
        return [day for day in days if day.bbt is not None]

    @staticmethod
    def display_day_range(cycle) -> Dict[str, int]:
        """
        Day numbers shown on the x-axis.

        A running cycle is padded to the default length and grows past it
        once more days are recorded; an ended cycle shrinks to what was recorded.
        """
        recorded_max_day = max((day.day_number for day in cycle.days), default=1)

        if cycle.end_date:
            max_day = max(recorded_max_day, 1)
        else:
            max_day = max(DEFAULT_CHART_DAYS, recorded_max_day)

        return {'min_day': 1, 'max_day': max_day}

    @staticmethod
    def build_points(days, day_range: Dict[str, int], unit: str) -> List[Dict[str, Any]]:
        """One point per day in range with a reading, y in the display unit."""
        days_by_number = {day.day_number: day for day in BBTChartService.bbt_days(days)}

        points = []
        for day_number in range(day_range['min_day'], day_range['max_day'] + 1):
            day = days_by_number.get(day_number)
            if day is None:
                continue
            points.append({
                'x': day_number,
                'y': round(convert_from_fahrenheit(day.bbt, unit), 2),
                'is_excluded': bool(day.exclude_from_interpretation),
                'day_number': day_number
            })
        return points

    @staticmethod
    def segment_points(points: List[Dict[str, Any]]) -> Tuple[List[List[Dict]], List[List[Dict]]]:
        """
        Split ordered points into solid and dashed segments.

        Consecutive included points form a solid segment. Each excluded point
        breaks the solid line and is joined to its neighbours by two-point
        dashed segments. A connector shared by two adjacent excluded points is
        emitted once.
        """
        solid_segments = []
        dashed_segments = []
        seen_dashed = set()
        current_solid = []

        def add_dashed(start, end):
            key = (start['x'], start['y'], end['x'], end['y'])
            if key in seen_dashed:
                return
            seen_dashed.add(key)
            dashed_segments.append([
                {'x': start['x'], 'y': start['y']},
                {'x': end['x'], 'y': end['y']}
            ])

        for index, point in enumerate(points):
            prev_point = points[index - 1] if index > 0 else None
            next_point = points[index + 1] if index < len(points) - 1 else None

            if point['is_excluded']:
                if current_solid:
                    solid_segments.append(current_solid)
                    current_solid = []
                if prev_point:
                    add_dashed(prev_point, point)
                if next_point:
                    add_dashed(point, next_point)
            else:
                current_solid.append({'x': point['x'], 'y': point['y']})
                if not next_point or next_point['is_excluded']:
                    solid_segments.append(current_solid)
                    current_solid = []

        return solid_segments, dashed_segments

    @staticmethod
    def build_series(solid_segments, dashed_segments) -> List[Dict[str, Any]]:
        series = [
            {'name': f'BBT-{index}', 'data': segment}
            for index, segment in enumerate(solid_segments)
        ]
        series.extend(
            {'name': f'Dashed-{index}', 'data': segment}
            for index, segment in enumerate(dashed_segments)
        )
        return series

    @staticmethod
    def series_styling(num_solid: int, num_dashed: int) -> Dict[str, List]:
        """Per-series colors, stroke widths, dash arrays and marker sizes."""
        return {
            'colors': [SOLID_COLOR] * num_solid + [DASHED_COLOR] * num_dashed,
            'stroke_widths': [STROKE_WIDTH] * (num_solid + num_dashed),
            'dash_array': [0] * num_solid + [DASH_LENGTH] * num_dashed,
            # dashed series rely on discrete markers
            'marker_sizes': [MARKER_SIZE] * num_solid + [0] * num_dashed
        }

    @staticmethod
    def _locate_in_series(series, day_number: int, indices) -> List[Tuple[int, int]]:
        locations = []
        for series_index in indices:
            for point_index, point in enumerate(series[series_index]['data']):
                if point['x'] == day_number:
                    locations.append((series_index, point_index))
        return locations

    @staticmethod
    def build_discrete_markers(series, num_solid: int, days) -> List[Dict[str, Any]]:
        """
        Point-level marker overrides, in drawing order: excluded points on
        dashed connectors (grey), included points on dashed connectors (blue),
        then intercourse days (pink) which win over both.
        """
        solid_indices = range(0, num_solid)
        dashed_indices = range(num_solid, len(series))
        markers = []

        def marker(location, color):
            return {
                'series_index': location[0],
                'data_point_index': location[1],
                'fill_color': color,
                'stroke_color': MARKER_STROKE_COLOR,
                'size': MARKER_SIZE
            }

        with_bbt = BBTChartService.bbt_days(days)

        for day in with_bbt:
            if day.exclude_from_interpretation:
                for location in BBTChartService._locate_in_series(series, day.day_number, dashed_indices):
                    markers.append(marker(location, DASHED_COLOR))

        for day in with_bbt:
            if not day.exclude_from_interpretation:
                for location in BBTChartService._locate_in_series(series, day.day_number, dashed_indices):
                    markers.append(marker(location, SOLID_COLOR))

        for day in with_bbt:
            if not day.had_intercourse:
                continue
            solid_locations = BBTChartService._locate_in_series(series, day.day_number, solid_indices)
            if solid_locations:
                markers.append(marker(solid_locations[0], INTERCOURSE_COLOR))
            for location in BBTChartService._locate_in_series(series, day.day_number, dashed_indices):
                markers.append(marker(location, INTERCOURSE_COLOR))

        return markers

    @staticmethod
    def y_axis_range(series, unit: str) -> Dict[str, float]:
        """Default range for the unit, widened to every plotted value."""
        default_min, default_max = DEFAULT_Y_RANGES.get(unit, DEFAULT_Y_RANGES[FAHRENHEIT])
        temperatures = np.array([point['y'] for item in series for point in item['data']], dtype=float)

        if temperatures.size == 0:
            return {'min': default_min, 'max': default_max}

        return {
            'min': float(min(default_min, temperatures.min())),
            'max': float(max(default_max, temperatures.max()))
        }

    @staticmethod
    def y_axis_config(y_range: Dict[str, float], unit: str) -> Dict[str, Any]:
        # One tick per 0.1 degree, clamped
        ticks = math.floor((y_range['max'] - y_range['min']) / Y_TICK_STEP + 0.5)
        tick_amount = min(max(ticks, MIN_Y_TICKS), MAX_Y_TICKS)
        return {
            'min': y_range['min'],
            'max': y_range['max'],
            'tick_amount': tick_amount,
            'decimals_in_float': 1 if unit == CELSIUS else 2,
            'title': f'Temperature ({unit_symbol(unit)})'
        }

    @staticmethod
    def x_axis_config(day_range: Dict[str, int]) -> Dict[str, Any]:
        # Half a day of padding so the first and last points sit mid-cell
        return {
            'type': 'numeric',
            'min': day_range['min_day'] - 0.5,
            'max': day_range['max_day'] + 0.5,
            'tick_amount': day_range['max_day'] - day_range['min_day'],
            'position': 'top'
        }

    @staticmethod
    def build_label_rows(cycle, day_range: Dict[str, int]) -> List[Dict[str, Any]]:
        """
        Date, weekday, cycle-day and time-stamp cells for every displayed day.
        The date shows the month on the first day and whenever it changes.
        """
        bbt_by_number = {day.day_number: day for day in BBTChartService.bbt_days(cycle.days)}
        rows = []
        previous_month = None

        for day_number in range(day_range['min_day'], day_range['max_day'] + 1):
            day_date = date_for_day_number(cycle.start_date, day_number)

            if day_number == day_range['min_day'] or (
                previous_month is not None and day_date.month != previous_month
            ):
                date_label = f'{day_date.day}/{day_date.month}'
            else:
                date_label = f'{day_date.day}'
            previous_month = day_date.month

            rows.append({
                'day_number': day_number,
                'date': day_date.isoformat(),
                'date_label': date_label,
                'week_day': get_day_of_week_abbreviation(get_day_of_week(day_date)),
                'time_stamp': BBTChartService.split_time(
                    getattr(bbt_by_number.get(day_number), 'bbt_time', None)
                )
            })
        return rows

    @staticmethod
    def split_time(bbt_time: Optional[str]) -> Optional[Dict[str, str]]:
        if not bbt_time:
            return None
        hours, _, minutes = bbt_time.partition(':')
        return {'hours': hours, 'minutes': minutes}

    @staticmethod
    def build_observation_rows(cycle, day_range: Dict[str, int]) -> List[Dict[str, Any]]:
        days_by_number = {day.day_number: day for day in cycle.days}
        rows = []
        for day_number in range(day_range['min_day'], day_range['max_day'] + 1):
            day = days_by_number.get(day_number)
            rows.append({
                'day_number': day_number,
                'menstrual_flow': day.menstrual_flow if day else None,
                'cervical_appearance': day.cervical_appearance if day else None,
                'cervical_sensation': day.cervical_sensation if day else None,
                'opk_result': day.opk_result if day else None,
                'had_intercourse': bool(day.had_intercourse) if day else False
            })
        return rows

    @staticmethod
    def build_tooltips(days, unit: str) -> Dict[int, Dict[str, Any]]:
        tooltips = {}
        for day in BBTChartService.bbt_days(days):
            tooltips[day.day_number] = {
                'date': format_date(day.date),
                'day_of_week': day.day_of_week,
                'temperature': format_temperature(day.bbt, unit),
                'time': day.bbt_time,
                'had_intercourse': bool(day.had_intercourse),
                'excluded': bool(day.exclude_from_interpretation)
            }
        return tooltips

    @staticmethod
    def build_chart_data(cycle, unit: str, previous_cycle=None, next_cycle=None) -> Dict[str, Any]:
        """
        Everything the chart page needs for one cycle.

        Args:
            cycle: Cycle with its days loaded
            unit: User's temperature unit
            previous_cycle / next_cycle: Neighbouring cycles for navigation

        Returns:
            Dict with series, styling, markers, axes, label rows and tooltips
        """
        day_range = BBTChartService.display_day_range(cycle)
        points = BBTChartService.build_points(cycle.days, day_range, unit)
        solid_segments, dashed_segments = BBTChartService.segment_points(points)
        series = BBTChartService.build_series(solid_segments, dashed_segments)
        num_solid = len(solid_segments)
        num_dashed = len(dashed_segments)

        y_range = BBTChartService.y_axis_range(series, unit)

        return {
            'cycle': {
                'id': cycle.id,
                'cycle_number': cycle.cycle_number,
                'is_active': cycle.is_active,
                'start_date': cycle.start_date.isoformat(),
                'end_date': cycle.end_date.isoformat() if cycle.end_date else None,
                'started': format_date_long(cycle.start_date),
                'ended': format_date_long(cycle.end_date) if cycle.end_date else None
            },
            'temperature_unit': unit,
            'min_day': day_range['min_day'],
            'max_day': day_range['max_day'],
            'has_temperature_data': bool(points),
            'points': points,
            'series': series,
            'num_solid_segments': num_solid,
            'num_dashed_segments': num_dashed,
            'styling': BBTChartService.series_styling(num_solid, num_dashed),
            'discrete_markers': BBTChartService.build_discrete_markers(series, num_solid, cycle.days),
            'x_axis': BBTChartService.x_axis_config(day_range),
            'y_axis': BBTChartService.y_axis_config(y_range, unit),
            'label_rows': BBTChartService.build_label_rows(cycle, day_range),
            'observation_rows': BBTChartService.build_observation_rows(cycle, day_range),
            'tooltips': BBTChartService.build_tooltips(cycle.days, unit),
            'navigation': {
                'previous': BBTChartService._cycle_link(previous_cycle),
                'next': BBTChartService._cycle_link(next_cycle)
            }
        }

    @staticmethod
    def _cycle_link(cycle) -> Optional[Dict[str, int]]:
        if cycle is None:
            return None
        return {'id': cycle.id, 'cycle_number': cycle.cycle_number}
