"""
Chart Overlay Service

Positions the table drawn around the temperature chart so each column lines
up with a day on the chart's x-axis. The chart library computes its own plot
area; the client measures it (offset and width relative to the chart
container, plus the plot top and rendered SVG height) and the overlay is laid
out from those measurements.
"""

from typing import Dict, Any, List, Optional

from bbt_tracker.services.cycle_constants import (
    HEADER_ROW_HEIGHT,
    HEADER_ROWS,
    TIMESTAMP_ROW_HEIGHT
)


class ChartOverlayService:

    @staticmethod
    def cell_width(min_day: int, max_day: int, plot_width: float) -> float:
        num_days = max_day - min_day + 1
        if num_days <= 0 or plot_width <= 0:
            return 0.0
        return plot_width / num_days

    @staticmethod
    def crosshair_x(day_number: int, min_day: int, max_day: int,
                    plot_offset: float, plot_width: float) -> Optional[float]:
        """Horizontal centre of a day's column, or None outside the range."""
        if day_number is None or not (min_day <= day_number <= max_day):
            return None
        width = ChartOverlayService.cell_width(min_day, max_day, plot_width)
        if width <= 0:
            return None
        return plot_offset + (day_number - min_day + 0.5) * width

    @staticmethod
    def build_columns(min_day: int, max_day: int, plot_offset: float,
                      plot_width: float) -> List[Dict[str, Any]]:
        width = ChartOverlayService.cell_width(min_day, max_day, plot_width)
        if width <= 0:
            return []
        return [
            {
                'day_number': min_day + index,
                'left': plot_offset + index * width,
                'width': width
            }
            for index in range(max_day - min_day + 1)
        ]

    @staticmethod
    def build_overlay(
        chart_data: Dict[str, Any],
        plot_offset: float,
        plot_width: float,
        plot_top: float = 0.0,
        chart_height: float = 0.0,
        hovered_day: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Lay out the overlay table for a chart.

        Args:
            chart_data: Output of BBTChartService.build_chart_data
            plot_offset: Plot area left edge relative to the container (px)
            plot_width: Plot area width (px)
            plot_top: Plot area top relative to the container (px)
            chart_height: Rendered chart SVG height (px)
            hovered_day: Day number under the pointer, if any

        Returns:
            Dict with header rows, the time stamp row, columns and crosshair.
            Nothing is laid out until the plot area has a width.
        """
        min_day = chart_data['min_day']
        max_day = chart_data['max_day']
        columns = ChartOverlayService.build_columns(min_day, max_day, plot_offset, plot_width)
        labels = {row['day_number']: row for row in chart_data.get('label_rows', [])}

        header_padding = HEADER_ROW_HEIGHT * len(HEADER_ROWS)
        overlay = {
            'measured': bool(columns),
            'label_column_width': plot_offset,
            'padding_top': header_padding,
            'padding_bottom': TIMESTAMP_ROW_HEIGHT,
            'header_rows': [],
            'time_stamp_row': None,
            'crosshair': None
        }
        if not columns:
            return overlay

        cell_values = {
            'Date': lambda row: row.get('date_label', ''),
            'Week Day': lambda row: row.get('week_day', ''),
            'Cycle Day': lambda row: str(row.get('day_number', ''))
        }

        for row_index, title in enumerate(HEADER_ROWS):
            top = row_index * HEADER_ROW_HEIGHT
            overlay['header_rows'].append({
                'title': title,
                'top': top,
                'height': HEADER_ROW_HEIGHT,
                'cells': [
                    {
                        'day_number': column['day_number'],
                        'left': column['left'],
                        'width': column['width'],
                        'value': cell_values[title](labels.get(column['day_number'], {})),
                        'hovered': column['day_number'] == hovered_day
                    }
                    for column in columns
                ]
            })

        # Sits directly under the chart, so it needs both measurements
        if plot_top > 0 and chart_height > 0:
            overlay['time_stamp_row'] = {
                'title': 'Time Stamp',
                'top': plot_top + chart_height,
                'height': TIMESTAMP_ROW_HEIGHT,
                'cells': [
                    {
                        'day_number': column['day_number'],
                        'left': column['left'],
                        'width': column['width'],
                        'value': labels.get(column['day_number'], {}).get('time_stamp'),
                        'hovered': column['day_number'] == hovered_day
                    }
                    for column in columns
                ]
            }

        x = ChartOverlayService.crosshair_x(hovered_day, min_day, max_day, plot_offset, plot_width)
        if x is not None:
            overlay['crosshair'] = {
                'day_number': hovered_day,
                'x': x,
                'top': 0,
                'extra_height': TIMESTAMP_ROW_HEIGHT
            }

        return overlay
