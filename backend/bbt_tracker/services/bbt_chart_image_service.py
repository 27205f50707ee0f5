"""
BBT Chart Image Service

Renders a cycle's temperature chart to PNG for sharing and printing.
Uses the same derived data as the interactive chart.
"""

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import matplotlib.transforms as transforms
from matplotlib.ticker import FormatStrFormatter
import numpy as np
from io import BytesIO
from typing import Dict, Any

from bbt_tracker.services.cycle_constants import (
    DASHED_COLOR,
    INTERCOURSE_COLOR,
    SOLID_COLOR
)


class BBTChartImageService:
    """Service for rendering BBT charts as images."""

    @staticmethod
    def generate_chart_image(chart_data: Dict[str, Any]) -> bytes:
        """
        Render chart data from BBTChartService.build_chart_data.

        Returns:
            PNG image as bytes
        """
        if not chart_data.get('has_temperature_data'):
            return BBTChartImageService._generate_no_data_chart(
                'No temperature data recorded yet.'
            )

        min_day = chart_data['min_day']
        max_day = chart_data['max_day']
        num_days = max_day - min_day + 1
        num_solid = chart_data['num_solid_segments']
        y_axis = chart_data['y_axis']

        fig_width = max(10, num_days * 0.4)
        fig, ax = plt.subplots(figsize=(fig_width, 6))

        for index, item in enumerate(chart_data['series']):
            xs = np.array([point['x'] for point in item['data']])
            ys = np.array([point['y'] for point in item['data']])
            if index < num_solid:
                ax.plot(xs, ys, color=SOLID_COLOR, linewidth=2, zorder=2)
            else:
                ax.plot(xs, ys, color=DASHED_COLOR, linewidth=2, linestyle=(0, (5, 5)), zorder=1)

        # One marker per reading, coloured by its status
        tooltips = chart_data.get('tooltips', {})
        for point in chart_data['points']:
            info = tooltips.get(point['day_number'], {})
            if info.get('had_intercourse'):
                color = INTERCOURSE_COLOR
            elif point['is_excluded']:
                color = DASHED_COLOR
            else:
                color = SOLID_COLOR
            ax.scatter(point['x'], point['y'], s=45, color=color,
                       edgecolors='white', linewidths=1.5, zorder=3)

        ax.set_xlim(chart_data['x_axis']['min'], chart_data['x_axis']['max'])
        ax.set_ylim(y_axis['min'], y_axis['max'])
        ax.set_yticks(np.linspace(y_axis['min'], y_axis['max'], y_axis['tick_amount'] + 1))
        ax.yaxis.set_major_formatter(
            FormatStrFormatter(f"%.{y_axis['decimals_in_float']}f")
        )
        ax.set_ylabel(y_axis['title'], fontsize=12, fontweight='bold', color='#002142')

        # Date / week day / cycle day header above the plot
        rows = chart_data['label_rows']
        ax.xaxis.tick_top()
        ax.set_xticks([row['day_number'] for row in rows])
        ax.set_xticklabels(
            [f"{row['date_label']}\n{row['week_day']}\n{row['day_number']}" for row in rows],
            fontsize=8
        )
        ax.tick_params(axis='x', length=0)

        # Time stamps under the plot
        below = transforms.blended_transform_factory(ax.transData, ax.transAxes)
        for row in rows:
            stamp = row.get('time_stamp')
            if stamp:
                ax.text(row['day_number'], -0.04, f"{stamp['hours']}\n{stamp['minutes']}",
                        transform=below, ha='center', va='top', fontsize=7, color='#92400e')

        ax.grid(axis='y', alpha=0.3)
        ax.grid(axis='x', visible=False)
        for spine in ('right', 'bottom'):
            ax.spines[spine].set_visible(False)

        cycle = chart_data['cycle']
        title = f"Cycle #{cycle['cycle_number']} - Started {cycle['started']}"
        if cycle.get('ended'):
            title += f" - Ended {cycle['ended']}"
        fig.suptitle(title, fontsize=13, fontweight='bold')

        plt.tight_layout()

        # Save to bytes
        buffer = BytesIO()
        plt.savefig(buffer, format='png', dpi=100, bbox_inches='tight')
        buffer.seek(0)
        plt.close(fig)

        return buffer.getvalue()

    @staticmethod
    def _generate_no_data_chart(message: str) -> bytes:
        """Generate a placeholder chart when no data is available."""
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.text(0.5, 0.5, message,
                horizontalalignment='center',
                verticalalignment='center',
                fontsize=14, color='gray',
                transform=ax.transAxes)
        ax.axis('off')

        buffer = BytesIO()
        plt.savefig(buffer, format='png', dpi=100, bbox_inches='tight')
        buffer.seek(0)
        plt.close(fig)

        return buffer.getvalue()
