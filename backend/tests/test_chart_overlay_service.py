import pytest

from bbt_tracker.services.chart_overlay_service import ChartOverlayService


@pytest.fixture
def chart_data():
    return {
        "min_day": 1,
        "max_day": 4,
        "label_rows": [
            {"day_number": 1, "date_label": "30/10", "week_day": "Th", "time_stamp": {"hours": "06", "minutes": "30"}},
            {"day_number": 2, "date_label": "31", "week_day": "F", "time_stamp": None},
            {"day_number": 3, "date_label": "1/11", "week_day": "Sat", "time_stamp": None},
            {"day_number": 4, "date_label": "2", "week_day": "Sun", "time_stamp": None},
        ],
    }


class TestGeometry:
    def test_cell_width(self):
        assert ChartOverlayService.cell_width(1, 4, 400) == 100

    def test_cell_width_without_measurement(self):
        assert ChartOverlayService.cell_width(1, 4, 0) == 0.0

    def test_columns(self):
        columns = ChartOverlayService.build_columns(1, 4, 50, 400)
        assert [column["left"] for column in columns] == [50, 150, 250, 350]
        assert all(column["width"] == 100 for column in columns)

    def test_crosshair_is_centred_in_column(self):
        assert ChartOverlayService.crosshair_x(2, 1, 4, 50, 400) == 200

    def test_crosshair_outside_range(self):
        assert ChartOverlayService.crosshair_x(5, 1, 4, 50, 400) is None
        assert ChartOverlayService.crosshair_x(None, 1, 4, 50, 400) is None


class TestBuildOverlay:
    def test_header_rows(self, chart_data):
        overlay = ChartOverlayService.build_overlay(chart_data, plot_offset=50, plot_width=400)

        assert overlay["measured"] is True
        assert overlay["label_column_width"] == 50
        assert overlay["padding_top"] == 108
        assert [row["title"] for row in overlay["header_rows"]] == ["Date", "Week Day", "Cycle Day"]
        assert [row["top"] for row in overlay["header_rows"]] == [0, 36, 72]
        assert [cell["value"] for cell in overlay["header_rows"][0]["cells"]] == ["30/10", "31", "1/11", "2"]
        assert [cell["value"] for cell in overlay["header_rows"][2]["cells"]] == ["1", "2", "3", "4"]

    def test_time_stamp_row_needs_plot_top_and_height(self, chart_data):
        overlay = ChartOverlayService.build_overlay(chart_data, plot_offset=50, plot_width=400)
        assert overlay["time_stamp_row"] is None

        overlay = ChartOverlayService.build_overlay(
            chart_data, plot_offset=50, plot_width=400, plot_top=20, chart_height=350
        )
        row = overlay["time_stamp_row"]
        assert row["top"] == 370
        assert row["height"] == 48
        assert row["cells"][0]["value"] == {"hours": "06", "minutes": "30"}

    def test_hovered_day(self, chart_data):
        overlay = ChartOverlayService.build_overlay(
            chart_data, plot_offset=50, plot_width=400, hovered_day=3
        )
        assert overlay["crosshair"] == {"day_number": 3, "x": 300, "top": 0, "extra_height": 48}
        hovered = [cell["day_number"] for cell in overlay["header_rows"][1]["cells"] if cell["hovered"]]
        assert hovered == [3]

    def test_unmeasured_chart(self, chart_data):
        overlay = ChartOverlayService.build_overlay(
            chart_data, plot_offset=0, plot_width=0, plot_top=20, chart_height=350, hovered_day=2
        )
        assert overlay["measured"] is False
        assert overlay["header_rows"] == []
        assert overlay["time_stamp_row"] is None
        assert overlay["crosshair"] is None
