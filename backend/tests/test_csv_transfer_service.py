from datetime import date

import pytest

from bbt_tracker.services.csv_transfer_service import (
    CsvTransferService,
    DAY_FIRST,
    MONTH_FIRST,
    detect_date_order,
    detect_temperature_unit,
    header_unit,
    map_columns,
    parse_bool_value,
    parse_choice_value,
    parse_date_value,
    parse_temperature_value,
    parse_time_value,
)
from bbt_tracker.services.cycle_constants import CELSIUS, FAHRENHEIT


class TestColumns:
    def test_aliases_are_matched_loosely(self):
        columns, unit = map_columns(["Date", "Temp", "Time Taken", "Sex", "Cervical Fluid", "Flow", "OPK"])
        assert columns == {
            "date": 0,
            "bbt": 1,
            "bbt_time": 2,
            "had_intercourse": 3,
            "cervical_appearance": 4,
            "menstrual_flow": 5,
            "opk_result": 6,
        }
        assert unit is None

    @pytest.mark.parametrize("header,expected", [
        ("BBT (°C)", CELSIUS),
        ("Temperature (F)", FAHRENHEIT),
        ("temp_c", CELSIUS),
        ("Basal Temperature Fahrenheit", FAHRENHEIT),
        ("BBT", None),
    ])
    def test_unit_in_header(self, header, expected):
        columns, unit = map_columns(["date", header])
        assert columns["bbt"] == 1
        assert unit == expected

    def test_header_unit_ignores_other_words(self):
        assert header_unit("Date") is None


class TestTemperatureUnit:
    def test_requested_unit_wins(self):
        assert detect_temperature_unit([97.5], explicit_unit=CELSIUS, bbt_header_unit=FAHRENHEIT) == (
            CELSIUS, "requested"
        )

    def test_header_unit_beats_values(self):
        assert detect_temperature_unit([36.5], bbt_header_unit=FAHRENHEIT) == (FAHRENHEIT, "header")

    def test_single_unit_column(self):
        assert detect_temperature_unit([97.5], column_units=[CELSIUS, None, CELSIUS]) == (
            CELSIUS, "unit_column"
        )

    def test_median_decides(self):
        assert detect_temperature_unit([36.4, 36.5, 97.9]) == (CELSIUS, "values")
        assert detect_temperature_unit([97.4, 97.6, 36.5]) == (FAHRENHEIT, "values")

    def test_fallback_without_values(self):
        assert detect_temperature_unit([], fallback_unit=CELSIUS) == (CELSIUS, "preference")

    def test_temperature_values(self):
        assert parse_temperature_value("36,55") == 36.55
        assert parse_temperature_value("97.8°F") == 97.8
        assert parse_temperature_value(" ") is None
        with pytest.raises(ValueError, match="Invalid temperature"):
            parse_temperature_value("warm")


class TestDates:
    def test_day_first_evidence(self):
        assert detect_date_order(["01/10/2025", "24/10/2025"]) == (DAY_FIRST, "values")

    def test_month_first_evidence(self):
        assert detect_date_order(["10/01/2025", "10/24/2025"]) == (MONTH_FIRST, "values")

    def test_conflicting_evidence(self):
        with pytest.raises(ValueError, match="day-first and month-first"):
            detect_date_order(["24/10/2025", "10/25/2025"])

    def test_no_evidence(self):
        assert detect_date_order(["01/02/2025"]) == (MONTH_FIRST, "default")
        assert detect_date_order(["01/02/2025"], DAY_FIRST) == (DAY_FIRST, "requested")

    def test_iso_dates_carry_no_evidence(self):
        assert detect_date_order(["2025-10-24"]) == (MONTH_FIRST, "default")

    @pytest.mark.parametrize("value,order,expected", [
        ("2025-10-24", MONTH_FIRST, date(2025, 10, 24)),
        ("2025/10/24", DAY_FIRST, date(2025, 10, 24)),
        ("2025-10-24T06:30:00", MONTH_FIRST, date(2025, 10, 24)),
        ("24/10/2025", DAY_FIRST, date(2025, 10, 24)),
        ("10/24/2025", MONTH_FIRST, date(2025, 10, 24)),
        ("24.10.25", DAY_FIRST, date(2025, 10, 24)),
        ("Oct 24 2025", MONTH_FIRST, date(2025, 10, 24)),
        ("October 24, 2025", MONTH_FIRST, date(2025, 10, 24)),
        ("24 Oct 2025", MONTH_FIRST, date(2025, 10, 24)),
    ])
    def test_parse_date_value(self, value, order, expected):
        assert parse_date_value(value, order) == expected

    @pytest.mark.parametrize("value", ["", "31/02/2025", "someday"])
    def test_invalid_dates(self, value):
        with pytest.raises(ValueError):
            parse_date_value(value, DAY_FIRST)


class TestCellValues:
    @pytest.mark.parametrize("value,expected", [
        ("6:30", "06:30"),
        ("06.30", "06:30"),
        ("0630", "06:30"),
        ("6:30 am", "06:30"),
        ("12:15 AM", "00:15"),
        ("6:30 PM", "18:30"),
        ("18:30:00", "18:30"),
        ("", None),
    ])
    def test_times(self, value, expected):
        assert parse_time_value(value) == expected

    @pytest.mark.parametrize("value", ["25:00", "6:75", "13:00 pm", "early"])
    def test_invalid_times(self, value):
        with pytest.raises(ValueError, match="Invalid time"):
            parse_time_value(value)

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("yes", True), ("Y", True), ("x", True), ("TRUE", True),
        ("0", False), ("no", False), ("n", False), ("", False), ("false", False),
    ])
    def test_booleans(self, value, expected):
        assert parse_bool_value(value, "had_intercourse") is expected

    def test_invalid_boolean(self):
        with pytest.raises(ValueError, match="had_intercourse"):
            parse_bool_value("maybe", "had_intercourse")

    def test_choices(self):
        assert parse_choice_value("egg white", "cervical_appearance") == "EGGWHITE"
        assert parse_choice_value("Very-Heavy", "menstrual_flow") == "VERY_HEAVY"
        assert parse_choice_value("", "opk_result") is None
        with pytest.raises(ValueError, match="opk_result"):
            parse_choice_value("blue", "opk_result")


class TestReadRows:
    def test_semicolon_delimited(self):
        header, rows = CsvTransferService.read_rows("Date;BBT\n24.10.2025;36,55\n\n")
        assert header == ["Date", "BBT"]
        assert rows == [(2, ["24.10.2025", "36,55"])]

    def test_blank_lines_keep_line_numbers(self):
        _, rows = CsvTransferService.read_rows("date,bbt\n2025-10-01,97.5\n\n  \n2025-10-03,97.6\n")
        assert [line_num for line_num, _ in rows] == [2, 5]

    def test_byte_order_mark_is_dropped(self):
        header, _ = CsvTransferService.read_rows("\ufeffdate,bbt\n2025-10-24,97.5\n")
        assert header[0] == "date"

    def test_empty_file(self):
        with pytest.raises(ValueError, match="empty"):
            CsvTransferService.read_rows("\n\n")
