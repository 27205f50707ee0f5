import pytest

from bbt_tracker.services.cycle_constants import CELSIUS, FAHRENHEIT
from bbt_tracker.utils.temperature import (
    celsius_to_fahrenheit,
    convert_from_fahrenheit,
    convert_to_fahrenheit_for_storage,
    fahrenheit_to_celsius,
    format_temperature,
    unit_symbol,
    validate_bbt,
)


class TestConversions:
    def test_fahrenheit_to_celsius(self):
        assert fahrenheit_to_celsius(98.6) == pytest.approx(37.0)

    def test_celsius_to_fahrenheit(self):
        assert celsius_to_fahrenheit(36.5) == pytest.approx(97.7)

    def test_none_passes_through(self):
        assert fahrenheit_to_celsius(None) is None
        assert celsius_to_fahrenheit(None) is None
        assert convert_from_fahrenheit(None, CELSIUS) is None

    def test_storage_is_fahrenheit(self):
        assert convert_to_fahrenheit_for_storage(37.0, CELSIUS) == pytest.approx(98.6)
        assert convert_to_fahrenheit_for_storage(97.9, FAHRENHEIT) == 97.9

    def test_display_in_fahrenheit_is_unchanged(self):
        assert convert_from_fahrenheit(97.9, FAHRENHEIT) == 97.9


class TestFormatting:
    def test_unit_symbol(self):
        assert unit_symbol(CELSIUS) == "°C"
        assert unit_symbol(FAHRENHEIT) == "°F"

    def test_format_fahrenheit(self):
        assert format_temperature(97.5, FAHRENHEIT) == "97.50°F"

    def test_format_celsius(self):
        assert format_temperature(97.5, CELSIUS) == "36.39°C"

    def test_format_missing(self):
        assert format_temperature(None, CELSIUS) is None


class TestValidateBBT:
    def test_valid_values_are_returned_as_float(self):
        assert validate_bbt("97.8", FAHRENHEIT) == 97.8
        assert validate_bbt(36.4, CELSIUS) == 36.4

    def test_range_bounds_are_inclusive(self):
        assert validate_bbt(35, CELSIUS) == 35.0
        assert validate_bbt(40, CELSIUS) == 40.0
        assert validate_bbt(95, FAHRENHEIT) == 95.0
        assert validate_bbt(105, FAHRENHEIT) == 105.0

    def test_celsius_out_of_range(self):
        with pytest.raises(ValueError, match="between 35°C and 40°C"):
            validate_bbt(34.9, CELSIUS)

    def test_fahrenheit_out_of_range(self):
        with pytest.raises(ValueError, match="between 95°F and 105°F"):
            validate_bbt(36.5, FAHRENHEIT)

    @pytest.mark.parametrize("value", ["abc", None, float("nan")])
    def test_not_a_number(self, value):
        with pytest.raises(ValueError, match="valid number"):
            validate_bbt(value, FAHRENHEIT)
