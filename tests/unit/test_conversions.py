"""
Wire/edit conversion tests — dates, times, datetimes and colors.
"""

import random

import pytest

from core.models import ColorFieldConfig
from core.logic import (
    extract_temporal_parts,
    fme_date_to_input,
    input_to_fme_date,
    fme_time_to_input,
    input_to_fme_time,
    fme_datetime_to_input,
    input_to_fme_datetime,
    normalized_rgb_to_hex,
    hex_to_normalized_rgb,
)


class TestTemporalParts:
    def test_splits_fraction_and_offset(self):
        parts = extract_temporal_parts("20240115103045.125+02:00")
        assert parts.base == "20240115103045"
        assert parts.fraction == ".125"
        assert parts.offset == "+02:00"

    def test_zulu_offset(self):
        assert extract_temporal_parts("103045Z").offset == "Z"

    def test_empty_input(self):
        assert extract_temporal_parts(None) == ("", "", "")


class TestDateConversion:
    def test_wire_to_edit(self):
        assert fme_date_to_input("20240115") == "2024-01-15"

    @pytest.mark.parametrize("wire", ["2024011", "20241315", "20240100", "09990101", "abc"])
    def test_rejects_malformed(self, wire):
        assert fme_date_to_input(wire) == ""

    def test_edit_to_wire(self):
        assert input_to_fme_date("2024-01-15") == "20240115"
        assert input_to_fme_date("") == ""


class TestTimeConversion:
    def test_four_digits(self):
        assert fme_time_to_input("1030") == "10:30"

    def test_six_digits_with_suffixes(self):
        assert fme_time_to_input("103045.5+01:00") == "10:30:45"

    def test_seconds_default_on_way_back(self):
        assert input_to_fme_time("10:30") == "103000"

    def test_preserves_original_suffix(self):
        assert input_to_fme_time("10:31:00", original="103000.250Z") == "103100.250Z"

    def test_malformed_edit_value(self):
        assert input_to_fme_time("aa:bb") == ""


class TestDateTimeConversion:
    def test_wire_to_edit_with_seconds(self):
        assert fme_datetime_to_input("20240115103045") == "2024-01-15T10:30:45"

    def test_wire_to_edit_without_seconds(self):
        assert fme_datetime_to_input("202401151030") == "2024-01-15T10:30"

    def test_too_short(self):
        assert fme_datetime_to_input("2024011510") == ""

    def test_round_trip_with_seconds(self):
        for _ in range(20):
            wire = "%04d%02d%02d%02d%02d%02d" % (
                random.randint(1000, 9999), random.randint(1, 12), random.randint(1, 28),
                random.randint(0, 23), random.randint(0, 59), random.randint(0, 59),
            )
            assert input_to_fme_datetime(fme_datetime_to_input(wire)) == wire

    def test_round_trip_without_seconds_appends_zero_seconds(self):
        wire = "202401151030"
        assert input_to_fme_datetime(fme_datetime_to_input(wire)) == wire + "00"

    def test_reappends_original_fraction_and_offset(self):
        original = "20240115103045.5+02:00"
        edited = fme_datetime_to_input(original)
        assert input_to_fme_datetime(edited, original=original) == original

    def test_missing_time_part(self):
        assert input_to_fme_datetime("2024-01-15") == ""


class TestColorConversion:
    def test_rgb_to_hex(self):
        assert normalized_rgb_to_hex("1,0,0") == "#ff0000"

    def test_clamps_out_of_range(self):
        assert normalized_rgb_to_hex("1.5,-0.2,0") == "#ff0000"

    def test_malformed_returns_none(self):
        assert normalized_rgb_to_hex("red") is None
        assert normalized_rgb_to_hex("") is None

    def test_four_parts_default_to_cmyk(self):
        assert normalized_rgb_to_hex("0,0,0,1") == "#000000"

    def test_four_parts_with_alpha_are_rgba(self):
        config = ColorFieldConfig(space="rgb", alpha=True)
        assert normalized_rgb_to_hex("0,0,1,0.5", config) == "#0000ff"

    def test_hex_to_rgb(self):
        assert hex_to_normalized_rgb("#ff0000") == "1,0,0"

    def test_hex_to_cmyk(self):
        assert hex_to_normalized_rgb("#000000", ColorFieldConfig(space="cmyk")) == "0,0,0,1"

    @pytest.mark.parametrize("value", ["#fff", "12345g", "", None])
    def test_invalid_hex(self, value):
        assert hex_to_normalized_rgb(value) is None

    def test_hex_round_trip(self):
        for _ in range(50):
            hex_value = "#%06x" % random.randint(0, 0xFFFFFF)
            assert normalized_rgb_to_hex(hex_to_normalized_rgb(hex_value.upper())) == hex_value
