"""
Field-level validation tests.
"""

import pytest

from core.models import (
    DynamicFieldConfig,
    FieldErrorCode,
    FormFieldType,
    TextOrFileValue,
    VisibilityState,
)
from services import validate_date_time_format
from tests.factories.model_factories import make_uploaded_file


def _field(name="f", type=FormFieldType.TEXT, **kwargs):
    return DynamicFieldConfig(name=name, label=name, type=type, **kwargs)


class TestRequired:
    @pytest.mark.parametrize("value", [None, "", "   ", []])
    def test_empty_required(self, validator, value):
        assert validator.validate_field(_field(required=True), value) is FieldErrorCode.REQUIRED

    def test_empty_optional(self, validator):
        assert validator.validate_field(_field(type=FormFieldType.NUMBER), "") is None

    def test_zero_and_false_are_values(self, validator):
        assert validator.validate_field(_field(required=True), 0) is None
        assert validator.validate_field(_field(required=True), False) is None

    def test_text_or_file(self, validator):
        field = _field(type=FormFieldType.TEXT_OR_FILE, required=True)
        assert validator.validate_field(field, TextOrFileValue(mode="text", text=" ")) is FieldErrorCode.REQUIRED
        assert validator.validate_field(field, TextOrFileValue(mode="text", text="abc")) is None
        assert validator.validate_field(field, TextOrFileValue(mode="file", file=make_uploaded_file())) is None
        assert validator.validate_field(field, TextOrFileValue(mode="file")) is FieldErrorCode.REQUIRED


class TestNumeric:
    def test_quantity_bounds(self, validator):
        field = _field("qty", FormFieldType.NUMBER, min=1, max=10, required=True)
        assert validator.validate_field(field, 11) is FieldErrorCode.ABOVE_MAX
        assert validator.validate_field(field, "0") is FieldErrorCode.BELOW_MIN
        assert validator.validate_field(field, 5) is None
        assert validator.validate_field(field, 10) is None

    def test_exclusive_bounds(self, validator):
        field = _field(type=FormFieldType.NUMERIC_INPUT, min=0, max=1, min_exclusive=True, max_exclusive=True)
        assert validator.validate_field(field, 0) is FieldErrorCode.BELOW_MIN
        assert validator.validate_field(field, 1) is FieldErrorCode.ABOVE_MAX
        assert validator.validate_field(field, 0.5) is None

    @pytest.mark.parametrize("value", ["abc", "1_000", True])
    def test_not_a_number(self, validator, value):
        assert validator.validate_field(_field(type=FormFieldType.SLIDER), value) is FieldErrorCode.NUMBER

    def test_integer_precision(self, validator):
        field = _field(type=FormFieldType.NUMERIC_INPUT, decimal_precision=0)
        assert validator.validate_field(field, 2.5) is FieldErrorCode.INTEGER
        assert validator.validate_field(field, "3") is None

    def test_decimal_precision(self, validator):
        field = _field(type=FormFieldType.NUMERIC_INPUT, decimal_precision=2)
        assert validator.validate_field(field, 1.234) is FieldErrorCode.PRECISION
        assert validator.validate_field(field, 1.23) is None
        assert validator.validate_field(field, 0.1 + 0.2) is None

    def test_bounds_checked_before_precision(self, validator):
        field = _field(type=FormFieldType.NUMERIC_INPUT, max=1, decimal_precision=0)
        assert validator.validate_field(field, 1.5) is FieldErrorCode.ABOVE_MAX

    def test_text_field_not_range_checked(self, validator):
        assert validator.validate_field(_field(max=1), "99") is None


class TestFormatAndUrl:
    def test_schedule_start(self, validator):
        field = _field("start")
        assert validator.validate_field(field, "2025-01-31 08:30:00") is None
        assert validator.validate_field(field, "2025-01-31T08:30") is FieldErrorCode.FORMAT

    def test_validate_date_time_format(self):
        assert validate_date_time_format(" 2025-01-31 08:30:00 ")
        assert not validate_date_time_format("2025-01-31")
        assert not validate_date_time_format(20250131)

    def test_url_field(self, validator):
        field = _field(type=FormFieldType.URL)
        assert validator.validate_field(field, "https://data.example.com/roads.zip") is None
        assert validator.validate_field(field, "https://192.168.1.5/roads.zip") is FieldErrorCode.URL

    def test_remote_dataset_url_field(self, validator):
        field = _field("__remote_dataset_url__")
        assert validator.validate_field(field, "ftp://example.com/a.zip") is FieldErrorCode.URL


class TestFormValidation:
    def test_hidden_fields_skipped(self, validator):
        fields = [_field("a", required=True), _field("b", required=True)]
        states = {"a": VisibilityState.HIDDEN_DISABLED, "b": VisibilityState.VISIBLE_DISABLED}
        result = validator.validate_form_values({}, fields, states)
        assert result.errors == {"b": FieldErrorCode.REQUIRED}
        assert not result.is_valid

    def test_config_state_used_without_states(self, validator):
        fields = [_field("a", required=True, visibility_state=VisibilityState.HIDDEN_DISABLED)]
        assert validator.validate_form_values({}, fields).is_valid

    def test_geometry_message_hidden_types_skipped(self, validator):
        fields = [
            _field("g", FormFieldType.GEOMETRY, required=True),
            _field("m", FormFieldType.MESSAGE, required=True),
            _field("h", FormFieldType.HIDDEN, required=True),
        ]
        assert validator.validate_form_values({}, fields).is_valid

    def test_one_error_per_field(self, validator):
        fields = [_field("qty", FormFieldType.NUMBER, min=1, max=10), _field("name", required=True)]
        result = validator.validate_form_values({"qty": 11, "name": "x"}, fields)
        assert result.errors == {"qty": FieldErrorCode.ABOVE_MAX}
