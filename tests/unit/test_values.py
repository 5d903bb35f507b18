"""
Generic value normalization tests.
"""

import pytest

from core.models import TextOrFileValue
from core.logic import (
    are_toggle_values_equal,
    coerce_form_value_for_submission,
    coerce_select_value,
    compute_select_coerce,
    format_number,
    is_empty,
    normalize_form_value,
    normalize_parameter_value,
    normalize_table_value,
    normalize_toggle_value,
    strip_html_to_text,
    to_boolean_value,
    to_number,
)
from tests.factories.model_factories import make_uploaded_file


class TestEmptiness:
    @pytest.mark.parametrize("value", [None, "", "   ", []])
    def test_empty(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, False, "x", [""]])
    def test_not_empty(self, value):
        assert not is_empty(value)


class TestNumbers:
    def test_integral_string_is_int(self):
        assert to_number(" 42 ") == 42
        assert isinstance(to_number("42"), int)

    def test_float_string(self):
        assert to_number("2.5") == 2.5

    @pytest.mark.parametrize("value", [True, "abc", "1_000", "nan", "inf", None, ""])
    def test_rejects_non_numbers(self, value):
        assert to_number(value) is None

    def test_format_number(self):
        assert format_number(2.0) == "2"
        assert format_number(0.5) == "0.5"


class TestBooleanCoercion:
    @pytest.mark.parametrize("value", ["true", "YES", "y", "On", "1", 1, True])
    def test_truthy(self, value):
        assert to_boolean_value(value) is True

    @pytest.mark.parametrize("value", ["false", "No", "n", "OFF", "0", 0, False])
    def test_falsy(self, value):
        assert to_boolean_value(value) is False

    @pytest.mark.parametrize("value", ["maybe", None, "", [1]])
    def test_unclear(self, value):
        assert to_boolean_value(value) is None


class TestFormValueNormalization:
    def test_none_single_and_multi(self):
        assert normalize_form_value(None, False) == ""
        assert normalize_form_value(None, True) == []

    def test_multi_wraps_scalar(self):
        assert normalize_form_value("a", True) == ["a"]

    def test_single_passes_primitives(self):
        assert normalize_form_value(3, False) == 3
        assert normalize_form_value(True, False) is True

    def test_single_drops_structures(self):
        assert normalize_form_value({"a": 1}, False) == ""


class TestParameterValueNormalization:
    def test_booleans(self):
        assert normalize_parameter_value(True) == "true"
        assert normalize_parameter_value(False) == "false"

    def test_numbers_and_strings_unchanged(self):
        assert normalize_parameter_value(5) == 5
        assert normalize_parameter_value("x") == "x"

    def test_structures_json_encoded(self):
        assert normalize_parameter_value({"a": 1}) == '{"a":1}'


class TestSelectCoercion:
    def test_all_numeric_options(self):
        assert compute_select_coerce(True, [1, "2", 3.5]) == "number"

    def test_leading_zero_string_is_not_numeric(self):
        assert compute_select_coerce(True, ["1", "02"]) is None

    def test_not_a_select(self):
        assert compute_select_coerce(False, [1, 2]) is None

    def test_coerce_values(self):
        assert coerce_select_value("2", "number") == 2
        assert coerce_select_value(["1", "x"], "number") == [1, "x"]
        assert coerce_select_value("2", None) == "2"


class TestTableNormalization:
    def test_rows_filtered_to_columns(self):
        rows = normalize_table_value([{"a": 1, "b": 2, "c": 3}], ["a", "b"])
        assert rows == [{"a": 1, "b": 2}]

    def test_scalars_go_to_first_column(self):
        assert normalize_table_value(["x", "y"], ["name", "other"]) == [{"name": "x"}, {"name": "y"}]

    def test_json_string(self):
        assert normalize_table_value('[{"a": 1}]', ["a"]) == [{"a": 1}]

    def test_unparsable_string_splits_lines(self):
        assert normalize_table_value("first\n\nsecond") == [{"value": "first"}, {"value": "second"}]

    def test_unparsable_string_uses_value_column_with_columns_configured(self):
        assert normalize_table_value("a\nb", ["col"]) == [{"value": "a"}, {"value": "b"}]

    def test_json_scalars_still_go_to_first_column(self):
        assert normalize_table_value('["a", "b"]', ["col"]) == [{"col": "a"}, {"col": "b"}]

    def test_garbage(self):
        assert normalize_table_value(42) == []


class TestSubmissionCoercion:
    def test_text_mode(self):
        assert coerce_form_value_for_submission(TextOrFileValue(mode="text", text="abc")) == "abc"

    def test_file_mode_returns_file(self):
        upload = make_uploaded_file()
        value = TextOrFileValue(mode="file", file=upload)
        assert coerce_form_value_for_submission(value) is upload

    def test_file_mode_name_only(self):
        value = {"mode": "file", "file_name": " data.zip "}
        assert coerce_form_value_for_submission(value) == "data.zip"

    def test_passthrough(self):
        assert coerce_form_value_for_submission([1, 2]) == [1, 2]


class TestToggleValues:
    def test_normalize(self):
        assert normalize_toggle_value(True) == "true"
        assert normalize_toggle_value(" Yes ") == "Yes"
        assert normalize_toggle_value("  ") is None

    def test_equality_is_case_insensitive(self):
        assert are_toggle_values_equal("YES", "yes")
        assert are_toggle_values_equal(1, "1")
        assert not are_toggle_values_equal(None, None)


class TestStripHtml:
    def test_removes_tags_scripts_and_entities(self):
        html = "<html><script>alert(1)</script><p>Bad&nbsp;&amp; <b>worse</b> &#65;</p></html>"
        assert strip_html_to_text(html) == "Bad&nbsp;& worse A"

    def test_empty(self):
        assert strip_html_to_text(None) == ""
