# ============================================================================
# VALUE NORMALIZATION
# ============================================================================
# STATUS: Core - Pure normalization functions
# PURPOSE: Numbers, booleans, arrays, tables, select coercion and submission coercion
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Generic Value Normalization.

Narrowing of loosely-typed remote and control values into the closed set
of form value shapes. Every function is pure and total: malformed input
maps to an empty or ``None`` result instead of raising.

Exports:
    is_empty: Required-field emptiness test
    to_number, is_num: Finite-number coercion
    format_number: Number to string without a trailing ``.0``
    to_boolean_value: Boolean-ish coercion (true/yes/on/1 ...)
    normalize_toggle_value, are_toggle_values_equal: Switch on/off values
    to_trimmed_string: Non-empty trimmed string or None
    to_array: Wrap scalars in a list
    normalize_form_value: Value as the control expects it
    normalize_parameter_value: Option/default value as string or number
    compute_select_coerce, coerce_select_value: Numeric select values
    normalize_table_value: Table rows keyed by column
    coerce_form_value_for_submission: Resolve text-or-file composites
    strip_html_to_text: Plain text from an HTML error body
"""

import html
import json
import math
import re
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from ..models.form import TextOrFileValue, UploadedFile

TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on"})
FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off"})

SCRIPT_STYLE_RE = re.compile(r"<\s*(script|style)[^>]*>[\s\S]*?<\s*/\s*\1\s*>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]*>")
DECIMAL_ENTITY_RE = re.compile(r"&#(\d+);")
HEX_ENTITY_RE = re.compile(r"&#x([0-9a-f]+);", re.IGNORECASE)
NAMED_ENTITY_RE = re.compile(r"&(?:amp|lt|gt|quot|#39);")
WHITESPACE_RE = re.compile(r"\s+")
MAX_CODE_POINT = 0x10FFFF


def is_empty(value: Any) -> bool:
    """True for None, blank strings and empty lists."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def to_number(value: Any) -> Optional[Union[int, float]]:
    """
    Finite number from a number or numeric string, else None.

    Booleans are not numbers here.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        if number.is_integer() and re.fullmatch(r"[+-]?\d+", text):
            return int(text)
        return number
    return None


def is_num(value: Any) -> bool:
    return to_number(value) is not None


def format_number(value: Union[int, float]) -> str:
    """``2.0`` -> ``"2"``, ``0.5`` -> ``"0.5"``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_trimmed_string(value: Any) -> Optional[str]:
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    return None


def to_boolean_value(value: Any) -> Optional[bool]:
    """
    Coerce boolean-ish values.

    Accepts booleans, finite numbers (non-zero is True) and the strings
    true/1/yes/y/on and false/0/no/n/off (case-insensitive).

    Returns:
        True/False, or None when the intent is not clear
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return value != 0
    text = to_trimmed_string(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    return None


def to_array(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if value is None:
        return []
    return [value]


def normalize_form_value(value: Any, is_multi: bool) -> Any:
    """
    Value in the shape a control expects.

    Args:
        value: Stored form value
        is_multi: Whether the control holds a list

    Returns:
        ``[]``/``""`` for None, a list for multi controls, scalars unchanged
        for single controls, ``""`` for anything else
    """
    if value is None:
        return [] if is_multi else ""
    if is_multi:
        return to_array(value)
    if isinstance(value, (str, int, float, bool)):
        return value
    return ""


def normalize_parameter_value(value: Any) -> Union[str, int, float]:
    """Numbers and strings unchanged, booleans as ``"true"``/``"false"``, anything else JSON."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)) and math.isfinite(value):
        return value
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return str(value)


def _is_numeric_option_value(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if not isinstance(value, str):
        return False
    text = value.strip()
    number = to_number(text)
    return number is not None and format_number(number) == text


def compute_select_coerce(is_select_type: bool, options: Optional[Sequence[Any]]) -> Optional[Literal["number"]]:
    """
    ``"number"`` when every option value of a select is numeric.

    A string option counts as numeric only when formatting its number gives
    back the same string (``"2"`` yes, ``"02"`` and ``"2.0"`` no).
    """
    if not is_select_type or not options:
        return None
    values = [option.value if hasattr(option, "value") else option for option in options]
    if all(_is_numeric_option_value(value) for value in values):
        return "number"
    return None


def coerce_select_value(value: Any, coerce: Optional[str]) -> Any:
    """Convert chosen select value(s) to numbers when the field is flagged."""
    if coerce != "number":
        return value
    if isinstance(value, list):
        return [coerce_select_value(item, coerce) for item in value]
    number = to_number(value)
    return value if number is None else number


def _parse_table_input(value: Any) -> Tuple[List[Any], bool]:
    """Table entries plus whether they came from the plain-text line fallback."""
    if isinstance(value, (list, tuple)):
        return list(value), False
    if isinstance(value, dict):
        return [value], False
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return [], False
        try:
            parsed = json.loads(text)
        except ValueError:
            return [line.strip() for line in text.splitlines() if line.strip()], True
        return (parsed if isinstance(parsed, list) else [parsed]), False
    return [], False


def normalize_table_value(value: Any, columns: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
    """
    Normalize a table value to a list of row dicts.

    Accepts a list of row dicts, a list of scalars, a JSON string of either,
    or newline-separated text. Scalars go into the first column (or a
    ``value`` column when no columns are configured). Text that is not JSON
    becomes one row per non-empty line with a single ``value`` column. Row
    dicts keep only configured columns.

    Args:
        value: Raw table value
        columns: Configured column keys in display order

    Returns:
        List of rows
    """
    keys = list(columns or [])
    entries, from_lines = _parse_table_input(value)
    scalar_key = keys[0] if keys and not from_lines else "value"
    rows: List[Dict[str, Any]] = []
    for entry in entries:
        if isinstance(entry, dict):
            if keys:
                rows.append({key: entry[key] for key in keys if key in entry})
            else:
                rows.append(dict(entry))
        elif entry is not None:
            rows.append({scalar_key: entry})
    return rows


def _coerce_text_or_file(value: TextOrFileValue) -> Any:
    if value.mode == "file":
        if isinstance(value.file, UploadedFile):
            return value.file
        return to_trimmed_string(value.file_name) or ""
    return value.text if value.text is not None else ""


def coerce_form_value_for_submission(value: Any) -> Any:
    """
    Resolve text-or-file composites to the submitted value.

    Mode ``file`` yields the attached file (or its name when only the name
    is known); mode ``text`` yields the text. Other values pass through.
    Plain dicts with a ``mode`` key are read as composites.
    """
    if isinstance(value, TextOrFileValue):
        return _coerce_text_or_file(value)
    if isinstance(value, dict) and "mode" in value:
        try:
            composite = TextOrFileValue.model_validate(value)
        except ValidationError:
            return value
        return _coerce_text_or_file(composite)
    return value


def _decode_numeric_entity(digits: str, base: int) -> str:
    if len(digits) > 6:
        return ""
    code_point = int(digits, base)
    if code_point > MAX_CODE_POINT:
        return ""
    try:
        return chr(code_point)
    except ValueError:
        return ""


def strip_html_to_text(value: Optional[str]) -> str:
    """
    Plain text from an HTML fragment.

    Script and style blocks are removed with their content, other tags
    are dropped, numeric and basic named entities decoded and whitespace
    collapsed.
    """
    if not value:
        return ""
    text = SCRIPT_STYLE_RE.sub("", value)
    text = TAG_RE.sub("", text)
    text = DECIMAL_ENTITY_RE.sub(lambda m: _decode_numeric_entity(m.group(1), 10), text)
    text = HEX_ENTITY_RE.sub(lambda m: _decode_numeric_entity(m.group(1), 16), text)
    text = NAMED_ENTITY_RE.sub(lambda m: html.unescape(m.group(0)), text)
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize_toggle_value(value: Any) -> Optional[Union[str, int, float]]:
    """Toggle wire value: booleans as ``"true"``/``"false"``, numbers kept, blank strings None."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    return to_trimmed_string(value)


def are_toggle_values_equal(left: Any, right: Any) -> bool:
    """Compare toggle values by their case-insensitive string form (``1 == "1"``)."""
    a = normalize_toggle_value(left)
    b = normalize_toggle_value(right)
    if a is None or b is None:
        return False
    a_text = format_number(a) if isinstance(a, (int, float)) else a
    b_text = format_number(b) if isinstance(b, (int, float)) else b
    return a_text.lower() == b_text.lower()
