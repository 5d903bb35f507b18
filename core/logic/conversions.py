# ============================================================================
# WIRE AND EDIT FORMAT CONVERSIONS
# ============================================================================
# STATUS: Core - Pure conversion functions
# PURPOSE: Date, time, datetime and color conversions between wire and edit formats
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Wire/Edit Format Conversions.

The remote service exchanges dates, times and datetimes as compact digit
strings and colors as comma-separated unit floats. Controls edit ISO-like
strings and ``#rrggbb`` hex. These functions convert between the two.

All functions are pure and never raise on malformed input: they return
``""`` (temporal) or ``None`` (color) instead.

Exports:
    extract_temporal_parts: Split a value into base, fraction and offset
    fme_date_to_input, input_to_fme_date: YYYYMMDD <-> YYYY-MM-DD
    fme_time_to_input, input_to_fme_time: HHMMSS <-> HH:MM[:SS]
    fme_datetime_to_input, input_to_fme_datetime: YYYYMMDDHHMMSS <-> YYYY-MM-DDTHH:MM[:SS]
    normalized_rgb_to_hex, hex_to_normalized_rgb: r,g,b[,a] / c,m,y,k <-> #rrggbb
"""

import math
import re
from typing import List, NamedTuple, Optional

from ..models.fields import ColorFieldConfig
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SCHEMA, "conversions")

OFFSET_SUFFIX_RE = re.compile(r"(Z|[+-]\d{2}(?::?\d{2})?)$", re.IGNORECASE)
FRACTION_SUFFIX_RE = re.compile(r"\.(\d{1,9})$")
HEX_COLOR_RE = re.compile(r"^#?([0-9a-f]{6})$", re.IGNORECASE)
NON_DIGIT_RE = re.compile(r"\D")
YEAR_RE = re.compile(r"^\d{4}$")


class TemporalParts(NamedTuple):
    base: str
    fraction: str
    offset: str


def _round_half_up(value: float) -> int:
    # Matches the rounding used by the remote GUI (halves round up)
    return int(math.floor(value + 0.5))


def _pad2(value: int) -> str:
    return str(value).rjust(2, "0")


def _to_int(part: str) -> Optional[int]:
    """Integer value of a digit string; empty counts as 0, anything else None."""
    stripped = part.strip()
    if not stripped:
        return 0
    if not stripped.isdigit():
        return None
    return int(stripped)


def _safe_pad2(part: Optional[str]) -> Optional[str]:
    if not part:
        return None
    number = _to_int(part)
    if number is None or number > 99:
        return None
    return _pad2(number)


def _parse_temporal(value: str) -> TemporalParts:
    if not value:
        return TemporalParts("", "", "")

    base = value
    offset = ""
    offset_match = OFFSET_SUFFIX_RE.search(base)
    if offset_match:
        offset = offset_match.group(1)
        base = base[:-len(offset)]

    fraction = ""
    fraction_match = FRACTION_SUFFIX_RE.search(base)
    if fraction_match:
        fraction = fraction_match.group(0)
        base = base[:-len(fraction)]

    return TemporalParts(base, fraction, offset)


def extract_temporal_parts(raw: Optional[str]) -> TemporalParts:
    """
    Split a temporal value into base, fractional-second and UTC-offset parts.

    The offset (``Z``, ``+HH``, ``+HHMM``, ``+HH:MM``) is removed first, then
    a ``.ddd`` fraction of up to nine digits.

    Args:
        raw: Wire or edit value

    Returns:
        TemporalParts(base, fraction, offset); missing parts are ``""``
    """
    return _parse_temporal((raw or "").strip())


# ============================================================================
# DATE
# ============================================================================

def fme_date_to_input(value: Optional[str]) -> str:
    """
    Convert a wire date (YYYYMMDD) to the edit format (YYYY-MM-DD).

    Returns ``""`` unless there are exactly eight digits forming a year in
    1000-9999, month 1-12 and day 1-31.
    """
    digits = NON_DIGIT_RE.sub("", value or "")
    if len(digits) != 8:
        return ""
    year, month, day = digits[0:4], digits[4:6], digits[6:8]
    if not 1000 <= int(year) <= 9999:
        return ""
    if not 1 <= int(month) <= 12:
        return ""
    if not 1 <= int(day) <= 31:
        return ""
    return f"{year}-{month}-{day}"


def input_to_fme_date(value: Optional[str]) -> str:
    return value.replace("-", "") if value else ""


# ============================================================================
# DATETIME
# ============================================================================

def fme_datetime_to_input(value: Optional[str]) -> str:
    """
    Convert a wire datetime to ``YYYY-MM-DDTHH:MM[:SS]``.

    Fraction and offset suffixes are ignored. At least twelve digits are
    required; seconds are included when fourteen are present.
    """
    digits = NON_DIGIT_RE.sub("", extract_temporal_parts(value).base)
    if len(digits) < 12:
        return ""
    result = f"{digits[0:4]}-{digits[4:6]}-{digits[6:8]}T{digits[8:10]}:{digits[10:12]}"
    if len(digits) >= 14:
        result += f":{digits[12:14]}"
    return result


def input_to_fme_datetime(value: Optional[str], original: Optional[str] = None) -> str:
    """
    Convert an edit datetime back to the wire format ``YYYYMMDDHHMMSS``.

    Seconds default to ``00``. A fraction or offset present on the edit value
    is kept; otherwise the ones carried by ``original`` are re-appended.

    Args:
        value: Edit value (``YYYY-MM-DDTHH:MM[:SS][.fff][offset]``)
        original: Wire value the edit started from, if any

    Returns:
        Wire value, or ``""`` when the edit value is malformed
    """
    if not value:
        return ""
    date_part, _, time_part = value.strip().partition("T")
    if not date_part or not time_part:
        logger.debug(f"Datetime edit value has no date/time separator: {value!r}")
        return ""

    date_bits = date_part.split("-")
    time_base, iso_fraction, iso_offset = _parse_temporal(time_part.split("T")[0])
    time_bits = time_base.split(":")

    year = date_bits[0]
    if not YEAR_RE.match(year):
        logger.debug(f"Datetime edit value has invalid year: {year!r}")
        return ""

    def _get(parts: List[str], index: int) -> Optional[str]:
        return parts[index] if len(parts) > index else None

    month = _safe_pad2(_get(date_bits, 1))
    day = _safe_pad2(_get(date_bits, 2))
    hours = _safe_pad2(_get(time_bits, 0))
    minutes = _safe_pad2(_get(time_bits, 1))
    if not (month and day and hours and minutes):
        logger.debug(f"Datetime edit value has invalid components: {value!r}")
        return ""

    raw_seconds = _get(time_bits, 2)
    seconds = _safe_pad2(raw_seconds) if raw_seconds else "00"
    if seconds is None:
        logger.debug(f"Datetime edit value has invalid seconds: {raw_seconds!r}")
        return ""

    extras = extract_temporal_parts(original) if original else TemporalParts("", "", "")
    fraction = iso_fraction or extras.fraction
    offset = iso_offset or extras.offset
    return f"{year}{month}{day}{hours}{minutes}{seconds}{fraction}{offset}"


# ============================================================================
# TIME
# ============================================================================

def fme_time_to_input(value: Optional[str]) -> str:
    """Convert a wire time to ``HH:MM`` (four digits) or ``HH:MM:SS`` (six or more)."""
    digits = NON_DIGIT_RE.sub("", extract_temporal_parts(value).base)
    if len(digits) == 4:
        return f"{digits[0:2]}:{digits[2:4]}"
    if len(digits) >= 6:
        return f"{digits[0:2]}:{digits[2:4]}:{digits[4:6]}"
    return ""


def input_to_fme_time(value: Optional[str], original: Optional[str] = None) -> str:
    """
    Convert an edit time back to ``HHMMSS``.

    Missing seconds become ``00``; fraction and offset follow the same
    rules as ``input_to_fme_datetime``.
    """
    if not value:
        return ""
    time_base, iso_fraction, iso_offset = _parse_temporal(value)
    parts = time_base.split(":")
    hours = _to_int(parts[0] if parts else "")
    minutes = _to_int(parts[1] if len(parts) > 1 else "")
    if hours is None or minutes is None:
        return ""
    seconds = _to_int(parts[2] if len(parts) > 2 else "")
    final_seconds = _pad2(seconds) if seconds is not None else "00"

    extras = extract_temporal_parts(original) if original else TemporalParts("", "", "")
    fraction = iso_fraction or extras.fraction
    offset = iso_offset or extras.offset
    return f"{_pad2(hours)}{_pad2(minutes)}{final_seconds}{fraction}{offset}"


# ============================================================================
# COLOR
# ============================================================================

def _clamp(value: float, low: float, high: float) -> float:
    if not math.isfinite(value):
        return low
    return max(low, min(high, value))


def _clamp01(value: float) -> float:
    return _clamp(value, 0.0, 1.0)


def _clamp255(value: float) -> float:
    return _clamp(value, 0.0, 255.0)


def _hex_component(value: float) -> str:
    return format(_round_half_up(_clamp255(value)), "02x")


def _format_unit_fraction(value: float) -> str:
    text = f"{_clamp01(value):.6f}".rstrip("0").rstrip(".")
    return text or "0"


def _rgb_to_hex(r: float, g: float, b: float) -> str:
    return f"#{_hex_component(r)}{_hex_component(g)}{_hex_component(b)}"


def _parse_normalized_parts(value: str) -> List[float]:
    parts = []
    for segment in (value or "").split(","):
        segment = segment.strip()
        if not segment:
            continue
        try:
            parts.append(float(segment))
        except ValueError:
            parts.append(math.nan)
    return parts


def _cmyk_to_rgb(c: float, m: float, y: float, k: float):
    kk = _clamp01(k)
    return (
        _clamp255(255 * (1 - _clamp01(c)) * (1 - kk)),
        _clamp255(255 * (1 - _clamp01(m)) * (1 - kk)),
        _clamp255(255 * (1 - _clamp01(y)) * (1 - kk)),
    )


def _rgb_to_cmyk(r: int, g: int, b: int):
    rn, gn, bn = _clamp01(r / 255), _clamp01(g / 255), _clamp01(b / 255)
    k = 1 - max(rn, gn, bn)
    if k >= 0.999999:
        return 0.0, 0.0, 0.0, 1.0
    denom = 1 - k
    return (
        _clamp01((1 - rn - k) / denom),
        _clamp01((1 - gn - k) / denom),
        _clamp01((1 - bn - k) / denom),
        _clamp01(k),
    )


def normalized_rgb_to_hex(value: Optional[str], config: Optional[ColorFieldConfig] = None) -> Optional[str]:
    """
    Convert a wire color to ``#rrggbb``.

    Four parts are read as CMYK when the field's color space is ``cmyk``, or
    when no space is configured and the field carries no alpha. Otherwise the
    first three parts are RGB fractions (a fourth alpha part is ignored).
    Components outside [0, 1] are clamped.

    Args:
        value: Comma-separated unit floats
        config: Color configuration of the field

    Returns:
        Lower-case hex color, or None on malformed input
    """
    parts = _parse_normalized_parts(value or "")
    if not parts:
        return None

    space = config.space if config else None
    alpha = config.alpha if config else False
    treat_as_cmyk = space == "cmyk" or (space is None and not alpha and len(parts) == 4)

    if treat_as_cmyk:
        if len(parts) < 4 or not all(math.isfinite(p) for p in parts[:4]):
            return None
        return _rgb_to_hex(*_cmyk_to_rgb(*parts[:4]))

    if len(parts) < 3 or not all(math.isfinite(p) for p in parts[:3]):
        return None
    r, g, b = (_round_half_up(_clamp01(p) * 255) for p in parts[:3])
    return _rgb_to_hex(r, g, b)


def hex_to_normalized_rgb(value: Optional[str], config: Optional[ColorFieldConfig] = None) -> Optional[str]:
    """
    Convert ``#rrggbb`` (leading ``#`` optional) to the wire color.

    Produces ``c,m,y,k`` for CMYK fields and ``r,g,b`` otherwise, each
    component written with up to six decimals and no trailing zeros.
    """
    match = HEX_COLOR_RE.match((value or "").strip())
    if not match:
        return None

    numeric = int(match.group(1), 16)
    r = (numeric >> 16) & 0xFF
    g = (numeric >> 8) & 0xFF
    b = numeric & 0xFF

    if config is not None and config.space == "cmyk":
        return ",".join(_format_unit_fraction(part) for part in _rgb_to_cmyk(r, g, b))
    return ",".join(_format_unit_fraction(part / 255) for part in (r, g, b))
