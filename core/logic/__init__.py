# ============================================================================
# CORE LOGIC PACKAGE
# ============================================================================
# STATUS: Core - Pure functions package
# PURPOSE: Re-export conversions, normalization, visibility, URL safety and geometry helpers
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Core Business Logic Package.

Pure functions over the core models. Nothing here performs I/O or keeps
state between calls (the visibility evaluator only caches compiled
patterns).

Exports:
    Conversions: wire <-> edit formats for date, time, datetime and color
    Values: generic value normalization and submission coercion
    Visibility: rule parsing and tri-state evaluation
    URL safety: is_valid_external_url
    Geometry: serialize_geometry
"""

# Wire/edit conversions
from .conversions import (
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

# Value normalization
from .values import (
    is_empty,
    to_number,
    is_num,
    format_number,
    to_trimmed_string,
    to_boolean_value,
    normalize_toggle_value,
    are_toggle_values_equal,
    to_array,
    normalize_form_value,
    normalize_parameter_value,
    compute_select_coerce,
    coerce_select_value,
    normalize_table_value,
    coerce_form_value_for_submission,
    strip_html_to_text,
)

# Visibility
from .visibility import (
    parse_visibility_state,
    parse_visibility_rule,
    VisibilityEvaluator,
)

from .url_safety import is_valid_external_url
from .geometry import to_shapely, serialize_geometry

__all__ = [
    # Conversions
    'extract_temporal_parts',
    'fme_date_to_input',
    'input_to_fme_date',
    'fme_time_to_input',
    'input_to_fme_time',
    'fme_datetime_to_input',
    'input_to_fme_datetime',
    'normalized_rgb_to_hex',
    'hex_to_normalized_rgb',

    # Values
    'is_empty',
    'to_number',
    'is_num',
    'format_number',
    'to_trimmed_string',
    'to_boolean_value',
    'normalize_toggle_value',
    'are_toggle_values_equal',
    'to_array',
    'normalize_form_value',
    'normalize_parameter_value',
    'compute_select_coerce',
    'coerce_select_value',
    'normalize_table_value',
    'coerce_form_value_for_submission',
    'strip_html_to_text',

    # Visibility
    'parse_visibility_state',
    'parse_visibility_rule',
    'VisibilityEvaluator',

    # URL safety / geometry
    'is_valid_external_url',
    'to_shapely',
    'serialize_geometry',
]
