# ============================================================================
# FORM VALIDATOR
# ============================================================================
# STATUS: Service Layer - Field validation
# PURPOSE: Required, numeric, format and URL checks per field and per form
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: FormValidator, validate_date_time_format
# DEPENDENCIES: core.models, core.logic
# ============================================================================
"""
Form Validator - Field-Level Validation.

Checks form values against field configs and returns one error code per
failing field. Only visible fields (enabled or disabled) are checked;
GEOMETRY and MESSAGE fields never are. Validation never raises.

Error codes are FieldErrorCode members; message text is resolved by the
caller.

Exports:
    FormValidator: Validates a value snapshot against field configs
    validate_date_time_format: Schedule-start format check
"""

import re
from typing import Any, Iterable, Mapping, Optional

from config.defaults import ParameterDefaults
from core.models import (
    DynamicFieldConfig,
    FieldErrorCode,
    FormFieldType,
    FormValidationResult,
    TextOrFileValue,
    UploadedFile,
    VisibilityState,
)
from core.logic import is_empty, is_valid_external_url, to_number
from util_logger import LoggerFactory, ComponentType

SCHEDULE_START_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

RANGE_TYPES = frozenset({FormFieldType.NUMBER, FormFieldType.NUMERIC_INPUT, FormFieldType.SLIDER})
NEVER_VALIDATED_TYPES = frozenset({FormFieldType.GEOMETRY, FormFieldType.MESSAGE})

PRECISION_EPSILON = 1e-9


def validate_date_time_format(value: Any) -> bool:
    """True when ``value`` is ``YYYY-MM-DD HH:MM:SS``."""
    return isinstance(value, str) and bool(SCHEDULE_START_RE.match(value.strip()))


def _has_text_or_file(value: Any) -> bool:
    if isinstance(value, TextOrFileValue):
        if value.mode == "file":
            return value.file is not None or bool((value.file_name or "").strip())
        return bool((value.text or "").strip())
    if isinstance(value, UploadedFile):
        return True
    return not is_empty(value)


class FormValidator:
    """
    Validates form values field by field.

    Rules applied in order (first failure wins per field):
        1. required
        2. number (numeric and slider fields)
        3. belowMin / aboveMax, honoring exclusive bounds
        4. integer / precision from the field's decimal precision
        5. format for schedule-start fields
        6. url for URL and remote-dataset URL fields
    """

    def __init__(self):
        self.logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "FormValidator")

    def validate_form_values(
        self,
        values: Mapping[str, Any],
        fields: Iterable[DynamicFieldConfig],
        states: Optional[Mapping[str, VisibilityState]] = None
    ) -> FormValidationResult:
        """
        Validate a value snapshot.

        Args:
            values: Form values keyed by field name
            fields: Field configs
            states: Visibility states; falls back to each config's
                ``visibility_state`` and then to visibleEnabled

        Returns:
            FormValidationResult with one error code per failing field
        """
        result = FormValidationResult()
        for field in fields:
            if field.type is FormFieldType.HIDDEN or field.type in NEVER_VALIDATED_TYPES:
                continue
            state = (states or {}).get(field.name) or field.visibility_state or VisibilityState.VISIBLE_ENABLED
            if not state.is_visible:
                continue

            error = self.validate_field(field, values.get(field.name))
            if error is not None:
                result.errors[field.name] = error

        if result.errors:
            self.logger.debug(
                f"Validation found {len(result.errors)} error(s)",
                extra={'custom_dimensions': {'fields': sorted(result.errors)}}
            )
        return result

    def validate_field(self, field: DynamicFieldConfig, value: Any) -> Optional[FieldErrorCode]:
        """Error code for one field value, or None when it passes."""
        if field.type is FormFieldType.TEXT_OR_FILE:
            if field.required and not _has_text_or_file(value):
                return FieldErrorCode.REQUIRED
            return None

        if is_empty(value):
            return FieldErrorCode.REQUIRED if field.required else None

        if field.type in RANGE_TYPES:
            error = self._validate_number(field, value)
            if error is not None:
                return error

        if field.name in ParameterDefaults.SCHEDULE_START_FIELDS and not validate_date_time_format(value):
            return FieldErrorCode.FORMAT

        if field.type is FormFieldType.URL or field.name == ParameterDefaults.REMOTE_DATASET_URL_FIELD:
            if not is_valid_external_url(value):
                return FieldErrorCode.URL

        return None

    @staticmethod
    def _validate_number(field: DynamicFieldConfig, value: Any) -> Optional[FieldErrorCode]:
        number = to_number(value)
        if number is None:
            return FieldErrorCode.NUMBER

        if field.min is not None:
            below = number <= field.min if field.min_exclusive else number < field.min
            if below:
                return FieldErrorCode.BELOW_MIN
        if field.max is not None:
            above = number >= field.max if field.max_exclusive else number > field.max
            if above:
                return FieldErrorCode.ABOVE_MAX

        precision = field.decimal_precision
        if precision == 0 and not float(number).is_integer():
            return FieldErrorCode.INTEGER
        if precision is not None and precision > 0:
            scaled = number * (10 ** precision)
            if abs(scaled - round(scaled)) > PRECISION_EPSILON * max(1.0, abs(scaled)):
                return FieldErrorCode.PRECISION
        return None
