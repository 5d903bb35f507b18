# ============================================================================
# PARAMETER FORM SERVICE
# ============================================================================
# STATUS: Service Layer - Field configuration builder
# PURPOSE: Map workspace parameters to field configurations
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ParameterFormService
# DEPENDENCIES: core.models, core.logic, config
# ============================================================================
"""
Parameter Form Service - Field Configuration Builder.

Maps the published parameters of a workspace to DynamicFieldConfig
objects: the single source of which controls exist, in which order, with
which constraints, options and defaults.

Metadata for the sub-configurations (tables, dates, selects, files,
colors, toggles, scripted pickers, visibility) is read from the merged
metadata blocks of a parameter. Blocks are merged in the order metadata,
attributes, definition, control, schema, ui, extra, default-value dict;
the first non-null value per key wins.

The service is stateless and may be shared between forms.

Exports:
    ParameterFormService: Builder and descriptor-level validation
    PARAMETER_FIELD_TYPE_MAP: Remote type -> field type table
"""

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from config import FormConfig, get_config
from config.defaults import FormDefaults, ParameterDefaults
from core.models import (
    ChoiceSetConfig,
    ColorFieldConfig,
    DateTimeFieldConfig,
    DynamicFieldConfig,
    FileFieldConfig,
    FormFieldType,
    OptionItem,
    ParameterType,
    ParameterValidationResult,
    ScriptedFieldConfig,
    SelectFieldConfig,
    TableColumnConfig,
    TableFieldConfig,
    ToggleFieldConfig,
    WorkspaceParameter,
)
from core.logic import (
    are_toggle_values_equal,
    compute_select_coerce,
    extract_temporal_parts,
    is_empty,
    normalize_parameter_value,
    normalize_toggle_value,
    parse_visibility_rule,
    to_array,
    to_boolean_value,
    to_number,
    to_trimmed_string,
)
from util_logger import LoggerFactory, ComponentType


# ============================================================================
# TYPE TABLES
# ============================================================================

PARAMETER_FIELD_TYPE_MAP: Dict[ParameterType, FormFieldType] = {
    ParameterType.TEXT_V4: FormFieldType.TEXT,
    ParameterType.NUMBER_V4: FormFieldType.NUMBER,
    ParameterType.CHECKBOX_V4: FormFieldType.CHECKBOX,
    ParameterType.DROPDOWN_V4: FormFieldType.RADIO,
    ParameterType.LISTBOX_V4: FormFieldType.MULTI_SELECT,
    ParameterType.TREE_V4: FormFieldType.SELECT,
    ParameterType.PASSWORD_V4: FormFieldType.PASSWORD,
    ParameterType.DATETIME_V4: FormFieldType.DATE_TIME,
    ParameterType.MESSAGE_V4: FormFieldType.MESSAGE,
    ParameterType.GROUP_V4: FormFieldType.HIDDEN,
    ParameterType.FILE_V4: FormFieldType.FILE,
    ParameterType.COLOR_V4: FormFieldType.COLOR,
    ParameterType.RANGE_V4: FormFieldType.SLIDER,
    ParameterType.FLOAT: FormFieldType.NUMERIC_INPUT,
    ParameterType.INTEGER: FormFieldType.NUMBER,
    ParameterType.TEXT_EDIT: FormFieldType.TEXTAREA,
    ParameterType.PASSWORD: FormFieldType.PASSWORD,
    ParameterType.BOOLEAN: FormFieldType.SWITCH,
    ParameterType.CHECKBOX: FormFieldType.SWITCH,
    ParameterType.CHOICE: FormFieldType.RADIO,
    ParameterType.LOOKUP_CHOICE: FormFieldType.RADIO,
    ParameterType.LISTBOX: FormFieldType.MULTI_SELECT,
    ParameterType.LOOKUP_LISTBOX: FormFieldType.MULTI_SELECT,
    ParameterType.FILENAME: FormFieldType.FILE,
    ParameterType.FILENAME_MUSTEXIST: FormFieldType.FILE,
    ParameterType.DIRNAME: FormFieldType.FILE,
    ParameterType.DIRNAME_MUSTEXIST: FormFieldType.FILE,
    ParameterType.DIRNAME_SRC: FormFieldType.FILE,
    ParameterType.LOOKUP_FILE: FormFieldType.FILE,
    ParameterType.DATE_TIME: FormFieldType.DATE_TIME,
    ParameterType.DATETIME: FormFieldType.DATE_TIME,
    ParameterType.DATE: FormFieldType.DATE,
    ParameterType.TIME: FormFieldType.TIME,
    ParameterType.MONTH: FormFieldType.MONTH,
    ParameterType.WEEK: FormFieldType.WEEK,
    ParameterType.URL: FormFieldType.URL,
    ParameterType.LOOKUP_URL: FormFieldType.URL,
    ParameterType.COLOR: FormFieldType.COLOR,
    ParameterType.COLOR_PICK: FormFieldType.COLOR,
    ParameterType.RANGE_SLIDER: FormFieldType.SLIDER,
    ParameterType.MESSAGE: FormFieldType.MESSAGE,
    ParameterType.TEXT_OR_FILE: FormFieldType.TEXT_OR_FILE,
    ParameterType.GEOMETRY: FormFieldType.GEOMETRY,
    ParameterType.SCRIPTED: FormFieldType.SCRIPTED,
    ParameterType.REPROJECTION_FILE: FormFieldType.REPROJECTION_FILE,
    ParameterType.COORDSYS: FormFieldType.COORDSYS,
    ParameterType.ATTRIBUTE_NAME: FormFieldType.ATTRIBUTE_NAME,
    ParameterType.ATTRIBUTE_LIST: FormFieldType.ATTRIBUTE_LIST,
    ParameterType.DB_CONNECTION: FormFieldType.DB_CONNECTION,
    ParameterType.WEB_CONNECTION: FormFieldType.WEB_CONNECTION,
}

ALWAYS_SKIPPED_TYPES = frozenset({
    ParameterType.NOVALUE,
    ParameterType.GROUP,
    ParameterType.GROUP_V4,
})

# Rendered only when the server published options or a default
LIST_REQUIRED_TYPES = frozenset({
    ParameterType.DB_CONNECTION,
    ParameterType.WEB_CONNECTION,
    ParameterType.ATTRIBUTE_NAME,
    ParameterType.ATTRIBUTE_LIST,
    ParameterType.COORDSYS,
    ParameterType.REPROJECTION_FILE,
})

MULTI_SELECT_TYPES = frozenset({
    ParameterType.LISTBOX,
    ParameterType.LOOKUP_LISTBOX,
    ParameterType.ATTRIBUTE_LIST,
    ParameterType.LISTBOX_V4,
})

SELECT_CONFIG_TYPES = frozenset({
    FormFieldType.SELECT,
    FormFieldType.MULTI_SELECT,
    FormFieldType.COORDSYS,
    FormFieldType.ATTRIBUTE_NAME,
    FormFieldType.ATTRIBUTE_LIST,
    FormFieldType.DB_CONNECTION,
    FormFieldType.WEB_CONNECTION,
    FormFieldType.REPROJECTION_FILE,
})

# Single-choice controls that may auto-select and coerce numeric options
CHOICE_TYPES = frozenset({FormFieldType.SELECT, FormFieldType.RADIO, FormFieldType.MULTI_SELECT})

FILE_CONFIG_TYPES = frozenset({FormFieldType.FILE, FormFieldType.TEXT_OR_FILE, FormFieldType.REPROJECTION_FILE})
NUMERIC_FIELD_TYPES = frozenset({FormFieldType.SLIDER, FormFieldType.NUMERIC_INPUT})
DATE_TIME_PARAMETER_TYPES = frozenset({ParameterType.DATE_TIME, ParameterType.DATETIME, ParameterType.TIME})
COLOR_PARAMETER_TYPES = frozenset({ParameterType.COLOR, ParameterType.COLOR_PICK})

TABLE_COLUMN_TYPES = {
    "text": "text",
    "string": "text",
    "number": "number",
    "numeric": "number",
    "float": "number",
    "integer": "number",
    "select": "select",
    "choice": "select",
    "dropdown": "select",
    "list": "select",
    "boolean": "boolean",
    "checkbox": "boolean",
    "date": "date",
    "time": "time",
    "datetime": "datetime",
    "date-time": "datetime",
}

META_OPTION_KEYS = (
    "options", "items", "values", "choices", "entries",
    "list", "records", "data", "nodes", "children",
)

CHECKED_VALUE_KEYS = (
    "checkedValue", "checked_value", "trueValue", "true_value",
    "onValue", "on_value", "yesValue", "yes_value",
)
UNCHECKED_VALUE_KEYS = (
    "uncheckedValue", "unchecked_value", "falseValue", "false_value",
    "offValue", "off_value", "noValue", "no_value",
)

ACCEPT_SPLIT_RE = re.compile(r"[,;\s]+")
NO_SLIDER_HINTS = ("no slider", "noslider", "without slider")


# ============================================================================
# METADATA HELPERS
# ============================================================================

def merge_metadata(sources: Iterable[Optional[Mapping[str, Any]]]) -> Dict[str, Any]:
    """Merge metadata blocks; the first non-null value per key wins."""
    merged: Dict[str, Any] = {}
    for source in sources:
        if not isinstance(source, Mapping):
            continue
        for key, value in source.items():
            if value is not None and key not in merged:
                merged[key] = value
    return merged


def _unwrap_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for key in ("data", "items", "options"):
            if isinstance(value.get(key), list):
                return value[key]
    return None


def _pick_string(data: Optional[Mapping[str, Any]], keys: Sequence[str]) -> Optional[str]:
    if not data:
        return None
    for key in keys:
        value = data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        text = to_trimmed_string(value)
        if text is not None:
            return text
    return None


def _pick_bool(data: Optional[Mapping[str, Any]], keys: Sequence[str], default: bool = False) -> bool:
    if not data:
        return default
    for key in keys:
        value = to_boolean_value(data.get(key))
        if value is not None:
            return value
    return default


def _pick_number(data: Optional[Mapping[str, Any]], keys: Sequence[str]) -> Optional[float]:
    if not data:
        return None
    for key in keys:
        value = to_number(data.get(key))
        if value is not None:
            return value
    return None


def _as_metadata(record: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    metadata = record.get("metadata")
    return dict(metadata) if isinstance(metadata, dict) and metadata else None


# ============================================================================
# SERVICE
# ============================================================================

class ParameterFormService:
    """
    Converts workspace parameters into form field configurations.

    Args:
        form_config: Form behaviour settings (defaults to the global config)
    """

    def __init__(self, form_config: Optional[FormConfig] = None):
        self.form_config = form_config or get_config().form
        self.logger = LoggerFactory.create_logger(ComponentType.FACTORY, "ParameterFormService")

    # ------------------------------------------------------------------
    # Renderable filter
    # ------------------------------------------------------------------

    @staticmethod
    def is_renderable(parameter: WorkspaceParameter) -> bool:
        """
        Whether a parameter becomes a form control.

        Skips parameters handled by the host map (AOI extents, tm_* job
        directives), container types, and list-backed types published
        without options or a default.
        """
        if parameter.name in ParameterDefaults.SKIPPED_PARAMETER_NAMES:
            return False
        parameter_type = parameter.parameter_type
        if parameter_type in ALWAYS_SKIPPED_TYPES:
            return False
        if parameter_type in LIST_REQUIRED_TYPES:
            has_options = bool(parameter.list_options)
            has_default = parameter.default_value is not None and parameter.default_value != ""
            return has_options or has_default
        return True

    def get_renderable_parameters(self, parameters: Iterable[WorkspaceParameter]) -> List[WorkspaceParameter]:
        return [parameter for parameter in parameters if self.is_renderable(parameter)]

    # ------------------------------------------------------------------
    # Field conversion
    # ------------------------------------------------------------------

    def build_fields(self, parameters: Sequence[WorkspaceParameter]) -> List[DynamicFieldConfig]:
        """
        Field configs for a workspace plus the synthetic remote-dataset fields.

        The upload field is added when remote datasets are allowed; the URL
        field additionally needs remote URL datasets to be allowed.
        """
        fields = self.convert_parameters_to_fields(parameters)
        synthetic: List[DynamicFieldConfig] = []
        if self.form_config.allow_remote_dataset:
            synthetic.append(DynamicFieldConfig(
                name=ParameterDefaults.UPLOAD_FILE_FIELD,
                label="Upload dataset",
                type=FormFieldType.FILE,
                required=False,
                synthetic=True,
            ))
        if self.form_config.remote_url_enabled:
            synthetic.append(DynamicFieldConfig(
                name=ParameterDefaults.REMOTE_DATASET_URL_FIELD,
                label="Remote dataset URL",
                type=FormFieldType.URL,
                required=False,
                placeholder="https://",
                synthetic=True,
            ))
        return fields + synthetic

    def convert_parameters_to_fields(self, parameters: Sequence[WorkspaceParameter]) -> List[DynamicFieldConfig]:
        """
        Convert parameters to field configs, preserving order.

        Args:
            parameters: Parameters as published by the workspace

        Returns:
            One DynamicFieldConfig per renderable parameter
        """
        if not parameters:
            return []

        renderable = self.get_renderable_parameters(parameters)
        fields = [self._convert(parameter) for parameter in renderable]
        self.logger.debug(
            f"Built {len(fields)} fields from {len(parameters)} parameters",
            extra={'custom_dimensions': {'skipped': len(parameters) - len(renderable)}}
        )
        return fields

    def _convert(self, parameter: WorkspaceParameter) -> DynamicFieldConfig:
        meta = merge_metadata(parameter.metadata_sources())
        parameter_type = parameter.parameter_type

        is_range_slider = parameter_type is ParameterType.RANGE_SLIDER
        use_slider_ui = is_range_slider and self.should_use_range_slider_ui(parameter)
        field_type = self.get_field_type(parameter)
        if is_range_slider and not use_slider_ui:
            field_type = FormFieldType.NUMERIC_INPUT

        decimal_precision = self.get_decimal_precision(parameter)
        options = self.map_list_options(parameter)

        scripted = self._derive_scripted_config(parameter, meta, options)
        table_config = self._derive_table_config(meta)
        date_time_config = self._derive_date_time_config(parameter, meta)
        select_config = self._derive_select_config(field_type, meta, options)
        file_config = self._derive_file_config(field_type, meta)
        color_config = self._derive_color_config(parameter, meta)
        toggle_config = self._derive_toggle_config(field_type, parameter, meta, options)
        choice_set_config = self._derive_choice_set_config(parameter)
        visibility = parse_visibility_rule(
            parameter.visibility if parameter.visibility is not None else meta.get("visibility")
        )

        numeric = self._numeric_meta(parameter, decimal_precision, use_slider_ui)
        is_numeric_field = field_type in NUMERIC_FIELD_TYPES

        helper = (
            (scripted.instructions if scripted else None)
            or (table_config.helper_text if table_config else None)
            or (date_time_config.helper_text if date_time_config else None)
            or (file_config.helper_text if file_config else None)
            or (select_config.instructions if select_config else None)
        )

        read_only = self._is_read_only(field_type, scripted)
        multi = field_type is FormFieldType.MULTI_SELECT or field_type is FormFieldType.ATTRIBUTE_LIST or (
            scripted is not None and scripted.allow_multiple
        )

        auto_select_value = None
        if field_type in CHOICE_TYPES and not multi and options and len(options) == 1:
            auto_select_value = options[0].value
            read_only = True

        select_coerce = compute_select_coerce(field_type in CHOICE_TYPES, options)

        return DynamicFieldConfig(
            name=parameter.name,
            label=parameter.description or parameter.name,
            type=field_type,
            required=parameter.is_required,
            read_only=read_only,
            description=parameter.description,
            placeholder=parameter.description or "",
            helper=helper,
            options=options or None,
            min=numeric["min"],
            max=numeric["max"],
            step=numeric["step"],
            min_exclusive=numeric["min_exclusive"] if is_numeric_field else False,
            max_exclusive=numeric["max_exclusive"] if is_numeric_field else False,
            decimal_precision=decimal_precision if is_numeric_field else None,
            default_value=self._resolve_default(parameter, field_type, toggle_config),
            rows=FormDefaults.TEXTAREA_ROWS if parameter_type is ParameterType.TEXT_EDIT else None,
            select_coerce=select_coerce,
            auto_select_value=auto_select_value,
            visibility=visibility,
            table_config=table_config,
            date_time_config=date_time_config,
            select_config=select_config,
            file_config=file_config,
            color_config=color_config,
            toggle_config=toggle_config,
            scripted_config=scripted,
            choice_set_config=choice_set_config,
        )

    @staticmethod
    def get_field_type(parameter: WorkspaceParameter) -> FormFieldType:
        """Field type from the type table; unknown types degrade to SELECT or TEXT."""
        parameter_type = parameter.parameter_type
        if parameter_type in PARAMETER_FIELD_TYPE_MAP:
            return PARAMETER_FIELD_TYPE_MAP[parameter_type]
        if parameter_type in MULTI_SELECT_TYPES:
            return FormFieldType.MULTI_SELECT
        if parameter.list_options:
            return FormFieldType.SELECT
        return FormFieldType.TEXT

    @staticmethod
    def _is_read_only(field_type: FormFieldType, scripted: Optional[ScriptedFieldConfig]) -> bool:
        if field_type in (FormFieldType.MESSAGE, FormFieldType.GEOMETRY):
            return True
        if field_type is FormFieldType.SCRIPTED:
            interactive = scripted is not None and (scripted.allow_manual_entry or scripted.node_count > 0)
            return not interactive
        return False

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @staticmethod
    def map_list_options(parameter: WorkspaceParameter) -> List[OptionItem]:
        """Published list options as OptionItems (caption -> label, value normalized)."""
        items = []
        for option in parameter.list_options or []:
            value = normalize_parameter_value(option.value)
            label = to_trimmed_string(option.caption) or str(value)
            items.append(OptionItem(
                label=label,
                value=value,
                description=option.description or None,
                path=option.path or None,
                disabled=option.disabled,
                metadata=option.metadata or None,
            ))
        return items

    def normalize_option_item(self, item: Any, index: int) -> Optional[OptionItem]:
        """
        Normalize a metadata option entry.

        Strings and numbers become leaf options. Dicts read their label from
        caption/label/name/title/displayName and their value from
        value/id/code/path/name/key, falling back to the label.
        """
        if item is None or isinstance(item, bool):
            return None
        if isinstance(item, (str, int, float)):
            value = normalize_parameter_value(item)
            return OptionItem(label=str(value), value=value)
        if not isinstance(item, dict):
            return None

        label = _pick_string(item, ("caption", "label", "name", "title", "displayName")) or f"Option {index + 1}"
        raw_value = None
        for key in ("value", "id", "code", "path", "name", "key"):
            if item.get(key) is not None:
                raw_value = item[key]
                break
        value = normalize_parameter_value(raw_value if raw_value is not None else label)

        children = None
        child_entries = _unwrap_list(item.get("children"))
        if child_entries:
            children = [
                child for child in (
                    self.normalize_option_item(entry, child_index)
                    for child_index, entry in enumerate(child_entries)
                ) if child is not None
            ] or None

        disabled = item.get("disabled") is True or item.get("readOnly") is True or item.get("selectable") is False
        return OptionItem(
            label=label,
            value=value,
            description=_pick_string(item, ("description", "detail", "tooltip", "hint", "helper")),
            path=_pick_string(item, ("path", "fullPath", "groupPath", "folder")),
            disabled=disabled,
            children=children,
            metadata=_as_metadata(item),
            is_leaf=not children,
        )

    def _normalize_option_list(self, entries: Optional[List[Any]]) -> List[OptionItem]:
        if not entries:
            return []
        return [
            option for option in (
                self.normalize_option_item(entry, index) for index, entry in enumerate(entries)
            ) if option is not None
        ]

    def _collect_meta_options(self, meta: Mapping[str, Any]) -> List[OptionItem]:
        for key in META_OPTION_KEYS:
            options = self._normalize_option_list(_unwrap_list(meta.get(key)))
            if options:
                return options
        return []

    # ------------------------------------------------------------------
    # Numeric metadata
    # ------------------------------------------------------------------

    @staticmethod
    def get_decimal_precision(parameter: WorkspaceParameter) -> Optional[int]:
        """Precision floored and clamped to 0..6; None when absent or negative."""
        raw = parameter.decimal_precision
        if raw is None or isinstance(raw, bool) or not math.isfinite(raw) or raw < 0:
            return None
        return min(int(math.floor(raw)), FormDefaults.MAX_DECIMAL_PRECISION)

    def should_use_range_slider_ui(self, parameter: WorkspaceParameter) -> bool:
        """
        Whether a RANGE_SLIDER renders as a slider.

        An explicit control flag wins; otherwise a description mentioning
        "no slider" turns it off. Disabled globally by ``disable_range_slider``.
        """
        if parameter.parameter_type is not ParameterType.RANGE_SLIDER:
            return False
        if self.form_config.disable_range_slider:
            return False
        control = parameter.control or {}
        for key in ("useRangeSlider", "useSlider"):
            if isinstance(control.get(key), bool):
                return control[key]
        description = (parameter.description or "").lower()
        if any(hint in description for hint in NO_SLIDER_HINTS):
            return False
        return True

    @staticmethod
    def _numeric_meta(parameter: WorkspaceParameter, precision: Optional[int], use_slider_ui: bool) -> Dict[str, Any]:
        minimum = parameter.minimum
        maximum = parameter.maximum
        if parameter.parameter_type is ParameterType.RANGE_SLIDER and use_slider_ui:
            if minimum is None:
                minimum = FormDefaults.SLIDER_DEFAULT_MIN
            if maximum is None:
                maximum = FormDefaults.SLIDER_DEFAULT_MAX

        step = None
        if precision is not None:
            step = 1 if precision == 0 else 10 ** -precision
        elif use_slider_ui:
            step = 1

        return {
            "min": minimum,
            "max": maximum,
            "step": step,
            "min_exclusive": bool(parameter.minimum_exclusive),
            "max_exclusive": bool(parameter.maximum_exclusive),
        }

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_default(
        parameter: WorkspaceParameter,
        field_type: FormFieldType,
        toggle: Optional[ToggleFieldConfig]
    ) -> Any:
        default = parameter.default_value
        if field_type is FormFieldType.PASSWORD or parameter.parameter_type is ParameterType.GEOMETRY:
            return ""
        if default is None:
            return None
        if field_type is FormFieldType.MULTI_SELECT:
            if isinstance(default, str):
                return [part.strip() for part in default.split(",") if part.strip()]
            return to_array(default)
        if field_type in (FormFieldType.SWITCH, FormFieldType.CHECKBOX) and toggle is not None:
            return ParameterFormService._resolve_toggle_default(default, toggle)
        return default

    @staticmethod
    def _resolve_toggle_default(default: Any, toggle: ToggleFieldConfig) -> Any:
        normalized = normalize_toggle_value(default)
        checked, unchecked = toggle.checked_value, toggle.unchecked_value
        if normalized is not None and checked is not None and are_toggle_values_equal(normalized, checked):
            return checked
        if normalized is not None and unchecked is not None and are_toggle_values_equal(normalized, unchecked):
            return unchecked
        as_bool = to_boolean_value(default)
        if as_bool is True and checked is not None:
            return checked
        if as_bool is False and unchecked is not None:
            return unchecked
        if normalized is not None:
            return normalized
        if unchecked is not None:
            return unchecked
        return checked

    # ------------------------------------------------------------------
    # Sub-configurations
    # ------------------------------------------------------------------

    def _derive_table_config(self, meta: Mapping[str, Any]) -> Optional[TableFieldConfig]:
        candidates = None
        for key in ("columns", "fields", "tableColumns", "schema"):
            candidates = _unwrap_list(meta.get(key))
            if candidates:
                break
        if not candidates:
            return None

        columns: List[TableColumnConfig] = []
        seen = set()
        for index, raw in enumerate(candidates):
            column = self._normalize_table_column(raw, index)
            if column is None or column.key in seen:
                continue
            if column.type == "select" and not column.options:
                continue
            seen.add(column.key)
            columns.append(column)
        if not columns:
            return None

        min_rows = _pick_number(meta, ("minRows", "minimumRows", "minRowCount"))
        max_rows = _pick_number(meta, ("maxRows", "maximumRows", "maxRowCount"))
        min_rows = int(math.floor(min_rows)) if min_rows is not None and min_rows >= 0 else None
        max_rows = int(math.floor(max_rows)) if max_rows is not None and max_rows >= 0 else None
        if min_rows is not None and max_rows is not None and min_rows > max_rows:
            max_rows = min_rows

        return TableFieldConfig(
            columns=columns,
            min_rows=min_rows,
            max_rows=max_rows,
            add_row_label=_pick_string(meta, ("addRowLabel", "addLabel")),
            remove_row_label=_pick_string(meta, ("removeRowLabel", "removeLabel")),
            helper_text=_pick_string(meta, ("helper", "helperText", "instructions")),
            allow_add=_pick_bool(meta, ("allowAdd", "allowAddRows", "canAdd"), True),
            allow_remove=_pick_bool(meta, ("allowRemove", "allowDeleteRows", "canRemove"), True),
            allow_reorder=_pick_bool(meta, ("allowReorder", "reorder"), False),
            show_header=_pick_bool(meta, ("showHeader", "displayHeader"), True),
        )

    def _normalize_table_column(self, raw: Any, index: int) -> Optional[TableColumnConfig]:
        if not isinstance(raw, dict):
            return None
        key = _pick_string(raw, ("key", "name", "field", "id")) or f"column_{index}"
        label = _pick_string(raw, ("label", "title", "caption", "name")) or key
        type_raw = _pick_string(raw, ("type", "inputType", "fieldType"))
        column_type = TABLE_COLUMN_TYPES.get(type_raw.lower()) if type_raw else None

        option_entries = None
        for option_key in ("options", "choices", "values"):
            option_entries = _unwrap_list(raw.get(option_key))
            if option_entries is not None:
                break
        options = self._normalize_option_list(option_entries)

        return TableColumnConfig(
            key=key,
            label=label,
            type=column_type,
            required=_pick_bool(raw, ("required", "isRequired")),
            read_only=_pick_bool(raw, ("readOnly", "readonly")),
            placeholder=_pick_string(raw, ("placeholder", "prompt")),
            min=_pick_number(raw, ("min", "minimum")),
            max=_pick_number(raw, ("max", "maximum")),
            step=_pick_number(raw, ("step", "increment")),
            pattern=_pick_string(raw, ("pattern", "regex")),
            options=options or None,
            description=_pick_string(raw, ("description", "detail", "helper", "hint")),
            default_value=raw.get("defaultValue"),
        )

    def _derive_date_time_config(
        self,
        parameter: WorkspaceParameter,
        meta: Mapping[str, Any]
    ) -> Optional[DateTimeFieldConfig]:
        if parameter.parameter_type not in DATE_TIME_PARAMETER_TYPES:
            return None

        default = parameter.default_value if isinstance(parameter.default_value, str) else ""
        parts = extract_temporal_parts(default)
        include_milliseconds = (
            _pick_bool(meta, ("includeMilliseconds", "milliseconds", "fractional"), False)
            or len(parts.fraction) > 1
        )

        timezone_options = None
        for key in ("timezones", "timezoneOptions"):
            entries = _unwrap_list(meta.get(key))
            if entries is not None:
                timezone_options = self._normalize_option_list(entries) or None
                break

        raw_mode = _pick_string(meta, ("timezoneMode", "timezone", "tzMode"))
        if raw_mode in ("fixed", "select"):
            timezone_mode = raw_mode
        elif timezone_options:
            timezone_mode = "select"
        elif parts.offset or raw_mode == "offset":
            timezone_mode = "offset"
        else:
            timezone_mode = None

        return DateTimeFieldConfig(
            include_seconds=_pick_bool(meta, ("includeSeconds", "showSeconds", "seconds"), True),
            include_milliseconds=include_milliseconds,
            timezone_mode=timezone_mode,
            timezone_offset=parts.offset or None,
            timezone_options=timezone_options,
            default_timezone=(
                _pick_string(meta, ("defaultTimezone", "timezoneDefault"))
                or _pick_string(meta, ("timezoneOffset", "defaultOffset"))
                or parts.offset
                or None
            ),
            helper_text=_pick_string(meta, ("helper", "hint", "instructions")),
            show_timezone_badge=bool(parts.offset),
        )

    @staticmethod
    def _derive_select_config(
        field_type: FormFieldType,
        meta: Mapping[str, Any],
        options: Sequence[OptionItem]
    ) -> Optional[SelectFieldConfig]:
        if field_type not in SELECT_CONFIG_TYPES:
            return None

        allow_search = _pick_bool(
            meta, ("allowSearch", "searchable", "enableSearch"),
            len(options) > FormDefaults.SELECT_SEARCH_THRESHOLD
        )
        allow_custom = _pick_bool(meta, ("allowCustomValues", "allowCustom", "allowManual", "allowFreeform"))
        page_size = _pick_number(meta, ("pageSize", "page_size", "limit", "pageLimit"))
        max_results = _pick_number(meta, ("maxResults", "max_results", "resultLimit"))
        instructions = _pick_string(meta, ("instructions", "hint", "helper"))
        hierarchical = _pick_bool(
            meta, ("hierarchical", "tree", "grouped", "nested"),
            any(option.children for option in options)
        )

        if not (allow_search or allow_custom or page_size or max_results or instructions or hierarchical):
            return None

        return SelectFieldConfig(
            allow_search=allow_search,
            allow_custom_values=allow_custom,
            hierarchical=hierarchical,
            page_size=int(page_size) if page_size else None,
            instructions=instructions,
            max_results=int(max_results) if max_results else None,
        )

    @staticmethod
    def _derive_file_config(field_type: FormFieldType, meta: Mapping[str, Any]) -> Optional[FileFieldConfig]:
        if field_type not in FILE_CONFIG_TYPES:
            return None

        accept_raw = meta.get("accept")
        if accept_raw is None:
            accept_raw = meta.get("accepted")
        if accept_raw is None:
            accept_raw = meta.get("extensions")

        accept = None
        if isinstance(accept_raw, list):
            accept = [text for text in (to_trimmed_string(item) for item in accept_raw) if text] or None
        elif isinstance(accept_raw, str):
            accept = [part for part in ACCEPT_SPLIT_RE.split(accept_raw) if part.strip()] or None

        max_size_mb = _pick_number(meta, ("maxSizeMb", "maxSize", "fileSizeMb", "maxUploadMb"))
        multiple = _pick_bool(meta, ("allowMultiple", "multiple", "multi"))
        helper_text = _pick_string(meta, ("helper", "hint", "instructions"))
        capture = _pick_string(meta, ("capture", "captureMode"))

        if not (accept or max_size_mb or multiple or helper_text or capture):
            return None

        return FileFieldConfig(
            accept=accept,
            max_size_mb=max_size_mb,
            multiple=multiple,
            helper_text=helper_text,
            capture=capture,
        )

    @staticmethod
    def _derive_color_config(parameter: WorkspaceParameter, meta: Mapping[str, Any]) -> Optional[ColorFieldConfig]:
        if parameter.parameter_type not in COLOR_PARAMETER_TYPES:
            return None

        space_raw = _pick_string(meta, ("colorSpace", "colourSpace", "space", "colorModel", "colourModel"))
        space = space_raw.lower() if space_raw and space_raw.lower() in ("rgb", "cmyk") else None
        if space is None and isinstance(parameter.default_value, str):
            parts = [part for part in parameter.default_value.split(",") if part.strip()]
            if len(parts) == 4:
                space = "cmyk"
            elif len(parts) == 3:
                space = "rgb"

        alpha = _pick_bool(meta, ("alpha", "allowAlpha", "hasAlpha", "supportsAlpha", "includeAlpha"))
        if space is None and not alpha:
            return None
        return ColorFieldConfig(space=space, alpha=alpha)

    def _derive_toggle_config(
        self,
        field_type: FormFieldType,
        parameter: WorkspaceParameter,
        meta: Mapping[str, Any],
        options: Sequence[OptionItem]
    ) -> Optional[ToggleFieldConfig]:
        if field_type not in (FormFieldType.SWITCH, FormFieldType.CHECKBOX):
            return None

        normalized_default = normalize_toggle_value(parameter.default_value)
        default_bool = to_boolean_value(parameter.default_value)
        entries = [
            (normalize_toggle_value(option.value), to_trimmed_string(option.label))
            for option in options
        ]
        entries = [(value, label) for value, label in entries if value is not None or label]

        checked = self._toggle_meta_value(meta, CHECKED_VALUE_KEYS)
        unchecked = self._toggle_meta_value(meta, UNCHECKED_VALUE_KEYS)

        if len(entries) == 2:
            (first, _), (second, _) = entries
            if normalized_default is not None and unchecked is None:
                if first is not None and are_toggle_values_equal(first, normalized_default):
                    unchecked = first
                    if checked is None:
                        checked = second
                elif second is not None and are_toggle_values_equal(second, normalized_default):
                    unchecked = second
                    if checked is None:
                        checked = first
            if checked is None:
                checked = first if first is not None else second
            if unchecked is None:
                fallback = second if second is not None else first
                if (
                    fallback is not None and checked is not None
                    and are_toggle_values_equal(fallback, checked)
                    and first is not None and not are_toggle_values_equal(first, checked)
                ):
                    unchecked = first
                else:
                    unchecked = fallback
        elif len(entries) == 1 and checked is None:
            checked = entries[0][0]

        if default_bool is True and checked is None:
            checked = normalize_toggle_value(True)
        if default_bool is False and unchecked is None:
            unchecked = normalize_toggle_value(False)
        if unchecked is None and normalized_default is not None:
            unchecked = normalized_default
        if checked is not None and unchecked is not None and are_toggle_values_equal(checked, unchecked):
            unchecked = None

        checked_label = _pick_string(
            meta, ("checkedLabel", "checked_caption", "checkedText", "checked_label", "trueLabel")
        ) or self._toggle_label(entries, checked)
        unchecked_label = _pick_string(
            meta, ("uncheckedLabel", "unchecked_caption", "uncheckedText", "unchecked_label", "falseLabel")
        ) or self._toggle_label(entries, unchecked)

        if checked is None and unchecked is None and not checked_label and not unchecked_label:
            return None
        return ToggleFieldConfig(
            checked_value=checked,
            unchecked_value=unchecked,
            checked_label=checked_label,
            unchecked_label=unchecked_label,
        )

    @staticmethod
    def _toggle_meta_value(meta: Mapping[str, Any], keys: Sequence[str]) -> Any:
        for key in keys:
            if key in meta:
                candidate = normalize_toggle_value(meta[key])
                if candidate is not None:
                    return candidate
        return None

    @staticmethod
    def _toggle_label(entries: Sequence[tuple], value: Any) -> Optional[str]:
        if value is None:
            return None
        for entry_value, label in entries:
            if label and entry_value is not None and are_toggle_values_equal(entry_value, value):
                return label
        return None

    def _derive_scripted_config(
        self,
        parameter: WorkspaceParameter,
        meta: Mapping[str, Any],
        base_options: Sequence[OptionItem]
    ) -> Optional[ScriptedFieldConfig]:
        if parameter.parameter_type is not ParameterType.SCRIPTED:
            return None

        options = self._collect_meta_options(meta) or list(base_options)
        separator = _pick_string(meta, ("breadcrumbSeparator", "pathSeparator", "delimiter")) or "/"
        nodes = self._build_scripted_nodes(options, separator)
        page_size = _pick_number(meta, ("pageSize", "page_size", "limit", "pageLimit"))

        return ScriptedFieldConfig(
            allow_multiple=_pick_bool(
                meta, ("allowMultiple", "multiple", "multiSelect", "supportsMultiple"),
                isinstance(parameter.default_value, list)
            ),
            allow_search=_pick_bool(
                meta, ("allowSearch", "searchable", "enableSearch", "supportsSearch"),
                len(options) > FormDefaults.SCRIPTED_SEARCH_THRESHOLD
            ),
            hierarchical=any(node.children for node in nodes),
            allow_manual_entry=_pick_bool(meta, ("allowManualEntry", "allowManual", "allowCustom", "allowFreeform")),
            search_placeholder=_pick_string(meta, ("searchPlaceholder", "searchLabel", "searchPrompt")),
            instructions=(
                _pick_string(meta, ("instructions", "instruction", "helper", "hint"))
                or to_trimmed_string(parameter.description)
            ),
            breadcrumb_separator=separator,
            page_size=int(page_size) if page_size else None,
            auto_select_single_leaf=_pick_bool(meta, ("autoSelectSingleLeaf", "autoSelectSingle", "autoSelect"), True),
            nodes=nodes or None,
        )

    @staticmethod
    def _build_scripted_nodes(options: Sequence[OptionItem], separator: str) -> List[OptionItem]:
        """
        Arrange scripted options as a tree.

        Options that already carry children are kept as published. Flat
        options are grouped by their ``path`` split on the separator; the
        option value sits on the leaf.
        """
        if not options:
            return []
        if any(option.children for option in options):
            return list(options)

        roots: List[Dict[str, Any]] = []
        index: Dict[str, Dict[str, Any]] = {}

        def ensure(segments: List[str], option: Optional[OptionItem] = None) -> Dict[str, Any]:
            key = "|".join(segments) or (str(option.value) if option else "root")
            if key in index:
                return index[key]
            node = {
                "label": segments[-1] if segments else (option.label if option else key),
                "value": key,
                "path": separator.join(segments) or None,
                "children": [],
                "disabled": False,
                "description": None,
                "metadata": None,
            }
            index[key] = node
            if len(segments) > 1:
                ensure(segments[:-1])["children"].append(node)
            else:
                roots.append(node)
            return node

        for option in options:
            if option.path:
                segments = [segment.strip() for segment in option.path.split(separator) if segment.strip()]
            else:
                segments = [option.label]
            leaf = ensure(segments, option)
            leaf["value"] = option.value
            leaf["disabled"] = leaf["disabled"] or option.disabled
            leaf["description"] = option.description
            if option.metadata:
                leaf["metadata"] = {**(leaf["metadata"] or {}), **option.metadata}

        def finalize(node: Dict[str, Any]) -> OptionItem:
            children = [finalize(child) for child in node["children"]]
            return OptionItem(
                label=node["label"],
                value=node["value"],
                path=node["path"],
                disabled=node["disabled"],
                description=node["description"],
                metadata=node["metadata"],
                children=children or None,
                is_leaf=not children,
            )

        return [finalize(root) for root in roots]

    def _derive_choice_set_config(self, parameter: WorkspaceParameter) -> Optional[ChoiceSetConfig]:
        if not parameter.choice_set or not parameter.choice_set.get("type"):
            return None
        try:
            return ChoiceSetConfig.model_validate(parameter.choice_set)
        except ValidationError:
            self.logger.debug(f"Ignoring unsupported choice set on {parameter.name}: {parameter.choice_set.get('type')}")
            return None

    # ------------------------------------------------------------------
    # Descriptor-level validation
    # ------------------------------------------------------------------

    def validate_parameters(
        self,
        data: Mapping[str, Any],
        parameters: Sequence[WorkspaceParameter]
    ) -> ParameterValidationResult:
        """
        Check submitted data against the parameter descriptors.

        Errors are ``name:required``, ``name:type`` (INTEGER not integral,
        FLOAT not numeric) and ``name:choice`` (value outside the published
        options). GEOMETRY parameters are not checked.

        Args:
            data: Submitted values keyed by parameter name
            parameters: Workspace parameters

        Returns:
            ParameterValidationResult with the error strings
        """
        errors: List[str] = []
        for parameter in self.get_renderable_parameters(parameters):
            if parameter.parameter_type is ParameterType.GEOMETRY:
                continue
            value = data.get(parameter.name)
            if is_empty(value):
                if parameter.is_required:
                    errors.append(f"{parameter.name}:required")
                continue

            type_error = self._validate_parameter_type(parameter, value)
            if type_error:
                errors.append(type_error)
                continue

            choice_error = self._validate_parameter_choice(parameter, value)
            if choice_error:
                errors.append(choice_error)

        return ParameterValidationResult(errors=errors)

    @staticmethod
    def _validate_parameter_type(parameter: WorkspaceParameter, value: Any) -> Optional[str]:
        parameter_type = parameter.parameter_type
        if parameter_type is ParameterType.INTEGER:
            number = to_number(value)
            if number is None or float(number) != math.floor(number):
                return f"{parameter.name}:type"
        elif parameter_type is ParameterType.FLOAT:
            if to_number(value) is None:
                return f"{parameter.name}:type"
        return None

    @staticmethod
    def _validate_parameter_choice(parameter: WorkspaceParameter, value: Any) -> Optional[str]:
        if not parameter.list_options:
            return None
        choices = {normalize_parameter_value(option.value) for option in parameter.list_options}
        if parameter.parameter_type in MULTI_SELECT_TYPES:
            candidates = to_array(value)
        else:
            candidates = [value]
        if any(normalize_parameter_value(candidate) not in choices for candidate in candidates):
            return f"{parameter.name}:choice"
        return None
