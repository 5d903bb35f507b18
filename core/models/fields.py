# ============================================================================
# FIELD CONFIGURATION MODELS
# ============================================================================
# STATUS: Core - Data models
# PURPOSE: Resolved field configs, per-family sub-configs and visibility rules
# LAST_REVIEWED: 19 OCT 2026
# DEPENDENCIES: pydantic
# ============================================================================
"""
Field Configuration Models - Derived Form Schema

DynamicFieldConfig is the fully-resolved description of one renderable
control, derived from a WorkspaceParameter by ParameterFormService. The
sub-config models describe family-specific behaviour (tables, dates,
selects, files, colors, toggles, scripted pickers).

Configs are rebuilt whenever the parameter list changes. The only field
that changes afterwards is ``visibility_state``, which the state manager
sets on copies via ``model_copy``.

Exports:
    OptionItem: Normalized option (label/value, optional children)
    TableColumnConfig, TableFieldConfig: Table control schema
    DateTimeFieldConfig: Date/time control options
    SelectFieldConfig: Select search/custom-value options
    FileFieldConfig: Accepted extensions, size limit
    ColorFieldConfig: Color space and alpha
    ToggleFieldConfig: Checked/unchecked values and labels
    ScriptedFieldConfig: Scripted (tree) picker options
    ChoiceSetConfig: Server-side choice set reference
    VisibilityClause, VisibilityDefault, VisibilityRule: Conditional visibility
    DynamicFieldConfig: One renderable control
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import FormFieldType, VisibilityState


class OptionItem(BaseModel):
    """Normalized option shown by select-like controls."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: Union[str, int, float]
    description: Optional[str] = None
    path: Optional[str] = None
    disabled: bool = False
    children: Optional[List["OptionItem"]] = None
    metadata: Optional[Dict[str, Any]] = None
    is_leaf: bool = True


TableColumnType = Literal["text", "number", "select", "boolean", "date", "time", "datetime"]


class TableColumnConfig(BaseModel):
    """One column of a table field."""

    key: str
    label: str
    type: Optional[TableColumnType] = None
    required: bool = False
    read_only: bool = False
    placeholder: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    pattern: Optional[str] = None
    options: Optional[List[OptionItem]] = None
    description: Optional[str] = None
    default_value: Any = None


class TableFieldConfig(BaseModel):
    """Table control schema; rows are dicts keyed by column key."""

    columns: List[TableColumnConfig]
    min_rows: Optional[int] = Field(default=None, ge=0)
    max_rows: Optional[int] = Field(default=None, ge=0)
    add_row_label: Optional[str] = None
    remove_row_label: Optional[str] = None
    helper_text: Optional[str] = None
    allow_add: bool = True
    allow_remove: bool = True
    allow_reorder: bool = False
    show_header: bool = True

    @property
    def column_keys(self) -> List[str]:
        return [column.key for column in self.columns]


class DateTimeFieldConfig(BaseModel):
    """Date/time control options."""

    include_seconds: bool = True
    include_milliseconds: bool = False
    timezone_mode: Optional[Literal["fixed", "select", "offset"]] = None
    timezone_offset: Optional[str] = None
    timezone_options: Optional[List[OptionItem]] = None
    default_timezone: Optional[str] = None
    helper_text: Optional[str] = None
    show_timezone_badge: bool = False

    @property
    def include_timezone(self) -> bool:
        return self.timezone_mode is not None


class SelectFieldConfig(BaseModel):
    """Select control options beyond the option list."""

    allow_search: bool = False
    allow_custom_values: bool = False
    hierarchical: bool = False
    page_size: Optional[int] = None
    instructions: Optional[str] = None
    max_results: Optional[int] = None


class FileFieldConfig(BaseModel):
    """File control options."""

    accept: Optional[List[str]] = None
    max_size_mb: Optional[float] = None
    multiple: bool = False
    helper_text: Optional[str] = None
    capture: Optional[str] = None


class ColorFieldConfig(BaseModel):
    """Color space of the wire value and whether alpha is carried."""

    space: Optional[Literal["rgb", "cmyk"]] = None
    alpha: bool = False


class ToggleFieldConfig(BaseModel):
    """Values submitted for the on/off positions of a switch."""

    checked_value: Optional[Union[str, int, float]] = None
    unchecked_value: Optional[Union[str, int, float]] = None
    checked_label: Optional[str] = None
    unchecked_label: Optional[str] = None


class ScriptedFieldConfig(BaseModel):
    """Scripted parameter picker (flat or hierarchical nodes)."""

    allow_multiple: bool = False
    allow_search: bool = False
    hierarchical: bool = False
    allow_manual_entry: bool = False
    search_placeholder: Optional[str] = None
    instructions: Optional[str] = None
    breadcrumb_separator: str = "/"
    page_size: Optional[int] = None
    auto_select_single_leaf: bool = True
    nodes: Optional[List[OptionItem]] = None

    @property
    def node_count(self) -> int:
        return len(self.nodes or [])


class ChoiceSetConfig(BaseModel):
    """Reference to a server-side choice set (attribute names, coordinate systems, ...)."""

    model_config = ConfigDict(extra="allow")

    type: Literal["attributeNames", "coordinateSystems", "dbConnections", "webConnections"]


class VisibilityClause(BaseModel):
    """
    One ``if`` entry of a visibility rule.

    ``conditions`` holds the ``$operator`` keys of the clause; a clause
    with no conditions always matches.
    """

    then: VisibilityState
    conditions: Dict[str, Any] = Field(default_factory=dict)


class VisibilityDefault(BaseModel):
    value: VisibilityState
    override: bool = False


class VisibilityRule(BaseModel):
    """Ordered clauses; the first matching clause decides the state."""

    clauses: List[VisibilityClause] = Field(default_factory=list)
    default: Optional[VisibilityDefault] = None

    @property
    def default_state(self) -> VisibilityState:
        return self.default.value if self.default else VisibilityState.VISIBLE_ENABLED


class DynamicFieldConfig(BaseModel):
    """
    Fully-resolved description of one renderable control.

    ``default_value`` is the descriptor default (adjusted per family);
    ``None`` means the field starts empty and the normalizer supplies the
    empty value at render time. ``auto_select_value`` is set for
    single-option selects, which are also read-only.
    """

    name: str
    label: str
    type: FormFieldType
    required: bool = False
    read_only: bool = False
    description: Optional[str] = None
    placeholder: Optional[str] = None
    helper: Optional[str] = None
    options: Optional[List[OptionItem]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    min_exclusive: bool = False
    max_exclusive: bool = False
    decimal_precision: Optional[int] = None
    default_value: Any = None
    rows: Optional[int] = None
    select_coerce: Optional[Literal["number"]] = None
    auto_select_value: Optional[Union[str, int, float]] = None
    visibility: Optional[VisibilityRule] = None
    visibility_state: Optional[VisibilityState] = None
    table_config: Optional[TableFieldConfig] = None
    date_time_config: Optional[DateTimeFieldConfig] = None
    select_config: Optional[SelectFieldConfig] = None
    file_config: Optional[FileFieldConfig] = None
    color_config: Optional[ColorFieldConfig] = None
    toggle_config: Optional[ToggleFieldConfig] = None
    scripted_config: Optional[ScriptedFieldConfig] = None
    choice_set_config: Optional[ChoiceSetConfig] = None
    synthetic: bool = False

    @property
    def is_multi(self) -> bool:
        if self.type in (FormFieldType.MULTI_SELECT, FormFieldType.ATTRIBUTE_LIST, FormFieldType.TAG_INPUT):
            return True
        if self.type is FormFieldType.SCRIPTED and self.scripted_config is not None:
            return self.scripted_config.allow_multiple
        return False

    @property
    def is_visible(self) -> bool:
        return self.visibility_state is None or self.visibility_state.is_visible
