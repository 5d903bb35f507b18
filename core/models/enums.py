"""
Pure Enumeration Types for the Form Engine.

Defines the remote parameter types, the form field types they map to,
visibility states and validation error codes.
No business logic - pure type definitions only.

Exports:
    ParameterType: Remote parameter type (wire enum)
    FormFieldType: Internal control category
    VisibilityState: Computed visibility of a field
    FieldErrorCode: Per-field validation error code
    LoadStatus: Workspace loader phase
"""

from enum import Enum


class ParameterType(str, Enum):
    """
    Parameter types as published by the remote service.

    Upper-case members are the classic published-parameter types;
    lower-case members are the newer JSON GUI types. Values are the exact
    wire strings.
    """

    TEXT = "TEXT"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    CHECKBOX = "CHECKBOX"
    CHOICE = "CHOICE"
    LISTBOX = "LISTBOX"
    LOOKUP_LISTBOX = "LOOKUP_LISTBOX"
    LOOKUP_CHOICE = "LOOKUP_CHOICE"
    TEXT_OR_FILE = "TEXT_OR_FILE"
    TEXT_EDIT = "TEXT_EDIT"
    PASSWORD = "PASSWORD"
    FILENAME = "FILENAME"
    FILENAME_MUSTEXIST = "FILENAME_MUSTEXIST"
    DIRNAME = "DIRNAME"
    DIRNAME_MUSTEXIST = "DIRNAME_MUSTEXIST"
    DIRNAME_SRC = "DIRNAME_SRC"
    COORDSYS = "COORDSYS"
    STRING = "STRING"
    URL = "URL"
    LOOKUP_URL = "LOOKUP_URL"
    LOOKUP_FILE = "LOOKUP_FILE"
    DATE_TIME = "DATE_TIME"
    DATETIME = "DATETIME"
    DATE = "DATE"
    TIME = "TIME"
    MONTH = "MONTH"
    WEEK = "WEEK"
    COLOR = "COLOR"
    COLOR_PICK = "COLOR_PICK"
    RANGE_SLIDER = "RANGE_SLIDER"
    GEOMETRY = "GEOMETRY"
    MESSAGE = "MESSAGE"
    ATTRIBUTE_NAME = "ATTRIBUTE_NAME"
    ATTRIBUTE_LIST = "ATTRIBUTE_LIST"
    DB_CONNECTION = "DB_CONNECTION"
    WEB_CONNECTION = "WEB_CONNECTION"
    REPROJECTION_FILE = "REPROJECTION_FILE"
    SCRIPTED = "SCRIPTED"
    NOVALUE = "NOVALUE"
    GROUP = "GROUP"

    # JSON GUI types
    TEXT_V4 = "text"
    NUMBER_V4 = "number"
    CHECKBOX_V4 = "checkbox"
    DROPDOWN_V4 = "dropdown"
    LISTBOX_V4 = "listbox"
    TREE_V4 = "tree"
    PASSWORD_V4 = "password"
    DATETIME_V4 = "datetime"
    MESSAGE_V4 = "message"
    GROUP_V4 = "group"
    FILE_V4 = "file"
    COLOR_V4 = "color"
    RANGE_V4 = "range"


class FormFieldType(str, Enum):
    """
    Internal control category a parameter renders as.

    Renderers map these to concrete controls; the engine never references
    a control implementation.
    """

    TEXT = "text"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTI_SELECT = "multi-select"
    CHECKBOX = "checkbox"
    PASSWORD = "password"
    FILE = "file"
    DATE_TIME = "datetime"
    URL = "url"
    SWITCH = "switch"
    RADIO = "radio"
    SLIDER = "slider"
    NUMERIC_INPUT = "numeric-input"
    TAG_INPUT = "tag-input"
    COLOR = "color"
    DATE = "date"
    TIME = "time"
    EMAIL = "email"
    PHONE = "phone"
    SEARCH = "search"
    MESSAGE = "message"
    TABLE = "table"
    MONTH = "month"
    WEEK = "week"
    HIDDEN = "hidden"
    TEXT_OR_FILE = "text-or-file"
    GEOMETRY = "geometry"
    SCRIPTED = "scripted"
    COORDSYS = "coordsys"
    ATTRIBUTE_NAME = "attribute-name"
    ATTRIBUTE_LIST = "attribute-list"
    DB_CONNECTION = "db-connection"
    WEB_CONNECTION = "web-connection"
    REPROJECTION_FILE = "reprojection-file"


class VisibilityState(str, Enum):
    """
    Computed visibility of a field.

    State transitions (per evaluation pass):
    - any -> HIDDEN_DISABLED: value, file attachment and error are cleared
    - HIDDEN_DISABLED -> VISIBLE_*: field re-enters validation with no value
    """

    VISIBLE_ENABLED = "visibleEnabled"
    VISIBLE_DISABLED = "visibleDisabled"
    HIDDEN_DISABLED = "hiddenDisabled"

    @property
    def is_visible(self) -> bool:
        return self is not VisibilityState.HIDDEN_DISABLED

    @property
    def is_enabled(self) -> bool:
        return self is VisibilityState.VISIBLE_ENABLED


class FieldErrorCode(str, Enum):
    """Per-field validation error codes. Message text is resolved by the caller."""

    REQUIRED = "required"
    NUMBER = "number"
    INTEGER = "integer"
    PRECISION = "precision"
    BELOW_MIN = "belowMin"
    ABOVE_MAX = "aboveMax"
    FORMAT = "format"
    URL = "url"


class LoadStatus(str, Enum):
    """Workspace loader phase."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
