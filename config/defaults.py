"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - ServerDefaults: Remote processing server connection
    - FormDefaults: Form engine behaviour (latch, debounce, error text)
    - UrlSafetyDefaults: Remote dataset URL checks
    - ParameterDefaults: Parameter names and types with special handling
    - AppDefaults: Application-level settings

Usage:
    from config.defaults import FormDefaults

    # In Pydantic Field definitions:
    min_loading_ms: int = Field(default=FormDefaults.MIN_LOADING_MS, ...)
"""


# =============================================================================
# SERVER DEFAULTS
# =============================================================================

class ServerDefaults:
    """Remote processing server connection defaults."""

    REPOSITORY = "Samples"
    API_BASE_PATH = "/fmeapiv4"
    REQUEST_TIMEOUT_SECONDS = 30.0
    WORKSPACE_ITEM_TYPE = "WORKSPACE"
    AUTH_SCHEME = "fmetoken"


# =============================================================================
# FORM DEFAULTS
# =============================================================================

class FormDefaults:
    """Form engine behaviour defaults."""

    # Loading indicator held visible at least this long after it turns off
    MIN_LOADING_MS = 500

    # Debounce before (re)loading the workspace list
    LOAD_DEBOUNCE_MS = 500

    # Load error detail is truncated to this many characters
    ERROR_MESSAGE_MAX_LENGTH = 300

    ALLOW_REMOTE_DATASET = False
    ALLOW_REMOTE_URL_DATASET = False
    DISABLE_RANGE_SLIDER = False

    # Numeric field precision clamp
    MAX_DECIMAL_PRECISION = 6

    # Range slider bounds when the descriptor has none
    SLIDER_DEFAULT_MIN = 0
    SLIDER_DEFAULT_MAX = 100

    TEXTAREA_ROWS = 3

    # Visibility regex guard
    MAX_VISIBILITY_REGEX_LENGTH = 512

    # Select search is switched on automatically past this many options
    SELECT_SEARCH_THRESHOLD = 25
    SCRIPTED_SEARCH_THRESHOLD = 15

    # Loader error message keys
    WORKSPACES_ERROR_KEY = "failedToLoadWorkspaces"
    WORKSPACE_DETAILS_ERROR_KEY = "failedToLoadWorkspaceDetails"


# =============================================================================
# REMOTE URL SAFETY DEFAULTS
# =============================================================================

class UrlSafetyDefaults:
    """Rules for remote dataset URLs passed through opt_geturl."""

    MAX_URL_LENGTH = 4000

    FORBIDDEN_HOSTNAME_SUFFIXES = (
        "localhost",
        ".localhost",
        ".local",
        ".internal",
        ".intranet",
        ".home",
        ".lan",
        ".localdomain",
    )

    # Inclusive (start, end) octet ranges
    PRIVATE_IPV4_RANGES = (
        ((10, 0, 0, 0), (10, 255, 255, 255)),
        ((100, 64, 0, 0), (100, 127, 255, 255)),
        ((127, 0, 0, 0), (127, 255, 255, 255)),
        ((169, 254, 0, 0), (169, 254, 255, 255)),
        ((172, 16, 0, 0), (172, 31, 255, 255)),
        ((192, 168, 0, 0), (192, 168, 255, 255)),
        ((0, 0, 0, 0), (0, 255, 255, 255)),
    )

    ALLOWED_FILE_EXTENSIONS = r"\.(zip|kmz|json|geojson|gml)(\?.*)?$"


# =============================================================================
# PARAMETER DEFAULTS
# =============================================================================

class ParameterDefaults:
    """Parameter names and types that get special treatment."""

    # Handled by the host map integration, never rendered
    SKIPPED_PARAMETER_NAMES = frozenset({
        "MAXX", "MINX", "MAXY", "MINY",
        "AreaOfInterest", "AREA", "ExtentGeoJson",
        "tm_ttc", "tm_ttl", "tm_tag",
    })

    UPLOAD_FILE_FIELD = "__upload_file__"
    REMOTE_DATASET_URL_FIELD = "__remote_dataset_url__"
    OPT_GETURL_PARAM = "opt_geturl"
    FALLBACK_UPLOAD_TARGET = "SourceDataset"

    # Schedule start must be "YYYY-MM-DD HH:MM:SS"
    SCHEDULE_START_FIELDS = frozenset({"start", "schedule_start"})


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-level defaults."""

    DEBUG_MODE = False
    LOG_LEVEL = "INFO"
    ENVIRONMENT = "dev"
