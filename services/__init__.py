# ============================================================================
# SERVICES PACKAGE
# ============================================================================
# STATUS: Service Layer - Package exports
# PURPOSE: Form building, validation, state, submission and loading services
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Form Engine Services.

Stateful orchestration over the core models and logic.

Exports:
    ParameterFormService: Parameters -> field configs
    FormValidator: Field-level validation
    FormStateManager: One form session (values, files, visibility, errors)
    LoadingLatch: Minimum-duration loading indicator
    WorkspaceLoader, RequestToken, LoaderError: Cancellable remote loads
    Submission helpers: remote dataset parameter handling
"""

from .parameter_form_service import ParameterFormService, PARAMETER_FIELD_TYPE_MAP
from .form_validator import FormValidator, validate_date_time_format
from .form_state_manager import FormStateManager
from .loading_latch import LoadingLatch
from .workspace_loader import WorkspaceLoader, RequestToken, LoaderError, format_load_error
from .submission import (
    ParsedSubmission,
    parse_submission_form_data,
    sanitize_param_key,
    resolve_upload_target,
    find_upload_parameter_target,
    apply_uploaded_dataset_param,
    sanitize_opt_geturl,
    apply_remote_dataset,
)

__all__ = [
    'ParameterFormService',
    'PARAMETER_FIELD_TYPE_MAP',
    'FormValidator',
    'validate_date_time_format',
    'FormStateManager',
    'LoadingLatch',
    'WorkspaceLoader',
    'RequestToken',
    'LoaderError',
    'format_load_error',
    'ParsedSubmission',
    'parse_submission_form_data',
    'sanitize_param_key',
    'resolve_upload_target',
    'find_upload_parameter_target',
    'apply_uploaded_dataset_param',
    'sanitize_opt_geturl',
    'apply_remote_dataset',
]
