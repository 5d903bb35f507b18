# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Core - Exception hierarchy
# PURPOSE: Contract, business-logic and configuration errors for the form engine
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ContractViolationError, BusinessLogicError, FetchError, ResourceNotFoundError, FormValidationError, ConfigurationError
# ============================================================================
"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues)
3. Configuration Errors (integration problems a retry will not fix)

Normalization, visibility and validation never raise; they resolve to
fallback values and error codes. Only the remote collaborators raise
business errors, and the loader converts those into state.

Exports:
    ContractViolationError: Programmer error at a component boundary
    BusinessLogicError: Base for expected runtime failures
    FetchError: Remote workspace/parameter fetch failed
    ResourceNotFoundError: Remote workspace or repository does not exist
    FormValidationError: Aggregate submit failure (count only)
    ConfigurationError: Integration/configuration error
"""

from typing import Optional


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Updating a field name the form does not know
    - Wrong types passed to the state manager
    - A submission sink that is not callable

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the integrating code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    pass


class FetchError(BusinessLogicError):
    """
    Remote fetch failed.

    Examples:
        - Server unreachable or timed out
        - Token rejected (401/403)
        - Malformed response body

    Attributes:
        code: Stable error code (e.g. WORKSPACE_ITEM_ERROR)
        status_code: HTTP status, 0 when no response was received
        retryable: True when retrying the same request may succeed
    """

    def __init__(
        self,
        message: str,
        code: str = "FETCH_ERROR",
        status_code: int = 0,
        retryable: bool = True
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.retryable = retryable


class ResourceNotFoundError(FetchError):
    """
    Requested resource does not exist.

    Examples:
        - Workspace not in repository
        - Repository not on server
    """

    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(message, code=code, status_code=404, retryable=False)


class FormValidationError(BusinessLogicError):
    """
    Submit blocked by field validation.

    Carries only the number of failing fields, never field labels, so the
    top-level error channel does not leak form content. Per-field codes
    stay available on the state manager.
    """

    SINGLE_ERROR_KEY = "formValidationSingleError"
    MULTIPLE_ERRORS_KEY = "formValidationMultipleErrors"

    def __init__(self, error_count: int, message: Optional[str] = None):
        self.code = "FORM_INVALID"
        self.error_count = error_count
        self.message_key = (
            self.SINGLE_ERROR_KEY if error_count == 1 else self.MULTIPLE_ERRORS_KEY
        )
        super().__init__(message or f"{self.message_key} ({error_count})")


class ConfigurationError(Exception):
    """
    System configuration error.

    These indicate misconfiguration or integration mistakes that a retry
    will not fix.

    Examples:
        - Missing server URL or token
        - Submit requested before any parameters were loaded
    """
    pass
