# ============================================================================
# SUBMISSION HELPERS
# ============================================================================
# STATUS: Service Layer - Job parameter assembly
# PURPOSE: Split synthetic fields and route remote or uploaded datasets
# LAST_REVIEWED: 19 OCT 2026
# DEPENDENCIES: core.logic, config
# ============================================================================
"""
Submission Helpers - Remote Dataset Parameters.

Turns the submitted form data into job parameters: separates the
synthetic upload/URL fields from the real parameters, routes an uploaded
dataset path to the right parameter and keeps ``opt_geturl`` only when it
is allowed and safe.

Exports:
    ParsedSubmission: Result of parse_submission_form_data
    parse_submission_form_data: Split synthetic fields from parameters
    sanitize_param_key: Strip a parameter name to [A-Za-z0-9_-]
    resolve_upload_target: Explicit upload target parameter, if configured
    find_upload_parameter_target: First upload-type parameter
    apply_uploaded_dataset_param: Write an uploaded path into the parameters
    sanitize_opt_geturl: Drop opt_geturl unless enabled and safe
    apply_remote_dataset: Remote URL or uploaded path, whichever applies
"""

import re
from typing import Any, Dict, MutableMapping, NamedTuple, Optional, Sequence

from config import FormConfig
from config.defaults import ParameterDefaults
from core.models import ParameterType, UploadedFile, WorkspaceParameter
from core.logic import coerce_form_value_for_submission, is_valid_external_url, to_trimmed_string
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "submission")

UPLOAD_PARAMETER_TYPES = frozenset({
    ParameterType.FILENAME,
    ParameterType.FILENAME_MUSTEXIST,
    ParameterType.DIRNAME,
    ParameterType.DIRNAME_MUSTEXIST,
    ParameterType.DIRNAME_SRC,
    ParameterType.LOOKUP_FILE,
    ParameterType.REPROJECTION_FILE,
})

PARAM_KEY_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_\-]")


class ParsedSubmission(NamedTuple):
    sanitized: Dict[str, Any]
    upload_file: Optional[UploadedFile]
    remote_url: str


def parse_submission_form_data(raw: MutableMapping[str, Any]) -> ParsedSubmission:
    """
    Split submitted form data into parameters and remote dataset inputs.

    ``__upload_file__`` and ``__remote_dataset_url__`` are removed from the
    parameters. ``opt_geturl`` is trimmed and dropped when blank. Remaining
    values are coerced for submission (text-or-file composites resolved).

    Args:
        raw: Submitted data (not modified)

    Returns:
        ParsedSubmission(sanitized, upload_file, remote_url)
    """
    data = dict(raw)
    upload_field = data.pop(ParameterDefaults.UPLOAD_FILE_FIELD, None)
    remote_field = data.pop(ParameterDefaults.REMOTE_DATASET_URL_FIELD, None)
    opt_geturl = to_trimmed_string(data.pop(ParameterDefaults.OPT_GETURL_PARAM, None))

    if opt_geturl:
        data[ParameterDefaults.OPT_GETURL_PARAM] = opt_geturl

    sanitized = {key: coerce_form_value_for_submission(value) for key, value in data.items()}
    upload_file = upload_field if isinstance(upload_field, UploadedFile) else None
    remote_url = to_trimmed_string(remote_field) or ""
    return ParsedSubmission(sanitized, upload_file, remote_url)


def sanitize_param_key(name: Any, fallback: str = "") -> str:
    text = to_trimmed_string(name) or ""
    return PARAM_KEY_UNSAFE_RE.sub("", text) or fallback


def resolve_upload_target(config: Optional[FormConfig]) -> Optional[str]:
    """Configured upload target parameter name, sanitized; None when unset."""
    if config is None or not config.upload_target_param_name:
        return None
    return sanitize_param_key(config.upload_target_param_name) or None


def find_upload_parameter_target(parameters: Optional[Sequence[WorkspaceParameter]]) -> Optional[str]:
    for parameter in parameters or []:
        if parameter.parameter_type in UPLOAD_PARAMETER_TYPES:
            return parameter.name
    return None


def apply_uploaded_dataset_param(
    params: MutableMapping[str, Any],
    uploaded_path: Optional[str],
    parameters: Optional[Sequence[WorkspaceParameter]] = None,
    explicit_target: Optional[str] = None
) -> Optional[str]:
    """
    Write an uploaded dataset path into the job parameters.

    Target order: explicit target, first upload-type parameter, then
    ``SourceDataset`` (only when the parameters do not already set it).

    Returns:
        Name of the parameter written, or None
    """
    if not uploaded_path:
        return None

    target = explicit_target or find_upload_parameter_target(parameters)
    if target:
        params[target] = uploaded_path
        return target

    fallback = ParameterDefaults.FALLBACK_UPLOAD_TARGET
    if fallback not in params:
        params[fallback] = uploaded_path
        return fallback
    return None


def sanitize_opt_geturl(params: MutableMapping[str, Any], config: Optional[FormConfig]) -> None:
    """Keep ``opt_geturl`` only when remote URL datasets are enabled and the URL is safe."""
    key = ParameterDefaults.OPT_GETURL_PARAM
    enabled = config is not None and config.remote_url_enabled
    trimmed = to_trimmed_string(params.get(key))

    if enabled and trimmed and is_valid_external_url(trimmed):
        params[key] = trimmed
        return
    if key in params:
        logger.debug("Dropped opt_geturl parameter")
        del params[key]


def apply_remote_dataset(
    params: MutableMapping[str, Any],
    config: Optional[FormConfig],
    remote_url: str = "",
    uploaded_path: Optional[str] = None,
    parameters: Optional[Sequence[WorkspaceParameter]] = None
) -> None:
    """
    Resolve the remote dataset into the job parameters.

    A safe remote URL wins and is passed as ``opt_geturl``. Otherwise an
    uploaded dataset path is routed to its target parameter.
    """
    sanitize_opt_geturl(params, config)

    if config is not None and config.remote_url_enabled and remote_url and is_valid_external_url(remote_url):
        params[ParameterDefaults.OPT_GETURL_PARAM] = remote_url.strip()
        return

    if not uploaded_path or config is None or not config.allow_remote_dataset:
        return

    params.pop(ParameterDefaults.OPT_GETURL_PARAM, None)
    target = apply_uploaded_dataset_param(
        params,
        uploaded_path,
        parameters,
        explicit_target=resolve_upload_target(config),
    )
    logger.debug(f"Uploaded dataset routed to {target}")
