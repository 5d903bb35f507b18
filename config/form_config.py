# ============================================================================
# FORM CONFIGURATION
# ============================================================================
# STATUS: Configuration - Form behaviour settings
# PURPOSE: Remote dataset switches, upload target, loading and debounce timings
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: FormConfig
# DEPENDENCIES: pydantic, config.defaults
# ============================================================================
"""
Form Engine Configuration.

Provides configuration for:
    - Remote dataset capabilities (upload file, remote URL)
    - Upload target parameter override
    - Loading latch and debounce timings
    - Load error message length

Exports:
    FormConfig: Pydantic form configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import FormDefaults


def _env_bool(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default).lower()).strip().lower() in ("true", "1", "yes")


class FormConfig(BaseModel):
    """
    Form engine configuration.

    Remote URL datasets require both allow_remote_dataset and
    allow_remote_url_dataset.
    """

    allow_remote_dataset: bool = Field(
        default=FormDefaults.ALLOW_REMOTE_DATASET,
        description="Append the synthetic upload-file field to every form"
    )

    allow_remote_url_dataset: bool = Field(
        default=FormDefaults.ALLOW_REMOTE_URL_DATASET,
        description="Append the synthetic remote-dataset-URL field (needs allow_remote_dataset)"
    )

    upload_target_param_name: Optional[str] = Field(
        default=None,
        description="Parameter that receives the uploaded dataset path. "
                    "When unset the first file-type parameter is used, then SourceDataset."
    )

    disable_range_slider: bool = Field(
        default=FormDefaults.DISABLE_RANGE_SLIDER,
        description="Render RANGE_SLIDER parameters as plain numeric inputs"
    )

    min_loading_ms: int = Field(
        default=FormDefaults.MIN_LOADING_MS,
        ge=0,
        le=10000,
        description="Minimum time a loading indicator stays visible once shown"
    )

    load_debounce_ms: int = Field(
        default=FormDefaults.LOAD_DEBOUNCE_MS,
        ge=0,
        le=10000,
        description="Debounce before the workspace list is (re)loaded"
    )

    error_message_max_length: int = Field(
        default=FormDefaults.ERROR_MESSAGE_MAX_LENGTH,
        ge=20,
        le=5000,
        description="Load error detail is truncated to this many characters"
    )

    @property
    def remote_url_enabled(self) -> bool:
        """True when remote URL datasets are fully enabled."""
        return self.allow_remote_dataset and self.allow_remote_url_dataset

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            allow_remote_dataset=_env_bool("FORM_ALLOW_REMOTE_DATASET", FormDefaults.ALLOW_REMOTE_DATASET),
            allow_remote_url_dataset=_env_bool("FORM_ALLOW_REMOTE_URL_DATASET", FormDefaults.ALLOW_REMOTE_URL_DATASET),
            upload_target_param_name=os.environ.get("FORM_UPLOAD_TARGET_PARAM") or None,
            disable_range_slider=_env_bool("FORM_DISABLE_RANGE_SLIDER", FormDefaults.DISABLE_RANGE_SLIDER),
            min_loading_ms=int(os.environ.get("FORM_MIN_LOADING_MS", str(FormDefaults.MIN_LOADING_MS))),
            load_debounce_ms=int(os.environ.get("FORM_LOAD_DEBOUNCE_MS", str(FormDefaults.LOAD_DEBOUNCE_MS))),
            error_message_max_length=int(
                os.environ.get("FORM_ERROR_MESSAGE_MAX_LENGTH", str(FormDefaults.ERROR_MESSAGE_MAX_LENGTH))
            ),
        )
