# ============================================================================
# FORM SESSION MODELS
# ============================================================================
# STATUS: Core - Data models
# PURPOSE: Uploaded files, text-or-file values, payloads and validation results
# LAST_REVIEWED: 19 OCT 2026
# DEPENDENCIES: pydantic
# ============================================================================
"""
Form Value and Result Models.

Value shapes that flow through one form session, plus the result
wrappers the validator and state manager hand back to callers.

Exports:
    UploadedFile: Opaque file handle (kept in the file side-table)
    TextOrFileValue: Composite value of TEXT_OR_FILE fields
    FormPrimitive: Union of every value a field may hold
    FormValues: Mapping field name -> FormPrimitive
    SubmissionPayload: Final payload handed to the submission sink
    FormValidationResult: Per-field error codes + validity
    ParameterValidationResult: Descriptor-level validation errors
    FieldRenderState: What a renderer needs for one control
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import FieldErrorCode, VisibilityState
from .fields import DynamicFieldConfig


class UploadedFile(BaseModel):
    """File chosen by the user. Content stays out of logs and repr."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Original file name")
    content_type: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)
    data: Optional[bytes] = Field(default=None, repr=False)


class TextOrFileValue(BaseModel):
    """Value of a TEXT_OR_FILE field: either typed text or an attached file."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["text", "file"] = "text"
    text: Optional[str] = None
    file: Optional[UploadedFile] = None
    file_name: Optional[str] = None


FormPrimitive = Union[str, int, float, bool, List[Any], TextOrFileValue, UploadedFile, None]
FormValues = Dict[str, FormPrimitive]


class SubmissionPayload(BaseModel):
    """Assembled on submit after validation passes."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Workspace name")
    data: Dict[str, Any] = Field(default_factory=dict)


@dataclass
class FormValidationResult:
    """Per-field error codes; the form is valid exactly when there are none."""
    errors: Dict[str, FieldErrorCode] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class ParameterValidationResult:
    """Descriptor-level errors formatted as ``name:reason``."""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class FieldRenderState:
    """One control as the renderer sees it."""
    config: DynamicFieldConfig
    value: Any
    error: Optional[FieldErrorCode]
    visibility_state: VisibilityState

    @property
    def read_only(self) -> bool:
        return self.config.read_only or self.visibility_state is VisibilityState.VISIBLE_DISABLED
