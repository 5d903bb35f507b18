# ============================================================================
# WORKSPACE PARAMETER MODELS
# ============================================================================
# STATUS: Core - Data models
# PURPOSE: Remote parameter descriptors and list options
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: WorkspaceParameter, ListOption
# DEPENDENCIES: pydantic
# ============================================================================
"""
Parameter Descriptor Models - Remote Input Boundary

Pydantic models for the published parameters a workspace exposes. They
accept the remote camelCase keys (defaultValue, listOptions, ...) and the
snake_case names used inside the engine. Unknown keys are ignored so new
server versions do not break parsing.

Exports:
    ListOption: One entry of a parameter's option list
    WorkspaceParameter: Parameter descriptor (immutable once fetched)
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .enums import ParameterType


class ListOption(BaseModel):
    """Option as published by the remote service (value + caption)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    value: Any = Field(default=None, description="Submitted value")
    caption: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("caption", "label"),
        description="Display text"
    )
    description: Optional[str] = None
    path: Optional[str] = None
    disabled: bool = False
    metadata: Optional[Dict[str, Any]] = None


class WorkspaceParameter(BaseModel):
    """
    Parameter descriptor for one form input.

    Required-ness follows the remote convention: a parameter is required
    unless it is published as optional. An explicit ``required`` flag wins
    over ``optional`` when both are present.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = Field(..., min_length=1, description="Unique parameter name")
    type: str = Field(default=ParameterType.TEXT.value, description="Remote parameter type")
    description: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("description", "label", "prompt"),
        description="Human label"
    )
    optional: Optional[bool] = None
    required: Optional[bool] = None
    default_value: Any = Field(
        default=None,
        validation_alias=AliasChoices("defaultValue", "default_value", "default")
    )
    list_options: Optional[List[ListOption]] = Field(
        default=None,
        validation_alias=AliasChoices("listOptions", "list_options", "options")
    )
    minimum: Optional[Union[int, float]] = Field(
        default=None,
        validation_alias=AliasChoices("minimum", "min")
    )
    maximum: Optional[Union[int, float]] = Field(
        default=None,
        validation_alias=AliasChoices("maximum", "max")
    )
    minimum_exclusive: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("minimumExclusive", "minimum_exclusive")
    )
    maximum_exclusive: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("maximumExclusive", "maximum_exclusive")
    )
    decimal_precision: Optional[Union[int, float]] = Field(
        default=None,
        validation_alias=AliasChoices("decimalPrecision", "decimal_precision")
    )
    visibility: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("visibility", "visibilityRule", "visibility_rule")
    )
    choice_set: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("choiceSet", "choice_set")
    )

    # Free-form metadata blocks, merged in this order by the builder
    metadata: Optional[Dict[str, Any]] = None
    attributes: Optional[Dict[str, Any]] = None
    definition: Optional[Dict[str, Any]] = None
    control: Optional[Dict[str, Any]] = None
    schema_meta: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("schema", "schema_meta")
    )
    ui: Optional[Dict[str, Any]] = None
    extra: Optional[Dict[str, Any]] = None

    @property
    def is_required(self) -> bool:
        if self.required is not None:
            return self.required
        if self.optional is not None:
            return not self.optional
        return True

    @property
    def parameter_type(self) -> Optional[ParameterType]:
        """Known enum member for ``type`` or None for unsupported types."""
        try:
            return ParameterType(self.type)
        except ValueError:
            return None

    def metadata_sources(self) -> List[Optional[Dict[str, Any]]]:
        """Metadata blocks in precedence order (first non-null value per key wins)."""
        default_meta = self.default_value if isinstance(self.default_value, dict) else None
        return [
            self.metadata,
            self.attributes,
            self.definition,
            self.control,
            self.schema_meta,
            self.ui,
            self.extra,
            default_meta,
        ]
