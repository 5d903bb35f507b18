"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    ParameterType, FormFieldType, VisibilityState, FieldErrorCode, LoadStatus: Enums
    ListOption, WorkspaceParameter: Remote parameter descriptors
    DynamicFieldConfig and sub-configs: Derived form schema
    UploadedFile, TextOrFileValue, FormValues: Value shapes
    SubmissionPayload, FormValidationResult, FieldRenderState: Results
    WorkspaceSummary, WorkspaceDetail: Repository listing/detail
"""

from .enums import (
    ParameterType,
    FormFieldType,
    VisibilityState,
    FieldErrorCode,
    LoadStatus,
)
from .parameters import ListOption, WorkspaceParameter
from .fields import (
    OptionItem,
    TableColumnConfig,
    TableFieldConfig,
    DateTimeFieldConfig,
    SelectFieldConfig,
    FileFieldConfig,
    ColorFieldConfig,
    ToggleFieldConfig,
    ScriptedFieldConfig,
    ChoiceSetConfig,
    VisibilityClause,
    VisibilityDefault,
    VisibilityRule,
    DynamicFieldConfig,
)
from .form import (
    UploadedFile,
    TextOrFileValue,
    FormPrimitive,
    FormValues,
    SubmissionPayload,
    FormValidationResult,
    ParameterValidationResult,
    FieldRenderState,
)
from .workspace import WorkspaceSummary, WorkspaceDetail

__all__ = [
    'ParameterType',
    'FormFieldType',
    'VisibilityState',
    'FieldErrorCode',
    'LoadStatus',
    'ListOption',
    'WorkspaceParameter',
    'OptionItem',
    'TableColumnConfig',
    'TableFieldConfig',
    'DateTimeFieldConfig',
    'SelectFieldConfig',
    'FileFieldConfig',
    'ColorFieldConfig',
    'ToggleFieldConfig',
    'ScriptedFieldConfig',
    'ChoiceSetConfig',
    'VisibilityClause',
    'VisibilityDefault',
    'VisibilityRule',
    'DynamicFieldConfig',
    'UploadedFile',
    'TextOrFileValue',
    'FormPrimitive',
    'FormValues',
    'SubmissionPayload',
    'FormValidationResult',
    'ParameterValidationResult',
    'FieldRenderState',
    'WorkspaceSummary',
    'WorkspaceDetail',
]
