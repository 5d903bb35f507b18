# ============================================================================
# FORM STATE MANAGER
# ============================================================================
# STATUS: Service Layer - Form session state
# PURPOSE: Values, files, visibility and errors of one form; submit to a sink
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: FormStateManager
# DEPENDENCIES: core.logic, services.parameter_form_service, services.form_validator
# ============================================================================
"""
Form State Manager - Owner of One Form Session.

Holds the field configs, values, file side-table, visibility states and
field errors of one form. Every value change runs the visibility pass and
then the validation pass, synchronously and in that order, before
listeners are notified.

Invariants:
    - Every key in ``values`` is a known field name
    - Fields in the hiddenDisabled state have no value, file or error
    - Auto-selected fields always hold their forced value

Exports:
    FormStateManager: Explicit per-form state container
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from config import FormConfig
from exceptions import ConfigurationError, ContractViolationError, FormValidationError
from core.models import (
    DynamicFieldConfig,
    FieldErrorCode,
    FieldRenderState,
    FormFieldType,
    FormValues,
    SubmissionPayload,
    UploadedFile,
    VisibilityState,
    WorkspaceParameter,
)
from core.logic import (
    VisibilityEvaluator,
    coerce_form_value_for_submission,
    coerce_select_value,
    normalize_form_value,
    serialize_geometry,
)
from util_logger import LoggerFactory, ComponentType, log_exceptions
from .form_validator import FormValidator
from .parameter_form_service import ParameterFormService

ValuesListener = Callable[[FormValues], None]
SubmissionSink = Callable[[SubmissionPayload], Any]

class FormStateManager:
    """
    State container for one workspace form.

    Args:
        workspace_name: Workspace the submission payload is addressed to
        form_config: Form behaviour settings (defaults to the global config)
        form_service: Field configuration builder (shareable)
        validator: Field validator (shareable)
        evaluator: Visibility evaluator
    """

    def __init__(
        self,
        workspace_name: Optional[str] = None,
        form_config: Optional[FormConfig] = None,
        form_service: Optional[ParameterFormService] = None,
        validator: Optional[FormValidator] = None,
        evaluator: Optional[VisibilityEvaluator] = None
    ):
        self.workspace_name = workspace_name
        self.form_service = form_service or ParameterFormService(form_config)
        self.validator = validator or FormValidator()
        self.evaluator = evaluator or VisibilityEvaluator()
        self.logger = LoggerFactory.create_logger(ComponentType.SERVICE, "FormStateManager")

        self._parameters: List[WorkspaceParameter] = []
        self._fields: List[DynamicFieldConfig] = []
        self._field_index: Dict[str, DynamicFieldConfig] = {}
        self._values: FormValues = {}
        self._files: Dict[str, UploadedFile] = {}
        self._states: Dict[str, VisibilityState] = {}
        self._errors: Dict[str, FieldErrorCode] = {}
        self._geometry: Optional[str] = None
        self._listeners: List[ValuesListener] = []
        self.submit_error: Optional[FormValidationError] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, parameters: Sequence[WorkspaceParameter], workspace_name: Optional[str] = None) -> None:
        """
        Build configs and seed values for a parameter list.

        Values start from non-None defaults plus auto-select values; then
        one visibility pass and one validation pass run.
        """
        if workspace_name is not None:
            self.workspace_name = workspace_name
        self._parameters = list(parameters)
        self._fields = self.form_service.build_fields(self._parameters)
        self._field_index = {field.name: field for field in self._fields}

        values: FormValues = {}
        for field in self._fields:
            if field.auto_select_value is not None:
                values[field.name] = field.auto_select_value
            elif field.default_value is not None:
                values[field.name] = field.default_value
        self._values = values

        self._settle()
        self.logger.info(
            f"Form initialized with {len(self._fields)} fields",
            extra={'custom_dimensions': {'workspace': self.workspace_name}}
        )
        self._notify()

    def reset_form(self, parameters: Sequence[WorkspaceParameter], workspace_name: Optional[str] = None) -> None:
        """Drop all values, files, errors and states, then initialize."""
        self._values = {}
        self._files = {}
        self._errors = {}
        self._states = {}
        self._geometry = None
        self.submit_error = None
        self.initialize(parameters, workspace_name)

    def clear(self) -> None:
        """Empty form with no parameters (used while a new workspace loads)."""
        self.reset_form([])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update_field(self, name: str, value: Any) -> None:
        """
        Set one field value.

        Raises:
            ContractViolationError: If ``name`` is not a field of this form
        """
        field = self._field_index.get(name)
        if field is None:
            raise ContractViolationError(f"Unknown form field: {name}")

        if field.auto_select_value is not None:
            value = field.auto_select_value

        if isinstance(value, UploadedFile):
            self._files[name] = value
            self._values[name] = value.name
        elif value is None and name in self._files:
            del self._files[name]
            self._values[name] = ""
        else:
            self._values[name] = value

        self._settle()
        self._notify()

    def recompute(self) -> None:
        """Re-run visibility and validation without a value change."""
        self._settle()
        self._notify()

    def set_geometry(self, geometry: Any) -> None:
        """
        Write a geometry into every GEOMETRY field.

        Accepts anything ``serialize_geometry`` accepts; None or an
        unparsable geometry clears the fields.
        """
        serialized = serialize_geometry(geometry) if geometry is not None else None
        self._geometry = serialized
        for field in self._fields:
            if field.type is FormFieldType.GEOMETRY:
                if serialized is None:
                    self._values.pop(field.name, None)
                else:
                    self._values[field.name] = serialized
        self._settle()
        self._notify()

    def on_values_change(self, listener: ValuesListener) -> Callable[[], None]:
        """
        Register a listener called with a copy of the values after each update.

        Returns:
            Callable that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def submit(self, sink: SubmissionSink) -> SubmissionPayload:
        """
        Validate and hand the payload to ``sink``.

        The payload keeps the synthetic ``__upload_file__`` and
        ``__remote_dataset_url__`` entries because the caller owns the upload.
        Callers run ``services.submission.parse_submission_form_data`` on
        ``payload.data`` and then ``apply_remote_dataset`` to turn it into job
        parameters.

        Raises:
            ConfigurationError: If no parameters are loaded
            ContractViolationError: If ``sink`` is not callable
            FormValidationError: If any field fails validation (sink not called)
        """
        if not self._parameters:
            raise ConfigurationError("Cannot submit: no workspace parameters are loaded")
        if not callable(sink):
            raise ContractViolationError(f"Submission sink must be callable, got {type(sink).__name__}")

        self._validate()
        if self._errors:
            self.logger.info(
                f"Submit blocked by {len(self._errors)} validation error(s)",
                extra={'custom_dimensions': {'workspace': self.workspace_name}}
            )
            self.submit_error = FormValidationError(len(self._errors))
            raise self.submit_error

        self.submit_error = None
        payload = SubmissionPayload(type=self.workspace_name or "", data=self._build_submission_data())
        self.logger.info(
            f"Submitting {len(payload.data)} values",
            extra={'custom_dimensions': {'workspace': self.workspace_name}}
        )
        self._deliver(sink, payload)
        return payload

    @log_exceptions(ComponentType.SERVICE, "FormStateManager")
    def _deliver(self, sink: SubmissionSink, payload: SubmissionPayload) -> None:
        """Hand the payload to the sink; sink failures are logged and re-raised."""
        sink(payload)

    def _build_submission_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self._values)
        for name, file in self._files.items():
            if file is not None:
                data[name] = file

        for field in self._fields:
            if field.type is not FormFieldType.GEOMETRY or self._geometry is None:
                continue
            if self._states.get(field.name, VisibilityState.VISIBLE_ENABLED).is_visible:
                data[field.name] = self._geometry

        for name in list(data):
            field = self._field_index.get(name)
            value = coerce_form_value_for_submission(data[name])
            if field is not None and field.select_coerce:
                value = coerce_select_value(value, field.select_coerce)
            data[name] = value
        return data

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> List[WorkspaceParameter]:
        return list(self._parameters)

    @property
    def values(self) -> FormValues:
        return dict(self._values)

    @property
    def files(self) -> Dict[str, UploadedFile]:
        return dict(self._files)

    @property
    def errors(self) -> Dict[str, FieldErrorCode]:
        return dict(self._errors)

    @property
    def states(self) -> Dict[str, VisibilityState]:
        return dict(self._states)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def fields(self) -> List[DynamicFieldConfig]:
        """Field configs annotated with their current visibility state."""
        return [
            field.model_copy(update={"visibility_state": self._states.get(field.name, VisibilityState.VISIBLE_ENABLED)})
            for field in self._fields
        ]

    @property
    def visible_fields(self) -> List[DynamicFieldConfig]:
        return [field for field in self.fields if field.is_visible and field.type is not FormFieldType.HIDDEN]

    def render_model(self) -> List[FieldRenderState]:
        """Render state for every visible field, values normalized for the control."""
        return [
            FieldRenderState(
                config=field,
                value=normalize_form_value(self._values.get(field.name), field.is_multi),
                error=self._errors.get(field.name),
                visibility_state=field.visibility_state,
            )
            for field in self.visible_fields
        ]

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _settle(self) -> None:
        self._evaluate_visibility()
        self._validate()

    def _evaluate_visibility(self) -> None:
        """
        Visibility pass.

        Clearing a hidden field's value can change other rules, so the pass
        repeats on the updated snapshot until nothing more is cleared.
        """
        for _ in range(len(self._fields) + 1):
            self._states = self.evaluator.evaluate_all(self._values, self._fields, self._states)
            if not self._clear_hidden():
                break

    def _clear_hidden(self) -> bool:
        cleared = False
        for name, state in self._states.items():
            if state.is_visible:
                continue
            if name in self._values:
                del self._values[name]
                cleared = True
            if name in self._files:
                del self._files[name]
                cleared = True
            self._errors.pop(name, None)
        if cleared:
            self.logger.debug("Cleared values of hidden fields")
        return cleared

    def _validate(self) -> None:
        result = self.validator.validate_form_values(self._values, self._fields, self._states)
        self._errors = result.errors

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.values
        for listener in list(self._listeners):
            listener(snapshot)
