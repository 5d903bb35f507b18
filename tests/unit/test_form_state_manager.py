"""
Form session tests: seeding, visibility erasure, workspace switches,
file side-table and submission.
"""

import json

import pytest

from config import FormConfig
from exceptions import ConfigurationError, ContractViolationError, FormValidationError
from core.models import FieldErrorCode, FormFieldType, SubmissionPayload, VisibilityState
from services import FormStateManager, apply_remote_dataset, parse_submission_form_data
from tests.factories.model_factories import (
    make_list_options,
    make_uploaded_file,
    make_workspace_parameter,
)


def _mode_detail_parameters(detail_required=False):
    return [
        make_workspace_parameter(
            name="mode", type="CHOICE", defaultValue="A",
            listOptions=make_list_options("A", "B"),
        ),
        make_workspace_parameter(
            name="detail", optional=not detail_required,
            visibility={
                "if": [{"$equals": {"parameter": "mode", "value": "A"}, "then": "visibleEnabled"}],
                "default": {"value": "hiddenDisabled"},
            },
        ),
    ]


class TestInitialize:
    def test_defaults_seeded(self, manager):
        manager.initialize([
            make_workspace_parameter(name="qty", type="INTEGER", defaultValue=3),
            make_workspace_parameter(name="note"),
        ])
        assert manager.values == {"qty": 3}
        assert [field.name for field in manager.fields] == ["qty", "note"]

    def test_required_without_default_reports_error(self, manager):
        manager.initialize([make_workspace_parameter(name="title", optional=False)])
        assert manager.errors == {"title": FieldErrorCode.REQUIRED}
        assert not manager.is_valid

    def test_single_option_auto_selected(self, manager):
        manager.initialize([
            make_workspace_parameter(name="format", type="CHOICE", listOptions=[{"value": "GeoJSON"}]),
        ])
        assert manager.values["format"] == "GeoJSON"

        manager.update_field("format", "Shapefile")
        assert manager.values["format"] == "GeoJSON"

    def test_synthetic_fields_included(self, remote_form_config):
        manager = FormStateManager("test.fmw", form_config=remote_form_config)
        manager.initialize([make_workspace_parameter(name="a")])
        assert "__upload_file__" in [field.name for field in manager.fields]


class TestVisibility:
    def test_hidden_field_value_erased(self, manager):
        manager.initialize(_mode_detail_parameters())
        manager.update_field("detail", "keep me")
        assert manager.states["detail"] is VisibilityState.VISIBLE_ENABLED

        manager.update_field("mode", "B")
        assert manager.states["detail"] is VisibilityState.HIDDEN_DISABLED
        assert "detail" not in manager.values

    def test_reshown_field_starts_empty(self, manager):
        manager.initialize(_mode_detail_parameters(detail_required=True))
        manager.update_field("detail", "keep me")
        manager.update_field("mode", "B")
        assert "detail" not in manager.errors

        manager.update_field("mode", "A")
        assert "detail" not in manager.values
        assert manager.errors == {"detail": FieldErrorCode.REQUIRED}

    def test_hidden_file_erased(self, manager):
        parameters = _mode_detail_parameters()
        parameters[1] = make_workspace_parameter(
            name="detail", type="FILENAME", visibility=parameters[1].visibility,
        )
        manager.initialize(parameters)
        manager.update_field("detail", make_uploaded_file())
        assert "detail" in manager.files

        manager.update_field("mode", "B")
        assert manager.files == {}
        assert "detail" not in manager.values

    def test_visible_fields_and_render_model(self, manager):
        manager.initialize(_mode_detail_parameters() + [
            make_workspace_parameter(name="tags", type="LISTBOX", listOptions=make_list_options("x", "y")),
        ])
        manager.update_field("mode", "B")

        assert [field.name for field in manager.visible_fields] == ["mode", "tags"]
        render = {state.config.name: state for state in manager.render_model()}
        assert render["tags"].value == []
        assert render["mode"].value == "B"
        assert render["mode"].visibility_state is VisibilityState.VISIBLE_ENABLED

    def test_visible_disabled_is_read_only(self, manager):
        manager.initialize([
            make_workspace_parameter(name="flag", type="TEXT", defaultValue="on"),
            make_workspace_parameter(name="locked", visibility={
                "if": [{"$equals": {"parameter": "flag", "value": "on"}, "then": "visibleDisabled"}],
            }),
        ])
        render = {state.config.name: state for state in manager.render_model()}
        assert render["locked"].read_only is True
        assert render["flag"].read_only is False


class TestWorkspaceSwitch:
    def test_no_stale_values_after_reset(self, manager):
        first = [make_workspace_parameter(name=f"w1_{i}", defaultValue=f"v{i}") for i in range(3)]
        second = [make_workspace_parameter(name=f"w2_{i}") for i in range(5)]

        manager.initialize(first, workspace_name="first.fmw")
        manager.update_field("w1_0", "changed")
        manager.reset_form(second, workspace_name="second.fmw")

        names = {field.name for field in manager.fields}
        assert len(names) == 5
        assert set(manager.values) <= names
        assert manager.workspace_name == "second.fmw"

    def test_clear(self, manager):
        manager.initialize(_mode_detail_parameters())
        manager.clear()
        assert manager.fields == []
        assert manager.values == {}
        assert manager.parameters == []


class TestUpdates:
    def test_unknown_field_rejected(self, manager):
        manager.initialize([make_workspace_parameter(name="a")])
        with pytest.raises(ContractViolationError):
            manager.update_field("nope", 1)

    def test_file_side_table(self, manager):
        manager.initialize([make_workspace_parameter(name="src", type="FILENAME")])
        upload = make_uploaded_file()
        manager.update_field("src", upload)
        assert manager.files == {"src": upload}
        assert manager.values["src"] == upload.name

        manager.update_field("src", None)
        assert manager.files == {}
        assert manager.values["src"] == ""

    def test_listener_receives_snapshot(self, manager):
        manager.initialize([make_workspace_parameter(name="a")])
        seen = []
        unsubscribe = manager.on_values_change(seen.append)

        manager.update_field("a", "one")
        unsubscribe()
        manager.update_field("a", "two")

        assert seen == [{"a": "one"}]
        seen[0]["a"] = "mutated"
        assert manager.values["a"] == "two"

    def test_set_geometry(self, manager):
        manager.initialize([make_workspace_parameter(name="aoi", type="GEOMETRY")])
        manager.set_geometry({"type": "Point", "coordinates": [1, 2]})
        assert json.loads(manager.values["aoi"]) == {"type": "Point", "coordinates": [1, 2]}

        manager.set_geometry(None)
        assert "aoi" not in manager.values

    def test_unparsable_geometry_clears(self, manager):
        manager.initialize([make_workspace_parameter(name="aoi", type="GEOMETRY")])
        manager.set_geometry("POINT (1 2)")
        manager.set_geometry("not a geometry")
        assert "aoi" not in manager.values


class TestSubmit:
    def test_no_parameters(self, manager):
        with pytest.raises(ConfigurationError):
            manager.submit(lambda payload: None)

    def test_sink_must_be_callable(self, manager):
        manager.initialize([make_workspace_parameter(name="a")])
        with pytest.raises(ContractViolationError):
            manager.submit("not callable")

    def test_invalid_form_blocks_sink(self, manager):
        manager.initialize([
            make_workspace_parameter(name="qty", type="INTEGER", optional=False, minimum=1, maximum=10),
            make_workspace_parameter(name="title", optional=False),
        ])
        manager.update_field("qty", 11)
        calls = []

        with pytest.raises(FormValidationError) as exc_info:
            manager.submit(calls.append)

        assert exc_info.value.error_count == 2
        assert manager.errors["qty"] is FieldErrorCode.ABOVE_MAX
        assert calls == []

    def test_payload(self, manager):
        manager.initialize([
            make_workspace_parameter(name="qty", type="INTEGER", optional=False, minimum=1, maximum=10),
            make_workspace_parameter(name="level", type="CHOICE", listOptions=make_list_options("1", "2")),
            make_workspace_parameter(name="src", type="FILENAME"),
            make_workspace_parameter(name="aoi", type="GEOMETRY"),
        ])
        upload = make_uploaded_file()
        manager.update_field("qty", 5)
        manager.update_field("level", "2")
        manager.update_field("src", upload)
        manager.set_geometry("POINT (3 4)")
        calls = []

        payload = manager.submit(calls.append)

        assert calls == [payload]
        assert isinstance(payload, SubmissionPayload)
        assert payload.type == "test.fmw"
        assert payload.data["qty"] == 5
        assert payload.data["level"] == 2
        assert payload.data["src"] is upload
        assert json.loads(payload.data["aoi"])["type"] == "Point"

    def test_hidden_values_not_submitted(self, manager):
        manager.initialize(_mode_detail_parameters())
        manager.update_field("detail", "x")
        manager.update_field("mode", "B")
        payload = manager.submit(lambda p: None)
        assert payload.data == {"mode": "B"}


def test_range_slider_renders_numeric_input_when_disabled():
    manager = FormStateManager(form_config=FormConfig(disable_range_slider=True))
    manager.initialize([make_workspace_parameter(name="r", type="RANGE_SLIDER")])
    assert manager.fields[0].type is FormFieldType.NUMERIC_INPUT


def test_sink_failure_propagates(manager):
    manager.initialize([make_workspace_parameter(name="a")])

    def failing_sink(payload):
        raise RuntimeError("transport down")

    with pytest.raises(RuntimeError, match="transport down"):
        manager.submit(failing_sink)


def test_hidden_geometry_field_not_submitted(manager):
    manager.initialize([
        make_workspace_parameter(
            name="mode", type="CHOICE", defaultValue="A",
            listOptions=make_list_options("A", "B"),
        ),
        make_workspace_parameter(
            name="aoi", type="GEOMETRY",
            visibility={
                "if": [{"$equals": {"parameter": "mode", "value": "A"}, "then": "visibleEnabled"}],
                "default": {"value": "hiddenDisabled"},
            },
        ),
    ])
    manager.set_geometry("POINT (3 4)")
    assert "aoi" in manager.values

    manager.update_field("mode", "B")
    assert manager.states["aoi"] is VisibilityState.HIDDEN_DISABLED

    payload = manager.submit(lambda p: None)
    assert "aoi" not in payload.data

    manager.update_field("mode", "A")
    payload = manager.submit(lambda p: None)
    assert json.loads(payload.data["aoi"])["type"] == "Point"


def test_payload_turns_into_job_parameters(remote_form_config):
    manager = FormStateManager("test.fmw", form_config=remote_form_config)
    manager.initialize([
        make_workspace_parameter(name="src", type="FILENAME"),
        make_workspace_parameter(name="note", defaultValue="hi"),
    ])
    manager.update_field("__remote_dataset_url__", "https://data.example.com/sample.zip")

    payload = manager.submit(lambda p: None)
    assert payload.data["__remote_dataset_url__"] == "https://data.example.com/sample.zip"

    parsed = parse_submission_form_data(payload.data)
    params = dict(parsed.sanitized)
    apply_remote_dataset(params, remote_form_config, parsed.remote_url, parameters=manager.parameters)

    assert "__remote_dataset_url__" not in params
    assert "__upload_file__" not in params
    assert params["opt_geturl"] == "https://data.example.com/sample.zip"
    assert params["note"] == "hi"
