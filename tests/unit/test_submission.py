"""
Remote dataset submission helper tests.
"""

from config import FormConfig
from core.models import TextOrFileValue
from services import (
    apply_remote_dataset,
    apply_uploaded_dataset_param,
    find_upload_parameter_target,
    parse_submission_form_data,
    resolve_upload_target,
    sanitize_opt_geturl,
    sanitize_param_key,
)
from tests.factories.model_factories import make_uploaded_file, make_workspace_parameter

SAFE_URL = "https://data.example.com/roads.zip"


class TestParseSubmission:
    def test_synthetic_fields_split_off(self):
        upload = make_uploaded_file()
        raw = {
            "__upload_file__": upload,
            "__remote_dataset_url__": f"  {SAFE_URL} ",
            "opt_geturl": "   ",
            "notes": TextOrFileValue(mode="text", text="hello"),
            "count": 3,
        }
        parsed = parse_submission_form_data(raw)

        assert parsed.sanitized == {"notes": "hello", "count": 3}
        assert parsed.upload_file is upload
        assert parsed.remote_url == SAFE_URL
        assert "__upload_file__" in raw

    def test_opt_geturl_trimmed(self):
        parsed = parse_submission_form_data({"opt_geturl": f" {SAFE_URL} "})
        assert parsed.sanitized == {"opt_geturl": SAFE_URL}
        assert parsed.upload_file is None
        assert parsed.remote_url == ""


class TestUploadTarget:
    def test_sanitize_param_key(self):
        assert sanitize_param_key(" Source Dataset!") == "SourceDataset"
        assert sanitize_param_key("  ", "fallback") == "fallback"
        assert sanitize_param_key(None) == ""

    def test_resolve_upload_target(self):
        assert resolve_upload_target(FormConfig(upload_target_param_name="In Data")) == "InData"
        assert resolve_upload_target(FormConfig()) is None
        assert resolve_upload_target(None) is None

    def test_find_upload_parameter(self):
        parameters = [
            make_workspace_parameter(name="title"),
            make_workspace_parameter(name="src", type="FILENAME_MUSTEXIST"),
            make_workspace_parameter(name="other", type="FILENAME"),
        ]
        assert find_upload_parameter_target(parameters) == "src"
        assert find_upload_parameter_target([]) is None

    def test_explicit_target_wins(self):
        params = {}
        parameters = [make_workspace_parameter(name="src", type="FILENAME")]
        assert apply_uploaded_dataset_param(params, "/tmp/a.zip", parameters, explicit_target="Input") == "Input"
        assert params == {"Input": "/tmp/a.zip"}

    def test_file_parameter_target(self):
        params = {}
        parameters = [make_workspace_parameter(name="src", type="FILENAME")]
        assert apply_uploaded_dataset_param(params, "/tmp/a.zip", parameters) == "src"
        assert params == {"src": "/tmp/a.zip"}

    def test_source_dataset_fallback(self):
        params = {}
        assert apply_uploaded_dataset_param(params, "/tmp/a.zip") == "SourceDataset"
        assert params == {"SourceDataset": "/tmp/a.zip"}

    def test_fallback_never_overwrites(self):
        params = {"SourceDataset": "existing"}
        assert apply_uploaded_dataset_param(params, "/tmp/a.zip") is None
        assert params == {"SourceDataset": "existing"}

    def test_no_path(self):
        params = {}
        assert apply_uploaded_dataset_param(params, "") is None
        assert params == {}


class TestOptGetUrl:
    def test_dropped_when_disabled(self):
        params = {"opt_geturl": SAFE_URL}
        sanitize_opt_geturl(params, FormConfig(allow_remote_dataset=True))
        assert params == {}

    def test_kept_when_enabled_and_safe(self, remote_form_config):
        params = {"opt_geturl": f" {SAFE_URL} "}
        sanitize_opt_geturl(params, remote_form_config)
        assert params == {"opt_geturl": SAFE_URL}

    def test_dropped_when_unsafe(self, remote_form_config):
        params = {"opt_geturl": "https://localhost/data.zip"}
        sanitize_opt_geturl(params, remote_form_config)
        assert params == {}


class TestApplyRemoteDataset:
    def test_remote_url_wins(self, remote_form_config):
        params = {}
        apply_remote_dataset(params, remote_form_config, remote_url=SAFE_URL, uploaded_path="/tmp/a.zip")
        assert params == {"opt_geturl": SAFE_URL}

    def test_unsafe_url_falls_back_to_upload(self, remote_form_config):
        params = {}
        apply_remote_dataset(params, remote_form_config, remote_url="https://10.0.0.1/a.zip",
                             uploaded_path="/tmp/a.zip")
        assert params == {"SourceDataset": "/tmp/a.zip"}

    def test_upload_routed_with_configured_target(self):
        config = FormConfig(allow_remote_dataset=True, upload_target_param_name="InputFile")
        params = {"opt_geturl": SAFE_URL}
        apply_remote_dataset(params, config, uploaded_path="/tmp/a.zip")
        assert params == {"InputFile": "/tmp/a.zip"}

    def test_disabled_does_nothing(self, form_config):
        params = {"a": 1}
        apply_remote_dataset(params, form_config, remote_url=SAFE_URL, uploaded_path="/tmp/a.zip")
        assert params == {"a": 1}
