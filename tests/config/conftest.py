"""
Config test fixtures — clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "FORM_SERVER_URL", "FORM_SERVER_TOKEN", "FORM_REPOSITORY",
        "FORM_API_BASE_PATH", "FORM_REQUEST_TIMEOUT",
        "FORM_ALLOW_REMOTE_DATASET", "FORM_ALLOW_REMOTE_URL_DATASET",
        "FORM_UPLOAD_TARGET_PARAM", "FORM_DISABLE_RANGE_SLIDER",
        "FORM_MIN_LOADING_MS", "FORM_LOAD_DEBOUNCE_MS", "FORM_ERROR_MESSAGE_MAX_LENGTH",
        "DEBUG_MODE", "DEBUG_LOGGING", "ENVIRONMENT", "LOG_LEVEL",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
