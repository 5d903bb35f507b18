"""
Unit test fixtures — form services with explicit configuration.
"""

import pytest

from config import FormConfig
from services import FormStateManager, FormValidator, ParameterFormService


@pytest.fixture
def form_config():
    """Form config with remote datasets off (no synthetic fields)."""
    return FormConfig()


@pytest.fixture
def remote_form_config():
    """Form config with upload and remote URL datasets enabled."""
    return FormConfig(allow_remote_dataset=True, allow_remote_url_dataset=True)


@pytest.fixture
def form_service(form_config):
    return ParameterFormService(form_config)


@pytest.fixture
def validator():
    return FormValidator()


@pytest.fixture
def manager(form_config):
    return FormStateManager(workspace_name="test.fmw", form_config=form_config)
