# ============================================================================
# SERVER CONFIGURATION
# ============================================================================
# STATUS: Configuration - Remote processing server settings
# PURPOSE: Server URL, token, repository and timeout from FORM_* env vars
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ServerConfig
# DEPENDENCIES: pydantic, config.defaults
# ============================================================================
"""
Remote Processing Server Configuration.

Provides configuration for:
    - Server base URL and API path
    - Token authentication
    - Default repository
    - Request timeout

Exports:
    ServerConfig: Pydantic server configuration model
"""

import os
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from exceptions import ConfigurationError
from .defaults import ServerDefaults


class ServerConfig(BaseModel):
    """
    Remote processing server configuration.

    The token is kept out of repr and debug output.
    """

    server_url: Optional[str] = Field(
        default=None,
        description="Base URL of the processing server (e.g. https://flow.example.com)"
    )

    token: Optional[str] = Field(
        default=None,
        repr=False,
        description="API token sent as 'Authorization: fmetoken token=<token>'"
    )

    repository: str = Field(
        default=ServerDefaults.REPOSITORY,
        description="Repository that holds the workspaces"
    )

    api_base_path: str = Field(
        default=ServerDefaults.API_BASE_PATH,
        description="REST API base path on the server"
    )

    request_timeout_seconds: float = Field(
        default=ServerDefaults.REQUEST_TIMEOUT_SECONDS,
        ge=1,
        le=300,
        description="Timeout for each HTTP request in seconds"
    )

    @field_validator('server_url')
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Drop trailing slashes so path joins stay predictable."""
        if v is None:
            return v
        stripped = v.strip().rstrip('/')
        return stripped or None

    @field_validator('api_base_path')
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        """Ensure a single leading slash and no trailing slash."""
        return '/' + v.strip().strip('/')

    def missing_fields(self) -> List[str]:
        """Names of fields required to reach the server that are unset."""
        missing = []
        if not self.server_url:
            missing.append("server_url")
        if not self.token:
            missing.append("token")
        if not self.repository:
            missing.append("repository")
        return missing

    def require_complete(self) -> "ServerConfig":
        """
        Raise ConfigurationError when the server cannot be reached with this config.

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: server_url, token or repository missing
        """
        missing = self.missing_fields()
        if missing:
            raise ConfigurationError(
                f"Missing required server configuration: {', '.join(missing)}"
            )
        return self

    def debug_dict(self) -> dict:
        """Debug output with masked token."""
        return {
            "server_url": self.server_url,
            "token": "***MASKED***" if self.token else None,
            "repository": self.repository,
            "api_base_path": self.api_base_path,
            "request_timeout_seconds": self.request_timeout_seconds,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            server_url=os.environ.get("FORM_SERVER_URL"),
            token=os.environ.get("FORM_SERVER_TOKEN"),
            repository=os.environ.get("FORM_REPOSITORY", ServerDefaults.REPOSITORY),
            api_base_path=os.environ.get("FORM_API_BASE_PATH", ServerDefaults.API_BASE_PATH),
            request_timeout_seconds=float(
                os.environ.get("FORM_REQUEST_TIMEOUT", str(ServerDefaults.REQUEST_TIMEOUT_SECONDS))
            ),
        )
