# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================
# STATUS: Configuration - Composition root
# PURPOSE: Compose server and form settings with debug and log level
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: AppConfig
# DEPENDENCIES: pydantic, config.server_config, config.form_config
# ============================================================================
"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - ServerConfig (remote processing server)
    - FormConfig (form engine behaviour)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.server_config: ServerConfig
    config.form_config: FormConfig
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field

from .server_config import ServerConfig
from .form_config import FormConfig
from .defaults import AppDefaults


class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.
    """

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable debug mode for verbose diagnostics. "
                    "Set DEBUG_MODE=true in environment to enable.",
        examples=[True, False]
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    form: FormConfig = Field(default_factory=FormConfig)

    @classmethod
    def from_environment(cls):
        """Load all configs from environment."""
        return cls(
            debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE).lower()).lower() == "true",
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            server=ServerConfig.from_environment(),
            form=FormConfig.from_environment(),
        )
