# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Configuration - Package exports and singleton
# PURPOSE: get_config / reset_config / debug_config over AppConfig
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: get_config, reset_config, debug_config, AppConfig, ServerConfig, FormConfig
# DEPENDENCIES: pydantic
# ============================================================================
"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── server_config.py         # Remote processing server
    ├── form_config.py           # Form engine behaviour
    └── defaults.py              # Default value constants

Usage:
    # Singleton pattern (preferred)
    from config import get_config
    config = get_config()
    timeout = config.server.request_timeout_seconds

    # Debug output
    from config import debug_config
    info = debug_config()  # Token masked
"""

from typing import Optional

from .server_config import ServerConfig
from .form_config import FormConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, token masked
    """
    try:
        config = get_config()
        return {
            'server': config.server.debug_dict(),
            'form': config.form.model_dump(),
            'debug_mode': config.debug_mode,
            'environment': config.environment,
            'log_level': config.log_level,
        }
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


__all__ = [
    'AppConfig',
    'ServerConfig',
    'FormConfig',
    'get_config',
    'reset_config',
    'debug_config',
]
