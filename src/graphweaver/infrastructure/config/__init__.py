"""Settings file loading and validation."""

from __future__ import annotations

from .loader import API_KEY_ENV_VARS, apply_env_overrides, build_settings, load_settings
from .validators import build_validator, format_error, validate_with_schema

__all__ = [
    "API_KEY_ENV_VARS",
    "apply_env_overrides",
    "build_settings",
    "load_settings",
    "build_validator",
    "format_error",
    "validate_with_schema",
]
