"""Settings loading: YAML file, schema validation and environment overlay."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from graphweaver.domain.config import (
    AdvancedSettings,
    ConfigError,
    LocalModelSettings,
    PluginSettings,
    ProviderSettings,
)
from graphweaver.domain.models import ProviderIdentity

from .validators import build_validator, format_error, validate_with_schema

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS: Dict[ProviderIdentity, str] = {
    ProviderIdentity.OPENAI: "OPENAI_API_KEY",
    ProviderIdentity.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderIdentity.GOOGLE: "GEMINI_API_KEY",
    ProviderIdentity.GROQ: "GROQ_API_KEY",
    ProviderIdentity.MISTRAL: "MISTRAL_API_KEY",
    ProviderIdentity.PERPLEXITY: "PERPLEXITY_API_KEY",
    ProviderIdentity.OPENROUTER: "OPENROUTER_API_KEY",
}
LMSTUDIO_PORT_ENV = "LMSTUDIO_PORT"
LMSTUDIO_MODEL_ENV = "LMSTUDIO_MODEL"


def _read_yaml(path: Path) -> Mapping[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem error propagation
        raise ConfigError(format_error(path, "<file>", str(exc))) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(format_error(path, "<root>", f"Invalid YAML: {exc}")) from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(format_error(path, "<root>", "Top-level document must be a mapping."))
    return data


def _provider_map(data: Mapping[str, Any] | None) -> Dict[ProviderIdentity, str]:
    return {ProviderIdentity.parse(key): str(value) for key, value in (data or {}).items()}


def _build_provider(data: Mapping[str, Any]) -> ProviderSettings:
    defaults = ProviderSettings()
    selected_models = dict(defaults.selected_models)
    selected_models.update(_provider_map(data.get("selected_models")))
    return ProviderSettings(
        selected=ProviderIdentity.parse(data.get("selected", defaults.selected)),
        api_keys=_provider_map(data.get("api_keys")),
        selected_models=selected_models,
    )


def _build_local(data: Mapping[str, Any]) -> LocalModelSettings:
    defaults = LocalModelSettings()
    return LocalModelSettings(
        enabled=bool(data.get("enabled", defaults.enabled)),
        port=data.get("port", defaults.port),
        model_name=str(data.get("model_name", defaults.model_name)),
    )


def _build_advanced(data: Mapping[str, Any]) -> AdvancedSettings:
    defaults = AdvancedSettings()
    return AdvancedSettings(
        max_tokens=int(data.get("max_tokens", defaults.max_tokens)),
        temperature=float(data.get("temperature", defaults.temperature)),
        request_timeout_s=float(data.get("request_timeout_s", defaults.request_timeout_s)),
    )


def build_settings(data: Mapping[str, Any], path: Path | None = None) -> PluginSettings:
    """Validate a raw settings mapping and turn it into :class:`PluginSettings`."""

    validate_with_schema(build_validator(), data, path or "<settings>")
    return PluginSettings(
        path=path,
        ai_provider=_build_provider(data.get("ai_provider") or {}),
        local_model=_build_local(data.get("local_model") or {}),
        advanced=_build_advanced(data.get("advanced") or {}),
    )


def apply_env_overrides(settings: PluginSettings, env: Mapping[str, str]) -> PluginSettings:
    """Overlay credentials and local server settings taken from *env*."""

    api_keys = dict(settings.ai_provider.api_keys)
    for provider, variable in API_KEY_ENV_VARS.items():
        value = env.get(variable)
        if value:
            logger.debug("Using %s from environment", variable)
            api_keys[provider] = value

    local = settings.local_model
    port = local.port
    raw_port = env.get(LMSTUDIO_PORT_ENV)
    if raw_port:
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigError(
                format_error(LMSTUDIO_PORT_ENV, "local_model.port", f"Invalid port '{raw_port}'.")
            ) from exc
    model_name = env.get(LMSTUDIO_MODEL_ENV) or local.model_name

    return PluginSettings(
        path=settings.path,
        ai_provider=ProviderSettings(
            selected=settings.ai_provider.selected,
            api_keys=api_keys,
            selected_models=dict(settings.ai_provider.selected_models),
        ),
        local_model=LocalModelSettings(enabled=local.enabled, port=port, model_name=model_name),
        advanced=settings.advanced,
    )


def load_settings(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> PluginSettings:
    """Load settings from *path* (defaults when absent) and apply environment overrides."""

    env = os.environ if env is None else env
    if path is None:
        settings = PluginSettings()
    else:
        path = Path(path)
        if path.exists():
            settings = build_settings(_read_yaml(path), path.resolve())
        else:
            logger.info("Settings file %s not found; using defaults", path)
            settings = PluginSettings(path=path)
    return apply_env_overrides(settings, env)


__all__ = [
    "API_KEY_ENV_VARS",
    "LMSTUDIO_PORT_ENV",
    "LMSTUDIO_MODEL_ENV",
    "build_settings",
    "apply_env_overrides",
    "load_settings",
]
