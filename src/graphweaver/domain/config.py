"""Domain models representing plugin settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Protocol

from .errors import ConfigurationError
from .models import ProviderIdentity


class ConfigError(ConfigurationError):
    """Raised when a settings file fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


@dataclass(frozen=True, kw_only=True)
class ProviderSettings:
    selected: ProviderIdentity = ProviderIdentity.OPENAI
    api_keys: Mapping[ProviderIdentity, str] = field(default_factory=dict)
    selected_models: Mapping[ProviderIdentity, str] = field(
        default_factory=lambda: {ProviderIdentity.OPENAI: "gpt-4o-mini"}
    )

    def api_key_for(self, provider: ProviderIdentity) -> str:
        return self.api_keys.get(provider, "") or ""


@dataclass(frozen=True, kw_only=True)
class LocalModelSettings:
    enabled: bool = False
    port: int | None = 1234
    model_name: str = ""


@dataclass(frozen=True, kw_only=True)
class AdvancedSettings:
    max_tokens: int = 4096
    temperature: float = 0.3
    request_timeout_s: float = 60.0


@dataclass(frozen=True, kw_only=True)
class PluginSettings:
    path: Path | None = field(default=None, repr=False, compare=False)
    ai_provider: ProviderSettings = field(default_factory=ProviderSettings)
    local_model: LocalModelSettings = field(default_factory=LocalModelSettings)
    advanced: AdvancedSettings = field(default_factory=AdvancedSettings)


class SettingsProvider(Protocol):
    """Read side of the configuration source consumed by adapters."""

    def get_settings(self) -> PluginSettings:
        """Return the current settings snapshot."""


__all__ = [
    "ConfigError",
    "ProviderSettings",
    "LocalModelSettings",
    "AdvancedSettings",
    "PluginSettings",
    "SettingsProvider",
]
