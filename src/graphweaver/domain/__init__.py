"""Provider identities, model catalog, settings and error taxonomy."""

from __future__ import annotations

from .catalog import MODEL_CATALOG, first_model, get_model_by_api_name, model_supports_capability, models_for_provider
from .config import (
    AdvancedSettings,
    ConfigError,
    LocalModelSettings,
    PluginSettings,
    ProviderSettings,
    SettingsProvider,
)
from .errors import (
    AuthenticationError,
    ConfigurationError,
    FormatError,
    GraphWeaverError,
    HTTPStatusError,
    NetworkError,
    NotReadyError,
    RateLimitError,
    ServerError,
)
from .models import (
    AdapterHealthStatus,
    Failure,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    ModelCapabilities,
    ModelDescriptor,
    ProviderIdentity,
    Success,
)

__all__ = [
    "MODEL_CATALOG",
    "first_model",
    "get_model_by_api_name",
    "model_supports_capability",
    "models_for_provider",
    "AdvancedSettings",
    "ConfigError",
    "LocalModelSettings",
    "PluginSettings",
    "ProviderSettings",
    "SettingsProvider",
    "AuthenticationError",
    "ConfigurationError",
    "FormatError",
    "GraphWeaverError",
    "HTTPStatusError",
    "NetworkError",
    "NotReadyError",
    "RateLimitError",
    "ServerError",
    "AdapterHealthStatus",
    "Failure",
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResult",
    "ModelCapabilities",
    "ModelDescriptor",
    "ProviderIdentity",
    "Success",
]
