"""GraphWeaver: a uniform async adapter layer over hosted and local LLM providers."""

from __future__ import annotations

from .application import AdapterRegistry, AIStateStore, ApplicationContext, SettingsService
from .domain import (
    Failure,
    GenerationOptions,
    GenerationResult,
    ModelDescriptor,
    PluginSettings,
    ProviderIdentity,
    Success,
)
from .infrastructure.adapters import LLMAdapter, ProviderAdapter, create_adapter
from .utils import ResponseValidator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AdapterRegistry",
    "AIStateStore",
    "ApplicationContext",
    "SettingsService",
    "Failure",
    "GenerationOptions",
    "GenerationResult",
    "ModelDescriptor",
    "PluginSettings",
    "ProviderIdentity",
    "Success",
    "LLMAdapter",
    "ProviderAdapter",
    "create_adapter",
    "ResponseValidator",
]
