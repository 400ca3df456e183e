"""Application services: settings, state store, adapter registry and context."""

from __future__ import annotations

from .adapter_registry import AdapterFactory, AdapterRegistry, LifecycleState
from .context import ApplicationContext
from .settings_service import SettingsListener, SettingsService
from .state import AIState, AIStateStore, StateEvent, StateTransition

__all__ = [
    "AdapterFactory",
    "AdapterRegistry",
    "LifecycleState",
    "ApplicationContext",
    "SettingsListener",
    "SettingsService",
    "AIState",
    "AIStateStore",
    "StateEvent",
    "StateTransition",
]
