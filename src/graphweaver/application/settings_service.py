"""In-process settings source with change notification."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, List

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.models import ProviderIdentity
from graphweaver.infrastructure.config import load_settings

logger = logging.getLogger(__name__)

SettingsListener = Callable[[PluginSettings], None]


class SettingsService:
    """Holds the current :class:`PluginSettings` snapshot.

    Every change replaces the snapshot and calls subscribers synchronously with
    the new value. A subscriber that raises is logged and skipped.
    """

    def __init__(self, settings: PluginSettings | None = None) -> None:
        self._settings = settings or PluginSettings()
        self._listeners: List[SettingsListener] = []

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> SettingsService:
        return cls(load_settings(path))

    def get_settings(self) -> PluginSettings:
        return self._settings

    # ------------------------------------------------------------------
    def update(self, **sections: Any) -> PluginSettings:
        """Replace whole sections, e.g. ``update(advanced=AdvancedSettings(...))``."""

        self._settings = replace(self._settings, **sections)
        self._emit()
        return self._settings

    def set_selected_provider(self, provider: ProviderIdentity | str) -> PluginSettings:
        ai_provider = replace(self._settings.ai_provider, selected=ProviderIdentity.parse(provider))
        return self.update(ai_provider=ai_provider)

    def set_api_key(self, provider: ProviderIdentity | str, api_key: str) -> PluginSettings:
        identity = ProviderIdentity.parse(provider)
        api_keys = dict(self._settings.ai_provider.api_keys)
        api_keys[identity] = api_key
        return self.update(ai_provider=replace(self._settings.ai_provider, api_keys=api_keys))

    def set_selected_model(self, provider: ProviderIdentity | str, model_api_name: str) -> PluginSettings:
        identity = ProviderIdentity.parse(provider)
        selected_models = dict(self._settings.ai_provider.selected_models)
        selected_models[identity] = model_api_name
        return self.update(
            ai_provider=replace(self._settings.ai_provider, selected_models=selected_models)
        )

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register *listener*; the returned callable removes it again."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    def _emit(self) -> None:
        snapshot = self._settings
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Settings listener %r failed", listener)


__all__ = ["SettingsService", "SettingsListener"]
