"""Adapter lifecycle, health tracking and provider switching."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List

from graphweaver.domain.catalog import models_for_provider
from graphweaver.domain.config import PluginSettings
from graphweaver.domain.errors import ConfigurationError, NotReadyError
from graphweaver.domain.models import AdapterHealthStatus, ModelDescriptor, ProviderIdentity
from graphweaver.infrastructure.adapters import DEFAULT_TEST_PROMPT, ProviderAdapter, create_adapter
from graphweaver.utils.notifications import Notifier
from graphweaver.utils.response_validator import ResponseValidator

from .settings_service import SettingsService
from .state import AIStateStore, StateEvent

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[ProviderIdentity, SettingsService], ProviderAdapter]


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DESTROYING = "destroying"
    DESTROYED = "destroyed"
    ERROR = "error"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AdapterRegistry:
    """Owns one adapter per provider and the currently active provider.

    Switching is driven by settings changes: when the selected provider differs
    from the active one the target adapter is validated and only then committed.
    A failed switch records the error and, unless a newer selection is already
    queued, writes the previous provider back into the settings. At most one
    switch runs at a time; selections made while one is running collapse into a
    single pending target handled afterwards. A switch that finishes validating
    after teardown began is not committed.
    """

    def __init__(
        self,
        settings: SettingsService,
        *,
        state_store: AIStateStore | None = None,
        notifier: Notifier | None = None,
        validator: ResponseValidator | None = None,
        adapter_factory: AdapterFactory | None = None,
        providers: Iterable[ProviderIdentity] | None = None,
    ) -> None:
        self._settings = settings
        self._state_store = state_store or AIStateStore()
        self._notifier = notifier or Notifier()
        self._validator = validator or ResponseValidator()
        self._adapter_factory = adapter_factory or self._create_adapter
        self._providers = tuple(providers) if providers is not None else tuple(ProviderIdentity)

        self._adapters: Dict[ProviderIdentity, ProviderAdapter] = {}
        self._status: Dict[ProviderIdentity, AdapterHealthStatus] = {}
        self._current = settings.get_settings().ai_provider.selected
        self._state = LifecycleState.UNINITIALIZED
        self._error: str | None = None
        self._unsubscribers: List[Callable[[], None]] = []
        self._unloading = False

        self._switch_lock = asyncio.Lock()
        self._switch_task: asyncio.Task[None] | None = None
        self._pending_target: ProviderIdentity | None = None
        self._known_api_keys: Dict[ProviderIdentity, str] = {}

    # ------------------------------------------------------------------
    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def current_provider(self) -> ProviderIdentity:
        return self._current

    @property
    def state_store(self) -> AIStateStore:
        return self._state_store

    def is_ready(self) -> bool:
        return self._state is LifecycleState.READY and not self._unloading

    # ------------------------------------------------------------------
    async def initialize(self) -> None:
        if self._state is LifecycleState.READY:
            return
        self._state = LifecycleState.INITIALIZING
        try:
            self._initialize_adapters()
            self._known_api_keys = dict(self._settings.get_settings().ai_provider.api_keys)
            self._unsubscribers.append(self._settings.subscribe(self._on_settings_changed))
            self._state = LifecycleState.READY
            self._push_state(StateEvent.INITIALIZATION_CHANGED)
            logger.info(
                "Adapter registry ready with %d adapters (current provider: %s)",
                len(self._adapters),
                self._current.value,
            )
        except Exception as exc:
            self._state = LifecycleState.ERROR
            self._error = str(exc) or "Failed to initialize adapters"
            logger.exception("Adapter registry initialization failed")
            raise

    async def destroy(self) -> None:
        if self._unloading:
            return
        self._unloading = True
        self._state = LifecycleState.DESTROYING
        try:
            for unsubscribe in self._unsubscribers:
                unsubscribe()
            self._unsubscribers.clear()
            self._pending_target = None

            if self._switch_task is not None and not self._switch_task.done():
                await self._switch_task

            await asyncio.gather(
                *(self._destroy_adapter(provider, adapter) for provider, adapter in self._adapters.items())
            )
            self._adapters.clear()
            self._status.clear()
            self._state_store.update(
                StateEvent.INITIALIZATION_CHANGED,
                is_initialized=False,
                is_connected=False,
                is_processing=False,
            )
            self._state = LifecycleState.DESTROYED
        except Exception as exc:
            self._state = LifecycleState.ERROR
            self._error = str(exc) or "Failed to destroy adapters"
            raise

    # ------------------------------------------------------------------
    def get_adapter(self, provider: ProviderIdentity | str) -> ProviderAdapter | None:
        return self._adapters.get(ProviderIdentity.parse(provider))

    def get_current_adapter(self) -> ProviderAdapter:
        if self._unloading:
            raise NotReadyError("Adapter registry is being unloaded")
        adapter = self._adapters.get(self._current)
        if adapter is None:
            raise NotReadyError(f"No adapter available for current provider: {self._current.value}")
        return adapter

    async def validate_adapter(self, provider: ProviderIdentity | str) -> bool:
        if self._unloading:
            return False
        identity = ProviderIdentity.parse(provider)
        adapter = self._adapters.get(identity)
        if adapter is None:
            return False

        try:
            is_valid = await adapter.validate_api_key()
        except Exception as exc:
            self.update_adapter_status(
                identity,
                is_connected=False,
                last_error=str(exc) or "Unknown error",
                last_validated_at=_now(),
            )
            return False

        self.update_adapter_status(identity, is_connected=is_valid, last_validated_at=_now())
        return is_valid

    async def test_connection(self, provider: ProviderIdentity | str) -> bool:
        if self._unloading:
            return False
        identity = ProviderIdentity.parse(provider)
        adapter = self._adapters.get(identity)
        if adapter is None:
            self._handle_error(f"No adapter available for provider: {identity.value}")
            return False

        try:
            models = models_for_provider(identity)
            if not models:
                raise ConfigurationError(f"No models available for provider: {identity.value}")
            is_connected = await adapter.test_connection(DEFAULT_TEST_PROMPT, models[0].api_identifier)
        except Exception as exc:
            message = str(exc) or "Unknown error during connection test"
            self.update_adapter_status(identity, is_connected=False, last_error=message)
            self._handle_error(message)
            return False

        if is_connected:
            self.update_adapter_status(
                identity,
                is_connected=True,
                last_connected_at=_now(),
                last_error=None,
            )
        else:
            self.update_adapter_status(identity, is_connected=False, last_error="Connection test failed")
        return is_connected

    async def test_all_connections(self) -> Dict[ProviderIdentity, bool]:
        providers = list(self._adapters)
        results = await asyncio.gather(*(self.test_connection(provider) for provider in providers))
        return dict(zip(providers, results))

    # ------------------------------------------------------------------
    async def switch_provider(self, provider: ProviderIdentity | str) -> bool:
        """Validate *provider* and make it current; roll settings back on failure."""

        target = ProviderIdentity.parse(provider)
        async with self._switch_lock:
            switched = await self._switch(target)
        if switched and self._settings.get_settings().ai_provider.selected is not target:
            self._settings.set_selected_provider(target)
        return switched

    def request_switch(self, provider: ProviderIdentity | str) -> asyncio.Task[None] | None:
        """Schedule a switch, coalescing with one already in flight."""

        target = ProviderIdentity.parse(provider)
        if self._unloading:
            return None
        if self._switch_in_flight():
            self._pending_target = target
            return self._switch_task

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; switch to %s deferred", target.value)
            self._pending_target = target
            return None
        self._pending_target = None
        self._switch_task = loop.create_task(self._drain_switches(target))
        return self._switch_task

    async def wait_for_switch(self) -> None:
        if not self._switch_in_flight() and self._pending_target is not None:
            target, self._pending_target = self._pending_target, None
            self.request_switch(target)
        if self._switch_task is not None:
            await self._switch_task

    # ------------------------------------------------------------------
    def update_adapter_status(self, provider: ProviderIdentity, **changes: Any) -> None:
        if self._unloading:
            return
        current = self._status.get(provider) or AdapterHealthStatus()
        self._status[provider] = replace(current, **changes)
        self._push_state()

    def get_adapter_status(self, provider: ProviderIdentity | str) -> AdapterHealthStatus | None:
        return self._status.get(ProviderIdentity.parse(provider))

    def get_all_adapter_status(self) -> Dict[ProviderIdentity, AdapterHealthStatus]:
        return dict(self._status)

    def is_adapter_healthy(self, provider: ProviderIdentity | str) -> bool:
        status = self._status.get(ProviderIdentity.parse(provider))
        return status is not None and status.is_healthy

    def get_healthy_adapters(self) -> List[ProviderIdentity]:
        return [provider for provider, status in self._status.items() if status.is_healthy]

    def get_all_available_models(self) -> List[ModelDescriptor]:
        models: List[ModelDescriptor] = []
        for provider in self._adapters:
            models.extend(models_for_provider(provider))
        return models

    # ------------------------------------------------------------------
    def _create_adapter(self, provider: ProviderIdentity, settings: SettingsService) -> ProviderAdapter:
        return create_adapter(provider, settings, validator=self._validator, notifier=self._notifier)

    def _initialize_adapters(self) -> None:
        for provider in self._providers:
            try:
                adapter = self._adapter_factory(provider, self._settings)
            except Exception as exc:
                message = str(exc) or "Unknown error"
                logger.error("Failed to initialize adapter for %s: %s", provider.value, message)
                self._status[provider] = AdapterHealthStatus(
                    is_initialized=False,
                    is_connected=False,
                    last_error=message,
                )
                continue
            self._adapters[provider] = adapter
            self._status[provider] = AdapterHealthStatus(is_initialized=True, is_connected=False)

    async def _destroy_adapter(self, provider: ProviderIdentity, adapter: ProviderAdapter) -> None:
        try:
            await adapter.destroy()
        except Exception as exc:
            logger.warning("Failed to destroy adapter for %s: %s", provider.value, str(exc) or "Unknown error")

    def _switch_in_flight(self) -> bool:
        return self._switch_task is not None and not self._switch_task.done()

    async def _drain_switches(self, target: ProviderIdentity | None) -> None:
        while target is not None:
            if target is not self._current:
                async with self._switch_lock:
                    await self._switch(target)
            target, self._pending_target = self._pending_target, None

    async def _switch(self, target: ProviderIdentity) -> bool:
        if self._unloading:
            return False
        previous = self._current
        try:
            if self._adapters.get(target) is None:
                raise ConfigurationError(f"No adapter available for provider: {target.value}")
            is_valid = await self.validate_adapter(target)
            if self._unloading:
                return False
            if not is_valid:
                raise ConfigurationError(f"Failed to validate adapter for provider: {target.value}")
        except Exception as exc:
            message = str(exc) or "Unknown error"
            logger.error("Provider switch from %s to %s failed: %s", previous.value, target.value, message)
            if target in self._status:
                self.update_adapter_status(target, last_error=message)
            self._handle_error(message)
            self._notifier.error(f"Failed to switch AI provider to {target.label}: {message}")
            self._rollback(previous, target)
            return False

        self._current = target
        self._error = None
        self._push_state(StateEvent.PROVIDER_CHANGED)
        logger.info("Switched AI provider from %s to %s", previous.value, target.value)
        return True

    def _rollback(self, previous: ProviderIdentity, target: ProviderIdentity) -> None:
        # A newer selection already queued behind the failed target stands.
        if self._unloading:
            return
        selected = self._settings.get_settings().ai_provider.selected
        if selected is target and selected is not previous:
            self._settings.set_selected_provider(previous)

    def _on_settings_changed(self, settings: PluginSettings) -> None:
        if self._unloading:
            return
        self._sync_api_keys(settings)
        selected = settings.ai_provider.selected
        if self._switch_in_flight():
            self._pending_target = selected
        elif selected is not self._current:
            self.request_switch(selected)

    def _sync_api_keys(self, settings: PluginSettings) -> None:
        api_keys = dict(settings.ai_provider.api_keys)
        for provider in set(api_keys) | set(self._known_api_keys):
            key = api_keys.get(provider, "")
            if key == self._known_api_keys.get(provider, ""):
                continue
            adapter = self._adapters.get(provider)
            if adapter is not None:
                adapter.set_api_key(key)
                logger.debug("Updated API key for %s", provider.value)
        self._known_api_keys = api_keys

    def _push_state(self, event: StateEvent = StateEvent.STATUS_CHANGED) -> None:
        if self._unloading:
            return
        adapter = self._adapters.get(self._current)
        status = self._status.get(self._current)
        if adapter is None or status is None:
            return
        models = models_for_provider(self._current)
        self._state_store.update(
            event,
            is_initialized=status.is_initialized,
            is_connected=status.is_connected,
            provider=self._current,
            current_model=models[0].api_identifier if adapter.get_api_key() and models else "",
            available_models=models,
            is_processing=False,
            error=status.last_error,
        )

    def _handle_error(self, message: str) -> None:
        if self._unloading:
            return
        logger.error("Adapter registry error: %s", message)
        self._error = message
        self._state_store.report_error(message)


__all__ = ["AdapterFactory", "AdapterRegistry", "LifecycleState"]
