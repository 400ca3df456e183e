"""Observable snapshot of the AI connection state."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Mapping

from graphweaver.domain.models import ModelDescriptor, ProviderIdentity

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class StateEvent(str, Enum):
    PROVIDER_CHANGED = "provider_changed"
    CONNECTION_CHANGED = "connection_changed"
    INITIALIZATION_CHANGED = "initialization_changed"
    MODELS_UPDATED = "models_updated"
    ERROR_OCCURRED = "error_occurred"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True, kw_only=True)
class AIState:
    is_initialized: bool = False
    is_connected: bool = False
    provider: ProviderIdentity = ProviderIdentity.OPENAI
    current_model: str = ""
    available_models: tuple[ModelDescriptor, ...] = ()
    is_processing: bool = False
    error: str | None = None
    last_error: str | None = None


@dataclass(frozen=True, kw_only=True)
class StateTransition:
    event: StateEvent
    before: AIState
    after: AIState
    timestamp: datetime
    metadata: Mapping[str, Any] = field(default_factory=dict)


Observer = Callable[[StateTransition], None]


class AIStateStore:
    """Holds the current :class:`AIState` and notifies observers of each transition.

    Delivery is synchronous and in registration order. Observers that raise are
    logged and do not stop delivery to the rest.
    """

    def __init__(self, initial: AIState | None = None, *, history_limit: int = HISTORY_LIMIT) -> None:
        self._state = initial or AIState()
        self._history: Deque[StateTransition] = deque(maxlen=history_limit)
        self._observers: List[Observer] = []
        self._event_observers: Dict[StateEvent, List[Observer]] = {}

    @property
    def state(self) -> AIState:
        return self._state

    @property
    def history(self) -> List[StateTransition]:
        """Recorded transitions, newest first."""

        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    # ------------------------------------------------------------------
    def update(
        self,
        event: StateEvent = StateEvent.STATUS_CHANGED,
        *,
        metadata: Mapping[str, Any] | None = None,
        **changes: Any,
    ) -> StateTransition:
        before = self._state
        self._state = replace(before, **changes)
        transition = StateTransition(
            event=event,
            before=before,
            after=self._state,
            timestamp=datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
        )
        self._history.appendleft(transition)
        self._deliver(transition)
        return transition

    def report_error(self, message: str, *, metadata: Mapping[str, Any] | None = None) -> StateTransition:
        return self.update(
            StateEvent.ERROR_OCCURRED,
            metadata=metadata,
            error=message,
            last_error=message,
            is_connected=False,
            is_processing=False,
        )

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def subscribe_to_event(self, event: StateEvent, observer: Observer) -> Callable[[], None]:
        self._event_observers.setdefault(event, []).append(observer)

        def unsubscribe() -> None:
            observers = self._event_observers.get(event, [])
            if observer in observers:
                observers.remove(observer)

        return unsubscribe

    # ------------------------------------------------------------------
    def _deliver(self, transition: StateTransition) -> None:
        targets = list(self._observers) + list(self._event_observers.get(transition.event, ()))
        for observer in targets:
            try:
                observer(transition)
            except Exception:
                logger.exception("State observer %r failed for %s", observer, transition.event.value)


__all__ = ["HISTORY_LIMIT", "StateEvent", "AIState", "StateTransition", "AIStateStore"]
