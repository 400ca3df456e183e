"""Transient user-facing notices printed through a rich console."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, List, Literal

from rich.console import Console
from rich.markup import escape

Level = Literal["info", "success", "warning", "error"]

_STYLES = {
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}


@dataclass(frozen=True)
class Notice:
    level: Level
    message: str
    timestamp: datetime


class Notifier:
    """Delivers notices to the user and remembers the most recent ones."""

    def __init__(self, console: Console | None = None, *, history_size: int = 50) -> None:
        self.console = console or Console(stderr=True)
        self._history: Deque[Notice] = deque(maxlen=history_size)

    def notify(self, message: str, level: Level = "info") -> Notice:
        notice = Notice(level=level, message=message, timestamp=datetime.now(timezone.utc))
        self._history.append(notice)
        style = _STYLES[level]
        self.console.print(f"[{style}]{escape(message)}[/{style}]")
        return notice

    def info(self, message: str) -> Notice:
        return self.notify(message, "info")

    def success(self, message: str) -> Notice:
        return self.notify(message, "success")

    def warning(self, message: str) -> Notice:
        return self.notify(message, "warning")

    def error(self, message: str) -> Notice:
        return self.notify(message, "error")

    @property
    def history(self) -> List[Notice]:
        return list(self._history)

    def messages(self, level: Level | None = None) -> List[str]:
        return [notice.message for notice in self._history if level is None or notice.level == level]


__all__ = ["Notice", "Notifier", "Level"]
