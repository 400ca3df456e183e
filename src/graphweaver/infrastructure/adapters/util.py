"""Adapter utility helpers shared by every provider."""

from __future__ import annotations

from typing import Any, Sequence

from graphweaver.domain.errors import FormatError

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


def _valid_temperature(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 1


def resolve_temperature(configured: Any, override: Any = None) -> float:
    """Pick the per-call value, then the configured one; anything outside [0, 1] is ignored."""

    if _valid_temperature(override):
        return float(override)
    if _valid_temperature(configured):
        return float(configured)
    return DEFAULT_TEMPERATURE


def resolve_max_tokens(configured: Any, override: Any = None) -> int:
    """An explicit positive override always wins over the configured value."""

    if isinstance(override, int) and not isinstance(override, bool) and override > 0:
        return override
    if isinstance(configured, int) and not isinstance(configured, bool) and configured > 0:
        return configured
    return DEFAULT_MAX_TOKENS


def dig(body: Any, path: Sequence[str | int]) -> Any:
    """Follow *path* through nested dicts/lists, returning ``None`` on any miss."""

    current = body
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


def extract_text(body: Any, path: Sequence[str | int], api_label: str) -> str:
    """Return the non-empty string at *path* or raise :class:`FormatError`."""

    value = dig(body, path)
    if not isinstance(value, str) or not value:
        raise FormatError(f"Invalid response format from {api_label} API")
    return value


__all__ = [
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "resolve_temperature",
    "resolve_max_tokens",
    "dig",
    "extract_text",
]
