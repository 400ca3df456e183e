"""General utility helpers for GraphWeaver."""

from __future__ import annotations

import re

from .response_validator import ResponseValidator

_PROVIDER_KEY = re.compile(r"\b(?:sk-ant-|sk-or-|sk-|gsk_|pplx-|AIza)[A-Za-z0-9_\-]{8,}")
_BEARER_TOKEN = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9_\-\.]{8,}")


def redact_possible_secrets(text: str) -> str:
    """Redact provider API keys and bearer tokens from *text*."""

    if not text:
        return text

    redacted = _BEARER_TOKEN.sub("Bearer ***REDACTED***", text)
    redacted = _PROVIDER_KEY.sub("***REDACTED***", redacted)
    return redacted


__all__ = ["ResponseValidator", "redact_possible_secrets"]
