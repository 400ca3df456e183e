"""Turn raw completion text into parsed JSON."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from graphweaver.domain.errors import FormatError

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", flags=re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_][\w\-]*)(\s*:)")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")


def strip_code_fence(text: str) -> str:
    """Remove one leading and one trailing Markdown code fence."""

    stripped = _LEADING_FENCE.sub("", text.strip(), count=1)
    return _TRAILING_FENCE.sub("", stripped, count=1)


class ResponseValidator:
    """Normalises and repairs LLM output into JSON values."""

    def clean(self, text: str) -> Any:
        """Parse *text* as JSON after stripping whitespace and code fences.

        Raises :class:`FormatError` carrying the parser message when the text is
        not valid JSON. An empty string is never valid.
        """

        candidate = strip_code_fence(text or "")
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Invalid JSON format: {exc}") from exc

    def repair(self, text: str) -> Any | None:
        """Best-effort parse of near-valid JSON; returns ``None`` when hopeless.

        Applies, in order: quoting of bare object keys, single to double quote
        conversion and removal of trailing commas.
        """

        candidate = strip_code_fence(text or "")
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass

        fixed = _BARE_KEY.sub(r'\1"\2"\3', candidate)
        fixed = fixed.replace("'", '"')
        fixed = _TRAILING_COMMA.sub(r"\1", fixed)
        try:
            return json.loads(fixed)
        except json.JSONDecodeError as exc:
            logger.debug("JSON repair failed: %s", exc)
            return None

    @staticmethod
    def is_valid_json(text: str) -> bool:
        try:
            json.loads(text)
        except (TypeError, json.JSONDecodeError):
            return False
        return True


__all__ = ["ResponseValidator", "strip_code_fence"]
