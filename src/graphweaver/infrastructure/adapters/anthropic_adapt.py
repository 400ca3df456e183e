"""Anthropic Messages API strategy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.models import GenerationRequest, ProviderIdentity

from .base import ProviderStrategy, make_message
from .http_utils import HTTPRequest
from .util import extract_text

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class AnthropicStrategy(ProviderStrategy):
    """Sends a single user message; the payload carries no system role.

    Unknown model identifiers are rejected instead of silently replaced.
    """

    provider: ProviderIdentity = ProviderIdentity.ANTHROPIC
    endpoint: str = ANTHROPIC_URL
    strict_model_lookup: bool = True

    def build_request(
        self,
        request: GenerationRequest,
        *,
        api_key: str,
        settings: PluginSettings,
    ) -> HTTPRequest:
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": request.model_api_name,
            "messages": [make_message("user", request.prompt)],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        return HTTPRequest(url=self.endpoint, payload=payload, headers=headers)

    def extract_content(self, body: Any) -> str:
        return extract_text(body, ("content", 0, "text"), self.label)


__all__ = ["ANTHROPIC_URL", "ANTHROPIC_VERSION", "AnthropicStrategy"]
