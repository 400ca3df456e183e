"""Gemini ``generateContent`` strategy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.models import GenerationRequest, ProviderIdentity

from .base import ProviderStrategy
from .http_utils import HTTPRequest
from .util import extract_text

GEMINI_URL = "https://generativelanguage.googleapis.com/v1/models/{model}:generateContent"

_TOP_K = 40
_TOP_P = 0.95


@dataclass(frozen=True)
class GeminiStrategy(ProviderStrategy):
    """Authenticates with ``x-goog-api-key``; ``legacy_bearer_auth`` switches to a Bearer token."""

    provider: ProviderIdentity = ProviderIdentity.GOOGLE
    endpoint: str = GEMINI_URL
    legacy_bearer_auth: bool = False

    def build_request(
        self,
        request: GenerationRequest,
        *,
        api_key: str,
        settings: PluginSettings,
    ) -> HTTPRequest:
        headers = {"Content-Type": "application/json"}
        if self.legacy_bearer_auth:
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            headers["x-goog-api-key"] = api_key
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
                "topK": _TOP_K,
                "topP": _TOP_P,
            },
        }
        url = self.endpoint.format(model=request.model_api_name)
        return HTTPRequest(url=url, payload=payload, headers=headers)

    def extract_content(self, body: Any) -> str:
        return extract_text(body, ("candidates", 0, "content", "parts", 0, "text"), self.label)


__all__ = ["GEMINI_URL", "GeminiStrategy"]
