"""Perplexity chat completions strategy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.models import GenerationRequest, ProviderIdentity

from .base import ProviderStrategy, bearer_headers, make_message
from .http_utils import HTTPRequest
from .util import extract_text

PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"
_SYSTEM_PROMPT = "Be precise and concise."


@dataclass(frozen=True)
class PerplexityStrategy(ProviderStrategy):
    """Perplexity has no ``response_format`` field; JSON is requested by prompt only."""

    provider: ProviderIdentity = ProviderIdentity.PERPLEXITY
    endpoint: str = PERPLEXITY_URL

    def build_request(
        self,
        request: GenerationRequest,
        *,
        api_key: str,
        settings: PluginSettings,
    ) -> HTTPRequest:
        headers = bearer_headers(api_key)
        headers["Accept"] = "application/json"
        payload: Dict[str, Any] = {
            "model": request.model_api_name,
            "messages": [
                make_message("system", _SYSTEM_PROMPT),
                make_message("user", request.prompt),
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        return HTTPRequest(url=self.endpoint, payload=payload, headers=headers)

    def extract_content(self, body: Any) -> str:
        return extract_text(body, ("choices", 0, "message", "content"), self.label)


__all__ = ["PERPLEXITY_URL", "PerplexityStrategy"]
