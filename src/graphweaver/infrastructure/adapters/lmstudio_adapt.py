"""Local LM Studio server strategy."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.errors import FormatError
from graphweaver.domain.models import GenerationRequest, ProviderIdentity

from .base import ProviderStrategy
from .http_utils import HTTPRequest
from .util import dig

LMSTUDIO_URL = "http://localhost:{port}/api/v1/complete"


@dataclass(frozen=True)
class LocalModelStrategy(ProviderStrategy):
    """No credentials; the model name and port come from the local model settings.

    The server's whole JSON body is handed back as the completion text.
    """

    provider: ProviderIdentity = ProviderIdentity.LOCAL_MODEL
    endpoint: str = LMSTUDIO_URL
    requires_api_key: bool = False

    def is_configured(self, api_key: str, settings: PluginSettings) -> bool:
        local = settings.local_model
        return bool(local.model_name) and bool(local.port)

    def not_ready_message(self) -> str:
        return "LM Studio settings are not properly configured"

    def resolve_model(self, requested: str, settings: PluginSettings) -> str | None:
        return settings.local_model.model_name or None

    def build_request(
        self,
        request: GenerationRequest,
        *,
        api_key: str,
        settings: PluginSettings,
    ) -> HTTPRequest:
        payload: Dict[str, Any] = {
            "model": request.model_api_name,
            "prompt": request.prompt,
        }
        url = self.endpoint.format(port=settings.local_model.port)
        return HTTPRequest(url=url, payload=payload, headers={"Content-Type": "application/json"})

    def extract_content(self, body: Any) -> str:
        if body is None:
            raise FormatError(f"Invalid response format from {self.label} API")
        return json.dumps(body)

    def connection_reply(self, content: str) -> str:
        """Model text from the serialised body, never its keys."""

        try:
            body = json.loads(content)
        except ValueError:
            return content
        for path in _REPLY_PATHS:
            value = dig(body, path)
            if isinstance(value, str):
                return value
        return " ".join(_string_values(body))


_REPLY_PATHS = (
    ("choices", 0, "text"),
    ("choices", 0, "message", "content"),
    ("response",),
    ("content",),
)


def _string_values(node: Any) -> List[str]:
    if isinstance(node, str):
        return [node]
    if isinstance(node, dict):
        return [text for value in node.values() for text in _string_values(value)]
    if isinstance(node, list):
        return [text for item in node for text in _string_values(item)]
    return []


__all__ = ["LMSTUDIO_URL", "LocalModelStrategy"]
