"""OpenAI-compatible chat completions strategy (OpenAI, Groq)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.models import GenerationRequest, ProviderIdentity

from .base import Message, ProviderStrategy, bearer_headers, make_message
from .http_utils import HTTPRequest
from .util import extract_text

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"

_RAW_SYSTEM_PROMPT = "You are a helpful assistant."
_JSON_SYSTEM_PROMPT = "You are a helpful assistant that responds in JSON format."
_CONTENT_PATH = ("choices", 0, "message", "content")


@dataclass(frozen=True)
class OpenAICompatibleStrategy(ProviderStrategy):
    """Chat completions wire format shared by OpenAI and its look-alikes."""

    def build_messages(self, request: GenerationRequest) -> List[Message]:
        system = _RAW_SYSTEM_PROMPT if request.raw_response else _JSON_SYSTEM_PROMPT
        return [make_message("system", system), make_message("user", request.prompt)]

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model_api_name,
            "messages": self.build_messages(request),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "n": 1,
            "stream": False,
        }
        if not request.raw_response:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def build_headers(self, api_key: str) -> Dict[str, str]:
        return bearer_headers(api_key)

    def build_request(
        self,
        request: GenerationRequest,
        *,
        api_key: str,
        settings: PluginSettings,
    ) -> HTTPRequest:
        return HTTPRequest(
            url=self.endpoint,
            payload=self.build_payload(request),
            headers=self.build_headers(api_key),
        )

    def extract_content(self, body: Any) -> str:
        return extract_text(body, _CONTENT_PATH, self.label)


def openai_strategy() -> OpenAICompatibleStrategy:
    return OpenAICompatibleStrategy(provider=ProviderIdentity.OPENAI, endpoint=OPENAI_URL)


def groq_strategy() -> OpenAICompatibleStrategy:
    return OpenAICompatibleStrategy(provider=ProviderIdentity.GROQ, endpoint=GROQ_URL)


__all__ = [
    "OPENAI_URL",
    "GROQ_URL",
    "OpenAICompatibleStrategy",
    "openai_strategy",
    "groq_strategy",
]
