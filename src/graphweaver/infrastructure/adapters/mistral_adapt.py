"""Mistral chat completions strategy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from graphweaver.domain.models import GenerationRequest, ProviderIdentity

from .base import Message, make_message
from .openai_adapt import OpenAICompatibleStrategy

MISTRAL_URL = "https://api.mistral.ai/v1/chat/completions"


@dataclass(frozen=True)
class MistralStrategy(OpenAICompatibleStrategy):
    """OpenAI-style payload with a single user message and ``top_p`` pinned to 1."""

    provider: ProviderIdentity = ProviderIdentity.MISTRAL
    endpoint: str = MISTRAL_URL

    def build_messages(self, request: GenerationRequest) -> List[Message]:
        return [make_message("user", request.prompt)]

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model_api_name,
            "messages": self.build_messages(request),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "top_p": 1.0,
            "stream": False,
        }
        if not request.raw_response:
            payload["response_format"] = {"type": "json_object"}
        return payload


__all__ = ["MISTRAL_URL", "MistralStrategy"]
