"""OpenRouter strategy: OpenAI wire format plus attribution headers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from graphweaver.domain.models import ProviderIdentity

from .openai_adapt import OpenAICompatibleStrategy

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_REFERER = "https://github.com/graphweaver/graphweaver"
DEFAULT_TITLE = "Obsidian GraphWeaver Plugin"


@dataclass(frozen=True)
class OpenRouterStrategy(OpenAICompatibleStrategy):
    provider: ProviderIdentity = ProviderIdentity.OPENROUTER
    endpoint: str = OPENROUTER_URL
    referer: str = DEFAULT_REFERER
    title: str = DEFAULT_TITLE

    def build_headers(self, api_key: str) -> Dict[str, str]:
        headers = super().build_headers(api_key)
        headers["HTTP-Referer"] = self.referer
        headers["X-Title"] = self.title
        return headers


__all__ = ["OPENROUTER_URL", "OpenRouterStrategy"]
