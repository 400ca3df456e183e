"""Provider adapters and their wire strategies."""

from __future__ import annotations

from .adapter import LLMAdapter
from .anthropic_adapt import AnthropicStrategy
from .base import (
    DEFAULT_TEST_PROMPT,
    Message,
    ProviderAdapter,
    ProviderStrategy,
    bearer_headers,
    make_message,
)
from .gemini_adapt import GeminiStrategy
from .http_utils import HTTPRequest, HTTPResponse, map_http_error
from .lmstudio_adapt import LocalModelStrategy
from .mistral_adapt import MistralStrategy
from .openai_adapt import OpenAICompatibleStrategy, groq_strategy, openai_strategy
from .openrouter_adapt import OpenRouterStrategy
from .perplexity_adapt import PerplexityStrategy
from .registry import STRATEGIES, create_adapter

__all__ = [
    "DEFAULT_TEST_PROMPT",
    "Message",
    "ProviderAdapter",
    "ProviderStrategy",
    "bearer_headers",
    "make_message",
    "HTTPRequest",
    "HTTPResponse",
    "map_http_error",
    "LLMAdapter",
    "OpenAICompatibleStrategy",
    "openai_strategy",
    "groq_strategy",
    "MistralStrategy",
    "OpenRouterStrategy",
    "PerplexityStrategy",
    "AnthropicStrategy",
    "GeminiStrategy",
    "LocalModelStrategy",
    "STRATEGIES",
    "create_adapter",
]
