"""Strategy registry and adapter factory keyed by provider identity."""

from __future__ import annotations

from typing import Callable, Dict

import requests

from graphweaver.domain.config import SettingsProvider
from graphweaver.domain.errors import ConfigurationError
from graphweaver.domain.models import ProviderIdentity
from graphweaver.utils.notifications import Notifier
from graphweaver.utils.response_validator import ResponseValidator

from .adapter import LLMAdapter
from .anthropic_adapt import AnthropicStrategy
from .base import ProviderStrategy
from .gemini_adapt import GeminiStrategy
from .lmstudio_adapt import LocalModelStrategy
from .mistral_adapt import MistralStrategy
from .openai_adapt import groq_strategy, openai_strategy
from .openrouter_adapt import OpenRouterStrategy
from .perplexity_adapt import PerplexityStrategy

STRATEGIES: Dict[ProviderIdentity, Callable[[], ProviderStrategy]] = {
    ProviderIdentity.OPENAI: openai_strategy,
    ProviderIdentity.ANTHROPIC: AnthropicStrategy,
    ProviderIdentity.GOOGLE: GeminiStrategy,
    ProviderIdentity.GROQ: groq_strategy,
    ProviderIdentity.MISTRAL: MistralStrategy,
    ProviderIdentity.PERPLEXITY: PerplexityStrategy,
    ProviderIdentity.OPENROUTER: OpenRouterStrategy,
    ProviderIdentity.LOCAL_MODEL: LocalModelStrategy,
}


def create_adapter(
    provider: ProviderIdentity | str,
    settings: SettingsProvider,
    *,
    validator: ResponseValidator | None = None,
    notifier: Notifier | None = None,
    session: requests.Session | None = None,
) -> LLMAdapter:
    """Instantiate the adapter for *provider*."""

    try:
        identity = ProviderIdentity.parse(provider)
        factory = STRATEGIES[identity]
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(f"Unsupported AI provider: {provider}") from exc
    return LLMAdapter(
        factory(),
        settings,
        validator=validator,
        notifier=notifier,
        session=session,
    )


__all__ = ["STRATEGIES", "create_adapter"]
