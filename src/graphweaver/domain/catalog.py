"""Static model catalog, one ordered sequence of descriptors per provider.

The first entry of each sequence is the provider's default model: it is used
for connection tests, API key validation and as the fallback for unknown model
identifiers.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .models import ModelCapabilities, ModelDescriptor, ProviderIdentity


def _model(
    display_name: str,
    api_identifier: str,
    *,
    context: int | None = None,
    max_output: int | None = None,
    costs: tuple[float, float] | None = None,
    functions: bool = False,
    streaming: bool = True,
    vision: bool = False,
) -> ModelDescriptor:
    input_cost, output_cost = costs if costs else (None, None)
    return ModelDescriptor(
        display_name=display_name,
        api_identifier=api_identifier,
        capabilities=ModelCapabilities(
            max_output_tokens=max_output,
            supports_function_calls=functions,
            supports_streaming=streaming,
            supports_vision=vision,
        ),
        input_cost_per_1m=input_cost,
        output_cost_per_1m=output_cost,
        context_window_size=context,
    )


_OPENAI = (
    _model("GPT 4o mini", "gpt-4o-mini", context=128_000, max_output=16_384, costs=(0.15, 0.60), functions=True),
    _model("GPT 4o", "gpt-4o", context=128_000, max_output=16_384, costs=(2.50, 10.00), functions=True, vision=True),
    _model("GPT o1 Preview", "o1-preview", context=128_000, max_output=32_768, costs=(15.00, 60.00), functions=True),
    _model("GPT o1 Mini", "o1-mini", context=128_000, max_output=65_536, costs=(3.00, 12.00), functions=True),
)

_ANTHROPIC = (
    _model("Claude 3 Haiku", "claude-3-haiku-20240307", context=200_000, max_output=4_096, costs=(0.25, 1.25), functions=True),
    _model("Claude 3 Sonnet", "claude-3-sonnet-20240229", context=200_000, max_output=4_096, costs=(3.00, 15.00), functions=True, vision=True),
    _model("Claude 3 Opus", "claude-3-opus-20240229", context=200_000, max_output=4_096, costs=(15.00, 75.00), functions=True, vision=True),
    _model("Claude 3.5 Sonnet", "claude-3-5-sonnet-20240620", context=200_000, max_output=8_192, costs=(3.00, 15.00), functions=True, vision=True),
)

_GOOGLE = (
    _model("Gemini 1.5 Flash", "gemini-1.5-flash", context=1_048_576, max_output=8_192, costs=(0.075, 0.30)),
    _model("Gemini 1.5 Flash 8B", "gemini-1.5-flash-8b", context=1_048_576, max_output=8_192, costs=(0.0375, 0.15)),
    _model("Gemini 1.5 Pro", "gemini-1.5-pro", context=2_097_152, max_output=8_192, costs=(1.25, 5.00), vision=True),
)

_GROQ = (
    _model("Llama 3.1 70B", "llama-3.1-70b-versatile", context=131_072, max_output=8_000, costs=(0.59, 0.79)),
    _model("Llama 3.1 8B", "llama-3.1-8b-instant", context=131_072, max_output=8_000, costs=(0.05, 0.08)),
    _model("Llama 3.2 1B (Preview)", "llama-3.2-1b-preview", context=131_072, max_output=8_192, costs=(0.04, 0.04)),
    _model("Llama 3.2 3B (Preview)", "llama-3.2-3b-preview", context=131_072, max_output=8_192, costs=(0.06, 0.06)),
)

_MISTRAL = (
    _model("Mistral Small", "mistral-small-latest", context=32_000, costs=(0.20, 0.60), functions=True),
    _model("Mistral Large", "mistral-large-latest", context=128_000, costs=(2.00, 6.00), functions=True),
    _model("Mistral Nemo", "open-mistral-nemo", context=128_000, costs=(0.15, 0.15), functions=True),
)

_PERPLEXITY = (
    _model("Sonar Small Online", "llama-3.1-sonar-small-128k-online", context=127_072, costs=(0.20, 0.20)),
    _model("Sonar Large Online", "llama-3.1-sonar-large-128k-online", context=127_072, costs=(1.00, 1.00)),
    _model("Sonar Huge Online", "llama-3.1-sonar-huge-128k-online", context=127_072, costs=(5.00, 5.00)),
)

_OPENROUTER = (
    _model("Anthropic Claude 3 Haiku", "anthropic/claude-3-haiku", context=200_000, costs=(0.25, 1.25), functions=True),
    _model("Anthropic Claude 3 Opus", "anthropic/claude-3-opus", context=200_000, costs=(15.00, 75.00), functions=True, vision=True),
    _model("Anthropic Claude 3.5 Sonnet", "anthropic/claude-3.5-sonnet", context=200_000, costs=(3.00, 15.00), functions=True, vision=True),
    _model("Google Gemini Flash 1.5", "google/gemini-flash-1.5", context=1_000_000, costs=(0.075, 0.30)),
    _model("Google Gemini Flash 1.5 8B", "google/gemini-flash-1.5-8b", context=1_000_000, costs=(0.0375, 0.15)),
    _model("Google Gemini Pro 1.5", "google/gemini-pro-1.5", context=2_000_000, costs=(1.25, 5.00), vision=True),
    _model("Mistralai Mistral Large", "mistralai/mistral-large", context=128_000, costs=(2.00, 6.00)),
    _model("Mistralai Mistral Nemo", "mistralai/mistral-nemo", context=128_000, costs=(0.13, 0.13)),
    _model("OpenAI GPT 4o", "openai/gpt-4o", context=128_000, costs=(2.50, 10.00), functions=True, vision=True),
    _model("OpenAI GPT 4o Mini", "openai/gpt-4o-mini", context=128_000, costs=(0.15, 0.60), functions=True),
    _model("OpenAI o1 Mini", "openai/o1-mini", context=128_000, costs=(3.00, 12.00), functions=True),
    _model("OpenAI o1 Preview", "openai/o1-preview", context=128_000, costs=(15.00, 60.00), functions=True),
)

_LOCAL_MODEL = (
    _model("Custom", "custom", streaming=False),
)


def _check_unique(catalog: Mapping[ProviderIdentity, Iterable[ModelDescriptor]]) -> None:
    for provider, models in catalog.items():
        seen: set[str] = set()
        for model in models:
            if model.api_identifier in seen:
                raise ValueError(
                    f"Duplicate model identifier '{model.api_identifier}' in the {provider.value} catalog."
                )
            seen.add(model.api_identifier)


MODEL_CATALOG: Mapping[ProviderIdentity, tuple[ModelDescriptor, ...]] = MappingProxyType(
    {
        ProviderIdentity.OPENAI: _OPENAI,
        ProviderIdentity.ANTHROPIC: _ANTHROPIC,
        ProviderIdentity.GOOGLE: _GOOGLE,
        ProviderIdentity.GROQ: _GROQ,
        ProviderIdentity.MISTRAL: _MISTRAL,
        ProviderIdentity.PERPLEXITY: _PERPLEXITY,
        ProviderIdentity.OPENROUTER: _OPENROUTER,
        ProviderIdentity.LOCAL_MODEL: _LOCAL_MODEL,
    }
)

_check_unique(MODEL_CATALOG)


def models_for_provider(provider: ProviderIdentity) -> tuple[ModelDescriptor, ...]:
    return MODEL_CATALOG.get(provider, ())


def first_model(provider: ProviderIdentity) -> ModelDescriptor | None:
    models = models_for_provider(provider)
    return models[0] if models else None


def get_model_by_api_name(api_identifier: str) -> ModelDescriptor | None:
    """Search every provider's catalog for *api_identifier*."""

    for models in MODEL_CATALOG.values():
        for model in models:
            if model.api_identifier == api_identifier:
                return model
    return None


def model_supports_capability(model: ModelDescriptor, capability: str) -> bool:
    return bool(getattr(model.capabilities, capability, False))


__all__ = [
    "MODEL_CATALOG",
    "models_for_provider",
    "first_model",
    "get_model_by_api_name",
    "model_supports_capability",
]
