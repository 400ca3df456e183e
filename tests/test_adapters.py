"""Tests for the shared adapter flow and each provider's wire format."""

from __future__ import annotations

import asyncio
import json
import time

import pytest
import requests

from graphweaver.domain.catalog import first_model
from graphweaver.domain.config import AdvancedSettings, LocalModelSettings
from graphweaver.domain.errors import ConfigurationError
from graphweaver.domain.models import Failure, GenerationOptions, ProviderIdentity, Success
from graphweaver.infrastructure.adapters import (
    GeminiStrategy,
    LLMAdapter,
    STRATEGIES,
    ProviderAdapter,
    create_adapter,
)
from graphweaver.infrastructure.adapters.anthropic_adapt import ANTHROPIC_URL
from graphweaver.infrastructure.adapters.mistral_adapt import MISTRAL_URL
from graphweaver.infrastructure.adapters.openai_adapt import GROQ_URL, OPENAI_URL
from graphweaver.infrastructure.adapters.openrouter_adapt import OPENROUTER_URL
from graphweaver.infrastructure.adapters.perplexity_adapt import PERPLEXITY_URL


def _generate(adapter: LLMAdapter, prompt: str, model: str, options: GenerationOptions | None = None):
    return asyncio.run(adapter.generate_response(prompt, model, options))


def test_llm_adapter_satisfies_protocol(make_adapter, fakes) -> None:
    adapter = make_adapter(ProviderIdentity.OPENAI, fakes.Session())
    assert isinstance(adapter, ProviderAdapter)


def test_openai_request_shape_and_json_result(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply('{"tags": ["a"]}')))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    result = _generate(adapter, "Tag this", "gpt-4o")

    assert result == Success({"tags": ["a"]})
    call = session.calls[0]
    assert call["url"] == OPENAI_URL
    assert call["headers"]["Authorization"] == "Bearer test-key-openai"
    payload = call["json"]
    assert payload["model"] == "gpt-4o"
    assert payload["messages"] == [
        {"role": "system", "content": "You are a helpful assistant that responds in JSON format."},
        {"role": "user", "content": "Tag this"},
    ]
    assert payload["temperature"] == 0.3
    assert payload["max_tokens"] == 4096
    assert payload["n"] == 1
    assert payload["stream"] is False
    assert payload["response_format"] == {"type": "json_object"}
    assert call["timeout"] == 60.0


def test_openai_raw_response_skips_json_mode(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("plain words")))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    result = _generate(adapter, "Say something", "gpt-4o-mini", GenerationOptions(raw_response=True))

    assert result == Success("plain words")
    payload = session.calls[0]["json"]
    assert "response_format" not in payload
    assert payload["messages"][0]["content"] == "You are a helpful assistant."


def test_groq_uses_openai_wire_format(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("{}")))
    adapter = make_adapter(ProviderIdentity.GROQ, session)

    assert _generate(adapter, "p", "llama-3.1-8b-instant") == Success({})
    call = session.calls[0]
    assert call["url"] == GROQ_URL
    assert call["headers"]["Authorization"] == "Bearer test-key-groq"
    assert call["json"]["response_format"] == {"type": "json_object"}


def test_mistral_sends_user_message_only(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply('{"x": 1}')))
    adapter = make_adapter(ProviderIdentity.MISTRAL, session)

    assert _generate(adapter, "hello", "mistral-large-latest") == Success({"x": 1})
    call = session.calls[0]
    assert call["url"] == MISTRAL_URL
    assert call["json"]["messages"] == [{"role": "user", "content": "hello"}]
    assert call["json"]["top_p"] == 1.0
    assert call["json"]["stream"] is False


def test_openrouter_adds_attribution_headers(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("{}")))
    adapter = make_adapter(ProviderIdentity.OPENROUTER, session)

    _generate(adapter, "p", "openai/gpt-4o")
    call = session.calls[0]
    assert call["url"] == OPENROUTER_URL
    assert call["headers"]["X-Title"] == "Obsidian GraphWeaver Plugin"
    assert call["headers"]["HTTP-Referer"]
    assert call["headers"]["Authorization"] == "Bearer test-key-openrouter"


def test_perplexity_has_no_response_format(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply('{"a": 2}')))
    adapter = make_adapter(ProviderIdentity.PERPLEXITY, session)

    assert _generate(adapter, "q", "llama-3.1-sonar-large-128k-online") == Success({"a": 2})
    call = session.calls[0]
    assert call["url"] == PERPLEXITY_URL
    assert call["headers"]["Accept"] == "application/json"
    assert "response_format" not in call["json"]
    assert call["json"]["messages"][0] == {"role": "system", "content": "Be precise and concise."}


def test_anthropic_request_shape(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.anthropic_reply('{"ok": 1}')))
    adapter = make_adapter(ProviderIdentity.ANTHROPIC, session)

    assert _generate(adapter, "hi", "claude-3-opus-20240229") == Success({"ok": 1})
    call = session.calls[0]
    assert call["url"] == ANTHROPIC_URL
    assert call["headers"]["x-api-key"] == "test-key-anthropic"
    assert call["headers"]["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in call["headers"]
    assert call["json"] == {
        "model": "claude-3-opus-20240229",
        "messages": [{"role": "user", "content": "hi"}],
        "max_tokens": 4096,
        "temperature": 0.3,
    }


def test_anthropic_rejects_unknown_model(make_adapter, fakes) -> None:
    session = fakes.Session()
    adapter = make_adapter(ProviderIdentity.ANTHROPIC, session)

    result = _generate(adapter, "hi", "claude-9")

    assert isinstance(result, Failure)
    assert "Model claude-9 is not supported by Anthropic" in result.error_message
    assert session.calls == []
    with pytest.raises(ConfigurationError):
        adapter.get_api_model_name("claude-9")


def test_unknown_model_falls_back_to_first_catalog_model(make_adapter, fakes, caplog) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("{}")))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    with caplog.at_level("WARNING"):
        _generate(adapter, "p", "gpt-99")

    assert session.calls[0]["json"]["model"] == "gpt-4o-mini"
    assert "Using first available model gpt-4o-mini" in caplog.text


def test_gemini_request_shape(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.gemini_reply('{"g": true}')))
    adapter = make_adapter(ProviderIdentity.GOOGLE, session)

    assert _generate(adapter, "prompt", "gemini-1.5-pro") == Success({"g": True})
    call = session.calls[0]
    assert call["url"] == "https://generativelanguage.googleapis.com/v1/models/gemini-1.5-pro:generateContent"
    assert call["headers"]["x-goog-api-key"] == "test-key-google"
    assert call["json"] == {
        "contents": [{"parts": [{"text": "prompt"}]}],
        "generationConfig": {"temperature": 0.3, "maxOutputTokens": 4096, "topK": 40, "topP": 0.95},
    }


def test_gemini_legacy_bearer_auth(make_settings, notifier, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.gemini_reply("OK")))
    adapter = LLMAdapter(GeminiStrategy(legacy_bearer_auth=True), make_settings(), notifier=notifier, session=session)

    _generate(adapter, "p", "gemini-1.5-flash", GenerationOptions(raw_response=True))
    headers = session.calls[0]["headers"]
    assert headers["Authorization"] == "Bearer test-key-google"
    assert "x-goog-api-key" not in headers


def test_local_model_requires_model_name(make_adapter, make_settings, fakes) -> None:
    session = fakes.Session()
    settings = make_settings(local_model=LocalModelSettings(port=1234, model_name=""))
    adapter = make_adapter(ProviderIdentity.LOCAL_MODEL, session, settings)

    result = _generate(adapter, "p", "custom")

    assert result == Failure("LM Studio settings are not properly configured")
    assert not adapter.is_ready()
    assert session.calls == []


def test_local_model_posts_to_configured_port(make_adapter, make_settings, fakes) -> None:
    body = {"completion": "hello", "model": "mistral-7b"}
    session = fakes.Session(fakes.Response(200, body))
    settings = make_settings(api_keys={}, local_model=LocalModelSettings(port=4321, model_name="mistral-7b"))
    adapter = make_adapter(ProviderIdentity.LOCAL_MODEL, session, settings)

    assert adapter.is_ready()
    raw = _generate(adapter, "hi there", "anything", GenerationOptions(raw_response=True))
    parsed = _generate(adapter, "hi there", "anything")

    assert isinstance(raw, Success)
    assert json.loads(raw.data) == body
    assert parsed == Success(body)
    call = session.calls[0]
    assert call["url"] == "http://localhost:4321/api/v1/complete"
    assert call["json"] == {"model": "mistral-7b", "prompt": "hi there"}
    assert "Authorization" not in call["headers"]


def test_missing_api_key_fails_without_request(make_adapter, make_settings, notifier, fakes) -> None:
    session = fakes.Session()
    adapter = make_adapter(ProviderIdentity.OPENAI, session, make_settings(api_keys={}))

    result = _generate(adapter, "p", "gpt-4o-mini")

    assert result == Failure("OpenAI API key is not set")
    assert session.calls == []
    assert notifier.messages("error") == ["OpenAI API Error: OpenAI API key is not set"]


def test_non_200_status_becomes_failure_with_status_code(make_adapter, notifier, fakes) -> None:
    session = fakes.Session(fakes.Response(401, {"error": {"message": "Invalid API key"}}))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    result = _generate(adapter, "p", "gpt-4o-mini")

    assert isinstance(result, Failure)
    assert result.error_message == "API request failed with status 401: Invalid API key"
    assert notifier.messages("error")[-1].startswith("OpenAI API Error: API request failed with status 401")


def test_server_error_without_json_body_uses_text(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(503, None, text="upstream unavailable"))
    adapter = make_adapter(ProviderIdentity.ANTHROPIC, session)

    result = _generate(adapter, "p", "claude-3-haiku-20240307")

    assert result == Failure("API request failed with status 503: upstream unavailable")


def test_missing_content_is_format_failure(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, {"choices": []}))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    assert _generate(adapter, "p", "gpt-4o-mini") == Failure("Invalid response format from OpenAI API")


def test_invalid_json_reply_is_failure(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("not json at all")))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    result = _generate(adapter, "p", "gpt-4o-mini")

    assert isinstance(result, Failure)
    assert result.error_message.startswith("Invalid JSON format:")


def test_transport_error_is_failure(make_adapter, fakes) -> None:
    session = fakes.Session(requests.ConnectionError("connection refused"))
    adapter = make_adapter(ProviderIdentity.GROQ, session)

    result = _generate(adapter, "p", "llama-3.1-70b-versatile")

    assert result == Failure("connection refused")


def test_per_call_overrides_win(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("{}")))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    _generate(adapter, "p", "gpt-4o-mini", GenerationOptions(temperature=0.9, max_tokens=50))
    _generate(adapter, "p", "gpt-4o-mini", GenerationOptions(temperature=1.5, max_tokens=0))

    first, second = (call["json"] for call in session.calls)
    assert (first["temperature"], first["max_tokens"]) == (0.9, 50)
    assert (second["temperature"], second["max_tokens"]) == (0.3, 4096)


def test_slow_provider_times_out(make_adapter, fakes) -> None:
    class SlowSession(fakes.Session):
        def post(self, *args, **kwargs):
            time.sleep(0.3)
            return super().post(*args, **kwargs)

    adapter = make_adapter(ProviderIdentity.OPENAI, SlowSession(fakes.Response(200, fakes.openai_reply("{}"))))

    result = _generate(adapter, "p", "gpt-4o-mini", GenerationOptions(timeout_s=0.05))

    assert isinstance(result, Failure)
    assert "timed out after 0.05s" in result.error_message


def test_test_connection_checks_for_ok(make_adapter, fakes) -> None:
    ok_session = fakes.Session(fakes.Response(200, fakes.openai_reply("OK.")))
    no_session = fakes.Session(fakes.Response(200, fakes.openai_reply("Hello")))

    assert asyncio.run(make_adapter(ProviderIdentity.OPENAI, ok_session).test_connection("", "gpt-4o-mini"))
    assert not asyncio.run(make_adapter(ProviderIdentity.OPENAI, no_session).test_connection("", "gpt-4o-mini"))
    assert ok_session.calls[0]["json"]["messages"][1]["content"] == "Return the word 'OK'."
    assert "response_format" not in ok_session.calls[0]["json"]


def test_test_connection_when_not_ready(make_adapter, make_settings, fakes) -> None:
    session = fakes.Session()
    adapter = make_adapter(ProviderIdentity.MISTRAL, session, make_settings(api_keys={}))

    assert asyncio.run(adapter.test_connection("ping", "mistral-small-latest")) is False
    assert session.calls == []


def test_validate_api_key_success_notifies(make_adapter, notifier, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.anthropic_reply("OK")))
    adapter = make_adapter(ProviderIdentity.ANTHROPIC, session)

    assert asyncio.run(adapter.validate_api_key()) is True
    assert session.calls[0]["json"]["model"] == "claude-3-haiku-20240307"
    assert notifier.messages("success") == ["Anthropic API key validated successfully"]


def test_validate_api_key_failure_notifies(make_adapter, make_settings, notifier, fakes) -> None:
    adapter = make_adapter(ProviderIdentity.GROQ, fakes.Session(), make_settings(api_keys={}))

    assert asyncio.run(adapter.validate_api_key()) is False
    assert notifier.messages("error") == ["Failed to validate Groq API key: Groq is not properly configured"]


def test_validate_api_key_rejected_reply(make_adapter, notifier, fakes) -> None:
    adapter = make_adapter(ProviderIdentity.OPENAI, fakes.Session(fakes.Response(200, fakes.openai_reply("nope"))))

    assert asyncio.run(adapter.validate_api_key()) is False
    assert notifier.messages("error")[-1] == "Failed to validate OpenAI API key: Failed to validate API key"


def test_set_and_configure_api_key(make_adapter, make_settings, fakes) -> None:
    adapter = make_adapter(ProviderIdentity.OPENAI, fakes.Session(), make_settings(api_keys={}))
    assert not adapter.is_ready()

    adapter.set_api_key("first")
    assert adapter.get_api_key() == "first"
    adapter.configure({"api_key": "second"})
    assert adapter.get_api_key() == "second"
    assert adapter.is_ready()
    assert adapter.get_available_models()[0] == "gpt-4o-mini"


def test_destroy_closes_session_and_blocks_generation(make_adapter, fakes) -> None:
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("{}")))
    adapter = make_adapter(ProviderIdentity.OPENAI, session)

    asyncio.run(adapter.destroy())
    asyncio.run(adapter.destroy())

    assert session.closed
    result = _generate(adapter, "p", "gpt-4o-mini")
    assert isinstance(result, Failure)
    assert "destroyed" in result.error_message
    assert session.calls == []


def test_create_adapter_resolves_strategies(make_settings, notifier) -> None:
    adapter = create_adapter("google", make_settings(), notifier=notifier)
    assert isinstance(adapter.strategy, GeminiStrategy)
    assert adapter.provider is ProviderIdentity.GOOGLE
    assert create_adapter(ProviderIdentity.LOCAL_MODEL, make_settings(), notifier=notifier).label == "LM Studio"


def test_create_adapter_unknown_provider(make_settings) -> None:
    with pytest.raises(ConfigurationError, match="Unsupported AI provider: skynet"):
        create_adapter("skynet", make_settings())


def _reply(fakes, provider: ProviderIdentity, text: str) -> dict:
    if provider is ProviderIdentity.ANTHROPIC:
        return fakes.anthropic_reply(text)
    if provider is ProviderIdentity.GOOGLE:
        return fakes.gemini_reply(text)
    if provider is ProviderIdentity.LOCAL_MODEL:
        return {"choices": [{"text": text}], "usage": {"total_tokens": 3}}
    return fakes.openai_reply(text)


@pytest.fixture
def local_ready_settings(make_settings):
    return make_settings(local_model=LocalModelSettings(port=1234, model_name="local-model"))


@pytest.mark.parametrize("provider", list(STRATEGIES))
def test_every_provider_reports_status_code_on_failure(provider, make_adapter, local_ready_settings, fakes) -> None:
    session = fakes.Session(fakes.Response(429, None, text="slow down"))
    adapter = make_adapter(provider, session, local_ready_settings)

    result = _generate(adapter, "p", first_model(provider).api_identifier)

    assert result == Failure("API request failed with status 429: slow down")
    assert len(session.calls) == 1


@pytest.mark.parametrize("provider", list(STRATEGIES))
def test_every_provider_returns_text_when_raw(provider, make_adapter, local_ready_settings, fakes) -> None:
    session = fakes.Session(fakes.Response(200, _reply(fakes, provider, "plain words, not JSON")))
    adapter = make_adapter(provider, session, local_ready_settings)

    result = _generate(adapter, "p", first_model(provider).api_identifier, GenerationOptions(raw_response=True))

    assert isinstance(result, Success)
    assert isinstance(result.data, str)
    assert "plain words, not JSON" in result.data


@pytest.mark.parametrize(
    "body, connected",
    [
        ({"choices": [{"text": "NO"}], "usage": {"total_tokens": 3}}, False),
        ({"choices": [{"text": "OK"}], "usage": {"total_tokens": 3}}, True),
        ({"response": "Sure, OK!"}, True),
        ({"result": {"answer": "No"}, "tokens": 2}, False),
        ({"output": ["ok then"]}, True),
    ],
)
def test_local_model_connection_reads_reply_not_keys(
    body, connected, make_adapter, local_ready_settings, fakes
) -> None:
    adapter = make_adapter(ProviderIdentity.LOCAL_MODEL, fakes.Session(fakes.Response(200, body)), local_ready_settings)

    assert asyncio.run(adapter.test_connection("", "local-model")) is connected


@pytest.mark.parametrize("configured", [-1, 1.5])
def test_out_of_range_configured_temperature_uses_default(configured, make_adapter, make_settings, fakes) -> None:
    settings = make_settings()
    settings.update(advanced=AdvancedSettings(temperature=configured))
    session = fakes.Session(fakes.Response(200, fakes.openai_reply("{}")))

    _generate(make_adapter(ProviderIdentity.OPENAI, session, settings), "p", "gpt-4o-mini")

    assert session.calls[0]["json"]["temperature"] == 0.7
