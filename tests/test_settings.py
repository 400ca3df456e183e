"""Tests for settings loading, validation and the in-process settings service."""

from __future__ import annotations

from pathlib import Path

import pytest
from jsonschema import Draft202012Validator

from graphweaver.application.settings_service import SettingsService
from graphweaver.domain.config import AdvancedSettings, ConfigError, PluginSettings
from graphweaver.domain.models import ProviderIdentity
from graphweaver.infrastructure.config import build_validator, load_settings


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "graphweaver.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_settings_from_yaml(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
ai_provider:
  selected: anthropic
  api_keys:
    anthropic: sk-ant-from-file
  selected_models:
    anthropic: claude-3-opus-20240229
local_model:
  enabled: true
  port: 5678
  model_name: qwen2
advanced:
  max_tokens: 2048
  temperature: 0.5
""",
    )

    settings = load_settings(path, env={})

    assert settings.path == path.resolve()
    assert settings.ai_provider.selected is ProviderIdentity.ANTHROPIC
    assert settings.ai_provider.api_key_for(ProviderIdentity.ANTHROPIC) == "sk-ant-from-file"
    assert settings.ai_provider.api_key_for(ProviderIdentity.OPENAI) == ""
    assert settings.ai_provider.selected_models[ProviderIdentity.ANTHROPIC] == "claude-3-opus-20240229"
    assert settings.ai_provider.selected_models[ProviderIdentity.OPENAI] == "gpt-4o-mini"
    assert settings.local_model.enabled
    assert settings.local_model.port == 5678
    assert settings.local_model.model_name == "qwen2"
    assert settings.advanced == AdvancedSettings(max_tokens=2048, temperature=0.5, request_timeout_s=60.0)


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.yaml", env={})
    assert settings == PluginSettings()
    assert settings.ai_provider.selected is ProviderIdentity.OPENAI
    assert settings.local_model.port == 1234


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    assert load_settings(_write(tmp_path, ""), env={}) == PluginSettings()


def test_environment_overrides_keys_and_local_server(tmp_path: Path) -> None:
    path = _write(tmp_path, "ai_provider:\n  api_keys:\n    openai: from-file\n")
    env = {
        "OPENAI_API_KEY": "from-env",
        "GEMINI_API_KEY": "gemini-env",
        "LMSTUDIO_PORT": "9999",
        "LMSTUDIO_MODEL": "phi-3",
    }

    settings = load_settings(path, env=env)

    assert settings.ai_provider.api_key_for(ProviderIdentity.OPENAI) == "from-env"
    assert settings.ai_provider.api_key_for(ProviderIdentity.GOOGLE) == "gemini-env"
    assert settings.local_model.port == 9999
    assert settings.local_model.model_name == "phi-3"


def test_environment_is_read_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "groq-env")
    assert load_settings().ai_provider.api_key_for(ProviderIdentity.GROQ) == "groq-env"


def test_invalid_port_in_environment(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_settings(None, env={"LMSTUDIO_PORT": "eighty"})
    assert "local_model.port" in str(excinfo.value)


def test_shipped_schema_is_valid_draft_2020_12() -> None:
    validator = build_validator()
    Draft202012Validator.check_schema(validator.schema)
    assert validator.is_valid({})


def test_schema_rejects_unknown_provider(tmp_path: Path) -> None:
    path = _write(tmp_path, "ai_provider:\n  selected: skynet\n")
    with pytest.raises(ConfigError) as excinfo:
        load_settings(path, env={})
    message = str(excinfo.value)
    assert "Config error" in message
    assert "ai_provider/selected" in message


def test_schema_rejects_out_of_range_temperature(tmp_path: Path) -> None:
    path = _write(tmp_path, "advanced:\n  temperature: 3\n")
    with pytest.raises(ConfigError) as excinfo:
        load_settings(path, env={})
    assert "advanced/temperature" in str(excinfo.value)


def test_schema_rejects_unknown_section(tmp_path: Path) -> None:
    path = _write(tmp_path, "telemetry:\n  enabled: true\n")
    with pytest.raises(ConfigError, match="telemetry"):
        load_settings(path, env={})


def test_invalid_yaml_is_reported(tmp_path: Path) -> None:
    path = _write(tmp_path, "ai_provider: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_settings(path, env={})


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "- openai\n- anthropic\n")
    with pytest.raises(ConfigError, match="Top-level document must be a mapping"):
        load_settings(path, env={})


def test_settings_service_notifies_subscribers() -> None:
    service = SettingsService()
    seen: list[PluginSettings] = []
    unsubscribe = service.subscribe(seen.append)

    service.set_selected_provider("groq")
    service.set_api_key(ProviderIdentity.GROQ, "gsk-123")
    service.set_selected_model("groq", "llama-3.1-8b-instant")
    unsubscribe()
    service.update(advanced=AdvancedSettings(max_tokens=10))

    assert len(seen) == 3
    assert seen[0].ai_provider.selected is ProviderIdentity.GROQ
    assert seen[1].ai_provider.api_key_for(ProviderIdentity.GROQ) == "gsk-123"
    assert seen[2].ai_provider.selected_models[ProviderIdentity.GROQ] == "llama-3.1-8b-instant"
    assert service.get_settings().advanced.max_tokens == 10


def test_failing_subscriber_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    service = SettingsService()
    seen: list[PluginSettings] = []

    def broken(_settings: PluginSettings) -> None:
        raise RuntimeError("listener broke")

    service.subscribe(broken)
    service.subscribe(seen.append)
    service.set_selected_provider(ProviderIdentity.MISTRAL)

    assert len(seen) == 1
    assert "listener broke" in caplog.text
