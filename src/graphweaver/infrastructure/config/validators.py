"""Validation helpers for settings documents."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from graphweaver.domain.config import ConfigError

SETTINGS_SCHEMA = Path(__file__).resolve().parent / "schemas" / "settings-schema.json"


@lru_cache(maxsize=1)
def _settings_schema() -> Dict[str, Any]:
    return json.loads(SETTINGS_SCHEMA.read_text(encoding="utf-8"))


def build_validator() -> Draft202012Validator:
    """Validator for the settings document; the schema file is read once."""

    return Draft202012Validator(_settings_schema())


def format_error(path: Path | str, field: str, message: str) -> str:
    location = f"[cyan]{path}[/cyan]"
    target = f" → [magenta]{field}[/magenta]" if field else ""
    return f"[bold red]Config error[/bold red]: {location}{target} {message}"


def validate_with_schema(
    validator: Draft202012Validator,
    instance: Mapping[str, object],
    path: Path | str,
) -> None:
    error = best_match(validator.iter_errors(instance))
    if error is None:
        return
    field = "/".join(str(part) for part in error.path)
    raise ConfigError(format_error(path, field or "<root>", error.message))


__all__ = ["SETTINGS_SCHEMA", "build_validator", "format_error", "validate_with_schema"]
