"""Command line interface for GraphWeaver."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from graphweaver.application.context import ApplicationContext
from graphweaver.domain.catalog import models_for_provider
from graphweaver.domain.errors import ConfigurationError, GraphWeaverError
from graphweaver.domain.models import AdapterHealthStatus, GenerationOptions, ProviderIdentity, Success
from graphweaver.infrastructure.config import load_settings

app = typer.Typer(help="CLI for GraphWeaver AI provider management and generation.")
console = Console()

_SETTINGS_HELP = "YAML settings file. Environment variables override API keys."


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=verbose)],
        force=True,
    )


def _parse_provider(value: str) -> ProviderIdentity:
    try:
        return ProviderIdentity.parse(value)
    except ValueError as exc:
        choices = ", ".join(provider.value for provider in ProviderIdentity)
        console.print(f"[red]Unknown provider '{value}'. Available: {choices}[/red]")
        raise typer.Exit(code=1) from exc


def _create_context(settings_path: Path | None) -> ApplicationContext:
    try:
        return ApplicationContext.create(settings_path, console=console)
    except ConfigurationError as exc:
        console.print(str(exc))
        raise typer.Exit(code=1) from exc


def _format_timestamp(status: AdapterHealthStatus) -> str:
    if status.last_connected_at is None:
        return "-"
    return status.last_connected_at.strftime("%Y-%m-%d %H:%M:%S")


def _format_cost(value: float | None) -> str:
    return f"${value:.2f}" if value is not None else "-"


def _print_health_table(statuses: Dict[ProviderIdentity, AdapterHealthStatus], current: ProviderIdentity) -> None:
    table = Table(title="Adapter Health")
    table.add_column("Provider", justify="left")
    table.add_column("Initialized", justify="center")
    table.add_column("Connected", justify="center")
    table.add_column("Last Connected", justify="left")
    table.add_column("Last Error", justify="left")
    for provider, status in statuses.items():
        name = f"{provider.label} *" if provider is current else provider.label
        table.add_row(
            name,
            "yes" if status.is_initialized else "no",
            "[green]yes[/green]" if status.is_connected else "[red]no[/red]",
            _format_timestamp(status),
            status.last_error or "",
        )
    console.print(table)


@app.command()
def validate(
    settings: Path = typer.Option(
        Path("graphweaver.yaml"),
        "--settings",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help=_SETTINGS_HELP,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Validate a settings file."""

    _configure_logging(verbose)
    try:
        loaded = load_settings(settings)
    except ConfigurationError as exc:
        console.print(str(exc))
        raise typer.Exit(code=1) from exc

    console.print("[green]Settings OK[/green]")
    console.print(f"Selected provider: {loaded.ai_provider.selected.label}")


@app.command()
def providers(
    settings: Optional[Path] = typer.Option(None, "--settings", dir_okay=False, help=_SETTINGS_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """List providers with their readiness."""

    _configure_logging(verbose)
    context = _create_context(settings)

    async def _collect() -> list[tuple[ProviderIdentity, bool, int]]:
        await context.registry.initialize()
        try:
            rows = []
            for provider in ProviderIdentity:
                adapter = context.registry.get_adapter(provider)
                rows.append((provider, adapter is not None and adapter.is_ready(), len(models_for_provider(provider))))
            return rows
        finally:
            await context.close()

    rows = asyncio.run(_collect())
    current = context.settings.get_settings().ai_provider.selected

    table = Table(title="AI Providers")
    table.add_column("Provider", justify="left")
    table.add_column("Id", justify="left")
    table.add_column("Ready", justify="center")
    table.add_column("Models", justify="right")
    table.add_column("Selected", justify="center")
    for provider, ready, model_count in rows:
        table.add_row(
            provider.label,
            provider.value,
            "[green]yes[/green]" if ready else "[red]no[/red]",
            str(model_count),
            "*" if provider is current else "",
        )
    console.print(table)


@app.command()
def models(
    provider: str = typer.Argument(..., help="Provider id, e.g. openai or anthropic."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show the model catalog for a provider."""

    _configure_logging(verbose)
    identity = _parse_provider(provider)

    table = Table(title=f"{identity.label} Models")
    table.add_column("Name", justify="left")
    table.add_column("API Identifier", justify="left")
    table.add_column("Context Window", justify="right")
    table.add_column("Input / 1M", justify="right")
    table.add_column("Output / 1M", justify="right")
    for model in models_for_provider(identity):
        table.add_row(
            model.display_name,
            model.api_identifier,
            f"{model.context_window_size:,}" if model.context_window_size else "-",
            _format_cost(model.input_cost_per_1m),
            _format_cost(model.output_cost_per_1m),
        )
    console.print(table)


@app.command("test")
def test_connections(
    provider: Optional[str] = typer.Argument(None, help="Provider to test. Tests all providers when omitted."),
    settings: Optional[Path] = typer.Option(None, "--settings", dir_okay=False, help=_SETTINGS_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run connection tests and print adapter health."""

    _configure_logging(verbose)
    identity = _parse_provider(provider) if provider else None
    context = _create_context(settings)

    async def _run() -> tuple[Dict[ProviderIdentity, bool], Dict[ProviderIdentity, AdapterHealthStatus]]:
        await context.registry.initialize()
        try:
            if identity is None:
                results = await context.registry.test_all_connections()
            else:
                results = {identity: await context.registry.test_connection(identity)}
            return results, context.registry.get_all_adapter_status()
        finally:
            await context.close()

    results, statuses = asyncio.run(_run())
    _print_health_table(statuses, context.registry.current_provider)

    passed = sum(1 for ok in results.values() if ok)
    console.print(f"{passed}/{len(results)} connection tests passed")
    if passed == 0:
        raise typer.Exit(code=1)


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="Prompt to send."),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Provider id; defaults to the selected one."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model API identifier."),
    raw: bool = typer.Option(False, "--raw", help="Return the text as-is instead of parsing JSON."),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", min=1, help="Override the configured max tokens."),
    temperature: Optional[float] = typer.Option(
        None, "--temperature", min=0.0, max=1.0, help="Override the configured temperature."
    ),
    settings: Optional[Path] = typer.Option(None, "--settings", dir_okay=False, help=_SETTINGS_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Generate one completion through an AI provider."""

    _configure_logging(verbose)
    identity = _parse_provider(provider) if provider else None
    context = _create_context(settings)
    options = GenerationOptions(raw_response=raw, max_tokens=max_tokens, temperature=temperature)

    async def _run() -> Any:
        try:
            return await context.generate(prompt, identity, model, options)
        finally:
            await context.close()

    try:
        result = asyncio.run(_run())
    except GraphWeaverError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not isinstance(result, Success):
        raise typer.Exit(code=1)
    if isinstance(result.data, str):
        console.print(result.data, markup=False, highlight=False)
    else:
        console.print_json(json.dumps(result.data))


def main(argv: Iterable[str] | None = None) -> None:
    """Invoke the Typer application."""
    app(args=list(argv) if argv is not None else None)


if __name__ == "__main__":
    main()
