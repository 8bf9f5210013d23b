# dialect_bridge/cli.py
"""
Diagnostic CLI for dialect-bridge.

Thin presentation layer: every command loads the config and delegates to the
library (config validation, ModelDiscovery, CapabilityRegistry, orchestrator).
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from dialect_bridge.backend.factory import create_discovery, create_orchestrator, create_registry
from dialect_bridge.config import check_setup, load_config, validate_config
from dialect_bridge.errors import BridgeError
from dialect_bridge.logging_config import configure_logging
from dialect_bridge.types import CanonicalRequest, Message

app = typer.Typer(
    name="dialect-bridge",
    help="Model-aware tool-calling translation for local model servers.",
    no_args_is_help=True,
)

console = Console()


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _fail(message: str) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr")):
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def status():
    """Show the effective configuration and any problems with it."""
    config = load_config()
    report = validate_config(config)

    typer.echo(f"Server:   {config.base_url}{config.api_prefix}")
    typer.echo(f"Model:    {config.default_model}")
    typer.echo(f"Timeout:  {config.timeout_ms} ms")
    typer.echo(f"Retries:  {config.max_retries}")
    for warning in report.warnings:
        typer.secho(f"Warning:  {warning}", fg=typer.colors.YELLOW)
    for error in report.errors:
        typer.secho(f"Error:    {error}", fg=typer.colors.RED)
    if not report.is_valid:
        raise typer.Exit(1)
    typer.secho("Configuration OK", fg=typer.colors.GREEN)


@app.command("test")
def test_connection():
    """Test the connection to the server and check the default model is installed."""
    config = load_config()
    report = _run(check_setup(config.model_copy(update={"connection_test_enabled": True})))
    for warning in report.warnings:
        typer.secho(f"Warning: {warning}", fg=typer.colors.YELLOW)
    if not report.is_valid:
        _fail("; ".join(report.errors))
    typer.secho(
        f"Connected to {config.base_url}; {config.default_model} is available",
        fg=typer.colors.GREEN,
    )


@app.command("models")
def list_models():
    """List installed models with their tool-calling capabilities."""
    config = load_config()
    registry = create_registry(config)

    try:
        models = _run(create_discovery(config).list_models())
    except BridgeError as e:
        _fail(str(e))

    if not models:
        typer.echo("No models installed.")
        return

    table = Table(title=f"Models at {config.base_url}")
    table.add_column("Model")
    table.add_column("Size", justify="right")
    table.add_column("Tools")
    table.add_column("Dialect")
    table.add_column("Max tools", justify="right")
    for model in models:
        caps = registry.get(model.name)
        table.add_row(
            model.name,
            model.parameter_size or "",
            _yes_no(caps.supports_tools),
            caps.dialect.value if caps.supports_tools else "-",
            str(caps.max_tools) if caps.supports_tools else "-",
        )
    console.print(table)


@app.command()
def caps(model: str = typer.Argument(..., help="Model id, e.g. qwen2.5-coder:32b")):
    """Show the capability analysis for a model."""
    config = load_config()
    analysis = create_registry(config).analyze(model)
    c = analysis.capabilities

    typer.echo(f"Model:          {model}")
    typer.echo(f"Tool calling:   {_yes_no(c.supports_tools)}")
    if c.supports_tools:
        typer.echo(f"Dialect:        {c.dialect.value}")
        typer.echo(f"Max tools:      {c.max_tools}")
        typer.echo(f"Parallel calls: {_yes_no(c.supports_parallel_calls)}")
        typer.echo(f"Streaming:      {_yes_no(c.supports_streaming)}")
        typer.echo(f"Prompt style:   {c.prompt_style.value}")
        typer.echo(f"Multi-turn:     {c.multi_turn_quality.value}")
        if c.custom_parser_id:
            typer.echo(f"Parser:         {c.custom_parser_id}")
    for title, items in (
        ("Recommendations", analysis.recommendations),
        ("Limitations", analysis.limitations),
        ("Best practices", analysis.best_practices),
    ):
        if items:
            typer.echo(f"\n{title}:")
            for item in items:
                typer.echo(f"  - {item}")


@app.command()
def chat(
    prompt: str = typer.Argument(..., help="User message to send"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model id (default from config)"),
    stream: bool = typer.Option(False, "--stream", help="Print text as it arrives"),
):
    """Send one message through the translation layer and print the reply."""
    config = load_config()
    model_id = model or config.default_model
    request = CanonicalRequest(messages=[Message(role="user", content=prompt)])

    async def _chat():
        async with create_orchestrator(config) as orchestrator:
            if not stream:
                response = await orchestrator.send(request, model_id)
                typer.echo(response.text)
                return response.stats.warnings
            warnings: list[str] = []
            async for item in orchestrator.stream(request, model_id):
                typer.echo(item.text, nl=False)
                warnings.extend(item.stats.warnings)
            typer.echo()
            return warnings

    try:
        warnings = _run(_chat())
    except BridgeError as e:
        _fail(str(e))

    for warning in warnings:
        typer.secho(f"Warning: {warning}", fg=typer.colors.YELLOW, err=True)
