"""
CLI interface for AI Chat Guard.

Provides command-line access to the assistant and its cost table.
"""

import asyncio
import sys
from dataclasses import replace
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ai_chat_guard.config.loader import AssistantConfig, config_from_env, load_assistant_config
from ai_chat_guard.core.errors import InvalidInputError
from ai_chat_guard.core.pricing import list_models
from ai_chat_guard.sdk.factory import create_assistant
from ai_chat_guard.sdk.local_assistant import LocalAssistant
from ai_chat_guard.utils.logger import setup_logger

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1


def _load_config(config_path: Optional[str]) -> AssistantConfig:
    """File settings first, then environment overrides."""
    base = load_assistant_config(config_path) if config_path else None
    return config_from_env(base=base)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """AI Chat Guard CLI."""
    if ctx.invoked_subcommand is None:
        console.print("AI Chat Guard - Use --help to see available commands")


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send to the assistant"),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to assistant YAML configuration"
    ),
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Force the local assistant"
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Explicit model override"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log retries and fallbacks"
    )
):
    """Send one message and print the assistant's reply."""
    if verbose:
        setup_logger("ai_chat_guard", "DEBUG")

    try:
        config = _load_config(config_path)
        overrides = {}
        if mock:
            overrides["force_local"] = True
        if model:
            overrides["model"] = model
        config = replace(config, **overrides)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    assistant = create_assistant(config)
    try:
        result = asyncio.run(assistant.complete(message))
    except InvalidInputError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(result.response_text, markup=False)
    console.print(f"\n[dim]model:[/] {result.model}  [dim]cost:[/] {_format_cost(result.estimated_cost)}")

    if result.is_error:
        sys.exit(EXIT_CODE_FAIL)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def models():
    """List known models and their rates."""
    table = Table(title="Model Cost Table")
    table.add_column("Model")
    table.add_column("Name")
    table.add_column("Cost / 1M tokens", justify="right")

    for info in list_models():
        table.add_row(info.id, info.name, f"${info.cost_per_million:,.2f}")

    console.print(table)


@app.command()
def status(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to assistant YAML configuration"
    )
):
    """Show which assistant implementation would be used."""
    try:
        config = _load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    assistant = create_assistant(config)
    if isinstance(assistant, LocalAssistant):
        console.print("[yellow]●[/] Using local assistant (no valid OpenRouter API key or local mode forced)")
    else:
        console.print(f"[green]✓[/] Using OpenRouter assistant for {assistant.site_name}")
    sys.exit(EXIT_CODE_PASS)


def _format_cost(amount: float) -> str:
    """Format small per-request costs without rounding them away."""
    return f"${amount:.8f}"


if __name__ == "__main__":
    app()
