#!/usr/bin/env python3
"""
cmdfy - natural language to shell commands
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

import click
import pyperclip
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import print

from cmdfy import __version__
from cmdfy.config import Config
from cmdfy.core.assembler import assemble
from cmdfy.core.compare import ComparisonEngine
from cmdfy.core.errors import CmdfyError, ConfigError, GenerationError, HistoryError
from cmdfy.core.executor import CommandExecutor
from cmdfy.core.history import HistoryEntry, HistoryStore
from cmdfy.core.llm import GenerationContext, LLMManager, LLMProvider, ProviderRegistry
from cmdfy.core.models import CommandResult, ProviderResult
from cmdfy.core.safety import Decision, ExecutionGate
from cmdfy.core.selection import run_selection
from cmdfy.core.system import collect_metadata
from cmdfy.logging_utils import configure_logging
from cmdfy.providers import build_registry

logger = logging.getLogger(__name__)

# Initialize rich console
console = Console()

# Create the main CLI app
app = typer.Typer(
    name="cmdfy",
    help="cmdfy - translate natural language into shell commands using LLMs",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]}
)
config_app = typer.Typer(help="Manage configuration, including LLM providers and API keys")
app.add_typer(config_app, name="config")


class LogLevel(str, Enum):
    """Log levels"""
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


@dataclass
class AppState:
    """Collaborators shared by every command, built once at start-up"""
    registry: ProviderRegistry
    read_key: Callable[[], str] = click.getchar
    input_func: Optional[Callable[[str], str]] = None
    executor: CommandExecutor = field(default_factory=CommandExecutor)


def version_callback(value: bool):
    """Show version and exit"""
    if value:
        print(f"[bold green]cmdfy[/bold green] v{__version__}")
        raise typer.Exit()


@app.callback()
def common(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
):
    """cmdfy - translate natural language into shell commands using LLMs"""
    if ctx.obj is None:
        ctx.obj = AppState(registry=build_registry())


@app.command()
def run(
    ctx: typer.Context,
    query: List[str] = typer.Argument(
        ...,
        help="What you want to do, in plain English"
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider", "-p",
        help="Override the LLM provider (e.g., gemini, ollama)"
    ),
    compare: bool = typer.Option(
        False,
        "--compare",
        help="Ask every configured provider and pick one of the answers"
    ),
    execute: bool = typer.Option(
        False,
        "--execute", "-y",
        help="Execute the generated command immediately"
    ),
    clipboard: bool = typer.Option(
        False,
        "--clipboard", "-c",
        help="Include clipboard content as context"
    ),
    directory: str = typer.Option(
        ".",
        "--directory", "-d",
        help="Target directory for context scanning"
    ),
    error: Optional[str] = typer.Option(
        None,
        "--error", "-e",
        help="Error output of a previous attempt to help the model fix it"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default is ~/.cmdfy/config.json)"
    ),
    log_level: Optional[LogLevel] = typer.Option(
        None,
        "--log-level", "-l",
        help="Set logging level"
    ),
):
    """
    Generate a shell command for a natural language query

    Examples:
    \b
        cmdfy run find all python files modified today
        cmdfy run "show disk usage" --provider ollama
        cmdfy run "compress the logs folder" --compare
        cmdfy run "delete merged git branches" --execute
        cmdfy run "fix this error" --clipboard
    """
    state: AppState = ctx.obj
    query_text = " ".join(query).strip()
    if not query_text:
        console.print("[red]Error: query must not be empty[/red]")
        raise typer.Exit(1)

    if clipboard:
        content = _read_clipboard()
        if content:
            query_text = f"{query_text}\n\nContext from Clipboard:\n{content}"
            console.print("Added clipboard content to context.")

    try:
        config = Config.load(config_file)
        configure_logging(log_level.value if log_level else config.log_level, config.log_file)

        history = HistoryStore(config.history_file)
        try:
            examples = history.examples(config.history_limit)
        except HistoryError as e:
            logger.warning("Ignoring history: %s", e)
            examples = []

        metadata = collect_metadata(directory, previous_error=error, examples=examples)
        manager = LLMManager(config, state.registry, timeout=config.timeout)

        if compare:
            if provider:
                console.print("[yellow]--provider is ignored in compare mode[/yellow]")
            providers = manager.eligible_providers()
            choice = _compare(state, providers, query_text, metadata, config.timeout)
            if choice is None:
                console.print("[yellow]Aborted.[/yellow]")
                return
            provider_name = choice.name
            model = providers[choice.name].model
            result = choice.result
        else:
            llm = manager.get_provider(provider)
            provider_name, model = llm.name, llm.model
            with console.status(f"Generating command with {provider_name}..."):
                result = llm.generate(GenerationContext.with_timeout(config.timeout), query_text, metadata)

        command = assemble(result)
        entry = HistoryEntry(
            query=query_text,
            command=command,
            explanation=result.explanation,
            provider=provider_name,
            model=model,
            context=error or ""
        )

        if not execute:
            _print_result(command, result)
            if compare:
                _record_history(history, entry)
            return

        gate = ExecutionGate(console, state.input_func)
        if gate.authorize(result, command) == Decision.ABORT:
            console.print("Aborted.")
            return

        console.print(f"Executing: {escape(command)}")
        state.executor.run(command)
        _record_history(history, entry)

    except CmdfyError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(1)


def _compare(
    state: AppState,
    providers: Dict[str, LLMProvider],
    query: str,
    metadata,
    timeout: float
) -> Optional[ProviderResult]:
    """Fan out to every provider and let the user choose"""
    engine = ComparisonEngine(timeout=timeout)
    with console.status(f"Asking {len(providers)} providers..."):
        results = engine.compare(providers, query, metadata)

    if not any(r.ok for r in results):
        for r in results:
            console.print(f"[red]{r.name}:[/red] {escape(str(r.error))}")
        raise GenerationError("every provider failed")

    return run_selection(results, state.read_key, console)


def _print_result(command: str, result: CommandResult) -> None:
    console.print(f"\n[bold]COMMAND:[/bold] [green]{escape(command)}[/green]")
    console.print(f"\n[bold]EXPLANATION:[/bold] {escape(result.explanation)}")
    if result.dangerous:
        console.print("\n[bold red]\\[DANGEROUS]:[/bold red] Yes")
    console.print()


def _read_clipboard() -> str:
    """Clipboard text, or "" when it cannot be read"""
    try:
        return pyperclip.paste() or ""
    except pyperclip.PyperclipException as e:
        console.print(f"[yellow]Failed to read clipboard: {escape(str(e))}[/yellow]")
        return ""


def _record_history(history: HistoryStore, entry: HistoryEntry) -> None:
    # Best effort, the command has already run
    try:
        history.record(entry)
    except HistoryError as e:
        console.print(f"[yellow]Warning: {escape(str(e))}[/yellow]")


@app.command()
def history(
    limit: int = typer.Option(
        10,
        "--limit", "-n",
        help="How many entries to show"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default is ~/.cmdfy/config.json)"
    ),
):
    """
    Show recently accepted commands
    """
    try:
        config = Config.load(config_file)
        entries = HistoryStore(config.history_file).recent(limit)
    except (ConfigError, HistoryError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not entries:
        console.print("[dim]No commands in history[/dim]")
        return

    table = Table(title="Recent commands")
    table.add_column("When", style="dim")
    table.add_column("Query", style="cyan")
    table.add_column("Command", style="green")
    table.add_column("Provider", style="dim")

    for entry in entries:
        table.add_row(
            entry.timestamp.replace('T', ' ')[:19],
            escape(entry.query),
            escape(entry.command),
            entry.provider
        )
    console.print(table)


@app.command()
def providers(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default is ~/.cmdfy/config.json)"
    ),
):
    """
    List providers and whether they can be used
    """
    state: AppState = ctx.obj
    try:
        config = Config.load(config_file)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    eligible = LLMManager(config, state.registry).eligible_providers()

    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Needs key")
    table.add_column("Ready")
    for name in state.registry.names():
        marker = "*" if name == config.current_provider else ""
        table.add_row(
            f"{name}{marker}",
            "yes" if state.registry.requires_api_key(name) else "no",
            "[green]yes[/green]" if name in eligible else "[dim]no[/dim]"
        )
    console.print(table)


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    provider: str = typer.Option(
        ...,
        "--provider", "-p",
        help="LLM provider name (e.g., gemini)"
    ),
    key: Optional[str] = typer.Option(
        None,
        "--key", "-k",
        help="API key"
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url", "-u",
        help="Base URL (optional)"
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model", "-m",
        help="Model name (optional)"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default is ~/.cmdfy/config.json)"
    ),
):
    """
    Set configuration values for a provider and make it current

    Examples:
    \b
        cmdfy config set --provider gemini --key your-api-key
        cmdfy config set --provider ollama --model llama3 --url http://localhost:11434
    """
    state: AppState = ctx.obj
    try:
        name = state.registry.canonical(provider)
        config = Config.load(config_file, use_env=False)
        config.set_provider(name, api_key=key, base_url=url, model=model)
    except CmdfyError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Configuration updated. Current provider: {name}[/green]")


@config_app.command("show")
def config_show(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default is ~/.cmdfy/config.json)"
    ),
):
    """
    Show current configuration
    """
    try:
        Config.load(config_file).show()
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
