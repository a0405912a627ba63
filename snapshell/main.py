"""Main entry point for the snapshell CLI."""

import asyncio
from typing import List, Optional

import typer
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from snapshell.config import (
    ConfigurationError,
    LLMProvider,
    ReasoningLevel,
    SnapshellConfig,
    apply_system_overrides,
    load_configuration,
    validate_api_setup,
)
from snapshell.history import CommandHistory, PersistenceError
from snapshell.prompts import detect_environment
from snapshell.session import ConversationSession
from snapshell.ui import Presenter, configure_logging, console

app = typer.Typer(
    name="snapshell",
    help="Snappy shell command generation from natural language",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=False,  # Allow no args to show usage info
)


def show_welcome():
    """Display welcome message with usage instructions."""
    welcome_text = """
# snapshell - shell commands from plain English

## Usage

**One-shot** (prints the command and copies it to the clipboard):
```bash
ss "list files modified today"
ss -L "backup every .conf file in /etc into a dated tarball"
ss -S "compress ~/projects"
```

**Interactive chat**:
```bash
ss -a "find large log files"
```

**History**:
```bash
ss -H
```

## Quick Start
1. Set your API key: `export SNAPSHELL_OPENROUTER_API_KEY="your-key"`
2. Try: `ss "show disk usage per directory"`

For more help: `ss --help`
    """

    console.print(
        Panel(
            Markdown(welcome_text),
            title="[bold blue]snapshell[/bold blue]",
            border_style="blue",
        )
    )


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        from . import __version__

        console.print(f"snapshell version {__version__}")
        raise typer.Exit()


def show_config_callback(value: bool):
    """Show current configuration and exit."""
    if value:
        try:
            config = load_configuration()
        except ConfigurationError as e:
            Presenter().error(e)
            raise typer.Exit(1)

        console.print("\n[bold blue]snapshell Configuration[/bold blue]")
        console.print(f"Provider: [cyan]{config.llm_provider.value}[/cyan]")
        console.print("Model:", Text(config.get_current_model(), style="cyan"))
        console.print(
            f"API Key: [green]{'✓ Set' if config.get_current_api_key() else '✗ Not set'}[/green]"
        )
        console.print(f"Reasoning effort: [cyan]{config.reasoning.value}[/cyan]")
        console.print(f"Mode: [cyan]{config.mode.value}[/cyan]")
        console.print(
            f"Clipboard: [cyan]{'Enabled' if config.copy_to_clipboard else 'Disabled'}[/cyan]"
        )
        console.print(
            f"History: [cyan]{'Enabled' if config.history_enabled else 'Disabled'}[/cyan]"
        )
        if config.history_enabled:
            console.print("History location:", Text(str(config.history_file), style="dim"))
        raise typer.Exit()


@app.command()
def main(
    query: List[str] = typer.Argument(
        None, help="Command instruction or chat text."
    ),
    history: bool = typer.Option(
        False, "--history", "-H", help="Show history of prompts and generated commands"
    ),
    ask: bool = typer.Option(
        False, "--ask", "-a", help="Interactive chat mode (keeps the conversation going)"
    ),
    reasoning: Optional[ReasoningLevel] = typer.Option(
        None,
        "--reasoning",
        "-r",
        case_sensitive=False,
        help="Reasoning effort: low, medium, or high (default: low)",
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Model to use (default: openai/gpt-oss-20b)"
    ),
    multiline: bool = typer.Option(
        False,
        "--multiline",
        "-L",
        help="Allow a multi-line shell script instead of a single-line command",
    ),
    system: Optional[str] = typer.Option(
        None,
        "--system",
        "-s",
        help="Custom system instruction for both modes unless a specific one is given",
    ),
    system_single: Optional[str] = typer.Option(
        None, "--system-single", help="Custom system instruction for single-line mode"
    ),
    system_multiline: Optional[str] = typer.Option(
        None, "--system-multiline", help="Custom system instruction for multiline mode"
    ),
    show_reasoning: bool = typer.Option(
        False,
        "--show-reasoning",
        "-S",
        help='Include model reasoning as a trailing JSON object {"reasoning": "..."}',
    ),
    provider: Optional[LLMProvider] = typer.Option(
        None,
        "--provider",
        "-p",
        case_sensitive=False,
        help="Override LLM provider (openrouter, openai)",
    ),
    no_copy: bool = typer.Option(
        False, "--no-copy", help="Do not copy the command to the clipboard"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug output and detailed error information",
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config-file", "-c", help="Path to custom configuration file"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version information and exit.",
    ),
    show_config: Optional[bool] = typer.Option(
        None,
        "--show-config",
        callback=show_config_callback,
        is_eager=True,
        help="Show current configuration and exit.",
    ),
):
    """Turn a natural-language request into a shell command."""
    presenter = Presenter()

    try:
        config = load_configuration(config_file=config_file, debug=debug)
    except ConfigurationError as e:
        presenter.error(e, debug)
        raise typer.Exit(1)

    configure_logging(config.log_level.value)

    if history:
        raise typer.Exit(show_history(config, presenter))

    if not query:
        show_welcome()
        raise typer.Exit()

    # Update config with CLI options
    if provider:
        config.llm_provider = provider
    if model:
        config.set_current_model(model)
    if reasoning:
        config.reasoning = reasoning
    if multiline:
        config.multiline = True
    if show_reasoning:
        config.show_reasoning = True
    if no_copy:
        config.copy_to_clipboard = False
    apply_system_overrides(config, system, system_single, system_multiline)

    try:
        validate_api_setup(config)
    except ConfigurationError as e:
        presenter.error(e, config.show_debug)
        console.print(
            "\n[bold]Tip:[/bold] export SNAPSHELL_OPENROUTER_API_KEY to get started."
        )
        raise typer.Exit(1)

    exit_code = run_session(" ".join(query), config, interactive=ask)
    raise typer.Exit(exit_code)


def run_session(prompt: str, config: SnapshellConfig, interactive: bool = False) -> int:
    """Run a conversation session and return its exit code."""
    presenter = Presenter(copy_to_clipboard=config.copy_to_clipboard)
    session = ConversationSession(
        config,
        presenter=presenter,
        interactive=interactive,
        environment=detect_environment(),
    )
    try:
        return asyncio.run(session.run(prompt))
    except KeyboardInterrupt:
        presenter.warning("Interrupted.")
        return 130


def show_history(config: SnapshellConfig, presenter: Presenter) -> int:
    """Print the command history; returns the exit code."""
    reader = CommandHistory(config.history_file).read_all()
    try:
        presenter.show_history(reader)
    except PersistenceError as e:
        presenter.error(e, config.show_debug)
        return 1
    if reader.skipped:
        presenter.warning(f"Skipped {reader.skipped} malformed history line(s).")
    return 0


if __name__ == "__main__":
    app()
