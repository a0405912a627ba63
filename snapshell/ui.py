"""Console output, clipboard and logging helpers."""

import logging
from typing import Iterable, Optional

import pyperclip
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text
from rich.traceback import Traceback

from .history import HistoryEntry
from .parser import ParsedResponse

# Commands go to stdout so they can be piped; everything else goes to stderr.
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str = "warning") -> None:
    """Route the ``snapshell`` loggers through a rich handler on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


class Presenter:
    """Displays results to the user and copies commands to the clipboard."""

    def __init__(
        self,
        copy_to_clipboard: bool = True,
        out: Optional[Console] = None,
        err: Optional[Console] = None,
    ):
        self.copy_to_clipboard = copy_to_clipboard
        self.out = out or console
        self.err = err or err_console

    def status(self, message: str):
        """Spinner shown while waiting on the model."""
        return self.err.status(Text(message, style="dim"))

    def show_response(self, parsed: ParsedResponse, show_reasoning: bool = False) -> None:
        """Print the command verbatim, copy it, then the optional reasoning."""
        # Shell text may contain [brackets]; never treat it as markup.
        self.out.print(Text(parsed.command_or_answer), soft_wrap=True, highlight=False)

        if parsed.command_or_answer and not parsed.is_unanswerable:
            self.copy(parsed.command_or_answer)

        if show_reasoning and parsed.reasoning is not None:
            self.out.print(Text(parsed.reasoning_json()), soft_wrap=True, highlight=False)

    def copy(self, text: str) -> bool:
        """Copy text to the system clipboard if enabled."""
        if not self.copy_to_clipboard:
            return False
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            self.warning(f"Could not copy to clipboard: {e}")
            return False
        return True

    def show_history(self, entries: Iterable[HistoryEntry]) -> int:
        """Print history entries oldest first; returns how many were shown."""
        count = 0
        for entry in entries:
            self.out.print(
                Text(f"{entry.timestamp.isoformat()} -> {entry.prompt}\n  {entry.command}"),
                soft_wrap=True,
                highlight=False,
            )
            count += 1
        if count == 0:
            self.out.print("no history")
        return count

    def info(self, message: str) -> None:
        self.err.print(Text(message, style="dim"))

    def warning(self, message: str) -> None:
        self.err.print("[bold yellow]Warning:[/bold yellow]", Text(message))

    def error(self, error: Exception, debug: bool = False) -> None:
        """Handle and display errors with appropriate formatting."""
        if debug:
            self.err.print("\n[bold red]Debug Error Details:[/bold red]")
            self.err.print(
                Traceback.from_exception(type(error), error, error.__traceback__)
            )
        else:
            self.err.print("[bold red]Error:[/bold red]", Text(str(error)))

    def read_line(self, prompt: str = "> ") -> str:
        """Block until the user enters a line."""
        return self.err.input(prompt)
