"""Reporter classes for controlling run output."""

import time
from typing import Optional

from rich.prompt import Prompt
from rich.rule import Rule

from ..themed_console import console
from .errors import PromptUnavailableError
from .outcome import DECLINED, NOT_INSTALLED, Outcome, Status


class Reporter:
    """Default reporter that writes to the themed terminal console."""

    def step(self, name: str) -> None:
        """Print the separator that introduces a step's output."""
        title = f"{time.strftime('%H:%M:%S')} - {name}"
        console.print(Rule(title, style=console.theme.get("header", "bold")))

    def ask(self, message: str, default: str = "y") -> str:
        """Read one answer from the controlling terminal.

        Args:
            message: Prompt text
            default: Returned when the user just presses enter

        Raises:
            PromptUnavailableError: stdin is closed or not readable
        """
        try:
            return Prompt.ask(message, default=default, console=console)
        except (EOFError, OSError) as e:
            raise PromptUnavailableError(f"Cannot read answer from terminal: {e}") from e

    def outcome(self, name: str, outcome: Outcome) -> None:
        """Show a step's outcome inline, right after it ran."""
        if outcome.status is Status.FAILURE:
            console.error(f"✗ {name} failed: {outcome.reason}")
        elif outcome.status is Status.SUCCESS:
            console.success(f"✓ {name}")
        elif outcome.status is Status.SKIPPED and outcome.reason not in (NOT_INSTALLED, DECLINED):
            console.warning(f"- {name} skipped: {outcome.reason}")

    def summary(self, text: str, exit_code: int, separator: str = "─" * 50) -> None:
        """Display the rendered report between separators."""
        console.print(f"\n{separator}")
        if exit_code == 0:
            console.success("All steps completed")
        else:
            console.error("Some steps did not complete")
        console.print(text, markup=False, highlight=False)
        console.print(f"{separator}\n")

    def command(self, text: str) -> None:
        """Echo a command that dry-run mode did not execute."""
        console.print(f"Dry running: {text}", style=console.theme.get("command"), markup=False, highlight=False)

    def output(self, line: str) -> None:
        """Stream one line of captured child output."""
        console.print(line, markup=False, highlight=False, soft_wrap=True)

    def info(self, message: str) -> None:
        """Display an info message."""
        console.info(message)

    def error(self, message: str) -> None:
        """Display an error message."""
        console.error(message)

    def warning(self, message: str) -> None:
        """Display a warning message."""
        console.warning(message)

    def print(self, message: Optional[str] = "", style: Optional[str] = None) -> None:
        """Print a message with optional styling."""
        console.print(message, style=style)


class NullReporter:
    """No-op reporter for testing."""

    def step(self, name: str) -> None:
        pass

    def ask(self, message: str, default: str = "y") -> str:
        """No-op - always accepts the default."""
        return default

    def outcome(self, name: str, outcome: Outcome) -> None:
        pass

    def summary(self, text: str, exit_code: int, separator: str = "─" * 50) -> None:
        pass

    def command(self, text: str) -> None:
        pass

    def output(self, line: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def print(self, message: Optional[str] = "", style: Optional[str] = None) -> None:
        pass
