"""CLI utilities and decorators."""

import logging
import sys
from contextlib import contextmanager
from functools import wraps
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.status import Status

from .core.errors import FatalError, TopupError
from .core.report import EXIT_FATAL
from .themed_console import console

err_console = Console(stderr=True)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@contextmanager
def loading_status(message: str, success_message: str = ""):
    """Universal context manager to show loading status."""
    status = Status(f"[cyan]{message}...[/cyan]", console=console)
    status.start()
    try:
        yield
        if success_message:
            console.print(f"[green]✓[/green] {success_message}")
    except Exception as e:
        console.print(f"[red]✗ Failed: {e}[/red]")
        raise
    finally:
        status.stop()


def handle_errors(func):
    """Decorator to turn topup errors into a message and exit status."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FatalError as e:
            console.error(f"Error: {e}")
            sys.exit(EXIT_FATAL)
        except TopupError as e:
            console.error(f"Error: {e}")
            sys.exit(1)
    return wrapper


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure the root logger for a CLI invocation.

    Logs go to stderr through rich, ``WARNING`` and up unless ``verbose``.
    Calling it again replaces the handlers it added before.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_topup", False):
            root.removeHandler(handler)
            handler.close()

    rich_handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)
    rich_handler._topup = True
    root.addHandler(rich_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        file_handler._topup = True
        root.addHandler(file_handler)
        # File gets everything, the terminal handler keeps its threshold
        rich_handler.setLevel(level)
        root.setLevel(logging.DEBUG)


def split_names(values) -> frozenset:
    """Split repeated/comma separated step names into a set."""
    names = set()
    for value in values or ():
        for part in str(value).replace(",", " ").split():
            names.add(part.strip().lower())
    return frozenset(names)


def echo_table(rows, headers) -> None:
    """Print rows as a simple rich table."""
    from rich.table import Table

    table = Table(box=None, header_style="bold")
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    console.print(table)
