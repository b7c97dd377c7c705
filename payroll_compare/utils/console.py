import sys
from typing import List, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

_console = Console()


def get_console() -> Console:
    return _console


def is_interactive() -> bool:
    """Check if we are in an interactive TTY session."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def print_step(title: str) -> None:
    """Print a step header."""
    _console.rule(f"[bold blue]{title}[/]")


def print_success(message: str) -> None:
    _console.print(f"[bold green]SUCCESS:[/] {message}")


def print_warning(message: str) -> None:
    _console.print(f"[bold yellow]WARNING:[/] {message}")


def print_error(message: str, exit_code: Optional[int] = None) -> None:
    """Print an error message and optionally exit."""
    _console.print(f"[bold red]ERROR:[/] {message}")

    if exit_code is not None:
        sys.exit(exit_code)


def print_table(
    title: str,
    columns: List[str],
    rows: List[List[str]],
    numeric_columns: Optional[List[str]] = None,
) -> None:
    """Print a table; columns named in numeric_columns are right-aligned."""
    table = Table(title=title)
    right = set(numeric_columns or [])
    for col in columns:
        table.add_column(col, justify="right" if col in right else "left")
    for row in rows:
        table.add_row(*row)
    _console.print(table)
    if not rows:
        # Printed on its own line; a caption would wrap to the empty table's width.
        _console.print("(No data)", style="dim", highlight=False)


def print_text(text: str) -> None:
    _console.print(text, markup=False, highlight=False)


def ask_input(prompt_text: str, default: Optional[str] = None) -> str:
    """
    Prompt for user input (interactive only).
    If not interactive, returns default if present, else raises generic error.
    """
    if not is_interactive():
        if default is not None:
            return default
        raise RuntimeError("Interactive input required but not in TTY mode.")

    if default is not None:
        return str(Prompt.ask(prompt_text, default=default))
    return str(Prompt.ask(prompt_text))


def ask_confirm(prompt_text: str, default: bool = False) -> bool:
    """Ask for yes/no confirmation."""
    if not is_interactive():
        return default
    return bool(Confirm.ask(prompt_text, default=default))
