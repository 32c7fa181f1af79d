"""Rich console output for the non-interactive commands."""

from typing import Optional

from rich.console import Console

_console: Optional[Console] = None
_error_console: Optional[Console] = None


def get_console() -> Console:
    """Get or create the shared stdout Console."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_error_console() -> Console:
    """Get or create the shared stderr Console."""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def print_error(message: str) -> None:
    get_error_console().print(f"[bold red]Error:[/bold red] {message}", highlight=False)

