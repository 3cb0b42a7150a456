"""Interactive project-name prompt."""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Prompt

from .utils import console as default_console

EMPTY_NAME_MESSAGE = "App name cannot be empty"


def validate_project_name(value: str) -> str | None:
    """Return ``None`` if *value* is acceptable, otherwise an error message.

    Only emptiness is checked; names that are not valid native identifiers
    are passed through unchanged.
    """
    if not value:
        return EMPTY_NAME_MESSAGE
    return None


def ask_project_name(console: Console | None = None) -> str:
    """Ask for the project name until a non-empty answer is given."""
    console = console or default_console
    while True:
        answer = Prompt.ask("[bold cyan]What is your new app name?[/bold cyan]", console=console)
        error = validate_project_name(answer)
        if error is None:
            return answer
        console.print(f"[bold red]{error}[/bold red]")
