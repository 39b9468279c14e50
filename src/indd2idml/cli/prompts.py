from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm, Prompt


class ConsoleOperator:
    """Asks the operator on the terminal; answers defaults when not interactive."""

    def __init__(self, console: Console, *, interactive: bool = True) -> None:
        self._console = console
        self._interactive = interactive

    def confirm(self, question: str, *, default: bool = False) -> bool:
        if not self._interactive:
            return default
        return Confirm.ask(question, default=default, console=self._console)

    def _ask_path(self, question: str) -> Path | None:
        if not self._interactive:
            return None
        answer = Prompt.ask(question, default="", show_default=False, console=self._console)
        answer = answer.strip().strip('"')
        if not answer:
            return None
        return Path(answer).expanduser()

    def select_file(self, pattern: str) -> Path | None:
        return self._ask_path(f"Select the InDesign file ({pattern})")

    def select_folder(self) -> Path | None:
        return self._ask_path("Select the folder to scan")

    def alert(self, message: str) -> None:
        self._console.print(f"[bold red]{message}[/bold red]")
