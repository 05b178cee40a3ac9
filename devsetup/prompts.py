"""Interactive prompt layer.

Wraps ``rich.prompt`` so every question the setup asks goes through one
object. The console and the input stream are injectable, which lets tests
drive a full run from a ``StringIO`` script.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import IO

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .config import SECRET_FIELDS, VALUE_PROMPTS, ProjectValues, value_default
from .utils import console as default_console


class RetryChoice(str, Enum):
    RETRY = "retry"
    SKIP = "skip"
    EXIT = "exit"
    INVALID = "invalid"


_RETRY_KEYS: dict[str, RetryChoice] = {
    "r": RetryChoice.RETRY,
    "s": RetryChoice.SKIP,
    "e": RetryChoice.EXIT,
}


@dataclass(frozen=True)
class MenuEntry:
    """One selectable line of the menu: a label and the handler it runs."""

    label: str
    handler: Callable[[], object]


class Prompter:
    """Collects operator input.

    Args:
        console: Rich console used for rendering prompts.
        stream: Optional input stream; ``None`` reads from the terminal.
    """

    def __init__(self, console: Console | None = None, stream: IO[str] | None = None) -> None:
        self.console = console or default_console
        self.stream = stream

    # -- Plain values ------------------------------------------------------

    def ask(self, label: str, default: str) -> str:
        """Ask for a value; empty input yields *default*."""
        answer = Prompt.ask(
            label,
            default=default,
            console=self.console,
            stream=self.stream,
        )
        return answer.strip() if answer else default

    def ask_secret(self, label: str) -> str:
        """Ask for a hidden value; blank is allowed and returned as ``""``."""
        # getpass always reads the terminal, so hiding only works without a stream
        answer = Prompt.ask(
            label,
            default="",
            show_default=False,
            password=self.stream is None,
            console=self.console,
            stream=self.stream,
        )
        return (answer or "").strip()

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(
            question,
            default=default,
            console=self.console,
            stream=self.stream,
        )

    def fill(self, values: ProjectValues, field: str) -> str:
        """Return *field* from *values*, asking for it first if still unset."""
        if values.is_set(field):
            return getattr(values, field)

        label, _ = VALUE_PROMPTS[field]
        if field in SECRET_FIELDS:
            answer = self.ask_secret(label)
        else:
            answer = self.ask(label, value_default(field))
        setattr(values, field, answer)
        return answer

    # -- Retry controller prompts -------------------------------------------

    def retry_choice(self) -> RetryChoice:
        """Ask ``Retry, Skip, or Exit?``; unknown answers map to ``INVALID``."""
        answer = Prompt.ask(
            "Retry, Skip, or Exit? (r/s/e)",
            default="",
            show_default=False,
            console=self.console,
            stream=self.stream,
        )
        key = (answer or "").strip().lower()[:1]
        return _RETRY_KEYS.get(key, RetryChoice.INVALID)

    def skip_or_exit(self) -> RetryChoice:
        """Ask the narrowed final prompt; only skip or exit are accepted.

        Answers are matched on their first letter, ignoring case. Anything
        else prints a warning and asks again.
        """
        while True:
            answer = Prompt.ask(
                "Max attempts reached. Skip or Exit? (s/e)",
                default="",
                show_default=False,
                console=self.console,
                stream=self.stream,
            )
            key = (answer or "").strip().lower()[:1]
            if key in ("s", "e"):
                return _RETRY_KEYS[key]
            self.console.print("[bold yellow]! Please enter s or e.[/bold yellow]")

    # -- Menu --------------------------------------------------------------

    def render_menu(self, title: str, entries: list[MenuEntry]) -> None:
        self.console.print()
        self.console.print(f"[bold blue]{title}[/bold blue]")
        width = len(str(len(entries)))
        for number, entry in enumerate(entries, 1):
            self.console.print(f"  {str(number).rjust(width)}. {entry.label}")
        self.console.print()

    def select(self, title: str, entries: list[MenuEntry]) -> MenuEntry:
        """Render the menu and return the chosen entry.

        Invalid selections print a warning and ask again.
        """
        self.render_menu(title, entries)
        while True:
            answer = Prompt.ask(
                f"Select option (1-{len(entries)})",
                default="",
                show_default=False,
                console=self.console,
                stream=self.stream,
            )
            answer = (answer or "").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(entries):
                return entries[int(answer) - 1]
            self.console.print(
                f"[bold yellow]! Invalid option. Please select 1-{len(entries)}.[/bold yellow]"
            )
