"""Display sinks — where the engine's display text ends up.

The engine only ever hands a sink the finished display string. ConsoleDisplay
paints an LCD-style Rich panel; RecordingDisplay keeps the frames in memory.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.panel import Panel
from rich.text import Text


class Display(Protocol):
    """Anything that can show the calculator's display text."""

    def render(self, text: str) -> None: ...


class RecordingDisplay:
    """Keeps every rendered frame, oldest first."""

    def __init__(self) -> None:
        self.frames: list[str] = []

    def render(self, text: str) -> None:
        self.frames.append(text)

    @property
    def last(self) -> Optional[str]:
        return self.frames[-1] if self.frames else None


class ConsoleDisplay:
    """Renders the display as a right-aligned panel on a Rich console.

    Args:
        console: Console to print to.
        width: Number of character cells on the LCD.
        error_token: Display text shown in the error style.
        status: Optional callable returning a short indicator (e.g. "M")
            shown in the panel subtitle.
    """

    def __init__(
        self,
        console: Console,
        width: int = 9,
        error_token: str = "Error",
        status: Optional[Callable[[], str]] = None,
    ) -> None:
        self.console = console
        self.width = width
        self.error_token = error_token
        self.status = status

    def render(self, text: str) -> None:
        style = "bold red" if text == self.error_token else "bold green"
        lcd = Text(text.rjust(self.width), style=style, justify="right")
        subtitle = self.status() if self.status else ""
        self.console.print(
            Panel(
                lcd,
                width=self.width + 4,
                subtitle=f"[dim]{subtitle}[/dim]" if subtitle else None,
                subtitle_align="left",
                border_style="dim",
            )
        )
