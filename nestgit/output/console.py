"""Console output abstraction.

Commands print through ``ConsoleProtocol`` so they can be exercised with
``MockConsole`` in tests. ``RichConsole`` is the terminal implementation and
also renders Rich tables for the aggregated file view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "configure_logging",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def raw(self, text: str) -> None:
        """Print text verbatim (git output), without markup processing."""
        ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def render(self, renderable: object) -> None:
        """Print a Rich renderable (table, panel)."""
        ...


# Rich style per Style; DEFAULT prints unstyled.
_RICH_STYLES: dict[Style, str] = {
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}


def _tagged(label: str, style: Style, message: str) -> str:
    from rich.markup import escape

    rich_style = _RICH_STYLES[style]
    return f"[{rich_style}]{label}[/{rich_style}] {escape(message)}"


class RichConsole:
    """Terminal console; ``stderr=True`` for diagnostics."""

    def __init__(self, *, stderr: bool = False) -> None:
        # Import Rich lazily to keep library imports light
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=_RICH_STYLES.get(style), markup=False)

    def raw(self, text: str) -> None:
        self._console.out(text, highlight=False)

    def error(self, message: str) -> None:
        self._console.print(_tagged("error:", Style.ERROR, message))

    def warning(self, message: str) -> None:
        self._console.print(_tagged("warning:", Style.WARNING, message))

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style=_RICH_STYLES[Style.HEADER], markup=False)

    def render(self, renderable: object) -> None:
        self._console.print(renderable)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    renderables: list[object] = field(default_factory=list)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def raw(self, text: str) -> None:
        self.outputs.append(OutputRecord(text, Style.DEFAULT))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def render(self, renderable: object) -> None:
        self.renderables.append(renderable)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through Rich; DEBUG when verbose."""
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
        force=True,
    )
