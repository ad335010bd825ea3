#!/usr/bin/env python3
"""
Output - renders report entries as minimal lines, a framed table or plain columns
"""

import io
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from rich.box import Box
from rich.cells import cell_len
from rich.console import Console
from rich.table import Table
from rich.text import Text

from report import ReportEntry

DEFAULT_CORNER = "■"

DEFAULT_LOGO = (
    " \\    / /\\   |    |    |--- \\   /\n"
    "  \\  / /__\\  |    |    |---  \\ /\n"
    "   \\/ /----\\ |___ |___ |---   |\n"
)


class Style(Enum):
    MINIMAL = "minimal"
    BORDERED = "bordered"
    PLAIN = "plain"


@dataclass(frozen=True)
class OutputOptions:
    style: Style = Style.BORDERED
    bold: bool = True
    uppercase_labels: bool = True
    show_borders: bool = True
    corner_glyph: str = DEFAULT_CORNER


def _frame(corner: str) -> Box:
    """Box with ``corner`` at the four corners, plain rules everywhere else."""
    return Box(
        f"{corner}──{corner}\n"
        "│  │\n"
        "│  │\n"
        "│  │\n"
        "│  │\n"
        "│  │\n"
        "│  │\n"
        f"{corner}──{corner}\n"
    )


def _corner(glyph: str) -> str:
    """First character of ``glyph``; anything not one cell wide would skew the frame."""
    corner = (glyph or " ")[0]
    return corner if cell_len(corner) == 1 else DEFAULT_CORNER


class Renderer:
    """Formats one run's entries; render() is pure, write() prints once."""

    def __init__(self, options: OutputOptions, color: bool = False, width: Optional[int] = None):
        self.options = options
        self.color = color
        self.width = width

    def _label(self, label: str) -> Text:
        label = label.upper() if self.options.uppercase_labels else label.lower()
        return Text(label, style="bold" if self.options.bold else "")

    def _row(self, entry: ReportEntry) -> List[Text]:
        if self.options.show_borders:
            return [self._label(entry.label), Text("="), Text(entry.value)]
        return [self._label(entry.label), Text(entry.value)]

    def _build_table(self, entries: Sequence[ReportEntry]) -> Table:
        if self.options.style == Style.BORDERED:
            corner = _corner(self.options.corner_glyph)
            table = Table(box=_frame(corner), show_header=False, show_edge=True, padding=(0, 1))
        else:
            table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)

        for _ in range(3 if self.options.show_borders else 2):
            table.add_column(no_wrap=True)
        for entry in entries:
            table.add_row(*self._row(entry))
        return table

    def _natural_width(self, entries: Sequence[ReportEntry], logo: Optional[str]) -> int:
        widest = max((cell_len(e.label) + cell_len(e.value) for e in entries), default=0)
        logo_width = max((cell_len(l) for l in (logo or "").splitlines()), default=0)
        return max(widest + 16, logo_width, 20)

    def render(self, entries: Sequence[ReportEntry], logo: Optional[str] = None) -> str:
        buf = io.StringIO()
        console = Console(
            file=buf,
            width=self.width or self._natural_width(entries, logo),
            force_terminal=self.color,
            color_system="standard" if self.color else None,
            highlight=False,
            emoji=False,
            legacy_windows=False,
        )

        if self.options.style == Style.MINIMAL:
            for entry in entries:
                console.print(Text(entry.value), soft_wrap=True)
            return buf.getvalue()

        if logo:
            console.print(Text(logo.rstrip("\n"), style="bold"), soft_wrap=True)
        if entries:
            console.print(self._build_table(entries))
        return buf.getvalue()

    def write(self, entries: Sequence[ReportEntry], logo: Optional[str] = None, file=None) -> None:
        out = file or sys.stdout
        out.write(self.render(entries, logo))
        out.flush()
