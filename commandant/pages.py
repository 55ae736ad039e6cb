"""
Commandant help pages (structured help content and its rich rendering).

Scope
- HelpPage: what a help request shows for a command or a commander: a name,
  a description, a usage line and titled sections of rows.
- HelpSection / HelpRow: plain records, so callers and tests can inspect
  help content without rendering it.
- HelpPage.render(): lay the page out with rich (Text/Table, optional Panel).

Styling
- The palette below is used when colorful=True; every entry can be overridden
  with the 'styles' argument of render().
"""
from collections import defaultdict
from types import MappingProxyType
from typing import NamedTuple

from rich.box import ROUNDED
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .utils import Unset, coalesce

STYLES = MappingProxyType({
    # === Head sections ===
    "usage-label": "bold #00E6FF",  # CYAN → signature info color
    "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
    "description-section": "italic #A3A3A3",  # Neutral gray

    # === Sections ===
    "section-title": "bold #FFFFFF",  # Pure white headers
    "section-table": "#4B5563",  # Slate border
    "row-label": "bold #00E6FF",  # CYAN for names
    "row-description": "#9CA3AF",  # Muted gray
    "row-note": "bold #FFD600",  # AMBER for necessity/defaults

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",  # Magenta branding
})


class HelpRow(NamedTuple):
    label: str
    descr: str | None = None
    note: str | None = None


class HelpSection(NamedTuple):
    title: str
    rows: tuple[HelpRow, ...]


class HelpPage:
    """
    Help content for one command or commander.

    Parameters
    - name: str
      Name of the command/commander the page describes.
    - descr: str | None
      Description paragraph.
    - usage: str | None
      Usage line without the program name (e.g. "[OPTIONS] FILE [ARGS ...]").
    - sections: Iterable[HelpSection]
      Titled groups of rows ("commands", "options", "operands").
    """

    def __init__(self, name, descr=None, /, usage=None, sections=()):
        self._name = name
        self._descr = descr
        self._usage = usage
        self._sections = tuple(section for section in sections if section.rows)

    @property
    def name(self):
        return self._name

    @property
    def descr(self):
        return self._descr

    @property
    def usage(self):
        return self._usage

    @property
    def sections(self):
        return self._sections

    def section(self, title, /):
        """Return the section with the given title (KeyError when absent)."""
        for section in self._sections:
            if section.title == title:
                return section
        raise KeyError(title)

    def __str__(self):
        """Plain-text form (no styling), one row per line."""
        lines = [f"usage: {self._name}" + (f" {self._usage}" if self._usage else "")]
        if self._descr:
            lines.append(str(self._descr))
        for section in self._sections:
            lines.append(f"{section.title}:")
            for row in section.rows:
                lines.append("  " + "  ".join(str(part) for part in row if part))
        return "\n".join(lines)

    def __repr__(self):
        return f"help-page(name={self._name!r}, sections={[section.title for section in self._sections]!r})"

    def __rich__(self):
        return self.render()

    def render(self, *, prog=Unset, fancy=False, colorful=True, styles=Unset):
        """
        Build the rich renderable of this page.

        Parameters
        - prog: program name shown in the usage line (defaults to the page name).
        - fancy: wrap the page in a titled panel.
        - colorful: apply the palette; plain text otherwise.
        - styles: mapping overriding palette entries.
        """
        palette = defaultdict(str, STYLES | dict(coalesce(styles, {})))

        def styler(style):
            return palette[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = coalesce(prog, self._name)
        if prog != self._name:
            prog = f"{prog} {self._name}"

        usage = Text()
        usage.append("usage", styler("usage-label")).append(":")
        usage.append(" ")
        usage.append(text(prog, styler("program-name")))
        if self._usage:
            usage.append(" ")
            usage.append(text(self._usage, styler("usage-section")))

        renders = [usage]

        if self._descr:
            renders.append(text(self._descr, styler("description-section")))

        for section in self._sections:
            table = Table(
                title=text(section.title, styler("section-title")),
                title_justify="left",
                box=ROUNDED,
                show_header=False,
                style=styler("section-table"),
            )
            table.add_column(no_wrap=True)
            table.add_column(ratio=1)
            table.add_column(no_wrap=True)
            for row in section.rows:
                table.add_row(
                    text(row.label, styler("row-label")),
                    text(row.descr, styler("row-description")),
                    text(row.note, styler("row-note")),
                )
            renders.append(table)

        renderable = Group(*renders)

        if fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self._name} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )

        return renderable


__all__ = (
    "HelpRow",
    "HelpSection",
    "HelpPage",
)
