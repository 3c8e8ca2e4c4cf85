"""Status indicator rendering.

Maps normalized statuses onto a closed set of display states, each with a
glyph and a colour. Anything the table does not know (pending roots, raw
CircleCI strings such as "canceled") renders with the UNKNOWN style.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from rich.table import Table
from rich.text import Text


class BuildState(Enum):
    """Display states for a project's latest build."""

    PASSED = "passed"
    FAILED = "failed"
    RUNNING = "running"
    QUEUED = "queued"
    UNKNOWN = "unknown"

    @classmethod
    def from_status(cls, status: str | None) -> BuildState:
        """Map a normalized status to a display state, falling back to UNKNOWN."""
        if status is None:
            return cls.UNKNOWN
        try:
            return cls(status)
        except ValueError:
            return cls.UNKNOWN


# Display state → (glyph, Rich style)
STATE_STYLES: dict[BuildState, tuple[str, str]] = {
    BuildState.PASSED: ("✔", "bold green"),
    BuildState.FAILED: ("✘", "bold red"),
    BuildState.RUNNING: ("⟳", "bold yellow"),
    BuildState.QUEUED: ("…", "bold blue"),
    BuildState.UNKNOWN: ("?", "dim"),
}

INDICATOR_LABEL = "CI"


def render_indicator(status: str | None, label: str = INDICATOR_LABEL) -> Text:
    """Render a compact ``CI✔`` style indicator."""
    glyph, style = STATE_STYLES[BuildState.from_status(status)]
    text = Text(label)
    text.append(glyph, style=style)
    return text


def describe_status(status: str | None) -> str:
    """Human-readable status text; raw CircleCI strings are shown verbatim."""
    if status is None:
        return "pending"
    return status


def render_table(entries: Mapping[Path, str | None]) -> Table:
    """Render all monitored roots as a table, sorted by path."""
    table = Table(title="CircleCI build status", show_header=True, header_style="bold")
    table.add_column("", no_wrap=True)
    table.add_column("Project")
    table.add_column("Status")

    for root, status in sorted(entries.items(), key=lambda item: str(item[0])):
        glyph, style = STATE_STYLES[BuildState.from_status(status)]
        table.add_row(Text(glyph, style=style), str(root), Text(describe_status(status), style=style))

    if not entries:
        table.caption = "No monitored projects"
    return table


__all__ = [
    "BuildState",
    "STATE_STYLES",
    "INDICATOR_LABEL",
    "describe_status",
    "render_indicator",
    "render_table",
]
