"""User interface helpers for BUILDSTATUS."""

from buildstatus.ui.indicator import (
    STATE_STYLES,
    BuildState,
    describe_status,
    render_indicator,
    render_table,
)

__all__ = [
    "BuildState",
    "STATE_STYLES",
    "describe_status",
    "render_indicator",
    "render_table",
]
