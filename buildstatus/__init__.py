"""BUILDSTATUS - CircleCI build status indicator for editors and terminals.

This package polls CircleCI for the build status of the projects a host
application has files open in, and renders each status as a small
glyph + colour indicator.
"""

__version__ = "1.0.0"
SCRIPT_NAME = "BUILDSTATUS"
CI_SERVICE = "circleci"

__all__ = [
    "__version__",
    "SCRIPT_NAME",
    "CI_SERVICE",
]
