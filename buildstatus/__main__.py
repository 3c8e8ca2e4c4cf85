"""Entry point for running buildstatus as a module.

This allows running the application with:
    python -m buildstatus [OPTIONS] COMMAND [ARGS]
"""

from buildstatus.cli import app

if __name__ == "__main__":
    app()
