"""Rich-based console output utilities."""

from rich.console import Console
from rich.theme import Theme

from buildstatus import __version__

custom_theme = Theme(
    {
        "error": "bold red",
        "success": "bold green",
        "warning": "bold yellow",
        "info": "bold blue",
        "header": "bold magenta",
        "highlight": "bold white",
    }
)

# Global console instances
console = Console(theme=custom_theme)
console_err = Console(theme=custom_theme, stderr=True)


def print_error(message: str) -> None:
    """Print error message in red.

    Args:
        message: Error message to display
    """
    from buildstatus.utils.logging import log_message

    console_err.print(f"[error][[ERROR]][/error] [red]{message}[/red]")
    log_message(f"ERROR: {message}")


def print_warning(message: str) -> None:
    """Print warning message in yellow."""
    from buildstatus.utils.logging import log_message

    console.print(f"[warning][[WARNING]][/warning] [yellow]{message}[/yellow]")
    log_message(f"WARNING: {message}")


def print_info(message: str) -> None:
    """Print info message in cyan."""
    from buildstatus.utils.logging import log_message

    console.print(f"[info][[INFO]][/info] [cyan]{message}[/cyan]")
    log_message(f"INFO: {message}")


def print_header(title: str) -> None:
    """Print section header in magenta.

    Args:
        title: Header title to display
    """
    console.print()
    console.print(f"[header]=== {title} ===[/header]")
    console.print()


def show_version() -> None:
    """Display version information."""
    from buildstatus import CI_SERVICE

    console.print(f"[bold]BUILDSTATUS[/bold] v{__version__}")
    console.print(f"  CI service: {CI_SERVICE}")


__all__ = [
    "console",
    "console_err",
    "custom_theme",
    "print_error",
    "print_warning",
    "print_info",
    "print_header",
    "show_version",
]
