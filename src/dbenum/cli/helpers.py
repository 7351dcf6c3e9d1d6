"""CLI helper functions for logging setup and error handling."""

import logging

from rich.console import Console
from rich.markup import escape

from dbenum.core.adapters import AdapterError, AdapterNotFoundError, AdapterRegistry
from dbenum.core.exceptions import (
    CyclicDependencyError,
    DbEnumError,
    MappingConfigurationError,
    SchemaMismatchError,
)
from dbenum.core.services import ConfigLoadError

err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records at ``level`` and above to stderr."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def handle_error(error: Exception) -> int:
    """Handle an exception and print appropriate error message.

    Args:
        error: The exception to handle.

    Returns:
        Exit code (1 for handled errors, 2 for unexpected errors).
    """
    if isinstance(error, (ConfigLoadError, MappingConfigurationError)):
        err_console.print(f"[red]Configuration error:[/red] {escape(str(error))}")
        return 1

    elif isinstance(error, SchemaMismatchError):
        err_console.print(f"[red]Schema mismatch:[/red] {escape(error.message)}")
        err_console.print("[dim]Check the table and column names in the mapping file.[/dim]")
        return 1

    elif isinstance(error, CyclicDependencyError):
        err_console.print(f"[red]Error:[/red] {escape(error.message)}")
        err_console.print(
            "[dim]Tables may not reference each other in a cycle, "
            "nor reference their own type.[/dim]"
        )
        return 1

    elif isinstance(error, DbEnumError):
        err_console.print(f"[red]Error:[/red] {escape(error.message)}")
        return 1

    elif isinstance(error, AdapterNotFoundError):
        err_console.print(f"[red]Error:[/red] Unknown source type: {error.source_type!r}")
        available = AdapterRegistry.available_types()
        if available:
            err_console.print(f"[dim]Available types: {', '.join(available)}[/dim]")
        return 1

    elif isinstance(error, AdapterError):
        err_console.print(f"[red]Error:[/red] {escape(error.message)}")
        return 1

    elif isinstance(error, FileNotFoundError):
        err_console.print(f"[red]Error:[/red] File not found: {error.filename}")
        return 1

    else:
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(error))}")
        err_console.print("[dim]This may be a bug. Please report it.[/dim]")
        return 2
