"""Main CLI entry point for dbenum."""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dbenum import __version__
from dbenum.cli.helpers import configure_logging, handle_error
from dbenum.config import get_settings
from dbenum.core.adapters import AdapterRegistry
from dbenum.core.emitter import describe
from dbenum.core.services import GenerationService, mask_sensitive_values

# Console instances for stdout/stderr
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    table = "table"


class LogLevel(str, Enum):
    """Logging levels accepted by --log-level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# Main app
app = typer.Typer(
    name="dbenum",
    help="Compile database lookup tables into C# enumerations and accessor methods.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Command groups
adapters_app = typer.Typer(
    help="List and inspect available database adapters.",
    no_args_is_help=True,
)

app.add_typer(adapters_app, name="adapters")

MappingArgument = Annotated[
    Path | None,
    typer.Argument(help="Mapping file (default: DBENUM_MAPPING_FILE or dbenum.yaml)."),
]
DatabaseUrlOption = Annotated[
    str | None,
    typer.Option(
        "--database-url",
        "-d",
        help="SQLAlchemy URL overriding the mapping's source.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"dbenum {__version__}")
        raise typer.Exit()


def output_result(data: dict | list, format: OutputFormat) -> None:
    """Output data in the specified format."""
    if format == OutputFormat.json:
        console.print_json(json.dumps(data))
    else:
        if isinstance(data, list) and data:
            table = Table()
            # Use keys from first item as columns
            for key in data[0]:
                table.add_column(key)
            for row in data:
                table.add_row(*[escape(_cell(v)) for v in row.values()])
            console.print(table)
        elif isinstance(data, dict):
            table = Table(show_header=False)
            table.add_column("Key", style="bold")
            table.add_column("Value")
            for key, value in data.items():
                table.add_row(key, escape(_cell(value)))
            console.print(table)
        else:
            console.print(data)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def _mapping_path(mapping: Path | None) -> Path:
    return mapping if mapping is not None else get_settings().mapping_file


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        LogLevel | None,
        typer.Option(
            "--log-level",
            "-l",
            help="Logging level (default: DBENUM_LOG_LEVEL or WARNING).",
        ),
    ] = None,
) -> None:
    """dbenum - compile lookup tables into enumerations."""
    configure_logging(log_level.value if log_level else get_settings().log_level)


# =============================================================================
# Generation commands
# =============================================================================


@app.command("generate")
def generate(
    mapping: MappingArgument = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout."),
    ] = None,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Generate C# enumerations and accessors from mapped tables."""
    try:
        service = GenerationService()
        target = output or service.settings.resolved_output_file
        if target is None:
            source = service.generate(_mapping_path(mapping), database_url)
            typer.echo(source, nl=False)
        else:
            service.write(_mapping_path(mapping), target, database_url)
            err_console.print(f"Wrote [bold]{escape(str(target))}[/bold]")
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None


@app.command("inspect")
def inspect(
    mapping: MappingArgument = None,
    database_url: DatabaseUrlOption = None,
    format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """Compile mapped tables and show the resulting types and accessors."""
    try:
        service = GenerationService()
        format = format or OutputFormat(service.settings.default_format)
        summary = describe(service.compile(_mapping_path(mapping), database_url))
        if format == OutputFormat.json:
            output_result(summary, format)
            return

        for type_info in summary["types"]:
            console.print(f"[bold]{type_info['name']}[/bold]")
            output_result(type_info["members"], format)
            if type_info["functions"]:
                output_result(type_info["functions"], format)
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None


@app.command("check")
def check(
    mapping: MappingArgument = None,
    connect: Annotated[
        bool,
        typer.Option("--connect", help="Also test the database connection."),
    ] = False,
    database_url: DatabaseUrlOption = None,
    format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format.")
    ] = OutputFormat.json,
) -> None:
    """Validate a mapping file, without touching the database unless --connect is given."""
    try:
        service = GenerationService()
        if connect:
            with err_console.status("Testing database connection..."):
                result = service.test_connection(_mapping_path(mapping), database_url)
            output_result(result.model_dump(), format)
            if not result.connected:
                raise typer.Exit(1)
            return

        document = service.check(_mapping_path(mapping))
        tables = [
            {
                "table": table.table,
                "type": table.type_name,
                "key": table.primary_key,
                "label": table.label,
                "accessors": [column.function for column in table.columns],
            }
            for table in document.tables
        ]
        if format == OutputFormat.json:
            source = None
            if document.source is not None:
                source = {
                    "type": document.source.type,
                    **mask_sensitive_values(document.source.connection_info),
                }
            output_result({"source": source, "tables": tables}, format)
        else:
            output_result(tables, format)
    except typer.Exit:
        raise
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None


# =============================================================================
# Adapter commands
# =============================================================================


@adapters_app.command("list")
def adapters_list(
    format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format.")
    ] = OutputFormat.json,
) -> None:
    """List available adapter types."""
    adapters = AdapterRegistry.list_adapters()
    result = [
        {
            "type": info.source_type,
            "display_name": info.display_name,
            "config_fields": info.config_fields,
        }
        for info in adapters
    ]
    output_result(result, format)
