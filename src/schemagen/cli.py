"""Command-line utilities for the schemagen package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
import ujson as json
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import get_version
from .api import build, copy_new_files, shell_instructions
from .config import GenerateOptions, GeneratorConfig
from .errors import GeneratorError, UsageError
from .schema import SchemaModel

app = typer.Typer(help="Generate SQLAlchemy schemas and Alembic migrations")
console = Console()

ArgsArgument = Annotated[
    list[str] | None,
    typer.Argument(
        help="Module name, snake_case plural and name:type[:modifier] attributes.",
        show_default=False,
    ),
]
MigrationOption = Annotated[
    bool | None,
    typer.Option("--migration/--no-migration", help="Generate the migration file."),
]
BinaryIdOption = Annotated[
    bool | None,
    typer.Option("--binary-id/--no-binary-id", help="Use UUID primary and foreign keys."),
]
TableOption = Annotated[str | None, typer.Option(help="Table name, defaults to the plural.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")]


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[bold red]error:[/] {escape(str(exc))}", soft_wrap=True)
    if isinstance(exc, UsageError):
        console.print(escape(exc.usage), soft_wrap=True)
    return typer.Exit(code=1)


def _build(
    args: list[str] | None,
    migration: bool | None,
    binary_id: bool | None,
    table: str | None,
) -> SchemaModel:
    options = GenerateOptions(table=table, binary_id=binary_id, migration=migration)
    try:
        return build(args or [], options=options, root=Path.cwd())
    except GeneratorError as exc:
        raise _fail(exc) from exc


@app.command()
def version() -> None:
    """Print the installed package version."""
    typer.echo(get_version())


@app.command()
def schema(
    args: ArgsArgument = None,
    migration: MigrationOption = None,
    binary_id: BinaryIdOption = None,
    table: TableOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate a schema module and its migration.

    Example: schemagen schema Blog.Post blog_posts title views:integer
    """
    _configure_logging(verbose)
    model = _build(args, migration, binary_id, table)
    try:
        copy_new_files(model, root=Path.cwd(), console=console)
    except OSError as exc:
        raise _fail(exc) from exc
    instructions = shell_instructions(model)
    if instructions:
        console.print(instructions)


@app.command()
def inspect(
    args: ArgsArgument = None,
    migration: MigrationOption = None,
    binary_id: BinaryIdOption = None,
    table: TableOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the model as JSON.")] = False,
    verbose: VerboseOption = False,
) -> None:
    """Show the schema model for the arguments without writing files."""
    _configure_logging(verbose)
    model = _build(args, migration, binary_id, table)
    if as_json:
        payload = model.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2, escape_forward_slashes=False))
        return
    table_view = Table(title=f"{model.module_name} ({model.table_name})")
    table_view.add_column("Attribute")
    table_view.add_column("Kind")
    table_view.add_column("Type")
    table_view.add_column("Unique")
    for attr in model.attributes:
        detail = attr.value_type
        if attr.is_array:
            detail = f"array of {attr.kind.element_type}"  # type: ignore[union-attr]
        elif attr.is_reference:
            detail = f"{attr.value_type} -> {attr.kind.target_table}"  # type: ignore[union-attr]
        table_view.add_row(attr.name, attr.kind.kind, detail, "yes" if attr.unique else "")
    console.print(table_view)
    for key, value in model.summary().items():
        console.print(f"[bold]{key}:[/] {escape(str(value))}", soft_wrap=True)


@app.command("config-schema")
def config_schema(
    out: Annotated[Path, typer.Argument(help="Output path (usually .json).")],
    pretty: Annotated[bool, typer.Option(help="Write pretty-printed JSON.")] = True,
) -> None:
    """Export the JSON Schema of the project configuration file."""
    schema_doc = GeneratorConfig.model_json_schema()
    out.write_text(json.dumps(schema_doc, indent=2 if pretty else 0))
    console.print(f"[bold green]Config schema written:[/] {out}", soft_wrap=True)


def main() -> None:
    """Entry point for `python -m schemagen.cli`."""
    app()


if __name__ == "__main__":
    main()
