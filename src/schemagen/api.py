"""Public API for downstream modules."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from rich.console import Console

from . import naming
from .config import GenerateOptions, GeneratorConfig, load_project_config, resolve_options
from .errors import ProjectEnvironmentError
from .materialize import GeneratedFile, copy_from
from .render import render_migration, render_schema
from .schema import SchemaModel, build_schema, validate_args

__all__ = [
    "SchemaModel",
    "build",
    "check_project_dir",
    "check_module_name_availability",
    "generated_files",
    "copy_new_files",
    "latest_revision",
    "shell_instructions",
]

logger = logging.getLogger(__name__)

PROJECT_MARKER = "pyproject.toml"
REVISION_RE = re.compile(r"^(\d{14})_\w+\.py$")

MIGRATE_INSTRUCTIONS = """
Remember to update your repository by running migrations:

    $ alembic upgrade head
"""


def check_project_dir(root: str | Path) -> None:
    """Fail unless ``root`` looks like a Python project directory."""
    root = Path(root)
    if not (root / PROJECT_MARKER).is_file():
        msg = (
            f"schemagen schema can only be run inside a project directory "
            f"(no {PROJECT_MARKER} in {root.resolve()})"
        )
        raise ProjectEnvironmentError(msg)


def check_module_name_availability(
    schema_name: str, config: GeneratorConfig, root: str | Path
) -> None:
    """Fail when the schema module would overwrite an existing file."""
    path = Path(root) / naming.module_file_path(schema_name, config.app_package)
    if path.exists():
        msg = f"Module name {schema_name} is already taken, please choose another name"
        raise ProjectEnvironmentError(msg)


def build(
    args: Sequence[str],
    options: GenerateOptions | None = None,
    root: str | Path = ".",
    now: datetime | None = None,
    config: GeneratorConfig | None = None,
) -> SchemaModel:
    """Run every check and build the schema model for ``args``.

    Environment problems are reported before any attribute is parsed.
    """
    root = Path(root)
    check_project_dir(root)
    schema_name, plural, attrs = validate_args(args)
    if config is None:
        config = load_project_config(root)
    check_module_name_availability(schema_name, config, root)
    resolved = resolve_options(config, options or GenerateOptions())
    return build_schema(schema_name, plural, attrs, resolved, now=now)


def latest_revision(migrations_dir: str | Path) -> str | None:
    """Return the newest timestamped revision id in ``migrations_dir``."""
    migrations_dir = Path(migrations_dir)
    if not migrations_dir.is_dir():
        return None
    revisions = []
    for path in migrations_dir.iterdir():
        match = REVISION_RE.match(path.name)
        if match:
            revisions.append(match.group(1))
    return max(revisions, default=None)


def generated_files(model: SchemaModel, root: str | Path = ".") -> list[GeneratedFile]:
    """Render the artifacts for ``model``; the migration only when requested."""
    files = [GeneratedFile("schema.py.j2", model.file_path, render_schema(model))]
    if model.migration:
        down_revision = latest_revision(Path(root) / model.migrations_dir)
        files.append(
            GeneratedFile(
                "migration.py.j2",
                model.migration_path,
                render_migration(model, down_revision=down_revision),
            )
        )
    return files


def copy_new_files(
    model: SchemaModel,
    root: str | Path = ".",
    console: Console | None = None,
) -> list[Path]:
    """Render and write the schema (and migration) files for ``model``."""
    written = copy_from(root, generated_files(model, root), console=console)
    logger.debug("wrote %d file(s) for %s", len(written), model.module_name)
    return written


def shell_instructions(model: SchemaModel) -> str | None:
    """Post-generation note, shown only when a migration was generated."""
    if model.migration:
        return MIGRATE_INSTRUCTIONS
    return None
