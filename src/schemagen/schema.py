"""Schema model assembly from validated command-line input."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field

from . import naming
from .attributes import ReferenceKind, ResolvedAttribute, association_name, parse_attributes
from .config import ResolvedOptions
from .errors import NamingError, UsageError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

USAGE = """\
schemagen schema expects both the module name and the plural name
of the generated resource followed by any number of attributes:

    schemagen schema Blog.Post blog_posts title:string
"""


class Association(BaseModel):
    """Belongs-to association derived from a ``references`` attribute."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: str
    target_module: str
    target_class: str
    target_table: str


class Index(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[str, ...]
    unique: bool = False


class SchemaModel(BaseModel):
    """Everything the schema and migration renderers need, built once."""

    model_config = ConfigDict(frozen=True)

    module_name: str
    module: str
    alias: str
    plural: str
    table_name: str
    singular: str
    file_path: str
    human_singular: str
    human_plural: str
    attributes: tuple[ResolvedAttribute, ...] = ()
    associations: tuple[Association, ...] = ()
    uniques: tuple[str, ...] = ()
    indexes: tuple[Index, ...] = ()
    binary_id: bool = False
    migration: bool = True
    sample_id: str | int = -1
    base_class: str = "app.db:Base"
    migrations_dir: str = "migrations/versions"
    timestamp: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def migration_path(self) -> str:
        name = self.singular.replace("/", "_")
        return f"{self.migrations_dir}/{self.timestamp}_create_{name}.py"

    @property
    def base_module(self) -> str:
        return self.base_class.split(":", 1)[0]

    @property
    def base_name(self) -> str:
        return self.base_class.split(":", 1)[1]

    def semantic_dump(self) -> dict[str, Any]:
        """Model contents without the per-run timestamp."""
        return self.model_dump(mode="python", exclude={"timestamp", "migration_path"})

    def summary(self) -> dict[str, Any]:
        """Return a JSON-friendly summary for display."""
        return {
            "module": self.module_name,
            "table": self.table_name,
            "file": self.file_path,
            "migration": self.migration_path if self.migration else None,
            "attributes": len(self.attributes),
            "associations": len(self.associations),
            "unique": list(self.uniques),
            "binary_id": self.binary_id,
        }


def usage_error(schema_name: str | None = None) -> UsageError:
    """Build the usage error shown when positional arguments are wrong."""
    message = "missing the plural argument"
    if schema_name and naming.is_module_name(schema_name):
        suggestion = naming.default_plural(schema_name)
        message += f" (did you mean `schemagen schema {schema_name} {suggestion} ...`?)"
    return UsageError(message, USAGE)


def validate_args(args: Sequence[str]) -> tuple[str, str, list[str]]:
    """Split positionals into schema name, plural and attribute tokens."""
    if len(args) < 2:
        raise usage_error(args[0] if args else None)
    schema_name, plural, *attrs = args
    validate_names(schema_name, plural)
    return schema_name, plural, list(attrs)


def validate_names(schema_name: str, plural: str) -> None:
    if not naming.is_module_name(schema_name):
        raise NamingError(
            f"expected the schema argument, {schema_name!r}, to be a valid module name"
        )
    if ":" in plural:
        raise usage_error(schema_name)
    if plural != naming.underscore(plural):
        raise NamingError(
            f"expected the plural argument, {plural!r}, to be all lowercase "
            "using snake_case convention"
        )
    if not naming.is_table_name(plural):
        raise NamingError(
            f"expected the plural argument, {plural!r}, to be a valid table name "
            "made of letters, digits and underscores"
        )


def timestamp(now: datetime | None = None) -> str:
    """Sortable UTC token, ``YYYYMMDDHHMMSS``."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def _associations(
    module_name: str, attrs: Sequence[ResolvedAttribute], app_package: str
) -> list[Association]:
    assocs = []
    for attr in attrs:
        if isinstance(attr.kind, ReferenceKind):
            name = association_name(attr.name)
            alias = naming.camelize(name)
            target = naming.sibling_module(module_name, alias)
            assocs.append(
                Association(
                    name=name,
                    key=attr.name,
                    target_module=target,
                    target_class=f"{naming.module_path(target, app_package)}.{alias}",
                    target_table=attr.kind.target_table,
                )
            )
    return assocs


def _indexes(table: str, assocs: Sequence[Association], uniques: Sequence[str]) -> list[Index]:
    """One index per column: references first, then uniques.

    A reference that is also unique gets a single unique index.
    """
    indexes = [
        Index(name=f"{table}_{a.key}_index", columns=(a.key,), unique=a.key in uniques)
        for a in assocs
    ]
    keys = {a.key for a in assocs}
    indexes += [
        Index(name=f"{table}_{u}_index", columns=(u,), unique=True)
        for u in uniques
        if u not in keys
    ]
    return indexes


def build_schema(
    schema_name: str,
    plural: str,
    attrs: Sequence[str],
    options: ResolvedOptions,
    now: datetime | None = None,
) -> SchemaModel:
    """Validate the input and assemble the immutable schema model."""
    validate_names(schema_name, plural)
    if options.table is not None and not naming.is_table_name(options.table):
        raise NamingError(f"expected the table name, {options.table!r}, to be a valid table name")
    resolved = parse_attributes(list(attrs), binary_id=options.binary_id)

    table = options.table or plural
    assocs = _associations(schema_name, resolved, options.app_package)
    uniques = [attr.name for attr in resolved if attr.unique]
    singular = naming.module_singular(schema_name)

    model = SchemaModel(
        module_name=schema_name,
        module=naming.module_path(schema_name, options.app_package),
        alias=naming.module_alias(schema_name),
        plural=plural,
        table_name=table,
        singular=singular,
        file_path=naming.module_file_path(schema_name, options.app_package),
        human_singular=naming.humanize(singular),
        human_plural=naming.humanize(plural),
        attributes=tuple(resolved),
        associations=tuple(assocs),
        uniques=tuple(uniques),
        indexes=tuple(_indexes(table, assocs, uniques)),
        binary_id=options.binary_id,
        migration=options.migration,
        sample_id=options.sample_binary_id if options.binary_id else -1,
        base_class=options.base_class,
        migrations_dir=options.migrations_dir,
        timestamp=timestamp(now),
    )
    logger.debug("built schema model %s", model.summary())
    return model
