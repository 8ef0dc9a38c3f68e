"""Render a schema model into SQLAlchemy and Alembic source text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from .attributes import ArrayKind, ReferenceKind, ResolvedAttribute
from .schema import SchemaModel

# canonical type -> (SQLAlchemy type expression, Python annotation)
COLUMN_TYPES: dict[str, tuple[str, str]] = {
    "string": ("sa.String()", "str"),
    "text": ("sa.Text()", "str"),
    "integer": ("sa.Integer()", "int"),
    "float": ("sa.Float()", "float"),
    "decimal": ("sa.Numeric()", "Decimal"),
    "boolean": ("sa.Boolean()", "bool"),
    "map": ("sa.JSON()", "dict[str, Any]"),
    "date": ("sa.Date()", "date"),
    "time": ("sa.Time()", "time"),
    "naive_datetime": ("sa.DateTime()", "datetime"),
    "utc_datetime": ("sa.DateTime(timezone=True)", "datetime"),
    "uuid": ("sa.Uuid()", "uuid.UUID"),
    "binary": ("sa.LargeBinary()", "bytes"),
    "id": ("sa.Integer()", "int"),
    "binary_id": ("sa.Uuid()", "uuid.UUID"),
}

_ANNOTATION_IMPORTS: dict[str, tuple[str, str | None]] = {
    "Decimal": ("decimal", "Decimal"),
    "Any": ("typing", "Any"),
    "date": ("datetime", "date"),
    "time": ("datetime", "time"),
    "datetime": ("datetime", "datetime"),
    "uuid.UUID": ("uuid", None),
}
_ANNOTATION_TOKEN = re.compile(r"[A-Za-z_][\w.]*")


@dataclass
class Column:
    """Template-facing view of one attribute."""

    name: str
    sa_type: str
    annotation: str
    boolean: bool = False
    foreign_key: str | None = None


def _column(attr: ResolvedAttribute) -> Column:
    if isinstance(attr.kind, ArrayKind):
        element_type, element_annotation = COLUMN_TYPES[attr.kind.element_type]
        return Column(attr.name, f"sa.ARRAY({element_type})", f"list[{element_annotation}]")
    sa_type, annotation = COLUMN_TYPES[attr.value_type]
    if isinstance(attr.kind, ReferenceKind):
        return Column(attr.name, sa_type, annotation, foreign_key=f"{attr.kind.target_table}.id")
    return Column(attr.name, sa_type, annotation, boolean=attr.value_type == "boolean")


def _python_imports(
    columns: list[Column], binary_id: bool, type_checking: bool = False
) -> list[str]:
    # timestamps always need datetime
    wanted: dict[str, set[str]] = {"datetime": {"datetime"}}
    if type_checking:
        wanted["typing"] = {"TYPE_CHECKING"}
    if binary_id:
        wanted.setdefault("uuid", set())
    for column in columns:
        for token in _ANNOTATION_TOKEN.findall(column.annotation):
            if token in _ANNOTATION_IMPORTS:
                module, name = _ANNOTATION_IMPORTS[token]
                names = wanted.setdefault(module, set())
                if name:
                    names.add(name)
    plain = [f"import {module}" for module, names in sorted(wanted.items()) if not names]
    from_imports = [
        f"from {module} import {', '.join(sorted(names))}"
        for module, names in sorted(wanted.items())
        if names
    ]
    return plain + from_imports


def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("schemagen", "templates"),
        autoescape=select_autoescape(enabled_extensions=()),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render_schema(model: SchemaModel) -> str:
    """SQLAlchemy declarative model module for ``model``."""
    columns = [_column(attr) for attr in model.attributes]
    associations = [
        {
            "name": assoc.name,
            "module": assoc.target_class.rsplit(".", 1)[0],
            "alias": assoc.target_class.rsplit(".", 1)[1],
        }
        for assoc in model.associations
    ]
    template = _environment().get_template("schema.py.j2")
    return template.render(
        schema=model,
        columns=columns,
        associations=associations,
        imports=_python_imports(columns, model.binary_id, type_checking=bool(associations)),
        id_type=COLUMN_TYPES["binary_id" if model.binary_id else "id"],
    )


def render_migration(model: SchemaModel, down_revision: str | None = None) -> str:
    """Alembic revision creating (and dropping) the table for ``model``."""
    columns = [_column(attr) for attr in model.attributes]
    template = _environment().get_template("migration.py.j2")
    return template.render(
        schema=model,
        columns=columns,
        indexes=list(model.indexes),
        revision=model.timestamp,
        down_revision=down_revision,
        created=_created(model.timestamp),
        id_type=COLUMN_TYPES["binary_id" if model.binary_id else "id"][0],
    )


def _created(stamp: str) -> str:
    return f"{stamp[0:4]}-{stamp[4:6]}-{stamp[6:8]} {stamp[8:10]}:{stamp[10:12]}:{stamp[12:14]}"
