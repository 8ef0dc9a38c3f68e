"""Attribute token parsing and type resolution.

An attribute token has the shape ``name[:type[:argument]][:unique]``::

    title                      -> plain string
    views:integer              -> plain integer
    tags:array:string          -> array of strings
    user_id:references:users   -> reference to the ``users`` table
    unique_int:integer:unique  -> plain integer with a unique index

``unique`` may appear anywhere after the name. The type keyword, when
present, is the first non-``unique`` part.
"""

from __future__ import annotations

import keyword
import logging
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from . import naming
from .errors import AttributeSpecError

logger = logging.getLogger(__name__)

SEPARATOR = ":"
UNIQUE = "unique"
ARRAY = "array"
REFERENCES = "references"

SCALAR_TYPES = frozenset(
    {
        "string",
        "text",
        "integer",
        "float",
        "decimal",
        "boolean",
        "map",
        "date",
        "time",
        "naive_datetime",
        "utc_datetime",
        "uuid",
        "binary",
    }
)
TYPE_ALIASES = {"datetime": "naive_datetime"}
DEFAULT_TYPE = "string"
# columns and attributes the generated model defines itself
RESERVED_NAMES = frozenset({"id", "inserted_at", "updated_at", "metadata", "registry"})

IdType = Literal["id", "binary_id"]


class AttributeToken(BaseModel):
    """Raw ``name:type:modifier`` token split into its parts."""

    model_config = ConfigDict(frozen=True)

    raw: str
    name: str
    raw_type: str | None = None
    modifiers: tuple[str, ...] = ()


class PlainKind(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    value_type: str


class ArrayKind(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    element_type: str


class ReferenceKind(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["reference"] = "reference"
    target_table: str


AttributeKind = Annotated[PlainKind | ArrayKind | ReferenceKind, Field(discriminator="kind")]


class ResolvedAttribute(BaseModel):
    """Attribute with a canonical type, ready for the renderers."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: AttributeKind
    value_type: str
    unique: bool = False

    @property
    def is_reference(self) -> bool:
        return isinstance(self.kind, ReferenceKind)

    @property
    def is_array(self) -> bool:
        return isinstance(self.kind, ArrayKind)


def parse_token(raw: str) -> AttributeToken:
    """Split a raw token on ``:`` into name, type and modifiers."""
    name, *parts = raw.split(SEPARATOR)
    name = name.strip()
    if not name:
        raise AttributeSpecError([f"attribute {raw!r} is missing a name"])
    return AttributeToken(
        raw=raw,
        name=name,
        raw_type=parts[0] if parts else None,
        modifiers=tuple(parts[1:]),
    )


def _canonical_scalar(type_name: str) -> str | None:
    type_name = TYPE_ALIASES.get(type_name, type_name)
    return type_name if type_name in SCALAR_TYPES else None


def association_name(name: str) -> str:
    """``user_id`` -> ``user``."""
    return name[: -len("_id")]


def _check_name(raw: str, name: str, role: str = "name") -> None:
    if not name.isidentifier():
        raise AttributeSpecError([f"attribute {raw!r} does not have a valid identifier {role}"])
    if keyword.iskeyword(name):
        raise AttributeSpecError([f"attribute {raw!r}: {role} {name!r} is a Python keyword"])
    if name in RESERVED_NAMES:
        raise AttributeSpecError(
            [f"attribute {raw!r}: {role} {name!r} is reserved by the generated schema"]
        )


def resolve_attribute(token: AttributeToken, binary_id: bool = False) -> ResolvedAttribute:
    """Resolve a parsed token to its canonical kind and value type.

    ``binary_id`` selects the column type of ``references`` attributes and
    has no effect on any other kind.
    """
    raw = token.raw
    _check_name(raw, token.name)

    parts = [token.raw_type, *token.modifiers] if token.raw_type is not None else []
    unique = UNIQUE in parts
    parts = [part for part in parts if part != UNIQUE]

    if not parts:
        kind: PlainKind | ArrayKind | ReferenceKind = PlainKind(value_type=DEFAULT_TYPE)
        value_type = DEFAULT_TYPE
        extra: list[str] = []
    else:
        type_name, *rest = parts
        if type_name == ARRAY:
            if not rest or not rest[0]:
                raise AttributeSpecError(
                    [f"attribute {raw!r}: array type must specify element type"]
                )
            element = _canonical_scalar(rest[0])
            if element is None:
                raise AttributeSpecError(
                    [f"attribute {raw!r}: unknown array element type {rest[0]!r}"]
                )
            kind = ArrayKind(element_type=element)
            value_type = ARRAY
            extra = rest[1:]
        elif type_name == REFERENCES:
            if not rest or not rest[0]:
                raise AttributeSpecError(
                    [
                        f"attribute {raw!r}: references type must specify the target table, "
                        f"e.g. {token.name}:references:posts"
                    ]
                )
            if not token.name.endswith("_id") or token.name == "_id":
                raise AttributeSpecError(
                    [f"attribute {raw!r}: reference names must end in _id"]
                )
            _check_name(raw, association_name(token.name), role="association name")
            if not naming.is_table_name(rest[0]):
                raise AttributeSpecError(
                    [f"attribute {raw!r}: target table {rest[0]!r} is not a valid table name"]
                )
            kind = ReferenceKind(target_table=rest[0])
            value_type = "binary_id" if binary_id else "id"
            extra = rest[1:]
        else:
            scalar = _canonical_scalar(type_name)
            if scalar is None:
                raise AttributeSpecError([f"attribute {raw!r}: unknown type {type_name!r}"])
            kind = PlainKind(value_type=scalar)
            value_type = scalar
            extra = rest

    if extra:
        raise AttributeSpecError(
            [f"attribute {raw!r}: unexpected modifier {SEPARATOR.join(extra)!r}"]
        )

    logger.debug("resolved %s -> %s (unique=%s)", raw, kind, unique)
    return ResolvedAttribute(name=token.name, kind=kind, value_type=value_type, unique=unique)


def parse_attributes(raw_tokens: list[str], binary_id: bool = False) -> list[ResolvedAttribute]:
    """Parse and resolve every token, reporting all failures together.

    An attribute may not share its name with another attribute or with the
    association generated for a reference.
    """
    errors: list[str] = []
    resolved: list[tuple[str, ResolvedAttribute]] = []
    seen: set[str] = set()
    for raw in raw_tokens:
        try:
            attr = resolve_attribute(parse_token(raw), binary_id=binary_id)
        except AttributeSpecError as exc:
            errors.extend(exc.errors)
            continue
        if attr.name in seen:
            errors.append(f"attribute {raw!r}: duplicate attribute name {attr.name!r}")
            continue
        seen.add(attr.name)
        resolved.append((raw, attr))

    associations = {association_name(attr.name) for _, attr in resolved if attr.is_reference}
    for raw, attr in resolved:
        if attr.name in associations:
            errors.append(
                f"attribute {raw!r}: name {attr.name!r} clashes with a reference association"
            )
    if errors:
        raise AttributeSpecError(errors)
    return [attr for _, attr in resolved]
