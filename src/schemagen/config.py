"""Project-wide generator defaults and per-invocation overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ujson as json
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("schemagen.yaml", "schemagen.yml", "schemagen.json")
PACKAGE_RE = r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$"


class GeneratorConfig(BaseModel):
    """Defaults read from ``schemagen.yaml`` in the project root."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    migration: bool = True
    binary_id: bool = False
    sample_binary_id: str = "11111111-1111-1111-1111-111111111111"
    app_package: str = Field(default="app", pattern=PACKAGE_RE)
    base_class: str | None = Field(default=None, pattern=r"^[\w.]+:\w+$")
    migrations_dir: str = "migrations/versions"

    @model_validator(mode="before")
    @classmethod
    def default_base_class(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("base_class"):
            data = dict(data)
            data["base_class"] = f"{data.get('app_package') or 'app'}.db:Base"
        return data


class GenerateOptions(BaseModel):
    """Flags given on the command line; ``None`` means "use the default"."""

    model_config = ConfigDict(frozen=True)

    table: str | None = None
    binary_id: bool | None = None
    migration: bool | None = None


class ResolvedOptions(BaseModel):
    """Flags merged over configuration, consumed by the schema builder."""

    model_config = ConfigDict(frozen=True)

    table: str | None = None
    binary_id: bool
    migration: bool
    sample_binary_id: str
    app_package: str
    base_class: str
    migrations_dir: str


def resolve_options(config: GeneratorConfig, options: GenerateOptions) -> ResolvedOptions:
    """Explicit flags win; anything left unset falls back to ``config``."""
    return ResolvedOptions(
        table=options.table,
        binary_id=config.binary_id if options.binary_id is None else options.binary_id,
        migration=config.migration if options.migration is None else options.migration,
        sample_binary_id=config.sample_binary_id,
        app_package=config.app_package,
        base_class=config.base_class or f"{config.app_package}.db:Base",
        migrations_dir=config.migrations_dir,
    )


def find_config(root: str | Path) -> Path | None:
    root = Path(root)
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.exists():
            return candidate
    return None


def load_config(path: str | Path) -> GeneratorConfig:
    """Load generator defaults from YAML or JSON."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"Could not read config {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config {path}: expected a mapping at the top level")
    try:
        return GeneratorConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}:\n{exc}") from exc


def load_project_config(root: str | Path) -> GeneratorConfig:
    """Return the project's configuration, or the defaults when none exists."""
    path = find_config(root)
    if path is None:
        logger.debug("no generator config under %s, using defaults", root)
        return GeneratorConfig()
    logger.debug("loading generator config from %s", path)
    return load_config(path)
