from datetime import UTC, datetime
from pathlib import Path

import pytest

from schemagen.config import GenerateOptions, GeneratorConfig, ResolvedOptions, resolve_options

FIXED_NOW = datetime(2026, 10, 18, 9, 5, 3, tzinfo=UTC)


@pytest.fixture()
def options() -> ResolvedOptions:
    return resolve_options(GeneratorConfig(), GenerateOptions())


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory that is also the working directory."""
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
    monkeypatch.chdir(tmp_path)
    return tmp_path
