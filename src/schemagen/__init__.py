"""
schemagen
=========

Generate SQLAlchemy schema modules and Alembic migrations from compact
``name:type[:modifier]`` attribute specifications.
"""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Return the installed package version or '0.0.0' when unavailable."""
    try:
        return version("schemagen")
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
