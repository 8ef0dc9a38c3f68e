"""Error taxonomy raised by the generator core and reported by the CLI."""

from __future__ import annotations

from collections.abc import Iterable


class GeneratorError(ValueError):
    """Base class for every terminal generator failure."""


class UsageError(GeneratorError):
    """Positional arguments are missing or malformed."""

    def __init__(self, message: str, usage: str) -> None:
        super().__init__(message)
        self.usage = usage


class NamingError(GeneratorError):
    """The module name or plural does not follow naming conventions."""


class AttributeSpecError(GeneratorError):
    """One or more attribute tokens could not be parsed or resolved."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


class ProjectEnvironmentError(GeneratorError):
    """The generator was invoked outside a usable project."""


class ConfigError(GeneratorError):
    """The project configuration file is invalid."""
