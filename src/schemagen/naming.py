"""Naming conventions shared by the schema builder and the renderers."""

from __future__ import annotations

import re

MODULE_NAME_RE = re.compile(r"^[A-Z][A-Za-z0-9_]*(\.[A-Z][A-Za-z0-9_]*)*$")
TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_WHITESPACE = re.compile(r"\s+")


def is_module_name(value: str) -> bool:
    """Return True when every dotted segment starts with an uppercase letter."""
    return bool(MODULE_NAME_RE.match(value))


def is_table_name(value: str) -> bool:
    """Return True for a bare SQL identifier such as ``blog_posts``."""
    return bool(TABLE_NAME_RE.match(value))


def underscore(value: str) -> str:
    """Convert a module name or phrase to its snake_case form.

    Dots become path separators, so ``Blog.Post`` maps to ``blog/post`` and
    ``BlogPosts`` to ``blog_posts``. Strings already in snake_case are
    returned unchanged.
    """
    text = value.replace(".", "/").replace("-", "_")
    text = _WHITESPACE.sub("_", text)
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    return text.lower()


def camelize(value: str) -> str:
    """``blog_post`` -> ``BlogPost``."""
    return "".join(part[:1].upper() + part[1:] for part in value.split("_") if part)


def humanize(value: str) -> str:
    """``blog_posts`` -> ``Blog posts``; a trailing ``_id`` is dropped."""
    if value.endswith("_id"):
        value = value[: -len("_id")]
    text = value.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def pluralize(word: str) -> str:
    """Best-effort English plural, used only to suggest a plural argument."""
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def module_segments(module_name: str) -> list[str]:
    return module_name.split(".")


def module_alias(module_name: str) -> str:
    """Last segment of the module name, used as the class name."""
    return module_segments(module_name)[-1]


def module_singular(module_name: str) -> str:
    return underscore(module_alias(module_name))


def module_path(module_name: str, app_package: str) -> str:
    """Importable dotted path, e.g. ``app.blog.post``."""
    return ".".join([app_package, *(underscore(seg) for seg in module_segments(module_name))])


def module_file_path(module_name: str, app_package: str) -> str:
    """Repository-relative source file for the module."""
    return f"{app_package.replace('.', '/')}/{underscore(module_name)}.py"


def default_plural(module_name: str) -> str:
    """Plural suggested for a module, ``Blog.Post`` -> ``blog_posts``."""
    return pluralize(underscore(module_name).replace("/", "_"))


def sibling_module(module_name: str, alias: str) -> str:
    """Module name next to ``module_name`` with its last segment replaced."""
    return ".".join([*module_segments(module_name)[:-1], alias])
