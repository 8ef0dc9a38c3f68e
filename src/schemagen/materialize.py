"""Write rendered artifacts to their destinations under a project root."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedFile:
    """Rendered template text and its repository-relative destination."""

    template: str
    destination: str
    content: str


def copy_from(
    root: str | Path,
    files: Iterable[GeneratedFile],
    console: Console | None = None,
) -> list[Path]:
    """Create every file, refusing to overwrite anything that already exists.

    All destinations are checked before the first write. A failure while
    writing leaves earlier files in place.
    """
    root = Path(root)
    files = list(files)
    for item in files:
        target = root / item.destination
        if target.exists():
            msg = f"{item.destination} already exists, refusing to overwrite it"
            raise FileExistsError(msg)

    written: list[Path] = []
    for item in files:
        target = root / item.destination
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(item.content)
        logger.debug("rendered %s -> %s", item.template, target)
        if console is not None:
            console.print(f"[bold green]* creating[/] {item.destination}")
        written.append(target)
    return written
