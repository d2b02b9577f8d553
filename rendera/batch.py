"""Render template files and directories to files or a stream."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Optional

from .config import Flags
from .engine import HelperRegistry
from .errors import ConfigError
from .paths import resolve_entries
from .process import process_template

log = logging.getLogger(__name__)


def validate(
    source: Optional[Path], target: Optional[Path], from_stdin: bool = False
) -> None:
    """Check that a source/target combination makes sense.

    Raises:
        ConfigError: If a source is missing, or a directory would have to be
            written into a single file.
    """
    if source is None and not from_stdin:
        raise ConfigError("Source is missing")

    target_is_dir = target is not None and target.is_dir()
    if from_stdin:
        if target_is_dir:
            raise ConfigError(
                "When reading from standard input, [output] must be a file",
                path=target,
            )
        return

    if source is not None and source.is_dir() and not target_is_dir:
        raise ConfigError(
            "[source] is a folder, so [output] must be a folder too", path=source
        )


def output_path(source_file: Path, target: Path) -> Path:
    """Where the rendering of ``source_file`` goes for ``target``."""
    if target.is_dir():
        return target / source_file.name
    return target


def render_file(
    source_file: Path,
    values: Optional[Mapping[str, Any]],
    flags: Flags,
    registry: Optional[HelperRegistry] = None,
) -> str:
    """Render a template file with its own directory as working directory."""
    text = source_file.read_text(encoding="utf-8")
    return process_template(text, values, flags, source_file.parent, registry)


def render_source(
    source: Path,
    target: Optional[Path],
    values: Optional[Mapping[str, Any]],
    flags: Flags,
    echo: Callable[[str], None] = print,
) -> list[Path]:
    """Render every template under ``source``.

    Files are processed one after another. Outputs go to ``target`` (a file,
    or ``target/<name>`` when it is a directory) or to ``echo`` when there is
    no target.

    Returns:
        Paths written, empty when output went to ``echo``.
    """
    registry = HelperRegistry()
    written: list[Path] = []

    for source_file in resolve_entries(source):
        rendered = render_file(source_file, values, flags, registry)
        if target is None:
            echo(rendered)
            continue

        dest = output_path(source_file, target)
        dest.write_text(rendered, encoding="utf-8")
        log.info("Rendered %s -> %s", source_file, dest)
        written.append(dest)

    return written
