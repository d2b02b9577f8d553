"""File vs. directory disambiguation shared by template and helper discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .errors import ConfigError


def resolve_entries(path: str | Path, suffix: Optional[str] = None) -> list[Path]:
    """Expand a path to the files it refers to.

    A file is returned as-is. A directory yields its immediate regular files
    (non-recursive) in name order. When ``suffix`` is given only files ending
    with it are accepted, both for the direct file and inside the directory.

    Raises:
        ConfigError: If the path does not exist, or is neither a matching
            file nor a directory.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Path does not exist: {p}", path=p)

    if p.is_dir():
        return sorted(
            f
            for f in p.iterdir()
            if f.is_file() and (suffix is None or f.name.endswith(suffix))
        )
    if p.is_file() and (suffix is None or p.name.endswith(suffix)):
        return [p]

    if suffix is not None:
        raise ConfigError(f"Path is not a {suffix} file or directory: {p}", path=p)
    raise ConfigError(f"Path is neither a file nor a directory: {p}", path=p)


def resolve_working_dir(path: str | Path) -> Path:
    """Directory used to resolve relative file references for one render.

    A file path resolves to its containing directory; anything else is used
    as given (made absolute).
    """
    p = Path(path).resolve()
    if p.is_file():
        return p.parent
    return p
