"""Per-render data context."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .config import Flags, read_yaml
from .helpers import builtin_helpers
from .paths import resolve_working_dir

log = logging.getLogger(__name__)


@dataclass
class RenderContext:
    """Everything one template render can see.

    Built fresh for every render call and discarded afterwards.
    """

    values: dict[str, Any] = field(default_factory=dict)
    env: dict[str, Any] = field(default_factory=dict)
    helpers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    working_dir: Path = field(default_factory=Path.cwd)


def build_env(env_file: Optional[str] = None) -> dict[str, Any]:
    """Process environment, overlaid by ``env_file`` when given."""
    env: dict[str, Any] = dict(os.environ)
    if env_file:
        overrides = read_yaml(env_file)
        log.debug("Merging %d variables from %s", len(overrides), env_file)
        env.update(overrides)
    return env


def build_context(
    values: Optional[Mapping[str, Any]],
    flags: Flags,
    working_dir: str | Path,
) -> RenderContext:
    """Assemble the context for a single render.

    Args:
        values: Caller-supplied data exposed as ``values``.
        flags: Only ``flags.env`` is read here.
        working_dir: Template path or directory; a file resolves to its parent.

    Raises:
        ConfigError: If the env file is missing or is not a YAML mapping.
    """
    wd = resolve_working_dir(working_dir)
    log.debug("Working directory: %s", wd)
    return RenderContext(
        values=dict(values or {}),
        env=build_env(flags.env),
        helpers=builtin_helpers(wd),
        working_dir=wd,
    )
