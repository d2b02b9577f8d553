"""Custom helper modules.

A helper module is a Python file whose exported functions are *factories*:
each receives a HelperContext and returns the callable bound in templates
under the factory's name::

    # rendera_helpers/math.py
    def double(ctx):
        return lambda x: x * 2

Exported names are ``__all__`` when the module defines it, otherwise every
public function defined in the module itself.

Helper paths come from the ``--helpers`` flag, else the RENDERA_HELPERS
environment variable, else ``rendera_helpers`` in the current directory.
Several paths may be joined with os.pathsep. Each path is a ``.py`` file or a
directory whose immediate ``.py`` files are loaded.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import os
import sys
from collections.abc import Callable, Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from .config import Flags
from .errors import ConfigError, RenderaError
from .paths import resolve_entries
from .run import run

log = logging.getLogger(__name__)

ENV_HELPERS = "RENDERA_HELPERS"
DEFAULT_HELPERS_PATH = "rendera_helpers"
RESERVED_NAMES = frozenset({"values", "env"})


@dataclass(frozen=True)
class HelperContext:
    """Passed to every helper factory."""

    working_dir: Path
    run: Callable[[str, Sequence[str]], str] = field(default=run)


HelperFactory = Callable[[HelperContext], Callable[..., Any]]


def helper_paths(flags: Flags, environ: Optional[Mapping[str, str]] = None) -> list[str]:
    """Configured helper paths, de-duplicated in first-seen order.

    Returns an empty list when nothing is configured and the default path
    does not exist.
    """
    environ = os.environ if environ is None else environ
    paths = flags.helpers or environ.get(ENV_HELPERS) or DEFAULT_HELPERS_PATH

    if paths == DEFAULT_HELPERS_PATH and not Path(paths).exists():
        return []

    return list(dict.fromkeys(p for p in paths.split(os.pathsep) if p))


def load_module(path: Path) -> ModuleType:
    """Execute a helper module from its file."""
    digest = hashlib.sha256(str(path).encode()).hexdigest()[:16]
    module_name = f"rendera_helpers_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Helpers file cannot be loaded: {path}", path=path)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        del sys.modules[module_name]
        raise ConfigError(f"Unable to load helpers file {path}: {e}", path=path) from e
    return module


def exported_factories(module: ModuleType) -> dict[str, HelperFactory]:
    """Name -> factory for everything a helper module exports."""
    names = getattr(module, "__all__", None)
    if names is None:
        names = [
            name
            for name, obj in vars(module).items()
            if not name.startswith("_")
            and inspect.isfunction(obj)
            and obj.__module__ == module.__name__
        ]

    factories: dict[str, HelperFactory] = {}
    for name in names:
        obj = getattr(module, name, None)
        if not callable(obj):
            raise ConfigError(
                f"Helper '{name}' in {module.__file__} is not a function",
                path=module.__file__,
            )
        factories[name] = obj
    return factories


def load_custom_helpers(
    working_dir: Path,
    helpers: MutableMapping[str, Callable[..., Any]],
    flags: Flags,
    environ: Optional[Mapping[str, str]] = None,
) -> list[Path]:
    """Load custom helpers into ``helpers``, replacing same-named entries.

    Every factory is called once with a HelperContext for ``working_dir``.

    Returns:
        The helper module files that were loaded, in load order.

    Raises:
        ConfigError: For a missing path, a module that fails to import, a
            factory that fails or returns a non-callable, or a reserved name.
    """
    ctx = HelperContext(working_dir=Path(working_dir))
    loaded: list[Path] = []

    for entry in helper_paths(flags, environ):
        for path in resolve_entries(entry, ".py"):
            path = path.resolve()
            if path in loaded:
                continue

            module = load_module(path)
            for name, factory in exported_factories(module).items():
                if name in RESERVED_NAMES:
                    raise ConfigError(
                        f"Helper name '{name}' is reserved ({path})", path=path
                    )
                try:
                    helper = factory(ctx)
                except RenderaError:
                    raise
                except Exception as e:
                    raise ConfigError(
                        f"Helper factory '{name}' in {path} failed: {e}", path=path
                    ) from e
                if not callable(helper):
                    raise ConfigError(
                        f"Helper factory '{name}' in {path} did not return a callable",
                        path=path,
                    )

                if name in helpers:
                    log.debug("Helper %s from %s replaces an earlier one", name, path)
                helpers[name] = helper

            log.debug("Loaded helpers from %s", path)
            loaded.append(path)

    return loaded
