"""Flags and the .renderarc config file.

Flags come from the command line; ``.renderarc`` (YAML) fills in whatever the
command line left unset. Recognized keys:

- data: path to a YAML file with substitution values
- render: template syntax, ``ejs`` (default) or ``handlebars``
- env: path to a YAML file overlaid on the process environment
- helpers: custom helper module path(s)
- config: path to the config file itself
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from . import cfn_yaml
from .errors import ConfigError

CONFIG_FILE = ".renderarc"
DEFAULT_RENDER = "ejs"
DATA_FILES = ("data.yaml", "data.yml")


class Flags(BaseModel):
    """Options recognized by rendera."""

    model_config = {"extra": "forbid"}

    data: Optional[str] = Field(default=None, description="YAML data file")
    render: Optional[str] = Field(
        default=None, description="Template syntax: ejs or handlebars"
    )
    env: Optional[str] = Field(
        default=None, description="YAML file overlaid on the environment"
    )
    helpers: Optional[str] = Field(
        default=None, description="Custom helper module path(s)"
    )
    config: Optional[str] = Field(default=None, description="Config file path")


def read_yaml(path: Optional[str | Path]) -> dict[str, Any]:
    """Load a YAML mapping from ``path``; no path means no data."""
    if not path:
        return {}

    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"YAML file not found: {p}", path=p)

    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as e:
        raise ConfigError(f"Unable to read YAML file {p}: {e}", path=p) from e

    try:
        data = cfn_yaml.load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Unable to parse YAML file {p}: {e}", path=p) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"YAML file must contain a mapping: {p}", path=p)
    return data


def apply_config(flags: Flags, cwd: Optional[Path] = None) -> Flags:
    """Merge the config file under ``flags`` and apply defaults.

    Flags that are already set win over the config file.
    """
    cwd = cwd or Path.cwd()
    config_path = (cwd / (flags.config or CONFIG_FILE)).resolve()

    merged = flags.model_dump()
    if config_path.exists():
        cfg = read_yaml(config_path)
        for key, value in cfg.items():
            if key not in Flags.model_fields:
                raise ConfigError(
                    f"Error reading {config_path} - unknown config key: {key}",
                    path=config_path,
                )
            if merged[key] is None:
                merged[key] = value
    elif flags.config:
        raise ConfigError(f"Config file not found: {config_path}", path=config_path)

    if not merged["render"]:
        merged["render"] = DEFAULT_RENDER

    try:
        return Flags(**merged)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid config in {config_path}: {e}", path=config_path
        ) from e


def find_data_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """Default data file (data.yaml or data.yml) in the working folder."""
    cwd = cwd or Path.cwd()
    for name in DATA_FILES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_values(flags: Flags, cwd: Optional[Path] = None) -> dict[str, Any]:
    """Template ``values``: the data file, overlaid by the env file.

    Env file keys are reachable both as ``values.KEY`` and ``env.KEY``.
    """
    values = read_yaml(flags.data or find_data_file(cwd))
    values.update(read_yaml(flags.env))
    return values
