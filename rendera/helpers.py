"""Built-in template helpers.

The catalog is identical for both render variants. ``getFile`` and
``fileToBase64`` are built per render as closures over that render's working
directory; everything else is a plain function.
"""

from __future__ import annotations

import base64
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from jinja2 import Undefined

from . import aws, cfn_yaml
from .errors import NotFoundError


def indent(text: str, spaces: int) -> str:
    """Prefix every line of ``text`` with ``spaces`` spaces.

    Example:
        indent("foo\\nbar", 2) -> "  foo\\n  bar"
    """
    if spaces < 0:
        raise ValueError(f"indent expects a non-negative count, got {spaces}")
    if spaces == 0:
        return str(text)
    return textwrap.indent(str(text), " " * spaces, lambda line: True)


def to_yaml(obj: Any) -> str:
    """Serialize ``obj`` to YAML without surrounding whitespace."""
    return cfn_yaml.dump(obj).strip()


def quote(value: Any) -> str:
    """Wrap ``value`` in double quotes. Embedded quotes are not escaped."""
    return f'"{value}"'


def trunc(text: Any, length: int) -> Any:
    """First ``length`` characters of ``text``.

    A negative ``length`` gives ``""``; anything that is not a string is
    returned unchanged.
    """
    if not isinstance(text, str):
        return text
    return text[: max(length, 0)]


def to_base64(value: Any) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def get_file(working_dir: Path) -> Callable[[str], str]:
    """Build a reader for files relative to ``working_dir``."""

    def _get_file(name: str) -> str:
        path = Path(working_dir) / name
        if not path.is_file():
            raise NotFoundError(f"getFile: file not found: {path}")
        return path.read_text(encoding="utf-8")

    return _get_file


def file_to_base64(working_dir: Path) -> Callable[[str], str]:
    """Build a reader returning base64 of files relative to ``working_dir``."""
    read = get_file(working_dir)

    def _file_to_base64(name: str) -> str:
        return to_base64(read(name))

    return _file_to_base64


def lookup_cf_output(stack_name: str, key: str) -> str:
    return aws.lookup_output(stack_name, key)


def get_parameter(name: str, query: Optional[str] = None) -> str:
    return aws.get_parameter_value(name, query)


def value_or_default(value: Any, default: Any) -> Any:
    """``default`` if ``value`` is null or undefined, else ``value``.

    Falsy values such as ``""`` or ``0`` are returned unchanged.
    """
    if value is None or isinstance(value, Undefined):
        return default
    return value


def builtin_helpers(working_dir: Path) -> dict[str, Callable[..., Any]]:
    """Helper name -> callable, as seen from templates."""
    return {
        "indent": indent,
        "toYaml": to_yaml,
        "quote": quote,
        "trunc": trunc,
        "toBase64": to_base64,
        "getFile": get_file(working_dir),
        "fileToBase64": file_to_base64(working_dir),
        "lookupCfOutput": lookup_cf_output,
        "getParameter": get_parameter,
        "valueOrDefault": value_or_default,
    }
