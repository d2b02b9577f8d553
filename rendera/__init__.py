"""rendera - render configuration files from templates"""

from rendera._version import __version__
from rendera.config import Flags, apply_config, load_values, read_yaml
from rendera.context import RenderContext, build_context
from rendera.engine import EngineVariant, HelperRegistry, render
from rendera.errors import (
    ConfigError,
    ExternalCommandError,
    NotFoundError,
    RenderaError,
    TemplateError,
    UnsupportedEngineError,
)
from rendera.paths import resolve_entries
from rendera.plugins import HelperContext, load_custom_helpers
from rendera.process import process_template

__all__ = [
    "__version__",
    # processing
    "process_template",
    "build_context",
    "load_custom_helpers",
    "render",
    "resolve_entries",
    "apply_config",
    "load_values",
    "read_yaml",
    # types
    "Flags",
    "RenderContext",
    "EngineVariant",
    "HelperRegistry",
    "HelperContext",
    # errors
    "RenderaError",
    "ConfigError",
    "NotFoundError",
    "UnsupportedEngineError",
    "ExternalCommandError",
    "TemplateError",
]
