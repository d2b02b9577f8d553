"""Template engines.

Two syntaxes render the same logical context (``values``, ``env`` and the
helpers); they differ in how helpers reach the template:

- ``ejs``: ``<%= expr %>`` output, ``<% stmt %>`` statements, ``<%# %>``
  comments, rendered by Jinja2. Helpers are top-level names of the render
  namespace and are called like functions, ``<%= quote(values.x) %>``.
- ``handlebars``: Handlebars templates compiled by pybars3. Helpers live in a
  HelperRegistry handed to the template on every render and are called the
  Handlebars way, ``{{quote values.x}}`` or ``{{indent (toYaml values.x) 2}}``.

Neither engine escapes output. ``None`` renders as empty text and booleans as
``true``/``false`` in both.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any, Optional

from jinja2 import Environment, TemplateSyntaxError, Undefined
from jinja2 import TemplateError as JinjaTemplateError
from pybars import Compiler, PybarsError
from pybars._compiler import prepare

from .context import RenderContext
from .errors import TemplateError, UnsupportedEngineError

log = logging.getLogger(__name__)


class EngineVariant(str, Enum):
    EJS = "ejs"
    HANDLEBARS = "handlebars"

    @classmethod
    def parse(cls, value: Optional[str | EngineVariant]) -> EngineVariant:
        """Variant for a ``render`` flag value; unset means ``ejs``."""
        if value is None:
            return cls.EJS
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedEngineError(value) from None


class HelperRegistry:
    """Named helpers for the handlebars engine.

    One registry may serve many renders in a process. Each render replaces
    its whole content, so helpers bound to an earlier working directory never
    leak into a later render.
    """

    def __init__(self) -> None:
        self._helpers: dict[str, Callable[..., Any]] = {}

    def register(self, name: str, helper: Callable[..., Any]) -> None:
        self._helpers[name] = helper

    def unregister(self, name: str) -> None:
        self._helpers.pop(name, None)

    def replace(self, helpers: Mapping[str, Callable[..., Any]]) -> None:
        """Drop every registered helper and register ``helpers``."""
        self._helpers = dict(helpers)

    def as_dict(self) -> dict[str, Callable[..., Any]]:
        return dict(self._helpers)

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._helpers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._helpers)

    def __len__(self) -> int:
        return len(self._helpers)


class Engine(ABC):
    """Renders template text against a RenderContext."""

    variant: EngineVariant

    @abstractmethod
    def render(self, template_text: str, context: RenderContext) -> str:
        pass


def _scalar_as_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class EjsEngine(Engine):
    """Helpers are passed as properties of the render namespace."""

    variant = EngineVariant.EJS

    # "<%-" is raw output; nothing is escaped, so it is the same as "<%="
    RAW_OUTPUT = re.compile(r"<%-")
    # "-%>" swallows only the newline that follows it
    NEWLINE_SLURP = re.compile(r"-%>\r?\n?")

    def environment(self) -> Environment:
        return Environment(
            block_start_string="<%",
            block_end_string="%>",
            variable_start_string="<%=",
            variable_end_string="%>",
            comment_start_string="<%#",
            comment_end_string="%>",
            autoescape=False,
            keep_trailing_newline=True,
            undefined=Undefined,
            finalize=_scalar_as_text,
        )

    def preprocess(self, template_text: str) -> str:
        template_text = self.RAW_OUTPUT.sub("<%=", template_text)
        return self.NEWLINE_SLURP.sub("%>", template_text)

    def render(self, template_text: str, context: RenderContext) -> str:
        namespace: dict[str, Any] = dict(context.helpers)
        namespace["values"] = context.values
        namespace["env"] = context.env

        log.debug("Rendering ejs template with %d helpers", len(context.helpers))
        try:
            template = self.environment().from_string(self.preprocess(template_text))
            return template.render(namespace)
        except TemplateSyntaxError as e:
            raise TemplateError(e.message or str(e), e.lineno) from e
        except JinjaTemplateError as e:
            raise TemplateError(e.message or str(e)) from e


def _prepare_raw(value: Any, should_escape: bool) -> Any:
    return prepare(_scalar_as_text(value), False)


def _without_this(helper: Callable[..., Any]) -> Callable[..., Any]:
    """Adapt a helper to pybars, which passes the current scope first."""

    def call(this: Any, *args: Any, **kwargs: Any) -> Any:
        return helper(*args, **kwargs)

    return call


class HandlebarsEngine(Engine):
    """Helpers are registered in the registry before each render."""

    variant = EngineVariant.HANDLEBARS

    def __init__(self, registry: Optional[HelperRegistry] = None) -> None:
        self.registry = registry if registry is not None else HelperRegistry()
        self.compiler = Compiler()

    def compile(self, template_text: str) -> Callable[..., str]:
        try:
            template = self.compiler.compile(template_text)
        except PybarsError as e:
            raise TemplateError(str(e)) from e
        # Compiled templates look up "prepare" in their own module globals
        template.__globals__["prepare"] = _prepare_raw
        return template

    def render(self, template_text: str, context: RenderContext) -> str:
        self.registry.replace(context.helpers)
        helpers = {
            name: _without_this(helper)
            for name, helper in self.registry.as_dict().items()
        }

        log.debug("Rendering handlebars template with %d helpers", len(helpers))
        template = self.compile(template_text)
        try:
            return template(
                {"values": context.values, "env": context.env}, helpers=helpers
            )
        except PybarsError as e:
            raise TemplateError(str(e)) from e


def create_engine(
    variant: str | EngineVariant, registry: Optional[HelperRegistry] = None
) -> Engine:
    """Engine for ``variant``; ``registry`` is only used by handlebars."""
    variant = EngineVariant.parse(variant)
    if variant is EngineVariant.HANDLEBARS:
        return HandlebarsEngine(registry)
    return EjsEngine()


def render(
    template_text: str,
    context: RenderContext,
    variant: str | EngineVariant,
    registry: Optional[HelperRegistry] = None,
) -> str:
    """Render ``template_text`` with the engine selected by ``variant``.

    Raises:
        UnsupportedEngineError: If ``variant`` is not ``ejs`` or ``handlebars``.
        TemplateError: If the template does not compile or fails to render.
    """
    return create_engine(variant, registry).render(template_text, context)
