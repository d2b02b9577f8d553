"""Template processing: context, custom helpers, render."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from .config import Flags
from .context import build_context
from .engine import EngineVariant, HelperRegistry, render
from .plugins import load_custom_helpers


def process_template(
    template_text: str,
    values: Optional[Mapping[str, Any]],
    flags: Flags,
    working_dir: str | Path,
    registry: Optional[HelperRegistry] = None,
) -> str:
    """Render one template.

    Args:
        template_text: Template source.
        values: Data exposed to the template as ``values``.
        flags: ``render``, ``env`` and ``helpers`` are honoured.
        working_dir: Template file or directory; relative file helpers
            resolve against it (a file resolves to its parent).
        registry: Helper registry for the handlebars engine. Pass the same
            one across a batch; it is fully replaced on every call.

    Returns:
        The rendered text.
    """
    variant = EngineVariant.parse(flags.render)
    context = build_context(values, flags, working_dir)
    load_custom_helpers(context.working_dir, context.helpers, flags)
    return render(template_text, context, variant, registry)
