"""rendera exceptions

Every failure aborts the current render and reaches the caller as a single
RenderaError subclass.
"""

from __future__ import annotations

from pathlib import Path


class RenderaError(Exception):
    """Base exception for rendera operations."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class ConfigError(RenderaError):
    """Raised for a bad or missing config, data, env or helper file."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = str(path) if path is not None else None
        super().__init__(message)


class NotFoundError(RenderaError):
    """Raised when a helper-referenced file or external value does not exist."""

    pass


class UnsupportedEngineError(RenderaError):
    """Raised for a render variant rendera does not know."""

    def __init__(self, variant: object) -> None:
        self.variant = variant
        super().__init__(f"Unsupported rendering engine: {variant}")


class ExternalCommandError(RenderaError):
    """Raised when an external command cannot start or exits non-zero."""

    def __init__(
        self, command: str, stderr: str, returncode: int | None = None
    ) -> None:
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(stderr.strip() or f"Command failed: {command}")


class TemplateError(RenderaError):
    """Raised when the template itself fails to compile or render."""

    def __init__(self, message: str, lineno: int | None = None) -> None:
        self.lineno = lineno
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)
