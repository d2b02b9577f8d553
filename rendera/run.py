"""Synchronous external command execution."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence

from .errors import ExternalCommandError

log = logging.getLogger(__name__)


def run(command: str, args: Sequence[str] = ()) -> str:
    """Run a command and return its standard output.

    The command inherits the process environment. Blocks until it exits.

    Raises:
        ExternalCommandError: If the process cannot start or exits non-zero.
            The error message is the command's stderr.
    """
    argv = [command, *args]
    log.debug("Running %s", " ".join(argv))
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            env=os.environ.copy(),
        )
    except OSError as e:
        raise ExternalCommandError(command, str(e)) from e

    if result.returncode != 0:
        raise ExternalCommandError(command, result.stderr, result.returncode)
    return result.stdout
