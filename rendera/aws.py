"""AWS lookups through the aws CLI.

CloudFormation stack outputs are cached per stack name for the life of the
process, so a batch of templates describes each stack once.
"""

from __future__ import annotations

import json
import logging
from functools import partial
from typing import Any, Optional

from .errors import NotFoundError, RenderaError
from .run import run

log = logging.getLogger(__name__)

run_aws_command = partial(run, "aws")

_OUTPUT_CACHE: dict[str, list[dict[str, Any]]] = {}


def fetch_outputs(stack_name: str) -> list[dict[str, Any]]:
    """Return the Outputs list of a CloudFormation stack."""
    if stack_name in _OUTPUT_CACHE:
        return _OUTPUT_CACHE[stack_name]

    result = run_aws_command(
        [
            "cloudformation",
            "describe-stacks",
            "--stack-name",
            stack_name,
            "--query",
            "Stacks[0].Outputs",
            "--output",
            "json",
        ]
    )
    try:
        outputs = json.loads(result) or []
    except json.JSONDecodeError as e:
        raise RenderaError(f"Failed to parse JSON output: {e}") from e

    log.debug("Fetched %d outputs for stack %s", len(outputs), stack_name)
    _OUTPUT_CACHE[stack_name] = outputs
    return outputs


def lookup_output(stack_name: str, key: str) -> str:
    """Look up the value of a CloudFormation stack output by key."""
    for output in fetch_outputs(stack_name):
        if output.get("OutputKey") == key and output.get("OutputValue"):
            return output["OutputValue"]
    raise NotFoundError(
        f'Output not found for stack: "{stack_name}" and key: "{key}"'
    )


def get_parameter_value(name: str, query: Optional[str] = None) -> str:
    """Fetch a parameter from SSM Parameter Store.

    Args:
        name: Parameter name, e.g. ``/my/parameter``.
        query: JMESPath query applied to the response. Defaults to
            ``Parameter.Value``.
    """
    result = run_aws_command(
        [
            "ssm",
            "get-parameter",
            "--name",
            name,
            "--query",
            query or "Parameter.Value",
            "--output",
            "text",
        ]
    )
    return result.rstrip("\n")


def clear_cache() -> None:
    _OUTPUT_CACHE.clear()
