"""YAML codec that understands CloudFormation short-form intrinsic tags.

``!Ref Bucket`` loads as ``{"Ref": "Bucket"}`` and ``!GetAtt Role.Arn`` as
``{"Fn::GetAtt": ["Role", "Arn"]}``. Dumping reverses the mapping, so data
files written for CloudFormation round-trip through templates unchanged.
"""

from __future__ import annotations

from typing import Any

import yaml

# Short tags that do not take the "Fn::" prefix in long form
_BARE_TAGS = {"Ref", "Condition"}


def _long_name(tag: str) -> str:
    return tag if tag in _BARE_TAGS else f"Fn::{tag}"


def _short_tag(key: str) -> str | None:
    if key in _BARE_TAGS:
        return f"!{key}"
    if key.startswith("Fn::"):
        return f"!{key[4:]}"
    return None


class CfnLoader(yaml.SafeLoader):
    """SafeLoader plus CloudFormation intrinsic function tags."""


def _construct_intrinsic(loader: CfnLoader, tag_suffix: str, node: yaml.Node) -> Any:
    name = _long_name(tag_suffix)
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
        if name == "Fn::GetAtt":
            value = value.split(".", 1)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return {name: value}


CfnLoader.add_multi_constructor("!", _construct_intrinsic)


class CfnDumper(yaml.SafeDumper):
    """SafeDumper that writes intrinsic functions in short form."""


def _represent_dict(dumper: CfnDumper, data: dict) -> yaml.Node:
    if len(data) == 1:
        key, value = next(iter(data.items()))
        tag = _short_tag(key) if isinstance(key, str) else None
        if tag is not None:
            if key == "Fn::GetAtt" and isinstance(value, list):
                value = ".".join(str(v) for v in value)
            if isinstance(value, dict):
                return dumper.represent_mapping(tag, value)
            if isinstance(value, (list, tuple)):
                return dumper.represent_sequence(tag, value)
            node = dumper.represent_data(value)
            node.tag = tag
            return node
    return dumper.represent_dict(data)


CfnDumper.add_representer(dict, _represent_dict)


def load(text: str) -> Any:
    """Parse a YAML document."""
    return yaml.load(text, Loader=CfnLoader)


def dump(data: Any) -> str:
    """Serialize ``data`` as block-style YAML, keeping key order."""
    text = yaml.dump(
        data,
        Dumper=CfnDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    # A bare top-level scalar gets an explicit document end marker
    if text.endswith("\n...\n"):
        text = text[: -len("...\n")]
    return text
