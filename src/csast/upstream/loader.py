"""Load an upstream CoffeeScript parse tree from its JSON dump."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import MISSING, fields
from functools import lru_cache
from pathlib import Path
from types import UnionType
from typing import Union, cast, get_args, get_origin, get_type_hints

from csast.upstream.nodes import (
    NODE_TYPES,
    Block,
    LocationData,
    Switch,
    UnknownNode,
    UpstreamNode,
    camel_case,
)

LOGGER = logging.getLogger(__name__)

_LOCATION_KEYS = ("first_line", "first_column", "last_line", "last_column")


class UpstreamFormatError(ValueError):
    code = "CSAST1003"


def load_upstream(payload: str | bytes | Mapping[str, object]) -> Block:
    if isinstance(payload, (str, bytes)):
        try:
            payload = cast(Mapping[str, object], json.loads(payload))
        except json.JSONDecodeError as exc:
            raise UpstreamFormatError(f"upstream tree is not valid JSON: {exc}") from exc

    root = _load_node(payload, path="$")
    if not isinstance(root, Block):
        raise UpstreamFormatError(f"upstream root must be a `Block`, got `{root.node_type}`")
    LOGGER.debug("Loaded upstream tree with %s top-level expression(s)", len(root.expressions))
    return root


def load_upstream_file(path: str | Path) -> Block:
    tree_path = Path(path)
    LOGGER.debug("Loading upstream tree from %s", tree_path)
    return load_upstream(tree_path.read_text(encoding="utf-8"))


def _load_node(raw: object, *, path: str) -> UpstreamNode:
    if not isinstance(raw, Mapping):
        raise UpstreamFormatError(f"`{path}` must be a node object")
    table = cast(Mapping[str, object], raw)
    type_name = table.get("type")
    if not isinstance(type_name, str) or not type_name:
        raise UpstreamFormatError(f"`{path}.type` must be a non-empty string")

    location = _load_location(table.get("locationData"), path=f"{path}.locationData")
    node_cls = NODE_TYPES.get(type_name)
    if node_cls is None:
        LOGGER.debug("Keeping unsupported upstream node `%s` at %s", type_name, path)
        return UnknownNode(
            location_data=location,
            type_name=type_name,
            payload={
                str(k): v for k, v in table.items() if k not in ("type", "locationData")
            },
        )

    kwargs: dict[str, object] = {"location_data": location}
    hints = _field_hints(node_cls)
    for item in fields(node_cls):
        if item.name == "location_data":
            continue
        key = camel_case(item.name)
        item_path = f"{path}.{key}"
        if table.get(key) is None:
            if item.default is MISSING and item.default_factory is MISSING:
                raise UpstreamFormatError(f"`{item_path}` is required for `{type_name}` nodes")
            continue
        if node_cls is Switch and item.name == "cases":
            kwargs[item.name] = _load_cases(table[key], path=item_path)
        else:
            kwargs[item.name] = _load_field(table[key], hints[item.name], path=item_path)
    try:
        return node_cls(**kwargs)
    except TypeError as exc:
        raise UpstreamFormatError(f"`{path}` is not a valid `{type_name}` node: {exc}") from exc


@lru_cache(maxsize=None)
def _field_hints(node_cls: type[UpstreamNode]) -> dict[str, object]:
    return get_type_hints(node_cls)


def _without_none(hint: object) -> object:
    if get_origin(hint) in (Union, UnionType):
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _load_field(raw: object, hint: object, *, path: str) -> object:
    """Load one field value, checking it against the field's annotation."""
    hint = _without_none(hint)
    if get_origin(hint) is list:
        if not isinstance(raw, list):
            raise UpstreamFormatError(f"`{path}` must be an array")
        (item_hint,) = get_args(hint)
        return [
            _load_field(item, item_hint, path=f"{path}[{idx}]") for idx, item in enumerate(raw)
        ]
    if isinstance(hint, type) and issubclass(hint, UpstreamNode):
        return _load_typed_node(raw, hint, path=path)
    if hint is bool and not isinstance(raw, bool):
        raise UpstreamFormatError(f"`{path}` must be a boolean")
    if hint is str and not isinstance(raw, str):
        raise UpstreamFormatError(f"`{path}` must be a string")
    return raw


def _load_typed_node(raw: object, node_cls: type[UpstreamNode], *, path: str) -> UpstreamNode:
    node = _load_node(raw, path=path)
    if not isinstance(node, node_cls):
        raise UpstreamFormatError(
            f"`{path}` must be a `{node_cls.__name__}` node, got `{node.node_type}`"
        )
    return node


def _load_cases(raw: object, *, path: str) -> list[tuple[object, object]]:
    if not isinstance(raw, list):
        raise UpstreamFormatError(f"`{path}` must be an array of [conditions, body] pairs")
    cases: list[tuple[object, object]] = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, list) or len(entry) != 2:
            raise UpstreamFormatError(f"`{path}[{idx}]` must be a [conditions, body] pair")
        conditions_path = f"{path}[{idx}][0]"
        conditions: object
        if isinstance(entry[0], list):
            conditions = _load_field(entry[0], list[UpstreamNode], path=conditions_path)
        else:
            conditions = _load_node(entry[0], path=conditions_path)
        body = _load_typed_node(entry[1], Block, path=f"{path}[{idx}][1]")
        cases.append((conditions, body))
    return cases


def _load_location(raw: object, *, path: str) -> LocationData | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise UpstreamFormatError(f"`{path}` must be an object")
    values: list[int] = []
    for key in _LOCATION_KEYS:
        value = raw.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise UpstreamFormatError(f"`{path}.{key}` must be a non-negative integer")
        values.append(value)
    return LocationData(*values)
