from __future__ import annotations

from dataclasses import fields

from csast.parse.ast import Node
from csast.upstream.nodes import camel_case


def to_dict(node: Node, *, include_raw: bool = True) -> dict[str, object]:
    """Render a normalized node using the public, camelCase node vocabulary.

    Shared references (``boundMembers``, ``ctor``, shorthand keys) are
    rendered in full at every place they appear.
    """
    out: dict[str, object] = {"type": node.kind.value}
    if node.location is None:
        out["virtual"] = True
    else:
        out["line"] = node.location.line
        out["column"] = node.location.column
        out["range"] = [node.location.start, node.location.end]
        if include_raw:
            out["raw"] = node.location.raw
    for item in fields(node):
        if item.name == "location":
            continue
        out[camel_case(item.name)] = _value(getattr(node, item.name), include_raw)
    return out


def _value(value: object, include_raw: bool) -> object:
    if isinstance(value, Node):
        return to_dict(value, include_raw=include_raw)
    if isinstance(value, list):
        return [_value(item, include_raw) for item in value]
    return value


def iter_nodes(node: Node) -> list[Node]:
    """Every node of the tree in depth-first pre-order, following owned children only."""
    out: list[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        out.append(current)
        children: list[Node] = []
        for item in fields(current):
            if item.name in ("location", "name_assignee", "bound_members", "ctor"):
                continue
            value = getattr(current, item.name)
            if isinstance(value, Node):
                children.append(value)
            elif isinstance(value, list):
                children.extend(v for v in value if isinstance(v, Node))
        stack.extend(reversed(children))
    return out
