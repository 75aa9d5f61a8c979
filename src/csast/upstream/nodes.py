"""Node classes of the upstream CoffeeScript parse tree.

Field names follow the upstream parser's own node attributes in snake_case
(``elseBody`` becomes ``else_body``). Locations use the upstream convention:
0-based lines and columns, with an inclusive end.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Union


@dataclass(frozen=True, slots=True)
class LocationData:
    first_line: int
    first_column: int
    last_line: int
    last_column: int


@dataclass(frozen=True, slots=True, kw_only=True)
class UpstreamNode:
    location_data: LocationData | None = None

    @property
    def node_type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, slots=True, kw_only=True)
class Block(UpstreamNode):
    expressions: list[UpstreamNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class Literal(UpstreamNode):
    value: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Access(UpstreamNode):
    name: Literal


@dataclass(frozen=True, slots=True, kw_only=True)
class Index(UpstreamNode):
    index: UpstreamNode


@dataclass(frozen=True, slots=True, kw_only=True)
class Value(UpstreamNode):
    base: UpstreamNode
    properties: list[UpstreamNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class Call(UpstreamNode):
    variable: UpstreamNode
    args: list[UpstreamNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class Op(UpstreamNode):
    operator: str
    first: UpstreamNode
    second: UpstreamNode | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Assign(UpstreamNode):
    variable: UpstreamNode
    value: UpstreamNode
    context: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Obj(UpstreamNode):
    properties: list[UpstreamNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class Arr(UpstreamNode):
    objects: list[UpstreamNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True, kw_only=True)
class Parens(UpstreamNode):
    body: UpstreamNode


@dataclass(frozen=True, slots=True, kw_only=True)
class If(UpstreamNode):
    condition: UpstreamNode
    body: Block
    else_body: UpstreamNode | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Param(UpstreamNode):
    name: UpstreamNode
    value: UpstreamNode | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Code(UpstreamNode):
    params: list[Param] = field(default_factory=list)
    body: Block | None = None
    bound: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class Bool(UpstreamNode):
    val: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Null(UpstreamNode):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class While(UpstreamNode):
    condition: UpstreamNode
    body: Block


@dataclass(frozen=True, slots=True, kw_only=True)
class Class(UpstreamNode):
    variable: UpstreamNode | None = None
    parent: UpstreamNode | None = None
    body: Block | None = None


SwitchConditions = Union[UpstreamNode, list[UpstreamNode]]


@dataclass(frozen=True, slots=True, kw_only=True)
class Switch(UpstreamNode):
    subject: UpstreamNode | None = None
    cases: list[tuple[SwitchConditions, Block]] = field(default_factory=list)
    otherwise: Block | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class UnknownNode(UpstreamNode):
    """A node whose upstream type has no counterpart in this module."""

    type_name: str
    payload: dict[str, object] = field(default_factory=dict)

    @property
    def node_type(self) -> str:
        return self.type_name


NODE_TYPES: dict[str, type[UpstreamNode]] = {
    cls.__name__: cls
    for cls in (
        Access,
        Arr,
        Assign,
        Block,
        Bool,
        Call,
        Class,
        Code,
        If,
        Index,
        Literal,
        Null,
        Obj,
        Op,
        Param,
        Parens,
        Switch,
        Value,
        While,
    )
}


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def node_structure(value: object) -> object:
    """Render an upstream value as plain JSON-compatible data, for diagnostics."""
    if isinstance(value, UnknownNode):
        out: dict[str, object] = {"type": value.type_name}
        if value.location_data is not None:
            out["locationData"] = node_structure(value.location_data)
        out.update(value.payload)
        return out
    if isinstance(value, UpstreamNode):
        out = {"type": value.node_type}
        for item in fields(value):
            out[camel_case(item.name)] = node_structure(getattr(value, item.name))
        return out
    if isinstance(value, LocationData):
        return {
            "first_line": value.first_line,
            "first_column": value.first_column,
            "last_line": value.last_line,
            "last_column": value.last_column,
        }
    if isinstance(value, (list, tuple)):
        return [node_structure(v) for v in value]
    return value
