from __future__ import annotations

from collections.abc import Callable
from dataclasses import fields

import pytest

from csast.diag.source import SourceText
from csast.parse import ast
from csast.upstream import nodes as up


class TreeKit:
    """Builds upstream nodes located by searching for fragments of a source text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.source = SourceText(text)

    def loc(self, fragment: str, nth: int = 0) -> up.LocationData:
        idx = -1
        for _ in range(nth + 1):
            idx = self.text.index(fragment, idx + 1)
        first = self.source.to_position(idx)
        last = self.source.to_position(idx + len(fragment) - 1)
        return up.LocationData(first.line, first.column, last.line, last.column)

    def literal(self, text: str, nth: int = 0) -> up.Literal:
        return up.Literal(location_data=self.loc(text, nth), value=text)

    def value(self, text: str, nth: int = 0) -> up.Value:
        loc = self.loc(text, nth)
        return up.Value(location_data=loc, base=up.Literal(location_data=loc, value=text))

    def root(self, *expressions: up.UpstreamNode) -> up.Block:
        stripped = self.text.rstrip("\n")
        return up.Block(location_data=self.loc(stripped), expressions=list(expressions))


@pytest.fixture
def make_kit() -> Callable[[str], TreeKit]:
    return TreeKit


def _children(node: ast.Node) -> list[ast.Node]:
    out: list[ast.Node] = []
    for item in fields(node):
        if item.name in ("location", "name_assignee", "bound_members", "ctor"):
            continue
        value = getattr(node, item.name)
        if isinstance(value, ast.Node):
            out.append(value)
        elif isinstance(value, list):
            out.extend(v for v in value if isinstance(v, ast.Node))
    return out


def assert_well_formed(program: ast.Program, text: str) -> None:
    """Check range bounds, raw-slice exactness and parent/child containment."""

    def _walk(node: ast.Node, outer: tuple[int, int] | None) -> None:
        bounds = node.range
        if bounds is not None:
            assert 0 <= bounds[0] <= bounds[1] <= len(text)
            assert node.raw == text[bounds[0] : bounds[1]]
            if outer is not None:
                assert outer[0] <= bounds[0] and bounds[1] <= outer[1], node.kind
            outer = bounds
        for child in _children(node):
            _walk(child, outer)

    _walk(program, None)


@pytest.fixture
def well_formed() -> Callable[[ast.Program, str], None]:
    return assert_well_formed
