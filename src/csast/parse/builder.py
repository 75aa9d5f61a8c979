from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypeVar

from csast.diag.source import SourceText
from csast.parse.ast import Node, SourceLocation
from csast.upstream.nodes import LocationData

N = TypeVar("N", bound=Node)


def widen_range(initial: tuple[int, int], values: Iterable[object]) -> tuple[int, int]:
    """Grow ``initial`` until it covers the range of every node among ``values``.

    Values may be nodes, lists of nodes, or anything else (ignored).
    """
    start, end = initial
    for value in values:
        items = value if isinstance(value, list) else [value]
        for item in items:
            if not isinstance(item, Node) or item.location is None:
                continue
            start = min(start, item.location.start)
            end = max(end, item.location.end)
    return start, end


def clamp_range(bounds: tuple[int, int], length: int) -> tuple[int, int]:
    start = min(max(0, bounds[0]), length)
    end = min(max(start, bounds[1]), length)
    return start, end


@dataclass(slots=True)
class NodeBuilder:
    source: SourceText
    # upstream spans that ran past the end of the source
    clamped: list[LocationData] = field(default_factory=list)

    def build(self, node_type: type[N], loc: LocationData | None, **attrs: object) -> N:
        if loc is None:
            return node_type(None, **attrs)

        start = self.source.to_offset(loc.first_line, loc.first_column)
        end = self.source.to_offset(loc.last_line, loc.last_column) + 1
        widened = widen_range((start, end), attrs.values())
        start, end = clamp_range(widened, len(self.source))
        if (start, end) != widened:
            self.clamped.append(loc)
        location = SourceLocation(
            line=loc.first_line + 1,
            column=loc.first_column + 1,
            start=start,
            end=end,
            raw=self.source.slice(start, end),
        )
        return node_type(location, **attrs)
