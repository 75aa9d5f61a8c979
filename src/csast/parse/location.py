"""Arithmetic on upstream location spans.

Spans are the upstream parser's ``LocationData``: 0-based lines and columns
with an inclusive end. Offsets are only used internally by the expansion
helpers; callers always get spans back.
"""

from __future__ import annotations

from csast.diag.source import SourceText
from csast.parse.errors import AnchorNotFoundError
from csast.upstream.nodes import LocationData, UpstreamNode


def merge_locations(left: LocationData, right: LocationData) -> LocationData:
    if left.first_line < right.first_line:
        first_line, first_column = left.first_line, left.first_column
    elif left.first_line > right.first_line:
        first_line, first_column = right.first_line, right.first_column
    elif left.first_column < right.first_column:
        first_line, first_column = left.first_line, left.first_column
    else:
        first_line, first_column = right.first_line, right.first_column

    if left.last_line < right.last_line:
        last_line, last_column = right.last_line, right.last_column
    elif left.last_line > right.last_line:
        last_line, last_column = left.last_line, left.last_column
    elif left.last_column < right.last_column:
        last_line, last_column = right.last_line, right.last_column
    else:
        last_line, last_column = left.last_line, left.last_column

    return LocationData(first_line, first_column, last_line, last_column)


def merge_all(*locations: LocationData | None) -> LocationData | None:
    present = [loc for loc in locations if loc is not None]
    if not present:
        return None
    merged = present[-1]
    for loc in reversed(present[:-1]):
        merged = merge_locations(loc, merged)
    return merged


def locations_containing(*nodes: UpstreamNode | None) -> LocationData | None:
    return merge_all(*(node.location_data for node in nodes if node is not None))


def expand_right_through(loc: LocationData, anchor: str, source: SourceText) -> LocationData:
    offset = source.to_offset(loc.last_line, loc.last_column) + 1
    found = source.text.find(anchor, offset)
    if found < 0:
        raise AnchorNotFoundError(
            line=loc.last_line + 1,
            column=loc.last_column + 1,
            anchor=anchor,
            direction="right",
        )
    end = source.to_position(found + len(anchor) - 1)
    return LocationData(loc.first_line, loc.first_column, end.line, end.column)


def expand_left_through(loc: LocationData, anchor: str, source: SourceText) -> LocationData:
    offset = source.to_offset(loc.first_line, loc.first_column)
    # an occurrence may start at `offset` itself
    found = source.text.rfind(anchor, 0, offset + len(anchor))
    if found < 0:
        raise AnchorNotFoundError(
            line=loc.first_line + 1,
            column=loc.first_column + 1,
            anchor=anchor,
            direction="left",
        )
    start = source.to_position(found)
    return LocationData(start.line, start.column, loc.last_line, loc.last_column)
