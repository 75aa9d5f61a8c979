from __future__ import annotations

import json
from collections.abc import Sequence

from csast.upstream.nodes import LocationData, UpstreamNode, node_structure


class ConversionError(Exception):
    """Base class for hard failures while converting an upstream tree."""

    code = "CSAST1000"


class UnrecognizedNodeError(ConversionError):
    code = "CSAST1001"

    def __init__(
        self,
        node: UpstreamNode,
        *,
        ancestors: Sequence[UpstreamNode] = (),
        detail: str | None = None,
    ) -> None:
        self.node_type = node.node_type
        self.structure = node_structure(node)
        self.ancestors = tuple(ancestor.node_type for ancestor in ancestors)
        self.location: LocationData | None = node.location_data
        self.detail = detail
        heading = detail or f"unknown node type: {self.node_type}"
        super().__init__(f"{heading}\n{json.dumps(self.structure, indent=2, default=str)}")


class AnchorNotFoundError(ConversionError):
    code = "CSAST1002"

    def __init__(self, *, line: int, column: int, anchor: str, direction: str) -> None:
        self.line = line
        self.column = column
        self.anchor = anchor
        self.direction = direction
        if direction == "right":
            message = (
                f"unable to expand location ending at {line}:{column} "
                f"because it is not followed by {json.dumps(anchor)}"
            )
        else:
            message = (
                f"unable to expand location starting at {line}:{column} "
                f"because it is not preceded by {json.dumps(anchor)}"
            )
        super().__init__(message)
