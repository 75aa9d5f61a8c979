from csast.upstream.loader import UpstreamFormatError, load_upstream, load_upstream_file
from csast.upstream.nodes import LocationData, UnknownNode, UpstreamNode

__all__ = [
    "LocationData",
    "UnknownNode",
    "UpstreamFormatError",
    "UpstreamNode",
    "load_upstream",
    "load_upstream_file",
]
