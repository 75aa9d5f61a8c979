from csast.compiler.options import ConvertOptions
from csast.compiler.pipeline import ConversionUnit, convert_files, convert_source
from csast.parse.ast import Node, NodeKind, Program
from csast.parse.converter import TreeConverter, parse
from csast.parse.errors import AnchorNotFoundError, ConversionError, UnrecognizedNodeError
from csast.parse.serialize import to_dict
from csast.upstream.loader import UpstreamFormatError, load_upstream, load_upstream_file

__all__ = [
    "AnchorNotFoundError",
    "ConversionError",
    "ConversionUnit",
    "ConvertOptions",
    "Node",
    "NodeKind",
    "Program",
    "TreeConverter",
    "UnrecognizedNodeError",
    "UpstreamFormatError",
    "convert_files",
    "convert_source",
    "load_upstream",
    "load_upstream_file",
    "parse",
    "to_dict",
]
