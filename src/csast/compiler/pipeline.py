from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from csast.compiler.options import ConvertOptions
from csast.diag.cli_diagnostics import upstream_format_error
from csast.diag.diagnostic import Diagnostic, DiagnosticLabel, Severity
from csast.diag.source import SourceText, Span
from csast.parse.ast import Program
from csast.parse.converter import TreeConverter
from csast.parse.errors import AnchorNotFoundError, UnrecognizedNodeError
from csast.upstream import nodes as up
from csast.upstream.loader import UpstreamFormatError, load_upstream

LOGGER = logging.getLogger(__name__)

TreeInput = up.Block | Mapping[str, object] | str | bytes


@dataclass(slots=True)
class ConversionUnit:
    source: SourceText
    ast: Program | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(diag.is_error for diag in self.diagnostics)


def _point(source: SourceText, line: int, col: int) -> Span:
    return Span(
        start_offset=0,
        end_offset=0,
        line=line,
        col=col,
        end_line=line,
        end_col=col + 1,
        filename=source.filename,
    )


def _location_span(source: SourceText, loc: up.LocationData | None) -> Span:
    if loc is None:
        return _point(source, 1, 1)
    try:
        start = source.to_offset(loc.first_line, loc.first_column)
        end = source.to_offset(loc.last_line, loc.last_column) + 1
    except ValueError:
        return _point(source, loc.first_line + 1, loc.first_column + 1)
    return source.span(start, end)


def _unrecognized_node(source: SourceText, exc: UnrecognizedNodeError) -> Diagnostic:
    notes = [f"node type: {exc.node_type}"]
    if exc.ancestors:
        notes.append(f"inside: {' > '.join(exc.ancestors)}")
    span = _location_span(source, exc.location)
    return Diagnostic(
        severity=Severity.ERROR,
        code=exc.code,
        message=exc.detail or f"unknown node type: {exc.node_type}",
        span=span,
        labels=[
            DiagnosticLabel(
                span=span, message=f"upstream `{exc.node_type}` node", is_primary=True
            )
        ],
        notes=notes,
        help=["Every upstream node kind must map to a normalized node; extend the converter."],
    )


def _anchor_not_found(source: SourceText, exc: AnchorNotFoundError) -> Diagnostic:
    preposition = "after" if exc.direction == "right" else "before"
    return Diagnostic(
        severity=Severity.ERROR,
        code=exc.code,
        message=str(exc),
        span=_point(source, exc.line, exc.column),
        notes=[f"searched {preposition} {exc.line}:{exc.column} for {exc.anchor!r}"],
        help=["Check that the upstream tree was produced from this exact source text."],
    )


def _clamped_span(source: SourceText, loc: up.LocationData) -> Diagnostic:
    return Diagnostic(
        severity=Severity.WARNING,
        code="CSAST1004",
        message="upstream location runs past the end of the source; range was clamped",
        span=_location_span(source, loc),
        notes=[
            f"upstream span {loc.first_line + 1}:{loc.first_column + 1}"
            f"-{loc.last_line + 1}:{loc.last_column + 1}"
        ],
        help=["Check that the upstream tree was produced from this exact source text."],
    )


def convert_source(
    text: str,
    tree: TreeInput,
    *,
    options: ConvertOptions | None = None,
) -> ConversionUnit:
    opts = options or ConvertOptions()
    source = SourceText(text, filename=opts.filename)
    unit = ConversionUnit(source=source)

    if isinstance(tree, up.Block):
        root = tree
    else:
        try:
            root = load_upstream(tree)
        except UpstreamFormatError as exc:
            LOGGER.error("Upstream tree for %s could not be loaded", opts.filename)
            unit.diagnostics.append(upstream_format_error(opts.tree_filename, exc))
            return unit

    LOGGER.debug("Converting %s (%s characters)", opts.filename, len(text))
    converter = TreeConverter(source)
    try:
        unit.ast = converter.convert_program(root)
    except UnrecognizedNodeError as exc:
        LOGGER.error("Unrecognized upstream node `%s` in %s", exc.node_type, opts.filename)
        unit.diagnostics.append(_unrecognized_node(source, exc))
    except AnchorNotFoundError as exc:
        LOGGER.error("Anchor %r not found in %s", exc.anchor, opts.filename)
        unit.diagnostics.append(_anchor_not_found(source, exc))
    except ValueError as exc:
        LOGGER.error("Upstream tree does not match %s", opts.filename)
        unit.diagnostics.append(upstream_format_error(opts.tree_filename, exc))
    else:
        for loc in converter.builder.clamped:
            LOGGER.warning("Clamped upstream location in %s", opts.filename)
            unit.diagnostics.append(_clamped_span(source, loc))
        LOGGER.info("Converted %s", opts.filename)
    return unit


def convert_files(
    source_path: str | Path,
    tree_path: str | Path,
    *,
    options: ConvertOptions | None = None,
) -> ConversionUnit:
    source_file = Path(source_path)
    tree_file = Path(tree_path)
    opts = options or ConvertOptions(filename=str(source_file), tree_filename=str(tree_file))
    LOGGER.debug("Reading source %s and tree %s", source_file, tree_file)
    text = source_file.read_text(encoding="utf-8")
    tree = tree_file.read_text(encoding="utf-8")
    return convert_source(text, tree, options=opts)
