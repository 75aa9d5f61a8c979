from __future__ import annotations

from pathlib import Path

from csast.diag.diagnostic import Diagnostic, Severity
from csast.diag.source import Span


def _span_for_file(file: Path | str | None) -> Span:
    filename = "<cli>" if file is None else str(file)
    return Span(
        start_offset=0,
        end_offset=1,
        line=1,
        col=1,
        end_line=1,
        end_col=2,
        filename=filename,
    )


def missing_tree_file(inferred_path: Path, *, source_path: Path) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code="CSAST4002",
        message=f"upstream tree not provided and default tree was not found: {inferred_path}",
        span=_span_for_file(source_path),
        help=[
            f"Dump the parser output to `{inferred_path.name}` next to the source, "
            "or pass `--tree <path>`.",
        ],
    )


def file_read_error(path: Path, exc: OSError) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code="CSAST4003",
        message=f"failed to read file: {path}",
        span=_span_for_file(path),
        notes=[str(exc)],
        help=["Verify the file path exists and is readable."],
    )


def config_load_error(path: Path, exc: Exception) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code="CSAST4004",
        message=f"failed to load config TOML: {path}",
        span=_span_for_file(path),
        notes=[str(exc)],
        help=["Ensure the config payload is valid TOML and matches the expected schema."],
    )


def upstream_format_error(path: Path | str, exc: Exception) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code="CSAST1003",
        message="failed to load upstream parse tree",
        span=_span_for_file(path),
        notes=[str(exc)],
        help=["The tree must be the parser's JSON dump with a `Block` root node."],
    )
