from __future__ import annotations

from rich.console import Console
from rich.text import Text

from csast.diag.diagnostic import Diagnostic, DiagnosticLabel, Severity
from csast.diag.source import SourceRepository, SourceText, Span


class DiagnosticReporter:
    TAB_SIZE = 4
    _STYLES = {
        Severity.ERROR: "red",
        Severity.WARNING: "yellow",
    }

    def __init__(
        self,
        console: Console | None = None,
        *,
        repository: SourceRepository | None = None,
    ) -> None:
        self.console = console or Console(stderr=True)
        self.repository = repository or SourceRepository()

    def render_text(self, source: SourceText | None, diag: Diagnostic) -> str:
        filename = diag.span.filename
        lines = [
            f"{diag.severity.value}[{diag.code}]: {diag.message}",
            f"  --> {filename}:{max(1, diag.span.line)}:{max(1, diag.span.col)}",
        ]

        resolved = self._resolve_source(source, filename)
        if resolved is not None:
            labels = list(diag.labels) or [DiagnosticLabel(span=diag.span, is_primary=True)]
            for idx, label in enumerate(labels):
                lines.append("   |")
                lines.extend(self._render_label(resolved, label, primary=idx == 0))
        else:
            lines.append("   = note: source is unavailable for this diagnostic span")

        lines.extend(f"   = note: {n}" for n in diag.notes)
        lines.extend(f"   = help: {h}" for h in diag.help)
        return "\n".join(lines)

    def print(self, source: SourceText | None, diagnostics: list[Diagnostic]) -> None:
        ordered = sorted(
            enumerate(diagnostics),
            key=lambda item: (item[1].span.filename, item[1].span.line, item[1].span.col, item[0]),
        )
        for _, diag in ordered:
            style = self._STYLES[diag.severity]
            self.console.print(Text(self.render_text(source, diag), style=style))
            self.console.print()
        if diagnostics:
            self.console.print(self.render_summary(diagnostics))

    def render_summary(self, diagnostics: list[Diagnostic]) -> str:
        errors = sum(1 for d in diagnostics if d.severity == Severity.ERROR)
        warnings = sum(1 for d in diagnostics if d.severity == Severity.WARNING)
        verb = "aborting" if errors else "finished"
        return f"{verb} with {errors} error(s), {warnings} warning(s)"

    def _resolve_source(self, source: SourceText | None, filename: str) -> SourceText | None:
        if source is not None:
            self.repository.remember(source)
            if source.filename == filename:
                return source
        return self.repository.get(filename)

    def _render_label(self, source: SourceText, label: DiagnosticLabel, *, primary: bool) -> list[str]:
        span = label.span
        start_line = max(1, min(span.line, source.line_count))
        end_line = max(start_line, min(span.end_line, source.line_count))
        marker_char = "^" if primary or label.is_primary else "-"
        rendered: list[str] = []
        for line_no in range(start_line, end_line + 1):
            raw = source.line_text(line_no)
            start_col, end_col = self._columns_on_line(raw, span, line_no)
            start_visual = self._visual_col(raw, start_col)
            width = max(1, self._visual_col(raw, end_col) - start_visual)
            marker = " " * start_visual + marker_char * width
            rendered.append(f"{line_no:>3} | {raw.expandtabs(self.TAB_SIZE)}")
            if line_no == start_line and label.message:
                rendered.append(f"   | {marker} {label.message}")
            else:
                rendered.append(f"   | {marker}")
        return rendered

    def _columns_on_line(self, raw: str, span: Span, line_no: int) -> tuple[int, int]:
        max_col = len(raw) + 1
        start = max(1, span.col) if line_no == span.line else 1
        end = max(start + 1, span.end_col) if line_no == span.end_line else max_col
        start = min(max_col, start)
        end = min(max_col, end)
        if end <= start:
            end = min(max_col, start + 1)
        return start, end

    def _visual_col(self, raw: str, col: int) -> int:
        return len(raw[: max(0, col - 1)].expandtabs(self.TAB_SIZE))
