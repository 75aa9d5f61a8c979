from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Span:
    start_offset: int
    end_offset: int
    line: int
    col: int
    end_line: int
    end_col: int
    filename: str = "<input>"


@dataclass(frozen=True, slots=True)
class Position:
    """A 0-based line/column pair, matching the upstream parser's convention."""

    line: int
    column: int


class LineColumnMapper:
    """Maps 0-based (line, column) pairs to offsets in a text and back."""

    def __init__(self, text: str) -> None:
        self.length = len(text)
        offsets = [0]
        for idx, char in enumerate(text):
            if char == "\n":
                offsets.append(idx + 1)
        self._line_offsets = tuple(offsets)

    @property
    def line_count(self) -> int:
        return len(self._line_offsets)

    def to_offset(self, line: int, column: int) -> int:
        if line < 0 or line >= len(self._line_offsets):
            raise ValueError(f"line {line} is outside of the source (0..{self.line_count - 1})")
        return self._line_offsets[line] + column

    def to_position(self, offset: int) -> Position:
        if offset < 0:
            raise ValueError(f"offset {offset} is negative")
        line = bisect_right(self._line_offsets, offset) - 1
        return Position(line=line, column=offset - self._line_offsets[line])


class SourceText:
    def __init__(self, text: str, filename: str = "<input>") -> None:
        self.text = text
        self.filename = filename
        self.mapper = LineColumnMapper(text)
        self._lines = text.split("\n")

    def __len__(self) -> int:
        return len(self.text)

    def line_text(self, line: int) -> str:
        if line < 1 or line > len(self._lines):
            return ""
        return self._lines[line - 1].rstrip("\r")

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def to_offset(self, line: int, column: int) -> int:
        return self.mapper.to_offset(line, column)

    def to_position(self, offset: int) -> Position:
        return self.mapper.to_position(offset)

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]

    def span(self, start: int, end: int) -> Span:
        """Build a 1-based diagnostic span for the half-open offset range."""
        start_pos = self.to_position(max(0, min(start, len(self.text))))
        end_pos = self.to_position(max(0, min(max(end, start), len(self.text))))
        return Span(
            start_offset=start,
            end_offset=end,
            line=start_pos.line + 1,
            col=start_pos.column + 1,
            end_line=end_pos.line + 1,
            end_col=end_pos.column + 1,
            filename=self.filename,
        )


class SourceRepository:
    def __init__(self) -> None:
        self._cache: dict[str, SourceText | None] = {}

    def remember(self, source: SourceText) -> SourceText:
        self._cache[source.filename] = source
        return source

    def from_text(self, text: str, filename: str = "<input>") -> SourceText:
        return self.remember(SourceText(text=text, filename=filename))

    def get(self, filename: str) -> SourceText | None:
        if filename in self._cache:
            return self._cache[filename]
        if filename.startswith("<") and filename.endswith(">"):
            self._cache[filename] = None
            return None
        try:
            path = Path(filename)
            if not path.exists() or not path.is_file():
                self._cache[filename] = None
                return None
            text = path.read_text(encoding="utf-8")
        except OSError:
            self._cache[filename] = None
            return None
        source = SourceText(text=text, filename=filename)
        self._cache[filename] = source
        return source
