from __future__ import annotations

import ast as pyast
import math
import re
from dataclasses import dataclass
from enum import Enum

_NUMERIC_RE = re.compile(r"^\d+|(\d+)?\.\d+$")
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
# escapes CoffeeScript strings share with Python; any other backslash is dropped
_KNOWN_ESCAPES = frozenset("bfnrtv0xu'\"\\\n")
_QUOTES = ("'", '"')


class LiteralKind(str, Enum):
    STRING = "string"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class LiteralClass:
    kind: LiteralKind
    value: str | None = None


def looks_numeric(raw: str) -> bool:
    return _NUMERIC_RE.search(raw) is not None


def parse_number(raw: str) -> int | float | None:
    """Decode numeric literal text, or return None when it is not a finite number."""
    try:
        return int(raw, 0)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    if value.is_integer():
        return int(value)
    return value


def _drop_unknown_escapes(raw: str) -> str:
    return _ESCAPE_RE.sub(
        lambda m: m.group(0) if m.group(1) in _KNOWN_ESCAPES else m.group(1), raw
    )


def classify_literal(raw: str) -> LiteralClass:
    """Decide whether raw literal text denotes a string, decoding it if so.

    Anything that is not a quoted string literal (identifiers, regular
    expressions, malformed quotes) is reported as ``other``.
    """
    if len(raw) < 2 or raw[0] not in _QUOTES or raw[-1] != raw[0]:
        return LiteralClass(kind=LiteralKind.OTHER)
    try:
        value = pyast.literal_eval(_drop_unknown_escapes(raw))
    except (SyntaxError, ValueError):
        return LiteralClass(kind=LiteralKind.OTHER)
    if not isinstance(value, str):
        return LiteralClass(kind=LiteralKind.OTHER)
    return LiteralClass(kind=LiteralKind.STRING, value=value)
