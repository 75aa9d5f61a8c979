from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConvertOptions:
    filename: str = "<input>"
    tree_filename: str = "<tree>"
