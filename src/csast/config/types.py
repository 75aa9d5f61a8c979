from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_TREE_SUFFIX = ".nodes.json"
CONFIG_FILENAME = "csast.toml"


class OutputFormat(str, Enum):
    json = "json"
    pretty = "pretty"


@dataclass(frozen=True, slots=True)
class UpstreamConfig:
    tree_suffix: str = DEFAULT_TREE_SUFFIX


@dataclass(frozen=True, slots=True)
class OutputConfig:
    format: OutputFormat = OutputFormat.pretty
    indent: int = 2
    include_raw: bool = True


@dataclass(frozen=True, slots=True)
class CsastConfig:
    schema_version: str = "1"
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
