from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import TypeVar, cast

from csast.config.types import (
    CONFIG_FILENAME,
    CsastConfig,
    OutputConfig,
    OutputFormat,
    UpstreamConfig,
)

E = TypeVar("E", bound=Enum)

LOGGER = logging.getLogger(__name__)


def discover_config_path(*, source_path: Path, explicit_config: Path | None) -> Path | None:
    if explicit_config is not None:
        return explicit_config

    for directory in (source_path.parent, Path.cwd()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            LOGGER.info("Inferred config file: %s", candidate)
            return candidate
    return None


def load_config(path: str | Path) -> CsastConfig:
    config_path = Path(path)
    with config_path.open("rb") as f:
        payload = tomllib.load(f)

    root = cast(Mapping[str, object], payload)
    schema_version = root.get("schema_version", "1")
    if schema_version != "1":
        raise ValueError('`schema_version` must be "1"')

    return CsastConfig(
        schema_version="1",
        upstream=_parse_upstream(_table(root, "upstream"), path="upstream"),
        output=_parse_output(_table(root, "output"), path="output"),
    )


def resolve_tree_path(
    *, source_path: Path, explicit_tree: Path | None, config: CsastConfig
) -> Path:
    if explicit_tree is not None:
        return explicit_tree
    return source_path.with_name(source_path.name + config.upstream.tree_suffix)


def _parse_upstream(table: Mapping[str, object], *, path: str) -> UpstreamConfig:
    _reject_unknown_keys(table, {"tree_suffix"}, path=path)
    if "tree_suffix" not in table:
        return UpstreamConfig()
    raw = table["tree_suffix"]
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"`{path}.tree_suffix` must be a non-empty string")
    return UpstreamConfig(tree_suffix=raw.strip())


def _parse_output(table: Mapping[str, object], *, path: str) -> OutputConfig:
    _reject_unknown_keys(table, {"format", "indent", "include_raw"}, path=path)
    defaults = OutputConfig()
    output_format = (
        _parse_enum(table["format"], enum_cls=OutputFormat, path=f"{path}.format")
        if "format" in table
        else defaults.format
    )
    indent = (
        _parse_non_negative_int(table["indent"], path=f"{path}.indent")
        if "indent" in table
        else defaults.indent
    )
    include_raw = (
        _parse_bool(table["include_raw"], path=f"{path}.include_raw")
        if "include_raw" in table
        else defaults.include_raw
    )
    return OutputConfig(format=output_format, indent=indent, include_raw=include_raw)


def _table(root: Mapping[str, object], key: str) -> Mapping[str, object]:
    raw = root.get(key, {})
    if not isinstance(raw, Mapping):
        raise ValueError(f"`{key}` must be a TOML table/object")
    return cast(Mapping[str, object], raw)


def _reject_unknown_keys(table: Mapping[str, object], allowed: set[str], *, path: str) -> None:
    unknown = sorted(set(table) - allowed)
    if unknown:
        raise ValueError(f"`{path}` has unknown key(s): {', '.join(unknown)}")


def _parse_bool(raw: object, *, path: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"`{path}` must be a boolean")
    return raw


def _parse_non_negative_int(raw: object, *, path: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"`{path}` must be an integer")
    if raw < 0:
        raise ValueError(f"`{path}` must be >= 0")
    return raw


def _parse_enum(raw: object, *, enum_cls: type[E], path: str) -> E:
    if not isinstance(raw, str):
        raise ValueError(f"`{path}` must be a string")
    try:
        return enum_cls(raw)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"`{path}` must be one of: {allowed}") from exc
