from csast.config.loader import discover_config_path, load_config, resolve_tree_path
from csast.config.types import (
    CONFIG_FILENAME,
    DEFAULT_TREE_SUFFIX,
    CsastConfig,
    OutputConfig,
    OutputFormat,
    UpstreamConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_TREE_SUFFIX",
    "CsastConfig",
    "OutputConfig",
    "OutputFormat",
    "UpstreamConfig",
    "discover_config_path",
    "load_config",
    "resolve_tree_path",
]
