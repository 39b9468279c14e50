from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config.toml")
DEFAULT_LOG_FILE = Path("indd-to-idml.log")
ENV_PREFIX = "INDD2IDML_"

SOURCE_PATTERN = "*.indd"
SOURCE_SUFFIX = ".indd"
IDML_SUFFIX = ".idml"
PREVIEW_SUFFIX = "_preview.pdf"

BANNER = "#" * 100

__all__ = [
    "BANNER",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LOG_FILE",
    "ENV_PREFIX",
    "IDML_SUFFIX",
    "PREVIEW_SUFFIX",
    "SOURCE_PATTERN",
    "SOURCE_SUFFIX",
]
