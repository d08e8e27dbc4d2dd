"""Configuration helpers for bb_common."""

from .settings import (
    DEFAULT_CONFIG_NAME,
    BenchConfig,
    SuiteSettings,
    default_config_dir,
    resolve_config_path,
)

__all__ = [
    "BenchConfig",
    "DEFAULT_CONFIG_NAME",
    "SuiteSettings",
    "default_config_dir",
    "resolve_config_path",
]
