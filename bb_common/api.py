"""Public API surface for bb_common."""

from bb_common.config import BenchConfig, SuiteSettings, resolve_config_path
from bb_common.errors import (
    BBError,
    BuildError,
    ChannelError,
    CheckoutError,
    ConfigError,
    DecodeError,
    DiscoveryError,
    ExecutionError,
    JobError,
    ParseError,
    StoreError,
    error_to_payload,
)
from bb_common.logging import configure_logging
from bb_common.models import (
    BenchmarkContext,
    BenchmarkKey,
    JobRequest,
    PlatformInfo,
    ResultRecord,
)

__all__ = [
    "BBError",
    "BenchConfig",
    "BenchmarkContext",
    "BenchmarkKey",
    "BuildError",
    "ChannelError",
    "CheckoutError",
    "ConfigError",
    "DecodeError",
    "DiscoveryError",
    "ExecutionError",
    "JobError",
    "JobRequest",
    "ParseError",
    "PlatformInfo",
    "ResultRecord",
    "StoreError",
    "SuiteSettings",
    "configure_logging",
    "error_to_payload",
    "resolve_config_path",
]
