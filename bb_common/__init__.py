"""Shared helpers for benchbot."""

from bb_common.api import BenchConfig, JobRequest, ResultRecord, configure_logging

__all__ = ["BenchConfig", "JobRequest", "ResultRecord", "configure_logging"]
