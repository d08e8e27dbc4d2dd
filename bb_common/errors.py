"""Shared error taxonomy for benchbot."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class BBError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ConfigError(BBError):
    """Missing, unreadable or malformed configuration."""


class ChannelError(BBError):
    """Queue unreachable or publish/consume failure."""


class DecodeError(BBError):
    """A queue message body that is not a valid job request."""


class JobError(BBError):
    """Failure that abandons the job being processed."""


class CheckoutError(JobError):
    """Cloning the repository or checking out the commit failed."""


class BuildError(JobError):
    """Compiling the benchmark suite failed."""


class DiscoveryError(JobError):
    """Listing the runnable benchmarks of a compiled suite failed."""


class ExecutionError(JobError):
    """An external process could not be run, timed out or exited non-zero."""


class ParseError(JobError):
    """A benchmark result file is missing or malformed."""


class StoreError(JobError):
    """One or more result records could not be persisted."""


T = TypeVar("T", bound=BBError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed BBError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: BBError) -> dict[str, Any]:
    """Convert a BBError to a log/outcome payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
