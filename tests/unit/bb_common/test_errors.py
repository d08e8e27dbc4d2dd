"""Tests for shared error helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from bb_common.errors import (
    BBError,
    BuildError,
    CheckoutError,
    DecodeError,
    JobError,
    ParseError,
    StoreError,
    error_to_payload,
    wrap_error,
)


pytestmark = pytest.mark.unit_common


def test_error_to_payload_normalizes_context() -> None:
    err = BuildError(
        "boom",
        context={
            "path": Path("/tmp/checkout"),
            "returncode": 101,
            "nested": {"value": Path("nested")},
            "items": (Path("a"), "b"),
        },
    )
    payload = error_to_payload(err)
    assert payload["error_type"] == "BuildError"
    assert payload["error"] == "boom"
    assert payload["error_context"]["path"].endswith("checkout")
    assert payload["error_context"]["returncode"] == 101
    assert payload["error_context"]["nested"]["value"] == "nested"
    assert payload["error_context"]["items"] == ["a", "b"]


@pytest.mark.parametrize("error_cls", [CheckoutError, BuildError, ParseError, StoreError])
def test_job_failures_share_the_job_error_base(error_cls) -> None:
    assert issubclass(error_cls, JobError)


def test_decode_error_is_not_a_job_failure() -> None:
    assert not issubclass(DecodeError, JobError)
    assert issubclass(DecodeError, BBError)


def test_wrap_error_keeps_cause() -> None:
    cause = ValueError("bad")
    err = wrap_error(ParseError, "cannot parse", context={"line": 3}, cause=cause)
    assert err.__cause__ is cause
    assert err.to_dict() == {"type": "ParseError", "message": "cannot parse", "context": {"line": 3}}
