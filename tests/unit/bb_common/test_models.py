"""Tests for job and result records."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from bb_common.models import (
    BenchmarkContext,
    BenchmarkKey,
    JobRequest,
    PlatformInfo,
    ResultRecord,
)


pytestmark = pytest.mark.unit_common

RUN_DATE = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


def test_job_request_json_shape() -> None:
    job = JobRequest(repository="https://example/repo", branch="main", commit="abcd123")
    assert JobRequest.model_validate_json(job.to_json()) == job
    assert set(job.model_dump()) == {"repository", "branch", "commit"}


def test_job_request_ignores_unknown_fields() -> None:
    job = JobRequest.model_validate({"repository": "r", "branch": "b", "commit": "c", "extra": 1})
    assert job == JobRequest(repository="r", branch="b", commit="c")


def test_benchmark_key_takes_run_date_not_request_date() -> None:
    job = JobRequest(repository="https://example/repo", branch="main", commit="abcd123")
    key = BenchmarkKey.for_job(job, now=RUN_DATE)
    assert key == BenchmarkKey(commit="abcd123", branch="main", date=RUN_DATE)


def test_benchmark_key_defaults_to_now_in_utc() -> None:
    job = JobRequest(repository="r", branch="b", commit="c")
    key = BenchmarkKey.for_job(job)
    assert key.date.tzinfo is not None


def test_result_record_document_shape() -> None:
    record = ResultRecord(
        key=BenchmarkKey(commit="abcd123", branch="main", date=RUN_DATE),
        context=BenchmarkContext(name="balls", backend="rapier"),
        platform=PlatformInfo(compiler="1.70.0"),
        timings=[1.5, 2.0],
    )
    document = record.to_document()
    assert document == {
        "key": {"commit": "abcd123", "branch": "main", "date": RUN_DATE},
        "context": {"name": "balls", "backend": "rapier"},
        "platform": {"compiler": "1.70.0"},
        "timings": [1.5, 2.0],
    }
    assert isinstance(document["key"]["date"], datetime)


def test_result_record_from_document_ignores_store_id() -> None:
    document = {
        "_id": "65e1f0",
        "key": {"commit": "c", "branch": "b", "date": RUN_DATE},
        "context": {"name": "n", "backend": "physx"},
        "platform": {"compiler": "unknown"},
        "timings": [3.0],
    }
    record = ResultRecord.from_document(document)
    assert record.context.backend == "physx"
    assert record.timings == [3.0]
