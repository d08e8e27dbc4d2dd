"""Job and result records exchanged between the benchbot layers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field


class JobRequest(BaseModel):
    """Request to benchmark one commit of a repository."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(min_length=1, description="URL of the repository to clone")
    branch: str = Field(description="Branch the commit belongs to")
    commit: str = Field(min_length=1, description="Commit to check out and benchmark")

    def to_json(self) -> str:
        return self.model_dump_json()


class BenchmarkKey(BaseModel):
    """Identifies one job execution; shared by every record it produces."""

    model_config = ConfigDict(frozen=True)

    commit: str
    branch: str
    # When the benchmark ran, not when it was requested.
    date: datetime

    @classmethod
    def for_job(cls, job: JobRequest, now: datetime | None = None) -> "BenchmarkKey":
        return cls(
            commit=job.commit,
            branch=job.branch,
            date=now or datetime.now(timezone.utc),
        )


class BenchmarkContext(BaseModel):
    """Benchmark program and the backend column being measured."""

    model_config = ConfigDict(frozen=True)

    name: str
    backend: str = ""


class PlatformInfo(BaseModel):
    """Details about the platform the benchmarks are run on."""

    model_config = ConfigDict(frozen=True)

    compiler: str = "unknown"


class ResultRecord(BaseModel):
    """One persisted timing series for a benchmark/backend/run."""

    model_config = ConfigDict(frozen=True)

    key: BenchmarkKey
    context: BenchmarkContext
    platform: PlatformInfo
    # Milliseconds, one value per sample row of the result file.
    timings: List[float] = Field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        """Return the store document; dates stay datetimes for BSON encoding."""
        return self.model_dump(mode="python")

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "ResultRecord":
        payload = {key: value for key, value in document.items() if key != "_id"}
        return cls.model_validate(payload)
