"""MongoDB-backed result store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from bb_common.config import BenchConfig
from bb_common.errors import StoreError
from bb_common.models import ResultRecord

logger = logging.getLogger(__name__)


@dataclass
class UploadReport:
    """Outcome of uploading one batch of records."""

    project: str
    inserted: int = 0
    failures: List[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {"project": self.project, "inserted": self.inserted, "failures": self.failures}


class ResultStore:
    """Append-only access to the result collections of one database."""

    def __init__(
        self,
        uri: str,
        database: str,
        client_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self._uri = uri
        self._database_name = database
        self._client_factory = client_factory or MongoClient
        self._client: Any = None

    @classmethod
    def from_config(cls, config: BenchConfig, *, write: bool = True) -> "ResultStore":
        """Use the bencher URI for writes and the server URI for read-only queries."""
        uri = config.mongodb_bencher_uri if write else config.mongodb_server_uri
        return cls(uri, config.mongodb_db)

    def collection(self, project: str) -> Any:
        if self._client is None:
            try:
                self._client = self._client_factory(self._uri)
            except PyMongoError as exc:
                raise StoreError(
                    "Could not connect to the result store",
                    context={"database": self._database_name},
                    cause=exc,
                ) from exc
        return self._client[self._database_name][project]

    def upload(self, records: Sequence[ResultRecord], project: str) -> UploadReport:
        """
        Insert each record as its own document in the ``project`` collection.

        No dedup key is applied; uploading the same records twice stores them
        twice. Every record is attempted; any failure raises StoreError after
        the batch, carrying the partial report.
        """
        collection = self.collection(project)
        report = UploadReport(project=project)
        for record in records:
            try:
                collection.insert_one(record.to_document())
            except PyMongoError as exc:
                logger.error(
                    "Failed to store %s/%s: %s",
                    record.context.name,
                    record.context.backend,
                    exc,
                )
                report.failures.append(
                    {
                        "name": record.context.name,
                        "backend": record.context.backend,
                        "error": str(exc),
                    }
                )
            else:
                report.inserted += 1

        if not report.ok:
            raise StoreError(
                f"{len(report.failures)} of {len(records)} records were not stored",
                context=report.to_dict(),
            )
        logger.info("Stored %s records in '%s'", report.inserted, project)
        return report

    def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.close()
