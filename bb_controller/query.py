"""Read-only queries over stored results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from bb_common.errors import StoreError
from bb_common.models import ResultRecord
from bb_controller.store import ResultStore

logger = logging.getLogger(__name__)

Timestamp = Union[int, datetime]


def to_datetime(value: Timestamp) -> datetime:
    """Accept epoch milliseconds or a datetime and return an aware UTC datetime."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def to_epoch_millis(value: datetime) -> int:
    """Inverse of ``to_datetime``; naive values are read as UTC, like the store returns them."""
    return int(round(to_datetime(value).timestamp() * 1000))


@dataclass
class RunComparison:
    """Records of two runs, as served to the comparison graphs."""

    entries1: List[ResultRecord] = field(default_factory=list)
    entries2: List[ResultRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries1": [entry.model_dump(mode="json") for entry in self.entries1],
            "entries2": [entry.model_dump(mode="json") for entry in self.entries2],
        }


def _decode(documents: Iterable[Dict[str, Any]]) -> List[ResultRecord]:
    records: List[ResultRecord] = []
    for document in documents:
        try:
            records.append(ResultRecord.from_document(document))
        except ValidationError:
            logger.warning("Skipping undecodable document %s", document.get("_id"))
    return records


def compare_runs(
    store: ResultStore,
    project: str,
    date1: Timestamp,
    date2: Timestamp,
    *,
    other_engines: bool = False,
    backend: str = "rapier",
) -> RunComparison:
    """Fetch the records of two runs, matched on their exact run date."""
    collection = store.collection(project)
    result = RunComparison()
    for date, entries in ((date1, result.entries1), (date2, result.entries2)):
        query: Dict[str, Any] = {"key.date": to_datetime(date)}
        if not other_engines:
            query["context.backend"] = backend
        try:
            entries.extend(_decode(collection.find(query)))
        except PyMongoError as exc:
            raise StoreError(
                "Result query failed", context={"project": project, "date": date}, cause=exc
            ) from exc
    return result


def list_values(store: ResultStore, project: str, field_name: str) -> List[Any]:
    """Distinct values of ``field_name`` (dotted paths allowed) in a project."""
    try:
        return list(store.collection(project).distinct(field_name))
    except PyMongoError as exc:
        raise StoreError(
            "Distinct query failed",
            context={"project": project, "field": field_name},
            cause=exc,
        ) from exc


def latest_branch_date(store: ResultStore, project: str, branch: str) -> Optional[datetime]:
    """Date of the newest run recorded for ``branch``."""
    pipeline = [
        {"$match": {"key.branch": branch}},
        {"$group": {"_id": "$key.branch", "maxDate": {"$max": "$key.date"}}},
    ]
    try:
        for document in store.collection(project).aggregate(pipeline):
            return document.get("maxDate")
    except PyMongoError as exc:
        raise StoreError(
            "Aggregation failed", context={"project": project, "branch": branch}, cause=exc
        ) from exc
    return None
