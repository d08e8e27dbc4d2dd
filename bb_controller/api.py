"""Public API surface for bb_controller."""

from bb_controller.channel import QUEUE_NAME, Delivery, MessageChannel, decode_job
from bb_controller.pipeline import JobOutcome, JobPipeline, JobState
from bb_controller.query import RunComparison, compare_runs, latest_branch_date, list_values
from bb_controller.store import ResultStore, UploadReport

__all__ = [
    "Delivery",
    "JobOutcome",
    "JobPipeline",
    "JobState",
    "MessageChannel",
    "QUEUE_NAME",
    "ResultStore",
    "RunComparison",
    "UploadReport",
    "compare_runs",
    "decode_job",
    "latest_branch_date",
    "list_values",
]
