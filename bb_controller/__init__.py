"""Queue, store and job pipeline of the benchmark worker."""

from bb_controller.api import JobPipeline, MessageChannel, ResultStore

__all__ = ["JobPipeline", "MessageChannel", "ResultStore"]
