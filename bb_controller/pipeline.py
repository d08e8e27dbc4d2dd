"""Job pipeline: consume a request, build, run, parse and upload its benchmarks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import structlog

from bb_common.config import BenchConfig
from bb_common.errors import BBError, DecodeError, JobError, error_to_payload, wrap_error
from bb_common.models import BenchmarkKey, JobRequest
from bb_controller.channel import Delivery, MessageChannel
from bb_controller.store import ResultStore
from bb_runner.build import BuildOrchestrator, BuildStep, job_workspace
from bb_runner.executor import BenchmarkExecutor
from bb_runner.parser import build_records, parse_results
from bb_runner.process import ProcessRunner, SubprocessRunner
from bb_runner.system_info import collect_platform_info

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    IDLE = "idle"
    CHECKING_OUT = "checking_out"
    BUILDING = "building"
    DISCOVERING = "discovering"
    RUNNING = "running"
    PARSING = "parsing"
    UPLOADING = "uploading"
    ACKNOWLEDGED = "acknowledged"
    FAILED = "failed"
    DROPPED = "dropped"


_STEP_STATES = {
    BuildStep.CHECKOUT: JobState.CHECKING_OUT,
    BuildStep.BUILD: JobState.BUILDING,
    BuildStep.DISCOVER: JobState.DISCOVERING,
}


@dataclass
class JobOutcome:
    """Terminal state of one delivery and how it got there."""

    state: JobState = JobState.IDLE
    job: Optional[JobRequest] = None
    records: int = 0
    error: Optional[Dict[str, Any]] = None
    history: List[JobState] = field(default_factory=lambda: [JobState.IDLE])

    def enter(self, state: JobState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("Job entered %s", state.value)


class JobPipeline:
    """Single-threaded worker processing one job at a time."""

    def __init__(
        self,
        config: BenchConfig,
        channel: MessageChannel,
        store: ResultStore,
        runner: ProcessRunner | None = None,
        *,
        workspace_root: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._channel = channel
        self._store = store
        self._runner = runner or SubprocessRunner()
        self._orchestrator = BuildOrchestrator(self._runner, config.suite)
        self._executor = BenchmarkExecutor(self._runner, config.suite)
        self._workspace_root = workspace_root
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_config(cls, config: BenchConfig) -> "JobPipeline":
        return cls(
            config,
            MessageChannel(config.rabbitmq_uri),
            ResultStore.from_config(config, write=True),
        )

    def serve(self, limit: int | None = None) -> int:
        """
        Consume the queue until it stops or ``limit`` messages were handled.

        Per-message failures never leave this loop; only channel failures do.
        """
        logger.info("Listening for benchmark jobs on '%s'", self._channel.queue)
        handled = 0
        for delivery in self._channel.consume():
            self.handle(delivery)
            handled += 1
            if limit is not None and handled >= limit:
                break
        return handled

    def close(self) -> None:
        self._channel.close()
        self._store.close()

    def handle(self, delivery: Delivery) -> JobOutcome:
        outcome = JobOutcome()

        if delivery.redelivered:
            # No retry count is tracked: a redelivered job is never run twice.
            logger.warning("Dropping redelivered message: %r", delivery.body[:200])
            delivery.ack()
            outcome.enter(JobState.ACKNOWLEDGED)
            return outcome

        try:
            job = delivery.decode()
        except DecodeError as exc:
            logger.error("Dropping undecodable message: %s", exc)
            delivery.nack(requeue=False)
            outcome.error = error_to_payload(exc)
            outcome.enter(JobState.DROPPED)
            return outcome

        outcome.job = job
        with structlog.contextvars.bound_contextvars(
            repository=job.repository, branch=job.branch, commit=job.commit
        ):
            logger.info("Received bench message: %s", job)
            try:
                self.run_job(job, outcome)
            except JobError as exc:
                return self._fail(delivery, outcome, exc)
            except Exception as exc:
                logger.exception("Unexpected failure while processing job")
                return self._fail(
                    delivery, outcome, wrap_error(JobError, str(exc) or type(exc).__name__, cause=exc)
                )

            delivery.ack()
            outcome.enter(JobState.ACKNOWLEDGED)
            logger.info("Job done, %s records stored", outcome.records)
        return outcome

    def run_job(self, job: JobRequest, outcome: JobOutcome) -> None:
        """Drive every step of ``job``; the workspace is released on every path."""
        key = BenchmarkKey.for_job(job, now=self._clock())
        project = self._config.suite.project

        with job_workspace(self._workspace_root) as workspace:
            suite = self._orchestrator.prepare(
                job.repository,
                job.commit,
                workspace,
                on_step=lambda step: outcome.enter(_STEP_STATES[step]),
            )
            logger.info("About to run benchmarks: %s", suite.benchmarks)
            platform = collect_platform_info(self._runner, suite.checkout_dir)

            for name in suite.benchmarks:
                outcome.enter(JobState.RUNNING)
                result_file = self._executor.run(suite, name)

                outcome.enter(JobState.PARSING)
                records = build_records(parse_results(result_file), key, name, platform)

                outcome.enter(JobState.UPLOADING)
                report = self._store.upload(records, project)
                outcome.records += report.inserted

    def _fail(self, delivery: Delivery, outcome: JobOutcome, error: BBError) -> JobOutcome:
        logger.error(
            "Job failed in state %s: %s",
            outcome.state.value,
            error,
        )
        outcome.error = error_to_payload(error)
        outcome.enter(JobState.FAILED)
        # Left unacknowledged; the broker redelivers it flagged as such.
        delivery.nack(requeue=True)
        return outcome
