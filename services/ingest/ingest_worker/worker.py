# =============================================================================
# Ingest Job Worker
# =============================================================================
# Processes one ingest job message end to end:
#   decode → identify → announce Running → inspect (+ catalog) → report
#   outcome → signal completion
# A worker never raises past run() for job failures and always signals
# completion exactly once.
# =============================================================================

import logging
import time
from enum import Enum
from typing import Optional, Protocol

from libs.errors import IngestError, MalformedMessageError, classify
from libs.inspection import InspectorRegistry
from libs.models.data import DataResource, IdFactory
from libs.models.job import IngestJob, JobMessage, decode_job, recover_job_id

from .identity import UUIDFactory
from .messaging import StatusPublisher, StatusReporter

__all__ = ["WorkerState", "CompletionCallback", "ResourceCatalog", "IngestWorker"]

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    """Lifecycle of a single worker."""
    RECEIVED = "received"
    DECODED = "decoded"
    IDENTIFIED = "identified"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    COMPLETED = "completed"


class CompletionCallback(Protocol):
    def on_complete(self, job_key: Optional[str]) -> None: ...


class ResourceCatalog(Protocol):
    def upsert_data_resource(self, resource: DataResource) -> None: ...


class IngestWorker:
    """
    Worker for a single ingest job message.

    Args:
        message: Raw job message
        registry: Inspection dispatcher
        publisher: Status channel
        callback: Notified with the message key once processing ends
        id_factory: Issues data ids for resources that arrive without one
        catalog: Resource catalog the inspected resource is registered in (optional)

    Example:
        >>> worker = IngestWorker(message, registry, publisher, pool_handle)
        >>> worker.run()
        <WorkerState.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        message: JobMessage,
        registry: InspectorRegistry,
        publisher: StatusPublisher,
        callback: CompletionCallback,
        id_factory: Optional[IdFactory] = None,
        catalog: Optional[ResourceCatalog] = None,
    ):
        self.message = message
        self.registry = registry
        self.publisher = publisher
        self.callback = callback
        self.id_factory = id_factory or UUIDFactory()
        self.catalog = catalog

        self.state = WorkerState.RECEIVED
        self.outcome: Optional[WorkerState] = None
        self.job: Optional[IngestJob] = None
        self.error: Optional[IngestError] = None
        self.reporter: Optional[StatusReporter] = None
        self._started = False

    def run(self) -> WorkerState:
        """
        Process the job message.

        Returns:
            WorkerState.COMPLETED

        Raises:
            RuntimeError: If the worker has already been run
        """
        if self._started:
            raise RuntimeError(f"Worker for message {self.message.key} has already run")
        self._started = True

        start_time = time.time()
        try:
            self._process()
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"Job message {self.message.key} finished as {self.outcome.value if self.outcome else 'unknown'} "
                f"in {duration_ms}ms"
            )
            self._complete()
        return self.state

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _process(self) -> None:
        try:
            job = decode_job(self.message)
        except MalformedMessageError as error:
            self._reject(error)
            return

        self.job = job
        self.state = WorkerState.DECODED
        self.reporter = StatusReporter(self.publisher, job.job_id)

        try:
            data_id = job.data.assign_id(self.id_factory)
            self.state = WorkerState.IDENTIFIED
            logger.info(
                f"Job {job.job_id}: ingesting data {data_id} "
                f"({job.data.data_type.type}, {job.mode.value})"
            )

            self.reporter.running(0)
            self.state = WorkerState.RUNNING

            resource = self.registry.dispatch(job.data, job.mode)
            if self.catalog is not None:
                self.catalog.upsert_data_resource(resource)
        except Exception as exc:
            self._fail(classify(exc))
            return

        self.state = self.outcome = WorkerState.SUCCEEDED
        try:
            self.reporter.success(resource.data_id)
        except Exception:
            logger.exception(f"Job {job.job_id}: failed to publish Success status")

    def _reject(self, error: MalformedMessageError) -> None:
        """Handle a message that could not be decoded into a job."""
        self.error = error
        self.state = self.outcome = WorkerState.FAILED

        job_id = recover_job_id(self.message)
        if job_id is None:
            logger.error(
                f"Discarding undecodable message {self.message.key!r} with no job id: {error}"
            )
            return

        logger.error(f"Job {job_id}: {error}")
        self.reporter = StatusReporter(self.publisher, job_id)
        self._report_error(error)

    def _fail(self, error: IngestError) -> None:
        self.error = error
        self.state = self.outcome = WorkerState.FAILED
        logger.error(
            f"Job {self.job.job_id} failed ({error.kind.value}): {error.details}",
            exc_info=error.__cause__ or error,
        )
        self._report_error(error)

    def _report_error(self, error: IngestError) -> None:
        try:
            self.reporter.error(error)
        except Exception:
            logger.exception(f"Job {self.reporter.job_id}: failed to publish Error status")

    def _complete(self) -> None:
        self.state = WorkerState.COMPLETED
        try:
            self.callback.on_complete(self.message.key)
        except Exception:
            logger.exception(f"Completion callback failed for message {self.message.key}")
