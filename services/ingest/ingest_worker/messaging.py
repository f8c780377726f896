# =============================================================================
# Status Messaging
# =============================================================================
# Publishes job status updates to the status queue and enforces the per-job
# status sequence (Running before Success, nothing after a terminal status,
# progress never decreasing).
# =============================================================================

import json
import logging
import threading
from datetime import timedelta
from typing import Optional, Protocol

from azure.servicebus import ServiceBusClient, ServiceBusMessage, ServiceBusSender

from libs.errors import IngestError
from libs.models.status import JobStatus, StatusUpdate

__all__ = [
    "StatusPublisher",
    "ServiceBusStatusPublisher",
    "build_status_message",
    "StatusTransitionError",
    "StatusReporter",
]

logger = logging.getLogger(__name__)

STATUS_MESSAGE_TTL = timedelta(hours=24)


class StatusPublisher(Protocol):
    def publish(self, update: StatusUpdate) -> None: ...


def build_status_message(update: StatusUpdate) -> ServiceBusMessage:
    """
    Build the Service Bus message for a status update.

    The body is the camelCase JSON update; the correlation id is the job id
    so consumers can route updates without parsing the body.
    """
    return ServiceBusMessage(
        body=json.dumps(update.to_message()),
        content_type="application/json",
        correlation_id=update.job_id,
        time_to_live=STATUS_MESSAGE_TTL,
        application_properties={"status": update.status.value},
    )


class ServiceBusStatusPublisher:
    """
    Sends status updates to a Service Bus queue.

    One sender is shared by all workers; sends are serialized because
    Service Bus handlers are not thread-safe.
    """

    def __init__(self, client: ServiceBusClient, queue_name: str):
        self.client = client
        self.queue_name = queue_name
        self._sender: Optional[ServiceBusSender] = None
        self._lock = threading.Lock()

    def _get_sender(self) -> ServiceBusSender:
        if self._sender is None:
            logger.debug(f"Creating sender for status queue: {self.queue_name}")
            self._sender = self.client.get_queue_sender(queue_name=self.queue_name)
        return self._sender

    def publish(self, update: StatusUpdate) -> None:
        message = build_status_message(update)
        with self._lock:
            self._get_sender().send_messages(message)
        logger.info(f"Published {update.status.value} for job {update.job_id}")

    def close(self) -> None:
        with self._lock:
            if self._sender is not None:
                self._sender.close()
                self._sender = None


class StatusTransitionError(RuntimeError):
    """A status update would break the job's status sequence."""


class StatusReporter:
    """
    Per-job status reporter.

    Rules:
    - SUCCESS requires a prior RUNNING
    - ERROR may be reported at any point before a terminal status (a job
      rejected before it starts never reports RUNNING)
    - nothing follows SUCCESS or ERROR
    - progress never decreases

    Violations raise StatusTransitionError before anything is published.
    The recorded state only advances once the publisher accepted the update.
    """

    def __init__(self, publisher: StatusPublisher, job_id: str):
        self.publisher = publisher
        self.job_id = job_id
        self.last_status: Optional[JobStatus] = None
        self.last_progress: int = -1
        self.history: list[StatusUpdate] = []

    @property
    def terminal(self) -> bool:
        return self.last_status is not None and self.last_status.is_terminal

    def running(self, percent_complete: int = 0) -> StatusUpdate:
        return self._publish(StatusUpdate.running(self.job_id, percent_complete))

    def success(self, data_id: str) -> StatusUpdate:
        return self._publish(StatusUpdate.success(self.job_id, data_id))

    def error(self, error: IngestError) -> StatusUpdate:
        return self._publish(StatusUpdate.error(self.job_id, error))

    def _check(self, update: StatusUpdate) -> None:
        if self.terminal:
            raise StatusTransitionError(
                f"Job {self.job_id}: {update.status.value} after terminal {self.last_status.value}"
            )
        if update.status is JobStatus.SUCCESS and self.last_status is not JobStatus.RUNNING:
            raise StatusTransitionError(f"Job {self.job_id}: Success reported before Running")
        if update.progress is not None and update.progress.percent_complete < self.last_progress:
            raise StatusTransitionError(
                f"Job {self.job_id}: progress {update.progress.percent_complete} "
                f"below {self.last_progress}"
            )

    def _publish(self, update: StatusUpdate) -> StatusUpdate:
        self._check(update)
        self.publisher.publish(update)
        self.last_status = update.status
        if update.progress is not None:
            self.last_progress = update.progress.percent_complete
        self.history.append(update)
        return update
