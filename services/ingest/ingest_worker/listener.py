# =============================================================================
# Ingest Queue Listener
# =============================================================================
# Pulls ingest job messages from the Service Bus queue into the worker pool
# and settles them once their workers complete.
# =============================================================================
"""
Ingest Queue Listener

Loop:
1. Settle messages whose workers completed
2. Take a pool slot (so messages are only locked when they can run)
3. Receive one message and hand it to the pool

Messages are completed after processing regardless of the job outcome; the
outcome is reported on the status queue. A message whose lock is lost
before settlement is redelivered by the broker. A message no worker could
be started for is abandoned so the broker redelivers (and eventually
dead-letters) it.
"""

import logging
import signal
import threading
import time
from typing import Optional

from azure.servicebus import (
    AutoLockRenewer,
    ServiceBusClient,
    ServiceBusReceivedMessage,
    ServiceBusReceiver,
)
from azure.servicebus.exceptions import ServiceBusError

from libs.models.config import ServiceBusSettings
from libs.models.job import JobMessage

from .pool import WorkerPool

__all__ = ["IngestListener", "to_job_message"]

logger = logging.getLogger(__name__)

# Seconds to wait for a free slot before re-checking for shutdown
SLOT_POLL_SECONDS = 1.0
RECEIVE_ERROR_BACKOFF_SECONDS = 1.0


def to_job_message(message: ServiceBusReceivedMessage, source: str = "") -> JobMessage:
    """
    Wrap a received Service Bus message as a JobMessage.

    The message key is the correlation id, falling back to the message id.
    """
    return JobMessage(
        key=message.correlation_id or message.message_id,
        value=str(message),
        source=source,
        receipt=message,
    )


class IngestListener:
    """
    Listens for ingest jobs on a Service Bus queue.

    Args:
        client: Service Bus client
        settings: Queue names and receive options
        pool: Worker pool running the jobs
    """

    def __init__(self, client: ServiceBusClient, settings: ServiceBusSettings, pool: WorkerPool):
        self.client = client
        self.settings = settings
        self.pool = pool
        self._stop = threading.Event()
        self._received = 0
        self._settled = 0

    def request_stop(self, signum=None, frame=None) -> None:
        """Stop taking new messages; running jobs are drained."""
        if signum is not None:
            logger.info(f"Received signal {signum}, requesting shutdown")
        self._stop.set()

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self.request_stop)
        signal.signal(signal.SIGINT, self.request_stop)

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        """
        Main listener loop. Runs until request_stop() is called.
        """
        logger.info(
            f"Listening on queue '{self.settings.ingest_queue}' "
            f"with {self.pool.max_workers} worker slot(s)"
        )

        renewer: Optional[AutoLockRenewer] = None
        if self.settings.lock_renewal_seconds > 0:
            renewer = AutoLockRenewer(max_lock_renewal_duration=self.settings.lock_renewal_seconds)

        receiver = self.client.get_queue_receiver(
            queue_name=self.settings.ingest_queue,
            max_wait_time=self.settings.max_wait_time,
        )

        with receiver:
            try:
                while not self.stopping:
                    self._settle(receiver)
                    self._receive_one(receiver, renewer)
            finally:
                self.pool.shutdown(wait=True)
                self._settle(receiver)
                if renewer is not None:
                    renewer.close()
                logger.info(
                    f"Listener stopped. Received: {self._received}, settled: {self._settled}"
                )

    def _receive_one(self, receiver: ServiceBusReceiver, renewer: Optional[AutoLockRenewer]) -> None:
        if not self.pool.acquire_slot(timeout=SLOT_POLL_SECONDS):
            return

        try:
            messages = receiver.receive_messages(
                max_message_count=1,
                max_wait_time=self.settings.max_wait_time,
            )
        except ServiceBusError as exc:
            self.pool.release_slot()
            logger.error(f"Error receiving from '{self.settings.ingest_queue}': {exc}")
            time.sleep(RECEIVE_ERROR_BACKOFF_SECONDS)
            return

        if not messages:
            self.pool.release_slot()
            return

        message = messages[0]
        if renewer is not None:
            renewer.register(receiver, message)

        job_message = to_job_message(message, source=self.settings.ingest_queue)
        self._received += 1
        logger.info(f"Received message {job_message.key}")
        try:
            self.pool.submit(job_message)
        except Exception:
            # The pool has released the slot; hand the message back for redelivery
            logger.exception(f"Could not start a worker for message {job_message.key}; abandoning it")
            self._abandon(receiver, job_message)

    def _abandon(self, receiver: ServiceBusReceiver, job_message: JobMessage) -> None:
        try:
            receiver.abandon_message(job_message.receipt)
        except ServiceBusError as exc:
            logger.warning(f"Could not abandon message {job_message.key}: {exc}")

    def _settle(self, receiver: ServiceBusReceiver) -> None:
        for job_message in self.pool.drain_completed():
            try:
                receiver.complete_message(job_message.receipt)
                self._settled += 1
                logger.debug(f"Completed message {job_message.key}")
            except ServiceBusError as exc:
                logger.warning(
                    f"Could not complete message {job_message.key} (it may be redelivered): {exc}"
                )
