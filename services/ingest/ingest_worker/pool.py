# =============================================================================
# Worker Pool
# =============================================================================
# Runs ingest workers concurrently, bounded by a fixed number of slots.
# A slot is taken before a message is pulled from the broker and released
# when the worker signals completion.
# =============================================================================

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from libs.models.job import JobMessage

from .worker import CompletionCallback, IngestWorker

__all__ = ["WorkerPool", "WorkerFactory"]

logger = logging.getLogger(__name__)

WorkerFactory = Callable[[JobMessage, CompletionCallback], IngestWorker]


class _CompletionHandle:
    """Completion callback of one submission; only the first call counts."""

    def __init__(self, pool: "WorkerPool", message: JobMessage):
        self._pool = pool
        self._message = message
        self._lock = threading.Lock()
        self._done = False

    def on_complete(self, job_key: Optional[str]) -> None:
        with self._lock:
            if self._done:
                logger.warning(f"Duplicate completion for message {job_key}; ignored")
                return
            self._done = True
        self._pool._worker_completed(self._message)


class WorkerPool:
    """
    Bounded pool of ingest workers.

    Usage by a listener:
        1. ``acquire_slot()`` before receiving a message
        2. ``submit(message)`` once received, or ``release_slot()`` if none arrived
        3. ``drain_completed()`` to collect messages ready to be settled

    Args:
        max_workers: Number of jobs processed concurrently
        worker_factory: Builds the worker for a message and its completion handle
    """

    def __init__(self, max_workers: int, worker_factory: WorkerFactory):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.worker_factory = worker_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ingest-worker"
        )
        self._slots = threading.BoundedSemaphore(max_workers)
        self._completed: "queue.Queue[JobMessage]" = queue.Queue()
        self._active = 0
        self._active_lock = threading.Lock()

    def acquire_slot(self, timeout: Optional[float] = None) -> bool:
        """Reserve a slot; returns False if none freed up within ``timeout``."""
        return self._slots.acquire(timeout=timeout)

    def release_slot(self) -> None:
        """Give back a slot reserved with acquire_slot() but not used."""
        self._slots.release()

    def submit(self, message: JobMessage) -> Future:
        """
        Start a worker for a message. The caller must hold a slot.

        If the worker cannot be created or started, the slot is released
        and the error re-raised.

        Raises:
            RuntimeError: If the pool has been shut down
        """
        handle = _CompletionHandle(self, message)
        try:
            worker = self.worker_factory(message, handle)
        except Exception:
            self.release_slot()
            raise

        with self._active_lock:
            self._active += 1
        try:
            future = self._executor.submit(worker.run)
        except RuntimeError:
            with self._active_lock:
                self._active -= 1
            self.release_slot()
            raise

        logger.debug(f"Submitted message {message.key} ({self.active_count}/{self.max_workers} active)")
        return future

    def _worker_completed(self, message: JobMessage) -> None:
        with self._active_lock:
            self._active -= 1
        self._completed.put(message)
        self._slots.release()

    def drain_completed(self) -> list[JobMessage]:
        """Messages whose workers have completed since the last call."""
        drained = []
        while True:
            try:
                drained.append(self._completed.get_nowait())
            except queue.Empty:
                return drained

    @property
    def active_count(self) -> int:
        with self._active_lock:
            return self._active

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for running workers."""
        logger.info(f"Shutting down worker pool ({self.active_count} active)")
        self._executor.shutdown(wait=wait)
