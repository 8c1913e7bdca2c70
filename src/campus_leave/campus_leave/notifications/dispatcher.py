from __future__ import annotations

import logging
import threading
from queue import Queue
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STOP = object()


class NotificationDispatcher(Generic[T]):
    """Delivers events to a handler off the request path.

    ``publish`` only enqueues; a daemon worker drains the queue. With
    ``asynchronous=False`` the handler runs inline. Handler failures are
    logged and never reach the publisher in either mode.
    """

    def __init__(self, handler: Callable[[T], None], *, asynchronous: bool = True, join_timeout: float = 5.0):
        self._handler = handler
        self._asynchronous = asynchronous
        self._join_timeout = join_timeout
        self._queue: "Queue[object]" = Queue()
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def asynchronous(self) -> bool:
        return self._asynchronous

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        if not self._asynchronous:
            return
        with self._lock:
            if self.running:
                return
            self._worker = threading.Thread(target=self._run, name="notification-dispatcher", daemon=True)
            self._worker.start()
        logger.info("Notification dispatcher started")

    def stop(self) -> None:
        """Deliver what is already queued, then stop the worker."""

        with self._lock:
            worker = self._worker
            if worker is None:
                return
            self._queue.put(_STOP)
            worker.join(timeout=self._join_timeout)
            if worker.is_alive():
                logger.warning("Notification dispatcher did not stop within %.1fs", self._join_timeout)
            self._worker = None
        logger.info("Notification dispatcher stopped")

    def publish(self, event: T) -> None:
        if not self._asynchronous:
            self._deliver(event)
            return
        if not self.running:
            self.start()
        self._queue.put(event)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    break
                self._deliver(item)
            finally:
                self._queue.task_done()

    def _deliver(self, event: T) -> None:
        try:
            self._handler(event)
        except Exception:
            logger.exception("Notification delivery failed for %r", event)
