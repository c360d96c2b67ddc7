"""
Coalescing scheduler for the sync cycle.

Event handlers call queue(); a single worker thread runs the cycle. Any
number of queue() calls made while a cycle is running collapse into one
pending cycle, so at most one cycle is ever in flight. Failed cycles are
retried with exponential backoff; an idle controller resyncs periodically.
"""
import logging
import threading
import time
from typing import Callable, Optional

from . import metrics
from .config import CONTROLLER_NAME, Settings, settings as default_settings
from .context import SyncContext

logger = logging.getLogger("console-operator.controller")


class Controller:

    def __init__(self, sync: Callable[[SyncContext], None],
                 settings: Settings = default_settings, name: str = CONTROLLER_NAME):
        self.name = name
        self.settings = settings
        self._sync = sync
        self._pending = threading.Event()
        self.failures = 0

    def queue(self, reason: str = ""):
        if reason:
            logger.debug(f"{self.name}: sync queued ({reason})")
        self._pending.set()

    @property
    def pending(self) -> bool:
        return self._pending.is_set()

    def backoff(self) -> float:
        """Delay before the next retry, given the current failure streak."""
        if self.failures <= 0:
            return 0.0
        delay = self.settings.RETRY_BASE_DELAY * (2 ** (self.failures - 1))
        return min(delay, self.settings.RETRY_MAX_DELAY)

    def process_next(self, ctx: SyncContext) -> bool:
        """Run one cycle. Returns True on success."""
        self._pending.clear()
        try:
            self._sync(ctx)
        except Exception as e:
            self.failures += 1
            metrics.sync_total.labels(result="error").inc()
            logger.error(f"{self.name} sync failed (attempt {self.failures}): {e}")
            return False
        if self.failures:
            logger.info(f"{self.name} sync recovered after {self.failures} failure(s)")
        self.failures = 0
        metrics.sync_total.labels(result="success").inc()
        return True

    def _wait_for_trigger(self, stopped, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while not stopped.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            if self._pending.wait(min(remaining, 1.0)):
                return True
        return False

    def run(self, stopped, recorder: Optional[Callable[[str, str], None]] = None):
        """
        Worker loop; returns once `stopped` is set.

        `stopped` is anything with is_set() and wait(timeout), such as
        kopf's DaemonStopped or a threading.Event.
        """
        logger.info(f"{self.name} controller started")
        self.queue("initial sync")
        while not stopped.is_set():
            if self.failures:
                # failed cycles are retried after backoff, triggered or not
                stopped.wait(self.backoff())
            else:
                self._wait_for_trigger(stopped, self.settings.RESYNC_INTERVAL)
            if stopped.is_set():
                break
            ctx = SyncContext(cancelled=stopped.is_set, recorder=recorder)
            self.process_next(ctx)
        logger.info(f"{self.name} controller stopped")
