"""
Per-cycle context threaded through every remote call.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import CycleCancelledError


@dataclass
class SyncContext:
    """
    Cooperative cancellation for one cycle.

    `cancelled` is polled before each remote call; `deadline` is a
    time.monotonic() value bounding the whole cycle. `recorder` receives
    (reason, message) pairs for cluster events.
    """
    cancelled: Optional[Callable[[], bool]] = None
    deadline: Optional[float] = None
    recorder: Optional[Callable[[str, str], None]] = None

    @classmethod
    def with_timeout(cls, seconds: float, **kwargs) -> "SyncContext":
        return cls(deadline=time.monotonic() + seconds, **kwargs)

    def check(self):
        if self.cancelled is not None and self.cancelled():
            raise CycleCancelledError("sync cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise CycleCancelledError("sync deadline exceeded")

    def request_timeout(self, default: float) -> float:
        """Per-request timeout, never past the cycle deadline."""
        if self.deadline is None:
            return default
        return max(0.0, min(default, self.deadline - time.monotonic()))

    def record(self, reason: str, message: str):
        if self.recorder is not None:
            self.recorder(reason, message)
