"""
Cooperative cancellation and per-call deadlines.

The pipeline checks a CancellationToken between stages, between agent rounds and
before every oracle call. Oracle calls themselves run under a wall-clock deadline so
a stuck backend surfaces as a recoverable timeout instead of a hang.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, wait
from typing import Callable, Optional, TypeVar

T = TypeVar('T')


class PipelineCancelled(Exception):
    """Raised when the caller cancels a running pipeline."""


class DeadlineExceeded(Exception):
    """Raised when a call runs past its deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Call exceeded deadline of {timeout_seconds:.1f}s")
        self.timeout_seconds = timeout_seconds


class CancellationToken:
    """
    Cooperative cancel flag. A token created with a parent also reports the
    parent's cancellation, so one call can be stopped without stopping the run.
    """

    def __init__(self, parent: Optional["CancellationToken"] = None):
        self._event = threading.Event()
        self.parent = parent
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller"):
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or (self.parent is not None and self.parent.cancelled)

    def raise_if_cancelled(self, where: str = ""):
        if self.parent is not None:
            self.parent.raise_if_cancelled(where)
        if self._event.is_set():
            suffix = f" during {where}" if where else ""
            raise PipelineCancelled(f"{self.reason}{suffix}")


def check_cancelled(cancel: Optional[CancellationToken], where: str = ""):
    if cancel is not None:
        cancel.raise_if_cancelled(where)


def run_with_deadline(
    fn: Callable[[], T],
    timeout_seconds: Optional[float],
    on_timeout: Optional[Callable[[], None]] = None,
    drain_seconds: Optional[float] = 0
) -> T:
    """
    Run fn in a worker thread and wait at most timeout_seconds for it.

    Python threads cannot be interrupted, so on timeout on_timeout() is called
    (typically to trip a cancellation token fn polls) and the worker is given up
    to drain_seconds to finish before DeadlineExceeded is raised. drain_seconds=0
    returns immediately; None waits for the worker to finish.
    """
    if not timeout_seconds or timeout_seconds <= 0:
        return fn()

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oracle-call")
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        if on_timeout is not None:
            on_timeout()
        if drain_seconds != 0:
            # The late result (or error) of the abandoned call is discarded
            wait([future], timeout=drain_seconds)
        raise DeadlineExceeded(timeout_seconds)
    finally:
        executor.shutdown(wait=False)
