"""Cancellable periodic timer shared by the recording timer and the live scheduler."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-shot cancellation flag whose wait is interrupted by `cancel()`."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds. Returns True if cancelled meanwhile."""
        return self._event.wait(timeout)


def run_ticks(token: CancellationToken, interval: float, on_tick: Callable[[], bool]) -> None:
    """Call `on_tick` every `interval` seconds until cancelled.

    The token is checked before every wait and again right after waking, so
    no tick fires once cancellation has been requested. `on_tick` returns
    False to end the loop on its own.
    """
    while not token.cancelled:
        if token.wait(interval):
            break
        if token.cancelled:
            break
        if not on_tick():
            break


class PeriodicWorker:
    """Runs `tick()` on a background thread at a fixed interval.

    Subclasses implement `tick()`; `start()`, `cancel()` and `join()` manage
    the thread. Cancelling twice, or cancelling a worker that never started,
    is a no-op.
    """

    thread_name = "PeriodicWorker"

    def __init__(self, interval: float):
        self.interval = interval
        self.token = CancellationToken()
        self.thread: Optional[threading.Thread] = None

    def tick(self) -> bool:
        raise NotImplementedError

    def start(self) -> None:
        if self.thread is not None:
            logger.warning(f"{self.thread_name} already started")
            return
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.name = self.thread_name
        self.thread.start()

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def is_current_thread(self) -> bool:
        return self.thread is not None and threading.current_thread() is self.thread

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread; returns immediately when called from it."""
        if self.thread is None or self.is_current_thread():
            return
        self.thread.join(timeout)
        if self.thread.is_alive():
            logger.warning(f"{self.thread_name} did not stop within {timeout}s")

    def _run(self) -> None:
        logger.debug(f"{self.thread_name} started (interval={self.interval}s)")
        try:
            run_ticks(self.token, self.interval, self.tick)
        except Exception as e:
            logger.error(f"Unhandled exception in {self.thread_name}: {e}", exc_info=True)
        finally:
            logger.debug(f"{self.thread_name} exiting")
