from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable


class TaskRejectedError(RuntimeError):
    """Raised by BoundedExecutor.submit when the queue is full and blocking is disabled."""


class BoundedExecutor:
    """
    Fixed-size thread pool with a capacity-limited FIFO queue.

    At most `max_workers` tasks run and at most `queue_capacity` more wait. A slot is
    taken on submit and returned when the task finishes. When every slot is taken,
    submit either blocks until one frees up or raises TaskRejectedError.
    """

    def __init__(
        self,
        max_workers: int,
        queue_capacity: int,
        *,
        block_when_full: bool = True,
        thread_name_prefix: str = "shopdetect",
    ) -> None:
        self.max_workers = max(1, int(max_workers))
        self.queue_capacity = max(0, int(queue_capacity))
        self.block_when_full = bool(block_when_full)
        self._slots = threading.BoundedSemaphore(self.max_workers + self.queue_capacity)
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix=thread_name_prefix)

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        if self.block_when_full:
            self._slots.acquire()
        elif not self._slots.acquire(blocking=False):
            raise TaskRejectedError(
                f"task queue full ({self.max_workers} running, {self.queue_capacity} queued)"
            )

        def _run() -> Any:
            # Free the slot before the future resolves, so waiters can resubmit at once.
            try:
                return fn(*args, **kwargs)
            finally:
                self._slots.release()

        try:
            fut = self._executor.submit(_run)
        except BaseException:
            self._slots.release()
            raise
        # Cancelled futures never run _run.
        fut.add_done_callback(lambda f: f.cancelled() and self._slots.release())
        return fut

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BoundedExecutor":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)
