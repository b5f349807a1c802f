"""Thread pools keyed by fan-out level."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from threading import Lock
from typing import Dict, Iterable, TypeVar

T = TypeVar("T")

# A task only waits on tasks of a later level, so bounded pools cannot deadlock.
LEVELS = ("query", "entry", "collocation", "audio")


class ThreadPoolManager:
    """Manage one executor per fan-out level."""

    def __init__(self, default_workers: int = 8, workers: Dict[str, int] | None = None) -> None:
        self.default_workers = default_workers
        self._workers = dict(workers or {})
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, level: str) -> ThreadPoolExecutor:
        with self._lock:
            if level not in self._executors:
                self._executors[level] = ThreadPoolExecutor(
                    max_workers=self._workers.get(level, self.default_workers),
                    thread_name_prefix=f"harvest-{level}",
                )
            return self._executors[level]

    def shutdown(self, cancel: bool = False) -> None:
        with self._lock:
            for executor in self._executors.values():
                executor.shutdown(wait=not cancel, cancel_futures=cancel)
            self._executors.clear()


def join_all(futures: Iterable[Future[T]]) -> list[T]:
    """Wait for a task group; re-raise the first failure and cancel the rest."""
    pending = list(futures)
    done, not_done = wait(pending, return_when=FIRST_EXCEPTION)
    for future in done:
        if future.exception() is not None:
            for other in not_done:
                other.cancel()
            raise future.exception()
    return [future.result() for future in pending]


__all__ = ["LEVELS", "ThreadPoolManager", "join_all"]
