"""Rate-limited HTTP fetching memoised in an on-disk cache."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from threading import BoundedSemaphore
from typing import Iterator, NamedTuple

import httpx
import structlog

from ..errors import CacheWriteError, FetchError
from ..infra.storage import atomic_write, escaped_name


class FetchOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


class FetchResult(NamedTuple):
    content: bytes
    outcome: FetchOutcome

    @property
    def found(self) -> bool:
        return self.outcome is FetchOutcome.FOUND


class FetchCache:
    """Byte fetcher with a fixed permit pool in front of the network.

    A cached address is served from disk without taking a permit. A miss
    takes one of ``permits`` slots for the duration of the request and
    stores a 200 body under the escaped address. 404 answers are reported
    but never cached; any other status or transport failure raises.
    Concurrent misses on the same address each hit the network; their
    writes are independent and land atomically.
    """

    def __init__(
        self,
        cache_dir: Path,
        permits: int = 10,
        client: httpx.Client | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logger or structlog.get_logger("jisho_harvester.fetch_cache")
        self._permits = BoundedSemaphore(permits)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent} if user_agent else None,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "FetchCache":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()

    def path_for(self, address: str) -> Path:
        return self.cache_dir / escaped_name(address)

    def acquire(self, address: str) -> FetchResult:
        path = self.path_for(address)
        try:
            return FetchResult(self._load(path), FetchOutcome.FOUND)
        except FileNotFoundError:
            pass

        with self._permits:
            try:
                with self._client.stream("GET", address) as response:
                    if response.status_code == httpx.codes.NOT_FOUND:
                        self.logger.debug("fetch_not_found", url=address)
                        return FetchResult(b"", FetchOutcome.NOT_FOUND)
                    if response.status_code != httpx.codes.OK:
                        raise FetchError(address, status_code=response.status_code)
                    self._store(path, response.iter_bytes())
            except httpx.HTTPError as exc:
                raise FetchError(address, reason=str(exc)) from exc

        self.logger.debug("fetch_cached", url=address, path=str(path))
        return FetchResult(self._load(path), FetchOutcome.FOUND)

    def _load(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise CacheWriteError(f"Could not read cache record {path}: {exc}") from exc

    def _store(self, path: Path, chunks: Iterator[bytes]) -> None:
        try:
            atomic_write(path.parent, path.name, chunks)
        except OSError as exc:
            raise CacheWriteError(f"Could not write cache record {path}: {exc}") from exc


__all__ = ["FetchCache", "FetchOutcome", "FetchResult"]
