"""Search-result aggregation into a shared entry stream."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from queue import Queue
from threading import Lock
from typing import Iterable, Iterator

import structlog

from ..config import QueryPlanConfig
from ..errors import FetchError
from ..models import Entry, Query
from .endpoints import Endpoints
from .fetch_cache import FetchCache
from .parser import Parser
from .thread_pool import ThreadPoolManager


def build_queries(plan: QueryPlanConfig) -> list[Query]:
    """Expand the query plan into the fixed list of pages to fetch."""
    queries: list[Query] = []
    for band in sorted(plan.band_pages, reverse=True):
        for page in range(1, plan.band_pages[band] + 1):
            queries.append(Query(band=band, page=page))
    for character in plan.index_characters:
        for page in range(1, plan.index_pages + 1):
            queries.append(Query(band=plan.index_band, page=page, index=character))
    return queries


@dataclass(frozen=True, slots=True)
class _Closed:
    error: BaseException | None = None


class EntryStream:
    """Unordered multi-producer stream of parsed entries.

    Iteration ends once the stream is closed; closing with an error makes
    the consumer raise it instead.
    """

    def __init__(self) -> None:
        self._queue: Queue[Entry | _Closed] = Queue()

    def publish(self, entry: Entry) -> None:
        self._queue.put(entry)

    def close(self, error: BaseException | None = None) -> None:
        self._queue.put(_Closed(error))

    def __iter__(self) -> Iterator[Entry]:
        while True:
            item = self._queue.get()
            if isinstance(item, _Closed):
                if item.error is not None:
                    raise item.error
                return
            yield item


class SearchAggregator:
    """Fetch every query page concurrently and publish the parsed entries."""

    def __init__(
        self,
        fetch_cache: FetchCache,
        endpoints: Endpoints,
        pools: ThreadPoolManager,
        parser: Parser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetch_cache = fetch_cache
        self.endpoints = endpoints
        self.pools = pools
        self.parser = parser or Parser()
        self.logger = logger or structlog.get_logger("jisho_harvester.search")

    def search(self, keyword: str, page: int = 1) -> list[Entry]:
        address = self.endpoints.search(keyword, page)
        result = self.fetch_cache.acquire(address)
        if not result.found:
            # The search API answers empty pages with 200; a 404 here is unexpected.
            raise FetchError(address, status_code=404)
        return self.parser.parse_search(result.content, address)

    def publish(self, queries: Iterable[Query], stream: EntryStream) -> list[Future[int]]:
        """Start one task per query; ``stream`` is closed when all have finished."""
        queries = list(queries)
        if not queries:
            stream.close()
            return []
        tracker = _CompletionTracker(len(queries), stream)
        executor = self.pools.get("query")
        futures: list[Future[int]] = []
        for query in queries:
            future = executor.submit(self._run_query, query, stream)
            future.add_done_callback(tracker.done)
            futures.append(future)
        return futures

    def _run_query(self, query: Query, stream: EntryStream) -> int:
        entries = self.search(query.keyword, query.page)
        for entry in entries:
            stream.publish(entry)
        self.logger.debug(
            "query_page_parsed", keyword=query.keyword, page=query.page, entries=len(entries)
        )
        return len(entries)


class _CompletionTracker:
    """Close the stream after the last query, or at the first failure."""

    def __init__(self, total: int, stream: EntryStream) -> None:
        self._remaining = total
        self._stream = stream
        self._closed = False
        self._lock = Lock()

    def done(self, future: Future[int]) -> None:
        error = None if future.cancelled() else future.exception()
        with self._lock:
            if self._closed:
                return
            self._remaining -= 1
            if error is not None:
                self._closed = True
                self._stream.close(error)
            elif self._remaining == 0:
                self._closed = True
                self._stream.close()


__all__ = ["EntryStream", "SearchAggregator", "build_queries"]
