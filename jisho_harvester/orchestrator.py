"""Harvest orchestrator wiring search, dedup, enrichment, collocations and audio."""

from __future__ import annotations

import json
from concurrent.futures import Future
from pathlib import Path
from threading import Event

import httpx
import structlog

from .config import HarvestConfig, StorageConfig
from .engine import (
    AudioFetcher,
    CollocationResolver,
    Deduplicator,
    DetailProbe,
    Endpoints,
    EntryEnricher,
    EntryStream,
    FetchCache,
    Parser,
    SearchAggregator,
    ThreadPoolManager,
    build_queries,
    join_all,
)
from .models import Entry, Query
from .ui import ProgressReporter


class HarvestOrchestrator:
    """Central coordinator of one harvest run.

    Every query page is fetched concurrently into an entry stream; this
    thread consumes the stream, admits each canonical key once, and hands
    admitted entries to the entry pool. The run ends when the stream is
    closed and every enrichment task has finished. The first fatal error
    cancels pending work and propagates to the caller.
    """

    def __init__(
        self,
        config: HarvestConfig,
        storage: StorageConfig | None = None,
        client: httpx.Client | None = None,
        progress: ProgressReporter | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.storage = storage or config.storage
        self.client = client
        self.progress = progress or ProgressReporter(enabled=False)
        self.logger = logger or structlog.get_logger("jisho_harvester").bind(component="orchestrator")
        # set by the first failed enrichment; the consumer stops submitting
        self.aborted = Event()

    def run(self, queries: list[Query] | None = None) -> dict[str, Entry]:
        queries = build_queries(self.config.queries) if queries is None else queries
        concurrency = self.config.concurrency
        pools = ThreadPoolManager(
            workers={
                "query": concurrency.query_workers,
                "entry": concurrency.entry_workers,
                "collocation": concurrency.collocation_workers,
                "audio": concurrency.audio_workers,
            }
        )
        fetch_cache = FetchCache(
            Path(self.storage.cache_dir),
            permits=concurrency.fetch_permits,
            client=self.client,
            user_agent=self.config.endpoints.user_agent,
            timeout=self.config.endpoints.timeout,
        )
        endpoints = Endpoints.from_config(self.config.endpoints)
        parser = Parser()
        search = SearchAggregator(fetch_cache, endpoints, pools, parser=parser)
        probe = DetailProbe(fetch_cache, endpoints, parser=parser)
        audio = AudioFetcher(fetch_cache, endpoints, pools, Path(self.storage.audio_dir))
        enricher = EntryEnricher(
            probe, audio, CollocationResolver(search, probe, audio), pools
        )
        dedup = Deduplicator()
        stream = EntryStream()
        self.aborted.clear()

        self.logger.info("harvest_started", queries=len(queries))
        self.progress.start()
        try:
            search.publish(queries, stream)
            enrichments: list[Future[bool]] = []
            executor = pools.get("entry")
            for entry in stream:
                if self.aborted.is_set():
                    break
                result = dedup.check_and_store(entry)
                if result.duplicate:
                    self.logger.debug("duplicate_entry", key=result.key)
                    self.progress.duplicate()
                    continue
                future = executor.submit(enricher.enrich, entry)
                future.add_done_callback(lambda done: self._settled(done, stream))
                enrichments.append(future)
                self.progress.queued()
            join_all(enrichments)
        except BaseException:
            pools.shutdown(cancel=True)
            raise
        else:
            pools.shutdown()
        finally:
            self.progress.close()
            fetch_cache.close()

        entries = dedup.entries()
        self.logger.info(
            "harvest_finished",
            entries=len(entries),
            enriched=sum(1 for entry in entries.values() if entry.jisho_word_page),
        )
        return entries

    def _settled(self, future: Future[bool], stream: EntryStream) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self.aborted.set()
            # wake the consumer if it is waiting on an empty stream
            stream.close(error)
            return
        self.progress.advance(resolved=future.result())


def dump_entries(entries: dict[str, Entry]) -> str:
    """Serialise the result set as one JSON object keyed by canonical key."""
    payload = {key: entry.model_dump(mode="json") for key, entry in entries.items()}
    return json.dumps(payload, ensure_ascii=False)


__all__ = ["HarvestOrchestrator", "dump_entries"]
