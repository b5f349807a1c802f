"""Enrichment of unique entries with word page, audio and collocations."""

from __future__ import annotations

import structlog

from ..models import Entry
from .audio import AudioFetcher
from .collocations import CollocationResolver
from .probe import DetailProbe
from .thread_pool import ThreadPoolManager, join_all


class EntryEnricher:
    """Attach the word page, audio and collocations to one unique entry."""

    def __init__(
        self,
        probe: DetailProbe,
        audio_fetcher: AudioFetcher,
        collocation_resolver: CollocationResolver,
        pools: ThreadPoolManager,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.probe = probe
        self.audio_fetcher = audio_fetcher
        self.collocation_resolver = collocation_resolver
        self.pools = pools
        self.logger = logger or structlog.get_logger("jisho_harvester.enricher")

    def enrich(self, entry: Entry) -> bool:
        """Return ``False`` when no candidate identifier has a word page."""
        match = self.probe.find(entry)
        if not match.found:
            self.logger.warning("word_page_not_found", entry=entry.describe())
            return False

        entry.jisho_word_page = match.identifier
        entry.audios = match.audios
        entry.collocations = match.collocations

        audio_batch = self.audio_fetcher.start(entry.audios)
        executor = self.pools.get("collocation")
        resolutions = [
            executor.submit(self.collocation_resolver.resolve, collocation)
            for collocation in entry.collocations
        ]
        join_all([*audio_batch.futures, *resolutions])
        audio_batch.settle()
        return True


__all__ = ["EntryEnricher"]
