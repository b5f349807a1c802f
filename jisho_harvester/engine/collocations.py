"""Resolution of collocation links into nested entries."""

from __future__ import annotations

import structlog

from ..models import Collocation
from .audio import AudioFetcher
from .parser import decode_collocation_src
from .probe import DetailProbe
from .search import SearchAggregator


class CollocationResolver:
    """Look up a collocation's own entry and word page.

    The nested entry is the first hit of a search for the decoded link text.
    Its word page is probed like any entry; failing that, the literal search
    text itself is tried as the page identifier.
    """

    def __init__(
        self,
        search: SearchAggregator,
        probe: DetailProbe,
        audio_fetcher: AudioFetcher,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.search = search
        self.probe = probe
        self.audio_fetcher = audio_fetcher
        self.logger = logger or structlog.get_logger("jisho_harvester.collocations")

    def resolve(self, collocation: Collocation) -> bool:
        literal = decode_collocation_src(collocation.src)
        if not literal:
            self.logger.warning("collocation_unresolved", raw=collocation.raw, reason="empty_link")
            return False

        results = self.search.search(literal)
        if not results:
            self.logger.warning("collocation_unresolved", raw=collocation.raw, reason="no_search_result")
            return False
        nested = results[0]
        collocation.word = nested

        match = self.probe.find(nested)
        if not match.found:
            match = self.probe.probe(literal)
            if not match.found:
                self.logger.warning("collocation_unresolved", raw=collocation.raw, reason="no_word_page")
                return False

        nested.jisho_word_page = match.identifier
        nested.audios = match.audios
        if nested.audios:
            self.audio_fetcher.download_all(nested.audios)
        return True


__all__ = ["CollocationResolver"]
