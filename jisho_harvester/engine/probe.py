"""Word-page probing by identifier."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Audio, Collocation, Entry
from .endpoints import Endpoints
from .fetch_cache import FetchCache
from .parser import Parser


@dataclass
class ProbeResult:
    found: bool
    identifier: str = ""
    audios: dict[str, Audio] = field(default_factory=dict)
    collocations: list[Collocation] = field(default_factory=list)


class DetailProbe:
    """Fetch and parse word pages by identifier."""

    def __init__(
        self,
        fetch_cache: FetchCache,
        endpoints: Endpoints,
        parser: Parser | None = None,
    ) -> None:
        self.fetch_cache = fetch_cache
        self.endpoints = endpoints
        self.parser = parser or Parser()

    def probe(self, identifier: str) -> ProbeResult:
        address = self.endpoints.word_page(identifier)
        result = self.fetch_cache.acquire(address)
        if not result.found:
            return ProbeResult(found=False, identifier=identifier)
        audios, collocations = self.parser.parse_word_page(result.content, address)
        return ProbeResult(
            found=True, identifier=identifier, audios=audios, collocations=collocations
        )

    def find(self, entry: Entry) -> ProbeResult:
        """Probe the entry's written forms and readings in order; first page found wins."""
        for identifier in entry.candidate_identifiers():
            result = self.probe(identifier)
            if result.found:
                return result
        return ProbeResult(found=False)


__all__ = ["DetailProbe", "ProbeResult"]
