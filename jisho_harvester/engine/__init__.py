"""Engine components: fetch cache → search → dedup → enrich → collocations/audio."""

from .audio import AudioFetcher
from .collocations import CollocationResolver
from .dedup import Deduplicator
from .endpoints import Endpoints
from .enricher import EntryEnricher
from .fetch_cache import FetchCache, FetchOutcome, FetchResult
from .parser import Parser, decode_collocation_src
from .probe import DetailProbe, ProbeResult
from .search import EntryStream, SearchAggregator, build_queries
from .thread_pool import ThreadPoolManager, join_all

__all__ = [
    "AudioFetcher",
    "CollocationResolver",
    "Deduplicator",
    "DetailProbe",
    "Endpoints",
    "EntryEnricher",
    "EntryStream",
    "FetchCache",
    "FetchOutcome",
    "FetchResult",
    "Parser",
    "ProbeResult",
    "SearchAggregator",
    "ThreadPoolManager",
    "build_queries",
    "decode_collocation_src",
    "join_all",
]
