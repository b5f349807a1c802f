"""Shared fixtures: an in-memory dictionary service and wired engine components."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterable
from urllib.parse import unquote

import httpx
import pytest

from jisho_harvester.config import (
    ConcurrencyConfig,
    ConfigLocator,
    ConfigRepository,
    HarvestConfig,
    QueryPlanConfig,
    StorageConfig,
)
from jisho_harvester.engine import (
    AudioFetcher,
    CollocationResolver,
    DetailProbe,
    Endpoints,
    EntryEnricher,
    FetchCache,
    SearchAggregator,
    ThreadPoolManager,
)

API_BASE = "http://jisho.test/api/v1"
SITE_BASE = "http://jisho.test"


def _normalise(address: str) -> str:
    return str(httpx.URL(address))


class FakeService:
    """Routes addresses to canned responses and logs every request it serves."""

    def __init__(self) -> None:
        self.endpoints = Endpoints(api_base=API_BASE, site_base=SITE_BASE)
        self._routes: dict[str, tuple[int, bytes]] = {}
        self._lock = Lock()
        self.requests: list[str] = []

    def add(self, address: str, status: int = 200, body: bytes = b"") -> str:
        self._routes[_normalise(address)] = (status, body)
        return address

    def add_search(self, keyword: str, entries: Iterable[dict], page: int = 1) -> str:
        payload = {"meta": {"status": 200}, "data": list(entries)}
        return self.add(
            self.endpoints.search(keyword, page),
            body=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
        )

    def add_word_page(self, identifier: str, status: int = 200, body: bytes | None = None) -> str:
        return self.add(self.endpoints.word_page(identifier), status, body or _word_page_html())

    def handler(self, request: httpx.Request) -> httpx.Response:
        address = str(request.url)
        with self._lock:
            self.requests.append(address)
        status, body = self._routes.get(address, (404, b""))
        return httpx.Response(status, content=body, request=request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def count(self, address: str) -> int:
        with self._lock:
            return Counter(self.requests)[_normalise(address)]

    def word_page_requests(self) -> list[str]:
        """Identifiers of every word page requested, in request order."""
        prefix = f"{SITE_BASE}/word/"
        with self._lock:
            return [unquote(address[len(prefix):]) for address in self.requests if address.startswith(prefix)]


def _entry_record(word: str = "", reading: str = "", *extra_forms: tuple[str, str], **fields: Any) -> dict:
    forms = [{"word": word, "reading": reading}]
    forms.extend({"word": w, "reading": r} for w, r in extra_forms)
    record = {
        "is_common": True,
        "tags": ["jlpt-n5"],
        "japanese": forms,
        "senses": [{"english_definitions": ["sample"], "parts_of_speech": ["Noun"]}],
        "attribution": {"jmdict": True, "jmnedict": False, "dbpedia": False},
    }
    record.update(fields)
    return record


def _word_page_html(
    audios: Iterable[tuple[str, str]] = (),
    collocations: Iterable[tuple[str, str]] = (),
) -> bytes:
    audios = list(audios)
    collocations = list(collocations)
    parts = []
    if audios:
        sources = "".join(f'<source src="{src}" type="{mime}">' for src, mime in audios)
        parts.append(f"<audio>{sources}</audio>")
    if collocations:
        items = "".join(f'<li><a href="{href}">{raw}</a></li>' for raw, href in collocations)
        parts.append(f"<div><ul>{items}</ul></div>")
    return (
        '<html><body><div class="concept_light-wrapper">'
        f'<div class="concept_light-status">{"".join(parts)}</div>'
        "</div></body></html>"
    ).encode("utf-8")


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@dataclass
class Engine:
    fetch_cache: FetchCache
    pools: ThreadPoolManager
    search: SearchAggregator
    probe: DetailProbe
    audio: AudioFetcher
    collocations: CollocationResolver
    enricher: EntryEnricher
    audio_dir: Path


@pytest.fixture
def engine(service: FakeService, tmp_path: Path) -> Iterable[Engine]:
    pools = ThreadPoolManager(default_workers=4)
    fetch_cache = FetchCache(tmp_path / "cache", permits=4, client=service.client())
    search = SearchAggregator(fetch_cache, service.endpoints, pools)
    probe = DetailProbe(fetch_cache, service.endpoints)
    audio = AudioFetcher(fetch_cache, service.endpoints, pools, tmp_path / "audio")
    collocations = CollocationResolver(search, probe, audio)
    enricher = EntryEnricher(probe, audio, collocations, pools)
    yield Engine(
        fetch_cache=fetch_cache,
        pools=pools,
        search=search,
        probe=probe,
        audio=audio,
        collocations=collocations,
        enricher=enricher,
        audio_dir=tmp_path / "audio",
    )
    pools.shutdown()


@pytest.fixture
def harvest_config(tmp_path: Path) -> HarvestConfig:
    return HarvestConfig(
        endpoints={"api_base": API_BASE, "site_base": SITE_BASE},
        queries=QueryPlanConfig(band_pages={}, index_characters=[], index_pages=0),
        concurrency=ConcurrencyConfig(
            fetch_permits=2,
            query_workers=1,
            entry_workers=2,
            collocation_workers=2,
            audio_workers=2,
        ),
        storage=StorageConfig(cache_dir=tmp_path / "cache", audio_dir=tmp_path / "audio"),
    )


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("JISHO_HARVESTER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    yield ConfigRepository(locator)


@pytest.fixture
def entry_record() -> Callable[..., dict]:
    return _entry_record


@pytest.fixture
def word_page_html() -> Callable[..., bytes]:
    return _word_page_html
