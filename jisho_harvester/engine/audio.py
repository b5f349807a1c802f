"""Pronunciation audio downloads."""

from __future__ import annotations

import posixpath
from concurrent.futures import Future
from pathlib import Path
from urllib.parse import urlparse

import structlog

from ..errors import CacheWriteError, MalformedResponseError
from ..infra.storage import atomic_write
from ..models import Audio
from .endpoints import Endpoints
from .fetch_cache import FetchCache
from .thread_pool import ThreadPoolManager, join_all


def audio_filename(src: str) -> str:
    """Final path segment of an audio address."""
    return posixpath.basename(urlparse(src).path)


class AudioBatch:
    """Downloads in flight for one owning audio map."""

    def __init__(self, audios: dict[str, Audio], futures: dict[str, Future[bool]]) -> None:
        self.audios = audios
        self._futures = futures

    @property
    def futures(self) -> list[Future[bool]]:
        return list(self._futures.values())

    def settle(self) -> None:
        """Wait for every download and drop the sources that were not found."""
        join_all(self.futures)
        for mime, future in self._futures.items():
            if not future.result():
                self.audios.pop(mime, None)


class AudioFetcher:
    """Fetch audio through the cache and keep a named copy in the assets directory."""

    def __init__(
        self,
        fetch_cache: FetchCache,
        endpoints: Endpoints,
        pools: ThreadPoolManager,
        audio_dir: Path,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetch_cache = fetch_cache
        self.endpoints = endpoints
        self.pools = pools
        self.audio_dir = Path(audio_dir)
        self.logger = logger or structlog.get_logger("jisho_harvester.audio")

    def start(self, audios: dict[str, Audio]) -> AudioBatch:
        executor = self.pools.get("audio")
        futures = {mime: executor.submit(self._download, audio) for mime, audio in audios.items()}
        return AudioBatch(audios, futures)

    def download_all(self, audios: dict[str, Audio]) -> None:
        self.start(audios).settle()

    def _download(self, audio: Audio) -> bool:
        address = self.endpoints.asset(audio.src)
        result = self.fetch_cache.acquire(address)
        if not result.found:
            self.logger.debug("audio_not_found", src=audio.src)
            return False
        filename = audio_filename(audio.src)
        if not filename:
            raise MalformedResponseError(f"Audio address has no file name: {audio.src}")
        try:
            atomic_write(self.audio_dir, filename, [result.content])
        except OSError as exc:
            raise CacheWriteError(f"Could not write audio {filename}: {exc}") from exc
        audio.filename = filename
        return True


__all__ = ["AudioBatch", "AudioFetcher", "audio_filename"]
