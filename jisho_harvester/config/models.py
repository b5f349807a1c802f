"""Pydantic models describing a harvest run."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

HIRAGANA_INDEX = [
    "あ", "い", "う", "え", "お", "か", "が", "き", "ぎ", "く", "ぐ", "け", "げ", "こ", "ご",
    "さ", "ざ", "し", "じ", "す", "ず", "せ", "ぜ", "そ", "ぞ", "た", "だ", "ち", "ぢ", "つ",
    "づ", "て", "で", "と", "ど", "な", "に", "ぬ", "ね", "の", "は", "ば", "ぱ", "ひ", "び",
    "ぴ", "ふ", "ぶ", "ぷ", "へ", "べ", "ぺ", "ほ", "ぼ", "ぽ", "ま", "み", "む", "め", "も",
    "や", "ゆ", "よ", "ら", "り", "る", "れ", "ろ", "わ", "を", "ん",
]

DIFFICULTY_BANDS = (1, 2, 3, 4, 5)


class EndpointConfig(BaseModel):
    """Upstream addresses and transport settings."""

    api_base: str = "http://jisho.org/api/v1"
    site_base: str = "http://jisho.org"
    user_agent: str | None = None
    # None disables the per-request timeout entirely
    timeout: float | None = None

    @field_validator("api_base", "site_base")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("Endpoint base address cannot be empty")
        return value


class QueryPlanConfig(BaseModel):
    """Fixed enumeration of search pages fetched at startup."""

    band_pages: dict[int, int] = Field(
        default_factory=lambda: {5: 33, 4: 29, 3: 89, 2: 91, 1: 0}
    )
    index_characters: list[str] = Field(default_factory=lambda: list(HIRAGANA_INDEX))
    index_band: int = 1
    index_pages: int = 15

    @field_validator("band_pages", mode="before")
    @classmethod
    def _coerce_bands(cls, value: Any) -> dict[int, int]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("band_pages expects a mapping of band -> page count")
        pages: dict[int, int] = {}
        for band, count in value.items():
            band, count = int(band), int(count)
            if band not in DIFFICULTY_BANDS:
                raise ValueError(f"Unknown difficulty band: {band}")
            if count < 0:
                raise ValueError("Page counts must be non-negative")
            pages[band] = count
        return pages

    @model_validator(mode="after")
    def _validate_index(self) -> "QueryPlanConfig":
        if self.index_band not in DIFFICULTY_BANDS:
            raise ValueError(f"Unknown difficulty band: {self.index_band}")
        if self.index_pages < 0:
            raise ValueError("index_pages must be >= 0")
        self.index_characters = [ch.strip() for ch in self.index_characters if ch.strip()]
        return self


class ConcurrencyConfig(BaseModel):
    """Permit pool size and per-level worker counts."""

    fetch_permits: int = 10
    query_workers: int = 16
    entry_workers: int = 32
    collocation_workers: int = 32
    audio_workers: int = 16

    @model_validator(mode="after")
    def _validate_positive(self) -> "ConcurrencyConfig":
        for name in (
            "fetch_permits",
            "query_workers",
            "entry_workers",
            "collocation_workers",
            "audio_workers",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        return self


class StorageConfig(BaseModel):
    """On-disk locations for the fetch cache and downloaded audio."""

    cache_dir: Path = Field(default=Path("cache"))
    audio_dir: Path = Field(default=Path("audio"))

    @field_validator("cache_dir", "audio_dir", mode="before")
    @classmethod
    def _coerce_dirs(cls, value: Any) -> Path:
        return Path(value)

    def resolved(self, base_dir: Path) -> "StorageConfig":
        """Return a copy whose relative paths are anchored at ``base_dir``."""

        def _anchor(path: Path) -> Path:
            return path if path.is_absolute() else (base_dir / path).resolve()

        return StorageConfig(cache_dir=_anchor(self.cache_dir), audio_dir=_anchor(self.audio_dir))


class HarvestConfig(BaseModel):
    """Top-level configuration for one harvest run."""

    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    queries: QueryPlanConfig = Field(default_factory=QueryPlanConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


__all__ = [
    "ConcurrencyConfig",
    "DIFFICULTY_BANDS",
    "EndpointConfig",
    "HIRAGANA_INDEX",
    "HarvestConfig",
    "QueryPlanConfig",
    "StorageConfig",
]
