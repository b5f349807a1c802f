"""Domain records: search queries, dictionary entries and their enrichments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True, slots=True)
class Query:
    """One search-result page to fetch.

    ``index`` is the phonetic-index literal for index queries and ``None`` for
    plain difficulty-band queries.
    """

    band: int
    page: int
    index: str | None = None

    @property
    def keyword(self) -> str:
        tag = f"#jlpt-n{self.band}"
        return f"{self.index} {tag}" if self.index else tag


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")


class JapaneseForm(_Record):
    word: str = ""
    reading: str = ""


class SenseLink(_Record):
    text: str = ""
    url: str = ""


class SenseSource(_Record):
    language: str = ""
    word: str = ""


class Sense(_Record):
    english_definitions: list[str] = Field(default_factory=list)
    parts_of_speech: list[str] = Field(default_factory=list)
    links: list[SenseLink] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    restrictions: list[str] = Field(default_factory=list)
    see_also: list[str] = Field(default_factory=list)
    antonyms: list[str] = Field(default_factory=list)
    source: list[SenseSource] = Field(default_factory=list)
    info: list[str | None] = Field(default_factory=list)


class Attribution(_Record):
    jmdict: bool = False
    jmnedict: bool = False
    dbpedia: Any = None


class Audio(_Record):
    src: str
    filename: str = ""


class Collocation(_Record):
    raw: str = ""
    src: str = ""
    word: Entry | None = None


class Entry(_Record):
    """A dictionary item as returned by the search API, plus enrichment."""

    is_common: bool = False
    tags: list[str] = Field(default_factory=list)
    japanese: list[JapaneseForm] = Field(default_factory=list)
    senses: list[Sense] = Field(default_factory=list)
    attribution: Attribution = Field(default_factory=Attribution)
    collocations: list[Collocation] = Field(default_factory=list)
    # keyed by MIME type of the audio source
    audios: dict[str, Audio] = Field(default_factory=dict)
    jisho_word_page: str = ""

    @property
    def canonical_key(self) -> str:
        """First written form, or first reading when the item has no written form."""
        if not self.japanese:
            return ""
        first = self.japanese[0]
        return first.word or first.reading

    def candidate_identifiers(self) -> list[str]:
        """Detail-page identifiers to probe, in order, without blanks or repeats."""
        candidates: list[str] = []
        for form in self.japanese:
            for value in (form.word, form.reading):
                if value and value not in candidates:
                    candidates.append(value)
        return candidates

    def describe(self) -> str:
        if not self.japanese:
            return "<empty>"
        first = self.japanese[0]
        return f"{first.word} - {first.reading}"


class SearchMeta(_Record):
    status: int = 200


class SearchResponse(_Record):
    meta: SearchMeta = Field(default_factory=SearchMeta)
    data: list[Entry] = Field(default_factory=list)


Collocation.model_rebuild()


__all__ = [
    "Attribution",
    "Audio",
    "Collocation",
    "Entry",
    "JapaneseForm",
    "Query",
    "SearchMeta",
    "SearchResponse",
    "Sense",
    "SenseLink",
    "SenseSource",
]
