"""JSON and DOM parsing helpers for search results and word pages."""

from __future__ import annotations

import json
from urllib.parse import unquote_plus

from pydantic import ValidationError
from selectolax.parser import HTMLParser, Node

from ..errors import MalformedResponseError
from ..models import Audio, Collocation, Entry, SearchResponse

STATUS_SELECTOR = ".concept_light-status"
COLLOCATION_PREFIX = "/search/"
COLLOCATION_SUFFIX = "#words"


class Parser:
    """Turn raw upstream bytes into domain records."""

    def parse_search(self, payload: bytes, address: str = "") -> list[Entry]:
        try:
            data = json.loads(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedResponseError(f"Undecodable search response: {address}") from exc
        try:
            response = SearchResponse.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(f"Unexpected search schema: {address}: {exc}") from exc
        if response.meta.status != 200:
            raise MalformedResponseError(f"Search status {response.meta.status}: {address}")
        return response.data

    def parse_word_page(
        self, payload: bytes, address: str = ""
    ) -> tuple[dict[str, Audio], list[Collocation]]:
        """Extract the audio sources and collocation links of a word page."""
        try:
            tree = HTMLParser(payload.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise MalformedResponseError(f"Undecodable word page: {address}") from exc

        audios: dict[str, Audio] = {}
        collocations: list[Collocation] = []
        for status in tree.css(STATUS_SELECTOR):
            for child in status.iter():
                if child.tag == "audio":
                    audios = self._audios(child)
                elif child.tag == "div":
                    collocations = self._collocations(child)
        return audios, collocations

    @staticmethod
    def _audios(node: Node) -> dict[str, Audio]:
        audios: dict[str, Audio] = {}
        for source in node.iter():
            if source.tag != "source":
                continue
            src = source.attributes.get("src") or ""
            mime = source.attributes.get("type") or ""
            audios[mime] = Audio(src=src)
        return audios

    @staticmethod
    def _collocations(node: Node) -> list[Collocation]:
        listing = next((child for child in node.iter() if child.tag in ("ul", "ol")), None)
        if listing is None:
            return []
        collocations: list[Collocation] = []
        for item in listing.iter():
            if item.tag != "li":
                continue
            link = next((child for child in item.iter() if child.tag == "a"), None)
            if link is None:
                collocations.append(Collocation(raw=item.text(strip=True)))
                continue
            collocations.append(
                Collocation(
                    raw=link.text(deep=False, strip=True),
                    src=link.attributes.get("href") or "",
                )
            )
        return collocations


def decode_collocation_src(src: str) -> str:
    """Literal search string behind a collocation link such as ``/search/%E9%A0%AD#words``."""
    search = src[len(COLLOCATION_PREFIX):] if src.startswith(COLLOCATION_PREFIX) else src
    search = unquote_plus(search)
    if search.endswith(COLLOCATION_SUFFIX):
        search = search[: -len(COLLOCATION_SUFFIX)]
    return search.strip()


__all__ = ["Parser", "decode_collocation_src"]
