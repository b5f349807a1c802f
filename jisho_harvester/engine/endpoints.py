"""Address builders for the dictionary service."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, urlencode, urljoin

from ..config import EndpointConfig


@dataclass(frozen=True, slots=True)
class Endpoints:
    api_base: str
    site_base: str

    @classmethod
    def from_config(cls, config: EndpointConfig) -> "Endpoints":
        return cls(api_base=config.api_base, site_base=config.site_base)

    def search(self, keyword: str, page: int = 1) -> str:
        query = urlencode({"keyword": keyword, "page": page}, quote_via=quote)
        return f"{self.api_base}/search/words?{query}"

    def word_page(self, identifier: str) -> str:
        return f"{self.site_base}/word/{quote(identifier, safe='')}"

    def asset(self, src: str) -> str:
        """Absolute address of an asset referenced from a word page."""
        return urljoin(f"{self.site_base}/", src)


__all__ = ["Endpoints"]
