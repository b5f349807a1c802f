"""Fatal error hierarchy raised anywhere in a harvest run."""

from __future__ import annotations


class HarvestError(RuntimeError):
    """Base class for conditions that abort the whole run."""


class FetchError(HarvestError):
    """Transport failure or an HTTP status that is neither ok nor not-found."""

    def __init__(self, address: str, status_code: int | None = None, reason: str = "") -> None:
        self.address = address
        self.status_code = status_code
        detail = f"Status {status_code}" if status_code is not None else (reason or "transport error")
        super().__init__(f"{detail}: {address}")


class CacheWriteError(HarvestError):
    """Persisting a cache record or asset failed."""


class MalformedResponseError(HarvestError):
    """Upstream body could not be decoded as the expected JSON or markup."""


__all__ = ["CacheWriteError", "FetchError", "HarvestError", "MalformedResponseError"]
