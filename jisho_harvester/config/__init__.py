"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    ConcurrencyConfig,
    EndpointConfig,
    HarvestConfig,
    QueryPlanConfig,
    StorageConfig,
)

__all__ = [
    "ConcurrencyConfig",
    "ConfigLocator",
    "ConfigRepository",
    "EndpointConfig",
    "HarvestConfig",
    "QueryPlanConfig",
    "StorageConfig",
]
