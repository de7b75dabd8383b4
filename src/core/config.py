"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

SOLD_RETENTION_HOURS = 24
RETIRED_MEMORY_DAYS = 14


@dataclass(frozen=True)
class ScanConfig:
    """Windowed historical scan settings."""

    window_days: int = 14
    cache_ttl_seconds: float = 300.0
    per_group_limit: int = 1000
    message_cap: int = 5000


@dataclass(frozen=True)
class LifecycleConfig:
    """Listing lifecycle settings."""

    sold_retention_hours: float = SOLD_RETENTION_HOURS
    # How long an expired sold listing stays blocked from re-detection. Must
    # cover the scan window, or a rescan of old history revives it.
    retired_memory_days: float = RETIRED_MEMORY_DAYS

    @property
    def sold_retention_seconds(self) -> float:
        return self.sold_retention_hours * 60 * 60

    @property
    def retired_memory_seconds(self) -> float:
        return self.retired_memory_days * 24 * 60 * 60
