"""Injectable time source.

Components with time-dependent behavior (cache expiry) depend on the Clock
protocol rather than calling ``datetime.now`` directly, so tests can move
time forward deterministically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)
