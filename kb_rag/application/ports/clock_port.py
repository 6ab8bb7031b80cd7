from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of ingestion and response timestamps, pinned in tests."""

    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware current time (UTC)."""
        ...
