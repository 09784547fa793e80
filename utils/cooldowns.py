from datetime import datetime
from typing import Hashable


class CooldownTracker:
    """In-memory per-key cooldowns. Lost on restart."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._started: dict[Hashable, datetime] = {}

    def remaining(self, key: Hashable, now: datetime = None) -> float:
        """Get remaining cooldown time in seconds"""
        started = self._started.get(key)
        if started is None:
            return 0.0

        now = now or datetime.now()
        remaining = self.seconds - (now - started).total_seconds()
        if remaining <= 0:
            self._started.pop(key, None)
            return 0.0
        return remaining

    def is_active(self, key: Hashable, now: datetime = None) -> bool:
        return self.remaining(key, now) > 0

    def start(self, key: Hashable, now: datetime = None) -> None:
        self._started[key] = now or datetime.now()

    def clear(self, key: Hashable) -> None:
        """Manually clear cooldown for a key (use sparingly)"""
        self._started.pop(key, None)
