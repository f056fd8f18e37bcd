"""Process-wide mutable state, held in explicitly injected objects.

Updates are not serialized: under concurrent load the counters are
approximate, which is acceptable at the expected request volume.
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from hybridchat.constants import DEFAULT_RESPONSE_CACHE_SIZE, DEFAULT_RESPONSE_CACHE_TTL


class VoiceUsage:
    """Rolling character count against a monthly TTS budget."""

    def __init__(self, monthly_limit: int, used: int = 0) -> None:
        self.monthly_limit = monthly_limit
        self._used = used

    def get(self) -> int:
        return self._used

    def increment(self, characters: int) -> int:
        self._used += characters
        return self._used

    def reset(self) -> None:
        self._used = 0

    def remaining(self) -> int:
        return max(self.monthly_limit - self._used, 0)

    def would_exceed(self, characters: int) -> bool:
        return self._used + characters > self.monthly_limit

    def snapshot(self) -> dict[str, Any]:
        percent = (self._used / self.monthly_limit * 100) if self.monthly_limit else 100.0
        return {
            "used": self._used,
            "limit": self.monthly_limit,
            "remaining": self.remaining(),
            "percentUsed": round(percent, 1),
        }


class ResponseCache:
    """Expiring map of finished replies, keyed by mode and message text."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_RESPONSE_CACHE_TTL,
        max_entries: int = DEFAULT_RESPONSE_CACHE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[tuple[str, str], tuple[float, Any]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def key(mode: str, message: str) -> tuple[str, str]:
        return mode, " ".join(message.lower().split())

    def get(self, mode: str, message: str) -> Any | None:
        key = self.key(mode, message)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, mode: str, message: str, value: Any) -> None:
        key = self.key(mode, message)
        self._entries[key] = (self._clock() + self.ttl_seconds, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
