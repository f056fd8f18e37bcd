"""Tests for the injected state objects."""

from hybridchat.service.state import ResponseCache, VoiceUsage


class TestVoiceUsage:
    """Tests for VoiceUsage."""

    def test_get_increment_reset(self):
        """Test the basic counter operations."""
        usage = VoiceUsage(monthly_limit=1000)

        assert usage.get() == 0
        assert usage.increment(250) == 250
        assert usage.get() == 250
        usage.reset()
        assert usage.get() == 0

    def test_would_exceed_is_strict(self):
        """Test that a request exactly filling the budget is allowed."""
        usage = VoiceUsage(monthly_limit=1000, used=900)

        assert not usage.would_exceed(100)
        assert usage.would_exceed(101)

    def test_snapshot(self):
        """Test the status payload."""
        usage = VoiceUsage(monthly_limit=100_000, used=99_900)

        assert usage.snapshot() == {
            "used": 99_900,
            "limit": 100_000,
            "remaining": 100,
            "percentUsed": 99.9,
        }

    def test_remaining_never_negative(self):
        """Test that overshooting the budget reports zero remaining."""
        assert VoiceUsage(monthly_limit=10, used=50).remaining() == 0

    def test_instances_are_independent(self):
        """Test that counters do not share state."""
        first = VoiceUsage(monthly_limit=10)
        second = VoiceUsage(monthly_limit=10)
        first.increment(5)

        assert second.get() == 0


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestResponseCache:
    """Tests for ResponseCache."""

    def test_put_and_get(self):
        """Test a cache round trip."""
        cache = ResponseCache(ttl_seconds=60)
        cache.put("text", "What is CF?", "answer")

        assert cache.get("text", "What is CF?") == "answer"
        assert cache.get("fast", "What is CF?") is None

    def test_key_normalizes_case_and_spacing(self):
        """Test that trivially different phrasings share an entry."""
        cache = ResponseCache(ttl_seconds=60)
        cache.put("text", "What  is CF?", "answer")

        assert cache.get("text", "what is cf?") == "answer"

    def test_entries_expire(self):
        """Test that entries are dropped after the TTL."""
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=10, clock=clock)
        cache.put("text", "q", "a")

        clock.now = 9.9
        assert cache.get("text", "q") == "a"
        clock.now = 10.0
        assert cache.get("text", "q") is None
        assert len(cache) == 0

    def test_oldest_entries_evicted(self):
        """Test that the cache stays within max_entries."""
        cache = ResponseCache(ttl_seconds=60, max_entries=2)
        cache.put("text", "one", 1)
        cache.put("text", "two", 2)
        cache.put("text", "three", 3)

        assert len(cache) == 2
        assert cache.get("text", "one") is None
        assert cache.get("text", "three") == 3

    def test_clear(self):
        """Test that clear() empties the cache."""
        cache = ResponseCache()
        cache.put("text", "q", "a")
        cache.clear()

        assert len(cache) == 0
