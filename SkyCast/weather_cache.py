"""Time-bounded cache of weather records keyed by location."""
import logging
import time
from typing import Callable, Dict, Optional
from weather_data import WeatherRecord


DEFAULT_TTL_SECONDS = 600  # 10 minutes


def cache_key(location: str) -> str:
    """Normalize a location query so "  Paris " and "paris" share an entry."""
    return location.strip().lower()


def now_ms(clock: Callable[[], float] = time.time) -> int:
    """Current epoch time in milliseconds from a seconds-based clock."""
    return int(clock() * 1000)


class WeatherFetchCache:
    """
    In-memory cache of weather records.

    Entries are valid for ``ttl_seconds`` from the record's fetch time.
    Expired entries are dropped when looked up; there is no background sweep.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: How long a record stays valid
            clock: Returns the current epoch time in seconds (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, WeatherRecord] = {}

    def get(self, key: str) -> Optional[WeatherRecord]:
        """Return the live record for a key, or None if absent or expired."""
        record = self._entries.get(key)
        if record is None:
            return None

        cache_age = record.age_seconds(now_ms(self.clock))
        if cache_age < self.ttl_seconds:
            logging.debug(f"Using cached weather for '{key}' (age: {cache_age:.1f}s, TTL: {self.ttl_seconds}s)")
            return record

        logging.info(f"Cache expired for '{key}' (age: {cache_age:.1f}s > TTL: {self.ttl_seconds}s)")
        del self._entries[key]
        return None

    def put(self, key: str, record: WeatherRecord) -> None:
        """Store a record, replacing any existing entry for the key."""
        self._entries[key] = record

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
