"""
Per-key write tracking over a defaults database.

Every value written through `TrackedStore.set_tracked` is paired with a
timestamp stored under a derived key, `prefix + key`. The prefix is a
reserved namespace: callers must never write keys starting with it directly.
The value and its timestamp are two independent writes (value first) with
no atomicity across the pair.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol
from urllib.parse import SplitResult, ParseResult
import logging

from tracked_defaults import config
from tracked_defaults.datastore import KeyValueStore, ValueType
from tracked_defaults.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Clock frozen at a given instant, moved only by `set` / `advance`
    """
    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, seconds: float) -> datetime:
        self._instant += timedelta(seconds=seconds)
        return self._instant


def infer_value_type(value: Any) -> ValueType:
    """
    Map a python value onto the store slot it is written to.
    32-bit FLOAT is never inferred, python floats are doubles.
    """
    if isinstance(value, bool):
        return ValueType.BOOL
    if isinstance(value, int):
        return ValueType.INTEGER
    if isinstance(value, float):
        return ValueType.DOUBLE
    if isinstance(value, (SplitResult, ParseResult)):
        return ValueType.URL
    return ValueType.OBJECT


class TrackedStore:
    """
    Input:
        - `store`: the underlying defaults database (get/set/remove primitives).
        - `clock`: time source used when a write is not given `now` explicitly.
        - `prefix`: reserved namespace for timestamp keys.
    """
    def __init__(self, store: KeyValueStore, clock: Optional[Clock] = None, prefix: Optional[str] = None):
        if prefix is None:
            prefix = config.TRACKING_KEY_PREFIX
        if not prefix:
            raise ConfigurationError("Timestamp key prefix must not be empty")
        self._store = store
        self._clock = clock or SystemClock()
        self._prefix = prefix

        self._setters = {
            ValueType.BOOL: store.set_bool,
            ValueType.INTEGER: store.set_integer,
            ValueType.FLOAT: store.set_float,
            ValueType.DOUBLE: store.set_double,
            ValueType.URL: store.set_url,
            ValueType.OBJECT: store.set_object,
        }

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def prefix(self) -> str:
        return self._prefix

    def timestamp_key(self, key: str) -> str:
        return self._prefix + key

    def is_reserved(self, key: str) -> bool:
        return key.startswith(self._prefix)

    """
    -----------------------LOOKUPS-------------------------
    """
    def is_tracked(self, key: str) -> bool:
        """
        - True if an entry exists under the timestamp key
        - The value entry is not inspected
        """
        return self._store.get(self.timestamp_key(key)) is not None

    def timestamp(self, key: str) -> Optional[datetime]:
        """
        - The stored timestamp, None if absent or not a datetime
        """
        stamp = self._store.get_object(self.timestamp_key(key))
        if not isinstance(stamp, datetime):
            return None
        return stamp

    """
    -----------------------WRITES-------------------------
    """
    def set_tracked(self, key: str, value: Any, now: Optional[datetime] = None,
                    value_type: Optional[ValueType] = None) -> datetime:
        """
        - Write value through the typed setter of its slot, then the timestamp
        - A failing value write propagates before the timestamp is touched
        - Return the timestamp written
        """
        if value_type is None:
            value_type = infer_value_type(value)
        if now is None:
            now = self._clock.now()

        logger.debug(f"Tracked set of {value_type.value} value for key '{key}' at {now.isoformat()}")
        self._setters[value_type](key, value)
        self._store.set_object(self.timestamp_key(key), now)
        return now

    def remove_tracked_value(self, key: str) -> None:
        """
        - Remove the value at key and its timestamp
        - Removing an untracked or absent key is a no-op
        """
        logger.debug(f"Removing tracked value for key '{key}'")
        self._store.remove(key)
        self._store.remove(self.timestamp_key(key))

    def remove_tracking(self, key: str) -> None:
        """
        - Remove only the timestamp, the value stays in the store
        """
        logger.debug(f"Removing tracking for key '{key}'")
        self._store.remove(self.timestamp_key(key))
