from datetime import datetime, timezone
from urllib.parse import urlsplit

from tracked_defaults.datastore import DataStore, ValueType
from tracked_defaults.tracking import TrackedStore, FixedClock, SystemClock, infer_value_type
from tracked_defaults.exceptions import WrongTypeError, ConfigurationError

import pytest

T1 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 1, 1, 12, 5, 0, tzinfo=timezone.utc)

#-------------FIXTURES----------------
@pytest.fixture
def db():
    return DataStore()

@pytest.fixture
def clock():
    return FixedClock(T1)

@pytest.fixture
def tracked(db, clock):
    return TrackedStore(db, clock=clock, prefix="__tracking_timestamp__:")


class FailingValueStore(DataStore):
    """Rejects every bool write"""
    def set_bool(self, key, value):
        raise IOError(f"disk full while writing '{key}'")


class FailingTimestampStore(DataStore):
    """Accepts values, rejects every object write (where timestamps go)"""
    def set_object(self, key, value):
        raise IOError(f"disk full while writing '{key}'")


#-------------LOOKUPS----------------
def test_never_written_key(tracked):
    assert tracked.is_tracked("missing") is False
    assert tracked.timestamp("missing") is None

def test_set_tracked_records_value_and_timestamp(tracked, db):
    assert tracked.set_tracked("launches", 3, T2) == T2
    assert tracked.is_tracked("launches") is True
    assert tracked.timestamp("launches") == T2
    assert db.get_integer("launches") == 3

def test_set_tracked_uses_clock_when_now_missing(tracked, clock):
    clock.advance(30)
    stamp = tracked.set_tracked("sound", True)
    assert stamp == clock.now()
    assert tracked.timestamp("sound") == clock.now()

@pytest.mark.parametrize("value, value_type, read", [
    (False, ValueType.BOOL, lambda db, k: db.get_bool(k)),
    (0, ValueType.INTEGER, lambda db, k: db.get_integer(k)),
    (0.5, ValueType.FLOAT, lambda db, k: db.get_float(k)),
    (2.25, ValueType.DOUBLE, lambda db, k: db.get_double(k)),
    (urlsplit("https://example.com/feed"), ValueType.URL, lambda db, k: db.get_url(k)),
    ({"a": [1, 2]}, ValueType.OBJECT, lambda db, k: db.get_object(k)),
])
def test_set_tracked_every_value_type(tracked, db, value, value_type, read):
    tracked.set_tracked("key", value, T1, value_type=value_type)
    assert tracked.is_tracked("key")
    assert tracked.timestamp("key") == T1
    assert read(db, "key") == value

def test_set_tracked_url_from_string(tracked, db):
    tracked.set_tracked("homepage", "https://example.com", T1, value_type=ValueType.URL)
    assert db.get_url("homepage").geturl() == "https://example.com"

def test_infer_value_type():
    assert infer_value_type(True) is ValueType.BOOL   # bool before int
    assert infer_value_type(7) is ValueType.INTEGER
    assert infer_value_type(1.5) is ValueType.DOUBLE
    assert infer_value_type(urlsplit("http://x.org")) is ValueType.URL
    assert infer_value_type("dark") is ValueType.OBJECT

#-------------SCENARIOS----------------
def test_zero_value_is_distinguishable_from_absence(tracked, db):
    tracked.set_tracked("volume", 0.0, T1)
    assert tracked.is_tracked("volume") is True
    assert db.get_double("volume") == 0.0

    # never set, the store still reports 0.0 by convention
    assert db.get_double("brightness") == 0.0
    assert tracked.is_tracked("brightness") is False

def test_last_write_wins(tracked, db):
    tracked.set_tracked("theme", "dark", T1)
    tracked.set_tracked("theme", "light", T2)
    assert tracked.timestamp("theme") == T2
    assert db.get("theme") == "light"

#-------------REMOVAL----------------
def test_remove_tracked_value_is_idempotent(tracked, db):
    tracked.set_tracked("theme", "dark", T1)
    tracked.remove_tracked_value("theme")
    tracked.remove_tracked_value("theme")   # no error on second call
    assert tracked.is_tracked("theme") is False
    assert db.get("theme") is None

def test_remove_tracked_value_never_written(tracked):
    tracked.remove_tracked_value("ghost")
    assert tracked.is_tracked("ghost") is False

def test_remove_tracking_keeps_value(tracked, db):
    tracked.set_tracked("theme", "dark", T1)
    tracked.remove_tracking("theme")
    tracked.remove_tracking("theme")
    assert tracked.is_tracked("theme") is False
    assert tracked.timestamp("theme") is None
    assert db.get("theme") == "dark"

def test_is_tracked_ignores_value_entry(tracked, db):
    tracked.set_tracked("theme", "dark", T1)
    db.remove("theme")    # value removed behind the tracking layer's back
    assert tracked.is_tracked("theme") is True

#-------------NON-COLLISION----------------
def test_keys_do_not_affect_each_other(tracked, db):
    tracked.set_tracked("a", 1, T1)
    tracked.set_tracked("b", 2, T2)
    tracked.remove_tracked_value("a")

    assert tracked.is_tracked("b") is True
    assert tracked.timestamp("b") == T2
    assert db.get_integer("b") == 2

def test_timestamp_key_is_namespaced(tracked):
    assert tracked.timestamp_key("theme") == "__tracking_timestamp__:theme"
    assert tracked.timestamp_key("a") != tracked.timestamp_key("b")
    assert tracked.timestamp_key("theme") != "theme"
    assert tracked.is_reserved(tracked.timestamp_key("theme"))
    assert not tracked.is_reserved("theme")

def test_only_derived_key_is_written(tracked, db):
    tracked.set_tracked("theme", "dark", T1)
    assert sorted(db.keys()) == ["__tracking_timestamp__:theme", "theme"]

def test_empty_prefix_rejected(db):
    with pytest.raises(ConfigurationError):
        TrackedStore(db, prefix="")

#-------------FAILURES----------------
def test_failed_value_write_skips_timestamp():
    db = FailingValueStore()
    tracked = TrackedStore(db, clock=FixedClock(T1), prefix="__tracking_timestamp__:")
    with pytest.raises(IOError):
        tracked.set_tracked("sound", True, T1)
    assert tracked.is_tracked("sound") is False

def test_wrong_type_value_write_skips_timestamp(tracked, db):
    with pytest.raises(WrongTypeError):
        tracked.set_tracked("count", "three", T1, value_type=ValueType.INTEGER)
    assert tracked.is_tracked("count") is False
    assert db.get("count") is None

def test_failed_timestamp_write_keeps_value():
    db = FailingTimestampStore()
    tracked = TrackedStore(db, clock=FixedClock(T1), prefix="__tracking_timestamp__:")
    with pytest.raises(IOError):
        tracked.set_tracked("launches", 4, T1)
    assert db.get_integer("launches") == 4
    assert tracked.is_tracked("launches") is False

#-------------CLOCKS----------------
def test_system_clock_is_timezone_aware():
    now = SystemClock().now()
    assert now.tzinfo is not None

def test_fixed_clock_set_and_advance():
    clock = FixedClock(T1)
    assert clock.advance(300) == T2
    clock.set(T1)
    assert clock.now() == T1

def test_is_tracked_reports_any_timestamp_entry(tracked, db):
    db.set_object(tracked.timestamp_key("legacy"), "2011-09-24")   # written by an older client
    assert tracked.is_tracked("legacy") is True
    assert tracked.timestamp("legacy") is None
