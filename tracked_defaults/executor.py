from datetime import datetime
from urllib.parse import SplitResult
from typing import Any

from tracked_defaults.datastore import DataStore, ValueType
from tracked_defaults.parser import CommandParser
from tracked_defaults.tracking import TrackedStore
from tracked_defaults.exceptions import ParserError

import logging

logger = logging.getLogger(__name__)

_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}

class Executor:
    def __init__(self, db: DataStore, parser: CommandParser, tracked: TrackedStore):
        self._dispatch = {
            "tset": self._tracked_set,
            "get": db.get,
            "tracked": tracked.is_tracked,
            "timestamp": tracked.timestamp,
            "tdel": self._remove_tracked_value,
            "untrack": self._remove_tracking,
            "keys": self._list_keys,
            "flushdb": self._flushdb,
        }
        self._db = db
        self._parser = parser
        self._tracked = tracked

    """
    -----------------------COMMANDS-------------------------
    """
    def _tracked_set(self, key: str, type_name: str, raw: str) -> datetime:
        if self._tracked.is_reserved(key):
            raise ParserError(f"Key '{key}' is in the reserved timestamp namespace '{self._tracked.prefix}'")
        try:
            value_type = ValueType(type_name.lower())
        except ValueError:
            names = ", ".join(t.value for t in ValueType)
            raise ParserError(f"Unknown value type: {type_name} (expected one of {names})")
        value = self._coerce(value_type, raw)
        return self._tracked.set_tracked(key, value, value_type=value_type)

    def _coerce(self, value_type: ValueType, raw: str) -> Any:
        if value_type is ValueType.BOOL:
            if raw.lower() in _TRUE:
                return True
            if raw.lower() in _FALSE:
                return False
            raise ParserError(f"Invalid bool value: {raw}")
        try:
            if value_type is ValueType.INTEGER:
                return int(raw)
            if value_type in (ValueType.FLOAT, ValueType.DOUBLE):
                return float(raw)
        except ValueError:
            raise ParserError(f"Invalid {value_type.value} value: {raw}")
        return raw

    def _remove_tracked_value(self, key: str) -> str:
        self._tracked.remove_tracked_value(key)
        return "OK"

    def _remove_tracking(self, key: str) -> str:
        self._tracked.remove_tracking(key)
        return "OK"

    def _list_keys(self) -> str:
        keys = [k for k in self._db.keys() if not self._tracked.is_reserved(k)]
        return " ".join(keys) if keys else "(empty)"

    def _flushdb(self) -> str:
        self._db.clear()
        return "OK"

    """
    -----------------------REPLIES-------------------------
    """
    def _format(self, result: Any) -> str:
        if result is None:
            return "(nil)"
        if isinstance(result, (int, bool)):
            return f"(integer) {int(result)}"
        if isinstance(result, datetime):
            return result.isoformat()
        if isinstance(result, SplitResult):
            return result.geturl()
        return str(result)

    def execute(self, command_str: str) -> str:
        """
        Execute a command on the database
        """
        logger.debug(f"Command string: {command_str}")
        try:
            cmd, args = self._parser.parse(command_str)
            logger.debug(f"Parsed command: {cmd} with args: {args}")
            result = self._dispatch[cmd](*args)
            logger.debug(f"Executed command: {cmd} with args: {args}, result: {result}")
            return self._format(result)
        except Exception as e:
            logger.debug(f"Command failed: {command_str!r}: {e}")
            return f"ERROR: {str(e)}"
