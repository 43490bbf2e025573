from typing import Dict, Any, Optional, Tuple, List, Union, Protocol
from threading import Lock
from enum import Enum
from urllib.parse import SplitResult, ParseResult, urlsplit
import struct
import logging

from tracked_defaults.exceptions import WrongTypeError

logger = logging.getLogger(__name__)

URLLike = Union[str, SplitResult, ParseResult]

class ValueType(Enum):
    BOOL = "bool"
    INTEGER = "int"
    FLOAT = "float"     # 32-bit
    DOUBLE = "double"   # 64-bit
    URL = "url"
    OBJECT = "object"


class KeyValueStore(Protocol):
    """
    Primitives a TrackedStore needs from the defaults database it wraps
    """
    def get(self, key: str) -> Optional[Any]: ...
    def get_bool(self, key: str) -> bool: ...
    def get_integer(self, key: str) -> int: ...
    def get_float(self, key: str) -> float: ...
    def get_double(self, key: str) -> float: ...
    def get_url(self, key: str) -> Optional[SplitResult]: ...
    def get_object(self, key: str) -> Optional[Any]: ...
    def set_bool(self, key: str, value: bool) -> None: ...
    def set_integer(self, key: str, value: int) -> None: ...
    def set_float(self, key: str, value: float) -> None: ...
    def set_double(self, key: str, value: float) -> None: ...
    def set_url(self, key: str, value: URLLike) -> None: ...
    def set_object(self, key: str, value: Any) -> None: ...
    def remove(self, key: str) -> None: ...


class DataStore:
    """
    A dictionary of key-(value type, value) pairs
    """
    def __init__(self):
        self._store: Dict[str, Tuple[ValueType, Any]] = {}
        self._lock = Lock()

    """
    -----------------------HELPERS-------------------------
    """
    def _exists(self, key: str) -> bool:
        return key in self._store

    def _write(self, key: str, value_type: ValueType, value: Any) -> None:
        with self._lock:
            logger.debug(f"Setting {value_type.value} value for key '{key}'")
            self._store[key] = (value_type, value)

    def _read(self, key: str, *accepted: ValueType) -> Optional[Any]:
        """
        - Return the value at key, None if the key does not exist
        - Raise WrongTypeError if the key holds a value of another slot
        """
        with self._lock:
            logger.debug(f"Getting value for key '{key}'")
            if not self._exists(key):
                return None
            value_type, value = self._store[key]
            if accepted and value_type not in accepted:
                raise WrongTypeError()
            return value

    """
    -----------------------TYPED SETTERS-------------------------
    """
    def set_bool(self, key: str, value: bool) -> None:
        if not isinstance(value, bool):
            raise WrongTypeError(f"Expected a bool for key '{key}', got {type(value).__name__}")
        self._write(key, ValueType.BOOL, value)

    def set_integer(self, key: str, value: int) -> None:
        # bool is an int subclass but has its own slot
        if isinstance(value, bool) or not isinstance(value, int):
            raise WrongTypeError(f"Expected an int for key '{key}', got {type(value).__name__}")
        self._write(key, ValueType.INTEGER, value)

    def set_float(self, key: str, value: float) -> None:
        """
        - Store value with 32-bit precision
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise WrongTypeError(f"Expected a float for key '{key}', got {type(value).__name__}")
        single = struct.unpack("f", struct.pack("f", float(value)))[0]
        self._write(key, ValueType.FLOAT, single)

    def set_double(self, key: str, value: float) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise WrongTypeError(f"Expected a double for key '{key}', got {type(value).__name__}")
        self._write(key, ValueType.DOUBLE, float(value))

    def set_url(self, key: str, value: URLLike) -> None:
        """
        - Accept a string or an urllib.parse result, store it as a SplitResult
        - Reject values without a scheme
        """
        if isinstance(value, (SplitResult, ParseResult)):
            value = value.geturl()
        if not isinstance(value, str):
            raise WrongTypeError(f"Expected a URL for key '{key}', got {type(value).__name__}")
        url = urlsplit(value)
        if not url.scheme:
            raise WrongTypeError(f"Value for key '{key}' is not an absolute URL: {value!r}")
        self._write(key, ValueType.URL, url)

    def set_object(self, key: str, value: Any) -> None:
        if value is None:
            raise WrongTypeError(f"Cannot store None for key '{key}', use remove instead")
        self._write(key, ValueType.OBJECT, value)

    """
    -----------------------TYPED GETTERS-------------------------
    Primitive getters return the zero value for an absent key
    """
    def get(self, key: str) -> Optional[Any]:
        return self._read(key)

    def get_bool(self, key: str) -> bool:
        value = self._read(key, ValueType.BOOL)
        return False if value is None else value

    def get_integer(self, key: str) -> int:
        value = self._read(key, ValueType.INTEGER)
        return 0 if value is None else value

    def get_float(self, key: str) -> float:
        value = self._read(key, ValueType.FLOAT, ValueType.DOUBLE, ValueType.INTEGER)
        return 0.0 if value is None else float(value)

    def get_double(self, key: str) -> float:
        value = self._read(key, ValueType.DOUBLE, ValueType.FLOAT, ValueType.INTEGER)
        return 0.0 if value is None else float(value)

    def get_url(self, key: str) -> Optional[SplitResult]:
        return self._read(key, ValueType.URL)

    def get_object(self, key: str) -> Optional[Any]:
        return self._read(key)

    """
    KEY MANAGEMENT
    """
    def contains(self, key: str) -> bool:
        with self._lock:
            return self._exists(key)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._store.keys())

    def remove(self, key: str) -> None:
        """
        - Delete a key from the store, no-op if it does not exist
        """
        with self._lock:
            logger.debug(f"Removing key '{key}'")
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
