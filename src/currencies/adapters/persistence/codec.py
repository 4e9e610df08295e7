# src/currencies/adapters/persistence/codec.py
"""
Typed Scalar Codec - Conversion Between Persisted Records and Python Values

Every value in a namespace file is stored as a small tagged record
{"t": <kind>, "v": <payload>}. The tag pins the type contract at the
storage boundary so that a read with the wrong kind resolves to the
caller's default instead of being coerced.

Floats are stored as the 8 hex digits of their IEEE-754 binary32 bits,
never as decimal text, so reading them back does not depend on locale or
on float formatting.

Files that USE this module:
- currencies.adapters.persistence.namespaced_store (encode on set, decode on get)
- currencies.application.rate_cache (decode_date, encode_date)

Files that this module USES:
- struct (binary32 packing)
"""
from __future__ import annotations

import logging
import math
import struct
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class ValueKind(str, Enum):
    """Scalar kinds the persistent medium can hold."""
    STRING = "s"
    FLOAT = "f"
    INT = "i"
    BOOL = "b"
    STRING_SET = "ss"


def _pack_float(value: float) -> str:
    if math.isnan(value):
        raise ValueError("NaN cannot be stored")
    try:
        return struct.pack("<f", float(value)).hex()
    except (OverflowError, struct.error) as e:
        raise ValueError(f"Float out of binary32 range: {value!r}") from e


def _unpack_float(payload: str) -> float:
    raw = bytes.fromhex(payload)
    if len(raw) != 4:
        raise ValueError(f"Expected 4 bytes, got {len(raw)}")
    value = struct.unpack("<f", raw)[0]
    if math.isnan(value):
        raise ValueError("Stored float is NaN")
    return value


def to_float32(value: float) -> float:
    """Round a Python float to the nearest binary32 value."""
    return _unpack_float(_pack_float(value))


def encode(kind: ValueKind, value: Any) -> Dict[str, Any]:
    """
    Encode a Python value into a tagged record.

    Args:
        kind: Scalar kind the value is stored as
        value: Value to encode

    Returns:
        JSON-serializable record

    Raises:
        TypeError: If the value does not match the kind
        ValueError: If the value is outside the kind's range
    """
    if kind is ValueKind.STRING:
        if not isinstance(value, str):
            raise TypeError(f"Expected str, got {type(value).__name__}")
        payload: Any = value
    elif kind is ValueKind.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Expected float, got {type(value).__name__}")
        payload = _pack_float(value)
    elif kind is ValueKind.INT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        if not INT32_MIN <= value <= INT32_MAX:
            raise ValueError(f"Int out of 32-bit range: {value}")
        payload = value
    elif kind is ValueKind.BOOL:
        if not isinstance(value, bool):
            raise TypeError(f"Expected bool, got {type(value).__name__}")
        payload = value
    elif kind is ValueKind.STRING_SET:
        if isinstance(value, str):
            raise TypeError("Expected an iterable of str, got str")
        items = list(value)
        if not all(isinstance(item, str) for item in items):
            raise TypeError("Expected an iterable of str")
        payload = sorted(set(items))
    else:
        raise TypeError(f"Unknown value kind: {kind!r}")
    return {"t": kind.value, "v": payload}


def _decode_payload(kind: ValueKind, payload: Any) -> Any:
    if kind is ValueKind.STRING:
        if isinstance(payload, str):
            return payload
    elif kind is ValueKind.FLOAT:
        if isinstance(payload, str):
            return _unpack_float(payload)
    elif kind is ValueKind.INT:
        if isinstance(payload, int) and not isinstance(payload, bool):
            if INT32_MIN <= payload <= INT32_MAX:
                return payload
    elif kind is ValueKind.BOOL:
        if isinstance(payload, bool):
            return payload
    elif kind is ValueKind.STRING_SET:
        if isinstance(payload, list) and all(isinstance(item, str) for item in payload):
            return frozenset(payload)
    raise ValueError(f"Payload does not match kind {kind.name}")


def decode(kind: ValueKind, raw: Any, default: Any = None) -> Any:
    """
    Decode a tagged record, falling back to default.

    Never raises: a missing record, a record of another kind or a
    malformed payload all resolve to default.
    """
    if raw is None:
        return default
    if not isinstance(raw, dict) or raw.get("t") != kind.value or "v" not in raw:
        logger.debug("Record %r is not of kind %s, using default", raw, kind.name)
        return default
    try:
        return _decode_payload(kind, raw["v"])
    except (TypeError, ValueError) as e:
        logger.debug("Failed to decode %s record: %s", kind.name, e)
        return default


def encode_date(day: date) -> str:
    """Format a date the way it is cached (ISO YYYY-MM-DD)."""
    return day.isoformat()


def decode_date(text: Optional[str]) -> Optional[date]:
    """Parse a cached ISO date; malformed or missing text gives None."""
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except (TypeError, ValueError):
        logger.debug("Ignoring malformed cached date: %r", text)
        return None
