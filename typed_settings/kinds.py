from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable
from uuid import UUID

from .errors import SettingsValueError, UnsupportedTypeError

logger = logging.getLogger(__name__)

# Values a backend can hold natively.
NativeValue = bool | int | float | str

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

# 100ns intervals since 0001-01-01T00:00:00.
TICKS_PER_SECOND = 10_000_000
TICKS_PER_MICROSECOND = 10
TICKS_EPOCH = datetime(1, 1, 1)

EMPTY_UUID = UUID(int=0)


class ValueKind(str, Enum):
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"
    STRING = "string"
    DATETIME = "datetime"
    GUID = "guid"


@dataclass(frozen=True)
class Codec:
    """
    Encode/decode pair for one ValueKind.

    - encode(value) validates a Python value and returns its backend-native form.
    - decode(stored, default) turns a backend-native value back into a Python value.
    - is_default(value) tells whether a validated value collapses to "absent".
    """

    kind: ValueKind
    encode: Callable[[Any], NativeValue]
    decode: Callable[[NativeValue, Any], Any]
    is_default: Callable[[Any], bool]


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# bool / str
# ---------------------------------------------------------------------------


def _encode_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise SettingsValueError(f"Expected bool, got {_type_name(value)}")
    return value


def _decode_bool(stored: NativeValue, default: Any) -> bool:
    if not isinstance(stored, bool):
        raise SettingsValueError(f"Stored value of type {_type_name(stored)} is not a bool")
    return stored


def _encode_string(value: Any) -> str:
    if not isinstance(value, str):
        raise SettingsValueError(f"Expected str, got {_type_name(value)}")
    # str subclasses such as str-valued enums are stored as their plain text
    return str.__str__(value)


def _decode_string(stored: NativeValue, default: Any) -> str:
    if not isinstance(stored, str):
        raise SettingsValueError(f"Stored value of type {_type_name(stored)} is not a str")
    return stored


# ---------------------------------------------------------------------------
# integers
# ---------------------------------------------------------------------------


def _int_codec(kind: ValueKind, lo: int, hi: int) -> Codec:
    def encode(value: Any) -> int:
        if not _is_int(value):
            raise SettingsValueError(f"Expected int for {kind.value}, got {_type_name(value)}")
        if not lo <= value <= hi:
            raise SettingsValueError(f"{value} is out of range for {kind.value}")
        return int(value)

    def decode(stored: NativeValue, default: Any) -> int:
        if not _is_int(stored):
            raise SettingsValueError(f"Stored value of type {_type_name(stored)} is not an int")
        if not lo <= stored <= hi:
            raise SettingsValueError(f"Stored value {stored} is out of range for {kind.value}")
        return int(stored)

    return Codec(kind, encode, decode, lambda v: v == 0)


# ---------------------------------------------------------------------------
# floats
# ---------------------------------------------------------------------------


def to_single(value: float) -> float:
    """Round a float to the nearest IEEE-754 single-precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as e:
        raise SettingsValueError(f"{value!r} is out of range for float32") from e


def _encode_float32(value: Any) -> float:
    if not _is_number(value):
        raise SettingsValueError(f"Expected float, got {_type_name(value)}")
    return to_single(float(value))


def _decode_float32(stored: NativeValue, default: Any) -> float:
    if not _is_number(stored):
        raise SettingsValueError(f"Stored value of type {_type_name(stored)} is not a float")
    return to_single(float(stored))


def _encode_float64(value: Any) -> float:
    if not _is_number(value):
        raise SettingsValueError(f"Expected float, got {_type_name(value)}")
    return float(value)


def _decode_float64(stored: NativeValue, default: Any) -> float:
    if not _is_number(stored):
        raise SettingsValueError(f"Stored value of type {_type_name(stored)} is not a float")
    return float(stored)


# ---------------------------------------------------------------------------
# decimal: invariant numeric string
# ---------------------------------------------------------------------------


def _encode_decimal(value: Any) -> str:
    if not isinstance(value, Decimal):
        raise SettingsValueError(f"Expected Decimal, got {_type_name(value)}")
    if not value.is_finite():
        raise SettingsValueError(f"Decimal {value} is not finite")
    # str(Decimal) never consults the locale.
    return str(value)


def _decode_decimal(stored: NativeValue, default: Any) -> Decimal:
    if not isinstance(stored, str):
        raise SettingsValueError(f"Stored value of type {_type_name(stored)} is not a decimal string")
    try:
        parsed = Decimal(stored.strip())
    except InvalidOperation as e:
        raise SettingsValueError(f"Stored value {stored!r} is not a valid decimal") from e
    if not parsed.is_finite():
        raise SettingsValueError(f"Stored value {stored!r} is not a finite decimal")
    return parsed


# ---------------------------------------------------------------------------
# datetime: tick count as a decimal string
# ---------------------------------------------------------------------------


def datetime_to_ticks(value: datetime) -> int:
    if value.tzinfo is not None:
        try:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError as e:
            raise SettingsValueError(f"{value!r} is out of range once converted to UTC") from e
    delta = value - TICKS_EPOCH
    return (delta.days * 86_400 + delta.seconds) * TICKS_PER_SECOND + delta.microseconds * TICKS_PER_MICROSECOND


def ticks_to_datetime(ticks: int) -> datetime:
    return TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def _encode_datetime(value: Any) -> str:
    if not isinstance(value, datetime):
        raise SettingsValueError(f"Expected datetime, got {_type_name(value)}")
    return str(datetime_to_ticks(value))


def _decode_datetime(stored: NativeValue, default: Any) -> Any:
    if not isinstance(stored, str) or not stored.strip():
        return default
    try:
        ticks = int(stored.strip())
        if ticks < 0:
            raise ValueError("negative tick count")
        return ticks_to_datetime(ticks)
    except (ValueError, OverflowError) as e:
        logger.debug("Unreadable datetime ticks %r, using default: %r", stored, e)
        return default


# ---------------------------------------------------------------------------
# guid: canonical hyphenated string
# ---------------------------------------------------------------------------


def _encode_guid(value: Any) -> str:
    if not isinstance(value, UUID):
        raise SettingsValueError(f"Expected UUID, got {_type_name(value)}")
    return str(value)


def _decode_guid(stored: NativeValue, default: Any) -> UUID:
    if not isinstance(stored, str) or not stored.strip():
        return EMPTY_UUID
    try:
        return UUID(stored.strip())
    except ValueError as e:
        logger.debug("Unreadable guid %r, using empty guid: %r", stored, e)
        return EMPTY_UUID


CODECS: dict[ValueKind, Codec] = {
    ValueKind.BOOL: Codec(ValueKind.BOOL, _encode_bool, _decode_bool, lambda v: v is False),
    ValueKind.INT32: _int_codec(ValueKind.INT32, INT32_MIN, INT32_MAX),
    ValueKind.INT64: _int_codec(ValueKind.INT64, INT64_MIN, INT64_MAX),
    ValueKind.FLOAT32: Codec(ValueKind.FLOAT32, _encode_float32, _decode_float32, lambda v: v == 0),
    ValueKind.FLOAT64: Codec(ValueKind.FLOAT64, _encode_float64, _decode_float64, lambda v: v == 0),
    ValueKind.DECIMAL: Codec(ValueKind.DECIMAL, _encode_decimal, _decode_decimal, lambda v: v == 0),
    # The default string is None; "" is a real value.
    ValueKind.STRING: Codec(ValueKind.STRING, _encode_string, _decode_string, lambda v: False),
    ValueKind.DATETIME: Codec(
        ValueKind.DATETIME, _encode_datetime, _decode_datetime, lambda v: datetime_to_ticks(v) == 0
    ),
    ValueKind.GUID: Codec(ValueKind.GUID, _encode_guid, _decode_guid, lambda v: v.int == 0),
}

# Order matters: bool is a subclass of int.
_INFERRED_KINDS: tuple[tuple[type, ValueKind], ...] = (
    (bool, ValueKind.BOOL),
    (int, ValueKind.INT64),
    (float, ValueKind.FLOAT64),
    (Decimal, ValueKind.DECIMAL),
    (str, ValueKind.STRING),
    (datetime, ValueKind.DATETIME),
    (UUID, ValueKind.GUID),
)

_TYPE_KINDS: dict[type, ValueKind] = dict(_INFERRED_KINDS)


def resolve_kind(sample: Any, kind: ValueKind | str | type | None = None) -> ValueKind:
    """
    Pick the ValueKind for a read or write.

    An explicit `kind` wins and may be a ValueKind, its string value, or one of
    the supported Python types. Otherwise the kind is inferred from `sample`.
    """
    if kind is not None:
        if isinstance(kind, ValueKind):
            return kind
        if isinstance(kind, type):
            resolved = _TYPE_KINDS.get(kind)
            if resolved is None:
                raise UnsupportedTypeError(kind.__name__)
            return resolved
        try:
            return ValueKind(kind)
        except ValueError:
            raise UnsupportedTypeError(str(kind)) from None

    for py_type, inferred in _INFERRED_KINDS:
        if isinstance(sample, py_type):
            return inferred
    raise UnsupportedTypeError(_type_name(sample))


def codec_for(kind: ValueKind) -> Codec:
    return CODECS[kind]
