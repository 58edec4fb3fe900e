"""
Type name qualification and column name codecs.

Column metadata is keyed by the packed (byte-encoded) column name, so the
editor needs to encode user-supplied names with the family's comparator.
"""

import decimal
import struct
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..exceptions import ValidationError


MARSHAL_NAMESPACE = "org.apache.cassandra.db.marshal."
LOCATOR_NAMESPACE = "org.apache.cassandra.locator."


def qualify_class_name(data_type: Optional[str]) -> Optional[str]:
    """Expand a short marshal type name into its fully qualified form."""
    if data_type is None:
        return None
    if "." in data_type:
        return data_type
    return f"{MARSHAL_NAMESPACE}{data_type}"


def qualify_strategy_class(strategy_class: str) -> str:
    """Expand a short replication strategy name into its fully qualified form."""
    if "." in strategy_class:
        return strategy_class
    return f"{LOCATOR_NAMESPACE}{strategy_class}"


def short_type_name(data_type: str) -> str:
    """Strip the marshal namespace from a type name, keeping any parameters."""
    head, paren, params = data_type.partition("(")
    if head.startswith(MARSHAL_NAMESPACE):
        head = head[len(MARSHAL_NAMESPACE):]
    return head + paren + params


class DataType:
    """Packs and unpacks values for one marshal type."""

    def __init__(
        self,
        name: str,
        packer: Callable[[Any], bytes],
        unpacker: Callable[[bytes], Any],
    ):
        self.name = name
        self._packer = packer
        self._unpacker = unpacker

    def pack(self, value: Any) -> bytes:
        try:
            return self._packer(value)
        except ValidationError:
            raise
        except (TypeError, ValueError, struct.error, AttributeError, decimal.InvalidOperation) as e:
            raise ValidationError(
                f"Cannot pack {value!r} as {self.name}: {e}", cause=e
            ) from e

    def unpack(self, data: bytes) -> Any:
        try:
            return self._unpacker(data)
        except (TypeError, ValueError, struct.error, UnicodeDecodeError) as e:
            raise ValidationError(
                f"Cannot unpack {data!r} as {self.name}: {e}", cause=e
            ) from e

    @property
    def qualified_name(self) -> str:
        return qualify_class_name(self.name)

    def __repr__(self) -> str:
        return f"DataType({self.name})"


def _pack_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def _pack_ascii(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("ascii")


def _pack_utf8(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def _pack_long(value: int) -> bytes:
    return struct.pack(">q", int(value))


def _pack_int32(value: int) -> bytes:
    return struct.pack(">i", int(value))


def _pack_varint(value: int) -> bytes:
    value = int(value)
    # Minimal two's complement, one sign bit included
    magnitude = value if value >= 0 else ~value
    length = magnitude.bit_length() // 8 + 1
    return value.to_bytes(length, "big", signed=True)


def _unpack_varint(data: bytes) -> int:
    return int.from_bytes(data, "big", signed=True)


def _pack_decimal(value: Any) -> bytes:
    # 4-byte scale followed by the unscaled value as a varint
    sign, digits, exponent = decimal.Decimal(str(value)).as_tuple()
    if not isinstance(exponent, int):
        raise ValueError(f"{value!r} is not a finite decimal")
    unscaled = int("".join(map(str, digits)) or "0")
    if sign:
        unscaled = -unscaled
    return struct.pack(">i", -exponent) + _pack_varint(unscaled)


def _unpack_decimal(data: bytes) -> decimal.Decimal:
    (scale,) = struct.unpack(">i", data[:4])
    return decimal.Decimal(_unpack_varint(data[4:])).scaleb(-scale)


def _pack_double(value: float) -> bytes:
    return struct.pack(">d", float(value))


def _pack_float(value: float) -> bytes:
    return struct.pack(">f", float(value))


def _pack_boolean(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def _pack_date(value: Any) -> bytes:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = int(value.timestamp() * 1000)
    return struct.pack(">q", int(value))


def _unpack_date(data: bytes) -> datetime:
    (millis,) = struct.unpack(">q", data)
    return datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)


def _pack_uuid(value: Any) -> bytes:
    if isinstance(value, uuid.UUID):
        return value.bytes
    if isinstance(value, bytes) and len(value) == 16:
        return value
    return uuid.UUID(str(value)).bytes


_SIMPLE_TYPES: Dict[str, Tuple[Callable[[Any], bytes], Callable[[bytes], Any]]] = {
    "BytesType": (_pack_bytes, bytes),
    "AsciiType": (_pack_ascii, lambda b: b.decode("ascii")),
    "UTF8Type": (_pack_utf8, lambda b: b.decode("utf-8")),
    "LongType": (_pack_long, lambda b: struct.unpack(">q", b)[0]),
    "CounterColumnType": (_pack_long, lambda b: struct.unpack(">q", b)[0]),
    "Int32Type": (_pack_int32, lambda b: struct.unpack(">i", b)[0]),
    "IntegerType": (_pack_varint, _unpack_varint),
    "DecimalType": (_pack_decimal, _unpack_decimal),
    "DoubleType": (_pack_double, lambda b: struct.unpack(">d", b)[0]),
    "FloatType": (_pack_float, lambda b: struct.unpack(">f", b)[0]),
    "BooleanType": (_pack_boolean, lambda b: b != b"\x00"),
    "DateType": (_pack_date, _unpack_date),
    "TimestampType": (_pack_date, _unpack_date),
    "UUIDType": (_pack_uuid, lambda b: uuid.UUID(bytes=b)),
    "TimeUUIDType": (_pack_uuid, lambda b: uuid.UUID(bytes=b)),
    "LexicalUUIDType": (_pack_uuid, lambda b: uuid.UUID(bytes=b)),
}


def _split_params(params: str) -> List[str]:
    """Split a comma separated parameter list, respecting nested parentheses."""
    parts = []
    depth = 0
    current = ""
    for char in params:
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current.strip():
        parts.append(current.strip())
    return parts


def _composite_type(name: str, components: List[DataType]) -> DataType:
    def pack(value: Any) -> bytes:
        if not isinstance(value, (tuple, list)):
            value = (value,)
        if len(value) > len(components):
            raise ValidationError(
                f"{name} takes at most {len(components)} components, got {len(value)}"
            )
        packed = b""
        for component, item in zip(components, value):
            data = component.pack(item)
            packed += struct.pack(">H", len(data)) + data + b"\x00"
        return packed

    def unpack(data: bytes) -> tuple:
        items = []
        offset = 0
        for component in components:
            if offset >= len(data):
                break
            (length,) = struct.unpack(">H", data[offset:offset + 2])
            offset += 2
            items.append(component.unpack(data[offset:offset + length]))
            offset += length + 1
        return tuple(items)

    return DataType(name, pack, unpack)


def get_type_for(type_name: Optional[str]) -> DataType:
    """
    Return the codec for a marshal type name.

    Accepts short or fully qualified names, and the parameterised
    ``ReversedType(...)`` and ``CompositeType(...)`` forms. An unset type
    name means raw bytes.
    """
    if type_name is None:
        type_name = "BytesType"

    name = short_type_name(type_name.strip())
    head, _, params = name.partition("(")
    params = params[:-1] if params.endswith(")") else params

    if head == "ReversedType":
        inner = get_type_for(params)
        return DataType(name, inner.pack, inner.unpack)

    if head == "CompositeType":
        components = [get_type_for(param) for param in _split_params(params)]
        if not components:
            raise ValidationError(f"CompositeType needs at least one component: {type_name}")
        return _composite_type(name, components)

    if head not in _SIMPLE_TYPES:
        raise ValidationError(f"Unsupported column name type: {type_name}")

    packer, unpacker = _SIMPLE_TYPES[head]
    return DataType(head, packer, unpacker)
