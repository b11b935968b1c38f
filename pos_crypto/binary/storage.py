"""
Storage codec: versioned little-endian encoding for persisted values

Independent of the wire codec. Layout:

    unit        nothing
    bool        1 byte, 0x00 or 0x01
    WordN/IntN  N/8 bytes little-endian
    int         zig-zag LEB128 varint (minimal length)
    bytes/str   LEB128 length + raw bytes (str is UTF-8)
    List[X]     LEB128 count + items
    Tuple[...]  items back to back
    Optional[X] 0x00, or 0x01 + value
    records     4-byte little-endian version + the class's to_storage() body

Record classes declare ``storage_version`` and receive the version they were
stored under in ``from_storage(reader, version, *type_args)``, so a newer
release can keep reading older layouts.
"""

import logging
import struct
from typing import Any, List

from ..errors import MalformedEncoding
from .descriptors import (
    ANY,
    BOOL,
    BYTES,
    FIXED,
    INTEGER,
    LIST,
    OPTIONAL,
    RECORD,
    TEXT,
    TUPLE,
    UNIT,
    describe,
    describe_value,
    encodes_empty,
    item_type,
)

logger = logging.getLogger(__name__)

_VERSION = struct.Struct("<I")

# Cap for lists whose items occupy no bytes (e.g. List[None])
MAX_EMPTY_ITEMS = 1 << 16

# Longest accepted varint, in bytes
MAX_VARINT_BYTES = 1 << 12


def check_version(cls: type, version: int, supported=(1,)) -> None:
    """Raise MalformedEncoding unless ``version`` is one cls knows how to read."""
    if version not in supported:
        raise MalformedEncoding(
            f"unsupported {cls.__name__} storage version {version}",
            {"supported": list(supported)},
        )


class StorageWriter:
    """Accumulates a storage encoding."""

    def __init__(self) -> None:
        self._parts: List[bytes] = []

    def getvalue(self) -> bytes:
        return b"".join(self._parts)

    def put_raw(self, data: bytes) -> None:
        self._parts.append(bytes(data))

    def put_varint(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"varint must be non-negative, got {value}")
        out = bytearray()
        while True:
            byte = value & 0x7F
            value >>= 7
            if value:
                out.append(byte | 0x80)
            else:
                out.append(byte)
                break
        self._parts.append(bytes(out))

    def put_signed(self, value: int) -> None:
        # zig-zag: 0, -1, 1, -2, 2 ... -> 0, 1, 2, 3, 4 ...
        self.put_varint(value * 2 if value >= 0 else -value * 2 - 1)

    def put_bytes(self, data: bytes) -> None:
        self.put_varint(len(data))
        self.put_raw(data)

    def put_version(self, version: int) -> None:
        self._parts.append(_VERSION.pack(version))

    def put_value(self, value: Any, tp: Any = ANY) -> None:
        kind, params = describe_value(value) if tp is ANY else describe(tp)

        if kind == UNIT:
            if value is not None:
                raise TypeError(f"unit descriptor needs None, got {value!r}")
        elif kind == BOOL:
            if not isinstance(value, bool):
                raise TypeError(f"bool descriptor needs a bool, got {value!r}")
            self._parts.append(b"\x01" if value else b"\x00")
        elif kind == FIXED:
            self._parts.append(params[0](value).to_bytes_fixed("little"))
        elif kind == INTEGER:
            self.put_signed(int(value))
        elif kind == BYTES:
            self.put_bytes(bytes(value))
        elif kind == TEXT:
            self.put_bytes(value.encode("utf-8"))
        elif kind == LIST:
            items = list(value)
            self.put_varint(len(items))
            for item in items:
                self.put_value(item, item_type(item, params[0]))
        elif kind == TUPLE:
            item_types = params if params is not None else (ANY,) * len(value)
            if len(item_types) != len(value):
                raise TypeError(f"tuple arity mismatch: {len(value)} values for {len(item_types)} types")
            for item, item_tp in zip(value, item_types):
                self.put_value(item, item_type(item, item_tp))
        elif kind == OPTIONAL:
            if value is None:
                self._parts.append(b"\x00")
            else:
                self._parts.append(b"\x01")
                self.put_value(value, params[0])
        elif kind == RECORD:
            cls, type_args = params
            if not isinstance(value, cls):
                raise TypeError(f"expected {cls.__name__}, got {type(value).__name__}")
            if not hasattr(value, "to_storage"):
                raise TypeError(f"{cls.__name__} has no storage encoding")
            self.put_version(cls.storage_version)
            value.to_storage(self, *type_args)


class StorageReader:
    """Bounds-checked cursor over a storage encoding."""

    def __init__(self, data: bytes) -> None:
        self._view = memoryview(bytes(data))
        self._offset = 0

    def remaining(self) -> int:
        return len(self._view) - self._offset

    def get_raw(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._view):
            raise MalformedEncoding(
                f"unexpected end of stored value: wanted {size} bytes, have {self.remaining()}"
            )
        chunk = self._view[self._offset:end].tobytes()
        self._offset = end
        return chunk

    def get_varint(self) -> int:
        value = 0
        shift = 0
        for count in range(1, MAX_VARINT_BYTES + 1):
            byte = self.get_raw(1)[0]
            value |= (byte & 0x7F) << shift
            if not byte & 0x80:
                if byte == 0 and count > 1:
                    raise MalformedEncoding("varint is not minimally encoded")
                return value
            shift += 7
        raise MalformedEncoding("varint too long")

    def get_signed(self) -> int:
        raw = self.get_varint()
        return raw // 2 if raw % 2 == 0 else -(raw + 1) // 2

    def get_bytes(self) -> bytes:
        return self.get_raw(self.get_varint())

    def get_version(self) -> int:
        return _VERSION.unpack(self.get_raw(_VERSION.size))[0]

    def _get_flag(self, what: str) -> bool:
        byte = self.get_raw(1)[0]
        if byte > 1:
            raise MalformedEncoding(f"bad {what} byte {byte:#04x}")
        return byte == 1

    def get_value(self, tp: Any) -> Any:
        if tp is ANY:
            raise TypeError("decoding needs an explicit type descriptor")
        kind, params = describe(tp)

        if kind == UNIT:
            return None
        if kind == BOOL:
            return self._get_flag("bool")
        if kind == FIXED:
            cls = params[0]
            return cls.from_bytes_fixed(self.get_raw(cls.width()), "little")
        if kind == INTEGER:
            return self.get_signed()
        if kind == BYTES:
            return self.get_bytes()
        if kind == TEXT:
            try:
                return self.get_bytes().decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedEncoding(f"stored text is not UTF-8: {e}") from e
        if kind == LIST:
            count = self.get_varint()
            limit = MAX_EMPTY_ITEMS if encodes_empty(params[0]) else self.remaining()
            if count > limit:
                raise MalformedEncoding(f"stored list claims {count} items, input too short")
            return [self.get_value(params[0]) for _ in range(count)]
        if kind == TUPLE:
            if params is None:
                raise TypeError("decoding a tuple needs its item types")
            return tuple(self.get_value(item_tp) for item_tp in params)
        if kind == OPTIONAL:
            return self.get_value(params[0]) if self._get_flag("optional") else None

        cls, type_args = params
        if not hasattr(cls, "from_storage"):
            raise TypeError(f"{cls.__name__} has no storage encoding")
        version = self.get_version()
        return cls.from_storage(self, version, *type_args)

    def expect_end(self) -> None:
        if self.remaining():
            raise MalformedEncoding(f"stored value has {self.remaining()} extra bytes")


def encode(value: Any, tp: Any = None) -> bytes:
    """
    Storage-encode a value.

    Args:
        value: Value to encode
        tp: Type descriptor; None infers the layout from the value

    Returns:
        Encoded bytes
    """
    writer = StorageWriter()
    writer.put_value(value, ANY if tp is None else tp)
    return writer.getvalue()


def decode(data: bytes, tp: Any) -> Any:
    """
    Decode a complete storage encoding.

    Raises:
        MalformedEncoding: If the bytes are not exactly one valid value of tp
    """
    reader = StorageReader(data)
    try:
        value = reader.get_value(tp)
        reader.expect_end()
    except MalformedEncoding as e:
        logger.debug("Rejected stored value for %r: %s", tp, e)
        raise
    return value
