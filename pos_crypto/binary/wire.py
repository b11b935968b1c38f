"""
Wire codec: compact big-endian encoding

This is the encoding every signature and hash is computed over, so its
layout is a fixed external interface:

    unit        nothing
    bool        1 byte, 0x00 or 0x01
    WordN/IntN  N/8 bytes big-endian (two's complement when signed)
    int         0x00 + Int32 when it fits, otherwise
                0x01 + sign (0x01 non-negative, 0x00 negative)
                     + Word64 length + little-endian magnitude
    bytes/str   Word64 length + raw bytes (str is UTF-8)
    List[X]     Word64 count + items
    Tuple[...]  items back to back
    Optional[X] 0x00, or 0x01 + value
    records     whatever the class's to_wire() writes

Example:
    >>> from pos_crypto.types import Word64
    >>> encode(Word64(1)).hex()
    '0000000000000001'
"""

import logging
from typing import Any, List

from ..errors import MalformedEncoding
from ..types import FixedInt, Int32, Word8, Word32, Word64
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

# Cap for lists whose items occupy no bytes (e.g. List[None])
MAX_EMPTY_ITEMS = 1 << 16


class WireWriter:
    """Accumulates a wire encoding."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def put_raw(self, data: bytes) -> None:
        self._buf += data

    def put_fixed(self, value: int, cls: type) -> None:
        self._buf += cls(value).to_bytes_fixed("big")

    def put_u8(self, value: int) -> None:
        self.put_fixed(value, Word8)

    def put_u32(self, value: int) -> None:
        self.put_fixed(value, Word32)

    def put_u64(self, value: int) -> None:
        self.put_fixed(value, Word64)

    def put_bytes(self, data: bytes) -> None:
        self.put_u64(len(data))
        self.put_raw(data)

    def put_integer(self, value: int) -> None:
        if Int32.min_value() <= value <= Int32.max_value():
            self.put_u8(0)
            self.put_fixed(value, Int32)
            return
        magnitude = abs(value)
        self.put_u8(1)
        self.put_u8(1 if value >= 0 else 0)
        self.put_bytes(magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "little"))

    def put_value(self, value: Any, tp: Any = ANY) -> None:
        kind, params = describe_value(value) if tp is ANY else describe(tp)

        if kind == UNIT:
            if value is not None:
                raise TypeError(f"unit descriptor needs None, got {value!r}")
        elif kind == BOOL:
            if not isinstance(value, bool):
                raise TypeError(f"bool descriptor needs a bool, got {value!r}")
            self.put_u8(1 if value else 0)
        elif kind == FIXED:
            self.put_fixed(value, params[0])
        elif kind == INTEGER:
            self.put_integer(int(value))
        elif kind == BYTES:
            self.put_bytes(bytes(value))
        elif kind == TEXT:
            self.put_bytes(value.encode("utf-8"))
        elif kind == LIST:
            items = list(value)
            self.put_u64(len(items))
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
                self.put_u8(0)
            else:
                self.put_u8(1)
                self.put_value(value, params[0])
        elif kind == RECORD:
            cls, type_args = params
            if not isinstance(value, cls):
                raise TypeError(f"expected {cls.__name__}, got {type(value).__name__}")
            if not hasattr(value, "to_wire"):
                raise TypeError(f"{cls.__name__} has no wire encoding")
            value.to_wire(self, *type_args)


class WireReader:
    """Bounds-checked cursor over a wire encoding."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def get_raw(self, size: int) -> bytes:
        if size > self.remaining():
            raise MalformedEncoding(
                f"truncated input: need {size} bytes at offset {self._pos}, "
                f"{self.remaining()} left"
            )
        chunk = self._data[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def get_fixed(self, cls: type) -> FixedInt:
        return cls.from_bytes_fixed(self.get_raw(cls.width()), "big")

    def get_u8(self) -> int:
        return self.get_raw(1)[0]

    def get_u32(self) -> int:
        return int(self.get_fixed(Word32))

    def get_u64(self) -> int:
        return int(self.get_fixed(Word64))

    def get_bytes(self) -> bytes:
        return self.get_raw(self.get_u64())

    def get_flag(self, what: str) -> bool:
        tag = self.get_u8()
        if tag not in (0, 1):
            raise MalformedEncoding(f"invalid {what} tag: {tag}")
        return tag == 1

    def get_integer(self) -> int:
        tag = self.get_u8()
        if tag == 0:
            return int(self.get_fixed(Int32))
        if tag != 1:
            raise MalformedEncoding(f"invalid integer tag: {tag}")
        non_negative = self.get_flag("integer sign")
        magnitude = self.get_bytes()
        if not magnitude or magnitude[-1] == 0:
            raise MalformedEncoding("non-canonical integer magnitude")
        value = int.from_bytes(magnitude, "little")
        value = value if non_negative else -value
        if Int32.min_value() <= value <= Int32.max_value():
            raise MalformedEncoding("small integer encoded in the large form")
        return value

    def get_value(self, tp: Any) -> Any:
        if tp is ANY:
            raise TypeError("decoding needs an explicit type descriptor")
        kind, params = describe(tp)

        if kind == UNIT:
            return None
        if kind == BOOL:
            return self.get_flag("bool")
        if kind == FIXED:
            return self.get_fixed(params[0])
        if kind == INTEGER:
            return self.get_integer()
        if kind == BYTES:
            return self.get_bytes()
        if kind == TEXT:
            try:
                return self.get_bytes().decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedEncoding(f"invalid UTF-8 text: {e}") from e
        if kind == LIST:
            return self._get_list(params[0])
        if kind == TUPLE:
            if params is None:
                raise TypeError("decoding a tuple needs its item types")
            return tuple(self.get_value(item_tp) for item_tp in params)
        if kind == OPTIONAL:
            return self.get_value(params[0]) if self.get_flag("optional") else None

        cls, type_args = params
        if not hasattr(cls, "from_wire"):
            raise TypeError(f"{cls.__name__} has no wire encoding")
        return cls.from_wire(self, *type_args)

    def _get_list(self, item_tp: Any) -> List[Any]:
        count = self.get_u64()
        limit = MAX_EMPTY_ITEMS if encodes_empty(item_tp) else self.remaining()
        if count > limit:
            raise MalformedEncoding(f"list length {count} exceeds available input")
        return [self.get_value(item_tp) for _ in range(count)]

    def expect_end(self) -> None:
        if self.remaining():
            raise MalformedEncoding(f"{self.remaining()} trailing bytes after value")


def encode(value: Any, tp: Any = None) -> bytes:
    """
    Wire-encode a value.

    Args:
        value: Value to encode
        tp: Type descriptor; None infers the layout from the value

    Returns:
        Encoded bytes
    """
    writer = WireWriter()
    writer.put_value(value, ANY if tp is None else tp)
    return writer.getvalue()


def decode(data: bytes, tp: Any) -> Any:
    """
    Decode a complete wire encoding.

    Raises:
        MalformedEncoding: If the bytes are not exactly one valid value of tp
    """
    reader = WireReader(data)
    try:
        value = reader.get_value(tp)
        reader.expect_end()
    except MalformedEncoding as e:
        logger.debug("Rejected wire encoding for %r: %s", tp, e)
        raise
    return value
