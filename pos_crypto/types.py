"""
Type definitions for pos-crypto
Fixed-width integers used as codec type descriptors
"""

from typing import Literal


ByteOrder = Literal["big", "little"]


class FixedInt(int):
    """
    Integer with a fixed wire width.

    Plain ``int`` values are encoded as arbitrary-precision integers;
    subclasses of this class are encoded in exactly ``bits // 8`` bytes.
    """

    bits = 0
    signed = False

    def __new__(cls, value: int = 0):
        if cls.bits == 0:
            raise TypeError("FixedInt is abstract, use Word8..Word64 or Int32/Int64")
        value = int(value)
        if not cls.min_value() <= value <= cls.max_value():
            raise ValueError(
                f"{cls.__name__} out of range: {value} "
                f"(expected {cls.min_value()}..{cls.max_value()})"
            )
        return super().__new__(cls, value)

    @classmethod
    def width(cls) -> int:
        return cls.bits // 8

    @classmethod
    def min_value(cls) -> int:
        return -(1 << (cls.bits - 1)) if cls.signed else 0

    @classmethod
    def max_value(cls) -> int:
        return (1 << (cls.bits - 1)) - 1 if cls.signed else (1 << cls.bits) - 1

    def to_bytes_fixed(self, byteorder: ByteOrder) -> bytes:
        return int(self).to_bytes(self.width(), byteorder, signed=self.signed)

    @classmethod
    def from_bytes_fixed(cls, data: bytes, byteorder: ByteOrder) -> "FixedInt":
        return cls(int.from_bytes(data, byteorder, signed=cls.signed))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class Word8(FixedInt):
    bits = 8


class Word16(FixedInt):
    bits = 16


class Word32(FixedInt):
    bits = 32


class Word64(FixedInt):
    bits = 64


class Int32(FixedInt):
    bits = 32
    signed = True


class Int64(FixedInt):
    bits = 64
    signed = True


# Minimum number of shares needed to recover a VSS secret
Threshold = Word64

# Passphrase protecting an encrypted secret key (empty means "no passphrase")
PassPhrase = bytes
