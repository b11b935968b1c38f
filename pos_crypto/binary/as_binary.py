"""
Canonical opaque byte view ("AsBinary") of secret-sharing values

VSS values travel and are stored as their packed bytes; both codecs encode a
value exactly like its ``AsBinary`` wrapper, so a node can relay or persist
shares without validating the group elements inside.
"""

from dataclasses import dataclass
from typing import Generic, Type, TypeVar

from .storage import check_version

X = TypeVar("X", bound="BinaryPacked")


class BinaryPacked:
    """Mixin for values with a canonical packed form.

    Subclasses implement ``pack`` (total) and ``unpack`` (partial, raises
    MalformedEncoding); the codec hooks below are derived from them.
    """

    storage_version = 1

    def pack(self) -> bytes:
        raise NotImplementedError

    @classmethod
    def unpack(cls, data: bytes):
        raise NotImplementedError

    def to_wire(self, writer) -> None:
        writer.put_bytes(self.pack())

    @classmethod
    def from_wire(cls, reader):
        return cls.unpack(reader.get_bytes())

    def to_storage(self, writer) -> None:
        writer.put_bytes(self.pack())

    @classmethod
    def from_storage(cls, reader, version: int):
        check_version(cls, version)
        return cls.unpack(reader.get_bytes())


@dataclass(frozen=True)
class AsBinary(Generic[X]):
    """Packed bytes of an X, not yet validated."""
    data: bytes

    storage_version = 1

    def to_wire(self, writer, *type_args) -> None:
        writer.put_bytes(self.data)

    @classmethod
    def from_wire(cls, reader, *type_args) -> "AsBinary":
        return cls(reader.get_bytes())

    def to_storage(self, writer, *type_args) -> None:
        writer.put_bytes(self.data)

    @classmethod
    def from_storage(cls, reader, version: int, *type_args) -> "AsBinary":
        check_version(cls, version)
        return cls(reader.get_bytes())


def as_binary(value: X) -> "AsBinary[X]":
    """Pack a value into its opaque byte view."""
    return AsBinary(value.pack())


def from_binary(packed: "AsBinary[X]", cls: Type[X]) -> X:
    """
    Unpack an opaque byte view.

    Raises:
        MalformedEncoding: If the bytes are not a valid packed ``cls``
    """
    return cls.unpack(packed.data)
