"""Binary codecs"""

from . import storage, wire
from .as_binary import AsBinary, BinaryPacked, as_binary, from_binary

__all__ = [
    "wire",
    "storage",
    "AsBinary",
    "BinaryPacked",
    "as_binary",
    "from_binary",
]
