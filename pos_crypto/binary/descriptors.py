"""
Type descriptors understood by the wire and storage codecs.

A descriptor tells a codec how to lay out a value: ``None``/``NoneType`` for
unit, ``bool``, ``int`` (arbitrary precision), fixed-width ints from
``pos_crypto.types``, ``bytes``, ``str``, ``List[X]``/``Sequence[X]``,
``Tuple[X, Y]``, ``Optional[X]`` or a codec-aware class (optionally
subscripted, e.g. ``ProxySecretKey[Int32]``).
"""

import collections.abc
import types
from typing import Any, Optional, Tuple, Union, get_args, get_origin

from ..types import FixedInt

NoneType = type(None)


class _Infer:
    """Marker for "no descriptor given, infer from the value"."""

    def __repr__(self) -> str:
        return "ANY"


ANY: Any = _Infer()

UNIT = "unit"
BOOL = "bool"
FIXED = "fixed"
INTEGER = "integer"
BYTES = "bytes"
TEXT = "text"
LIST = "list"
TUPLE = "tuple"
OPTIONAL = "optional"
RECORD = "record"

_UNION_ORIGINS: Tuple[Any, ...] = (Union,)
if hasattr(types, "UnionType"):
    _UNION_ORIGINS += (types.UnionType,)

_SEQUENCE_ORIGINS = (list, collections.abc.Sequence)

Descriptor = Tuple[str, Optional[Tuple[Any, ...]]]


def describe(tp: Any) -> Descriptor:
    """Classify an explicit type descriptor."""
    if tp is None or tp is NoneType:
        return UNIT, ()
    if tp is bool:
        return BOOL, ()
    if isinstance(tp, type) and issubclass(tp, FixedInt):
        return FIXED, (tp,)
    if tp is int:
        return INTEGER, ()
    if tp in (bytes, bytearray):
        return BYTES, ()
    if tp is str:
        return TEXT, ()
    if tp in _SEQUENCE_ORIGINS:
        return LIST, (ANY,)
    if tp is tuple:
        return TUPLE, None

    origin = get_origin(tp)
    args = get_args(tp)
    if origin in _SEQUENCE_ORIGINS:
        return LIST, (args[0] if args else ANY,)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            raise TypeError(f"variable-length tuples are not supported, use List: {tp!r}")
        return TUPLE, args
    if origin in _UNION_ORIGINS:
        items = [a for a in args if a is not NoneType]
        if len(args) != 2 or len(items) != 1:
            raise TypeError(f"only Optional[X] unions are supported, got {tp!r}")
        return OPTIONAL, (items[0],)
    if isinstance(origin, type):
        return RECORD, (origin, args)
    if isinstance(tp, type):
        return RECORD, (tp, ())
    raise TypeError(f"unsupported type descriptor: {tp!r}")


def describe_value(value: Any) -> Descriptor:
    """Infer a descriptor from a runtime value (Optional cannot be inferred)."""
    if value is None:
        return UNIT, ()
    if isinstance(value, bool):
        return BOOL, ()
    if isinstance(value, FixedInt):
        return FIXED, (type(value),)
    if isinstance(value, int):
        return INTEGER, ()
    if isinstance(value, (bytes, bytearray)):
        return BYTES, ()
    if isinstance(value, str):
        return TEXT, ()
    if isinstance(value, list):
        return LIST, (ANY,)
    if isinstance(value, tuple):
        return TUPLE, (ANY,) * len(value)
    return RECORD, (type(value), ())


def item_type(item: Any, tp: Any) -> Any:
    """
    Descriptor for one item of a list or tuple.

    An inferred None inside a container encodes as nothing, so ``[[None, 1]]``
    and ``[[1, None]]`` would share bytes; such values need an explicit
    ``Optional[X]`` descriptor.
    """
    if tp is ANY and item is None:
        raise TypeError("cannot infer a None inside a container, pass an Optional[X] descriptor")
    return tp


def type_arg(type_args: Tuple[Any, ...], index: int) -> Any:
    """Return the index-th generic argument, or ANY when the alias was bare."""
    return type_args[index] if index < len(type_args) else ANY


def encodes_empty(tp: Any) -> bool:
    """True for descriptors whose values occupy zero bytes in either codec."""
    if tp is ANY:
        return False
    kind, params = describe(tp)
    if kind == UNIT:
        return True
    if kind == TUPLE and params is not None:
        return all(encodes_empty(p) for p in params)
    return False
