"""
Native field types understood by the codec.

Python has a single ``int`` and a single ``float``; the fixed-width markers below
let a record declare the width an attribute is narrowed to on decode::

    @dataclasses.dataclass
    class Sensor:
        id: UInt32 = field("primary,sensors", default=0)
        reading: Float32 = field("attr,reading", default=0.0)

Plain ``int`` and ``float`` are 64-bit.  Any ``typing.NewType`` or subclass of
``int``, ``float`` or ``str`` behaves as its underlying kind.
"""

import collections.abc
import dataclasses
import datetime
import enum
import types
import typing

Int8 = typing.NewType("Int8", int)
Int16 = typing.NewType("Int16", int)
Int32 = typing.NewType("Int32", int)
Int64 = typing.NewType("Int64", int)
UInt8 = typing.NewType("UInt8", int)
UInt16 = typing.NewType("UInt16", int)
UInt32 = typing.NewType("UInt32", int)
UInt64 = typing.NewType("UInt64", int)
Float32 = typing.NewType("Float32", float)
Float64 = typing.NewType("Float64", float)

ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=datetime.timezone.utc)


class NativeKind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"
    TIME = "time"
    RECORD = "record"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    ANY = "any"
    UNSUPPORTED = "unsupported"


NUMERIC_KINDS = frozenset([NativeKind.INT, NativeKind.UINT, NativeKind.FLOAT])

_WIDTHS: typing.Dict[typing.Any, typing.Tuple[NativeKind, int]] = {
    Int8: (NativeKind.INT, 8),
    Int16: (NativeKind.INT, 16),
    Int32: (NativeKind.INT, 32),
    Int64: (NativeKind.INT, 64),
    UInt8: (NativeKind.UINT, 8),
    UInt16: (NativeKind.UINT, 16),
    UInt32: (NativeKind.UINT, 32),
    UInt64: (NativeKind.UINT, 64),
    Float32: (NativeKind.FLOAT, 32),
    Float64: (NativeKind.FLOAT, 64),
}

_SEQUENCE_ORIGINS = frozenset(
    [list, collections.abc.Sequence, collections.abc.MutableSequence, collections.abc.Iterable]
)
_MAPPING_ORIGINS = frozenset([dict, collections.abc.Mapping, collections.abc.MutableMapping])


@dataclasses.dataclass(frozen=True)
class NativeType:
    """
    The analysed form of a field's type annotation.

    :param NativeKind kind: the kind the value is coerced as.
    :param type: the annotation this was analysed from.
    :param int bits: the width for numeric kinds.
    :param Optional[NativeType] item: the wrapped type for ``OPTIONAL`` and ``SEQUENCE``.
    :param factory: a callable that re-wraps a builtin value into a custom scalar class.
    """

    kind: NativeKind
    type: typing.Any
    bits: int = 0
    item: typing.Optional["NativeType"] = None
    factory: typing.Optional[typing.Callable[[typing.Any], typing.Any]] = None

    @property
    def is_numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS

    @property
    def is_optional(self) -> bool:
        return self.kind is NativeKind.OPTIONAL

    def unwrap(self) -> "NativeType":
        t = self
        while t.kind is NativeKind.OPTIONAL:
            assert t.item is not None
            t = t.item
        return t

    def bounds(self) -> typing.Tuple[int, int]:
        if self.kind is NativeKind.INT:
            return (-(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1)
        elif self.kind is NativeKind.UINT:
            return (0, (1 << self.bits) - 1)
        raise TypeError(f"{self.describe()} has no integral bounds")

    def wrap(self, value: typing.Any) -> typing.Any:
        return self.factory(value) if self.factory is not None else value

    def zero(self) -> typing.Any:
        """
        Returns the zero value of the type.  Records are not handled here since
        instantiating them requires their descriptor.
        """
        if self.kind is NativeKind.BOOL:
            return False
        elif self.kind in (NativeKind.INT, NativeKind.UINT):
            return self._wrap_zero(0)
        elif self.kind is NativeKind.FLOAT:
            return self._wrap_zero(0.0)
        elif self.kind is NativeKind.STRING:
            return self._wrap_zero("")
        elif self.kind is NativeKind.TIME:
            return ZERO_TIME
        elif self.kind is NativeKind.SEQUENCE:
            return []
        elif self.kind is NativeKind.MAPPING:
            return {}
        return None

    def _wrap_zero(self, value: typing.Any) -> typing.Any:
        try:
            return self.wrap(value)
        except (TypeError, ValueError):
            return value

    def describe(self) -> str:
        if self.kind in (NativeKind.INT, NativeKind.FLOAT):
            return f"{self.kind.value}{self.bits}"
        elif self.kind is NativeKind.UINT:
            return f"uint{self.bits}"
        elif self.kind is NativeKind.OPTIONAL:
            assert self.item is not None
            return f"optional {self.item.describe()}"
        elif self.kind is NativeKind.SEQUENCE:
            assert self.item is not None
            return f"array of {self.item.describe()}"
        elif self.kind is NativeKind.RECORD:
            return f"object ({self.type.__name__})"
        elif self.kind is NativeKind.MAPPING:
            return "object"
        elif self.kind is NativeKind.UNSUPPORTED:
            return getattr(self.type, "__name__", repr(self.type))
        return self.kind.value


def _is_union(origin: typing.Any) -> bool:
    return origin is typing.Union or origin is types.UnionType


def analyze_type(
    annotation: typing.Any, is_record: typing.Callable[[typing.Any], bool]
) -> NativeType:
    """
    Analyses a type annotation into a :py:class:`NativeType`.

    :param annotation: the annotation as returned by :py:func:`typing.get_type_hints`.
    :param is_record: a predicate telling whether a class is a registered record type.
    """
    if annotation is typing.Any or annotation is object:
        return NativeType(NativeKind.ANY, annotation)

    width = _WIDTHS.get(annotation)
    if width is not None:
        return NativeType(width[0], annotation, bits=width[1])

    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return dataclasses.replace(analyze_type(supertype, is_record), type=annotation)

    origin = typing.get_origin(annotation)
    if origin is not None:
        args = typing.get_args(annotation)
        if _is_union(origin):
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == 1 and len(args) == 2:
                return NativeType(
                    NativeKind.OPTIONAL, annotation, item=analyze_type(non_none[0], is_record)
                )
        elif origin in _SEQUENCE_ORIGINS:
            item = analyze_type(args[0], is_record) if args else NativeType(NativeKind.ANY, typing.Any)
            return NativeType(NativeKind.SEQUENCE, annotation, item=item)
        elif origin in _MAPPING_ORIGINS:
            return NativeType(NativeKind.MAPPING, annotation)
        return NativeType(NativeKind.UNSUPPORTED, annotation)

    if isinstance(annotation, type):
        if annotation is list:
            return NativeType(NativeKind.SEQUENCE, annotation, item=NativeType(NativeKind.ANY, typing.Any))
        elif annotation is dict:
            return NativeType(NativeKind.MAPPING, annotation)
        elif issubclass(annotation, bool):
            return NativeType(NativeKind.BOOL, annotation)
        elif issubclass(annotation, datetime.datetime):
            return NativeType(NativeKind.TIME, annotation)
        elif is_record(annotation):
            return NativeType(NativeKind.RECORD, annotation)

        factory = None if annotation in (int, float, str) else annotation
        if issubclass(annotation, int):
            return NativeType(NativeKind.INT, annotation, bits=64, factory=factory)
        elif issubclass(annotation, float):
            return NativeType(NativeKind.FLOAT, annotation, bits=64, factory=factory)
        elif issubclass(annotation, str):
            return NativeType(NativeKind.STRING, annotation, factory=factory)

    return NativeType(NativeKind.UNSUPPORTED, annotation)
