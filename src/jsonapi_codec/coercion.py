"""
Conversion of single values between their wire form and native field types.

:py:func:`to_native` and :py:func:`to_wire` handle attribute values,
:py:func:`coerce_id` and :py:func:`id_to_str` handle the primary identifier,
which always travels as a string.
"""

import collections.abc
import datetime
import decimal
import math
import struct
import typing

from .exceptions import (
    CoercionError,
    InvalidIDError,
    InvalidISO8601Error,
    InvalidTimeError,
    InvalidTypeError,
    NumericOverflowError,
    UnknownFieldNumberTypeError,
)
from .interfaces import CoercionContext
from .native import ZERO_TIME, NativeKind, NativeType
from .serde.types import JSONValue, is_json_number

ISO8601_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _wrap_integer(ntype: NativeType, value: int) -> int:
    lo, hi = ntype.bounds()
    span = hi - lo + 1
    return (value - lo) % span + lo


def narrow_number(
    ctx: CoercionContext,
    ntype: NativeType,
    value: typing.Union[int, float],
    field: typing.Optional[str] = None,
) -> typing.Any:
    """
    Narrows a wire number into the width ``ntype`` declares, truncating toward zero
    for integral kinds.

    :raises NumericOverflowError: if the value does not fit and ``ctx.truncate_numbers`` is off.
    """
    if ntype.kind is NativeKind.FLOAT:
        f = float(value)
        if ntype.bits == 32 and math.isfinite(f):
            try:
                f = struct.unpack("<f", struct.pack("<f", f))[0]
            except OverflowError:
                if not ctx.truncate_numbers:
                    raise NumericOverflowError(ntype.describe(), value, field)
                f = math.copysign(math.inf, f)
        return ntype.wrap(f)

    n: int
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidTypeError(ntype.describe(), value, field)
        n = math.trunc(value)
    else:
        n = int(value)

    lo, hi = ntype.bounds()
    if not lo <= n <= hi:
        if not ctx.truncate_numbers:
            raise NumericOverflowError(ntype.describe(), value, field)
        n = _wrap_integer(ntype, n)

    try:
        return ntype.wrap(n)
    except ValueError:
        raise InvalidTypeError(ntype.describe(), value, field)


def _parse_time(value: JSONValue, iso8601: bool, field: typing.Optional[str]) -> datetime.datetime:
    if iso8601:
        if not isinstance(value, str):
            raise InvalidISO8601Error("an ISO8601 timestamp string", value, field)
        try:
            return datetime.datetime.strptime(value, ISO8601_TIME_FORMAT).replace(
                tzinfo=datetime.timezone.utc
            )
        except ValueError:
            raise InvalidISO8601Error("an ISO8601 timestamp string", value, field)

    if not is_json_number(value):
        raise InvalidTimeError("a unix timestamp number", value, field)
    try:
        return datetime.datetime.fromtimestamp(
            math.trunc(typing.cast(float, value)), tz=datetime.timezone.utc
        )
    except (OverflowError, OSError, ValueError):
        raise InvalidTimeError("a unix timestamp number", value, field)


def to_native(
    ctx: CoercionContext,
    ntype: NativeType,
    value: JSONValue,
    *,
    iso8601: bool = False,
    field: typing.Optional[str] = None,
) -> typing.Any:
    """
    Converts a wire value into a value of the native type ``ntype``.

    :param ctx: the running engine's context.
    :param ntype: the analysed native type of the field.
    :param value: the untyped wire value.
    :param bool iso8601: parse times from ISO8601 strings instead of unix timestamps.
    :param field: the field name, for error reporting.
    :raises CoercionError: when the wire value cannot be represented by the native type.
    """
    kind = ntype.kind
    if kind is NativeKind.OPTIONAL:
        if value is None:
            return None
        assert ntype.item is not None
        return to_native(ctx, ntype.item, value, iso8601=iso8601, field=field)
    elif kind is NativeKind.ANY:
        return value
    elif kind is NativeKind.BOOL:
        if not isinstance(value, bool):
            raise InvalidTypeError(ntype.describe(), value, field)
        return value
    elif kind in (NativeKind.INT, NativeKind.UINT, NativeKind.FLOAT):
        if not is_json_number(value):
            raise InvalidTypeError(ntype.describe(), value, field)
        return narrow_number(ctx, ntype, typing.cast(typing.Union[int, float], value), field)
    elif kind is NativeKind.STRING:
        if not isinstance(value, str):
            raise InvalidTypeError(ntype.describe(), value, field)
        try:
            return ntype.wrap(value)
        except ValueError:
            raise InvalidTypeError(ntype.describe(), value, field)
    elif kind is NativeKind.TIME:
        return _parse_time(value, iso8601, field)
    elif kind is NativeKind.SEQUENCE:
        if isinstance(value, (str, bytes)) or not isinstance(value, collections.abc.Sequence):
            raise InvalidTypeError(ntype.describe(), value, field)
        assert ntype.item is not None
        return [
            to_native(ctx, ntype.item, item, iso8601=iso8601, field=field) for item in value
        ]
    elif kind is NativeKind.RECORD:
        if not isinstance(value, collections.abc.Mapping):
            raise InvalidTypeError(ntype.describe(), value, field)
        return ctx.unmarshal_nested(ntype.type, value)
    elif kind is NativeKind.MAPPING:
        if not isinstance(value, collections.abc.Mapping):
            raise InvalidTypeError(ntype.describe(), value, field)
        return dict(value)

    if is_json_number(value):
        raise UnknownFieldNumberTypeError(ntype.describe(), value, field)
    raise InvalidTypeError(ntype.describe(), value, field)


def _to_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def _format_iso8601(value: datetime.datetime) -> str:
    # %Y is not zero-padded below year 1000 on every platform
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S}Z"


def to_wire(
    ctx: CoercionContext,
    ntype: NativeType,
    value: typing.Any,
    *,
    iso8601: bool = False,
    field: typing.Optional[str] = None,
) -> JSONValue:
    """
    Converts a native value into its wire form; the inverse of :py:func:`to_native`.

    :raises CoercionError: when the native value does not match the declared type.
    """
    if value is None:
        return None

    kind = ntype.kind
    if kind is NativeKind.OPTIONAL:
        assert ntype.item is not None
        return to_wire(ctx, ntype.item, value, iso8601=iso8601, field=field)
    elif kind in (NativeKind.ANY, NativeKind.MAPPING):
        return value
    elif kind is NativeKind.BOOL:
        if not isinstance(value, bool):
            raise InvalidTypeError(ntype.describe(), value, field)
        return value
    elif kind in (NativeKind.INT, NativeKind.UINT):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidTypeError(ntype.describe(), value, field)
        return int(value)
    elif kind is NativeKind.FLOAT:
        if not (is_json_number(value) or isinstance(value, decimal.Decimal)):
            raise InvalidTypeError(ntype.describe(), value, field)
        return float(value)
    elif kind is NativeKind.STRING:
        if not isinstance(value, str):
            raise InvalidTypeError(ntype.describe(), value, field)
        return str.__str__(value)
    elif kind is NativeKind.TIME:
        if not isinstance(value, datetime.datetime):
            raise InvalidTypeError(ntype.describe(), value, field)
        if iso8601:
            return _format_iso8601(_to_utc(value))
        return math.floor(_to_utc(value).timestamp())
    elif kind is NativeKind.SEQUENCE:
        if isinstance(value, (str, bytes)) or not isinstance(value, collections.abc.Iterable):
            raise InvalidTypeError(ntype.describe(), value, field)
        assert ntype.item is not None
        return [to_wire(ctx, ntype.item, item, iso8601=iso8601, field=field) for item in value]
    elif kind is NativeKind.RECORD:
        return dict(ctx.marshal_nested(value))

    raise InvalidTypeError(ntype.describe(), value, field)


def is_zero(ntype: NativeType, value: typing.Any) -> bool:
    """
    Tells whether ``value`` is the zero value of ``ntype``.  Optional values are
    zero only when they are None, and records never are.
    """
    if value is None:
        return True
    kind = ntype.kind
    if kind in (NativeKind.OPTIONAL, NativeKind.RECORD):
        return False
    elif kind is NativeKind.TIME:
        if not isinstance(value, datetime.datetime):
            return False
        if value.tzinfo is None:
            return value == ZERO_TIME.replace(tzinfo=None)
        return value == ZERO_TIME
    elif isinstance(value, collections.abc.Sized):
        return len(value) == 0
    elif isinstance(value, (int, float, complex)):
        return not value
    return False


def coerce_id(
    ctx: CoercionContext, ntype: NativeType, id: str, field: typing.Optional[str] = None
) -> typing.Any:
    """
    Converts the identifier string of a resource into the primary key's native type.

    :raises InvalidIDError: when the identifier does not parse as the declared type.
    """
    t = ntype.unwrap()
    if t.kind is NativeKind.STRING:
        return t.wrap(id)
    elif not t.is_numeric:
        raise InvalidIDError(id, f"unsupported id type {t.describe()}")

    n: typing.Union[int, float]
    try:
        n = int(id) if t.kind is not NativeKind.FLOAT else float(id)
    except ValueError:
        try:
            n = float(id)
        except ValueError:
            raise InvalidIDError(id)
    if isinstance(n, float) and not math.isfinite(n):
        raise InvalidIDError(id)

    try:
        return narrow_number(ctx, t, n, field)
    except CoercionError as e:
        raise InvalidIDError(id, e.reason)


def id_to_str(ntype: NativeType, value: typing.Any) -> str:
    """
    Renders a primary key value as the identifier string; ``None`` yields an empty string.

    :raises InvalidIDError: when the value is of a kind identifiers cannot be made of.
    """
    if value is None:
        return ""
    t = ntype.unwrap()
    if t.kind is NativeKind.STRING and isinstance(value, str):
        return str.__str__(value)
    elif t.kind in (NativeKind.INT, NativeKind.UINT) and isinstance(value, int) and not isinstance(value, bool):
        return str(int(value))
    elif t.kind is NativeKind.FLOAT and is_json_number(value):
        return str(float(value))
    raise InvalidIDError(value)
