import abc
import typing

from .serde.types import json_kind_of
from .serde.utils import english_enumerate


class JSONAPICodecException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self) -> str:
        return self.message


class InvalidDeclarationError(JSONAPICodecException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class MalformedTagError(InvalidDeclarationError):
    record: type
    field: str
    tag: str

    def __init__(self, record: type, field: str, tag: str):
        super().__init__(
            f'jsonapi tag "{tag}" on {record.__name__}.{field} is malformed; '
            "expected <kind>,<name>[,<option>...]"
        )
        self.record = record
        self.field = field
        self.tag = tag


class UnsupportedAnnotationError(InvalidDeclarationError):
    kind: str

    def __init__(self, kind: str):
        super().__init__(f"Unsupported jsonapi tag annotation, {kind}")
        self.kind = kind


class ResourceTypeMismatchError(JSONAPICodecException):
    actual: str
    expected: str

    @property
    def message(self) -> str:
        return f'Trying to unmarshal an object of type "{self.actual}", but "{self.expected}" does not match'

    def __init__(self, actual: str, expected: str):
        super().__init__(actual, expected)
        self.actual = actual
        self.expected = expected


class InvalidIDError(JSONAPICodecException):
    id: typing.Any
    detail: typing.Optional[str]

    @property
    def message(self) -> str:
        return f"id should be either string, int(8,16,32,64) or uint(8,16,32,64): {self.id!r}{' (' + self.detail + ')' if self.detail else ''}"

    def __init__(self, id: typing.Any, detail: typing.Optional[str] = None):
        super().__init__(id)
        self.id = id
        self.detail = detail


class CoercionError(JSONAPICodecException):
    """
    The base class for failures converting a single value between its wire
    representation and the native field type.
    """

    field: typing.Optional[str]
    expected: str
    actual: typing.Any

    @property
    @abc.abstractmethod
    def reason(self) -> str:
        ...  # pragma: nocover

    @property
    def message(self) -> str:
        location = f"field `{self.field}`" if self.field is not None else "value"
        return f"{self.reason}: {location} expects {self.expected}, got {json_kind_of(self.actual)} ({self.actual!r})"

    def __init__(self, expected: str, actual: typing.Any, field: typing.Optional[str] = None):
        super().__init__(expected, actual, field)
        self.expected = expected
        self.actual = actual
        self.field = field


class InvalidTypeError(CoercionError):
    reason = "invalid type provided"


class NumericOverflowError(InvalidTypeError):
    reason = "numeric value out of range"


class UnknownFieldNumberTypeError(CoercionError):
    reason = "the field was not of a known number type"


class InvalidTimeError(CoercionError):
    reason = "only numbers can be parsed as dates, unix timestamps"


class InvalidISO8601Error(CoercionError):
    reason = "dates must be strings in the ISO8601 timestamp format"


class CapabilityError(JSONAPICodecException):
    record: typing.Any
    hook: str
    value: typing.Any
    detail: str

    @property
    def message(self) -> str:
        return f"{type(self.record).__name__}.{self.hook}() returned an unrepresentable value ({self.detail}): {self.value!r}"

    def __init__(self, record: typing.Any, hook: str, value: typing.Any, detail: str):
        super().__init__(record, hook, value, detail)
        self.record = record
        self.hook = hook
        self.value = value
        self.detail = detail


class InvalidLinkTypeError(CapabilityError):
    pass


class InvalidMetaTypeError(CapabilityError):
    pass


class InvalidDocumentError(JSONAPICodecException):
    record: type

    @property
    def message(self) -> str:
        return f"data is not a jsonapi representation of '{self.record.__name__}'"

    def __init__(self, record: type):
        super().__init__(record)
        self.record = record


class RelationshipDepthError(JSONAPICodecException):
    max_depth: int

    @property
    def message(self) -> str:
        return f"relationship graph is nested deeper than {self.max_depth} levels"

    def __init__(self, max_depth: int):
        super().__init__(max_depth)
        self.max_depth = max_depth


class UnexpectedTypeError(JSONAPICodecException):
    value: typing.Any
    expected: typing.Sequence[str]

    @property
    def message(self) -> str:
        return f"models should be {english_enumerate(self.expected)}, got {type(self.value).__name__}"

    def __init__(
        self,
        value: typing.Any,
        expected: typing.Sequence[str] = ("a record", "a sequence of records"),
    ):
        super().__init__(value)
        self.value = value
        self.expected = expected
