"""
:py:class:`Codec` binds the decode and encode engines to one configuration and
takes care of the JSON text on both ends.

Synopsis
--------

.. code-block:: python

   from jsonapi_codec import marshal_payload, unmarshal_payload

   post = unmarshal_payload(request_body, Post)
   marshal_payload(response_stream, post)

"""

import collections.abc
import io
import json
import typing

from .declarative import DescriptorRegistry, default_registry
from .decoder import Unmarshaler
from .encoder import Marshaler
from .serde.exceptions import DeserializationError, DeserializationErrorItem
from .serde.models import ErrorRepr, Links
from .serde.types import JSONValue, MutableJSONObject
from .serde.utils import JSONPointer

MEDIA_TYPE = "application/vnd.api+json"

T = typing.TypeVar("T")

Payload = typing.Union[bytes, bytearray, str, typing.IO[typing.Any], typing.Mapping[str, typing.Any]]


class Codec:
    """
    :param DescriptorRegistry registry: the registry records are described by; the process-wide one by default.
    :param bool truncate_numbers: wrap out-of-range numbers into their declared width instead of raising :py:class:`NumericOverflowError`.
    :param int max_depth: the deepest relationship nesting a decode may traverse.
    :param json_dumps_kwargs: keyword arguments handed to :py:func:`json.dumps`.
    """

    registry: DescriptorRegistry
    unmarshaler: Unmarshaler
    marshaler: Marshaler
    json_dumps_kwargs: typing.Dict[str, typing.Any]

    def load(self, payload: Payload) -> JSONValue:
        """
        Parses ``payload`` into an untyped JSON tree.  Mappings are taken as already parsed.

        :raises DeserializationError: when the payload is not valid JSON.
        """
        if isinstance(payload, collections.abc.Mapping):
            return payload
        text: typing.Union[str, bytes, bytearray]
        if isinstance(payload, (str, bytes, bytearray)):
            text = payload
        elif hasattr(payload, "read"):
            text = payload.read()
        else:
            raise TypeError(f"unsupported payload: {payload!r}")
        try:
            return json.loads(text)
        except ValueError as e:
            raise DeserializationError(
                None, [DeserializationErrorItem(JSONPointer(), f"invalid JSON: {e}")]
            ) from e

    def dumps(self, document: JSONValue) -> str:
        return json.dumps(document, **self.json_dumps_kwargs)

    def _write(self, out: typing.IO[typing.Any], document: JSONValue) -> None:
        text = self.dumps(document)
        if isinstance(out, (io.RawIOBase, io.BufferedIOBase)):
            out.write(text.encode("utf-8"))
        else:
            out.write(text)

    def unmarshal_payload(self, payload: Payload, class_: typing.Type[T]) -> T:
        """
        Decodes a single-resource document into a new ``class_`` record.

        :param payload: JSON text, bytes, a readable stream or an already parsed mapping.
        :param class_: the record class of the primary resource.
        """
        return self.unmarshaler.unmarshal_payload(self.load(payload), class_)

    def unmarshal_many_payload(self, payload: Payload, class_: typing.Type[T]) -> typing.List[T]:
        """
        Decodes a collection document into a list of new ``class_`` records.
        """
        return self.unmarshaler.unmarshal_many_payload(self.load(payload), class_)

    def unmarshal_errors(self, payload: Payload) -> typing.List[ErrorRepr]:
        return self.unmarshaler.unmarshal_errors(self.load(payload))

    def marshal(
        self,
        models: typing.Any,
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> MutableJSONObject:
        return self.marshaler.marshal(models, links=links, meta=meta)

    def marshal_payload_without_included(self, models: typing.Any) -> MutableJSONObject:
        return self.marshaler.marshal_payload_without_included(models)

    def marshal_errors(self, errors: typing.Iterable[ErrorRepr]) -> MutableJSONObject:
        return self.marshaler.marshal_errors(errors)

    def marshal_payload(
        self,
        out: typing.IO[typing.Any],
        models: typing.Any,
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> None:
        """
        Writes the compound document for ``models`` to ``out`` as JSON text.
        """
        self._write(out, self.marshal(models, links=links, meta=meta))

    def marshal_errors_payload(self, out: typing.IO[typing.Any], errors: typing.Iterable[ErrorRepr]) -> None:
        self._write(out, self.marshal_errors(errors))

    def __init__(
        self,
        registry: typing.Optional[DescriptorRegistry] = None,
        truncate_numbers: bool = False,
        max_depth: int = 64,
        json_dumps_kwargs: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ):
        self.registry = registry if registry is not None else default_registry
        self.unmarshaler = Unmarshaler(self.registry, truncate_numbers=truncate_numbers, max_depth=max_depth)
        self.marshaler = Marshaler(self.registry, truncate_numbers=truncate_numbers)
        self.json_dumps_kwargs = dict(json_dumps_kwargs) if json_dumps_kwargs is not None else {}


default_codec = Codec()


def unmarshal_payload(payload: Payload, class_: typing.Type[T]) -> T:
    return default_codec.unmarshal_payload(payload, class_)


def unmarshal_many_payload(payload: Payload, class_: typing.Type[T]) -> typing.List[T]:
    return default_codec.unmarshal_many_payload(payload, class_)


def unmarshal_errors(payload: Payload) -> typing.List[ErrorRepr]:
    return default_codec.unmarshal_errors(payload)


def marshal(
    models: typing.Any,
    links: typing.Optional[Links] = None,
    meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
) -> MutableJSONObject:
    return default_codec.marshal(models, links=links, meta=meta)


def marshal_payload_without_included(models: typing.Any) -> MutableJSONObject:
    return default_codec.marshal_payload_without_included(models)


def marshal_errors(errors: typing.Iterable[ErrorRepr]) -> MutableJSONObject:
    return default_codec.marshal_errors(errors)


def marshal_payload(
    out: typing.IO[typing.Any],
    models: typing.Any,
    links: typing.Optional[Links] = None,
    meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
) -> None:
    default_codec.marshal_payload(out, models, links=links, meta=meta)


def marshal_errors_payload(out: typing.IO[typing.Any], errors: typing.Iterable[ErrorRepr]) -> None:
    default_codec.marshal_errors_payload(out, errors)
