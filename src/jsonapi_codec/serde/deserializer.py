"""
:py:mod:`jsonapi_codec.serde.deserializer` turns an untyped JSON tree into the
document models found in :py:mod:`jsonapi_codec.serde.models`.

Only the shape of the document is validated here; how attribute values map onto
native records is the business of :py:mod:`jsonapi_codec.decoder`.
"""

import collections.abc
import typing

from .exceptions import DeserializationError, DeserializationErrorItem
from .models import (
    CollectionDocumentRepr,
    DocumentReprBase,
    ErrorDocumentRepr,
    ErrorLinksRepr,
    ErrorRepr,
    Link,
    LinkageData,
    LinkageRepr,
    LinkRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
    SourceRepr,
)
from .types import JSONObject, JSONValue, json_kind_of
from .utils import JSONPointer


class DeserializationContext:
    errors: typing.List[DeserializationErrorItem]

    def validation_error_occurred(self, pointer: JSONPointer, message: str) -> None:
        self.errors.append(DeserializationErrorItem(pointer, message))

    def __init__(self):
        self.errors = []


class _Invalid(Exception):
    """
    Raised internally to abandon a node once its error has been recorded.
    """


T = typing.TypeVar("T", bound=typing.Union[DocumentReprBase, ErrorDocumentRepr])


class ReprDeserializer:
    def _expect_object(
        self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue
    ) -> JSONObject:
        if not isinstance(value, collections.abc.Mapping):
            ctx.validation_error_occurred(pointer, f"value must be an object, got {json_kind_of(value)}")
            raise _Invalid()
        return value

    def _expect_array(
        self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Sequence[JSONValue]:
        if isinstance(value, (str, bytes)) or not isinstance(value, collections.abc.Sequence):
            ctx.validation_error_occurred(pointer, f"value must be an array, got {json_kind_of(value)}")
            raise _Invalid()
        return value

    def _expect_str(self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue) -> str:
        if not isinstance(value, str):
            ctx.validation_error_occurred(pointer, f"value must be a string, got {json_kind_of(value)}")
            raise _Invalid()
        return value

    def _optional_str(
        self, ctx: DeserializationContext, pointer: JSONPointer, node: JSONObject, key: str
    ) -> typing.Optional[str]:
        value = node.get(key)
        if value is None:
            return None
        return self._expect_str(ctx, pointer / key, value)

    def _meta(
        self, ctx: DeserializationContext, pointer: JSONPointer, node: JSONObject
    ) -> typing.Optional[JSONObject]:
        value = node.get("meta")
        if value is None:
            return None
        return self._expect_object(ctx, pointer / "meta", value)

    def _links(
        self, ctx: DeserializationContext, pointer: JSONPointer, node: JSONObject
    ) -> typing.Optional[typing.Dict[str, Link]]:
        value = node.get("links")
        if value is None:
            return None
        _pointer = pointer / "links"
        links_ = self._expect_object(ctx, _pointer, value)
        links: typing.Dict[str, Link] = {}
        for k, v in links_.items():
            if v is None:
                continue
            elif isinstance(v, str):
                links[k] = v
            elif isinstance(v, collections.abc.Mapping):
                links[k] = LinkRepr(
                    self._expect_str(ctx, _pointer / k / "href", v.get("href")),
                    meta=self._meta(ctx, _pointer / k, v),
                    _source_=_pointer / k,
                )
            else:
                ctx.validation_error_occurred(
                    _pointer / k, f"link must be a string or an object, got {json_kind_of(v)}"
                )
                raise _Invalid()
        return links

    def _resource_id(
        self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue
    ) -> ResourceIdRepr:
        node = self._expect_object(ctx, pointer, value)
        if "type" not in node:
            ctx.validation_error_occurred(pointer, 'value must have a property "type"')
            raise _Invalid()
        if "id" not in node:
            ctx.validation_error_occurred(pointer, 'value must have a property "id"')
            raise _Invalid()
        return ResourceIdRepr(
            type=self._expect_str(ctx, pointer / "type", node["type"]),
            id=self._expect_str(ctx, pointer / "id", node["id"]),
            meta=self._meta(ctx, pointer, node),
            _source_=pointer,
        )

    def _linkage(self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue) -> LinkageRepr:
        node = self._expect_object(ctx, pointer, value)
        data: LinkageData = Missing
        if "data" in node:
            data_ = node["data"]
            if data_ is None:
                data = None
            elif isinstance(data_, collections.abc.Mapping):
                data = self._resource_id(ctx, pointer / "data", data_)
            else:
                data = [
                    self._resource_id(ctx, (pointer / "data")[i], item)
                    for i, item in enumerate(self._expect_array(ctx, pointer / "data", data_))
                ]
        return LinkageRepr(
            data=data,
            links=self._links(ctx, pointer, node),
            meta=self._meta(ctx, pointer, node),
            _source_=pointer,
        )

    def _resource(self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue) -> ResourceRepr:
        node = self._expect_object(ctx, pointer, value)
        if "type" not in node:
            ctx.validation_error_occurred(pointer, 'value must have a property "type"')
            raise _Invalid()

        id_: typing.Optional[str] = None
        if node.get("id") is not None:
            id_ = self._expect_str(ctx, pointer / "id", node["id"])

        attributes: JSONObject = {}
        if node.get("attributes") is not None:
            attributes = self._expect_object(ctx, pointer / "attributes", node["attributes"])

        relationships: typing.List[typing.Tuple[str, LinkageRepr]] = []
        if node.get("relationships") is not None:
            _pointer = pointer / "relationships"
            for k, v in self._expect_object(ctx, _pointer, node["relationships"]).items():
                relationships.append((k, self._linkage(ctx, _pointer / k, v)))

        return ResourceRepr(
            type=self._expect_str(ctx, pointer / "type", node["type"]),
            id=id_,
            attributes=attributes,
            relationships=relationships,
            links=self._links(ctx, pointer, node),
            meta=self._meta(ctx, pointer, node),
            _source_=pointer,
        )

    def _resources(
        self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.List[ResourceRepr]:
        retval = []
        for i, item in enumerate(self._expect_array(ctx, pointer, value)):
            try:
                retval.append(self._resource(ctx, pointer[i], item))
            except _Invalid:
                continue
        return retval

    def _error(self, ctx: DeserializationContext, pointer: JSONPointer, value: JSONValue) -> ErrorRepr:
        node = self._expect_object(ctx, pointer, value)
        links: typing.Optional[ErrorLinksRepr] = None
        if node.get("links") is not None:
            links_ = self._expect_object(ctx, pointer / "links", node["links"])
            links = ErrorLinksRepr(
                about=self._optional_str(ctx, pointer / "links", links_, "about"),
                _source_=pointer / "links",
            )
        source: typing.Optional[SourceRepr] = None
        if node.get("source") is not None:
            source_ = self._expect_object(ctx, pointer / "source", node["source"])
            source = SourceRepr(
                pointer=self._optional_str(ctx, pointer / "source", source_, "pointer"),
                parameter=self._optional_str(ctx, pointer / "source", source_, "parameter"),
                _source_=pointer / "source",
            )
        return ErrorRepr(
            id=self._optional_str(ctx, pointer, node, "id"),
            links=links,
            status=self._optional_str(ctx, pointer, node, "status"),
            code=self._optional_str(ctx, pointer, node, "code"),
            title=self._optional_str(ctx, pointer, node, "title"),
            detail=self._optional_str(ctx, pointer, node, "detail"),
            source=source,
            meta=self._meta(ctx, pointer, node),
            _source_=pointer,
        )

    def _document(
        self,
        ctx: DeserializationContext,
        result_type: typing.Type[T],
        document: JSONObject,
    ) -> T:
        pointer = JSONPointer()
        links = self._links(ctx, pointer, document)
        meta = self._meta(ctx, pointer, document)

        if issubclass(result_type, ErrorDocumentRepr):
            if "errors" not in document:
                ctx.validation_error_occurred(pointer, 'document must have a property "errors"')
                raise _Invalid()
            errors = []
            for i, item in enumerate(self._expect_array(ctx, pointer / "errors", document["errors"])):
                try:
                    errors.append(self._error(ctx, (pointer / "errors")[i], item))
                except _Invalid:
                    continue
            return typing.cast(
                T, ErrorDocumentRepr(errors=errors, links=links, meta=meta, _source_=pointer)
            )

        if "data" not in document:
            ctx.validation_error_occurred(pointer, 'document must have a property "data"')
            raise _Invalid()

        included: typing.List[ResourceRepr] = []
        if document.get("included") is not None:
            included = self._resources(ctx, pointer / "included", document["included"])

        if issubclass(result_type, CollectionDocumentRepr):
            return typing.cast(
                T,
                CollectionDocumentRepr(
                    data=self._resources(ctx, pointer / "data", document["data"]),
                    included=included,
                    links=links,
                    meta=meta,
                    _source_=pointer,
                ),
            )
        elif issubclass(result_type, SingletonDocumentRepr):
            data_ = document["data"]
            return typing.cast(
                T,
                SingletonDocumentRepr(
                    data=(
                        self._resource(ctx, pointer / "data", data_) if data_ is not None else None
                    ),
                    included=included,
                    links=links,
                    meta=meta,
                    _source_=pointer,
                ),
            )
        else:
            raise TypeError(f"unsupported document type: {result_type!r}")

    def __call__(self, result_type: typing.Type[T], document: JSONValue) -> T:
        """
        Builds a document model of ``result_type`` out of ``document``.

        :param result_type: one of :py:class:`SingletonDocumentRepr`, :py:class:`CollectionDocumentRepr` or :py:class:`ErrorDocumentRepr`.
        :param document: the untyped JSON tree.
        :raises DeserializationError: when the tree is not a well-formed document of the requested kind.
        """
        ctx = DeserializationContext()
        retval: typing.Optional[T] = None
        try:
            retval = self._document(
                ctx, result_type, self._expect_object(ctx, JSONPointer(), document)
            )
        except _Invalid:
            pass
        if ctx.errors:
            raise DeserializationError(document, ctx.errors)
        assert retval is not None
        return retval
