"""
:py:mod:`jsonapi_codec.serde.renderer` module contains a set of classes in charge of rendering internal representation of JSON-API document to JSON.

Synopsis
--------

.. code-block:: python

   import json

   from jsonapi_codec.serde.renderer import ReprRenderer

   renderer = ReprRenderer()

   internal_repr = SingletonDocumentRepr(
       links={"self": "/foos/1"},
       data=ResourceRepr(
           type="foos",
           id="1",
           attributes=[
               ("a", 1),
               ("b", 2),
               ("c", 3),
           ],
           relationships=[
               (
                   "items",
                   LinkageRepr(
                       links={
                           "self": "/foos/1/relationships/bars",
                           "related": LinkRepr("/foos/1/bars", meta={"count": 2}),
                       },
                       data=[
                           ResourceIdRepr(type="bars", id="1"),
                           ResourceIdRepr(type="bars", id="2"),
                       ],
                   ),
               ),
           ],
       ),
   )

   print(json.dumps(renderer(internal_repr)))

"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from .models import (
    CollectionDocumentRepr,
    DocumentRepr,
    DocumentReprBase,
    ErrorDocumentRepr,
    ErrorLinksRepr,
    ErrorRepr,
    LinkageRepr,
    LinkRepr,
    Links,
    Missing,
    Repr,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
    SourceRepr,
)
from .types import JSONScalar, JSONValue, MutableJSONObject
from .utils import JSONPointer


class ReprRendererContext:
    parent: typing.Optional["ReprRendererContext"]
    path: JSONPointer
    anchor: typing.Optional[Repr]

    def __truediv__(self, component: str) -> "ReprRendererContext":
        return self.replace(path=(self.path / component))

    def __or__(self, anchor: Repr) -> "ReprRendererContext":
        return self.replace(anchor=anchor)

    def __getitem__(self, index: int) -> "ReprRendererContext":
        return self.replace(path=(self.path[index]))

    def replace(
        self, *, anchor: typing.Optional[Repr] = None, path: typing.Optional[JSONPointer] = None
    ):
        anchor = self.anchor if anchor is None else anchor
        path = self.path if path is None else path
        return ReprRendererContext(parent=self, anchor=anchor, path=path)

    def __init__(
        self,
        parent: typing.Optional["ReprRendererContext"],
        anchor: typing.Optional[Repr] = None,
        path: typing.Optional[JSONPointer] = None,
    ):
        self.parent = parent
        self.anchor = anchor
        self.path = JSONPointer() if path is None else path


class ReprRenderer:
    _render_decimal_as_str: bool = True

    def _dict_factory(self, items: typing.Iterable[typing.Tuple[str, typing.Any]]):
        return OrderedDict(items)

    def _render_datetime(self: "ReprRenderer", ctx: ReprRendererContext, repr_: typing.Any) -> JSONScalar:
        _repr = typing.cast(datetime.datetime, repr_)
        if _repr.tzinfo is None:
            _repr = _repr.replace(tzinfo=datetime.timezone.utc)
        return _repr.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(self: "ReprRenderer", ctx: ReprRendererContext, repr_: typing.Any) -> JSONScalar:
        return typing.cast(datetime.date, repr_).isoformat()

    def _render_decimal(self: "ReprRenderer", ctx: ReprRendererContext, repr_: typing.Any) -> JSONScalar:
        _repr = typing.cast(decimal.Decimal, repr_)
        return str(_repr) if self._render_decimal_as_str else float(_repr)

    def _render_bytes(self: "ReprRenderer", ctx: ReprRendererContext, repr_: typing.Any) -> JSONScalar:
        return base64.b64encode(typing.cast(bytes, repr_)).decode("ascii")

    def _render_passthrough(self: "ReprRenderer", ctx: ReprRendererContext, repr_: typing.Any) -> JSONScalar:
        return typing.cast(JSONScalar, repr_)

    _supported_types: typing.ClassVar[typing.Dict[type, typing.Callable]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        str: _render_passthrough,
        int: _render_passthrough,
        float: _render_passthrough,
        bool: _render_passthrough,
        None.__class__: _render_passthrough,
    }

    def _render_scalar(self, ctx: ReprRendererContext, repr_: typing.Any) -> JSONScalar:
        # fast pass
        r = self._supported_types.get(type(repr_))
        if r is not None:
            return r(self, ctx, repr_)

        for type_, r in self._supported_types.items():
            if isinstance(repr_, type_):
                return r(self, ctx, repr_)

        raise TypeError(f"{ctx.path}: unsupported type {repr_!r}")

    def is_renderable(self, repr_: typing.Any) -> bool:
        """
        Tells whether ``repr_`` can be rendered as a JSON value.
        """
        if isinstance(repr_, collections.abc.Mapping):
            return all(isinstance(k, str) and self.is_renderable(v) for k, v in repr_.items())
        elif isinstance(repr_, (list, tuple)):
            return all(self.is_renderable(v) for v in repr_)
        return any(isinstance(repr_, type_) for type_ in self._supported_types)

    def _render_value(self, ctx: ReprRendererContext, repr_: typing.Any) -> JSONValue:
        if isinstance(repr_, collections.abc.Mapping):
            return self._dict_factory((k, self._render_value(ctx / k, v)) for k, v in repr_.items())
        elif isinstance(repr_, (list, tuple)):
            return [self._render_value(ctx[i], v) for i, v in enumerate(repr_)]
        return self._render_scalar(ctx, repr_)

    def _render_meta(self, ctx: ReprRendererContext, meta: typing.Mapping[str, typing.Any]) -> MutableJSONObject:
        return typing.cast(MutableJSONObject, self._render_value(ctx, meta))

    def _render_links(self, ctx: ReprRendererContext, repr_: Links) -> MutableJSONObject:
        retval: MutableJSONObject = self._dict_factory(())
        for k, v in repr_.items():
            if isinstance(v, LinkRepr):
                link: MutableJSONObject = {"href": v.href}
                if v.meta:
                    link["meta"] = self._render_meta(ctx / k / "meta", v.meta)
                retval[k] = link
            elif isinstance(v, str):
                retval[k] = v
            else:
                raise TypeError(f"{ctx.path / k}: unsupported link {v!r}")
        return retval

    def _render_relationship(self, ctx: ReprRendererContext, repr_: LinkageRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.links:
            retval["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.data is None:
            retval["data"] = None
        elif isinstance(repr_.data, ResourceIdRepr):
            retval["data"] = self._render_resource_link((ctx / "data") | repr_, repr_.data)
        elif repr_.data is not Missing:
            retval["data"] = [
                self._render_resource_link((ctx / "data")[i] | repr_, item)
                for i, item in enumerate(typing.cast(typing.Sequence[ResourceIdRepr], repr_.data))
            ]
        if repr_.meta:
            retval["meta"] = self._render_meta(ctx / "meta", repr_.meta)
        return retval

    def _render_resource_link(self, ctx: ReprRendererContext, repr_: ResourceIdRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {
            "type": repr_.type,
            "id": repr_.id,
        }
        if repr_.meta:
            retval["meta"] = self._render_meta(ctx / "meta", repr_.meta)
        return retval

    def _render_resource(self, ctx: ReprRendererContext, repr_: ResourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {"type": repr_.type}
        if repr_.id:
            retval["id"] = repr_.id
        if repr_.attributes:
            new_ctx = (ctx / "attributes") | repr_
            retval["attributes"] = self._dict_factory(
                (k, self._render_value(new_ctx / k, v)) for k, v in repr_.attributes.items()
            )
        if repr_.relationships:
            new_ctx = (ctx / "relationships") | repr_
            retval["relationships"] = self._dict_factory(
                (k, self._render_relationship(new_ctx / k, v)) for k, v in repr_.relationships.items()
            )
        if repr_.links:
            retval["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.meta:
            retval["meta"] = self._render_meta(ctx / "meta", repr_.meta)
        return retval

    def _render_source(self, ctx: ReprRendererContext, repr_: SourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.pointer is not None:
            retval["pointer"] = repr_.pointer
        if repr_.parameter is not None:
            retval["parameter"] = repr_.parameter
        return retval

    def _render_error_links(self, ctx: ReprRendererContext, repr_: ErrorLinksRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.about is not None:
            retval["about"] = repr_.about
        return retval

    def _render_error(self, ctx: ReprRendererContext, repr_: ErrorRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.links is not None:
            retval["links"] = self._render_error_links((ctx / "links") | repr_, repr_.links)
        if repr_.status is not None:
            retval["status"] = repr_.status
        if repr_.code is not None:
            retval["code"] = repr_.code
        if repr_.title is not None:
            retval["title"] = repr_.title
        if repr_.detail is not None:
            retval["detail"] = repr_.detail
        if repr_.source is not None:
            retval["source"] = self._render_source((ctx / "source") | repr_, repr_.source)
        if repr_.meta:
            retval["meta"] = self._render_meta(ctx / "meta", repr_.meta)
        return retval

    def _populate_document_common(
        self,
        target: MutableJSONObject,
        ctx: ReprRendererContext,
        repr_: typing.Union[DocumentReprBase, ErrorDocumentRepr],
    ) -> None:
        if repr_.links:
            target["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.meta:
            target["meta"] = self._render_meta(ctx / "meta", repr_.meta)
        if isinstance(repr_, DocumentReprBase) and repr_.included:
            new_ctx = (ctx / "included") | repr_
            target["included"] = [
                self._render_resource(new_ctx[i], r) for i, r in enumerate(repr_.included)
            ]

    def _render_singleton_document(
        self, ctx: ReprRendererContext, repr_: SingletonDocumentRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        retval["data"] = (
            self._render_resource((ctx / "data") | repr_, repr_.data) if repr_.data is not None else None
        )
        self._populate_document_common(retval, ctx, repr_)
        return retval

    def _render_collection_document(
        self, ctx: ReprRendererContext, repr_: CollectionDocumentRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        retval["data"] = [
            self._render_resource((ctx / "data")[i] | repr_, item) for i, item in enumerate(repr_.data)
        ]
        self._populate_document_common(retval, ctx, repr_)
        return retval

    def _render_error_document(self, ctx: ReprRendererContext, repr_: ErrorDocumentRepr) -> MutableJSONObject:
        new_ctx = (ctx / "errors") | repr_
        retval: MutableJSONObject = {
            "errors": [self._render_error(new_ctx[i], e) for i, e in enumerate(repr_.errors)],
        }
        self._populate_document_common(retval, ctx, repr_)
        return retval

    def __call__(self, repr_: DocumentRepr) -> MutableJSONObject:
        ctx = ReprRendererContext(None)
        if isinstance(repr_, SingletonDocumentRepr):
            return self._render_singleton_document(ctx, repr_)
        elif isinstance(repr_, CollectionDocumentRepr):
            return self._render_collection_document(ctx, repr_)
        elif isinstance(repr_, ErrorDocumentRepr):
            return self._render_error_document(ctx, repr_)
        else:
            raise AssertionError("never get here")

    def __init__(self, render_decimal_as_str: bool = True):
        self._render_decimal_as_str = render_decimal_as_str
