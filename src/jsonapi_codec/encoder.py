"""
The encode engine.  :py:class:`Marshaler` turns records into document trees,
side-loading the records they refer to into ``included``.
"""

import collections.abc
import typing
from collections import OrderedDict

from .coercion import id_to_str, is_zero, to_wire
from .declarative import DescriptorRegistry, FieldDescriptor, default_registry
from .exceptions import (
    InvalidLinkTypeError,
    InvalidMetaTypeError,
    InvalidTypeError,
    UnexpectedTypeError,
)
from .interfaces import Linkable, MetaProvider, RelationshipLinkable, RelationshipMetaProvider
from .serde.builders import (
    CollectionDocumentBuilder,
    DocumentBuilder,
    ErrorDocumentBuilder,
    Identity,
    LinkageReprBuilder,
    ResourceReprBuilder,
    SingletonDocumentBuilder,
)
from .serde.models import DocumentRepr, ErrorRepr, Link, LinkRepr, Links
from .serde.renderer import ReprRenderer
from .serde.types import JSONObject, JSONValue, MutableJSONObject
from .tags import AnnotationKind


class MarshalContext:
    marshaler: "Marshaler"

    @property
    def truncate_numbers(self) -> bool:
        return self.marshaler.truncate_numbers

    def unmarshal_nested(self, class_: type, attributes: JSONObject) -> typing.Any:
        raise AssertionError("never get here")  # pragma: nocover

    def marshal_nested(self, record: typing.Any) -> typing.Mapping[str, JSONValue]:
        return self.marshaler._marshal_nested(self, record)

    def __init__(self, marshaler: "Marshaler"):
        self.marshaler = marshaler


class Marshaler:
    """
    :param DescriptorRegistry registry: the registry records are described by.
    :param bool truncate_numbers: handed down to the coercion functions.
    """

    registry: DescriptorRegistry
    truncate_numbers: bool
    _renderer: ReprRenderer

    def _checked_links(self, record: typing.Any, hook: str, links: typing.Any) -> "OrderedDict[str, Link]":
        if not isinstance(links, collections.abc.Mapping):
            raise InvalidLinkTypeError(record, hook, links, "links must be a mapping")
        retval: "OrderedDict[str, Link]" = OrderedDict()
        for name, link in links.items():
            if not isinstance(link, (str, LinkRepr)):
                raise InvalidLinkTypeError(
                    record, hook, link, f"link {name!r} is neither a string nor a LinkRepr"
                )
            if isinstance(link, LinkRepr) and not self._renderer.is_renderable(link.meta):
                raise InvalidLinkTypeError(record, hook, link, f"meta of link {name!r} is not renderable")
            retval[name] = link
        return retval

    def _checked_meta(self, record: typing.Any, hook: str, meta: typing.Any) -> typing.Dict[str, typing.Any]:
        if not isinstance(meta, collections.abc.Mapping):
            raise InvalidMetaTypeError(record, hook, meta, "meta must be a mapping")
        if not self._renderer.is_renderable(meta):
            raise InvalidMetaTypeError(record, hook, meta, "meta holds a value that cannot be rendered")
        return dict(meta)

    def _apply_relationship_hooks(
        self, record: typing.Any, name: str, builder: LinkageReprBuilder
    ) -> None:
        if isinstance(record, RelationshipLinkable):
            links = record.jsonapi_relationship_links(name)
            if links is not None:
                builder.links = self._checked_links(record, "jsonapi_relationship_links", links)
        if isinstance(record, RelationshipMetaProvider):
            meta = record.jsonapi_relationship_meta(name)
            if meta is not None:
                builder.meta = self._checked_meta(record, "jsonapi_relationship_meta", meta)

    def _apply_resource_hooks(self, record: typing.Any, builder: ResourceReprBuilder) -> None:
        if isinstance(record, Linkable):
            links = record.jsonapi_links()
            if links is not None:
                builder.links = self._checked_links(record, "jsonapi_links", links)
        if isinstance(record, MetaProvider):
            meta = record.jsonapi_meta()
            if meta is not None:
                builder.meta = self._checked_meta(record, "jsonapi_meta", meta)

    def _marshal_linkage(
        self,
        ctx: MarshalContext,
        doc_builder: typing.Optional[DocumentBuilder],
        f: FieldDescriptor,
        related: typing.Any,
    ) -> Identity:
        if not self.registry.is_record(type(related)):
            raise InvalidTypeError(f.type.describe(), related, f.name)
        primary = self.registry.describe(type(related)).require_primary()
        identity = (primary.annotation.name, id_to_str(primary.type, primary.fetch_value(related)))
        if doc_builder is not None:
            resource_builder = ResourceReprBuilder()
            self._marshal_resource(ctx, None, resource_builder, related)
            doc_builder.add_included(resource_builder)
        return identity

    def _marshal_relation(
        self,
        ctx: MarshalContext,
        doc_builder: typing.Optional[DocumentBuilder],
        builder: ResourceReprBuilder,
        f: FieldDescriptor,
        record: typing.Any,
    ) -> None:
        value = f.fetch_value(record)
        name = f.annotation.name
        rel_builder: LinkageReprBuilder
        if f.is_to_many:
            to_many = rel_builder = builder.to_many(name)
            for related in value if value is not None else ():
                to_many.add(*self._marshal_linkage(ctx, doc_builder, f, related))
        else:
            to_one = rel_builder = builder.to_one(name)
            if value is None:
                to_one.nullify()
            else:
                to_one.set(*self._marshal_linkage(ctx, doc_builder, f, value))
        self._apply_relationship_hooks(record, name, rel_builder)

    def _marshal_attribute(
        self,
        ctx: MarshalContext,
        builder: ResourceReprBuilder,
        f: FieldDescriptor,
        record: typing.Any,
    ) -> None:
        value = f.fetch_value(record)
        if f.annotation.omitempty and is_zero(f.type, value):
            return
        builder.add_attribute(
            f.annotation.name,
            to_wire(ctx, f.type, value, iso8601=f.annotation.iso8601, field=f.name),
        )

    def _marshal_resource(
        self,
        ctx: MarshalContext,
        doc_builder: typing.Optional[DocumentBuilder],
        builder: ResourceReprBuilder,
        record: typing.Any,
    ) -> None:
        """
        Populates ``builder`` with ``record``.  Related records are side-loaded into
        ``doc_builder`` unless it is None, in which case only their identifiers are emitted.
        """
        descr = self.registry.describe(type(record))
        primary = descr.require_primary()
        builder.type = primary.annotation.name
        for f in descr.fields:
            kind = f.annotation.kind
            if kind is AnnotationKind.PRIMARY:
                builder.id = id_to_str(f.type, f.fetch_value(record))
            elif kind is AnnotationKind.ATTR:
                self._marshal_attribute(ctx, builder, f, record)
            elif kind is AnnotationKind.RELATION:
                self._marshal_relation(ctx, doc_builder, builder, f, record)
        self._apply_resource_hooks(record, builder)

    def _marshal_nested(self, ctx: MarshalContext, record: typing.Any) -> typing.Mapping[str, JSONValue]:
        descr = self.registry.describe(type(record))
        builder = ResourceReprBuilder()
        for f in descr.fields:
            if f.annotation.kind is AnnotationKind.ATTR:
                self._marshal_attribute(ctx, builder, f, record)
        return builder.attributes

    def marshal_document(
        self,
        models: typing.Any,
        *,
        sideload: bool = True,
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> DocumentRepr:
        """
        Builds the document model for ``models``.

        :param models: a record, or a sequence of records for a collection document.
        :param bool sideload: put the related records in ``included``.
        :param links: document-level links.
        :param meta: document-level meta.
        :raises UnexpectedTypeError: when ``models`` is neither a record nor a sequence of them.
        """
        ctx = MarshalContext(self)
        doc_builder: DocumentBuilder
        if self.registry.is_record(type(models)):
            singleton = doc_builder = SingletonDocumentBuilder()
            self._marshal_resource(ctx, doc_builder if sideload else None, singleton.data, models)
        elif isinstance(models, collections.abc.Sequence) and not isinstance(models, (str, bytes)):
            collection = doc_builder = CollectionDocumentBuilder()
            for record in models:
                if not self.registry.is_record(type(record)):
                    raise UnexpectedTypeError(record)
                self._marshal_resource(
                    ctx, doc_builder if sideload else None, collection.next(), record
                )
        else:
            raise UnexpectedTypeError(models)

        if links is not None:
            doc_builder.links = OrderedDict(links)
        if meta is not None:
            doc_builder.meta = dict(meta)
        return typing.cast(DocumentRepr, doc_builder())

    def marshal(
        self,
        models: typing.Any,
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> MutableJSONObject:
        """
        Encodes a record, or a sequence of them, into a compound document tree.
        """
        return self._renderer(self.marshal_document(models, links=links, meta=meta))

    def marshal_payload_without_included(self, models: typing.Any) -> MutableJSONObject:
        """
        Encodes like :py:meth:`marshal` but leaves ``included`` out; relationships
        carry the identifiers only.
        """
        return self._renderer(self.marshal_document(models, sideload=False))

    def marshal_errors(self, errors: typing.Iterable[ErrorRepr]) -> MutableJSONObject:
        builder = ErrorDocumentBuilder()
        for error in errors:
            if not isinstance(error, ErrorRepr):
                raise UnexpectedTypeError(error, expected=("an ErrorRepr",))
            builder.add_error(error)
        return self._renderer(builder())

    def __init__(
        self,
        registry: typing.Optional[DescriptorRegistry] = None,
        truncate_numbers: bool = False,
    ):
        self.registry = registry if registry is not None else default_registry
        self.truncate_numbers = truncate_numbers
        self._renderer = ReprRenderer()
