"""
The decode engine.  :py:class:`Unmarshaler` turns document trees into records,
resolving relationships against the side-loaded ``included`` resources.
"""

import contextlib
import logging
import typing

from .coercion import coerce_id, to_native
from .declarative import DescriptorRegistry, FieldDescriptor, RecordDescriptor, default_registry
from .exceptions import (
    InvalidDocumentError,
    InvalidTypeError,
    JSONAPICodecException,
    RelationshipDepthError,
    ResourceTypeMismatchError,
)
from .serde.deserializer import ReprDeserializer
from .serde.models import (
    CollectionDocumentRepr,
    DocumentReprBase,
    ErrorDocumentRepr,
    ErrorRepr,
    LinkageRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .serde.types import JSONObject, JSONValue
from .tags import AnnotationKind

logger = logging.getLogger(__name__)

T = typing.TypeVar("T")

MemoKey = typing.Tuple[type, str, str]


class UnmarshalContext:
    """
    The state of a single decode call.  The included index is built once and
    read-only afterwards; ``memo`` maps every resource decoded so far to its record.
    """

    unmarshaler: "Unmarshaler"
    included: typing.Dict[typing.Tuple[str, str], ResourceRepr]
    memo: typing.Dict[MemoKey, typing.Any]
    depth: int = 0

    @property
    def truncate_numbers(self) -> bool:
        return self.unmarshaler.truncate_numbers

    def unmarshal_nested(self, class_: type, attributes: JSONObject) -> typing.Any:
        return self.unmarshaler._unmarshal_nested(self, class_, attributes)

    def marshal_nested(self, record: typing.Any) -> typing.Mapping[str, JSONValue]:
        raise AssertionError("never get here")  # pragma: nocover

    def __init__(self, unmarshaler: "Unmarshaler", included: typing.Iterable[ResourceRepr]):
        self.unmarshaler = unmarshaler
        # a later occurrence of the same identity replaces the earlier one
        self.included = {r.identity: r for r in included}
        self.memo = {}
        logger.debug("indexed %d included resource(s)", len(self.included))


@contextlib.contextmanager
def _faults_as_invalid_document(class_: type) -> typing.Iterator[None]:
    try:
        yield
    except JSONAPICodecException:
        raise
    except Exception as e:
        raise InvalidDocumentError(class_) from e


def _identifier_tree(rid: ResourceIdRepr) -> JSONObject:
    return {"type": rid.type, "id": rid.id}


class Unmarshaler:
    """
    :param DescriptorRegistry registry: the registry records are described by.
    :param bool truncate_numbers: wrap out-of-range numbers into the declared width instead of failing.
    :param int max_depth: the deepest relationship nesting a decode may traverse.
    """

    registry: DescriptorRegistry
    truncate_numbers: bool
    max_depth: int
    _deserializer: ReprDeserializer

    def _store_null(self, descr: RecordDescriptor, f: FieldDescriptor, target: typing.Any) -> None:
        if f.type.is_optional:
            f.store_value(target, None)
        else:
            f.store_value(target, descr.zero_value(f.type))

    def _resolve(self, ctx: UnmarshalContext, rid: ResourceIdRepr) -> ResourceRepr:
        resource = ctx.included.get(rid.identity)
        if resource is None:
            logger.debug("%s:%s is not included; decoding it from its identifier", rid.type, rid.id)
            resource = ResourceRepr(type=rid.type, id=rid.id, _source_=rid._source_)
        return resource

    def _unmarshal_related(
        self, ctx: UnmarshalContext, class_: type, rid: ResourceIdRepr
    ) -> typing.Any:
        return self._unmarshal_resource(ctx, class_, self._resolve(ctx, rid))

    def _populate_relation(
        self,
        ctx: UnmarshalContext,
        descr: RecordDescriptor,
        f: FieldDescriptor,
        target: typing.Any,
        linkage: LinkageRepr,
    ) -> None:
        data = linkage.data
        class_ = f.relation_target
        if f.is_to_many:
            if data is None:
                f.store_value(target, [])
            elif isinstance(data, ResourceIdRepr):
                raise InvalidTypeError(f.type.describe(), _identifier_tree(data), f.name)
            else:
                f.store_value(
                    target,
                    [
                        self._unmarshal_related(ctx, class_, rid)
                        for rid in typing.cast(typing.Sequence[ResourceIdRepr], data)
                    ],
                )
        else:
            if data is None:
                self._store_null(descr, f, target)
            elif not isinstance(data, ResourceIdRepr):
                raise InvalidTypeError(
                    f.type.describe(),
                    [_identifier_tree(rid) for rid in typing.cast(typing.Sequence[ResourceIdRepr], data)],
                    f.name,
                )
            else:
                f.store_value(target, self._unmarshal_related(ctx, class_, data))

    def _populate(
        self,
        ctx: UnmarshalContext,
        descr: RecordDescriptor,
        target: typing.Any,
        resource: ResourceRepr,
    ) -> None:
        for f in descr.fields:
            annotation = f.annotation
            if annotation.kind is AnnotationKind.PRIMARY:
                # resources to be created carry no id yet
                if not resource.id:
                    continue
                if resource.type != annotation.name:
                    raise ResourceTypeMismatchError(resource.type, annotation.name)
                f.store_value(target, coerce_id(ctx, f.type, resource.id, f.name))
            elif annotation.kind is AnnotationKind.ATTR:
                if annotation.name not in resource.attributes:
                    continue
                value = resource.attributes[annotation.name]
                if value is None:
                    if f.type.is_optional:
                        f.store_value(target, None)
                    continue
                f.store_value(
                    target,
                    to_native(ctx, f.type, value, iso8601=annotation.iso8601, field=f.name),
                )
            elif annotation.kind is AnnotationKind.RELATION:
                linkage = resource.relationships.get(annotation.name)
                if linkage is None or linkage.data is Missing:
                    continue
                self._populate_relation(ctx, descr, f, target, linkage)

    def _unmarshal_resource(
        self, ctx: UnmarshalContext, class_: type, resource: ResourceRepr
    ) -> typing.Any:
        descr = self.registry.describe(class_)
        descr.require_primary()

        key: typing.Optional[MemoKey] = None
        if resource.id:
            key = (class_, resource.type, resource.id)
            record = ctx.memo.get(key)
            if record is not None:
                return record

        if ctx.depth >= self.max_depth:
            raise RelationshipDepthError(self.max_depth)

        record = descr.new_instance()
        if key is not None:
            ctx.memo[key] = record

        ctx.depth += 1
        try:
            self._populate(ctx, descr, record, resource)
        finally:
            ctx.depth -= 1
        return record

    def _unmarshal_nested(self, ctx: UnmarshalContext, class_: type, attributes: JSONObject) -> typing.Any:
        descr = self.registry.describe(class_)
        if ctx.depth >= self.max_depth:
            raise RelationshipDepthError(self.max_depth)
        record = descr.new_instance()
        ctx.depth += 1
        try:
            self._populate(ctx, descr, record, ResourceRepr(type="", id=None, attributes=attributes))
        finally:
            ctx.depth -= 1
        return record

    def new_context(self, document: DocumentReprBase) -> UnmarshalContext:
        return UnmarshalContext(self, document.included)

    def unmarshal_document(self, document: SingletonDocumentRepr, class_: typing.Type[T]) -> T:
        """
        Decodes the primary resource of a document model into a new ``class_`` record.

        :raises InvalidDocumentError: when the document carries ``"data": null``.
        """
        if document.data is None:
            raise InvalidDocumentError(class_)
        ctx = self.new_context(document)
        with _faults_as_invalid_document(class_):
            return typing.cast(T, self._unmarshal_resource(ctx, class_, document.data))

    def unmarshal_many_document(
        self, document: CollectionDocumentRepr, class_: typing.Type[T]
    ) -> typing.List[T]:
        ctx = self.new_context(document)
        with _faults_as_invalid_document(class_):
            return [
                typing.cast(T, self._unmarshal_resource(ctx, class_, resource))
                for resource in document.data
            ]

    def unmarshal_payload(self, payload: JSONValue, class_: typing.Type[T]) -> T:
        """
        Decodes a single-resource document tree into a new ``class_`` record.

        :param payload: the document as parsed from JSON.
        :param class_: the record class of the primary resource.
        :raises DeserializationError: when the tree is not a well-formed document.
        :raises JSONAPICodecException: when the resource does not map onto ``class_``.
        """
        return self.unmarshal_document(self._deserializer(SingletonDocumentRepr, payload), class_)

    def unmarshal_many_payload(self, payload: JSONValue, class_: typing.Type[T]) -> typing.List[T]:
        """
        Decodes a collection document tree into a list of new ``class_`` records,
        sharing one included index across all of them.
        """
        return self.unmarshal_many_document(
            self._deserializer(CollectionDocumentRepr, payload), class_
        )

    def unmarshal_errors(self, payload: JSONValue) -> typing.List[ErrorRepr]:
        return list(self._deserializer(ErrorDocumentRepr, payload).errors)

    def __init__(
        self,
        registry: typing.Optional[DescriptorRegistry] = None,
        truncate_numbers: bool = False,
        max_depth: int = 64,
    ):
        self.registry = registry if registry is not None else default_registry
        self.truncate_numbers = truncate_numbers
        self.max_depth = max_depth
        self._deserializer = ReprDeserializer()
