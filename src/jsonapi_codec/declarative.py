"""
Declaration of records and the registry of their descriptors.

A record is a dataclass whose fields carry a ``jsonapi`` tag::

    @dataclasses.dataclass
    class Comment:
        id: int = field("primary,comments", default=0)
        body: str = field("attr,body", default="")

    @dataclasses.dataclass
    class Post:
        id: int = field("primary,posts", default=0)
        title: str = field("attr,title", default="")
        comments: typing.List[Comment] = field("relation,comments", default_factory=list)

A :py:class:`RecordDescriptor` is built the first time a class is used by the
decoder or the encoder and is kept for the lifetime of its registry; a class
whose declaration is invalid raises on every use.
"""

import abc
import dataclasses
import logging
import threading
import typing

from .exceptions import InvalidDeclarationError
from .native import NativeKind, NativeType, analyze_type
from .tags import TAG_KEY, AnnotationKind, FieldAnnotation, parse_tag

logger = logging.getLogger(__name__)


def field(
    tag: str,
    *,
    default: typing.Any = dataclasses.MISSING,
    default_factory: typing.Any = dataclasses.MISSING,
    metadata: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    **kwargs: typing.Any,
) -> typing.Any:
    """
    A :py:func:`dataclasses.field` carrying a ``jsonapi`` tag.

    :param str tag: the tag, e.g. ``"attr,title,omitempty"``.
    :param default: passed to :py:func:`dataclasses.field`.
    :param default_factory: passed to :py:func:`dataclasses.field`.
    :param metadata: extra metadata merged with the tag.
    """
    _metadata = dict(metadata) if metadata is not None else {}
    _metadata[TAG_KEY] = tag
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=_metadata, **kwargs
    )


class FieldDescriptor:
    """
    A :py:class:`FieldDescriptor` binds one native field to its annotation and analysed type.
    """

    name: str
    annotation: FieldAnnotation
    type: NativeType

    @property
    def is_to_many(self) -> bool:
        return self.type.unwrap().kind is NativeKind.SEQUENCE

    @property
    def relation_target(self) -> type:
        """
        The record class on the other side of a relationship field.
        """
        t = self.type.unwrap()
        if t.kind is NativeKind.SEQUENCE:
            assert t.item is not None
            t = t.item.unwrap()
        return typing.cast(type, t.type)

    def fetch_value(self, target: typing.Any) -> typing.Any:
        return getattr(target, self.name)

    def store_value(self, target: typing.Any, value: typing.Any) -> None:
        setattr(target, self.name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.annotation!r})"

    def __init__(
        self,
        name: str,
        annotation: FieldAnnotation,
        type: NativeType,
    ):
        self.name = name
        self.annotation = annotation
        self.type = type


class RecordDescriptor(metaclass=abc.ABCMeta):
    """
    A :py:class:`RecordDescriptor` holds the ordered field mapping of a record class.
    """

    class_: type
    fields: typing.Sequence[FieldDescriptor]
    primary: typing.Optional[FieldDescriptor]
    registry: "DescriptorRegistry"

    @property
    def type_name(self) -> typing.Optional[str]:
        return self.primary.annotation.name if self.primary is not None else None

    def require_primary(self) -> FieldDescriptor:
        if self.primary is None:
            raise InvalidDeclarationError(
                f"{self.class_.__name__} has no primary field and cannot be used as a resource"
            )
        return self.primary

    @abc.abstractmethod
    def new_instance(self) -> typing.Any:
        """
        Returns a fresh instance of the record with every field at its zero value.
        """
        ...  # pragma: nocover

    def zero_value(self, ntype: NativeType) -> typing.Any:
        if ntype.kind is NativeKind.RECORD:
            return self.registry.describe(ntype.type).new_instance()
        return ntype.zero()

    def __init__(
        self,
        registry: "DescriptorRegistry",
        class_: type,
        fields: typing.Iterable[FieldDescriptor],
    ):
        self.registry = registry
        self.class_ = class_
        self.fields = tuple(fields)
        self.primary = None
        for f in self.fields:
            if f.annotation.kind is AnnotationKind.PRIMARY:
                if self.primary is not None:
                    raise InvalidDeclarationError(
                        f"{class_.__name__} declares more than one primary field "
                        f"({self.primary.name}, {f.name})"
                    )
                self.primary = f
            elif f.annotation.kind is AnnotationKind.RELATION:
                t = f.type.unwrap()
                if t.kind is NativeKind.SEQUENCE:
                    assert t.item is not None
                    t = t.item.unwrap()
                if t.kind is not NativeKind.RECORD:
                    raise InvalidDeclarationError(
                        f"relation {class_.__name__}.{f.name} must refer to a record "
                        f"or a sequence of records, not {f.type.describe()}"
                    )


class DataclassRecordDescriptor(RecordDescriptor):
    _init_fields: typing.Sequence[typing.Tuple[str, typing.Callable[[], typing.Any]]]

    def new_instance(self) -> typing.Any:
        return self.class_(**{name: zero() for name, zero in self._init_fields})

    @classmethod
    def build(cls, registry: "DescriptorRegistry", class_: type) -> "DataclassRecordDescriptor":
        try:
            hints = typing.get_type_hints(class_)
        except NameError as e:
            raise InvalidDeclarationError(
                f"cannot resolve the annotations of {class_.__qualname__}: {e}"
            ) from e
        fields: typing.List[FieldDescriptor] = []
        init_fields: typing.List[typing.Tuple[str, typing.Callable[[], typing.Any]]] = []

        for f in dataclasses.fields(class_):
            ntype = analyze_type(hints.get(f.name, typing.Any), registry.is_record)
            tag = f.metadata.get(TAG_KEY)
            if tag is not None:
                fields.append(FieldDescriptor(f.name, parse_tag(tag, class_, f.name), ntype))
            if not f.init:
                continue
            if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
                # __init__ applies the declared default by itself
                continue
            init_fields.append((f.name, lambda ntype=ntype: descr.zero_value(ntype)))

        descr = cls(registry, class_, fields, init_fields)
        logger.debug(
            "described %s with %d tagged field(s) (type=%r)",
            class_.__qualname__,
            len(descr.fields),
            descr.type_name,
        )
        return descr

    def __init__(
        self,
        registry: "DescriptorRegistry",
        class_: type,
        fields: typing.Iterable[FieldDescriptor],
        init_fields: typing.Iterable[typing.Tuple[str, typing.Callable[[], typing.Any]]],
    ):
        super().__init__(registry, class_, fields)
        self._init_fields = tuple(init_fields)


DescriptorFactory = typing.Callable[["DescriptorRegistry", type], RecordDescriptor]


class DescriptorRegistry:
    """
    A :py:class:`DescriptorRegistry` maps record classes to their descriptors.
    Dataclasses are picked up on first use; other kinds of classes have to be
    registered with :py:meth:`register`.
    """

    _factories: typing.Dict[type, DescriptorFactory]
    _descriptors: typing.Dict[type, RecordDescriptor]
    _lock: threading.RLock

    def register(self, class_: type, factory: DescriptorFactory) -> None:
        """
        Registers ``class_`` as a record whose descriptor ``factory`` builds on first use.
        """
        with self._lock:
            self._factories[class_] = factory
            self._descriptors.pop(class_, None)

    def is_record(self, class_: typing.Any) -> bool:
        if not isinstance(class_, type):
            return False
        return class_ in self._factories or dataclasses.is_dataclass(class_)

    def describe(self, class_: type) -> RecordDescriptor:
        """
        Returns the descriptor of ``class_``.

        :raises InvalidDeclarationError: when the class is not a record or its tags are invalid.
        """
        with self._lock:
            descr = self._descriptors.get(class_)
            if descr is not None:
                return descr
            factory = self._factories.get(class_)
            if factory is None:
                if not (isinstance(class_, type) and dataclasses.is_dataclass(class_)):
                    raise InvalidDeclarationError(f"{class_!r} is not a record type")
                factory = DataclassRecordDescriptor.build
            # nothing is cached when the factory raises
            descr = self._descriptors[class_] = factory(self, class_)
            return descr

    def __contains__(self, class_: type) -> bool:
        return self.is_record(class_)

    def __init__(self):
        self._factories = {}
        self._descriptors = {}
        self._lock = threading.RLock()


default_registry = DescriptorRegistry()
