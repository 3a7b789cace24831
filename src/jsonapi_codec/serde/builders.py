"""
Mutable counterparts of the document models.  The encoder fills these in while
it walks a record graph and calls them at the end to obtain the immutable models.
"""

import abc
import typing
from collections import OrderedDict

from .models import (
    CollectionDocumentRepr,
    ErrorDocumentRepr,
    ErrorRepr,
    Link,
    LinkageRepr,
    Repr,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .types import JSONValue

Identity = typing.Tuple[str, str]


class ReprBuilder(metaclass=abc.ABCMeta):
    meta: typing.Dict[str, typing.Any]
    links: typing.Optional[typing.Dict[str, Link]]

    @abc.abstractmethod
    def __call__(self) -> Repr:
        ...  # pragma: nocover

    def __init__(self):
        self.meta = {}
        self.links = None


class LinkageReprBuilder(ReprBuilder, metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def __call__(self) -> LinkageRepr:
        ...  # pragma: nocover


class ToManyRelReprBuilder(LinkageReprBuilder):
    data: typing.List[Identity]

    def add(self, type: str, id: str) -> None:
        self.data.append((type, id))

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(
            data=[ResourceIdRepr(type=type, id=id) for type, id in self.data],
            links=self.links,
            meta=self.meta,
        )

    def __init__(self):
        super().__init__()
        self.data = []


class ToOneRelReprBuilder(LinkageReprBuilder):
    data: typing.Optional[Identity]

    def set(self, type: str, id: str) -> None:
        self.data = (type, id)

    def nullify(self) -> None:
        self.data = None

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(
            data=ResourceIdRepr(type=self.data[0], id=self.data[1]) if self.data is not None else None,
            links=self.links,
            meta=self.meta,
        )

    def __init__(self):
        super().__init__()
        self.data = None


class ResourceReprBuilder(ReprBuilder):
    type: typing.Optional[str]
    id: typing.Optional[str]
    attributes: "OrderedDict[str, JSONValue]"
    relationships: "OrderedDict[str, LinkageReprBuilder]"

    @property
    def identity(self) -> Identity:
        assert self.type is not None
        return (self.type, self.id or "")

    def add_attribute(self, name: str, value: JSONValue) -> None:
        self.attributes[name] = value

    def _relationship(self, name: str, class_: typing.Type[LinkageReprBuilder]) -> typing.Any:
        rel = self.relationships.get(name)
        if rel is None:
            self.relationships[name] = rel = class_()
        elif not isinstance(rel, class_):
            raise TypeError(f"relationship {name!r} is already built as {type(rel).__name__}")
        return rel

    def to_many(self, name: str) -> ToManyRelReprBuilder:
        return self._relationship(name, ToManyRelReprBuilder)

    def to_one(self, name: str) -> ToOneRelReprBuilder:
        return self._relationship(name, ToOneRelReprBuilder)

    def __call__(self) -> ResourceRepr:
        assert self.type is not None
        return ResourceRepr(
            type=self.type,
            id=self.id,
            links=self.links,
            meta=self.meta,
            attributes=self.attributes,
            relationships=[(k, v()) for k, v in self.relationships.items()],
        )

    def __init__(self, type: typing.Optional[str] = None, id: typing.Optional[str] = None):
        super().__init__()
        self.type = type
        self.id = id
        self.attributes = OrderedDict()
        self.relationships = OrderedDict()


class DocumentBuilder(ReprBuilder, metaclass=abc.ABCMeta):
    included: "OrderedDict[Identity, ResourceReprBuilder]"

    def add_included(self, builder: ResourceReprBuilder) -> bool:
        """
        Side-loads ``builder`` unless a resource of the same identity is already there.

        :return: True if the resource got added.
        """
        if builder.identity in self.included:
            return False
        self.included[builder.identity] = builder
        return True

    @abc.abstractmethod
    def _primary_identities(self) -> typing.Set[Identity]:
        ...  # pragma: nocover

    def _build_included(self) -> typing.List[ResourceRepr]:
        """
        Builds the side-loaded resources, leaving out those that already are primary data.
        """
        primary = self._primary_identities()
        return [r() for identity, r in self.included.items() if identity not in primary]

    def __init__(self):
        super().__init__()
        self.included = OrderedDict()


class CollectionDocumentBuilder(DocumentBuilder):
    data: typing.List[ResourceReprBuilder]

    def next(self) -> ResourceReprBuilder:
        builder = ResourceReprBuilder()
        self.data.append(builder)
        return builder

    def _primary_identities(self) -> typing.Set[Identity]:
        return {b.identity for b in self.data if b.type is not None}

    def __call__(self) -> CollectionDocumentRepr:
        return CollectionDocumentRepr(
            data=[b() for b in self.data],
            included=self._build_included(),
            links=self.links,
            meta=self.meta,
        )

    def __init__(self):
        super().__init__()
        self.data = []


class SingletonDocumentBuilder(DocumentBuilder):
    data: ResourceReprBuilder

    def _primary_identities(self) -> typing.Set[Identity]:
        return {self.data.identity} if self.data.type is not None else set()

    def __call__(self) -> SingletonDocumentRepr:
        return SingletonDocumentRepr(
            data=self.data(),
            included=self._build_included(),
            links=self.links,
            meta=self.meta,
        )

    def __init__(self):
        super().__init__()
        self.data = ResourceReprBuilder()


class ErrorDocumentBuilder(ReprBuilder):
    errors: typing.List[ErrorRepr]

    def add_error(self, error: ErrorRepr) -> None:
        self.errors.append(error)

    def __call__(self) -> ErrorDocumentRepr:
        return ErrorDocumentRepr(errors=self.errors, links=self.links, meta=self.meta)

    def __init__(self):
        super().__init__()
        self.errors = []
