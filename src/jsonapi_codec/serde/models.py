"""
Classes in :py:mod:`jsonapi_codec.serde.models` are abstract representation of JSON:API document elements.
"""

import collections.abc
import dataclasses
import typing
from collections import OrderedDict

from .types import JSONValue
from .utils import JSONPointer

Source = typing.Union[JSONPointer, str]


class MissingType:
    def __bool__(self):
        return False

    def __repr__(self):
        return "Missing"

    def __init__(self):
        raise TypeError("Not directly instantiable")


Missing = object.__new__(MissingType)


@dataclasses.dataclass
class Repr:
    """
    The base class for any model objects.
    """

    _source_: typing.Optional[Source] = dataclasses.field(default=None, compare=False)


@dataclasses.dataclass(init=False)
class MetaContainerRepr(Repr):
    """
    :py:class:`MetaContainerRepr` is an abstract base for classes containing ``meta`` node.
    """

    meta: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __init__(
        self,
        *,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(_source_=_source_)
        self.meta = dict(meta) if meta is not None else {}


@dataclasses.dataclass(init=False)
class LinkRepr(MetaContainerRepr):
    """
    :py:class:`LinkRepr` represents a `Link Object <https://jsonapi.org/format/#document-links>`_,
    that is a link carrying an ``href`` and optional ``meta``.
    """

    href: str  # type: ignore

    def __init__(
        self,
        href: str,
        *,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(meta=meta, _source_=_source_)
        self.href = href


Link = typing.Union[str, LinkRepr]
Links = typing.Mapping[str, Link]


@dataclasses.dataclass(init=False)
class NodeRepr(MetaContainerRepr):
    """
    :py:class:`NodeRepr` is an abstract base for classes containing ``links`` node.
    """

    links: typing.Optional[typing.Dict[str, Link]] = None

    def __init__(
        self,
        *,
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Optional[Links] links: a mapping of link names to either a URL or a :py:class:`LinkRepr`.
        :param Optional[Mapping[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(meta=meta, _source_=_source_)
        self.links = OrderedDict(links) if links is not None else None


@dataclasses.dataclass(init=False)
class ResourceIdRepr(MetaContainerRepr):
    """
    Instances of :py:class:`ResourceIdRepr` represent `Resource Identifier Objects <https://jsonapi.org/format/#document-resource-identifier-objects>`_
    """

    type: str  # type: ignore
    id: str  # type: ignore

    @property
    def identity(self) -> typing.Tuple[str, str]:
        return (self.type, self.id)

    def __init__(
        self,
        *,
        type: str,
        id: str,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param str id: a value for ``id`` property.
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(meta=meta, _source_=_source_)
        self.type = type
        self.id = id


LinkageData = typing.Union[MissingType, None, ResourceIdRepr, typing.Sequence[ResourceIdRepr]]


@dataclasses.dataclass(init=False)
class LinkageRepr(NodeRepr):
    """
    :py:class:`LinkageRepr` represents a `Resource Linkage <https://jsonapi.org/format/#document-resource-object-linkage>`_

    ``data`` is :py:data:`Missing` when the relationship object carries no ``data`` member,
    ``None`` when it is explicitly ``null``, a :py:class:`ResourceIdRepr` for a to-one linkage
    and a sequence of them for a to-many linkage.
    """

    data: LinkageData = Missing

    @property
    def is_to_many(self) -> bool:
        return isinstance(self.data, collections.abc.Sequence)

    def __init__(
        self,
        *,
        data: LinkageData = Missing,
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param LinkageData data: a value for ``data`` property.
        :param Optional[Links] links: a value for ``links`` property.
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.data = tuple(data) if isinstance(data, collections.abc.Sequence) else data


@dataclasses.dataclass(init=False)
class ResourceRepr(NodeRepr):
    """
    :py:class:`ResourceRepr` class represents a `Resource Object <https://jsonapi.org/format/#document-resource-objects>`_.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    attributes: typing.Mapping[str, JSONValue] = dataclasses.field(default_factory=OrderedDict)  # type: ignore
    relationships: typing.Mapping[str, LinkageRepr] = dataclasses.field(default_factory=OrderedDict)  # type: ignore

    @property
    def identity(self) -> typing.Tuple[str, str]:
        return (self.type, self.id or "")

    def __getitem__(self, name):
        return self.attributes[name]

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str],
        attributes: typing.Union[
            typing.Iterable[typing.Tuple[str, JSONValue]],
            typing.Mapping[str, JSONValue],
        ] = (),
        relationships: typing.Union[
            typing.Iterable[typing.Tuple[str, LinkageRepr]],
            typing.Mapping[str, LinkageRepr],
        ] = (),
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param Optional[str] id: an optional value for ``id`` property.
        :param attributes: key-value pairs (or a mapping) of the attributes.
        :param relationships: key-value pairs (or a mapping) of the relationships.
        :param Optional[Links] links: a value for ``links`` property.
        :param Optional[Mapping[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.type = type
        self.id = id
        self.attributes = OrderedDict(attributes)
        self.relationships = OrderedDict(relationships)


@dataclasses.dataclass(init=False)
class SourceRepr(Repr):
    """
    :py:class:`SourceRepr` represents a value for the ``source`` property of an `Error Object <https://jsonapi.org/format/#error-objects>`_.
    """

    pointer: typing.Optional[str] = None
    parameter: typing.Optional[str] = None

    def __init__(
        self,
        pointer: typing.Optional[str] = None,
        parameter: typing.Optional[str] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(_source_=_source_)
        self.pointer = pointer
        self.parameter = parameter


@dataclasses.dataclass(init=False)
class ErrorLinksRepr(Repr):
    about: typing.Optional[str] = None

    def __init__(self, about: typing.Optional[str] = None, _source_: typing.Optional[Source] = None):
        super().__init__(_source_=_source_)
        self.about = about


@dataclasses.dataclass(init=False)
class ErrorRepr(MetaContainerRepr):
    """
    :py:class:`ErrorRepr` represents an `Error Object <https://jsonapi.org/format/#error-objects>`_.
    Every member is optional and only the ones that are set get rendered.
    """

    id: typing.Optional[str] = None
    links: typing.Optional[ErrorLinksRepr] = None
    status: typing.Optional[str] = None
    code: typing.Optional[str] = None
    title: typing.Optional[str] = None
    detail: typing.Optional[str] = None
    source: typing.Optional[SourceRepr] = None

    def __str__(self) -> str:
        return f"Error: {self.title or ''} {self.detail or ''}\n"

    def __init__(
        self,
        *,
        id: typing.Optional[str] = None,
        links: typing.Optional[ErrorLinksRepr] = None,
        status: typing.Optional[str] = None,
        code: typing.Optional[str] = None,
        title: typing.Optional[str] = None,
        detail: typing.Optional[str] = None,
        source: typing.Optional[SourceRepr] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(meta=meta, _source_=_source_)
        self.id = id
        self.links = links
        self.status = status
        self.code = code
        self.title = title
        self.detail = detail
        self.source = source


@dataclasses.dataclass(init=False)
class DocumentReprBase(NodeRepr):
    included: typing.Sequence[ResourceRepr] = ()

    def __init__(
        self,
        *,
        included: typing.Iterable[ResourceRepr] = (),
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Iterable[ResourceRepr] included: side-loaded resources.
        :param Optional[Links] links: a value for ``links`` property.
        :param Optional[Mapping[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.included = tuple(included)


@dataclasses.dataclass(init=False)
class SingletonDocumentRepr(DocumentReprBase):
    data: typing.Optional[ResourceRepr] = None

    def __init__(
        self,
        *,
        data: typing.Optional[ResourceRepr] = None,
        included: typing.Iterable[ResourceRepr] = (),
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Optional[ResourceRepr] data: the primary resource, ``None`` for ``"data": null``.
        :param Iterable[ResourceRepr] included: side-loaded resources.
        :param Optional[Links] links: a value for ``links`` property.
        :param Optional[Mapping[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(included=included, links=links, meta=meta, _source_=_source_)
        self.data = data


@dataclasses.dataclass(init=False)
class CollectionDocumentRepr(DocumentReprBase):
    data: typing.Sequence[ResourceRepr] = ()

    def __init__(
        self,
        *,
        data: typing.Iterable[ResourceRepr] = (),
        included: typing.Iterable[ResourceRepr] = (),
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Iterable[ResourceRepr] data: the primary resources.
        :param Iterable[ResourceRepr] included: side-loaded resources.
        :param Optional[Links] links: a value for ``links`` property.
        :param Optional[Mapping[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(included=included, links=links, meta=meta, _source_=_source_)
        self.data = tuple(data)


@dataclasses.dataclass(init=False)
class ErrorDocumentRepr(NodeRepr):
    errors: typing.Sequence[ErrorRepr] = ()

    def __init__(
        self,
        *,
        errors: typing.Iterable[ErrorRepr],
        links: typing.Optional[Links] = None,
        meta: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.errors = tuple(errors)


DocumentRepr = typing.Union[SingletonDocumentRepr, CollectionDocumentRepr, ErrorDocumentRepr]
