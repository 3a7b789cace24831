"""
This module contains the optional capabilities a record class may implement to
contribute ``links`` and ``meta`` to the resource objects the encoder emits,
and the context interface the coercion functions call back into.

The capabilities are structural; a record need not inherit from them::

    @dataclasses.dataclass
    class Blog:
        id: int = field("primary,blogs", default=0)

        def jsonapi_links(self):
            return {"self": f"https://example.com/api/blogs/{self.id}"}

"""
import typing

from .serde.models import Link
from .serde.types import JSONObject, JSONValue


@typing.runtime_checkable
class Linkable(typing.Protocol):
    def jsonapi_links(self) -> typing.Optional[typing.Mapping[str, Link]]:
        """
        Returns the links of the resource object itself.
        """
        ...  # pragma: nocover


@typing.runtime_checkable
class RelationshipLinkable(typing.Protocol):
    def jsonapi_relationship_links(
        self, relation: str
    ) -> typing.Optional[typing.Mapping[str, Link]]:
        """
        Returns the links of the relationship named ``relation``, or None.
        """
        ...  # pragma: nocover


@typing.runtime_checkable
class MetaProvider(typing.Protocol):
    def jsonapi_meta(self) -> typing.Optional[typing.Mapping[str, typing.Any]]:
        """
        Returns the ``meta`` of the resource object itself.
        """
        ...  # pragma: nocover


@typing.runtime_checkable
class RelationshipMetaProvider(typing.Protocol):
    def jsonapi_relationship_meta(
        self, relation: str
    ) -> typing.Optional[typing.Mapping[str, typing.Any]]:
        """
        Returns the ``meta`` of the relationship named ``relation``, or None.
        """
        ...  # pragma: nocover


class CoercionContext(typing.Protocol):
    """
    A :py:class:`CoercionContext` is handed down to the coercion functions by the
    decoder and the encoder so that nested records recurse into the engine that
    is currently running.
    """

    truncate_numbers: bool

    def unmarshal_nested(self, class_: type, attributes: JSONObject) -> typing.Any:
        ...  # pragma: nocover

    def marshal_nested(self, record: typing.Any) -> typing.Mapping[str, JSONValue]:
        ...  # pragma: nocover
