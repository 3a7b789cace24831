"""
Parsing of the per-field ``jsonapi`` tag, whose grammar is::

    <kind>[,<name>[,<option>...]]

where ``kind`` is one of ``primary``, ``attr``, ``relation`` or ``client-id``.
``primary`` takes the resource type as its name, ``attr`` and ``relation``
take the member name used on the wire.  ``client-id`` stands alone.
"""

import dataclasses
import enum
import typing

from .exceptions import MalformedTagError, UnsupportedAnnotationError

TAG_KEY = "jsonapi"


class AnnotationKind(enum.Enum):
    PRIMARY = "primary"
    ATTR = "attr"
    RELATION = "relation"
    CLIENT_ID = "client-id"


OPTION_OMITEMPTY = "omitempty"
OPTION_ISO8601 = "iso8601"


@dataclasses.dataclass(frozen=True)
class FieldAnnotation:
    kind: AnnotationKind
    name: str = ""
    omitempty: bool = False
    iso8601: bool = False


def parse_tag(tag: str, record: type, field: str) -> FieldAnnotation:
    """
    Parses a ``jsonapi`` tag.

    :param str tag: the tag text.
    :param type record: the class the tag is declared on; used for error reporting.
    :param str field: the name of the field the tag is declared on; used for error reporting.
    :raises MalformedTagError: when the tag has fewer components than its kind requires.
    :raises UnsupportedAnnotationError: when the kind is not known.
    """
    args = [a.strip() for a in tag.split(",")]
    if args[0] == AnnotationKind.CLIENT_ID.value:
        # any further components are ignored
        return FieldAnnotation(kind=AnnotationKind.CLIENT_ID)

    if len(args) < 2:
        raise MalformedTagError(record, field, tag)

    try:
        kind = AnnotationKind(args[0])
    except ValueError:
        raise UnsupportedAnnotationError(args[0])

    options: typing.Set[str] = set()
    if kind is AnnotationKind.ATTR:
        options.update(args[2:])

    return FieldAnnotation(
        kind=kind,
        name=args[1],
        omitempty=OPTION_OMITEMPTY in options,
        iso8601=OPTION_ISO8601 in options,
    )
