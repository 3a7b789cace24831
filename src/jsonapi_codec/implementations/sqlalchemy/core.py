import datetime
import logging
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...declarative import DescriptorRegistry, FieldDescriptor, RecordDescriptor, default_registry
from ...exceptions import InvalidDeclarationError
from ...native import Float64, Int16, Int32, Int64, analyze_type
from ...tags import TAG_KEY, parse_tag

logger = logging.getLogger(__name__)

# subclasses come before their bases
_COLUMN_TYPES: typing.Sequence[typing.Tuple[typing.Type[sa.types.TypeEngine], typing.Any]] = [
    (sa.SmallInteger, Int16),
    (sa.BigInteger, Int64),
    (sa.Integer, Int32),
    (sa.Float, Float64),
    (sa.Numeric, Float64),
    (sa.Boolean, bool),
    (sa.DateTime, datetime.datetime),
    (sa.JSON, typing.Any),
    (sa.String, str),
]


def column_annotation(column: sa.Column) -> typing.Any:
    """
    Returns the type annotation equivalent to the Python type of ``column``.
    """
    for sa_type, annotation in _COLUMN_TYPES:
        if isinstance(column.type, sa_type):
            break
    else:
        try:
            annotation = column.type.python_type
        except NotImplementedError:
            annotation = typing.Any
    if column.nullable:
        return typing.Optional[annotation]
    return annotation


def relationship_annotation(prop: orm.RelationshipProperty) -> typing.Any:
    target = prop.mapper.class_
    if prop.uselist:
        return typing.List[target]  # type: ignore
    return typing.Optional[target]


def _tag_of(prop: orm.interfaces.MapperProperty) -> typing.Optional[str]:
    tag = prop.info.get(TAG_KEY)
    if tag is None and isinstance(prop, orm.ColumnProperty):
        for column in prop.columns:
            tag = column.info.get(TAG_KEY)
            if tag is not None:
                break
    return tag


class SQLARecordDescriptor(RecordDescriptor):
    """
    Describes a mapped class whose columns and relationships carry their tag in
    ``info``::

        class Book(Base):
            __tablename__ = "books"
            id = sa.Column(sa.Integer, primary_key=True, info={"jsonapi": "primary,books"})
            title = sa.Column(sa.String, info={"jsonapi": "attr,title"})
    """

    mapper: orm.Mapper

    def new_instance(self) -> typing.Any:
        return self.class_()

    @classmethod
    def build(cls, registry: DescriptorRegistry, class_: type) -> "SQLARecordDescriptor":
        try:
            sa_mapper = orm.class_mapper(class_)
        except sa.exc.SQLAlchemyError as e:
            raise InvalidDeclarationError(f"{class_.__qualname__} is not a mapped class: {e}") from e

        fields: typing.List[FieldDescriptor] = []
        for prop in sa_mapper.attrs:
            tag = _tag_of(prop)
            if tag is None:
                continue
            if isinstance(prop, orm.ColumnProperty):
                annotation = column_annotation(prop.columns[0])
            elif isinstance(prop, orm.RelationshipProperty):
                target = prop.mapper.class_
                if not registry.is_record(target):
                    register_mapped_class(target, registry)
                annotation = relationship_annotation(prop)
            else:
                raise InvalidDeclarationError(
                    f"{class_.__qualname__}.{prop.key} cannot carry a jsonapi tag"
                )
            fields.append(
                FieldDescriptor(
                    prop.key,
                    parse_tag(tag, class_, prop.key),
                    analyze_type(annotation, registry.is_record),
                )
            )

        logger.debug("described mapped class %s with %d tagged field(s)", class_.__qualname__, len(fields))
        return cls(registry, class_, fields, sa_mapper)

    def __init__(
        self,
        registry: DescriptorRegistry,
        class_: type,
        fields: typing.Iterable[FieldDescriptor],
        mapper: orm.Mapper,
    ):
        super().__init__(registry, class_, fields)
        self.mapper = mapper


def register_mapped_class(class_: type, registry: typing.Optional[DescriptorRegistry] = None) -> type:
    """
    Registers a SQLAlchemy mapped class as a record.  Can be used as a class decorator.
    Mapped classes reached through tagged relationships get registered on the way.

    :param type class_: the mapped class.
    :param registry: the registry to register to; the process-wide one by default.
    """
    (registry if registry is not None else default_registry).register(class_, SQLARecordDescriptor.build)
    return class_
