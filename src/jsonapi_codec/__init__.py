from .codec import (  # noqa
    MEDIA_TYPE,
    Codec,
    default_codec,
    marshal,
    marshal_errors,
    marshal_errors_payload,
    marshal_payload,
    marshal_payload_without_included,
    unmarshal_errors,
    unmarshal_many_payload,
    unmarshal_payload,
)
from .coercion import ISO8601_TIME_FORMAT  # noqa
from .declarative import DescriptorRegistry, default_registry, field  # noqa
from .exceptions import (  # noqa
    CapabilityError,
    CoercionError,
    InvalidDeclarationError,
    InvalidDocumentError,
    InvalidIDError,
    InvalidISO8601Error,
    InvalidLinkTypeError,
    InvalidMetaTypeError,
    InvalidTimeError,
    InvalidTypeError,
    JSONAPICodecException,
    MalformedTagError,
    NumericOverflowError,
    RelationshipDepthError,
    ResourceTypeMismatchError,
    UnexpectedTypeError,
    UnknownFieldNumberTypeError,
    UnsupportedAnnotationError,
)
from .serde.exceptions import DeserializationError  # noqa
from .native import (  # noqa
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .serde.models import ErrorLinksRepr, ErrorRepr, LinkRepr, SourceRepr  # noqa
