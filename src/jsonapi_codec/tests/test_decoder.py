import dataclasses
import datetime
import struct

import pytest

from ..declarative import DescriptorRegistry
from ..exceptions import (
    InvalidDeclarationError,
    InvalidDocumentError,
    InvalidIDError,
    InvalidISO8601Error,
    InvalidTimeError,
    InvalidTypeError,
    MalformedTagError,
    NumericOverflowError,
    RelationshipDepthError,
    ResourceTypeMismatchError,
    UnknownFieldNumberTypeError,
    UnsupportedAnnotationError,
)
from ..serde.exceptions import DeserializationError
from .testing import (
    BadModel,
    BogusModel,
    Comment,
    Company,
    CustomAttributeTypes,
    CustomFloatType,
    CustomIntType,
    CustomStringType,
    FrozenComment,
    ModelBadTypes,
    Narrow,
    Numeric,
    Person,
    Post,
    Resident,
    Timestamp,
    WithPointer,
)

UTC = datetime.timezone.utc


@pytest.fixture
def target():
    from ..decoder import Unmarshaler

    return Unmarshaler(DescriptorRegistry())


def post_payload():
    return {
        "data": {
            "type": "posts",
            "id": "1",
            "attributes": {
                "title": "New blog post",
                "body": "Blah blah blah",
                "blog_id": 5,
            },
            "relationships": {
                "comments": {
                    "data": [
                        {"type": "comments", "id": "1"},
                        {"type": "comments", "id": "2"},
                    ],
                },
                "latest_comment": {
                    "data": {"type": "comments", "id": "2"},
                },
            },
        },
        "included": [
            {"type": "comments", "id": "1", "attributes": {"body": "foo", "post_id": 1}},
            {"type": "comments", "id": "2", "attributes": {"body": "bar", "post_id": 1}},
        ],
    }


def test_attributes_and_primary(target):
    post = target.unmarshal_payload(post_payload(), Post)
    assert post.id == 1
    assert post.title == "New blog post"
    assert post.body == "Blah blah blah"
    assert post.blog_id == 5


def test_relationships_resolve_against_included(target):
    post = target.unmarshal_payload(post_payload(), Post)
    assert post.comments == [
        Comment(id=1, post_id=1, body="foo"),
        Comment(id=2, post_id=1, body="bar"),
    ]
    assert post.latest_comment is post.comments[1]


def test_relationship_without_included_decodes_identifier_only(target):
    payload = post_payload()
    del payload["included"]
    post = target.unmarshal_payload(payload, Post)
    assert post.comments == [Comment(id=1), Comment(id=2)]
    assert post.latest_comment == Comment(id=2)


def test_included_last_write_wins(target):
    payload = post_payload()
    payload["included"].append(
        {"type": "comments", "id": "1", "attributes": {"body": "overridden", "post_id": 1}}
    )
    post = target.unmarshal_payload(payload, Post)
    assert post.comments[0].body == "overridden"


def test_null_relationships(target):
    post = target.unmarshal_payload(
        {
            "data": {
                "type": "posts",
                "id": "1",
                "relationships": {
                    "comments": {"data": None},
                    "latest_comment": {"data": None},
                },
            },
        },
        Post,
    )
    assert post.comments == []
    assert post.latest_comment is None


def test_relationship_without_data_is_ignored(target):
    post = target.unmarshal_payload(
        {
            "data": {
                "type": "posts",
                "id": "1",
                "relationships": {
                    "comments": {"links": {"related": "/posts/1/comments"}},
                },
            },
        },
        Post,
    )
    assert post.comments == []


def test_relationship_shape_mismatch(target):
    with pytest.raises(InvalidTypeError) as e:
        target.unmarshal_payload(
            {
                "data": {
                    "type": "posts",
                    "id": "1",
                    "relationships": {"comments": {"data": {"type": "comments", "id": "1"}}},
                },
            },
            Post,
        )
    assert e.value.field == "comments"

    with pytest.raises(InvalidTypeError) as e:
        target.unmarshal_payload(
            {
                "data": {
                    "type": "posts",
                    "id": "1",
                    "relationships": {
                        "latest_comment": {"data": [{"type": "comments", "id": "1"}]},
                    },
                },
            },
            Post,
        )
    assert e.value.field == "latest_comment"


def test_absent_attributes_keep_zero_value(target):
    post = target.unmarshal_payload({"data": {"type": "posts", "id": "1"}}, Post)
    assert post == Post(id=1)


def test_null_attributes(target):
    post = target.unmarshal_payload(
        {"data": {"type": "posts", "id": "1", "attributes": {"title": None}}}, Post
    )
    assert post.title == ""

    wp = target.unmarshal_payload(
        {
            "data": {
                "type": "with-pointers",
                "id": "2",
                "attributes": {"name": None, "is-active": None, "int-val": None, "float-val": None},
            },
        },
        WithPointer,
    )
    assert wp == WithPointer(id=2)


def test_optional_attributes(target):
    wp = target.unmarshal_payload(
        {
            "data": {
                "type": "with-pointers",
                "id": "2",
                "attributes": {"name": "alice", "is-active": True, "int-val": 8, "float-val": 1.1},
            },
        },
        WithPointer,
    )
    assert wp.id == 2
    assert wp.name == "alice"
    assert wp.is_active is True
    assert wp.int_val == 8
    assert wp.float_val == struct.unpack("<f", struct.pack("<f", 1.1))[0]


def test_create_payload_without_id(target):
    post = target.unmarshal_payload(
        {"data": {"type": "posts", "attributes": {"title": "draft"}}}, Post
    )
    assert post.id == 0
    assert post.title == "draft"


def test_client_id_is_not_populated(target):
    post = target.unmarshal_payload(
        {"data": {"type": "posts", "id": "1", "attributes": {"client-id": "abc"}}}, Post
    )
    assert post.client_id == ""


def test_identifier_coercion(target):
    comment = target.unmarshal_payload({"data": {"type": "comments", "id": "42"}}, Comment)
    assert comment.id == 42

    with pytest.raises(InvalidIDError):
        target.unmarshal_payload({"data": {"type": "comments", "id": "abc"}}, Comment)


def test_type_mismatch(target):
    with pytest.raises(ResourceTypeMismatchError) as e:
        target.unmarshal_payload({"data": {"type": "comments", "id": "1"}}, Post)
    assert e.value.actual == "comments"
    assert e.value.expected == "posts"


def test_iso8601(target):
    ts = target.unmarshal_payload(
        {
            "data": {
                "type": "timestamps",
                "id": "1",
                "attributes": {"timestamp": "2016-08-17T08:27:12Z", "next": None},
            },
        },
        Timestamp,
    )
    assert ts.time == datetime.datetime(2016, 8, 17, 8, 27, 12, tzinfo=UTC)
    assert ts.next is None

    with pytest.raises(InvalidISO8601Error) as e:
        target.unmarshal_payload(
            {"data": {"type": "timestamps", "id": "1", "attributes": {"timestamp": 1700000000}}},
            Timestamp,
        )
    assert e.value.field == "time"

    with pytest.raises(InvalidISO8601Error) as e:
        target.unmarshal_payload(
            {"data": {"type": "timestamps", "id": "1", "attributes": {"next": "17 Aug 2016"}}},
            Timestamp,
        )
    assert e.value.message == (
        "dates must be strings in the ISO8601 timestamp format: "
        "field `next` expects an ISO8601 timestamp string, got string ('17 Aug 2016')"
    )


def test_unix_timestamp(target):
    mbt = target.unmarshal_payload(
        {"data": {"type": "badtypes", "id": "1", "attributes": {"time_field": 1700000000}}},
        ModelBadTypes,
    )
    assert mbt.time_field == datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

    with pytest.raises(InvalidTimeError):
        target.unmarshal_payload(
            {
                "data": {
                    "type": "badtypes",
                    "id": "1",
                    "attributes": {"time_field": "2016-08-17T08:27:12Z"},
                },
            },
            ModelBadTypes,
        )


def test_invalid_types(target):
    with pytest.raises(InvalidTypeError) as e:
        target.unmarshal_payload(
            {"data": {"type": "badtypes", "id": "1", "attributes": {"string_field": 1}}},
            ModelBadTypes,
        )
    assert e.value.field == "string_field"
    assert "expects string, got number" in str(e.value)

    with pytest.raises(InvalidTypeError):
        target.unmarshal_payload(
            {"data": {"type": "badtypes", "id": "1", "attributes": {"float_field": "1.5"}}},
            ModelBadTypes,
        )


def test_unknown_number_type(target):
    with pytest.raises(UnknownFieldNumberTypeError):
        target.unmarshal_payload(
            {"data": {"type": "numeric", "id": "1", "attributes": {"cmplx": 1}}}, Numeric
        )


def test_numeric_narrowing(target):
    n = target.unmarshal_payload(
        {
            "data": {
                "type": "narrows",
                "id": "255",
                "attributes": {"small": -1.9, "unsigned": 200, "single": 0.1},
            },
        },
        Narrow,
    )
    assert n.id == 255
    assert n.small == -1
    assert n.unsigned == 200
    assert n.single == struct.unpack("<f", struct.pack("<f", 0.1))[0]


def test_numeric_overflow(target):
    with pytest.raises(NumericOverflowError) as e:
        target.unmarshal_payload(
            {"data": {"type": "narrows", "id": "1", "attributes": {"small": 300}}}, Narrow
        )
    assert e.value.field == "small"

    with pytest.raises(InvalidIDError):
        target.unmarshal_payload({"data": {"type": "narrows", "id": "256"}}, Narrow)


def test_numeric_truncation_when_enabled():
    from ..decoder import Unmarshaler

    target = Unmarshaler(DescriptorRegistry(), truncate_numbers=True)
    n = target.unmarshal_payload(
        {"data": {"type": "narrows", "id": "1", "attributes": {"small": 300, "unsigned": -1}}},
        Narrow,
    )
    assert n.small == 44
    assert n.unsigned == 255


def test_custom_scalar_types(target):
    cat = target.unmarshal_payload(
        {
            "data": {
                "type": "customtypes",
                "id": "1",
                "attributes": {
                    "int": 5,
                    "intptr": 5,
                    "intptrnull": None,
                    "float": 1.5,
                    "string": "foobar",
                },
            },
        },
        CustomAttributeTypes,
    )
    assert isinstance(cat.int_, CustomIntType) and cat.int_ == 5
    assert isinstance(cat.int_ptr, CustomIntType) and cat.int_ptr == 5
    assert cat.int_ptr_null is None
    assert isinstance(cat.float_, CustomFloatType) and cat.float_ == 1.5
    assert isinstance(cat.string, CustomStringType) and cat.string == "foobar"


def test_nested_records(target):
    company = target.unmarshal_payload(
        {
            "data": {
                "type": "companies",
                "id": "an_id",
                "attributes": {
                    "name": "Planet Express",
                    "founded-at": "2016-08-17T08:27:12Z",
                    "boss": {
                        "firstname": "Hubert",
                        "surname": "Farnsworth",
                        "age": 176,
                        "hired-at": "2016-08-17T08:27:12Z",
                    },
                    "teams": [
                        {
                            "name": "Dev",
                            "members": [{"firstname": "Sean"}, {"firstname": "Iz"}],
                            "leader": {"firstname": "Iz"},
                        },
                        {"name": "DxE", "members": [{"firstname": "Akshay"}]},
                    ],
                },
            },
        },
        Company,
    )
    assert company.id == "an_id"
    assert company.founded_at == datetime.datetime(2016, 8, 17, 8, 27, 12, tzinfo=UTC)
    assert company.boss.firstname == "Hubert"
    assert company.boss.age == 176
    assert company.boss.hired_at == datetime.datetime(2016, 8, 17, 8, 27, 12, tzinfo=UTC)
    assert len(company.teams) == 2
    assert [m.firstname for m in company.teams[0].members] == ["Sean", "Iz"]
    assert company.teams[0].leader.firstname == "Iz"
    assert company.teams[1].leader is None


def test_nested_record_requires_object(target):
    with pytest.raises(InvalidTypeError) as e:
        target.unmarshal_payload(
            {"data": {"type": "companies", "id": "1", "attributes": {"boss": "Hubert"}}},
            Company,
        )
    assert e.value.field == "boss"


def test_slices_fail_as_a_whole(target):
    with pytest.raises(InvalidTypeError):
        target.unmarshal_payload(
            {
                "data": {
                    "type": "companies",
                    "id": "1",
                    "attributes": {"teams": [{"name": "Dev"}, {"name": 1}]},
                },
            },
            Company,
        )


def test_cyclic_graph(target):
    alice = target.unmarshal_payload(
        {
            "data": {
                "type": "people",
                "id": "1",
                "attributes": {"name": "alice"},
                "relationships": {"friends": {"data": [{"type": "people", "id": "2"}]}},
            },
            "included": [
                {
                    "type": "people",
                    "id": "2",
                    "attributes": {"name": "bob"},
                    "relationships": {"friends": {"data": [{"type": "people", "id": "1"}]}},
                },
            ],
        },
        Person,
    )
    bob = alice.friends[0]
    assert bob.name == "bob"
    assert bob.friends[0] is alice


def chain_payload():
    return {
        "data": {
            "type": "people",
            "id": "1",
            "relationships": {"friends": {"data": [{"type": "people", "id": "2"}]}},
        },
        "included": [
            {
                "type": "people",
                "id": "2",
                "relationships": {"friends": {"data": [{"type": "people", "id": "3"}]}},
            },
            {"type": "people", "id": "3"},
        ],
    }


def test_max_depth():
    from ..decoder import Unmarshaler

    person = Unmarshaler(DescriptorRegistry(), max_depth=3).unmarshal_payload(chain_payload(), Person)
    assert person.friends[0].friends[0].id == 3

    with pytest.raises(RelationshipDepthError):
        Unmarshaler(DescriptorRegistry(), max_depth=2).unmarshal_payload(chain_payload(), Person)


def test_unmarshal_many(target):
    posts = target.unmarshal_many_payload(
        {
            "data": [
                {
                    "type": "posts",
                    "id": "1",
                    "attributes": {"title": "first"},
                    "relationships": {"comments": {"data": [{"type": "comments", "id": "1"}]}},
                },
                {
                    "type": "posts",
                    "id": "2",
                    "attributes": {"title": "second"},
                    "relationships": {"comments": {"data": [{"type": "comments", "id": "1"}]}},
                },
            ],
            "included": [{"type": "comments", "id": "1", "attributes": {"body": "shared"}}],
        },
        Post,
    )
    assert [p.title for p in posts] == ["first", "second"]
    assert posts[0].comments[0] is posts[1].comments[0]
    assert posts[0].comments[0].body == "shared"


def test_null_data(target):
    with pytest.raises(InvalidDocumentError):
        target.unmarshal_payload({"data": None}, Post)


def test_malformed_document(target):
    with pytest.raises(DeserializationError):
        target.unmarshal_payload({"included": []}, Post)

    with pytest.raises(DeserializationError):
        target.unmarshal_payload({"data": {"id": "1"}}, Post)


def test_unexpected_faults_become_invalid_document(target):
    with pytest.raises(InvalidDocumentError) as e:
        target.unmarshal_payload(
            {"data": {"type": "comments", "id": "1", "attributes": {"body": "x"}}}, FrozenComment
        )
    assert isinstance(e.value.__cause__, dataclasses.FrozenInstanceError)


def test_declaration_errors(target):
    with pytest.raises(MalformedTagError):
        target.unmarshal_payload({"data": {"type": "bad", "id": "1"}}, BadModel)

    with pytest.raises(UnsupportedAnnotationError) as e:
        target.unmarshal_payload({"data": {"type": "bogus-models", "id": "1"}}, BogusModel)
    assert e.value.kind == "bogus"

    with pytest.raises(InvalidDeclarationError):
        target.unmarshal_payload(
            {
                "data": {
                    "type": "residents",
                    "id": "1",
                    "relationships": {"home": {"data": {"type": "addresses", "id": "1"}}},
                },
            },
            Resident,
        )


def test_unmarshal_errors(target):
    errors = target.unmarshal_errors(
        {
            "errors": [
                {
                    "id": "0",
                    "title": "Test title.",
                    "detail": "Test detail",
                    "status": "400",
                    "source": {"pointer": "/data/attributes/field"},
                    "links": {"about": "https://example.com/errors/0"},
                },
            ],
        }
    )
    assert len(errors) == 1
    assert errors[0].title == "Test title."
    assert errors[0].source.pointer == "/data/attributes/field"
    assert errors[0].source.parameter is None
    assert errors[0].links.about == "https://example.com/errors/0"
    assert str(errors[0]) == "Error: Test title. Test detail\n"
