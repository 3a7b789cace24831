import datetime
import decimal

import pytest

from ..models import (
    CollectionDocumentRepr,
    ErrorDocumentRepr,
    ErrorRepr,
    LinkageRepr,
    LinkRepr,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)


@pytest.fixture
def target_class():
    from ..renderer import ReprRenderer

    return ReprRenderer


def test_singleton(target_class):
    target = target_class()

    result = target(
        SingletonDocumentRepr(
            links={"self": "/foos/1"},
            data=ResourceRepr(
                type="foos",
                id="1",
                attributes=[
                    ("a", 1),
                    ("b", 2),
                    ("c", 3),
                ],
                relationships=[
                    (
                        "item",
                        LinkageRepr(
                            links={
                                "self": "/foos/1/relationships/item",
                                "related": "/bars/1",
                            },
                            data=ResourceIdRepr(type="bars", id="1"),
                        ),
                    ),
                    (
                        "items",
                        LinkageRepr(
                            links={
                                "self": "/foos/1/relationships/items",
                                "related": LinkRepr("/bars", meta={"count": 2}),
                            },
                            data=[
                                ResourceIdRepr(type="bars", id="1"),
                                ResourceIdRepr(type="bars", id="2", meta={"rank": 1}),
                            ],
                            meta={"sorted": True},
                        ),
                    ),
                    ("parent", LinkageRepr(data=None)),
                    ("children", LinkageRepr(links={"related": "/foos/1/children"})),
                ],
            ),
            included=[ResourceRepr(type="bars", id="1", attributes={"name": "bar"})],
            meta={"total": 1},
        ),
    )
    assert result == {
        "links": {
            "self": "/foos/1",
        },
        "data": {
            "type": "foos",
            "id": "1",
            "attributes": {
                "a": 1,
                "b": 2,
                "c": 3,
            },
            "relationships": {
                "item": {
                    "links": {
                        "self": "/foos/1/relationships/item",
                        "related": "/bars/1",
                    },
                    "data": {"type": "bars", "id": "1"},
                },
                "items": {
                    "links": {
                        "self": "/foos/1/relationships/items",
                        "related": {"href": "/bars", "meta": {"count": 2}},
                    },
                    "data": [
                        {"type": "bars", "id": "1"},
                        {"type": "bars", "id": "2", "meta": {"rank": 1}},
                    ],
                    "meta": {"sorted": True},
                },
                "parent": {"data": None},
                "children": {"links": {"related": "/foos/1/children"}},
            },
        },
        "included": [
            {"type": "bars", "id": "1", "attributes": {"name": "bar"}},
        ],
        "meta": {"total": 1},
    }
    assert list(result["data"]["attributes"]) == ["a", "b", "c"]


def test_resource_without_id(target_class):
    assert target_class()(SingletonDocumentRepr(data=ResourceRepr(type="foos", id=None))) == {
        "data": {"type": "foos"},
    }


def test_null_data(target_class):
    assert target_class()(SingletonDocumentRepr(data=None)) == {"data": None}


def test_collection(target_class):
    result = target_class()(
        CollectionDocumentRepr(
            data=[ResourceRepr(type="foos", id="1"), ResourceRepr(type="foos", id="2")],
            links={"next": "/foos?page=2"},
        ),
    )
    assert result == {
        "data": [{"type": "foos", "id": "1"}, {"type": "foos", "id": "2"}],
        "links": {"next": "/foos?page=2"},
    }


def test_errors(target_class):
    result = target_class()(ErrorDocumentRepr(errors=[ErrorRepr(title="Oops", status="500")]))
    assert result == {"errors": [{"status": "500", "title": "Oops"}]}


@pytest.mark.parametrize(
    "render_decimal_as_str,value,expected",
    [
        (True, decimal.Decimal("1.5"), "1.5"),
        (False, decimal.Decimal("1.5"), 1.5),
        (True, datetime.datetime(2016, 8, 17, 8, 27, 12), "2016-08-17T08:27:12+00:00"),
        (True, datetime.date(2016, 8, 17), "2016-08-17"),
        (True, b"\x00\x01", "AAE="),
        (True, {"nested": [1, None, True]}, {"nested": [1, None, True]}),
    ],
)
def test_meta_values(target_class, render_decimal_as_str, value, expected):
    result = target_class(render_decimal_as_str=render_decimal_as_str)(
        SingletonDocumentRepr(data=None, meta={"value": value}),
    )
    assert result["meta"] == {"value": expected}


def test_unsupported_meta_value(target_class):
    with pytest.raises(TypeError) as e:
        target_class()(SingletonDocumentRepr(data=None, meta={"value": {"x": object()}}))
    assert str(e.value).startswith("/meta/value/x: unsupported type")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("foo", True),
        (1, True),
        (None, True),
        ({"a": [1, {"b": "c"}]}, True),
        ((1, 2), True),
        ({1: "a"}, False),
        ({"a": object()}, False),
        ([1, object()], False),
        ({1, 2}, False),
    ],
)
def test_is_renderable(target_class, value, expected):
    assert target_class().is_renderable(value) is expected
