import collections.abc
import typing

JSONScalar = typing.Union[bool, int, float, str]
JSONArray = typing.Sequence[typing.Any]
MutableJSONArray = typing.MutableSequence[typing.Any]
JSONObject = typing.Mapping[str, typing.Any]
MutableJSONObject = typing.MutableMapping[str, typing.Any]
JSONValue = typing.Union[JSONScalar, JSONArray, JSONObject, None]


def json_kind_of(value: typing.Any) -> str:
    """
    Returns the name of the JSON variant that ``value`` belongs to.
    """
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, (int, float)):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, collections.abc.Mapping):
        return "object"
    elif isinstance(value, collections.abc.Sequence):
        return "array"
    else:
        return type(value).__name__


def is_json_number(value: typing.Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
