import typing


def english_enumerate(items: typing.Iterable[str], conj: str = "or") -> str:
    """
    Joins ``items`` the way they would be listed in an English sentence.

    >>> english_enumerate(["string", "number", "null"])
    'string, number, or null'
    """
    _items = list(items)
    if not _items:
        return ""
    elif len(_items) == 1:
        return _items[0]
    elif len(_items) == 2:
        return f"{_items[0]} {conj} {_items[1]}"
    return f"{', '.join(_items[:-1])}, {conj} {_items[-1]}"
