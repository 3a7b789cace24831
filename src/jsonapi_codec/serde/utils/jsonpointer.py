import typing


def _escape(component: str) -> str:
    return component.replace("~", "~0").replace("/", "~1")


class JSONPointer:
    """
    An immutable `JSON Pointer <https://tools.ietf.org/html/rfc6901>`_ used to
    locate a node within a document for error reporting.

    .. code-block:: python

       p = JSONPointer() / "data" / "attributes" / "title"
       str(p)  # "/data/attributes/title"
    """

    components: typing.Tuple[str, ...]

    def __truediv__(self, component: str) -> "JSONPointer":
        return JSONPointer(*self.components, component)

    def __getitem__(self, index: int) -> "JSONPointer":
        return JSONPointer(*self.components, str(index))

    def __eq__(self, other: typing.Any) -> bool:
        if isinstance(other, JSONPointer):
            return self.components == other.components
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.components)

    def __str__(self) -> str:
        if not self.components:
            return "/"
        return "".join("/" + _escape(c) for c in self.components)

    def __repr__(self) -> str:
        return f"JSONPointer({str(self)!r})"

    def __init__(self, *components: str):
        self.components = tuple(components)
