"""Per-member markers, used with ``typing.Annotated``::

    @value_object
    @dataclass
    class Person:
        name: str
        cache_key: Annotated[int, Ignore]
        hobbies: Annotated[list[str], DeepCompare]

Both the class and an instance of it work as the marker.
"""
from __future__ import annotations

__all__ = ['Ignore', 'DeepCompare', 'has_marker']


class Ignore:
    """Member takes no part in equality or hashing"""


class DeepCompare:
    """Member is compared (and hashed) element-by-element, in order"""


def has_marker(metadata: tuple[object, ...], marker: type) -> bool:
    return any(m is marker or isinstance(m, marker) for m in metadata)
