"""Route ``==``, ``!=`` and ``hash()`` through the synthesized comparers.

Use the ``ValueObject`` base class for hand-written classes, or the
``value_object`` decorator (outermost!) for dataclasses, as ``@dataclass``
would otherwise generate its own ``__eq__``::

    @value_object
    @dataclass
    class Money:
        amount: Decimal
        currency: str
"""
from __future__ import annotations

from typing import TypeVar

from .comparer import StructComparer, ValueObjectComparer

__all__ = ['ValueObject', 'value_object', 'struct_value']

T = TypeVar('T', bound=type)


def _vo_eq(self, other):
    return ValueObjectComparer.instance(type(self)).equals_object(self, other)


def _vo_ne(self, other):
    return not ValueObjectComparer.instance(type(self)).equals_object(self, other)


def _vo_hash(self):
    return ValueObjectComparer.instance(type(self)).hash_of(self)


def _struct_eq(self, other):
    return StructComparer.instance(type(self)).equals_object(self, other)


def _struct_ne(self, other):
    return not StructComparer.instance(type(self)).equals_object(self, other)


def _struct_hash(self):
    return StructComparer.instance(type(self)).hash_of(self)


class ValueObject:
    __slots__ = ()

    __eq__ = _vo_eq
    __ne__ = _vo_ne
    __hash__ = _vo_hash


def _install(cls, eq, ne, hash_):
    cls.__eq__ = eq
    cls.__ne__ = ne
    cls.__hash__ = hash_
    return cls


def value_object(cls: T) -> T:
    return _install(cls, _vo_eq, _vo_ne, _vo_hash)


def struct_value(cls: T) -> T:
    return _install(cls, _struct_eq, _struct_ne, _struct_hash)
