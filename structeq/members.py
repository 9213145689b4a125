"""Finds the members of a class that take part in structural equality.

For dataclasses, these are the public fields, in ``dataclasses.fields()``
order. For other classes, we walk the MRO from the base-most class down to
the class itself and, in each class, take the public annotated attributes
(in annotation order) and then the public properties (in definition order).
A class with no members at all is rejected.
A member redefined in a subclass keeps the position it was first seen at
but uses the most-derived definition.
"""
from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import decimal
import fractions
import inspect
import types
import typing
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

from .errors import ComparerConfigurationError, SequenceConfigurationError
from .markers import DeepCompare, Ignore, has_marker

__all__ = ['MemberKind', 'MemberDescriptor', 'extract_members',
           'element_type_of', 'is_value_type', 'unwrap_type']

VALUE_TYPES: tuple[type, ...] = (
    bool, int, float, complex, decimal.Decimal, fractions.Fraction,
    datetime.date, datetime.time, datetime.timedelta, uuid.UUID, Enum)
"""Types compared by value, without the identity/``None`` checks
(``datetime.datetime`` is covered by ``datetime.date``)"""

NAN_TYPES: tuple[type, ...] = (float, complex, decimal.Decimal)


class MemberKind(Enum):
    PLAIN = 'plain'
    IGNORED = 'ignored'
    SEQUENCE = 'sequence'


@dataclass(frozen=True)
class MemberDescriptor:
    name: str
    declared_type: Any
    kind: MemberKind
    element_type: Any = None
    nullable: bool = False

    @property
    def is_compared(self):
        return self.kind is not MemberKind.IGNORED

    @property
    def is_value_kind(self):
        """Can use plain ``==`` (not nullable and of a value type)"""
        return (self.kind is MemberKind.PLAIN and not self.nullable
                and is_value_type(self.declared_type))

    @property
    def is_nan_aware(self):
        """Compared with NaN equal to NaN (nullable or not)"""
        return (self.kind is MemberKind.PLAIN
                and is_value_type(self.declared_type)
                and issubclass(self.declared_type, NAN_TYPES))


def is_value_type(tp: Any) -> bool:
    return (get_origin(tp) is None and isinstance(tp, type)
            and issubclass(tp, VALUE_TYPES))


def unwrap_type(tp: Any) -> tuple[Any, tuple[object, ...], bool]:
    """Strips ``Annotated`` and ``Optional`` off a type.

    Returns (bare_type, annotated_metadata, is_nullable). A union of several
    non-None types is returned as-is (we can't say anything about it)."""
    metadata: tuple[object, ...] = ()
    nullable = False
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            metadata += tp.__metadata__
            tp = get_args(tp)[0]
        elif origin is Union or origin is types.UnionType:
            args = get_args(tp)
            rest = tuple(a for a in args if a is not type(None))
            if len(rest) == len(args):
                break
            nullable = True
            if len(rest) != 1:
                tp = Union[rest]
                break
            tp = rest[0]
        else:
            break
    return tp, metadata, nullable


def element_type_of(tp: Any) -> Any | None:
    """Element type of an ordered container type, or None if it isn't one.

    ``tuple[X, ...]`` gives ``X``, otherwise the first type argument of
    a parameterised iterable (``list[X]``, ``Sequence[X]``, ``tuple[X, Y]``).
    Sets and mappings aren't ordered so aren't sequences."""
    tp = unwrap_type(tp)[0]
    origin = get_origin(tp)
    if not isinstance(origin, type):
        return None
    if not issubclass(origin, collections.abc.Iterable):
        return None
    if issubclass(origin, (collections.abc.Set, collections.abc.Mapping)):
        return None
    args = get_args(tp)
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    if not args or args == ((),):
        return None
    return args[0]


def _resolve_hints(obj: object, owner: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError) as e:
        raise ComparerConfigurationError(
            f"Can't resolve the annotations of {owner.__qualname__} "
            f"(needed to find its members)") from e


def _is_class_var(tp: Any):
    return tp is ClassVar or get_origin(tp) is ClassVar


def _member_hints(cls: type) -> dict[str, Any]:
    """Maps member name to its declared (annotated) type, in member order"""
    if dataclasses.is_dataclass(cls):
        hints = _resolve_hints(cls, cls)
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(cls)
                if not f.name.startswith('_')}
    hints = _resolve_hints(cls, cls)
    result: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name in inspect.get_annotations(klass):
            if name.startswith('_') or _is_class_var(hints.get(name)):
                continue
            result.setdefault(name, None)
        for name, value in vars(klass).items():
            if not name.startswith('_') and isinstance(value, property):
                result.setdefault(name, None)
    for name in result:
        # Most-derived definition wins
        attr = inspect.getattr_static(cls, name, None)
        if isinstance(attr, property):
            if attr.fget is None:
                raise ComparerConfigurationError(
                    f'Property {name!r} of {cls.__qualname__} is not readable')
            result[name] = _resolve_hints(attr.fget, cls).get('return', Any)
        else:
            result[name] = hints.get(name, Any)
    return result


def _describe(owner: type, name: str, declared: Any) -> MemberDescriptor:
    tp, metadata, nullable = unwrap_type(declared)
    if has_marker(metadata, Ignore):
        return MemberDescriptor(name, tp, MemberKind.IGNORED, nullable=nullable)
    if has_marker(metadata, DeepCompare):
        if (elem := element_type_of(tp)) is None:
            raise SequenceConfigurationError(
                f'Member {name!r} is marked DeepCompare but {tp!r} is not a '
                f'parameterised sequence type (e.g. list[str], '
                f'tuple[int, ...]) so it has no element type', owner, name)
        return MemberDescriptor(name, tp, MemberKind.SEQUENCE, elem, nullable)
    return MemberDescriptor(name, tp, MemberKind.PLAIN, nullable=nullable)


def extract_members(cls: type) -> list[MemberDescriptor]:
    """Returns the classified members of ``cls``, in member order
    (see module docstring). Ignored members are included, marked as such."""
    if not isinstance(cls, type):
        raise ComparerConfigurationError(
            f'Can only compare instances of classes, got {cls!r}')
    hints = _member_hints(cls)
    if not hints:
        # Would make every instance equal to every other one
        raise ComparerConfigurationError(
            f"{cls.__qualname__} has no members to compare (no public "
            f"annotated attributes or properties). Annotate the attributes "
            f"set in __init__, or expose them as properties")
    return [_describe(cls, name, declared) for name, declared in hints.items()]
