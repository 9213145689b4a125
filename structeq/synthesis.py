"""Builds the equality predicate and hash function for a type, from its
member descriptors. This is done once per type (see ``comparer.py``);
the returned closures do no further introspection."""
from __future__ import annotations

import collections.abc
import inspect
import itertools
import logging
import operator
import types
from enum import Enum
from typing import Any, Callable, Iterable, Sequence, TypeVar, Union, get_origin

from .config import Settings, get_settings
from .errors import UnsupportedMemberTypeError
from .hashing import HashCombiner, hash_sequence, hash_value, nan_equal
from .logging import get_logger
from .members import MemberDescriptor, MemberKind, unwrap_type

__all__ = ['PredicateT', 'HasherT', 'synthesize_predicate',
           'synthesize_hasher', 'sequence_equal', 'check_member_types']

T = TypeVar('T')

PredicateT = Callable[[T, T], bool]
HasherT = Callable[[T], int]
_MemberTestT = Callable[[Any, Any], bool]
_MemberHashT = Callable[[Any], int]

logger = get_logger(__name__)

_MISSING = object()


def sequence_equal(left: Iterable | None, right: Iterable | None) -> bool:
    """Ordered, element-wise equality. ``None`` is only equal to ``None``
    (so an absent sequence is never equal to an empty one)."""
    if left is right:
        return True
    if left is None or right is None:
        return False
    try:
        if len(left) != len(right):
            return False
    except TypeError:
        pass  # Not Sized, let zip_longest find out
    for a, b in itertools.zip_longest(left, right, fillvalue=_MISSING):
        if a is b:
            continue
        if a is None or a is _MISSING or b is _MISSING or not a == b:
            return False
    return True


# region ---- <Build-time checks> ----
_CONTAINER_ABCS = (collections.abc.Sequence, collections.abc.Set, collections.abc.Mapping)


def _class_of(tp: Any) -> type | None:
    """The class to check for a declared type, None if we can't know."""
    tp = unwrap_type(tp)[0]
    if get_origin(tp) in (Union, types.UnionType):
        return None
    if isinstance(origin := get_origin(tp), type):
        return origin  # e.g. list[int] -> list
    if origin is None and isinstance(tp, type):
        return tp
    return None  # Any, TypeVar, unions, string forward refs


def _identity_only(cls: type):
    if cls in (object, Any, type(None)) or issubclass(cls, (Enum, type)):
        return False  # Identity *is* their equality
    if inspect.isabstract(cls) or getattr(cls, '_is_protocol', False):
        return False  # Concrete subclasses will define it
    return cls.__eq__ is object.__eq__


def _check_type(owner: type, member: str, tp: Any, what: str):
    if (cls := _class_of(tp)) is None:
        return
    if cls.__hash__ is None or (inspect.isabstract(cls) and issubclass(cls, _CONTAINER_ABCS)):
        # Abstract containers could be (and usually are) unhashable at runtime
        hint = (' (mark it DeepCompare to compare it as a sequence)'
                if what == 'member' and issubclass(cls, collections.abc.Sequence)
                else '')
        raise UnsupportedMemberTypeError(
            f'The {what} type {tp!r} is not reliably hashable{hint}', owner, member)
    if _identity_only(cls):
        raise UnsupportedMemberTypeError(
            f'The {what} type {tp!r} has no equality of its own '
            f'(only compares by identity)', owner, member)


def check_member_types(owner: type, members: Sequence[MemberDescriptor]):
    """Raises UnsupportedMemberTypeError if a member can't be compared
    or hashed reliably. Doesn't touch any instances."""
    for m in members:
        if m.kind is MemberKind.PLAIN:
            _check_type(owner, m.name, m.declared_type, 'member')
        elif m.kind is MemberKind.SEQUENCE:
            _check_type(owner, m.name, m.element_type, 'element')
# endregion ---- </Build-time checks> ----


# region ---- <Equality> ----
def _value_test(get: Callable[[Any], Any]) -> _MemberTestT:
    def test(left, right):
        return get(left) == get(right)
    return test


def _nan_aware_test(get: Callable[[Any], Any]) -> _MemberTestT:
    def test(left, right):
        a = get(left)
        b = get(right)
        # NaN == NaN, else not reflexive
        return a is b or (a is not None and b is not None and nan_equal(a, b))
    return test


def _reference_test(get: Callable[[Any], Any]) -> _MemberTestT:
    def test(left, right):
        a = get(left)
        b = get(right)
        # Same object (including both None) => equal without calling __eq__
        return a is b or (a is not None and a == b)
    return test


def _sequence_test(get: Callable[[Any], Any]) -> _MemberTestT:
    def test(left, right):
        return sequence_equal(get(left), get(right))
    return test


def _member_test(m: MemberDescriptor) -> _MemberTestT:
    get = operator.attrgetter(m.name)
    if m.kind is MemberKind.SEQUENCE:
        return _sequence_test(get)
    if m.is_nan_aware:
        return _nan_aware_test(get)
    if m.is_value_kind:
        return _value_test(get)
    return _reference_test(get)


def _always_equal(_left, _right):
    return True


def synthesize_predicate(owner: type, members: Sequence[MemberDescriptor]
                         ) -> PredicateT:
    """Returns ``eq(left, right)``: the AND of the per-member tests, in
    member order. Neither argument may be None."""
    check_member_types(owner, members)
    tests = tuple(_member_test(m) for m in members if m.is_compared)
    if not tests:
        return _always_equal

    def predicate(left, right) -> bool:
        for test in tests:
            if not test(left, right):
                return False
        return True
    return predicate
# endregion ---- </Equality> ----


# region ---- <Hash> ----
def _member_hash(m: MemberDescriptor, settings: Settings) -> _MemberHashT:
    get = operator.attrgetter(m.name)
    if m.kind is MemberKind.SEQUENCE:
        return lambda obj: hash_sequence(get(obj), settings)
    if m.is_value_kind and not m.is_nan_aware:
        return lambda obj: hash(get(obj))
    return lambda obj: hash_value(get(obj), settings)


def synthesize_hasher(owner: type, members: Sequence[MemberDescriptor],
                      settings: Settings = None) -> HasherT:
    """Returns ``hash(obj)``: the member hashes combined in member order
    (the same order as ``synthesize_predicate`` uses)."""
    settings = settings or get_settings()
    check_member_types(owner, members)
    parts = tuple(_member_hash(m, settings) for m in members if m.is_compared)
    seed = settings.hash_seed
    null_hash = settings.null_hash

    def hasher(obj) -> int:
        if obj is None:
            return null_hash
        combiner = HashCombiner(seed)
        for part in parts:
            combiner.add(part(obj))
        return combiner.to_hash()
    return hasher
# endregion ---- </Hash> ----


def describe_members(members: Sequence[MemberDescriptor]) -> str:
    return ', '.join(
        f'{m.name}:{m.kind.value}' + ('?' if m.nullable else '')
        for m in members) or '<no members>'


def log_synthesis(owner: type, members: Sequence[MemberDescriptor]):
    if logger.isEnabledFor(logging.DEBUG):
        n_ignored = sum(not m.is_compared for m in members)
        logger.debug(f'Synthesized comparison for {owner.__qualname__}: '
                     f'{describe_members(members)} ({n_ignored} ignored)')
