"""Per-type comparers, built on first use and shared by everyone after that.

Building is guarded by a per-type lock so exactly one thread synthesizes
a comparer for a type; others wait and then see the same instance.
After publication a comparer is immutable so reading needs no lock.
"""
from __future__ import annotations

import threading
from typing import Generic, TypeVar, Sequence

from .config import get_settings
from .errors import ComparerError, ComparerMisuseError
from .logging import get_logger
from .members import MemberDescriptor, extract_members
from .synthesis import (PredicateT, HasherT, synthesize_predicate,
                        synthesize_hasher, log_synthesis)

__all__ = ['ValueObjectComparer', 'StructComparer', 'comparer_for',
           'struct_comparer_for', 'is_built']

T = TypeVar('T')
CT = TypeVar('CT', bound='BaseComparer')

logger = get_logger(__name__)

_CacheKeyT = tuple[type, type]  # (comparer class, compared type)

_cache: dict[_CacheKeyT, BaseComparer] = {}
_build_locks: dict[_CacheKeyT, threading.Lock] = {}
_registry_lock = threading.Lock()


def _get_or_build(comparer_cls: type[CT], tp: type) -> CT:
    key = (comparer_cls, tp)
    if (entry := _cache.get(key)) is not None:
        return entry  # Fast path, no locking once published
    with _registry_lock:
        lock = _build_locks.setdefault(key, threading.Lock())
    with lock:
        # Someone else might've built it while we were waiting
        if (entry := _cache.get(key)) is not None:
            return entry
        entry = comparer_cls.build(tp)
        _cache[key] = entry
    with _registry_lock:
        _build_locks.pop(key, None)
    logger.debug(f'Published {comparer_cls.__name__} for {tp.__qualname__}')
    return entry


def is_built(comparer_cls: type[BaseComparer], tp: type) -> bool:
    return (comparer_cls, tp) in _cache


class BaseComparer(Generic[T]):
    __slots__ = ('type', 'members', '_predicate', '_hasher')

    type: type[T]
    members: tuple[MemberDescriptor, ...]

    def __init__(self, tp: type[T], members: Sequence[MemberDescriptor],
                 predicate: PredicateT, hasher: HasherT):
        object.__setattr__(self, 'type', tp)
        object.__setattr__(self, 'members', tuple(members))
        object.__setattr__(self, '_predicate', predicate)
        object.__setattr__(self, '_hasher', hasher)

    def __setattr__(self, key, value):
        raise AttributeError(f'{type(self).__name__} is immutable')

    def __delattr__(self, item):
        raise AttributeError(f'{type(self).__name__} is immutable')

    @classmethod
    def instance(cls: type[CT], tp: type) -> CT:
        """The one comparer of this kind for ``tp``"""
        return _get_or_build(cls, tp)

    @classmethod
    def build(cls: type[CT], tp: type) -> CT:
        """Synthesizes a new comparer. Use ``instance()`` instead,
        this doesn't cache anything."""
        try:
            members = extract_members(tp)
            settings = get_settings()
            predicate = synthesize_predicate(tp, members)
            hasher = synthesize_hasher(tp, members, settings)
        except ComparerError as e:
            logger.warning(f'Failed to build {cls.__name__} for {tp!r}: {e.args[0]}')
            e.add_note(f'  while building {cls.__name__} for {tp!r}')
            raise
        log_synthesis(tp, members)
        return cls(tp, members, predicate, hasher)

    def hash_of(self, obj: T) -> int:
        return self._hasher(obj)

    def __hash__(self):
        raise ComparerMisuseError(
            "Don't hash the comparer itself, hash a value "
            "with comparer.hash_of(value) instead")

    def __repr__(self):
        return f'{type(self).__name__}({self.type.__qualname__})'


class ValueObjectComparer(BaseComparer[T]):
    """Comparer for types whose values may be None."""
    __slots__ = ()

    def equals(self, left: T | None, right: T | None) -> bool:
        return left is right or (left is not None and right is not None
                                 and self._predicate(left, right))

    def equals_object(self, left: T | None, right: object) -> bool:
        """Like ``equals`` but ``right`` can be anything; only values
        of exactly this comparer's type (no subclasses) can be equal."""
        if left is right:
            return True
        tp = self.type
        return (type(right) is tp and type(left) is tp
                and self._predicate(left, right))


class StructComparer(BaseComparer[T]):
    """Comparer for types whose values are never None,
    so skips the identity and None checks."""
    __slots__ = ()

    def equals(self, left: T, right: T) -> bool:
        return self._predicate(left, right)

    def equals_object(self, left: T, right: object) -> bool:
        return type(right) is self.type and self._predicate(left, right)


def comparer_for(tp: type[T]) -> ValueObjectComparer[T]:
    return ValueObjectComparer.instance(tp)


def struct_comparer_for(tp: type[T]) -> StructComparer[T]:
    return StructComparer.instance(tp)
