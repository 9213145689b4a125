"""Deterministic, order-sensitive hash combining.

Uses the mixing steps of xxHash32 (the same family as ``System.HashCode``
and CPython's tuple hash) but with a fixed seed so that hashes are stable
for the whole process lifetime. Plain XOR isn't used as it collapses for
repeated values (``x ^ x == 0``) and ignores order.
"""
from __future__ import annotations

import cmath
import decimal
import math
from typing import Iterable

from .config import Settings, get_settings
from .members import NAN_TYPES

__all__ = ['HashCombiner', 'hash_value', 'hash_sequence', 'combine',
           'is_nan', 'nan_equal']

PRIME2 = 2246822519
PRIME3 = 3266489917
PRIME4 = 668265263
PRIME5 = 374761393
MASK = 0xFFFF_FFFF


def _rotl(x: int, r: int):
    return ((x << r) | (x >> (32 - r))) & MASK


def _fold(value: int):
    # Python hashes are 64-bit (or arbitrary ints from __hash__), fold into 32
    return (value ^ (value >> 32)) & MASK


class HashCombiner:
    __slots__ = ('_acc', '_length')

    def __init__(self, seed: int = None):
        if seed is None:
            seed = get_settings().hash_seed
        self._acc = (seed + PRIME5) & MASK
        self._length = 0

    def add(self, value_hash: int):
        acc = (self._acc + _fold(value_hash) * PRIME3) & MASK
        self._acc = (_rotl(acc, 17) * PRIME4) & MASK
        self._length += 1
        return self

    def add_all(self, hashes: Iterable[int]):
        for h in hashes:
            self.add(h)
        return self

    def to_hash(self) -> int:
        acc = (self._acc + self._length * 4) & MASK
        # Avalanche
        acc ^= acc >> 15
        acc = (acc * PRIME2) & MASK
        acc ^= acc >> 13
        acc = (acc * PRIME3) & MASK
        acc ^= acc >> 16
        return acc - (1 << 32) if acc & 0x8000_0000 else acc  # signed 32-bit


def combine(*hashes: int, seed: int = None) -> int:
    return HashCombiner(seed).add_all(hashes).to_hash()


def is_nan(value: object) -> bool:
    """Any NaN, quiet or signalling. Never raises, unlike ``value != value``
    on a signalling ``Decimal`` NaN."""
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, complex):
        return cmath.isnan(value)
    if isinstance(value, decimal.Decimal):
        return value.is_nan()
    return False


def _as_complex(value: object):
    return complex(value) if isinstance(value, (int, float)) else value


def nan_equal(a: object, b: object) -> bool:
    """``a == b`` except that NaN equals NaN. Complex numbers are compared
    part by part so ``complex(nan, 1) != complex(nan, 2)``."""
    if isinstance(a, complex) or isinstance(b, complex):
        a, b = _as_complex(a), _as_complex(b)
        if isinstance(a, complex) and isinstance(b, complex):
            return nan_equal(a.real, b.real) and nan_equal(a.imag, b.imag)
        return not (is_nan(a) or is_nan(b)) and a == b
    a_nan, b_nan = is_nan(a), is_nan(b)
    if a_nan or b_nan:
        return a_nan and b_nan
    return a == b


def hash_value(value: object, settings: Settings = None) -> int:
    """Like ``hash()`` but deterministic for None and NaN
    (CPython hashes both by identity on some versions).
    Consistent with ``nan_equal``."""
    if value is None:
        return (settings or get_settings()).null_hash
    if isinstance(value, complex) and is_nan(value):
        if value.imag == 0:
            return hash_value(value.real, settings)  # Same as the float
        settings = settings or get_settings()
        return combine(hash_value(value.real, settings),
                       hash_value(value.imag, settings),
                       seed=settings.hash_seed)
    if isinstance(value, NAN_TYPES) and is_nan(value):
        return (settings or get_settings()).nan_hash
    return hash(value)


def hash_sequence(seq: Iterable[object] | None, settings: Settings = None) -> int:
    """Folds the element hashes of ``seq``, in order, into one hash"""
    settings = settings or get_settings()
    if seq is None:
        return settings.absent_sequence_hash
    combiner = HashCombiner(settings.hash_seed)
    for el in seq:
        combiner.add(hash_value(el, settings))
    return combiner.to_hash()
