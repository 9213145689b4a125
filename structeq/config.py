from __future__ import annotations

import functools
import os
from dataclasses import dataclass

__all__ = ['Settings', 'get_settings']


@dataclass(frozen=True)
class Settings:
    hash_seed: int = 0x5F3759DF
    null_hash: int = 0
    """Contribution of a ``None`` member or sequence element"""
    nan_hash: int = 0x7FF80000
    absent_sequence_hash: int = -1
    """Contribution of a ``DeepCompare`` member that is ``None`` altogether,
    kept apart from the hash of an empty sequence"""

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        if (seed := environ.get('STRUCTEQ_HASH_SEED')) is not None:
            return cls(hash_seed=int(seed, 0))
        return cls()


@functools.cache
def get_settings() -> Settings:
    """Read once per process. Comparers read this when they are built
    so changing the environment later won't affect existing comparers."""
    return Settings.from_env()
