"""Times the different ways of comparing value objects."""
import argparse
import cProfile
import contextlib
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from structeq import ValueObject, ValueObjectComparer, struct_value, value_object

PROFILER = False


class _Timer:
    _start = _end = None

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._end = time.perf_counter()

    def get(self):
        return self._end - self._start


# region ---- <Sample types, one per strategy> ----
class HandWrittenNested:
    def __init__(self, price, when):
        self.price = price
        self.when = when

    def __eq__(self, other):
        if not isinstance(other, HandWrittenNested):
            return NotImplemented
        return self.price == other.price and self.when == other.when

    def __hash__(self):
        return hash((self.price, self.when))


class HandWritten:
    def __init__(self, first_name, last_name, age, nested):
        self.first_name = first_name
        self.last_name = last_name
        self.age = age
        self.nested = nested

    def __eq__(self, other):
        if not isinstance(other, HandWritten):
            return NotImplemented
        return (self.first_name == other.first_name
                and self.last_name == other.last_name
                and self.age == other.age and self.nested == other.nested)

    def __hash__(self):
        return hash((self.first_name, self.last_name, self.age, self.nested))


@dataclass(frozen=True)
class DataclassNested:
    price: Decimal
    when: datetime


@dataclass(frozen=True)
class Dataclass:
    first_name: str
    last_name: str
    age: int
    nested: DataclassNested


@value_object
@dataclass
class SynthesizedNested:
    price: Decimal
    when: datetime


@value_object
@dataclass
class Synthesized:
    first_name: str
    last_name: str
    age: int
    nested: SynthesizedNested


@struct_value
@dataclass(frozen=True)
class StructNested:
    price: Decimal
    when: datetime


@struct_value
@dataclass(frozen=True)
class Struct:
    first_name: str
    last_name: str
    age: int
    nested: StructNested


class ValueObjectBased(ValueObject):
    first_name: str
    last_name: str
    age: int
    nested: SynthesizedNested

    def __init__(self, first_name, last_name, age, nested):
        self.first_name = first_name
        self.last_name = last_name
        self.age = age
        self.nested = nested
# endregion ---- </Sample types> ----


def _pair(cls, nested_cls):
    # Separate (but equal) instances so the identity shortcut can't kick in
    def make():
        return cls(''.join(['Jef', 'ke']), 'Janssens', 43,
                   nested_cls(Decimal(100), datetime(2019, 12, 24)))
    return make(), make()


class PerfOnce:
    def __init__(self, loops: int, profile: bool = PROFILER):
        self.loops = loops
        self.profile = profile
        self.lines: list[tuple[float, str]] = []  # First item used as key

    @classmethod
    def _fmt_time_taken(cls, name: str, delta_sec: float, loops: int):
        return (f'{name:<24} done in {delta_sec * 1000:8.2f}ms '
                f'({delta_sec / loops * 1e9:7.1f}ns/op)')

    def _maybe_profiler(self):
        if self.profile:
            return cProfile.Profile()
        return contextlib.nullcontext(None)

    def run(self):
        with self._maybe_profiler() as p:
            self.do_first_use()
            for sort_key, name, pair in [
                    (1.0, 'hand-written', _pair(HandWritten, HandWrittenNested)),
                    (2.0, 'dataclass', _pair(Dataclass, DataclassNested)),
                    (3.0, 'synthesized', _pair(Synthesized, SynthesizedNested)),
                    (4.0, 'struct', _pair(Struct, StructNested)),
                    (5.0, 'ValueObject base',
                     _pair(ValueObjectBased, SynthesizedNested))]:
                self.do_equals(sort_key, name, *pair)
                self.do_hash(sort_key + 0.5, name, pair[0])
        if p:
            p.dump_stats('perf_dump.prof')
        print(f'Perf for loops={self.loops} (profile={self.profile}):')
        for _k, s in sorted(self.lines):
            print(f'  {s}')

    def _add_line(self, sort_key: float, name: str, delta_sec: float, loops: int):
        self.lines.append((sort_key, self._fmt_time_taken(name, delta_sec, loops)))

    def do_first_use(self):
        with _Timer() as t:
            ValueObjectComparer.instance(Synthesized)
        self._add_line(0.0, 'synthesis (first use)', t.get(), 1)

    def do_equals(self, sort_key: float, name: str, a, b):
        assert a == b
        with _Timer() as t:
            for _ in range(self.loops):
                _r = a == b
        self._add_line(sort_key, f'{name} ==', t.get(), self.loops)

    def do_hash(self, sort_key: float, name: str, a):
        with _Timer() as t:
            for _ in range(self.loops):
                _r = hash(a)
        self._add_line(sort_key, f'{name} hash', t.get(), self.loops)


def main():
    ap = argparse.ArgumentParser('main.py', description=__doc__)
    ap.add_argument('-n', '--loops', type=int, default=200_000)
    ap.add_argument('-p', '--profile', action='store_true', default=PROFILER,
                    help='Also dump cProfile stats to perf_dump.prof')
    args = ap.parse_args()
    PerfOnce(args.loops, args.profile).run()


if __name__ == '__main__':
    main()
