import struct
import time
from dataclasses import dataclass
from typing import Annotated

from structeq import DeepCompare, Ignore, value_object


@value_object
@dataclass
class FuzzPerson:
    name: str | None
    age: int
    scratch: Annotated[bytes, Ignore]
    hobbies: Annotated[list[str | None] | None, DeepCompare]


@value_object
@dataclass
class FuzzReading:
    value: float
    optional: float | None
    owner: FuzzPerson | None


def _person_from(chunk: bytes):
    words = chunk.decode('latin-1').split('\x00')
    hobbies = None if len(chunk) % 3 == 0 else [w or None for w in words[1:]]
    return FuzzPerson(words[0] or None, len(words) % 4, chunk, hobbies)


def _reading_from(chunk: bytes):
    padded = chunk[:16].ljust(16, b'\x00')
    value, optional = struct.unpack('<dd', padded)  # Any bit pattern, incl. NaN/inf
    owner = _person_from(chunk[16:]) if len(chunk) > 16 else None
    return FuzzReading(value, None if len(chunk) % 2 else optional, owner)


def check_laws(a: object, b: object):
    assert a == a and b == b, 'not reflexive'
    assert (a == b) == (b == a), 'not symmetric'
    assert (a != b) == (not a == b), '!= disagrees with =='
    if a == b:
        assert hash(a) == hash(b), 'equal but different hashes'


def fuzz(buf: bytes):
    half = len(buf) // 2
    left, right = buf[:half], buf[half:]
    check_laws(_person_from(left), _person_from(right))
    check_laws(_person_from(buf), _person_from(bytes(buf)))
    check_laws(_reading_from(left), _reading_from(right))
    check_laws(_reading_from(buf), _reading_from(bytes(buf)))
    check_laws(_person_from(left), _reading_from(right))


class UsePerfCounterInsteadOfTime:
    """Hack to avoid overwriting everyone's time module so we only
    overwrite `pythonfuzz`'s time module and don't modify the module itself.
    This hack is necessary because time.time() is rather inaccurate so
    it is possible that between 2 iterations, the difference in time.time() is 0
    which results in DivisionByZeroError (when calculating iterations/sec).
    Therefore, we replace with the more accurate time.perf_counter(),
    just for `pythonfuzz`"""
    def __getattr__(self, item):
        if item == 'time':  # time.time
            item = 'perf_counter'
        return getattr(time, item)


if __name__ == '__main__':
    import argparse

    from pythonfuzz.fuzzer import Fuzzer
    import pythonfuzz.fuzzer as fuzzer_ns  # For patching pythonfuzz

    fuzzer_ns.time = UsePerfCounterInsteadOfTime()

    ap = argparse.ArgumentParser("fuzz.py", description="Runs a fuzzer for n iterations")
    # Use type=float as gh mobile cannot specify integers as workflow args
    ap.add_argument('-n', '--iterations', default=-1,
                    type=float, help="Number of iterations to run pythonfuzz for")
    ap.add_argument('-i', '--infinite',
                    action='store_const', const=-1, dest='iterations')
    args = ap.parse_args()

    fuzzer = Fuzzer(fuzz, dirs=['./pythonfuzz_corpus'], timeout=30, runs=int(args.iterations))
    fuzzer.start()
