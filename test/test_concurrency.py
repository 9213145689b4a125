import threading
import time
import unittest
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from unittest.mock import patch

from structeq import ValueObjectComparer, comparer_for, value_object


def _make_type():
    @value_object
    @dataclass
    class Contended:
        name: str
        age: int
    return Contended


class TestConcurrentFirstUse(unittest.TestCase):
    N_THREADS = 16

    def _slow_build(self, counter: list[int]):
        real_build = ValueObjectComparer.build

        def build(tp):
            counter.append(1)
            time.sleep(0.05)  # Widen the window for a second builder
            return real_build(tp)
        return build

    def test_single_build_single_instance(self):
        tp = _make_type()
        barrier = threading.Barrier(self.N_THREADS)
        builds = []

        def first_use():
            barrier.wait()
            return comparer_for(tp)

        with patch.object(ValueObjectComparer, 'build', self._slow_build(builds)):
            with ThreadPoolExecutor(self.N_THREADS) as pool:
                futures = [pool.submit(first_use) for _ in range(self.N_THREADS)]
                results = [f.result(timeout=30) for f in futures]
        self.assertEqual(1, len(builds))
        self.assertTrue(all(r is results[0] for r in results))
        self.assertIs(results[0], comparer_for(tp))

    def test_concurrent_equality(self):
        tp = _make_type()
        barrier = threading.Barrier(self.N_THREADS)

        def compare(i: int):
            barrier.wait()
            a, b = tp('Jefke', i), tp('Jefke', i)
            return a == b and hash(a) == hash(b) and a != tp('Jef', i)

        with ThreadPoolExecutor(self.N_THREADS) as pool:
            results = list(pool.map(compare, range(self.N_THREADS), timeout=30))
        self.assertTrue(all(results))

    def test_different_types_dont_block_each_other(self):
        types = [_make_type() for _ in range(4)]
        with ThreadPoolExecutor(4) as pool:
            comparers = list(pool.map(comparer_for, types, timeout=30))
        self.assertEqual(types, [c.type for c in comparers])


if __name__ == '__main__':
    unittest.main()
