from __future__ import annotations

import unittest
from unittest.util import safe_repr


class TestCaseUtils(unittest.TestCase):
    def assertStructEqual(self, a: object, b: object, msg: str | None = None):
        """Checks ``a == b`` both ways, ``not a != b`` and equal hashes"""
        if not (a == b and b == a and not a != b and not b != a):
            standard_msg = f'{safe_repr(a)} is not structurally equal to {safe_repr(b)}'
            self.fail(self._formatMessage(msg, standard_msg))
        if hash(a) != hash(b):
            standard_msg = (f'{safe_repr(a)} == {safe_repr(b)} but their hashes '
                            f'differ ({hash(a)} != {hash(b)})')
            self.fail(self._formatMessage(msg, standard_msg))

    def assertStructNotEqual(self, a: object, b: object, msg: str | None = None):
        """Checks ``a != b`` both ways (and ``not a == b``)"""
        if a == b or b == a or not a != b or not b != a:
            standard_msg = f'{safe_repr(a)} is structurally equal to {safe_repr(b)}'
            self.fail(self._formatMessage(msg, standard_msg))
