#!/usr/bin/env python3

import unittest
import sys
import math

import numpy as np
from mpmath import mp

from testutils import DynTestCase
from .numutils import isclose, central_difference, NumericalError
from .settings import Settings, settings


class TestIsclose(DynTestCase):
    def test_float(self):
        self.assertTrue(isclose(1e7+1, 1e7+1, rel_tol=0, abs_tol=0))
        self.assertTrue(isclose(1e7+1, 1e7, rel_tol=1e-6))
        self.assertFalse(isclose(1e7+1, 1e7, rel_tol=1e-8))
        self.assertTrue(isclose(1e7+1, 1e7, rel_tol=0, abs_tol=2.0))

    def test_mpmath(self):
        with mp.workdps(30):
            a = mp.mpf('1e7') + mp.mpf('1e-20')
            b = mp.mpf('1e7')
            self.assertTrue(isclose(a, a, rel_tol=0, abs_tol=0, use_mp=True))
            self.assertFalse(isclose(a, b, use_mp=True))
            self.assertTrue(isclose(a, b, rel_tol=0, abs_tol=1e-19, use_mp=True))


class TestCentralDifference(DynTestCase):
    def test_orders(self):
        for order in (2, 4, 6, 8):
            self.assertAlmostEqual(central_difference(math.sin, 0.5, order=order),
                                   math.cos(0.5), places=8)

    def test_scalar_result(self):
        self.assertIsType(central_difference(math.exp, 1.0), float)

    def test_large_argument(self):
        # The step scales with |x|.
        self.assertAlmostEqual(central_difference(lambda x: x**2, 1e6) / 2e6,
                               1.0, places=8)

    def test_arrays(self):
        x = np.linspace(-1, 1, 7)
        d = central_difference(np.sin, x, order=6)
        self.assertEqual(d.shape, x.shape)
        self.assertListAlmostEqual(d, np.cos(x), places=9)

    def test_invalid_order(self):
        with self.assertRaises(NumericalError):
            central_difference(math.sin, 0.5, order=3)
        with self.assertRaises(NumericalError):
            central_difference(math.sin, 0.5, order=10)


class TestSettingsOverride(DynTestCase):
    def test_override(self):
        prev = Settings.fd_order
        with settings(fd_order=8) as s:
            self.assertIs(s, Settings)
            self.assertEqual(Settings.fd_order, 8)
        self.assertEqual(Settings.fd_order, prev)

    def test_restore_on_error(self):
        prev = Settings.warn_approximate
        with self.assertRaises(RuntimeError):
            with settings(warn_approximate=not prev):
                raise RuntimeError
        self.assertEqual(Settings.warn_approximate, prev)

    def test_unknown(self):
        with self.assertRaises(TypeError):
            with settings(no_such_setting=1):
                pass


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
