r"""@package testutils

Utilities to add more features to `unittest` classes.

This module provides a custom subclass of `unittest.TestCase`, namely
DynTestCase, which obeys the global configuration settings in TestSettings.
The latter can be configured by the script invoking the test run (see
`tests.py`).

The slowtest decorator marks tests that are skipped on normal runs. The
script starting the test must set `TestSettings.skipslow` to `False` for the
slow tests to be run.
"""

import sys
import functools
import unittest
import time

import numpy as np


__all__ = [
    "DynTestCase",
    "TestSettings",
    "slowtest",
]


def slowtest(func):
    """Decorator for skipping a test if TestSettings.skipslow is true."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if TestSettings.skipslow:
            raise unittest.SkipTest("skipping slow tests")
        return func(*args, **kwargs)
    return wrapper


class DynTestCase(unittest.TestCase):
    """Tweaked baseclass for unit tests.

    By deriving from this class, you:
        * Get timed individual tests if TestSettings.timing is true.
        * Can use assertions comparing lists/arrays of values and evaluated
          expressions against reference functions.
    """

    def run(self, result=None):
        start = time.time()
        try:
            return super(DynTestCase, self).run(result)
        finally:
            if TestSettings.timing:
                print("(%.4f seconds) ... " % (time.time() - start),
                      file=sys.stderr, end='')

    def assertIsType(self, obj, cls):
        r"""Assert that an object is exactly of a certain type."""
        self.assertIs(type(obj), cls)

    def assertListAlmostEqual(self, a, b, places=None, delta=None):
        r"""Assert that two iterables contain (almost) the same values."""
        if places is not None and delta is not None:
            raise TypeError("Cannot use delta and places at the same time")
        if places is None and delta is None:
            places = 7
        a = list(np.ravel(a))
        b = list(np.ravel(b))
        if len(a) != len(b):
            raise self.failureException("Lists have different lengths (%d != %d)" % (len(a), len(b)))
        fails = []
        for i, (x, y) in enumerate(zip(a, b)):
            if x == y:
                continue
            if delta is not None:
                if abs(x-y) > delta:
                    fails.append(i)
            elif round(abs(x-y), places) != 0:
                fails.append(i)
        if fails:
            maxN = 9
            msg = "%d elements differ.\n" % len(fails)
            msg += "\n".join(["  [{i}] {a} != {b}    (difference: {d})".format(
                i=i, a=a[i], b=b[i], d=(b[i]-a[i])) for i in fails[:maxN]])
            raise self.failureException(msg)

    def assertExprAlmostEqual(self, expr, func, points, places=None,
                              delta=None, use_mp=False):
        r"""Assert an expression agrees with a reference function.

        @param expr
            Expression to evaluate.
        @param func
            Reference function called with the feature values as separate
            arguments.
        @param points
            Sequence of points, each a sequence of feature values.
        """
        ev = expr.evaluator(use_mp=use_mp)
        self.assertListAlmostEqual(
            [ev(x) for x in points], [func(*x) for x in points],
            places=places, delta=delta,
        )


class TestSettings(object):
    """Global settings for tests."""
    ## Stop test run on first fail/error.
    failfast = False
    ## Whether output is buffered.\ Just information, cannot be used to toggle output buffering.
    buffering = False
    ## Whether the timing for each test case should be printed.
    timing = False
    ## Control whether tests marked as slowtest should be skipped.
    skipslow = True
