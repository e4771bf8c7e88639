r"""@package dyndiff.exprs.common

Utils used by multiple modules in dyndiff.exprs and dyndiff.diff.
"""

import numpy as np
from mpmath import mp


__all__ = [
    "constant_function",
    "is_constant_node",
]


def constant_function(value, use_mp=False):
    r"""Create a function of any number of arguments returning a constant.

    In floating point mode, the constant is broadcast to the shape of the
    arguments if any of them is a numpy array. This makes constant functions
    usable in vectorized evaluation of expressions.
    """
    if use_mp:
        c = mp.mpf(value)
        def mp_const(*args):
            # pylint: disable=unused-argument
            return c
        return mp_const
    c = float(value)
    def fp_const(*args):
        arrays = [a for a in args if isinstance(a, np.ndarray)]
        if arrays:
            return np.full(np.broadcast(*arrays).shape, c)
        return c
    return fp_const


def is_constant_node(node, value=None):
    r"""Check whether a node is a constant (with a particular value).

    @param node
        The node to check.
    @param value
        If given, additionally check that the constant equals this value.
    """
    from .nodes import Constant
    if not isinstance(node, Constant):
        return False
    return value is None or node.value == value
