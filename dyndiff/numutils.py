r"""@package dyndiff.numutils

Miscellaneous numerical utilities and helpers.

The finite difference routines in this module are used as the last resort
when no closed form for the derivative of an operator is known.


@b Examples

```
    >>> central_difference(lambda x: x**3, 2.0, order=4)
    12.000000000...
```
"""

import numpy as np
from mpmath import mp


__all__ = [
    "isclose",
    "central_difference",
    "NumericalError",
]


# 1-D central finite difference coefficients for first derivatives on the
# points -n, ..., n.
COEFFS_1ST = [
    np.array([                  -1., 0.,   1.                 ]) /   2., # order=2
    np.array([            1.,   -8., 0.,   8.,   -1.          ]) /  12., # order=4
    np.array([     -1.,   9.,  -45., 0.,  45.,   -9.,  1.     ]) /  60., # order=6
    np.array([3., -32., 168., -672., 0., 672., -168., 32., -3.]) / 840., # order=8
]


class NumericalError(Exception):
    r"""Exception raised for problems with numerical differentiation."""
    pass


def isclose(a, b, rel_tol=None, abs_tol=None, use_mp=False):
    r"""Test if two numbers agree within an absolute/relative tolerance.

    For floating point comparison (i.e. if `use_mp==False`), the default
    relative tolerance is `1e-9` and the absolute one `0.0`.
    """
    if use_mp:
        return mp.almosteq(a, b, rel_eps=rel_tol, abs_eps=abs_tol)
    if rel_tol is None:
        rel_tol = 1e-9
    if abs_tol is None:
        abs_tol = 0.0
    return abs(a-b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)


def fd_step(x, order, rel_step=None):
    r"""Step size for central differences of the given order at `x`.

    The step scales with `max(1, |x|)` and is rounded such that `x + h` is
    exactly representable, which removes one source of round-off error.

    @param x
        Point (scalar or array) at which the derivative is computed.
    @param order
        Order of accuracy of the stencil.
    @param rel_step
        Relative step. By default, the optimal value
        ``eps**(1/(order+1))`` is used.
    """
    if rel_step is None:
        rel_step = np.finfo(float).eps ** (1.0/(order+1))
    x = np.asarray(x, dtype=float)
    h = rel_step * np.maximum(1.0, np.abs(x))
    return (x + h) - x


def central_difference(func, x, order=4, rel_step=None):
    r"""Approximate the first derivative of `func` at `x`.

    Uses the central 3-, 5-, 7- or 9-point stencils for the orders 2, 4, 6
    and 8, respectively. The function is called with numpy arrays if `x` is
    an array, so vectorized functions are differentiated at all points at
    once.

    @return A float for scalar `x`, otherwise an array of the shape of `x`.

    @param func
        Callable of one (scalar or array) argument.
    @param x
        Point(s) at which to compute the derivative.
    @param order
        Order of accuracy. Allowed values are 2, 4, 6 and 8.
    @param rel_step
        Relative step size, see fd_step().
    """
    n = order // 2
    if 2*n != order or not 1 <= n <= len(COEFFS_1ST):
        raise NumericalError("Unsupported finite difference order: %s" % order)
    coeffs = COEFFS_1ST[n-1]
    scalar = np.ndim(x) == 0
    x = np.asarray(x, dtype=float)
    h = fd_step(x, order, rel_step)
    result = 0.0
    for k, c in zip(range(-n, n+1), coeffs):
        if c != 0.0:
            result = result + c * np.asarray(func(x + k*h), dtype=float)
    result = result / h
    if scalar and np.ndim(result) == 0:
        return float(result)
    return result
