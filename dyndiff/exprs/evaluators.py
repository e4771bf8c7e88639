r"""@package dyndiff.exprs.evaluators

Evaluators of expression.Expression objects.

An evaluator is a snapshot of an expression compiled into nested closures.
At creation time it is configured to either evaluate using fast floating
point operations (numpy, vectorized over arrays of samples) or slower
`mpmath` arbitrary precision operations.
"""

import numpy as np
from mpmath import mp

from ..utils import lmap, isiterable
from .nodes import Constant, Variable


__all__ = [
    "ExpressionEvaluator",
]


# Instruction codes of compiled programs.
_CONSTANT = 0
_VARIABLE = 1
_OPERATOR = 2


def _compile(root, funcs, converter):
    r"""Turn a tree into a callable of the feature vector.

    The tree is flattened into a program computing one value per distinct
    node, children first. This avoids recursion, so the depth of the tree is
    not limited by the recursion limit, and evaluates shared subtrees once.
    """
    program = []
    slots = dict()
    for node in root.traverse_postorder(unique=True):
        if isinstance(node, Constant):
            program.append((_CONSTANT, converter(node.value), ()))
        elif isinstance(node, Variable):
            program.append((_VARIABLE, node.index - 1, ()))
        else:
            program.append((_OPERATOR, funcs[node.op],
                            [slots[id(c)] for c in node.children]))
        slots[id(node)] = len(program) - 1
    def evaluate(x):
        values = []
        for code, arg, children in program:
            if code == _CONSTANT:
                values.append(arg)
            elif code == _VARIABLE:
                values.append(x[arg])
            else:
                values.append(arg(*[values[i] for i in children]))
        return values[-1]
    return evaluate


class ExpressionEvaluator(object):
    r"""Callable evaluating an expression at a point.

    The point `x` is a sequence of feature values, where `x[0]` is the value
    of feature `1`. In floating point mode, the feature values may be numpy
    arrays of equal shape, in which case the expression is evaluated at all
    samples at once. A 2-D array is interpreted as one row per feature.

    Derivatives of the expression are available via diff(), which
    differentiates the expression symbolically on first use and caches the
    resulting evaluators.
    """
    def __init__(self, expr, use_mp=False):
        r"""Create an evaluator for the current state of `expr`."""
        ## Expression this evaluator was created for.
        self.expr = expr
        ## Boolean indicating if computation uses `mpmath` (if `True`) or
        ## floating point operations.
        self.use_mp = use_mp
        ## Convenience function that converts scalar values to floats or
        ## `mp.mpf`, depending on the `use_mp` setting.
        self.converter = mp.mpf if use_mp else float
        self._n_features = expr.n_features
        self._f = _compile(expr.root, expr.operators.functions(use_mp),
                           self.converter)
        self._derivs = dict()

    def _prepare_x(self, x):
        if len(x) < self._n_features:
            raise ValueError("Expected %d feature values, got %d."
                             % (self._n_features, len(x)))
        if self.use_mp:
            return lmap(self.converter, x)
        if isinstance(x, np.ndarray):
            return x
        return [np.asarray(v, dtype=float)
                if isiterable(v) and not isinstance(v, np.ndarray) else v
                for v in x]

    def __call__(self, x):
        r"""Evaluate the expression at a point x."""
        x = self._prepare_x(x)
        result = self._f(x)
        if not self.use_mp and np.ndim(result) == 0:
            shape = self._sample_shape(x)
            if shape:
                return np.full(shape, float(result))
        return result

    def _sample_shape(self, x):
        r"""Shape of the samples in `x` (empty for scalar feature values)."""
        arrays = [v for v in x[:self._n_features] if isinstance(v, np.ndarray)]
        if not arrays:
            return ()
        return np.broadcast(*arrays).shape

    def diff(self, x, feature=1, n=1):
        r"""Evaluate the n'th derivative w.r.t. a feature at a point x.

        @param x
            Point at which to evaluate.
        @param feature
            Feature (starting at `1`) to differentiate with respect to.
        @param n
            Derivative order. `n=0` evaluates the expression itself.
        """
        if n == 0:
            return self(x)
        return self.derivative(feature, n)(x)

    def derivative(self, feature=1, n=1):
        r"""Return an evaluator for the n'th derivative w.r.t. a feature."""
        key = (feature, n)
        try:
            return self._derivs[key]
        except KeyError:
            pass
        if n == 1:
            expr = self.expr
        else:
            expr = self.derivative(feature, n-1).expr
        from ..diff.differentiate import differentiate
        ev = differentiate(expr, feature).evaluator(use_mp=self.use_mp)
        self._derivs[key] = ev
        return ev

    def function(self, feature=None, n=0):
        r"""Return a callable for the expression or one of its derivatives."""
        if n == 0:
            return self
        return self.derivative(1 if feature is None else feature, n)
