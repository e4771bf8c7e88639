r"""@package dyndiff.diff.opderiv

Partial derivatives of operators.

The central object of this module is OperatorDerivative, a callable
representing the partial derivative of an operator w.r.t. one of its
arguments. Since it is itself an exprs.operators.Operator, it can be put into
operator sets and used in expression trees just like the operator it was
derived from.

Instances are created exclusively by operator_derivative(), which validates
its arguments, derives the rule (see rules.derive_rule()) and caches the
result. The cache is keyed by the triple ``(operator, degree, argument)``,
and so is equality of OperatorDerivative objects. Hence, requesting the same
partial derivative twice yields operators which are interchangeable in
operator sets.


@b Examples

```
    from dyndiff.exprs.operators import MUL, SIN
    d1 = operator_derivative(MUL, 2, 1)   # d/da (a b) = b
    print(d1, d1(2.0, 3.0))               # prints: ∂₁mul 3.0
    dsin = operator_derivative(SIN, 1, 1)
    print(dsin(0.0))                      # prints: 1.0
```
"""

import logging
import threading
import warnings

from ..exprs.operators import Operator
from ..settings import Settings
from .errors import UnsupportedArity, InvalidArgumentIndex
from .errors import ApproximateDerivative
from .rules import derive_rule


__all__ = [
    "OperatorDerivative",
    "DerivativeCache",
    "operator_derivative",
    "default_cache",
]


_log = logging.getLogger(__name__)

_SUBSCRIPTS = {1: "₁", 2: "₂"}


class OperatorDerivative(Operator):
    r"""Callable representing the partial derivative of an operator.

    Takes either one (`degree=1`) or two (`degree=2`) scalar arguments and
    returns a scalar. Floating point evaluation works element wise on numpy
    arrays.

    Attributes (read-only):
        op:     The operator this is the derivative of.
        degree: The arity of the operator (1 for unary, 2 for binary).
        arg:    Which argument the derivative is taken with respect to.
        form:   Simplification hint (see rules.FORM_CONSTANT and
                rules.FORM_ARGUMENT) or `None`.
        approximate: Whether the derivative is computed numerically.
    """

    def __init__(self, op, degree, arg, rule):
        r"""Create the derivative operator from a rules.DerivativeRule.

        Do not call this directly, use operator_derivative() instead.
        """
        if degree == 1:
            name = "∂%s" % op.name
        else:
            name = "∂%s%s" % (_SUBSCRIPTS[arg], op.name)
        super(OperatorDerivative, self).__init__(
            name, degree, fp=rule.fp, mp=rule.mp, symbolic=rule.symbolic,
        )
        self._op = op
        self._arg = arg
        self._form = rule.form
        self._approximate = rule.approximate
        self._source = rule.source

    @property
    def op(self):
        r"""The differentiated operator."""
        return self._op

    @property
    def degree(self):
        r"""The arity of the differentiated operator."""
        return self.arity

    @property
    def arg(self):
        r"""The argument (starting at `1`) the derivative is taken w.r.t."""
        return self._arg

    @property
    def key(self):
        r"""The triple ``(op, degree, arg)`` identifying this derivative."""
        return (self._op, self.arity, self._arg)

    @property
    def form(self):
        r"""Simplification hint of the rule (or `None`)."""
        return self._form

    @property
    def approximate(self):
        return self._approximate

    @property
    def source(self):
        r"""Origin of the rule: ``'table'``, ``'sympy'`` or ``'numerical'``."""
        return self._source

    def __eq__(self, other):
        if not isinstance(other, OperatorDerivative):
            return NotImplemented
        return self.key == other.key

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(('derivative',) + self.key)

    def __reduce__(self):
        return (operator_derivative, self.key)


class DerivativeCache(object):
    r"""Thread safe cache of OperatorDerivative objects.

    Concurrent misses for the same key may construct the derivative more than
    once. The first inserted object wins and is returned to all callers.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries = dict()

    def get(self, key):
        r"""Return the cached derivative for `key` or `None`."""
        with self._lock:
            return self._entries.get(key)

    def insert(self, key, derivative):
        r"""Insert a derivative unless present, return the cached one."""
        with self._lock:
            return self._entries.setdefault(key, derivative)

    def clear(self):
        r"""Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, key):
        with self._lock:
            return key in self._entries


_default_cache = DerivativeCache()


def default_cache():
    r"""Return the process wide DerivativeCache."""
    return _default_cache


def _validate(op, degree, arg):
    if not isinstance(op, Operator):
        raise TypeError("Not an operator: %r" % (op,))
    if degree not in (1, 2):
        raise UnsupportedArity(degree, op)
    if op.arity != degree:
        raise UnsupportedArity(op.arity, op)
    if arg not in range(1, degree+1):
        raise InvalidArgumentIndex(
            "Argument index %r out of range for operator %s of degree %d"
            % (arg, op.name, degree)
        )


def operator_derivative(op, degree, arg, cache=None):
    r"""Create an OperatorDerivative holding a partial derivative of `op`.

    Closed form derivatives are used whenever possible. For operators
    without known closed form, a numerical approximation is returned, which
    is flagged as `approximate` and triggers an ApproximateDerivative
    warning (unless disabled via settings.Settings.warn_approximate).

    @param op
        The operator to differentiate.
    @param degree
        The arity of the operator (1 for unary, 2 for binary).
    @param arg
        Which argument to take the derivative with respect to (starting at
        `1`).
    @param cache
        DerivativeCache to use. By default, the process wide cache is used
        (unless settings.Settings.use_cache is `False`, in which case nothing
        is cached).
    """
    _validate(op, degree, arg)
    if cache is None and Settings.use_cache:
        cache = _default_cache
    key = (op, degree, arg)
    if cache is not None:
        derivative = cache.get(key)
        if derivative is not None:
            return derivative
    derivative = OperatorDerivative(op, degree, arg, derive_rule(op, degree, arg))
    if derivative.approximate:
        _log.info("Using numerical derivative %s.", derivative.name)
        if Settings.warn_approximate:
            warnings.warn(
                "No closed form for %s, using numerical approximation."
                % derivative.name,
                ApproximateDerivative, stacklevel=2,
            )
    else:
        _log.debug("Created derivative %s (%s rule).", derivative.name,
                   derivative.source)
    if cache is not None:
        derivative = cache.insert(key, derivative)
    return derivative
