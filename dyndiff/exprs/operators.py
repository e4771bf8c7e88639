r"""@package dyndiff.exprs.operators

Operators and operator sets.

An Operator is a named scalar function of a fixed number of arguments. It
carries a floating point implementation (which should accept numpy arrays for
vectorized evaluation), optionally an `mpmath` implementation for arbitrary
precision evaluation and optionally a symbolic form, i.e. a callable building
a SymPy expression from SymPy symbols. The symbolic form enables exact
derivatives of user supplied operators.

Expression trees do not reference operators directly. Instead, nodes store an
integer *handle*, which is the position of the operator inside the
OperatorSet belonging to the expression. Operator sets are immutable; the only
way to "grow" one is OperatorSet.extended(), which returns a new set with the
same handles for all previously contained operators.


@b Examples

```
    # A user defined operator with closed form derivative via SymPy.
    sigmoid = Operator(
        "sigmoid", 1,
        fp=lambda x: 1/(1 + np.exp(-x)),
        mp=lambda x: 1/(1 + mp.exp(-x)),
        symbolic=lambda x: 1/(1 + sp.exp(-x)),
    )
    ops = OperatorSet([ADD, MUL, SIN, sigmoid])
```
"""

import numpy as np
from mpmath import mp
import sympy as sp


__all__ = [
    "Operator",
    "OperatorSet",
    "BUILTIN_OPERATORS",
    "ADD", "SUB", "MUL", "DIV", "POW",
    "NEG", "SQUARE", "CUBE", "INV", "SQRT", "EXP", "LOG",
    "SIN", "COS", "TAN", "SINH", "COSH", "TANH", "ATAN", "ABS",
]


class Operator(object):
    r"""Named scalar function usable as computation of a tree node.

    Operators compare by identity. Two operator objects with equal name and
    implementation are therefore different operators.
    """

    ## Whether the operator is only a numerical approximation of the function
    ## it represents. Only derivative operators may be approximate.
    approximate = False

    def __init__(self, name, arity, fp, mp=None, symbolic=None, infix=None):
        r"""Create a new operator.

        Args:
            name:   Name used when printing expressions.
            arity:  Number of arguments (positive integer).
            fp:     Floating point implementation. Should work with numpy
                    arrays for vectorized evaluation.
            mp:     Optional `mpmath` implementation. If not given, `fp` is
                    used for arbitrary precision evaluation too.
            symbolic: Optional callable taking `arity` SymPy symbols and
                    returning a SymPy expression representing this operator.
            infix:  Optional infix symbol for printing binary operators.
        """
        if not callable(fp):
            raise TypeError("Floating point implementation must be callable.")
        if mp is not None and not callable(mp):
            raise TypeError("Mpmath implementation must be callable.")
        if symbolic is not None and not callable(symbolic):
            raise TypeError("Symbolic form must be callable.")
        if int(arity) != arity or arity < 1:
            raise TypeError("Arity must be a positive integer, got %r." % (arity,))
        if infix is not None and arity != 2:
            raise TypeError("Only binary operators can be printed infix.")
        self._name = name
        self._arity = int(arity)
        self._fp = fp
        self._mp = fp if mp is None else mp
        self._symbolic = symbolic
        self._infix = infix

    @property
    def name(self):
        r"""Name of the operator."""
        return self._name

    @property
    def arity(self):
        r"""Number of arguments of this operator."""
        return self._arity

    @property
    def symbolic(self):
        r"""Callable producing a SymPy expression (or `None`)."""
        return self._symbolic

    @property
    def infix(self):
        r"""Infix symbol (or `None`)."""
        return self._infix

    def function(self, use_mp=False):
        r"""Return the floating point or `mpmath` implementation."""
        return self._mp if use_mp else self._fp

    def __call__(self, *args):
        r"""Evaluate the operator in floating point arithmetic."""
        return self._fp(*args)

    def __str__(self):
        return self._name

    def __repr__(self):
        return "<%s %s/%d>" % (type(self).__name__, self._name, self._arity)


class _BuiltinOperator(Operator):
    r"""Operator of the built-in catalog.

    These are module level singletons and unpickle to the very same object,
    which retains their identity (and thus handles) across pickling.
    """
    def __reduce__(self):
        return (_builtin_operator, (self.name,))


def _builtin_operator(name):
    r"""Retrieve a built-in operator by name (used for unpickling)."""
    return BUILTIN_OPERATORS[name]


class OperatorSet(object):
    r"""Ordered, immutable collection of operators.

    The position of an operator in the set is its handle. Operators can only
    be added by creating a new set using extended(), so handles issued by a
    set remain valid in all sets derived from it.
    """

    def __init__(self, operators=()):
        r"""Create an operator set.

        @param operators
            Iterable of Operator objects. No operator may occur twice.
        """
        operators = tuple(operators)
        for i, op in enumerate(operators):
            if not isinstance(op, Operator):
                raise TypeError("Not an operator: %r" % (op,))
            if op in operators[:i]:
                raise ValueError("Duplicate operator: %r" % (op,))
        self._operators = operators

    @property
    def operators(self):
        r"""Tuple of all operators (in handle order)."""
        return self._operators

    @property
    def unary(self):
        r"""Tuple of the unary operators of this set."""
        return tuple(op for op in self._operators if op.arity == 1)

    @property
    def binary(self):
        r"""Tuple of the binary operators of this set."""
        return tuple(op for op in self._operators if op.arity == 2)

    def index(self, op):
        r"""Return the handle of an operator.

        Raises a `ValueError` if the operator is not in this set.
        """
        return self._operators.index(op)

    def extended(self, *operators):
        r"""Return a new set with the given operators appended.

        This set is not modified.
        """
        return OperatorSet(self._operators + operators)

    def functions(self, use_mp=False):
        r"""List of the implementations of all operators in handle order."""
        return [op.function(use_mp) for op in self._operators]

    def __getitem__(self, handle):
        return self._operators[handle]

    def __len__(self):
        return len(self._operators)

    def __iter__(self):
        return iter(self._operators)

    def __contains__(self, op):
        return op in self._operators

    def __eq__(self, other):
        if not isinstance(other, OperatorSet):
            return NotImplemented
        return self._operators == other._operators

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._operators)

    def __repr__(self):
        return "<OperatorSet(%s)>" % ", ".join(str(op) for op in self._operators)


def _builtin(name, arity, fp, mp, symbolic, infix=None):
    return _BuiltinOperator(name, arity, fp=fp, mp=mp, symbolic=symbolic,
                            infix=infix)


ADD = _builtin("add", 2, lambda a, b: a + b, lambda a, b: a + b,
               lambda a, b: a + b, infix="+")
SUB = _builtin("sub", 2, lambda a, b: a - b, lambda a, b: a - b,
               lambda a, b: a - b, infix="-")
MUL = _builtin("mul", 2, lambda a, b: a * b, lambda a, b: a * b,
               lambda a, b: a * b, infix="*")
DIV = _builtin("div", 2, lambda a, b: a / b, lambda a, b: a / b,
               lambda a, b: a / b, infix="/")
POW = _builtin("pow", 2, np.power, mp.power, lambda a, b: a**b, infix="^")

NEG = _builtin("neg", 1, np.negative, lambda a: -a, lambda a: -a)
SQUARE = _builtin("square", 1, np.square, lambda a: a * a, lambda a: a**2)
CUBE = _builtin("cube", 1, lambda a: a * a * a, lambda a: a * a * a,
                lambda a: a**3)
INV = _builtin("inv", 1, lambda a: 1.0 / a, lambda a: 1 / a, lambda a: 1 / a)
SQRT = _builtin("sqrt", 1, np.sqrt, mp.sqrt, sp.sqrt)
EXP = _builtin("exp", 1, np.exp, mp.exp, sp.exp)
LOG = _builtin("log", 1, np.log, mp.log, sp.log)
SIN = _builtin("sin", 1, np.sin, mp.sin, sp.sin)
COS = _builtin("cos", 1, np.cos, mp.cos, sp.cos)
TAN = _builtin("tan", 1, np.tan, mp.tan, sp.tan)
SINH = _builtin("sinh", 1, np.sinh, mp.sinh, sp.sinh)
COSH = _builtin("cosh", 1, np.cosh, mp.cosh, sp.cosh)
TANH = _builtin("tanh", 1, np.tanh, mp.tanh, sp.tanh)
ATAN = _builtin("atan", 1, np.arctan, mp.atan, sp.atan)
ABS = _builtin("abs", 1, np.abs, mp.fabs, sp.Abs)


## All built-in operators by name.
BUILTIN_OPERATORS = dict((op.name, op) for op in [
    ADD, SUB, MUL, DIV, POW,
    NEG, SQUARE, CUBE, INV, SQRT, EXP, LOG,
    SIN, COS, TAN, SINH, COSH, TANH, ATAN, ABS,
])
