r"""@package dyndiff.diff.extension

Copy-on-append extension of operator sets.

While differentiating, new operators (partial derivatives, and the
multiplication/addition needed by the chain rule) have to be added to the
operator set of the expression. Operator sets are immutable, so each
registration of a new operator produces a new set. The caller's set is never
modified, which makes concurrent differentiation of the same expression safe.
"""

from ..exprs.operators import OperatorSet


__all__ = [
    "register",
    "OperatorSetExtension",
]


def register(operator_set, new_operator):
    r"""Make sure an operator is part of an operator set.

    If `new_operator` is already contained in the set (w.r.t. equality, which
    for derivative operators means the same derivation triple), the set is
    returned unchanged together with the existing handle. Otherwise, a new
    extended set is returned with the handle of the appended operator.

    @return A pair ``(updated_operator_set, handle)``.
    """
    try:
        return operator_set, operator_set.index(new_operator)
    except ValueError:
        pass
    updated = operator_set.extended(new_operator)
    return updated, len(updated) - 1


class OperatorSetExtension(object):
    r"""Operator set growing during one differentiation pass.

    The extension starts from the operator set of the differentiated
    expression and threads the working set through all registrations of the
    pass. It also records which operators had to be appended.
    """

    def __init__(self, operators):
        if not isinstance(operators, OperatorSet):
            operators = OperatorSet(operators)
        self._base = operators
        self._operators = operators
        self._introduced = []

    @property
    def base(self):
        r"""Operator set the pass started with."""
        return self._base

    @property
    def operators(self):
        r"""Current (possibly extended) operator set."""
        return self._operators

    @property
    def introduced(self):
        r"""Tuple of the operators appended during this pass."""
        return tuple(self._introduced)

    def register(self, op):
        r"""Register an operator and return its handle."""
        size = len(self._operators)
        self._operators, handle = register(self._operators, op)
        if len(self._operators) > size:
            self._introduced.append(op)
        return handle

    def __len__(self):
        return len(self._operators)
