r"""@package dyndiff.diff.differentiate

Symbolic differentiation of expressions.

The derivative of an expression w.r.t. one of its features is computed by
a post-order walk over its tree. Leaves have trivial derivatives, and
operator nodes are differentiated by the chain rule

\f[
    \partial_x f(g(x)) = f'(g(x))\, g'(x),
    \qquad
    \partial_x f(u(x), v(x)) = \partial_1 f(u, v)\, u'(x)
                               + \partial_2 f(u, v)\, v'(x),
\f]

where the partial derivatives \f$ \partial_i f \f$ are operators created by
opderiv.operator_derivative(). They, as well as the multiplication and
addition operators needed above, are added to a copy of the expression's
operator set. The result is a new expression in the same representation,
which can be evaluated, printed, and differentiated again.

Summands whose inner derivative vanishes are dropped during the walk, so
differentiating constant subtrees does not blow up the tree.


@b Examples

```
    ops = OperatorSet([ADD, MUL])
    ex = make_expression(BinaryApply(1, Variable(1), Variable(1)), ops)
    dex = D(ex, 1)            # x1 * x1  ->  (x1 + x1)
    print(dex.evaluator()([3.0]))   # prints: 6.0
```
"""

import numbers

from ..exprs.expression import Expression, make_expression
from ..exprs.nodes import Constant, Variable, OperatorNode, apply
from ..exprs.common import is_constant_node
from ..exprs.operators import ADD, MUL
from ..settings import Settings
from .errors import UnsupportedArity, VariableIndexOutOfRange
from .extension import OperatorSetExtension
from .opderiv import operator_derivative, DerivativeCache
from .rules import FORM_CONSTANT, FORM_ARGUMENT


__all__ = [
    "differentiate",
    "D",
]


_ZERO = Constant(0)
_ONE = Constant(1)


def _check_variable_index(expression, variable_index):
    if (isinstance(variable_index, bool)
            or not isinstance(variable_index, numbers.Integral)
            or not 1 <= variable_index <= expression.n_features):
        raise VariableIndexOutOfRange(variable_index, expression.n_features)


class _DifferentiationPass(object):
    r"""State of one differentiation of an expression.

    The only state is the growing operator set. The input tree is never
    modified.
    """

    def __init__(self, expression, variable_index, cache, simplify):
        self.source = expression.operators
        self.extension = OperatorSetExtension(expression.operators)
        self.variable_index = variable_index
        self.cache = cache
        self.simplify = simplify

    def derivative(self, root):
        r"""Return the root of the derivative tree of `root`.

        The tree is walked in post-order using an explicit stack, so that
        deeply nested trees do not hit the recursion limit. Subtrees shared
        by several parents are differentiated only once.
        """
        derivs = dict()
        for node in root.traverse_postorder(unique=True):
            dchildren = [derivs[id(c)] for c in node.children]
            derivs[id(node)] = self._node_derivative(node, dchildren)
        return derivs[id(root)]

    def _node_derivative(self, node, dchildren):
        r"""Derivative of one node given the derivatives of its children."""
        if isinstance(node, Constant):
            return _ZERO
        if isinstance(node, Variable):
            return _ONE if node.index == self.variable_index else _ZERO
        if not isinstance(node, OperatorNode):
            raise TypeError("Unknown node type: %r" % (node,))
        degree = node.degree
        op = self.source[node.op]
        if degree not in (1, 2):
            raise UnsupportedArity(degree, op)
        terms = []
        for arg, dchild in enumerate(dchildren, 1):
            if is_constant_node(dchild, 0):
                continue
            dop = operator_derivative(op, degree, arg, cache=self.cache)
            outer = self._outer(dop, node.children)
            if outer is None:
                continue
            terms.append(self._mul(outer, dchild))
        return self._sum(terms)

    def _outer(self, dop, children):
        r"""Node computing the derivative operator at the children.

        Returns `None` if the derivative is known to vanish.
        """
        form = dop.form if self.simplify else None
        if form is not None:
            kind, value = form
            if kind == FORM_CONSTANT:
                return None if value == 0 else Constant(value)
            if kind == FORM_ARGUMENT:
                return children[value-1]
        return apply(self.extension.register(dop), *children)

    def _mul(self, a, b):
        if self.simplify:
            if is_constant_node(b, 1):
                return a
            if is_constant_node(a, 1):
                return b
            if is_constant_node(a) and is_constant_node(b):
                return Constant(a.value * b.value)
        return apply(self.extension.register(MUL), a, b)

    def _sum(self, terms):
        if not terms:
            return _ZERO
        result = terms[0]
        for term in terms[1:]:
            if (self.simplify and is_constant_node(result)
                    and is_constant_node(term)):
                result = Constant(result.value + term.value)
            else:
                result = apply(self.extension.register(ADD), result, term)
        return result


def differentiate(expression, variable_index, cache=None, simplify=True):
    r"""Compute the derivative of an expression w.r.t. one of its features.

    Returns a new expression with an expanded set of operators. The operator
    set of `expression` is not modified.

    Args:
        expression: The exprs.expression.Expression to differentiate.
        variable_index: The feature (starting at `1`) to differentiate with
                respect to.
        cache:  Optional opderiv.DerivativeCache for the derivative
                operators. By default, the process wide cache is used, or a
                cache for just this call if settings.Settings.use_cache is
                `False`.
        simplify: Whether to apply simplifications beyond dropping vanishing
                terms, i.e. omit multiplications by one and replace constant
                or argument-projecting derivative operators by constants or
                the respective subtrees. Default is `True`.

    Raises:
        VariableIndexOutOfRange: if `variable_index` is not a feature of the
                expression.
        UnsupportedArity: if the tree contains operators taking neither one
                nor two arguments.
    """
    if not isinstance(expression, Expression):
        raise TypeError("Not an expression: %r" % (expression,))
    _check_variable_index(expression, variable_index)
    if cache is None and not Settings.use_cache:
        cache = DerivativeCache()
    diff_pass = _DifferentiationPass(expression, variable_index, cache, simplify)
    root = diff_pass.derivative(expression.root)
    return make_expression(root, diff_pass.extension.operators,
                           n_features=expression.n_features,
                           name=expression.name)


def D(ex, feature, **kwargs):
    r"""Compute the derivative of `ex` w.r.t. the `feature`-th variable.

    Short alias of differentiate(). Returns a new expression with an expanded
    set of operators.
    """
    return differentiate(ex, feature, **kwargs)
