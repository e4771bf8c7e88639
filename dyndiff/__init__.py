r"""@package dyndiff

Symbolic differentiation of expression trees over dynamic operator sets.

Expressions (see dyndiff.exprs) are trees whose interior nodes apply scalar
operators taken from an ordered operator set. Differentiating such an
expression w.r.t. one of its input features (see dyndiff.diff) produces a
new expression in the same representation, whose operator set is a copy of
the original one extended by the partial derivatives of the operators
involved.

@b Examples

```
    from dyndiff import *
    ops = OperatorSet([ADD, MUL, SIN])
    # sin(x1 * x2)
    ex = make_expression(UnaryApply(2, BinaryApply(1, Variable(1), Variable(2))), ops)
    dex = D(ex, 1)
    print(dex)                       # prints: (∂sin((x1 * x2)) * x2)
    print(dex.evaluator()([0.5, 2.0]))
```
"""

from .exprs import Operator, OperatorSet, BUILTIN_OPERATORS
from .exprs import Constant, Variable, OperatorNode, UnaryApply, BinaryApply
from .exprs import apply, Expression, make_expression
from .exprs.operators import ADD, SUB, MUL, DIV, POW
from .exprs.operators import NEG, SQUARE, CUBE, INV, SQRT, EXP, LOG
from .exprs.operators import SIN, COS, TAN, SINH, COSH, TANH, ATAN, ABS
from .diff import differentiate, D, operator_derivative, OperatorDerivative
from .diff import DerivativeCache, register, OperatorSetExtension
from .diff import DifferentiationError, UnsupportedArity
from .diff import VariableIndexOutOfRange, InvalidArgumentIndex
from .diff import ApproximateDerivative
from .settings import Settings, settings


__version__ = "0.1.0"
