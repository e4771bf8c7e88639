r"""@package dyndiff.exprs

Expression trees over a set of scalar operators.

Each expression consists of a tree of nodes (constants, references to input
features and applications of operators) together with the ordered set of
operators its nodes refer to by handle.

NOTE: Expression objects themselves cannot be evaluated. Instead, you take a
      *snapshot* of the expression and turn it into a callable object, here
      called an *evaluator* (see evaluators.ExpressionEvaluator).

Upon creation of an evaluator, it can be configured to either evaluate using
fast floating point operations (vectorized using numpy) or slower `mpmath`
arbitrary precision operations.

The differentiation engine in dyndiff.diff takes expressions of this package
and produces new expressions computing partial derivatives.
"""

from .operators import Operator, OperatorSet, BUILTIN_OPERATORS
from .nodes import Constant, Variable, OperatorNode, UnaryApply, BinaryApply
from .nodes import apply
from .expression import Expression, make_expression
