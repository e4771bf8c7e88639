r"""@package dyndiff.diff

Symbolic differentiation of expressions built from operator sets.

The main entry points are differentiate.differentiate() (also available as
differentiate.D()) to differentiate complete expressions and
opderiv.operator_derivative() to obtain the partial derivative of a single
operator.
"""

from .errors import DifferentiationError, UnsupportedArity
from .errors import VariableIndexOutOfRange, InvalidArgumentIndex
from .errors import ApproximateDerivative
from .opderiv import OperatorDerivative, DerivativeCache, operator_derivative
from .extension import register, OperatorSetExtension
from .differentiate import differentiate, D
