r"""@package dyndiff.diff.errors

Exceptions and warnings of the differentiation engine.

Structural problems (unsupported arities, invalid indices) are deterministic
input validation failures. They are raised immediately and never retried.
The use of a numerical approximation for the derivative of an operator is not
an error. It is signalled by the ApproximateDerivative warning and the
`approximate` flag of operators and expressions.
"""


__all__ = [
    "DifferentiationError",
    "UnsupportedArity",
    "VariableIndexOutOfRange",
    "InvalidArgumentIndex",
    "ApproximateDerivative",
]


class DifferentiationError(ValueError):
    r"""Base class of errors raised when differentiating."""
    pass


class UnsupportedArity(DifferentiationError):
    r"""Raised for operators taking neither one nor two arguments."""
    def __init__(self, arity, operator=None):
        ## The offending arity.
        self.arity = arity
        ## The offending operator (if known).
        self.operator = operator
        if operator is None:
            msg = "Unsupported arity: %r (must be 1 or 2)" % (arity,)
        else:
            msg = ("Unsupported arity %r of operator %s (must be 1 or 2)"
                   % (arity, operator))
        super(UnsupportedArity, self).__init__(msg)


class VariableIndexOutOfRange(DifferentiationError):
    r"""Raised if the feature to differentiate w.r.t. does not exist."""
    def __init__(self, index, n_features):
        ## The requested feature index.
        self.index = index
        ## Number of features of the expression.
        self.n_features = n_features
        super(VariableIndexOutOfRange, self).__init__(
            "Feature index %r out of range (expression has %d feature(s), "
            "numbered from 1)" % (index, n_features)
        )


class InvalidArgumentIndex(DifferentiationError):
    r"""Raised when requesting a partial derivative w.r.t. a missing argument."""
    pass


class ApproximateDerivative(UserWarning):
    """Warning issued when a derivative is computed numerically."""
    pass
