r"""@package dyndiff.diff.rules

Derivation of the partial derivative rules of operators.

For a given operator and argument position, a DerivativeRule is obtained in
one of three ways, tried in this order:

    1. The static table CLOSED_FORM_RULES of hand written closed forms of the
       partial derivatives of the built-in operators.
    2. Symbolic differentiation with SymPy for operators carrying a symbolic
       form (see exprs.operators.Operator). This includes the derivative
       operators created from closed form rules, so that derivatives of any
       order of built-in operators are exact.
    3. Numerical differentiation, using central finite differences for
       floating point evaluation and `mpmath.diff()` for arbitrary precision
       evaluation. These rules are flagged as approximate.

Closed form rules are compiled using `sympy.lambdify()` into a floating point
(numpy) and an `mpmath` implementation. Rules which are constant or simply
return one of their arguments are recognized and get a `form`, which the
differentiator uses to avoid creating operator nodes for them. If SymPy
fails on the symbolic form, or the derivative contains functions numpy or
`mpmath` cannot evaluate (e.g. `polygamma`), the numerical rule is used
instead. Dirac delta terms are dropped, so that `abs` is exact to any order.
"""

import logging

import numpy as np
from mpmath import mp
import sympy as sp

from ..exprs.common import constant_function
from ..exprs.operators import ADD, SUB, MUL, DIV, POW
from ..exprs.operators import NEG, SQUARE, CUBE, INV, SQRT, EXP, LOG
from ..exprs.operators import SIN, COS, TAN, SINH, COSH, TANH, ATAN, ABS
from ..numutils import central_difference
from ..settings import Settings


__all__ = [
    "DerivativeRule",
    "CLOSED_FORM_RULES",
    "FORM_CONSTANT",
    "FORM_ARGUMENT",
    "derive_rule",
]


_log = logging.getLogger(__name__)


## Form of rules evaluating to a constant, e.g. `d/da (a + b) = 1`.
FORM_CONSTANT = "constant"
## Form of rules returning one of their arguments, e.g. `d/da (a b) = b`.
FORM_ARGUMENT = "argument"


# Symbols used for the arguments of all symbolic forms.
_SYMBOLS = sp.symbols('a b', real=True)

# Arguments at which compiled rules are tried once.
_SAMPLE_POINT = (0.6180339887, 1.4142135624)


## Partial derivatives of the built-in operators. For each operator, there is
## one callable per argument, taking the arguments as SymPy symbols.
CLOSED_FORM_RULES = {
    ADD: (lambda a, b: 1, lambda a, b: 1),
    SUB: (lambda a, b: 1, lambda a, b: -1),
    MUL: (lambda a, b: b, lambda a, b: a),
    DIV: (lambda a, b: 1/b, lambda a, b: -a/b**2),
    POW: (lambda a, b: b * a**(b - 1), lambda a, b: a**b * sp.log(a)),
    NEG: (lambda a: -1,),
    SQUARE: (lambda a: 2*a,),
    CUBE: (lambda a: 3*a**2,),
    INV: (lambda a: -1/a**2,),
    SQRT: (lambda a: 1/(2*sp.sqrt(a)),),
    EXP: (sp.exp,),
    LOG: (lambda a: 1/a,),
    SIN: (sp.cos,),
    COS: (lambda a: -sp.sin(a),),
    TAN: (lambda a: 1 + sp.tan(a)**2,),
    SINH: (sp.cosh,),
    COSH: (sp.sinh,),
    TANH: (lambda a: 1 - sp.tanh(a)**2,),
    ATAN: (lambda a: 1/(1 + a**2),),
    ABS: (sp.sign,),
}


class DerivativeRule(object):
    r"""Implementations and provenance of one partial derivative."""
    # pylint: disable=too-few-public-methods
    def __init__(self, fp, mp, symbolic=None, form=None, approximate=False,
                 source=None):
        r"""Init function.

        Args:
            fp:     Floating point implementation.
            mp:     `mpmath` implementation.
            symbolic: Callable building the SymPy expression of the derivative
                    from SymPy symbols (`None` for numerical rules).
            form:   `None` or a pair ``(FORM_CONSTANT, value)`` or
                    ``(FORM_ARGUMENT, index)`` (index starting at `1`).
            approximate: Whether this rule is a numerical approximation.
            source: Short description of where the rule comes from, one of
                    ``'table'``, ``'sympy'``, ``'numerical'``.
        """
        self.fp = fp
        self.mp = mp
        self.symbolic = symbolic
        self.form = form
        self.approximate = approximate
        self.source = source


class _Substitution(object):
    r"""Symbolic form of a derived rule.

    Calling it with SymPy expressions substitutes them for the arguments of
    the stored derivative expression.
    """
    # pylint: disable=too-few-public-methods
    def __init__(self, expr, symbols):
        self.expr = expr
        self.symbols = symbols

    def __call__(self, *args):
        args = [sp.sympify(a) for a in args]
        return self.expr.xreplace(dict(zip(self.symbols, args)))


def derive_rule(op, degree, arg):
    r"""Derive the rule for the partial derivative of `op` w.r.t. argument `arg`.

    This function does not validate its input and does not cache results.
    Use opderiv.operator_derivative() instead.
    """
    symbols = _SYMBOLS[:degree]
    expr, source = _closed_form(op, arg, symbols)
    if expr is not None:
        rule = _symbolic_rule(op, expr, symbols, source)
        if rule is not None:
            return rule
    return _numerical_rule(op, arg)


def _closed_form(op, arg, symbols):
    r"""Return the SymPy derivative expression and its source (or `None`)."""
    rules = CLOSED_FORM_RULES.get(op)
    if rules is not None:
        return sp.sympify(rules[arg-1](*symbols)), 'table'
    if op.symbolic is None:
        return None, None
    try:
        expr = sp.diff(sp.sympify(op.symbolic(*symbols)), symbols[arg-1])
    except Exception as e: # pylint: disable=broad-except
        _log.info("No symbolic derivative of %s: %s", op.name, e)
        return None, None
    if expr.has(sp.Derivative) or expr.has(sp.Subs):
        _log.info("Symbolic derivative of %s is not closed form.", op.name)
        return None, None
    # Point masses vanish almost everywhere, e.g. in the derivative of sign().
    expr = expr.replace(sp.DiracDelta, lambda *args: sp.S.Zero)
    return expr, 'sympy'


def _form_of(expr, symbols):
    r"""Determine whether a derivative is constant or an argument."""
    if expr.is_number:
        if not expr.is_real:
            return None
        value = int(expr) if expr.is_Integer else float(expr)
        return (FORM_CONSTANT, value)
    for i, s in enumerate(symbols, 1):
        if expr == s:
            return (FORM_ARGUMENT, i)
    return None


def _argument_function(index):
    i = index - 1
    return lambda *args: args[i]


def _check_compiled(fp, mpf, degree):
    r"""Call lambdified functions once to detect unsupported functions.

    Functions the numpy or mpmath printers do not know are printed by name,
    so that the generated code fails only when called. Domain errors at the
    sample point are not a problem of the rule and are ignored.
    """
    sample = _SAMPLE_POINT[:degree]
    with np.errstate(all='ignore'):
        try:
            fp(*sample)
        except ArithmeticError:
            pass
    try:
        mpf(*[mp.mpf(v) for v in sample])
    except (ArithmeticError, ValueError):
        pass


def _symbolic_rule(op, expr, symbols, source):
    r"""Compile a closed form derivative, return `None` if this fails."""
    form = _form_of(expr, symbols)
    if form is None:
        try:
            fp = sp.lambdify(symbols, expr, modules='numpy')
            mpf = sp.lambdify(symbols, expr, modules='mpmath')
            _check_compiled(fp, mpf, len(symbols))
        except Exception as e: # pylint: disable=broad-except
            _log.info("Cannot compile derivative of %s (%s): %s",
                      op.name, expr, e)
            return None
    elif form[0] == FORM_CONSTANT:
        fp = constant_function(form[1], use_mp=False)
        mpf = constant_function(form[1], use_mp=True)
    else:
        fp = mpf = _argument_function(form[1])
    return DerivativeRule(fp, mpf, symbolic=_Substitution(expr, symbols),
                          form=form, source=source)


def _numerical_rule(op, arg):
    r"""Create a rule differentiating `op` numerically."""
    fp_func = op.function(use_mp=False)
    mp_func = op.function(use_mp=True)
    i = arg - 1
    def fp(*args):
        def g(t):
            shifted = list(args)
            shifted[i] = t
            return fp_func(*shifted)
        return central_difference(g, args[i], order=Settings.fd_order,
                                  rel_step=Settings.fd_rel_step)
    def mpd(*args):
        def g(t):
            shifted = list(args)
            shifted[i] = t
            return mp_func(*shifted)
        return mp.diff(g, args[i])
    return DerivativeRule(fp, mpd, approximate=True, source='numerical')
