#!/usr/bin/env python3

import unittest
import sys
import io
import os.path as op
import pickle
import tempfile
from contextlib import redirect_stdout

import numpy as np
from mpmath import mp

from testutils import DynTestCase
from .operators import Operator, OperatorSet, ADD, MUL, SIN, EXP
from .nodes import Constant, Variable, OperatorNode, UnaryApply, BinaryApply
from .nodes import apply
from .expression import Expression, make_expression


def _example():
    r"""x1 * sin(x2) + 2"""
    ops = OperatorSet([ADD, MUL, SIN])
    root = BinaryApply(0, BinaryApply(1, Variable(1), UnaryApply(2, Variable(2))),
                       Constant(2.0))
    return make_expression(root, ops)


class TestNodes(DynTestCase):
    def test_variants(self):
        self.assertEqual(Constant(1).variant, "constant")
        self.assertEqual(Variable(1).variant, "variable")
        self.assertEqual(UnaryApply(0, Variable(1)).variant, "unary")
        self.assertEqual(BinaryApply(0, Variable(1), Variable(2)).variant, "binary")
        self.assertEqual(OperatorNode(0, [Variable(1)]*3).variant, "operator")

    def test_apply(self):
        self.assertIsType(apply(0, Variable(1)), UnaryApply)
        self.assertIsType(apply(0, Variable(1), Constant(1)), BinaryApply)
        node = apply(3, Variable(1), Variable(2), Constant(0))
        self.assertIsType(node, OperatorNode)
        self.assertEqual(node.degree, 3)

    def test_equality(self):
        self.assertEqual(Constant(0), Constant(0.0))
        self.assertNotEqual(Constant(1), Variable(1))
        self.assertEqual(BinaryApply(1, Variable(1), Constant(2)),
                         OperatorNode(1, (Variable(1), Constant(2))))
        self.assertNotEqual(UnaryApply(1, Variable(1)), UnaryApply(2, Variable(1)))
        self.assertEqual(len({Variable(2), Variable(2), Constant(2)}), 2)

    def test_immutable(self):
        node = BinaryApply(0, Variable(1), Variable(2))
        with self.assertRaises(AttributeError):
            node.left = Variable(3)
        with self.assertRaises(AttributeError):
            Constant(1).value = 2

    def test_invalid(self):
        with self.assertRaises(ValueError):
            Variable(0)
        with self.assertRaises(TypeError):
            UnaryApply(0, 1.0)
        with self.assertRaises(ValueError):
            OperatorNode(0, [])

    def test_traverse(self):
        root = _example().root
        kinds = [n.variant for n in root.traverse()]
        self.assertEqual(kinds, ["binary", "binary", "variable", "unary",
                                 "variable", "constant"])
        kinds = [n.variant for n in root.traverse_postorder()]
        self.assertEqual(kinds, ["variable", "variable", "unary", "binary",
                                 "constant", "binary"])

    def test_traverse_shared(self):
        x = Variable(1)
        inner = BinaryApply(0, x, x)
        root = BinaryApply(0, inner, inner)
        self.assertEqual(len(list(root.traverse_postorder())), 7)
        nodes = list(root.traverse_postorder(unique=True))
        self.assertEqual(len(nodes), 3)
        self.assertIs(nodes[0], x)
        self.assertIs(nodes[1], inner)
        self.assertIs(nodes[2], root)


class TestExpression(DynTestCase):
    def test_str(self):
        ex = _example()
        self.assertEqual(ex.str(), "((x1 * sin(x2)) + 2.0)")
        self.assertEqual(repr(ex), "<Expression(((x1 * sin(x2)) + 2.0))>")
        self.assertEqual(ex.root.str(), "op#0(op#1(x1, op#2(x2)), 2.0)")

    def test_n_features(self):
        self.assertEqual(_example().n_features, 2)
        ex = make_expression(Constant(1.0), [ADD])
        self.assertEqual(ex.n_features, 1)
        ex = make_expression(Variable(2), [ADD], n_features=5)
        self.assertEqual(ex.n_features, 5)
        with self.assertRaises(ValueError):
            make_expression(Variable(3), [ADD], n_features=2)

    def test_validation(self):
        with self.assertRaises(IndexError):
            make_expression(UnaryApply(1, Variable(1)), [SIN])
        with self.assertRaises(TypeError):
            make_expression(BinaryApply(0, Variable(1), Variable(1)), [SIN])
        with self.assertRaises(TypeError):
            make_expression("x1", [SIN])

    def test_operator_sequence(self):
        ex = make_expression(UnaryApply(0, Variable(1)), [SIN])
        self.assertIsType(ex.operators, OperatorSet)
        self.assertFalse(ex.approximate)

    def test_evaluator(self):
        ex = _example()
        f = ex.evaluator()
        for x1, x2 in [(0.5, 0.1), (-1.0, 2.0), (3.0, -0.7)]:
            self.assertAlmostEqual(f([x1, x2]), x1*np.sin(x2) + 2)

    def test_evaluator_arrays(self):
        ex = _example()
        X = np.array([np.linspace(0, 1, 5), np.linspace(-1, 1, 5)])
        self.assertListAlmostEqual(ex.evaluator()(X), X[0]*np.sin(X[1]) + 2)
        const = make_expression(Constant(3.0), [ADD], n_features=2)
        result = const.evaluator()(X)
        self.assertEqual(result.shape, (5,))
        self.assertListAlmostEqual(result, [3.0]*5)

    def test_evaluator_mp(self):
        ex = _example()
        with mp.workdps(30):
            f = ex.evaluator(use_mp=True)
            value = f([mp.mpf(1)/3, mp.mpf(1)/7])
            expected = mp.mpf(1)/3 * mp.sin(mp.mpf(1)/7) + 2
            self.assertTrue(mp.almosteq(value, expected, rel_eps=mp.mpf(10)**-28))

    def test_evaluator_missing_features(self):
        with self.assertRaises(ValueError):
            _example().evaluator()([1.0])

    def test_nary(self):
        fma = Operator("fma", 3, lambda a, b, c: a*b + c)
        ex = make_expression(OperatorNode(0, [Variable(1), Variable(2), Constant(1.0)]),
                             [fma])
        self.assertEqual(ex.str(), "fma(x1, x2, 1.0)")
        self.assertAlmostEqual(ex.evaluator()([2.0, 3.0]), 7.0)

    def test_evaluator_diff(self):
        ex = make_expression(UnaryApply(0, Variable(1)), [SIN])
        f = ex.evaluator()
        self.assertAlmostEqual(f.diff([0.3]), np.cos(0.3))
        self.assertAlmostEqual(f.diff([0.3], n=2), -np.sin(0.3))
        self.assertAlmostEqual(f.diff([0.3], n=0), np.sin(0.3))
        self.assertIs(f.derivative(1, 2), f.derivative(1, 2))
        self.assertAlmostEqual(f.function(n=3)([0.3]), -np.cos(0.3))

    def test_with_root(self):
        ex = _example()
        other = ex.with_root(Variable(1))
        self.assertIs(other.operators, ex.operators)
        self.assertEqual(other.n_features, 2)

    def test_print_tree(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            _example().print_tree()
        lines = buf.getvalue().splitlines()
        self.assertEqual(len(lines), 6)
        self.assertEqual(lines[0], "root add <BinaryApply>")
        self.assertEqual(lines[-1], ". 1 2.0 <Constant>")

    def test_equality(self):
        self.assertEqual(_example(), _example())
        ex = _example()
        self.assertNotEqual(ex, ex.with_root(Variable(1)))
        self.assertEqual(hash(_example()), hash(_example()))

    def test_pickle(self):
        ops = OperatorSet([ADD, EXP])
        ex = make_expression(BinaryApply(0, UnaryApply(1, Variable(1)), Constant(mp.pi)),
                             ops, name="foo")
        ex2 = pickle.loads(pickle.dumps(ex))
        self.assertIsType(ex2, Expression)
        self.assertEqual(ex2, ex)
        self.assertIs(ex2.root.right.value, mp.pi)
        self.assertIs(ex2.operators[1], EXP)
        self.assertEqual(ex2.name, "foo")

    def test_save_load(self):
        ex = _example()
        with tempfile.TemporaryDirectory() as tmpdir:
            fname = op.join(tmpdir, "sub", "expr")
            ex.save(fname, verbose=False)
            self.assertTrue(op.isfile(fname + ".npy"))
            with self.assertRaises(RuntimeError):
                ex.save(fname, verbose=False)
            ex.save(fname, overwrite=True, verbose=False)
            self.assertEqual(Expression.load(fname + ".npy"), ex)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
