#!/usr/bin/env python3

import unittest
import sys
import pickle

import numpy as np
from mpmath import mp

from testutils import DynTestCase
from .operators import Operator, OperatorSet, BUILTIN_OPERATORS
from .operators import ADD, MUL, SIN, COS, POW


class TestOperator(DynTestCase):
    def test_properties(self):
        self.assertEqual(ADD.name, "add")
        self.assertEqual(ADD.arity, 2)
        self.assertEqual(ADD.infix, "+")
        self.assertEqual(SIN.arity, 1)
        self.assertIsNone(SIN.infix)
        self.assertFalse(SIN.approximate)
        self.assertEqual(str(MUL), "mul")
        self.assertEqual(repr(MUL), "<_BuiltinOperator mul/2>")

    def test_evaluation(self):
        self.assertAlmostEqual(POW(2.0, 3.0), 8.0)
        self.assertListAlmostEqual(SIN(np.array([0.0, np.pi/2])), [0.0, 1.0])
        with mp.workdps(30):
            self.assertTrue(mp.almosteq(SIN.function(use_mp=True)(mp.pi/6),
                                        mp.mpf(1)/2))

    def test_default_mp(self):
        op = Operator("twice", 1, lambda x: 2*x)
        self.assertIs(op.function(use_mp=True), op.function(use_mp=False))
        self.assertIsNone(op.symbolic)

    def test_invalid(self):
        with self.assertRaises(TypeError):
            Operator("f", 1, None)
        with self.assertRaises(TypeError):
            Operator("f", 0, np.sin)
        with self.assertRaises(TypeError):
            Operator("f", 1.5, np.sin)
        with self.assertRaises(TypeError):
            Operator("f", 1, np.sin, infix="~")

    def test_identity(self):
        f = Operator("f", 1, np.sin)
        g = Operator("f", 1, np.sin)
        self.assertNotEqual(f, g)
        self.assertEqual(f, f)

    def test_pickle_builtins(self):
        for op in BUILTIN_OPERATORS.values():
            self.assertIs(pickle.loads(pickle.dumps(op)), op)


class TestOperatorSet(DynTestCase):
    def test_handles(self):
        ops = OperatorSet([ADD, MUL, SIN])
        self.assertEqual(len(ops), 3)
        self.assertEqual(ops.index(MUL), 1)
        self.assertIs(ops[2], SIN)
        self.assertIn(SIN, ops)
        self.assertNotIn(COS, ops)
        self.assertEqual(ops.unary, (SIN,))
        self.assertEqual(ops.binary, (ADD, MUL))
        with self.assertRaises(ValueError):
            ops.index(COS)

    def test_extended(self):
        ops = OperatorSet([ADD, SIN])
        ext = ops.extended(COS, MUL)
        self.assertEqual(len(ops), 2)
        self.assertEqual(len(ext), 4)
        for i, op in enumerate(ops):
            self.assertIs(ext[i], op)
        self.assertEqual(ext.index(MUL), 3)

    def test_duplicates(self):
        with self.assertRaises(ValueError):
            OperatorSet([ADD, SIN, ADD])
        with self.assertRaises(ValueError):
            OperatorSet([ADD]).extended(ADD)

    def test_invalid(self):
        with self.assertRaises(TypeError):
            OperatorSet([ADD, "mul"])

    def test_equality(self):
        self.assertEqual(OperatorSet([ADD, SIN]), OperatorSet([ADD, SIN]))
        self.assertNotEqual(OperatorSet([ADD, SIN]), OperatorSet([SIN, ADD]))
        self.assertEqual(hash(OperatorSet([ADD])), hash(OperatorSet([ADD])))

    def test_functions(self):
        fp = OperatorSet([SIN, COS]).functions()
        self.assertIs(fp[0], np.sin)
        mpf = OperatorSet([SIN, COS]).functions(use_mp=True)
        self.assertIsInstance(mpf[1](mp.mpf(0)), mp.mpf)
        self.assertEqual(mpf[1](mp.mpf(0)), 1)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
