r"""@package dyndiff.exprs.expression

Expressions, i.e. trees of nodes together with their operator set.

An Expression is the unit the differentiation engine works on. It combines
the root node of a tree with the OperatorSet its operator handles refer to
and the number of features (input variables) it is a function of.

Expression objects themselves cannot be evaluated. Instead, you take a
*snapshot* using Expression.evaluator() and call that.

@b Examples

```
    ops = OperatorSet([ADD, MUL, SIN])
    # x1 * sin(x2) + 2
    ex = make_expression(
        BinaryApply(0, BinaryApply(1, Variable(1), UnaryApply(2, Variable(2))),
                    Constant(2.0)),
        ops,
    )
    ev = ex.evaluator()
    print(ev([1.0, 0.5]))
```
"""

import os
import os.path as op

import numpy as np

from .nodes import Node, Variable, OperatorNode
from .operators import OperatorSet
from .evaluators import ExpressionEvaluator


__all__ = [
    "Expression",
    "make_expression",
]


def save_to_file(filename, data, overwrite=False, verbose=True,
                 showname='data', mkpath=True):
    r"""Save an object to disk.

    This uses `numpy.save()` to store an object in a file. Use
    load_from_file() to restore the data afterwards.

    @param filename
        The file name to store the data in. An extension ``'.npy'`` will be
        added if not already there.
    @param overwrite
        Whether to overwrite an existing file with the same name. If `False`
        (default) and such a file exists, a `RuntimeError` is raised.
    @param verbose
        Whether to print when the file was written. Default is `True`.
    @param showname
        Name to print in the confirmation message in case `verbose==True`.
    """
    filename = op.expanduser(filename)
    if not filename.endswith('.npy'):
        filename += '.npy'
    dirname = op.dirname(filename)
    if mkpath and dirname:
        os.makedirs(op.normpath(dirname), exist_ok=True)
    if op.exists(filename) and not overwrite:
        raise RuntimeError("File already exists.")
    arr = np.empty(1, dtype=object)
    arr[0] = data
    np.save(filename, arr, allow_pickle=True)
    if verbose:
        print("%s saved to: %s" % (showname, filename))


def load_from_file(filename):
    r"""Load an object stored with save_to_file() from disk."""
    filename = op.expanduser(filename)
    result = np.load(filename, allow_pickle=True)
    if result.shape == (1,):
        return result[0]
    return result


class Expression(object):
    r"""Expression tree with its operator set.

    The constructor checks that every operator handle in the tree refers to
    an operator of `operators` and that each node has as many children as its
    operator has arguments.
    """

    def __init__(self, root, operators, n_features=None, name=None):
        r"""Init function.

        Args:
            root:   Root Node of the tree.
            operators: OperatorSet (or sequence of operators) the handles in
                    the tree refer to.
            n_features: Number of features of the expression. By default, the
                    largest feature index occurring in the tree (at least 1).
            name:   Optional name used when printing the expression.
        """
        if not isinstance(root, Node):
            raise TypeError("Root must be a node, got %r." % (root,))
        if not isinstance(operators, OperatorSet):
            operators = OperatorSet(operators)
        max_index = self._check_tree(root, operators)
        if n_features is None:
            n_features = max(1, max_index)
        elif n_features < max_index:
            raise ValueError("Tree uses feature %d but expression has only %d."
                             % (max_index, n_features))
        self._root = root
        self._operators = operators
        self._n_features = int(n_features)
        self._name = name if name else self.__class__.__name__

    @staticmethod
    def _check_tree(root, operators):
        r"""Validate handles and arities, return the largest feature index."""
        max_index = 0
        for node in root.traverse_postorder(unique=True):
            if isinstance(node, Variable):
                max_index = max(max_index, node.index)
            elif isinstance(node, OperatorNode):
                if not 0 <= node.op < len(operators):
                    raise IndexError("Invalid operator handle: %d" % node.op)
                arity = operators[node.op].arity
                if arity != node.degree:
                    raise TypeError("Operator %s takes %d argument(s), node has %d."
                                    % (operators[node.op].name, arity, node.degree))
        return max_index

    @property
    def root(self):
        r"""Root node of the tree."""
        return self._root

    @property
    def operators(self):
        r"""OperatorSet the operator handles of the tree refer to."""
        return self._operators

    @property
    def n_features(self):
        r"""Number of features this expression is a function of."""
        return self._n_features

    @property
    def name(self):
        r"""Name given to this instance of the expression."""
        return self._name

    @property
    def approximate(self):
        r"""Whether any operator is a numerically approximated derivative."""
        return any(o.approximate for o in self._operators)

    def with_root(self, root):
        r"""Return a new expression with the same operators and features."""
        return Expression(root, self._operators, n_features=self._n_features,
                          name=self._name)

    def traverse_tree(self, include_root=False, parents=None, node=None):
        r"""Generator that walks through the complete expression tree.

        In each iteration, the returned values represent the current node's
        parents (as a list from root to immediate parent), its position among
        its parent's children, and the node itself.
        """
        if node is None:
            node = self._root
        if parents is None:
            parents = []
        if include_root:
            yield parents, "", node
        parents = parents + [node]
        for i, child in enumerate(node.children):
            yield parents, i, child
            for item in self.traverse_tree(parents=parents, node=child):
                yield item

    def print_tree(self):
        r"""Print the whole expression tree, one node per line."""
        def _p(node, key, parents=()):
            if isinstance(node, OperatorNode):
                desc = "%s <%s>" % (self._operators[node.op].name,
                                    type(node).__name__)
            else:
                desc = "%s <%s>" % (node.str(), type(node).__name__)
            print("%s%s %s" % (". " * len(parents), key, desc))
        _p(self._root, "root")
        for parents, key, node in self.traverse_tree():
            _p(node, key, parents)

    def str(self):
        """Return the expression as a string."""
        return self._root.str(self._operators)

    def __str__(self):
        return self.str()

    def __repr__(self):
        return "<%s(%s)>" % (self.__class__.__name__, self.str())

    def __eq__(self, other):
        if not isinstance(other, Expression):
            return NotImplemented
        return (self._root == other._root
                and self._operators == other._operators
                and self._n_features == other._n_features)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self._root, self._operators, self._n_features))

    def evaluator(self, use_mp=False):
        r"""Create an evaluator for the expression.

        Use `use_mp` to control whether the evaluator will use floating point
        arithmetics (for `False`) or arbitrary precision mpmath computations
        (for `True`). Default is `False`.
        """
        return ExpressionEvaluator(self, use_mp=use_mp)

    def save(self, filename, overwrite=False, verbose=True):
        r"""Save the expression object to disk.

        Args:
            filename: The file name to store the data in. An extension
                ``'.npy'`` will be added if not already there.
            overwrite: Whether to overwrite an existing file with the same
                name. If `False` (default) and such a file exists, a
                `RuntimeError` is raised.
            verbose: Whether to print when the file was written. Default is
                `True`.
        """
        save_to_file(
            filename, self, overwrite=overwrite, verbose=verbose,
            showname="%s [%s]" % (self._name, type(self).__name__)
        )

    @classmethod
    def load(cls, filename):
        r"""Static function to load an expression object from disk."""
        return load_from_file(filename)


def make_expression(root, operators, n_features=None, name=None):
    r"""Create a new Expression from a root node and an operator set."""
    return Expression(root, operators, n_features=n_features, name=name)
