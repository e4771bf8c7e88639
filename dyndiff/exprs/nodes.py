r"""@package dyndiff.exprs.nodes

Node types of expression trees.

A tree consists of leaves (Constant and Variable) and operator applications.
Operator applications store the *handle* of their operator, i.e. its position
in the OperatorSet of the expression the tree belongs to, together with their
children. Unary and binary applications are represented by UnaryApply and
BinaryApply, respectively. Applications of operators with other arities use
the generic OperatorNode.

All nodes are immutable and compare structurally, so that subtrees can be
shared freely between different trees.
"""

from ..pickle_helpers import prepare_value, restore_value


__all__ = [
    "Node",
    "Constant",
    "Variable",
    "OperatorNode",
    "UnaryApply",
    "BinaryApply",
    "apply",
]


class Node(object):
    r"""Base class of all tree nodes."""
    __slots__ = ()

    ## Name of the node variant.
    variant = None

    @property
    def degree(self):
        r"""Number of children of this node."""
        return len(self.children)

    @property
    def children(self):
        r"""Tuple of the child nodes."""
        return ()

    def __setattr__(self, name, value):
        raise AttributeError("Nodes are immutable.")

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def traverse(self):
        r"""Generator walking through the tree in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def traverse_postorder(self, unique=False):
        r"""Generator walking through the tree in post-order.

        Each node is yielded after all of its children.

        @param unique
            If `True`, node objects shared by multiple parents are visited
            only once. Otherwise, shared subtrees are visited each time they
            occur.
        """
        seen = set()
        stack = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if unique and id(node) in seen:
                continue
            if expanded or not node.children:
                if unique:
                    seen.add(id(node))
                yield node
            else:
                stack.append((node, True))
                stack.extend((c, False) for c in reversed(node.children))

    def str(self, operators=None):
        r"""String representation of the subtree rooted at this node.

        @param operators
            Optional OperatorSet used to show operator names. Without it,
            handles are shown as ``op#i``.
        """
        raise NotImplementedError


class Constant(Node):
    r"""Leaf representing a constant value."""
    __slots__ = ('_value',)
    variant = "constant"

    def __init__(self, value):
        object.__setattr__(self, '_value', value)

    @property
    def value(self):
        r"""The constant value."""
        return self._value

    def __eq__(self, other):
        if not isinstance(other, Constant):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash(('constant', self._value))

    def __reduce__(self):
        return (_restore_constant, (prepare_value(self._value),))

    def str(self, operators=None):
        return "%r" % (self._value,)

    def __repr__(self):
        return "Constant(%r)" % (self._value,)


def _restore_constant(value):
    r"""Unpickling helper for Constant."""
    return Constant(restore_value(value))


class Variable(Node):
    r"""Leaf referencing one of the input features.

    Features are numbered starting at `1`, i.e. `Variable(1)` is printed as
    ``x1``.
    """
    __slots__ = ('_index',)
    variant = "variable"

    def __init__(self, index):
        if int(index) != index or index < 1:
            raise ValueError("Feature index must be a positive integer, "
                             "got %r." % (index,))
        object.__setattr__(self, '_index', int(index))

    @property
    def index(self):
        r"""Feature index (starting at `1`)."""
        return self._index

    def __eq__(self, other):
        if not isinstance(other, Variable):
            return NotImplemented
        return self._index == other._index

    def __hash__(self):
        return hash(('variable', self._index))

    def __reduce__(self):
        return (Variable, (self._index,))

    def str(self, operators=None):
        return "x%d" % self._index

    def __repr__(self):
        return "Variable(%d)" % self._index


class OperatorNode(Node):
    r"""Application of an operator to any number of children."""
    __slots__ = ('_op', '_children')
    variant = "operator"

    def __init__(self, op, children):
        r"""Init function.

        @param op
            Handle of the operator in the expression's operator set.
        @param children
            Sequence of child nodes.
        """
        children = tuple(children)
        if not children:
            raise ValueError("Operator nodes need at least one child.")
        for c in children:
            if not isinstance(c, Node):
                raise TypeError("Not a node: %r" % (c,))
        object.__setattr__(self, '_op', int(op))
        object.__setattr__(self, '_children', children)

    @property
    def op(self):
        r"""Handle of the applied operator."""
        return self._op

    @property
    def children(self):
        return self._children

    def __eq__(self, other):
        if not isinstance(other, OperatorNode):
            return NotImplemented
        return self._op == other._op and self._children == other._children

    def __hash__(self):
        return hash(('operator', self._op, self._children))

    def __reduce__(self):
        return (apply, (self._op,) + self._children)

    def str(self, operators=None):
        args = [c.str(operators) for c in self._children]
        if operators is None:
            return "op#%d(%s)" % (self._op, ", ".join(args))
        op = operators[self._op]
        if op.infix is not None and len(args) == 2:
            return "(%s %s %s)" % (args[0], op.infix, args[1])
        return "%s(%s)" % (op.name, ", ".join(args))

    def __repr__(self):
        return "%s(%d, %s)" % (type(self).__name__, self._op,
                               ", ".join(repr(c) for c in self._children))


class UnaryApply(OperatorNode):
    r"""Application of a unary operator."""
    __slots__ = ()
    variant = "unary"

    def __init__(self, op, child):
        super(UnaryApply, self).__init__(op, (child,))

    @property
    def child(self):
        r"""The only child."""
        return self._children[0]


class BinaryApply(OperatorNode):
    r"""Application of a binary operator."""
    __slots__ = ()
    variant = "binary"

    def __init__(self, op, left, right):
        super(BinaryApply, self).__init__(op, (left, right))

    @property
    def left(self):
        r"""First argument."""
        return self._children[0]

    @property
    def right(self):
        r"""Second argument."""
        return self._children[1]


def apply(op, *children):
    r"""Create the node applying the operator handle `op` to `children`.

    Returns a UnaryApply or BinaryApply for one or two children, respectively,
    and a generic OperatorNode otherwise.
    """
    if len(children) == 1:
        return UnaryApply(op, children[0])
    if len(children) == 2:
        return BinaryApply(op, children[0], children[1])
    return OperatorNode(op, children)
