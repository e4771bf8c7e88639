r"""@package dyndiff.pickle_helpers

Helper functions to (un)pickle problematic objects.

The main problem are mpmath constants such as `mp.pi`, which may be used as
values of constant nodes. Running the values to pickle through
prepare_value() replaces them with placeholders. To restore the values to
their original form, run them through restore_value().
"""

from mpmath import mp


__all__ = [
    "prepare_value",
    "restore_value",
]


# Names of the `mp` constants replaced by placeholders when pickling.
_MP_CONSTANTS = ("pi", "e", "euler", "phi", "ln2", "ln10", "catalan", "degree")


class _MpConstant(object):
    r"""Placeholder representing one of the mpmath constants."""
    # pylint: disable=too-few-public-methods
    def __init__(self, name):
        ## Attribute name of the constant on the `mp` context.
        self._name = name

    @property
    def value(self):
        r"""The actual mpmath constant, e.g. `mp.pi`."""
        return getattr(mp, self._name)


def _constant_name(value):
    r"""Return the name of the mpmath constant `value` or `None`."""
    for name in _MP_CONSTANTS:
        if value is getattr(mp, name):
            return name
    return None


def prepare_value(value):
    r"""Prepare a value for being pickled.

    Most values are left untouched, only problematic ones are replaced by
    placeholders that can be pickled.
    """
    if type(value) is tuple:
        return tuple(prepare_value(v) for v in value)
    if type(value) is list:
        return [prepare_value(v) for v in value]
    name = _constant_name(value)
    if name is not None:
        return _MpConstant(name)
    return value


def restore_value(value):
    r"""Restore an unpickled value to its original form."""
    if type(value) is tuple:
        return tuple(restore_value(v) for v in value)
    if type(value) is list:
        return [restore_value(v) for v in value]
    if isinstance(value, _MpConstant):
        return value.value
    return value
