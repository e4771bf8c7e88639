r"""@package dyndiff.settings

Process wide configuration of the differentiation engine.

The settings are plain class attributes of Settings. They are read at the
time they are needed, so changes take effect immediately. Use the settings()
context manager to change them temporarily:

\code
    from dyndiff.settings import settings
    with settings(fd_order=8, warn_approximate=False):
        dex = D(ex, 1)
\endcode

Note that the settings are global, i.e. shared by all threads.
"""

from contextlib import contextmanager


__all__ = [
    "Settings",
    "settings",
]


class Settings(object):
    """Global settings for differentiation."""
    ## Order of accuracy of the central finite differences used for operators
    ## without known closed form derivative (one of 2, 4, 6, 8).
    fd_order = 4
    ## Relative step size for finite differences. `None` chooses the optimal
    ## step for the configured order.
    fd_rel_step = None
    ## Whether an ApproximateDerivative warning is issued when a numerical
    ## fallback rule is created.
    warn_approximate = True
    ## Whether operator_derivative() uses the process wide cache by default.
    use_cache = True


def _setting_names():
    return [k for k in vars(Settings) if not k.startswith('_')]


@contextmanager
def settings(**kwargs):
    r"""Temporarily change the global settings.

    All keyword arguments must be names of attributes of Settings. After
    leaving the context, the previous settings are restored.
    """
    names = _setting_names()
    unknown = [k for k in kwargs if k not in names]
    if unknown:
        raise TypeError("Unknown setting(s): %s" % ", ".join(sorted(unknown)))
    prev = dict((k, getattr(Settings, k)) for k in kwargs)
    try:
        for k, v in kwargs.items():
            setattr(Settings, k, v)
        yield Settings
    finally:
        for k, v in prev.items():
            setattr(Settings, k, v)
