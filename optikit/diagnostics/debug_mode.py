"""Debug mode for the optikit solvers.

Debug mode turns on the checks that are too costly or too noisy for
normal runs: every value returned by a user function is checked for
finiteness, each solver logs one line per iteration at DEBUG level and
``curve_fit`` validates the covariance it returns. The iteration traces
only reach the output when the optikit log level is DEBUG, so
:func:`debug_context` can lower the level for the duration of the block.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from ..logging import get_log_level, set_log_level

_DEBUG_ENV_VAR = "OPTIKIT_DEBUG"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _flag_from_env() -> bool:
    return os.getenv(_DEBUG_ENV_VAR, "0").strip().lower() in _TRUTHY


_debug_enabled: bool = _flag_from_env()


def is_debug_enabled() -> bool:
    """Return whether the solvers run their debug checks and traces."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """Globally enable or disable debug mode.

    The initial value comes from the ``OPTIKIT_DEBUG`` environment variable
    (``1``, ``true``, ``yes`` or ``on``).
    """
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(
    enabled: bool = True, log_level: Optional[Union[int, str]] = None
) -> Iterator[None]:
    """
    Temporarily switch debug mode, and optionally the optikit log level.

    Parameters
    ----------
    enabled:
        Debug mode inside the block.
    log_level:
        Log level applied to every optikit logger inside the block, e.g.
        ``"DEBUG"`` to see the per-iteration traces. The previous default
        level is restored on exit.

    Example
    -------
    >>> from optikit.optimize import brentq
    >>> with debug_context(True, log_level="DEBUG"):
    ...     res = brentq(lambda x: x * x - 2.0, 0.0, 2.0)  # doctest: +SKIP
    """
    global _debug_enabled
    prev_enabled = _debug_enabled
    prev_level = get_log_level()
    _debug_enabled = bool(enabled)
    if log_level is not None:
        set_log_level(log_level)
    try:
        yield
    finally:
        _debug_enabled = prev_enabled
        if log_level is not None:
            set_log_level(prev_level)
