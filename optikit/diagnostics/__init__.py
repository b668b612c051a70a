"""Diagnostics and debugging utilities for optikit."""

from .core import (
    check_finite,
    is_finite,
    is_positive_semidefinite,
    is_symmetric,
)
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "check_finite",
    "is_finite",
    "is_symmetric",
    "is_positive_semidefinite",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
