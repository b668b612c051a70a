"""Pytest configuration and shared fixtures for optikit tests.

This module provides:
- A deterministic NumPy RNG fixture
- A call-counting wrapper used to check evaluation bookkeeping
- Automatic reset of debug mode between tests
"""

import os
from typing import Callable, Iterator

import numpy as np
import pytest

from optikit.diagnostics import is_debug_enabled, set_debug_enabled


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


class CallCounter:
    """Instrumented wrapper counting how often a function is invoked."""

    def __init__(self, fun: Callable) -> None:
        self.fun = fun
        self.count = 0

    def __call__(self, *args):
        self.count += 1
        return self.fun(*args)


@pytest.fixture
def counted() -> Callable[[Callable], CallCounter]:
    """Factory wrapping a function in a :class:`CallCounter`."""
    return CallCounter


@pytest.fixture(autouse=True)
def restore_debug_mode() -> Iterator[None]:
    original = is_debug_enabled()
    yield
    set_debug_enabled(original)
