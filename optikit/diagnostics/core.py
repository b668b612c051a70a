"""Numerical sanity checks used by the solvers in debug mode."""

from __future__ import annotations

import numpy as np

from ..logging import get_logger

logger = get_logger(__name__)


def is_finite(value: float | np.ndarray) -> bool:
    """Return True if every entry of ``value`` is finite."""
    return bool(np.all(np.isfinite(np.asarray(value, dtype=float))))


def check_finite(value: float | np.ndarray, context: str) -> bool:
    """
    Log a warning if ``value`` contains NaN or infinity.

    The check never raises; a non-finite objective value is a property of
    the caller's function and the solver carries on with it.

    Parameters
    ----------
    value:
        Scalar or array returned by an evaluable function.
    context:
        Short description of where the value came from, used in the
        warning message.

    Returns
    -------
    bool
        True if the value is finite.
    """
    finite = is_finite(value)
    if not finite:
        logger.warning("Non-finite value returned by %s: %r", context, value)
    return finite


def is_symmetric(mat: np.ndarray, atol: float = 1e-10) -> bool:
    """Check whether a square matrix equals its transpose within ``atol``."""
    mat = np.asarray(mat, dtype=float)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        return False
    return bool(np.allclose(mat, mat.T, atol=atol, rtol=0.0))


def is_positive_semidefinite(mat: np.ndarray, tol: float = 1e-10) -> bool:
    """
    Check whether a symmetric matrix is positive semi-definite.

    Eigenvalues are allowed to dip below zero by ``tol`` scaled with the
    largest eigenvalue magnitude.
    """
    mat = np.asarray(mat, dtype=float)
    if not is_symmetric(mat) or not is_finite(mat):
        return False
    if mat.size == 0:
        return True
    eigvals = np.linalg.eigvalsh(0.5 * (mat + mat.T))
    scale = max(1.0, float(np.max(np.abs(eigvals))))
    return bool(np.all(eigvals >= -tol * scale))
