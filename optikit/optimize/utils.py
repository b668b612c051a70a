"""Utility helpers for finite differences and dense linear algebra.

These utilities avoid any dependency on SciPy and provide deterministic,
pure NumPy implementations suitable for the small dense systems that the
root finders and least-squares solver produce. The elimination routines
report singular systems with :class:`numpy.linalg.LinAlgError` so callers
can treat them exactly like a failing ``np.linalg.solve``.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from .core import SQRT_EPS, TINY

Array = np.ndarray


def approx_derivative(
    fun: Callable[[float], float],
    x: float,
    h: Optional[float] = None,
    return_evals: bool = False,
) -> float | tuple[float, int]:
    """Symmetric-difference derivative of a scalar function.

    Parameters
    ----------
    fun:
        Scalar function of one variable.
    x:
        Point where the derivative is approximated.
    h:
        Half-width of the difference stencil. Defaults to
        ``sqrt(eps) * max(|x|, 1)``.
    """
    x = float(x)
    if h is None:
        h = SQRT_EPS * max(abs(x), 1.0)
    if h <= 0:
        raise ValueError("h must be positive")
    f_plus = float(fun(x + h))
    f_minus = float(fun(x - h))
    deriv = (f_plus - f_minus) / (2.0 * h)
    if return_evals:
        return deriv, 2
    return deriv


def approx_jacobian(
    fun: Callable[[Array], Array],
    x: Array,
    f0: Optional[Array] = None,
    step: float = SQRT_EPS,
    return_evals: bool = False,
) -> Array | tuple[Array, int]:
    """Forward-difference Jacobian of a vector function.

    Column ``j`` is ``(fun(x + step * e_j) - f0) / step``. When ``f0`` is
    given it is reused, so only ``n`` evaluations are made.
    """
    if step <= 0:
        raise ValueError("step must be positive")
    x = np.asarray(x, dtype=float)
    evals = 0
    if f0 is None:
        f0 = np.atleast_1d(np.asarray(fun(x.copy()), dtype=float))
        evals += 1
    f0 = np.atleast_1d(np.asarray(f0, dtype=float))
    jac = np.empty((f0.size, x.size), dtype=float)
    for j in range(x.size):
        xj = x.copy()
        xj[j] += step
        fj = np.atleast_1d(np.asarray(fun(xj), dtype=float))
        evals += 1
        jac[:, j] = (fj - f0) / step
    if return_evals:
        return jac, evals
    return jac


def _as_square(mat: Array) -> Array:
    a = np.array(mat, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"expected a square matrix, got shape {a.shape}")
    return a


def gauss_solve(mat: Array, vec: Array, pivot_tol: float = TINY) -> Array:
    """Solve ``mat @ x = vec`` by Gaussian elimination with partial pivoting.

    Raises
    ------
    ValueError
        If ``mat`` is not square or ``vec`` has the wrong length.
    numpy.linalg.LinAlgError
        If a pivot smaller than ``pivot_tol`` in magnitude remains after
        row swapping.
    """
    a = _as_square(mat)
    b = np.array(vec, dtype=float).reshape(-1)
    n = a.shape[0]
    if b.size != n:
        raise ValueError(f"right-hand side has length {b.size}, expected {n}")
    for k in range(n):
        p = k + int(np.argmax(np.abs(a[k:, k])))
        if abs(a[p, k]) < pivot_tol:
            raise np.linalg.LinAlgError(f"Singular matrix (pivot {a[p, k]:.3e} in column {k})")
        if p != k:
            a[[k, p]] = a[[p, k]]
            b[[k, p]] = b[[p, k]]
        factors = a[k + 1 :, k] / a[k, k]
        a[k + 1 :, k:] -= np.outer(factors, a[k, k:])
        b[k + 1 :] -= factors * b[k]
    x = np.zeros(n, dtype=float)
    for i in range(n - 1, -1, -1):
        x[i] = (b[i] - a[i, i + 1 :] @ x[i + 1 :]) / a[i, i]
    return x


def gauss_jordan_inverse(mat: Array, pivot_tol: float = TINY) -> Array:
    """Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    Raises the same errors as :func:`gauss_solve`.
    """
    a = _as_square(mat)
    n = a.shape[0]
    aug = np.hstack([a, np.eye(n)])
    for k in range(n):
        p = k + int(np.argmax(np.abs(aug[k:, k])))
        if abs(aug[p, k]) < pivot_tol:
            raise np.linalg.LinAlgError(f"Singular matrix (pivot {aug[p, k]:.3e} in column {k})")
        if p != k:
            aug[[k, p]] = aug[[p, k]]
        aug[k] /= aug[k, k]
        col = aug[:, k].copy()
        col[k] = 0.0
        aug -= np.outer(col, aug[k])
    return aug[:, n:]


__all__ = [
    "Array",
    "approx_derivative",
    "approx_jacobian",
    "gauss_solve",
    "gauss_jordan_inverse",
]
