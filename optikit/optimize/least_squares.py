"""Levenberg-Marquardt nonlinear least squares and curve fitting.

The solver minimizes ``cost = 0.5 * ||r(x)||**2`` for a residual function
``r: R^n -> R^k``. Each accepted step solves the damped normal equations

    (J^T J + lambda * diag(J^T J)) dx = -J^T r

with the shared pivoted Gaussian elimination. A successful step divides the
damping by ten, a rejected one multiplies it by ten and retries from the
same point with the same Jacobian.

References:
    - Levenberg, *A method for the solution of certain non-linear problems
      in least squares* (1944)
    - Marquardt, *An algorithm for least-squares estimation of nonlinear
      parameters* (1963)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

import numpy as np

from ..diagnostics import is_debug_enabled, is_positive_semidefinite
from ..logging import get_logger
from .core import (
    MSG_MAXITER,
    SQRT_EPS,
    Array,
    CountedFunction,
    CurveFitResult,
    LeastSquaresResult,
    Model,
    Residual,
    Tolerances,
    resolve_tolerances,
)
from .utils import approx_jacobian, gauss_jordan_inverse, gauss_solve

logger = get_logger(__name__)

LAMBDA_DECREASE = 0.1
LAMBDA_INCREASE = 10.0

MSG_FTOL = "Relative reduction of the cost is below ftol"
MSG_XTOL = "Step size is below xtol"
MSG_ZERO = "Residual is zero"
MSG_SINGULAR = "Singular normal matrix"


def _as_vector(value) -> Array:
    return np.atleast_1d(np.asarray(value, dtype=float)).ravel()


def _jacobian_step(x: Array) -> float:
    scale = float(np.max(np.abs(x))) if x.size else 0.0
    return max(1.0, scale) * SQRT_EPS


def _invalid(x0: Array, message: str) -> LeastSquaresResult:
    logger.debug("least squares rejected input: %s", message)
    return LeastSquaresResult(
        x=x0,
        cost=float("nan"),
        fun=np.zeros(0),
        jac=np.zeros((0, x0.size)),
        nit=0,
        nfev=0,
        njev=0,
        success=False,
        message=message,
    )


def least_squares(
    fun: Residual,
    x0: Array,
    ftol: Optional[float] = None,
    xtol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
    lambda0: float = 1e-3,
) -> LeastSquaresResult:
    """Minimize ``0.5 * ||fun(x)||**2`` with Levenberg-Marquardt.

    Parameters
    ----------
    fun:
        Residual function returning ``k`` values for ``n`` parameters; ``k``
        need not equal ``n``.
    x0:
        Initial parameters.
    ftol:
        Stop when an accepted step lowers the cost by a relative amount
        below ``ftol``.
    xtol:
        Stop when ``||dx|| < xtol * (1 + ||x||)``.
    maxiter:
        Maximum number of iterations (accepted plus rejected steps).
    lambda0:
        Initial damping.

    Returns
    -------
    LeastSquaresResult
        ``nfev`` counts the initial evaluation, every Jacobian column and
        every trial point.
    """
    tol = resolve_tolerances(tolerances, xtol, ftol, maxiter)
    x = _as_vector(x0)
    n = x.size
    if n == 0:
        return _invalid(x, "x0 must not be empty")

    f = CountedFunction(fun, "residual")
    r = _as_vector(f(x.copy()))
    cost = 0.5 * float(r @ r)
    lam = float(lambda0)
    jmat = np.zeros((r.size, n))
    jtj = np.zeros((n, n))
    jtr = np.zeros(n)
    need_jacobian = True
    njev = 0
    nit = 0
    success = False
    message = MSG_MAXITER

    if cost == 0.0:
        success = True
        message = MSG_ZERO

    while not success and nit < tol.maxiter:
        nit += 1
        if need_jacobian:
            jmat = approx_jacobian(f, x, f0=r, step=_jacobian_step(x))
            njev += 1
            jtj = jmat.T @ jmat
            jtr = jmat.T @ r
            need_jacobian = False

        damped = jtj + lam * np.diag(np.diag(jtj))
        try:
            dx = gauss_solve(damped, -jtr)
        except np.linalg.LinAlgError:
            message = MSG_SINGULAR
            logger.info("least squares: singular normal matrix at iteration %d", nit)
            break

        x_trial = x + dx
        r_trial = _as_vector(f(x_trial.copy()))
        cost_trial = 0.5 * float(r_trial @ r_trial)
        small_step = float(np.linalg.norm(dx)) < tol.xtol * (1.0 + float(np.linalg.norm(x)))

        if is_debug_enabled():
            logger.debug(
                "lm iter %d: cost=%.6e trial=%.6e lambda=%.3e", nit, cost, cost_trial, lam
            )

        if cost_trial < cost:
            reduction = (cost - cost_trial) / cost
            x, r, cost = x_trial, r_trial, cost_trial
            lam *= LAMBDA_DECREASE
            need_jacobian = True
            if cost == 0.0:
                success, message = True, MSG_ZERO
            elif reduction < tol.ftol:
                success, message = True, MSG_FTOL
            elif small_step:
                success, message = True, MSG_XTOL
        else:
            lam *= LAMBDA_INCREASE
            if small_step:
                success, message = True, MSG_XTOL

    logger.debug(
        "least squares finished after %d iterations (%d calls): %s", nit, f.calls, message
    )
    return LeastSquaresResult(
        x=x,
        cost=cost,
        fun=r,
        jac=jmat,
        nit=nit,
        nfev=f.calls,
        njev=njev,
        success=success,
        message=message,
    )


def _parameter_covariance(jmat: Array, cost: float) -> Array:
    m, n = jmat.shape
    if m <= n:
        logger.warning(
            "Covariance of the parameters could not be estimated: %d points for %d parameters",
            m,
            n,
        )
        return np.full((n, n), np.inf)
    try:
        inv = gauss_jordan_inverse(jmat.T @ jmat)
    except np.linalg.LinAlgError:
        logger.warning("Covariance of the parameters could not be estimated: singular J^T J")
        return np.full((n, n), np.inf)
    s_sq = 2.0 * cost / (m - n)
    pcov = inv * s_sq
    return 0.5 * (pcov + pcov.T)


def curve_fit(
    model: Model,
    xdata: Sequence,
    ydata: Sequence[float],
    p0: Sequence[float],
    ftol: Optional[float] = None,
    xtol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
    lambda0: float = 1e-3,
) -> CurveFitResult:
    """Fit ``model(p, x)`` to data points ``(xdata[i], ydata[i])``.

    The residuals ``y_i - model(p, x_i)`` are minimized with
    :func:`least_squares`. The covariance of the optimal parameters is
    ``(J^T J)^-1 * s^2`` with ``s^2 = 2 * cost / (m - n)``, using a
    Jacobian rebuilt at the optimum; those ``n`` extra evaluations are
    included in ``info.nfev``. When it cannot be estimated ``pcov`` is
    filled with ``inf``.

    Returns
    -------
    CurveFitResult
        Named tuple ``(popt, pcov, info)``.

    Example
    -------
    >>> xs = np.linspace(0.0, 1.0, 8)
    >>> popt, pcov, info = curve_fit(lambda p, x: p[0] * x + p[1], xs, 2 * xs + 1, [0.0, 0.0])
    >>> np.allclose(popt, [2.0, 1.0])
    True
    """
    p0 = _as_vector(p0)
    xs = np.asarray(xdata, dtype=float)
    ys = _as_vector(ydata)
    n = p0.size

    message = None
    if n == 0:
        message = "p0 must not be empty"
    elif xs.ndim == 0 or len(xs) != ys.size:
        message = "xdata and ydata must have the same length"
    elif ys.size == 0:
        message = "ydata must not be empty"
    if message is not None:
        return CurveFitResult(p0.copy(), np.full((n, n), np.inf), _invalid(p0, message))

    def residuals(p: Array) -> Array:
        return ys - np.array([float(model(p, xi)) for xi in xs])

    info = least_squares(
        residuals,
        p0,
        ftol=ftol,
        xtol=xtol,
        maxiter=maxiter,
        tolerances=tolerances,
        lambda0=lambda0,
    )
    jmat, evals = approx_jacobian(
        residuals, info.x, f0=info.fun, step=_jacobian_step(info.x), return_evals=True
    )
    info = replace(info, jac=jmat, nfev=info.nfev + evals, njev=info.njev + 1)
    pcov = _parameter_covariance(jmat, info.cost)

    if is_debug_enabled() and np.all(np.isfinite(pcov)) and not is_positive_semidefinite(pcov):
        logger.warning("Estimated covariance is not symmetric positive semi-definite")

    return CurveFitResult(info.x.copy(), pcov, info)


__all__ = ["least_squares", "curve_fit"]
