"""Derivative-free multivariate minimization with the Nelder-Mead simplex."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..diagnostics import is_debug_enabled
from ..logging import get_logger
from .core import (
    MSG_CONVERGED,
    MSG_MAXITER,
    TINY,
    Array,
    CountedFunction,
    MinimizeResult,
    Objective,
    Tolerances,
    resolve_tolerances,
)

logger = get_logger(__name__)

ALPHA = 1.0  # reflection
GAMMA = 2.0  # expansion
RHO = 0.5  # contraction
SIGMA = 0.5  # shrink

NONZERO_DELTA = 0.05
ZERO_DELTA = 0.00025


def initial_simplex(x0: Array) -> Array:
    """Build the ``(n + 1, n)`` starting simplex around ``x0``.

    Vertex ``i + 1`` moves component ``i`` by 5 % of its value, or to
    ``0.00025`` when that component is (numerically) zero.
    """
    x0 = np.asarray(x0, dtype=float)
    n = x0.size
    simplex = np.tile(x0, (n + 1, 1))
    for i in range(n):
        if abs(x0[i]) < TINY:
            simplex[i + 1, i] = ZERO_DELTA
        else:
            simplex[i + 1, i] = (1.0 + NONZERO_DELTA) * x0[i]
    return simplex


def _converged(simplex: Array, fvals: Array, xtol: float, ftol: float) -> bool:
    frange = float(fvals[-1] - fvals[0])
    spread = float(np.max(np.abs(simplex[1:] - simplex[0]))) if len(simplex) > 1 else 0.0
    return frange < ftol and spread < xtol


def nelder_mead(
    fun: Objective,
    x0: Array,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
    history: bool = False,
) -> MinimizeResult:
    """Minimize ``fun`` over R^n with the Nelder-Mead simplex method.

    Parameters
    ----------
    fun:
        Objective taking a 1-D array and returning a float.
    x0:
        Initial guess.
    xtol, ftol:
        The search stops once the spread of function values over the
        simplex is below ``ftol`` and every vertex lies within ``xtol`` of
        the best one (max-norm).
    maxiter:
        Iteration limit, ``200 * n`` when omitted.
    history:
        Record the best vertex after every iteration.

    References:
        Nelder & Mead, *A simplex method for function minimization* (1965)
    """
    x0 = np.atleast_1d(np.asarray(x0, dtype=float)).ravel()
    n = x0.size
    if n == 0:
        return MinimizeResult(
            x=x0, fun=float("nan"), nit=0, nfev=0, success=False,
            message="x0 must not be empty",
        )
    if maxiter is None and tolerances is None:
        maxiter = 200 * n
    tol = resolve_tolerances(tolerances, xtol, ftol, maxiter)

    f = CountedFunction(fun)
    simplex = initial_simplex(x0)
    fvals = np.array([float(f(vertex.copy())) for vertex in simplex])
    hist: list[Array] = []
    nit = 0
    success = False

    while nit < tol.maxiter:
        nit += 1
        order = np.argsort(fvals, kind="stable")
        simplex = simplex[order]
        fvals = fvals[order]

        if _converged(simplex, fvals, tol.xtol, tol.ftol):
            success = True
            break

        worst = simplex[-1]
        centroid = simplex[:-1].mean(axis=0)

        xr = centroid + ALPHA * (centroid - worst)
        fr = float(f(xr.copy()))

        if fr < fvals[0]:
            xe = centroid + GAMMA * (xr - centroid)
            fe = float(f(xe.copy()))
            if fe < fr:
                simplex[-1], fvals[-1] = xe, fe
            else:
                simplex[-1], fvals[-1] = xr, fr
        elif fr < fvals[-2]:
            simplex[-1], fvals[-1] = xr, fr
        else:
            if fr < fvals[-1]:
                xc = centroid + RHO * (xr - centroid)
            else:
                xc = centroid + RHO * (worst - centroid)
            fc = float(f(xc.copy()))
            if fc < fvals[-1] and fc < fr:
                simplex[-1], fvals[-1] = xc, fc
            else:
                best = simplex[0]
                for i in range(1, n + 1):
                    simplex[i] = best + SIGMA * (simplex[i] - best)
                    fvals[i] = float(f(simplex[i].copy()))

        if history:
            hist.append(simplex[int(np.argmin(fvals))].copy())
        if is_debug_enabled():
            logger.debug("nelder-mead iter %d: best f=%.12g", nit, float(np.min(fvals)))

    order = np.argsort(fvals, kind="stable")
    best_x = simplex[order[0]].copy()
    best_f = float(fvals[order[0]])
    message = MSG_CONVERGED if success else MSG_MAXITER
    logger.debug("nelder-mead finished after %d iterations (%d calls): %s", nit, f.calls, message)
    return MinimizeResult(
        x=best_x,
        fun=best_f,
        nit=nit,
        nfev=f.calls,
        success=success,
        message=message,
        history=hist,
    )


def minimize(
    fun: Objective,
    x0: Array,
    method: str = "nelder-mead",
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
    history: bool = False,
) -> MinimizeResult:
    """Minimize a function of several variables.

    Only ``method="nelder-mead"`` is available; any other name returns an
    unsuccessful result without evaluating ``fun``.

    Example
    -------
    >>> res = minimize(lambda x: (x[0] - 1) ** 2 + (x[1] - 2) ** 2, [0.0, 0.0])
    >>> np.allclose(res.x, [1.0, 2.0], atol=1e-6)
    True
    """
    if str(method).lower() not in ("nelder-mead", "neldermead", "nelder_mead"):
        x = np.atleast_1d(np.asarray(x0, dtype=float)).ravel()
        return MinimizeResult(
            x=x, fun=float("nan"), nit=0, nfev=0, success=False,
            message=f"Unknown method: {method}",
        )
    return nelder_mead(
        fun,
        x0,
        xtol=xtol,
        ftol=ftol,
        maxiter=maxiter,
        tolerances=tolerances,
        history=history,
    )


__all__ = ["initial_simplex", "nelder_mead", "minimize"]
