"""Newton's method for systems of nonlinear equations."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..diagnostics import is_debug_enabled
from ..logging import get_logger
from .core import (
    FLAG_CONVERGED,
    FLAG_INVALID,
    FLAG_MAXITER,
    FLAG_SINGULAR,
    MSG_MAXITER,
    MSG_ROOT_FOUND,
    SQRT_EPS,
    Array,
    CountedFunction,
    Jacobian,
    Residual,
    RootResult,
    Tolerances,
    resolve_tolerances,
)
from .utils import approx_jacobian, gauss_solve

logger = get_logger(__name__)

MAX_BACKTRACKS = 10


def _as_vector(value) -> Array:
    return np.atleast_1d(np.asarray(value, dtype=float)).ravel()


def root(
    fun: Residual,
    x0: Array,
    tol: Optional[float] = None,
    maxiter: Optional[int] = None,
    jac: Optional[Jacobian] = None,
    line_search: bool = False,
    history: bool = False,
    tolerances: Optional[Tolerances] = None,
) -> RootResult:
    """Solve ``fun(x) = 0`` for ``x`` in R^n with Newton's method.

    Each iteration evaluates ``fun(x)`` and stops when its Euclidean norm is
    below ``tol``. Otherwise the Jacobian is built column by column with
    forward differences of step ``sqrt(eps)`` (or taken from ``jac``), the
    system ``J dx = -fun(x)`` is solved by Gaussian elimination with
    partial pivoting and ``x`` moves to ``x + dx``.

    Parameters
    ----------
    fun:
        Residual function R^n -> R^n.
    x0:
        Initial guess.
    tol:
        Tolerance on the residual norm and on the step norm. Defaults to
        the ``ftol`` of ``tolerances``, 1e-8 when no bundle is given.
    maxiter:
        Maximum number of Newton iterations, taken from ``tolerances``
        when omitted.
    jac:
        Optional analytic Jacobian; its calls are counted in ``njev``.
    line_search:
        Halve the step until the residual norm decreases, trying at most
        10 points. When none of them improves, the last one is taken.
        Trial evaluations count towards ``nfev``.
    history:
        Record every iterate.
    tolerances:
        Bundle supplying ``tol`` (its ``ftol``) and ``maxiter``.

    Returns
    -------
    RootResult
        ``flag`` is ``"singular Jacobian"`` when a pivot below ``1e-14``
        remains; the last iterate is returned in that case.
    """
    tols = resolve_tolerances(tolerances, None, tol, maxiter)
    tol = tols.ftol
    x = _as_vector(x0)
    n = x.size
    if n == 0:
        return RootResult(
            x=x, fun=np.zeros(0), nit=0, nfev=0, njev=0, success=False,
            message="x0 must not be empty", flag=FLAG_INVALID,
        )

    f = CountedFunction(fun, "residual")
    jf = CountedFunction(jac, "jacobian") if jac is not None else None
    hist: list[Array] = [x.copy()] if history else []
    nit = 0
    fx = np.full(n, np.nan)
    flag = FLAG_MAXITER
    message = MSG_MAXITER

    while nit < tols.maxiter:
        nit += 1
        fx = _as_vector(f(x.copy()))
        if fx.size != n:
            flag = FLAG_INVALID
            message = f"fun returned {fx.size} values for {n} unknowns"
            break
        fnorm = float(np.linalg.norm(fx))
        if fnorm < tol:
            flag = FLAG_CONVERGED
            message = MSG_ROOT_FOUND
            break

        if jf is not None:
            jmat = np.asarray(jf(x.copy()), dtype=float).reshape(n, n)
        else:
            jmat = approx_jacobian(f, x, f0=fx, step=SQRT_EPS)

        try:
            dx = gauss_solve(jmat, -fx)
        except np.linalg.LinAlgError:
            flag = FLAG_SINGULAR
            message = "Singular Jacobian"
            logger.info("root: singular Jacobian at iteration %d", nit)
            break

        if line_search:
            alpha = 1.0
            for attempt in range(MAX_BACKTRACKS):
                trial = _as_vector(f(x + alpha * dx))
                if float(np.linalg.norm(trial)) < fnorm or attempt == MAX_BACKTRACKS - 1:
                    break
                alpha *= 0.5
            dx = alpha * dx

        x = x + dx
        if history:
            hist.append(x.copy())
        step = float(np.linalg.norm(dx))
        if is_debug_enabled():
            logger.debug("root iter %d: |f|=%.6g |dx|=%.6g", nit, fnorm, step)
        if step < tol:
            fx = _as_vector(f(x.copy()))
            flag = FLAG_CONVERGED
            message = "Step size below tolerance"
            break
    else:
        fx = _as_vector(f(x.copy()))

    logger.debug("root finished after %d iterations (%d calls): %s", nit, f.calls, message)
    return RootResult(
        x=x,
        fun=fx,
        nit=nit,
        nfev=f.calls,
        njev=jf.calls if jf is not None else 0,
        success=flag == FLAG_CONVERGED,
        message=message,
        flag=flag,
        history=hist,
    )


__all__ = ["root"]
