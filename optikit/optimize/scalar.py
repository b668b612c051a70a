"""Scalar minimization by golden-section search and Brent's method."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..diagnostics import is_debug_enabled
from ..logging import get_logger
from .core import (
    MSG_CONVERGED,
    MSG_MAXITER,
    SQRT_EPS,
    CountedFunction,
    ScalarFunction,
    ScalarMinimizeResult,
    Tolerances,
    resolve_tolerances,
)

logger = get_logger(__name__)

PHI = (1.0 + math.sqrt(5.0)) / 2.0
RESPHI = 2.0 - PHI
CGOLD = 0.3819660


def _bracket_error(a: float, b: float) -> Optional[str]:
    if not (math.isfinite(a) and math.isfinite(b)):
        return "Bracket endpoints must be finite"
    if not a < b:
        return "Bracket must satisfy a < b"
    return None


def _invalid(message: str) -> ScalarMinimizeResult:
    logger.debug("scalar minimization rejected input: %s", message)
    return ScalarMinimizeResult(
        x=math.nan, fun=math.nan, nit=0, nfev=0, success=False, message=message
    )


def golden(
    fun: ScalarFunction,
    a: float,
    b: float,
    xtol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> ScalarMinimizeResult:
    """Golden-section search for a minimum of ``fun`` on ``[a, b]``.

    Correct for functions that are unimodal on the bracket. Each iteration
    evaluates a single new interior point; the surviving interior point
    keeps its cached value. The returned point is the midpoint of the final
    bracket, evaluated once more.
    """
    tol = resolve_tolerances(tolerances, xtol, None, maxiter)
    a, b = float(a), float(b)
    error = _bracket_error(a, b)
    if error is not None:
        return _invalid(error)

    f = CountedFunction(fun)
    c = a + RESPHI * (b - a)
    d = b - RESPHI * (b - a)
    fc = float(f(c))
    fd = float(f(d))
    nit = 0

    while abs(b - a) > tol.xtol and nit < tol.maxiter:
        nit += 1
        if fc < fd:
            b, d, fd = d, c, fc
            c = a + RESPHI * (b - a)
            fc = float(f(c))
        else:
            a, c, fc = c, d, fd
            d = b - RESPHI * (b - a)
            fd = float(f(d))
        if is_debug_enabled():
            logger.debug("golden iter %d: bracket [%.12g, %.12g]", nit, a, b)

    x = 0.5 * (a + b)
    fx = float(f(x))
    success = abs(b - a) <= tol.xtol
    message = MSG_CONVERGED if success else MSG_MAXITER
    logger.debug("golden finished after %d iterations: %s", nit, message)
    return ScalarMinimizeResult(
        x=x, fun=fx, nit=nit, nfev=f.calls, success=success, message=message
    )


def brent(
    fun: ScalarFunction,
    a: float,
    b: float,
    xtol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> ScalarMinimizeResult:
    """Brent's method: parabolic interpolation with golden-section fallback.

    A parabola through the three best points ``x``, ``w``, ``v`` is used
    when its minimum falls strictly inside the bracket and the step is
    smaller than half of the step before last. Otherwise a golden-section
    step into the larger segment is taken. No step is shorter than
    ``tol1 = sqrt(eps) * |x| + xtol / 3``.

    References:
        Brent, *Algorithms for Minimization without Derivatives* (1973)
    """
    tol = resolve_tolerances(tolerances, xtol, None, maxiter)
    a, b = float(a), float(b)
    error = _bracket_error(a, b)
    if error is not None:
        return _invalid(error)

    f = CountedFunction(fun)
    x = w = v = a + CGOLD * (b - a)
    fx = float(f(x))
    fw = fv = fx
    d = 0.0
    e = 0.0  # distance moved on the step before last
    nit = 0
    success = False

    while nit < tol.maxiter:
        nit += 1
        xm = 0.5 * (a + b)
        tol1 = SQRT_EPS * abs(x) + tol.xtol / 3.0
        tol2 = 2.0 * tol1

        if abs(x - xm) <= tol2 - 0.5 * (b - a):
            success = True
            break

        if abs(e) > tol1:
            r = (x - w) * (fx - fv)
            q = (x - v) * (fx - fw)
            p = (x - v) * q - (x - w) * r
            q = 2.0 * (q - r)
            if q > 0.0:
                p = -p
            q = abs(q)
            etemp = e
            e = d
            if abs(p) >= abs(0.5 * q * etemp) or p <= q * (a - x) or p >= q * (b - x):
                e = (a - x) if x >= xm else (b - x)
                d = CGOLD * e
            else:
                d = p / q
                u = x + d
                if (u - a) < tol2 or (b - u) < tol2:
                    d = math.copysign(tol1, xm - x)
        else:
            e = (a - x) if x >= xm else (b - x)
            d = CGOLD * e

        u = x + d if abs(d) >= tol1 else x + math.copysign(tol1, d)
        fu = float(f(u))

        if fu <= fx:
            if u >= x:
                a = x
            else:
                b = x
            v, w, x = w, x, u
            fv, fw, fx = fw, fx, fu
        else:
            if u < x:
                a = u
            else:
                b = u
            if fu <= fw or w == x:
                v, w = w, u
                fv, fw = fw, fu
            elif fu <= fv or v == x or v == w:
                v = u
                fv = fu

        if is_debug_enabled():
            logger.debug("brent iter %d: x=%.12g f=%.12g bracket [%.12g, %.12g]", nit, x, fx, a, b)

    message = MSG_CONVERGED if success else MSG_MAXITER
    logger.debug("brent finished after %d iterations: %s", nit, message)
    return ScalarMinimizeResult(
        x=x, fun=fx, nit=nit, nfev=f.calls, success=success, message=message
    )


_METHODS = {"golden": golden, "brent": brent}


def minimize_scalar(
    fun: ScalarFunction,
    bracket: Sequence[float] = (-10.0, 10.0),
    method: str = "brent",
    xtol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> ScalarMinimizeResult:
    """Minimize a scalar function inside a bracket.

    Parameters
    ----------
    fun:
        Function of one variable.
    bracket:
        ``(a, b)`` or a three-point bracket ``(a, c, b)``; only the outer
        points are used.
    method:
        ``"brent"`` (default) or ``"golden"``, case-insensitive.

    Example
    -------
    >>> res = minimize_scalar(lambda x: (x - 2.0) ** 2, bracket=(0.0, 4.0))
    >>> round(res.x, 6)
    2.0
    """
    solver = _METHODS.get(str(method).lower())
    if solver is None:
        return _invalid(f"Unknown method: {method}")
    if len(bracket) not in (2, 3):
        return _invalid("Bracket must contain two or three points")
    a, b = bracket[0], bracket[-1]
    return solver(fun, a, b, xtol=xtol, maxiter=maxiter, tolerances=tolerances)


__all__ = ["golden", "brent", "minimize_scalar"]
