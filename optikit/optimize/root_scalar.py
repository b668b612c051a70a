"""Root finding for scalar functions: bisection, Newton, secant and Brent."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..diagnostics import is_debug_enabled
from ..logging import get_logger
from .core import (
    EPS,
    FLAG_CONVERGED,
    FLAG_INVALID,
    FLAG_MAXITER,
    FLAG_SIGN,
    FLAG_ZERO_DERIVATIVE,
    MSG_MAXITER,
    MSG_ROOT_FOUND,
    TINY,
    CountedFunction,
    RootScalarResult,
    ScalarFunction,
    Tolerances,
    resolve_tolerances,
)
from .utils import approx_derivative

logger = get_logger(__name__)

_MESSAGES = {
    FLAG_CONVERGED: MSG_ROOT_FOUND,
    FLAG_SIGN: "f(a) and f(b) must have different signs",
    FLAG_ZERO_DERIVATIVE: "Derivative too small",
    FLAG_MAXITER: MSG_MAXITER,
}


def _same_sign(u: float, v: float) -> bool:
    return (u > 0.0 and v > 0.0) or (u < 0.0 and v < 0.0)


def _invalid(message: str) -> RootScalarResult:
    logger.debug("root search rejected input: %s", message)
    return RootScalarResult(
        x=math.nan,
        fun=math.nan,
        nit=0,
        nfev=0,
        njev=0,
        success=False,
        message=message,
        flag=FLAG_INVALID,
    )


def _finish(
    method: str,
    x: float,
    fx: float,
    nit: int,
    f: CountedFunction,
    flag: str,
    njev: int = 0,
) -> RootScalarResult:
    if flag == FLAG_ZERO_DERIVATIVE:
        logger.info("%s stopped at x=%.12g: derivative is zero", method, x)
    logger.debug("%s finished after %d iterations (%d calls): %s", method, nit, f.calls, flag)
    return RootScalarResult(
        x=x,
        fun=fx,
        nit=nit,
        nfev=f.calls,
        njev=njev,
        success=flag == FLAG_CONVERGED,
        message=_MESSAGES[flag],
        flag=flag,
    )


def _check_bracket(a: float, b: float) -> Optional[str]:
    if not (math.isfinite(a) and math.isfinite(b)):
        return "Bracket endpoints must be finite"
    if not a < b:
        return "Bracket must satisfy a < b"
    return None


def bisect(
    fun: ScalarFunction,
    a: float,
    b: float,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> RootScalarResult:
    """Bisection on a sign-changing bracket.

    If ``f(a)`` and ``f(b)`` share a sign the search stops after those two
    evaluations with ``flag == "f(a) and f(b) must have different signs"``
    and a NaN root.
    """
    tol = resolve_tolerances(tolerances, xtol, ftol, maxiter)
    a, b = float(a), float(b)
    error = _check_bracket(a, b)
    if error is not None:
        return _invalid(error)

    f = CountedFunction(fun)
    fa = float(f(a))
    if fa == 0.0:
        return _finish("bisect", a, fa, 0, f, FLAG_CONVERGED)
    fb = float(f(b))
    if fb == 0.0:
        return _finish("bisect", b, fb, 0, f, FLAG_CONVERGED)
    if _same_sign(fa, fb):
        return RootScalarResult(
            x=math.nan,
            fun=math.nan,
            nit=0,
            nfev=f.calls,
            njev=0,
            success=False,
            message=_MESSAGES[FLAG_SIGN],
            flag=FLAG_SIGN,
        )

    c, fc = (a, fa) if abs(fa) <= abs(fb) else (b, fb)
    nit = 0
    flag = FLAG_MAXITER
    while nit < tol.maxiter:
        nit += 1
        half = 0.5 * (b - a)
        c = a + half
        fc = float(f(c))
        if fc == 0.0 or abs(fc) < tol.ftol or half < tol.xtol:
            flag = FLAG_CONVERGED
            break
        if _same_sign(fa, fc):
            a, fa = c, fc
        else:
            b, fb = c, fc
        if is_debug_enabled():
            logger.debug("bisect iter %d: bracket [%.12g, %.12g]", nit, a, b)
    return _finish("bisect", c, fc, nit, f, flag)


def newton(
    fun: ScalarFunction,
    x0: float,
    fprime: Optional[ScalarFunction] = None,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> RootScalarResult:
    """Newton-Raphson iteration from ``x0``.

    Without ``fprime`` the derivative is a symmetric difference with step
    ``sqrt(eps) * max(|x|, 1)``; its two evaluations count towards
    ``nfev``. Calls of ``fprime`` are reported in ``njev``.
    """
    tol = resolve_tolerances(tolerances, xtol, ftol, maxiter)
    x = float(x0)
    if not math.isfinite(x):
        return _invalid("x0 must be finite")

    f = CountedFunction(fun)
    df = CountedFunction(fprime, "derivative") if fprime is not None else None

    def derivative(point: float) -> float:
        if df is not None:
            return float(df(point))
        return approx_derivative(f, point)

    nit = 0
    fx = math.nan
    flag = FLAG_MAXITER
    while nit < tol.maxiter:
        nit += 1
        fx = float(f(x))
        if abs(fx) < tol.ftol:
            flag = FLAG_CONVERGED
            break
        dfx = derivative(x)
        if abs(dfx) < TINY:
            flag = FLAG_ZERO_DERIVATIVE
            break
        x_new = x - fx / dfx
        if is_debug_enabled():
            logger.debug("newton iter %d: x=%.15g f=%.6g f'=%.6g", nit, x, fx, dfx)
        if abs(x_new - x) < tol.xtol:
            x = x_new
            fx = float(f(x))
            flag = FLAG_CONVERGED
            break
        x = x_new
    else:
        fx = float(f(x))
    njev = df.calls if df is not None else 0
    return _finish("newton", x, fx, nit, f, flag, njev=njev)


def secant(
    fun: ScalarFunction,
    x0: float,
    x1: Optional[float] = None,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> RootScalarResult:
    """Secant iteration from two seeds.

    The second seed defaults to ``x0 + 0.001 * max(|x0|, 1)``. Both seed
    evaluations count towards ``nfev``.
    """
    tol = resolve_tolerances(tolerances, xtol, ftol, maxiter)
    x_prev = float(x0)
    x_curr = x_prev + 0.001 * max(abs(x_prev), 1.0) if x1 is None else float(x1)
    if not (math.isfinite(x_prev) and math.isfinite(x_curr)):
        return _invalid("Initial points must be finite")
    if x_prev == x_curr:
        return _invalid("x0 and x1 must differ")

    f = CountedFunction(fun)
    f_prev = float(f(x_prev))
    f_curr = float(f(x_curr))
    nit = 0
    flag = FLAG_MAXITER
    while nit < tol.maxiter:
        nit += 1
        if abs(f_curr) < tol.ftol:
            flag = FLAG_CONVERGED
            break
        slope = (f_curr - f_prev) / (x_curr - x_prev)
        if abs(slope) < TINY:
            flag = FLAG_ZERO_DERIVATIVE
            break
        x_new = x_curr - f_curr / slope
        if is_debug_enabled():
            logger.debug("secant iter %d: x=%.15g f=%.6g", nit, x_curr, f_curr)
        if abs(x_new - x_curr) < tol.xtol:
            x_curr = x_new
            f_curr = float(f(x_curr))
            flag = FLAG_CONVERGED
            break
        x_prev, f_prev = x_curr, f_curr
        x_curr = x_new
        f_curr = float(f(x_curr))
    return _finish("secant", x_curr, f_curr, nit, f, flag)


def brentq(
    fun: ScalarFunction,
    a: float,
    b: float,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> RootScalarResult:
    """Brent's bracketing root finder.

    Combines inverse quadratic interpolation, the secant step and bisection
    while keeping a sign-changing bracket. Same precondition and failure
    flags as :func:`bisect`.

    References:
        Brent, *Algorithms for Minimization without Derivatives* (1973), ch. 4
    """
    tol = resolve_tolerances(tolerances, xtol, ftol, maxiter)
    a, b = float(a), float(b)
    error = _check_bracket(a, b)
    if error is not None:
        return _invalid(error)

    f = CountedFunction(fun)
    fa = float(f(a))
    if fa == 0.0:
        return _finish("brentq", a, fa, 0, f, FLAG_CONVERGED)
    fb = float(f(b))
    if fb == 0.0:
        return _finish("brentq", b, fb, 0, f, FLAG_CONVERGED)
    if _same_sign(fa, fb):
        return RootScalarResult(
            x=math.nan,
            fun=math.nan,
            nit=0,
            nfev=f.calls,
            njev=0,
            success=False,
            message=_MESSAGES[FLAG_SIGN],
            flag=FLAG_SIGN,
        )

    c, fc = a, fa
    d = e = b - a
    nit = 0
    flag = FLAG_MAXITER
    while nit < tol.maxiter:
        nit += 1
        if _same_sign(fb, fc):
            c, fc = a, fa
            d = e = b - a
        if abs(fc) < abs(fb):
            a, b, c = b, c, b
            fa, fb, fc = fb, fc, fb
        tol1 = 2.0 * EPS * abs(b) + 0.5 * tol.xtol
        xm = 0.5 * (c - b)
        if abs(xm) <= tol1 or fb == 0.0 or abs(fb) < tol.ftol:
            flag = FLAG_CONVERGED
            break
        if abs(e) >= tol1 and abs(fa) > abs(fb):
            s = fb / fa
            if a == c:
                p = 2.0 * xm * s
                q = 1.0 - s
            else:
                q = fa / fc
                r = fb / fc
                p = s * (2.0 * xm * q * (q - r) - (b - a) * (r - 1.0))
                q = (q - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0.0:
                q = -q
            else:
                p = -p
            if 2.0 * p < min(3.0 * xm * q - abs(tol1 * q), abs(e * q)):
                e = d
                d = p / q
            else:
                d = xm
                e = d
        else:
            d = xm
            e = d
        a, fa = b, fb
        b += d if abs(d) > tol1 else math.copysign(tol1, xm)
        fb = float(f(b))
        if is_debug_enabled():
            logger.debug("brentq iter %d: b=%.15g f(b)=%.6g", nit, b, fb)
    return _finish("brentq", b, fb, nit, f, flag)


def root_scalar(
    fun: ScalarFunction,
    method: Optional[str] = None,
    bracket: Optional[Sequence[float]] = None,
    x0: Optional[float] = None,
    x1: Optional[float] = None,
    fprime: Optional[ScalarFunction] = None,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
    maxiter: Optional[int] = None,
    tolerances: Optional[Tolerances] = None,
) -> RootScalarResult:
    """Find a root of a scalar function.

    ``method`` is one of ``"bisect"``, ``"brentq"``, ``"newton"`` or
    ``"secant"`` (case-insensitive). When omitted it is ``"brentq"`` if a
    bracket is given, ``"newton"`` if ``x0`` and ``fprime`` are given and
    ``"secant"`` if only ``x0`` is given.

    Example
    -------
    >>> res = root_scalar(lambda x: x * x - 4.0, bracket=(0.0, 5.0))
    >>> res.converged, round(res.root, 8)
    (True, 2.0)
    """
    if method is None:
        if bracket is not None:
            method = "brentq"
        elif x0 is not None and fprime is not None:
            method = "newton"
        elif x0 is not None:
            method = "secant"
        else:
            return _invalid("Either bracket or x0 must be provided")
    method = str(method).lower()
    tols = dict(xtol=xtol, ftol=ftol, maxiter=maxiter, tolerances=tolerances)

    if method in ("bisect", "brentq"):
        if bracket is None or len(bracket) < 2:
            return _invalid(f"Method {method} requires bracket=(a, b)")
        solver = bisect if method == "bisect" else brentq
        return solver(fun, bracket[0], bracket[1], **tols)
    if method == "newton":
        if x0 is None:
            return _invalid("Newton's method requires x0")
        return newton(fun, x0, fprime=fprime, **tols)
    if method == "secant":
        if x0 is None:
            return _invalid("Secant method requires x0")
        return secant(fun, x0, x1=x1, **tols)
    return _invalid(f"Unknown method: {method}")


__all__ = ["bisect", "newton", "secant", "brentq", "root_scalar"]
