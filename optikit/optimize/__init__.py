"""Deterministic classical optimization algorithms for optikit.

Example
-------
>>> from optikit.optimize import minimize_scalar, root_scalar
>>> res = minimize_scalar(lambda x: (x - 2.0) ** 2, bracket=(0.0, 4.0))
>>> round(res.x, 6)
2.0
>>> root_scalar(lambda x: x * x - 4.0, method="newton", x0=5.0).converged
True
"""

from .core import (
    DEFAULT_FTOL,
    DEFAULT_MAXITER,
    DEFAULT_XTOL,
    CountedFunction,
    CurveFitResult,
    LeastSquaresResult,
    MinimizeResult,
    RootResult,
    RootScalarResult,
    ScalarMinimizeResult,
    Tolerances,
)
from .least_squares import curve_fit, least_squares
from .root import root
from .root_scalar import bisect, brentq, newton, root_scalar, secant
from .scalar import brent, golden, minimize_scalar
from .simplex import initial_simplex, minimize, nelder_mead
from .utils import approx_derivative, approx_jacobian, gauss_jordan_inverse, gauss_solve

__all__ = [
    "DEFAULT_FTOL",
    "DEFAULT_MAXITER",
    "DEFAULT_XTOL",
    "CountedFunction",
    "CurveFitResult",
    "LeastSquaresResult",
    "MinimizeResult",
    "RootResult",
    "RootScalarResult",
    "ScalarMinimizeResult",
    "Tolerances",
    "approx_derivative",
    "approx_jacobian",
    "bisect",
    "brent",
    "brentq",
    "curve_fit",
    "gauss_jordan_inverse",
    "gauss_solve",
    "golden",
    "initial_simplex",
    "least_squares",
    "minimize",
    "minimize_scalar",
    "nelder_mead",
    "newton",
    "root",
    "root_scalar",
    "secant",
]
