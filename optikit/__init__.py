"""optikit - classical numerical optimization on top of NumPy."""

__version__ = "0.1.0"

# Diagnostics
from .diagnostics import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

# Logging
from .logging import configure_logging, get_log_level, get_logger, set_log_level

# Optimization
from .optimize import (
    DEFAULT_FTOL,
    DEFAULT_MAXITER,
    DEFAULT_XTOL,
    CurveFitResult,
    LeastSquaresResult,
    MinimizeResult,
    RootResult,
    RootScalarResult,
    ScalarMinimizeResult,
    Tolerances,
    approx_derivative,
    approx_jacobian,
    bisect,
    brent,
    brentq,
    curve_fit,
    gauss_jordan_inverse,
    gauss_solve,
    golden,
    initial_simplex,
    least_squares,
    minimize,
    minimize_scalar,
    nelder_mead,
    newton,
    root,
    root_scalar,
    secant,
)

__all__ = [
    "__version__",
    # Diagnostics
    "debug_context",
    "is_debug_enabled",
    "set_debug_enabled",
    # Logging
    "configure_logging",
    "get_log_level",
    "get_logger",
    "set_log_level",
    # Optimization
    "DEFAULT_FTOL",
    "DEFAULT_MAXITER",
    "DEFAULT_XTOL",
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
