"""Core interfaces shared across the optimization algorithms.

Every solver receives a plain callable, wraps it in :class:`CountedFunction`
so that ``nfev`` reflects each call actually made, and returns one of the
frozen result records defined here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional

import numpy as np

from ..diagnostics import check_finite, is_debug_enabled

Array = np.ndarray
ScalarFunction = Callable[[float], float]
Objective = Callable[[Array], float]
Residual = Callable[[Array], Array]
Jacobian = Callable[[Array], Array]
Model = Callable[[Array, float], float]

DEFAULT_XTOL = 1e-8
DEFAULT_FTOL = 1e-8
DEFAULT_MAXITER = 500

EPS = float(np.finfo(float).eps)
SQRT_EPS = math.sqrt(EPS)

# Threshold below which a derivative, denominator or pivot counts as zero.
TINY = 1e-14

FLAG_CONVERGED = "converged"
FLAG_SIGN = "f(a) and f(b) must have different signs"
FLAG_ZERO_DERIVATIVE = "derivative is zero"
FLAG_SINGULAR = "singular Jacobian"
FLAG_MAXITER = "maximum iterations reached"
FLAG_INVALID = "invalid input"

MSG_CONVERGED = "Optimization converged"
MSG_ROOT_FOUND = "Root found"
MSG_MAXITER = "Maximum iterations reached"


@dataclass(frozen=True)
class Tolerances:
    """Termination settings for a single solver call."""

    xtol: float = DEFAULT_XTOL
    ftol: float = DEFAULT_FTOL
    maxiter: int = DEFAULT_MAXITER


@dataclass(frozen=True)
class ScalarMinimizeResult:
    """Result of a scalar minimization."""

    x: float
    fun: float
    nit: int
    nfev: int
    success: bool
    message: str


@dataclass(frozen=True)
class RootScalarResult:
    """Result of a scalar root search.

    ``flag`` is ``"converged"`` on success and names the failure mode
    otherwise. ``njev`` counts calls of a user-supplied derivative.
    """

    x: float
    fun: float
    nit: int
    nfev: int
    njev: int
    success: bool
    message: str
    flag: str

    @property
    def root(self) -> float:
        return self.x

    @property
    def iterations(self) -> int:
        return self.nit

    @property
    def function_calls(self) -> int:
        return self.nfev

    @property
    def converged(self) -> bool:
        return self.success


@dataclass(frozen=True)
class MinimizeResult:
    """Result of a multivariate minimization."""

    x: Array
    fun: float
    nit: int
    nfev: int
    success: bool
    message: str
    history: List[Array] = field(default_factory=list)


@dataclass(frozen=True)
class RootResult:
    """Result of a root search for a system of equations.

    ``fun`` holds the residual vector at ``x``.
    """

    x: Array
    fun: Array
    nit: int
    nfev: int
    njev: int
    success: bool
    message: str
    flag: str
    history: List[Array] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        return self.nit

    @property
    def function_calls(self) -> int:
        return self.nfev

    @property
    def converged(self) -> bool:
        return self.success


@dataclass(frozen=True)
class LeastSquaresResult:
    """Result of a nonlinear least-squares solve.

    Attributes
    ----------
    x:
        Parameters at termination.
    cost:
        ``0.5 * ||fun||**2``.
    fun:
        Residual vector at ``x``.
    jac:
        Last finite-difference Jacobian of the residuals (``k x n``).
    """

    x: Array
    cost: float
    fun: Array
    jac: Array
    nit: int
    nfev: int
    njev: int
    success: bool
    message: str


class CurveFitResult(NamedTuple):
    """Optimal parameters, their covariance and the solver diagnostics."""

    popt: Array
    pcov: Array
    info: LeastSquaresResult


class CountedFunction:
    """Wrap an evaluable function and count every call made through it.

    Exceptions raised by the wrapped function propagate unchanged.
    """

    def __init__(self, fun: Callable, name: str = "objective") -> None:
        self.fun = fun
        self.name = name
        self.calls = 0

    def __call__(self, x):
        self.calls += 1
        value = self.fun(x)
        if is_debug_enabled():
            check_finite(value, self.name)
        return value


def resolve_tolerances(
    tolerances: Optional[Tolerances],
    xtol: Optional[float],
    ftol: Optional[float],
    maxiter: Optional[int],
) -> Tolerances:
    """Merge explicit keyword tolerances over a :class:`Tolerances` bundle."""
    base = tolerances if tolerances is not None else Tolerances()
    return Tolerances(
        xtol=base.xtol if xtol is None else float(xtol),
        ftol=base.ftol if ftol is None else float(ftol),
        maxiter=base.maxiter if maxiter is None else int(maxiter),
    )


__all__ = [
    "Array",
    "ScalarFunction",
    "Objective",
    "Residual",
    "Jacobian",
    "Model",
    "DEFAULT_XTOL",
    "DEFAULT_FTOL",
    "DEFAULT_MAXITER",
    "EPS",
    "SQRT_EPS",
    "TINY",
    "Tolerances",
    "ScalarMinimizeResult",
    "RootScalarResult",
    "MinimizeResult",
    "RootResult",
    "LeastSquaresResult",
    "CurveFitResult",
    "CountedFunction",
    "resolve_tolerances",
]
