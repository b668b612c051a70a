"""
Example: Classical Optimization with optikit

This example walks through the solvers shipped with optikit: scalar
minimization on a bracket, scalar and multivariate root finding, the
Nelder-Mead simplex and a Levenberg-Marquardt curve fit with parameter
uncertainties.
"""

import numpy as np

from optikit import (
    curve_fit,
    minimize,
    minimize_scalar,
    root,
    root_scalar,
)


def example_scalar_minimization():
    """Example: Minimum of a smooth function on an interval."""
    print("=" * 60)
    print("Example 1: Scalar Minimization - Brent vs Golden Section")
    print("=" * 60)

    def fun(x: float) -> float:
        return (x - 2.0) ** 2 + np.sin(3.0 * x)

    for method in ("brent", "golden"):
        result = minimize_scalar(fun, bracket=(0.0, 4.0), method=method)
        print(f"{method:>6}: x = {result.x:.8f}, f(x) = {result.fun:.8f}, calls = {result.nfev}")
    print()


def example_root_finding():
    """Example: Roots of x^3 - 2x - 5 with several methods."""
    print("=" * 60)
    print("Example 2: Scalar Root Finding")
    print("=" * 60)

    def fun(x: float) -> float:
        return x**3 - 2.0 * x - 5.0

    for method in ("bisect", "brentq"):
        result = root_scalar(fun, method=method, bracket=(2.0, 3.0))
        print(f"{method:>7}: root = {result.root:.12f}, iterations = {result.iterations}")
    result = root_scalar(fun, method="newton", x0=2.0, fprime=lambda x: 3.0 * x**2 - 2.0)
    print(f" newton: root = {result.root:.12f}, iterations = {result.iterations}")
    result = root_scalar(fun, method="secant", x0=2.0, x1=3.0)
    print(f" secant: root = {result.root:.12f}, iterations = {result.iterations}")
    print()


def example_nonlinear_system():
    """Example: Intersection of a circle and a line."""
    print("=" * 60)
    print("Example 3: Nonlinear System (Newton)")
    print("=" * 60)

    def fun(x: np.ndarray) -> np.ndarray:
        return np.array([x[0] ** 2 + x[1] ** 2 - 4.0, x[0] - x[1]])

    result = root(fun, [1.0, 0.5])
    print(f"Converged: {result.success} ({result.message})")
    print(f"Solution: x = {result.x}")
    print(f"Residual norm: {np.linalg.norm(result.fun):.2e}")
    print()


def example_simplex():
    """Example: Rosenbrock's function with Nelder-Mead."""
    print("=" * 60)
    print("Example 4: Nelder-Mead Simplex")
    print("=" * 60)

    def rosenbrock(x: np.ndarray) -> float:
        return float(100.0 * (x[1] - x[0] ** 2) ** 2 + (1.0 - x[0]) ** 2)

    result = minimize(rosenbrock, [-1.2, 1.0], maxiter=2000)
    print(f"Converged: {result.success}")
    print(f"Minimum: x = {result.x}, f(x) = {result.fun:.3e}")
    print(f"Iterations: {result.nit}, function calls: {result.nfev}")
    print()


def example_curve_fit():
    """Example: Fit an exponential decay to noisy data."""
    print("=" * 60)
    print("Example 5: Curve Fitting (Levenberg-Marquardt)")
    print("=" * 60)

    rng = np.random.default_rng(7)
    xs = np.linspace(0.0, 4.0, 40)
    ys = 3.0 * np.exp(-0.8 * xs) + 0.02 * rng.standard_normal(xs.size)

    def model(p: np.ndarray, x: float) -> float:
        return p[0] * np.exp(-p[1] * x)

    popt, pcov, info = curve_fit(model, xs, ys, [1.0, 1.0])
    perr = np.sqrt(np.diag(pcov))
    print(f"Status: {info.message}")
    print(f"Fitted parameters: a = {popt[0]:.4f} +/- {perr[0]:.4f}, b = {popt[1]:.4f} +/- {perr[1]:.4f}")
    print(f"Final cost: {info.cost:.3e}")
    print()


def main():
    """Run all examples."""
    print("\n" + "=" * 60)
    print("optikit: Classical Optimization Examples")
    print("=" * 60 + "\n")

    example_scalar_minimization()
    example_root_finding()
    example_nonlinear_system()
    example_simplex()
    example_curve_fit()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
