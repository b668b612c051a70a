import numpy as np
import pytest

from optikit.optimize import Tolerances, root
from optikit.optimize.core import FLAG_CONVERGED, FLAG_INVALID, FLAG_MAXITER, FLAG_SINGULAR


def circle_line(x: np.ndarray) -> np.ndarray:
    return np.array([x[0] ** 2 + x[1] ** 2 - 4.0, x[0] - x[1]])


def circle_line_jac(x: np.ndarray) -> np.ndarray:
    return np.array([[2.0 * x[0], 2.0 * x[1]], [1.0, -1.0]])


def test_linear_system():
    res = root(lambda x: np.array([x[0] + x[1] - 3.0, x[0] - x[1] - 1.0]), [0.0, 0.0])
    assert res.success
    assert res.converged
    assert res.flag == FLAG_CONVERGED
    assert np.allclose(res.x, [2.0, 1.0], atol=1e-6)


def test_nonlinear_system():
    res = root(circle_line, [1.0, 0.5])
    assert res.success
    assert np.allclose(res.x, [np.sqrt(2.0), np.sqrt(2.0)], atol=1e-6)
    assert np.linalg.norm(res.fun) < 1e-6


def test_evaluation_count_includes_jacobian_columns(counted):
    fun = counted(circle_line)
    res = root(fun, [1.0, 0.5])
    assert res.success
    assert res.nfev == fun.count
    assert res.function_calls == fun.count
    assert res.njev == 0
    # every non-final iteration costs one residual plus one call per column
    assert res.nfev >= 3 * (res.nit - 1) + 1


def test_analytic_jacobian(counted):
    fun = counted(circle_line)
    jac = counted(circle_line_jac)
    res = root(fun, [1.0, 0.5], jac=jac)
    assert res.success
    assert np.allclose(res.x, [np.sqrt(2.0), np.sqrt(2.0)], atol=1e-8)
    assert res.njev == jac.count
    assert res.nfev == fun.count
    assert res.nfev <= res.nit + 1


def test_singular_jacobian_returns_last_iterate(counted):
    fun = counted(lambda x: np.array([x[0] - 1.0, x[0] + 2.0]))
    res = root(fun, [0.5, 0.5])
    assert not res.success
    assert res.flag == FLAG_SINGULAR
    assert res.message == "Singular Jacobian"
    assert res.nit == 1
    assert np.allclose(res.x, [0.5, 0.5])
    assert np.allclose(res.fun, [-0.5, 2.5])
    assert res.nfev == fun.count == 3


def test_singular_analytic_jacobian():
    res = root(
        lambda x: np.array([x[0] + x[1] - 1.0, 2.0 * x[0] + 2.0 * x[1] - 3.0]),
        [0.0, 0.0],
        jac=lambda x: np.array([[1.0, 1.0], [2.0, 2.0]]),
    )
    assert res.flag == FLAG_SINGULAR
    assert res.njev == 1


def test_maxiter_reached(counted):
    fun = counted(circle_line)
    res = root(fun, [3.0, -1.0], maxiter=1)
    assert not res.success
    assert res.flag == FLAG_MAXITER
    assert res.message == "Maximum iterations reached"
    assert res.nfev == fun.count
    assert np.allclose(res.fun, circle_line(res.x))


def test_line_search_variant(counted):
    fun = counted(lambda x: np.array([np.arctan(x[0]), x[1] - 1.0]))
    res = root(fun, [3.0, 0.0], line_search=True, maxiter=50)
    assert res.success
    assert np.allclose(res.x, [0.0, 1.0], atol=1e-6)
    assert res.nfev == fun.count


def test_failed_line_search_takes_last_trial_point(counted):
    fun = counted(lambda x: np.array([x[0]]))
    # a Jacobian with the wrong sign makes every trial step worse
    res = root(fun, [1.0], jac=lambda x: np.array([[-1.0]]), line_search=True, maxiter=1, history=True)
    assert res.x[0] == 1.0 + 2.0**-9
    assert res.history[-1][0] == res.x[0]
    # residual, ten trial points and the final evaluation
    assert res.nfev == fun.count == 12
    assert res.flag == FLAG_MAXITER


def test_tolerances_bundle_sets_maxiter_and_tol(counted):
    fun = counted(circle_line)
    res = root(fun, [3.0, -1.0], tolerances=Tolerances(maxiter=2))
    assert res.nit == 2
    assert res.flag == FLAG_MAXITER

    loose = root(circle_line, [3.0, -1.0], tolerances=Tolerances(ftol=1e-2))
    tight = root(circle_line, [3.0, -1.0])
    assert loose.success
    assert loose.nit < tight.nit

    # explicit keywords win over the bundle
    res = root(circle_line, [3.0, -1.0], maxiter=1, tolerances=Tolerances(maxiter=50))
    assert res.nit == 1


def test_history_records_iterates():
    res = root(circle_line, [1.0, 0.5], history=True)
    assert np.allclose(res.history[0], [1.0, 0.5])
    assert len(res.history) >= 2


def test_residual_length_mismatch():
    res = root(lambda x: np.array([x[0], x[1], 1.0]), [0.0, 0.0])
    assert not res.success
    assert res.flag == FLAG_INVALID
    assert res.nfev == 1


def test_empty_initial_guess():
    res = root(lambda x: x, [])
    assert res.flag == FLAG_INVALID
    assert res.nfev == 0


def test_scalar_system_accepts_scalar_return():
    res = root(lambda x: x[0] ** 3 - 8.0, [3.0])
    assert res.success
    assert res.x[0] == pytest.approx(2.0, abs=1e-6)


def test_residual_exceptions_propagate():
    def failing(x: np.ndarray) -> np.ndarray:
        raise FloatingPointError("overflow")

    with pytest.raises(FloatingPointError):
        root(failing, [1.0])
