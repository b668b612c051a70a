import numpy as np
import pytest

from optikit.optimize import curve_fit, least_squares


def exponential(p: np.ndarray, x: float) -> float:
    return p[0] * np.exp(p[1] * x)


def rosenbrock_residuals(x: np.ndarray) -> np.ndarray:
    return np.array([10.0 * (x[1] - x[0] ** 2), 1.0 - x[0]])


def test_rosenbrock_residuals():
    res = least_squares(rosenbrock_residuals, [-1.2, 1.0], maxiter=200)
    assert res.success
    assert np.allclose(res.x, [1.0, 1.0], atol=1e-6)
    assert res.cost < 1e-12
    assert res.cost == pytest.approx(0.5 * float(res.fun @ res.fun))
    assert res.jac.shape == (2, 2)


def test_overdetermined_linear_problem():
    A = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    b = np.array([1.0, 2.0, 3.5])
    res = least_squares(lambda x: A @ x - b, [0.0, 0.0])
    expected = np.linalg.lstsq(A, b, rcond=None)[0]
    assert res.success
    assert np.allclose(res.x, expected, atol=1e-6)


def test_evaluation_count_matches_calls(counted):
    fun = counted(rosenbrock_residuals)
    res = least_squares(fun, [-1.2, 1.0])
    assert res.nfev == fun.count
    assert res.njev >= 1
    assert res.nit >= res.njev


def test_zero_residual_at_start(counted):
    fun = counted(lambda x: x - np.array([1.0, 2.0]))
    res = least_squares(fun, [1.0, 2.0])
    assert res.success
    assert res.nit == 0
    assert res.nfev == 1 == fun.count
    assert res.cost == 0.0


def test_singular_normal_matrix_returns_current_iterate():
    res = least_squares(lambda x: np.array([x[0] - 1.0, x[0] + 1.0]), [3.0, 4.0])
    assert not res.success
    assert res.message == "Singular normal matrix"
    assert np.allclose(res.x, [3.0, 4.0])
    assert res.nit == 1


def test_maxiter_reached():
    res = least_squares(rosenbrock_residuals, [-1.2, 1.0], maxiter=1)
    assert not res.success
    assert res.message == "Maximum iterations reached"
    assert res.nit == 1


def test_curve_fit_recovers_exponential_parameters():
    xs = np.linspace(0.0, 2.0, 20)
    a, b = 2.5, 1.3
    ys = a * np.exp(b * xs)
    popt, pcov, info = curve_fit(exponential, xs, ys, [2.0, 1.0])
    assert info.success
    assert np.allclose(popt, [a, b], atol=1e-4)
    assert pcov.shape == (2, 2)
    assert np.allclose(pcov, pcov.T)
    assert np.all(np.linalg.eigvalsh(pcov) >= -1e-12)


def test_curve_fit_noisy_data_covariance(rng):
    xs = np.linspace(0.0, 1.0, 50)
    ys = 1.5 * np.exp(-2.0 * xs) + 0.01 * rng.standard_normal(xs.size)
    result = curve_fit(exponential, xs, ys, [1.0, -1.0])
    popt, pcov, info = result
    assert result.popt is popt
    assert info.success
    assert np.allclose(popt, [1.5, -2.0], atol=0.05)
    assert np.allclose(pcov, pcov.T)
    eigvals = np.linalg.eigvalsh(pcov)
    assert np.all(eigvals > 0)
    # one-sigma uncertainties are small compared to the parameters
    assert np.all(np.sqrt(np.diag(pcov)) < 0.1)


def test_curve_fit_counts_model_calls(counted):
    xs = np.linspace(0.0, 2.0, 10)
    ys = 3.0 * xs + 0.5
    model = counted(lambda p, x: p[0] * x + p[1])
    popt, pcov, info = curve_fit(model, xs, ys, [1.0, 0.0])
    assert np.allclose(popt, [3.0, 0.5], atol=1e-6)
    # every residual evaluation calls the model once per data point,
    # including the Jacobian rebuilt for the covariance
    assert info.nfev * xs.size == model.count


def test_curve_fit_length_mismatch(counted):
    model = counted(lambda p, x: p[0] * x)
    popt, pcov, info = curve_fit(model, [1.0, 2.0, 3.0], [1.0, 2.0], [0.5])
    assert not info.success
    assert info.message == "xdata and ydata must have the same length"
    assert info.nfev == 0
    assert model.count == 0
    assert np.allclose(popt, [0.5])
    assert np.all(np.isinf(pcov))


def test_curve_fit_empty_p0():
    popt, pcov, info = curve_fit(lambda p, x: x, [1.0], [1.0], [])
    assert not info.success
    assert popt.size == 0
    assert pcov.shape == (0, 0)


def test_curve_fit_without_degrees_of_freedom():
    popt, pcov, info = curve_fit(lambda p, x: p[0] * x + p[1], [0.0, 1.0], [1.0, 3.0], [0.0, 0.0])
    assert np.allclose(popt, [2.0, 1.0], atol=1e-6)
    assert np.all(np.isinf(pcov))


def test_model_exceptions_propagate():
    def failing(p: np.ndarray, x: float) -> float:
        raise ValueError("bad model")

    with pytest.raises(ValueError, match="bad model"):
        curve_fit(failing, [0.0, 1.0], [0.0, 1.0], [1.0])
