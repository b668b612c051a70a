import math

import numpy as np
import pytest

from optikit.optimize import Tolerances, brent, golden, minimize_scalar


def parabola(x: float) -> float:
    return (x - 2.0) ** 2


def test_golden_and_brent_agree_on_parabola():
    res_golden = golden(parabola, 0.0, 4.0, xtol=1e-8)
    res_brent = brent(parabola, 0.0, 4.0, xtol=1e-8)
    for res in (res_golden, res_brent):
        assert res.success
        assert res.message == "Optimization converged"
        assert abs(res.x - 2.0) < 1e-6
        assert res.fun < 1e-10


def test_brent_needs_fewer_evaluations_than_golden():
    res_golden = golden(parabola, 0.0, 4.0, xtol=1e-8)
    res_brent = brent(parabola, 0.0, 4.0, xtol=1e-8)
    assert res_brent.nfev < res_golden.nfev


def test_golden_evaluation_count(counted):
    fun = counted(parabola)
    res = golden(fun, 0.0, 4.0, xtol=1e-6)
    assert res.nfev == fun.count
    # two interior points, one per iteration, one at the final midpoint
    assert res.nfev == res.nit + 3


def test_brent_evaluation_count(counted):
    fun = counted(parabola)
    res = brent(fun, 0.0, 4.0)
    assert res.nfev == fun.count


def test_brent_sine_minimum():
    res = minimize_scalar(math.sin, bracket=(3.0, 6.0), method="brent")
    assert res.success
    assert res.x == pytest.approx(3 * math.pi / 2, abs=1e-5)
    assert res.fun == pytest.approx(-1.0, abs=1e-10)


def test_minimize_scalar_default_bracket_and_method():
    res = minimize_scalar(lambda x: (x - 3.0) ** 2 + 1.0)
    assert res.success
    assert res.x == pytest.approx(3.0, abs=1e-6)
    assert res.fun == pytest.approx(1.0, abs=1e-10)


def test_minimize_scalar_method_is_case_insensitive():
    res = minimize_scalar(parabola, bracket=(0.0, 4.0), method="GOLDEN")
    assert res.success
    assert res.x == pytest.approx(2.0, abs=1e-6)


def test_minimize_scalar_three_point_bracket():
    res = minimize_scalar(parabola, bracket=(0.0, 1.0, 5.0))
    assert res.success
    assert res.x == pytest.approx(2.0, abs=1e-6)


def test_golden_minimum_at_boundary():
    res = golden(lambda x: x, 0.0, 1.0)
    assert res.success
    assert abs(res.x) < 1e-6


def test_golden_maxiter_reached():
    res = golden(parabola, 0.0, 4.0, maxiter=3)
    assert not res.success
    assert res.message == "Maximum iterations reached"
    assert res.nit == 3
    assert res.nfev == 6
    assert 0.0 <= res.x <= 4.0


def test_brent_maxiter_reached_keeps_best_point():
    res = brent(parabola, 0.0, 4.0, maxiter=2)
    assert not res.success
    assert res.message == "Maximum iterations reached"
    assert res.fun == pytest.approx(parabola(res.x))
    assert res.fun <= parabola(0.0 + 0.3819660 * 4.0)


def test_invalid_bracket_is_reported_without_evaluation(counted):
    fun = counted(parabola)
    res = golden(fun, 4.0, 0.0)
    assert not res.success
    assert res.nfev == 0
    assert fun.count == 0
    assert math.isnan(res.x)

    res = brent(fun, 1.0, math.inf)
    assert not res.success
    assert fun.count == 0


def test_unknown_method():
    res = minimize_scalar(parabola, bracket=(0.0, 4.0), method="powell")
    assert not res.success
    assert res.message == "Unknown method: powell"
    assert res.nfev == 0


def test_tolerances_bundle_controls_precision():
    loose = golden(parabola, 0.0, 4.0, tolerances=Tolerances(xtol=1e-3))
    tight = golden(parabola, 0.0, 4.0, tolerances=Tolerances(xtol=1e-9))
    assert loose.success and tight.success
    assert loose.nfev < tight.nfev
    # explicit keyword wins over the bundle
    res = golden(parabola, 0.0, 4.0, xtol=1e-9, tolerances=Tolerances(xtol=1e-3))
    assert res.nfev == tight.nfev


def test_result_is_immutable():
    res = brent(parabola, 0.0, 4.0)
    with pytest.raises(AttributeError):
        res.x = 0.0


def test_objective_exceptions_propagate():
    def failing(x: float) -> float:
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError, match="abort"):
        brent(failing, 0.0, 1.0)
    with pytest.raises(RuntimeError, match="abort"):
        golden(failing, 0.0, 1.0)


def test_accepts_numpy_scalar_objective():
    res = brent(lambda x: np.float64((x + 1.0) ** 2), -3.0, 2.0)
    assert isinstance(res.fun, float)
    assert res.x == pytest.approx(-1.0, abs=1e-6)
