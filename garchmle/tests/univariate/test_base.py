import warnings

import numpy as np
from numpy.testing import assert_allclose, assert_array_equal, assert_equal
import pandas as pd
from pandas.testing import assert_series_equal
import pytest

from garchmle import garch_model
from garchmle.univariate.base import (
    Estimate,
    GARCHModel,
    constraint,
    format_float_fixed,
)
from garchmle.univariate.likelihood import evaluate, recursion
from garchmle.univariate.mean import ARMAMeanParameters, ConstantMeanParameters
from garchmle.univariate.volatility import GARCHParameters
from garchmle.utility.exceptions import (
    ConvergenceWarning,
    InvalidParameterVectorLength,
    StartingValueWarning,
)


def test_format_float_fixed():
    out = format_float_fixed(0.0)
    assert out == "0.0000"
    out = format_float_fixed(1.23e-9)
    assert out == "1.2300e-09"
    out = format_float_fixed(123456789.0)
    assert out == "1.2346e+08"


def test_constraint():
    a = np.array([[1.0, 0.0], [-1.0, -1.0]])
    b = np.array([0.0, -1.0])
    cons = constraint(a, b)
    assert len(cons) == 2
    assert all(c["type"] == "ineq" for c in cons)
    assert_allclose(cons[0]["fun"](np.array([0.5, 0.2])), 0.5)
    assert_allclose(cons[1]["fun"](np.array([0.5, 0.2])), 0.3)


def test_model_construction(garch_data):
    mod = garch_model(garch_data)
    assert isinstance(mod, GARCHModel)
    assert mod.num_params == 4
    assert mod.parameter_names() == ["mu", "omega", "alpha[1]", "beta[1]"]
    assert mod.name == "Constant Mean - GARCH(p: 1, q: 1)"
    assert mod.y is garch_data
    assert mod.family.key == ("Constant", "GARCH")
    assert "nobs: " in str(mod)
    assert "id: " in repr(mod)

    arma = garch_model(garch_data, mean="ARMA", vol="GARCH")
    assert arma.num_params == 6
    assert arma.family.key == ("ARMA", "GARCH")


def test_model_errors():
    with pytest.raises(ValueError, match="NaN or inf"):
        GARCHModel(np.array([1.0, np.nan, 2.0]))
    with pytest.raises(ValueError, match="at least one observation"):
        GARCHModel(np.empty(0))
    with pytest.raises(ValueError, match="Unknown model type in mean"):
        GARCHModel(np.ones(10), mean="HAR")
    with pytest.raises(ValueError, match="squeezable"):
        GARCHModel(np.ones((10, 2)))


def test_model_likelihood(garch_data):
    mod = garch_model(garch_data)
    params = np.array([0.1, 0.1, 0.1, 0.8])
    assert mod.loglikelihood(params) == -evaluate(params, garch_data, mod.family)
    assert mod.likelihood(params) == evaluate(params, garch_data, mod.family)


def test_fix(garch_data):
    mod = garch_model(garch_data)
    params = np.array([0.1, 0.1, 0.1, 0.8])
    res = mod.fix(params)
    assert isinstance(res, Estimate)
    result = recursion(params, garch_data, mod.family)

    assert_allclose(res.params, params)
    assert list(res.params.index) == mod.parameter_names()
    assert_allclose(res.resid, result.resids)
    assert_allclose(res.conditional_volatility, np.sqrt(result.sigma2))
    assert_allclose(res.std_resid, result.resids / np.sqrt(result.sigma2))
    assert_allclose(res.loglikelihood, mod.loglikelihood(params))
    assert_equal(res.nobs, garch_data.shape[0])
    assert res.num_params == 4
    assert res.family is mod.family
    assert res.mean_params == ConstantMeanParameters(0.1)
    assert res.innovations_params == GARCHParameters(0.1, 0.1, 0.8)
    assert res.mean_state == result.mean_state
    assert res.innovations_state == result.innovations_state
    assert res.convergence_flag is None
    assert res.optimization_result is None


def test_fix_arma(arma_garch_data):
    mod = garch_model(arma_garch_data, mean="ARMA")
    params = [0.1, 0.5, 0.2, 0.1, 0.1, 0.8]
    res = mod.fix(params)
    assert res.mean_params == ARMAMeanParameters(0.1, 0.5, 0.2)
    assert_equal(res.resid.shape[0], arma_garch_data.shape[0])
    assert_equal(res.conditional_volatility.shape[0], arma_garch_data.shape[0])


def test_fix_wrong_length(garch_data):
    mod = garch_model(garch_data)
    with pytest.raises(InvalidParameterVectorLength):
        mod.fix([0.0, 1.0, 0.0])


def test_estimate_owns_copies(garch_data):
    mod = garch_model(garch_data)
    params = np.array([0.1, 0.1, 0.1, 0.8])
    res = mod.fix(params)
    params[0] = 100.0
    assert res.params.iloc[0] == 0.1
    with pytest.raises(ValueError):
        res.resid[0] = 0.0
    with pytest.raises(ValueError):
        res.conditional_volatility[0] = 0.0


def test_pandas(garch_data):
    index = pd.date_range("2000-01-01", periods=garch_data.shape[0])
    y = pd.Series(garch_data, index=index, name="returns")
    mod = garch_model(y)
    res = mod.fix([0.1, 0.1, 0.1, 0.8])
    assert isinstance(res.resid, pd.Series)
    assert isinstance(res.conditional_volatility, pd.Series)
    assert isinstance(res.std_resid, pd.Series)
    assert res.resid.name == "resid"
    assert res.conditional_volatility.name == "cond_vol"
    assert res.std_resid.name == "std_resid"
    assert res.resid.index.equals(index)
    np_res = garch_model(garch_data).fix([0.1, 0.1, 0.1, 0.8])
    assert_series_equal(
        res.resid, pd.Series(np_res.resid, index=index, name="resid")
    )
    assert "returns" in res.summary().as_text()


def test_fix_summary(garch_data):
    res = garch_model(garch_data).fix([0.1, 0.1, 0.1, 0.8])
    text = res.summary().as_text()
    assert "User-specified Parameters" in text
    assert "Std. errors are not computed." in text
    assert "Mean Model" in text
    assert "Volatility Model" in text
    assert "alpha[1]" in text
    assert str(res) == text
    assert "Estimate, id: " in repr(res)


def test_fit(garch_data):
    mod = garch_model(garch_data)
    res = mod.fit(disp="off")
    assert isinstance(res, Estimate)
    assert res.convergence_flag == 0
    assert res.optimization_result is not None

    sv = mod.starting_values()
    assert res.loglikelihood >= mod.loglikelihood(sv) - 1e-6
    assert_allclose(res.loglikelihood, -res.optimization_result.fun, rtol=1e-8)

    params = res.params
    assert abs(params["mu"] - 0.1) < 0.2
    assert 0.0 <= params["alpha[1]"] <= 1.0
    assert 0.0 <= params["beta[1]"] <= 1.0
    assert params["alpha[1]"] + params["beta[1]"] <= 1.0 + 1e-8
    assert 0.5 < params["alpha[1]"] + params["beta[1]"]

    result = recursion(params.to_numpy(), garch_data, mod.family)
    assert_allclose(res.resid, result.resids)
    assert_allclose(res.conditional_volatility, np.sqrt(np.abs(result.sigma2)))

    text = res.summary().as_text()
    assert "Maximum Likelihood" in text


@pytest.mark.slow
def test_fit_arma(arma_garch_data):
    mod = garch_model(arma_garch_data, mean="ARMA")
    res = mod.fit(disp="off")
    assert_equal(res.params.shape[0], 6)
    sv = mod.starting_values()
    assert res.loglikelihood >= mod.loglikelihood(sv) - 1e-6
    assert np.isfinite(res.loglikelihood)
    assert_equal(res.resid.shape[0], arma_garch_data.shape[0])


def test_fit_display(garch_data, capsys):
    mod = garch_model(garch_data)
    mod.fit(update_freq=1, disp="final")
    captured = capsys.readouterr()
    assert "Iteration:" in captured.out

    mod.fit(update_freq=0, disp="off")
    captured = capsys.readouterr()
    assert "Iteration:" not in captured.out

    mod.fit(disp=False)
    captured = capsys.readouterr()
    assert captured.out == ""


def test_fit_starting_values(garch_data):
    mod = garch_model(garch_data)
    sv = mod.starting_values()
    res = mod.fit(starting_values=sv, disp="off")
    assert res.convergence_flag == 0

    with pytest.warns(StartingValueWarning):
        mod.fit(starting_values=np.array([0.1, 0.1, 0.1]), disp="off")
    with pytest.warns(StartingValueWarning):
        mod.fit(starting_values=np.array([0.1, 0.1, 0.6, 0.6]), disp="off")


def test_fit_convergence_warning(garch_data):
    mod = garch_model(garch_data)
    with pytest.warns(ConvergenceWarning):
        res = mod.fit(disp="off", options={"maxiter": 1})
    assert res.convergence_flag != 0
    assert "WARNING: The optimizer did not indicate" in res.summary().as_text()

    with warnings.catch_warnings():
        warnings.simplefilter("error", ConvergenceWarning)
        mod.fit(disp="off", options={"maxiter": 1}, show_warning=False)


def test_fit_does_not_modify_data(garch_data):
    y = garch_data.copy()
    mod = garch_model(garch_data)
    mod.fit(disp="off")
    assert_array_equal(garch_data, y)
