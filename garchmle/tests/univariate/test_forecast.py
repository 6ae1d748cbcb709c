import numpy as np
from numpy.testing import assert_allclose

from garchmle import garch_model
from garchmle.univariate.base import Forecast


def test_forecast_constant(garch_data):
    res = garch_model(garch_data).fix([0.1, 0.1, 0.1, 0.8])
    fcast = Forecast.from_estimate(res)
    assert isinstance(fcast, Forecast)
    assert fcast.mu == 0.1

    resid = res.resid[-1]
    sigma2 = res.conditional_volatility[-1] ** 2
    expected = np.sqrt(0.1 + 0.1 * resid**2 + 0.8 * sigma2)
    assert_allclose(fcast.sigma, expected)
    assert_allclose(fcast.variance, expected**2)


def test_forecast_arma(arma_garch_data):
    params = [0.1, 0.5, 0.2, 0.1, 0.1, 0.8]
    res = garch_model(arma_garch_data, mean="ARMA").fix(params)
    fcast = res.forecast()

    family = res.family
    assert fcast.mu == family.mean(res.mean_params, res.mean_state)
    expected_mu = 0.1 + 0.5 * arma_garch_data[-1] + 0.2 * res.resid[-1]
    assert_allclose(fcast.mu, expected_mu)

    resid = res.resid[-1]
    sigma2 = res.conditional_volatility[-1] ** 2
    expected = np.sqrt(0.1 + 0.1 * resid**2 + 0.8 * sigma2)
    assert_allclose(fcast.sigma, expected)


def test_forecast_from_fit(garch_data):
    res = garch_model(garch_data).fit(disp="off")
    fcast = res.forecast()
    direct = Forecast.from_estimate(res)
    assert fcast.mu == direct.mu
    assert fcast.sigma == direct.sigma
    assert np.isfinite(fcast.sigma)
    assert fcast.sigma > 0


def test_forecast_negative_variance():
    res = garch_model(np.array([0.5, -0.5, 1.0])).fix([0.0, -1.0, 0.0, 0.0])
    fcast = res.forecast()
    assert fcast.sigma == 1.0


def test_forecast_str():
    fcast = Forecast(0.25, 1.5)
    assert str(fcast) == "mean = 0.25, sigma = 1.5"
    assert repr(fcast).startswith("Forecast(mean = 0.25, sigma = 1.5)")
    assert fcast.mu == 0.25
    assert fcast.sigma == 1.5
    assert fcast.variance == 2.25
