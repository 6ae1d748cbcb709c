import logging
import os

import numpy as np
import pytest

logger = logging.getLogger(__name__)
NOBS = int(os.environ.get("GARCHMLE_TEST_NOBS", "1000"))
logger.info("Simulated series length: %d", NOBS)


def pytest_configure(config):
    # Minimal config to simplify running tests from garchmle.test()
    config.addinivalue_line("markers", "slow: mark a test as slow")


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", help="skip slow tests")
    parser.addoption("--only-slow", action="store_true", help="run only slow tests")


def pytest_runtest_setup(item):
    if "slow" in item.keywords and item.config.getoption(
        "--skip-slow"
    ):  # pragma: no cover
        pytest.skip("skipping due to --skip-slow")  # pragma: no cover

    if "slow" not in item.keywords and item.config.getoption(
        "--only-slow"
    ):  # pragma: no cover
        pytest.skip("skipping due to --only-slow")  # pragma: no cover


def _simulate_garch(rng, nobs, mu, ar, ma, omega, alpha, beta, burn=500):
    errors = rng.standard_normal(nobs + burn)
    y = np.zeros(nobs + burn)
    sigma2 = omega / (1.0 - alpha - beta)
    resid = 0.0
    prev = mu / (1.0 - ar)
    for t in range(nobs + burn):
        sigma2 = omega + alpha * resid**2 + beta * sigma2
        new_resid = np.sqrt(sigma2) * errors[t]
        y[t] = mu + ar * prev + ma * resid + new_resid
        resid = new_resid
        prev = y[t]
    return y[burn:]


@pytest.fixture
def rng():
    return np.random.RandomState(12345)


@pytest.fixture
def garch_data(rng):
    """Constant mean GARCH(1,1) data with mu=0.1, omega=0.1, alpha=0.1, beta=0.8"""
    return _simulate_garch(rng, NOBS, 0.1, 0.0, 0.0, 0.1, 0.1, 0.8)


@pytest.fixture
def arma_garch_data(rng):
    """ARMA(1,1)-GARCH(1,1) data with mu=0.1, ar=0.5, ma=0.2"""
    return _simulate_garch(rng, NOBS, 0.1, 0.5, 0.2, 0.1, 0.1, 0.8)
