"""
Gaussian likelihood of GARCH-family models

The recursion is evaluated from scratch on every call.  Nothing computed for
one parameter vector is reused for another, so the objective can be handed
to any optimizer and called repeatedly.
"""

from collections.abc import Sequence
from typing import Literal, NamedTuple, overload

import numpy as np
from scipy import stats

from garchmle._typing import ArrayLike1D, Float64Array1D, ParameterLike
from garchmle.univariate.family import ModelFamily
from garchmle.univariate.mean import MeanState
from garchmle.univariate.volatility import GARCHState
from garchmle.utility.array import to_array_1d

__all__ = [
    "Likelihood",
    "RecursionResult",
    "evaluate",
    "log_density",
    "loglikelihood",
    "recursion",
]


class RecursionResult(NamedTuple):
    """
    Output of a single pass of the mean and variance recursions

    Attributes
    ----------
    resids : ndarray
        Residuals, one per observation
    sigma2 : ndarray
        Conditional variances, one per observation
    mean_state : MeanState
        Mean state after the last observation
    innovations_state : GARCHState
        Volatility state after the last observation
    """

    resids: Float64Array1D
    sigma2: Float64Array1D
    mean_state: MeanState
    innovations_state: GARCHState


def _observations(y: ArrayLike1D | Sequence[float]) -> Float64Array1D:
    _y = to_array_1d(np.asarray(y, dtype=float))
    if _y.shape[0] == 0:
        raise ValueError("y must contain at least one observation")
    return _y


def log_density(resids: Float64Array1D, sigma: Float64Array1D) -> Float64Array1D:
    r"""
    Log-density of residuals under a normal with scale sigma

    Parameters
    ----------
    resids : ndarray
        Residuals
    sigma : ndarray
        Conditional standard deviations, same shape as resids

    Returns
    -------
    lls : ndarray
        Individual log-densities

    Notes
    -----
    The log-density of a single residual is

    .. math::

        \ln\left(\phi\left(\epsilon/\sigma\right)/\sigma\right)

    where :math:`\phi` is the standard normal pdf.  Elements where
    ``sigma`` is 0 are assigned ``-inf``.
    """
    degenerate = sigma == 0.0
    with np.errstate(divide="ignore", invalid="ignore"):
        lls = stats.norm.logpdf(resids / sigma) - np.log(sigma)
    lls[degenerate] = -np.inf
    return lls


def recursion(
    parameters: ParameterLike,
    y: ArrayLike1D | Sequence[float],
    family: ModelFamily,
) -> RecursionResult:
    """
    Compute residuals and conditional variances

    Parameters
    ----------
    parameters : {ndarray, Series, Sequence[float]}
        Parameter vector laid out as required by ``family``
    y : {ndarray, Series, Sequence[float]}
        Observations, earliest first
    family : ModelFamily
        Model family used to unpack the parameters and step the recursion

    Returns
    -------
    result : RecursionResult
        Residuals, conditional variances and the final recursion states

    Raises
    ------
    InvalidParameterVectorLength
        If the parameter vector does not have the family's arity
    """
    mean_params, innovations_params = family.unpack(parameters)
    _y = _observations(y)
    mean_state, innovations_state = family.initialize(
        mean_params, innovations_params, _y
    )

    nobs = _y.shape[0]
    resids = np.empty(nobs)
    sigma2 = np.empty(nobs)
    with np.errstate(over="ignore", invalid="ignore"):
        for t in range(nobs):
            x = _y[t]
            resids[t] = x - family.mean(mean_params, mean_state)
            # Variance only uses history up to t-1
            sigma2[t] = family.variance(innovations_params, innovations_state)
            mean_state = mean_state.advance(x, resids[t])
            innovations_state = innovations_state.advance(resids[t], sigma2[t])

    return RecursionResult(resids, sigma2, mean_state, innovations_state)


@overload
def loglikelihood(
    parameters: ParameterLike,
    y: ArrayLike1D | Sequence[float],
    family: ModelFamily,
    individual: Literal[False] = ...,
) -> float:  # pragma: no cover
    ...  # pragma: no cover


@overload
def loglikelihood(
    parameters: ParameterLike,
    y: ArrayLike1D | Sequence[float],
    family: ModelFamily,
    individual: Literal[True],
) -> Float64Array1D:  # pragma: no cover
    ...  # pragma: no cover


def loglikelihood(
    parameters: ParameterLike,
    y: ArrayLike1D | Sequence[float],
    family: ModelFamily,
    individual: bool = False,
) -> float | Float64Array1D:
    """
    Gaussian log-likelihood of the observations

    Parameters
    ----------
    parameters : {ndarray, Series, Sequence[float]}
        Parameter vector laid out as required by ``family``
    y : {ndarray, Series, Sequence[float]}
        Observations, earliest first
    family : ModelFamily
        Model family
    individual : bool, optional
        Flag indicating whether to return the vector of individual log
        likelihoods (True) or the sum (False)

    Returns
    -------
    ll : {float, ndarray}
        The log-likelihood or the per-observation log-likelihoods
    """
    result = recursion(parameters, y, family)
    sigma = np.sqrt(np.abs(result.sigma2))
    lls = log_density(result.resids, sigma)
    if individual:
        return lls
    with np.errstate(invalid="ignore"):
        return float(np.sum(lls))


def evaluate(
    parameters: ParameterLike,
    y: ArrayLike1D | Sequence[float],
    family: ModelFamily,
) -> float:
    """
    Negative Gaussian log-likelihood

    Parameters
    ----------
    parameters : {ndarray, Series, Sequence[float]}
        Parameter vector laid out as required by ``family``
    y : {ndarray, Series, Sequence[float]}
        Observations, earliest first
    family : ModelFamily
        Model family

    Returns
    -------
    neg_llf : float
        Negative of the log-likelihood.  ``inf`` if any conditional
        standard deviation is 0 or the log-likelihood is not finite.

    Raises
    ------
    InvalidParameterVectorLength
        If the parameter vector does not have the family's arity
    """
    llf = loglikelihood(parameters, y, family)
    if not np.isfinite(llf):
        return np.inf
    return -llf


class Likelihood:
    """
    Negative log-likelihood objective for a fixed series and model family

    Parameters
    ----------
    y : {ndarray, Series, Sequence[float]}
        Observations, earliest first
    family : ModelFamily
        Model family

    Examples
    --------
    >>> import numpy as np
    >>> from garchmle.univariate import Likelihood, get_family
    >>> y = np.random.default_rng(0).standard_normal(500)
    >>> objective = Likelihood(y, get_family("Constant", "GARCH"))
    >>> neg_llf = objective(np.array([0.0, 0.1, 0.1, 0.8]))
    """

    def __init__(
        self, y: ArrayLike1D | Sequence[float], family: ModelFamily
    ) -> None:
        self._y = _observations(y).copy()
        self._y.flags.writeable = False
        self._family = family

    def __call__(self, parameters: ParameterLike) -> float:
        return evaluate(parameters, self._y, self._family)

    @property
    def y(self) -> Float64Array1D:
        """Read-only copy of the observations"""
        return self._y

    @property
    def family(self) -> ModelFamily:
        """The model family"""
        return self._family

    @property
    def num_params(self) -> int:
        """Number of parameters the objective expects"""
        return self._family.num_params
