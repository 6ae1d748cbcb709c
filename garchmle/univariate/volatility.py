"""
Conditional variance strategies used in the GARCH likelihood recursion
"""

from abc import ABCMeta, abstractmethod
import itertools
from typing import NamedTuple, cast

import numpy as np
from scipy import stats

from garchmle._typing import ArrayLike1D, Float64Array, Float64Array1D
from garchmle.utility.array import AbstractDocStringInheritor, to_array_1d

__all__ = ["GARCH", "GARCHParameters", "GARCHState", "InnovationsProcess"]


class GARCHParameters(NamedTuple):
    omega: float
    alpha: float
    beta: float


class GARCHState(NamedTuple):
    """
    Recursion state of a GARCH(1,1) process

    Attributes
    ----------
    resid_sq : float
        Previous squared residual
    sigma2 : float
        Previous conditional variance
    """

    resid_sq: float
    sigma2: float

    def advance(self, resid: float, sigma2: float) -> "GARCHState":
        return GARCHState(resid**2.0, sigma2)


class InnovationsProcess(metaclass=ABCMeta):
    """
    Abstract base class for conditional variance strategies.  Allows the
    conditional variance to be specified separately from the conditional
    mean, even though parameters are estimated jointly.
    """

    def __init__(self) -> None:
        self._name = ""
        self._num_params = 0

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return self.__str__() + ", id: " + hex(id(self))

    @property
    def name(self) -> str:
        """The name of the volatility process"""
        return self._name

    @property
    def num_params(self) -> int:
        """The number of parameters in the model"""
        return self._num_params

    @abstractmethod
    def parameter_names(self) -> list[str]:
        """
        Names of model parameters

        Returns
        -------
         names : list (str)
            Variables names
        """

    @abstractmethod
    def parse(self, parameters: Float64Array1D) -> GARCHParameters:
        """
        Convert the volatility slice of a parameter vector to a record

        Parameters
        ----------
        parameters : ndarray
            Array with exactly ``num_params`` elements

        Returns
        -------
        params : GARCHParameters
            Immutable parameter record
        """

    @abstractmethod
    def initialize(
        self, parameters: GARCHParameters, resids: Float64Array1D
    ) -> GARCHState:
        """
        Construct the recursion state used at the first observation

        Parameters
        ----------
        parameters : GARCHParameters
            Volatility parameters
        resids : ndarray
            Seed residuals computed from the full sample

        Returns
        -------
        state : GARCHState
            Initial recursion state
        """

    @abstractmethod
    def variance(self, parameters: GARCHParameters, state: GARCHState) -> float:
        """
        Conditional variance given the state before the current residual

        Parameters
        ----------
        parameters : GARCHParameters
            Volatility parameters
        state : GARCHState
            State holding the history up to the previous observation

        Returns
        -------
        sigma2 : float
            Conditional variance
        """

    @abstractmethod
    def starting_values(self, resids: ArrayLike1D) -> Float64Array1D:
        """
        Returns starting values for the volatility process

        Parameters
        ----------
        resids : ndarray
            Array of (approximate) residuals to use when computing starting
            values

        Returns
        -------
        sv : ndarray
            Array of starting values
        """

    @abstractmethod
    def bounds(self, resids: ArrayLike1D) -> list[tuple[float, float]]:
        """
        Returns bounds for parameters

        Parameters
        ----------
        resids : ndarray
            Vector of (approximate) residuals

        Returns
        -------
        bounds : list[tuple[float,float]]
            List of bounds where each element is (lower, upper).
        """

    @abstractmethod
    def constraints(self) -> tuple[Float64Array, Float64Array]:
        """
        Construct parameter constraints arrays for parameter estimation

        Returns
        -------
        a : ndarray
            Parameters loadings in constraint. Shape is number of constraints
            by number of parameters
        b : ndarray
            Constraint values, one for each constraint

        Notes
        -----
        Values returned are used in constructing linear inequality
        constraints of the form A.dot(parameters) - b >= 0
        """

    def _gaussian_loglikelihood(
        self, parameters: Float64Array1D, resids: Float64Array1D
    ) -> float:
        """
        Gaussian log-likelihood of resids using only the variance recursion
        """
        params = self.parse(parameters)
        state = self.initialize(params, resids)
        sigma2 = np.empty_like(resids)
        for t in range(resids.shape[0]):
            sigma2[t] = self.variance(params, state)
            state = state.advance(resids[t], sigma2[t])
        scale = np.sqrt(np.abs(sigma2))
        with np.errstate(divide="ignore", invalid="ignore"):
            lls = stats.norm.logpdf(resids / scale) - np.log(scale)
        # Zero variance scores as -inf rather than nan so argmax ignores it
        lls[scale == 0.0] = -np.inf
        return float(np.sum(lls))


class GARCH(InnovationsProcess, metaclass=AbstractDocStringInheritor):
    r"""
    GARCH(1,1) conditional variance

    Examples
    --------
    >>> from garchmle.univariate import GARCH
    >>> garch = GARCH()

    Notes
    -----
    In this process the variance dynamics are

    .. math::

        \sigma_{t}^{2}=\omega+\alpha\epsilon_{t-1}^{2}+\beta\sigma_{t-1}^{2}

    Both :math:`\epsilon_{-1}^{2}` and :math:`\sigma_{-1}^{2}` are set to the
    sample mean of the squared seed residuals.
    """

    def __init__(self) -> None:
        super().__init__()
        self._name = "GARCH"
        self._num_params = 3

    def __str__(self) -> str:
        return self.name + "(p: 1, q: 1)"

    def parameter_names(self) -> list[str]:
        return ["omega", "alpha[1]", "beta[1]"]

    def parse(self, parameters: Float64Array1D) -> GARCHParameters:
        return GARCHParameters(
            float(parameters[0]), float(parameters[1]), float(parameters[2])
        )

    def initialize(
        self, parameters: GARCHParameters, resids: Float64Array1D
    ) -> GARCHState:
        mean_resid_sq = float(np.mean(resids**2.0))
        return GARCHState(mean_resid_sq, mean_resid_sq)

    def variance(self, parameters: GARCHParameters, state: GARCHState) -> float:
        return (
            parameters.omega
            + parameters.alpha * state.resid_sq
            + parameters.beta * state.sigma2
        )

    def bounds(self, resids: ArrayLike1D) -> list[tuple[float, float]]:
        v = float(np.mean(np.asarray(resids) ** 2.0))
        return [(1e-8 * v, 10.0 * v), (0.0, 1.0), (0.0, 1.0)]

    def constraints(self) -> tuple[Float64Array, Float64Array]:
        # omega > 0, alpha > 0, beta > 0, alpha + beta < 1
        a = np.array(
            [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [0.0, -1.0, -1.0]]
        )
        b = np.array([0.0, 0.0, 0.0, -1.0])
        return a, b

    def starting_values(self, resids: ArrayLike1D) -> Float64Array1D:
        resids = to_array_1d(np.asarray(resids, dtype=float))
        alphas = [0.01, 0.05, 0.1, 0.2]
        persistences = [0.5, 0.7, 0.9, 0.98]
        target = float(np.mean(resids**2.0))

        svs: list[Float64Array1D] = []
        llfs = np.zeros(len(alphas) * len(persistences))
        for i, (alpha, persistence) in enumerate(
            itertools.product(alphas, persistences)
        ):
            sv = np.array(
                [(1.0 - persistence) * target, alpha, persistence - alpha]
            )
            svs.append(cast("Float64Array1D", sv))
            llfs[i] = self._gaussian_loglikelihood(
                cast("Float64Array1D", sv), resids
            )
        loc = np.argmax(llfs)

        return svs[int(loc)]
