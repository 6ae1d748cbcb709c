"""
Conditional mean strategies used in the GARCH likelihood recursion

Each strategy maps a slice of the parameter vector to an immutable parameter
record, seeds an immutable recursion state from the full sample and computes
the conditional mean of the next observation from the current state.
"""

from abc import ABCMeta, abstractmethod
from typing import NamedTuple, Union

import numpy as np

from garchmle._typing import ArrayLike1D, Float64Array, Float64Array1D
from garchmle.utility.array import AbstractDocStringInheritor, to_array_1d

__all__ = [
    "ARMA",
    "ARMAMeanParameters",
    "ARMAMeanState",
    "ConstantMean",
    "ConstantMeanParameters",
    "ConstantMeanState",
    "MeanParameters",
    "MeanProcess",
    "MeanState",
]


class ConstantMeanParameters(NamedTuple):
    mu: float


class ARMAMeanParameters(NamedTuple):
    mu: float
    ar: float
    ma: float


class ConstantMeanState(NamedTuple):
    """Recursion state of a constant mean, which only carries the mean"""

    mu: float

    def advance(self, x: float, resid: float) -> "ConstantMeanState":
        return self


class ARMAMeanState(NamedTuple):
    """
    Recursion state of an ARMA(1,1) mean

    Attributes
    ----------
    mu : float
        Intercept
    x : float
        Previous observation
    resid : float
        Previous residual
    """

    mu: float
    x: float
    resid: float

    def advance(self, x: float, resid: float) -> "ARMAMeanState":
        return ARMAMeanState(self.mu, x, resid)


MeanParameters = Union[ConstantMeanParameters, ARMAMeanParameters]
MeanState = Union[ConstantMeanState, ARMAMeanState]


class MeanProcess(metaclass=ABCMeta):
    """
    Abstract base class for conditional mean strategies.

    Strategies are stateless. All history needed by the recursion lives in
    the state records returned by ``initialize`` and ``advance``.
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
        """The name of the mean process"""
        return self._name

    @property
    def num_params(self) -> int:
        """The number of parameters in the mean process"""
        return self._num_params

    def seed_residuals(
        self, parameters: MeanParameters, y: Float64Array1D
    ) -> Float64Array1D:
        """
        Residuals used to seed the recursion

        Parameters
        ----------
        parameters : MeanParameters
            Mean parameters
        y : ndarray
            Full observation series

        Returns
        -------
        resids : ndarray
            Deviations of the observations from the intercept
        """
        return y - parameters.mu

    @abstractmethod
    def parameter_names(self) -> list[str]:
        """
        Names of the mean parameters

        Returns
        -------
        names : list (str)
            Parameter names
        """

    @abstractmethod
    def parse(self, parameters: Float64Array1D) -> MeanParameters:
        """
        Convert the mean slice of a parameter vector to a parameter record

        Parameters
        ----------
        parameters : ndarray
            Array with exactly ``num_params`` elements

        Returns
        -------
        params : MeanParameters
            Immutable parameter record
        """

    @abstractmethod
    def initialize(
        self, parameters: MeanParameters, resids: Float64Array1D
    ) -> MeanState:
        """
        Construct the recursion state used at the first observation

        Parameters
        ----------
        parameters : MeanParameters
            Mean parameters
        resids : ndarray
            Seed residuals computed from the full sample

        Returns
        -------
        state : MeanState
            Initial recursion state
        """

    @abstractmethod
    def mean(self, parameters: MeanParameters, state: MeanState) -> float:
        """
        Conditional mean given the current recursion state

        Parameters
        ----------
        parameters : MeanParameters
            Mean parameters
        state : MeanState
            State holding the history up to the previous observation

        Returns
        -------
        mean : float
            Conditional mean
        """

    @abstractmethod
    def starting_values(self, y: ArrayLike1D) -> Float64Array1D:
        """
        Starting values for the optimizer

        Parameters
        ----------
        y : ndarray
            Observations

        Returns
        -------
        sv : ndarray
            Array of starting values
        """

    @abstractmethod
    def bounds(self, y: ArrayLike1D) -> list[tuple[float, float]]:
        """
        Returns bounds for parameters

        Parameters
        ----------
        y : ndarray
            Observations

        Returns
        -------
        bounds : list[tuple[float,float]]
            List of bounds where each element is (lower, upper).
        """

    def constraints(self) -> tuple[Float64Array, Float64Array]:
        """
        Construct linear constraint arrays for use in non-linear optimization

        Returns
        -------
        a : ndarray
            Number of constraints by number of parameters loading array
        b : ndarray
            Number of constraints array of lower bounds

        Notes
        -----
        Parameters satisfy a.dot(parameters) - b >= 0
        """
        return np.empty((0, self.num_params)), np.empty(0)


class ConstantMean(MeanProcess, metaclass=AbstractDocStringInheritor):
    r"""
    Constant mean

    Notes
    -----
    The conditional mean does not depend on the history,

    .. math::

        \mu_t = \mu
    """

    def __init__(self) -> None:
        super().__init__()
        self._name = "Constant Mean"
        self._num_params = 1

    def parameter_names(self) -> list[str]:
        return ["mu"]

    def parse(self, parameters: Float64Array1D) -> ConstantMeanParameters:
        return ConstantMeanParameters(float(parameters[0]))

    def initialize(
        self, parameters: MeanParameters, resids: Float64Array1D
    ) -> ConstantMeanState:
        return ConstantMeanState(parameters.mu)

    def mean(self, parameters: MeanParameters, state: MeanState) -> float:
        return parameters.mu

    def starting_values(self, y: ArrayLike1D) -> Float64Array1D:
        return to_array_1d(np.array([np.mean(y)]))

    def bounds(self, y: ArrayLike1D) -> list[tuple[float, float]]:
        return [(-np.inf, np.inf)]


class ARMA(MeanProcess, metaclass=AbstractDocStringInheritor):
    r"""
    ARMA(1,1) mean

    Notes
    -----
    The conditional mean depends on the previous observation and the
    previous residual,

    .. math::

        \mu_t = \mu + \phi y_{t-1} + \theta \epsilon_{t-1}

    The first observation uses the intercept in place of :math:`y_{-1}` and
    the sample mean of :math:`y_t - \mu` in place of :math:`\epsilon_{-1}`.
    """

    def __init__(self) -> None:
        super().__init__()
        self._name = "ARMA(1,1)"
        self._num_params = 3

    def parameter_names(self) -> list[str]:
        return ["mu", "ar[1]", "ma[1]"]

    def parse(self, parameters: Float64Array1D) -> ARMAMeanParameters:
        return ARMAMeanParameters(
            float(parameters[0]), float(parameters[1]), float(parameters[2])
        )

    def initialize(
        self, parameters: MeanParameters, resids: Float64Array1D
    ) -> ARMAMeanState:
        return ARMAMeanState(parameters.mu, parameters.mu, float(np.mean(resids)))

    def mean(self, parameters: MeanParameters, state: MeanState) -> float:
        assert isinstance(parameters, ARMAMeanParameters)
        assert isinstance(state, ARMAMeanState)
        return parameters.mu + parameters.ar * state.x + parameters.ma * state.resid

    def starting_values(self, y: ArrayLike1D) -> Float64Array1D:
        y = to_array_1d(np.asarray(y, dtype=float))
        if y.shape[0] < 3:
            return to_array_1d(np.array([np.mean(y), 0.0, 0.0]))
        # AR(1) by least squares, MA starts at 0
        x = np.column_stack([np.ones(y.shape[0] - 1), y[:-1]])
        const, ar = np.linalg.pinv(x).dot(y[1:])
        ar = float(np.clip(ar, -0.99, 0.99))
        return to_array_1d(np.array([const, ar, 0.0]))

    def bounds(self, y: ArrayLike1D) -> list[tuple[float, float]]:
        return [(-np.inf, np.inf), (-1.0, 1.0), (-1.0, 1.0)]
