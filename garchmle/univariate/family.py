"""
Registry of the supported combinations of mean and volatility processes

A model family pairs a mean strategy with a volatility strategy and fixes the
layout of the parameter vector: mean parameters first, then volatility
parameters.
"""

import numpy as np

from garchmle._typing import (
    Float64Array,
    Float64Array1D,
    InnovationsTag,
    MeanTag,
    ParameterLike,
)
from garchmle.univariate.mean import (
    ARMA,
    ConstantMean,
    MeanParameters,
    MeanProcess,
    MeanState,
)
from garchmle.univariate.volatility import (
    GARCH,
    GARCHParameters,
    GARCHState,
    InnovationsProcess,
)
from garchmle.utility.array import to_array_1d
from garchmle.utility.exceptions import InvalidParameterVectorLength

__all__ = ["FAMILIES", "ModelFamily", "get_family"]


class ModelFamily:
    """
    A mean process and a volatility process estimated jointly

    Parameters
    ----------
    mean_tag : str
        Registry tag of the mean process
    innovations_tag : str
        Registry tag of the volatility process
    mean : MeanProcess
        Mean strategy
    volatility : InnovationsProcess
        Volatility strategy
    """

    def __init__(
        self,
        mean_tag: MeanTag,
        innovations_tag: InnovationsTag,
        mean: MeanProcess,
        volatility: InnovationsProcess,
    ) -> None:
        self._key = (mean_tag, innovations_tag)
        self._mean = mean
        self._volatility = volatility

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ModelFamily(mean={self._key[0]!r}, vol={self._key[1]!r})"

    @property
    def key(self) -> tuple[MeanTag, InnovationsTag]:
        """Registry key of the family"""
        return self._key

    @property
    def name(self) -> str:
        """The name of the model family"""
        return self._mean.name + " - " + str(self._volatility)

    @property
    def mean_process(self) -> MeanProcess:
        """The conditional mean strategy"""
        return self._mean

    @property
    def volatility(self) -> InnovationsProcess:
        """The conditional variance strategy"""
        return self._volatility

    @property
    def num_params(self) -> int:
        """Exact length of the parameter vector"""
        return self._mean.num_params + self._volatility.num_params

    def parameter_names(self) -> list[str]:
        """Names of all parameters in the order used in the parameter vector"""
        return self._mean.parameter_names() + self._volatility.parameter_names()

    def unpack(
        self, parameters: ParameterLike
    ) -> tuple[MeanParameters, GARCHParameters]:
        """
        Split a parameter vector into mean and volatility parameter records

        Parameters
        ----------
        parameters : {ndarray, Series, Sequence[float]}
            Parameter vector with exactly ``num_params`` elements

        Returns
        -------
        mean_params : MeanParameters
            Mean parameter record
        innovations_params : GARCHParameters
            Volatility parameter record

        Raises
        ------
        InvalidParameterVectorLength
            If the length of the vector does not match ``num_params``
        """
        _parameters = np.asarray(parameters, dtype=float).ravel()
        if _parameters.shape[0] != self.num_params:
            raise InvalidParameterVectorLength(
                self.name, self.num_params, _parameters.shape[0]
            )
        km = self._mean.num_params
        return (
            self._mean.parse(to_array_1d(_parameters[:km])),
            self._volatility.parse(to_array_1d(_parameters[km:])),
        )

    def initialize(
        self,
        mean_params: MeanParameters,
        innovations_params: GARCHParameters,
        y: Float64Array1D,
    ) -> tuple[MeanState, GARCHState]:
        """
        Seed the recursion states from sample moments of the full series

        Parameters
        ----------
        mean_params : MeanParameters
            Mean parameter record
        innovations_params : GARCHParameters
            Volatility parameter record
        y : ndarray
            Full observation series

        Returns
        -------
        mean_state : MeanState
            Mean recursion state for the first observation
        innovations_state : GARCHState
            Volatility recursion state for the first observation
        """
        resids = self._mean.seed_residuals(mean_params, y)
        return (
            self._mean.initialize(mean_params, resids),
            self._volatility.initialize(innovations_params, resids),
        )

    def mean(self, mean_params: MeanParameters, state: MeanState) -> float:
        """Conditional mean at the current step"""
        return self._mean.mean(mean_params, state)

    def variance(self, innovations_params: GARCHParameters, state: GARCHState) -> float:
        """Conditional variance at the current step"""
        return self._volatility.variance(innovations_params, state)

    def starting_values(self, y: Float64Array1D) -> Float64Array1D:
        """
        Starting values for all parameters

        Volatility starting values are computed from the residuals implied by
        the mean starting values with the mean recursion switched off.
        """
        sv_mean = self._mean.starting_values(y)
        resids = y - np.mean(y)
        sv_vol = self._volatility.starting_values(resids)
        return to_array_1d(np.hstack([sv_mean, sv_vol]))

    def bounds(self, y: Float64Array1D) -> list[tuple[float, float]]:
        """Bounds for all parameters, mean first"""
        bounds = self._mean.bounds(y)
        bounds.extend(self._volatility.bounds(y - np.mean(y)))
        return bounds

    def constraints(self) -> tuple[Float64Array, Float64Array]:
        """
        Block-diagonal linear constraints for all parameters

        Notes
        -----
        Parameters satisfy a.dot(parameters) - b >= 0
        """
        a_mean, b_mean = self._mean.constraints()
        a_vol, b_vol = self._volatility.constraints()
        km, kv = self._mean.num_params, self._volatility.num_params
        a = np.zeros((a_mean.shape[0] + a_vol.shape[0], km + kv))
        a[: a_mean.shape[0], :km] = a_mean
        a[a_mean.shape[0] :, km:] = a_vol
        return a, np.hstack([b_mean, b_vol])


FAMILIES: dict[tuple[MeanTag, InnovationsTag], ModelFamily] = {
    ("Constant", "GARCH"): ModelFamily("Constant", "GARCH", ConstantMean(), GARCH()),
    ("ARMA", "GARCH"): ModelFamily("ARMA", "GARCH", ARMA(), GARCH()),
}

_MEAN_TAGS: dict[str, MeanTag] = {"constant": "Constant", "arma": "ARMA"}
_VOL_TAGS: dict[str, InnovationsTag] = {"garch": "GARCH"}


def get_family(mean: str = "Constant", vol: str = "GARCH") -> ModelFamily:
    """
    Look up a model family

    Parameters
    ----------
    mean : str, optional
        Name of the mean model.  Currently supported options are: 'Constant'
        and 'ARMA'.  Case insensitive.
    vol : str, optional
        Name of the volatility model.  Currently supported options are:
        'GARCH'.  Case insensitive.

    Returns
    -------
    family : ModelFamily
        Registered model family

    Raises
    ------
    ValueError
        If either name is not known
    """
    mean_model = mean.lower()
    vol_model = vol.lower()
    if mean_model not in _MEAN_TAGS:
        raise ValueError("Unknown model type in mean")
    if vol_model not in _VOL_TAGS:
        raise ValueError("Unknown model type in vol")
    return FAMILIES[(_MEAN_TAGS[mean_model], _VOL_TAGS[vol_model])]
