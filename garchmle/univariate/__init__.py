from garchmle.univariate.base import (
    Estimate,
    Forecast,
    GARCHModel,
    garch_model,
)
from garchmle.univariate.family import FAMILIES, ModelFamily, get_family
from garchmle.univariate.likelihood import (
    Likelihood,
    RecursionResult,
    evaluate,
    log_density,
    loglikelihood,
    recursion,
)
from garchmle.univariate.mean import (
    ARMA,
    ARMAMeanParameters,
    ARMAMeanState,
    ConstantMean,
    ConstantMeanParameters,
    ConstantMeanState,
)
from garchmle.univariate.volatility import GARCH, GARCHParameters, GARCHState

__all__ = [
    "ARMA",
    "ARMAMeanParameters",
    "ARMAMeanState",
    "ConstantMean",
    "ConstantMeanParameters",
    "ConstantMeanState",
    "Estimate",
    "FAMILIES",
    "Forecast",
    "GARCH",
    "GARCHModel",
    "GARCHParameters",
    "GARCHState",
    "Likelihood",
    "ModelFamily",
    "RecursionResult",
    "evaluate",
    "garch_model",
    "get_family",
    "log_density",
    "loglikelihood",
    "recursion",
]
