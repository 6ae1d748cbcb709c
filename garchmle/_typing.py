from collections.abc import Sequence
from typing import Any, Literal, Union

import numpy as np
from pandas import DataFrame, Series

__all__ = [
    "AnyArray",
    "AnyArray1D",
    "ArrayLike",
    "ArrayLike1D",
    "Float64Array",
    "Float64Array1D",
    "InnovationsTag",
    "Literal",
    "MeanTag",
    "NDArray",
    "ParameterLike",
]

NDArray = Union[np.ndarray]
Float64Array = np.ndarray[tuple[int, ...], np.dtype[np.float64]]  # pragma: no cover
Float64Array1D = np.ndarray[tuple[int], np.dtype[np.float64]]  # pragma: no cover
AnyArray = np.ndarray[tuple[int, ...], Any]  # pragma: no cover
AnyArray1D = np.ndarray[tuple[int], Any]  # pragma: no cover

ArrayLike1D = Union[Float64Array1D, Series]
ArrayLike = Union[NDArray, DataFrame, Series]
ParameterLike = Union[ArrayLike1D, Sequence[float]]
MeanTag = Literal["Constant", "ARMA"]
InnovationsTag = Literal["GARCH"]
