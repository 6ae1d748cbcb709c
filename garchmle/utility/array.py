"""
Array helpers shared by the mean, volatility and likelihood code
"""

from abc import ABCMeta
from collections.abc import Hashable, Sequence
from typing import Any, Literal, cast, overload

import numpy as np
from pandas import DataFrame, Series

from garchmle._typing import AnyArray, AnyArray1D, ArrayLike, Float64Array1D

__all__ = ["AbstractDocStringInheritor", "ensure1d", "to_array_1d"]


def to_array_1d(x: AnyArray | Series) -> Float64Array1D:
    """
    Ensure array is 1D and float64

    Parameters
    ----------
    x : {ndarray, Series}
        Array to convert

    Returns
    -------
    ndarray
        1D float64 array.  ``x`` itself when it already is one.
    """
    if isinstance(x, Series):
        x = x.to_numpy()
    if not isinstance(x, np.ndarray):
        raise TypeError("x must be a Series or ndarray")
    if x.ndim == 1 and x.dtype == np.float64:
        return cast("Float64Array1D", x)
    if sum(s > 1 for s in x.shape) > 1:
        raise ValueError("x must be 1D or 1D convertible")
    return cast("Float64Array1D", x.reshape(-1).astype(float, copy=False))


@overload
def ensure1d(
    x: float | Sequence[float] | ArrayLike,
    name: Hashable | None,
    series: Literal[True] = ...,
) -> Series:  # pragma: no cover
    ...  # pragma: no cover


@overload
def ensure1d(
    x: float | Sequence[float] | ArrayLike,
    name: Hashable | None,
    series: Literal[False],
) -> AnyArray1D:  # pragma: no cover
    ...  # pragma: no cover


def ensure1d(
    x: float | Sequence[float] | ArrayLike,
    name: Hashable | None,
    series: bool = False,
) -> AnyArray1D | Series:
    """
    Squeeze user input to one dimension

    Parameters
    ----------
    x : {float, Sequence[float], ndarray, Series, DataFrame}
        Input with at most one non-singleton dimension.  A DataFrame must
        have a single column.
    name : str
        Name used in error messages and as the name of the Series built
        from non-pandas input
    series : bool, optional
        Return a Series with a string name (True) or an ndarray (False)

    Returns
    -------
    {ndarray, Series}
        The squeezed input.  Pandas input keeps its index and is never
        modified in place.
    """
    if isinstance(x, DataFrame):
        if x.shape[1] != 1:
            raise ValueError(f"{name} must be squeezable to 1 dimension")
        x = x.iloc[:, 0]
    if isinstance(x, Series):
        if not series:
            return x.to_numpy()
        return x if isinstance(x.name, str) else x.rename(str(x.name))

    x_arr = np.asarray(x)
    if sum(s > 1 for s in x_arr.shape) > 1:
        raise ValueError(f"{name} must be squeezable to 1 dimension")
    x_arr = x_arr.reshape(-1)
    return Series(x_arr, name=name) if series else x_arr


class AbstractDocStringInheritor(ABCMeta):
    """
    Metaclass for concrete mean and volatility strategies

    Methods defined without a docstring take the docstring of the same
    method on a base class.  Defining a class that leaves abstract methods
    unimplemented raises TypeError.
    """

    def __new__(
        mcs, name: str, bases: tuple[type, ...], clsdict: dict[str, Any]
    ) -> Any:
        for attr, attribute in clsdict.items():
            if not callable(attribute) or attribute.__doc__:
                continue
            for klass in (k for base in bases for k in base.__mro__):
                if klass is object or attr not in vars(klass):
                    continue
                doc = vars(klass)[attr].__doc__
                if doc:
                    attribute.__doc__ = doc
                    break
        cls = super().__new__(mcs, name, bases, clsdict)
        missing = sorted(getattr(cls, "__abstractmethods__", ()))
        if missing:
            raise TypeError(
                f"{name} has not implemented abstract methods {', '.join(missing)}"
            )
        return cls
