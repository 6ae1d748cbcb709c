"""
Model, estimate and forecast classes for GARCH-family models
"""

from collections.abc import Callable, Sequence
import datetime as dt
from functools import cached_property
from typing import Any, cast
import warnings

import numpy as np
import pandas as pd
from scipy.optimize import OptimizeResult, minimize
from statsmodels.iolib.summary import Summary, fmt_2cols, fmt_params
from statsmodels.iolib.table import SimpleTable

from garchmle._typing import (
    ArrayLike,
    Float64Array,
    Float64Array1D,
    Literal,
    ParameterLike,
)
from garchmle.univariate.family import ModelFamily, get_family
from garchmle.univariate.likelihood import Likelihood, log_density, recursion
from garchmle.univariate.mean import MeanParameters, MeanState
from garchmle.univariate.volatility import GARCHParameters, GARCHState
from garchmle.utility.array import ensure1d, to_array_1d
from garchmle.utility.exceptions import (
    ConvergenceWarning,
    StartingValueWarning,
    convergence_warning,
    starting_value_warning,
)

__all__ = [
    "Estimate",
    "Forecast",
    "GARCHModel",
    "constraint",
    "format_float_fixed",
    "garch_model",
]

# Callback variables
_callback_info = {"iter": 0, "llf": 0.0, "count": 0, "display": 1}


def _callback(parameters: Float64Array1D) -> None:
    """
    Callback for use in optimization

    Parameters
    ----------
    parameters : ndarray
        Parameter value (not used by function).

    Notes
    -----
    Uses global values to track iteration, iteration display frequency,
    log likelihood and function count
    """

    _callback_info["iter"] += 1
    disp = "Iteration: {0:>6},   Func. Count: {1:>6.3g},   Neg. LLF: {2}"
    if _callback_info["iter"] % _callback_info["display"] == 0:
        print(
            disp.format(
                _callback_info["iter"], _callback_info["count"], _callback_info["llf"]
            )
        )


def constraint(a: Float64Array, b: Float64Array) -> list[dict[str, object]]:
    """
    Generate constraints from arrays

    Parameters
    ----------
    a : ndarray
        Parameter loadings
    b : ndarray
        Constraint bounds

    Returns
    -------
    constraints : dict
        Dictionary of inequality constraints, one for each row of a

    Notes
    -----
    Parameter constraints satisfy a.dot(parameters) - b >= 0
    """

    def factory(coeff: Float64Array, val: float) -> Callable[..., float]:
        def f(params: Float64Array, *args: Any) -> float:
            return np.dot(coeff, params) - val

        return f

    constraints = []
    for i in range(a.shape[0]):
        con = {"type": "ineq", "fun": factory(a[i], b[i])}
        constraints.append(con)

    return constraints


def format_float_fixed(x: float, max_digits: int = 10, decimal: int = 4) -> str:
    """Formats a floating point number so that if it can be well expressed
    in using a string with digits len, then it is converted simply, otherwise
    it is expressed in scientific notation"""
    if x == 0:
        return ("{:0." + str(decimal) + "f}").format(0.0)
    scale = np.log10(np.abs(x))
    scale = np.sign(scale) * np.ceil(np.abs(scale))
    if scale > (max_digits - 2 - decimal) or scale < -(decimal - 2):
        formatted = ("{0:" + str(max_digits) + "." + str(decimal) + "e}").format(x)
    else:
        formatted = ("{0:" + str(max_digits) + "." + str(decimal) + "f}").format(x)
    return formatted


class GARCHModel:
    """
    GARCH-family model with a Gaussian likelihood

    Parameters
    ----------
    y : {ndarray, Series, Sequence[float]}
        The dependent variable, earliest observation first
    mean : str, optional
        Name of the mean model.  Currently supported options are: 'Constant'
        and 'ARMA'.
    vol : str, optional
        Name of the volatility model.  Currently supported options are:
        'GARCH'.

    Examples
    --------
    >>> import numpy as np
    >>> from garchmle import garch_model
    >>> y = np.random.default_rng(0).standard_normal(1000)
    >>> mod = garch_model(y, mean="ARMA")
    >>> res = mod.fit(disp="off")
    >>> res.forecast().sigma
    """

    def __init__(
        self,
        y: ArrayLike | Sequence[float],
        mean: str = "Constant",
        vol: str = "GARCH",
    ) -> None:
        self._is_pandas = isinstance(y, (pd.DataFrame, pd.Series))
        self._y_series = cast("pd.Series", ensure1d(y, "y", series=True))
        self._y = to_array_1d(
            np.ascontiguousarray(self._y_series.to_numpy()).astype(float)
        )
        if self._y.shape[0] == 0:
            raise ValueError("y must contain at least one observation")
        if not np.all(np.isfinite(self._y)):
            raise ValueError(
                "NaN or inf values found in y. y must contains only finite values."
            )
        self._y_original = y
        self._family = get_family(mean, vol)
        self._likelihood = Likelihood(self._y, self._family)

    def __str__(self) -> str:
        return self.name + ", nobs: " + str(self._y.shape[0])

    def __repr__(self) -> str:
        return self.__str__() + ", id: " + hex(id(self))

    @property
    def name(self) -> str:
        """The name of the model."""
        return self._family.name

    @property
    def y(self) -> ArrayLike | Sequence[float]:
        """Returns the dependent variable"""
        return self._y_original

    @property
    def family(self) -> ModelFamily:
        """The model family used to evaluate the likelihood"""
        return self._family

    @property
    def likelihood(self) -> Likelihood:
        """Negative log-likelihood objective for the dependent variable"""
        return self._likelihood

    @property
    def num_params(self) -> int:
        """Number of parameters in the model"""
        return self._family.num_params

    def parameter_names(self) -> list[str]:
        """List of parameters names"""
        return self._family.parameter_names()

    def starting_values(self) -> Float64Array1D:
        """
        Returns starting values for the optimizer

        Returns
        -------
        sv : ndarray
            Starting values
        """
        return self._family.starting_values(self._y)

    def bounds(self) -> list[tuple[float, float]]:
        """
        Construct bounds for parameters to use in non-linear optimization

        Returns
        -------
        bounds : list (2-tuple of float)
            Bounds for parameters to use in estimation.
        """
        return self._family.bounds(self._y)

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
        return self._family.constraints()

    def loglikelihood(self, params: ParameterLike) -> float:
        """
        Log-likelihood at a parameter vector

        Parameters
        ----------
        params : {ndarray, Series, Sequence[float]}
            Parameter vector

        Returns
        -------
        llf : float
            Log-likelihood, ``-inf`` in degenerate regions
        """
        return -1.0 * self._likelihood(params)

    def _objective(self, parameters: Float64Array1D) -> float:
        _callback_info["count"] += 1
        neg_llf = self._likelihood(parameters)
        _callback_info["llf"] = neg_llf
        return neg_llf

    def _valid_starting_values(
        self,
        sv: Float64Array1D,
        bounds: list[tuple[float, float]],
        a: Float64Array,
        b: Float64Array,
    ) -> bool:
        if sv.shape[0] != self.num_params:
            return False
        valid = bool(np.all(a.dot(sv) - b >= 0)) if a.shape[0] > 0 else True
        for i, bound in enumerate(bounds):
            valid = valid and bound[0] <= sv[i] <= bound[1]
        return valid

    def fit(
        self,
        update_freq: int = 1,
        disp: Literal["off", "final"] | bool = "final",
        starting_values: ParameterLike | None = None,
        show_warning: bool = True,
        tol: float | None = None,
        options: dict[str, Any] | None = None,
    ) -> "Estimate":
        r"""
        Estimate model parameters

        Parameters
        ----------
        update_freq : int, optional
            Frequency of iteration updates.  Output is generated every
            `update_freq` iterations. Set to 0 to disable iterative output.
        disp : {bool, "off", "final"}
            Either 'final' to print optimization result or 'off' to display
            nothing. If using a boolean, False is "off" and True is "final"
        starting_values : ndarray, optional
            Array of starting values to use.  If not provided, starting values
            are constructed by the model components.
        show_warning : bool, optional
            Flag indicating whether convergence warnings should be shown.
        tol : float, optional
            Tolerance for termination.
        options : dict, optional
            Options to pass to `scipy.optimize.minimize`.  Valid entries
            include 'ftol', 'eps', 'disp', and 'maxiter'.

        Returns
        -------
        results : Estimate
            Object containing model results

        Notes
        -----
        A ConvergenceWarning is raised if SciPy's optimizer indicates
        difficulty finding the optimum.

        Parameters are optimized using SLSQP.
        """
        bounds = self.bounds()
        a, b = self.constraints()

        if starting_values is None:
            sv = self.starting_values()
        else:
            sv = to_array_1d(
                np.asarray(ensure1d(starting_values, "starting_values"), dtype=float)
            )
            if not self._valid_starting_values(sv, bounds, a, b):
                warnings.warn(
                    starting_value_warning, StartingValueWarning, stacklevel=2
                )
                sv = self.starting_values()

        _callback_info["count"], _callback_info["iter"] = 0, 0
        if not isinstance(disp, str):
            disp = bool(disp)
            disp = "off" if not disp else "final"
        if update_freq <= 0 or disp == "off":
            _callback_info["display"] = 2**31
        else:
            _callback_info["display"] = update_freq
        disp_flag = True if disp == "final" else False

        options = {} if options is None else options
        options.setdefault("disp", disp_flag)
        with warnings.catch_warnings():
            warnings.filterwarnings(
                "ignore",
                "Values in x were outside bounds during a minimize step",
                RuntimeWarning,
            )
            opt = minimize(  # type: ignore[call-overload]
                self._objective,
                sv,
                method="SLSQP",
                bounds=bounds,
                constraints=constraint(a, b),
                tol=tol,
                callback=_callback,
                options=options,
            )

        if show_warning:
            warnings.filterwarnings("always", "", ConvergenceWarning)
        else:
            warnings.filterwarnings("ignore", "", ConvergenceWarning)

        if opt.status != 0 and show_warning:
            warnings.warn(
                convergence_warning.format(code=opt.status, string_message=opt.message),
                ConvergenceWarning,
                stacklevel=2,
            )

        return self._estimate(to_array_1d(np.asarray(opt.x, dtype=float)), opt)

    def fix(self, params: ParameterLike) -> "Estimate":
        """
        Allows an Estimate to be constructed from fixed parameters.

        Parameters
        ----------
        params : {ndarray, Series, Sequence[float]}
            User specified parameters to use when generating the result. Must
            have the correct number of parameters for the model family.

        Returns
        -------
        results : Estimate
            Object containing model results

        Notes
        -----
        Parameters are not checked against model-specific constraints.
        """
        params = to_array_1d(np.asarray(ensure1d(params, "params"), dtype=float))
        return self._estimate(params, None)

    def _estimate(
        self, params: Float64Array1D, opt: OptimizeResult | None
    ) -> "Estimate":
        result = recursion(params, self._y, self._family)
        vol = np.sqrt(np.abs(result.sigma2))
        loglikelihood = float(np.sum(log_density(result.resids, vol)))

        return Estimate(
            params.copy(),
            result.resids.copy(),
            vol,
            self._y_series,
            self.parameter_names(),
            loglikelihood,
            self._is_pandas,
            self._family,
            result.mean_state,
            result.innovations_state,
            opt,
        )


class _SummaryRepr:
    """Base class for returning summary as repr and str"""

    def summary(self) -> Summary:
        raise NotImplementedError("Subclasses must implement")

    def __repr__(self) -> str:
        out = self.__str__() + "\n"
        out += self.__class__.__name__
        out += f", id: {hex(id(self))}"
        return out

    def __str__(self) -> str:
        return self.summary().as_text()


class Estimate(_SummaryRepr):
    """
    Results from a GARCH-family model at a single parameter vector

    Parameters
    ----------
    params : ndarray
        Estimated or user-specified parameters
    resid : ndarray
        Residuals from model, one per observation
    volatility : ndarray
        Conditional volatility from model, one per observation
    dep_var : Series
        Dependent variable
    names : list (str)
        Model parameter names
    loglikelihood : float
        Loglikelihood at the parameters
    is_pandas : bool
        Whether the original input was pandas
    family : ModelFamily
        The model family used to compute the recursion
    mean_state : MeanState
        Mean recursion state after the last observation
    innovations_state : GARCHState
        Volatility recursion state after the last observation
    optim_output : OptimizeResult, optional
        Result of the numerical optimization.  None when the parameters were
        fixed by the user.
    """

    def __init__(
        self,
        params: Float64Array1D,
        resid: Float64Array1D,
        volatility: Float64Array1D,
        dep_var: pd.Series,
        names: list[str],
        loglikelihood: float,
        is_pandas: bool,
        family: ModelFamily,
        mean_state: MeanState,
        innovations_state: GARCHState,
        optim_output: OptimizeResult | None = None,
    ) -> None:
        self._params = params
        self._resid = resid
        self._volatility = volatility
        for arr in (self._params, self._resid, self._volatility):
            arr.flags.writeable = False
        self._dep_var = dep_var
        self._dep_name = str(dep_var.name)
        self._index = dep_var.index
        self._names = list(names)
        self._loglikelihood = loglikelihood
        self._is_pandas = is_pandas
        self._family = family
        self._mean_params, self._innovations_params = family.unpack(params)
        self._mean_state = mean_state
        self._innovations_state = innovations_state
        self._optim_output = optim_output
        self._nobs = resid.shape[0]
        self._datetime = dt.datetime.now()

    def summary(self) -> Summary:
        """
        Constructs a summary of the results

        Returns
        -------
        summary : Summary instance
            Object that contains tables and facilitated export to text, html or
            latex
        """
        family = self._family
        estimated = self._optim_output is not None
        method = "Maximum Likelihood" if estimated else "User-specified Parameters"

        top_left = [
            ("Dep. Variable:", self._dep_name),
            ("Mean Model:", family.mean_process.name),
            ("Vol Model:", str(family.volatility)),
            ("Distribution:", "Normal"),
            ("Method:", method),
            ("Date:", self._datetime.strftime("%a, %b %d %Y")),
        ]
        top_right = [
            ("Log-Likelihood:", f"{self.loglikelihood:#10.6g}"),
            ("No. Observations:", f"{self._nobs}"),
            ("Num. Params:", f"{self.num_params}"),
            ("Iterations:", f"{self._optim_output.nit}" if estimated else "--"),
            ("", ""),
            ("Time:", self._datetime.strftime("%H:%M:%S")),
        ]

        title = family.name + " Model Results"
        stubs = []
        vals = []
        for stub, val in top_left:
            stubs.append(stub)
            vals.append([val])
        table = SimpleTable(vals, txt_fmt=fmt_2cols, title=title, stubs=stubs)

        smry = Summary()
        fmt = fmt_2cols
        fmt["data_fmts"][1] = "%18s"

        top_right = [("%-21s" % ("  " + k), v) for k, v in top_right]
        stubs = []
        vals = []
        for stub, val in top_right:
            stubs.append(stub)
            vals.append([val])
        table.extend_right(SimpleTable(vals, stubs=stubs))
        smry.tables.append(table)

        header = ["coef"]
        param_table_data = [
            [format_float_fixed(param, 10, 4)] for param in self._params
        ]
        counts = (family.mean_process.num_params, family.volatility.num_params)
        titles = ("Mean Model", "Volatility Model")
        total = 0
        for title, count in zip(titles, counts):
            table_data = param_table_data[total : total + count]
            table_stubs = self._names[total : total + count]
            total += count
            table = SimpleTable(
                table_data,
                stubs=table_stubs,
                txt_fmt=fmt_params,
                headers=header,
                title=title,
            )
            smry.tables.append(table)

        extra_text = ["Std. errors are not computed."]
        if estimated and self.convergence_flag != 0:
            extra_text.append(
                "WARNING: The optimizer did not indicate successful convergence. "
                f"The message was {self._optim_output.message}."
            )
        smry.add_extra_txt(extra_text)
        return smry

    @property
    def family(self) -> ModelFamily:
        """Model family used to produce the estimate"""
        return self._family

    @cached_property
    def params(self) -> pd.Series:
        """Model Parameters"""
        return pd.Series(self._params, index=self._names, name="params")

    @property
    def mean_params(self) -> MeanParameters:
        """Mean parameter record"""
        return self._mean_params

    @property
    def innovations_params(self) -> GARCHParameters:
        """Volatility parameter record"""
        return self._innovations_params

    @property
    def mean_state(self) -> MeanState:
        """Mean recursion state after the last observation"""
        return self._mean_state

    @property
    def innovations_state(self) -> GARCHState:
        """Volatility recursion state after the last observation"""
        return self._innovations_state

    @property
    def loglikelihood(self) -> float:
        """Model loglikelihood"""
        return self._loglikelihood

    @property
    def num_params(self) -> int:
        """Number of parameters in model"""
        return len(self._params)

    @property
    def nobs(self) -> int:
        """
        Number of data points used to estimate model
        """
        return self._nobs

    @cached_property
    def resid(self) -> Float64Array1D | pd.Series:
        """
        Model residuals
        """
        if self._is_pandas:
            return pd.Series(self._resid, name="resid", index=self._index)
        else:
            return self._resid

    @cached_property
    def conditional_volatility(self) -> Float64Array1D | pd.Series:
        """
        Estimated conditional volatility

        Returns
        -------
        conditional_volatility : {ndarray, Series}
            nobs element array containing the conditional volatility (square
            root of conditional variance).  The values are aligned with the
            input data so that the value in the t-th position is the variance
            of t-th error, which is computed using time-(t-1) information.
        """
        if self._is_pandas:
            return pd.Series(self._volatility, name="cond_vol", index=self._index)
        else:
            return self._volatility

    @cached_property
    def std_resid(self) -> Float64Array1D | pd.Series:
        """
        Residuals standardized by conditional volatility
        """
        std_res = self.resid / self.conditional_volatility
        if isinstance(std_res, pd.Series):
            std_res.name = "std_resid"
        return std_res

    @property
    def convergence_flag(self) -> int | None:
        """
        scipy.optimize.minimize result flag, None if parameters were fixed
        """
        if self._optim_output is None:
            return None
        return self._optim_output.status

    @property
    def optimization_result(self) -> OptimizeResult | None:
        """
        Information about the convergence of the loglikelihood optimization

        Returns
        -------
        optim_result : OptimizeResult
            Result from numerical optimization of the log-likelihood, None if
            parameters were fixed.
        """
        return self._optim_output

    def forecast(self) -> "Forecast":
        """
        One-step-ahead forecast of the mean and volatility

        Returns
        -------
        forecast : Forecast
            Forecast for the period after the last observation
        """
        return Forecast.from_estimate(self)


class Forecast:
    """
    One-step-ahead forecast from a GARCH-family model

    Parameters
    ----------
    mu : float
        Forecast of the conditional mean
    sigma : float
        Forecast of the conditional standard deviation
    """

    def __init__(self, mu: float, sigma: float) -> None:
        self._mu = float(mu)
        self._sigma = float(sigma)

    @classmethod
    def from_estimate(cls, estimate: Estimate) -> "Forecast":
        """
        Forecast the period immediately after the last observation

        Parameters
        ----------
        estimate : Estimate
            Estimate holding the final recursion states

        Returns
        -------
        forecast : Forecast
            One-step-ahead mean and standard deviation
        """
        family = estimate.family
        mu = family.mean(estimate.mean_params, estimate.mean_state)
        sigma2 = family.variance(
            estimate.innovations_params, estimate.innovations_state
        )
        return cls(mu, np.sqrt(np.abs(sigma2)))

    def __str__(self) -> str:
        return f"mean = {self._mu}, sigma = {self._sigma}"

    def __repr__(self) -> str:
        return f"Forecast({self.__str__()}), id: {hex(id(self))}"

    @property
    def mu(self) -> float:
        """Forecast of the conditional mean"""
        return self._mu

    @property
    def sigma(self) -> float:
        """Forecast of the conditional standard deviation"""
        return self._sigma

    @property
    def variance(self) -> float:
        """Forecast of the conditional variance"""
        return self._sigma**2.0


def garch_model(
    y: ArrayLike | Sequence[float],
    mean: Literal["Constant", "ARMA"] = "Constant",
    vol: Literal["GARCH"] = "GARCH",
) -> GARCHModel:
    """
    Initialization of common GARCH-family models

    Parameters
    ----------
    y : {ndarray, Series, Sequence[float]}
        The dependent variable
    mean : str, optional
        Name of the mean model.  Currently supported options are: 'Constant'
        and 'ARMA' (ARMA(1,1)).  Case insensitive.
    vol : str, optional
        Name of the volatility model.  Currently supported options are:
        'GARCH' (GARCH(1,1)).  Case insensitive.

    Returns
    -------
    model : GARCHModel
        Configured GARCH-family model

    Examples
    --------
    >>> import numpy as np
    >>> from garchmle import garch_model
    >>> y = np.random.default_rng(0).standard_normal(1000)

    Constant mean GARCH(1,1)

    >>> cm = garch_model(y)

    ARMA(1,1) mean with GARCH(1,1) volatility

    >>> arma = garch_model(y, mean="ARMA")
    """
    return GARCHModel(y, mean=mean, vol=vol)
