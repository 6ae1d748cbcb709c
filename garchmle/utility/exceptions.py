class InvalidParameterVectorLength(ValueError):
    """Raised when a parameter vector does not match a model family's arity"""

    def __init__(self, family: str, expected: int, actual: int) -> None:
        self.family = family
        self.expected = expected
        self.actual = actual
        super().__init__(
            invalid_parameter_length.format(
                family=family, expected=expected, actual=actual
            )
        )


invalid_parameter_length: str = """\
{family} requires a parameter vector with exactly {expected} elements, but the \
vector provided has {actual} elements."""


class ConvergenceWarning(Warning):
    pass


convergence_warning: str = """\
The optimizer returned code {code}. The message is:
{string_message}
See scipy.optimize.fmin_slsqp for code meaning.
"""


class StartingValueWarning(Warning):
    pass


starting_value_warning: str = """\
Starting values do not have the correct length or do not satisfy the
parameter bounds of the model.  The provided starting values will be ignored.
"""
