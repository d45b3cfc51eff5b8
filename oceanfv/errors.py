"""
Exception types raised by oceanfv.

Configuration problems are raised eagerly, at construction time. Numerical
non-convergence is reported through solver results and only raised as
``ConvergenceError`` when the caller asks for it.
"""


class ConfigurationError(ValueError):
    """Invalid or incompatible construction-time parameters."""


class SizeMismatchError(ConfigurationError):
    """An array argument does not match the shape of the field it applies to."""


class ConvergenceError(RuntimeError):
    """An iterative solver exhausted its iteration budget.

    Parameters
    ----------
    message : str
        Human readable description.
    result : object, optional
        The solver result at the point of failure (best available estimate).
    """

    def __init__(self, message, result=None):
        super().__init__(message)
        self.result = result
