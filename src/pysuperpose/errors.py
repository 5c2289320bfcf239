"""Exception types raised by pysuperpose."""

from __future__ import annotations


class SuperpositionError(Exception):
    """Base class for superposition errors."""


class SizeMismatchError(SuperpositionError, ValueError):
    """Raised when candidate, reference or weight lengths disagree."""


class NumericalFailureError(SuperpositionError, ArithmeticError):
    """Raised when a superposition produces non-finite numbers.

    Attributes:
        algorithm: Name of the algorithm that produced the result, if known
        index: Index of the first offending point, if the failure was found
            while transforming a point set
    """

    def __init__(self, message: str, algorithm: str | None = None, index: int | None = None) -> None:
        super().__init__(message)
        self.algorithm = algorithm
        self.index = index
