"""Superposition of a candidate point set onto a reference point set.

Example:
    >>> sp = Superpose(candidate).onto(reference)
    >>> moved = sp.apply(candidate)
    >>> sp.rmsd  # aligned RMSD
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

from . import qcp, quaternion
from .base import as_points, as_weights
from .diagnostics import Diagnostics
from .errors import NumericalFailureError, SizeMismatchError
from .quaternion import SolveResult

logger = logging.getLogger(__name__)


class SuperpositionAlgo(Enum):
    """Algorithm used to compute the optimal superposition."""

    QCP = "qcp"
    QUATERNION = "quaternion"

    @classmethod
    def default(cls) -> SuperpositionAlgo:
        return cls.QCP

    def solve(
        self,
        reference: ArrayLike,
        candidate: ArrayLike,
        weights: ArrayLike | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> SolveResult:
        """Run the algorithm.

        Returns:
            Tuple of (rmsd, translation, rotation). Rotation is None when the
            algorithm decided no rotation is needed.
        """
        if self is SuperpositionAlgo.QCP:
            return qcp.calc_rmsd_rotational_matrix(reference, candidate, weights, diagnostics)
        return quaternion.calc_rmsd_rotational_matrix(reference, candidate, weights, diagnostics)


def _frozen(array: ArrayLike) -> NDArray[np.floating]:
    arr = np.array(array, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Superposition:
    """Result of a superposition: how to move a structure onto the reference.

    Attributes:
        rmsd: Weighted RMSD between reference and candidate after superposition
        translation: Translation vector applied after rotation, shape (3,)
        rotation_matrix: Rotation matrix, shape (3, 3)
        algorithm: Name of the algorithm that produced the result
    """

    rmsd: float
    translation: NDArray[np.floating]
    rotation_matrix: NDArray[np.floating]
    algorithm: str | None = None

    def __post_init__(self) -> None:
        translation = _frozen(self.translation)
        rotation = _frozen(self.rotation_matrix)
        if translation.shape != (3,):
            raise ValueError(f"translation must have shape (3,), got {translation.shape}")
        if rotation.shape != (3, 3):
            raise ValueError(f"rotation_matrix must have shape (3, 3), got {rotation.shape}")
        object.__setattr__(self, "rmsd", float(self.rmsd))
        object.__setattr__(self, "translation", translation)
        object.__setattr__(self, "rotation_matrix", rotation)

    def apply(self, points: ArrayLike) -> NDArray[np.floating]:
        """Apply rotation and translation to other points.

        Args:
            points: Coordinates, shape (N, 3). Need not be the aligned candidate.

        Returns:
            Transformed coordinates ``points @ rotation.T + translation``

        Raises:
            NumericalFailureError: If any transformed coordinate is not finite
        """
        points = as_points(points)
        with np.errstate(invalid="ignore", over="ignore"):
            result = points @ self.rotation_matrix.T + self.translation

        invalid = ~np.all(np.isfinite(result), axis=1)
        if np.any(invalid):
            index = int(np.argmax(invalid))
            raise NumericalFailureError(
                f"found invalid float numbers at point {index} (rmsd={self.rmsd}, algorithm={self.algorithm})",
                algorithm=self.algorithm,
                index=index,
            )
        return result

    def apply_translation(self, points: ArrayLike) -> NDArray[np.floating]:
        """Apply translation only."""
        return as_points(points) + self.translation

    def apply_rotation(self, points: ArrayLike) -> NDArray[np.floating]:
        """Apply rotation only (about the origin), ignoring translation."""
        return as_points(points) @ self.rotation_matrix.T

    def inverse(self) -> Superposition:
        """Return the superposition moving the reference back onto the candidate."""
        rotation = self.rotation_matrix.T
        return Superposition(
            rmsd=self.rmsd,
            translation=-(rotation @ self.translation),
            rotation_matrix=rotation,
            algorithm=self.algorithm,
        )


class Superpose:
    """Superpose a candidate structure onto reference structures.

    The candidate coordinates are copied on construction, so one instance can
    be aligned onto any number of references.

    Args:
        positions: Candidate coordinates, shape (N, 3)
        algorithm: Algorithm to use, as member or value of SuperpositionAlgo
        diagnostics: Receiver for non-fatal numerical warnings
    """

    def __init__(
        self,
        positions: ArrayLike,
        algorithm: SuperpositionAlgo | str | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        positions = np.array(as_points(positions, "positions"), dtype=float)
        positions.setflags(write=False)
        self._positions = positions
        if algorithm is None:
            algorithm = SuperpositionAlgo.default()
        self.algorithm = algorithm
        self.diagnostics = diagnostics

    @property
    def positions(self) -> NDArray[np.floating]:
        return self._positions

    @property
    def algorithm(self) -> SuperpositionAlgo:
        return self._algorithm

    @algorithm.setter
    def algorithm(self, value: SuperpositionAlgo | str) -> None:
        self._algorithm = SuperpositionAlgo(value)

    def __len__(self) -> int:
        return self._positions.shape[0]

    def _validate(
        self,
        reference: ArrayLike,
        weights: ArrayLike | None,
    ) -> tuple[NDArray[np.floating], NDArray[np.floating] | None]:
        reference = as_points(reference, "reference")
        n_points = len(self)
        if reference.shape[0] != n_points:
            raise SizeMismatchError(f"points size mismatch: {reference.shape[0]} reference vs {n_points} candidate")
        if weights is not None:
            weights = as_weights(weights, n_points)
        return reference, weights

    def rmsd(self, reference: ArrayLike, weights: ArrayLike | None = None) -> float:
        """Raw weighted deviation from reference, without any superposition.

        Computes ``sqrt(sum_i |w_i * (candidate_i - reference_i)|**2)``. Note
        the weight multiplies the difference vector before squaring and the
        sum is not divided by the number of points or the weight sum, so this
        is a distance, not a root-mean-square value. For the RMSD after
        optimal superposition use ``onto(reference, weights).rmsd``.

        Args:
            reference: Reference coordinates, shape (N, 3)
            weights: Optional weights, shape (N,). If None, all weights are 1.0.

        Raises:
            SizeMismatchError: If reference or weights differ in length from the candidate
        """
        reference, weights = self._validate(reference, weights)
        diff = self._positions - reference
        if weights is not None:
            diff = diff * weights[:, np.newaxis]
        return float(np.sqrt(np.sum(diff**2)))

    def onto(self, reference: ArrayLike, weights: ArrayLike | None = None) -> Superposition:
        """Superpose candidate onto reference, which is held fixed.

        Args:
            reference: Reference coordinates, shape (N, 3)
            weights: Optional weights, shape (N,). If None, uniform weights used.

        Returns:
            Superposition carrying aligned RMSD, rotation and translation

        Raises:
            SizeMismatchError: If reference or weights differ in length from the candidate
            NumericalFailureError: If the algorithm produced non-finite numbers
        """
        reference, weights = self._validate(reference, weights)
        algo = self.algorithm

        rmsd, translation, rotation = algo.solve(reference, self._positions, weights, self.diagnostics)

        # Unit matrix if the two structures need no rotation
        if rotation is None:
            rotation = np.eye(3)

        if not (np.isfinite(rmsd) and np.all(np.isfinite(translation)) and np.all(np.isfinite(rotation))):
            raise NumericalFailureError(
                f"{algo.value} superposition produced non-finite values (rmsd={rmsd})",
                algorithm=algo.value,
            )

        logger.debug("Superposed %d points using %s: RMSD = %.6f", len(self), algo.value, rmsd)
        return Superposition(rmsd=rmsd, translation=translation, rotation_matrix=rotation, algorithm=algo.value)


Superimpose = Superpose


class Alignment(Superpose):
    """Deprecated alignment interface, use :class:`Superpose` instead."""

    def __init__(
        self,
        positions: ArrayLike,
        algorithm: SuperpositionAlgo | str | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        warnings.warn("Alignment is deprecated, use Superpose instead", DeprecationWarning, stacklevel=2)
        super().__init__(positions, algorithm, diagnostics)

    def superpose(self, reference: ArrayLike, weights: ArrayLike | None = None) -> Superposition:
        """Superpose candidate onto reference; same as :meth:`Superpose.onto`."""
        return self.onto(reference, weights)
