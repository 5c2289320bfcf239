"""Quaternion algorithm for optimal structural superposition.

The optimal rotation is encoded by the eigenvector belonging to the largest
eigenvalue of a symmetric 4x4 "key" matrix built from the weighted
correlation matrix of the two centered point sets (Horn, 1987).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .base import as_points, as_weights, weighted_center
from .diagnostics import Diagnostics
from .errors import NumericalFailureError, SizeMismatchError

logger = logging.getLogger(__name__)

SolveResult = tuple[float, NDArray[np.floating], NDArray[np.floating] | None]


@dataclass
class Correlation:
    """Weighted correlation of two centered point sets.

    Attributes:
        matrix: Correlation matrix F = sum_i w_i * can_i (x) ref_i, shape (3, 3)
        e0: Half the weighted sum of squared norms of both centered sets
        com_ref: Weighted centroid of the reference, shape (3,)
        com_can: Weighted centroid of the candidate, shape (3,)
        weight_sum: Sum of weights
    """

    matrix: NDArray[np.floating]
    e0: float
    com_ref: NDArray[np.floating]
    com_can: NDArray[np.floating]
    weight_sum: float

    def is_finite(self) -> bool:
        return bool(
            np.all(np.isfinite(self.matrix))
            and np.isfinite(self.e0)
            and np.all(np.isfinite(self.com_ref))
            and np.all(np.isfinite(self.com_can))
        )


def correlate(
    reference: ArrayLike,
    candidate: ArrayLike,
    weights: ArrayLike | None = None,
    diagnostics: Diagnostics | None = None,
) -> Correlation:
    """Center both point sets and build their weighted correlation matrix.

    Args:
        reference: Reference coordinates, shape (N, 3)
        candidate: Candidate coordinates, shape (N, 3)
        weights: Optional weights, shape (N,). If None, uniform weights used.
        diagnostics: Receiver for degenerate weight warnings

    Returns:
        Correlation of the centered sets

    Raises:
        SizeMismatchError: If the inputs differ in length
    """
    reference = as_points(reference, "reference")
    candidate = as_points(candidate, "candidate")
    if reference.shape != candidate.shape:
        raise SizeMismatchError(f"points size mismatch: reference {reference.shape} vs candidate {candidate.shape}")
    weights = as_weights(weights, reference.shape[0])

    com_ref = weighted_center(reference, weights, diagnostics)
    com_can = weighted_center(candidate, weights, diagnostics)

    ref_centered = reference - com_ref
    can_centered = candidate - com_can

    matrix = (can_centered.T * weights) @ ref_centered
    g_ref = np.sum(weights * np.sum(ref_centered**2, axis=1))
    g_can = np.sum(weights * np.sum(can_centered**2, axis=1))

    return Correlation(
        matrix=matrix,
        e0=float(0.5 * (g_ref + g_can)),
        com_ref=com_ref,
        com_can=com_can,
        weight_sum=float(np.sum(weights)),
    )


def key_matrix(correlation: NDArray[np.floating]) -> NDArray[np.floating]:
    """Build the symmetric 4x4 key matrix from a 3x3 correlation matrix."""
    (sxx, sxy, sxz), (syx, syy, syz), (szx, szy, szz) = np.asarray(correlation, dtype=float)
    return np.array(
        [
            [sxx + syy + szz, syz - szy, szx - sxz, sxy - syx],
            [syz - szy, sxx - syy - szz, sxy + syx, szx + sxz],
            [szx - sxz, sxy + syx, -sxx + syy - szz, syz + szy],
            [sxy - syx, szx + sxz, syz + szy, -sxx - syy + szz],
        ]
    )


def quaternion_to_rotation(q: ArrayLike) -> NDArray[np.floating]:
    """Convert a unit quaternion (q0, q1, q2, q3) to a rotation matrix."""
    q0, q1, q2, q3 = np.asarray(q, dtype=float)
    return np.array(
        [
            [q0**2 + q1**2 - q2**2 - q3**2, 2.0 * (q1 * q2 - q0 * q3), 2.0 * (q1 * q3 + q0 * q2)],
            [2.0 * (q1 * q2 + q0 * q3), q0**2 - q1**2 + q2**2 - q3**2, 2.0 * (q2 * q3 - q0 * q1)],
            [2.0 * (q1 * q3 - q0 * q2), 2.0 * (q2 * q3 + q0 * q1), q0**2 - q1**2 - q2**2 + q3**2],
        ]
    )


def rmsd_from_eigenvalue(e0: float, eigenvalue: float, weight_sum: float) -> float:
    """Aligned RMSD from the largest key-matrix eigenvalue.

    The residual ``2 * (e0 - eigenvalue)`` can come out slightly negative
    for structures that are already superimposed; it is clamped at zero.
    """
    residual = max(2.0 * (e0 - eigenvalue), 0.0)
    return float(np.sqrt(residual / weight_sum))


def calc_rmsd_rotational_matrix(
    reference: ArrayLike,
    candidate: ArrayLike,
    weights: ArrayLike | None = None,
    diagnostics: Diagnostics | None = None,
) -> SolveResult:
    """Compute aligned RMSD and the rigid motion superposing candidate onto reference.

    Args:
        reference: Reference coordinates, held fixed, shape (N, 3)
        candidate: Candidate coordinates to be moved, shape (N, 3)
        weights: Optional weights, shape (N,). If None, uniform weights used.
        diagnostics: Receiver for non-fatal numerical warnings

    Returns:
        rmsd: Weighted RMSD after superposition
        translation: Translation vector to apply after rotation, shape (3,)
        rotation: Rotation matrix, shape (3, 3). Never None for this algorithm.

    Raises:
        SizeMismatchError: If the inputs differ in length
        NumericalFailureError: If the correlation matrix is not finite

    Notes:
        To apply transformation: candidate_transformed = candidate @ rotation.T + translation
    """
    logger.debug("Calculate using quaternion algorithm ...")

    corr = correlate(reference, candidate, weights, diagnostics)
    if not corr.is_finite():
        raise NumericalFailureError("non-finite correlation matrix", algorithm="quaternion")

    if corr.e0 <= 0.0:
        # Both sets collapse onto their centroids
        rotation = np.eye(3)
        rmsd = 0.0
    else:
        # Eigenvector of the most positive eigenvalue is the rotation quaternion
        eigenvalues, eigenvectors = np.linalg.eigh(key_matrix(corr.matrix))
        imax = int(np.argmax(eigenvalues))
        rotation = quaternion_to_rotation(eigenvectors[:, imax])
        rmsd = rmsd_from_eigenvalue(corr.e0, float(eigenvalues[imax]), corr.weight_sum)

    translation = corr.com_ref - rotation @ corr.com_can

    return rmsd, translation, rotation
