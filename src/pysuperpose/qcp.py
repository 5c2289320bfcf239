"""Quaternion characteristic polynomial (QCP) superposition.

Solves the same problem as :mod:`pysuperpose.quaternion` without a full
eigen-decomposition: the largest eigenvalue of the key matrix is found by
Newton iteration on its characteristic polynomial, and the rotation
quaternion is read off a column of the adjugate of ``K - lambda * I``.

References:
    Theobald (2005) Acta Cryst. A61, 478-480.
    Liu, Agrafiotis & Theobald (2010) J. Comput. Chem. 31, 1561-1563.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .base import as_points
from .diagnostics import Diagnostics, default_diagnostics
from .errors import NumericalFailureError
from .quaternion import SolveResult, correlate, key_matrix, quaternion_to_rotation, rmsd_from_eigenvalue

logger = logging.getLogger(__name__)

# Relative convergence threshold for the Newton iteration
EVAL_PRECISION = 1e-11
# Minimum squared norm of an adjugate column usable as quaternion
EVEC_PRECISION = 1e-6
MAX_ITERATIONS = 50
# Largest centered coordinate difference at which the sets count as coincident
COINCIDENCE_PRECISION = 1e-10


def characteristic_coefficients(
    correlation: NDArray[np.floating],
    key: NDArray[np.floating],
) -> tuple[float, float, float]:
    """Return (c2, c1, c0) of det(lambda*I - K) = lambda^4 + c2*lambda^2 + c1*lambda + c0.

    The key matrix is traceless, so the cubic term vanishes.
    """
    c2 = -2.0 * float(np.sum(correlation**2))
    c1 = -8.0 * float(np.linalg.det(correlation))
    c0 = float(np.linalg.det(key))
    return c2, c1, c0


def largest_root(
    coefficients: tuple[float, float, float],
    upper_bound: float,
    diagnostics: Diagnostics,
    eval_precision: float = EVAL_PRECISION,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    """Find the largest root of the characteristic polynomial by Newton iteration.

    Starting above the largest root the iteration decreases monotonically
    onto it, since the quartic is convex there.

    Args:
        coefficients: (c2, c1, c0) from :func:`characteristic_coefficients`
        upper_bound: Starting point, not smaller than the largest root
        diagnostics: Notified if the iteration does not converge
        eval_precision: Relative step size at which iteration stops
        max_iterations: Maximum number of Newton steps

    Returns:
        Largest eigenvalue of the key matrix
    """
    c2, c1, c0 = coefficients
    lam = upper_bound
    delta = 0.0
    for _ in range(max_iterations):
        x2 = lam * lam
        b = (x2 + c2) * lam
        a = b + c1
        slope = 2.0 * x2 * lam + b + a
        if slope == 0.0:
            return lam
        delta = (a * lam + c0) / slope
        lam -= delta
        if abs(delta) < abs(eval_precision * lam):
            return lam

    diagnostics.not_converged(max_iterations, delta)
    return lam


def adjugate(matrix: NDArray[np.floating]) -> NDArray[np.floating]:
    """Return the adjugate (transposed cofactor matrix) of a square matrix."""
    n = matrix.shape[0]
    cofactors = np.empty_like(matrix)
    for i in range(n):
        for j in range(n):
            minor = np.delete(np.delete(matrix, i, axis=0), j, axis=1)
            cofactors[i, j] = (-1.0) ** (i + j) * np.linalg.det(minor)
    return cofactors.T


def _quaternion_from_adjugate(
    key: NDArray[np.floating],
    eigenvalue: float,
    evec_precision: float,
) -> NDArray[np.floating] | None:
    """Eigenvector of key for eigenvalue, or None if the eigenvalue is not simple."""
    scale = float(np.max(np.abs(key)))
    shifted = (key - eigenvalue * np.eye(4)) / scale
    adj = adjugate(shifted)
    norms = np.sum(adj**2, axis=0)
    best = int(np.argmax(norms))
    if norms[best] < evec_precision:
        return None
    return adj[:, best] / np.sqrt(norms[best])


def calc_rmsd_rotational_matrix(
    reference: ArrayLike,
    candidate: ArrayLike,
    weights: ArrayLike | None = None,
    diagnostics: Diagnostics | None = None,
    eval_precision: float = EVAL_PRECISION,
    evec_precision: float = EVEC_PRECISION,
    max_iterations: int = MAX_ITERATIONS,
) -> SolveResult:
    """Compute aligned RMSD and the rigid motion superposing candidate onto reference.

    The Newton root of the characteristic polynomial is only used to pick
    the eigenvector; the reported RMSD comes from the Rayleigh quotient of
    that eigenvector, which stays accurate for (nearly) linear molecules
    where the polynomial is flat around its largest root.

    Args:
        reference: Reference coordinates, held fixed, shape (N, 3)
        candidate: Candidate coordinates to be moved, shape (N, 3)
        weights: Optional weights, shape (N,). If None, uniform weights used.
        diagnostics: Receiver for non-fatal numerical warnings
        eval_precision: Relative convergence threshold of the Newton iteration
        evec_precision: Minimum squared norm of the adjugate column
        max_iterations: Maximum number of Newton steps

    Returns:
        rmsd: Weighted RMSD after superposition
        translation: Translation vector to apply after rotation, shape (3,)
        rotation: Rotation matrix, shape (3, 3), or None when the centered
            point sets already coincide or carry no rotational information,
            in which case the identity should be used

    Raises:
        SizeMismatchError: If the inputs differ in length
        NumericalFailureError: If the correlation matrix is not finite
    """
    logger.debug("Calculate using QCP algorithm ...")
    if diagnostics is None:
        diagnostics = default_diagnostics()

    corr = correlate(reference, candidate, weights, diagnostics)
    if not corr.is_finite():
        raise NumericalFailureError("non-finite correlation matrix", algorithm="qcp")

    offset = (as_points(candidate) - corr.com_can) - (as_points(reference) - corr.com_ref)
    if np.max(np.abs(offset)) <= COINCIDENCE_PRECISION:
        diagnostics.rotation_skipped("point sets already coincide")
        return 0.0, corr.com_ref - corr.com_can, None

    key = key_matrix(corr.matrix)
    scale = float(np.max(np.abs(key)))

    # Both sets collapse onto their centroids, or are entirely uncorrelated
    if corr.e0 <= 0.0 or scale <= np.finfo(float).eps * corr.e0:
        diagnostics.rotation_skipped("key matrix is numerically zero")
        rmsd = rmsd_from_eigenvalue(corr.e0, 0.0, corr.weight_sum)
        return rmsd, corr.com_ref - corr.com_can, None

    coefficients = characteristic_coefficients(corr.matrix, key)
    eigenvalue = largest_root(coefficients, corr.e0, diagnostics, eval_precision, max_iterations)

    q = _quaternion_from_adjugate(key, eigenvalue, evec_precision)
    if q is None:
        # Largest eigenvalue is degenerate (e.g. collinear points): any vector of
        # its eigenspace is optimal, take one from the symmetric eigensolver
        logger.debug("Degenerate largest eigenvalue %g, using eigenvector of key matrix", eigenvalue)
        eigenvalues, eigenvectors = np.linalg.eigh(key)
        imax = int(np.argmax(eigenvalues))
        q = eigenvectors[:, imax]
        eigenvalue = float(eigenvalues[imax])
    else:
        eigenvalue = float(q @ key @ q)

    rmsd = rmsd_from_eigenvalue(corr.e0, eigenvalue, corr.weight_sum)
    rotation = quaternion_to_rotation(q)
    translation = corr.com_ref - rotation @ corr.com_can

    return rmsd, translation, rotation
