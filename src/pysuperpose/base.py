"""Elementary point-set helpers shared by the superposition algorithms."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .diagnostics import Diagnostics, default_diagnostics
from .errors import SizeMismatchError

# Weight totals below this are reported as degenerate
WEIGHT_SUM_THRESHOLD = 1e-6


def as_points(points: ArrayLike, name: str = "points") -> NDArray[np.floating]:
    """Convert input to a float array of shape (N, 3).

    Args:
        points: Coordinates, anything accepted by ``np.asarray``
        name: Name used in error messages

    Returns:
        Coordinates as float64 array, shape (N, 3)

    Raises:
        ValueError: If the input cannot be interpreted as (N, 3) coordinates
    """
    arr = np.asarray(points, dtype=float)
    if arr.ndim == 1 and arr.shape[0] == 0:
        return np.zeros((0, 3), dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Expected (N, 3) array for {name}, got shape {arr.shape}")
    return arr


def as_weights(weights: ArrayLike | None, n_points: int) -> NDArray[np.floating]:
    """Convert optional weights to a float array of shape (N,).

    Args:
        weights: Per-point weights, or None for uniform weights of 1.0
        n_points: Number of points the weights belong to

    Returns:
        Weights as float64 array, shape (N,)

    Raises:
        SizeMismatchError: If the number of weights differs from n_points
        ValueError: If weights are not one-dimensional or contain negative values
    """
    if weights is None:
        return np.ones(n_points, dtype=float)

    arr = np.asarray(weights, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"Expected 1-D weights, got shape {arr.shape}")
    if arr.shape[0] != n_points:
        raise SizeMismatchError(f"weights size mismatch: {arr.shape[0]} weights for {n_points} points")
    if np.any(arr < 0):
        raise ValueError("Weights must be non-negative")
    return arr


def weighted_center(
    points: ArrayLike,
    weights: ArrayLike | None = None,
    diagnostics: Diagnostics | None = None,
) -> NDArray[np.floating]:
    """Return the weighted center of geometry.

    A weight total below ``WEIGHT_SUM_THRESHOLD`` is reported to
    ``diagnostics`` but is not an error: the division is still carried out,
    which yields non-finite values for an exactly zero total.

    Args:
        points: Coordinates, shape (N, 3)
        weights: Optional weights, shape (N,). If None, uniform weights used.
        diagnostics: Receiver for the degenerate weight warning

    Returns:
        Weighted centroid, shape (3,)

    Raises:
        SizeMismatchError: If points and weights differ in length
    """
    points = as_points(points)
    weights = as_weights(weights, points.shape[0])

    total = float(np.sum(weights))
    if total < WEIGHT_SUM_THRESHOLD:
        if diagnostics is None:
            diagnostics = default_diagnostics()
        diagnostics.degenerate_weights(total)

    with np.errstate(divide="ignore", invalid="ignore"):
        return np.sum(points * weights[:, np.newaxis], axis=0) / total


def center_of_geometry(points: ArrayLike) -> NDArray[np.floating]:
    """Return the unweighted centroid of points."""
    return weighted_center(points)


def euclidean_distance(p1: ArrayLike, p2: ArrayLike) -> float:
    """Return the Cartesian distance between two points."""
    return float(np.linalg.norm(np.asarray(p2, dtype=float) - np.asarray(p1, dtype=float)))
