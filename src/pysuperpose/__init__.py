"""Weighted rigid-body superposition of 3-D point sets."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("pysuperpose")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

from .base import center_of_geometry, euclidean_distance, weighted_center
from .diagnostics import Diagnostics, LoggingDiagnostics, RecordingDiagnostics
from .errors import NumericalFailureError, SizeMismatchError, SuperpositionError
from .superpose import Alignment, Superimpose, Superpose, Superposition, SuperpositionAlgo

__all__ = [
    "Alignment",
    "Diagnostics",
    "LoggingDiagnostics",
    "NumericalFailureError",
    "RecordingDiagnostics",
    "SizeMismatchError",
    "Superimpose",
    "Superpose",
    "Superposition",
    "SuperpositionAlgo",
    "SuperpositionError",
    "__version__",
    "center_of_geometry",
    "euclidean_distance",
    "weighted_center",
]
