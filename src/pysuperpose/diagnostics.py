"""Observers for non-fatal conditions met during superposition.

Algorithms never log directly about degenerate input. They report to a
``Diagnostics`` object instead, which by default forwards to the standard
``logging`` machinery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Diagnostics(Protocol):
    """Receiver for numerical warnings raised by the algorithms."""

    def degenerate_weights(self, total: float) -> None:
        """Sum of weights is close to zero; centroids are unreliable."""

    def not_converged(self, iterations: int, delta: float) -> None:
        """Newton iteration for the largest eigenvalue did not converge."""

    def rotation_skipped(self, reason: str) -> None:
        """No rotation could be extracted; identity will be used."""


class LoggingDiagnostics:
    """Forward diagnostics to a logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log if log is not None else logger

    def degenerate_weights(self, total: float) -> None:
        self.log.warning("Weird weight sum: %g (centroid may be undefined)", total)

    def not_converged(self, iterations: int, delta: float) -> None:
        self.log.warning("Newton iteration did not converge after %d steps (last step %.3e)", iterations, delta)

    def rotation_skipped(self, reason: str) -> None:
        self.log.debug("Rotation skipped: %s", reason)


@dataclass
class RecordingDiagnostics:
    """Collect diagnostics as ``(kind, payload)`` tuples.

    Attributes:
        events: Recorded events in the order they were reported
    """

    events: list[tuple[str, Any]] = field(default_factory=list)

    def degenerate_weights(self, total: float) -> None:
        self.events.append(("degenerate_weights", total))

    def not_converged(self, iterations: int, delta: float) -> None:
        self.events.append(("not_converged", (iterations, delta)))

    def rotation_skipped(self, reason: str) -> None:
        self.events.append(("rotation_skipped", reason))

    def kinds(self) -> list[str]:
        """Return the kinds of all recorded events."""
        return [kind for kind, _ in self.events]


def default_diagnostics() -> Diagnostics:
    """Return the diagnostics used when the caller supplies none."""
    return LoggingDiagnostics()
