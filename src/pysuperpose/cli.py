"""Command-line interface for pysuperpose."""

from __future__ import annotations

import argparse
import logging

import numpy as np

from . import __version__
from .io import extract_positions, extract_weights, load_structure, write_structure
from .superpose import Superpose, SuperpositionAlgo
from .transform import apply_superposition

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def _format_matrix(matrix: np.ndarray) -> list[str]:
    return ["  [" + " ".join(f"{value:10.6f}" for value in row) + "]" for row in np.atleast_2d(matrix)]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the superpose CLI."""
    parser = argparse.ArgumentParser(
        prog="superpose",
        description="Rigid-body superposition of a candidate structure onto a reference structure",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "reference",
        help="Reference structure file (PDB or mmCIF), held fixed",
    )
    parser.add_argument(
        "candidate",
        help="Candidate structure file (PDB or mmCIF) to be moved",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="superposed.cif",
        help="Output file for the transformed candidate (default: superposed.cif)",
    )
    parser.add_argument(
        "--algorithm",
        choices=[algo.value for algo in SuperpositionAlgo],
        default=SuperpositionAlgo.default().value,
        help="Superposition algorithm (default: %(default)s)",
    )
    parser.add_argument(
        "--atoms",
        type=int,
        default=None,
        help="Use only the first N atoms of each structure for fitting. "
        "The transformation is applied to all candidate atoms. (default: all atoms)",
    )
    parser.add_argument(
        "--weights",
        choices=["uniform", "mass"],
        default="uniform",
        help="Per-atom weights used for fitting (default: %(default)s)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output (show rotation matrix and translation)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the superpose CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.atoms is not None and args.atoms < 1:
        parser.error("--atoms must be a positive integer")

    try:
        reference_st = load_structure(args.reference)
        candidate_st = load_structure(args.candidate)

        reference = extract_positions(reference_st, args.atoms)
        candidate = extract_positions(candidate_st, args.atoms)
        weights = None if args.weights == "uniform" else extract_weights(candidate_st, args.atoms, kind="mass")

        logger.info("Reference: %s, %d atoms", args.reference, len(reference))
        logger.info("Candidate: %s, %d atoms", args.candidate, len(candidate))

        sp = Superpose(candidate, algorithm=args.algorithm).onto(reference, weights)

        logger.info("Algorithm: %s", args.algorithm)
        logger.info("RMSD: %.3f Å", sp.rmsd)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Rotation matrix:")
            for line in _format_matrix(sp.rotation_matrix):
                logger.debug("%s", line)
            logger.debug("Translation:")
            for line in _format_matrix(sp.translation):
                logger.debug("%s", line)

        apply_superposition(candidate_st, sp)
        write_structure(candidate_st, args.output)
        logger.info("Superposed structure written to: %s", args.output)

        return 0

    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
