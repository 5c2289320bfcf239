"""Shared fixtures: a small peptide fragment and a rigidly moved copy."""

from pathlib import Path

import numpy as np
import pytest

ATOMS = [
    ("N", "ALA", 1, "N"),
    ("CA", "ALA", 1, "C"),
    ("C", "ALA", 1, "C"),
    ("O", "ALA", 1, "O"),
    ("CB", "ALA", 1, "C"),
    ("N", "GLY", 2, "N"),
    ("CA", "GLY", 2, "C"),
    ("C", "GLY", 2, "C"),
    ("O", "GLY", 2, "O"),
]

REFERENCE_COORDS = np.array(
    [
        [1.204, 0.523, -0.311],
        [2.650, 0.412, -0.102],
        [3.101, -1.012, 0.215],
        [2.419, -1.783, 0.889],
        [3.302, 0.981, -1.360],
        [4.317, -1.347, -0.215],
        [4.902, -2.661, 0.031],
        [6.390, -2.594, -0.204],
        [6.911, -1.711, -0.877],
    ]
)

# Proper rotation permuting axes, keeps coordinates exact at three decimals
ROTATION = np.array([[0.0, 0.0, 1.0], [-1.0, 0.0, 0.0], [0.0, -1.0, 0.0]])
SHIFT = np.array([1.5, 10.0, -2.25])


def pdb_text(coords: np.ndarray) -> str:
    lines = []
    for serial, ((name, resname, resseq, element), (x, y, z)) in enumerate(zip(ATOMS, coords, strict=True), 1):
        lines.append(
            f"ATOM  {serial:5d}  {name:<3s} {resname:3s} A{resseq:4d}    "
            f"{x:8.3f}{y:8.3f}{z:8.3f}  1.00  0.00          {element:>2s}\n"
        )
    lines.append("END\n")
    return "".join(lines)


@pytest.fixture
def reference_coords() -> np.ndarray:
    return REFERENCE_COORDS.copy()


@pytest.fixture
def candidate_coords() -> np.ndarray:
    return REFERENCE_COORDS @ ROTATION.T + SHIFT


@pytest.fixture
def reference_pdb(tmp_path: Path, reference_coords: np.ndarray) -> Path:
    path = tmp_path / "reference.pdb"
    path.write_text(pdb_text(reference_coords))
    return path


@pytest.fixture
def candidate_pdb(tmp_path: Path, candidate_coords: np.ndarray) -> Path:
    path = tmp_path / "candidate.pdb"
    path.write_text(pdb_text(candidate_coords))
    return path
