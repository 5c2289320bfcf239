"""Structure file I/O and coordinate extraction."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import gemmi
import numpy as np
from numpy.typing import NDArray


def load_structure(path: str) -> gemmi.Structure:
    """Load a structure from PDB or mmCIF file.

    Args:
        path: Path to structure file (PDB or mmCIF format)

    Returns:
        Loaded gemmi Structure object

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If structure has no models
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Structure file not found: {path}")

    structure = gemmi.read_structure(str(file_path))

    if len(structure) == 0:
        raise ValueError(f"Structure has no models: {path}")

    structure.setup_entities()

    return structure


def write_structure(structure: gemmi.Structure, path: str) -> None:
    """Write structure to file with format auto-detection.

    Args:
        structure: gemmi Structure to write
        path: Output file path (.pdb or .cif extension)
    """
    file_path = Path(path)

    if file_path.suffix.lower() == ".cif":
        doc = structure.make_mmcif_document()
        doc.write_file(str(file_path))
    else:
        structure.write_pdb(str(file_path))


def _atoms(structure: gemmi.Structure, count: int | None) -> list[gemmi.Atom]:
    if len(structure) == 0:
        raise ValueError("Structure has no models")

    atoms = [atom for chain in structure[0] for residue in chain for atom in residue]
    if count is None:
        return atoms
    if count < 0:
        raise ValueError(f"Atom count must be non-negative, got {count}")
    if count > len(atoms):
        raise ValueError(f"Requested {count} atoms but structure has only {len(atoms)}")
    return atoms[:count]


def extract_positions(structure: gemmi.Structure, count: int | None = None) -> NDArray[np.floating]:
    """Extract atom positions of the first model in file order.

    Args:
        structure: Input gemmi Structure
        count: Number of leading atoms to take. If None, all atoms.

    Returns:
        Coordinates, shape (N, 3)

    Raises:
        ValueError: If structure has no models or fewer than count atoms
    """
    atoms = _atoms(structure, count)
    if not atoms:
        return np.zeros((0, 3), dtype=float)
    return np.array([[atom.pos.x, atom.pos.y, atom.pos.z] for atom in atoms], dtype=float)


def extract_weights(
    structure: gemmi.Structure,
    count: int | None = None,
    kind: Literal["mass", "uniform"] = "mass",
) -> NDArray[np.floating]:
    """Extract per-atom weights of the first model in file order.

    Args:
        structure: Input gemmi Structure
        count: Number of leading atoms to take. If None, all atoms.
        kind: "mass" for atomic masses, "uniform" for all ones

    Returns:
        Weights, shape (N,)
    """
    atoms = _atoms(structure, count)
    if kind == "uniform":
        return np.ones(len(atoms), dtype=float)
    if kind == "mass":
        return np.array([atom.element.weight for atom in atoms], dtype=float)
    raise ValueError(f"Unknown weight kind: {kind!r}")
