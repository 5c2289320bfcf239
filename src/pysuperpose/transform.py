"""Coordinate transformation of whole structures."""

import gemmi

from .superpose import Superposition


def apply_superposition(structure: gemmi.Structure, superposition: Superposition) -> None:
    """Apply rigid-body transformation to all atoms in structure.

    Transforms all atoms in-place using: new_pos = old_pos @ rotation.T + translation

    Args:
        structure: Input gemmi Structure (modified in-place)
        superposition: Superposition to apply

    Raises:
        NumericalFailureError: If the transformation yields non-finite coordinates
    """
    atoms = [atom for model in structure for chain in model for residue in chain for atom in residue]
    if not atoms:
        return

    # Transform everything first so a failure leaves the structure untouched
    new_positions = superposition.apply([[atom.pos.x, atom.pos.y, atom.pos.z] for atom in atoms])

    for atom, new_pos in zip(atoms, new_positions, strict=True):
        atom.pos = gemmi.Position(float(new_pos[0]), float(new_pos[1]), float(new_pos[2]))
