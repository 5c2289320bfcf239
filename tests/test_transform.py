"""Tests for transforming whole structures."""

from pathlib import Path

import gemmi
import numpy as np
import pytest

from pysuperpose.errors import NumericalFailureError
from pysuperpose.io import extract_positions, load_structure
from pysuperpose.superpose import Superpose, Superposition
from pysuperpose.transform import apply_superposition


def _structure(positions: list[tuple[float, float, float]], chains: str = "A") -> gemmi.Structure:
    structure = gemmi.Structure()
    model = gemmi.Model(1)
    for chain_name in chains:
        chain = gemmi.Chain(chain_name)
        res = gemmi.Residue()
        res.name = "ALA"
        for i, pos in enumerate(positions):
            atom = gemmi.Atom()
            atom.name = ["N", "CA", "C", "O"][i % 4]
            atom.element = gemmi.Element("C")
            atom.pos = gemmi.Position(*pos)
            res.add_atom(atom)
        chain.add_residue(res)
        model.add_chain(chain)
    structure.add_model(model)
    return structure


class TestApplySuperposition:
    """Tests for apply_superposition function."""

    def test_identity_transformation(self) -> None:
        """Test identity transformation leaves coordinates unchanged."""
        structure = _structure([(1.0, 2.0, 3.0)])
        sp = Superposition(rmsd=0.0, translation=np.zeros(3), rotation_matrix=np.eye(3))

        apply_superposition(structure, sp)

        ca = structure[0][0][0].find_atom("N", "*")
        assert ca is not None
        assert (ca.pos.x, ca.pos.y, ca.pos.z) == (1.0, 2.0, 3.0)

    def test_rotation_90_degrees(self) -> None:
        """Test 90-degree rotation around Z-axis followed by translation."""
        structure = _structure([(1.0, 0.0, 0.0)])
        rotation = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        sp = Superposition(rmsd=0.0, translation=[10.0, 0.0, 0.0], rotation_matrix=rotation)

        apply_superposition(structure, sp)

        atom = structure[0][0][0][0]
        assert atom.pos.x == pytest.approx(10.0, abs=1e-10)
        assert atom.pos.y == pytest.approx(1.0, abs=1e-10)
        assert atom.pos.z == pytest.approx(0.0, abs=1e-10)

    def test_multiple_chains(self) -> None:
        """Test transformation applies to all atoms of all chains."""
        structure = _structure([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0)], chains="AB")
        sp = Superposition(rmsd=0.0, translation=[5.0, 0.0, 0.0], rotation_matrix=np.eye(3))

        apply_superposition(structure, sp)

        for chain in structure[0]:
            xs = [atom.pos.x for atom in chain[0]]
            assert xs == pytest.approx([5.0, 6.0, 7.0])

    def test_failure_leaves_structure_untouched(self) -> None:
        """Test a non-finite transform raises without moving any atom."""
        structure = _structure([(1.0, 2.0, 3.0), (4.0, 5.0, 6.0)])
        sp = Superposition(rmsd=0.0, translation=[np.nan, 0.0, 0.0], rotation_matrix=np.eye(3))

        with pytest.raises(NumericalFailureError):
            apply_superposition(structure, sp)

        assert structure[0][0][0][1].pos.x == 4.0

    def test_loaded_structure(self, reference_pdb: Path, candidate_pdb: Path) -> None:
        """Test moving a loaded candidate onto the reference."""
        reference = extract_positions(load_structure(str(reference_pdb)))
        candidate_st = load_structure(str(candidate_pdb))

        sp = Superpose(extract_positions(candidate_st)).onto(reference)
        apply_superposition(candidate_st, sp)

        np.testing.assert_allclose(extract_positions(candidate_st), reference, atol=1e-3)
