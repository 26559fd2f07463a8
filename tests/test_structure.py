"""
Tests for the structure and presets modules.
"""

import unittest

from nuclear_events.errors import NuclearEventsError
from nuclear_events.particle import Parity
from nuclear_events.presets import (
    POTASSIUM_40,
    make_argon_structure_database,
    make_k40_decay_scheme,
)
from nuclear_events.structure import DecayScheme, Level, StructureDatabase


class SequenceGenerator:
    """Returns preset indices from discrete_sample."""

    def __init__(self, indices):
        self.indices = list(indices)

    def discrete_sample(self, weights):
        return self.indices.pop(0)


class TestLevel(unittest.TestCase):
    """Test discrete levels and gamma branches."""

    def setUp(self):
        self.ground = Level(0.0, 0, Parity.POSITIVE)
        self.excited = Level(1.5, 4, Parity.POSITIVE)

    def test_invalid_level(self):
        """Test that negative energies and spins are rejected."""
        with self.assertRaises(ValueError):
            Level(-1.0, 0)
        with self.assertRaises(ValueError):
            Level(1.0, -2)

    def test_add_gamma(self):
        """Test gamma energies and validation."""
        gamma = self.excited.add_gamma(self.ground, 100.0)
        self.assertAlmostEqual(gamma.energy, 1.5)
        with self.assertRaises(ValueError):
            self.ground.add_gamma(self.excited, 1.0)
        with self.assertRaises(ValueError):
            self.excited.add_gamma(self.ground, -1.0)

    def test_sample_gamma(self):
        """Test gamma selection and the no-gamma case."""
        self.assertIsNone(self.excited.sample_gamma(SequenceGenerator([0])))
        first = self.excited.add_gamma(self.ground, 10.0)
        self.assertIs(self.excited.sample_gamma(SequenceGenerator([0])), first)

    def test_spin_parity_string(self):
        """Test spin-parity labels for integer and half-integer spins."""
        self.assertEqual(self.excited.spin_parity_string, "2+")
        self.assertEqual(Level(0.0, 3, Parity.NEGATIVE).spin_parity_string, "3/2-")


class TestDecayScheme(unittest.TestCase):
    """Test level schemes."""

    def setUp(self):
        self.scheme = DecayScheme(
            19, 40,
            [Level(2.0, 2, Parity.POSITIVE), Level(0.0, 8, Parity.NEGATIVE),
             Level(1.0, 4, Parity.NEGATIVE)],
        )

    def test_levels_sorted(self):
        """Test that levels are kept in energy order."""
        self.assertEqual([lv.energy for lv in self.scheme.levels], [0.0, 1.0, 2.0])
        self.assertEqual(self.scheme.ground_state.twoJ, 8)
        self.assertEqual(self.scheme.highest_level_energy, 2.0)
        self.assertEqual(self.scheme.pdg, POTASSIUM_40)

    def test_closest_level(self):
        """Test nearest-level lookup."""
        self.assertEqual(self.scheme.closest_level(1.4).energy, 1.0)
        self.assertEqual(self.scheme.closest_level(1.6).energy, 2.0)
        self.assertEqual(self.scheme.closest_level(10.0).energy, 2.0)
        self.assertEqual(self.scheme.closest_level(-1.0).energy, 0.0)

    def test_levels_below(self):
        """Test selecting levels below an energy."""
        self.assertEqual(len(self.scheme.levels_below(1.5)), 2)

    def test_empty_scheme(self):
        """Test that an empty scheme has no ground state."""
        empty = DecayScheme(19, 40)
        with self.assertRaises(NuclearEventsError):
            empty.ground_state
        self.assertEqual(empty.highest_level_energy, 0.0)

    def test_invalid_nuclide(self):
        """Test that Z > A is rejected."""
        with self.assertRaises(ValueError):
            DecayScheme(5, 4)


class TestStructureDatabase(unittest.TestCase):
    """Test the structure database."""

    def setUp(self):
        self.db = StructureDatabase()

    def test_gs_spin_parity_from_table(self):
        """Test tabulated ground-state spin-parities."""
        self.assertEqual(self.db.get_gs_spin_parity(1000180400), (0, Parity.POSITIVE))
        self.assertEqual(self.db.get_gs_spin_parity(POTASSIUM_40), (8, Parity.NEGATIVE))

    def test_gs_spin_parity_systematics(self):
        """Test pairing systematics for untabulated nuclides."""
        self.assertEqual(self.db.get_gs_spin_parity(1000501200), (0, Parity.POSITIVE))
        self.assertEqual(self.db.get_gs_spin_parity(1000501190), (1, Parity.POSITIVE))

    def test_gs_spin_parity_from_scheme(self):
        """Test a registered scheme overrides the table."""
        self.db.add_decay_scheme(DecayScheme(19, 40, [Level(0.0, 2, Parity.POSITIVE)]))
        self.assertEqual(self.db.get_gs_spin_parity(POTASSIUM_40), (2, Parity.POSITIVE))

    def test_discrete_levels_fallback(self):
        """Test a ground-state-only scheme when none is registered."""
        scheme = self.db.get_discrete_levels(POTASSIUM_40)
        self.assertEqual(len(scheme), 1)
        self.assertEqual(scheme.ground_state.twoJ, 8)
        self.assertIsNone(self.db.get_decay_scheme(POTASSIUM_40))

    def test_models_cached(self):
        """Test continuum models are built once per nuclide."""
        self.assertIs(
            self.db.get_level_density_model(POTASSIUM_40),
            self.db.get_level_density_model(POTASSIUM_40),
        )
        self.assertIs(
            self.db.get_gamma_strength_model(POTASSIUM_40),
            self.db.get_gamma_strength_model(POTASSIUM_40),
        )

    def test_remove_decay_scheme(self):
        """Test removing a registered scheme."""
        self.db.add_decay_scheme(make_k40_decay_scheme())
        self.db.remove_decay_scheme(POTASSIUM_40)
        self.assertIsNone(self.db.get_decay_scheme(POTASSIUM_40))


class TestPresets(unittest.TestCase):
    """Test the built-in 40Ar / 40K data."""

    def test_k40_scheme(self):
        """Test the 40K scheme is bound and terminates at the ground state."""
        scheme = make_k40_decay_scheme()
        self.assertEqual(scheme.ground_state.twoJ, 8)
        self.assertEqual(scheme.ground_state.gammas, [])
        for level in scheme.levels[1:]:
            self.assertTrue(level.gammas)

    def test_matrix_elements_linked(self):
        """Test matrix elements are linked to known levels."""
        db, matrix_elements = make_argon_structure_database()
        self.assertIsNotNone(db.get_decay_scheme(POTASSIUM_40))
        energies = [me.level_energy for me in matrix_elements]
        self.assertEqual(energies, sorted(energies))
        self.assertIsNotNone(matrix_elements[0].level)
        self.assertIsNone(matrix_elements[-1].level)


if __name__ == "__main__":
    unittest.main()
