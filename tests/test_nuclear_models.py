"""
Tests for the nuclear_models module.
"""

import unittest

from nuclear_events.constants import FRAGMENTS, NEUTRON, PROTON
from nuclear_events.mass_table import MassTable
from nuclear_events.nuclear_models import (
    BackshiftedFermiGasModel,
    StandardLorentzianModel,
    TransmissionModel,
)
from nuclear_events.nuclear_physics import TransitionType
from nuclear_events.particle import Parity


def fragment(pdg):
    return [f for f in FRAGMENTS if f.pdg == pdg][0]


class TestLevelDensity(unittest.TestCase):
    """Test the back-shifted Fermi gas model."""

    def setUp(self):
        self.model = BackshiftedFermiGasModel(19, 40, MassTable())

    def test_increases_with_energy(self):
        """Test the level density grows with excitation energy."""
        self.assertLess(self.model.level_density(5.0), self.model.level_density(10.0))
        self.assertLess(self.model.level_density(10.0), self.model.level_density(20.0))

    def test_positive_near_backshift(self):
        """Test the density stays finite and positive at low energy."""
        rho = self.model.level_density(0.01)
        self.assertGreater(rho, 0.0)

    def test_spin_and_parity_resolved(self):
        """Test spin-parity resolved densities are fractions of the total."""
        total = self.model.level_density(8.0)
        spin = self.model.level_density(8.0, 4)
        spin_parity = self.model.level_density(8.0, 4, Parity.NEGATIVE)
        self.assertLess(spin, total)
        self.assertAlmostEqual(spin_parity, 0.5 * spin)

    def test_spin_distribution_sums_to_one(self):
        """Test the spin distribution is normalized over integer spins."""
        total = self.model.level_density(8.0)
        summed = sum(self.model.level_density(8.0, twoJ) for twoJ in range(0, 80, 2))
        self.assertAlmostEqual(summed / total, 1.0, delta=0.05)

    def test_invalid_nuclide(self):
        """Test that Z > A is rejected."""
        with self.assertRaises(ValueError):
            BackshiftedFermiGasModel(10, 5)


class TestTransmission(unittest.TestCase):
    """Test fragment transmission coefficients."""

    def setUp(self):
        self.model = TransmissionModel(19, 39)

    def test_bounded(self):
        """Test transmission coefficients lie in [0, 1]."""
        for frag in FRAGMENTS:
            for l in range(4):
                for KE in (0.5, 2.0, 10.0):
                    T = self.model.transmission_coefficient(frag, KE, l)
                    self.assertGreaterEqual(T, 0.0)
                    self.assertLessEqual(T, 1.0 + 1e-12)

    def test_closed_at_zero_energy(self):
        """Test nothing is transmitted at zero kinetic energy."""
        self.assertEqual(self.model.transmission_coefficient(fragment(NEUTRON), 0.0, 0), 0.0)

    def test_centrifugal_suppression(self):
        """Test higher partial waves are suppressed for slow neutrons."""
        n = fragment(NEUTRON)
        self.assertGreater(
            self.model.transmission_coefficient(n, 0.5, 0),
            self.model.transmission_coefficient(n, 0.5, 3),
        )

    def test_coulomb_suppression(self):
        """Test slow protons are suppressed relative to slow neutrons."""
        T_n = self.model.transmission_coefficient(fragment(NEUTRON), 1.0, 0)
        T_p = self.model.transmission_coefficient(fragment(PROTON), 1.0, 0)
        self.assertLess(T_p, T_n)


class TestGammaTransmission(unittest.TestCase):
    """Test gamma-ray transmission coefficients."""

    def test_transmission_formula(self):
        """Test T = 2 pi f Eg^(2l+1)."""
        import math

        model = StandardLorentzianModel(19, 40)
        f = model.strength_function(TransitionType.ELECTRIC, 1, 4.0)
        T = model.transmission_coefficient(TransitionType.ELECTRIC, 1, 4.0)
        self.assertAlmostEqual(T, 2.0 * math.pi * f * 4.0 ** 3)

    def test_zero_energy(self):
        """Test no transmission at zero gamma energy."""
        model = StandardLorentzianModel(19, 40)
        self.assertEqual(model.transmission_coefficient(TransitionType.MAGNETIC, 1, 0.0), 0.0)


if __name__ == "__main__":
    unittest.main()
