"""
Tests for the kinematics module.
"""

import unittest
import math
from types import SimpleNamespace

import numpy as np

from nuclear_events.kinematics import (
    lorentz_boost,
    two_two_scatter,
    two_body_decay_momentum,
    make_event_object,
    isotropic_direction,
    ProjectileDirectionRotator,
)
from nuclear_events.particle import Parity, Particle


def make_reaction_stub(ma=0.0, mb=37224.72, mc=0.511, md_gs=37226.2):
    """Minimal stand-in providing what make_event_object reads."""
    return SimpleNamespace(
        ma=ma, mb=mb, mc=mc, md_gs=md_gs,
        pdg_a=12, pdg_b=1000180400, pdg_c=11, pdg_d=1000190400,
        qa=0, qb=0, qc=-1, qd=1,
    )


class TestTwoTwoScatter(unittest.TestCase):
    """Test center-of-momentum kinematics."""

    def setUp(self):
        self.ma, self.mb, self.mc, self.md = 0.0, 37224.72, 0.511, 37226.2
        self.Ea = 30.0
        self.s, self.Ec, self.pc, self.Ed = two_two_scatter(
            self.Ea, self.ma, self.mb, self.mc, self.md
        )

    def test_energy_sum(self):
        """Test that the CM energies add up to sqrt(s)."""
        self.assertAlmostEqual(self.Ec + self.Ed, math.sqrt(self.s), places=6)

    def test_on_shell(self):
        """Test that the ejectile is on shell."""
        self.assertAlmostEqual(self.Ec ** 2 - self.pc ** 2, self.mc ** 2, places=6)

    def test_residue_momentum_matches(self):
        """Test that both products share the CM momentum."""
        pd = math.sqrt(self.Ed ** 2 - self.md ** 2)
        self.assertAlmostEqual(pd, self.pc, places=4)

    def test_below_threshold_clamped(self):
        """Test that momentum is clamped to zero below threshold."""
        _, _, pc, Ed = two_two_scatter(0.1, 0.0, 100.0, 1.0, 100.0)
        self.assertEqual(pc, 0.0)
        self.assertGreaterEqual(Ed, 100.0)


class TestLorentzBoost(unittest.TestCase):
    """Test Lorentz boosts."""

    def test_invariant_mass_preserved(self):
        """Test that a boost preserves the invariant mass."""
        p = Particle(2212, math.sqrt(938.0 ** 2 + 25.0), 3.0, 0.0, 4.0, 938.0)
        lorentz_boost(0.1, -0.2, 0.3, p)
        self.assertAlmostEqual(p.invariant_mass, 938.0, places=6)

    def test_rest_particle(self):
        """Test boosting a particle at rest gives momentum -gamma m beta."""
        p = Particle(2212, 1.0, mass=1.0)
        lorentz_boost(0.0, 0.0, 0.6, p)
        self.assertAlmostEqual(p.total_energy, 1.25)
        self.assertAlmostEqual(p.pz, -0.75)

    def test_superluminal_boost(self):
        """Test that |beta| >= 1 is rejected."""
        p = Particle(22, 1.0, 0.0, 0.0, 1.0)
        with self.assertRaises(ValueError):
            lorentz_boost(0.0, 0.8, 0.6, p)

    def test_two_body_decay_momentum(self):
        """Test two-body decay momenta."""
        self.assertAlmostEqual(two_body_decay_momentum(10.0, 0.0, 0.0), 5.0)
        self.assertEqual(two_body_decay_momentum(1.0, 0.6, 0.6), 0.0)


class TestMakeEventObject(unittest.TestCase):
    """Test building lab-frame events."""

    def setUp(self):
        self.reaction = make_reaction_stub()
        self.KEa = 30.0
        self.E_level = 2.0
        md = self.reaction.md_gs + self.E_level
        _, Ec, pc, Ed = two_two_scatter(
            self.KEa, self.reaction.ma, self.reaction.mb, self.reaction.mc, md
        )
        self.event = make_event_object(
            self.reaction, self.KEa, pc, 0.3, 1.2, Ec, Ed,
            self.E_level, 2, Parity.POSITIVE,
        )

    def test_particle_count(self):
        """Test two initial and two final particles."""
        self.assertEqual(len(self.event.initial_particles), 2)
        self.assertEqual(len(self.event.final_particles), 2)

    def test_four_momentum_conservation(self):
        """Test that the lab-frame four-momentum is conserved."""
        initial = self.event.total_initial_four_momentum()
        final = self.event.total_final_four_momentum()
        np.testing.assert_allclose(final, initial, rtol=0.0, atol=1e-6)

    def test_projectile_along_z(self):
        """Test the projectile travels along +z."""
        projectile = self.event.projectile
        self.assertAlmostEqual(projectile.pz, self.KEa)
        self.assertEqual(projectile.px, 0.0)

    def test_residue_properties(self):
        """Test the residue carries the level and charge."""
        residue = self.event.residue
        self.assertAlmostEqual(residue.mass, self.reaction.md_gs + self.E_level)
        self.assertEqual(residue.charge, 1)
        self.assertEqual(self.event.excitation_energy, self.E_level)


class TestDirections(unittest.TestCase):
    """Test isotropic directions and projectile rotations."""

    def test_isotropic_direction_unit(self):
        """Test generated directions are unit vectors."""
        v = isotropic_direction(0.2, 2.0)
        self.assertAlmostEqual(float(np.linalg.norm(v)), 1.0)
        self.assertAlmostEqual(v[2], 0.2)

    def test_rotate_to_x(self):
        """Test rotating +z onto +x."""
        rotator = ProjectileDirectionRotator((2.0, 0.0, 0.0))
        p = Particle(12, 5.0, 0.0, 0.0, 5.0)
        rotator.rotate_particle(p)
        np.testing.assert_allclose(p.momentum, [5.0, 0.0, 0.0], atol=1e-12)

    def test_rotate_antiparallel(self):
        """Test rotating +z onto -z."""
        rotator = ProjectileDirectionRotator((0.0, 0.0, -1.0))
        p = Particle(12, 5.0, 1.0, 0.0, 4.0)
        rotator.rotate_particle(p)
        self.assertAlmostEqual(p.pz, -4.0)
        self.assertAlmostEqual(p.momentum_magnitude, math.sqrt(17.0))

    def test_rotation_preserves_energy(self):
        """Test that rotations leave energies and magnitudes unchanged."""
        rotator = ProjectileDirectionRotator((1.0, 1.0, 1.0))
        p = Particle(11, 3.0, 1.0, 2.0, 2.0)
        rotator.rotate_particle(p)
        self.assertEqual(p.total_energy, 3.0)
        self.assertAlmostEqual(p.momentum_magnitude, 3.0)

    def test_zero_direction(self):
        """Test that a zero direction is rejected."""
        with self.assertRaises(ValueError):
            ProjectileDirectionRotator((0.0, 0.0, 0.0))


if __name__ == "__main__":
    unittest.main()
