"""
Tests for the particle module.
"""

import unittest
import math

from nuclear_events.particle import Event, Parity, Particle, ParticleRole


class TestParity(unittest.TestCase):
    """Test parity arithmetic."""

    def test_multiplication(self):
        """Test that parities multiply like signs."""
        self.assertIs(Parity.NEGATIVE * Parity.NEGATIVE, Parity.POSITIVE)
        self.assertIs(Parity.POSITIVE * -1, Parity.NEGATIVE)
        self.assertIs(-Parity.POSITIVE, Parity.NEGATIVE)

    def test_from_sign(self):
        """Test building parities from integers."""
        self.assertIs(Parity.from_sign(5), Parity.POSITIVE)
        self.assertIs(Parity.from_sign(-2), Parity.NEGATIVE)
        with self.assertRaises(ValueError):
            Parity.from_sign(0)

    def test_string(self):
        """Test parity symbols."""
        self.assertEqual(str(Parity.POSITIVE), "+")
        self.assertEqual(str(Parity.NEGATIVE), "-")


class TestParticle(unittest.TestCase):
    """Test particle kinematic properties."""

    def setUp(self):
        self.particle = Particle(11, 5.0, 3.0, 0.0, 4.0 - 1e-9, 0.0, -1)

    def test_negative_mass(self):
        """Test that a negative mass is rejected."""
        with self.assertRaises(ValueError):
            Particle(11, 1.0, mass=-0.1)

    def test_kinetic_energy(self):
        """Test kinetic energy of a massive particle."""
        p = Particle(2212, 1000.0, 0.0, 0.0, 100.0, 938.0, 1)
        self.assertAlmostEqual(p.kinetic_energy, 62.0)

    def test_momentum_magnitude(self):
        """Test momentum magnitude."""
        self.assertAlmostEqual(self.particle.momentum_magnitude, 5.0, places=6)

    def test_invariant_mass(self):
        """Test invariant mass of an on-shell particle."""
        p = Particle(2212, math.sqrt(100.0 ** 2 + 938.0 ** 2), 0.0, 0.0, 100.0, 938.0)
        self.assertAlmostEqual(p.invariant_mass, 938.0, places=6)


class TestEvent(unittest.TestCase):
    """Test the event record."""

    def setUp(self):
        self.event = Event(excitation_energy=2.0, twoJ=2, parity=Parity.POSITIVE)
        self.projectile = self.event.add_initial_particle(
            Particle(12, 10.0, 0.0, 0.0, 10.0), ParticleRole.PROJECTILE
        )
        self.target = self.event.add_initial_particle(
            Particle(1000180400, 100.0, mass=100.0), ParticleRole.TARGET
        )
        self.residue = self.event.add_final_particle(
            Particle(1000190400, 101.0, mass=101.0, charge=1), ParticleRole.RESIDUE
        )

    def test_roles(self):
        """Test role lookup."""
        self.assertIs(self.event.projectile, self.projectile)
        self.assertIs(self.event.target, self.target)
        self.assertIs(self.event.residue, self.residue)
        self.assertIsNone(self.event.ejectile)
        self.assertEqual(self.event.role_of(self.residue), ParticleRole.RESIDUE)

    def test_indices(self):
        """Test that particles are indexed in creation order."""
        self.assertEqual([p.index for p in self.event.particles], [0, 1, 2])
        self.assertEqual(len(self.event.initial_particles), 2)
        self.assertEqual(len(self.event.final_particles), 1)

    def test_parent_child_links(self):
        """Test that secondaries record their parent."""
        gamma = self.event.add_final_particle(
            Particle(22, 1.0, 0.0, 0.0, 1.0), parent=self.residue
        )
        self.assertEqual(gamma.parent, self.residue.index)
        self.assertEqual(self.event.children_of(self.residue), [gamma])
        self.assertEqual(self.event.role_of(gamma), ParticleRole.SECONDARY)

    def test_total_four_momentum(self):
        """Test summed four-momenta."""
        total = self.event.total_initial_four_momentum()
        self.assertAlmostEqual(total[0], 110.0)
        self.assertAlmostEqual(total[3], 10.0)

    def test_to_dict(self):
        """Test the plain-data summary."""
        record = self.event.to_dict()
        self.assertEqual(record["twoJ"], 2)
        self.assertEqual(record["parity"], 1)
        self.assertEqual(len(record["initial"]), 2)
        self.assertEqual(record["final"][0]["role"], "residue")
        self.assertEqual(record["final"][0]["charge"], 1)

    def test_str(self):
        """Test the event listing mentions both states."""
        text = str(self.event)
        self.assertIn("initial", text)
        self.assertIn("final", text)


if __name__ == "__main__":
    unittest.main()
