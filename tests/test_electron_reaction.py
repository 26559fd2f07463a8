"""
Tests for the electron_reaction module.
"""

import unittest

import numpy as np

from nuclear_events.constants import (
    ELECTRON,
    ELECTRON_NEUTRINO,
    ELECTRON_ANTINEUTRINO,
    MUON_NEUTRINO,
    DARK_MATTER,
)
from nuclear_events.electron_reaction import ElectronReaction
from nuclear_events.errors import ReactionError
from nuclear_events.generator import Generator
from nuclear_events.presets import ARGON_40
from nuclear_events.utils import mev2_to_cm2, num_integrate

OXYGEN_16 = 1000080160


class TestElectronReaction(unittest.TestCase):
    """Test neutrino-electron elastic scattering."""

    def setUp(self):
        self.reaction = ElectronReaction(ELECTRON_NEUTRINO, ARGON_40)

    def test_particles(self):
        """Test the participants and the description."""
        self.assertEqual(self.reaction.pdg_b, ELECTRON)
        self.assertEqual(self.reaction.pdg_c, ELECTRON_NEUTRINO)
        self.assertEqual(self.reaction.pdg_d, ELECTRON)
        self.assertEqual(self.reaction.description, "ve + e- --> ve + e-")
        self.assertEqual(self.reaction.atomic_target().pdg, ARGON_40)

    def test_no_threshold(self):
        """Test massless projectiles scatter at any energy."""
        self.assertAlmostEqual(self.reaction.threshold_kinetic_energy(), 0.0)

    def test_rejects_dark_matter(self):
        """Test only neutrinos scatter elastically on electrons."""
        with self.assertRaises(ReactionError):
            ElectronReaction(DARK_MATTER, ARGON_40)

    def test_total_xs_magnitude(self):
        """Test the per-electron cross section is about 1e-44 cm^2 per MeV."""
        per_electron = mev2_to_cm2(self.reaction.total_xs(ELECTRON_NEUTRINO, 10.0)) / 18
        self.assertGreater(per_electron, 5e-44)
        self.assertLess(per_electron, 2e-43)

    def test_scales_with_Z(self):
        """Test the cross section per atom is proportional to Z."""
        oxygen = ElectronReaction(ELECTRON_NEUTRINO, OXYGEN_16)
        ratio = self.reaction.total_xs(ELECTRON_NEUTRINO, 10.0) / oxygen.total_xs(
            ELECTRON_NEUTRINO, 10.0
        )
        self.assertAlmostEqual(ratio, 18.0 / 8.0)

    def test_flavour_ordering(self):
        """Test charged-current enhancement for electron neutrinos."""
        mu = ElectronReaction(MUON_NEUTRINO, ARGON_40)
        anti = ElectronReaction(ELECTRON_ANTINEUTRINO, ARGON_40)
        xs_e = self.reaction.total_xs(ELECTRON_NEUTRINO, 10.0)
        self.assertGreater(xs_e, anti.total_xs(ELECTRON_ANTINEUTRINO, 10.0))
        self.assertGreater(anti.total_xs(ELECTRON_ANTINEUTRINO, 10.0),
                           mu.total_xs(MUON_NEUTRINO, 10.0))

    def test_zero_cases(self):
        """Test mismatched projectiles and bad arguments give zero."""
        self.assertEqual(self.reaction.total_xs(MUON_NEUTRINO, 10.0), 0.0)
        self.assertEqual(self.reaction.total_xs(ELECTRON_NEUTRINO, 0.0), 0.0)
        self.assertEqual(self.reaction.diff_xs(ELECTRON_NEUTRINO, 10.0, -1.1), 0.0)

    def test_diff_xs_integrates_to_total(self):
        """Test the angular distribution integrates to the total."""
        for KEa in (0.5, 5.0, 50.0):
            integral = num_integrate(
                lambda c: self.reaction.diff_xs(ELECTRON_NEUTRINO, KEa, c), -1.0, 1.0, 4
            )
            total = self.reaction.total_xs(ELECTRON_NEUTRINO, KEa)
            self.assertAlmostEqual(integral / total, 1.0, places=10)

    def test_max_diff_xs(self):
        """Test the maximum bounds the differential cross section."""
        for pdg in (ELECTRON_NEUTRINO, ELECTRON_ANTINEUTRINO):
            reaction = ElectronReaction(pdg, ARGON_40)
            fmax = reaction.max_diff_xs(pdg, 2.0)
            values = [reaction.diff_xs(pdg, 2.0, c) for c in np.linspace(-1.0, 1.0, 201)]
            self.assertGreaterEqual(fmax * (1.0 + 1e-12), max(values))


class TestElectronReactionEvents(unittest.TestCase):
    """Test elastic scattering events."""

    def setUp(self):
        self.reaction = ElectronReaction(ELECTRON_NEUTRINO, ARGON_40)
        self.generator = Generator(seed=7, do_deexcitations=False)

    def test_event(self):
        """Test the final state and four-momentum conservation."""
        event = self.reaction.create_event(ELECTRON_NEUTRINO, 10.0, self.generator)
        self.assertEqual([p.pdg for p in event.final_particles],
                         [ELECTRON_NEUTRINO, ELECTRON])
        self.assertEqual(event.excitation_energy, 0.0)
        np.testing.assert_allclose(
            event.total_final_four_momentum(),
            event.total_initial_four_momentum(),
            rtol=0.0, atol=1e-9,
        )

    def test_wrong_projectile(self):
        """Test a mismatched projectile raises."""
        with self.assertRaises(ReactionError):
            self.reaction.create_event(MUON_NEUTRINO, 10.0, self.generator)


if __name__ == "__main__":
    unittest.main()
