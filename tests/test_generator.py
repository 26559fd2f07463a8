"""
Tests for the generator module.
"""

import unittest

import numpy as np
from scipy import stats

from nuclear_events.constants import ELECTRON, ELECTRON_NEUTRINO, MUON_NEUTRINO
from nuclear_events.errors import GeneratorError
from nuclear_events.generator import Generator
from nuclear_events.presets import ARGON_40, make_argon_structure_database
from nuclear_events.reaction import ProcessType, create_reactions
from nuclear_events.source import DecayAtRestSource, MonoenergeticSource
from nuclear_events.target import Target
from nuclear_events.utils import composite_integrate, mev2_to_cm2

OXYGEN_16 = 1000080160


class TestRandomNumbers(unittest.TestCase):
    """Test the random number engine and the sampling helpers."""

    def setUp(self):
        self.generator = Generator(seed=2024)

    def test_seed(self):
        """Test the seed is kept and reseeding resets the stream."""
        self.assertEqual(self.generator.seed, 2024)
        first = [self.generator.uniform_random_double(0.0, 1.0, False) for _ in range(5)]
        self.generator.reseed(2024)
        second = [self.generator.uniform_random_double(0.0, 1.0, False) for _ in range(5)]
        self.assertEqual(first, second)

    def test_negative_seed(self):
        """Test negative seeds are rejected."""
        with self.assertRaises(ValueError):
            self.generator.reseed(-1)

    def test_same_seed_same_stream(self):
        """Test two generators with one seed agree."""
        other = Generator(seed=2024)
        for _ in range(10):
            self.assertEqual(
                self.generator.uniform_random_double(0.0, 1.0, True),
                other.uniform_random_double(0.0, 1.0, True),
            )

    def test_state_string(self):
        """Test restoring a saved state reproduces the stream."""
        self.generator.uniform_random_double(0.0, 1.0, False)
        state = self.generator.get_state_string()
        first = [self.generator.uniform_random_double(0.0, 1.0, False) for _ in range(5)]
        other = Generator(seed=1)
        other.seed_using_state_string(state)
        second = [other.uniform_random_double(0.0, 1.0, False) for _ in range(5)]
        self.assertEqual(first, second)

    def test_bad_state_string(self):
        """Test garbage state strings are rejected."""
        with self.assertRaises(ValueError):
            self.generator.seed_using_state_string("not a state")
        with self.assertRaises(ValueError):
            self.generator.seed_using_state_string("{}")

    def test_uniform_range(self):
        """Test uniform numbers stay in range."""
        for _ in range(100):
            x = self.generator.uniform_random_double(-2.0, 3.0, True)
            self.assertGreaterEqual(x, -2.0)
            self.assertLessEqual(x, 3.0)
            y = self.generator.uniform_random_double(0.0, 1.0, False)
            self.assertLess(y, 1.0)
        with self.assertRaises(ValueError):
            self.generator.uniform_random_double(1.0, 0.0, True)

    def test_discrete_sample_skips_zero_weights(self):
        """Test zero-weight entries are never chosen."""
        for _ in range(200):
            self.assertIn(self.generator.discrete_sample([0.0, 1.0, 0.0, 3.0]), (1, 3))

    def test_discrete_sample_frequencies(self):
        """Test sampling frequencies follow the weights."""
        counts = np.zeros(3)
        n = 20000
        for _ in range(n):
            counts[self.generator.discrete_sample([1.0, 2.0, 7.0])] += 1
        np.testing.assert_allclose(counts / n, [0.1, 0.2, 0.7], atol=0.015)

    def test_discrete_sample_errors(self):
        """Test invalid weight lists."""
        with self.assertRaises(ValueError):
            self.generator.discrete_sample([])
        with self.assertRaises(ValueError):
            self.generator.discrete_sample([0.0, 0.0])
        with self.assertRaises(ValueError):
            self.generator.discrete_sample([1.0, -1.0])

    def test_rejection_sample_distribution(self):
        """Test rejection sampling of f(x) = x on [0, 1] against its CDF."""
        samples = [
            self.generator.rejection_sample(lambda x: x, 0.0, 1.0, 1.0)
            for _ in range(2000)
        ]
        result = stats.kstest(samples, lambda x: np.clip(x, 0.0, 1.0) ** 2)
        self.assertGreater(result.pvalue, 1e-4)

    def test_rejection_sample_unknown_max(self):
        """Test the maximum is searched for when not supplied."""
        samples = np.array([
            self.generator.rejection_sample(lambda x: x * (2.0 - x), 0.0, 2.0)
            for _ in range(2000)
        ])
        self.assertTrue(np.all((samples >= 0.0) & (samples <= 2.0)))
        self.assertAlmostEqual(samples.mean(), 1.0, delta=0.05)

    def test_rejection_sample_zero_function(self):
        """Test functions with no positive values cannot be sampled."""
        with self.assertRaises(ValueError):
            self.generator.rejection_sample(lambda x: 0.0, 0.0, 1.0, 0.0)

    def test_inverse_transform_sample(self):
        """Test inverse transform sampling of f(x) = x on [0, 2]."""
        samples = np.array([
            self.generator.inverse_transform_sample(lambda x: x, 0.0, 2.0)
            for _ in range(4000)
        ])
        self.assertTrue(np.all((samples >= 0.0) & (samples <= 2.0)))
        self.assertAlmostEqual(samples.mean(), 4.0 / 3.0, delta=0.03)

    def test_inverse_transform_zero_function(self):
        """Test functions with zero integral cannot be sampled."""
        with self.assertRaises(ValueError):
            self.generator.inverse_transform_sample(lambda x: 0.0, 0.0, 1.0)

    def test_invalid_energy_sampling(self):
        """Test unknown energy sampling methods are rejected."""
        with self.assertRaises(ValueError):
            Generator(seed=1, energy_sampling="importance")


class ArgonGeneratorTestCase(unittest.TestCase):
    """Common setup for nu_e CC scattering on argon."""

    source = None

    def make_generator(self, source, seed=99, **kwargs):
        db, matrix_elements = make_argon_structure_database()
        reactions = create_reactions(
            ProcessType.NEUTRINO_CC, ARGON_40, matrix_elements, mass_table=db.mass_table
        )
        return Generator(
            seed=seed,
            source=source,
            target=Target.single(ARGON_40),
            reactions=reactions,
            structure_db=db,
            **kwargs,
        )


class TestMonoenergeticGenerator(ArgonGeneratorTestCase):
    """Test event generation with a monoenergetic source."""

    def setUp(self):
        self.generator = self.make_generator(MonoenergeticSource(ELECTRON_NEUTRINO, 30.0))

    def test_sample_reaction(self):
        """Test only the electron neutrino reaction is chosen."""
        reaction, E = self.generator.sample_reaction()
        self.assertEqual(E, 30.0)
        self.assertEqual(reaction.pdg_a, ELECTRON_NEUTRINO)

    def test_flux_averaged_total_xs(self):
        """Test the average over a line spectrum is the cross section there."""
        self.assertAlmostEqual(
            self.generator.flux_averaged_total_xs(),
            self.generator.total_xs(ELECTRON_NEUTRINO, 30.0),
        )
        self.assertGreater(self.generator.flux_averaged_total_xs(), 0.0)

    def test_flux_averaged_total_xs_unweighted(self):
        """Test the average is zero without flux weighting."""
        self.generator.weight_flux = False
        self.assertEqual(self.generator.flux_averaged_total_xs(), 0.0)

    def test_total_xs_per_atom(self):
        """Test total_xs restricted to a target atom."""
        self.assertEqual(self.generator.total_xs(ELECTRON_NEUTRINO, 30.0, OXYGEN_16), 0.0)
        self.assertAlmostEqual(
            self.generator.total_xs(ELECTRON_NEUTRINO, 30.0, ARGON_40),
            self.generator.total_xs(ELECTRON_NEUTRINO, 30.0),
        )

    def test_create_event_conserves_charge(self):
        """Test total charge is conserved through the cascade."""
        for _ in range(10):
            event = self.generator.create_event()
            self.assertEqual(event.ejectile.pdg, ELECTRON)
            self.assertEqual(sum(p.charge for p in event.final_particles), 0)
            self.assertGreaterEqual(len(event.final_particles), 2)

    def test_create_event_without_deexcitation(self):
        """Test the bare two-body event conserves four-momentum."""
        self.generator.do_deexcitations = False
        event = self.generator.create_event()
        self.assertEqual(len(event.final_particles), 2)
        np.testing.assert_allclose(
            event.total_final_four_momentum(),
            event.total_initial_four_momentum(),
            rtol=0.0, atol=1e-6,
        )

    def test_direction(self):
        """Test events are rotated into the projectile direction."""
        self.generator.do_deexcitations = False
        self.generator.set_neutrino_direction([2.0, 0.0, 0.0])
        np.testing.assert_allclose(self.generator.neutrino_direction, [1.0, 0.0, 0.0])
        event = self.generator.create_event()
        projectile = event.projectile
        self.assertAlmostEqual(projectile.px, 30.0)
        self.assertAlmostEqual(projectile.pz, 0.0)
        np.testing.assert_allclose(
            event.total_final_four_momentum(),
            event.total_initial_four_momentum(),
            rtol=0.0, atol=1e-6,
        )

    def test_create_event_for(self):
        """Test events for a given energy, atom and direction."""
        self.generator.do_deexcitations = False
        event = self.generator.create_event_for(
            ELECTRON_NEUTRINO, 20.0, ARGON_40, direction=(0.0, 1.0, 0.0)
        )
        self.assertAlmostEqual(event.projectile.py, 20.0)
        self.assertAlmostEqual(event.projectile.kinetic_energy, 20.0)
        np.testing.assert_allclose(self.generator.neutrino_direction, [0.0, 0.0, 1.0])

    def test_create_event_for_closed(self):
        """Test closed channels raise."""
        with self.assertRaises(GeneratorError):
            self.generator.create_event_for(ELECTRON_NEUTRINO, 20.0, OXYGEN_16)
        with self.assertRaises(GeneratorError):
            self.generator.create_event_for(ELECTRON_NEUTRINO, 1.0, ARGON_40)
        with self.assertRaises(GeneratorError):
            self.generator.create_event_for(MUON_NEUTRINO, 20.0, ARGON_40)

    def test_below_threshold_source(self):
        """Test a line below every level cannot produce events."""
        self.generator.set_source(MonoenergeticSource(ELECTRON_NEUTRINO, 1.0))
        with self.assertRaises(GeneratorError):
            self.generator.sample_reaction()

    def test_missing_inputs(self):
        """Test a generator without a source cannot produce events."""
        generator = Generator(seed=1)
        with self.assertRaises(GeneratorError):
            generator.create_event()

    def test_event_dict(self):
        """Test the plain-data event summary."""
        event = self.generator.create_event()
        record = event.to_dict()
        self.assertEqual(len(record["initial"]), 2)
        self.assertEqual(record["final"][0]["role"], "ejectile")
        self.assertEqual(record["excitation_energy"], event.excitation_energy)


class TestSpectrumGenerator(ArgonGeneratorTestCase):
    """Test event generation with a decay-at-rest spectrum."""

    def setUp(self):
        self.source = DecayAtRestSource(ELECTRON_NEUTRINO)
        self.generator = self.make_generator(self.source, do_deexcitations=False)

    def test_E_pdf_normalized(self):
        """Test the energy PDF has unit area."""
        area = composite_integrate(self.generator.E_pdf, self.source.E_min, self.source.E_max, 200)
        self.assertAlmostEqual(area, 1.0, places=8)

    def test_E_pdf_zero_below_threshold(self):
        """Test no reacting neutrinos below the first accessible level."""
        self.assertEqual(self.generator.E_pdf(2.0), 0.0)
        self.assertGreater(self.generator.E_pdf(35.0), 0.0)

    def test_flux_averaged_total_xs(self):
        """Test the flux-averaged cross section is of order 1e-40 cm^2."""
        xs = mev2_to_cm2(self.generator.flux_averaged_total_xs())
        self.assertGreater(xs, 1e-42)
        self.assertLess(xs, 1e-39)

    def test_unweighted_E_pdf(self):
        """Test the energy PDF is the source spectrum without weighting."""
        self.generator.weight_flux = False
        self.assertAlmostEqual(self.generator.E_pdf(20.0), self.source.pdf(20.0))

    def test_sampled_energies(self):
        """Test reacting energies are above threshold and within the spectrum."""
        for _ in range(20):
            reaction, E = self.generator.sample_reaction()
            self.assertGreater(E, reaction.threshold_kinetic_energy())
            self.assertLessEqual(E, self.source.E_max)

    def test_inverse_transform_energies(self):
        """Test the tabulated inverse transform agrees on the range."""
        generator = self.make_generator(
            self.source, do_deexcitations=False, energy_sampling="inverse_transform"
        )
        for _ in range(20):
            _, E = generator.sample_reaction()
            self.assertGreater(E, 2.0)
            self.assertLessEqual(E, self.source.E_max)

    def test_target_without_reactions(self):
        """Test a target with no reacting atoms cannot be normalized."""
        self.generator.set_target(Target.single(OXYGEN_16))
        with self.assertRaises(GeneratorError):
            self.generator.normalize_E_pdf()

    def test_mixed_target(self):
        """Test atom fractions scale the cross section."""
        full = self.generator.flux_averaged_total_xs()
        self.generator.set_target(Target([ARGON_40, OXYGEN_16], [1.0, 3.0]))
        self.assertAlmostEqual(self.generator.flux_averaged_total_xs() / full, 0.25)

    def test_state_string_reproduces_events(self):
        """Test restoring a saved state reproduces the following events."""
        generator = self.make_generator(self.source, do_deexcitations=True)
        generator.create_event()
        state = generator.get_state_string()
        first = [generator.create_event().to_dict() for _ in range(3)]

        other = self.make_generator(self.source, seed=12345, do_deexcitations=True)
        other.seed_using_state_string(state)
        second = [other.create_event().to_dict() for _ in range(3)]
        self.assertEqual(first, second)

    def test_clear_reactions(self):
        """Test a generator with no reactions refuses to sample."""
        self.generator.clear_reactions()
        self.assertEqual(self.generator.reactions, ())
        with self.assertRaises(GeneratorError):
            self.generator.sample_reaction()


if __name__ == "__main__":
    unittest.main()
