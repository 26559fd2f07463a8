"""
Event Generator

The Generator owns the random number engine and everything needed to
produce events: the projectile source, the target composition, the
reactions, the nuclear structure database and the de-excitation model.

Typical use:

    gen = Generator(seed=123, source=source, target=target,
                    reactions=reactions, structure_db=db)
    event = gen.create_event()
"""

from typing import Callable, List, Optional, Sequence, Tuple
import json
import logging
import math

import numpy as np

from .decay import NucleusDecayer
from .errors import GeneratorError
from .kinematics import ProjectileDirectionRotator
from .mass_table import MassTable
from .particle import Event
from .reaction import Reaction
from .source import NeutrinoSource
from .structure import StructureDatabase
from .target import Target
from .utils import composite_integrate, maximize

logger = logging.getLogger(__name__)

# Marker for an unknown maximum in rejection_sample
UNKNOWN_MAX = math.inf

DEFAULT_SAFETY_FACTOR = 1.01

# Subintervals used to normalize the energy PDF
E_PDF_NUM_INTERVALS = 200

ENERGY_SAMPLING_METHODS = ("rejection", "inverse_transform")


class Generator:
    """
    Monte Carlo event generator.

    Args:
        seed: Seed for the random number engine (None picks one from
            system entropy)
        source: Projectile source
        target: Target composition
        reactions: Reactions that may occur
        structure_db: Nuclear structure database
        mass_table: Mass table (defaults to the structure database's)
        direction: Projectile direction in the lab frame
        weight_flux: Weight the source spectrum by the total cross section
            when sampling projectile energies
        do_deexcitations: Run the de-excitation cascade on new events
        energy_sampling: 'rejection' or 'inverse_transform'
        decayer: De-excitation model
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        source: Optional[NeutrinoSource] = None,
        target: Optional[Target] = None,
        reactions: Optional[Sequence[Reaction]] = None,
        structure_db: Optional[StructureDatabase] = None,
        mass_table: Optional[MassTable] = None,
        direction: Sequence[float] = (0.0, 0.0, 1.0),
        weight_flux: bool = True,
        do_deexcitations: bool = True,
        energy_sampling: str = "rejection",
        decayer: Optional[NucleusDecayer] = None,
    ):
        if energy_sampling not in ENERGY_SAMPLING_METHODS:
            raise ValueError(
                f"Energy sampling must be one of {ENERGY_SAMPLING_METHODS}, "
                f"got '{energy_sampling}'"
            )
        self.structure_db = structure_db or StructureDatabase(mass_table)
        self.mass_table = mass_table or self.structure_db.mass_table
        self.decayer = decayer or NucleusDecayer()
        self.do_deexcitations = do_deexcitations
        self.energy_sampling = energy_sampling
        self._rotator = ProjectileDirectionRotator(direction)
        self.rejection_safety_factor = DEFAULT_SAFETY_FACTOR

        self._source = source
        self._target = target
        self._reactions: List[Reaction] = list(reactions or [])
        self._weight_flux = weight_flux
        self._invalidate_E_pdf()

        self.reseed(seed)

    # Random number engine

    @property
    def seed(self) -> int:
        """Seed used to initialize the engine."""
        return self._seed

    def reseed(self, seed: Optional[int] = None) -> None:
        """Reinitialize the engine from a seed."""
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)
        if seed < 0:
            raise ValueError(f"Seed must be non-negative, got {seed}")
        self._seed = seed
        self._rng = np.random.Generator(np.random.MT19937(seed))
        logger.info("Generator seeded with %d", seed)

    def get_state_string(self) -> str:
        """Opaque string capturing the full engine state."""
        state = self._rng.bit_generator.state
        state = dict(state, state=dict(state["state"]))
        state["state"]["key"] = np.asarray(state["state"]["key"]).tolist()
        return json.dumps(state)

    def seed_using_state_string(self, state_string: str) -> None:
        """Restore an engine state saved with get_state_string()."""
        try:
            state = json.loads(state_string)
            state["state"]["key"] = np.asarray(state["state"]["key"], dtype=np.uint32)
            self._rng.bit_generator.state = state
        except (ValueError, KeyError, TypeError) as exc:
            raise ValueError(f"Invalid generator state string: {exc}") from exc

    def uniform_random_double(self, min_value: float, max_value: float,
                              inclusive: bool) -> float:
        """
        Uniform random number on [min, max] (inclusive) or [min, max).
        """
        if max_value < min_value:
            raise ValueError(f"Invalid range [{min_value}, {max_value}]")
        high = np.nextafter(max_value, np.inf) if inclusive else max_value
        x = float(self._rng.uniform(min_value, high))
        return min(x, max_value) if inclusive else x

    def discrete_sample(self, weights: Sequence[float]) -> int:
        """
        Index drawn with probability proportional to its weight.

        Entries with zero weight are never chosen.

        Raises:
            ValueError: For negative weights or an all-zero list
        """
        w = np.asarray(weights, dtype=float)
        if w.size == 0:
            raise ValueError("Cannot sample from an empty list of weights")
        if np.any(w < 0.0) or np.any(np.isnan(w)):
            raise ValueError(f"Sampling weights must be non-negative, got {w}")
        cumulative = np.cumsum(w)
        total = cumulative[-1]
        if total <= 0.0:
            raise ValueError("Sampling weights must not all be zero")
        u = self._rng.random() * total
        index = int(np.searchsorted(cumulative, u, side="right"))
        return min(index, w.size - 1)

    def rejection_sample(
        self,
        f: Callable[[float], float],
        xmin: float,
        xmax: float,
        fmax: float = UNKNOWN_MAX,
        safety_factor: Optional[float] = None,
        max_search_tolerance: float = 1e-8,
    ) -> float:
        """
        Draw x on [xmin, xmax] with probability density proportional to f.

        Args:
            f: Non-negative function to sample from
            xmin, xmax: Sampling range
            fmax: Known maximum of f; searched for when UNKNOWN_MAX
            safety_factor: Multiplies fmax to cover small underestimates
                (defaults to rejection_safety_factor)
            max_search_tolerance: Tolerance of the maximum search

        Returns:
            Sampled value
        """
        if math.isinf(fmax):
            _, fmax = maximize(f, xmin, xmax, max_search_tolerance)
        if not fmax > 0.0:
            raise ValueError(f"Cannot rejection sample a function with maximum {fmax}")

        if safety_factor is None:
            safety_factor = self.rejection_safety_factor
        ceiling = fmax * safety_factor
        warned = False
        while True:
            x = self.uniform_random_double(xmin, xmax, True)
            fx = f(x)
            if fx > ceiling and not warned:
                logger.warning(
                    "Function value %g at x = %g exceeds the rejection "
                    "sampling ceiling %g", fx, x, ceiling,
                )
                warned = True
            if self.uniform_random_double(0.0, ceiling, True) <= fx:
                return x

    def inverse_transform_sample(
        self,
        f: Callable[[float], float],
        xmin: float,
        xmax: float,
        num_points: int = 1000,
    ) -> float:
        """
        Draw x on [xmin, xmax] by inverting a tabulated cumulative
        distribution of f.
        """
        from scipy.integrate import cumulative_trapezoid

        grid = np.linspace(xmin, xmax, num_points)
        values = np.array([f(x) for x in grid])
        cdf = cumulative_trapezoid(values, grid, initial=0.0)
        total = cdf[-1]
        if total <= 0.0:
            raise ValueError("Cannot sample a function with zero integral")

        u = self._rng.random() * total
        i = int(np.searchsorted(cdf, u, side="right"))
        i = min(max(i, 1), num_points - 1)
        lo, hi = cdf[i - 1], cdf[i]
        fraction = 0.0 if hi == lo else (u - lo) / (hi - lo)
        return float(grid[i - 1] + fraction * (grid[i] - grid[i - 1]))

    # Configuration

    @property
    def source(self) -> Optional[NeutrinoSource]:
        return self._source

    def set_source(self, source: NeutrinoSource) -> None:
        self._source = source
        self._invalidate_E_pdf()

    @property
    def target(self) -> Optional[Target]:
        return self._target

    def set_target(self, target: Target) -> None:
        self._target = target
        self._invalidate_E_pdf()

    @property
    def reactions(self) -> Tuple[Reaction, ...]:
        return tuple(self._reactions)

    def add_reaction(self, reaction: Reaction) -> None:
        self._reactions.append(reaction)
        self._invalidate_E_pdf()

    def clear_reactions(self) -> None:
        self._reactions.clear()
        self._invalidate_E_pdf()

    @property
    def weight_flux(self) -> bool:
        return self._weight_flux

    @weight_flux.setter
    def weight_flux(self, value: bool) -> None:
        self._weight_flux = bool(value)
        self._invalidate_E_pdf()

    @property
    def neutrino_direction(self) -> np.ndarray:
        return self._rotator.direction

    def set_neutrino_direction(self, direction: Sequence[float]) -> None:
        self._rotator.set_direction(direction)

    # Cross sections and the energy PDF

    def _invalidate_E_pdf(self) -> None:
        self._norm: Optional[float] = None
        self._E_pdf_max: Optional[float] = None

    def _check_ready(self) -> None:
        if self._source is None:
            raise GeneratorError("No projectile source has been set")
        if self._target is None:
            raise GeneratorError("No target has been set")
        if not self._reactions:
            raise GeneratorError("No reactions have been added")

    def _weighted_total_xs_values(self, E: float) -> List[float]:
        """Abundance-weighted total cross section of each reaction at E."""
        pdg = self._source.pdg
        values = []
        for reaction in self._reactions:
            fraction = self._target.atom_fraction(reaction.atomic_target())
            if fraction == 0.0:
                values.append(0.0)
                continue
            values.append(fraction * reaction.total_xs(pdg, E - reaction.ma))
        return values

    def _unnormalized_E_pdf(self, E: float) -> float:
        flux = self._source.pdf(E)
        if not self._weight_flux or flux == 0.0:
            return flux
        return flux * sum(self._weighted_total_xs_values(E))

    def normalize_E_pdf(self) -> float:
        """
        Recompute the normalization of E_pdf over the source range.

        Raises:
            GeneratorError: If the flux-weighted cross section vanishes
        """
        self._check_ready()
        source = self._source
        if source.is_monoenergetic:
            self._norm = 1.0
            return self._norm

        norm = composite_integrate(
            self._unnormalized_E_pdf, source.E_min, source.E_max, E_PDF_NUM_INTERVALS
        )
        if not norm > 0.0:
            raise GeneratorError(
                "The flux-weighted total cross section vanishes over the source "
                f"energy range [{source.E_min}, {source.E_max}] MeV"
            )
        self._norm = norm
        logger.debug("Normalized the energy PDF (norm = %g)", norm)
        return norm

    def E_pdf(self, E: float) -> float:
        """
        Probability density of the reacting projectile's total energy.

        Proportional to the source spectrum times the abundance-weighted
        total cross section (or to the spectrum alone if flux weighting is
        disabled), normalized over the source range.
        """
        if self._norm is None:
            self.normalize_E_pdf()
        return self._unnormalized_E_pdf(E) / self._norm

    def total_xs(self, pdg_a: int, KEa: float, pdg_atom: Optional[int] = None) -> float:
        """
        Total cross section [MeV^-2] summed over reactions.

        Args:
            pdg_a: Projectile PDG code
            KEa: Projectile kinetic energy [MeV]
            pdg_atom: If given, only reactions on this target atom count;
                otherwise reactions are weighted by the target atom fractions
        """
        total = 0.0
        for reaction in self._reactions:
            atom = reaction.atomic_target()
            if pdg_atom is None:
                weight = self._target.atom_fraction(atom) if self._target else 1.0
            elif atom.pdg == pdg_atom:
                weight = 1.0
            else:
                continue
            if weight > 0.0:
                total += weight * reaction.total_xs(pdg_a, KEa)
        return total

    def flux_averaged_total_xs(self) -> float:
        """
        Flux-averaged, abundance-weighted total cross section [MeV^-2].

        Zero when flux weighting is disabled.
        """
        if not self._weight_flux:
            return 0.0
        self._check_ready()
        source = self._source
        if source.is_monoenergetic:
            return sum(self._weighted_total_xs_values(source.energy))
        if self._norm is None:
            self.normalize_E_pdf()
        return self._norm

    # Sampling

    def _sample_energy(self) -> float:
        source = self._source
        if source.is_monoenergetic:
            return source.energy
        if self.energy_sampling == "inverse_transform":
            return self.inverse_transform_sample(self.E_pdf, source.E_min, source.E_max)
        if self._E_pdf_max is None:
            _, self._E_pdf_max = maximize(self.E_pdf, source.E_min, source.E_max)
        return self.rejection_sample(
            self.E_pdf, source.E_min, source.E_max, self._E_pdf_max
        )

    def sample_reaction(self) -> Tuple[Reaction, float]:
        """
        Sample a reacting projectile energy and the reaction it undergoes.

        Returns:
            Tuple of (reaction, projectile total energy [MeV])

        Raises:
            GeneratorError: If no reaction has a nonzero cross section at
                the sampled energy
        """
        self._check_ready()
        E = self._sample_energy()
        weights = self._weighted_total_xs_values(E)
        if sum(weights) <= 0.0:
            raise GeneratorError(
                f"All reactions have vanishing cross section at E = {E} MeV"
            )
        return self._reactions[self.discrete_sample(weights)], E

    def _finish_event(self, event: Event,
                      rotator: Optional[ProjectileDirectionRotator] = None) -> Event:
        if self.do_deexcitations:
            self.decayer.process_event(event, self)
        (rotator or self._rotator).rotate_event(event)
        return event

    def create_event(self) -> Event:
        """Generate one complete event."""
        reaction, E = self.sample_reaction()
        KEa = E - reaction.ma
        event = reaction.create_event(self._source.pdg, KEa, self)
        return self._finish_event(event)

    def create_event_for(
        self,
        pdg_a: int,
        KEa: float,
        pdg_atom: int,
        direction: Optional[Sequence[float]] = None,
    ) -> Event:
        """
        Generate an event for a given projectile energy and target atom.

        Args:
            pdg_a: Projectile PDG code
            KEa: Projectile kinetic energy [MeV]
            pdg_atom: Nuclear PDG code of the struck atom
            direction: Projectile direction (defaults to the configured one)

        Raises:
            GeneratorError: If no reaction on that atom is open
        """
        candidates = [
            r for r in self._reactions if r.atomic_target().pdg == pdg_atom
        ]
        weights = [r.total_xs(pdg_a, KEa) for r in candidates]
        if not candidates or sum(weights) <= 0.0:
            raise GeneratorError(
                f"No reaction with nonzero cross section for projectile {pdg_a} "
                f"on atom {pdg_atom} at KEa = {KEa} MeV"
            )
        reaction = candidates[self.discrete_sample(weights)]
        event = reaction.create_event(pdg_a, KEa, self)
        rotator = ProjectileDirectionRotator(direction) if direction is not None else None
        return self._finish_event(event, rotator)
