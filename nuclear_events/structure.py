"""
Nuclear Structure Data

Discrete level schemes (levels and their gamma-ray branches) and the
structure database that hands out level schemes, ground-state
spin-parities and continuum models for each nuclide.
"""

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING
import logging

from .errors import NuclearEventsError
from .mass_table import MassTable
from .particle import Parity
from .utils import get_nucleus_pid, get_particle_A, get_particle_Z, nuclide_symbol

if TYPE_CHECKING:
    from .generator import Generator
    from .nuclear_models import (
        BackshiftedFermiGasModel,
        StandardLorentzianModel,
        TransmissionModel,
    )

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Level:
    """
    A discrete nuclear level.

    Attributes:
        energy: Excitation energy [MeV]
        twoJ: Two times the level spin
        parity: Level parity
        gammas: Outgoing gamma-ray transitions
    """

    energy: float
    twoJ: int
    parity: Parity = Parity.POSITIVE
    gammas: List["Gamma"] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.energy < 0.0:
            raise ValueError(f"Level energy must be non-negative, got {self.energy}")
        if self.twoJ < 0:
            raise ValueError(f"Level 2J must be non-negative, got {self.twoJ}")
        self.parity = Parity(self.parity)

    def add_gamma(self, end_level: "Level", rel_intensity: float) -> "Gamma":
        """Add a gamma-ray transition from this level to a lower one."""
        if end_level.energy >= self.energy:
            raise ValueError(
                f"Gamma from {self.energy} MeV must end on a lower level, "
                f"got {end_level.energy} MeV"
            )
        if rel_intensity < 0.0:
            raise ValueError(f"Gamma intensity must be non-negative, got {rel_intensity}")
        gamma = Gamma(self, end_level, rel_intensity)
        self.gammas.append(gamma)
        return gamma

    def sample_gamma(self, generator: "Generator") -> Optional["Gamma"]:
        """
        Choose an outgoing gamma according to the relative intensities.

        Returns:
            The chosen Gamma, or None when the level has no gammas with
            nonzero intensity
        """
        weights = [g.rel_intensity for g in self.gammas]
        if not weights or sum(weights) <= 0.0:
            return None
        return self.gammas[generator.discrete_sample(weights)]

    @property
    def spin_parity_string(self) -> str:
        if self.twoJ % 2:
            return f"{self.twoJ}/2{self.parity}"
        return f"{self.twoJ // 2}{self.parity}"


@dataclass(eq=False)
class Gamma:
    """A gamma-ray transition between two discrete levels."""

    start_level: Level = field(repr=False)
    end_level: Level = field(repr=False)
    rel_intensity: float = 1.0

    @property
    def energy(self) -> float:
        """Transition energy [MeV], ignoring nuclear recoil."""
        return self.start_level.energy - self.end_level.energy


class DecayScheme:
    """
    Discrete level scheme of one nuclide.

    Levels are kept sorted by excitation energy.

    Attributes:
        Z: Proton number
        A: Mass number
    """

    def __init__(self, Z: int, A: int, levels: Optional[List[Level]] = None):
        if A < 1 or Z < 0 or Z > A:
            raise ValueError(f"Invalid nuclide Z = {Z}, A = {A}")
        self.Z = Z
        self.A = A
        self._levels: List[Level] = []
        self._energies: List[float] = []
        for level in levels or []:
            self.add_level(level)

    @property
    def pdg(self) -> int:
        return get_nucleus_pid(self.Z, self.A)

    @property
    def levels(self) -> Tuple[Level, ...]:
        return tuple(self._levels)

    def add_level(self, level: Level) -> Level:
        """Insert a level, keeping the scheme sorted by energy."""
        i = bisect_left(self._energies, level.energy)
        self._energies.insert(i, level.energy)
        self._levels.insert(i, level)
        return level

    @property
    def ground_state(self) -> Level:
        if not self._levels:
            raise NuclearEventsError(
                f"Decay scheme for {nuclide_symbol(self.Z, self.A)} has no levels"
            )
        return self._levels[0]

    @property
    def highest_level_energy(self) -> float:
        """Energy of the highest discrete level (start of the continuum)."""
        return self._energies[-1] if self._energies else 0.0

    def closest_level(self, Ex: float) -> Level:
        """Level whose energy is nearest to Ex."""
        if not self._levels:
            raise NuclearEventsError(
                f"Decay scheme for {nuclide_symbol(self.Z, self.A)} has no levels"
            )
        i = bisect_left(self._energies, Ex)
        if i == 0:
            return self._levels[0]
        if i == len(self._levels):
            return self._levels[-1]
        before = self._levels[i - 1]
        after = self._levels[i]
        if after.energy - Ex < Ex - before.energy:
            return after
        return before

    def levels_below(self, Ex: float) -> List[Level]:
        """Levels with energy strictly below Ex, in ascending order."""
        return self._levels[: bisect_left(self._energies, Ex)]

    def __len__(self):
        return len(self._levels)

    def __str__(self):
        lines = [f"Decay scheme for {nuclide_symbol(self.Z, self.A)}"]
        for level in self._levels:
            lines.append(f"  {level.energy:10.6f} MeV  {level.spin_parity_string}")
            for gamma in level.gammas:
                lines.append(
                    f"    gamma {gamma.energy:10.6f} MeV  "
                    f"I = {gamma.rel_intensity:g}"
                )
        return "\n".join(lines)


# Ground-state 2J and parity of common target and residue nuclei
GROUND_STATE_SPIN_PARITIES: Dict[Tuple[int, int], Tuple[int, int]] = {
    (6, 12): (0, 1),
    (7, 12): (2, 1),
    (8, 16): (0, 1),
    (9, 16): (0, -1),
    (17, 35): (3, 1),
    (17, 36): (4, 1),
    (17, 37): (3, 1),
    (17, 39): (3, 1),
    (17, 40): (4, -1),
    (18, 36): (0, 1),
    (18, 37): (3, 1),
    (18, 38): (0, 1),
    (18, 39): (7, -1),
    (18, 40): (0, 1),
    (19, 38): (6, 1),
    (19, 39): (3, 1),
    (19, 40): (8, -1),
    (20, 40): (0, 1),
    (32, 76): (0, 1),
    (33, 76): (4, -1),
    (82, 208): (0, 1),
}


class StructureDatabase:
    """
    Registry of nuclear structure information.

    Holds discrete decay schemes keyed by nuclear PDG code and lazily
    builds (and caches) continuum models for any nuclide requested.

    Attributes:
        mass_table: Mass table used by the continuum models
    """

    def __init__(self, mass_table: Optional[MassTable] = None):
        self.mass_table = mass_table or MassTable()
        self._decay_schemes: Dict[int, DecayScheme] = {}
        self._level_density_models: Dict[int, "BackshiftedFermiGasModel"] = {}
        self._transmission_models: Dict[int, "TransmissionModel"] = {}
        self._gamma_strength_models: Dict[int, "StandardLorentzianModel"] = {}

    def add_decay_scheme(self, scheme: DecayScheme) -> None:
        """Register (or replace) the decay scheme for a nuclide."""
        if scheme.pdg in self._decay_schemes:
            logger.debug("Replacing decay scheme for %s", nuclide_symbol(scheme.Z, scheme.A))
        self._decay_schemes[scheme.pdg] = scheme

    def get_decay_scheme(self, pdg: int) -> Optional[DecayScheme]:
        """Decay scheme for a nuclide, or None if none is registered."""
        return self._decay_schemes.get(pdg)

    def remove_decay_scheme(self, pdg: int) -> None:
        self._decay_schemes.pop(pdg, None)

    def get_gs_spin_parity(self, pdg: int) -> Tuple[int, Parity]:
        """
        Ground-state 2J and parity of a nuclide.

        Uses the registered decay scheme when it starts at zero energy,
        then a built-in table, then pairing systematics (even-even 0+,
        odd-A 1/2+, odd-odd 1+).

        Returns:
            Tuple of (twoJ, parity)
        """
        scheme = self._decay_schemes.get(pdg)
        if scheme is not None and len(scheme) and scheme.ground_state.energy == 0.0:
            gs = scheme.ground_state
            return gs.twoJ, gs.parity

        Z = get_particle_Z(pdg)
        A = get_particle_A(pdg)
        if (Z, A) in GROUND_STATE_SPIN_PARITIES:
            twoJ, parity = GROUND_STATE_SPIN_PARITIES[(Z, A)]
            return twoJ, Parity(parity)

        N = A - Z
        if A % 2:
            return 1, Parity.POSITIVE
        if Z % 2 == 0 and N % 2 == 0:
            return 0, Parity.POSITIVE
        return 2, Parity.POSITIVE

    def get_discrete_levels(self, pdg: int) -> DecayScheme:
        """
        Decay scheme of a nuclide, or a one-level scheme holding only the
        ground state when none is registered.
        """
        scheme = self._decay_schemes.get(pdg)
        if scheme is not None and len(scheme):
            return scheme
        twoJ, parity = self.get_gs_spin_parity(pdg)
        return DecayScheme(
            get_particle_Z(pdg), get_particle_A(pdg), [Level(0.0, twoJ, parity)]
        )

    def get_level_density_model(self, pdg: int) -> "BackshiftedFermiGasModel":
        """Cached back-shifted Fermi gas model for a nuclide."""
        from .nuclear_models import BackshiftedFermiGasModel

        model = self._level_density_models.get(pdg)
        if model is None:
            model = BackshiftedFermiGasModel(
                get_particle_Z(pdg), get_particle_A(pdg), self.mass_table
            )
            self._level_density_models[pdg] = model
        return model

    def get_transmission_model(self, pdg: int) -> "TransmissionModel":
        """Cached fragment transmission model for a daughter nuclide."""
        from .nuclear_models import TransmissionModel

        model = self._transmission_models.get(pdg)
        if model is None:
            model = TransmissionModel(get_particle_Z(pdg), get_particle_A(pdg))
            self._transmission_models[pdg] = model
        return model

    def get_gamma_strength_model(self, pdg: int) -> "StandardLorentzianModel":
        """Cached gamma-ray strength model for a nuclide."""
        from .nuclear_models import StandardLorentzianModel

        model = self._gamma_strength_models.get(pdg)
        if model is None:
            model = StandardLorentzianModel(get_particle_Z(pdg), get_particle_A(pdg))
            self._gamma_strength_models[pdg] = model
        return model
