"""
Nuclear De-excitation

Statistical (Hauser-Feshbach) decay of excited residual nuclei followed by
gamma-ray cascades through tabulated discrete levels.

A nucleus excited into the continuum, or above its lowest fragment
emission threshold, may emit a light fragment (n, p, d, t, 3He, alpha)
or a gamma ray. Each exit channel is weighted by its partial decay width:

    fragment: sum over (l, j) of T_l(KE)
    gamma:    sum over l of 2 pi f_XL(Eg) Eg^(2l+1)

where final states in the continuum are further weighted by the level
density of the daughter and integrated over bins of excitation energy.
Once the nucleus reaches a tabulated discrete level below its emission
thresholds, the remaining decay follows the tabulated gamma branching.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING
import logging
import math

from .constants import (
    FRAGMENTS,
    FRAGMENT_L_MAX,
    GAMMA_L_MAX,
    DEFAULT_CONTBIN_WIDTH,
    DEFAULT_CONTBIN_NUM_SUBS,
    Fragment,
    PHOTON,
)
from .errors import DecayError, InvalidTransitionError
from .kinematics import isotropic_direction, lorentz_boost, two_body_decay_momentum
from .nuclear_physics import determine_gamma_transition_type, transition_type_for
from .particle import Event, Parity, Particle, ParticleRole
from .structure import DecayScheme, Level, StructureDatabase
from .utils import get_nucleus_pid, get_particle_A, get_particle_Z, num_integrate, nuclide_symbol

if TYPE_CHECKING:
    from .generator import Generator

logger = logging.getLogger(__name__)

SpinParityWeights = Dict[Tuple[int, Parity], float]

# Largest mismatch between Ex and a tabulated level energy [MeV]
LEVEL_MATCH_TOLERANCE = 1e-6


@dataclass
class ExitChannel:
    """
    One way for an excited nucleus to decay.

    Attributes:
        width: Partial decay width (arbitrary common units)
        fragment: Emitted fragment, or None for a gamma ray
        final_level: Discrete final level, or None for a continuum bin
        Ex_low: Lower edge of the continuum bin [MeV]
        Ex_high: Upper edge of the continuum bin [MeV]
    """

    width: float
    fragment: Optional[Fragment] = None
    final_level: Optional[Level] = None
    Ex_low: float = 0.0
    Ex_high: float = 0.0

    @property
    def emits_gamma(self) -> bool:
        return self.fragment is None

    @property
    def is_continuum(self) -> bool:
        return self.final_level is None


def fragment_spin_couplings(
    twoJi: int, Pi: Parity, fragment: Fragment, transmission: List[float]
) -> SpinParityWeights:
    """
    Sum transmission coefficients onto the daughter spin-parities they reach.

    For orbital angular momentum l and total fragment angular momentum
    j = l + s, the daughter spin Jf couples with j to Ji and its parity
    obeys Pi = Pf * Pa * (-1)^l.

    Args:
        twoJi: Two times the spin of the decaying state
        Pi: Parity of the decaying state
        fragment: Emitted fragment
        transmission: T_l for l = 0 .. len(transmission) - 1

    Returns:
        Mapping of (twoJf, Pf) to the summed transmission coefficients
    """
    weights: SpinParityWeights = {}
    for l, T in enumerate(transmission):
        if T <= 0.0:
            continue
        Pf = Parity.from_sign(int(Pi) * fragment.parity * (-1) ** l)
        two_l = 2 * l
        for two_j in range(abs(two_l - fragment.two_s), two_l + fragment.two_s + 1, 2):
            for twoJf in range(abs(twoJi - two_j), twoJi + two_j + 1, 2):
                key = (twoJf, Pf)
                weights[key] = weights.get(key, 0.0) + T
    return weights


def gamma_spin_couplings(twoJi: int, Pi: Parity, gamma_model,
                         e_gamma: float) -> SpinParityWeights:
    """
    Sum gamma-ray transmission coefficients onto the final spin-parities.

    Every multipolarity 1 <= l <= GAMMA_L_MAX contributes to final spins
    with |Ji - l| <= Jf <= Ji + l, with electric or magnetic character
    fixed by the parities.
    """
    weights: SpinParityWeights = {}
    if e_gamma <= 0.0:
        return weights
    for l in range(1, GAMMA_L_MAX + 1):
        for Pf in (Parity.POSITIVE, Parity.NEGATIVE):
            T = gamma_model.transmission_coefficient(
                transition_type_for(Pi, Pf, l), l, e_gamma
            )
            if T <= 0.0:
                continue
            for twoJf in range(abs(twoJi - 2 * l), twoJi + 2 * l + 1, 2):
                key = (twoJf, Pf)
                weights[key] = weights.get(key, 0.0) + T
    return weights


class HauserFeshbachDecay:
    """
    Exit channels of one excited nuclear state.

    Args:
        pdg: Nuclear PDG code of the decaying nucleus
        Ex: Excitation energy [MeV]
        twoJ: Two times the spin
        parity: Parity
        structure_db: Source of level schemes and continuum models
        contbin_width: Width of the continuum integration bins [MeV]
        contbin_num_subs: Clenshaw-Curtis order used inside each bin
    """

    def __init__(
        self,
        pdg: int,
        Ex: float,
        twoJ: int,
        parity: Parity,
        structure_db: StructureDatabase,
        contbin_width: float = DEFAULT_CONTBIN_WIDTH,
        contbin_num_subs: int = DEFAULT_CONTBIN_NUM_SUBS,
    ):
        self.pdg = pdg
        self.Z = get_particle_Z(pdg)
        self.A = get_particle_A(pdg)
        self.Ex = Ex
        self.twoJ = twoJ
        self.parity = Parity(parity)
        self.structure_db = structure_db
        self.mass_table = structure_db.mass_table
        self.contbin_width = contbin_width
        self.contbin_num_subs = contbin_num_subs

        self.channels: List[ExitChannel] = []
        self._separation_energies: Dict[int, float] = {}
        self._build_fragment_channels()
        self._build_gamma_channels()
        self.total_width = sum(ch.width for ch in self.channels)

    def __repr__(self):
        return (
            f"HauserFeshbachDecay({nuclide_symbol(self.Z, self.A)}, "
            f"Ex={self.Ex:.4g}, twoJ={self.twoJ}, parity={self.parity}, "
            f"channels={len(self.channels)})"
        )

    # Channel construction

    def _continuum_bins(self, E_low: float, E_high: float):
        """Yield (lo, hi) bins covering [E_low, E_high]."""
        if E_high <= E_low:
            return
        num_bins = max(1, math.ceil((E_high - E_low) / self.contbin_width - 1e-9))
        for i in range(num_bins):
            lo = E_low + i * self.contbin_width
            hi = min(lo + self.contbin_width, E_high)
            if hi > lo:
                yield lo, hi

    def _fragment_transmission(self, fragment: Fragment, KE: float) -> List[float]:
        model = self.structure_db.get_transmission_model(self.daughter_pdg(fragment))
        return [model.transmission_coefficient(fragment, KE, l)
                for l in range(FRAGMENT_L_MAX + 1)]

    def daughter_pdg(self, fragment: Fragment) -> int:
        return get_nucleus_pid(self.Z - fragment.Z, self.A - fragment.A)

    def separation_energy(self, fragment: Fragment) -> float:
        if fragment.pdg not in self._separation_energies:
            self._separation_energies[fragment.pdg] = (
                self.mass_table.get_fragment_separation_energy(self.Z, self.A, fragment.pdg)
            )
        return self._separation_energies[fragment.pdg]

    def _can_emit(self, fragment: Fragment) -> bool:
        Zf = self.Z - fragment.Z
        Af = self.A - fragment.A
        return Zf >= 0 and Af >= 1 and Zf <= Af

    def _build_fragment_channels(self) -> None:
        for fragment in FRAGMENTS:
            if not self._can_emit(fragment):
                continue
            Sa = self.separation_energy(fragment)
            E_max = self.Ex - Sa
            if E_max <= 0.0:
                continue

            daughter = self.daughter_pdg(fragment)
            scheme = self.structure_db.get_discrete_levels(daughter)

            for level in scheme.levels:
                if level.energy >= E_max:
                    break
                T = self._fragment_transmission(fragment, E_max - level.energy)
                weights = fragment_spin_couplings(self.twoJ, self.parity, fragment, T)
                width = weights.get((level.twoJ, level.parity), 0.0)
                if width > 0.0:
                    self.channels.append(ExitChannel(width, fragment, level))

            for lo, hi in self._continuum_bins(scheme.highest_level_energy, E_max):
                width = num_integrate(
                    lambda Exf: self._fragment_continuum_density(fragment, Exf),
                    lo, hi, self.contbin_num_subs,
                )
                if width > 0.0:
                    self.channels.append(ExitChannel(width, fragment, None, lo, hi))

    def _build_gamma_channels(self) -> None:
        gamma_model = self.structure_db.get_gamma_strength_model(self.pdg)
        scheme = self.structure_db.get_discrete_levels(self.pdg)

        for level in scheme.levels:
            if level.energy >= self.Ex:
                break
            try:
                ttype, l = determine_gamma_transition_type(
                    self.twoJ, self.parity, level.twoJ, level.parity
                )
            except InvalidTransitionError:
                continue
            width = gamma_model.transmission_coefficient(ttype, l, self.Ex - level.energy)
            if width > 0.0:
                self.channels.append(ExitChannel(width, None, level))

        for lo, hi in self._continuum_bins(scheme.highest_level_energy, self.Ex):
            width = num_integrate(
                self._gamma_continuum_density, lo, hi, self.contbin_num_subs
            )
            if width > 0.0:
                self.channels.append(ExitChannel(width, None, None, lo, hi))

    # Continuum integrands

    def fragment_spin_weights(self, fragment: Fragment, Exf: float) -> SpinParityWeights:
        """Level-density weighted (twoJf, Pf) weights for a fragment continuum state."""
        KE = self.Ex - self.separation_energy(fragment) - Exf
        if KE <= 0.0:
            return {}
        T = self._fragment_transmission(fragment, KE)
        couplings = fragment_spin_couplings(self.twoJ, self.parity, fragment, T)
        ld_model = self.structure_db.get_level_density_model(self.daughter_pdg(fragment))
        return {
            (twoJf, Pf): w * ld_model.level_density(Exf, twoJf, Pf)
            for (twoJf, Pf), w in couplings.items()
        }

    def gamma_spin_weights(self, Exf: float) -> SpinParityWeights:
        """Level-density weighted (twoJf, Pf) weights for a gamma continuum state."""
        gamma_model = self.structure_db.get_gamma_strength_model(self.pdg)
        couplings = gamma_spin_couplings(self.twoJ, self.parity, gamma_model, self.Ex - Exf)
        ld_model = self.structure_db.get_level_density_model(self.pdg)
        return {
            (twoJf, Pf): w * ld_model.level_density(Exf, twoJf, Pf)
            for (twoJf, Pf), w in couplings.items()
        }

    def _fragment_continuum_density(self, fragment: Fragment, Exf: float) -> float:
        return sum(self.fragment_spin_weights(fragment, Exf).values())

    def _gamma_continuum_density(self, Exf: float) -> float:
        return sum(self.gamma_spin_weights(Exf).values())

    # Sampling

    def sample_channel(self, generator: "Generator") -> ExitChannel:
        """
        Choose an exit channel with probability proportional to its width.

        Raises:
            DecayError: If every channel is closed
        """
        if self.total_width <= 0.0:
            raise DecayError(
                f"No open decay channel for {nuclide_symbol(self.Z, self.A)} at "
                f"Ex = {self.Ex} MeV with 2J = {self.twoJ} and parity {self.parity}"
            )
        weights = [ch.width for ch in self.channels]
        return self.channels[generator.discrete_sample(weights)]

    def sample_final_state(
        self, channel: ExitChannel, generator: "Generator"
    ) -> Tuple[float, int, Parity]:
        """
        Final excitation energy, 2J and parity reached through a channel.

        Continuum channels draw the energy uniformly within the bin and
        the spin-parity from the level-density weighted couplings there.
        """
        if not channel.is_continuum:
            level = channel.final_level
            return level.energy, level.twoJ, level.parity

        Exf = generator.uniform_random_double(channel.Ex_low, channel.Ex_high, True)
        if channel.emits_gamma:
            weights = self.gamma_spin_weights(Exf)
        else:
            weights = self.fragment_spin_weights(channel.fragment, Exf)

        # The bin endpoints can close a channel that is open inside the bin
        if not weights or sum(weights.values()) <= 0.0:
            Exf = 0.5 * (channel.Ex_low + channel.Ex_high)
            weights = (
                self.gamma_spin_weights(Exf) if channel.emits_gamma
                else self.fragment_spin_weights(channel.fragment, Exf)
            )
            if not weights or sum(weights.values()) <= 0.0:
                raise DecayError(
                    f"Continuum bin [{channel.Ex_low}, {channel.Ex_high}] MeV "
                    f"has no accessible final spin-parity"
                )

        keys = list(weights)
        twoJf, Pf = keys[generator.discrete_sample([weights[k] for k in keys])]
        return Exf, twoJf, Pf


class NucleusDecayer:
    """
    Runs the de-excitation cascade of an event's residual nucleus.

    Emitted fragments and gamma rays are added to the event's final state
    as secondaries whose parent is the residue. The residue itself is
    updated in place after each emission so that it always holds the
    current nucleus.

    Args:
        contbin_width: Width of the continuum integration bins [MeV]
        contbin_num_subs: Clenshaw-Curtis order used inside each bin
        max_steps: Safety limit on the number of emissions per event
    """

    def __init__(
        self,
        contbin_width: float = DEFAULT_CONTBIN_WIDTH,
        contbin_num_subs: int = DEFAULT_CONTBIN_NUM_SUBS,
        max_steps: int = 1000,
    ):
        if contbin_width <= 0.0:
            raise ValueError(f"Continuum bin width must be positive, got {contbin_width}")
        if contbin_num_subs < 1:
            raise ValueError(
                f"Continuum bin subdivision order must be >= 1, got {contbin_num_subs}"
            )
        self.contbin_width = contbin_width
        self.contbin_num_subs = contbin_num_subs
        self.max_steps = max_steps

    def process_event(self, event: Event, generator: "Generator") -> Event:
        """
        De-excite the residue of an event, in place.

        Raises:
            DecayError: If the cascade reaches a state with no open channel
        """
        residue = event.residue
        if residue is None:
            return event

        db = generator.structure_db
        mass_table = db.mass_table
        Ex, twoJ, parity = event.excitation_energy, event.twoJ, Parity(event.parity)

        for _ in range(self.max_steps):
            if Ex <= 0.0:
                return event

            Z = get_particle_Z(residue.pdg)
            A = get_particle_A(residue.pdg)
            level = self._tabulated_level(db.get_decay_scheme(residue.pdg), Ex)
            if level is not None and Ex < mass_table.get_unbound_threshold(Z, A):
                self.gamma_cascade(event, residue, level, Ex, generator)
                return event

            hf = HauserFeshbachDecay(
                residue.pdg, Ex, twoJ, parity, db,
                self.contbin_width, self.contbin_num_subs,
            )
            channel = hf.sample_channel(generator)
            Exf, twoJ, parity = hf.sample_final_state(channel, generator)
            logger.debug(
                "%s at Ex = %.4g MeV decays by %s to Ex = %.4g MeV",
                nuclide_symbol(Z, A), Ex,
                "gamma" if channel.emits_gamma else str(channel.fragment.pdg), Exf,
            )

            ground_mass = residue.mass - Ex
            if channel.emits_gamma:
                self._emit(event, residue, PHOTON, 0.0, 0, ground_mass + Exf,
                           residue.pdg, residue.charge, generator)
            else:
                fragment = channel.fragment
                m_e = mass_table.electron_mass
                new_charge = residue.charge - fragment.Z
                daughter_pdg = hf.daughter_pdg(fragment)
                daughter_mass = (
                    mass_table.get_atomic_mass(daughter_pdg) - new_charge * m_e + Exf
                )
                fragment_mass = mass_table.get_fragment_mass(fragment.pdg) - fragment.Z * m_e
                self._emit(event, residue, fragment.pdg, fragment_mass, fragment.Z,
                           daughter_mass, daughter_pdg, new_charge, generator)

            Ex = Exf
            if channel.final_level is not None:
                self.gamma_cascade(event, residue, channel.final_level, Ex, generator)
                return event

        raise DecayError(
            f"De-excitation did not finish within {self.max_steps} emissions"
        )

    @staticmethod
    def _tabulated_level(scheme: Optional[DecayScheme], Ex: float) -> Optional[Level]:
        """Tabulated level at excitation energy Ex, if the scheme has one."""
        if scheme is None or not len(scheme):
            return None
        level = scheme.closest_level(Ex)
        if abs(level.energy - Ex) > LEVEL_MATCH_TOLERANCE:
            return None
        return level

    def gamma_cascade(
        self,
        event: Event,
        residue: Particle,
        level: Level,
        Ex: float,
        generator: "Generator",
    ) -> None:
        """
        Follow tabulated gamma branches from a discrete level to a level
        with no outgoing gammas.

        Args:
            Ex: Current excitation energy of the residue, equal to the
                level energy within LEVEL_MATCH_TOLERANCE
        """
        ground_mass = residue.mass - Ex
        residue.mass = ground_mass + level.energy
        residue.set_four_momentum(
            math.sqrt(residue.momentum_magnitude ** 2 + residue.mass ** 2),
            residue.px, residue.py, residue.pz,
        )

        while True:
            gamma = level.sample_gamma(generator)
            if gamma is None:
                return
            final = gamma.end_level
            self._emit(event, residue, PHOTON, 0.0, 0, ground_mass + final.energy,
                       residue.pdg, residue.charge, generator)
            level = final

    @staticmethod
    def _emit(
        event: Event,
        residue: Particle,
        pdg: int,
        mass: float,
        charge: int,
        daughter_mass: float,
        daughter_pdg: int,
        daughter_charge: int,
        generator: "Generator",
    ) -> Particle:
        """
        Two-body decay of the residue, isotropic in its rest frame.

        The residue is replaced, in place, by the daughter nucleus.
        """
        p = two_body_decay_momentum(residue.mass, mass, daughter_mass)
        cos_theta = generator.uniform_random_double(-1.0, 1.0, True)
        phi = generator.uniform_random_double(0.0, 2.0 * math.pi, False)
        px, py, pz = p * isotropic_direction(cos_theta, phi)

        emitted = Particle(pdg, math.sqrt(p * p + mass * mass), px, py, pz, mass, charge)
        daughter = Particle(daughter_pdg, math.sqrt(p * p + daughter_mass ** 2),
                            -px, -py, -pz, daughter_mass, daughter_charge)

        E = residue.total_energy
        bx, by, bz = residue.px / E, residue.py / E, residue.pz / E
        lorentz_boost(-bx, -by, -bz, emitted)
        lorentz_boost(-bx, -by, -bz, daughter)

        residue.pdg = daughter_pdg
        residue.mass = daughter_mass
        residue.charge = daughter_charge
        residue.set_four_momentum(
            daughter.total_energy, daughter.px, daughter.py, daughter.pz
        )
        return event.add_final_particle(emitted, ParticleRole.SECONDARY, parent=residue)
