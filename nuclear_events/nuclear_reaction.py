"""
Neutrino-Nucleus Reactions

Charged-current and neutral-current neutrino-nucleus scattering in the
allowed approximation. The nuclear response is given by a table of
Fermi and Gamow-Teller matrix elements, one per final nuclear level.

Features:
- Partial and total cross sections summed over accessible levels
- Coulomb corrections for outgoing charged leptons (Fermi function,
  effective momentum approximation and hybrids)
- Final-level, spin-parity and scattering-angle sampling
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING
import logging
import math

from .constants import PhysicalConstants, ELECTRON
from .errors import ReactionError
from .mass_table import MassTable
from .matrix_element import MatrixElement, MatrixElementType, make_matrix_element_table
from .nuclear_physics import ema_factors, fermi_function
from .particle import Event, Parity
from .reaction import (
    ProcessType,
    Reaction,
    get_ejectile_pdg,
    get_projectiles,
    register_reaction_type,
)
from .target import TargetAtom
from .utils import (
    get_nucleus_pid,
    get_particle_A,
    get_particle_Z,
    nuclide_symbol,
    particle_symbol,
    real_sqrt,
)

if TYPE_CHECKING:
    from .generator import Generator

logger = logging.getLogger(__name__)

# Slack [MeV] on max_level_energy so a level reached exactly at threshold
# is still counted
LEVEL_ENERGY_SLACK = 1e-9


class CoulombMode(Enum):
    """Treatment of the Coulomb distortion of an outgoing charged lepton."""

    NO_CORRECTION = "none"
    FERMI_FUNCTION = "Fermi"
    EMA = "EMA"
    MEMA = "MEMA"
    FERMI_AND_EMA = "Fermi-EMA"
    FERMI_AND_MEMA = "Fermi-MEMA"

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, name: str) -> "CoulombMode":
        for mode in cls:
            if mode.value == name:
                return mode
        raise ValueError(f"Unrecognized Coulomb correction mode '{name}'")


@register_reaction_type(
    ProcessType.NEUTRINO_CC, ProcessType.ANTINEUTRINO_CC, ProcessType.NC
)
class NuclearReaction(Reaction):
    """
    Neutrino-nucleus reaction a + (Z, A) -> c + (Zf, A).

    Args:
        pdg_a: Projectile PDG code
        pdg_b: Nuclear PDG code of the target atom
        matrix_elements: Matrix elements sorted by level energy; a tuple
            is shared as-is with other reactions
        process_type: NeutrinoCC, AntiNeutrinoCC or NC
        mass_table: Mass table used for the particle and atomic masses
        coulomb_mode: Coulomb correction for charged-current reactions
        projectile_mass: Overrides the tabulated projectile mass [MeV]

    Raises:
        ReactionError: If the projectile cannot take part in the process
        ValueError: If the matrix elements are not sorted
    """

    allowed_process_types = (
        ProcessType.NEUTRINO_CC,
        ProcessType.ANTINEUTRINO_CC,
        ProcessType.NC,
    )

    def __init__(
        self,
        pdg_a: int,
        pdg_b: int,
        matrix_elements: Sequence[MatrixElement],
        process_type: ProcessType,
        mass_table: Optional[MassTable] = None,
        coulomb_mode: CoulombMode = CoulombMode.FERMI_AND_EMA,
        projectile_mass: Optional[float] = None,
    ):
        if process_type not in self.allowed_process_types:
            raise ReactionError(
                f"{type(self).__name__} does not handle {process_type} reactions"
            )
        if pdg_a not in get_projectiles(process_type):
            raise ReactionError(
                f"Projectile {pdg_a} does not participate in {process_type} reactions"
            )

        self.process_type = process_type
        self.coulomb_mode = CoulombMode(coulomb_mode)
        self.matrix_elements = make_matrix_element_table(matrix_elements)
        self._constants = PhysicalConstants()
        mass_table = mass_table or MassTable()

        self.Zi = get_particle_Z(pdg_b)
        self.Ai = get_particle_A(pdg_b)
        if process_type is ProcessType.ANTINEUTRINO_CC:
            self.Zf, q_d = self.Zi - 1, -1
        elif process_type is ProcessType.NC:
            self.Zf, q_d = self.Zi, 0
        else:
            self.Zf, q_d = self.Zi + 1, 1
        self.Af = self.Ai
        if self.Zf < 0 or self.Zf > self.Af:
            raise ReactionError(
                f"{process_type} scattering on {nuclide_symbol(self.Zi, self.Ai)} "
                "gives an unphysical residue"
            )

        pdg_c = get_ejectile_pdg(pdg_a, process_type)
        pdg_d = get_nucleus_pid(self.Zf, self.Af)

        ma = projectile_mass if projectile_mass is not None else mass_table.get_particle_mass(pdg_a)
        mb = mass_table.get_atomic_mass(pdg_b)
        mc = mass_table.get_particle_mass(pdg_c)
        # An ionized residue loses (or gains) electrons relative to the atom
        md_gs = mass_table.get_atomic_mass(pdg_d) - q_d * mass_table.get_particle_mass(ELECTRON)

        super().__init__(pdg_a, pdg_b, pdg_c, pdg_d, ma, mb, mc, md_gs, qb=0, qd=q_d)

    @property
    def description(self) -> str:
        text = (
            f"{particle_symbol(self.pdg_a)} + {nuclide_symbol(self.Zi, self.Ai)}"
            f" --> {particle_symbol(self.pdg_c)} + {nuclide_symbol(self.Zf, self.Af)}"
        )
        if any(me.level_energy > 0.0 for me in self.matrix_elements):
            return text + "*"
        return text + " (g.s.)"

    def atomic_target(self) -> TargetAtom:
        return TargetAtom(self.pdg_b)

    def max_level_energy(self, KEa: float) -> float:
        """
        Highest residue excitation energy reachable at this energy [MeV].

        E_max = sqrt((ma + mb)^2 + 2 mb KEa) - mc - md_gs
        """
        return (
            math.sqrt((self.ma + self.mb) ** 2 + 2.0 * self.mb * KEa)
            - self.mc
            - self.md_gs
        )

    def weak_nuclear_charge(self) -> float:
        """Qw = N - (1 - 4 sin^2 theta_W) Z of the target nucleus."""
        N = self.Ai - self.Zi
        return N - (1.0 - 4.0 * self._constants.SIN2_THETA_W) * self.Zi

    def coulomb_correction_factor(self, beta_rel_cd: float) -> float:
        """
        Coulomb correction for the outgoing charged lepton.

        The hybrid modes use the Fermi function when the (M)EMA is not
        valid and otherwise whichever factor is closer to unity.

        Args:
            beta_rel_cd: Relative speed of the ejectile and the residue

        Raises:
            ReactionError: If EMA or MEMA is requested where it is invalid
        """
        mode = self.coulomb_mode
        if mode is CoulombMode.NO_CORRECTION:
            return 1.0

        c_is_lepton = self.pdg_c > 0
        if mode is CoulombMode.FERMI_FUNCTION:
            return fermi_function(self.Zf, self.Af, beta_rel_cd, self.mc, c_is_lepton)

        F_ema, F_mema, ok = ema_factors(
            self.Zf, self.Af, beta_rel_cd, self.mc, c_is_lepton
        )
        if mode in (CoulombMode.EMA, CoulombMode.MEMA):
            if not ok:
                raise ReactionError(
                    f"{mode} Coulomb correction is invalid for {self.description} "
                    f"at beta_rel = {beta_rel_cd}"
                )
            return F_ema if mode is CoulombMode.EMA else F_mema

        F_fermi = fermi_function(self.Zf, self.Af, beta_rel_cd, self.mc, c_is_lepton)
        if not ok:
            logger.debug(
                "%s Coulomb correction is invalid at beta_rel = %g; using the Fermi function",
                mode, beta_rel_cd,
            )
            return F_fermi
        F_approx = F_ema if mode is CoulombMode.FERMI_AND_EMA else F_mema
        if abs(F_fermi - 1.0) < abs(F_approx - 1.0):
            return F_fermi
        return F_approx

    def level_xs(self, me: MatrixElement, KEa: float) -> Tuple[float, float]:
        """
        Partial cross section for the transition to one level.

        sigma = GF^2 / pi (Eb Ed / s) Ec pc B, times Vud^2 F_C for
        charged-current reactions and Qw^2 / 4 for neutral-current Fermi
        transitions. All energies are in the CM frame.

        Returns:
            Tuple of (partial cross section [MeV^-2], ejectile CM speed)
        """
        c = self._constants
        s = (self.ma + self.mb) ** 2 + 2.0 * self.mb * KEa
        sqrt_s = math.sqrt(s)

        Eb_cm = (s + self.mb ** 2 - self.ma ** 2) / (2.0 * sqrt_s)
        md2 = (self.md_gs + me.level_energy) ** 2
        Ec_cm = (s + self.mc ** 2 - md2) / (2.0 * sqrt_s)
        pc_cm = real_sqrt(Ec_cm ** 2 - self.mc ** 2)
        if pc_cm == 0.0:
            return 0.0, 0.0
        Ed_cm = sqrt_s - Ec_cm
        beta_c_cm = pc_cm / Ec_cm

        xs = c.GF ** 2 / math.pi * (Eb_cm * Ed_cm / s) * Ec_cm * pc_cm * me.strength

        if self.process_type in (ProcessType.NEUTRINO_CC, ProcessType.ANTINEUTRINO_CC):
            pc_dot_pd = Ed_cm * Ec_cm + pc_cm ** 2
            beta_rel_cd = real_sqrt(pc_dot_pd ** 2 - self.mc ** 2 * md2) / pc_dot_pd
            xs *= c.VUD ** 2 * self.coulomb_correction_factor(beta_rel_cd)
        elif self.process_type is ProcessType.NC:
            if me.me_type is MatrixElementType.FERMI:
                xs *= 0.25 * self.weak_nuclear_charge() ** 2
        else:
            raise ReactionError(f"Unrecognized process type {self.process_type}")

        return xs, beta_c_cm

    def cos_theta_pdf(self, me: MatrixElement, cos_theta: float, beta_c_cm: float) -> float:
        """Angular distribution of the ejectile for one matrix element."""
        return me.cos_theta_pdf(cos_theta, beta_c_cm)

    def max_cos_theta_pdf(self, me: MatrixElement, beta_c_cm: float) -> float:
        return me.cos_theta_pdf(me.max_cos_theta(), beta_c_cm)

    def summed_xs_helper(
        self,
        pdg_a: int,
        KEa: float,
        cos_theta_c_cm: float = 0.0,
        level_xs: Optional[List[float]] = None,
        differential: bool = False,
    ) -> float:
        """
        Sum partial cross sections over the accessible levels.

        Levels are visited in order of increasing energy until the first
        one above max_level_energy(KEa). NaN partial cross sections are
        logged and treated as zero.

        Args:
            pdg_a: Projectile PDG code
            KEa: Projectile lab kinetic energy [MeV]
            cos_theta_c_cm: Ejectile CM scattering cosine (differential only)
            level_xs: If given, receives one partial cross section per
                accessible matrix element, aligned with matrix_elements
            differential: Return d(sigma)/d(cos theta) instead of sigma

        Returns:
            Summed cross section [MeV^-2]
        """
        if pdg_a != self.pdg_a:
            return 0.0
        if differential and abs(cos_theta_c_cm) > 1.0:
            return 0.0
        if KEa <= 0.0:
            return 0.0

        max_E_level = self.max_level_energy(KEa)
        total = 0.0
        for me in self.matrix_elements:
            if me.level_energy > max_E_level + LEVEL_ENERGY_SLACK:
                break

            xs = 0.0
            if me.strength != 0.0:
                xs, beta_c_cm = self.level_xs(me, KEa)
                if math.isnan(xs):
                    logger.warning(
                        "Partial cross section for %s to the level at %g MeV "
                        "gave NaN at KEa = %g MeV; using zero",
                        self.description, me.level_energy, KEa,
                    )
                    xs = 0.0
                elif differential:
                    xs *= self.cos_theta_pdf(me, cos_theta_c_cm, beta_c_cm)

            if level_xs is not None:
                level_xs.append(xs)
            total += xs

        return total

    def total_xs(self, pdg_a: int, KEa: float) -> float:
        return self.summed_xs_helper(pdg_a, KEa)

    def diff_xs(self, pdg_a: int, KEa: float, cos_theta_c_cm: float) -> float:
        return self.summed_xs_helper(pdg_a, KEa, cos_theta_c_cm, differential=True)

    def sample_spin_parity(
        self, me: MatrixElement, E_level: float, generator: "Generator"
    ) -> Tuple[int, Parity]:
        """
        Spin and parity of the residue after the transition.

        A known discrete level fixes both. Otherwise Fermi transitions keep
        the target ground-state spin-parity, and Gamow-Teller transitions
        keep its parity and change J by at most one unit, weighted by the
        residue level density (a spin-zero target always gives J = 1).
        """
        if me.level is not None:
            return me.level.twoJ, me.level.parity

        sdb = generator.structure_db
        twoJ_gs, P_gs = sdb.get_gs_spin_parity(self.pdg_b)

        if me.me_type is MatrixElementType.FERMI:
            return twoJ_gs, P_gs
        if me.me_type is not MatrixElementType.GAMOW_TELLER:
            raise ReactionError(f"Unrecognized matrix element type {me.me_type!r}")

        if twoJ_gs == 0:
            return 2, P_gs

        ldm = sdb.get_level_density_model(self.pdg_d)
        allowed_twoJs = list(range(abs(twoJ_gs - 2), twoJ_gs + 3, 2))
        weights = [ldm.level_density(E_level, twoJ, P_gs) for twoJ in allowed_twoJs]
        return allowed_twoJs[generator.discrete_sample(weights)], P_gs

    def create_event(self, pdg_a: int, KEa: float, generator: "Generator") -> Event:
        self.check_projectile(pdg_a)
        self.check_threshold(KEa)

        level_weights: List[float] = []
        self.summed_xs_helper(pdg_a, KEa, level_xs=level_weights)

        if not level_weights:
            raise ReactionError(
                f"Could not create an event for {self.description}: no final "
                f"nuclear levels are kinematically accessible at KEa = {KEa} MeV"
            )
        if sum(level_weights) <= 0.0:
            raise ReactionError(
                f"Could not create an event for {self.description}: all "
                f"accessible levels have vanishing cross section at KEa = {KEa} MeV"
            )

        me = self.matrix_elements[generator.discrete_sample(level_weights)]
        E_level = me.level_energy
        twoJ, parity = self.sample_spin_parity(me, E_level, generator)

        _, Ec_cm, pc_cm, Ed_cm = self.two_two_scatter(KEa, self.md_gs + E_level)
        beta_c_cm = pc_cm / Ec_cm

        cos_theta_c_cm = generator.rejection_sample(
            lambda cos_theta: self.cos_theta_pdf(me, cos_theta, beta_c_cm),
            -1.0,
            1.0,
            self.max_cos_theta_pdf(me, beta_c_cm),
        )
        phi_c_cm = generator.uniform_random_double(0.0, 2.0 * math.pi, False)

        logger.debug(
            "%s: KEa = %g MeV, level at %g MeV (2J = %d, P = %s), cos = %g",
            self.description, KEa, E_level, twoJ, parity, cos_theta_c_cm,
        )

        return self.make_event_object(
            KEa, pc_cm, cos_theta_c_cm, phi_c_cm, Ec_cm, Ed_cm,
            E_level, twoJ, parity,
        )
