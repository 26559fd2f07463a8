"""
Neutrino-Electron Elastic Scattering

Elastic scattering of neutrinos on atomic electrons, nu + e- -> nu + e-,
at tree level in the Standard Model. The electrons are treated as free
and at rest, so the cross section per atom is Z times the cross section
per electron.
"""

from typing import Optional, TYPE_CHECKING
import math

from .constants import (
    PhysicalConstants,
    ELECTRON,
    ELECTRON_NEUTRINO,
    ELECTRON_ANTINEUTRINO,
    MUON_NEUTRINO,
    MUON_ANTINEUTRINO,
    TAU_NEUTRINO,
    TAU_ANTINEUTRINO,
)
from .errors import ReactionError
from .mass_table import MassTable
from .particle import Event, Parity
from .reaction import ProcessType, Reaction, get_ejectile_pdg, register_reaction_type
from .target import TargetAtom
from .utils import particle_symbol

if TYPE_CHECKING:
    from .generator import Generator

COS_MIN = -1.0
COS_MAX = 1.0


@register_reaction_type(ProcessType.NU_ELECTRON_ELASTIC)
class ElectronReaction(Reaction):
    """
    Neutrino-electron elastic scattering on the electrons of one atom.

    Args:
        pdg_a: Projectile neutrino PDG code
        target_atom_pdg: Nuclear PDG code of the atom hosting the electrons
        mass_table: Mass table used for the particle masses

    Raises:
        ReactionError: If pdg_a is not a neutrino
    """

    process_type = ProcessType.NU_ELECTRON_ELASTIC

    def __init__(
        self,
        pdg_a: int,
        target_atom_pdg: int,
        mass_table: Optional[MassTable] = None,
    ):
        self.atom = TargetAtom(target_atom_pdg)
        mass_table = mass_table or MassTable()

        pdg_c = get_ejectile_pdg(pdg_a, self.process_type)
        super().__init__(
            pdg_a,
            ELECTRON,
            pdg_c,
            ELECTRON,
            mass_table.get_particle_mass(pdg_a),
            mass_table.get_particle_mass(ELECTRON),
            mass_table.get_particle_mass(pdg_c),
            mass_table.get_particle_mass(ELECTRON),
            qb=-1,
            qd=-1,
        )
        self.g1, self.g2 = self.coupling_constants(pdg_a)

    @staticmethod
    def coupling_constants(pdg_a: int):
        """
        Effective couplings (g1, g2) for a neutrino flavour.

        Raises:
            ReactionError: For anything other than a neutrino
        """
        sw2 = PhysicalConstants.SIN2_THETA_W
        if pdg_a == ELECTRON_NEUTRINO:
            return 0.5 + sw2, sw2
        if pdg_a == ELECTRON_ANTINEUTRINO:
            return sw2, 0.5 + sw2
        if pdg_a in (MUON_NEUTRINO, TAU_NEUTRINO):
            return -0.5 + sw2, sw2
        if pdg_a in (MUON_ANTINEUTRINO, TAU_ANTINEUTRINO):
            return sw2, -0.5 + sw2
        raise ReactionError(
            f"Unrecognized projectile PDG code {pdg_a} for neutrino-electron "
            "elastic scattering"
        )

    @property
    def description(self) -> str:
        return (
            f"{particle_symbol(self.pdg_a)} + {particle_symbol(self.pdg_b)} --> "
            f"{particle_symbol(self.pdg_c)} + {particle_symbol(self.pdg_d)}"
        )

    def atomic_target(self) -> TargetAtom:
        return self.atom

    def _cm_energy_and_mass_ratio(self, KEa: float):
        s = (self.ma + self.mb) ** 2 + 2.0 * self.mb * KEa
        Ec_cm = (s + self.mc ** 2 - self.md_gs ** 2) / (2.0 * math.sqrt(s))
        return Ec_cm, self.md_gs ** 2 / s

    def total_xs(self, pdg_a: int, KEa: float) -> float:
        """
        sigma = 4/pi (GF Ec)^2 [g1^2 + (g2^2/3 - g1 g2) me^2/s
                + g2^2/3 (1 + (me^2/s)^2)] Z
        """
        if pdg_a != self.pdg_a or KEa <= 0.0:
            return 0.0
        if KEa < self.threshold_kinetic_energy():
            return 0.0

        Ec_cm, r = self._cm_energy_and_mass_ratio(KEa)
        g1, g2 = self.g1, self.g2
        g2_squared_over_three = g2 * g2 / 3.0
        xs = (
            4.0 / math.pi
            * (PhysicalConstants.GF * Ec_cm) ** 2
            * (
                g1 ** 2
                + (g2_squared_over_three - g1 * g2) * r
                + g2_squared_over_three * (1.0 + r ** 2)
            )
        )
        return xs * self.atom.Z

    def diff_xs(self, pdg_a: int, KEa: float, cos_theta_c_cm: float) -> float:
        """
        d(sigma)/d(cos) = 2/pi (GF Ec)^2 [g1^2 + g1 g2 (me^2/s)(c - 1)
                          + (g2 (1 + (1 - me^2/s)(c - 1)/2))^2] Z
        """
        if pdg_a != self.pdg_a or KEa <= 0.0:
            return 0.0
        if abs(cos_theta_c_cm) > 1.0 or KEa < self.threshold_kinetic_energy():
            return 0.0

        Ec_cm, r = self._cm_energy_and_mass_ratio(KEa)
        g1, g2 = self.g1, self.g2
        c_minus_one = cos_theta_c_cm - 1.0
        terms = (
            g1 ** 2
            + g1 * g2 * r * c_minus_one
            + (g2 * (1.0 + 0.5 * (1.0 - r) * c_minus_one)) ** 2
        )
        return 2.0 / math.pi * (PhysicalConstants.GF * Ec_cm) ** 2 * terms * self.atom.Z

    def max_diff_xs(self, pdg_a: int, KEa: float) -> float:
        """
        Largest value of diff_xs over cos in [-1, 1].

        The angular dependence is a parabola B c'^2 + 2 (A + B) c' + ...
        in c' = c - 1, so the maximum is at an endpoint or at the
        stationary point c = -A / B.
        """
        _, r = self._cm_energy_and_mass_ratio(KEa)
        B = 0.5 * (self.g2 * (1.0 - r)) ** 2
        A = self.g1 * self.g2 * r + self.g2 ** 2 * (1.0 - r) - B

        candidates = [
            self.diff_xs(pdg_a, KEa, COS_MIN),
            self.diff_xs(pdg_a, KEa, COS_MAX),
        ]
        if B != 0.0:
            cth = -A / B
            if COS_MIN <= cth <= COS_MAX:
                candidates.append(self.diff_xs(pdg_a, KEa, cth))
        return max(candidates)

    def create_event(self, pdg_a: int, KEa: float, generator: "Generator") -> Event:
        self.check_projectile(pdg_a)
        self.check_threshold(KEa)

        _, Ec_cm, pc_cm, Ed_cm = self.two_two_scatter(KEa)
        fmax = self.max_diff_xs(pdg_a, KEa)
        if fmax <= 0.0:
            raise ReactionError(
                f"Could not create an event for {self.description}: the "
                f"cross section vanishes at KEa = {KEa} MeV"
            )

        cos_theta_c_cm = generator.rejection_sample(
            lambda c: self.diff_xs(pdg_a, KEa, c), COS_MIN, COS_MAX, fmax
        )
        phi_c_cm = generator.uniform_random_double(0.0, 2.0 * math.pi, False)

        return self.make_event_object(
            KEa, pc_cm, cos_theta_c_cm, phi_c_cm, Ec_cm, Ed_cm,
            0.0, 1, Parity.POSITIVE,
        )
