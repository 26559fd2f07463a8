"""
Dark Matter Absorption (experimental)

Absorption of a fermionic dark matter particle on a nucleus with
emission of an electron, X + (Z, A) -> e- + (Z+1, A). The transition
amplitude follows a four-fermion effective operator suppressed by a UV
cutoff scale; nuclear structure enters through the same matrix-element
tables used for charged-current neutrino scattering.

This pathway is exploratory and has not been validated against data.
"""

from typing import Optional, Sequence, Tuple
import math

from .constants import PhysicalConstants, DARK_MATTER, NEUTRON, PROTON, PARTICLE_MASSES
from .mass_table import MassTable
from .matrix_element import MatrixElement
from .nuclear_reaction import CoulombMode, NuclearReaction
from .reaction import ProcessType, register_reaction_type
from .utils import real_sqrt


@register_reaction_type(ProcessType.DM)
class DarkMatterReaction(NuclearReaction):
    """
    Fermionic dark matter absorption on a nucleus.

    Args:
        pdg_b: Nuclear PDG code of the target atom
        matrix_elements: Matrix elements sorted by level energy
        dm_mass: Dark matter particle mass [MeV]
        uv_cutoff: Scale of the effective interaction [MeV]
        mass_table: Mass table used for the atomic masses
    """

    allowed_process_types = (ProcessType.DM,)

    def __init__(
        self,
        pdg_b: int,
        matrix_elements: Sequence[MatrixElement],
        dm_mass: float = 10.0,
        uv_cutoff: float = 1.0e6,
        mass_table: Optional[MassTable] = None,
    ):
        if dm_mass <= 0.0:
            raise ValueError(f"Dark matter mass must be positive, got {dm_mass}")
        if uv_cutoff <= 0.0:
            raise ValueError(f"UV cutoff must be positive, got {uv_cutoff}")
        self.uv_cutoff = uv_cutoff
        super().__init__(
            DARK_MATTER,
            pdg_b,
            matrix_elements,
            ProcessType.DM,
            mass_table=mass_table,
            coulomb_mode=CoulombMode.NO_CORRECTION,
            projectile_mass=dm_mass,
        )

    @property
    def dm_mass(self) -> float:
        return self.ma

    def threshold_kinetic_energy(self) -> float:
        """
        Kinetic energy threshold, zero when the dark matter mass alone
        can produce the ground-state residue.
        """
        return max(0.0, super().threshold_kinetic_energy())

    def squared_amplitude(self, Ee: float) -> float:
        """
        Spin-summed squared amplitude of the effective interaction.

        |M|^2 = 4 mn mx / L^4 [Ee (2 mn - mp + 2 mx - Ee) - me^2
                + 2 gA (Ee^2 - me^2)
                + 2 gA^2 (Ee (2 mn + mp + 2 mx - Ee) - me^2)]

        Args:
            Ee: Electron CM energy [MeV]
        """
        mn = PARTICLE_MASSES[NEUTRON]
        mp = PARTICLE_MASSES[PROTON]
        mx = self.ma
        me = self.mc
        g_a = PhysicalConstants.GA
        return (
            4.0 * mn * mx / self.uv_cutoff ** 4
            * (
                Ee * (2.0 * mn - mp + 2.0 * mx - Ee) - me ** 2
                + 2.0 * g_a * (Ee ** 2 - me ** 2)
                + 2.0 * g_a ** 2 * (Ee * (2.0 * mn + mp + 2.0 * mx - Ee) - me ** 2)
            )
        )

    def level_xs(self, me: MatrixElement, KEa: float) -> Tuple[float, float]:
        """
        sigma = B pe |M|^2 / (16 pi mx md^2), with pe the electron CM
        momentum and B the matrix element strength.
        """
        s = (self.ma + self.mb) ** 2 + 2.0 * self.mb * KEa
        sqrt_s = math.sqrt(s)
        md2 = (self.md_gs + me.level_energy) ** 2
        Ec_cm = (s + self.mc ** 2 - md2) / (2.0 * sqrt_s)
        pc_cm = real_sqrt(Ec_cm ** 2 - self.mc ** 2)
        beta_c_cm = pc_cm / Ec_cm

        xs = (
            me.strength * pc_cm * self.squared_amplitude(Ec_cm)
            / (16.0 * math.pi * self.ma * self.md_gs ** 2)
        )
        return xs, beta_c_cm

    def cos_theta_pdf(self, me: MatrixElement, cos_theta: float, beta_c_cm: float) -> float:
        """Electrons are emitted isotropically in the CM frame."""
        return 0.5

    def max_cos_theta_pdf(self, me: MatrixElement, beta_c_cm: float) -> float:
        return 0.5
