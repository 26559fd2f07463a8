"""
Particle and Atomic Mass Table

Provides particle masses, experimental atomic masses for a compact set of
nuclides, a liquid-drop fallback for everything else, and the separation
energies and emission thresholds used by the de-excitation model.

Experimental masses: Atomic Mass Evaluation 2016 (AME2016)
"""

from typing import Dict, Optional, Tuple
import logging

from .constants import (
    PhysicalConstants,
    PARTICLE_MASSES,
    FRAGMENTS,
    Fragment,
    NEUTRON,
    ELECTRON,
)
from .errors import MassTableError
from .utils import get_particle_A, get_particle_Z, is_ion, nuclide_symbol

logger = logging.getLogger(__name__)


# Experimental atomic masses [u], keyed by (Z, A)
EXPERIMENTAL_ATOMIC_MASSES: Dict[Tuple[int, int], float] = {
    (1, 1): 1.00782503223,
    (1, 2): 2.01410177812,
    (1, 3): 3.01604927790,
    (2, 3): 3.01602932265,
    (2, 4): 4.00260325413,
    (3, 6): 6.0151228874,
    (3, 7): 7.0160034366,
    (4, 9): 9.012183065,
    (5, 10): 10.01293695,
    (5, 11): 11.00930536,
    (6, 12): 12.0,
    (6, 13): 13.00335483507,
    (7, 14): 14.00307400443,
    (7, 15): 15.00010889888,
    (8, 16): 15.99491461957,
    (8, 17): 16.99913175650,
    (8, 18): 17.99915961286,
    (9, 19): 18.99840316273,
    (16, 34): 33.967867004,
    (16, 35): 34.969032310,
    (16, 36): 35.96708071,
    (17, 35): 34.968852682,
    (17, 36): 35.968306822,
    (17, 37): 36.965902602,
    (17, 38): 37.96801044,
    (17, 39): 38.9680082,
    (17, 40): 39.970415,
    (18, 36): 35.967545105,
    (18, 37): 36.96677632,
    (18, 38): 37.96273211,
    (18, 39): 38.964313,
    (18, 40): 39.9623831237,
    (19, 37): 36.97337589,
    (19, 38): 37.96908112,
    (19, 39): 38.9637064864,
    (19, 40): 39.963998166,
    (20, 40): 39.962590863,
    (32, 74): 73.921177761,
    (32, 75): 74.922858370,
    (32, 76): 75.921402726,
    (33, 75): 74.92159457,
    (33, 76): 75.922392015,
    (82, 208): 207.9766521,
}


class MassTable:
    """
    Particle and atomic masses with a liquid-drop fallback.

    Masses are returned in MeV. Atomic masses include the electrons of a
    neutral atom. When no experimental value is available, the
    Weizsacker semi-empirical mass formula is used if the caller allows
    theoretical values; otherwise MassTableError is raised.

    Attributes:
        atomic_masses: Experimental atomic masses [u] keyed by (Z, A)
    """

    # Weizsacker liquid-drop coefficients [MeV]
    A_VOLUME = 15.75
    A_SURFACE = 17.8
    A_COULOMB = 0.711
    A_ASYMMETRY = 23.7
    A_PAIRING = 11.18

    def __init__(self, atomic_masses: Optional[Dict[Tuple[int, int], float]] = None):
        self._constants = PhysicalConstants()
        self.atomic_masses = dict(EXPERIMENTAL_ATOMIC_MASSES)
        if atomic_masses:
            self.atomic_masses.update(atomic_masses)

    def add_atomic_mass(self, Z: int, A: int, mass_u: float) -> None:
        """Register an experimental atomic mass [u]."""
        if mass_u <= 0.0:
            raise ValueError(f"Atomic mass must be positive, got {mass_u}")
        self.atomic_masses[(Z, A)] = mass_u

    def get_particle_mass(self, pdg: int) -> float:
        """
        Rest mass of an elementary particle or light nucleus.

        Raises:
            MassTableError: If the particle is unknown
        """
        try:
            return PARTICLE_MASSES[pdg]
        except KeyError:
            raise MassTableError(f"Unknown particle with PDG code {pdg}") from None

    def has_experimental_mass(self, Z: int, A: int) -> bool:
        return (Z, A) in self.atomic_masses

    def get_atomic_mass(self, pdg: int, theory_ok: bool = True) -> float:
        """Atomic mass [MeV] of the nuclide with the given nuclear PDG code."""
        if not is_ion(pdg) and pdg not in (2212, 2112):
            raise MassTableError(f"PDG code {pdg} does not describe a nucleus")
        return self.get_atomic_mass_za(get_particle_Z(pdg), get_particle_A(pdg), theory_ok)

    def get_atomic_mass_za(self, Z: int, A: int, theory_ok: bool = True) -> float:
        """
        Atomic mass [MeV] of the neutral atom with Z protons and A nucleons.

        Args:
            Z: Proton number
            A: Mass number
            theory_ok: Allow the liquid-drop fallback

        Raises:
            MassTableError: If no experimental mass exists and theory_ok
                is False
        """
        if Z == 0 and A == 1:
            return self.get_particle_mass(NEUTRON)

        mass_u = self.atomic_masses.get((Z, A))
        if mass_u is not None:
            return mass_u * self._constants.AMU

        if not theory_ok:
            raise MassTableError(
                f"No experimental atomic mass for {nuclide_symbol(Z, A)}"
            )
        logger.debug("Using liquid-drop mass for %s", nuclide_symbol(Z, A))
        return self.liquid_drop_atomic_mass(Z, A)

    def liquid_drop_binding_energy(self, Z: int, A: int) -> float:
        """
        Binding energy [MeV] from the semi-empirical mass formula.

        B = aV A - aS A^(2/3) - aC Z (Z - 1) / A^(1/3)
            - aA (A - 2Z)^2 / A + delta
        """
        if A < 1 or Z < 0 or Z > A:
            raise ValueError(f"Invalid nuclide Z = {Z}, A = {A}")

        N = A - Z
        if Z % 2 == 0 and N % 2 == 0:
            delta = self.A_PAIRING / A ** 0.5
        elif Z % 2 == 1 and N % 2 == 1:
            delta = -self.A_PAIRING / A ** 0.5
        else:
            delta = 0.0

        return (
            self.A_VOLUME * A
            - self.A_SURFACE * A ** (2.0 / 3.0)
            - self.A_COULOMB * Z * (Z - 1) / A ** (1.0 / 3.0)
            - self.A_ASYMMETRY * (A - 2 * Z) ** 2 / A
            + delta
        )

    def liquid_drop_atomic_mass(self, Z: int, A: int) -> float:
        """Atomic mass [MeV] predicted by the liquid-drop model."""
        m_hydrogen = self.atomic_masses[(1, 1)] * self._constants.AMU
        m_neutron = self.get_particle_mass(NEUTRON)
        return (
            Z * m_hydrogen + (A - Z) * m_neutron
            - self.liquid_drop_binding_energy(Z, A)
        )

    def get_binding_energy(self, Z: int, A: int, theory_ok: bool = True) -> float:
        """Nuclear binding energy [MeV] derived from the atomic mass."""
        m_hydrogen = self.atomic_masses[(1, 1)] * self._constants.AMU
        m_neutron = self.get_particle_mass(NEUTRON)
        return (
            Z * m_hydrogen + (A - Z) * m_neutron
            - self.get_atomic_mass_za(Z, A, theory_ok)
        )

    def get_shell_correction(self, Z: int, A: int) -> float:
        """
        Difference between the experimental and liquid-drop mass [MeV].

        Zero when no experimental mass is tabulated.
        """
        if not self.has_experimental_mass(Z, A):
            return 0.0
        return (
            self.get_atomic_mass_za(Z, A, theory_ok=False)
            - self.liquid_drop_atomic_mass(Z, A)
        )

    def get_fragment_mass(self, fragment_pdg: int) -> float:
        """Atomic mass of a fragment (bare mass for the neutron) [MeV]."""
        if fragment_pdg == NEUTRON:
            return self.get_particle_mass(NEUTRON)
        return self.get_atomic_mass(fragment_pdg)

    def get_fragment_separation_energy(
        self, Z: int, A: int, fragment_pdg: int, theory_ok: bool = True
    ) -> float:
        """
        Energy needed to remove a fragment from the nucleus (Z, A).

        Sa = M(Z - Za, A - Aa) + M(fragment) - M(Z, A), using atomic masses.

        Args:
            Z: Proton number of the mother nucleus
            A: Mass number of the mother nucleus
            fragment_pdg: PDG code of the emitted fragment
            theory_ok: Allow liquid-drop masses

        Returns:
            Separation energy [MeV]
        """
        Za = get_particle_Z(fragment_pdg)
        Aa = get_particle_A(fragment_pdg)
        Zf = Z - Za
        Af = A - Aa
        if Zf < 0 or Af < 1 or Zf > Af:
            raise MassTableError(
                f"Cannot remove fragment {fragment_pdg} from {nuclide_symbol(Z, A)}"
            )
        return (
            self.get_atomic_mass_za(Zf, Af, theory_ok)
            + self.get_fragment_mass(fragment_pdg)
            - self.get_atomic_mass_za(Z, A, theory_ok)
        )

    def coulomb_barrier(self, Z: int, A: int, fragment: Fragment) -> float:
        """
        Height of the Coulomb barrier seen by an emitted fragment [MeV].

        Vc = Zf Za alpha hbar c / (r0 (Af^(1/3) + Aa^(1/3)))
        """
        Zf = Z - fragment.Z
        Af = A - fragment.A
        if fragment.Z == 0 or Zf <= 0:
            return 0.0
        c = self._constants
        radius = c.R0 * (Af ** (1.0 / 3.0) + fragment.A ** (1.0 / 3.0))
        return Zf * fragment.Z * c.ALPHA * c.HBAR_C / radius

    def get_fragment_emission_threshold(
        self, Z: int, A: int, fragment: Fragment
    ) -> float:
        """
        Approximate excitation energy above which a fragment can escape.

        Separation energy plus the Coulomb barrier for charged fragments.
        """
        Sa = self.get_fragment_separation_energy(Z, A, fragment.pdg)
        return Sa + self.coulomb_barrier(Z, A, fragment)

    def get_unbound_threshold(self, Z: int, A: int) -> float:
        """Lowest fragment emission threshold of the nucleus (Z, A) [MeV]."""
        thresholds = []
        for fragment in FRAGMENTS:
            if Z - fragment.Z < 0 or A - fragment.A < 1 or Z - fragment.Z > A - fragment.A:
                continue
            thresholds.append(self.get_fragment_emission_threshold(Z, A, fragment))
        if not thresholds:
            return float("inf")
        return min(thresholds)

    @property
    def electron_mass(self) -> float:
        return PARTICLE_MASSES[ELECTRON]
