"""
Continuum Nuclear Models

Models used by the statistical decay cascade above the discrete levels:

- BackshiftedFermiGasModel: level densities with RIPL-3 global parameters
- TransmissionModel: fragment transmission coefficients (black nucleus
  for neutrons, Hill-Wheeler barrier for charged fragments)
- StandardLorentzianModel: gamma-ray transmission coefficients from the
  Brink-Axel strength functions
"""

from typing import Optional
import math

from .constants import PhysicalConstants, Fragment
from .mass_table import MassTable
from .nuclear_physics import TransitionType, gamma_strength_function
from .particle import Parity


class BackshiftedFermiGasModel:
    """
    Back-shifted Fermi gas level density.

    rho(Ex) = exp(2 sqrt(a U)) / (12 sqrt(2) sigma a^(1/4) U^(5/4)),
    U = Ex - Delta, blended with a constant-temperature-like term
    rho_0 = e a exp(a U) / (12 sigma) so that the density stays finite
    near the back-shift. Spins follow the usual spin-cutoff distribution
    and both parities are equally likely.

    Global parameters from Koning, Hilaire and Goriely, Nucl. Phys. A
    810 (2008) 13.

    Attributes:
        Z: Proton number
        A: Mass number
    """

    ALPHA = 0.0722396
    BETA = 0.195267
    GAMMA_0 = 0.410289
    DELTA_GLOBAL = 0.173015

    def __init__(self, Z: int, A: int, mass_table: Optional[MassTable] = None):
        if A < 1 or Z < 0 or Z > A:
            raise ValueError(f"Invalid nuclide Z = {Z}, A = {A}")
        self.Z = Z
        self.A = A

        a13 = A ** (1.0 / 3.0)
        self.a_tilde = self.ALPHA * A + self.BETA * a13 * a13
        self.gamma = self.GAMMA_0 / a13

        N = A - Z
        if Z % 2 == 0 and N % 2 == 0:
            chi = 1.0
        elif Z % 2 == 1 and N % 2 == 1:
            chi = -1.0
        else:
            chi = 0.0
        self.delta = chi * 12.0 / math.sqrt(A) + self.DELTA_GLOBAL

        self.delta_W = mass_table.get_shell_correction(Z, A) if mass_table else 0.0

        # Spin cutoff in the discrete region
        self.sigma_d2 = (0.83 * A ** 0.26) ** 2

    def level_density_parameter(self, Ex: float) -> float:
        """Energy-dependent level density parameter a(Ex) [MeV^-1]."""
        U = Ex - self.delta
        if abs(U) < 1e-8:
            damping = self.gamma
        else:
            damping = (1.0 - math.exp(-self.gamma * U)) / U
        a = self.a_tilde * (1.0 + self.delta_W * damping)
        # Large negative shell corrections cannot make a unphysical
        return max(a, 0.1 * self.a_tilde)

    def spin_cutoff_squared(self, Ex: float) -> float:
        """sigma^2 of the spin distribution."""
        U = Ex - self.delta
        if U <= 0.0:
            return self.sigma_d2
        a = self.level_density_parameter(Ex)
        sigma_f2 = 0.01389 * self.A ** (5.0 / 3.0) / self.a_tilde * math.sqrt(a * U)
        return max(sigma_f2, self.sigma_d2)

    def level_density(self, Ex: float, twoJ: Optional[int] = None,
                      parity: Optional[Parity] = None) -> float:
        """
        Level density [MeV^-1].

        Args:
            Ex: Excitation energy [MeV]
            twoJ: If given, restrict to levels with this 2J
            parity: If given (with twoJ), restrict to this parity

        Returns:
            Total, spin-resolved or spin-parity-resolved level density
        """
        a = self.level_density_parameter(Ex)
        sigma2 = self.spin_cutoff_squared(Ex)
        sigma = math.sqrt(sigma2)
        U = Ex - self.delta

        rho_0 = math.e * a * math.exp(min(a * U, 700.0)) / (12.0 * sigma)
        if U > 0.0:
            rho_f = math.exp(2.0 * math.sqrt(a * U)) / (
                12.0 * math.sqrt(2.0) * sigma * a ** 0.25 * U ** 1.25
            )
            rho = 1.0 / (1.0 / rho_f + 1.0 / rho_0)
        else:
            rho = rho_0

        if twoJ is None:
            return rho

        J = twoJ / 2.0
        spin_distribution = (2.0 * J + 1.0) / (2.0 * sigma2) * math.exp(
            -((J + 0.5) ** 2) / (2.0 * sigma2)
        )
        rho *= spin_distribution
        if parity is not None:
            rho *= 0.5
        return rho


class TransmissionModel:
    """
    Transmission coefficients for fragments leaving a daughter nucleus.

    Neutrons use the black-nucleus model (complete absorption inside the
    nuclear radius, internal wave number K = sqrt(k^2 + K0^2)) with the
    neutral-particle penetrability recursion. Charged fragments use a
    Hill-Wheeler parabolic barrier whose height combines the Coulomb and
    centrifugal terms.

    Attributes:
        Z: Proton number of the daughter nucleus
        A: Mass number of the daughter nucleus
    """

    # Internal wave number of the black nucleus [fm^-1]
    K0 = 1.0

    # Curvature of the charged-particle barrier [MeV]
    BARRIER_CURVATURE = 1.0

    def __init__(self, Z: int, A: int):
        self.Z = Z
        self.A = A
        self._constants = PhysicalConstants()

    def channel_radius(self, fragment: Fragment) -> float:
        """Interaction radius R = r0 (Af^(1/3) + Aa^(1/3)) [fm]."""
        return self._constants.R0 * (
            self.A ** (1.0 / 3.0) + fragment.A ** (1.0 / 3.0)
        )

    def reduced_mass(self, fragment: Fragment) -> float:
        """Reduced mass of the fragment-daughter system [MeV]."""
        amu = self._constants.AMU
        return fragment.A * self.A * amu / (fragment.A + self.A)

    def transmission_coefficient(self, fragment: Fragment, KE: float, l: int) -> float:
        """
        Transmission coefficient for orbital angular momentum l.

        Args:
            fragment: Emitted fragment
            KE: Kinetic energy of relative motion [MeV]
            l: Orbital angular momentum

        Returns:
            Transmission coefficient in [0, 1]
        """
        if KE <= 0.0:
            return 0.0
        if fragment.Z == 0:
            return self._neutral_transmission(fragment, KE, l)
        return self._charged_transmission(fragment, KE, l)

    def _neutral_transmission(self, fragment: Fragment, KE: float, l: int) -> float:
        mu = self.reduced_mass(fragment)
        R = self.channel_radius(fragment)
        k = math.sqrt(2.0 * mu * KE) / self._constants.HBAR_C
        x = k * R

        P = x
        S = 0.0
        for ll in range(1, l + 1):
            denom = (ll - S) ** 2 + P ** 2
            P, S = x * x * P / denom, x * x * (ll - S) / denom - ll

        X = math.sqrt(k * k + self.K0 ** 2) * R
        return 4.0 * P * X / ((P + X) ** 2 + S ** 2)

    def _charged_transmission(self, fragment: Fragment, KE: float, l: int) -> float:
        c = self._constants
        mu = self.reduced_mass(fragment)
        R = self.channel_radius(fragment)
        coulomb = self.Z * fragment.Z * c.ALPHA * c.HBAR_C / R
        centrifugal = l * (l + 1) * c.HBAR_C ** 2 / (2.0 * mu * R * R)
        exponent = 2.0 * math.pi * (coulomb + centrifugal - KE) / self.BARRIER_CURVATURE
        if exponent > 700.0:
            return 0.0
        return 1.0 / (1.0 + math.exp(exponent))


class StandardLorentzianModel:
    """
    Gamma-ray transmission coefficients T_XL = 2 pi f_XL(Eg) Eg^(2l+1).

    Attributes:
        Z: Proton number
        A: Mass number
    """

    def __init__(self, Z: int, A: int):
        self.Z = Z
        self.A = A

    def strength_function(self, transition_type: TransitionType, l: int,
                          e_gamma: float) -> float:
        return gamma_strength_function(self.Z, self.A, transition_type, l, e_gamma)

    def transmission_coefficient(self, transition_type: TransitionType, l: int,
                                 e_gamma: float) -> float:
        if e_gamma <= 0.0:
            return 0.0
        f = self.strength_function(transition_type, l, e_gamma)
        return 2.0 * math.pi * f * e_gamma ** (2 * l + 1)
