"""
Nuclear Transition-Rate Formulas

Pure functions for electromagnetic transitions between nuclear states
and for the Coulomb distortion of outgoing charged leptons:

- Gamma-ray transition classification (electric/magnetic, multipolarity)
- Giant-resonance gamma-ray strength functions (Brink-Axel Lorentzian)
- Weisskopf single-particle partial decay widths
- Fermi function and effective momentum approximation (EMA) factors
"""

from enum import Enum
from typing import Tuple
import logging
import math

from .constants import PhysicalConstants, PARTICLE_MASSES, PROTON
from .errors import InvalidTransitionError
from .particle import Parity
from .utils import double_factorial, nuclear_radius, real_sqrt

logger = logging.getLogger(__name__)

# Conversion from millibarn to MeV^-2
MILLIBARN = 1.0 / PhysicalConstants.MEV2_TO_MB

# Suppression of each additional unit of multipolarity
MULTIPOLE_SUPPRESSION = 8e-4

# Reference gamma energy for the M1 normalization [MeV]
M1_REFERENCE_ENERGY = 7.0


class TransitionType(Enum):
    """Electromagnetic character of a gamma transition."""

    ELECTRIC = "E"
    MAGNETIC = "M"


def determine_gamma_transition_type(
    twoJi: int, Pi: Parity, twoJf: int, Pf: Parity
) -> Tuple[TransitionType, int]:
    """
    Classify the lowest-multipolarity gamma transition between two states.

    The multipolarity is l = 1 when the spins are equal and |Jf - Ji|
    otherwise. The transition is electric when Pi * Pf = (-1)^l and
    magnetic otherwise.

    Args:
        twoJi: Two times the initial spin
        Pi: Initial parity
        twoJf: Two times the final spin
        Pf: Final parity

    Returns:
        Tuple of (transition type, multipolarity l)

    Raises:
        InvalidTransitionError: For 0 -> 0 transitions or half-integer
            changes of spin
    """
    if twoJi == 0 and twoJf == 0:
        raise InvalidTransitionError("0 -> 0 EM transitions are not allowed")

    two_delta_J = abs(twoJf - twoJi)
    if two_delta_J % 2:
        raise InvalidTransitionError(
            f"Unphysical EM transition between nuclear levels with spins "
            f"2*Ji = {twoJi} and 2*Jf = {twoJf}"
        )

    l = 1 if two_delta_J == 0 else two_delta_J // 2
    electric_parity = -1 if l % 2 else 1

    if int(Pi) * int(Pf) == electric_parity:
        return TransitionType.ELECTRIC, l
    return TransitionType.MAGNETIC, l


def transition_type_for(Pi: Parity, Pf: Parity, l: int) -> TransitionType:
    """Character of a multipole-l photon connecting parities Pi and Pf."""
    electric_parity = -1 if l % 2 else 1
    if int(Pi) * int(Pf) == electric_parity:
        return TransitionType.ELECTRIC
    return TransitionType.MAGNETIC


def gamma_strength_function(
    Z: int, A: int, transition_type: TransitionType, l: int, e_gamma: float
) -> float:
    """
    Gamma-ray strength function from the Brink-Axel Lorentzian.

    f_XL = sigma Eg^(3-2l) Gamma^2
           / ((2l+1) pi^2 ((Eg^2 - E_XL^2)^2 + Eg^2 Gamma^2))

    E1 uses the giant dipole resonance systematics, E2 and above the giant
    quadrupole resonance, and M1 the RIPL-2 normalization to E1 at 7 MeV.
    Each multipolarity above the lowest of its kind is suppressed by a
    factor of 8e-4.

    Args:
        Z: Proton number
        A: Mass number
        transition_type: Electric or magnetic
        l: Multipolarity (>= 1)
        e_gamma: Gamma-ray energy [MeV]

    Returns:
        Strength function [MeV^-3]

    Raises:
        ValueError: If l < 1 or the transition type is unknown
    """
    if l < 1:
        raise ValueError(
            f"Invalid multipolarity {l} given for gamma-ray strength "
            "function calculation"
        )

    if transition_type is TransitionType.ELECTRIC:
        if l == 1:
            e_xl = 31.2 * A ** (-1.0 / 3.0) + 20.6 * A ** (-1.0 / 6.0)
            gamma_xl = 0.026 * e_xl ** 1.91
            sigma_xl = 1.2 * 120 * (A - Z) * Z / (A * math.pi * gamma_xl) * MILLIBARN
        else:
            e_xl = 63.0 * A ** (-1.0 / 3.0)
            gamma_xl = 6.11 - 0.012 * A
            sigma_xl = (
                0.00014 * Z ** 2 * e_xl / (A ** (1.0 / 3.0) * gamma_xl) * MILLIBARN
            )
            sigma_xl *= MULTIPOLE_SUPPRESSION ** (l - 2)

    elif transition_type is TransitionType.MAGNETIC:
        e_ref = M1_REFERENCE_ENERGY
        factor_m1 = gamma_strength_function(
            Z, A, TransitionType.ELECTRIC, 1, e_ref
        ) / (0.0588 * A ** 0.878)
        gamma_xl = 4.0
        e_xl = 41.0 * A ** (-1.0 / 3.0)
        sigma_xl = (
            ((e_ref ** 2 - e_xl ** 2) ** 2 + e_ref ** 2 * gamma_xl ** 2)
            * (3.0 * math.pi ** 2 * factor_m1)
            / (e_ref * gamma_xl ** 2)
        )
        sigma_xl *= MULTIPOLE_SUPPRESSION ** (l - 1)

    else:
        raise ValueError(
            f"Invalid transition type {transition_type!r} given for "
            "gamma-ray strength function calculation"
        )

    return (
        sigma_xl
        * e_gamma ** (3 - 2 * l)
        * gamma_xl ** 2
        / (
            (2 * l + 1)
            * math.pi ** 2
            * ((e_gamma ** 2 - e_xl ** 2) ** 2 + e_gamma ** 2 * gamma_xl ** 2)
        )
    )


def weisskopf_partial_decay_width(
    A: int, transition_type: TransitionType, l: int, e_gamma: float
) -> float:
    """
    Weisskopf single-particle estimate of a gamma partial decay width.

    Gamma_E = 2 alpha lambda (R Eg / hbar c)^(2l) Eg
    lambda = (l + 1) / (l ((2l+1)!!)^2) (3 / (l + 3))^2
    Gamma_M = 10 (hbar c / (m_p R))^2 Gamma_E

    Args:
        A: Mass number
        transition_type: Electric or magnetic
        l: Multipolarity (>= 1)
        e_gamma: Gamma-ray energy [MeV]

    Returns:
        Partial width [MeV]
    """
    if l < 1:
        raise ValueError(f"Invalid multipolarity {l} for a Weisskopf estimate")

    constants = PhysicalConstants()
    dfact = double_factorial(2 * l + 1)
    lam = (l + 1) / (l * dfact ** 2) * (3.0 / (l + 3)) ** 2
    R = nuclear_radius(A)

    el_width = (
        2.0 * constants.ALPHA * lam * (R * e_gamma / constants.HBAR_C) ** (2 * l) * e_gamma
    )

    if transition_type is TransitionType.ELECTRIC:
        return el_width
    if transition_type is TransitionType.MAGNETIC:
        mp = PARTICLE_MASSES[PROTON]
        return 10.0 * el_width * (constants.HBAR_C / (mp * R)) ** 2

    raise ValueError(
        f"Invalid transition type {transition_type!r} given for Weisskopf "
        "gamma-ray partial width calculation"
    )


def fermi_function(
    Z_f: int, A_f: int, beta_c: float, m_c: float, c_is_lepton: bool = True
) -> float:
    """
    Fermi function for an outgoing charged lepton.

    F = 2 (1 + s) (2 beta gamma rho m)^(2s - 2) e^(pi eta)
        |Gamma(s + i eta)|^2 / Gamma(1 + 2s)^2

    with s = sqrt(1 - (alpha Zf)^2), rho = r0 Af^(1/3) / hbar c and
    eta = alpha Zf / beta (negated for antileptons). Evaluated in
    logarithms to keep the exponentials finite for slow leptons.

    Args:
        Z_f: Proton number of the final nucleus
        A_f: Mass number of the final nucleus
        beta_c: Speed of the lepton relative to the nucleus
        m_c: Lepton mass [MeV]
        c_is_lepton: True for a negatively charged lepton, False for
            its antiparticle

    Returns:
        Fermi function value (inf or 0 at beta = 0)
    """
    from scipy.special import gammaln, loggamma

    if beta_c <= 0.0:
        return math.inf if c_is_lepton else 0.0

    constants = PhysicalConstants()
    gamma_c = 1.0 / math.sqrt(1.0 - beta_c ** 2)
    alpha_z = constants.ALPHA * Z_f
    s = math.sqrt(1.0 - alpha_z ** 2)
    rho = nuclear_radius(A_f) / constants.HBAR_C
    eta = alpha_z / beta_c
    if not c_is_lepton:
        eta = -eta

    log_f = (
        math.log(2.0 * (1.0 + s))
        + (2.0 * s - 2.0) * math.log(2.0 * beta_c * gamma_c * rho * m_c)
        + math.pi * eta
        + 2.0 * loggamma(complex(s, eta)).real
        - 2.0 * gammaln(1.0 + 2.0 * s)
    )
    return math.exp(log_f)


def ema_factors(
    Z_f: int, A_f: int, beta_rel: float, m_c: float, c_is_lepton: bool = True
) -> Tuple[float, float, bool]:
    """
    Effective momentum approximation factors for an outgoing lepton.

    The lepton is shifted by the Coulomb potential at the center of a
    uniformly charged sphere, Vc = -3 Zf alpha / (2 R) (opposite sign for
    antileptons).

    Args:
        Z_f: Proton number of the final nucleus
        A_f: Mass number of the final nucleus
        beta_rel: Relative speed of the lepton and the nucleus
        m_c: Lepton mass [MeV]
        c_is_lepton: True for a negatively charged lepton

    Returns:
        Tuple of (F_EMA, F_MEMA, ok); ok is False when the effective
        energy falls below the lepton mass
    """
    constants = PhysicalConstants()
    R_nat = nuclear_radius(A_f) / constants.HBAR_C
    Vc = -3.0 * Z_f * constants.ALPHA / (2.0 * R_nat)
    if not c_is_lepton:
        Vc = -Vc

    gamma_rel = 1.0 / math.sqrt(1.0 - beta_rel ** 2)
    E = gamma_rel * m_c
    p = beta_rel * E
    E_eff = E - Vc

    ok = E_eff >= m_c
    if not ok or p <= 0.0:
        return 0.0, 0.0, False

    p_eff = real_sqrt(E_eff ** 2 - m_c ** 2)
    F_ema = (p_eff / p) ** 2
    F_mema = p_eff * E_eff / (p * E)
    return F_ema, F_mema, True
