"""
Physical Constants and Particle Data for Event Generation

This module contains fundamental physical constants, Particle Data Group
(PDG) codes, particle masses and the table of light nuclear fragments
needed by the reaction and de-excitation models.

All energies and masses are in MeV, lengths in fm and cross sections
in MeV^-2 unless stated otherwise (natural units with hbar = c = 1).
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class PhysicalConstants:
    """Fundamental constants used by the cross-section and decay models."""

    # Fermi coupling constant [MeV^-2]
    GF: float = 1.16637e-11

    # CKM matrix element V_ud
    VUD: float = 0.97427

    # Weak mixing angle sin^2(theta_W)
    SIN2_THETA_W: float = 0.23155

    # Fine-structure constant
    ALPHA: float = 7.2973525698e-3

    # Conversion constant hbar*c [MeV fm]
    HBAR_C: float = 197.3269718

    # Nuclear radius parameter r0 [fm]
    R0: float = 1.2

    # Atomic mass unit [MeV]
    AMU: float = 931.4940954

    # Axial-vector coupling of the nucleon
    GA: float = 1.2694

    # Conversion from MeV^-2 to cm^2
    MEV2_TO_CM2: float = 3.8937937e-22

    # Conversion from MeV^-2 to millibarn
    MEV2_TO_MB: float = 3.89379338e5


# Particle Data Group codes
PHOTON = 22
ELECTRON = 11
POSITRON = -11
ELECTRON_NEUTRINO = 12
ELECTRON_ANTINEUTRINO = -12
MUON = 13
ANTIMUON = -13
MUON_NEUTRINO = 14
MUON_ANTINEUTRINO = -14
TAU = 15
ANTITAU = -15
TAU_NEUTRINO = 16
TAU_ANTINEUTRINO = -16
DARK_MATTER = 17
NEUTRON = 2112
PROTON = 2212
DEUTERON = 1000010020
TRITON = 1000010030
HELION = 1000020030
ALPHA_PARTICLE = 1000020040

NEUTRINOS = (
    ELECTRON_NEUTRINO,
    ELECTRON_ANTINEUTRINO,
    MUON_NEUTRINO,
    MUON_ANTINEUTRINO,
    TAU_NEUTRINO,
    TAU_ANTINEUTRINO,
)

CHARGED_LEPTONS = (ELECTRON, POSITRON, MUON, ANTIMUON, TAU, ANTITAU)

# Particle rest masses [MeV]
PARTICLE_MASSES: Dict[int, float] = {
    PHOTON: 0.0,
    ELECTRON: 0.5109989461,
    POSITRON: 0.5109989461,
    MUON: 105.6583745,
    ANTIMUON: 105.6583745,
    TAU: 1776.86,
    ANTITAU: 1776.86,
    ELECTRON_NEUTRINO: 0.0,
    ELECTRON_ANTINEUTRINO: 0.0,
    MUON_NEUTRINO: 0.0,
    MUON_ANTINEUTRINO: 0.0,
    TAU_NEUTRINO: 0.0,
    TAU_ANTINEUTRINO: 0.0,
    NEUTRON: 939.5654133,
    PROTON: 938.2720813,
    DEUTERON: 1875.612928,
    TRITON: 2808.921112,
    HELION: 2808.391586,
    ALPHA_PARTICLE: 3727.379378,
}

# Electric charges in units of the proton charge
PARTICLE_CHARGES: Dict[int, int] = {
    PHOTON: 0,
    ELECTRON: -1,
    POSITRON: 1,
    MUON: -1,
    ANTIMUON: 1,
    TAU: -1,
    ANTITAU: 1,
    NEUTRON: 0,
    PROTON: 1,
    DEUTERON: 1,
    TRITON: 1,
    HELION: 2,
    ALPHA_PARTICLE: 2,
}

PARTICLE_SYMBOLS: Dict[int, str] = {
    PHOTON: "gamma",
    ELECTRON: "e-",
    POSITRON: "e+",
    MUON: "mu-",
    ANTIMUON: "mu+",
    TAU: "tau-",
    ANTITAU: "tau+",
    ELECTRON_NEUTRINO: "ve",
    ELECTRON_ANTINEUTRINO: "vebar",
    MUON_NEUTRINO: "vu",
    MUON_ANTINEUTRINO: "vubar",
    TAU_NEUTRINO: "vtau",
    TAU_ANTINEUTRINO: "vtaubar",
    DARK_MATTER: "X",
    NEUTRON: "n",
    PROTON: "p",
    DEUTERON: "d",
    TRITON: "t",
    HELION: "h",
    ALPHA_PARTICLE: "a",
}

ELEMENT_SYMBOLS: Tuple[str, ...] = (
    "n", "H", "He", "Li", "Be", "B", "C", "N", "O", "F", "Ne",
    "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar", "K", "Ca",
    "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni", "Cu", "Zn",
    "Ga", "Ge", "As", "Se", "Br", "Kr", "Rb", "Sr", "Y", "Zr",
    "Nb", "Mo", "Tc", "Ru", "Rh", "Pd", "Ag", "Cd", "In", "Sn",
    "Sb", "Te", "I", "Xe", "Cs", "Ba", "La", "Ce", "Pr", "Nd",
    "Pm", "Sm", "Eu", "Gd", "Tb", "Dy", "Ho", "Er", "Tm", "Yb",
    "Lu", "Hf", "Ta", "W", "Re", "Os", "Ir", "Pt", "Au", "Hg",
    "Tl", "Pb", "Bi", "Po", "At", "Rn", "Fr", "Ra", "Ac", "Th",
    "Pa", "U", "Np", "Pu", "Am", "Cm", "Bk", "Cf", "Es", "Fm",
    "Md", "No", "Lr", "Rf", "Db", "Sg", "Bh", "Hs", "Mt", "Ds",
    "Rg", "Cn", "Nh", "Fl", "Mc", "Lv", "Ts", "Og",
)


@dataclass(frozen=True)
class Fragment:
    """
    A light nuclear fragment that may be emitted during de-excitation.

    Attributes:
        pdg: PDG code of the fragment
        two_s: Two times the fragment spin
        parity: Intrinsic parity (+1 or -1)
        Z: Proton number
        A: Mass number
    """

    pdg: int
    two_s: int
    parity: int
    Z: int
    A: int


# Fragments considered by the statistical decay model
FRAGMENTS: Tuple[Fragment, ...] = (
    Fragment(NEUTRON, 1, 1, 0, 1),
    Fragment(PROTON, 1, 1, 1, 1),
    Fragment(DEUTERON, 2, 1, 1, 2),
    Fragment(TRITON, 1, 1, 1, 3),
    Fragment(HELION, 1, 1, 2, 3),
    Fragment(ALPHA_PARTICLE, 0, 1, 2, 4),
)

# Maximum orbital angular momentum for fragment emission
FRAGMENT_L_MAX = 5

# Maximum multipolarity for continuum gamma emission
GAMMA_L_MAX = 5

# Default continuum bin width [MeV]
DEFAULT_CONTBIN_WIDTH = 0.1

# Default number of Clenshaw-Curtis subintervals per continuum bin
DEFAULT_CONTBIN_NUM_SUBS = 1
