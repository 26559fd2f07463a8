"""
Incident Particle Sources

Energy spectra of the projectiles that drive the generator:

- MonoenergeticSource: a single energy
- DecayAtRestSource: muon decay-at-rest neutrinos (Michel spectra)
- FermiDiracSource: thermal spectrum, e.g. supernova neutrinos
- HistogramSource: piecewise-constant spectrum from binned data
- GridSource: piecewise-linear spectrum from tabulated points
- DarkMatterSource: monoenergetic dark matter of given mass and speed

Every source exposes pdf(E) normalized to unit area on [E_min, E_max].
"""

from abc import ABC, abstractmethod
from typing import Sequence, TYPE_CHECKING
import math

import numpy as np

from .constants import (
    DARK_MATTER,
    ELECTRON_NEUTRINO,
    MUON_ANTINEUTRINO,
    MUON,
    NEUTRINOS,
    PARTICLE_MASSES,
)
from .utils import num_integrate

if TYPE_CHECKING:
    from .generator import Generator


class NeutrinoSource(ABC):
    """
    Base class for incident projectile spectra.

    Args:
        pdg: PDG code of the emitted projectile

    Raises:
        ValueError: If pdg is not a neutrino (or dark matter, for sources
            that allow it)
    """

    allowed_pdgs = NEUTRINOS

    def __init__(self, pdg: int):
        if pdg not in self.allowed_pdgs:
            raise ValueError(
                f"{type(self).__name__} cannot emit particles with PDG code {pdg}"
            )
        self.pdg = pdg

    @property
    @abstractmethod
    def E_min(self) -> float:
        """Lowest energy emitted [MeV]."""

    @property
    @abstractmethod
    def E_max(self) -> float:
        """Highest energy emitted [MeV]."""

    @abstractmethod
    def pdf(self, E: float) -> float:
        """Probability density of emitting total energy E [MeV^-1]."""

    @property
    def is_monoenergetic(self) -> bool:
        return False

    def sample_incident_energy(self, generator: "Generator") -> float:
        """Draw an energy from the (unweighted) source spectrum."""
        return generator.rejection_sample(self.pdf, self.E_min, self.E_max)


class MonoenergeticSource(NeutrinoSource):
    """Source emitting every projectile with the same total energy."""

    def __init__(self, pdg: int, energy: float):
        super().__init__(pdg)
        if energy < 0.0:
            raise ValueError(f"Source energy must be non-negative, got {energy}")
        self.energy = energy

    @property
    def E_min(self) -> float:
        return self.energy

    @property
    def E_max(self) -> float:
        return self.energy

    @property
    def is_monoenergetic(self) -> bool:
        return True

    def pdf(self, E: float) -> float:
        return 1.0 if E == self.energy else 0.0

    def sample_incident_energy(self, generator: "Generator") -> float:
        return self.energy


class DarkMatterSource(MonoenergeticSource):
    """
    Monoenergetic dark matter with a given mass and speed.

    Args:
        mass: Dark matter particle mass [MeV]
        velocity: Speed in units of c (0 <= v < 1)
    """

    allowed_pdgs = (DARK_MATTER,)

    def __init__(self, mass: float, velocity: float):
        if mass <= 0.0:
            raise ValueError(f"Dark matter mass must be positive, got {mass}")
        if not 0.0 <= velocity < 1.0:
            raise ValueError(f"Dark matter speed must be in [0, 1), got {velocity}")
        self.mass = mass
        self.velocity = velocity
        super().__init__(DARK_MATTER, mass / math.sqrt(1.0 - velocity ** 2))


class DecayAtRestSource(NeutrinoSource):
    """
    Neutrinos from muons decaying at rest.

    electron neutrinos: f(E) = 96 E^2 (m_mu - 2E) / m_mu^4
    muon antineutrinos: f(E) = 16 E^2 (3 m_mu - 4E) / m_mu^4
    on 0 <= E <= m_mu / 2.
    """

    allowed_pdgs = (ELECTRON_NEUTRINO, MUON_ANTINEUTRINO)

    def __init__(self, pdg: int = ELECTRON_NEUTRINO):
        super().__init__(pdg)
        self.m_mu = PARTICLE_MASSES[MUON]

    @property
    def E_min(self) -> float:
        return 0.0

    @property
    def E_max(self) -> float:
        return self.m_mu / 2.0

    def pdf(self, E: float) -> float:
        if E < 0.0 or E > self.E_max:
            return 0.0
        m4 = self.m_mu ** 4
        if self.pdg == ELECTRON_NEUTRINO:
            return 96.0 * E ** 2 * (self.m_mu - 2.0 * E) / m4
        return 16.0 * E ** 2 * (3.0 * self.m_mu - 4.0 * E) / m4


class FermiDiracSource(NeutrinoSource):
    """
    Fermi-Dirac spectrum f(E) ~ E^2 / (1 + exp(E / T - eta)).

    Args:
        pdg: Neutrino PDG code
        temperature: Effective temperature T [MeV]
        eta: Pinching parameter (dimensionless chemical potential)
        E_min: Lower energy bound [MeV]
        E_max: Upper energy bound [MeV]
    """

    def __init__(
        self,
        pdg: int,
        temperature: float,
        eta: float = 0.0,
        E_min: float = 0.0,
        E_max: float = 100.0,
    ):
        super().__init__(pdg)
        if temperature <= 0.0:
            raise ValueError(f"Temperature must be positive, got {temperature}")
        if not 0.0 <= E_min < E_max:
            raise ValueError(f"Invalid energy range [{E_min}, {E_max}]")
        self.temperature = temperature
        self.eta = eta
        self._E_min = E_min
        self._E_max = E_max
        self._norm = 1.0
        self._norm = num_integrate(self.pdf, E_min, E_max, 256)

    @property
    def E_min(self) -> float:
        return self._E_min

    @property
    def E_max(self) -> float:
        return self._E_max

    def pdf(self, E: float) -> float:
        if E < self._E_min or E > self._E_max:
            return 0.0
        x = E / self.temperature - self.eta
        if x > 700.0:
            return 0.0
        return E ** 2 / (1.0 + math.exp(x)) / self._norm


class HistogramSource(NeutrinoSource):
    """
    Piecewise-constant spectrum.

    Args:
        pdg: Neutrino PDG code
        bin_edges: Increasing bin edges [MeV], one more than the weights
        weights: Relative number of neutrinos in each bin
    """

    def __init__(self, pdg: int, bin_edges: Sequence[float], weights: Sequence[float]):
        super().__init__(pdg)
        edges = np.asarray(bin_edges, dtype=float)
        w = np.asarray(weights, dtype=float)
        if edges.ndim != 1 or len(edges) != len(w) + 1 or len(w) == 0:
            raise ValueError("Histogram needs exactly one more bin edge than weights")
        if np.any(np.diff(edges) <= 0.0):
            raise ValueError("Histogram bin edges must be strictly increasing")
        if np.any(w < 0.0) or w.sum() <= 0.0:
            raise ValueError("Histogram weights must be non-negative and not all zero")

        self.bin_edges = edges
        self.weights = w
        self._densities = w / (w.sum() * np.diff(edges))

    @property
    def E_min(self) -> float:
        return float(self.bin_edges[0])

    @property
    def E_max(self) -> float:
        return float(self.bin_edges[-1])

    def pdf(self, E: float) -> float:
        if E < self.bin_edges[0] or E > self.bin_edges[-1]:
            return 0.0
        i = int(np.searchsorted(self.bin_edges, E, side="right")) - 1
        i = min(i, len(self._densities) - 1)
        return float(self._densities[i])


class GridSource(NeutrinoSource):
    """
    Piecewise-linear spectrum through tabulated points.

    Args:
        pdg: Neutrino PDG code
        energies: Increasing grid energies [MeV]
        densities: Relative probability densities at the grid energies
    """

    def __init__(self, pdg: int, energies: Sequence[float], densities: Sequence[float]):
        from scipy.integrate import trapezoid

        super().__init__(pdg)
        E = np.asarray(energies, dtype=float)
        f = np.asarray(densities, dtype=float)
        if E.ndim != 1 or len(E) != len(f) or len(E) < 2:
            raise ValueError("Grid needs at least two energies and matching densities")
        if np.any(np.diff(E) <= 0.0):
            raise ValueError("Grid energies must be strictly increasing")
        if np.any(f < 0.0):
            raise ValueError("Grid densities must be non-negative")
        area = trapezoid(f, E)
        if area <= 0.0:
            raise ValueError("Grid spectrum must have positive area")

        self.energies = E
        self.densities = f / area

    @property
    def E_min(self) -> float:
        return float(self.energies[0])

    @property
    def E_max(self) -> float:
        return float(self.energies[-1])

    def pdf(self, E: float) -> float:
        return float(np.interp(E, self.energies, self.densities, left=0.0, right=0.0))
