"""
Particles and Events

An Event owns every Particle it contains in a flat list (the arena).
Particles refer to their parent and children by index into that list,
which keeps the decay tree free of reference cycles.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional
import math

import numpy as np

from .utils import particle_symbol


class Parity(IntEnum):
    """Nuclear parity, multiplied like the signs it represents."""

    POSITIVE = 1
    NEGATIVE = -1

    def __mul__(self, other):
        return Parity(int(self) * int(other))

    __rmul__ = __mul__

    def __neg__(self):
        return Parity(-int(self))

    def __str__(self):
        return "+" if self is Parity.POSITIVE else "-"

    @classmethod
    def from_sign(cls, value: int) -> "Parity":
        """Build a parity from any nonzero signed integer."""
        if value == 0:
            raise ValueError("Parity must be built from a nonzero integer")
        return cls.POSITIVE if value > 0 else cls.NEGATIVE


class ParticleRole(Enum):
    """Role of a particle within an event."""

    PROJECTILE = "projectile"
    TARGET = "target"
    EJECTILE = "ejectile"
    RESIDUE = "residue"
    SECONDARY = "secondary"


@dataclass
class Particle:
    """
    A particle with a four-momentum.

    Attributes:
        pdg: PDG particle code
        total_energy: Total energy [MeV]
        px, py, pz: Momentum components [MeV]
        mass: Rest mass [MeV]
        charge: Net charge in units of the proton charge
    """

    pdg: int
    total_energy: float = 0.0
    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    mass: float = 0.0
    charge: int = 0
    index: int = -1
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)

    def __post_init__(self):
        if self.mass < 0.0:
            raise ValueError(f"Particle mass must be non-negative, got {self.mass}")

    @property
    def momentum_magnitude(self) -> float:
        return math.sqrt(self.px ** 2 + self.py ** 2 + self.pz ** 2)

    @property
    def kinetic_energy(self) -> float:
        """Kinetic energy [MeV], clamped at zero."""
        return max(0.0, self.total_energy - self.mass)

    @property
    def momentum(self) -> np.ndarray:
        return np.array([self.px, self.py, self.pz])

    @property
    def four_momentum(self) -> np.ndarray:
        """Four-momentum (E, px, py, pz) [MeV]."""
        return np.array([self.total_energy, self.px, self.py, self.pz])

    @property
    def invariant_mass(self) -> float:
        """sqrt(E^2 - p^2), clamped at zero."""
        m2 = self.total_energy ** 2 - (self.px ** 2 + self.py ** 2 + self.pz ** 2)
        return math.sqrt(max(0.0, m2))

    def set_four_momentum(self, E: float, px: float, py: float, pz: float) -> None:
        self.total_energy = E
        self.px = px
        self.py = py
        self.pz = pz

    def __str__(self):
        return (
            f"{particle_symbol(self.pdg)} E = {self.total_energy:.6g} MeV, "
            f"p = ({self.px:.6g}, {self.py:.6g}, {self.pz:.6g}) MeV"
        )


@dataclass
class Event:
    """
    A generated reaction and its de-excitation products.

    The initial state holds the projectile and the target; the final state
    holds the ejectile, the residue and any secondaries emitted by the
    de-excitation cascade, in creation order.

    Attributes:
        excitation_energy: Residue excitation energy at creation [MeV]
        twoJ: Two times the residue spin at creation
        parity: Residue parity at creation
        reaction: Reaction that produced the event
    """

    excitation_energy: float = 0.0
    twoJ: int = 0
    parity: Parity = Parity.POSITIVE
    reaction: Optional[object] = field(default=None, repr=False)
    particles: List[Particle] = field(default_factory=list)
    initial: List[int] = field(default_factory=list)
    final: List[int] = field(default_factory=list)
    roles: Dict[int, ParticleRole] = field(default_factory=dict)

    def _adopt(self, particle: Particle, role: ParticleRole) -> Particle:
        particle.index = len(self.particles)
        self.particles.append(particle)
        self.roles[particle.index] = role
        return particle

    def add_initial_particle(
        self, particle: Particle, role: ParticleRole
    ) -> Particle:
        """Add a particle to the initial state."""
        self._adopt(particle, role)
        self.initial.append(particle.index)
        return particle

    def add_final_particle(
        self,
        particle: Particle,
        role: ParticleRole = ParticleRole.SECONDARY,
        parent: Optional[Particle] = None,
    ) -> Particle:
        """
        Add a particle to the final state.

        Args:
            particle: Particle to add (its index is assigned here)
            role: Role of the particle in the event
            parent: Optional particle that emitted this one

        Returns:
            The added particle
        """
        self._adopt(particle, role)
        self.final.append(particle.index)
        if parent is not None:
            particle.parent = parent.index
            parent.children.append(particle.index)
        return particle

    def _first_with_role(self, role: ParticleRole) -> Optional[Particle]:
        for i, r in self.roles.items():
            if r is role:
                return self.particles[i]
        return None

    @property
    def projectile(self) -> Optional[Particle]:
        return self._first_with_role(ParticleRole.PROJECTILE)

    @property
    def target(self) -> Optional[Particle]:
        return self._first_with_role(ParticleRole.TARGET)

    @property
    def ejectile(self) -> Optional[Particle]:
        return self._first_with_role(ParticleRole.EJECTILE)

    @property
    def residue(self) -> Optional[Particle]:
        return self._first_with_role(ParticleRole.RESIDUE)

    @property
    def initial_particles(self) -> List[Particle]:
        return [self.particles[i] for i in self.initial]

    @property
    def final_particles(self) -> List[Particle]:
        return [self.particles[i] for i in self.final]

    def role_of(self, particle: Particle) -> ParticleRole:
        return self.roles[particle.index]

    def children_of(self, particle: Particle) -> List[Particle]:
        return [self.particles[i] for i in particle.children]

    def total_final_four_momentum(self) -> np.ndarray:
        """Sum of the four-momenta of all final-state particles."""
        total = np.zeros(4)
        for p in self.final_particles:
            total += p.four_momentum
        return total

    def total_initial_four_momentum(self) -> np.ndarray:
        total = np.zeros(4)
        for p in self.initial_particles:
            total += p.four_momentum
        return total

    def to_dict(self) -> Dict:
        """Plain-data summary of the event, suitable for JSON output."""

        def particle_record(p: Particle) -> Dict:
            return {
                "pdg": p.pdg,
                "role": self.roles[p.index].value,
                "E": p.total_energy,
                "px": p.px,
                "py": p.py,
                "pz": p.pz,
                "mass": p.mass,
                "charge": p.charge,
                "parent": p.parent,
            }

        return {
            "excitation_energy": self.excitation_energy,
            "twoJ": self.twoJ,
            "parity": int(self.parity),
            "initial": [particle_record(p) for p in self.initial_particles],
            "final": [particle_record(p) for p in self.final_particles],
        }

    def __str__(self):
        lines = [f"Event (Ex = {self.excitation_energy:.6g} MeV)"]
        lines.append("  initial:")
        lines.extend(f"    {p}" for p in self.initial_particles)
        lines.append("  final:")
        lines.extend(f"    {p}" for p in self.final_particles)
        return "\n".join(lines)
