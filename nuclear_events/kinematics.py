"""
Relativistic Kinematics

This module provides the Lorentz boost, the two-body scattering helper
used by every reaction, the two-body decay used by the de-excitation
cascade, and the rotation of finished events into the projectile
direction.

Units: MeV (natural units c = 1).
"""

from typing import Sequence, Tuple, TYPE_CHECKING
import math

import numpy as np

from .particle import Event, Parity, Particle, ParticleRole
from .utils import real_sqrt

if TYPE_CHECKING:
    from .reaction import Reaction


def lorentz_boost(bx: float, by: float, bz: float, particle: Particle) -> None:
    """
    Boost a particle, in place, into a frame moving with velocity beta.

    The particle's four-momentum is re-expressed in a frame that moves
    with velocity (bx, by, bz) relative to the current one. To go from
    a center-of-momentum frame moving with +beta along z back to the lab,
    pass (0, 0, -beta).

    Args:
        bx, by, bz: Frame velocity components (|beta| < 1)
        particle: Particle to transform

    Raises:
        ValueError: If |beta| >= 1
    """
    beta2 = bx * bx + by * by + bz * bz
    if beta2 >= 1.0:
        raise ValueError(f"Boost requires beta^2 < 1, got {beta2}")
    if beta2 == 0.0:
        return

    gamma = 1.0 / math.sqrt(1.0 - beta2)
    E = particle.total_energy
    bp = bx * particle.px + by * particle.py + bz * particle.pz
    factor = (gamma - 1.0) * bp / beta2 - gamma * E

    particle.set_four_momentum(
        gamma * (E - bp),
        particle.px + factor * bx,
        particle.py + factor * by,
        particle.pz + factor * bz,
    )


def two_two_scatter(
    Ea: float, ma: float, mb: float, mc: float, md: float
) -> Tuple[float, float, float, float]:
    """
    Center-of-momentum kinematics for a + b -> c + d with b at rest.

    Mandelstam s = ma^2 + mb^2 + 2 mb Ea
    Ec = (s + mc^2 - md^2) / (2 sqrt(s))
    pc = sqrt(Ec^2 - mc^2), clamped at zero
    Ed = max(sqrt(s) - Ec, md)

    Args:
        Ea: Projectile total energy in the lab frame [MeV]
        ma, mb, mc, md: Masses of projectile, target, ejectile, residue [MeV]

    Returns:
        Tuple of (s, Ec_cm, pc_cm, Ed_cm)
    """
    s = ma * ma + mb * mb + 2.0 * mb * Ea
    sqrt_s = math.sqrt(s)
    Ec_cm = (s + mc * mc - md * md) / (2.0 * sqrt_s)
    pc_cm = real_sqrt(Ec_cm * Ec_cm - mc * mc)
    Ed_cm = max(sqrt_s - Ec_cm, md)
    return s, Ec_cm, pc_cm, Ed_cm


def two_body_decay_momentum(M: float, m1: float, m2: float) -> float:
    """
    Momentum of either product of M -> m1 + m2 in the rest frame of M.

    Returns:
        Momentum magnitude [MeV], zero at or below threshold
    """
    term1 = M * M - (m1 + m2) ** 2
    term2 = M * M - (m1 - m2) ** 2
    return real_sqrt(term1 * term2) / (2.0 * M)


def make_event_object(
    reaction: "Reaction",
    KEa: float,
    pc_cm: float,
    cos_theta_c_cm: float,
    phi_c_cm: float,
    Ec_cm: float,
    Ed_cm: float,
    E_level: float = 0.0,
    twoJ: int = 0,
    parity: Parity = Parity.POSITIVE,
) -> Event:
    """
    Build a lab-frame Event for a + b -> c + d.

    The ejectile direction is given in the center-of-momentum frame
    relative to the projectile direction (+z). Both products are then
    boosted into the lab frame, where the target is at rest.

    Args:
        reaction: Reaction providing the PDG codes, masses and charges
        KEa: Projectile kinetic energy in the lab frame [MeV]
        pc_cm: Ejectile CM momentum [MeV]
        cos_theta_c_cm: Cosine of the ejectile CM polar angle
        phi_c_cm: Ejectile CM azimuthal angle [rad]
        Ec_cm: Ejectile CM total energy [MeV]
        Ed_cm: Residue CM total energy [MeV]
        E_level: Residue excitation energy [MeV]
        twoJ: Two times the residue spin
        parity: Residue parity

    Returns:
        New Event with projectile/target in the initial state and
        ejectile/residue in the final state
    """
    ma, mb, mc = reaction.ma, reaction.mb, reaction.mc
    md = reaction.md_gs + E_level

    Ea = KEa + ma
    pa = real_sqrt(KEa * (KEa + 2.0 * ma))
    beta_z = pa / (Ea + mb)

    sin_theta_c_cm = real_sqrt(1.0 - cos_theta_c_cm ** 2)
    pcx = pc_cm * sin_theta_c_cm * math.cos(phi_c_cm)
    pcy = pc_cm * sin_theta_c_cm * math.sin(phi_c_cm)
    pcz = pc_cm * cos_theta_c_cm

    projectile = Particle(reaction.pdg_a, Ea, 0.0, 0.0, pa, ma, reaction.qa)
    target = Particle(reaction.pdg_b, mb, 0.0, 0.0, 0.0, mb, reaction.qb)
    ejectile = Particle(reaction.pdg_c, Ec_cm, pcx, pcy, pcz, mc, reaction.qc)
    residue = Particle(reaction.pdg_d, Ed_cm, -pcx, -pcy, -pcz, md, reaction.qd)

    lorentz_boost(0.0, 0.0, -beta_z, ejectile)
    lorentz_boost(0.0, 0.0, -beta_z, residue)

    event = Event(
        excitation_energy=E_level, twoJ=twoJ, parity=parity, reaction=reaction
    )
    event.add_initial_particle(projectile, ParticleRole.PROJECTILE)
    event.add_initial_particle(target, ParticleRole.TARGET)
    event.add_final_particle(ejectile, ParticleRole.EJECTILE)
    event.add_final_particle(residue, ParticleRole.RESIDUE)
    return event


def isotropic_direction(cos_theta: float, phi: float) -> np.ndarray:
    """Unit vector for the given polar cosine and azimuth."""
    sin_theta = real_sqrt(1.0 - cos_theta * cos_theta)
    return np.array(
        [sin_theta * math.cos(phi), sin_theta * math.sin(phi), cos_theta]
    )


class ProjectileDirectionRotator:
    """
    Rotates events generated along +z into an arbitrary projectile direction.

    Reactions always generate events with the projectile travelling along
    the +z axis. The rotator applies the rotation that takes +z into the
    configured direction to every particle of an event.
    """

    def __init__(self, direction: Sequence[float] = (0.0, 0.0, 1.0)):
        self.set_direction(direction)

    @property
    def direction(self) -> np.ndarray:
        """Unit vector along the projectile direction."""
        return self._direction.copy()

    def set_direction(self, direction: Sequence[float]) -> None:
        vec = np.asarray(direction, dtype=float)
        if vec.shape != (3,):
            raise ValueError(f"Direction must have three components, got {vec}")
        norm = float(np.linalg.norm(vec))
        if norm == 0.0:
            raise ValueError("Projectile direction cannot be the zero vector")
        self._direction = vec / norm
        self._matrix = self._rotation_matrix(self._direction)

    @staticmethod
    def _rotation_matrix(direction: np.ndarray) -> np.ndarray:
        """
        Rodrigues rotation taking +z into the given unit vector.

        R = I + [v]x + [v]x^2 / (1 + c), with v = z x d and c = z . d
        """
        z_hat = np.array([0.0, 0.0, 1.0])
        c = float(np.dot(z_hat, direction))
        if c > 1.0 - 1e-15:
            return np.identity(3)
        if c < -1.0 + 1e-15:
            # Half turn about the x axis
            return np.diag([1.0, -1.0, -1.0])

        v = np.cross(z_hat, direction)
        vx = np.array(
            [
                [0.0, -v[2], v[1]],
                [v[2], 0.0, -v[0]],
                [-v[1], v[0], 0.0],
            ]
        )
        return np.identity(3) + vx + vx @ vx / (1.0 + c)

    def rotate_particle(self, particle: Particle) -> None:
        px, py, pz = self._matrix @ particle.momentum
        particle.set_four_momentum(particle.total_energy, px, py, pz)

    def rotate_event(self, event: Event) -> None:
        """Rotate every particle of an event in place."""
        if np.array_equal(self._matrix, np.identity(3)):
            return
        for particle in event.particles:
            self.rotate_particle(particle)
