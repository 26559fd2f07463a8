"""
Two-Body Reactions

Defines the abstract Reaction a + b -> c + d shared by every reaction
type, the process types, and the factory that builds one reaction per
projectile from a table of matrix elements.

The projectile (a) travels along +z with lab kinetic energy KEa and the
target (b) is at rest in the lab frame.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
import logging

from .constants import (
    ELECTRON,
    DARK_MATTER,
    ELECTRON_NEUTRINO,
    ELECTRON_ANTINEUTRINO,
    MUON_NEUTRINO,
    MUON_ANTINEUTRINO,
    TAU_NEUTRINO,
    TAU_ANTINEUTRINO,
    PARTICLE_CHARGES,
)
from .errors import ReactionError
from .kinematics import make_event_object, two_two_scatter
from .particle import Event, Parity
from .target import TargetAtom

if TYPE_CHECKING:
    from .generator import Generator

logger = logging.getLogger(__name__)


class ProcessType(Enum):
    """Kind of scattering process represented by a Reaction."""

    NEUTRINO_CC = "NeutrinoCC"
    ANTINEUTRINO_CC = "AntiNeutrinoCC"
    NC = "NC"
    NU_ELECTRON_ELASTIC = "NuElectronElastic"
    DM = "DM"

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, name: str) -> "ProcessType":
        for process in cls:
            if process.value == name:
                return process
        raise ValueError(f"Unrecognized process type '{name}'")


_PROJECTILES: Dict[ProcessType, Tuple[int, ...]] = {
    ProcessType.NEUTRINO_CC: (ELECTRON_NEUTRINO, MUON_NEUTRINO, TAU_NEUTRINO),
    ProcessType.ANTINEUTRINO_CC: (
        ELECTRON_ANTINEUTRINO,
        MUON_ANTINEUTRINO,
        TAU_ANTINEUTRINO,
    ),
    ProcessType.NC: (
        ELECTRON_NEUTRINO,
        ELECTRON_ANTINEUTRINO,
        MUON_NEUTRINO,
        MUON_ANTINEUTRINO,
        TAU_NEUTRINO,
        TAU_ANTINEUTRINO,
    ),
    ProcessType.NU_ELECTRON_ELASTIC: (
        ELECTRON_NEUTRINO,
        ELECTRON_ANTINEUTRINO,
        MUON_NEUTRINO,
        MUON_ANTINEUTRINO,
        TAU_NEUTRINO,
        TAU_ANTINEUTRINO,
    ),
    ProcessType.DM: (DARK_MATTER,),
}


def get_projectiles(process_type: ProcessType) -> Tuple[int, ...]:
    """PDG codes of the projectiles that take part in a process type."""
    return _PROJECTILES[process_type]


def get_ejectile_pdg(pdg_a: int, process_type: ProcessType) -> int:
    """
    PDG code of the ejectile for a projectile and process type.

    Charged-current neutrino scattering produces the charged lepton of the
    same flavour, neutral-current and elastic scattering leave the
    neutrino unchanged, and dark-matter absorption emits an electron.

    Raises:
        ReactionError: If the projectile cannot take part in the process
    """
    if pdg_a not in _PROJECTILES[process_type]:
        raise ReactionError(
            f"Projectile {pdg_a} does not participate in {process_type} reactions"
        )
    if process_type is ProcessType.NEUTRINO_CC:
        return pdg_a - 1
    if process_type is ProcessType.ANTINEUTRINO_CC:
        return pdg_a + 1
    if process_type is ProcessType.DM:
        return ELECTRON
    return pdg_a


class Reaction(ABC):
    """
    Abstract two-two scattering reaction a + b -> c + d.

    Subclasses set the PDG codes, masses and charges in their constructors
    and are immutable afterwards. Cross sections are in MeV^-2.

    Attributes:
        pdg_a, pdg_b, pdg_c, pdg_d: PDG codes of projectile, target,
            ejectile and residue
        ma, mb, mc, md_gs: Masses [MeV] (md_gs is the residue ground state)
        qa, qb, qc, qd: Net charges of the four particles
        process_type: Kind of process
    """

    process_type: ProcessType

    def __init__(
        self,
        pdg_a: int,
        pdg_b: int,
        pdg_c: int,
        pdg_d: int,
        ma: float,
        mb: float,
        mc: float,
        md_gs: float,
        qb: int = 0,
        qd: int = 0,
    ):
        self.pdg_a = pdg_a
        self.pdg_b = pdg_b
        self.pdg_c = pdg_c
        self.pdg_d = pdg_d
        self.ma = ma
        self.mb = mb
        self.mc = mc
        self.md_gs = md_gs
        self.qa = PARTICLE_CHARGES.get(pdg_a, 0)
        self.qb = qb
        self.qc = PARTICLE_CHARGES.get(pdg_c, 0)
        self.qd = qd

    @abstractmethod
    def total_xs(self, pdg_a: int, KEa: float) -> float:
        """
        Total cross section [MeV^-2].

        Returns zero, rather than raising, when pdg_a is not this
        reaction's projectile.
        """

    @abstractmethod
    def diff_xs(self, pdg_a: int, KEa: float, cos_theta_c_cm: float) -> float:
        """
        Differential cross section d(sigma)/d(cos theta_c^CM) [MeV^-2].

        Returns zero when pdg_a is not this reaction's projectile or
        cos_theta_c_cm lies outside [-1, 1].
        """

    @abstractmethod
    def create_event(self, pdg_a: int, KEa: float, generator: "Generator") -> Event:
        """
        Sample a final state and build the corresponding Event.

        Raises:
            ReactionError: If pdg_a is not this reaction's projectile or
                KEa is below threshold
        """

    @abstractmethod
    def atomic_target(self) -> TargetAtom:
        """Atom whose abundance in the target weights this reaction."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable formula, e.g. 've + 40Ar --> e- + 40K*'."""

    def threshold_kinetic_energy(self) -> float:
        """
        Minimum projectile kinetic energy for a transition to the residue
        ground state [MeV].

        KE_th = ((mc + md)^2 - (ma + mb)^2) / (2 mb)
        """
        return ((self.mc + self.md_gs) ** 2 - (self.ma + self.mb) ** 2) / (
            2.0 * self.mb
        )

    def two_two_scatter(
        self, KEa: float, md: Optional[float] = None
    ) -> Tuple[float, float, float, float]:
        """
        CM frame kinematics for this reaction.

        Args:
            KEa: Projectile lab kinetic energy [MeV]
            md: Residue mass [MeV], defaults to the ground-state mass

        Returns:
            Tuple of (s, Ec_cm, pc_cm, Ed_cm)
        """
        if md is None:
            md = self.md_gs
        return two_two_scatter(KEa + self.ma, self.ma, self.mb, self.mc, md)

    def make_event_object(
        self,
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
        return make_event_object(
            self, KEa, pc_cm, cos_theta_c_cm, phi_c_cm,
            Ec_cm, Ed_cm, E_level, twoJ, parity,
        )

    def check_projectile(self, pdg_a: int) -> None:
        if pdg_a != self.pdg_a:
            raise ReactionError(
                f"Could not create an event for {self.description}: "
                f"projectile PDG code {pdg_a} does not match {self.pdg_a}"
            )

    def check_threshold(self, KEa: float) -> None:
        threshold = self.threshold_kinetic_energy()
        if KEa < threshold:
            raise ReactionError(
                f"Could not create an event for {self.description}: "
                f"KEa = {KEa} MeV is below the threshold of {threshold} MeV"
            )

    def __str__(self):
        return self.description

    def __repr__(self):
        return f"{type(self).__name__}({self.description!r})"


# Registry of reaction classes by process type, filled in by the
# reaction modules when they are imported
REACTION_TYPES: Dict[ProcessType, type] = {}


def register_reaction_type(*process_types: ProcessType):
    """Class decorator adding a Reaction subclass to REACTION_TYPES."""

    def decorator(cls):
        for process_type in process_types:
            REACTION_TYPES[process_type] = cls
        return cls

    return decorator


def create_reactions(
    process_type: ProcessType,
    target_pdg: int,
    matrix_elements: Sequence = (),
    **kwargs,
) -> List[Reaction]:
    """
    Build one reaction per projectile for a process type.

    All reactions built by one call share the same matrix-element tuple.

    Args:
        process_type: Process to model
        target_pdg: Nuclear PDG code of the target atom
        matrix_elements: Matrix elements sorted by level energy (ignored
            for neutrino-electron elastic scattering)
        **kwargs: Extra keyword arguments for the reaction constructor
            (structure_db, mass_table, coulomb_mode, ...)

    Returns:
        List of reactions, one per allowed projectile
    """
    # Importing the variants fills the registry
    from . import dm_reaction, electron_reaction, nuclear_reaction  # noqa: F401
    from .matrix_element import make_matrix_element_table

    cls = REACTION_TYPES.get(process_type)
    if cls is None:
        raise ReactionError(f"No reaction type registered for {process_type}")

    if process_type is ProcessType.NU_ELECTRON_ELASTIC:
        return [
            cls(pdg_a, target_pdg, **kwargs)
            for pdg_a in get_projectiles(process_type)
        ]

    table = make_matrix_element_table(matrix_elements)
    if process_type is ProcessType.DM:
        return [cls(target_pdg, table, **kwargs)]

    return [
        cls(pdg_a, target_pdg, table, process_type, **kwargs)
        for pdg_a in get_projectiles(process_type)
    ]
