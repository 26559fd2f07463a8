"""
Neutrino-Nucleus Event Generator Package

A Monte Carlo generator for low-energy (tens of MeV) neutrino
interactions with nuclei and atomic electrons, including the
de-excitation of the residual nucleus.

Modules:
    - constants: Physical constants, PDG codes and particle data
    - particle: Particles and events
    - kinematics: Two-body kinematics, Lorentz boosts and rotations
    - mass_table: Particle and atomic masses, separation energies
    - structure: Discrete nuclear levels and the structure database
    - nuclear_models: Level density, transmission and gamma strength models
    - reaction: Reaction interface and factory
    - nuclear_reaction: Neutrino-nucleus reactions
    - electron_reaction: Neutrino-electron elastic scattering
    - dm_reaction: Dark matter absorption (experimental)
    - source: Incident projectile spectra
    - target: Target composition
    - decay: Hauser-Feshbach de-excitation
    - generator: Event generator
    - config: Generator settings and factory
"""

from .constants import PhysicalConstants
from .errors import (
    NuclearEventsError,
    ReactionError,
    InvalidTransitionError,
    MassTableError,
    GeneratorError,
    DecayError,
)
from .particle import Particle, Event, Parity, ParticleRole
from .mass_table import MassTable
from .structure import Level, Gamma, DecayScheme, StructureDatabase
from .matrix_element import MatrixElement, MatrixElementType
from .target import Target, TargetAtom
from .reaction import ProcessType, Reaction, create_reactions
from .nuclear_reaction import CoulombMode, NuclearReaction
from .electron_reaction import ElectronReaction
from .dm_reaction import DarkMatterReaction
from .source import (
    NeutrinoSource,
    MonoenergeticSource,
    DecayAtRestSource,
    FermiDiracSource,
    HistogramSource,
    GridSource,
    DarkMatterSource,
)
from .decay import HauserFeshbachDecay, NucleusDecayer
from .generator import Generator
from .config import GeneratorConfig, create_generator

__version__ = "1.0.0"
__author__ = "Neutrino Event Generator Model"

__all__ = [
    "PhysicalConstants",
    "NuclearEventsError",
    "ReactionError",
    "InvalidTransitionError",
    "MassTableError",
    "GeneratorError",
    "DecayError",
    "Particle",
    "Event",
    "Parity",
    "ParticleRole",
    "MassTable",
    "Level",
    "Gamma",
    "DecayScheme",
    "StructureDatabase",
    "MatrixElement",
    "MatrixElementType",
    "Target",
    "TargetAtom",
    "ProcessType",
    "Reaction",
    "create_reactions",
    "CoulombMode",
    "NuclearReaction",
    "ElectronReaction",
    "DarkMatterReaction",
    "NeutrinoSource",
    "MonoenergeticSource",
    "DecayAtRestSource",
    "FermiDiracSource",
    "HistogramSource",
    "GridSource",
    "DarkMatterSource",
    "HauserFeshbachDecay",
    "NucleusDecayer",
    "Generator",
    "GeneratorConfig",
    "create_generator",
]
