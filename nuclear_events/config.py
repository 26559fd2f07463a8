"""
Generator Configuration

Collects the user-facing settings of the event generator in a single
validated dataclass and provides a factory that assembles a Generator
from a configuration and its physics inputs.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Sequence, Tuple
import logging

from .constants import DEFAULT_CONTBIN_NUM_SUBS, DEFAULT_CONTBIN_WIDTH
from .decay import NucleusDecayer
from .generator import DEFAULT_SAFETY_FACTOR, ENERGY_SAMPLING_METHODS, Generator
from .mass_table import MassTable
from .nuclear_reaction import CoulombMode, NuclearReaction
from .reaction import ProcessType, Reaction
from .source import NeutrinoSource
from .structure import StructureDatabase
from .target import Target

logger = logging.getLogger(__name__)


@dataclass
class GeneratorConfig:
    """
    Settings for an event generator run.

    Attributes:
        seed: Random number seed (None picks one from system entropy)
        contbin_width: Width of the continuum integration bins [MeV]
        contbin_num_subs: Clenshaw-Curtis order used inside each bin
        weight_flux: Weight the source spectrum by the total cross section
        do_deexcitations: Run the de-excitation cascade
        direction: Projectile direction in the lab frame
        energy_sampling: 'rejection' or 'inverse_transform'
        coulomb_mode: Coulomb correction applied to the charged-current
            reactions passed to create_generator
        rejection_safety_factor: Multiplier on rejection sampling maxima
    """

    seed: Optional[int] = None
    contbin_width: float = DEFAULT_CONTBIN_WIDTH
    contbin_num_subs: int = DEFAULT_CONTBIN_NUM_SUBS
    weight_flux: bool = True
    do_deexcitations: bool = True
    direction: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    energy_sampling: str = "rejection"
    coulomb_mode: str = "Fermi-EMA"
    rejection_safety_factor: float = DEFAULT_SAFETY_FACTOR
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"Seed must be non-negative, got {self.seed}")
        if self.contbin_width <= 0.0:
            raise ValueError(
                f"Continuum bin width must be positive, got {self.contbin_width}"
            )
        if self.contbin_num_subs < 1:
            raise ValueError(
                f"Continuum bin subdivisions must be >= 1, got {self.contbin_num_subs}"
            )
        if len(self.direction) != 3 or not any(self.direction):
            raise ValueError(
                f"Direction must be a nonzero three-vector, got {self.direction}"
            )
        self.direction = tuple(float(x) for x in self.direction)
        if self.energy_sampling not in ENERGY_SAMPLING_METHODS:
            raise ValueError(
                f"Energy sampling must be one of {ENERGY_SAMPLING_METHODS}, "
                f"got '{self.energy_sampling}'"
            )
        # Raises ValueError for unknown modes
        CoulombMode.from_string(self.coulomb_mode)
        if self.rejection_safety_factor < 1.0:
            raise ValueError(
                f"Rejection safety factor must be >= 1, got {self.rejection_safety_factor}"
            )

    @property
    def coulomb(self) -> CoulombMode:
        return CoulombMode.from_string(self.coulomb_mode)

    @classmethod
    def from_dict(cls, settings: Dict[str, Any]) -> "GeneratorConfig":
        """
        Build a configuration from a plain mapping (e.g. parsed JSON).

        Unrecognized keys are kept in `extra` and reported at WARNING.
        """
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in settings.items() if k in known}
        extra = {k: v for k, v in settings.items() if k not in known}
        for key in extra:
            logger.warning("Unrecognized configuration key '%s' kept in extra", key)
        if "direction" in kwargs:
            kwargs["direction"] = tuple(kwargs["direction"])
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"
        }


def create_generator(
    config: Optional[GeneratorConfig] = None,
    source: Optional[NeutrinoSource] = None,
    target: Optional[Target] = None,
    reactions: Sequence[Reaction] = (),
    structure_db: Optional[StructureDatabase] = None,
    mass_table: Optional[MassTable] = None,
) -> Generator:
    """
    Factory function to create a configured Generator.

    Args:
        config: Generator settings (defaults if omitted)
        source: Projectile source
        target: Target composition
        reactions: Reactions that may occur; charged-current nuclear
            reactions take their Coulomb correction from config
        structure_db: Nuclear structure database
        mass_table: Mass table

    Returns:
        Configured Generator instance
    """
    config = config or GeneratorConfig()
    if structure_db is None:
        structure_db = StructureDatabase(mass_table)

    for reaction in reactions:
        if isinstance(reaction, NuclearReaction) and reaction.process_type in (
            ProcessType.NEUTRINO_CC, ProcessType.ANTINEUTRINO_CC
        ):
            reaction.coulomb_mode = config.coulomb

    decayer = NucleusDecayer(config.contbin_width, config.contbin_num_subs)
    generator = Generator(
        seed=config.seed,
        source=source,
        target=target,
        reactions=reactions,
        structure_db=structure_db,
        mass_table=mass_table,
        direction=config.direction,
        weight_flux=config.weight_flux,
        do_deexcitations=config.do_deexcitations,
        energy_sampling=config.energy_sampling,
        decayer=decayer,
    )
    generator.rejection_safety_factor = config.rejection_safety_factor
    return generator
