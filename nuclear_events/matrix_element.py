"""
Nuclear Matrix Elements

A matrix element describes the strength of a weak transition from the
target ground state to one final nuclear level. Reactions keep them in
an immutable tuple sorted by level energy, which may be shared by
several reactions (for example one per neutrino flavour).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from .structure import Level


class MatrixElementType(Enum):
    """Operator responsible for the transition."""

    FERMI = "Fermi"
    GAMOW_TELLER = "Gamow-Teller"


@dataclass(frozen=True)
class MatrixElement:
    """
    Transition strength to a single nuclear level.

    Attributes:
        level_energy: Excitation energy of the final level [MeV]
        strength: Squared reduced matrix element B(F) or B(GT)
        me_type: Fermi or Gamow-Teller
        level: Discrete level reached, if it is known to the structure
            database
    """

    level_energy: float
    strength: float
    me_type: MatrixElementType = MatrixElementType.GAMOW_TELLER
    level: Optional[Level] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.level_energy < 0.0:
            raise ValueError(
                f"Matrix element level energy must be non-negative, "
                f"got {self.level_energy}"
            )
        if self.strength < 0.0:
            raise ValueError(
                f"Matrix element strength must be non-negative, got {self.strength}"
            )

    def cos_theta_pdf(self, cos_theta: float, beta_c_cm: float) -> float:
        """
        Normalized ejectile angular distribution in the CM frame.

        Fermi: (1 + beta cos) / 2
        Gamow-Teller: (3 - beta cos) / 6

        Args:
            cos_theta: Cosine of the ejectile CM scattering angle
            beta_c_cm: Ejectile CM speed

        Returns:
            Probability density in cos(theta)
        """
        if self.me_type is MatrixElementType.FERMI:
            return 0.5 * (1.0 + beta_c_cm * cos_theta)
        if self.me_type is MatrixElementType.GAMOW_TELLER:
            return (3.0 - beta_c_cm * cos_theta) / 6.0
        raise ValueError(f"Unrecognized matrix element type {self.me_type!r}")

    def max_cos_theta(self) -> float:
        """Value of cos(theta) where cos_theta_pdf is largest."""
        return 1.0 if self.me_type is MatrixElementType.FERMI else -1.0


def make_matrix_element_table(
    matrix_elements: Sequence[MatrixElement],
) -> Tuple[MatrixElement, ...]:
    """
    Freeze matrix elements into a shareable tuple.

    Raises:
        ValueError: If the matrix elements are not sorted by level energy
    """
    table = tuple(matrix_elements)
    for previous, current in zip(table, table[1:]):
        if current.level_energy < previous.level_energy:
            raise ValueError(
                "Matrix elements must be sorted in order of increasing "
                f"level energy ({current.level_energy} MeV follows "
                f"{previous.level_energy} MeV)"
            )
    return table
