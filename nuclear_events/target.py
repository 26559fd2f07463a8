"""
Target Composition

A Target is a set of nuclides with relative atom fractions. The
generator weights the total cross section of each reaction by the
fraction of its target atom.
"""

from dataclasses import dataclass
from typing import Dict, Sequence

from .utils import get_nucleus_pid, get_particle_A, get_particle_Z, is_ion, nuclide_symbol


@dataclass(frozen=True)
class TargetAtom:
    """A neutral atom identified by the PDG code of its nucleus."""

    pdg: int

    def __post_init__(self):
        if not is_ion(self.pdg):
            raise ValueError(f"PDG code {self.pdg} does not describe a nucleus")

    @classmethod
    def from_za(cls, Z: int, A: int) -> "TargetAtom":
        return cls(get_nucleus_pid(Z, A))

    @property
    def Z(self) -> int:
        return get_particle_Z(self.pdg)

    @property
    def A(self) -> int:
        return get_particle_A(self.pdg)

    def __str__(self):
        return nuclide_symbol(self.Z, self.A)


class Target:
    """
    Target material made of one or more nuclides.

    Args:
        nuclides: Nuclear PDG codes of the target atoms
        atom_fractions: Relative abundance of each nuclide by number of
            atoms; normalized to unit sum

    Raises:
        ValueError: On mismatched lengths, duplicates, negative fractions
            or an all-zero composition
    """

    def __init__(self, nuclides: Sequence[int], atom_fractions: Sequence[float]):
        if len(nuclides) != len(atom_fractions):
            raise ValueError(
                f"Got {len(nuclides)} nuclides but {len(atom_fractions)} atom fractions"
            )
        if not nuclides:
            raise ValueError("A target needs at least one nuclide")
        if any(f < 0.0 for f in atom_fractions):
            raise ValueError("Atom fractions must be non-negative")
        total = float(sum(atom_fractions))
        if total <= 0.0:
            raise ValueError("Atom fractions must not all be zero")

        self._fractions: Dict[TargetAtom, float] = {}
        for pdg, fraction in zip(nuclides, atom_fractions):
            atom = TargetAtom(pdg)
            if atom in self._fractions:
                raise ValueError(f"Duplicate target nuclide {atom}")
            self._fractions[atom] = fraction / total

    @classmethod
    def single(cls, pdg: int) -> "Target":
        """Target made of a single nuclide."""
        return cls([pdg], [1.0])

    def atom_fraction(self, atom: TargetAtom) -> float:
        """Normalized atom fraction of a nuclide (0 if absent)."""
        return self._fractions.get(atom, 0.0)

    def contains(self, atom: TargetAtom) -> bool:
        return atom in self._fractions

    @property
    def atoms(self):
        return tuple(self._fractions)

    def __str__(self):
        parts = [f"{atom}: {fraction:g}" for atom, fraction in self._fractions.items()]
        return "Target(" + ", ".join(parts) + ")"
