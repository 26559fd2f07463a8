"""
Built-in Nuclear Data Sets

Approximate structure data for charged-current scattering of electron
neutrinos on argon-40, 40Ar(nu_e, e-)40K*: a truncated 40K level scheme
with its main gamma branches and a matching set of Fermi and Gamow-Teller
strengths. The numbers are rounded values suitable for examples and
tests, not evaluated data.
"""

from typing import List, Optional, Tuple

from .matrix_element import MatrixElement, MatrixElementType
from .particle import Parity
from .structure import DecayScheme, Level, StructureDatabase

ARGON_40 = 1000180400
POTASSIUM_40 = 1000190400

# (energy [MeV], 2J, parity)
K40_LEVELS: Tuple[Tuple[float, int, int], ...] = (
    (0.0, 8, -1),
    (0.02986, 6, -1),
    (0.80025, 4, -1),
    (0.89110, 10, -1),
    (1.64364, 0, 1),
    (1.95930, 4, 1),
    (2.28990, 2, 1),
    (2.73000, 2, 1),
    (3.11000, 2, 1),
    (3.79800, 2, 1),
    (4.38400, 0, 1),
    (4.78900, 2, 1),
)

# (start energy, end energy, relative intensity)
K40_GAMMAS: Tuple[Tuple[float, float, float], ...] = (
    (0.02986, 0.0, 100.0),
    (0.80025, 0.02986, 100.0),
    (0.89110, 0.0, 100.0),
    (1.64364, 0.80025, 100.0),
    (1.95930, 0.80025, 60.0),
    (1.95930, 0.02986, 40.0),
    (2.28990, 1.64364, 50.0),
    (2.28990, 1.95930, 30.0),
    (2.28990, 0.80025, 20.0),
    (2.73000, 2.28990, 40.0),
    (2.73000, 1.95930, 35.0),
    (2.73000, 0.80025, 25.0),
    (3.11000, 2.28990, 50.0),
    (3.11000, 1.64364, 50.0),
    (3.79800, 2.73000, 30.0),
    (3.79800, 2.28990, 40.0),
    (3.79800, 1.95930, 30.0),
    (4.38400, 2.28990, 40.0),
    (4.38400, 2.73000, 35.0),
    (4.38400, 3.11000, 25.0),
    (4.78900, 3.79800, 40.0),
    (4.78900, 2.28990, 60.0),
)

# (level energy [MeV], strength, type)
AR40_CC_STRENGTHS: Tuple[Tuple[float, float, MatrixElementType], ...] = (
    (2.28990, 0.90, MatrixElementType.GAMOW_TELLER),
    (2.73000, 1.50, MatrixElementType.GAMOW_TELLER),
    (3.11000, 0.87, MatrixElementType.GAMOW_TELLER),
    (3.79800, 0.86, MatrixElementType.GAMOW_TELLER),
    (4.38400, 4.00, MatrixElementType.FERMI),
    (4.78900, 0.80, MatrixElementType.GAMOW_TELLER),
    (5.01700, 0.26, MatrixElementType.GAMOW_TELLER),
    (5.68100, 0.44, MatrixElementType.GAMOW_TELLER),
    (6.18200, 0.32, MatrixElementType.GAMOW_TELLER),
    (7.48000, 0.60, MatrixElementType.GAMOW_TELLER),
)


def make_k40_decay_scheme() -> DecayScheme:
    """Approximate discrete level scheme of 40K."""
    levels = {energy: Level(energy, twoJ, Parity(p)) for energy, twoJ, p in K40_LEVELS}
    for start, end, intensity in K40_GAMMAS:
        levels[start].add_gamma(levels[end], intensity)
    return DecayScheme(19, 40, list(levels.values()))


def make_ar40_cc_matrix_elements(
    scheme: Optional[DecayScheme] = None,
) -> List[MatrixElement]:
    """
    Approximate 40Ar -> 40K charged-current matrix elements.

    Args:
        scheme: If given, matrix elements whose energy matches a level of
            the scheme are linked to that level

    Returns:
        Matrix elements sorted by level energy
    """
    levels = {level.energy: level for level in scheme.levels} if scheme else {}
    return [
        MatrixElement(energy, strength, me_type, levels.get(energy))
        for energy, strength, me_type in AR40_CC_STRENGTHS
    ]


def make_argon_structure_database(structure_db: Optional[StructureDatabase] = None):
    """
    Register the 40K scheme in a structure database.

    Returns:
        Tuple of (structure database, matrix elements linked to its levels)
    """
    db = structure_db or StructureDatabase()
    scheme = make_k40_decay_scheme()
    db.add_decay_scheme(scheme)
    return db, make_ar40_cc_matrix_elements(scheme)
