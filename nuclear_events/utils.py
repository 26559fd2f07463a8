"""
Utility Functions for Event Generation

This module provides numerical helpers (clamped square roots, quadrature,
1-D maximization), PDG code helpers and unit conversions shared by the
reaction, generator and decay modules.
"""

import math
from functools import lru_cache
from typing import Callable, Tuple

import numpy as np

from .constants import (
    PhysicalConstants,
    ELEMENT_SYMBOLS,
    PARTICLE_SYMBOLS,
    NEUTRINOS,
    CHARGED_LEPTONS,
)


def real_sqrt(x: float) -> float:
    """
    Square root that returns zero for negative arguments.

    Used wherever roundoff can push a physically non-negative quantity
    (for example E^2 - m^2 at threshold) slightly below zero.
    """
    if x <= 0.0:
        return 0.0
    return math.sqrt(x)


def double_factorial(n: int) -> int:
    """Return n!! for n >= -1."""
    if n < -1:
        raise ValueError(f"Double factorial undefined for {n}")
    result = 1
    while n > 1:
        result *= n
        n -= 2
    return result


@lru_cache(maxsize=64)
def clenshaw_curtis_rule(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nodes and weights of the Clenshaw-Curtis rule on [-1, 1].

    The rule of order n uses the n + 1 Chebyshev extrema
    x_k = cos(k pi / n). Order 1 reproduces the trapezoid rule and
    order 2 reproduces Simpson's rule.

    Args:
        n: Order of the rule (>= 1)

    Returns:
        Tuple of (nodes, weights)
    """
    if n < 1:
        raise ValueError(f"Clenshaw-Curtis order must be >= 1, got {n}")

    k = np.arange(n + 1)
    nodes = np.cos(k * np.pi / n)

    c = np.full(n + 1, 2.0)
    c[0] = 1.0
    c[-1] = 1.0

    weights = np.ones(n + 1)
    for j in range(1, n // 2 + 1):
        b = 1.0 if 2 * j == n else 2.0
        weights -= b / (4.0 * j * j - 1.0) * np.cos(2.0 * j * k * np.pi / n)
    weights *= c / n

    nodes.flags.writeable = False
    weights.flags.writeable = False
    return nodes, weights


def num_integrate(
    f: Callable[[float], float], a: float, b: float, n: int = 1
) -> float:
    """
    Integrate f over [a, b] with an order-n Clenshaw-Curtis rule.

    Args:
        f: Integrand taking a single float
        a: Lower limit
        b: Upper limit
        n: Order of the rule (1 = trapezoid)

    Returns:
        Approximation of the definite integral
    """
    nodes, weights = clenshaw_curtis_rule(n)
    half_width = 0.5 * (b - a)
    midpoint = 0.5 * (a + b)
    total = 0.0
    for x, w in zip(nodes, weights):
        total += w * f(midpoint + half_width * x)
    return half_width * total


def composite_integrate(
    f: Callable[[float], float],
    a: float,
    b: float,
    num_intervals: int = 100,
    n: int = 8,
) -> float:
    """Integrate f over [a, b] by applying num_integrate on equal subintervals."""
    if num_intervals < 1:
        raise ValueError(f"Need at least one subinterval, got {num_intervals}")
    edges = np.linspace(a, b, num_intervals + 1)
    return sum(
        num_integrate(f, float(lo), float(hi), n) for lo, hi in zip(edges[:-1], edges[1:])
    )


def maximize(
    f: Callable[[float], float],
    a: float,
    b: float,
    tolerance: float = 1e-8,
    num_grid_points: int = 100,
) -> Tuple[float, float]:
    """
    Find the maximum of f on [a, b].

    A coarse grid locates the neighbourhood of the global maximum and a
    bounded Brent search refines it.

    Returns:
        Tuple of (x_max, f(x_max))
    """
    from scipy.optimize import minimize_scalar

    grid = np.linspace(a, b, num_grid_points)
    values = np.array([f(x) for x in grid])
    i_best = int(np.nanargmax(values))
    x_best = float(grid[i_best])
    f_best = float(values[i_best])

    lower = float(grid[max(i_best - 1, 0)])
    upper = float(grid[min(i_best + 1, num_grid_points - 1)])
    if upper > lower:
        result = minimize_scalar(
            lambda x: -f(x),
            bounds=(lower, upper),
            method="bounded",
            options={"xatol": tolerance},
        )
        if result.success and -result.fun > f_best:
            x_best = float(result.x)
            f_best = float(-result.fun)

    return x_best, f_best


def solve_quadratic_equation(a: float, b: float, c: float) -> Tuple[float, float]:
    """
    Real roots of a x^2 + b x + c = 0, using the numerically stable form.

    Raises:
        ValueError: If the roots are complex or a == 0
    """
    if a == 0.0:
        raise ValueError("Leading coefficient of a quadratic must be nonzero")
    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        raise ValueError(f"Quadratic has complex roots (discriminant {discriminant})")
    q = -0.5 * (b + math.copysign(math.sqrt(discriminant), b))
    if q == 0.0:
        return 0.0, 0.0
    return q / a, c / q


# PDG code helpers

def get_nucleus_pid(Z: int, A: int) -> int:
    """PDG code of the nucleus with proton number Z and mass number A."""
    return 1000000000 + 10000 * Z + 10 * A


def get_particle_Z(pdg: int) -> int:
    """Proton number encoded in a nuclear PDG code (0 for other particles)."""
    if pdg == 2212:
        return 1
    if not is_ion(pdg):
        return 0
    return (pdg % 10000000) // 10000


def get_particle_A(pdg: int) -> int:
    """Mass number encoded in a nuclear PDG code."""
    if pdg in (2212, 2112):
        return 1
    if not is_ion(pdg):
        return 0
    return (pdg % 10000) // 10


def is_ion(pdg: int) -> bool:
    """True for PDG codes of the form 10LZZZAAAI."""
    return pdg > 1000000000


def is_lepton(pdg: int) -> bool:
    return pdg in NEUTRINOS or pdg in CHARGED_LEPTONS


def nuclide_symbol(Z: int, A: int) -> str:
    """Return a symbol like '40Ar' for a nuclide."""
    if 0 <= Z < len(ELEMENT_SYMBOLS):
        return f"{A}{ELEMENT_SYMBOLS[Z]}"
    return f"{A}[Z={Z}]"


def particle_symbol(pdg: int) -> str:
    """Return a short human-readable symbol for a PDG code."""
    if pdg in PARTICLE_SYMBOLS:
        return PARTICLE_SYMBOLS[pdg]
    if is_ion(pdg):
        return nuclide_symbol(get_particle_Z(pdg), get_particle_A(pdg))
    return str(pdg)


def mev2_to_cm2(xs: float) -> float:
    """Convert a cross section from MeV^-2 to cm^2."""
    return xs * PhysicalConstants.MEV2_TO_CM2


def cm2_to_mev2(xs: float) -> float:
    """Convert a cross section from cm^2 to MeV^-2."""
    return xs / PhysicalConstants.MEV2_TO_CM2


def nuclear_radius(A: int) -> float:
    """
    Nuclear radius R = r0 A^(1/3).

    Returns:
        Radius [fm]
    """
    return PhysicalConstants.R0 * A ** (1.0 / 3.0)
