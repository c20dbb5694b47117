"""
Crossover operators for bit-string solutions.

Implements the generic two-point (wrap-around window) crossover used by
genetic algorithms over fixed-length bit vectors.
"""

import math
from typing import Tuple
import numpy as np

from .bitset import BitVector


def crossover_window(size: int, start: int, distance: int) -> np.ndarray:
    """
    Positions covered by a wrap-around window.

    Args:
        size: Length of the bit strings
        start: First position of the window
        distance: Number of positions in the window

    Returns:
        Array of indices (start + i) mod size for i in [0, distance)
    """
    if size == 0:
        return np.zeros(0, dtype=int)
    return (start + np.arange(distance)) % size


def tpx(
    a: BitVector,
    b: BitVector,
    rng: np.random.Generator,
    x_factor: float = 0.5
) -> Tuple[BitVector, BitVector]:
    """
    Two point crossover for binary strings.

    A window of ceil(size * x_factor) positions starting at a uniformly random
    index (wrapping around the end of the string) is exchanged between the
    parents. Outside the window each child keeps its own parent's bits.

    Args:
        a: First parent
        b: Second parent
        rng: Random number generator
        x_factor: Fraction of the string each child inherits from the other parent

    Returns:
        Tuple of (child_ab, child_ba) where child_ab is a with the window taken
        from b and child_ba is b with the window taken from a

    Raises:
        ValueError: If parents differ in size or x_factor is outside [0, 1]
    """
    if a.size != b.size:
        raise ValueError(f"Parents must have equal size, got {a.size} and {b.size}")
    if not 0 <= x_factor <= 1:
        raise ValueError(f"x_factor must be within [0, 1], got {x_factor}")

    ab = a.clone()
    ba = b.clone()

    if a.size == 0:
        return ab, ba

    x = int(rng.integers(0, a.size))
    distance = math.ceil(a.size * x_factor)

    window = crossover_window(a.size, x, distance)
    ab.bits[window] = b.bits[window]
    ba.bits[window] = a.bits[window]

    return ab, ba


def crossover_statistics(child: BitVector, parent_a: BitVector, parent_b: BitVector) -> dict:
    """
    Calculate how much of each parent a child carries.

    Args:
        child: Child solution
        parent_a: First parent
        parent_b: Second parent

    Returns:
        Dictionary with crossover statistics
    """
    from_a = int(np.count_nonzero(child.bits == parent_a.bits))
    from_b = int(np.count_nonzero(child.bits == parent_b.bits))

    return {
        'size': child.size,
        'matches_a': from_a,
        'matches_b': from_b,
        'set_bits': child.count(),
        'differs_from_both': int(np.count_nonzero(
            (child.bits != parent_a.bits) & (child.bits != parent_b.bits)
        )),
    }
