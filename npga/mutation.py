"""
Mutation operators for bit-string solutions.

Implements per-bit flip mutation and the helper problems use to produce
several independent variants of one solution.
"""

from typing import List, Optional
import numpy as np

from .bitset import BitVector


def flip_mask(size: int, probability: float, rng: np.random.Generator) -> np.ndarray:
    """
    Draw a boolean mask where each position is set with the given probability.

    Args:
        size: Mask length
        probability: Per-position flip probability
        rng: Random number generator

    Returns:
        Boolean numpy array of length size
    """
    return rng.random(size) < probability


def bit_flip_mutation(
    s: BitVector,
    probability: float,
    rng: np.random.Generator
) -> BitVector:
    """
    Flip every bit of s independently with the given probability.

    Args:
        s: Solution to mutate (not modified)
        probability: Per-bit flip probability in [0, 1]
        rng: Random number generator

    Returns:
        New mutated solution

    Raises:
        ValueError: If probability is outside [0, 1]
    """
    if not 0 <= probability <= 1:
        raise ValueError(f"Mutation probability must be within [0, 1], got {probability}")

    mutated = s.clone()
    mutated.bits ^= flip_mask(s.size, probability, rng)
    return mutated


def mutate_variants(
    s: BitVector,
    probability: Optional[float],
    n: int,
    rng: np.random.Generator
) -> List[BitVector]:
    """
    Produce n independent bit-flip variants of s.

    Args:
        s: Solution to mutate
        probability: Per-bit flip probability (defaults to 1 / size)
        n: Number of variants wanted
        rng: Random number generator

    Returns:
        List of n mutated solutions
    """
    if n < 0:
        raise ValueError(f"Number of variants must be non-negative, got {n}")
    if probability is None:
        probability = 1 / s.size if s.size else 0.0

    return [bit_flip_mutation(s, probability, rng) for _ in range(n)]


def mutation_statistics(original: BitVector, mutated: BitVector) -> dict:
    """
    Calculate statistics about a mutation.

    Args:
        original: Solution before mutation
        mutated: Solution after mutation

    Returns:
        Dictionary with mutation statistics
    """
    changed = int(np.count_nonzero(original.bits != mutated.bits))
    return {
        'size': original.size,
        'bits_changed': changed,
        'change_rate': changed / max(original.size, 1),
    }
