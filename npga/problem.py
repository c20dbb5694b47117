"""
Abstraction for Non-deterministic Polynomial problem instances.

Any problem the genetic algorithm driver can search must implement NPProblem.
Solutions are opaque to the driver; it only reaches them through these
operations.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import numpy as np


class NPProblem(ABC):
    """
    Qualities of a Non-deterministic Polynomial problem instance.

    The solution structure is up to the implementation (a bit vector, a
    permutation, ...). Values are lower-is-better and must be finite for every
    representable solution, infeasible ones included.

    Attributes:
        rng: Random number generator used by generate/crossover/mutate
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    @abstractmethod
    def validate(self, s: Any) -> bool:
        """
        Determine whether s is feasible.

        Args:
            s: Solution to test

        Returns:
            True if s satisfies every constraint of the problem
        """

    @abstractmethod
    def value(self, s: Any) -> float:
        """
        Calculate the value of a solution (lower is better).

        Args:
            s: Solution to evaluate

        Returns:
            Value of s
        """

    @abstractmethod
    def generate(self) -> Any:
        """
        Generate a solution for this problem. It need not be feasible.

        Returns:
            A new solution
        """

    @abstractmethod
    def crossover(self, a: Any, b: Any) -> List[Any]:
        """
        Recombine two parents into two children.

        Args:
            a: First parent
            b: Second parent

        Returns:
            The two children of a x b
        """

    @abstractmethod
    def mutate(self, s: Any, v_rate: Optional[float] = None, n: int = 1) -> List[Any]:
        """
        Mutate s into n neighbours.

        Args:
            s: Solution to mutate
            v_rate: How much the mutations may differ from s
            n: Number of mutations wanted

        Returns:
            n mutations of s
        """

    @property
    @abstractmethod
    def n(self) -> int:
        """Problem size; every solution has this length."""

    def improve(self, s: Any, *strategies: Any) -> Any:
        """
        Local search hook used by hybrid drivers.

        Problems without a local search return s unchanged.
        """
        return s

    def compare(self, a: Any, b: Any) -> int:
        """
        Compare two solutions by value, lower being better.

        Note the ordering is inverted relative to a numeric comparator:
        the better solution yields a positive result.

        Args:
            a: First solution
            b: Second solution

        Returns:
            1 if a is better than b, -1 if b is better than a, 0 if equal
        """
        a_value = self.value(a)
        b_value = self.value(b)
        if a_value < b_value:
            return 1
        elif b_value < a_value:
            return -1
        return 0
