"""
Set Partitioning Problem.

Prepares an SPP instance for David Levine's hybrid genetic algorithm:
penalised fitness, structure-aware random generation, two point crossover
with post-crossover mutation, and the row-oriented (ROW) local search.

Levine, D. (1996). Application of a hybrid genetic algorithm to airline
crew scheduling. Computers & Operations Research, 23(6), 547-558.
"""

import logging
from typing import List, Optional, Sequence
import numpy as np

from .bitset import BitVector
from .crossover import crossover_window, crossover_statistics
from .errors import ConfigurationError
from .mutation import flip_mask, mutate_variants, mutation_statistics
from .problem import NPProblem
from .strategies import ImprovementStrategy, RowSelectionStrategy

logger = logging.getLogger(__name__)


class SPProblem(NPProblem):
    """
    Set Partitioning Problem over a bit vector of selected sets.

    Column j of the constraint matrix is sets[j]; a solution selects columns
    and is feasible when every row is covered by exactly one selected set.

    Attributes:
        rows: Number of rows (elements to partition)
        sets: Row indices covered by each set, sorted ascending
        costs: Cost of each set
        penalty: Cost charged per unit of row infeasibility
        Ri: For each row, the indices of the sets covering it (fixed)
        average_non_zeros: Mean number of rows per set
        mutation_probability: Per-bit flip probability applied after crossover
    """

    def __init__(self,
                 rows: int,
                 sets: Sequence[Sequence[int]],
                 costs: Sequence[float],
                 penalty_factor: float = 1,
                 rng: Optional[np.random.Generator] = None,
                 mutation_probability: Optional[float] = None):
        """
        Build an instance of SPP.

        Args:
            rows: Number of rows of this problem
            sets: The sets; sets[j] lists the rows covered by set j
            costs: costs[j] is the cost of set j
            penalty_factor: Multiplier of the average cost charged for each
                infeasibility
            rng: Random number generator
            mutation_probability: Post-crossover flip probability per bit
                (defaults to 1 / n)

        Raises:
            ConfigurationError: If sets and costs differ in length
        """
        super().__init__(rng)
        logger.debug("Validating input")
        if len(sets) != len(costs):
            raise ConfigurationError(
                f"Lengths differ: {len(sets)} sets and {len(costs)} costs"
            )

        self.rows = rows
        self.sets = [list(s) for s in sets]
        self.costs = np.asarray(costs, dtype=float)
        self.penalty = float(np.mean(self.costs)) * penalty_factor if len(self.costs) else 0.0
        self._mutation_probability = mutation_probability

        self.Ri: List[List[int]] = []
        self.average_non_zeros = 0.0
        self.init()

    @staticmethod
    def string_solution(s: BitVector) -> str:
        """Binary string of the given solution."""
        return s.to_string()

    @staticmethod
    def equal_solution(a: BitVector, b: BitVector) -> bool:
        """True if a and b select exactly the same sets."""
        return a == b

    def init(self) -> None:
        """
        Sort the sets and build the row -> covering sets index (Ri).

        Ri is the transpose of sets; within each row, set indices appear in
        ascending set order.
        """
        logger.debug("Sorting and preparing sets")
        self.Ri = [[] for _ in range(self.rows)]
        non_zeros = 0

        for i, rows_of_set in enumerate(self.sets):
            rows_of_set.sort()
            non_zeros += len(rows_of_set)
            for row in rows_of_set:
                if not 0 <= row < self.rows:
                    raise ConfigurationError(
                        f"Set {i} covers row {row}, outside [0, {self.rows})"
                    )
                self.Ri[row].append(i)

        self.average_non_zeros = non_zeros / self.n if self.n else 0.0

    @property
    def n(self) -> int:
        return len(self.sets)

    @property
    def mutation_probability(self) -> float:
        if self._mutation_probability is not None:
            return self._mutation_probability
        return 1 / self.n if self.n else 0.0

    def value(self, s: BitVector) -> float:
        """
        Heuristic value of s: selected costs plus one penalty per unit of
        deviation from exactly-one cover on each row.

        Args:
            s: The solution to evaluate

        Returns:
            Penalised cost of s
        """
        penalties = 0.0
        for row in self.Ri:
            r = -1
            for col in row:
                if s.bits[col]:
                    r += 1
            penalties += abs(r) * self.penalty

        value = float(self.costs[s.bits].sum()) if self.n else 0.0
        return value + penalties

    def generate(self) -> BitVector:
        """
        Generate a solution using Levine's modified random initialisation.

        The number of selected sets in an SPP solution is expected to be
        close to rows / average_non_zeros, so that many distinct sets are
        drawn uniformly. The result may be infeasible.

        Returns:
            A new solution
        """
        s = BitVector(self.n)
        if not self.n or not self.average_non_zeros:
            return s

        target = min(int(self.rows / self.average_non_zeros), self.n)
        selected = 0
        while selected < target:
            v = int(self.rng.integers(0, self.n))
            if not s.bits[v]:
                s.bits[v] = True
                selected += 1

        return s

    def select_row(self, s: BitVector, rss: RowSelectionStrategy) -> List[int]:
        """
        Pick a row according to the strategy and return its ri.

        ri = {j in Ri | x_j = 1} is the set of columns intersecting the row in
        the current solution. With MAX, the first row holding the largest ri
        wins ties.

        Args:
            s: Current solution
            rss: Row selection strategy

        Returns:
            Selected set indices covering the chosen row, in Ri order
        """
        if rss == RowSelectionStrategy.MAX:
            best: List[int] = []
            for row in self.Ri:
                r = [col for col in row if s.bits[col]]
                if len(r) > len(best):
                    best = r
            return best

        if not self.rows:
            return []
        row = self.Ri[int(self.rng.integers(0, self.rows))]
        return [col for col in row if s.bits[col]]

    def improve(self,
                s: BitVector,
                improvement_strategy: ImprovementStrategy = ImprovementStrategy.BEST,
                row_selection_strategy: RowSelectionStrategy = RowSelectionStrategy.MAX
                ) -> BitVector:
        """
        ROW local search: flip one of the sets covering a chosen row.

        Ri = {j | a_ij = 1} (fixed) holds the columns intersecting row i;
        ri = {j in Ri | x_j = 1} (changing) holds those currently selected.

        Args:
            s: The solution to improve (not modified)
            improvement_strategy: FIRST or BEST improving flip
            row_selection_strategy: MAX or RANDOM row

        Returns:
            A new, strictly better solution, or s itself when no flip improves
        """
        cols = self.select_row(s, row_selection_strategy)
        new_s = s.clone()
        best_cost = self.value(s)

        if improvement_strategy == ImprovementStrategy.BEST:
            best = -1
            for i, col in enumerate(cols):
                new_s.flip(col)
                col_cost = self.value(new_s)
                if col_cost < best_cost:
                    best_cost = col_cost
                    best = i
                new_s.flip(col)
            if best != -1:
                new_s.flip(cols[best])
                return new_s
        else:
            for col in cols:
                new_s.flip(col)
                if self.value(new_s) < best_cost:
                    return new_s
                new_s.flip(col)

        return s

    def crossover(self, a: BitVector, b: BitVector) -> List[BitVector]:
        """
        Two point crossover followed by Levine's (1 / n) bit mutation.

        A wrap-around window of random start and random non-zero length is
        taken from the other parent; afterwards every bit of both children
        flips with probability mutation_probability.

        Args:
            a: First parent
            b: Second parent

        Returns:
            The two children
        """
        size = a.size
        ab = a.clone()
        ba = b.clone()
        if size == 0:
            return [ab, ba]

        x = int(self.rng.integers(0, size))
        if size <= 2:
            distance = 1
        else:
            distance = 0
            while distance == 0:
                distance = int(self.rng.integers(0, size - 1))

        window = crossover_window(size, x, distance)
        ab.bits[window] = b.bits[window]
        ba.bits[window] = a.bits[window]

        p_mutation = self.mutation_probability
        ab.bits ^= flip_mask(size, p_mutation, self.rng)
        ba.bits ^= flip_mask(size, p_mutation, self.rng)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Crossover window %d+%d: %s", x, distance,
                         crossover_statistics(ab, a, b))

        return [ab, ba]

    def mutate(self, s: BitVector, v_rate: Optional[float] = None, n: int = 1) -> List[BitVector]:
        """
        Produce n variants of s, each bit flipped with probability v_rate.

        Args:
            s: Solution to mutate
            v_rate: Per-bit flip probability (defaults to mutation_probability)
            n: Number of variants

        Returns:
            n mutated solutions
        """
        if v_rate is None:
            v_rate = self.mutation_probability
        variants = mutate_variants(s, v_rate, n, self.rng)
        if logger.isEnabledFor(logging.DEBUG):
            for variant in variants:
                logger.debug("Mutation: %s", mutation_statistics(s, variant))
        return variants

    def validate(self, s: BitVector) -> bool:
        """
        Check whether s is an exact cover.

        Args:
            s: Solution to check

        Returns:
            True if every row is covered by exactly one selected set
        """
        covered = BitVector(self.rows)

        for i in range(self.n):
            if s.bits[i]:
                for row in self.sets[i]:
                    if covered.bits[row]:
                        return False
                    covered.bits[row] = True

        return covered.all()

    def covered_rows(self, s: BitVector) -> np.ndarray:
        """Number of selected sets covering each row."""
        counts = np.zeros(self.rows, dtype=int)
        for i in s.indices():
            for row in self.sets[i]:
                counts[row] += 1
        return counts

    def describe(self, s: BitVector) -> dict:
        """
        Summary of a solution for reporting.

        Returns:
            Dictionary with value, feasibility, selected sets and row coverage
            counts
        """
        counts = self.covered_rows(s)
        return {
            'value': self.value(s),
            'feasible': self.validate(s),
            'selected_sets': s.indices(),
            'cost': float(self.costs[s.bits].sum()) if self.n else 0.0,
            'uncovered_rows': int(np.count_nonzero(counts == 0)),
            'overcovered_rows': int(np.count_nonzero(counts > 1)),
        }
