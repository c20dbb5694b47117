"""
Tests for the hybrid steady state genetic algorithm driver.
"""

import unittest
import numpy as np

import npga.ssga
from npga.bitset import BitVector
from npga.crossover import tpx
from npga.data_models import Population
from npga.mutation import mutate_variants
from npga.problem import NPProblem
from npga.spp import SPProblem
from npga.strategies import ImprovementStrategy, RowSelectionStrategy
from npga.ssga import (
    binary_tournament,
    get_candidates,
    find_best,
    find_worst,
    validate_parameters,
    ssgarow,
)

CUSTOM_SETS = [[0, 1], [2, 3], [4, 5], [0, 1, 2], [3, 4, 5], [0, 3], [1, 2, 4, 5], [5]]
CUSTOM_COSTS = [3, 2, 4, 5, 3, 2, 6, 1]


class OneMax(NPProblem):
    """Minimise the number of zero bits; no local search."""

    def __init__(self, size, rng=None):
        super().__init__(rng)
        self.size = size

    @property
    def n(self):
        return self.size

    def validate(self, s):
        return s.all()

    def value(self, s):
        return float(self.size - s.count())

    def generate(self):
        return BitVector.from_bits(self.rng.random(self.size) < 0.5)

    def crossover(self, a, b):
        return list(tpx(a, b, self.rng))

    def mutate(self, s, v_rate=None, n=1):
        return mutate_variants(s, v_rate, n, self.rng)


def make_population(costs):
    return Population([BitVector(1) for _ in costs], list(costs))


class TestDriverHelpers(unittest.TestCase):
    """Test selection helpers over a hand-built population."""

    def setUp(self):
        """Set up generator."""
        self.rng = np.random.default_rng(42)

    def test_find_best_takes_first_minimum(self):
        """Test that the first of tied best members is returned."""
        self.assertEqual(find_best(make_population([3, 1, 1, 5])), 1)

    def test_find_worst_takes_first_maximum(self):
        """Test that the first of tied worst members is returned."""
        self.assertEqual(find_worst(make_population([3, 5, 1, 5])), 1)

    def test_binary_tournament_in_range(self):
        """Test that winners are population indices."""
        population = make_population([4, 2, 7, 1])
        for _ in range(50):
            self.assertIn(binary_tournament(population, self.rng), range(4))

    def test_binary_tournament_prefers_fitter(self):
        """Test that the lower cost wins most tournaments."""
        population = make_population([0, 100])
        wins = [binary_tournament(population, self.rng) for _ in range(200)]
        # Member 1 only wins when drawn twice
        self.assertGreater(wins.count(0), wins.count(1))

    def test_get_candidates_are_distinct(self):
        """Test that candidates never repeat."""
        population = make_population([1, 1, 1, 1, 1])

        candidates = get_candidates(population, 3, self.rng)
        self.assertEqual(len(candidates), 3)
        self.assertEqual(len(set(candidates)), 3)

        everyone = get_candidates(population, 5, self.rng)
        self.assertEqual(sorted(everyone), [0, 1, 2, 3, 4])

    def test_get_candidates_too_many(self):
        """Test asking for more candidates than members."""
        with self.assertRaises(ValueError):
            get_candidates(make_population([1, 2]), 3, self.rng)

    def test_population_mismatch(self):
        """Test rejection of unaligned solutions and costs."""
        with self.assertRaises(ValueError):
            Population([BitVector(1)], [1.0, 2.0])

    def test_population_replace(self):
        """Test replacing a member together with its cost."""
        population = make_population([3, 5])
        s = BitVector.from_string("1")
        population.replace(1, s, 0.5)

        self.assertIs(population[1], s)
        self.assertEqual(population.best_cost(), 0.5)
        self.assertEqual(population.worst_cost(), 3)


class TestSSGAROW(unittest.TestCase):
    """Test the driver on SPP and on a generic problem."""

    def make_problem(self, seed=42):
        """Six row instance with a seeded generator."""
        return SPProblem(6, CUSTOM_SETS, CUSTOM_COSTS, penalty_factor=5,
                         rng=np.random.default_rng(seed))

    def test_returns_solution_of_problem_size(self):
        """Test the shape of the returned solution."""
        problem = self.make_problem()
        s = ssgarow(problem, pop_size=10, gen_n=5)
        self.assertIsInstance(s, BitVector)
        self.assertEqual(s.size, problem.n)

    def test_history_is_monotonic(self):
        """Test that best and worst costs never increase across generations."""
        problem = self.make_problem()
        history = []
        s = ssgarow(problem, pop_size=20, gen_n=30, improvements=2,
                    improvement_strategy=ImprovementStrategy.FIRST,
                    row_selection_strategy=RowSelectionStrategy.RANDOM,
                    history=history)

        self.assertEqual(len(history), 30)
        self.assertEqual([h[0] for h in history], list(range(30)))
        for (_, best, worst), (_, next_best, next_worst) in zip(history, history[1:]):
            self.assertLessEqual(next_best, best)
            self.assertLessEqual(next_worst, worst)

        self.assertLessEqual(problem.value(s), history[-1][1])

    def test_all_strategy_pairs_run(self):
        """Test every improvement and row selection pair."""
        for improvement in ImprovementStrategy:
            for row_selection in RowSelectionStrategy:
                problem = self.make_problem()
                s = ssgarow(problem, pop_size=10, gen_n=10, improvements=3,
                            improvement_strategy=improvement,
                            row_selection_strategy=row_selection)
                self.assertEqual(s.size, problem.n)

    def test_same_seed_same_result(self):
        """Test reproducibility under a fixed seed."""
        a = ssgarow(self.make_problem(7), pop_size=10, gen_n=10)
        b = ssgarow(self.make_problem(7), pop_size=10, gen_n=10)
        self.assertEqual(a, b)

    def test_explicit_rng(self):
        """Test passing a generator to the driver."""
        problem = self.make_problem()
        s = ssgarow(problem, pop_size=10, gen_n=5, rng=np.random.default_rng(3))
        self.assertEqual(s.size, problem.n)

    def test_generic_problem(self):
        """Test the driver on a problem without local search."""
        problem = OneMax(12, rng=np.random.default_rng(5))
        history = []
        s = ssgarow(problem, pop_size=20, gen_n=40, history=history)

        self.assertEqual(s.size, 12)
        self.assertLessEqual(problem.value(s), history[0][1])

    def test_driver_does_not_depend_on_spp(self):
        """Test that the driver takes its strategy defaults from the strategies module."""
        self.assertFalse(hasattr(npga.ssga, 'SPProblem'))
        self.assertEqual(npga.ssga.ImprovementStrategy.__module__, 'npga.strategies')
        self.assertEqual(npga.ssga.RowSelectionStrategy.__module__, 'npga.strategies')

    def test_invalid_parameters(self):
        """Test rejection of out-of-range tunables."""
        problem = self.make_problem()
        with self.assertRaises(ValueError):
            ssgarow(problem, pop_size=0)
        with self.assertRaises(ValueError):
            ssgarow(problem, gen_n=0)
        with self.assertRaises(ValueError):
            validate_parameters(10, 10, 1, 0.0, 0.7)
        with self.assertRaises(ValueError):
            validate_parameters(10, 10, 1, 0.5, 1.5)
        validate_parameters(10, 10, 1, 1.0, 1.0)


if __name__ == '__main__':
    unittest.main()
