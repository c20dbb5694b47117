"""
Hybrid Steady State Genetic Algorithm (H-SSGA) with ROW local search.

David Levine proposed a steady state genetic algorithm that performs a
global search and optimises every solution it produces with a local search
heuristic. Children replace the worst member of the population immediately,
one for one, when they are strictly better.
"""

import logging
import math
from typing import List, Optional
import numpy as np

from .data_models import Population
from .problem import NPProblem
from .strategies import ImprovementStrategy, RowSelectionStrategy

logger = logging.getLogger(__name__)


def binary_tournament(population: Population, rng: np.random.Generator) -> int:
    """
    Draw two members uniformly (with replacement); the fitter one wins.

    Args:
        population: Population with cached costs
        rng: Random number generator

    Returns:
        Index of the winner; the second draw wins unless the first is
        strictly better
    """
    a = int(rng.integers(0, len(population)))
    b = int(rng.integers(0, len(population)))
    if population.costs[a] < population.costs[b]:
        return a
    return b


def get_candidates(population: Population, n: int, rng: np.random.Generator) -> List[int]:
    """
    Select n distinct breeding candidates through binary tournaments.

    Tournaments repeat until n distinct winners are collected; repeated
    winners are skipped.

    Args:
        population: Population with cached costs
        n: Number of candidates (at most the population size)
        rng: Random number generator

    Returns:
        Candidate indices in the order they first won
    """
    if n > len(population):
        raise ValueError(f"Cannot select {n} distinct candidates from {len(population)} members")

    candidates: List[int] = []
    seen = set()
    while len(candidates) < n:
        candidate = binary_tournament(population, rng)
        if candidate not in seen:
            seen.add(candidate)
            candidates.append(candidate)

    return candidates


def find_best(population: Population) -> int:
    """Index of the first member holding the lowest cached cost."""
    k = -1
    k_value = math.inf
    for i, cost in enumerate(population.costs):
        if k_value > cost:
            k = i
            k_value = cost
    return k


def find_worst(population: Population) -> int:
    """Index of the first member holding the highest cached cost."""
    k = -1
    k_value = -math.inf
    for i, cost in enumerate(population.costs):
        if k_value < cost:
            k = i
            k_value = cost
    return k


def improve_times(problem: NPProblem, s, improvements: int, improvement_strategy,
                  row_selection_strategy):
    """Apply the problem's local search improvements times in a row."""
    for _ in range(improvements):
        s = problem.improve(s, improvement_strategy, row_selection_strategy)
    return s


def initialize_population(
    problem: NPProblem,
    pop_size: int,
    improvements: int,
    improvement_strategy,
    row_selection_strategy
) -> Population:
    """
    Generate pop_size improved solutions and cache their values.

    Returns:
        New Population
    """
    population = Population()
    for _ in range(pop_size):
        s = improve_times(problem, problem.generate(), improvements,
                          improvement_strategy, row_selection_strategy)
        population.append(s, problem.value(s))
    return population


def validate_parameters(pop_size: int, gen_n: int, improvements: int,
                        sel_rate: float, x_rate: float) -> None:
    """
    Check the driver tunables.

    Raises:
        ValueError: If a size is below 1 or a rate is outside (0, 1]
    """
    for name, value in (('pop_size', pop_size), ('gen_n', gen_n),
                        ('improvements', improvements)):
        if not isinstance(value, (int, np.integer)) or value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value}")

    for name, value in (('sel_rate', sel_rate), ('x_rate', x_rate)):
        if not 0 < value <= 1:
            raise ValueError(f"{name} must be within (0, 1], got {value}")


def ssgarow(problem: NPProblem,
            pop_size: int = 100,
            gen_n: int = 500,
            improvements: int = 1,
            improvement_strategy: ImprovementStrategy = ImprovementStrategy.BEST,
            row_selection_strategy: RowSelectionStrategy = RowSelectionStrategy.MAX,
            sel_rate: float = 0.5,
            x_rate: float = 0.7,
            rng: Optional[np.random.Generator] = None,
            history: Optional[list] = None):
    """
    Run the hybrid steady state genetic algorithm.

    Algorithm:
        1. Generate pop_size solutions, improve each `improvements` times and
           cache their values
        2. For gen_n generations:
           a. Pick floor(pop_size * sel_rate) distinct candidates by binary
              tournament
           b. With probability x_rate per candidate, cross it with a
              candidate drawn uniformly from the same set
           c. Improve every child, then let it replace the current worst
              member if it is strictly better
        3. Improve the best member once more and return it

    Args:
        problem: The problem
        pop_size: The size of the population
        gen_n: The number of generations
        improvements: Local search passes applied to each solution
        improvement_strategy: Strategy used to improve solutions
        row_selection_strategy: Strategy used to select the row to improve
        sel_rate: Fraction of the population selected as candidates each
            generation
        x_rate: Probability of crossover for each candidate
        rng: Random number generator (defaults to the problem's)
        history: Optional list receiving (generation, best_cost, worst_cost)
            after every generation

    Returns:
        The best solution found

    Raises:
        ValueError: If a tunable is out of range
    """
    validate_parameters(pop_size, gen_n, improvements, sel_rate, x_rate)
    if rng is None:
        rng = problem.rng

    logger.debug("Initializing population")
    population = initialize_population(
        problem, pop_size, improvements, improvement_strategy, row_selection_strategy
    )
    n_candidates = math.floor(pop_size * sel_rate)

    logger.debug("Generations passing")
    for gen in range(gen_n):
        selection = get_candidates(population, n_candidates, rng)
        children = []

        for s in selection:
            if rng.random() < x_rate:
                p = selection[int(rng.integers(0, len(selection)))]
                children.extend(problem.crossover(population[s], population[p]))

        for child in children:
            child = improve_times(problem, child, improvements,
                                  improvement_strategy, row_selection_strategy)
            child_value = problem.value(child)
            worst = find_worst(population)
            if population.costs[worst] > child_value:
                population.replace(worst, child, child_value)

        if history is not None:
            history.append((gen, population.best_cost(), population.worst_cost()))

    logger.debug("Improving final solution")
    best = population[find_best(population)]
    return improve_times(problem, best, improvements,
                         improvement_strategy, row_selection_strategy)
