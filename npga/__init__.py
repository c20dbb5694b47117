"""
npga - Hybrid genetic algorithms for NP problems on bit vectors

This package provides a steady state genetic algorithm combined with a
problem-specific local search, a generic NP problem abstraction, and a Set
Partitioning Problem model with Levine's row-oriented (ROW) heuristic.

Key Features:
- Explicit problem abstraction (validate, value, generate, crossover, mutate)
- Bit vectors with explicit clone/view copies
- Penalty-based, feasibility-aware SPP fitness
- Injectable numpy random generators for reproducible runs

Modules:
- bitset: Fixed-size bit vector solution encoding
- crossover: Two point wrap-around crossover
- mutation: Bit flip mutation
- problem: NPProblem abstract base class
- strategies: Local search strategy enums
- spp: Set Partitioning Problem and ROW local search
- ssga: Hybrid steady state genetic algorithm driver
- data_models: Population, SPPInstance, TrialRecord, ReportRow
- io_utils: SPP instance files, CSV reports, solution and metadata files
- config_loader: YAML run configuration
- orchestration: Strategy sweep experiment
- visualization: Report and convergence plots
- cli: Command-line interface
"""

__version__ = "0.1.0"

from .bitset import BitVector
from .crossover import tpx
from .errors import ConfigurationError
from .problem import NPProblem
from .spp import SPProblem
from .strategies import ImprovementStrategy, RowSelectionStrategy
from .ssga import ssgarow
from .data_models import Population, SPPInstance, TrialRecord, ReportRow

__all__ = [
    "BitVector",
    "tpx",
    "ConfigurationError",
    "NPProblem",
    "SPProblem",
    "ImprovementStrategy",
    "RowSelectionStrategy",
    "ssgarow",
    "Population",
    "SPPInstance",
    "TrialRecord",
    "ReportRow",
]
