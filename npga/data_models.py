"""
Data models for the genetic algorithm toolkit.

Core data structures representing the driver's population, parsed SPP
instances, and the per-trial and aggregated experiment records.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any, Union

import numpy as np

from .bitset import BitVector


@dataclass
class Population:
    """
    Fixed-size population owned by the genetic algorithm driver.

    Solutions and their cached values are kept in parallel lists and are
    always replaced together.

    Attributes:
        solutions: Member solutions
        costs: Cached value of each member (lower is better)
    """
    solutions: list[Any] = field(default_factory=list)
    costs: list[float] = field(default_factory=list)

    def __post_init__(self):
        """Validate that solutions and costs line up."""
        if len(self.solutions) != len(self.costs):
            raise ValueError(
                f"Population has {len(self.solutions)} solutions "
                f"but {len(self.costs)} costs"
            )

    def append(self, solution: Any, cost: float) -> None:
        self.solutions.append(solution)
        self.costs.append(cost)

    def replace(self, index: int, solution: Any, cost: float) -> None:
        """Replace member at index together with its cached value."""
        self.solutions[index] = solution
        self.costs[index] = cost

    def best_cost(self) -> float:
        return min(self.costs)

    def worst_cost(self) -> float:
        return max(self.costs)

    def __getitem__(self, index: int) -> Any:
        return self.solutions[index]

    def __len__(self) -> int:
        return len(self.solutions)


@dataclass
class SPPInstance:
    """
    Set Partitioning Problem data as read from an instance file.

    Attributes:
        rows: Number of rows
        sets: Rows covered by each set (0-based)
        costs: Cost of each set
        name: Instance name (defaults to the file stem)
        path: Source file, if any
    """
    rows: int
    sets: list[list[int]]
    costs: list[float]
    name: str = "instance"
    path: Optional[Path] = None

    def __post_init__(self):
        """Ensure path is a Path object."""
        if self.path is not None and not isinstance(self.path, Path):
            self.path = Path(self.path)

    @property
    def columns(self) -> int:
        return len(self.sets)

    def density(self) -> float:
        """Fraction of non-zero entries in the constraint matrix."""
        if not self.rows or not self.sets:
            return 0.0
        return sum(len(s) for s in self.sets) / (self.rows * len(self.sets))

    def to_problem(
        self,
        penalty_factor: float = 1,
        rng: Optional[np.random.Generator] = None
    ) -> "SPProblem":
        """
        Build an SPProblem from this instance.

        The problem sorts its own copy of the sets, leaving this instance
        untouched.
        """
        from .spp import SPProblem

        return SPProblem(
            self.rows,
            [list(s) for s in self.sets],
            list(self.costs),
            penalty_factor=penalty_factor,
            rng=rng
        )


@dataclass
class TrialRecord:
    """
    Outcome of one driver run.

    Attributes:
        params: Strategy pair label, e.g. "is:Best|rss:Max"
        trial: Trial index within the strategy pair
        value: Value of the returned solution
        elapsed_ms: Wall time of the run in milliseconds
        feasible: Whether the returned solution is feasible
        solution: The returned solution
    """
    params: str
    trial: int
    value: float
    elapsed_ms: float
    feasible: bool
    solution: BitVector
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReportRow:
    """
    Aggregated results for one strategy pair.

    Attributes:
        params: Strategy pair label
        h_min: Lowest value found
        h_max: Highest value found
        h_avg: Mean value
        t_avg: Mean run time in milliseconds
        feasible: Whether any run returned a feasible solution
        best: Solution with the lowest value
    """
    params: str
    h_min: float
    h_max: float
    h_avg: float
    t_avg: float
    feasible: bool
    best: Optional[BitVector] = None

    FIELDNAMES = ['Params', 'hMin', 'hMax', 'hAvg', 'tAvg', 'F?']

    @classmethod
    def from_trials(cls, params: str, trials: list[TrialRecord]) -> "ReportRow":
        """
        Aggregate trial records of one strategy pair.

        Raises:
            ValueError: If trials is empty
        """
        if not trials:
            raise ValueError(f"No trials recorded for {params}")

        values = [t.value for t in trials]
        best = min(trials, key=lambda t: t.value)

        return cls(
            params=params,
            h_min=min(values),
            h_max=max(values),
            h_avg=float(np.mean(values)),
            t_avg=float(np.mean([t.elapsed_ms for t in trials])),
            feasible=any(t.feasible for t in trials),
            best=best.solution,
        )

    def to_dict(self) -> dict[str, Union[str, bool]]:
        """
        Convert to a dictionary for CSV export.

        Returns:
            Dictionary keyed by the report column names, numbers with two
            decimals
        """
        return {
            'Params': self.params,
            'hMin': f"{self.h_min:.2f}",
            'hMax': f"{self.h_max:.2f}",
            'hAvg': f"{self.h_avg:.2f}",
            'tAvg': f"{self.t_avg:.2f}",
            'F?': str(self.feasible).lower(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportRow":
        """Create a report row from a CSV dictionary."""
        return cls(
            params=data['Params'],
            h_min=float(data['hMin']),
            h_max=float(data['hMax']),
            h_avg=float(data['hAvg']),
            t_avg=float(data['tAvg']),
            feasible=str(data['F?']).strip().lower() == 'true',
        )


def strategy_label(improvement_strategy, row_selection_strategy) -> str:
    """Report label for a strategy pair, e.g. "is:Best|rss:Max"."""
    return f"is:{improvement_strategy.label}|rss:{row_selection_strategy.label}"
