"""
Local search strategies selectable by hybrid genetic algorithm drivers.
"""

from enum import Enum


class RowSelectionStrategy(Enum):
    """How the ROW heuristic picks the row to work on"""
    RANDOM = "random"
    MAX = "max"  # row with the greatest number of selected covering sets

    @classmethod
    def from_name(cls, name: str) -> "RowSelectionStrategy":
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown row selection strategy: {name}")

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ImprovementStrategy(Enum):
    """Which improving move the ROW heuristic applies"""
    FIRST = "first"  # first improvement found
    BEST = "best"  # best of all improvements found

    @classmethod
    def from_name(cls, name: str) -> "ImprovementStrategy":
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown improvement strategy: {name}")

    @property
    def label(self) -> str:
        return self.value.capitalize()
