"""
Simulation configuration.

All run parameters travel in one immutable ``SimulationConfig`` that is
validated on construction, before any simulation work begins.
"""

from dataclasses import dataclass
import numbers

from ..settings import (
    DEFAULT_BASE_SEED,
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_ITERATIONS,
    DEFAULT_TARGET_BURDEN,
    DEFAULT_UI_TAKEUP_RATE,
    POPULATION_ALLOCATION_SHARE,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Parameters for a simulation run.

    Attributes:
        total_funds: Total program funds to allocate (dollars)
        iterations: Number of independent trials
        ui_takeup_rate: Share of people losing their job who receive UI
        target_burden: Target rent-to-income ratio
        hide_moe: Drop margin of error columns from display tables
        base_seed: Trial ``i`` is seeded with ``base_seed + i``
        n_jobs: Worker processes; 1 runs sequentially, -1 uses all CPUs but one
        confidence_level: Confidence level for margins of error
        population_allocation_share: Share of funds allocated by population
    """
    total_funds: float
    iterations: int = DEFAULT_ITERATIONS
    ui_takeup_rate: float = DEFAULT_UI_TAKEUP_RATE
    target_burden: float = DEFAULT_TARGET_BURDEN
    hide_moe: bool = True
    base_seed: int = DEFAULT_BASE_SEED
    n_jobs: int = 1
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    population_allocation_share: float = POPULATION_ALLOCATION_SHARE

    def __post_init__(self):
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, numbers.Integral):
            raise TypeError(f"iterations must be an integer, got {type(self.iterations).__name__}")
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        if not 0 <= self.ui_takeup_rate <= 1:
            raise ValueError(f"ui_takeup_rate must be in [0, 1], got {self.ui_takeup_rate}")
        if not self.total_funds > 0:
            raise ValueError(f"total_funds must be positive, got {self.total_funds}")
        if not 0 < self.target_burden <= 1:
            raise ValueError(f"target_burden must be in (0, 1], got {self.target_burden}")
        if not 0 < self.confidence_level < 1:
            raise ValueError(f"confidence_level must be in (0, 1), got {self.confidence_level}")
        if not 0 <= self.population_allocation_share <= 1:
            raise ValueError(
                f"population_allocation_share must be in [0, 1], got {self.population_allocation_share}"
            )
        if self.n_jobs == 0 or self.n_jobs < -1:
            raise ValueError(f"n_jobs must be positive or -1, got {self.n_jobs}")
        if isinstance(self.base_seed, bool) or not isinstance(self.base_seed, numbers.Integral):
            raise TypeError(f"base_seed must be an integer, got {type(self.base_seed).__name__}")

    def seed_for_trial(self, trial: int) -> int:
        """Seed for one trial, independent of execution order."""
        return self.base_seed + trial
