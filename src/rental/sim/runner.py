"""
Simulation Runner

Runs the full per-trial pipeline (job loss and UI assignment, rental need,
survey aggregation) for every trial and averages the results across trials.
Trials are independent, so they can run on a process pool; each trial's
random draws depend only on its own seed.
"""

import logging
from multiprocessing import Pool, cpu_count
from typing import List, Optional, Sequence

import pandas as pd

from ..data.prep import add_target_burden
from ..utils import log_memory_usage, time_execution, validate_columns
from .aggregate import GEOGRAPHY_LEVELS, RESULT_COLUMNS, summarise_trial
from .assignment import ASSIGNMENT_COLUMNS, assign_trial
from .config import SimulationConfig
from .need import NEED_INPUT_COLUMNS, add_need_vars

# Configure logging
logger = logging.getLogger(__name__)

KEY_COLUMNS = ['geo_level', 'geo_id', 'metric']
REQUIRED_COLUMNS = sorted(
    (set(ASSIGNMENT_COLUMNS) | set(NEED_INPUT_COLUMNS) | {'hhwt', 'renter'})
    - {'risk_group', 'risk_wages', 'target_burden'}
)

# Person records held by each pool worker
_worker_persons: Optional[pd.DataFrame] = None


def _init_worker(persons: pd.DataFrame) -> None:
    global _worker_persons
    _worker_persons = persons


def run_trial(
    persons: pd.DataFrame,
    config: SimulationConfig,
    trial: int,
    levels: Sequence[str] = GEOGRAPHY_LEVELS,
    person_repweights: Optional[Sequence[str]] = None,
    household_repweights: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """
    Run one trial.

    Args:
        persons: Cleaned person records
        config: Simulation configuration
        trial: Trial index, used to derive the seed
        levels: Geography levels to summarise
        person_repweights: Person replicate weight columns
        household_repweights: Household replicate weight columns

    Returns:
        Long result table for this trial with a ``trial`` column
    """
    seed = config.seed_for_trial(trial)
    logger.debug(f"Running trial {trial} with seed {seed}")

    assigned = assign_trial(persons, config.ui_takeup_rate, seed)
    with_need = add_need_vars(assigned)
    result = summarise_trial(
        with_need,
        levels=levels,
        person_repweights=person_repweights,
        household_repweights=household_repweights,
        level=config.confidence_level,
    )
    result.insert(0, 'trial', trial)
    return result


def average_trials(results: List[pd.DataFrame]) -> pd.DataFrame:
    """
    Average trial results per geography and metric.

    Estimates and both confidence bounds are averaged arithmetically; the
    margin of error is the averaged upper bound minus the averaged estimate.

    Args:
        results: One long result table per trial

    Returns:
        DataFrame with ``geo_level``, ``geo_id``, ``metric``, ``estimate``,
        ``lower``, ``upper``, ``moe`` and ``trials``

    Raises:
        ValueError: If there are no results or trials disagree on their rows
    """
    if not results:
        raise ValueError("No trial results to average")

    combined = pd.concat(results, ignore_index=True)
    grouped = combined.groupby(KEY_COLUMNS, sort=False)
    averaged = grouped[['estimate', 'lower', 'upper']].mean()
    averaged['trials'] = grouped.size()

    if averaged['trials'].nunique() > 1:
        raise ValueError("Trial results cover different geography-metric rows")

    averaged['moe'] = averaged['upper'] - averaged['estimate']
    return averaged.reset_index()[KEY_COLUMNS + ['estimate', 'lower', 'upper', 'moe', 'trials']]


class SimulationRunner:
    """
    Runs and averages simulation trials over a fixed person dataset.

    The person records are treated as immutable: every trial works on its own
    copy and nothing carries over from one trial to the next except the
    collected result tables.
    """

    def __init__(
        self,
        persons: pd.DataFrame,
        config: SimulationConfig,
        levels: Sequence[str] = GEOGRAPHY_LEVELS,
        person_repweights: Optional[Sequence[str]] = None,
        household_repweights: Optional[Sequence[str]] = None
    ):
        """
        Initialize the runner and validate its inputs.

        Args:
            persons: Cleaned person records
            config: Simulation configuration
            levels: Geography levels to summarise
            person_repweights: Person replicate weight columns
            household_repweights: Household replicate weight columns
        """
        if not isinstance(config, SimulationConfig):
            raise TypeError(f"config must be a SimulationConfig, got {type(config).__name__}")

        validate_columns(persons, REQUIRED_COLUMNS, 'person')
        validate_columns(persons, list(person_repweights or []) + list(household_repweights or []), 'person')
        if persons.empty:
            raise ValueError("Person data is empty")

        # The configured floor always sets the target, whatever the input carries
        if 'target_burden' in persons.columns:
            logger.info(f"Recomputing target_burden with floor {config.target_burden}")
        self.persons = add_target_burden(persons, floor=config.target_burden)

        self.config = config
        self.levels = tuple(levels)
        self.person_repweights = list(person_repweights) if person_repweights else None
        self.household_repweights = list(household_repweights) if household_repweights else None
        self.trial_results: List[pd.DataFrame] = []

        log_memory_usage(self.persons, "Person data")

    def _trial_args(self, trial: int) -> tuple:
        return (
            self.config, trial, self.levels,
            self.person_repweights, self.household_repweights
        )

    @staticmethod
    def _run_trial_parallel(args) -> pd.DataFrame:
        """
        Run one trial in a multiprocessing worker.

        Person records come from the copy installed by ``_init_worker``.
        Exceptions propagate to the parent and abort the run.
        """
        return run_trial(_worker_persons, *args)

    @time_execution
    def run(self) -> pd.DataFrame:
        """
        Run every trial and average the results.

        Returns:
            Averaged long result table, see ``average_trials``
        """
        iterations = self.config.iterations
        n_jobs = self.config.n_jobs
        if n_jobs == -1:
            n_jobs = max(1, cpu_count() - 1)  # Leave one CPU free
        n_jobs = min(n_jobs, iterations)

        logger.info(
            f"Running {iterations} trials on {len(self.persons)} persons "
            f"using {n_jobs} process{'es' if n_jobs > 1 else ''}"
        )

        if n_jobs > 1:
            # Person records are sent once per worker, not once per trial
            with Pool(processes=n_jobs, initializer=_init_worker, initargs=(self.persons,)) as pool:
                results = list(pool.imap_unordered(
                    self._run_trial_parallel,
                    (self._trial_args(trial) for trial in range(iterations)),
                    chunksize=max(1, iterations // (n_jobs * 4))
                ))
        else:
            results = [run_trial(self.persons, *self._trial_args(trial)) for trial in range(iterations)]

        # Completion order varies across workers; trial order does not
        self.trial_results = sorted(results, key=lambda r: int(r['trial'].iloc[0]) if len(r) else -1)
        if len(self.trial_results) != iterations:
            raise RuntimeError(f"Expected {iterations} trial results, got {len(self.trial_results)}")

        averaged = average_trials([r[RESULT_COLUMNS] for r in self.trial_results])
        logger.info(f"Averaged {iterations} trials into {len(averaged)} geography-metric rows")
        return averaged


def run_simulation(persons: pd.DataFrame, config: SimulationConfig, **kwargs) -> pd.DataFrame:
    """
    Convenience function to run and average all trials.

    Args:
        persons: Cleaned person records
        config: Simulation configuration
        **kwargs: Passed to ``SimulationRunner``

    Returns:
        Averaged long result table
    """
    runner = SimulationRunner(persons, config, **kwargs)
    return runner.run()
