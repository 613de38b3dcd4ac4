"""
Job loss simulation and rental need estimation.

This package assigns job loss and UI takeup at random, derives household
rental assistance need, and aggregates survey-weighted estimates across
repeated trials.
"""

from .aggregate import GEOGRAPHY_LEVELS, METRICS, summarise_trial
from .assignment import assign_trial
from .config import SimulationConfig
from .need import NEED_COLUMNS, add_need_vars
from .runner import SimulationRunner, average_trials, run_simulation, run_trial
from .survey import (
    Estimate,
    SurveyDesign,
    propagate_product_moe,
    propagate_prop_moe,
    propagate_ratio_moe,
    propagate_sum_moe,
    survey_mean,
    survey_total,
)

__all__ = [
    'GEOGRAPHY_LEVELS',
    'METRICS',
    'NEED_COLUMNS',
    'Estimate',
    'SimulationConfig',
    'SimulationRunner',
    'SurveyDesign',
    'add_need_vars',
    'assign_trial',
    'average_trials',
    'propagate_product_moe',
    'propagate_prop_moe',
    'propagate_ratio_moe',
    'propagate_sum_moe',
    'run_simulation',
    'run_trial',
    'summarise_trial',
    'survey_mean',
    'survey_total',
]
