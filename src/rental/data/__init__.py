"""Data preparation modules for the rental need simulation."""

from .prep import add_target_burden, add_ui_benefits, filter_universe, prepare_persons
from .unemployment import attach_job_loss_prob, job_loss_rates, renter_unemployment_adjustment

__all__ = [
    'add_target_burden',
    'add_ui_benefits',
    'attach_job_loss_prob',
    'filter_universe',
    'job_loss_rates',
    'prepare_persons',
    'renter_unemployment_adjustment',
]
