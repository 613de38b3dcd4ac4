"""
Industry job-loss rates.

Turns the BLS state employment series into a per-industry probability of job
loss, scaled up for renters whose unemployment rate runs higher than the
all-worker rate within the same industry.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from ..settings import BLS_REFERENCE_PERIODS
from ..sim.survey import SurveyDesign, survey_mean
from ..utils import validate_columns

# Configure logger
logger = logging.getLogger(__name__)


def renter_unemployment_adjustment(persons: pd.DataFrame) -> pd.DataFrame:
    """
    Ratio of the renter unemployment rate to the overall rate by industry.

    Expects the filtered labor force universe (see ``filter_universe``) with
    ``empstat`` (1 employed, 2 unemployed), ``ownershp`` (2 renter),
    ``ind_group_bls`` and ``perwt``.

    Args:
        persons: Person-level data

    Returns:
        DataFrame with ``ind_group_bls`` and ``unemp_renter_adj`` columns
    """
    validate_columns(persons, ['empstat', 'ownershp', 'ind_group_bls', 'perwt'], 'person')

    df = persons[persons['ind_group_bls'].notna()].reset_index(drop=True)
    design = SurveyDesign(df, 'perwt')
    unemployed = (df['empstat'] == 2).astype(float)
    renter = (df['ownershp'] == 2).to_numpy()

    rows = []
    for group in sorted(df['ind_group_bls'].unique()):
        in_group = (df['ind_group_bls'] == group).to_numpy()
        all_rate = survey_mean(design, unemployed, domain=in_group).estimate
        renter_rate = survey_mean(design, unemployed, domain=in_group & renter).estimate
        rows.append({
            'ind_group_bls': group,
            'renter_unemp_rate': renter_rate,
            'all_unemp_rate': all_rate,
        })

    adj = pd.DataFrame(rows, columns=['ind_group_bls', 'renter_unemp_rate', 'all_unemp_rate'])
    with np.errstate(divide='ignore', invalid='ignore'):
        adj['unemp_renter_adj'] = adj['renter_unemp_rate'] / adj['all_unemp_rate']
    adj = adj.dropna(subset=['renter_unemp_rate'])

    logger.info(f"Computed renter unemployment adjustment for {len(adj)} industry groups")
    return adj[['ind_group_bls', 'unemp_renter_adj']].reset_index(drop=True)


def job_loss_rates(
    bls_emp: pd.DataFrame,
    renter_adj: Optional[pd.DataFrame] = None,
    periods=BLS_REFERENCE_PERIODS
) -> pd.DataFrame:
    """
    Derive job-loss probabilities from BLS employment levels.

    The employment change between the two reference periods gives
    ``unemp_chg_pct``; declines become the job-loss probability, optionally
    scaled by the renter adjustment factor and clipped to [0, 1].

    Args:
        bls_emp: Table with ``supersector_industry`` and ``emp_<period>`` columns
        renter_adj: Optional output of ``renter_unemployment_adjustment``
        periods: (before, after) period labels

    Returns:
        DataFrame with ``ind_group_bls``, ``unemp_chg_pct`` and ``job_loss_prob``
    """
    before, after = (f"emp_{p}" for p in periods)
    validate_columns(bls_emp, ['supersector_industry', before, after], 'BLS employment')

    rates = pd.DataFrame({
        'ind_group_bls': bls_emp['supersector_industry'].astype(str),
        'unemp_chg_pct': (bls_emp[after] - bls_emp[before]) / bls_emp[before],
    })
    rates['job_loss_prob'] = (-rates['unemp_chg_pct']).clip(lower=0)

    if renter_adj is not None:
        rates = rates.merge(renter_adj, on='ind_group_bls', how='left')
        rates['unemp_renter_adj'] = rates['unemp_renter_adj'].fillna(1.0)
        rates['job_loss_prob'] = rates['job_loss_prob'] * rates['unemp_renter_adj']

    rates['job_loss_prob'] = rates['job_loss_prob'].fillna(0).clip(0, 1)
    return rates


def attach_job_loss_prob(persons: pd.DataFrame, rates: pd.DataFrame) -> pd.DataFrame:
    """
    Join per-industry job-loss probabilities onto person records.

    People whose industry group has no rate get a probability of zero.
    """
    validate_columns(persons, ['ind_group_bls'], 'person')
    validate_columns(rates, ['ind_group_bls', 'job_loss_prob'], 'job-loss rate')

    prob = rates.set_index('ind_group_bls')['job_loss_prob']
    df = persons.copy()
    df['job_loss_prob'] = df['ind_group_bls'].map(prob).astype(float).fillna(0.0)

    missing = set(persons['ind_group_bls'].dropna()) - set(prob.index)
    if missing:
        logger.warning(f"No job-loss rate for industry groups: {sorted(missing)}")

    return df
