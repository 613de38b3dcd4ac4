"""
Random assignment of job loss and unemployment insurance takeup.

Job loss is assigned at random with each person's industry job-loss
probability. Not everyone who loses a job receives UI, so takeup among those
who lost jobs is assigned at random with a single takeup rate. That rate
covers people who are ineligible because of their wage history, so the draw
for eligible people uses the rate scaled up by the ineligible share. The final
takeup rate among everyone who lost a job then matches the assumed rate.
"""

import logging

import numpy as np
import pandas as pd

from ..utils import validate_columns

# Configure logger
logger = logging.getLogger(__name__)

UI_BENEFIT_COLUMNS = [
    'ui_benefits_month_reg',
    'ui_benefits_month_extra600',
    'ui_benefits_month_extra300',
]

ASSIGNMENT_COLUMNS = ['inc_wages', 'job_loss_prob', 'perwt'] + UI_BENEFIT_COLUMNS


def assign_risk_group(persons: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
    """
    Assign job loss status.

    Args:
        persons: Person records with ``job_loss_prob`` and ``inc_wages``
        rng: Random generator for this trial

    Returns:
        Copy with ``risk_group`` (nullable boolean, NA for people without
        or zero wages) and ``risk_wages`` columns
    """
    df = persons.copy()
    draws = rng.random(len(df))

    risk = pd.array(draws < df['job_loss_prob'].to_numpy(), dtype='boolean')
    # No wage income, or zero wages, is outside the risk universe
    no_wages = df['inc_wages'].isna() | (df['inc_wages'] <= 0)
    risk[no_wages.to_numpy()] = pd.NA
    df['risk_group'] = risk

    df['risk_wages'] = df['inc_wages'].where(df['risk_group'].fillna(False).astype(bool))
    return df


def ui_ineligible_share(persons: pd.DataFrame) -> float:
    """
    Weighted share of people who lost a job that are ineligible for UI.

    Returns 0.0 when nobody lost a job, since there is then nobody to adjust
    the takeup rate for.
    """
    at_risk = persons['risk_group'].fillna(False).astype(bool)
    weights = persons.loc[at_risk, 'perwt']
    jobs_lost = weights.sum()

    if jobs_lost == 0:
        logger.warning("No persons assigned job loss in this trial; UI ineligible share set to 0")
        return 0.0

    ineligible = (weights * (persons.loc[at_risk, 'ui_benefits_month_reg'] == 0)).sum()
    return float(ineligible / jobs_lost)


def adjust_takeup_rate(ui_takeup_rate: float, ineligible_share: float) -> float:
    """
    Takeup rate among eligible people that yields ``ui_takeup_rate`` overall.

    The result is not capped at 1: when the ineligible share is large the
    adjusted rate saturates and every eligible person takes up UI.
    """
    if ineligible_share >= 1:
        logger.warning("Everyone assigned job loss is ineligible for UI")
        return np.inf

    adjusted = ui_takeup_rate / (1 - ineligible_share)
    if adjusted > 1:
        logger.warning(
            f"Adjusted UI takeup rate {adjusted:.3f} exceeds 1 "
            f"(ineligible share {ineligible_share:.3f}); all eligible persons take up UI"
        )
    return adjusted


def add_ui_takeup(persons: pd.DataFrame, ui_takeup_rate: float,
                  rng: np.random.Generator) -> pd.DataFrame:
    """
    Assign UI takeup and zero out benefits for people who don't receive them.

    Args:
        persons: Output of ``assign_risk_group``
        ui_takeup_rate: Assumed takeup rate among everyone who lost a job
        rng: Random generator for this trial

    Returns:
        Copy with ``ui_takeup`` and adjusted benefit columns
    """
    df = persons.copy()

    ineligible_share = ui_ineligible_share(df)
    adjusted_rate = adjust_takeup_rate(ui_takeup_rate, ineligible_share)
    logger.debug(f"UI ineligible share {ineligible_share:.4f}, adjusted takeup rate {adjusted_rate:.4f}")

    # Benefits only for those who lost their job
    at_risk = df['risk_group'].fillna(False).astype(bool)
    for col in UI_BENEFIT_COLUMNS:
        df[col] = df[col].where(at_risk, 0.0)

    takeup = rng.random(len(df)) < adjusted_rate
    # Ineligible people never take up, whatever the draw
    takeup &= (df['ui_benefits_month_reg'] != 0).to_numpy()
    df['ui_takeup'] = takeup

    for col in UI_BENEFIT_COLUMNS:
        df[col] = df[col].where(df['ui_takeup'], 0.0)

    return df


def assign_trial(persons: pd.DataFrame, ui_takeup_rate: float, seed: int) -> pd.DataFrame:
    """
    Run both assignment steps for one trial.

    The output depends only on the inputs and ``seed``.

    Args:
        persons: Cleaned person records
        ui_takeup_rate: Assumed UI takeup rate
        seed: Seed for this trial

    Returns:
        Person records with trial assignment columns
    """
    validate_columns(persons, ASSIGNMENT_COLUMNS, 'person')
    rng = np.random.default_rng(seed)

    df = assign_risk_group(persons, rng)
    return add_ui_takeup(df, ui_takeup_rate, rng)
