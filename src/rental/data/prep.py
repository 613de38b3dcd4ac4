"""
Prepare IPUMS ACS person records for the rental need simulation.

Takes an already loaded IPUMS extract (lower-case column names) and the BLS
employment table, applies the universe filters and recodes, and derives the
baseline financial fields the simulation consumes: wage and household income,
gross rent, target rent burden, industry job-loss probability and baseline
unemployment insurance benefits.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from ..industry import classify_industries
from ..settings import (
    DEFAULT_TARGET_BURDEN,
    STATE_FIPS,
    UI_MAX_WEEKLY_BENEFIT,
    UI_MIN_ANNUAL_WAGES,
    UI_MIN_WEEKLY_BENEFIT,
    UI_REPLACEMENT_RATE,
    UI_SUPPLEMENTS,
    WEEKS_PER_MONTH,
)
from ..utils import validate_columns
from .unemployment import attach_job_loss_prob, job_loss_rates, renter_unemployment_adjustment

# Configure logger
logger = logging.getLogger(__name__)

RAW_COLUMNS = [
    'serial', 'pernum', 'perwt', 'hhwt', 'statefip', 'countyfip', 'city',
    'gq', 'ownershp', 'empstat', 'ind', 'incwage', 'hhincome', 'rentgrs'
]

# IPUMS N/A codes
INCWAGE_MISSING = [999998, 999999]
HHINCOME_MISSING = 9999999


def filter_universe(persons: pd.DataFrame, labor_force_only: bool = False) -> pd.DataFrame:
    """
    Restrict person records to the analysis universe.

    Keeps people in households (not group quarters) with known tenure, and
    drops labor force members whose industry is unclassified. With
    ``labor_force_only`` only employed and unemployed people remain.

    Args:
        persons: IPUMS person records
        labor_force_only: Keep only ``empstat`` 1-2

    Returns:
        Filtered copy with an ``ind_group_bls`` column
    """
    validate_columns(persons, ['gq', 'ownershp', 'empstat', 'ind'], 'person')

    df = persons.copy()
    df['ind_group_bls'] = classify_industries(df['ind'])

    in_labor_force = df['empstat'].isin([1, 2])
    unclassified = in_labor_force & df['ind_group_bls'].isna()
    if unclassified.any():
        logger.warning(f"Dropping {unclassified.sum()} labor force records with unclassified industry")

    keep = df['gq'].isin([1, 2]) & df['ownershp'].isin([1, 2]) & ~unclassified
    if labor_force_only:
        keep &= in_labor_force

    logger.info(f"Universe filter kept {keep.sum()} of {len(df)} person records")
    return df[keep].copy()


def add_household_fields(persons: pd.DataFrame) -> pd.DataFrame:
    """Recode income, rent, tenure and geography fields."""
    logger.info("Recoding income, rent and geography fields...")
    df = persons.copy()

    # Zero wages count as no wages
    wages = df['incwage'].astype(float)
    df['inc_wages'] = wages.mask(wages.isin(INCWAGE_MISSING) | (wages <= 0))

    hh_inc = df['hhincome'].astype(float)
    df['hh_inc_nom'] = hh_inc.mask(hh_inc == HHINCOME_MISSING)

    df['renter'] = df['ownershp'] == 2
    rent = df['rentgrs'].astype(float)
    df['gross_rent_nom'] = rent.where(df['renter'] & (rent > 0))

    df['state'] = df['statefip'].astype(int).astype(str).str.zfill(2)
    outside = df['state'] != STATE_FIPS
    if outside.any():
        logger.warning(f"{outside.sum()} records outside state {STATE_FIPS}")
    county = df['countyfip'].fillna(0).astype(int)
    df['county'] = (df['state'] + county.astype(str).str.zfill(3)).where(county > 0)
    city = df['city'].fillna(0).astype(int)
    df['city'] = city.astype(str).where(city > 0)

    return df


def add_target_burden(persons: pd.DataFrame, floor: float = DEFAULT_TARGET_BURDEN) -> pd.DataFrame:
    """
    Add each household's target rent burden.

    The target is the burden the household had before any job loss, but never
    below ``floor``. Where the pre-loss burden is undefined (no rent, zero or
    negative income) the floor is used.

    Args:
        persons: Person records with ``gross_rent_nom`` and ``hh_inc_nom``
        floor: Minimum target rent-to-income ratio

    Returns:
        Copy with ``pre_burden`` and ``target_burden`` columns
    """
    if not 0 < floor <= 1:
        raise ValueError(f"floor must be in (0, 1], got {floor}")
    validate_columns(persons, ['gross_rent_nom', 'hh_inc_nom'], 'person')

    df = persons.copy()
    monthly_inc = df['hh_inc_nom'] / 12
    df['pre_burden'] = (df['gross_rent_nom'] / monthly_inc.where(monthly_inc > 0)).astype(float)
    df['target_burden'] = df['pre_burden'].clip(lower=floor).fillna(floor)
    return df


def add_ui_benefits(persons: pd.DataFrame) -> pd.DataFrame:
    """
    Add baseline monthly unemployment insurance benefits.

    The weekly benefit replaces half of average weekly wages within the state
    minimum and maximum; people below the annual wage threshold are
    ineligible and get zero for every tier. The supplement tiers hold only the
    federal supplement, paid to anyone eligible for the regular benefit.
    """
    validate_columns(persons, ['inc_wages'], 'person')
    df = persons.copy()

    wages = df['inc_wages']
    eligible = wages.notna() & (wages >= UI_MIN_ANNUAL_WAGES)
    weekly = (wages / 52 * UI_REPLACEMENT_RATE).clip(UI_MIN_WEEKLY_BENEFIT, UI_MAX_WEEKLY_BENEFIT)

    df['ui_benefits_month_reg'] = np.where(eligible, weekly * WEEKS_PER_MONTH, 0.0)
    for tier, weekly_amount in UI_SUPPLEMENTS.items():
        df[f'ui_benefits_month_{tier}'] = np.where(eligible, weekly_amount * WEEKS_PER_MONTH, 0.0)

    logger.info(f"{eligible.sum()} of {wages.notna().sum()} wage earners eligible for UI")
    return df


def prepare_persons(
    raw: pd.DataFrame,
    bls_emp: pd.DataFrame,
    target_burden: float = DEFAULT_TARGET_BURDEN,
    renter_adjust: bool = True
) -> pd.DataFrame:
    """
    Build the cleaned person record set from a raw IPUMS extract.

    Args:
        raw: IPUMS person records (lower-case column names)
        bls_emp: BLS employment table, see ``job_loss_rates``
        target_burden: Minimum target rent burden
        renter_adjust: Scale job-loss rates by the renter unemployment adjustment

    Returns:
        DataFrame ready for ``rental.sim``
    """
    validate_columns(raw, RAW_COLUMNS, 'IPUMS')
    logger.info(f"Preparing {len(raw)} IPUMS person records...")

    persons = filter_universe(raw)

    renter_adj: Optional[pd.DataFrame] = None
    if renter_adjust:
        renter_adj = renter_unemployment_adjustment(filter_universe(raw, labor_force_only=True))

    rates = job_loss_rates(bls_emp, renter_adj)
    persons = attach_job_loss_prob(persons, rates)
    persons = add_household_fields(persons)
    persons = add_target_burden(persons, floor=target_burden)
    persons = add_ui_benefits(persons)

    logger.info(
        f"Prepared {len(persons)} persons in {persons['serial'].nunique()} households"
    )
    return persons.reset_index(drop=True)
