"""
Household rental assistance need.

Rental assistance need is the monthly amount required to bring a household
back to its target rent-to-income ratio after income lost to job loss, under
four UI scenarios: no UI, regular UI, regular UI plus the $600 weekly
supplement, and regular UI plus the $300 weekly supplement. Need is capped at
the household's full gross rent.
"""

import logging

import numpy as np
import pandas as pd

from ..utils import validate_columns

# Configure logger
logger = logging.getLogger(__name__)

NEED_INPUT_COLUMNS = [
    'serial', 'inc_wages', 'hh_inc_nom', 'gross_rent_nom', 'target_burden',
    'risk_group', 'risk_wages', 'ui_benefits_month_reg',
    'ui_benefits_month_extra600', 'ui_benefits_month_extra300'
]

# Scenario suffix -> household UI benefit column
UI_SCENARIOS = {
    '': None,
    '_ui_reg': 'hh_ui_benefits_month_reg',
    '_ui_all600': 'hh_ui_benefits_month_all600',
    '_ui_all300': 'hh_ui_benefits_month_all300',
}

BURDEN_COLUMNS = [f'risk_burden{suffix}' for suffix in UI_SCENARIOS]
NEED_COLUMNS = [f'risk_rent_need{suffix}' for suffix in UI_SCENARIOS]

HOUSEHOLD_COLUMNS = [
    'hh_risk_members_num',
    'hh_wage_earners_num',
    'hh_any_risk',
    'hh_risk_status',
    'hh_risk_wages',
    'hh_risk_wages_pct',
    'hh_ui_benefits_month_reg',
    'hh_ui_benefits_month_extra600',
    'hh_ui_benefits_month_extra300',
    'hh_ui_benefits_month_all600',
    'hh_ui_benefits_month_all300',
]


def household_aggregates(persons: pd.DataFrame) -> pd.DataFrame:
    """
    Summarise each household's job loss and UI position.

    ``hh_any_risk`` is NA when no member has wages, True when any wage earner
    lost their job and False otherwise. ``hh_risk_status`` spells out the same
    three categories.

    Args:
        persons: Person records after ``assign_trial``

    Returns:
        DataFrame indexed by ``serial``
    """
    df = persons[['serial', 'inc_wages', 'hh_inc_nom', 'risk_wages',
                  'ui_benefits_month_reg', 'ui_benefits_month_extra600',
                  'ui_benefits_month_extra300']].copy()
    risk = persons['risk_group']
    df['is_risk'] = risk.fillna(False).astype(bool)
    df['has_risk_status'] = risk.notna()
    df['is_wage_earner'] = persons['inc_wages'] > 0

    grouped = df.groupby('serial', sort=False)
    hh = pd.DataFrame({
        'hh_risk_members_num': grouped['is_risk'].sum().astype(int),
        'hh_wage_earners_num': grouped['is_wage_earner'].sum().astype(int),
        'hh_risk_wages': grouped['risk_wages'].sum(min_count=0),
        'hh_inc_nom': grouped['hh_inc_nom'].first(),
        'hh_ui_benefits_month_reg': grouped['ui_benefits_month_reg'].sum(),
        'hh_ui_benefits_month_extra600': grouped['ui_benefits_month_extra600'].sum(),
        'hh_ui_benefits_month_extra300': grouped['ui_benefits_month_extra300'].sum(),
    })

    any_status = grouped['has_risk_status'].any()
    any_risk = pd.array(hh['hh_risk_members_num'].to_numpy() > 0, dtype='boolean')
    any_risk[~any_status.to_numpy()] = pd.NA
    hh['hh_any_risk'] = any_risk
    hh['hh_risk_status'] = np.select(
        [~any_status.to_numpy(), hh['hh_risk_members_num'].to_numpy() > 0],
        ['no_wage_earners', 'at_risk'],
        default='not_at_risk'
    )

    hh['hh_risk_wages_pct'] = hh['hh_risk_wages'] / hh['hh_inc_nom'].replace(0, np.nan)
    hh['hh_ui_benefits_month_all600'] = hh['hh_ui_benefits_month_reg'] + hh['hh_ui_benefits_month_extra600']
    hh['hh_ui_benefits_month_all300'] = hh['hh_ui_benefits_month_reg'] + hh['hh_ui_benefits_month_extra300']

    return hh[HOUSEHOLD_COLUMNS]


def clamp_need(raw_need: pd.Series, gross_rent: pd.Series) -> pd.Series:
    """
    Convert raw (negative) need into a dollar amount within [0, gross rent].

    Raw need is negative when the household needs help. Missing values
    (no cash rent, undefined burden) and positive values become 0, values
    beyond the full rent are capped at the rent, and the rest flip sign.
    """
    raw = raw_need.astype(float)
    rent = gross_rent.astype(float)

    need = -raw
    need = need.mask(raw > 0, 0.0)
    need = need.mask((-raw > rent) & (raw <= 0), rent)
    need = need.mask(raw.isna() | rent.isna(), 0.0)
    return need


def add_need_vars(persons: pd.DataFrame) -> pd.DataFrame:
    """
    Add household aggregates, risk-adjusted rent burdens and rental need.

    Args:
        persons: Person records after ``assign_trial``

    Returns:
        Copy with household columns joined back onto every member plus
        ``BURDEN_COLUMNS`` and ``NEED_COLUMNS``
    """
    validate_columns(persons, NEED_INPUT_COLUMNS, 'person')

    hh = household_aggregates(persons)
    df = persons.drop(columns=[c for c in HOUSEHOLD_COLUMNS if c in persons.columns])
    df = df.join(hh, on='serial')

    rent = df['gross_rent_nom']
    monthly_inc = (df['hh_inc_nom'] - df['hh_risk_wages']) / 12
    target_inc = rent / df['target_burden']

    with np.errstate(divide='ignore', invalid='ignore'):
        for suffix, ui_col in UI_SCENARIOS.items():
            income = monthly_inc if ui_col is None else monthly_inc + df[ui_col]
            burden = rent / income
            df[f'risk_burden{suffix}'] = burden
            raw_need = (rent / burden) - target_inc
            df[f'risk_rent_need{suffix}'] = clamp_need(raw_need, rent)

    return df
