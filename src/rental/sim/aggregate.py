"""
Per-trial survey estimates by geography.

Each trial is summarised into a long table with one row per geography and
metric, holding the survey-weighted total and its confidence interval.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..settings import DEFAULT_CONFIDENCE_LEVEL
from ..utils import validate_columns
from .need import NEED_COLUMNS
from .survey import SurveyDesign, survey_total

# Configure logger
logger = logging.getLogger(__name__)

GEOGRAPHY_LEVELS = ('state', 'county', 'city')

# Need column -> reported metric
NEED_METRICS = dict(zip(NEED_COLUMNS, ['need_no_ui', 'need_ui_reg', 'need_ui_600', 'need_ui_300']))

COUNT_METRICS = ['population', 'renter_households', 'lost_wage_households']
METRICS = COUNT_METRICS + list(NEED_METRICS.values())

RESULT_COLUMNS = ['geo_level', 'geo_id', 'metric', 'estimate', 'lower', 'upper']


def households_from_persons(persons: pd.DataFrame) -> pd.DataFrame:
    """
    One record per household, taken from the householder row.

    Household-level fields are identical across members, so the row with the
    lowest person number stands in for the household.
    """
    validate_columns(persons, ['serial', 'hhwt', 'renter'], 'person')
    df = persons
    if 'pernum' in df.columns:
        df = df.sort_values(['serial', 'pernum'], kind='stable')
    return df.drop_duplicates('serial', keep='first').reset_index(drop=True)


def _rows(level: str, geo_id: str, estimates: Dict[str, object]) -> List[dict]:
    return [
        {
            'geo_level': level,
            'geo_id': geo_id,
            'metric': metric,
            'estimate': est.estimate,
            'lower': est.lower,
            'upper': est.upper,
        }
        for metric, est in estimates.items()
    ]


def summarise_trial(
    persons: pd.DataFrame,
    levels: Sequence[str] = GEOGRAPHY_LEVELS,
    person_repweights: Optional[Sequence[str]] = None,
    household_repweights: Optional[Sequence[str]] = None,
    level: float = DEFAULT_CONFIDENCE_LEVEL
) -> pd.DataFrame:
    """
    Survey estimates for one trial at each geography level.

    Population is a person-level total. Renter households, renter households
    where a wage earner lost their job, and the four rental need totals are
    household-level totals over renter households. People without a value for
    a geography level are left out of that level.

    Args:
        persons: Person records after ``add_need_vars``
        levels: Geography columns to summarise
        person_repweights: Person replicate weight columns
        household_repweights: Household replicate weight columns
        level: Confidence level

    Returns:
        Long DataFrame with ``RESULT_COLUMNS``
    """
    validate_columns(persons, ['perwt', 'hh_any_risk'] + list(NEED_COLUMNS), 'person')
    households = households_from_persons(persons)

    person_design = SurveyDesign(persons, 'perwt', person_repweights)
    household_design = SurveyDesign(households, 'hhwt', household_repweights)

    renter = households['renter'].fillna(False).astype(bool).to_numpy()
    lost_wages = households['hh_any_risk'].fillna(False).astype(bool).to_numpy()

    rows = []
    for geo_level in levels:
        if geo_level not in persons.columns:
            logger.debug(f"No '{geo_level}' column, skipping geography level")
            continue

        person_geo = persons[geo_level]
        household_geo = households[geo_level]
        for geo_id in sorted(person_geo.dropna().unique()):
            person_domain = (person_geo == geo_id).to_numpy()
            renter_domain = (household_geo == geo_id).to_numpy() & renter

            estimates = {
                'population': survey_total(person_design, 1.0, person_domain, level),
                'renter_households': survey_total(household_design, 1.0, renter_domain, level),
                'lost_wage_households': survey_total(
                    household_design, lost_wages.astype(float), renter_domain, level
                ),
            }
            for col, metric in NEED_METRICS.items():
                estimates[metric] = survey_total(household_design, households[col], renter_domain, level)

            rows.extend(_rows(geo_level, str(geo_id), estimates))

    result = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    logger.debug(f"Summarised trial into {len(result)} geography-metric rows")
    return result
