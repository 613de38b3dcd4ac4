"""
Summary tables.

Turns averaged trial results into one wide table per geography level, with
each locality's share of the statewide total and its population-based share
of program funds.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd

from .sim.aggregate import GEOGRAPHY_LEVELS, METRICS, NEED_METRICS
from .sim.config import SimulationConfig
from .sim.survey import propagate_prop_moe, propagate_product_moe, propagate_sum_moe
from .utils import format_currency, validate_columns

# Configure logger
logger = logging.getLogger(__name__)

DOLLAR_COLUMNS = list(NEED_METRICS.values()) + ['allocation']


def _state_totals(averaged: pd.DataFrame) -> pd.DataFrame:
    """Statewide estimate and MOE per metric, summed over state rows."""
    state = averaged[averaged['geo_level'] == 'state']
    if state.empty:
        raise ValueError("Averaged results have no state-level rows")

    grouped = state.groupby('metric')
    totals = pd.DataFrame({
        'estimate': grouped['estimate'].sum(),
        'moe': grouped['moe'].agg(lambda m: float(propagate_sum_moe(*m))),
    })
    return totals


def summary_table(averaged: pd.DataFrame, level: str, config: SimulationConfig) -> pd.DataFrame:
    """
    Wide summary table for one geography level.

    Args:
        averaged: Output of ``average_trials``
        level: Geography level ('state', 'county' or 'city')
        config: Simulation configuration (fund totals)

    Returns:
        DataFrame with ``geo_id``, then for every metric the estimate,
        ``_moe``, ``_share`` and ``_share_moe`` columns, then ``allocation``
        and ``allocation_moe``
    """
    validate_columns(averaged, ['geo_level', 'geo_id', 'metric', 'estimate', 'moe'], 'averaged result')

    rows = averaged[averaged['geo_level'] == level]
    if rows.empty:
        raise ValueError(f"No averaged results for geography level '{level}'")

    estimates = rows.pivot(index='geo_id', columns='metric', values='estimate')
    moes = rows.pivot(index='geo_id', columns='metric', values='moe')
    totals = _state_totals(averaged)

    table = pd.DataFrame(index=estimates.index)
    for metric in [m for m in METRICS if m in estimates.columns]:
        est = estimates[metric].to_numpy(dtype=float)
        moe = moes[metric].to_numpy(dtype=float)
        total = totals.loc[metric, 'estimate']
        total_moe = totals.loc[metric, 'moe']

        table[metric] = est
        table[f'{metric}_moe'] = moe
        with np.errstate(divide='ignore', invalid='ignore'):
            table[f'{metric}_share'] = est / total
        table[f'{metric}_share_moe'] = propagate_prop_moe(est, total, moe, total_moe)

    population_funds = config.total_funds * config.population_allocation_share
    table['allocation'] = population_funds * table['population_share']
    table['allocation_moe'] = propagate_product_moe(
        population_funds, table['population_share'], 0.0, table['population_share_moe']
    )

    return table.reset_index().rename_axis(columns=None)


def summary_tables(
    averaged: pd.DataFrame,
    config: SimulationConfig,
    formatted: bool = False
) -> Dict[str, pd.DataFrame]:
    """
    Summary tables for every geography level present in the results.

    With ``formatted`` the tables are display-ready strings, and margin of
    error columns are dropped when ``config.hide_moe`` is set.
    """
    present = set(averaged['geo_level'])
    tables = {}
    for level in GEOGRAPHY_LEVELS:
        if level in present:
            table = summary_table(averaged, level, config)
            if formatted:
                table = format_table(table, hide_moe=config.hide_moe)
            tables[level] = table
            logger.info(f"Built {level} summary table with {len(table)} rows")
    return tables


def drop_moe_columns(table: pd.DataFrame) -> pd.DataFrame:
    """Remove margin of error columns."""
    return table[[c for c in table.columns if not c.endswith('_moe')]]


def format_table(table: pd.DataFrame, hide_moe: bool = True) -> pd.DataFrame:
    """
    Format a summary table for display.

    Dollar columns become currency strings, shares become percentages and
    counts are rounded with thousands separators.

    Args:
        table: Output of ``summary_table``
        hide_moe: Drop margin of error columns

    Returns:
        DataFrame of strings
    """
    df = drop_moe_columns(table) if hide_moe else table.copy()
    formatted = pd.DataFrame({'geo_id': df['geo_id']})

    for col in df.columns:
        if col == 'geo_id':
            continue
        base = col[:-len('_moe')] if col.endswith('_moe') else col
        if base.endswith('_share'):
            formatted[col] = df[col].map(lambda v: "" if pd.isna(v) else f"{v:.1%}")
        elif base in DOLLAR_COLUMNS:
            formatted[col] = df[col].map(format_currency)
        else:
            formatted[col] = df[col].map(lambda v: "" if pd.isna(v) else f"{v:,.0f}")

    return formatted
