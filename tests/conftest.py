"""
Pytest configuration and fixtures for testing.
"""
import pytest
import numpy as np
import pandas as pd
from pathlib import Path
import sys

# Add src to path to allow importing the rental package
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from rental.data.prep import add_target_burden, add_ui_benefits

COUNTIES = ['36061', '36047', '36001', '36029']
CITIES = {'36061': '4610', '36047': '4610', '36001': None, '36029': '730'}
INDUSTRY_PROBS = {'30000000': 0.10, '70000000': 0.35, '65000000': 0.05, '90000000': 0.02}


def make_persons(n_households: int = 120, seed: int = 0) -> pd.DataFrame:
    """Build a small cleaned person dataset spread over four counties."""
    rng = np.random.default_rng(seed)
    industries = list(INDUSTRY_PROBS)
    rows = []

    for h in range(n_households):
        county = COUNTIES[h % len(COUNTIES)]
        renter = h % 3 != 0
        hh_inc = float(rng.integers(12000, 120000))
        rent = float(rng.integers(600, 2500)) if renter else np.nan
        hhwt = float(rng.integers(40, 160))

        for pernum in range(1, 2 + h % 3):
            has_wages = pernum <= 2 and rng.random() < 0.85
            # A few low earners fall below the UI wage threshold
            if has_wages:
                wages = 1500.0 if rng.random() < 0.15 else float(rng.integers(8000, 90000))
                industry = industries[(h + pernum) % len(industries)]
            else:
                wages = np.nan
                industry = None
            rows.append({
                'serial': h + 1,
                'pernum': pernum,
                'perwt': float(rng.integers(40, 160)),
                'hhwt': hhwt,
                'inc_wages': wages,
                'hh_inc_nom': hh_inc,
                'gross_rent_nom': rent,
                'renter': renter,
                'ind_group_bls': industry,
                'job_loss_prob': INDUSTRY_PROBS.get(industry, 0.0),
                'state': '36',
                'county': county,
                'city': CITIES[county],
            })

    persons = pd.DataFrame(rows)
    persons = add_target_burden(persons)
    return add_ui_benefits(persons)


@pytest.fixture
def persons():
    """Cleaned person records for simulation tests."""
    return make_persons()


@pytest.fixture
def raw_ipums():
    """A handful of raw IPUMS person records."""
    data = [
        # Renter household, two workers
        {'serial': 1, 'pernum': 1, 'perwt': 100, 'hhwt': 100, 'statefip': 36, 'countyfip': 61, 'city': 4610,
         'gq': 1, 'ownershp': 2, 'empstat': 1, 'ind': 8680, 'incwage': 30000, 'hhincome': 52000, 'rentgrs': 1500},
        {'serial': 1, 'pernum': 2, 'perwt': 90, 'hhwt': 100, 'statefip': 36, 'countyfip': 61, 'city': 4610,
         'gq': 1, 'ownershp': 2, 'empstat': 2, 'ind': 1070, 'incwage': 22000, 'hhincome': 52000, 'rentgrs': 1500},
        # Owner household, one worker and a child
        {'serial': 2, 'pernum': 1, 'perwt': 120, 'hhwt': 120, 'statefip': 36, 'countyfip': 1, 'city': 0,
         'gq': 1, 'ownershp': 1, 'empstat': 1, 'ind': 9470, 'incwage': 65000, 'hhincome': 65000, 'rentgrs': 0},
        {'serial': 2, 'pernum': 2, 'perwt': 110, 'hhwt': 120, 'statefip': 36, 'countyfip': 1, 'city': 0,
         'gq': 1, 'ownershp': 1, 'empstat': 0, 'ind': 0, 'incwage': 999999, 'hhincome': 65000, 'rentgrs': 0},
        # Renter in the military (unclassified industry)
        {'serial': 3, 'pernum': 1, 'perwt': 80, 'hhwt': 80, 'statefip': 36, 'countyfip': 47, 'city': 4610,
         'gq': 1, 'ownershp': 2, 'empstat': 1, 'ind': 9670, 'incwage': 40000, 'hhincome': 40000, 'rentgrs': 1200},
        # Group quarters
        {'serial': 4, 'pernum': 1, 'perwt': 50, 'hhwt': 0, 'statefip': 36, 'countyfip': 61, 'city': 4610,
         'gq': 3, 'ownershp': 0, 'empstat': 1, 'ind': 8680, 'incwage': 12000, 'hhincome': 9999999, 'rentgrs': 0},
        # Renter with a low-wage retail job below the UI threshold
        {'serial': 5, 'pernum': 1, 'perwt': 70, 'hhwt': 70, 'statefip': 36, 'countyfip': 61, 'city': 4610,
         'gq': 1, 'ownershp': 2, 'empstat': 1, 'ind': 4670, 'incwage': 1800, 'hhincome': 14000, 'rentgrs': 700},
    ]
    return pd.DataFrame(data)


@pytest.fixture
def bls_emp():
    """BLS employment levels for two reference periods."""
    return pd.DataFrame({
        'supersector_industry': ['30000000', '40000000', '70000000', '90000000'],
        'emp_2019_11': [440000.0, 1500000.0, 900000.0, 1450000.0],
        'emp_2020_11': [396000.0, 1425000.0, 630000.0, 1480000.0],
    })
