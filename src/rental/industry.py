"""
Industry classification.

Maps IPUMS ``ind`` industry codes onto the BLS Current Employment Statistics
supersector codes used for the state employment series. Codes outside every
range (including military, 9670-9870) are unclassified and drop out of the
analysis universe.
"""

import numbers
from typing import Optional

import pandas as pd

BLS_INDUSTRY_NAMES = {
    '15000000': 'Mining, Logging and Construction',
    '20000000': 'Construction',
    '30000000': 'Manufacturing',
    '40000000': 'Trade, Transportation, and Utilities',
    '50000000': 'Information',
    '55000000': 'Financial Activities',
    '60000000': 'Professional and Business Services',
    '65000000': 'Education and Health Services',
    '70000000': 'Leisure and Hospitality',
    '80000000': 'Other Services',
    '90000000': 'Government',
}

# Ordered (low, high, supersector) rules, bounds inclusive. First match wins.
INDUSTRY_RULES = (
    (170, 490, '15000000'),
    (770, 770, '20000000'),
    (1070, 3990, '30000000'),
    (4070, 4590, '40000000'),
    (4670, 5790, '40000000'),
    (6070, 6390, '40000000'),
    (570, 690, '40000000'),
    (6470, 6780, '50000000'),
    (6870, 7190, '55000000'),
    (7270, 7790, '60000000'),
    (7860, 8470, '65000000'),
    (8560, 8690, '70000000'),
    (8770, 9290, '80000000'),
    (9370, 9590, '90000000'),
)


def ind_to_bls(code) -> Optional[str]:
    """
    Classify a single IPUMS industry code.

    Args:
        code: IPUMS ``ind`` code

    Returns:
        BLS supersector code, or None if the code is unclassified

    Raises:
        TypeError: If the code is not numeric
        ValueError: If the code is negative
    """
    if isinstance(code, bool) or not isinstance(code, numbers.Real):
        raise TypeError(f"Industry code must be numeric, got {type(code).__name__}")
    if code < 0:
        raise ValueError(f"Industry code must be non-negative, got {code}")

    for low, high, group in INDUSTRY_RULES:
        if low <= code <= high:
            return group
    return None


def classify_industries(codes: pd.Series) -> pd.Series:
    """
    Classify a Series of IPUMS industry codes.

    Missing and unclassified codes come back as NA.

    Args:
        codes: Series of IPUMS ``ind`` codes

    Returns:
        Series of BLS supersector codes aligned with ``codes``
    """
    values = pd.to_numeric(codes, errors='raise')
    if (values.dropna() < 0).any():
        raise ValueError("Industry codes must be non-negative")

    groups = pd.Series(pd.NA, index=codes.index, name='ind_group_bls', dtype=object)
    for low, high, group in INDUSTRY_RULES:
        match = values.between(low, high) & groups.isna()
        groups[match] = group

    return groups
