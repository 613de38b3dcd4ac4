"""
Tests for shared helpers.
"""
import logging

import pytest
import pandas as pd

from rental.utils import setup_logging, time_execution, validate_columns


def test_setup_logging_sets_package_level():
    setup_logging(logging.DEBUG)
    assert logging.getLogger('rental').level == logging.DEBUG

    setup_logging()
    assert logging.getLogger('rental').level == logging.INFO


def test_validate_columns_lists_missing():
    df = pd.DataFrame({'serial': [1]})
    with pytest.raises(ValueError, match="perwt, hhwt"):
        validate_columns(df, ['serial', 'perwt', 'hhwt'], 'person')


def test_validate_columns_requires_dataframe():
    with pytest.raises(TypeError):
        validate_columns({'serial': [1]}, ['serial'])


def test_time_execution_returns_result():
    @time_execution
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    assert add.__name__ == 'add'
