"""
Utility functions shared across the simulation pipeline.

This module contains helper functions for logging, input validation and
display formatting.
"""

import logging
import logging.config
import time
from copy import deepcopy
from functools import wraps
from typing import Iterable

import pandas as pd

from .settings import LOGGING_CONFIG

# Configure logging
logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """
    Set up logging for the ``rental`` package from the settings dictionary.

    Args:
        level: Logging level (default: logging.INFO)
    """
    config = deepcopy(LOGGING_CONFIG)
    level_name = logging.getLevelName(level)
    config['handlers']['console']['level'] = level_name
    config['loggers']['rental']['level'] = level_name
    logging.config.dictConfig(config)


def validate_columns(df: pd.DataFrame, required: Iterable[str], name: str = "data") -> None:
    """
    Check that a DataFrame carries every required column.

    Args:
        df: DataFrame to check
        required: Column names that must be present
        name: Name of the DataFrame used in the error message

    Raises:
        ValueError: If any required column is missing
    """
    if not isinstance(df, pd.DataFrame):
        raise TypeError(f"{name} must be a pandas DataFrame, got {type(df).__name__}")

    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required {name} columns: {', '.join(missing)}")


def format_currency(amount: float) -> str:
    """
    Format a number as whole-dollar currency.

    Args:
        amount: Amount to format

    Returns:
        str: Formatted currency string
    """
    if pd.isna(amount):
        return "$0"
    return f"${amount:,.0f}"


def log_memory_usage(df: pd.DataFrame, name: str = "DataFrame") -> None:
    """
    Log the memory usage of a DataFrame.

    Args:
        df: DataFrame to check
        name: Name to use in log message
    """
    if df is None:
        logger.debug(f"{name}: None")
        return

    mb = df.memory_usage(deep=True).sum() / (1024 * 1024)
    logger.debug(f"{name} memory usage: {mb:.2f} MB")


def time_execution(func):
    """
    Decorator to log the execution time of a function.

    Args:
        func: Function to time

    Returns:
        Wrapped function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        end_time = time.time()
        logger.debug(f"{func.__name__} executed in {end_time - start_time:.4f} seconds")
        return result

    return wrapper
