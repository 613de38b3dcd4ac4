"""
Survey-weighted estimation.

Weighted totals and means with confidence intervals for ACS microdata, plus
the approximate formulas for carrying margins of error through derived
estimates (sums, ratios, proportions and products).

Designs with only a weight column use Taylor-series linearization, treating
each record as its own primary sampling unit sampled with replacement.
Designs with replicate weights use successive difference replication, which
for the ACS is ``4/80 * sum((replicate - estimate) ** 2)`` over 80
replicates. Subgroup (domain) estimates always use the full sample, with
records outside the domain contributing zero.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy.stats import norm

from ..settings import DEFAULT_CONFIDENCE_LEVEL
from ..utils import validate_columns

# Configure logger
logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray, pd.Series]

ACS_REP_SCALE = 4 / 80


@dataclass(frozen=True)
class Estimate:
    """A point estimate with its standard error and confidence interval."""
    estimate: float
    se: float
    lower: float
    upper: float

    @property
    def moe(self) -> float:
        """Margin of error: distance from the estimate to the upper bound."""
        return self.upper - self.estimate


def z_value(level: float = DEFAULT_CONFIDENCE_LEVEL) -> float:
    """Two-sided standard normal quantile for a confidence level."""
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")
    return float(norm.ppf(0.5 + level / 2))


class SurveyDesign:
    """
    Weights (and optional replicate weights) for a set of survey records.

    Args:
        data: Survey records
        weight: Name of the full-sample weight column
        repweights: Names of replicate weight columns, if any
        rep_scale: Variance scale for replicate weights
    """

    def __init__(self, data: pd.DataFrame, weight: str,
                 repweights: Optional[Sequence[str]] = None,
                 rep_scale: float = ACS_REP_SCALE):
        repweights = list(repweights) if repweights else []
        validate_columns(data, [weight] + repweights, 'survey')

        self.weights = data[weight].to_numpy(dtype=float)
        if np.isnan(self.weights).any() or (self.weights < 0).any():
            raise ValueError(f"Weight column '{weight}' must be non-negative and non-missing")

        self.repweights = data[repweights].to_numpy(dtype=float) if repweights else None
        self.rep_scale = rep_scale
        self.index = data.index

    @property
    def n(self) -> int:
        return len(self.weights)

    @property
    def method(self) -> str:
        return 'replicate' if self.repweights is not None else 'linearization'

    def _as_array(self, values, fill: float) -> np.ndarray:
        if isinstance(values, pd.Series):
            values = values.reindex(self.index).astype(float).to_numpy()
        arr = np.asarray(values, dtype=float)
        if arr.shape == ():
            arr = np.full(self.n, float(arr))
        if arr.shape != (self.n,):
            raise ValueError(f"Expected {self.n} values, got {arr.shape[0]}")
        return np.where(np.isnan(arr), fill, arr)

    def _linearized_variance(self, scores: np.ndarray) -> float:
        if self.n < 2:
            return np.nan
        centered = scores - scores.mean()
        return float(self.n / (self.n - 1) * np.sum(centered ** 2))

    def _replicate_variance(self, replicates: np.ndarray, estimate: float) -> float:
        return float(self.rep_scale * np.sum((replicates - estimate) ** 2))

    def total(self, values, domain=None) -> tuple:
        """Weighted total and its variance."""
        y = self._as_array(values, 0.0)
        d = self._as_array(True if domain is None else domain, 0.0)
        yd = y * d

        estimate = float(np.sum(self.weights * yd))
        if self.repweights is None:
            variance = self._linearized_variance(self.weights * yd)
        else:
            variance = self._replicate_variance(self.repweights.T @ yd, estimate)
        return estimate, variance

    def mean(self, values, domain=None) -> tuple:
        """Weighted mean (ratio estimator) and its variance."""
        y = self._as_array(values, 0.0)
        d = self._as_array(True if domain is None else domain, 0.0)

        denominator = float(np.sum(self.weights * d))
        if denominator == 0:
            return np.nan, np.nan

        estimate = float(np.sum(self.weights * y * d)) / denominator
        if self.repweights is None:
            scores = self.weights * d * (y - estimate) / denominator
            variance = self._linearized_variance(scores)
        else:
            with np.errstate(divide='ignore', invalid='ignore'):
                replicates = (self.repweights.T @ (y * d)) / (self.repweights.T @ d)
            variance = self._replicate_variance(replicates, estimate)
        return estimate, variance


def _interval(estimate: float, variance: float, level: float) -> Estimate:
    se = float(np.sqrt(variance)) if not np.isnan(variance) else np.nan
    half_width = z_value(level) * se
    return Estimate(estimate, se, estimate - half_width, estimate + half_width)


def survey_total(design: SurveyDesign, values, domain=None,
                 level: float = DEFAULT_CONFIDENCE_LEVEL) -> Estimate:
    """
    Survey-weighted total with a confidence interval.

    Args:
        design: Survey design
        values: Values to total (scalar 1 counts records)
        domain: Boolean mask for the subgroup, or None for everyone
        level: Confidence level

    Returns:
        Estimate
    """
    return _interval(*design.total(values, domain), level)


def survey_mean(design: SurveyDesign, values, domain=None,
                level: float = DEFAULT_CONFIDENCE_LEVEL) -> Estimate:
    """Survey-weighted mean with a confidence interval."""
    return _interval(*design.mean(values, domain), level)


def propagate_sum_moe(*moes: ArrayLike) -> ArrayLike:
    """MOE of a sum or difference of estimates."""
    return np.sqrt(sum(np.square(m) for m in moes))


def propagate_ratio_moe(num: ArrayLike, den: ArrayLike,
                        moe_num: ArrayLike, moe_den: ArrayLike) -> ArrayLike:
    """
    MOE of a ratio ``num / den`` where the numerator is not a subset of the
    denominator.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = np.divide(num, den)
        return np.sqrt(np.square(moe_num) + np.square(ratio) * np.square(moe_den)) / np.abs(den)


def propagate_prop_moe(num: ArrayLike, den: ArrayLike,
                       moe_num: ArrayLike, moe_den: ArrayLike) -> ArrayLike:
    """
    MOE of a proportion ``num / den`` where the numerator is a subset of the
    denominator.

    Falls back to the ratio formula wherever the term under the square root
    is negative.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        prop = np.divide(num, den)
        radicand = np.square(moe_num) - np.square(prop) * np.square(moe_den)
        prop_moe = np.sqrt(np.maximum(radicand, 0)) / np.abs(den)
    ratio_moe = propagate_ratio_moe(num, den, moe_num, moe_den)
    result = np.where(radicand < 0, ratio_moe, prop_moe)
    return result if np.ndim(result) else float(result)


def propagate_product_moe(a: ArrayLike, b: ArrayLike,
                          moe_a: ArrayLike, moe_b: ArrayLike) -> ArrayLike:
    """MOE of a product ``a * b`` of independent estimates."""
    return np.sqrt(np.square(a) * np.square(moe_b) + np.square(b) * np.square(moe_a))
