"""
Tests for job loss and UI takeup assignment.
"""

import pytest
import numpy as np
import pandas as pd
from rental.sim.assignment import (
    UI_BENEFIT_COLUMNS,
    add_ui_takeup,
    adjust_takeup_rate,
    assign_risk_group,
    assign_trial,
    ui_ineligible_share,
)


def make_workers(n: int, prob: float, ineligible_share: float = 0.0) -> pd.DataFrame:
    """Wage earners with equal weights; the first share of them ineligible for UI."""
    n_ineligible = int(round(n * ineligible_share))
    reg = np.where(np.arange(n) < n_ineligible, 0.0, 1500.0)
    return pd.DataFrame({
        'serial': np.arange(n),
        'perwt': 1.0,
        'inc_wages': 40000.0,
        'job_loss_prob': prob,
        'ui_benefits_month_reg': reg,
        'ui_benefits_month_extra600': np.where(reg > 0, 2600.0, 0.0),
        'ui_benefits_month_extra300': np.where(reg > 0, 1300.0, 0.0),
    })


class TestRiskGroup:
    """Test cases for job loss assignment."""

    def test_manufacturing_job_loss_rate(self):
        """1,000 manufacturing workers at a 10% job-loss rate lose about 100 jobs."""
        workers = make_workers(1000, 0.10)
        result = assign_risk_group(workers, np.random.default_rng(42))

        n_lost = int(result['risk_group'].sum())
        assert 60 <= n_lost <= 140

    def test_people_without_wages_not_applicable(self):
        workers = make_workers(10, 1.0)
        workers.loc[[2, 5], 'inc_wages'] = np.nan

        result = assign_risk_group(workers, np.random.default_rng(0))

        assert result['risk_group'].isna().sum() == 2
        assert result.loc[[2, 5], 'risk_group'].isna().all()
        assert result['risk_group'].dropna().all()
        assert result.loc[[2, 5], 'risk_wages'].isna().all()

    def test_zero_wages_not_applicable(self):
        workers = make_workers(3, 1.0)
        workers.loc[1, 'inc_wages'] = 0.0

        result = assign_risk_group(workers, np.random.default_rng(0))

        assert pd.isna(result.loc[1, 'risk_group'])
        assert result.loc[[0, 2], 'risk_group'].all()

    def test_risk_wages(self):
        workers = make_workers(4, 0.0)
        workers.loc[0, 'job_loss_prob'] = 1.0

        result = assign_risk_group(workers, np.random.default_rng(0))

        assert result.loc[0, 'risk_wages'] == 40000.0
        assert result.loc[1:, 'risk_wages'].isna().all()

    def test_input_not_modified(self):
        workers = make_workers(5, 0.5)
        assign_risk_group(workers, np.random.default_rng(0))
        assert 'risk_group' not in workers.columns


class TestTakeupAdjustment:
    """Test cases for the UI takeup rate adjustment."""

    def test_example_adjustment(self):
        assert adjust_takeup_rate(0.67, 0.20) == pytest.approx(0.8375)

    def test_no_ineligible(self):
        assert adjust_takeup_rate(0.67, 0.0) == pytest.approx(0.67)

    def test_adjusted_rate_not_capped(self):
        """A large ineligible share pushes the rate above 1 rather than clamping."""
        assert adjust_takeup_rate(0.67, 0.5) == pytest.approx(1.34)

    def test_everyone_ineligible(self):
        assert adjust_takeup_rate(0.67, 1.0) == np.inf

    def test_ineligible_share_weighted(self):
        workers = make_workers(4, 1.0, ineligible_share=0.25)
        workers['perwt'] = [3.0, 1.0, 1.0, 1.0]
        workers = assign_risk_group(workers, np.random.default_rng(0))

        assert ui_ineligible_share(workers) == pytest.approx(0.5)

    def test_ineligible_share_without_job_loss(self):
        workers = assign_risk_group(make_workers(10, 0.0), np.random.default_rng(0))
        assert ui_ineligible_share(workers) == 0.0


class TestUiTakeup:
    """Test cases for UI takeup assignment."""

    def test_benefits_zero_without_job_loss(self, persons):
        result = assign_trial(persons, 0.67, seed=1)
        not_at_risk = ~result['risk_group'].fillna(False).astype(bool)

        assert not_at_risk.any()
        for col in UI_BENEFIT_COLUMNS:
            assert (result.loc[not_at_risk, col] == 0).all()
        assert not result.loc[not_at_risk, 'ui_takeup'].any()

    def test_benefits_zero_without_takeup(self, persons):
        result = assign_trial(persons, 0.5, seed=2)
        no_takeup = ~result['ui_takeup']

        for col in UI_BENEFIT_COLUMNS:
            assert (result.loc[no_takeup, col] == 0).all()

    def test_ineligible_never_take_up(self):
        workers = make_workers(500, 1.0, ineligible_share=0.4)
        result = add_ui_takeup(assign_risk_group(workers, np.random.default_rng(3)), 1.0,
                               np.random.default_rng(4))

        assert not result.loc[:199, 'ui_takeup'].any()
        # Adjusted rate is above 1, so every eligible person takes up
        assert result.loc[200:, 'ui_takeup'].all()

    def test_takeup_rate_converges(self):
        """Eligible takeup tracks the adjusted rate and overall takeup the assumed rate."""
        workers = make_workers(50000, 1.0, ineligible_share=0.20)
        result = assign_trial(workers, 0.67, seed=11)

        eligible = workers['ui_benefits_month_reg'] > 0
        assert result.loc[eligible, 'ui_takeup'].mean() == pytest.approx(0.8375, abs=0.01)
        assert result['ui_takeup'].mean() == pytest.approx(0.67, abs=0.01)

    def test_reproducible_with_seed(self, persons):
        first = assign_trial(persons, 0.67, seed=123)
        second = assign_trial(persons, 0.67, seed=123)

        pd.testing.assert_frame_equal(first, second)

    def test_seeds_differ(self, persons):
        first = assign_trial(persons, 0.67, seed=1)
        second = assign_trial(persons, 0.67, seed=2)

        assert not first['risk_group'].equals(second['risk_group'])

    def test_missing_columns(self, persons):
        with pytest.raises(ValueError, match="job_loss_prob"):
            assign_trial(persons.drop(columns=['job_loss_prob']), 0.67, seed=1)
