"""
Tests for the Government Score Aggregator.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from polisim.domain.schema import (
    Department,
    EconomicSnapshot,
    Jurisdiction,
    ScoreLabel,
    TreasurySummary,
)
from polisim.governance.scoring import GovernmentScoreAggregator, compute_government_stats


def _snapshot(**overrides) -> EconomicSnapshot:
    values = {
        "as_of": date(2024, 1, 1),
        "federal_gdp": 25e12,
        "federal_unemployment": 3.8,
        "inflation": 2.0,
        "interest_rate": 5.0,
        "state_gdp": 500e9,
        "state_unemployment": 4.2,
        "local_gdp": 5e9,
        "local_unemployment": 4.0,
        "gdp_growth": 2.0,
    }
    values.update(overrides)
    return EconomicSnapshot(**values)


def _summary(**overrides) -> TreasurySummary:
    values = {
        "jurisdiction": Jurisdiction.LOCAL,
        "current_balance": Decimal("-3750000000"),
        "is_in_debt": True,
        "total_debt": Decimal("0"),
        "total_surplus": Decimal("0"),
        "total_interest_paid": Decimal("0"),
        "fiscal_balance": Decimal("0"),
        "interest_rate": 3.5,
        "annual_interest_payment": Decimal("0"),
        "debt_to_gdp_ratio": 75.0,
    }
    values.update(overrides)
    return TreasurySummary(**values)


class TestDepartmentScores:
    """Test the per-department formulas."""

    def test_economy_score(self):
        stats = compute_government_stats(None, _snapshot(), {})
        assert stats.score_for(Department.ECONOMY) == pytest.approx(0.6 * 70 + 0.4 * 100)

    def test_finance_from_debt_ratio(self):
        stats = compute_government_stats(_summary(), _snapshot(), {})
        assert stats.score_for(Department.FINANCE) == pytest.approx(50.0)

    def test_finance_without_treasury(self):
        stats = compute_government_stats(None, _snapshot(), {})
        assert stats.score_for(Department.FINANCE) == 50.0

    def test_surplus_improves_finance(self):
        summary = _summary(
            is_in_debt=False,
            debt_to_gdp_ratio=None,
            fiscal_balance=Decimal("50000000"),
        )
        stats = compute_government_stats(summary, _snapshot(), {})
        # debt 100, balance 50 + 1% × 10
        assert stats.score_for(Department.FINANCE) == pytest.approx(0.6 * 100 + 0.4 * 60)

    def test_debt_without_gdp_scores_worst(self):
        summary = _summary(debt_to_gdp_ratio=None)
        stats = compute_government_stats(summary, _snapshot(local_gdp=0.0), {})
        finance = next(d for d in stats.departments if d.department == Department.FINANCE)
        assert finance.components["debt"] == 0.0
        assert finance.score == pytest.approx(0.4 * 50)

    def test_labor_uses_office_jurisdiction(self):
        local = compute_government_stats(_summary(), _snapshot(), {})
        assert local.score_for(Department.LABOR) == pytest.approx(85.0)

        federal = compute_government_stats(None, _snapshot(), {}, jurisdiction=Jurisdiction.FEDERAL)
        assert federal.score_for(Department.LABOR) == pytest.approx(100 - 0.8 * 15)

    def test_legislative_departments_clamped(self):
        totals = {
            Department.EDUCATION: 12.0,
            Department.HEALTHCARE: 80.0,
            Department.JUSTICE: -70.0,
        }
        stats = compute_government_stats(None, _snapshot(), totals)
        assert stats.score_for(Department.EDUCATION) == 62.0
        assert stats.score_for(Department.HEALTHCARE) == 100.0
        assert stats.score_for(Department.JUSTICE) == 0.0
        assert stats.score_for(Department.ENVIRONMENT) == 50.0

    def test_overall_is_mean(self):
        stats = compute_government_stats(_summary(), _snapshot(), {Department.EDUCATION: 10.0})
        assert len(stats.departments) == len(Department)
        expected = sum(d.score for d in stats.departments) / len(Department)
        assert stats.overall_score == pytest.approx(expected)
        assert stats.label == ScoreLabel.from_score(expected)


class TestAggregator:
    """Test caching and approval impact."""

    def setup_method(self):
        self.aggregator = GovernmentScoreAggregator()

    def test_no_summary_before_first_compute(self):
        assert self.aggregator.get_stats_summary() is None

    def test_excellent_government_gains_approval(self):
        summary = _summary(
            is_in_debt=False,
            debt_to_gdp_ratio=None,
            fiscal_balance=Decimal("1000000000"),
        )
        snapshot = _snapshot(gdp_growth=5.0, local_unemployment=3.0)
        totals = {department: 50.0 for department in Department}
        stats, impact = self.aggregator.update_stats(summary, snapshot, totals)
        assert stats.overall_score == pytest.approx(100.0)
        assert stats.label == ScoreLabel.EXCELLENT
        assert impact == 2.0

    def test_failing_government_loses_approval(self):
        summary = _summary(debt_to_gdp_ratio=200.0, fiscal_balance=Decimal("-1000000000"))
        snapshot = _snapshot(gdp_growth=-5.0, inflation=7.0, local_unemployment=10.0)
        totals = {department: -50.0 for department in Department}
        stats, impact = self.aggregator.update_stats(summary, snapshot, totals)
        assert stats.overall_score == pytest.approx(0.0)
        assert stats.label == ScoreLabel.CRITICAL
        assert impact == -3.0

    def test_summary_lowest_and_highest(self):
        self.aggregator.recompute(
            _summary(),
            _snapshot(),
            {Department.HEALTHCARE: 40.0, Department.JUSTICE: -45.0},
        )
        summary = self.aggregator.get_stats_summary()
        assert summary.lowest.department == Department.JUSTICE
        assert summary.highest.department == Department.HEALTHCARE
        assert summary.overall_score == self.aggregator.latest.overall_score
        assert len(summary.departments) == 10
