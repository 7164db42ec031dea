"""
Government Score Aggregator — Department performance derived from the other subsystems.

Scores are a pure function of the treasury summary, the economic snapshot
and the accumulated legislative effects. The aggregator only caches the most
recent result for display; it holds no state of its own that could drift.

Departments:
    Finance         0.6 × debt score + 0.4 × budget balance score
    Economy         0.6 × GDP growth score + 0.4 × inflation stability score
    Labor           unemployment score
    Others          50 + accumulated stat changes from laws and policies
"""

from __future__ import annotations

import logging

from polisim.domain.schema import (
    Department,
    DepartmentScore,
    EconomicSnapshot,
    GovernmentStats,
    Jurisdiction,
    ScoreLabel,
    StatsSummary,
    TreasurySummary,
)

logger = logging.getLogger(__name__)

# Debt-to-GDP at which the debt score reaches zero
DEBT_RATIO_FLOOR = 150.0
INFLATION_TARGET = 2.0

APPROVAL_IMPACT: dict[ScoreLabel, float] = {
    ScoreLabel.EXCELLENT: 2.0,
    ScoreLabel.GOOD: 1.0,
    ScoreLabel.FAIR: 0.0,
    ScoreLabel.POOR: -1.0,
    ScoreLabel.CRITICAL: -3.0,
}

_LEGISLATIVE_DEPARTMENTS = [
    Department.EDUCATION,
    Department.HEALTHCARE,
    Department.PUBLIC_SAFETY,
    Department.INFRASTRUCTURE,
    Department.SOCIAL_WELFARE,
    Department.ENVIRONMENT,
    Department.JUSTICE,
]


def _bounded(score: float) -> float:
    return max(0.0, min(100.0, score))


def _finance(summary: TreasurySummary | None, gdp: float) -> DepartmentScore:
    if summary is None:
        return DepartmentScore(department=Department.FINANCE, score=50.0)
    if not summary.is_in_debt:
        debt_score = 100.0
    elif summary.debt_to_gdp_ratio is None:
        # Debt with no measurable economy scores as the worst band
        debt_score = 0.0
    else:
        debt_score = _bounded(100 * (1 - summary.debt_to_gdp_ratio / DEBT_RATIO_FLOOR))
    balance_pct = float(summary.fiscal_balance) / gdp * 100 if gdp > 0 else 0.0
    balance_score = _bounded(50 + balance_pct * 10)
    return DepartmentScore(
        department=Department.FINANCE,
        score=_bounded(0.6 * debt_score + 0.4 * balance_score),
        components={"debt": debt_score, "balance": balance_score},
    )


def _economy(snapshot: EconomicSnapshot) -> DepartmentScore:
    growth_score = _bounded(50 + snapshot.gdp_growth * 10)
    inflation_score = _bounded(100 - abs(snapshot.inflation - INFLATION_TARGET) * 20)
    return DepartmentScore(
        department=Department.ECONOMY,
        score=_bounded(0.6 * growth_score + 0.4 * inflation_score),
        components={"growth": growth_score, "inflation": inflation_score},
    )


def _labor(unemployment: float) -> DepartmentScore:
    score = _bounded(100 - (unemployment - 3.0) * 15)
    return DepartmentScore(
        department=Department.LABOR,
        score=score,
        components={"unemployment": score},
    )


def compute_government_stats(
    treasury_summary: TreasurySummary | None,
    snapshot: EconomicSnapshot,
    effect_totals: dict[Department, float],
    jurisdiction: Jurisdiction = Jurisdiction.FEDERAL,
) -> GovernmentStats:
    """Score every department for the given jurisdiction."""
    if treasury_summary is not None:
        jurisdiction = treasury_summary.jurisdiction
    gdp = snapshot.gdp_for(jurisdiction)

    departments = [
        _finance(treasury_summary, gdp),
        _economy(snapshot),
        _labor(snapshot.unemployment_for(jurisdiction)),
    ]
    for department in _LEGISLATIVE_DEPARTMENTS:
        accumulated = effect_totals.get(department, 0.0)
        departments.append(
            DepartmentScore(
                department=department,
                score=_bounded(50 + accumulated),
                components={"legislation": accumulated},
            )
        )
    return GovernmentStats(departments=departments)


class GovernmentScoreAggregator:
    """
    Caches the latest GovernmentStats for the office the character holds.

    Stats do not exist until `recompute` or `update_stats` is first called,
    which the driver does once the character takes office.
    """

    def __init__(self) -> None:
        self.latest: GovernmentStats | None = None

    def recompute(
        self,
        treasury_summary: TreasurySummary | None,
        snapshot: EconomicSnapshot,
        effect_totals: dict[Department, float],
    ) -> GovernmentStats:
        self.latest = compute_government_stats(treasury_summary, snapshot, effect_totals)
        return self.latest

    def update_stats(
        self,
        treasury_summary: TreasurySummary | None,
        snapshot: EconomicSnapshot,
        effect_totals: dict[Department, float],
    ) -> tuple[GovernmentStats, float]:
        """Recompute after a budget is applied; also returns the approval impact."""
        stats = self.recompute(treasury_summary, snapshot, effect_totals)
        impact = APPROVAL_IMPACT[stats.label]
        logger.info(
            "Government stats updated: overall=%.1f (%s) approval impact=%+.0f",
            stats.overall_score, stats.label.value, impact,
        )
        return stats, impact

    def get_stats_summary(self) -> StatsSummary | None:
        if self.latest is None:
            return None
        departments = self.latest.departments
        return StatsSummary(
            overall_score=self.latest.overall_score,
            label=self.latest.label,
            lowest=min(departments, key=lambda d: d.score),
            highest=max(departments, key=lambda d: d.score),
            departments=departments,
        )
