"""
Tests for the Policy Book.

Validates:
- Proposal → enactment → repeal lifecycle
- Requirement gating (office, approval, reputation, prerequisites, funds)
- Cost and effects returned in a single delta
- Enactment and repeal stat changes feed department effect totals
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import numpy as np
import pytest

from polisim.domain.catalog import get_position
from polisim.domain.results import FailureReason
from polisim.domain.schema import (
    Character,
    Department,
    PolicyCategory,
    PolicyStatus,
    StatChange,
)
from polisim.governance.legislature import LegislativePipeline
from polisim.governance.policies import PolicyBook

START = date(2024, 1, 1)


def _make_character(**overrides) -> Character:
    values = {
        "name": "Jordan Reyes",
        "birth_date": date(1980, 1, 1),
        "current_date": START,
        "reputation": 60,
        "approval_rating": 60.0,
        "campaign_funds": Decimal("1000000"),
        "current_position": get_position("mayor"),
    }
    values.update(overrides)
    return Character(**values)


class TestPolicyLifecycle:
    """Test proposing, enacting and repealing policies."""

    def setup_method(self):
        self.book = PolicyBook()
        self.character = _make_character()
        self.mental_health = self.book.by_key("mental_health_initiative")

    def test_catalog_starts_available(self):
        assert len(self.book.policies) == 15
        assert len(self.book.by_status(PolicyStatus.AVAILABLE)) == 15
        assert len(self.book.by_category(PolicyCategory.HEALTHCARE)) == 2

    def test_enact_requires_proposal(self):
        result = self.book.enact_policy(self.mental_health.id, self.character)
        assert result.reason == FailureReason.INVALID_STATE
        assert self.mental_health.status == PolicyStatus.AVAILABLE

    def test_enact_returns_cost_and_effects(self):
        """Enactment charges the cost and applies the funds effect in one delta."""
        assert self.book.propose_policy(self.mental_health.id, START).success
        result = self.book.enact_policy(self.mental_health.id, self.character)

        assert result.success
        assert self.mental_health.status == PolicyStatus.ENACTED
        assert self.mental_health.date_enacted == START
        assert result.delta.funds_change == Decimal("-200000")
        assert result.delta.approval_change == 10
        assert result.delta.reputation_change == 6
        assert result.delta.stress_change == 5
        assert result.gdp_impact == pytest.approx(-0.2)
        assert result.stat_changes == {"health": 5}

        updated = self.character.apply_delta(result.delta)
        assert updated.campaign_funds == Decimal("800000")

    def test_insufficient_funds(self):
        poor = _make_character(campaign_funds=Decimal("99999"))
        self.book.propose_policy(self.mental_health.id)
        result = self.book.enact_policy(self.mental_health.id, poor)
        assert result.reason == FailureReason.INSUFFICIENT_FUNDS
        assert self.mental_health.status == PolicyStatus.PROPOSED
        assert result.delta.is_empty

    def test_funds_must_cover_funds_effect(self):
        """Covering the enactment cost alone is not enough when the policy also spends funds."""
        character = _make_character(campaign_funds=Decimal("150000"))
        self.book.propose_policy(self.mental_health.id)
        assert PolicyBook.enactment_charge(self.mental_health) == Decimal("200000")

        result = self.book.enact_policy(self.mental_health.id, character)
        assert result.reason == FailureReason.INSUFFICIENT_FUNDS
        assert self.mental_health.status == PolicyStatus.PROPOSED

        exact = _make_character(campaign_funds=Decimal("200000"))
        result = self.book.enact_policy(self.mental_health.id, exact)
        assert result.success
        assert exact.apply_delta(result.delta).campaign_funds == Decimal("0")

    def test_requirements_not_met(self):
        unpopular = _make_character(approval_rating=20.0)
        self.book.propose_policy(self.mental_health.id)
        result = self.book.enact_policy(self.mental_health.id, unpopular)
        assert result.reason == FailureReason.REQUIREMENTS_NOT_MET
        assert "Approval" in result.message
        assert self.mental_health.status == PolicyStatus.PROPOSED

    def test_prerequisite_chain(self):
        """Universal healthcare needs the mental health initiative enacted first."""
        governor = _make_character(
            current_position=get_position("governor"),
            campaign_funds=Decimal("2000000"),
        )
        healthcare = self.book.by_key("universal_healthcare")
        self.book.propose_policy(healthcare.id)
        blocked = self.book.enact_policy(healthcare.id, governor)
        assert blocked.reason == FailureReason.REQUIREMENTS_NOT_MET

        self.book.propose_policy(self.mental_health.id)
        assert self.book.enact_policy(self.mental_health.id, governor).success
        assert self.book.enact_policy(healthcare.id, governor).success

    def test_propose_twice(self):
        self.book.propose_policy(self.mental_health.id)
        result = self.book.propose_policy(self.mental_health.id)
        assert result.reason == FailureReason.ALREADY_PROPOSED

    def test_repeal_applies_repeal_effects(self):
        self.book.propose_policy(self.mental_health.id)
        self.book.enact_policy(self.mental_health.id, self.character)

        result = self.book.repeal_policy(self.mental_health.id, date(2024, 6, 1))
        assert result.success
        assert self.mental_health.status == PolicyStatus.REPEALED
        assert self.mental_health.date_repealed == date(2024, 6, 1)
        assert result.delta.approval_change == -5
        assert result.delta.reputation_change == -3
        assert result.delta.stress_change == 8
        assert result.delta.funds_change == 0
        assert result.stat_changes == {"health": -5}

    def test_repeal_requires_enacted(self):
        result = self.book.repeal_policy(self.mental_health.id)
        assert result.reason == FailureReason.INVALID_STATE

    def test_repealed_policy_can_be_proposed_again(self):
        self.book.propose_policy(self.mental_health.id)
        self.book.enact_policy(self.mental_health.id, self.character)
        self.book.repeal_policy(self.mental_health.id)
        assert self.book.propose_policy(self.mental_health.id).success


class TestRequirementStatus:
    """Test the requirement checklist."""

    def test_checklist_flags_missing_items(self):
        book = PolicyBook()
        healthcare = book.by_key("universal_healthcare")
        council_member = _make_character(
            current_position=get_position("city_council_member"),
            campaign_funds=Decimal("1000"),
        )
        checklist = dict(book.requirement_status(healthcare, council_member))
        assert checklist["Office level 5+"] is False
        assert checklist["Approval 50%+"] is True
        assert checklist["Funds $1,000,000"] is False
        assert checklist["Enacted: Mental Health Initiative"] is False
        assert not book.meets_requirements(healthcare, council_member)

    def test_level_one_requirement_open_to_private_citizens(self):
        book = PolicyBook()
        citizen = _make_character(current_position=None)
        policy = book.by_key("mental_health_initiative")
        open_policy = policy.model_copy(
            update={"requirements": policy.requirements.model_copy(update={"min_position_level": 1})}
        )
        assert book.meets_requirements(open_policy, citizen)
        assert not book.meets_requirements(policy, citizen)


class TestEffectTotals:
    """Enacted policies feed the pipeline's department totals."""

    def test_repeal_reverses_matching_enactment(self):
        pipeline = LegislativePipeline(rng=np.random.default_rng(0))
        character = _make_character()
        policy = pipeline.policies.by_key("mental_health_initiative")

        pipeline.policies.propose_policy(policy.id)
        pipeline.policies.enact_policy(policy.id, character)
        assert pipeline.effect_totals()[Department.HEALTHCARE] == 5.0

        pipeline.policies.repeal_policy(policy.id)
        assert pipeline.effect_totals().get(Department.HEALTHCARE, 0.0) == 0.0

    def test_repeal_applies_its_own_stat_changes(self):
        """A repeal stat set that is not the mirror of the enactment still reaches scoring."""
        base = PolicyBook().by_key("mental_health_initiative")
        harsh = base.model_copy(
            update={
                "repeal_effects": base.repeal_effects.model_copy(
                    update={"stat_changes": [StatChange(stat="health", change=-15)]}
                )
            }
        )
        pipeline = LegislativePipeline(
            rng=np.random.default_rng(0), policies=PolicyBook([harsh])
        )
        character = _make_character()

        pipeline.policies.propose_policy(harsh.id)
        pipeline.policies.enact_policy(harsh.id, character)
        result = pipeline.policies.repeal_policy(harsh.id)

        assert result.stat_changes == {"health": -15}
        assert pipeline.effect_totals()[Department.HEALTHCARE] == -10.0

    def test_reenactment_accumulates_history(self):
        pipeline = LegislativePipeline(rng=np.random.default_rng(0))
        character = _make_character()
        policy = pipeline.policies.by_key("mental_health_initiative")
        for _ in range(2):
            pipeline.policies.propose_policy(policy.id)
            pipeline.policies.enact_policy(policy.id, character)
            pipeline.policies.repeal_policy(policy.id)
        pipeline.policies.propose_policy(policy.id)
        pipeline.policies.enact_policy(policy.id, character)
        assert pipeline.effect_totals()[Department.HEALTHCARE] == 5.0
        assert len(pipeline.policies.applied_stat_changes) == 5

    def test_poverty_reduction_improves_social_welfare(self):
        pipeline = LegislativePipeline(rng=np.random.default_rng(0))
        character = _make_character(reputation=80, approval_rating=80.0)
        policy = pipeline.policies.by_key("raise_minimum_wage")
        pipeline.policies.propose_policy(policy.id)
        assert pipeline.policies.enact_policy(policy.id, character).success
        assert pipeline.effect_totals()[Department.SOCIAL_WELFARE] == 4.0
