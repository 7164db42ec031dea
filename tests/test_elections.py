"""
Tests for the Election Cycle.

Validates:
- Campaign eligibility and scheduling
- Fixed candidate lists
- Funds-gated campaign activities
- Normalized vote shares and winner selection
- Election results are final
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import numpy as np
import pytest

from polisim.domain.catalog import get_position
from polisim.domain.results import FailureReason
from polisim.domain.schema import ActivityType, Character
from polisim.governance.elections import ElectionCycle

START = date(2024, 1, 1)


def _make_character(**overrides) -> Character:
    values = {
        "name": "Jordan Reyes",
        "birth_date": date(1984, 5, 20),
        "current_date": START,
        "charisma": 60,
        "reputation": 50,
        "approval_rating": 55.0,
        "campaign_funds": Decimal("100000"),
    }
    values.update(overrides)
    return Character(**values)


class TestCampaign:
    """Test starting, running and ending campaigns."""

    def setup_method(self):
        self.cycle = ElectionCycle(rng=np.random.default_rng(21))
        self.character = _make_character()
        self.mayor = get_position("mayor")

    def test_start_campaign_schedules_election(self):
        result = self.cycle.start_campaign(self.mayor, self.character)
        assert result.success
        campaign = self.cycle.campaign
        election = self.cycle.election
        assert campaign.poll_numbers == pytest.approx(48.0)
        assert campaign.days_remaining == 90
        assert election.election_date == START + timedelta(days=90)
        assert len(election.candidates) == 4
        assert election.player_candidate.name == "Jordan Reyes"
        assert election.candidates[0].is_player
        assert all(40 <= c.charisma <= 80 for c in election.candidates[1:])

    def test_opponent_count_scales_with_level(self):
        self.cycle.start_campaign(get_position("community_organizer"), self.character)
        assert len(self.cycle.election.candidates) == 2

    def test_one_campaign_at_a_time(self):
        self.cycle.start_campaign(self.mayor, self.character)
        result = self.cycle.start_campaign(get_position("community_organizer"), self.character)
        assert result.reason == FailureReason.CAMPAIGN_ALREADY_ACTIVE
        assert self.cycle.campaign.target_position == self.mayor

    @pytest.mark.parametrize(
        "overrides,fragment",
        [
            ({"birth_date": date(2002, 1, 1)}, "years old"),
            ({"approval_rating": 30.0}, "approval"),
            ({"reputation": 10}, "reputation"),
            ({"current_position": get_position("mayor")}, "already serving"),
        ],
    )
    def test_not_eligible(self, overrides, fragment):
        character = _make_character(**overrides)
        result = self.cycle.start_campaign(self.mayor, character)
        assert result.reason == FailureReason.NOT_ELIGIBLE
        assert fragment in result.message
        assert self.cycle.campaign is None
        assert self.cycle.election is None

    def test_activity_without_campaign(self):
        result = self.cycle.perform_campaign_activity(ActivityType.RALLY, self.character)
        assert result.reason == FailureReason.NO_ACTIVE_CAMPAIGN

    def test_activity_insufficient_funds_changes_nothing(self):
        """A rejected activity leaves polls, spend and the log untouched."""
        poor = _make_character(campaign_funds=Decimal("1000"))
        self.cycle.start_campaign(self.mayor, poor)
        polls = self.cycle.campaign.poll_numbers

        result = self.cycle.perform_campaign_activity(ActivityType.RALLY, poor)
        assert result.reason == FailureReason.INSUFFICIENT_FUNDS
        assert result.delta.is_empty
        assert self.cycle.campaign.poll_numbers == polls
        assert self.cycle.campaign.funds_spent == 0
        assert self.cycle.campaign.activities == []

    def test_activity_moves_polls(self):
        self.cycle.start_campaign(self.mayor, self.character)
        polls = self.cycle.campaign.poll_numbers

        result = self.cycle.perform_campaign_activity(ActivityType.RALLY, self.character)
        assert result.success
        assert result.delta.funds_change == Decimal("-5000")
        assert result.delta.stress_change == 2

        activity = result.payload
        low = 2.5 * 1.3 * 0.9
        high = 2.5 * 1.3 * 1.1
        assert low <= activity.poll_impact <= high
        assert self.cycle.campaign.poll_numbers == pytest.approx(polls + activity.poll_impact)
        assert self.cycle.campaign.funds_spent == Decimal("5000")
        assert "Jordan Reyes" in activity.description

    def test_recent_activities_capped_newest_first(self):
        self.cycle.start_campaign(self.mayor, self.character)
        for offset in range(12):
            day = self.character.advance_days(offset)
            self.cycle.perform_campaign_activity(ActivityType.DEBATE, day)
        recent = self.cycle.recent_activities()
        assert len(recent) == 10
        assert recent[0].performed_on == START + timedelta(days=11)
        assert len(self.cycle.campaign.activities) == 12
        assert len(self.cycle.recent_activities(limit=3)) == 3

    def test_end_campaign(self):
        self.cycle.start_campaign(self.mayor, self.character)
        assert self.cycle.end_campaign().success
        assert self.cycle.campaign is None
        assert self.cycle.election is None
        assert self.cycle.end_campaign().reason == FailureReason.NO_ACTIVE_CAMPAIGN


class TestElection:
    """Test vote simulation."""

    def setup_method(self):
        self.cycle = ElectionCycle(rng=np.random.default_rng(4))
        self.character = _make_character()
        self.mayor = get_position("mayor")

    def test_no_election(self):
        result = self.cycle.simulate_election(self.character)
        assert result.reason == FailureReason.NO_ELECTION

    def test_shares_normalized_and_winner_has_max(self):
        self.cycle.start_campaign(self.mayor, self.character)
        result = self.cycle.simulate_election(self.character)
        assert result.success

        results = result.payload
        shares = [s.share for s in results.shares]
        assert sum(shares) == pytest.approx(100.0)
        assert results.share_of(results.winner_id) == max(shares)
        assert results.voter_turnout == 59.0
        assert results.total_votes == int(100_000 * 3 * 59.0 / 100)
        assert results.margin >= 0

    def test_results_are_final(self):
        self.cycle.start_campaign(self.mayor, self.character)
        first = self.cycle.simulate_election(self.character)
        assert first.success
        assert self.cycle.campaign is None

        again = self.cycle.simulate_election(self.character)
        assert again.reason == FailureReason.ALREADY_RESOLVED
        assert self.cycle.history[-1].results == first.payload
        assert self.cycle.history[-1].is_resolved

    def test_dominant_campaign_wins(self):
        """Saturated polls beat any generated opponent."""
        self.cycle.start_campaign(self.mayor, self.character)
        for _ in range(30):
            self.cycle.perform_campaign_activity(ActivityType.ENDORSEMENT, self.character)
        assert self.cycle.campaign.poll_numbers == 100.0

        result = self.cycle.simulate_election(self.character)
        assert result.delta.new_position == self.mayor
        assert self.cycle.won_election()

        updated = self.character.apply_delta(result.delta)
        assert updated.current_position == self.mayor

    def test_tick_resolves_on_election_day(self):
        self.cycle.start_campaign(self.mayor, self.character)
        election_day = self.cycle.election.election_date

        assert self.cycle.tick(election_day - timedelta(days=1), self.character) is None
        assert self.cycle.election.days_until_election == 1
        assert self.cycle.campaign.days_remaining == 1

        result = self.cycle.tick(election_day, self.character)
        assert result is not None and result.success
        assert self.cycle.election is None
        assert len(self.cycle.history) == 1
        assert self.cycle.tick(election_day + timedelta(days=1), self.character) is None

    def test_seeded_elections_match(self):
        outcomes = []
        for _ in range(2):
            cycle = ElectionCycle(rng=np.random.default_rng(77))
            cycle.start_campaign(self.mayor, self.character)
            cycle.perform_campaign_activity(ActivityType.RALLY, self.character)
            result = cycle.simulate_election(self.character)
            outcomes.append(
                (result.payload.winner_name, [round(s.share, 9) for s in result.payload.shares])
            )
        assert outcomes[0] == outcomes[1]

    def test_won_election_without_history(self):
        assert not self.cycle.won_election()
