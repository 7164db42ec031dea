"""
Election Cycle — Campaigns, polling and stochastic vote simulation.

A character runs at most one campaign at a time. Starting a campaign
schedules an Election whose candidate list (the player plus generated
opponents) is fixed from that moment on. Campaign activities trade campaign
funds for poll points; on election day the vote is simulated and the
campaign is closed.

Vote model:
- Player share: poll numbers + 0.2 × approval + U(−5, 5)
- Opponent share: charisma / 2 + min(10, funds / 50,000) + U(−10, 10)
- Shares are clamped to 0–100, then normalized to sum to 100
- Highest share wins; ties go to the earliest candidate on the ballot
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

import numpy as np

from polisim.config import settings
from polisim.domain.catalog import (
    OPPONENT_FIRST_NAMES,
    OPPONENT_LAST_NAMES,
    OPPONENT_PARTIES,
)
from polisim.domain.results import CommandResult, FailureReason
from polisim.domain.schema import (
    ActivityType,
    Campaign,
    CampaignActivity,
    Candidate,
    CandidateShare,
    Character,
    CharacterDelta,
    Election,
    ElectionResults,
    Jurisdiction,
    Position,
)

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Campaign Constants
# ════════════════════════════════════════════════════════════════

POLL_BASELINE: dict[Jurisdiction, float] = {
    Jurisdiction.LOCAL: 45.0,
    Jurisdiction.STATE: 40.0,
    Jurisdiction.FEDERAL: 35.0,
}

ACTIVITY_STRESS = 2
MAX_OPPONENTS = 3
VOTERS_PER_LEVEL = 100_000

_ACTIVITY_DESCRIPTIONS: dict[ActivityType, str] = {
    ActivityType.RALLY: "{name} held a passionate rally, energizing supporters.",
    ActivityType.ADVERTISEMENT: "Launched new TV and online advertisements highlighting key policies.",
    ActivityType.DEBATE: "{name} participated in a public debate with other candidates.",
    ActivityType.PHONE_BANK: "Volunteers made hundreds of calls to potential voters.",
    ActivityType.DOOR_KNOCKING: "Campaign team knocked on doors in key neighborhoods.",
    ActivityType.FUNDRAISER: "Hosted a fundraising dinner with local supporters.",
    ActivityType.TOWN_HALL: "{name} answered questions at a community town hall.",
    ActivityType.SOCIAL_MEDIA: "Ran a targeted social media campaign reaching thousands.",
    ActivityType.INTERVIEW: "{name} gave an interview to a major news outlet.",
    ActivityType.ENDORSEMENT: "Received a major endorsement from a popular figure.",
}


class ElectionCycle:
    """
    Owns the active campaign, the upcoming election and the election history.

    Usage:
        cycle = ElectionCycle(rng=np.random.default_rng(3))
        cycle.start_campaign(get_position("mayor"), character)
        result = cycle.perform_campaign_activity(ActivityType.RALLY, character)
        character = character.apply_delta(result.delta)
    """

    def __init__(
        self,
        rng: np.random.Generator,
        activity_display_limit: int | None = None,
    ) -> None:
        self.rng = rng
        self.activity_display_limit = (
            settings.activity_display_limit
            if activity_display_limit is None
            else activity_display_limit
        )
        self.campaign: Campaign | None = None
        self.election: Election | None = None
        self.history: list[Election] = []

    # ── Eligibility ───────────────────────────────────────────

    def eligibility_problems(self, position: Position, character: Character) -> list[str]:
        problems = []
        if character.current_position is not None and character.current_position.key == position.key:
            problems.append(f"already serving as {position.title}")
        if character.age < position.min_age:
            problems.append(f"must be at least {position.min_age} years old")
        if position.min_approval is not None and character.approval_rating < position.min_approval:
            problems.append(f"approval must be at least {position.min_approval:.0f}%")
        if position.min_reputation is not None and character.reputation < position.min_reputation:
            problems.append(f"reputation must be at least {position.min_reputation}")
        return problems

    def initial_polls(self, position: Position, character: Character) -> float:
        baseline = POLL_BASELINE[position.jurisdiction]
        polls = (
            baseline
            + (character.charisma - 50) / 5
            + (character.approval_rating - 50) / 5
        )
        return max(0.0, min(100.0, polls))

    # ── Campaign ──────────────────────────────────────────────

    def start_campaign(self, position: Position, character: Character) -> CommandResult:
        """Open a campaign and schedule its election."""
        if self.campaign is not None:
            return CommandResult.fail(
                FailureReason.CAMPAIGN_ALREADY_ACTIVE,
                f"Already campaigning for {self.campaign.target_position.title}",
            )
        problems = self.eligibility_problems(position, character)
        if problems:
            return CommandResult.fail(
                FailureReason.NOT_ELIGIBLE,
                f"Not eligible for {position.title}: {'; '.join(problems)}",
            )

        self.campaign = Campaign(
            target_position=position,
            start_date=character.current_date,
            poll_numbers=self.initial_polls(position, character),
            days_remaining=position.campaign_days,
        )
        player = Candidate(
            name=character.name,
            party="Independent",
            is_player=True,
            charisma=character.charisma,
            funds=character.campaign_funds,
        )
        opponents = tuple(
            self._generate_opponent() for _ in range(min(position.level, MAX_OPPONENTS))
        )
        self.election = Election(
            position=position,
            election_date=character.current_date + timedelta(days=position.campaign_days),
            days_until_election=position.campaign_days,
            candidates=(player,) + opponents,
        )

        logger.info(
            "Campaign started: %s polls=%.1f%% election=%s opponents=%d",
            position.title,
            self.campaign.poll_numbers,
            self.election.election_date.isoformat(),
            len(opponents),
        )
        return CommandResult.ok(
            f"Campaign for {position.title} launched", payload=self.campaign
        )

    def _generate_opponent(self) -> Candidate:
        first = OPPONENT_FIRST_NAMES[int(self.rng.integers(len(OPPONENT_FIRST_NAMES)))]
        last = OPPONENT_LAST_NAMES[int(self.rng.integers(len(OPPONENT_LAST_NAMES)))]
        party = OPPONENT_PARTIES[int(self.rng.integers(len(OPPONENT_PARTIES)))]
        return Candidate(
            name=f"{first} {last}",
            party=party,
            charisma=int(self.rng.integers(40, 81)),
            funds=Decimal(int(self.rng.integers(50_000, 500_001))),
        )

    def perform_campaign_activity(
        self, activity_type: ActivityType, character: Character
    ) -> CommandResult:
        """
        Spend funds on an activity to move the polls.

        A failure (no campaign, insufficient funds) changes nothing: polls,
        funds and the activity log are untouched.
        """
        campaign = self.campaign
        if campaign is None:
            return CommandResult.fail(FailureReason.NO_ACTIVE_CAMPAIGN, "No active campaign")
        cost = activity_type.base_cost
        if character.campaign_funds < cost:
            return CommandResult.fail(
                FailureReason.INSUFFICIENT_FUNDS,
                f"Insufficient funds: {activity_type.value} costs ${cost:,.0f}",
            )

        charisma_bonus = 1 + character.charisma / 200
        impact = activity_type.base_poll_impact * charisma_bonus * float(self.rng.uniform(0.9, 1.1))
        activity = CampaignActivity(
            activity_type=activity_type,
            performed_on=character.current_date,
            cost=cost,
            poll_impact=impact,
            description=_ACTIVITY_DESCRIPTIONS[activity_type].format(name=character.name),
        )

        campaign.poll_numbers = max(0.0, min(100.0, campaign.poll_numbers + impact))
        campaign.funds_spent += cost
        campaign.activities.append(activity)

        logger.info(
            "Campaign activity: %s cost=%s impact=%+.2f polls=%.1f%%",
            activity_type.value, cost, impact, campaign.poll_numbers,
        )
        return CommandResult.ok(
            activity.description,
            delta=CharacterDelta(funds_change=-cost, stress_change=ACTIVITY_STRESS),
            payload=activity,
        )

    def recent_activities(self, limit: int | None = None) -> list[CampaignActivity]:
        """Newest-first view of the activity log. Storage is never truncated."""
        if self.campaign is None:
            return []
        cap = self.activity_display_limit if limit is None else limit
        return list(reversed(self.campaign.activities))[:cap]

    def end_campaign(self) -> CommandResult:
        """Abandon the active campaign and its election."""
        if self.campaign is None:
            return CommandResult.fail(FailureReason.NO_ACTIVE_CAMPAIGN, "No active campaign")
        title = self.campaign.target_position.title
        self.campaign = None
        self.election = None
        logger.info("Campaign abandoned: %s", title)
        return CommandResult.ok(f"Campaign for {title} ended")

    # ── Election ──────────────────────────────────────────────

    def simulate_election(self, character: Character) -> CommandResult:
        """
        Resolve the upcoming election.

        The results are final. A win carries the new position in the delta.
        """
        election = self.election
        if election is None:
            if self.history:
                return CommandResult.fail(
                    FailureReason.ALREADY_RESOLVED, "The election has already been decided"
                )
            return CommandResult.fail(FailureReason.NO_ELECTION, "No upcoming election")

        level = election.position.level
        turnout = min(75.0, 50.0 + level * 3.0)
        total_votes = int(VOTERS_PER_LEVEL * level * turnout / 100)

        raw: list[float] = []
        for candidate in election.candidates:
            if candidate.is_player:
                if self.campaign is not None:
                    share = self.campaign.poll_numbers
                else:
                    share = character.charisma / 2 + character.reputation / 4
                share += character.approval_rating * 0.2
                share += float(self.rng.uniform(-5, 5))
            else:
                funds_bonus = min(10.0, float(candidate.funds) / 50_000)
                share = candidate.charisma / 2 + funds_bonus + float(self.rng.uniform(-10, 10))
            raw.append(max(0.0, min(100.0, share)))

        total = sum(raw)
        if total > 0:
            shares = [s / total * 100 for s in raw]
        else:
            shares = [100 / len(raw)] * len(raw)

        winner_index = 0
        for i, share in enumerate(shares):
            if share > shares[winner_index]:
                winner_index = i
        winner = election.candidates[winner_index]
        ranked = sorted(shares, reverse=True)
        margin = ranked[0] - ranked[1] if len(ranked) > 1 else ranked[0]

        results = ElectionResults(
            winner_id=winner.id,
            winner_name=winner.name,
            shares=[
                CandidateShare(candidate_id=c.id, name=c.name, share=s)
                for c, s in zip(election.candidates, shares)
            ],
            total_votes=total_votes,
            voter_turnout=turnout,
            margin=margin,
        )
        election.results = results
        election.days_until_election = 0
        self.history.append(election)
        self.election = None
        self.campaign = None

        won = winner.is_player
        logger.info(
            "Election decided: %s winner=%s margin=%.1f%% player_won=%s",
            election.position.title, winner.name, margin, won,
        )
        if won:
            return CommandResult.ok(
                f"You won the election for {election.position.title} by {margin:.1f} points!",
                delta=CharacterDelta(new_position=election.position),
                payload=results,
            )
        return CommandResult.ok(
            f"{winner.name} won the election for {election.position.title}.",
            payload=results,
        )

    def won_election(self) -> bool:
        if not self.history:
            return False
        last = self.history[-1]
        player = last.player_candidate
        return last.results is not None and player is not None and last.results.winner_id == player.id

    def tick(self, on: date, character: Character) -> CommandResult | None:
        """Count down to election day and resolve the election when it arrives."""
        if self.election is None:
            return None
        remaining = (self.election.election_date - on).days
        self.election.days_until_election = max(0, remaining)
        if self.campaign is not None:
            self.campaign.days_remaining = max(0, remaining)
        if remaining <= 0:
            return self.simulate_election(character)
        return None

    def to_dict(self) -> dict:
        return {
            "campaign": self.campaign.model_dump(mode="json") if self.campaign else None,
            "election": self.election.model_dump(mode="json") if self.election else None,
            "history": [e.model_dump(mode="json") for e in self.history],
        }
