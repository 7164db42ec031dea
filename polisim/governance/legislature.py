"""
Legislative Pipeline — Drafting, advancing and voting on laws.

Every law follows a single lifecycle:

    DRAFT → PROPOSED → IN_COMMITTEE → UNDER_DEBATE → VOTING → PASSED | REJECTED

Any non-terminal law may be WITHDRAWN. Terminal laws are never mutated again,
so the effects of a passed law are emitted exactly once, in the result of the
vote that passed it.

The pipeline never writes to the character, the treasury or the economy. Each
command returns a CommandResult carrying the character delta, the treasury
cash flow and the GDP impact for the driver to apply.

The pipeline also owns the executive PolicyBook, and merges passed-law and
enacted-policy stat changes into per-department totals for scoring.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

import numpy as np

from polisim.config import settings
from polisim.domain.catalog import LAW_TEMPLATES, STAT_DEPARTMENTS
from polisim.domain.results import CommandResult, FailureReason
from polisim.domain.schema import (
    Character,
    CharacterDelta,
    Department,
    Law,
    LawCategory,
    LawStatus,
    LegislativeBody,
    LegislativeSession,
    SessionSummary,
)
from polisim.governance.policies import PolicyBook

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Process Constants
# ════════════════════════════════════════════════════════════════

PROPOSE_STRESS = 3
REJECTION_APPROVAL_PENALTY = -3.0
COMMITTEE_SUPPORT_SHIFT = (-5.0, 10.0)
DEBATE_CHARISMA_THRESHOLD = 70
DEBATE_SUPPORT_BONUS = 5.0

# Seat ranges are inclusive
BODY_SEATS: dict[LegislativeBody, tuple[int, int]] = {
    LegislativeBody.CITY_COUNCIL: (7, 15),
    LegislativeBody.STATE_LEGISLATURE: (40, 80),
    LegislativeBody.CONGRESS: (435, 435),
    LegislativeBody.SENATE: (100, 100),
}

_NEXT_STAGE: dict[LawStatus, LawStatus] = {
    LawStatus.PROPOSED: LawStatus.IN_COMMITTEE,
    LawStatus.IN_COMMITTEE: LawStatus.UNDER_DEBATE,
    LawStatus.UNDER_DEBATE: LawStatus.VOTING,
}


def _one_year_after(day: date) -> date:
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        # Feb 29 → Feb 28 of the following year
        return day.replace(year=day.year + 1, day=28)


class LegislativePipeline:
    """
    Owns every law and the current legislative session.

    Usage:
        pipeline = LegislativePipeline(rng=np.random.default_rng(7))
        law = pipeline.create_law(LawCategory.EDUCATION, character)
        result = pipeline.propose_law(law.id, character)
        character = character.apply_delta(result.delta)
    """

    def __init__(
        self,
        rng: np.random.Generator,
        policies: PolicyBook | None = None,
        propose_reputation_threshold: int | None = None,
        propose_reputation_cost: int | None = None,
        vote_swing: float | None = None,
        voting_period_days: int | None = None,
    ) -> None:
        self.rng = rng
        self.policies = policies if policies is not None else PolicyBook()
        self.propose_threshold = (
            settings.propose_reputation_threshold
            if propose_reputation_threshold is None
            else propose_reputation_threshold
        )
        self.propose_cost = (
            settings.propose_reputation_cost
            if propose_reputation_cost is None
            else propose_reputation_cost
        )
        self.vote_swing = settings.vote_swing if vote_swing is None else vote_swing
        self.voting_period_days = (
            settings.voting_period_days if voting_period_days is None else voting_period_days
        )
        self.laws: dict[UUID, Law] = {}
        self.session: LegislativeSession | None = None

    # ── Sessions ──────────────────────────────────────────────

    def open_session(self, on: date) -> LegislativeSession:
        """Open the next one-year legislative session starting `on`."""
        number = self.session.number + 1 if self.session else 1
        self.session = LegislativeSession(
            number=number, start_date=on, end_date=_one_year_after(on)
        )
        logger.info(
            "Legislative session opened: #%d %s → %s",
            number, on.isoformat(), self.session.end_date.isoformat(),
        )
        return self.session

    # ── Drafting ──────────────────────────────────────────────

    def create_law(self, category: LawCategory, sponsor: Character) -> Law:
        """Draft a new law from the category template."""
        title, description, support, effects, cost = LAW_TEMPLATES[category]
        body = (
            sponsor.current_position.legislative_body
            if sponsor.current_position
            else LegislativeBody.CITY_COUNCIL
        )
        law = Law(
            title=title,
            description=description,
            category=category,
            sponsor=sponsor.name,
            legislative_body=body,
            date_created=sponsor.current_date,
            public_support=support,
            effects=effects,
            implementation_cost=cost,
        )
        self.laws[law.id] = law
        logger.info("Law drafted: '%s' [%s] body=%s", title, category.value, body.value)
        return law

    def customize_law(self, law_id: UUID, title: str, description: str) -> CommandResult:
        law = self.laws.get(law_id)
        if law is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Law not found")
        if law.status != LawStatus.DRAFT:
            return CommandResult.fail(
                FailureReason.INVALID_STATE, "Only draft laws can be edited"
            )
        law.title = title
        law.description = description
        return CommandResult.ok("Law updated", payload=law)

    def delete_draft_law(self, law_id: UUID) -> CommandResult:
        law = self.laws.get(law_id)
        if law is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Law not found")
        if law.status != LawStatus.DRAFT:
            return CommandResult.fail(
                FailureReason.INVALID_STATE,
                f"Cannot delete a law that is {law.status.value}; withdraw it instead",
            )
        del self.laws[law_id]
        logger.info("Draft deleted: '%s'", law.title)
        return CommandResult.ok(f"Draft '{law.title}' deleted")

    # ── Legislative Process ───────────────────────────────────

    def can_propose(self, character: Character) -> bool:
        return character.reputation >= self.propose_threshold

    def propose_law(self, law_id: UUID, sponsor: Character) -> CommandResult:
        """
        Introduce a draft law. Costs reputation and adds stress.

        Fails with NOT_FOUND, ALREADY_PROPOSED (law is past draft) or
        INSUFFICIENT_REPUTATION; a failed proposal leaves the law in draft.
        """
        law = self.laws.get(law_id)
        if law is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Law not found")
        if law.status != LawStatus.DRAFT:
            return CommandResult.fail(
                FailureReason.ALREADY_PROPOSED,
                f"'{law.title}' is already {law.status.value}",
            )
        if not self.can_propose(sponsor):
            return CommandResult.fail(
                FailureReason.INSUFFICIENT_REPUTATION,
                f"Insufficient reputation to propose laws (need {self.propose_threshold}+)",
            )

        law.status = LawStatus.PROPOSED
        law.date_proposed = sponsor.current_date
        law.session_number = self.session.number if self.session else None

        logger.info("Law proposed: '%s' session=%s", law.title, law.session_number)
        return CommandResult.ok(
            "Law proposed successfully",
            delta=CharacterDelta(
                reputation_change=-self.propose_cost,
                stress_change=PROPOSE_STRESS,
            ),
            payload=law,
        )

    def advance_law(self, law_id: UUID, sponsor: Character) -> CommandResult:
        """
        Move a proposed law to its next stage, or hold the vote if it is in VOTING.

        Committee review shifts public support; a charismatic sponsor gains
        support during debate. Advancing any other status is an INVALID_STATE
        failure and never touches the vote tallies.
        """
        law = self.laws.get(law_id)
        if law is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Law not found")

        if law.status == LawStatus.VOTING:
            return self._resolve_vote(law, sponsor.current_date)

        next_stage = _NEXT_STAGE.get(law.status)
        if next_stage is None:
            return CommandResult.fail(
                FailureReason.INVALID_STATE,
                f"Law cannot be advanced from {law.status.value}",
            )

        if law.status == LawStatus.IN_COMMITTEE:
            shift = float(self.rng.uniform(*COMMITTEE_SUPPORT_SHIFT))
            law.public_support = max(0.0, min(100.0, law.public_support + shift))
        elif law.status == LawStatus.UNDER_DEBATE:
            if sponsor.charisma >= DEBATE_CHARISMA_THRESHOLD:
                law.public_support = min(100.0, law.public_support + DEBATE_SUPPORT_BONUS)
            law.vote_date = sponsor.current_date + timedelta(days=self.voting_period_days)

        law.status = next_stage
        logger.info(
            "Law advanced: '%s' → %s (support %.1f%%)",
            law.title, next_stage.value, law.public_support,
        )

        messages = {
            LawStatus.IN_COMMITTEE: "Law sent to committee",
            LawStatus.UNDER_DEBATE: "Law cleared committee and is under debate",
            LawStatus.VOTING: "Law proceeding to vote",
        }
        return CommandResult.ok(messages[next_stage], payload=law)

    def withdraw_law(self, law_id: UUID) -> CommandResult:
        """Withdraw a law at any non-terminal stage. No effects are applied."""
        law = self.laws.get(law_id)
        if law is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Law not found")
        if law.status.is_terminal:
            return CommandResult.fail(
                FailureReason.INVALID_STATE,
                f"'{law.title}' is already {law.status.value} and cannot be withdrawn",
            )
        previous = law.status
        law.status = LawStatus.WITHDRAWN
        law.vote_date = None
        logger.info("Law withdrawn: '%s' (was %s)", law.title, previous.value)
        return CommandResult.ok(f"'{law.title}' withdrawn", payload=law)

    def _seat_count(self, body: LegislativeBody) -> int:
        low, high = BODY_SEATS[body]
        if low == high:
            return low
        return int(self.rng.integers(low, high + 1))

    def _resolve_vote(self, law: Law, on: date) -> CommandResult:
        """Hold the floor vote. Passing needs a strict majority of seats."""
        seats = self._seat_count(law.legislative_body)
        swing = float(self.rng.uniform(-self.vote_swing, self.vote_swing))
        support = max(0.0, min(1.0, law.public_support / 100 + swing))

        law.votes_for = int(seats * support + 0.5)
        law.votes_against = seats - law.votes_for
        law.date_resolved = on
        law.vote_date = None

        if law.votes_for * 2 > seats:
            law.status = LawStatus.PASSED
            effects = law.effects
            cost = effects.budget_impact + (law.implementation_cost or Decimal("0"))
            stat_changes: dict[str, float] = {}
            for change in effects.stat_changes:
                stat_changes[change.stat] = stat_changes.get(change.stat, 0.0) + change.change
            logger.info(
                "Law passed: '%s' %d–%d", law.title, law.votes_for, law.votes_against
            )
            return CommandResult.ok(
                f"'{law.title}' passed {law.votes_for}–{law.votes_against}",
                delta=CharacterDelta(approval_change=effects.approval_change),
                treasury_change=-cost,
                gdp_impact=effects.economic_impact,
                stat_changes=stat_changes,
                payload=law,
            )

        law.status = LawStatus.REJECTED
        logger.info(
            "Law rejected: '%s' %d–%d", law.title, law.votes_for, law.votes_against
        )
        return CommandResult.ok(
            f"'{law.title}' rejected {law.votes_for}–{law.votes_against}",
            delta=CharacterDelta(approval_change=REJECTION_APPROVAL_PENALTY),
            payload=law,
        )

    def tick(self, on: date) -> list[CommandResult]:
        """Hold every vote scheduled on or before `on`, then roll the session over."""
        results = []
        due = [
            law for law in self.laws.values()
            if law.status == LawStatus.VOTING and law.vote_date is not None and law.vote_date <= on
        ]
        for law in sorted(due, key=lambda l: (l.vote_date, l.date_created)):
            results.append(self._resolve_vote(law, on))

        if self.session is not None and on >= self.session.end_date:
            self.open_session(on)
        return results

    # ── Queries ───────────────────────────────────────────────

    def get_law(self, law_id: UUID) -> Law | None:
        return self.laws.get(law_id)

    def laws_by_status(self, status: LawStatus) -> list[Law]:
        return [law for law in self.laws.values() if law.status == status]

    def laws_by_category(self, category: LawCategory) -> list[Law]:
        return [law for law in self.laws.values() if law.category == category]

    def law_counts(self) -> dict[LawStatus, int]:
        counts = Counter(law.status for law in self.laws.values())
        return {status: counts.get(status, 0) for status in LawStatus}

    def get_session_summary(self) -> SessionSummary:
        """Counts for the current session, derived from the law collection."""
        if self.session is None:
            return SessionSummary(session_number=None)
        laws = [l for l in self.laws.values() if l.session_number == self.session.number]
        return SessionSummary(
            session_number=self.session.number,
            proposed=len(laws),
            active=sum(1 for l in laws if l.status.is_in_pipeline),
            passed=sum(1 for l in laws if l.status == LawStatus.PASSED),
            rejected=sum(1 for l in laws if l.status == LawStatus.REJECTED),
            withdrawn=sum(1 for l in laws if l.status == LawStatus.WITHDRAWN),
        )

    def effect_totals(self) -> dict[Department, float]:
        """Per-department improvement from passed laws and applied policy effects."""
        totals: dict[Department, float] = {}
        changes = [
            change
            for law in self.laws.values()
            if law.status == LawStatus.PASSED
            for change in law.effects.stat_changes
        ]
        changes += self.policies.stat_changes()
        for change in changes:
            mapping = STAT_DEPARTMENTS.get(change.stat)
            if mapping is None:
                continue
            department, sign = mapping
            totals[department] = totals.get(department, 0.0) + sign * change.change
        return totals

    def to_dict(self) -> dict:
        return {
            "session": self.session.model_dump(mode="json") if self.session else None,
            "laws": [law.model_dump(mode="json") for law in self.laws.values()],
            "policies": self.policies.to_dict(),
        }
