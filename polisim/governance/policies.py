"""
Policy Book — Executive policies enacted by meeting requirements, not by vote.

    AVAILABLE → PROPOSED → ENACTED → REPEALED

Proposal is advisory. Enactment is gated by the character's office level,
approval, reputation, already-enacted prerequisites and campaign funds; when
it succeeds the cost and the effects are returned together in one delta.
Repeal applies the policy's own repeal effect set. Stat changes from both
are kept in application order and feed department scoring.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from polisim.domain.catalog import default_policies
from polisim.domain.results import CommandResult, FailureReason
from polisim.domain.schema import (
    Character,
    CharacterDelta,
    Policy,
    PolicyCategory,
    PolicyEffects,
    PolicyStatus,
    StatChange,
)

logger = logging.getLogger(__name__)

# Policy economic effects are on a 0–20 index; one point moves GDP by 0.1%
POLICY_GDP_SCALE = 0.1


class PolicyBook:
    """Owns the policy catalog and the status of every policy in it."""

    def __init__(self, policies: list[Policy] | None = None) -> None:
        catalog = policies if policies is not None else default_policies()
        self.policies: dict[UUID, Policy] = {p.id: p for p in catalog}
        # Stat changes in the order enactments and repeals were applied
        self.applied_stat_changes: list[StatChange] = []

    # ── Queries ───────────────────────────────────────────────

    def get_policy(self, policy_id: UUID) -> Policy | None:
        return self.policies.get(policy_id)

    def by_key(self, key: str) -> Policy | None:
        return next((p for p in self.policies.values() if p.key == key), None)

    def by_status(self, status: PolicyStatus) -> list[Policy]:
        return [p for p in self.policies.values() if p.status == status]

    def by_category(self, category: PolicyCategory) -> list[Policy]:
        return [p for p in self.policies.values() if p.category == category]

    @staticmethod
    def enactment_charge(policy: Policy) -> Decimal:
        """Total funds an enactment takes: the cost plus any negative funds effect."""
        return policy.requirements.cost_to_enact - min(policy.effects.funds_change, Decimal("0"))

    def _enacted_keys(self) -> set[str]:
        return {p.key for p in self.policies.values() if p.status == PolicyStatus.ENACTED}

    def requirement_status(self, policy: Policy, character: Character) -> list[tuple[str, bool]]:
        """Checklist of (requirement, met) pairs for display."""
        req = policy.requirements
        enacted = self._enacted_keys()
        charge = self.enactment_charge(policy)
        holds_level = req.min_position_level <= 1 or character.position_level >= req.min_position_level
        checklist = [
            (f"Office level {req.min_position_level}+", holds_level),
            (f"Approval {req.min_approval:.0f}%+", character.approval_rating >= req.min_approval),
            (f"Reputation {req.min_reputation}+", character.reputation >= req.min_reputation),
            (f"Funds ${charge:,.0f}", character.campaign_funds >= charge),
        ]
        for key in req.prerequisites:
            prerequisite = self.by_key(key)
            title = prerequisite.title if prerequisite else key
            checklist.append((f"Enacted: {title}", key in enacted))
        return checklist

    def meets_requirements(self, policy: Policy, character: Character) -> bool:
        """Office, approval, reputation and prerequisites (funds are checked separately)."""
        req = policy.requirements
        if req.min_position_level > 1 and character.position_level < req.min_position_level:
            return False
        if character.approval_rating < req.min_approval:
            return False
        if character.reputation < req.min_reputation:
            return False
        return set(req.prerequisites) <= self._enacted_keys()

    def stat_changes(self) -> list[StatChange]:
        """Every stat change applied so far, enactments and repeals alike."""
        return list(self.applied_stat_changes)

    # ── Commands ──────────────────────────────────────────────

    def propose_policy(self, policy_id: UUID, on: date | None = None) -> CommandResult:
        policy = self.policies.get(policy_id)
        if policy is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Policy not found")
        if policy.status in (PolicyStatus.PROPOSED, PolicyStatus.ENACTED):
            return CommandResult.fail(
                FailureReason.ALREADY_PROPOSED,
                f"{policy.title} is already {policy.status.value}",
            )
        policy.status = PolicyStatus.PROPOSED
        policy.date_proposed = on
        logger.info("Policy proposed: %s", policy.title)
        return CommandResult.ok(f"{policy.title} has been proposed", payload=policy)

    def enact_policy(self, policy_id: UUID, character: Character) -> CommandResult:
        """
        Enact a proposed policy.

        Cost and effects land in a single delta; a failed enactment changes
        nothing. Funds must cover the cost plus any negative funds effect,
        so enactment never leaves campaign funds below zero.
        """
        policy = self.policies.get(policy_id)
        if policy is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Policy not found")
        if policy.status != PolicyStatus.PROPOSED:
            return CommandResult.fail(
                FailureReason.INVALID_STATE,
                f"{policy.title} must be proposed before it can be enacted",
            )
        if not self.meets_requirements(policy, character):
            missing = [label for label, met in self.requirement_status(policy, character) if not met]
            return CommandResult.fail(
                FailureReason.REQUIREMENTS_NOT_MET,
                f"Requirements not met: {', '.join(missing)}",
            )
        cost = policy.requirements.cost_to_enact
        if character.campaign_funds < self.enactment_charge(policy):
            return CommandResult.fail(
                FailureReason.INSUFFICIENT_FUNDS,
                "Insufficient funds to enact this policy.",
            )

        policy.status = PolicyStatus.ENACTED
        policy.date_enacted = character.current_date
        policy.date_repealed = None
        self.applied_stat_changes.extend(policy.effects.stat_changes)
        logger.info("Policy enacted: %s (cost %s)", policy.title, cost)
        return self._effects_result(
            policy.effects, f"{policy.title} has been enacted!", policy, cost_to_enact=cost
        )

    def repeal_policy(self, policy_id: UUID, on: date | None = None) -> CommandResult:
        policy = self.policies.get(policy_id)
        if policy is None:
            return CommandResult.fail(FailureReason.NOT_FOUND, "Policy not found")
        if policy.status != PolicyStatus.ENACTED:
            return CommandResult.fail(
                FailureReason.INVALID_STATE,
                f"{policy.title} is not enacted",
            )
        policy.status = PolicyStatus.REPEALED
        policy.date_repealed = on
        self.applied_stat_changes.extend(policy.repeal_effects.stat_changes)
        logger.info("Policy repealed: %s", policy.title)
        return self._effects_result(
            policy.repeal_effects, f"{policy.title} has been repealed.", policy
        )

    @staticmethod
    def _effects_result(
        effects: PolicyEffects,
        message: str,
        policy: Policy,
        cost_to_enact=0,
    ) -> CommandResult:
        stat_changes: dict[str, float] = {}
        for change in effects.stat_changes:
            stat_changes[change.stat] = stat_changes.get(change.stat, 0.0) + change.change
        return CommandResult.ok(
            message,
            delta=CharacterDelta(
                approval_change=effects.approval_change,
                reputation_change=effects.reputation_change,
                stress_change=effects.stress_change,
                funds_change=effects.funds_change - cost_to_enact,
            ),
            gdp_impact=effects.economic_impact * POLICY_GDP_SCALE,
            stat_changes=stat_changes,
            payload=policy,
        )

    def to_dict(self) -> dict:
        return {
            "policies": [p.model_dump(mode="json") for p in self.policies.values()],
            "applied_stat_changes": [c.model_dump(mode="json") for c in self.applied_stat_changes],
        }
