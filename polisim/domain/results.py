"""
Command Results — Uniform outcome of every player-facing operation.

Precondition failures are not exceptions: they come back as a CommandResult
with `success=False`, a FailureReason, and a human-readable message. Domain
outcomes such as a rejected law or a lost election are successful results
that carry the outcome in `payload`.

Integrity failures (a broken treasury chain, a non-finite indicator) are the
only conditions that raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from polisim.domain.schema import CharacterDelta


class FailureReason(str, Enum):
    """Why a command was refused."""

    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    INSUFFICIENT_REPUTATION = "insufficient_reputation"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REQUIREMENTS_NOT_MET = "requirements_not_met"
    ALREADY_PROPOSED = "already_proposed"
    CAMPAIGN_ALREADY_ACTIVE = "campaign_already_active"
    NOT_ELIGIBLE = "not_eligible"
    NO_ACTIVE_CAMPAIGN = "no_active_campaign"
    NO_ELECTION = "no_election"
    ALREADY_RESOLVED = "already_resolved"


@dataclass
class CommandResult:
    """
    Result of a command issued to a subsystem.

    The subsystem never touches the character or the treasury itself: it
    reports `delta` (character mutation), `treasury_change` (cash flow for the
    jurisdiction's treasury, negative = spending) and `gdp_impact` (one-shot
    GDP shift, percent). The driver applies all three.
    """

    success: bool
    message: str
    reason: FailureReason | None = None
    delta: CharacterDelta = field(default_factory=CharacterDelta)
    treasury_change: Decimal = Decimal("0")
    gdp_impact: float = 0.0
    stat_changes: dict[str, float] = field(default_factory=dict)
    payload: Any = None

    @property
    def is_failure(self) -> bool:
        return not self.success

    @classmethod
    def ok(cls, message: str, **kwargs: Any) -> CommandResult:
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def fail(cls, reason: FailureReason, message: str) -> CommandResult:
        return cls(success=False, message=message, reason=reason)
