"""
polisim — Simulation driver.

Central coordination entrypoint that:
1. Owns one instance of every subsystem (economy, treasuries, legislature,
   elections, scoring) and the character they act on
2. Advances simulated time one day at a time in a fixed order
3. Applies the deltas subsystems return to the character, the treasury and
   the economy
4. Exposes the player commands and read-only summaries a front end needs

Daily order:
    EconomicModel.tick → TreasuryLedger.apply_periodic_effects →
    LegislativePipeline.tick → ElectionCycle.tick → GovernmentScoreAggregator.recompute

Usage:
    python -m polisim.orchestrator --days 365 --seed 42 --snapshot run.json
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

import numpy as np
import structlog
from rich.console import Console
from rich.table import Table

from polisim.config import PolisimSettings, settings
from polisim.domain.catalog import get_position
from polisim.domain.results import CommandResult, FailureReason
from polisim.domain.schema import (
    ActivityType,
    Character,
    CharacterDelta,
    EconomicSnapshot,
    GovernmentStats,
    Jurisdiction,
    Law,
    LawCategory,
    Position,
    SessionSummary,
    StatsSummary,
    TreasuryEntry,
    TreasurySummary,
)
from polisim.economy.formatting import format_gdp, format_percentage
from polisim.economy.model import EconomicModel
from polisim.governance.elections import ElectionCycle
from polisim.governance.legislature import LegislativePipeline
from polisim.governance.scoring import GovernmentScoreAggregator
from polisim.treasury.ledger import TreasuryLedger


def configure_logging() -> None:
    """Configure structured logging."""
    logging.basicConfig(
        level=logging.getLevelName(settings.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.dev.ConsoleRenderer()
                if settings.log_format != "json"
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@dataclass
class DayReport:
    """Everything that happened on one simulated day."""

    on: date
    economy: EconomicSnapshot
    interest_entries: list[TreasuryEntry] = field(default_factory=list)
    law_results: list[CommandResult] = field(default_factory=list)
    election_result: CommandResult | None = None
    stats: GovernmentStats | None = None


class SimulationDriver:
    """
    Owns the subsystems and sequences every call into them.

    Subsystems never reach into each other. Each returns a CommandResult (or a
    snapshot) and the driver applies it: the character delta first, then the
    treasury cash flow, then the GDP impact.
    """

    def __init__(
        self,
        character: Character,
        config: PolisimSettings | None = None,
        seed: int | None = None,
    ) -> None:
        self.config = config or settings
        self.seed = self.config.seed if seed is None else seed
        economy_seq, legislature_seq, election_seq = np.random.SeedSequence(self.seed).spawn(3)

        self.character = character
        self.economy = EconomicModel(
            rng=np.random.default_rng(economy_seq), start=character.current_date
        )
        self.legislature = LegislativePipeline(
            rng=np.random.default_rng(legislature_seq),
            propose_reputation_threshold=self.config.propose_reputation_threshold,
            propose_reputation_cost=self.config.propose_reputation_cost,
            vote_swing=self.config.vote_swing,
            voting_period_days=self.config.voting_period_days,
        )
        self.elections = ElectionCycle(
            rng=np.random.default_rng(election_seq),
            activity_display_limit=self.config.activity_display_limit,
        )
        self.scoring = GovernmentScoreAggregator()
        self.treasuries: dict[Jurisdiction, TreasuryLedger] = {}
        self.log = structlog.get_logger()

        if character.current_position is not None:
            self._take_office(character.current_position)

    # ── Office ────────────────────────────────────────────────

    @property
    def jurisdiction(self) -> Jurisdiction | None:
        position = self.character.current_position
        return position.jurisdiction if position else None

    @property
    def treasury(self) -> TreasuryLedger | None:
        jurisdiction = self.jurisdiction
        return self.treasuries.get(jurisdiction) if jurisdiction else None

    def _take_office(self, position: Position) -> None:
        """Create the jurisdiction's treasury, a legislative session and stats."""
        on = self.character.current_date
        jurisdiction = position.jurisdiction
        if jurisdiction not in self.treasuries:
            self.treasuries[jurisdiction] = TreasuryLedger.for_jurisdiction(
                jurisdiction, on, interest_rate=self.config.default_interest_rate
            )
        self.legislature.open_session(on)
        self._recompute_stats()
        self.log.info(
            "polisim.driver.took_office",
            position=position.title,
            jurisdiction=jurisdiction.value,
        )

    # ── Applying results ──────────────────────────────────────

    def _apply_delta(self, delta: CharacterDelta) -> None:
        previous_position = self.character.current_position
        self.character = self.character.apply_delta(delta)
        if delta.new_position is not None and delta.new_position != previous_position:
            self._take_office(delta.new_position)

    def _apply(self, result: CommandResult, description: str | None = None) -> CommandResult:
        if not result.success:
            return result
        self._apply_delta(result.delta)
        treasury = self.treasury
        if result.treasury_change != 0 and treasury is not None:
            on = self.character.current_date
            treasury.apply_budget(
                result.treasury_change, description or result.message, on.year, on
            )
        if result.gdp_impact:
            self.economy.register_gdp_impact(result.gdp_impact)
        return result

    def _recompute_stats(self) -> GovernmentStats | None:
        if not self.character.holds_office:
            return None
        return self.scoring.recompute(
            self.get_treasury_summary(),
            self.economy.snapshot(),
            self.legislature.effect_totals(),
        )

    # ── Time ──────────────────────────────────────────────────

    def advance(self, days: int = 1) -> list[DayReport]:
        """Advance the simulation by whole days."""
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        return [self._advance_one_day() for _ in range(days)]

    def _advance_one_day(self) -> DayReport:
        self.character = self.character.advance_days(1)
        on = self.character.current_date

        snapshot = self.economy.tick(on, days=1)

        interest_entries = []
        for ledger in self.treasuries.values():
            entry = ledger.apply_periodic_effects(on)
            if entry is not None:
                interest_entries.append(entry)

        law_results = [self._apply(r) for r in self.legislature.tick(on)]

        election_result = self.elections.tick(on, self.character)
        if election_result is not None:
            self._apply(election_result)

        stats = self._recompute_stats()

        report = DayReport(
            on=on,
            economy=snapshot,
            interest_entries=interest_entries,
            law_results=law_results,
            election_result=election_result,
            stats=stats,
        )
        if interest_entries or law_results or election_result:
            self.log.info(
                "polisim.driver.day",
                date=on.isoformat(),
                interest_entries=len(interest_entries),
                laws_resolved=len(law_results),
                election=election_result.message if election_result else None,
            )
        return report

    # ── Legislative commands ──────────────────────────────────

    def create_law(self, category: LawCategory) -> Law:
        return self.legislature.create_law(category, self.character)

    def propose_law(self, law_id: UUID) -> CommandResult:
        return self._apply(self.legislature.propose_law(law_id, self.character))

    def advance_law(self, law_id: UUID) -> CommandResult:
        law = self.legislature.get_law(law_id)
        description = f"Law enacted: {law.title}" if law else None
        return self._apply(self.legislature.advance_law(law_id, self.character), description)

    def withdraw_law(self, law_id: UUID) -> CommandResult:
        return self._apply(self.legislature.withdraw_law(law_id))

    def propose_policy(self, policy_id: UUID) -> CommandResult:
        return self._apply(
            self.legislature.policies.propose_policy(policy_id, self.character.current_date)
        )

    def enact_policy(self, policy_id: UUID) -> CommandResult:
        return self._apply(self.legislature.policies.enact_policy(policy_id, self.character))

    def repeal_policy(self, policy_id: UUID) -> CommandResult:
        return self._apply(
            self.legislature.policies.repeal_policy(policy_id, self.character.current_date)
        )

    # ── Campaign commands ─────────────────────────────────────

    def start_campaign(self, position: Position | str) -> CommandResult:
        if isinstance(position, str):
            position = get_position(position)
        return self._apply(self.elections.start_campaign(position, self.character))

    def perform_campaign_activity(self, activity_type: ActivityType) -> CommandResult:
        return self._apply(
            self.elections.perform_campaign_activity(activity_type, self.character)
        )

    # ── Budget ────────────────────────────────────────────────

    def apply_budget(self, delta: Any, description: str) -> CommandResult:
        """
        Record a budget result for the current office and rescore the government.

        The government's rating feeds back into the character's approval.
        """
        treasury = self.treasury
        if treasury is None:
            return CommandResult.fail(
                FailureReason.NOT_ELIGIBLE, "Must hold office to pass a budget"
            )
        on = self.character.current_date
        try:
            entry = treasury.apply_budget(delta, description, on.year, on)
        except ValueError as exc:
            return CommandResult.fail(FailureReason.INVALID_STATE, str(exc))

        stats, impact = self.scoring.update_stats(
            self.get_treasury_summary(),
            self.economy.snapshot(),
            self.legislature.effect_totals(),
        )
        result = CommandResult.ok(
            f"Budget applied: {format_gdp(float(entry.cash_change))} "
            f"(government rated {stats.label.value})",
            delta=CharacterDelta(approval_change=impact),
            payload=entry,
        )
        self._apply_delta(result.delta)
        return result

    # ── Read-only summaries ───────────────────────────────────

    def get_session_summary(self) -> SessionSummary:
        return self.legislature.get_session_summary()

    def get_treasury_summary(self) -> TreasurySummary | None:
        treasury = self.treasury
        if treasury is None:
            return None
        return treasury.get_summary(
            gdp=self.economy.gdp_for(treasury.jurisdiction),
            recent=self.config.recent_entry_limit,
        )

    def get_stats_summary(self) -> StatsSummary | None:
        return self.scoring.get_stats_summary()

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready dump of the whole entity graph."""
        return {
            "seed": self.seed,
            "character": self.character.model_dump(mode="json"),
            "economy": self.economy.to_dict(),
            "treasuries": {j.value: t.to_dict() for j, t in self.treasuries.items()},
            "legislature": self.legislature.to_dict(),
            "elections": self.elections.to_dict(),
            "stats": self.scoring.latest.model_dump(mode="json") if self.scoring.latest else None,
        }


# ════════════════════════════════════════════════════════════════
# Command Line
# ════════════════════════════════════════════════════════════════


def default_character(name: str, start: date, position_key: str | None) -> Character:
    return Character(
        name=name,
        birth_date=start.replace(year=start.year - 35),
        current_date=start,
        charisma=65,
        intelligence=60,
        reputation=55,
        approval_rating=55.0,
        campaign_funds=Decimal("250000"),
        current_position=get_position(position_key) if position_key else None,
    )


def render_summary(console: Console, driver: SimulationDriver) -> None:
    snapshot = driver.economy.snapshot()

    table = Table(title=f"Economy on {snapshot.as_of.isoformat()}")
    table.add_column("Indicator", style="cyan")
    table.add_column("Federal", justify="right")
    table.add_column("State", justify="right")
    table.add_column("Local", justify="right")
    table.add_row(
        "GDP",
        format_gdp(snapshot.federal_gdp),
        format_gdp(snapshot.state_gdp),
        format_gdp(snapshot.local_gdp),
    )
    table.add_row(
        "Unemployment",
        format_percentage(snapshot.federal_unemployment),
        format_percentage(snapshot.state_unemployment),
        format_percentage(snapshot.local_unemployment),
    )
    table.add_row("Inflation", format_percentage(snapshot.inflation), "—", "—")
    table.add_row("Interest rate", format_percentage(snapshot.interest_rate), "—", "—")
    console.print(table)

    summary = driver.get_treasury_summary()
    if summary is not None:
        treasury = Table(title=f"{summary.jurisdiction.value.title()} Treasury")
        treasury.add_column("Metric", style="cyan")
        treasury.add_column("Value", justify="right")
        treasury.add_row("Balance", format_gdp(float(summary.current_balance)))
        treasury.add_row("Interest paid", format_gdp(float(summary.total_interest_paid)))
        if summary.debt_to_gdp_ratio is not None:
            treasury.add_row(
                "Debt-to-GDP",
                f"{format_percentage(summary.debt_to_gdp_ratio)} ({summary.debt_classification.value})",
            )
        console.print(treasury)

    stats = driver.get_stats_summary()
    if stats is not None:
        scores = Table(title=f"Government: {stats.overall_score:.1f} ({stats.label.value})")
        scores.add_column("Department", style="cyan")
        scores.add_column("Score", justify="right")
        scores.add_column("Label", style="green")
        for department in stats.departments:
            scores.add_row(
                department.department.value, f"{department.score:.1f}", department.label.value
            )
        console.print(scores)

    character = driver.character
    console.print(
        f"[bold]{character.name}[/bold] — "
        f"{character.current_position.title if character.current_position else 'private citizen'}, "
        f"approval {character.approval_rating:.1f}%, reputation {character.reputation}"
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a headless polisim simulation")
    parser.add_argument("--days", type=int, default=365, help="Days to simulate")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed (defaults to settings)")
    parser.add_argument("--name", default="Alex Morgan", help="Character name")
    parser.add_argument(
        "--position",
        default="city_council_member",
        help="Starting office key, or 'none' for a private citizen",
    )
    parser.add_argument("--snapshot", type=Path, default=None, help="Write a JSON snapshot here")
    args = parser.parse_args(argv)

    configure_logging()
    log = structlog.get_logger()

    position_key = None if args.position == "none" else args.position
    character = default_character(args.name, settings.start_date, position_key)
    driver = SimulationDriver(character, seed=args.seed)

    log.info("polisim.driver.starting", days=args.days, seed=driver.seed)
    driver.advance(args.days)
    log.info("polisim.driver.finished", date=driver.character.current_date.isoformat())

    render_summary(Console(), driver)

    if args.snapshot is not None:
        args.snapshot.write_text(json.dumps(driver.snapshot(), indent=2), encoding="utf-8")
        log.info("polisim.driver.snapshot_written", path=str(args.snapshot))


if __name__ == "__main__":
    main()
