"""
Treasury Ledger — Append-only, balance-chained record of public finances.

Each jurisdiction the character governs has one ledger. The ledger provides:
- Budget application, the only way budget flows move the balance
- Interest accrual on debt, at most once per fiscal year
- A read-only summary for display and government scoring
- Verification of the balance chain

Chain invariant: every entry's `ending_balance` equals the previous entry's
`ending_balance` plus its own `cash_change`; the first entry chains from the
opening balance. A negative balance is debt.

Money is Decimal, quantized to cents.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from polisim.config import settings
from polisim.domain.schema import (
    DebtClassification,
    Jurisdiction,
    TreasuryEntry,
    TreasuryEntryKind,
    TreasurySummary,
)

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Constants
# ════════════════════════════════════════════════════════════════

CENTS = Decimal("0.01")

OPENING_DEBT: dict[Jurisdiction, Decimal] = {
    Jurisdiction.LOCAL: Decimal("50000000"),
    Jurisdiction.STATE: Decimal("5000000000"),
    Jurisdiction.FEDERAL: Decimal("10000000000000"),
}

MIN_INTEREST_RATE = 0.0
MAX_INTEREST_RATE = 20.0


class LedgerIntegrityError(Exception):
    """Raised when the balance chain integrity check fails."""
    pass


def to_money(value: Any) -> Decimal:
    """
    Convert a number to a cent-quantized Decimal.

    Raises:
        ValueError: If the value is not a finite number.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Monetary amount must be finite, got {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class TreasuryLedger:
    """
    Treasury of one jurisdiction.

    Usage:
        ledger = TreasuryLedger(Jurisdiction.LOCAL)
        ledger.initialize(Decimal("0"), on=date(2024, 1, 1), fiscal_year=2024)
        ledger.apply_budget(Decimal("-50000"), "FY2024 deficit", 2024, date(2024, 3, 1))
        ledger.accrue_interest(0.05, 1.0, fiscal_year=2024)
        summary = ledger.get_summary(gdp=5e9)
    """

    def __init__(
        self,
        jurisdiction: Jurisdiction,
        interest_rate: float | None = None,
    ) -> None:
        self.jurisdiction = jurisdiction
        self.interest_rate = (
            settings.default_interest_rate if interest_rate is None else interest_rate
        )
        self.opening_balance = Decimal("0.00")
        self.opening_date: date | None = None
        self.fiscal_year = 0
        self.entries: list[TreasuryEntry] = []
        self._interest_years: set[int] = set()

    @classmethod
    def for_jurisdiction(
        cls,
        jurisdiction: Jurisdiction,
        on: date,
        interest_rate: float | None = None,
    ) -> TreasuryLedger:
        """Create a ledger opening with the jurisdiction's inherited debt."""
        ledger = cls(jurisdiction, interest_rate=interest_rate)
        ledger.initialize(-OPENING_DEBT[jurisdiction], on=on, fiscal_year=on.year)
        return ledger

    def initialize(self, opening_balance: Any, on: date, fiscal_year: int) -> None:
        """Reset the ledger to an opening balance with no entries."""
        self.opening_balance = to_money(opening_balance)
        self.opening_date = on
        self.fiscal_year = fiscal_year
        self.entries = []
        self._interest_years = set()
        logger.info(
            "Treasury opened: %s balance=%s FY%d",
            self.jurisdiction.value, self.opening_balance, fiscal_year,
        )

    # ── Balance ───────────────────────────────────────────────

    @property
    def balance(self) -> Decimal:
        if self.entries:
            return self.entries[-1].ending_balance
        return self.opening_balance

    @property
    def is_in_debt(self) -> bool:
        return self.balance < 0

    # ── Mutations ─────────────────────────────────────────────

    def _append(self, entry: TreasuryEntry) -> TreasuryEntry:
        """Append after checking the new link. The ONLY write to `entries`."""
        if entry.ending_balance != self.balance + entry.cash_change:
            logger.critical(
                "Treasury chain break: %s + %s != %s",
                self.balance, entry.cash_change, entry.ending_balance,
            )
            raise LedgerIntegrityError(
                f"Entry {entry.id} does not chain: previous balance {self.balance}, "
                f"cash change {entry.cash_change}, ending balance {entry.ending_balance}"
            )
        self.entries.append(entry)
        return entry

    def apply_budget(
        self,
        delta: Any,
        description: str,
        fiscal_year: int,
        on: date,
    ) -> TreasuryEntry:
        """
        Record a budget result (positive = surplus, negative = deficit).

        Raises:
            ValueError: If delta is not a finite amount. Nothing is recorded.
        """
        cash_change = to_money(delta)
        entry = TreasuryEntry(
            kind=TreasuryEntryKind.BUDGET,
            posted_on=on,
            fiscal_year=fiscal_year,
            description=description,
            cash_change=cash_change,
            ending_balance=self.balance + cash_change,
        )
        self._append(entry)
        self.fiscal_year = max(self.fiscal_year, fiscal_year)
        logger.info(
            "Budget applied: %s %s (%s) balance=%s",
            self.jurisdiction.value, cash_change, description, entry.ending_balance,
        )
        return entry

    def accrue_interest(
        self,
        rate: float,
        period_fraction: float,
        fiscal_year: int | None = None,
        on: date | None = None,
    ) -> TreasuryEntry | None:
        """
        Charge interest on outstanding debt for one fiscal year.

        `rate` is a fraction (0.05 = 5%). Interest is only charged while the
        balance is negative, and at most once per fiscal year; later calls for
        the same year return None without recording anything.
        """
        year = self.fiscal_year if fiscal_year is None else fiscal_year
        if year in self._interest_years:
            logger.debug("Interest already accrued for FY%d", year)
            return None
        if not self.is_in_debt:
            return None

        interest = to_money(abs(self.balance) * Decimal(str(rate)) * Decimal(str(period_fraction)))
        posted_on = on or (self.entries[-1].posted_on if self.entries else self.opening_date)
        entry = TreasuryEntry(
            kind=TreasuryEntryKind.INTEREST,
            posted_on=posted_on,
            fiscal_year=year,
            description=f"Interest on debt, FY{year}",
            cash_change=-interest,
            ending_balance=self.balance - interest,
        )
        self._append(entry)
        self._interest_years.add(year)
        logger.info(
            "Interest accrued: %s FY%d %s balance=%s",
            self.jurisdiction.value, year, interest, entry.ending_balance,
        )
        return entry

    def apply_periodic_effects(self, on: date) -> TreasuryEntry | None:
        """Close the fiscal year when `on` crosses into a new calendar year."""
        if on.year <= self.fiscal_year:
            return None
        closed_year = self.fiscal_year
        entry = self.accrue_interest(
            self.interest_rate / 100, 1.0, fiscal_year=closed_year, on=on
        )
        self.fiscal_year = on.year
        return entry

    def adjust_interest_rate(self, rate: float) -> float:
        self.interest_rate = max(MIN_INTEREST_RATE, min(MAX_INTEREST_RATE, rate))
        logger.info("Interest rate set: %s %.2f%%", self.jurisdiction.value, self.interest_rate)
        return self.interest_rate

    # ── Queries ───────────────────────────────────────────────

    def _budget_entries(self) -> list[TreasuryEntry]:
        return [e for e in self.entries if e.kind == TreasuryEntryKind.BUDGET]

    @property
    def total_debt(self) -> Decimal:
        """Sum of deficits recorded through budgets (interest excluded)."""
        return sum(
            (-e.cash_change for e in self._budget_entries() if e.cash_change < 0),
            Decimal("0.00"),
        )

    @property
    def total_surplus(self) -> Decimal:
        return sum(
            (e.cash_change for e in self._budget_entries() if e.cash_change > 0),
            Decimal("0.00"),
        )

    @property
    def total_interest_paid(self) -> Decimal:
        return sum(
            (-e.cash_change for e in self.entries if e.kind == TreasuryEntryKind.INTEREST),
            Decimal("0.00"),
        )

    def get_summary(self, gdp: float, recent: int | None = None) -> TreasurySummary:
        """Build a read-only summary; debt-to-GDP is reported only while in debt."""
        limit = settings.recent_entry_limit if recent is None else recent
        balance = self.balance
        in_debt = balance < 0

        ratio: float | None = None
        classification: DebtClassification | None = None
        if in_debt and gdp > 0:
            ratio = float(abs(balance)) / gdp * 100
            classification = DebtClassification.from_ratio(ratio)

        annual_interest = (
            to_money(abs(balance) * Decimal(str(self.interest_rate)) / 100)
            if in_debt
            else Decimal("0.00")
        )

        budgets = self._budget_entries()
        fiscal_balance = Decimal("0.00")
        if budgets:
            latest_year = max(e.fiscal_year for e in budgets)
            fiscal_balance = sum(
                (e.cash_change for e in budgets if e.fiscal_year == latest_year),
                Decimal("0.00"),
            )

        return TreasurySummary(
            jurisdiction=self.jurisdiction,
            current_balance=balance,
            is_in_debt=in_debt,
            total_debt=self.total_debt,
            total_surplus=self.total_surplus,
            total_interest_paid=self.total_interest_paid,
            fiscal_balance=fiscal_balance,
            interest_rate=self.interest_rate,
            annual_interest_payment=annual_interest,
            debt_to_gdp_ratio=ratio,
            debt_classification=classification,
            recent_entries=list(reversed(self.entries[-limit:])) if limit > 0 else [],
        )

    def verify_chain(self) -> tuple[bool, int, str]:
        """
        Verify the balance chain from the opening balance forward.

        Returns:
            Tuple of (is_valid, entries_verified, message).
        """
        return verify_entries(self.opening_balance, self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "jurisdiction": self.jurisdiction.value,
            "opening_balance": str(self.opening_balance),
            "opening_date": self.opening_date.isoformat() if self.opening_date else None,
            "fiscal_year": self.fiscal_year,
            "interest_rate": self.interest_rate,
            "interest_years": sorted(self._interest_years),
            "entries": [e.model_dump(mode="json") for e in self.entries],
        }


def verify_entries(opening_balance: Decimal, entries: list[TreasuryEntry]) -> tuple[bool, int, str]:
    """Walk a list of entries and check every balance link."""
    previous = opening_balance
    for i, entry in enumerate(entries):
        expected = previous + entry.cash_change
        if entry.ending_balance != expected:
            return (
                False, i,
                f"Chain break at entry {i} ({entry.description}): "
                f"expected balance {expected}, stored {entry.ending_balance}"
            )
        previous = entry.ending_balance

    return (
        True, len(entries),
        f"Chain verified: {len(entries)} entries, integrity intact"
    )
