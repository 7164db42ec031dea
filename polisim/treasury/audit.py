"""
Treasury Audit Tool — Independent balance chain verification.

Reads a simulation snapshot (as written by `python -m polisim.orchestrator
--snapshot PATH`) and re-verifies every treasury ledger in it without
trusting any derived value: each entry's ending balance is recomputed from
the opening balance and the cash changes before it.

Usage:
    python -m polisim.treasury.audit snapshot.json
    python -m polisim.treasury.audit snapshot.json --verbose
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from decimal import Decimal
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from polisim.domain.schema import TreasuryEntry
from polisim.economy.formatting import format_gdp
from polisim.treasury.ledger import verify_entries

console = Console()


def audit_ledger(name: str, data: dict[str, Any], verbose: bool = False) -> bool:
    """Verify one serialized ledger. Returns True if its chain is intact."""
    entries = [TreasuryEntry.model_validate(e) for e in data.get("entries", [])]
    opening = Decimal(str(data.get("opening_balance", "0")))

    console.print(f"\n  [bold]{name}[/bold] treasury")
    console.print(f"    Opening balance: {format_gdp(float(opening))}")
    console.print(f"    Entries in ledger: [bold]{len(entries)}[/bold]")
    console.print("    Verifying balance chain...", end=" ")

    start_time = time.time()
    is_valid, entries_verified, message = verify_entries(opening, entries)
    elapsed = time.time() - start_time

    if is_valid:
        console.print("[bold green]✓ VALID[/bold green]")
        console.print(f"    Entries verified: [bold]{entries_verified}[/bold]")
        console.print(f"    Verification time: {elapsed:.3f}s")
    else:
        console.print("[bold red]✗ INVALID[/bold red]")
        console.print(f"    Failure at entry: {entries_verified}")
        console.print(f"    Reason: {message}")

    if verbose and entries:
        table = Table(show_lines=True)
        table.add_column("#", style="cyan", width=5)
        table.add_column("Date", width=12)
        table.add_column("FY", width=6)
        table.add_column("Kind", style="green", width=9)
        table.add_column("Description", style="yellow", width=32)
        table.add_column("Change", justify="right", width=14)
        table.add_column("Balance", justify="right", width=14)

        for i, entry in enumerate(entries):
            table.add_row(
                str(i),
                entry.posted_on.isoformat(),
                str(entry.fiscal_year),
                entry.kind.value,
                entry.description,
                format_gdp(float(entry.cash_change)),
                format_gdp(float(entry.ending_balance)),
            )
        console.print(table)

    return is_valid


def run_audit(snapshot_path: Path, verbose: bool = False) -> bool:
    """
    Audit every treasury in a snapshot file.

    Returns:
        True if all chains are valid, False otherwise.
    """
    console.print("\n[bold blue]═══ Treasury Integrity Audit ═══[/bold blue]")
    console.print(f"[dim]Snapshot: {snapshot_path}[/dim]")

    snapshot = json.loads(snapshot_path.read_text(encoding="utf-8"))
    treasuries: dict[str, Any] = snapshot.get("treasuries", {})

    if not treasuries:
        console.print("[yellow]⚠ Snapshot holds no treasuries — nothing to verify[/yellow]")
        return True

    results = [audit_ledger(name, data, verbose) for name, data in treasuries.items()]

    console.print("\n[bold blue]═══ Audit Complete ═══[/bold blue]\n")
    return all(results)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="polisim treasury chain auditor")
    parser.add_argument("snapshot", type=Path, help="Snapshot JSON written by the simulator")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed entry listing",
    )
    args = parser.parse_args(argv)

    is_valid = run_audit(args.snapshot, verbose=args.verbose)
    sys.exit(0 if is_valid else 1)


if __name__ == "__main__":
    main()
