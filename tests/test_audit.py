"""
Tests for the treasury audit tool.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import pytest

from polisim.domain.schema import Jurisdiction
from polisim.treasury.audit import main, run_audit
from polisim.treasury.ledger import TreasuryLedger


def _write_snapshot(path, tamper: bool = False):
    ledger = TreasuryLedger.for_jurisdiction(Jurisdiction.LOCAL, date(2024, 1, 1))
    ledger.apply_budget(Decimal("-1000000"), "FY2024 budget", 2024, date(2024, 3, 1))
    ledger.apply_budget(Decimal("250000"), "Supplemental revenue", 2024, date(2024, 6, 1))
    ledger.apply_periodic_effects(date(2025, 1, 1))

    data = ledger.to_dict()
    if tamper:
        data["entries"][1]["ending_balance"] = "0.00"
    path.write_text(json.dumps({"treasuries": {"local": data}}), encoding="utf-8")
    return path


class TestAudit:
    """Test snapshot verification."""

    def test_valid_snapshot(self, tmp_path):
        snapshot = _write_snapshot(tmp_path / "run.json")
        assert run_audit(snapshot, verbose=True)

    def test_tampered_snapshot(self, tmp_path):
        snapshot = _write_snapshot(tmp_path / "run.json", tamper=True)
        assert not run_audit(snapshot)

    def test_empty_snapshot_is_valid(self, tmp_path):
        snapshot = tmp_path / "empty.json"
        snapshot.write_text(json.dumps({"treasuries": {}}), encoding="utf-8")
        assert run_audit(snapshot)

    def test_main_exit_codes(self, tmp_path):
        good = _write_snapshot(tmp_path / "good.json")
        bad = _write_snapshot(tmp_path / "bad.json", tamper=True)

        with pytest.raises(SystemExit) as exc_info:
            main([str(good)])
        assert exc_info.value.code == 0

        with pytest.raises(SystemExit) as exc_info:
            main([str(bad), "--verbose"])
        assert exc_info.value.code == 1
