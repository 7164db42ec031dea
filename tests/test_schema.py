"""
Tests for the domain schema.

Validates:
- Character delta application and clamping
- Derived fields (age, jurisdiction, legislative body, passage percentage)
- Classification bands
- Snapshot/restore through model_dump / model_validate
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from polisim.domain.catalog import POSITIONS, get_position
from polisim.domain.schema import (
    Character,
    CharacterDelta,
    DebtClassification,
    EconomicIndicator,
    Jurisdiction,
    Law,
    LawCategory,
    LegislativeBody,
    ScoreLabel,
)


def _make_character(**overrides) -> Character:
    values = {
        "name": "Jordan Reyes",
        "birth_date": date(1990, 6, 15),
        "current_date": date(2024, 6, 14),
    }
    values.update(overrides)
    return Character(**values)


class TestCharacter:
    """Test character state and delta application."""

    def test_age_before_birthday(self):
        character = _make_character()
        assert character.age == 33

    def test_age_on_birthday(self):
        character = _make_character(current_date=date(2024, 6, 15))
        assert character.age == 34

    def test_apply_delta_returns_new_character(self):
        character = _make_character(approval_rating=50.0, reputation=40)
        updated = character.apply_delta(CharacterDelta(approval_change=5.0, reputation_change=-10))
        assert updated.approval_rating == 55.0
        assert updated.reputation == 30
        assert character.approval_rating == 50.0, "Original character must not change"

    def test_apply_delta_clamps_stats(self):
        character = _make_character(approval_rating=98.0, reputation=3, stress=95)
        updated = character.apply_delta(
            CharacterDelta(approval_change=10, reputation_change=-10, stress_change=20)
        )
        assert updated.approval_rating == 100.0
        assert updated.reputation == 0
        assert updated.stress == 100

    def test_apply_delta_funds_and_position(self):
        character = _make_character(campaign_funds=Decimal("1000"))
        mayor = get_position("mayor")
        updated = character.apply_delta(
            CharacterDelta(funds_change=Decimal("-250.50"), new_position=mayor)
        )
        assert updated.campaign_funds == Decimal("749.50")
        assert updated.current_position == mayor
        assert updated.holds_office
        assert updated.position_level == 3

    def test_advance_days(self):
        character = _make_character()
        assert character.advance_days(2).current_date == date(2024, 6, 16)

    def test_combine_deltas(self):
        first = CharacterDelta(approval_change=2, stress_change=3)
        second = CharacterDelta(approval_change=-1, funds_change=Decimal("10"))
        combined = first.combine(second)
        assert combined.approval_change == 1
        assert combined.stress_change == 3
        assert combined.funds_change == Decimal("10")
        assert not combined.is_empty
        assert CharacterDelta().is_empty

    def test_round_trip(self):
        character = _make_character(current_position=get_position("governor"))
        restored = Character.model_validate(character.model_dump(mode="json"))
        assert restored == character


class TestPosition:
    """Test the career ladder's derived fields."""

    def test_ladder_has_eight_rungs(self):
        assert sorted(p.level for p in POSITIONS.values()) == list(range(1, 9))

    @pytest.mark.parametrize(
        "key,jurisdiction,body",
        [
            ("city_council_member", Jurisdiction.LOCAL, LegislativeBody.CITY_COUNCIL),
            ("mayor", Jurisdiction.LOCAL, LegislativeBody.CITY_COUNCIL),
            ("governor", Jurisdiction.STATE, LegislativeBody.STATE_LEGISLATURE),
            ("us_senator", Jurisdiction.FEDERAL, LegislativeBody.SENATE),
            ("president", Jurisdiction.FEDERAL, LegislativeBody.CONGRESS),
        ],
    )
    def test_jurisdiction_and_body(self, key, jurisdiction, body):
        position = get_position(key)
        assert position.jurisdiction == jurisdiction
        assert position.legislative_body == body

    def test_unknown_position(self):
        with pytest.raises(KeyError):
            get_position("emperor")


class TestClassifications:
    """Test fixed classification bands."""

    @pytest.mark.parametrize(
        "score,label",
        [
            (95, ScoreLabel.EXCELLENT),
            (80, ScoreLabel.EXCELLENT),
            (79.9, ScoreLabel.GOOD),
            (60, ScoreLabel.GOOD),
            (40, ScoreLabel.FAIR),
            (20, ScoreLabel.POOR),
            (19.9, ScoreLabel.CRITICAL),
        ],
    )
    def test_score_labels(self, score, label):
        assert ScoreLabel.from_score(score) == label

    def test_debt_bands(self):
        assert DebtClassification.from_ratio(59.9) == DebtClassification.SUSTAINABLE
        assert DebtClassification.from_ratio(60) == DebtClassification.ELEVATED
        assert DebtClassification.from_ratio(90) == DebtClassification.CRITICAL


class TestEconomicIndicator:
    """Test the indicator time series."""

    def test_current_is_last_point(self):
        indicator = EconomicIndicator.start("GDP", 100.0, date(2024, 1, 1), floor=0.0)
        assert indicator.current == 100.0
        assert indicator.growth_rate() == 0.0

    def test_clamp(self):
        indicator = EconomicIndicator.start("Rate", 5.0, date(2024, 1, 1), floor=0.0, ceiling=10.0)
        assert indicator.clamp(-1) == 0.0
        assert indicator.clamp(11) == 10.0
        assert indicator.clamp(float("inf")) == float("inf"), "Non-finite values pass through"


class TestLaw:
    """Test law derived fields."""

    def test_passage_percentage(self):
        law = Law(
            title="Test Act",
            category=LawCategory.TAX,
            sponsor="Jordan Reyes",
            legislative_body=LegislativeBody.SENATE,
            date_created=date(2024, 1, 1),
        )
        assert law.passage_percentage == 0.0
        law.votes_for = 60
        law.votes_against = 40
        assert law.passage_percentage == 60.0
