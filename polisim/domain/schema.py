"""
Domain Schema — Pydantic models for every entity in the simulation core.

These models are the canonical data structures for the character, the
economy, the treasury, the legislature and the election cycle. Every model
is plain data: `model_dump(mode="json")` produces a snapshot of the full
entity, and `model_validate` restores it. Derived values are exposed as
computed fields so a snapshot never carries state that could drift from its
source of truth.

Ownership:
    Character          — external; subsystems read it and return a CharacterDelta
    EconomicIndicator  — EconomicModel
    TreasuryEntry      — TreasuryLedger
    Law / Policy       — LegislativePipeline
    Campaign / Election — ElectionCycle
    GovernmentStats    — GovernmentScoreAggregator
"""

from __future__ import annotations

import enum
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ════════════════════════════════════════════════════════════════
# Enumerations
# ════════════════════════════════════════════════════════════════


class Jurisdiction(str, enum.Enum):
    """Level of government a position (and its treasury) belongs to."""

    LOCAL = "local"
    STATE = "state"
    FEDERAL = "federal"


class LegislativeBody(str, enum.Enum):
    """Chamber that votes on a law."""

    CITY_COUNCIL = "city_council"
    STATE_LEGISLATURE = "state_legislature"
    CONGRESS = "congress"
    SENATE = "senate"


class LawCategory(str, enum.Enum):
    """Subject area of a law; selects the drafting template."""

    TAX = "taxation"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    ENVIRONMENT = "environment"
    JUSTICE = "criminal_justice"
    LABOR = "labor"
    INFRASTRUCTURE = "infrastructure"
    DEFENSE = "defense"
    WELFARE = "social_welfare"
    CIVIL = "civil_rights"


class LawStatus(str, enum.Enum):
    """
    Lifecycle of a law.

    DRAFT → PROPOSED → IN_COMMITTEE → UNDER_DEBATE → VOTING → PASSED | REJECTED
    Any non-terminal state may also move to WITHDRAWN.
    """

    DRAFT = "draft"
    PROPOSED = "proposed"
    IN_COMMITTEE = "in_committee"
    UNDER_DEBATE = "under_debate"
    VOTING = "voting"
    PASSED = "passed"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self in (LawStatus.PASSED, LawStatus.REJECTED, LawStatus.WITHDRAWN)

    @property
    def is_in_pipeline(self) -> bool:
        """Proposed but not yet resolved."""
        return self in (
            LawStatus.PROPOSED,
            LawStatus.IN_COMMITTEE,
            LawStatus.UNDER_DEBATE,
            LawStatus.VOTING,
        )


class PolicyCategory(str, enum.Enum):
    """Subject area of an executive policy."""

    ECONOMY = "economy"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    ENVIRONMENT = "environment"
    JUSTICE = "justice"
    INFRASTRUCTURE = "infrastructure"
    DEFENSE = "defense"
    SOCIAL_WELFARE = "social_welfare"
    IMMIGRATION = "immigration"
    TAXATION = "taxation"


class PolicyStatus(str, enum.Enum):
    """Policies skip the vote: AVAILABLE → PROPOSED → ENACTED → REPEALED."""

    AVAILABLE = "available"
    PROPOSED = "proposed"
    ENACTED = "enacted"
    REPEALED = "repealed"


class ActivityType(str, enum.Enum):
    """Campaign activities with their base cost and base poll impact."""

    RALLY = "rally"
    ADVERTISEMENT = "advertisement"
    DEBATE = "debate"
    PHONE_BANK = "phone_bank"
    DOOR_KNOCKING = "door_knocking"
    FUNDRAISER = "fundraiser"
    TOWN_HALL = "town_hall"
    SOCIAL_MEDIA = "social_media"
    INTERVIEW = "interview"
    ENDORSEMENT = "endorsement"

    @property
    def base_cost(self) -> Decimal:
        return _ACTIVITY_COSTS[self]

    @property
    def base_poll_impact(self) -> float:
        return _ACTIVITY_POLL_IMPACT[self]


_ACTIVITY_COSTS: dict[ActivityType, Decimal] = {
    ActivityType.RALLY: Decimal("5000"),
    ActivityType.ADVERTISEMENT: Decimal("10000"),
    ActivityType.DEBATE: Decimal("0"),
    ActivityType.PHONE_BANK: Decimal("500"),
    ActivityType.DOOR_KNOCKING: Decimal("200"),
    ActivityType.FUNDRAISER: Decimal("2000"),
    ActivityType.TOWN_HALL: Decimal("1000"),
    ActivityType.SOCIAL_MEDIA: Decimal("1500"),
    ActivityType.INTERVIEW: Decimal("0"),
    ActivityType.ENDORSEMENT: Decimal("0"),
}

_ACTIVITY_POLL_IMPACT: dict[ActivityType, float] = {
    ActivityType.RALLY: 2.5,
    ActivityType.ADVERTISEMENT: 3.0,
    ActivityType.DEBATE: 5.0,
    ActivityType.PHONE_BANK: 0.5,
    ActivityType.DOOR_KNOCKING: 0.8,
    ActivityType.FUNDRAISER: 0.3,
    ActivityType.TOWN_HALL: 1.5,
    ActivityType.SOCIAL_MEDIA: 1.2,
    ActivityType.INTERVIEW: 2.0,
    ActivityType.ENDORSEMENT: 4.0,
}


class Department(str, enum.Enum):
    """Government departments scored by the aggregator."""

    FINANCE = "finance"
    ECONOMY = "economy"
    LABOR = "labor"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    PUBLIC_SAFETY = "public_safety"
    INFRASTRUCTURE = "infrastructure"
    SOCIAL_WELFARE = "social_welfare"
    ENVIRONMENT = "environment"
    JUSTICE = "justice"


class ScoreLabel(str, enum.Enum):
    """Classification of a 0–100 performance score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, score: float) -> ScoreLabel:
        if score >= 80:
            return cls.EXCELLENT
        if score >= 60:
            return cls.GOOD
        if score >= 40:
            return cls.FAIR
        if score >= 20:
            return cls.POOR
        return cls.CRITICAL


class DebtClassification(str, enum.Enum):
    """Debt-to-GDP bands: <60 sustainable, 60–90 elevated, ≥90 critical."""

    SUSTAINABLE = "sustainable"
    ELEVATED = "elevated"
    CRITICAL = "critical"

    @classmethod
    def from_ratio(cls, ratio: float) -> DebtClassification:
        if ratio >= 90:
            return cls.CRITICAL
        if ratio >= 60:
            return cls.ELEVATED
        return cls.SUSTAINABLE


class TreasuryEntryKind(str, enum.Enum):
    """Origin of a treasury entry."""

    BUDGET = "budget"
    INTEREST = "interest"


# ════════════════════════════════════════════════════════════════
# Character State
# ════════════════════════════════════════════════════════════════


class Position(BaseModel):
    """An elected office the character can campaign for."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Stable identifier (e.g., 'mayor')")
    title: str
    level: int = Field(ge=1, description="Career ladder rung (1 = lowest)")
    term_length_years: int
    min_age: int
    min_approval: float | None = None
    min_reputation: int | None = None
    campaign_days: int = Field(default=90, description="Length of the campaign cycle")

    @computed_field
    @property
    def jurisdiction(self) -> Jurisdiction:
        if self.level <= 3:
            return Jurisdiction.LOCAL
        if self.level <= 5:
            return Jurisdiction.STATE
        return Jurisdiction.FEDERAL

    @computed_field
    @property
    def legislative_body(self) -> LegislativeBody:
        if self.jurisdiction == Jurisdiction.LOCAL:
            return LegislativeBody.CITY_COUNCIL
        if self.jurisdiction == Jurisdiction.STATE:
            return LegislativeBody.STATE_LEGISLATURE
        if self.key == "us_senator":
            return LegislativeBody.SENATE
        return LegislativeBody.CONGRESS


class CharacterDelta(BaseModel):
    """
    A proposed mutation of the character, returned by every subsystem.

    Subsystems never write to the Character; the driver applies deltas in
    the order the subsystems produced them.
    """

    approval_change: float = 0.0
    reputation_change: int = 0
    funds_change: Decimal = Decimal("0")
    stress_change: int = 0
    new_position: Position | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.approval_change == 0
            and self.reputation_change == 0
            and self.funds_change == 0
            and self.stress_change == 0
            and self.new_position is None
        )

    def combine(self, other: CharacterDelta) -> CharacterDelta:
        """Sum two deltas; a later position change wins."""
        return CharacterDelta(
            approval_change=self.approval_change + other.approval_change,
            reputation_change=self.reputation_change + other.reputation_change,
            funds_change=self.funds_change + other.funds_change,
            stress_change=self.stress_change + other.stress_change,
            new_position=other.new_position or self.new_position,
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class Character(BaseModel):
    """
    The player's politician.

    Attributes are 0–100. `campaign_funds` is the personal war chest used for
    campaigning and for enacting policies.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    birth_date: date
    current_date: date
    charisma: int = Field(default=50, ge=0, le=100)
    intelligence: int = Field(default=50, ge=0, le=100)
    reputation: int = Field(default=50, ge=0, le=100)
    approval_rating: float = Field(default=50.0, ge=0, le=100)
    campaign_funds: Decimal = Decimal("5000")
    stress: int = Field(default=10, ge=0, le=100)
    health: int = Field(default=100, ge=0, le=100)
    current_position: Position | None = None

    @computed_field
    @property
    def age(self) -> int:
        years = self.current_date.year - self.birth_date.year
        if (self.current_date.month, self.current_date.day) < (
            self.birth_date.month,
            self.birth_date.day,
        ):
            years -= 1
        return years

    @property
    def holds_office(self) -> bool:
        return self.current_position is not None

    @property
    def position_level(self) -> int:
        return self.current_position.level if self.current_position else 0

    def apply_delta(self, delta: CharacterDelta) -> Character:
        """Return a copy with the delta applied and every stat clamped."""
        update: dict[str, Any] = {
            "approval_rating": _clamp(self.approval_rating + delta.approval_change, 0.0, 100.0),
            "reputation": int(_clamp(self.reputation + delta.reputation_change, 0, 100)),
            "stress": int(_clamp(self.stress + delta.stress_change, 0, 100)),
            "campaign_funds": self.campaign_funds + delta.funds_change,
        }
        if delta.new_position is not None:
            update["current_position"] = delta.new_position
        return self.model_copy(update=update)

    def advance_days(self, days: int) -> Character:
        return self.model_copy(update={"current_date": self.current_date + timedelta(days=days)})


# ════════════════════════════════════════════════════════════════
# Economy
# ════════════════════════════════════════════════════════════════


class EconomicDataPoint(BaseModel):
    """A single observation of an indicator."""

    model_config = ConfigDict(frozen=True)

    as_of: date
    value: float


class EconomicIndicator(BaseModel):
    """
    Append-only time series for one indicator.

    `current` always equals the value of the last history point; the series is
    never empty once created.
    """

    name: str
    floor: float
    ceiling: float | None = None
    history: list[EconomicDataPoint] = Field(min_length=1)

    @computed_field
    @property
    def current(self) -> float:
        return self.history[-1].value

    @property
    def last_date(self) -> date:
        return self.history[-1].as_of

    def growth_rate(self) -> float:
        """Relative change between the last two points (0 if only one)."""
        if len(self.history) < 2:
            return 0.0
        previous = self.history[-2].value
        if previous == 0:
            return 0.0
        return (self.history[-1].value - previous) / previous

    def clamp(self, value: float) -> float:
        """Bound a value to [floor, ceiling]; non-finite values pass through."""
        if not math.isfinite(value):
            return value
        value = max(self.floor, value)
        if self.ceiling is not None:
            value = min(self.ceiling, value)
        return value

    @classmethod
    def start(
        cls, name: str, value: float, as_of: date, floor: float, ceiling: float | None = None
    ) -> EconomicIndicator:
        return cls(
            name=name,
            floor=floor,
            ceiling=ceiling,
            history=[EconomicDataPoint(as_of=as_of, value=value)],
        )


class WorldCountry(BaseModel):
    """Comparative GDP and population for the world rankings."""

    name: str
    code: str
    gdp: float
    population: int

    @computed_field
    @property
    def gdp_per_capita(self) -> float:
        return self.gdp / self.population if self.population else 0.0


class EconomicSnapshot(BaseModel):
    """Read-only view of the economy after a tick."""

    model_config = ConfigDict(frozen=True)

    as_of: date
    federal_gdp: float
    federal_unemployment: float
    inflation: float
    interest_rate: float
    state_gdp: float
    state_unemployment: float
    local_gdp: float
    local_unemployment: float
    gdp_growth: float = Field(description="Annualized federal GDP growth, percent")
    world_rankings: list[str] = Field(default_factory=list, description="Country codes by GDP")

    def gdp_for(self, jurisdiction: Jurisdiction) -> float:
        return {
            Jurisdiction.LOCAL: self.local_gdp,
            Jurisdiction.STATE: self.state_gdp,
            Jurisdiction.FEDERAL: self.federal_gdp,
        }[jurisdiction]

    def unemployment_for(self, jurisdiction: Jurisdiction) -> float:
        return {
            Jurisdiction.LOCAL: self.local_unemployment,
            Jurisdiction.STATE: self.state_unemployment,
            Jurisdiction.FEDERAL: self.federal_unemployment,
        }[jurisdiction]


# ════════════════════════════════════════════════════════════════
# Treasury
# ════════════════════════════════════════════════════════════════


class TreasuryEntry(BaseModel):
    """
    One immutable line of the treasury ledger.

    Chain invariant: ending_balance == previous ending_balance + cash_change.
    A negative balance is debt.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    kind: TreasuryEntryKind = TreasuryEntryKind.BUDGET
    posted_on: date
    fiscal_year: int
    description: str
    cash_change: Decimal
    ending_balance: Decimal


class TreasurySummary(BaseModel):
    """Read-only treasury summary for display and scoring."""

    model_config = ConfigDict(frozen=True)

    jurisdiction: Jurisdiction
    current_balance: Decimal
    is_in_debt: bool
    total_debt: Decimal
    total_surplus: Decimal
    total_interest_paid: Decimal
    fiscal_balance: Decimal = Field(description="Net budget result of the latest fiscal year")
    interest_rate: float
    annual_interest_payment: Decimal
    debt_to_gdp_ratio: float | None = None
    debt_classification: DebtClassification | None = None
    recent_entries: list[TreasuryEntry] = Field(default_factory=list)


# ════════════════════════════════════════════════════════════════
# Legislation
# ════════════════════════════════════════════════════════════════


class StatChange(BaseModel):
    """A shift in one government performance area (e.g., 'health' +15)."""

    model_config = ConfigDict(frozen=True)

    stat: str
    change: float


class LawEffects(BaseModel):
    """Effects applied exactly once when a law passes."""

    model_config = ConfigDict(frozen=True)

    approval_change: float = 0.0
    economic_impact: float = Field(default=0.0, description="GDP shift, percent")
    budget_impact: Decimal = Field(
        default=Decimal("0"), description="Positive = cost, negative = revenue"
    )
    stat_changes: list[StatChange] = Field(default_factory=list)


class Law(BaseModel):
    """A bill moving through the legislative pipeline."""

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    category: LawCategory
    status: LawStatus = LawStatus.DRAFT
    sponsor: str
    legislative_body: LegislativeBody
    session_number: int | None = None
    date_created: date
    date_proposed: date | None = None
    date_resolved: date | None = None
    vote_date: date | None = Field(default=None, description="Scheduled automatic vote")
    votes_for: int = 0
    votes_against: int = 0
    public_support: float = Field(default=50.0, ge=0, le=100)
    effects: LawEffects = Field(default_factory=LawEffects)
    implementation_cost: Decimal | None = None

    @computed_field
    @property
    def passage_percentage(self) -> float:
        total = self.votes_for + self.votes_against
        if total == 0:
            return 0.0
        return self.votes_for / total * 100.0


class LegislativeSession(BaseModel):
    """A one-year sitting of the legislature."""

    number: int
    start_date: date
    end_date: date


class SessionSummary(BaseModel):
    """Aggregate counts, always derived from the law collection."""

    model_config = ConfigDict(frozen=True)

    session_number: int | None
    proposed: int = 0
    active: int = 0
    passed: int = 0
    rejected: int = 0
    withdrawn: int = 0


class PolicyEffects(BaseModel):
    """Effects of enacting (or repealing) a policy."""

    model_config = ConfigDict(frozen=True)

    approval_change: float = 0.0
    economic_impact: float = 0.0
    reputation_change: int = 0
    stress_change: int = 0
    funds_change: Decimal = Decimal("0")
    stat_changes: list[StatChange] = Field(default_factory=list)


class PolicyRequirements(BaseModel):
    """Gates checked before a policy may be enacted."""

    model_config = ConfigDict(frozen=True)

    min_position_level: int = 1
    min_approval: float = 0.0
    min_reputation: int = 0
    cost_to_enact: Decimal = Decimal("0")
    prerequisites: list[str] = Field(
        default_factory=list, description="Keys of policies that must already be enacted"
    )


class Policy(BaseModel):
    """An executive policy: enacted by meeting requirements, not by vote."""

    id: UUID = Field(default_factory=uuid4)
    key: str
    title: str
    description: str = ""
    category: PolicyCategory
    status: PolicyStatus = PolicyStatus.AVAILABLE
    support_percentage: float = Field(default=50.0, ge=0, le=100)
    effects: PolicyEffects = Field(default_factory=PolicyEffects)
    repeal_effects: PolicyEffects = Field(default_factory=PolicyEffects)
    requirements: PolicyRequirements = Field(default_factory=PolicyRequirements)
    date_proposed: date | None = None
    date_enacted: date | None = None
    date_repealed: date | None = None


# ════════════════════════════════════════════════════════════════
# Campaigns and Elections
# ════════════════════════════════════════════════════════════════


class CampaignActivity(BaseModel):
    """One logged campaign event."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    activity_type: ActivityType
    performed_on: date
    cost: Decimal
    poll_impact: float
    description: str


class Campaign(BaseModel):
    """The character's single active run for office."""

    id: UUID = Field(default_factory=uuid4)
    target_position: Position
    start_date: date
    poll_numbers: float = Field(ge=0, le=100)
    days_remaining: int
    funds_spent: Decimal = Decimal("0")
    activities: list[CampaignActivity] = Field(default_factory=list)


class Candidate(BaseModel):
    """A name on the ballot."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    party: str
    is_player: bool = False
    charisma: int = 50
    funds: Decimal = Decimal("0")


class CandidateShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate_id: UUID
    name: str
    share: float


class ElectionResults(BaseModel):
    """Final, immutable outcome of an election."""

    model_config = ConfigDict(frozen=True)

    winner_id: UUID
    winner_name: str
    shares: list[CandidateShare]
    total_votes: int
    voter_turnout: float
    margin: float = Field(description="Winning margin in percentage points")

    def share_of(self, candidate_id: UUID) -> float:
        for entry in self.shares:
            if entry.candidate_id == candidate_id:
                return entry.share
        return 0.0


class Election(BaseModel):
    """A scheduled election. Candidates are fixed once scheduled."""

    id: UUID = Field(default_factory=uuid4)
    position: Position
    election_date: date
    days_until_election: int
    candidates: tuple[Candidate, ...]
    results: ElectionResults | None = None

    @property
    def player_candidate(self) -> Candidate | None:
        return next((c for c in self.candidates if c.is_player), None)

    @property
    def is_resolved(self) -> bool:
        return self.results is not None


# ════════════════════════════════════════════════════════════════
# Government Performance
# ════════════════════════════════════════════════════════════════


class DepartmentScore(BaseModel):
    """Score of one department with the sub-metrics that produced it."""

    model_config = ConfigDict(frozen=True)

    department: Department
    score: float = Field(ge=0, le=100)
    components: dict[str, float] = Field(default_factory=dict)

    @computed_field
    @property
    def label(self) -> ScoreLabel:
        return ScoreLabel.from_score(self.score)


class GovernmentStats(BaseModel):
    """Per-department scores; the overall score is their simple mean."""

    model_config = ConfigDict(frozen=True)

    departments: list[DepartmentScore]

    @computed_field
    @property
    def overall_score(self) -> float:
        if not self.departments:
            return 0.0
        return sum(d.score for d in self.departments) / len(self.departments)

    @computed_field
    @property
    def label(self) -> ScoreLabel:
        return ScoreLabel.from_score(self.overall_score)

    def score_for(self, department: Department) -> float:
        for entry in self.departments:
            if entry.department == department:
                return entry.score
        raise KeyError(department)


class StatsSummary(BaseModel):
    """Display summary of the latest government stats."""

    model_config = ConfigDict(frozen=True)

    overall_score: float
    label: ScoreLabel
    lowest: DepartmentScore
    highest: DepartmentScore
    departments: list[DepartmentScore]
