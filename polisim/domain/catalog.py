"""
Reference Catalog — The fixed game content the engine draws from.

Contains the career ladder of elected positions, the law templates used when
drafting a bill, the executive policy catalog, the world comparison
countries, and the mapping from legislative stat names onto government
departments.

All values here are content, not state. Subsystems copy what they need.
"""

from __future__ import annotations

from decimal import Decimal

from polisim.domain.schema import (
    Department,
    LawCategory,
    LawEffects,
    Policy,
    PolicyCategory,
    PolicyEffects,
    PolicyRequirements,
    Position,
    StatChange,
    WorldCountry,
)


# ════════════════════════════════════════════════════════════════
# Career Ladder
# ════════════════════════════════════════════════════════════════

POSITIONS: dict[str, Position] = {
    p.key: p
    for p in [
        Position(
            key="community_organizer",
            title="Community Organizer",
            level=1,
            term_length_years=2,
            min_age=18,
            campaign_days=60,
        ),
        Position(
            key="city_council_member",
            title="City Council Member",
            level=2,
            term_length_years=2,
            min_age=21,
            min_approval=40,
            min_reputation=30,
            campaign_days=60,
        ),
        Position(
            key="mayor",
            title="Mayor",
            level=3,
            term_length_years=4,
            min_age=25,
            min_approval=50,
            min_reputation=45,
            campaign_days=90,
        ),
        Position(
            key="state_representative",
            title="State Representative",
            level=4,
            term_length_years=2,
            min_age=25,
            min_approval=55,
            min_reputation=50,
            campaign_days=90,
        ),
        Position(
            key="governor",
            title="Governor",
            level=5,
            term_length_years=4,
            min_age=30,
            min_approval=60,
            min_reputation=60,
            campaign_days=90,
        ),
        Position(
            key="us_senator",
            title="U.S. Senator",
            level=6,
            term_length_years=6,
            min_age=30,
            min_approval=65,
            min_reputation=70,
            campaign_days=120,
        ),
        Position(
            key="vice_president",
            title="Vice President",
            level=7,
            term_length_years=4,
            min_age=35,
            min_approval=70,
            min_reputation=80,
            campaign_days=120,
        ),
        Position(
            key="president",
            title="President",
            level=8,
            term_length_years=4,
            min_age=35,
            min_approval=75,
            min_reputation=85,
            campaign_days=120,
        ),
    ]
}


def get_position(key: str) -> Position:
    """Look up a position by key. Raises KeyError for unknown keys."""
    return POSITIONS[key]


# ════════════════════════════════════════════════════════════════
# Law Templates
# ════════════════════════════════════════════════════════════════

# category → (title, description, public support, effects, implementation cost)
LAW_TEMPLATES: dict[LawCategory, tuple[str, str, float, LawEffects, Decimal | None]] = {
    LawCategory.TAX: (
        "Tax Reform Act",
        "Comprehensive reform of the tax code to adjust rates and close loopholes.",
        45.0,
        LawEffects(approval_change=-5, economic_impact=2.0, budget_impact=Decimal("50000000")),
        Decimal("10000000"),
    ),
    LawCategory.HEALTHCARE: (
        "Universal Healthcare Act",
        "Establish a public healthcare option for all residents.",
        60.0,
        LawEffects(
            approval_change=10,
            economic_impact=-1.0,
            budget_impact=Decimal("200000000"),
            stat_changes=[StatChange(stat="health", change=15)],
        ),
        Decimal("500000000"),
    ),
    LawCategory.EDUCATION: (
        "Education Investment Act",
        "Increase funding for schools and teacher salaries.",
        70.0,
        LawEffects(
            approval_change=8,
            economic_impact=1.5,
            budget_impact=Decimal("100000000"),
            stat_changes=[StatChange(stat="education", change=12)],
        ),
        Decimal("50000000"),
    ),
    LawCategory.ENVIRONMENT: (
        "Clean Energy Transition Act",
        "Mandate renewable energy targets and carbon emission reductions.",
        55.0,
        LawEffects(
            approval_change=5,
            economic_impact=-0.5,
            budget_impact=Decimal("150000000"),
            stat_changes=[StatChange(stat="environment", change=20)],
        ),
        Decimal("100000000"),
    ),
    LawCategory.JUSTICE: (
        "Criminal Justice Reform Act",
        "Reform sentencing guidelines and improve rehabilitation programs.",
        50.0,
        LawEffects(
            approval_change=3,
            economic_impact=0.5,
            budget_impact=Decimal("30000000"),
            stat_changes=[StatChange(stat="crime", change=-8)],
        ),
        Decimal("20000000"),
    ),
    LawCategory.LABOR: (
        "Minimum Wage Increase Act",
        "Raise the minimum wage to a living wage standard.",
        65.0,
        LawEffects(
            approval_change=8,
            economic_impact=-1.0,
            stat_changes=[StatChange(stat="poverty", change=-10)],
        ),
        None,
    ),
    LawCategory.INFRASTRUCTURE: (
        "Infrastructure Modernization Act",
        "Fund major improvements to roads, bridges, and public transportation.",
        72.0,
        LawEffects(
            approval_change=12,
            economic_impact=3.0,
            budget_impact=Decimal("500000000"),
            stat_changes=[StatChange(stat="infrastructure", change=18)],
        ),
        Decimal("200000000"),
    ),
    LawCategory.DEFENSE: (
        "Defense Spending Authorization",
        "Authorize increased defense spending for national security.",
        48.0,
        LawEffects(
            approval_change=-2,
            economic_impact=1.0,
            budget_impact=Decimal("300000000"),
            stat_changes=[StatChange(stat="security", change=10)],
        ),
        Decimal("100000000"),
    ),
    LawCategory.WELFARE: (
        "Social Safety Net Expansion Act",
        "Expand unemployment benefits, food assistance, and housing support.",
        58.0,
        LawEffects(
            approval_change=7,
            economic_impact=-0.5,
            budget_impact=Decimal("120000000"),
            stat_changes=[StatChange(stat="poverty", change=-15)],
        ),
        Decimal("30000000"),
    ),
    LawCategory.CIVIL: (
        "Equal Rights Protection Act",
        "Strengthen protections against discrimination in employment and housing.",
        62.0,
        LawEffects(approval_change=6, economic_impact=0.5, budget_impact=Decimal("10000000")),
        Decimal("5000000"),
    ),
}


# ════════════════════════════════════════════════════════════════
# Stat → Department Mapping
# ════════════════════════════════════════════════════════════════

# stat name → (department, sign). Crime and poverty improve when they fall.
STAT_DEPARTMENTS: dict[str, tuple[Department, int]] = {
    "health": (Department.HEALTHCARE, 1),
    "education": (Department.EDUCATION, 1),
    "environment": (Department.ENVIRONMENT, 1),
    "infrastructure": (Department.INFRASTRUCTURE, 1),
    "security": (Department.PUBLIC_SAFETY, 1),
    "crime": (Department.JUSTICE, -1),
    "poverty": (Department.SOCIAL_WELFARE, -1),
}


# ════════════════════════════════════════════════════════════════
# Policy Catalog
# ════════════════════════════════════════════════════════════════


def _policy(
    key: str,
    title: str,
    description: str,
    category: PolicyCategory,
    effects: tuple[float, float, int, int, int],
    requirements: tuple[int, float, int, int],
    support: float,
    stat: StatChange | None = None,
    prerequisites: list[str] | None = None,
) -> Policy:
    approval, economic, reputation, stress, funds = effects
    min_level, min_approval, min_reputation, cost = requirements
    stat_changes = [stat] if stat else []
    return Policy(
        key=key,
        title=title,
        description=description,
        category=category,
        support_percentage=support,
        effects=PolicyEffects(
            approval_change=approval,
            economic_impact=economic,
            reputation_change=reputation,
            stress_change=stress,
            funds_change=Decimal(funds),
            stat_changes=stat_changes,
        ),
        # Repeal reverses half of the public-facing effects and always costs stress.
        repeal_effects=PolicyEffects(
            approval_change=-approval / 2,
            economic_impact=-economic / 2,
            reputation_change=-(reputation // 2),
            stress_change=8,
            stat_changes=[StatChange(stat=s.stat, change=-s.change) for s in stat_changes],
        ),
        requirements=PolicyRequirements(
            min_position_level=min_level,
            min_approval=min_approval,
            min_reputation=min_reputation,
            cost_to_enact=Decimal(cost),
            prerequisites=prerequisites or [],
        ),
    )


def default_policies() -> list[Policy]:
    """Fresh copies of the policy catalog, all AVAILABLE."""
    return [
        _policy(
            "small_business_tax_relief",
            "Small Business Tax Relief",
            "Reduce taxes for small businesses to stimulate local economic growth.",
            PolicyCategory.ECONOMY,
            (8, 5, 3, 5, -50000),
            (2, 30, 20, 50000),
            65,
        ),
        _policy(
            "raise_minimum_wage",
            "Raise Minimum Wage",
            "Increase the minimum wage to provide better living standards for workers.",
            PolicyCategory.ECONOMY,
            (12, -3, 5, 10, 0),
            (3, 40, 30, 0),
            58,
            stat=StatChange(stat="poverty", change=-4),
        ),
        _policy(
            "universal_healthcare",
            "Universal Healthcare",
            "Implement a comprehensive universal healthcare system for all citizens.",
            PolicyCategory.HEALTHCARE,
            (15, -10, 8, 15, -500000),
            (5, 50, 50, 500000),
            52,
            stat=StatChange(stat="health", change=10),
            prerequisites=["mental_health_initiative"],
        ),
        _policy(
            "mental_health_initiative",
            "Mental Health Initiative",
            "Expand mental health services and reduce stigma through public programs.",
            PolicyCategory.HEALTHCARE,
            (10, -2, 6, 5, -100000),
            (2, 35, 25, 100000),
            72,
            stat=StatChange(stat="health", change=5),
        ),
        _policy(
            "free_community_college",
            "Free Community College",
            "Make community college tuition-free for all residents.",
            PolicyCategory.EDUCATION,
            (14, 8, 7, 8, -300000),
            (4, 45, 40, 300000),
            68,
            stat=StatChange(stat="education", change=8),
        ),
        _policy(
            "teacher_salary_increase",
            "Teacher Salary Increase",
            "Raise teacher salaries to attract and retain quality educators.",
            PolicyCategory.EDUCATION,
            (11, -4, 5, 6, -150000),
            (2, 35, 25, 150000),
            75,
            stat=StatChange(stat="education", change=5),
        ),
        _policy(
            "green_energy_initiative",
            "Green Energy Initiative",
            "Invest in renewable energy infrastructure and incentives.",
            PolicyCategory.ENVIRONMENT,
            (9, 6, 8, 7, -400000),
            (3, 40, 35, 400000),
            61,
            stat=StatChange(stat="environment", change=8),
        ),
        _policy(
            "carbon_tax",
            "Carbon Tax",
            "Implement a carbon tax on high-emission industries.",
            PolicyCategory.ENVIRONMENT,
            (-5, 4, 4, 12, 200000),
            (4, 45, 40, 0),
            42,
            stat=StatChange(stat="environment", change=10),
        ),
        _policy(
            "public_transit_expansion",
            "Public Transit Expansion",
            "Expand and modernize public transportation systems.",
            PolicyCategory.INFRASTRUCTURE,
            (13, 7, 6, 9, -350000),
            (3, 40, 30, 350000),
            70,
            stat=StatChange(stat="infrastructure", change=8),
        ),
        _policy(
            "affordable_housing_program",
            "Affordable Housing Program",
            "Build and subsidize affordable housing for low-income families.",
            PolicyCategory.INFRASTRUCTURE,
            (16, 3, 7, 10, -450000),
            (4, 42, 35, 450000),
            64,
            stat=StatChange(stat="poverty", change=-6),
        ),
        _policy(
            "universal_basic_income_pilot",
            "Universal Basic Income Pilot",
            "Launch a pilot program providing basic income to low-income residents.",
            PolicyCategory.SOCIAL_WELFARE,
            (10, -8, 6, 14, -600000),
            (5, 48, 45, 600000),
            48,
            stat=StatChange(stat="poverty", change=-10),
            prerequisites=["child_care_subsidy"],
        ),
        _policy(
            "child_care_subsidy",
            "Child Care Subsidy",
            "Subsidize child care costs for working families.",
            PolicyCategory.SOCIAL_WELFARE,
            (14, 2, 5, 7, -200000),
            (2, 35, 25, 200000),
            73,
            stat=StatChange(stat="poverty", change=-5),
        ),
        _policy(
            "criminal_justice_reform",
            "Criminal Justice Reform",
            "Reform sentencing laws and reduce incarceration rates.",
            PolicyCategory.JUSTICE,
            (6, 5, 8, 11, -80000),
            (3, 42, 35, 80000),
            55,
            stat=StatChange(stat="crime", change=-5),
        ),
        _policy(
            "police_accountability_act",
            "Police Accountability Act",
            "Implement stronger oversight and accountability for law enforcement.",
            PolicyCategory.JUSTICE,
            (8, 0, 5, 13, -50000),
            (3, 40, 30, 50000),
            59,
            stat=StatChange(stat="security", change=4),
        ),
        _policy(
            "progressive_tax_reform",
            "Progressive Tax Reform",
            "Increase taxes on high earners and reduce them for middle class.",
            PolicyCategory.TAXATION,
            (7, 3, 4, 12, 300000),
            (4, 43, 38, 0),
            54,
        ),
    ]


# ════════════════════════════════════════════════════════════════
# World Comparison
# ════════════════════════════════════════════════════════════════


def default_world() -> list[WorldCountry]:
    return [
        WorldCountry(name="United States", code="USA", gdp=25e12, population=330_000_000),
        WorldCountry(name="China", code="CHN", gdp=18e12, population=1_400_000_000),
        WorldCountry(name="Japan", code="JPN", gdp=5e12, population=125_000_000),
        WorldCountry(name="Germany", code="DEU", gdp=4.2e12, population=83_000_000),
        WorldCountry(name="United Kingdom", code="GBR", gdp=3.1e12, population=67_000_000),
        WorldCountry(name="India", code="IND", gdp=3.4e12, population=1_400_000_000),
        WorldCountry(name="France", code="FRA", gdp=2.9e12, population=67_000_000),
        WorldCountry(name="Italy", code="ITA", gdp=2e12, population=60_000_000),
        WorldCountry(name="Canada", code="CAN", gdp=2.1e12, population=38_000_000),
        WorldCountry(name="South Korea", code="KOR", gdp=1.8e12, population=51_000_000),
    ]


# ════════════════════════════════════════════════════════════════
# Election Content
# ════════════════════════════════════════════════════════════════

OPPONENT_FIRST_NAMES = [
    "John", "Sarah", "Michael", "Emily", "David",
    "Jennifer", "Robert", "Lisa", "William", "Mary",
]
OPPONENT_LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones",
    "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
]
OPPONENT_PARTIES = ["Democrat", "Republican"]
