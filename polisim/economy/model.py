"""
Economic Model — Coupled macroeconomic simulation at three levels of government.

Each tick advances every tracked indicator by a bounded random walk whose
drift follows a small textbook macro model:

- GDP grows at a randomized trend, slowed or boosted by the interest rate
  relative to a 5% neutral rate, plus any queued one-shot policy impact
- Okun's law: unemployment falls when growth runs above trend
- Phillips curve: inflation rises when unemployment is below NAIRU, with
  70% persistence and a 30% anchor on the 2% target
- Taylor rule: the interest rate moves 15% of the way toward its target
  each week

State indicators track federal ones with regional variation; local indicators
track the state with more volatility. World countries grow by development
tier and are re-ranked by GDP.

Coefficients are expressed per week of simulated time and scaled by the
number of days in the tick.

History is append-only. A tick computes every new value before writing any of
them, so a rejected tick leaves the model exactly as it was.
"""

from __future__ import annotations

import logging
import math
from datetime import date

import numpy as np

from polisim.domain.catalog import default_world
from polisim.domain.schema import (
    EconomicDataPoint,
    EconomicIndicator,
    EconomicSnapshot,
    Jurisdiction,
    WorldCountry,
)

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Model Constants
# ════════════════════════════════════════════════════════════════

TREND_GROWTH = 0.02
NAIRU = 4.5
INFLATION_TARGET = 2.0
NEUTRAL_RATE = 5.0
RATE_EFFECT_PER_POINT = 0.003
OKUN_COEFFICIENT = -0.5
PHILLIPS_COEFFICIENT = 0.5
INFLATION_PERSISTENCE = 0.7
TAYLOR_ADJUSTMENT = 0.15

WEEKS_PER_YEAR = 52.0
DAYS_PER_WEEK = 7.0

# Standard deviation of the weekly shock per indicator
UNEMPLOYMENT_NOISE = 0.04
INFLATION_NOISE = 0.05


class EconomicIntegrityError(Exception):
    """Raised when a tick would write a non-finite or out-of-order value."""
    pass


class EconomicModel:
    """
    Owns the federal, state and local indicator series and the world table.

    Usage:
        model = EconomicModel(rng=np.random.default_rng(42), start=date(2024, 1, 1))
        snapshot = model.tick(date(2024, 1, 8), days=7)
        model.register_gdp_impact(2.0)   # consumed by the next tick
    """

    def __init__(
        self,
        rng: np.random.Generator,
        start: date,
        world: list[WorldCountry] | None = None,
    ) -> None:
        self.rng = rng
        self.indicators: dict[str, EconomicIndicator] = {
            "federal_gdp": EconomicIndicator.start("Federal GDP", 25e12, start, floor=0.0),
            "federal_unemployment": EconomicIndicator.start(
                "Federal Unemployment", 3.8, start, floor=3.0, ceiling=8.0
            ),
            "inflation": EconomicIndicator.start("Inflation", 2.5, start, floor=1.0, ceiling=5.0),
            "interest_rate": EconomicIndicator.start(
                "Federal Interest Rate", 5.0, start, floor=0.0, ceiling=10.0
            ),
            "state_gdp": EconomicIndicator.start("State GDP", 500e9, start, floor=0.0),
            "state_unemployment": EconomicIndicator.start(
                "State Unemployment", 4.2, start, floor=2.5, ceiling=9.0
            ),
            "local_gdp": EconomicIndicator.start("Local GDP", 5e9, start, floor=0.0),
            "local_unemployment": EconomicIndicator.start(
                "Local Unemployment", 4.5, start, floor=2.0, ceiling=10.0
            ),
        }
        self.world: list[WorldCountry] = world if world is not None else default_world()
        self.world.sort(key=lambda c: c.gdp, reverse=True)
        self.pending_gdp_impact = 0.0
        self.last_growth = 0.0

    # ── Accessors ─────────────────────────────────────────────

    def current(self, key: str) -> float:
        return self.indicators[key].current

    @property
    def last_date(self) -> date:
        return self.indicators["federal_gdp"].last_date

    def gdp_for(self, jurisdiction: Jurisdiction) -> float:
        return self.current(f"{jurisdiction.value}_gdp")

    def world_rankings(self) -> list[WorldCountry]:
        return list(self.world)

    def register_gdp_impact(self, percent: float) -> None:
        """Queue a one-shot GDP shift (percent) applied by the next tick."""
        if not math.isfinite(percent):
            raise ValueError(f"GDP impact must be finite, got {percent!r}")
        self.pending_gdp_impact += percent
        logger.info("GDP impact queued: %+.2f%% (pending %+.2f%%)", percent, self.pending_gdp_impact)

    # ── Simulation ────────────────────────────────────────────

    def tick(self, on: date, days: int = 1) -> EconomicSnapshot:
        """
        Advance the economy by `days` days, recording values dated `on`.

        Raises:
            ValueError: If days < 1.
            EconomicIntegrityError: If `on` precedes the last recorded date or
                any computed value is non-finite. Nothing is written.
        """
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        if on < self.last_date:
            logger.critical("Economic tick rejected: %s precedes %s", on, self.last_date)
            raise EconomicIntegrityError(
                f"Tick dated {on} precedes last recorded date {self.last_date}"
            )

        weeks = days / DAYS_PER_WEEK
        years = weeks / WEEKS_PER_YEAR

        federal, annual_growth = self._advance_federal(weeks, years)
        regional = self._advance_regional(weeks, federal)
        world = self._advance_world(years, federal["federal_gdp"])

        updates = {**federal, **regional}
        bad = [key for key, value in updates.items() if not math.isfinite(value)]
        bad += [c.code for c in world if not math.isfinite(c.gdp)]
        if bad:
            logger.critical("Economic tick rejected: non-finite values for %s", ", ".join(bad))
            raise EconomicIntegrityError(f"Non-finite values computed for: {', '.join(bad)}")

        # ── Commit ──
        for key, value in updates.items():
            self.indicators[key].history.append(EconomicDataPoint(as_of=on, value=value))
        self.world = sorted(world, key=lambda c: c.gdp, reverse=True)
        self.pending_gdp_impact = 0.0
        # Trend growth only; the one-shot impact is a level shift
        self.last_growth = annual_growth * 100

        return self.snapshot()

    def _advance_federal(self, weeks: float, years: float) -> tuple[dict[str, float], float]:
        gdp = self.current("federal_gdp")
        unemployment = self.current("federal_unemployment")
        inflation = self.current("inflation")
        rate = self.current("interest_rate")

        # 1. GDP with the interest-rate drag
        base_growth = self.rng.uniform(0.015, 0.025)
        rate_effect = (rate - NEUTRAL_RATE) * RATE_EFFECT_PER_POINT
        annual_growth = base_growth - rate_effect
        new_gdp = gdp * (1 + annual_growth * years) * (1 + self.pending_gdp_impact / 100)

        # 2. Okun's law
        gdp_gap = (annual_growth - TREND_GROWTH) * 100
        unemployment_drift = OKUN_COEFFICIENT * gdp_gap / WEEKS_PER_YEAR * weeks
        unemployment_noise = self.rng.normal(0.0, UNEMPLOYMENT_NOISE * math.sqrt(weeks))
        new_unemployment = self.indicators["federal_unemployment"].clamp(
            unemployment + unemployment_drift + unemployment_noise
        )

        # 3. Phillips curve with persistence and target anchor
        phillips = PHILLIPS_COEFFICIENT * (NAIRU - new_unemployment) / WEEKS_PER_YEAR * weeks
        anchor = min(1.0, (1 - INFLATION_PERSISTENCE) * weeks)
        inflation_noise = self.rng.normal(0.0, INFLATION_NOISE * math.sqrt(weeks))
        new_inflation = self.indicators["inflation"].clamp(
            inflation + anchor * (INFLATION_TARGET - inflation) + phillips + inflation_noise
        )

        # 4. Taylor rule
        inflation_gap = new_inflation - INFLATION_TARGET
        output_gap = (NAIRU - new_unemployment) / NAIRU
        taylor = INFLATION_TARGET + 1.5 * inflation_gap + 0.5 * output_gap * 100
        target_rate = self.indicators["interest_rate"].clamp(taylor)
        adjustment = min(1.0, TAYLOR_ADJUSTMENT * weeks)
        new_rate = self.indicators["interest_rate"].clamp(rate + (target_rate - rate) * adjustment)

        values = {
            "federal_gdp": self.indicators["federal_gdp"].clamp(new_gdp),
            "federal_unemployment": new_unemployment,
            "inflation": new_inflation,
            "interest_rate": new_rate,
        }
        return values, float(annual_growth)

    def _advance_regional(self, weeks: float, federal: dict[str, float]) -> dict[str, float]:
        federal_growth = federal["federal_gdp"] / self.current("federal_gdp") - 1

        state_growth = federal_growth * self.rng.uniform(0.9, 1.1)
        state_gdp = self.current("state_gdp") * (1 + state_growth)
        state_target = federal["federal_unemployment"] + self.rng.uniform(-0.5, 0.5)
        state_unemployment = self.current("state_unemployment")
        state_unemployment += (state_target - state_unemployment) * min(1.0, 0.3 * weeks)

        local_growth = state_growth * self.rng.uniform(0.7, 1.3)
        local_gdp = self.current("local_gdp") * (1 + local_growth)
        local_target = state_unemployment + self.rng.uniform(-1.0, 1.0)
        local_unemployment = self.current("local_unemployment")
        local_unemployment += (local_target - local_unemployment) * min(1.0, 0.4 * weeks)

        return {
            "state_gdp": self.indicators["state_gdp"].clamp(state_gdp),
            "state_unemployment": self.indicators["state_unemployment"].clamp(state_unemployment),
            "local_gdp": self.indicators["local_gdp"].clamp(local_gdp),
            "local_unemployment": self.indicators["local_unemployment"].clamp(local_unemployment),
        }

    def _advance_world(self, years: float, federal_gdp: float) -> list[WorldCountry]:
        updated = []
        for country in self.world:
            per_capita = country.gdp_per_capita
            if per_capita >= 40_000:
                growth, population_growth = self.rng.uniform(0.015, 0.025), self.rng.uniform(0.002, 0.005)
            elif per_capita >= 13_000:
                growth, population_growth = self.rng.uniform(0.03, 0.05), self.rng.uniform(0.003, 0.008)
            elif per_capita >= 4_000:
                growth, population_growth = self.rng.uniform(0.04, 0.07), self.rng.uniform(0.008, 0.013)
            else:
                growth, population_growth = self.rng.uniform(0.05, 0.08), self.rng.uniform(0.015, 0.025)
            if country.gdp >= 20e12:
                growth = max(0.01, growth - 0.002)

            # The home country mirrors the federal series
            gdp = federal_gdp if country.code == "USA" else country.gdp * (1 + growth * years)
            population = int(country.population * (1 + population_growth * years))
            updated.append(country.model_copy(update={"gdp": gdp, "population": population}))
        return updated

    # ── Views ─────────────────────────────────────────────────

    def snapshot(self) -> EconomicSnapshot:
        return EconomicSnapshot(
            as_of=self.last_date,
            federal_gdp=self.current("federal_gdp"),
            federal_unemployment=self.current("federal_unemployment"),
            inflation=self.current("inflation"),
            interest_rate=self.current("interest_rate"),
            state_gdp=self.current("state_gdp"),
            state_unemployment=self.current("state_unemployment"),
            local_gdp=self.current("local_gdp"),
            local_unemployment=self.current("local_unemployment"),
            gdp_growth=self.last_growth,
            world_rankings=[c.code for c in self.world],
        )

    def to_dict(self) -> dict:
        return {
            "indicators": {k: v.model_dump(mode="json") for k, v in self.indicators.items()},
            "world": [c.model_dump(mode="json") for c in self.world],
            "pending_gdp_impact": self.pending_gdp_impact,
        }
