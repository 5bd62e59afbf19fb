"""Regression harness: compare scores against stored per-version baselines.

Baselines are stored as JSON:

    {
        "engine_version": "1.0.0",
        "baselines": {"C01-base": {"score": 73, "survival_rate": 65}, ...}
    }

Scores are averaged over several base seeds and checked against the
baseline within a tolerance, so small distribution shifts do not fail
the check but real behavioural changes do.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

from exit_readiness.events import (
    AssetGain,
    ExpenseIncrease,
    HousingPurchase,
    IncomeDecrease,
    IncomeIncrease,
    LifeEvent,
)
from exit_readiness.mortgage import PurchaseDetails
from exit_readiness.profile import HouseholdMode, HomeStatus, Profile, create_default_profile
from exit_readiness.simulator import ENGINE_VERSION, PRIMARY_CONFIG, SimulationConfig, run_simulation
from utils.helpers import round_half_up

logger = logging.getLogger(__name__)

TOLERANCE = 8
DEFAULT_SEEDS = (42, 1042, 2042, 3042, 4042)
BASELINE_DIR = Path(__file__).parent / "baselines"


@dataclass(frozen=True)
class Baseline:
    score: int
    survival_rate: int


@dataclass(frozen=True)
class CaseDefinition:
    """
    Compact household description used to build regression profiles.

    Savings are split into cash, invested and retirement-account balances
    by the given ratios.
    """

    case_id: str
    age: int
    income: float
    partner_income: float
    rent_monthly: float
    total_savings: float
    target_retire_age: int
    cash_ratio: float = 0.25
    invest_ratio: float = 0.60
    dc_ratio: float = 0.15
    mode: HouseholdMode = HouseholdMode.COUPLE


CASES: dict[str, CaseDefinition] = {
    c.case_id: c
    for c in (
        CaseDefinition("C01", 35, 1_600, 800, 32, 4_000, 50),
        CaseDefinition("C02", 37, 1_800, 600, 30, 3_500, 48),
        CaseDefinition("C03", 34, 1_500, 700, 28, 3_000, 50),
        CaseDefinition("C04", 33, 1_400, 900, 29, 5_000, 45, 0.20, 0.70, 0.10),
        CaseDefinition("C05", 36, 1_700, 700, 31, 2_800, 55),
        CaseDefinition("C06", 32, 1_800, 600, 40, 2_500, 50, 0.30, 0.55, 0.15),
        CaseDefinition("C07", 35, 1_500, 500, 26, 3_200, 52, 0.30, 0.55, 0.15),
        CaseDefinition("C08", 38, 1_600, 600, 27, 3_800, 48, 0.30, 0.55, 0.15),
        CaseDefinition("C09", 34, 1_400, 800, 24, 3_000, 50),
        CaseDefinition("C10", 33, 1_500, 900, 29, 4_500, 50),
        CaseDefinition("C11", 34, 1_200, 300, 18, 2_000, 55, 0.30, 0.55, 0.15),
        CaseDefinition("C12", 33, 1_100, 700, 22, 2_500, 50),
        CaseDefinition("C13", 30, 900, 0, 11, 1_500, 55, 0.35, 0.50, 0.15, HouseholdMode.SOLO),
        CaseDefinition("C14", 28, 2_200, 1_000, 35, 3_000, 45, 0.20, 0.65, 0.15),
        CaseDefinition("C15", 38, 800, 400, 12, 1_000, 60, 0.35, 0.45, 0.20),
        CaseDefinition("C16", 40, 1_800, 0, 20, 8_000, 50, 0.20, 0.70, 0.10, HouseholdMode.SOLO),
        CaseDefinition("C17", 35, 1_200, 800, 25, 2_500, 52, 0.30, 0.55, 0.15),
    )
}


def estimate_living_cost(household_income: float) -> float:
    """Typical annual living cost for a household income bracket."""
    if household_income <= 2_000:
        return 360.0
    if household_income <= 2_500:
        return 420.0
    return 480.0


def case_to_profile(case: CaseDefinition) -> Profile:
    """Build a renter profile from a case definition on top of the defaults."""
    living = estimate_living_cost(case.income + case.partner_income)
    if case.mode == HouseholdMode.SOLO:
        living = float(round_half_up(living * 0.7))

    return create_default_profile().replace(
        current_age=case.age,
        target_retire_age=case.target_retire_age,
        mode=case.mode,
        gross_income=case.income,
        partner_gross_income=case.partner_income,
        housing_cost_annual=case.rent_monthly * 12,
        living_cost_annual=living,
        home_status=HomeStatus.RENTER,
        mortgage_interest_rate=1.0,
        asset_cash=float(round_half_up(case.total_savings * case.cash_ratio)),
        asset_invest=float(round_half_up(case.total_savings * case.invest_ratio)),
        asset_dc=float(round_half_up(case.total_savings * case.dc_ratio)),
    )


@dataclass(frozen=True)
class ScenarioDefinition:
    """A case plus the life events that distinguish the scenario."""

    scenario_id: str
    case_id: str
    life_events: tuple[LifeEvent, ...] = ()


def _home_purchase(age: int, price: float, down_payment: float, owner_annual_cost: float) -> HousingPurchase:
    return HousingPurchase(
        age=age,
        amount=price,
        name="Home purchase",
        purchase=PurchaseDetails(
            property_price=price,
            down_payment=down_payment,
            purchase_cost_rate=7.0,
            mortgage_years=35,
            interest_rate=0.5,
            owner_annual_cost=owner_annual_cost,
        ),
    )


_CAREER_SLOWDOWN = IncomeDecrease(age=40, amount=320.0, name="Career slowdown")
_CHILD = ExpenseIncrease(age=35, amount=150.0, duration=22, is_recurring=True, name="Child")

SCENARIOS: dict[str, ScenarioDefinition] = {
    s.scenario_id: s
    for s in (
        ScenarioDefinition("C01-base", "C01"),
        ScenarioDefinition("C01-buy", "C01", (_home_purchase(38, 8_500, 1_000, 40),)),
        ScenarioDefinition("C01-pacedown", "C01", (_CAREER_SLOWDOWN,)),
        ScenarioDefinition(
            "C01-buy-pacedown", "C01", (_home_purchase(38, 8_500, 1_000, 40), _CAREER_SLOWDOWN)
        ),
        ScenarioDefinition("C06-base", "C06"),
        ScenarioDefinition("C06-buy", "C06", (_home_purchase(35, 8_000, 800, 40),)),
        ScenarioDefinition("C11-base", "C11"),
        ScenarioDefinition("C11-buy", "C11", (_home_purchase(37, 6_000, 600, 30),)),
        ScenarioDefinition("C04-base", "C04"),
        ScenarioDefinition(
            "C04-abroad", "C04", (IncomeIncrease(age=36, amount=560.0, name="Job abroad"),)
        ),
        ScenarioDefinition("C04-inherit", "C04", (AssetGain(age=45, amount=2_000.0, name="Inheritance"),)),
        ScenarioDefinition("C03-base", "C03"),
        ScenarioDefinition("C03-child", "C03", (_CHILD,)),
        ScenarioDefinition("C03-child-buy", "C03", (_CHILD, _home_purchase(36, 8_000, 800, 35))),
        ScenarioDefinition("C05-base", "C05"),
        ScenarioDefinition("C05-buy-max", "C05", (_home_purchase(38, 10_000, 1_000, 50),)),
        *(
            ScenarioDefinition(f"{case_id}-base", case_id)
            for case_id in ("C02", "C07", "C08", "C09", "C10", "C12", "C13", "C14", "C15", "C16", "C17")
        ),
    )
}


def scenario_profile(scenario: ScenarioDefinition) -> Profile:
    """The case profile with the scenario's life events attached."""
    return case_to_profile(CASES[scenario.case_id]).replace(life_events=scenario.life_events)


def scenario_profiles(scenarios: Iterable[ScenarioDefinition] | None = None) -> dict[str, Profile]:
    """Profiles for every scenario in the catalog, keyed by scenario id."""
    if scenarios is None:
        scenarios = SCENARIOS.values()
    return {s.scenario_id: scenario_profile(s) for s in scenarios}


def baseline_path(engine_version: str = ENGINE_VERSION) -> Path:
    """Location of the shipped baselines for an engine version."""
    return BASELINE_DIR / f"{engine_version}.json"


def run_average(
    profile: Profile,
    seeds: Iterable[int] = DEFAULT_SEEDS,
    config: SimulationConfig = PRIMARY_CONFIG,
) -> Baseline:
    """Overall score and survival rate averaged over several base seeds."""
    scores = []
    survival_rates = []
    for seed in seeds:
        result = run_simulation(profile, replace(config, base_seed=seed))
        scores.append(result.score.overall)
        survival_rates.append(result.metrics.survival_rate)

    return Baseline(
        score=round_half_up(sum(scores) / len(scores)),
        survival_rate=round_half_up(sum(survival_rates) / len(survival_rates)),
    )


def record_baselines(
    profiles: Mapping[str, Profile],
    seeds: Iterable[int] = DEFAULT_SEEDS,
    config: SimulationConfig = PRIMARY_CONFIG,
) -> dict[str, Baseline]:
    """Compute fresh baselines for every named profile."""
    seed_list = list(seeds)
    return {name: run_average(profile, seed_list, config) for name, profile in profiles.items()}


def save_baselines(
    baselines: Mapping[str, Baseline],
    path: Path,
    engine_version: str = ENGINE_VERSION,
) -> None:
    payload = {
        "engine_version": engine_version,
        "baselines": {
            name: {"score": b.score, "survival_rate": b.survival_rate}
            for name, b in baselines.items()
        },
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
    logger.info(f"Saved {len(baselines)} baselines for engine {engine_version} to {path}")


def load_baselines(path: Path) -> tuple[str, dict[str, Baseline]]:
    """
    Load baselines from JSON.

    Returns:
        (engine_version, baselines by scenario id)
    """
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    baselines = {
        name: Baseline(score=int(entry["score"]), survival_rate=int(entry["survival_rate"]))
        for name, entry in payload["baselines"].items()
    }
    return payload["engine_version"], baselines


def compare_to_baselines(
    profiles: Mapping[str, Profile],
    baselines: Mapping[str, Baseline],
    tolerance: int = TOLERANCE,
    seeds: Iterable[int] = DEFAULT_SEEDS,
    config: SimulationConfig = PRIMARY_CONFIG,
) -> pd.DataFrame:
    """
    Run every profile that has a baseline and report the score drift.

    Returns:
        DataFrame indexed by scenario id with expected and actual scores,
        their difference, survival rates and a `within_tolerance` flag
    """
    seed_list = list(seeds)
    rows = []
    for name, profile in profiles.items():
        expected = baselines.get(name)
        if expected is None:
            logger.warning(f"No baseline for scenario {name}, skipping")
            continue
        actual = run_average(profile, seed_list, config)
        delta = actual.score - expected.score
        rows.append(
            {
                "scenario": name,
                "expected_score": expected.score,
                "actual_score": actual.score,
                "delta": delta,
                "expected_survival": expected.survival_rate,
                "actual_survival": actual.survival_rate,
                "within_tolerance": abs(delta) <= tolerance,
            }
        )

    columns = [
        "scenario",
        "expected_score",
        "actual_score",
        "delta",
        "expected_survival",
        "actual_survival",
        "within_tolerance",
    ]
    report = pd.DataFrame(rows, columns=columns).set_index("scenario")

    failures = int((~report["within_tolerance"]).sum()) if not report.empty else 0
    if failures:
        logger.warning(f"{failures} of {len(report)} scenarios drifted beyond ±{tolerance}")
    return report
