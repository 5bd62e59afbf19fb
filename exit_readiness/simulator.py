"""Monte Carlo simulation engine for exit readiness."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import numpy as np

from exit_readiness.calculators import (
    MAX_AGE,
    CashFlowSchedule,
    build_cash_flow_schedule,
    cash_flow_breakdown,
)
from exit_readiness.exceptions import ExitReadinessError, ProfileValidationError, SimulationError
from exit_readiness.profile import Profile
from exit_readiness.random_source import SeededRandom, draw_standard_normals
from exit_readiness.results import AssetPoint, KeyMetrics, SimulationPath, SimulationResult
from exit_readiness.scoring import DEFAULT_WEIGHTS, ScoreWeights, compute_exit_score
from exit_readiness.validation import validate_profile
from utils.helpers import Percentiles

logger = logging.getLogger(__name__)

ENGINE_VERSION = "1.0.0"

PERCENTILE_LEVELS = (10, 25, 50, 75, 90)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Configuration for a Monte Carlo run.

    Attributes:
        n_simulations: Number of independent paths
        base_seed: Seed of the first path; path i uses base_seed + i
        max_age: Final simulated age
        asset_floor: Lower clamp on the asset balance
        safe_withdrawal_rate: Withdrawal rate used to find the FIRE age
    """

    n_simulations: int = 1000
    base_seed: int = 42
    max_age: int = MAX_AGE
    asset_floor: float = -10_000.0
    safe_withdrawal_rate: float = 0.04


PRIMARY_CONFIG = SimulationConfig(n_simulations=1000)
HOUSING_CONFIG = SimulationConfig(n_simulations=500)


@dataclass
class Ensemble:
    """Raw output of a batch of simulated paths."""

    schedule: CashFlowSchedule
    paths: np.ndarray  # (n_runs, n_steps) assets recorded at the start of each year
    returns: np.ndarray  # (n_runs, n_steps) annual portfolio returns

    @property
    def ages(self) -> np.ndarray:
        return self.schedule.ages

    @property
    def n_runs(self) -> int:
        return self.paths.shape[0]

    @property
    def survival_rate(self) -> float:
        """Percentage of paths that never went below zero."""
        return float(np.mean(np.all(self.paths >= 0, axis=1)) * 100)


def _step_paths(
    schedule: CashFlowSchedule,
    shocks: np.ndarray,
    asset_floor: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Advance every run through the schedule.

    Each year: record the (rounded) balance, then add net cash flow,
    retirement-account contribution, investment gain on the current balance
    and any lump sums, and clamp at the floor.
    """
    n_runs = shocks.shape[0]
    n_steps = schedule.n_steps

    returns = schedule.expected_return + schedule.volatility * shocks[:, :n_steps]
    flows = schedule.net_cash_flow + schedule.contributions + schedule.asset_gains

    paths = np.empty((n_runs, n_steps))
    assets = np.full(n_runs, schedule.initial_assets, dtype=float)

    for step in range(n_steps):
        paths[:, step] = np.floor(assets + 0.5)
        assets = assets + flows[step] + assets * returns[:, step]
        np.maximum(assets, asset_floor, out=assets)

    return paths, returns


def simulate_path(
    schedule: CashFlowSchedule,
    rng: SeededRandom,
    config: SimulationConfig = PRIMARY_CONFIG,
) -> list[AssetPoint]:
    """
    Simulate a single trajectory, drawing one normal shock per year from `rng`.

    Args:
        schedule: Deterministic cash flow of the profile
        rng: Random source; advanced by one Gaussian draw per year
        config: Simulation settings (only the asset floor is used)

    Returns:
        One AssetPoint per age from the current age to the final age
    """
    shocks = np.array([[rng.next_gaussian() for _ in range(schedule.n_steps)]])
    paths, _ = _step_paths(schedule, shocks, config.asset_floor)
    return [
        AssetPoint(age=int(age), assets=float(value))
        for age, value in zip(schedule.ages, paths[0])
    ]


def run_ensemble(
    profile: Profile,
    config: SimulationConfig = PRIMARY_CONFIG,
    housing_costs: list[float] | None = None,
) -> Ensemble:
    """
    Run `config.n_simulations` paths for a profile.

    Path i is driven by SeededRandom(config.base_seed + i), so two calls with
    the same config share their shocks path for path.

    Args:
        profile: Household profile
        config: Simulation settings
        housing_costs: Per-year housing cost override from the current age

    Returns:
        Ensemble with the recorded paths and the annual returns that drove them
    """
    schedule = build_cash_flow_schedule(profile, housing_costs, config.max_age)
    shocks = draw_standard_normals(config.base_seed, config.n_simulations, schedule.n_steps)
    paths, returns = _step_paths(schedule, shocks, config.asset_floor)

    logger.debug(
        f"Simulated {config.n_simulations} paths over {schedule.n_steps} years "
        f"(seed {config.base_seed})"
    )
    return Ensemble(schedule=schedule, paths=paths, returns=returns)


def _compute_percentiles(paths: np.ndarray) -> Percentiles:
    """
    Percentile bands across paths.

    Uses the sorted value at index floor(N * p / 100) rather than
    interpolating, so every band value is an actual simulated balance.
    """
    n_runs = paths.shape[0]
    indices = {p: min(n_runs * p // 100, n_runs - 1) for p in PERCENTILE_LEVELS}
    ordered = np.partition(paths, sorted(set(indices.values())), axis=0)

    bands = {}
    for p, index in indices.items():
        band = ordered[index]
        bands[p] = np.where(np.isfinite(band), band, 0.0).tolist()

    return Percentiles(
        p10=bands[10],
        p25=bands[25],
        p50=bands[50],
        p75=bands[75],
        p90=bands[90],
    )


def build_simulation_path(percentiles: Percentiles, ages: np.ndarray) -> SimulationPath:
    """Attach ages to percentile bands."""
    age_list = [int(age) for age in ages]

    def points(values: list[float]) -> tuple[AssetPoint, ...]:
        return tuple(AssetPoint(age=age, assets=value) for age, value in zip(age_list, values))

    return SimulationPath(
        p10=points(percentiles.p10),
        p25=points(percentiles.p25),
        median=points(percentiles.p50),
        p75=points(percentiles.p75),
        p90=points(percentiles.p90),
    )


def calculate_metrics(
    ensemble: Ensemble,
    paths: SimulationPath,
    profile: Profile,
    config: SimulationConfig = PRIMARY_CONFIG,
) -> KeyMetrics:
    """Survival rate, FIRE age and final median assets."""
    median = paths.median_values
    schedule = ensemble.schedule

    fire_age = None
    for age, assets, spending in zip(schedule.ages, median, schedule.expenses):
        if assets * config.safe_withdrawal_rate >= spending:
            fire_age = int(age)
            break

    return KeyMetrics(
        survival_rate=ensemble.survival_rate,
        fire_age=fire_age,
        asset_at_100=median[-1] if median else 0.0,
        years_to_fire=fire_age - profile.current_age if fire_age is not None else None,
    )


def retire_year_expenses(schedule: CashFlowSchedule) -> float | None:
    """Scheduled spending in the first retirement year, if it is simulated."""
    index = schedule.index_of(schedule.retire_age)
    return None if index is None else float(schedule.expenses[index])


def simulate_profile(
    profile: Profile,
    config: SimulationConfig = PRIMARY_CONFIG,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
    housing_costs: list[float] | None = None,
) -> SimulationResult:
    """Simulate and score an already-validated profile."""
    ensemble = run_ensemble(profile, config, housing_costs)
    paths = build_simulation_path(_compute_percentiles(ensemble.paths), ensemble.ages)
    metrics = calculate_metrics(ensemble, paths, profile, config)
    score = compute_exit_score(
        metrics,
        profile,
        paths,
        weights,
        retire_expenses=retire_year_expenses(ensemble.schedule),
    )

    return SimulationResult(
        paths=paths,
        metrics=metrics,
        score=score,
        cash_flow=cash_flow_breakdown(profile),
        engine_version=ENGINE_VERSION,
    )


def run_simulation(
    profile: Profile,
    config: SimulationConfig = PRIMARY_CONFIG,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> SimulationResult:
    """
    Validate a profile, simulate it and score the outcome.

    Raises:
        ProfileValidationError: if the profile has invalid fields
        SimulationError: if the simulation fails unexpectedly
    """
    errors = validate_profile(profile)
    if errors:
        raise ProfileValidationError(errors)

    try:
        result = simulate_profile(profile, config, weights)
    except ExitReadinessError:
        raise
    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        raise SimulationError(f"Simulation failed: {e}") from e

    logger.info(
        f"Simulation complete: survival {result.metrics.survival_rate:.1f}%, "
        f"score {result.score.overall} ({result.score.level.value})"
    )
    return result


async def run_simulation_async(
    profile: Profile,
    config: SimulationConfig = PRIMARY_CONFIG,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> SimulationResult:
    """Run `run_simulation` in a worker thread so the event loop stays responsive."""
    return await asyncio.to_thread(run_simulation, profile, config, weights)
