"""Exit Readiness Score: a four-factor composite on a 0-100 scale."""

from __future__ import annotations

from dataclasses import dataclass

from exit_readiness.calculators import expenses
from exit_readiness.profile import Profile
from exit_readiness.results import ExitScoreDetail, KeyMetrics, ScoreLevel, SimulationPath
from utils.helpers import round_half_up, safe_num, weighted_sum


@dataclass(frozen=True)
class ScoreWeights:
    """
    Weights and scale constants for the composite score.

    Attributes:
        survival: Weight of the survival factor
        lifestyle: Weight of the lifestyle factor
        risk: Weight of the risk factor
        liquidity: Weight of the liquidity factor
        lifestyle_points_per_year: Points per year of retirement spending held
            at retirement (20 years scores 100)
        risk_penalty: Scale of the invested-ratio x volatility penalty
        liquidity_horizon_years: Year of the median path used for liquidity
        liquidity_full_months: Months of spending that score 100
        green_threshold: Minimum overall score for GREEN
        yellow_threshold: Minimum overall score for YELLOW
        orange_threshold: Minimum overall score for ORANGE
    """

    survival: float = 0.55
    lifestyle: float = 0.20
    risk: float = 0.15
    liquidity: float = 0.10
    lifestyle_points_per_year: float = 5.0
    risk_penalty: float = 500.0
    liquidity_horizon_years: int = 5
    liquidity_full_months: float = 60.0
    green_threshold: int = 80
    yellow_threshold: int = 60
    orange_threshold: int = 40


DEFAULT_WEIGHTS = ScoreWeights()


def get_score_level(score: float, weights: ScoreWeights = DEFAULT_WEIGHTS) -> ScoreLevel:
    """Map an overall score to its traffic-light level."""
    if score >= weights.green_threshold:
        return ScoreLevel.GREEN
    if score >= weights.yellow_threshold:
        return ScoreLevel.YELLOW
    if score >= weights.orange_threshold:
        return ScoreLevel.ORANGE
    return ScoreLevel.RED


def _empty_score(weights: ScoreWeights) -> ExitScoreDetail:
    return ExitScoreDetail(
        overall=0,
        level=get_score_level(0, weights),
        survival=0,
        lifestyle=0,
        risk=0,
        liquidity=0,
    )


def home_equity(profile: Profile) -> float:
    """Equity in an owned home; zero unless the household is paying one off."""
    if not profile.home_status.pays_mortgage:
        return 0.0
    return max(0.0, profile.home_market_value - profile.mortgage_principal)


def compute_exit_score(
    metrics: KeyMetrics,
    profile: Profile,
    paths: SimulationPath,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
    retire_expenses: float | None = None,
) -> ExitScoreDetail:
    """
    Score a simulation outcome.

    - Survival: the survival rate, capped at 100
    - Lifestyle: years of retirement spending held on the median path at
      retirement, scaled so 20 years scores 100
    - Risk: penalty on the invested share of liquid assets (home equity
      counts as non-volatile) times volatility
    - Liquidity: months of retirement spending covered by the median path
      five years out, scaled so 60 months scores 100

    Args:
        metrics: Key metrics of the simulation
        profile: Profile the simulation was run for
        paths: Percentile bands of the simulation
        weights: Score weights and constants
        retire_expenses: Spending in the first retirement year; computed
            from the profile when None

    Returns:
        ExitScoreDetail with rounded subscores. Non-finite intermediate
        values count as zero.
    """
    median = paths.median_values
    if not median:
        return _empty_score(weights)

    survival = min(100.0, safe_num(metrics.survival_rate))

    years_to_retire = profile.target_retire_age - profile.current_age
    if retire_expenses is None:
        retire_expenses = expenses(profile, profile.target_retire_age)

    retire_index = max(0, min(years_to_retire, len(median) - 1))
    retire_assets = median[retire_index]
    years_of_expenses = 0.0
    if retire_assets > 0 and retire_expenses > 0:
        years_of_expenses = safe_num(retire_assets / retire_expenses)
    lifestyle = min(100.0, years_of_expenses * weights.lifestyle_points_per_year)

    exposure = profile.asset_invest / (profile.asset_cash + profile.asset_invest + home_equity(profile) + 1)
    risk = max(0.0, safe_num(100 - exposure * profile.volatility * weights.risk_penalty))

    horizon_index = min(weights.liquidity_horizon_years, len(median) - 1)
    projected = median[horizon_index]
    annual_expenses = retire_expenses if retire_expenses > 0 else 1.0
    months_covered = projected / (annual_expenses / 12) if projected > 0 else 0.0
    liquidity = min(100.0, safe_num(months_covered * 100 / weights.liquidity_full_months))

    raw_overall = weighted_sum(
        [survival, lifestyle, risk, liquidity],
        [weights.survival, weights.lifestyle, weights.risk, weights.liquidity],
    )
    overall = max(0, min(100, round_half_up(safe_num(raw_overall))))

    return ExitScoreDetail(
        overall=overall,
        level=get_score_level(overall, weights),
        survival=round_half_up(survival),
        lifestyle=round_half_up(lifestyle),
        risk=round_half_up(risk),
        liquidity=round_half_up(liquidity),
    )
