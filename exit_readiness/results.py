"""Result types returned by the simulation entry points."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import pandas as pd


class ScoreLevel(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    ORANGE = "ORANGE"
    RED = "RED"


@dataclass(frozen=True)
class AssetPoint:
    """Total assets at the start of the year the household is `age`."""

    age: int
    assets: float


@dataclass(frozen=True)
class SimulationPath:
    """
    Percentile bands of total assets across all runs.

    Each band holds one AssetPoint per simulated age, in age order.
    """

    p10: tuple[AssetPoint, ...]
    p25: tuple[AssetPoint, ...]
    median: tuple[AssetPoint, ...]
    p75: tuple[AssetPoint, ...]
    p90: tuple[AssetPoint, ...]

    @property
    def ages(self) -> list[int]:
        return [point.age for point in self.median]

    @property
    def median_values(self) -> list[float]:
        return [point.assets for point in self.median]

    @property
    def optimistic(self) -> list[float]:
        """90th percentile assets per age."""
        return [point.assets for point in self.p90]

    @property
    def pessimistic(self) -> list[float]:
        """10th percentile assets per age."""
        return [point.assets for point in self.p10]

    def assets_at(self, age: int) -> float | None:
        """Median assets at `age`, or None outside the simulated range."""
        for point in self.median:
            if point.age == age:
                return point.assets
        return None

    def to_frame(self) -> pd.DataFrame:
        """Bands as a DataFrame indexed by age."""
        frame = pd.DataFrame(
            {
                "p10": [p.assets for p in self.p10],
                "p25": [p.assets for p in self.p25],
                "median": [p.assets for p in self.median],
                "p75": [p.assets for p in self.p75],
                "p90": [p.assets for p in self.p90],
            },
            index=pd.Index(self.ages, name="age"),
        )
        return frame


@dataclass(frozen=True)
class KeyMetrics:
    """
    Headline outcomes of a simulation.

    Attributes:
        survival_rate: Percentage of runs whose assets never went negative
        fire_age: First age the median path supports spending at the safe
            withdrawal rate, or None
        asset_at_100: Median assets at the final simulated age
        years_to_fire: fire_age minus current age, or None
    """

    survival_rate: float
    fire_age: int | None
    asset_at_100: float
    years_to_fire: int | None


@dataclass(frozen=True)
class ExitScoreDetail:
    overall: int
    level: ScoreLevel
    survival: int
    lifestyle: int
    risk: int
    liquidity: int


@dataclass(frozen=True)
class CashFlowBreakdown:
    """Cash flow in the first year of retirement."""

    income: float
    pension: float
    dividends: float
    expenses: float
    net_cash_flow: float


@dataclass(frozen=True)
class SimulationResult:
    paths: SimulationPath
    metrics: KeyMetrics
    score: ExitScoreDetail
    cash_flow: CashFlowBreakdown
    engine_version: str
