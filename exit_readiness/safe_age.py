"""Search for the youngest retirement age that survives with high probability."""

from __future__ import annotations

import logging
from typing import Sequence

from exit_readiness.profile import Profile
from exit_readiness.simulator import HOUSING_CONFIG, SimulationConfig, run_ensemble

logger = logging.getLogger(__name__)

SAFE_SURVIVAL_THRESHOLD = 90.0
MAX_CANDIDATE_AGE = 70


def find_safe_retirement_age(
    profile: Profile,
    config: SimulationConfig = HOUSING_CONFIG,
    housing_costs: Sequence[float] | None = None,
    threshold: float = SAFE_SURVIVAL_THRESHOLD,
    max_candidate_age: int = MAX_CANDIDATE_AGE,
) -> int | None:
    """
    Youngest target retirement age whose survival rate meets `threshold`.

    Candidates run from the current age to `max_candidate_age` inclusive.
    Every candidate shares the same seeds, so only the retirement age
    differs between runs.

    Returns:
        The first qualifying age, or None if no candidate qualifies
    """
    costs = list(housing_costs) if housing_costs is not None else None

    for age in range(profile.current_age, max_candidate_age + 1):
        candidate = profile.replace(target_retire_age=age)
        survival = run_ensemble(candidate, config, costs).survival_rate
        if survival >= threshold:
            logger.debug(f"Safe retirement age {age} (survival {survival:.1f}%)")
            return age

    logger.debug(f"No retirement age up to {max_candidate_age} reaches {threshold:.0f}% survival")
    return None
