"""Monte Carlo exit readiness engine for household financial planning."""

from exit_readiness.simulator import ENGINE_VERSION, run_simulation, run_simulation_async

__all__ = ["ENGINE_VERSION", "run_simulation", "run_simulation_async"]
