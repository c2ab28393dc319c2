# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation orchestrator.

This module provides the MonteCarloEngine class which runs many independent
portfolio trajectories for one scenario and collects their terminal
statistics into a SimulationBatch.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from ..errors import ResourceExhaustionError, SimulationCancelled, ValidationError
from ..scenario import Scenario
from .config import MonteCarloConfig
from .path_simulator import PathSummary, PortfolioPathSimulator, require_whole_number
from .results import SimulationBatch

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation flag checked between simulation runs."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise SimulationCancelled("Simulation batch was cancelled")


class MonteCarloEngine:
    """Runs independent portfolio trajectories for a scenario.

    Every run gets its own generator spawned from a single
    ``numpy.random.SeedSequence``. Runs share no mutable state, so a batch
    gives identical results whether it runs sequentially or on a thread pool.

    Example:
        >>> engine = MonteCarloEngine(MonteCarloConfig(num_simulations=5000, random_seed=42))
        >>> batch = engine.run(scenario, horizon_years=20)
        >>> print(len(batch))
        5000
    """

    def __init__(self, config: Optional[MonteCarloConfig] = None):
        """Initialize the engine.

        Args:
            config: Simulation configuration. If None, uses defaults.
        """
        self.config = config or MonteCarloConfig()

    def check_budget(self, horizon_years: int, simulation_count: int) -> Tuple[int, int]:
        """Validate a batch request before any work starts.

        Returns:
            The horizon and count as ints

        Raises:
            ValidationError: If the horizon or count is not a positive whole number
            ResourceExhaustionError: If either exceeds the configured limits
        """
        horizon_years = require_whole_number("horizon_years", horizon_years)
        simulation_count = require_whole_number("simulation_count", simulation_count)
        if horizon_years < 1:
            raise ValidationError(f"Simulation horizon must be at least 1 year, got {horizon_years}")
        if simulation_count < 1:
            raise ValidationError(f"simulation_count must be at least 1, got {simulation_count}")
        if simulation_count > self.config.max_simulations:
            raise ResourceExhaustionError(
                f"simulation_count {simulation_count} exceeds the limit of "
                f"{self.config.max_simulations} runs per scenario"
            )
        if horizon_years > self.config.max_horizon_years:
            raise ResourceExhaustionError(
                f"Horizon of {horizon_years} years exceeds the limit of "
                f"{self.config.max_horizon_years} years"
            )
        return horizon_years, simulation_count

    def spawn_seeds(self, simulation_count: int,
                    seed: Optional[int] = None) -> List[np.random.SeedSequence]:
        """Create one independent seed sequence per run.

        Generators are built from these only when their run starts, so a
        batch never holds more than one generator per worker.

        Args:
            simulation_count: Number of runs in the batch
            seed: Seed overriding the configured one

        Returns:
            List of seed sequences, one per run in run order
        """
        root_seed = self.config.random_seed if seed is None else seed
        return np.random.SeedSequence(root_seed).spawn(simulation_count)

    def run(self,
            scenario: Scenario,
            horizon_years: int,
            simulation_count: Optional[int] = None,
            cancel_token: Optional[CancellationToken] = None,
            seed: Optional[int] = None) -> SimulationBatch:
        """Run a Monte Carlo batch for one scenario.

        Args:
            scenario: Scenario to simulate
            horizon_years: Years per trajectory
            simulation_count: Runs in the batch; defaults to config.num_simulations
            cancel_token: Optional token checked between runs
            seed: Seed overriding config.random_seed

        Returns:
            SimulationBatch with one PathSummary per run

        Raises:
            ValidationError: On invalid horizon or count
            ResourceExhaustionError: If the request exceeds configured limits
            SimulationCancelled: If the token is cancelled mid-batch
        """
        count = self.config.num_simulations if simulation_count is None else simulation_count
        horizon_years, count = self.check_budget(horizon_years, count)

        path_simulator = PortfolioPathSimulator(
            scenario.parameters, scenario.monthly_investment, horizon_years
        )
        seeds = self.spawn_seeds(count, seed)

        def run_one(seed_seq: np.random.SeedSequence) -> PathSummary:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            return path_simulator.run(np.random.default_rng(seed_seq))

        logger.debug("Running %d simulations of %s over %d years (workers=%d)",
                     count, scenario.id, horizon_years, self.config.max_workers)

        if self.config.max_workers == 1:
            summaries = [run_one(s) for s in seeds]
        else:
            summaries = self._run_parallel(run_one, seeds)

        return SimulationBatch(scenario.id, horizon_years, summaries)

    def _run_parallel(self, run_one, seeds: List[np.random.SeedSequence]) -> List[PathSummary]:
        executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
        futures = [executor.submit(run_one, s) for s in seeds]
        try:
            return [future.result() for future in futures]
        except SimulationCancelled:
            for future in futures:
                future.cancel()
            raise
        finally:
            executor.shutdown(wait=True)
