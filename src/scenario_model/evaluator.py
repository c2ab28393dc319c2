# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Entry points for evaluating and comparing investment scenarios.

``evaluate`` and ``stress_test`` handle a single scenario; ``evaluate_many``,
``stress_test_all`` and ``comparison_table`` cover the side-by-side
comparison of several strategies for one client.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Sequence, Union

import pandas as pd

from .errors import ValidationError
from .montecarlo.config import MonteCarloConfig
from .montecarlo.goals import GoalAnalyzer
from .montecarlo.results import ResultAggregator, SimulationResult
from .montecarlo.simulator import CancellationToken, MonteCarloEngine
from .scenario import GoalDefinition, Scenario
from .stress.config import StressTestConfig
from .stress.crisis_catalog import CrisisProfile, CrisisProfileCatalog
from .stress.engine import StressTestEngine, StressTestResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def evaluate(scenario: Scenario,
             goals: Sequence[GoalDefinition],
             horizon_years: int,
             simulation_count: Optional[int] = None,
             config: Optional[MonteCarloConfig] = None,
             cancel_token: Optional[CancellationToken] = None) -> SimulationResult:
    """Run the Monte Carlo evaluation of one scenario.

    Args:
        scenario: Scenario to evaluate
        goals: Client goals measured against the outcomes
        horizon_years: Years to simulate
        simulation_count: Number of runs; defaults to config.num_simulations
        config: Simulation configuration; defaults to MonteCarloConfig()
        cancel_token: Optional token checked between runs

    Returns:
        SimulationResult for the scenario
    """
    config = config or MonteCarloConfig()
    engine = MonteCarloEngine(config)
    batch = engine.run(scenario, horizon_years, simulation_count, cancel_token=cancel_token)

    aggregator = ResultAggregator(config.risk_free_rate)
    median = aggregator.median_final_value(batch)
    outcomes = GoalAnalyzer().analyze(batch, scenario, goals, median_value=median)
    result = aggregator.aggregate(batch, scenario, outcomes)

    logger.info("Evaluated %s: %d runs over %d years, median %s, success %.2f%%",
                scenario.id, result.simulation_count, result.years_simulated,
                result.portfolio_value.p50, result.risk_metrics.success_rate)
    return result


def stress_test(scenario: Scenario,
                simulation_result: SimulationResult,
                crisis_profile: Union[CrisisProfile, str],
                goals: Sequence[GoalDefinition] = (),
                config: Optional[StressTestConfig] = None,
                catalog: Optional[CrisisProfileCatalog] = None) -> StressTestResult:
    """Stress a scenario's median outcome with a historical crisis.

    ``crisis_profile`` may be a profile or a catalog id; ids are looked up in
    ``catalog`` (the built-in catalog by default).
    """
    if isinstance(crisis_profile, str):
        crisis_profile = (catalog or CrisisProfileCatalog.create_default()).get(crisis_profile)
    return StressTestEngine(config).run(scenario, simulation_result, crisis_profile, goals)


def _check_unique_ids(scenarios: Sequence[Scenario]):
    seen = set()
    for scenario in scenarios:
        if scenario.id in seen:
            raise ValidationError(f"Duplicate scenario id: {scenario.id}")
        seen.add(scenario.id)


def evaluate_many(scenarios: Sequence[Scenario],
                  goals: Sequence[GoalDefinition],
                  horizon_years: int,
                  simulation_count: Optional[int] = None,
                  config: Optional[MonteCarloConfig] = None,
                  on_progress: Optional[ProgressCallback] = None,
                  cancel_token: Optional[CancellationToken] = None,
                  max_workers: int = 1) -> Dict[str, SimulationResult]:
    """Evaluate several scenarios, optionally concurrently.

    Every request is validated before the first run starts. ``on_progress``
    is called as ``on_progress(scenario_id, completed, total)`` after each
    scenario finishes.

    Returns:
        Scenario id to SimulationResult, in input order
    """
    if not scenarios:
        raise ValidationError("At least one scenario is required")
    if max_workers < 1:
        raise ValidationError("max_workers must be at least 1")
    _check_unique_ids(scenarios)

    config = config or MonteCarloConfig()
    count = config.num_simulations if simulation_count is None else simulation_count
    horizon_years, count = MonteCarloEngine(config).check_budget(horizon_years, count)

    total = len(scenarios)
    completed = 0
    lock = threading.Lock()
    results: Dict[str, SimulationResult] = {}

    def run_scenario(scenario: Scenario) -> SimulationResult:
        nonlocal completed
        result = evaluate(scenario, goals, horizon_years, count, config, cancel_token)
        with lock:
            results[scenario.id] = result
            completed += 1
            done = completed
        if on_progress is not None:
            on_progress(scenario.id, done, total)
        return result

    if max_workers == 1:
        for scenario in scenarios:
            run_scenario(scenario)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(run_scenario, s) for s in scenarios]
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                for future in futures:
                    future.cancel()
                raise

    return {s.id: results[s.id] for s in scenarios}


def stress_test_all(scenarios: Sequence[Scenario],
                    results: Dict[str, SimulationResult],
                    catalog: Optional[CrisisProfileCatalog] = None,
                    goals: Sequence[GoalDefinition] = (),
                    config: Optional[StressTestConfig] = None,
                    crisis_ids: Optional[Sequence[str]] = None) -> Dict[str, List[StressTestResult]]:
    """Stress every scenario against every (or the selected) catalog crisis.

    Returns:
        Scenario id to one StressTestResult per crisis, in catalog order
    """
    catalog = catalog or CrisisProfileCatalog.create_default()
    crises = [catalog.get(cid) for cid in crisis_ids] if crisis_ids else catalog.list()
    engine = StressTestEngine(config)

    stressed = {}
    for scenario in scenarios:
        if scenario.id not in results:
            raise ValidationError(f"No simulation result for scenario '{scenario.id}'")
        stressed[scenario.id] = [
            engine.run(scenario, results[scenario.id], crisis, goals) for crisis in crises
        ]
    return stressed


def comparison_table(results: Dict[str, SimulationResult],
                     stress_results: Optional[Dict[str, List[StressTestResult]]] = None) -> pd.DataFrame:
    """Side-by-side comparison of evaluated scenarios.

    Rows are ranked by median final value, then success rate. When stress
    results are given the table also carries the average resilience score
    (the final tie-break) and the worst crisis loss of each scenario.
    """
    rows = []
    for scenario_id, result in results.items():
        row = {
            'scenario_id': scenario_id,
            'scenario_name': result.scenario_name,
            'total_invested': result.total_invested,
            'median_value': result.portfolio_value.p50,
            'p10_value': result.portfolio_value.p10,
            'p90_value': result.portfolio_value.p90,
            'success_rate': result.risk_metrics.success_rate,
            'probability_of_loss': result.wealth_metrics.probability_of_loss,
            'sharpe_ratio': result.risk_metrics.sharpe_ratio,
            'value_at_risk_95': result.risk_metrics.value_at_risk_95,
            'max_drawdown': result.risk_metrics.max_drawdown,
        }
        if stress_results is not None:
            stressed = stress_results.get(scenario_id) or []
            if stressed:
                row['average_resilience'] = round(
                    sum(s.resilience_score for s in stressed) / len(stressed), 2)
                row['worst_crisis_loss'] = max(
                    s.immediate_impact.portfolio_loss_percentage for s in stressed)
            else:
                row['average_resilience'] = None
                row['worst_crisis_loss'] = None
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return df
    keys = ['median_value', 'success_rate']
    if 'average_resilience' in df.columns:
        keys.append('average_resilience')
    df = df.sort_values(keys, ascending=False, kind='mergesort')
    df['rank'] = range(1, len(df) + 1)
    return df.set_index('scenario_id')
