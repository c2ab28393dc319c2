# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Scenario Evaluation Engine

Probabilistic comparison of investment strategies for a client: a Monte
Carlo portfolio simulator measured against the client's goals, paired with a
deterministic stress test against historical market crises.

Example usage:
    from scenario_model import Scenario, ScenarioParameters, GoalDefinition, evaluate, stress_test

    params = ScenarioParameters(equity_allocation=60, debt_allocation=35, alternatives_allocation=5,
                                expected_return=10, volatility=14)
    scenario = Scenario(id='moderate', name='Moderate Growth', parameters=params,
                        monthly_investment=20000)
    goals = [GoalDefinition(name='Retirement', target_amount=10_000_000, horizon_years=20)]

    result = evaluate(scenario, goals, horizon_years=20, simulation_count=5000)
    stressed = stress_test(scenario, result, 'covid_2020', goals)
"""

from .__meta__ import __version__

from .errors import (
    ScenarioModelError,
    ValidationError,
    ResourceExhaustionError,
    SimulationCancelled,
    UnknownCrisisError,
)
from .scenario import (
    RiskLevel,
    GoalKind,
    ScenarioParameters,
    Scenario,
    GoalDefinition,
    simulation_horizon,
    goals_from_client,
)

# Monte Carlo
from .montecarlo import (
    MonteCarloConfig,
    MonteCarloEngine,
    CancellationToken,
    SimulationResult,
    GoalOutcome,
)

# Stress testing
from .stress import (
    StressTestConfig,
    BehavioralRules,
    CrisisProfile,
    CrisisProfileCatalog,
    StressTestEngine,
    StressTestResult,
)

# Planning
from .planning import RiskProfiler, RiskProfile, ScenarioGenerator, GeneratedScenario

from .evaluator import evaluate, stress_test, evaluate_many, stress_test_all, comparison_table

__all__ = [
    '__version__',
    'ScenarioModelError',
    'ValidationError',
    'ResourceExhaustionError',
    'SimulationCancelled',
    'UnknownCrisisError',
    'RiskLevel',
    'GoalKind',
    'ScenarioParameters',
    'Scenario',
    'GoalDefinition',
    'simulation_horizon',
    'goals_from_client',
    'MonteCarloConfig',
    'MonteCarloEngine',
    'CancellationToken',
    'SimulationResult',
    'GoalOutcome',
    'StressTestConfig',
    'BehavioralRules',
    'CrisisProfile',
    'CrisisProfileCatalog',
    'StressTestEngine',
    'StressTestResult',
    'RiskProfiler',
    'RiskProfile',
    'ScenarioGenerator',
    'GeneratedScenario',
    'evaluate',
    'stress_test',
    'evaluate_many',
    'stress_test_all',
    'comparison_table',
]
