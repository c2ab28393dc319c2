# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation module for probabilistic scenario evaluation.

This module runs many independent portfolio trajectories per investment
scenario, each driven by its own seeded random stream, and reduces them into
percentile distributions, risk metrics and goal achievement probabilities.
"""

from .config import MonteCarloConfig
from .return_generator import RandomReturnGenerator
from .path_simulator import PortfolioPathSimulator, PathSummary, MonthRecord, Trajectory
from .simulator import MonteCarloEngine, CancellationToken
from .results import (
    ResultAggregator,
    SimulationBatch,
    SimulationResult,
    ValueDistribution,
    ReturnDistribution,
    RiskMetrics,
    WealthMetrics,
)
from .goals import GoalAnalyzer, GoalOutcome, months_to_target

__all__ = [
    'MonteCarloConfig',
    'RandomReturnGenerator',
    'PortfolioPathSimulator',
    'PathSummary',
    'MonthRecord',
    'Trajectory',
    'MonteCarloEngine',
    'CancellationToken',
    'ResultAggregator',
    'SimulationBatch',
    'SimulationResult',
    'ValueDistribution',
    'ReturnDistribution',
    'RiskMetrics',
    'WealthMetrics',
    'GoalAnalyzer',
    'GoalOutcome',
    'months_to_target',
]
