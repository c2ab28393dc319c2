# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation results aggregation and analysis.

This module reduces a batch of terminal path summaries into the percentile
distributions, risk metrics and wealth metrics reported for a scenario.
Every percentile uses the same rule (ascending sort, index
``floor(p/100 * N)`` clamped to ``N - 1``) so the reported distributions are
always monotonic.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from ..scenario import Scenario
from .path_simulator import PathSummary

if TYPE_CHECKING:
    from .goals import GoalOutcome

logger = logging.getLogger(__name__)

# Below this the excess-return spread is treated as zero
_STD_EPSILON = 1e-12


def percentile_index(percentile: float, count: int) -> int:
    """Index of ``percentile`` in an ascending array of ``count`` values."""
    if count < 1:
        raise ValueError("Cannot take a percentile of an empty batch")
    idx = int(math.floor(percentile / 100.0 * count))
    return min(max(idx, 0), count - 1)


def percentile_of_sorted(sorted_values: Sequence[float], percentile: float) -> float:
    """Percentile of values already sorted ascending."""
    return float(sorted_values[percentile_index(percentile, len(sorted_values))])


def _money(value: float) -> int:
    return int(round(float(value)))


def _pct(value: float) -> float:
    return round(float(value), 2)


class SimulationBatch:
    """Terminal summaries of every run of one scenario.

    Full trajectories are never kept here; each run contributes a single
    :class:`PathSummary`.
    """

    def __init__(self, scenario_id: str, years: int, summaries: List[PathSummary]):
        if not summaries:
            raise ValueError("A simulation batch needs at least one run")
        self.scenario_id = scenario_id
        self.years = years
        self.summaries = summaries

        self.final_values = np.array([s.final_value for s in summaries], dtype=float)
        self.max_drawdowns = np.array([s.max_drawdown for s in summaries], dtype=float)
        self.annualized_returns = np.array([s.annualized_return for s in summaries], dtype=float)
        self.total_invested = summaries[0].total_invested

    @property
    def num_simulations(self) -> int:
        return len(self.summaries)

    def sorted_final_values(self) -> np.ndarray:
        return np.sort(self.final_values, kind="mergesort")

    def to_dataframe(self) -> pd.DataFrame:
        """Get per-run terminal statistics as a DataFrame indexed by run."""
        df = pd.DataFrame([asdict(s) for s in self.summaries])
        df.index.name = 'Run'
        return df

    def __len__(self) -> int:
        return self.num_simulations

    def __repr__(self) -> str:
        return (f"SimulationBatch(scenario_id={self.scenario_id!r}, "
                f"num_simulations={self.num_simulations}, years={self.years})")


@dataclass(frozen=True)
class ValueDistribution:
    p10: int
    p25: int
    p50: int
    p75: int
    p90: int
    mean: int


@dataclass(frozen=True)
class ReturnDistribution:
    """Annualized return percentiles in percent, plus the scenario's expected return."""
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    expected: float


@dataclass(frozen=True)
class RiskMetrics:
    """Risk metrics of a simulated scenario (percent values).

    Attributes:
        volatility: Annual volatility input in percent
        max_drawdown: 95th percentile of the per-run maximum drawdowns
        value_at_risk_95: Proportional loss of the 5th percentile outcome vs the median
        sharpe_ratio: Mean excess annualized return over its standard deviation
        success_rate: Share of runs ending above total invested capital
    """
    volatility: float
    max_drawdown: float
    value_at_risk_95: float
    sharpe_ratio: float
    success_rate: float


@dataclass(frozen=True)
class WealthMetrics:
    median_multiplier: float
    probability_of_loss: float
    average_gains: int
    compound_growth_rate: float


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one Monte Carlo evaluation of a scenario. Immutable."""
    scenario_id: str
    scenario_name: str
    simulation_count: int
    years_simulated: int
    total_invested: int
    portfolio_value: ValueDistribution
    returns: ReturnDistribution
    risk_metrics: RiskMetrics
    wealth_metrics: WealthMetrics
    goal_analysis: List["GoalOutcome"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ResultAggregator:
    """Reduces a simulation batch into distributions and metrics.

    Example:
        >>> aggregator = ResultAggregator(risk_free_rate=0.06)
        >>> result = aggregator.aggregate(batch, scenario)
        >>> print(result.portfolio_value.p50, result.risk_metrics.success_rate)
    """

    PERCENTILES = (10, 25, 50, 75, 90)

    def __init__(self, risk_free_rate: float = 0.06):
        """Initialize the aggregator.

        Args:
            risk_free_rate: Annual risk-free rate as decimal for the Sharpe ratio
        """
        self.risk_free_rate = risk_free_rate

    def portfolio_value_distribution(self, batch: SimulationBatch) -> ValueDistribution:
        values = batch.sorted_final_values()
        p10, p25, p50, p75, p90 = (_money(percentile_of_sorted(values, p)) for p in self.PERCENTILES)
        return ValueDistribution(p10=p10, p25=p25, p50=p50, p75=p75, p90=p90,
                                 mean=_money(np.mean(values)))

    def median_final_value(self, batch: SimulationBatch) -> float:
        return percentile_of_sorted(batch.sorted_final_values(), 50)

    def return_distribution(self, batch: SimulationBatch, expected: float) -> ReturnDistribution:
        returns = np.sort(batch.annualized_returns * 100.0, kind="mergesort")
        p10, p25, p50, p75, p90 = (_pct(percentile_of_sorted(returns, p)) for p in self.PERCENTILES)
        return ReturnDistribution(p10=p10, p25=p25, p50=p50, p75=p75, p90=p90, expected=expected)

    def sharpe_ratio(self, annualized_returns: np.ndarray) -> float:
        """Mean excess return over its (population) standard deviation.

        Identical returns have no spread; the ratio then reports 0.
        """
        excess = np.asarray(annualized_returns, dtype=float) - self.risk_free_rate
        spread = float(np.std(excess))
        if spread < _STD_EPSILON:
            return 0.0
        return _pct(float(np.mean(excess)) / spread)

    def risk_metrics(self, batch: SimulationBatch, volatility: float) -> RiskMetrics:
        values = batch.sorted_final_values()
        drawdowns = np.sort(batch.max_drawdowns * 100.0, kind="mergesort")

        p5 = percentile_of_sorted(values, 5)
        p50 = percentile_of_sorted(values, 50)
        value_at_risk = (1.0 - p5 / p50) * 100.0 if p50 > 0 else 0.0

        above = int(np.count_nonzero(batch.final_values > batch.total_invested))
        return RiskMetrics(
            volatility=volatility,
            max_drawdown=_pct(percentile_of_sorted(drawdowns, 95)),
            value_at_risk_95=_pct(value_at_risk),
            sharpe_ratio=self.sharpe_ratio(batch.annualized_returns),
            success_rate=_pct(above / batch.num_simulations * 100.0),
        )

    def wealth_metrics(self, batch: SimulationBatch) -> WealthMetrics:
        invested = batch.total_invested
        p50 = self.median_final_value(batch)
        below = int(np.count_nonzero(batch.final_values < invested))

        if invested > 0:
            multiplier = p50 / invested
            growth = (multiplier ** (1.0 / batch.years)) * 100.0 - 100.0 if p50 > 0 else -100.0
        else:
            logger.warning("Scenario %s invests nothing; wealth ratios reported as 0",
                           batch.scenario_id)
            multiplier = 0.0
            growth = 0.0

        return WealthMetrics(
            median_multiplier=_pct(multiplier),
            probability_of_loss=_pct(below / batch.num_simulations * 100.0),
            average_gains=_money(float(np.mean(batch.final_values)) - invested),
            compound_growth_rate=_pct(growth),
        )

    def aggregate(self,
                  batch: SimulationBatch,
                  scenario: Scenario,
                  goal_analysis: Sequence["GoalOutcome"] = ()) -> SimulationResult:
        """Build the SimulationResult for a completed batch.

        Args:
            batch: All terminal summaries of the scenario's runs
            scenario: Scenario the batch was produced for
            goal_analysis: Per-goal outcomes computed by the GoalAnalyzer

        Returns:
            Immutable SimulationResult
        """
        params = scenario.parameters
        return SimulationResult(
            scenario_id=scenario.id,
            scenario_name=scenario.name,
            simulation_count=batch.num_simulations,
            years_simulated=batch.years,
            total_invested=_money(batch.total_invested),
            portfolio_value=self.portfolio_value_distribution(batch),
            returns=self.return_distribution(batch, params.expected_return),
            risk_metrics=self.risk_metrics(batch, params.volatility),
            wealth_metrics=self.wealth_metrics(batch),
            goal_analysis=list(goal_analysis),
        )
