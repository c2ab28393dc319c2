# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Single portfolio trajectory simulation.

Advances one portfolio month by month: the month's random return is applied
to the existing value, then the fixed contribution is added. The running peak
and the deepest drawdown from it are tracked along the way.
"""

import math
from dataclasses import asdict, dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from ..errors import ValidationError
from ..scenario import ScenarioParameters
from .return_generator import MONTHS_PER_YEAR, RandomReturnGenerator


def require_whole_number(name: str, value) -> int:
    """Convert a whole number (e.g. 20 or 20.0) to int; anything else is a ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a whole number, got {value!r}") from e
    if not math.isfinite(number) or not number.is_integer():
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class PathSummary:
    """Terminal statistics of one simulated trajectory.

    Attributes:
        final_value: Portfolio value after the last month
        total_invested: Sum of all contributions
        total_gains: final_value - total_invested
        max_drawdown: Deepest fractional decline from a running peak (0-1)
        annualized_return: ``(final/invested)^(1/years) - 1`` as decimal
    """
    final_value: float
    total_invested: float
    total_gains: float
    max_drawdown: float
    annualized_return: float


@dataclass(frozen=True)
class MonthRecord:
    month: int
    value: float
    invested: float
    gains: float
    drawdown: float


@dataclass(frozen=True)
class Trajectory:
    """Full month-by-month path of one run together with its summary."""
    records: List[MonthRecord]
    summary: PathSummary

    def __len__(self) -> int:
        return len(self.records)

    def to_dataframe(self) -> pd.DataFrame:
        """Get the monthly records as a DataFrame indexed by month."""
        df = pd.DataFrame([asdict(r) for r in self.records],
                          columns=['month', 'value', 'invested', 'gains', 'drawdown'])
        return df.set_index('month')


def annualized_return(final_value: float, total_invested: float, years: float) -> float:
    """Annualized growth of invested capital.

    Zero invested capital has no meaningful growth rate and reports 0; a
    non-positive final value reports a total loss (-1).
    """
    if total_invested <= 0 or years <= 0:
        return 0.0
    if final_value <= 0:
        return -1.0
    return (final_value / total_invested) ** (1.0 / years) - 1.0


class PortfolioPathSimulator:
    """Simulates individual portfolio trajectories for one scenario.

    Example:
        >>> params = ScenarioParameters(60, 35, 5, expected_return=10, volatility=14)
        >>> simulator = PortfolioPathSimulator(params, monthly_investment=20000, years=20)
        >>> summary = simulator.run(np.random.default_rng(7))
        >>> print(f"Final value: {summary.final_value:,.0f}")
    """

    def __init__(self,
                 parameters: ScenarioParameters,
                 monthly_investment: float,
                 years: int,
                 return_generator: Optional[RandomReturnGenerator] = None):
        """Initialize the path simulator.

        Args:
            parameters: Scenario parameters supplying expected return and volatility
            monthly_investment: Contribution added at the end of every month (>= 0)
            years: Simulation horizon in years (>= 1)
            return_generator: Optional generator override; by default one is
                              built from the scenario's return and volatility

        Raises:
            ValidationError: If the contribution is negative or the horizon is
                             not a whole number of at least 1
        """
        if monthly_investment < 0:
            raise ValidationError(f"monthly_investment cannot be negative: {monthly_investment}")
        years = require_whole_number("years", years)
        if years < 1:
            raise ValidationError(f"Simulation horizon must be at least 1 year, got {years}")

        self.parameters = parameters
        self.monthly_investment = float(monthly_investment)
        self.years = years
        self.months = self.years * MONTHS_PER_YEAR
        self.return_generator = return_generator or RandomReturnGenerator(
            parameters.annual_return_fraction,
            parameters.annual_volatility_fraction,
        )

    @property
    def total_invested(self) -> float:
        return self.monthly_investment * self.months

    def run(self, rng: np.random.Generator) -> PathSummary:
        """Simulate one trajectory and keep only its terminal statistics.

        Args:
            rng: Generator owned by this run

        Returns:
            PathSummary for the run
        """
        returns = self.return_generator.sample_path(rng, self.months).tolist()
        contribution = self.monthly_investment

        value = 0.0
        peak = 0.0
        max_drawdown = 0.0
        for monthly_return in returns:
            value = value * (1.0 + monthly_return) + contribution
            if value > peak:
                peak = value
            elif peak > 0:
                drawdown = (peak - value) / peak
                if drawdown > max_drawdown:
                    max_drawdown = drawdown

        return self._summarize(value, max_drawdown)

    def simulate_trajectory(self, rng: np.random.Generator) -> Trajectory:
        """Simulate one trajectory keeping every monthly record.

        Consumes the random stream exactly like :meth:`run`, so the same
        generator state gives the same terminal statistics.
        """
        returns = self.return_generator.sample_path(rng, self.months).tolist()
        contribution = self.monthly_investment

        records = []
        value = 0.0
        peak = 0.0
        max_drawdown = 0.0
        for month, monthly_return in enumerate(returns):
            value = value * (1.0 + monthly_return) + contribution
            drawdown = 0.0
            if value > peak:
                peak = value
            elif peak > 0:
                drawdown = (peak - value) / peak
                max_drawdown = max(max_drawdown, drawdown)

            invested = contribution * (month + 1)
            records.append(MonthRecord(
                month=month,
                value=value,
                invested=invested,
                gains=value - invested,
                drawdown=drawdown,
            ))

        return Trajectory(records=records, summary=self._summarize(value, max_drawdown))

    def _summarize(self, final_value: float, max_drawdown: float) -> PathSummary:
        invested = self.total_invested
        return PathSummary(
            final_value=final_value,
            total_invested=invested,
            total_gains=final_value - invested,
            max_drawdown=max_drawdown,
            annualized_return=annualized_return(final_value, invested, self.years),
        )
