# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Goal achievement analysis over a simulation batch.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..scenario import GoalDefinition, Scenario
from .results import SimulationBatch, percentile_of_sorted

# Monthly rates closer to zero than this use the linear (no growth) solution
_ZERO_RATE_EPSILON = 1e-12


@dataclass(frozen=True)
class GoalOutcome:
    """Per-goal outcome of a scenario.

    ``time_to_goal_months`` / ``time_to_goal_years`` are ``None`` when the
    goal can never be reached with the scenario's contribution and expected
    return.
    """
    goal_name: str
    target_amount: int
    success_rate: float
    average_shortfall: int
    median_achievement: int
    time_to_goal_months: Optional[int]
    time_to_goal_years: Optional[int]

    @property
    def reachable(self) -> bool:
        return self.time_to_goal_months is not None


def months_to_target(target_amount: float,
                     monthly_investment: float,
                     monthly_return: float) -> Optional[float]:
    """Months of contributions needed for an annuity to grow to ``target_amount``.

    Solves ``FV = P * ((1 + r)^n - 1) / r`` for ``n``:
    ``n = ln(1 + FV * r / P) / ln(1 + r)``.

    Args:
        target_amount: Amount to reach
        monthly_investment: Contribution per month
        monthly_return: Expected return per month as decimal

    Returns:
        Fractional number of months, or None if the target is unreachable
        (no contribution, or a negative return that caps the annuity below target)
    """
    if target_amount <= 0:
        return 0.0
    if monthly_investment <= 0:
        return None
    if abs(monthly_return) < _ZERO_RATE_EPSILON:
        return target_amount / monthly_investment
    if monthly_return <= -1.0:
        return None

    growth = 1.0 + target_amount * monthly_return / monthly_investment
    if growth <= 0:
        return None
    return math.log(growth) / math.log1p(monthly_return)


class GoalAnalyzer:
    """Measures a scenario's batch of outcomes against the client's goals.

    Example:
        >>> analyzer = GoalAnalyzer()
        >>> outcomes = analyzer.analyze(batch, scenario, goals)
        >>> print(outcomes[0].success_rate, outcomes[0].time_to_goal_years)
    """

    def analyze(self,
                batch: SimulationBatch,
                scenario: Scenario,
                goals: Sequence[GoalDefinition],
                median_value: Optional[float] = None) -> List[GoalOutcome]:
        """Compute success probability, shortfall and time to goal for each goal.

        Args:
            batch: Terminal summaries of the scenario's runs
            scenario: Scenario that produced the batch
            goals: Client goals to evaluate
            median_value: Median final value from the aggregator; computed
                          from the batch when omitted

        Returns:
            One GoalOutcome per goal, in input order
        """
        finals = batch.final_values
        count = batch.num_simulations
        if median_value is None:
            median_value = percentile_of_sorted(batch.sorted_final_values(), 50)

        outcomes = []
        for goal in goals:
            target = goal.target_amount
            reached = int(np.count_nonzero(finals >= target))
            short = finals[finals < target]
            average_shortfall = float(np.mean(target - short)) if short.size else 0.0

            months = self.time_to_goal(goal, scenario)
            outcomes.append(GoalOutcome(
                goal_name=goal.name,
                target_amount=int(round(target)),
                success_rate=round(reached / count * 100.0, 2),
                average_shortfall=int(round(average_shortfall)),
                median_achievement=int(round(median_value)),
                time_to_goal_months=months,
                time_to_goal_years=math.ceil(months / 12) if months is not None else None,
            ))
        return outcomes

    @staticmethod
    def time_to_goal(goal: GoalDefinition, scenario: Scenario) -> Optional[int]:
        """Whole months until the goal is funded at the expected return, or None."""
        months = months_to_target(
            goal.target_amount,
            scenario.monthly_investment,
            scenario.parameters.monthly_expected_return,
        )
        if months is None:
            return None
        return int(math.ceil(months - 1e-9))
