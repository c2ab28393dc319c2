# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Deterministic historical-crisis stress test.

The stress test takes a scenario's median simulated value as the portfolio
value at the moment a crisis hits, applies the crisis crash split across asset
classes, and follows a single recovery trajectory over the crisis's nominal
recovery window. No randomness is involved.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..errors import ValidationError
from ..montecarlo.results import SimulationResult
from ..scenario import GoalDefinition, Scenario, ScenarioParameters
from .behavioral import BehavioralAdvisor, BehavioralConsiderations
from .config import StressTestConfig
from .crisis_catalog import CrisisProfile

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class ImmediateImpact:
    """Portfolio impact at the moment the crisis hits.

    ``portfolio_loss_percentage`` is reported as a positive magnitude.
    """
    portfolio_loss_percentage: float
    portfolio_loss_amount: int
    portfolio_value_after_crisis: int
    original_value: int


@dataclass(frozen=True)
class RecoveryPoint:
    month: int
    value: int
    recovery_percentage: float


@dataclass(frozen=True)
class RecoveryAnalysis:
    """Recovery trajectory over the crisis's recovery window.

    Attributes:
        time_to_recovery_months: Nominal recovery window of the crisis
        recovery_trajectory: One point per month of the window
        final_recovery_value: Value at the end of the window
        total_recovery_gain: Final value minus the post-crisis value
        breakeven_month: First month the value is back at the pre-crisis
                         level, None if not within the window
    """
    time_to_recovery_months: int
    recovery_trajectory: List[RecoveryPoint]
    final_recovery_value: int
    total_recovery_gain: int
    breakeven_month: Optional[int] = None


@dataclass(frozen=True)
class GoalImpact:
    """Effect of the crisis loss on one goal.

    ``delay_months`` is None when the scenario has no contribution that could
    make up the loss.
    """
    goal_name: str
    delay_months: Optional[int]
    additional_contribution_required: int
    severity: str


@dataclass(frozen=True)
class StressRiskMetrics:
    max_drawdown_from_peak: float
    time_to_breakeven: int
    additional_required_contribution: int


@dataclass(frozen=True)
class StressTestResult:
    """Outcome of one (scenario, crisis) stress test. Immutable."""
    scenario_id: str
    crisis_id: str
    crisis_name: str
    immediate_impact: ImmediateImpact
    recovery_analysis: RecoveryAnalysis
    goal_impacts: List[GoalImpact]
    behavioral_considerations: BehavioralConsiderations
    risk_metrics: StressRiskMetrics
    resilience_score: int = field(default=0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def recovery_dataframe(self) -> pd.DataFrame:
        """Get the recovery trajectory as a DataFrame indexed by month."""
        rows = [asdict(p) for p in self.recovery_analysis.recovery_trajectory]
        df = pd.DataFrame(rows, columns=['month', 'value', 'recovery_percentage'])
        return df.set_index('month')


class StressTestEngine:
    """Applies crisis profiles to scenarios.

    Example:
        >>> engine = StressTestEngine()
        >>> catalog = CrisisProfileCatalog.create_default()
        >>> result = engine.run(scenario, simulation_result, catalog.get('covid_2020'), goals)
        >>> print(result.immediate_impact.portfolio_value_after_crisis)
    """

    def __init__(self,
                 config: Optional[StressTestConfig] = None,
                 advisor: Optional[BehavioralAdvisor] = None):
        self.config = config or StressTestConfig()
        self.advisor = advisor or BehavioralAdvisor()

    def immediate_loss_percentage(self, parameters: ScenarioParameters, crash_percentage: float) -> float:
        """Allocation-weighted crash in percent (<= 0, floored at -100)."""
        cfg = self.config
        loss = (
            parameters.equity_allocation / 100.0 * crash_percentage * cfg.equity_multiplier
            + parameters.debt_allocation / 100.0 * crash_percentage * cfg.debt_multiplier
            + parameters.alternatives_allocation / 100.0 * crash_percentage * cfg.alternatives_multiplier
        )
        return max(-100.0, min(0.0, loss))

    def recovery_path(self,
                      start_value: float,
                      target_value: float,
                      recovery_months: int,
                      monthly_investment: float,
                      expected_return: float) -> List[RecoveryPoint]:
        """Month-by-month recovery with the expected return restored linearly.

        Month ``m`` earns ``r * min(1, m / R)`` before the contribution is
        added, where ``r`` is the scenario's expected monthly return.
        """
        monthly_return = expected_return / 100.0 / MONTHS_PER_YEAR
        gap = target_value - start_value

        path = []
        value = start_value
        for month in range(1, recovery_months + 1):
            factor = min(1.0, month / recovery_months)
            value = value * (1.0 + monthly_return * factor) + monthly_investment
            if gap > 0:
                recovered = min(100.0, (value - start_value) / gap * 100.0)
            else:
                recovered = 100.0
            path.append(RecoveryPoint(
                month=month,
                value=int(round(value)),
                recovery_percentage=round(recovered, 2),
            ))
        return path

    def goal_impacts(self,
                     goals: Sequence[GoalDefinition],
                     loss_amount: float,
                     monthly_investment: float) -> List[GoalImpact]:
        """Estimate the delay and extra contribution the loss costs each goal.

        The delay is the number of months of the contribution share assumed
        to fund the goal that it takes to replace the loss. The extra
        contribution spreads the loss over the goal's remaining horizon.
        """
        impacts = []
        for goal in goals:
            if loss_amount <= 0:
                impacts.append(GoalImpact(goal.name, 0, 0, "Low"))
                continue

            funding = monthly_investment * self.config.contribution_share(goal.kind.value)
            delay = math.ceil(loss_amount / funding) if funding > 0 else None
            impacts.append(GoalImpact(
                goal_name=goal.name,
                delay_months=delay,
                additional_contribution_required=int(round(loss_amount / goal.horizon_months)),
                severity=self._severity(delay),
            ))
        return impacts

    @staticmethod
    def _severity(delay_months: Optional[int]) -> str:
        if delay_months is None or delay_months > 24:
            return "High"
        if delay_months > 12:
            return "Medium"
        return "Low"

    def resilience_score(self, loss_percentage: float, recovery_months: int) -> int:
        """``100 - loss% * weight - recovery_months / divisor``, floored at 0."""
        cfg = self.config
        score = 100.0 - abs(loss_percentage) * cfg.resilience_loss_weight \
            - recovery_months / cfg.resilience_recovery_divisor
        return max(0, int(round(score)))

    def apply(self,
              scenario: Scenario,
              current_value: float,
              crisis: CrisisProfile,
              goals: Sequence[GoalDefinition] = ()) -> StressTestResult:
        """Stress a portfolio of ``current_value`` with a crisis.

        Args:
            scenario: Scenario whose allocation and contribution are stressed
            current_value: Portfolio value when the crisis hits (>= 0)
            crisis: Crisis profile to apply
            goals: Goals whose delay should be estimated

        Returns:
            StressTestResult for the (scenario, crisis) pair
        """
        if not math.isfinite(current_value) or current_value < 0:
            raise ValidationError(f"Current portfolio value must be a non-negative number, got {current_value}")

        params = scenario.parameters
        recovery_months = crisis.recovery_time_months
        fraction = self.config.recovery_target_fraction

        loss_pct = self.immediate_loss_percentage(params, crisis.market_crash_percentage)
        value_after = current_value * (1.0 + loss_pct / 100.0)
        loss_amount = current_value - value_after

        trajectory = self.recovery_path(value_after, current_value, recovery_months,
                                        scenario.monthly_investment, params.expected_return)
        final_value = trajectory[-1].value if trajectory else int(round(value_after))
        breakeven = next((p.month for p in trajectory if p.value >= current_value), None)

        loss_magnitude = round(abs(loss_pct), 2)
        additional = loss_amount / (recovery_months * fraction) if recovery_months > 0 else 0.0

        logger.debug("Stress test %s x %s: loss %.2f%%, recovery %d months",
                     scenario.id, crisis.id, loss_magnitude, recovery_months)

        return StressTestResult(
            scenario_id=scenario.id,
            crisis_id=crisis.id,
            crisis_name=crisis.name,
            immediate_impact=ImmediateImpact(
                portfolio_loss_percentage=loss_magnitude,
                portfolio_loss_amount=int(round(loss_amount)),
                portfolio_value_after_crisis=int(round(value_after)),
                original_value=int(round(current_value)),
            ),
            recovery_analysis=RecoveryAnalysis(
                time_to_recovery_months=recovery_months,
                recovery_trajectory=trajectory,
                final_recovery_value=final_value,
                total_recovery_gain=int(round(final_value - value_after)),
                breakeven_month=breakeven,
            ),
            goal_impacts=self.goal_impacts(goals, loss_amount, scenario.monthly_investment),
            behavioral_considerations=self.advisor.advise(loss_pct, params.risk_level),
            risk_metrics=StressRiskMetrics(
                max_drawdown_from_peak=loss_magnitude,
                time_to_breakeven=int(math.ceil(recovery_months * fraction)),
                additional_required_contribution=int(round(additional)),
            ),
            resilience_score=self.resilience_score(loss_magnitude, recovery_months),
        )

    def run(self,
            scenario: Scenario,
            simulation_result: SimulationResult,
            crisis: CrisisProfile,
            goals: Sequence[GoalDefinition] = ()) -> StressTestResult:
        """Stress a scenario at its median simulated value.

        Raises:
            ValidationError: If the simulation result belongs to another scenario
        """
        if simulation_result.scenario_id != scenario.id:
            raise ValidationError(
                f"Simulation result for '{simulation_result.scenario_id}' "
                f"does not belong to scenario '{scenario.id}'"
            )
        return self.apply(scenario, simulation_result.portfolio_value.p50, crisis, goals)
