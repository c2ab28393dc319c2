# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Candidate scenario generation from a client's age and risk score.

Up to four strategy templates (conservative, moderate, aggressive, ultra
aggressive) are instantiated with age and score dependent allocations, a
monthly contribution sized from income, and a suitability score used to
pick the strategies worth comparing.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..errors import ValidationError
from ..scenario import RiskLevel, Scenario, ScenarioParameters

DEFAULT_AGE = 25
DEFAULT_MONTHLY_INCOME = 50000
RETIREMENT_AGE = 60

CONTRIBUTION_RATES = {
    RiskLevel.LOW: 0.15,
    RiskLevel.MEDIUM: 0.20,
    RiskLevel.HIGH: 0.25,
    RiskLevel.VERY_HIGH: 0.30,
}

# Risk score each risk level is aimed at
RISK_TARGETS = {
    RiskLevel.LOW: 25,
    RiskLevel.MEDIUM: 50,
    RiskLevel.HIGH: 75,
    RiskLevel.VERY_HIGH: 90,
}

PROJECTION_FACTORS = (
    ("year1", 0.8),
    ("year3", 0.9),
    ("year5", 1.0),
    ("year10", 1.1),
    ("year15", 1.05),
    ("year20", 1.0),
)


@dataclass(frozen=True)
class GeneratedScenario:
    """A generated strategy together with its ranking data."""
    scenario: Scenario
    description: str
    projected_returns: Dict[str, float] = field(default_factory=dict)
    suitability_score: int = 0

    @property
    def id(self) -> str:
        return self.scenario.id

    def to_dict(self) -> Dict:
        params = self.scenario.parameters
        return {
            "id": self.scenario.id,
            "name": self.scenario.name,
            "description": self.description,
            "monthly_investment": int(self.scenario.monthly_investment),
            "parameters": {
                "equity_allocation": params.equity_allocation,
                "debt_allocation": params.debt_allocation,
                "alternatives_allocation": params.alternatives_allocation,
                "expected_return": params.expected_return,
                "volatility": params.volatility,
                "max_drawdown": params.max_drawdown,
                "rebalancing_frequency": params.rebalancing_frequency,
                "risk_level": params.risk_level.value,
            },
            "projected_returns": dict(self.projected_returns),
            "suitability_score": self.suitability_score,
        }


def _complete_allocation(equity: float, alternatives: float) -> Dict[str, float]:
    """Fill debt with whatever equity and alternatives leave of 100%."""
    alternatives = min(alternatives, 100 - equity)
    return {
        "equity_allocation": equity,
        "debt_allocation": 100 - equity - alternatives,
        "alternatives_allocation": alternatives,
    }


class ScenarioGenerator:
    """Builds candidate scenarios for a client.

    Example:
        >>> generator = ScenarioGenerator()
        >>> candidates = generator.generate(age=30, risk_percentage=65, monthly_income=80000)
        >>> best = generator.top_scenarios(candidates)
        >>> print([c.id for c in best])
    """

    def conservative(self, age: int, score: float, horizon: int) -> ScenarioParameters:
        equity = min(40, max(20, 60 - age))
        alternatives = max(5, min(15, 100 - (60 - age) - (age + 20)))
        return ScenarioParameters(
            **_complete_allocation(equity, alternatives),
            expected_return=7 + (1 if age < 30 else 0),
            volatility=8 + (2 if age < 40 else 0),
            max_drawdown=12,
            rebalancing_frequency="Quarterly",
            risk_level=RiskLevel.LOW,
        )

    def moderate(self, age: int, score: float, horizon: int) -> ScenarioParameters:
        equity = min(70, max(40, 100 - age))
        alternatives = max(5, 100 - equity - (90 - equity))
        return ScenarioParameters(
            **_complete_allocation(equity, alternatives),
            expected_return=9 + (1 if score > 40 else 0),
            volatility=12 + (2 if horizon > 10 else 0),
            max_drawdown=18,
            rebalancing_frequency="Semi-Annual",
            risk_level=RiskLevel.MEDIUM,
        )

    def aggressive(self, age: int, score: float, horizon: int) -> ScenarioParameters:
        equity = min(85, max(60, 120 - age))
        debt = max(10, 25 - (equity - 60) / 5)
        alternatives = max(5, 100 - equity - debt)
        return ScenarioParameters(
            **_complete_allocation(equity, alternatives),
            expected_return=11 + (1 if horizon > 15 else 0),
            volatility=16 + (2 if score > 70 else 0),
            max_drawdown=25,
            rebalancing_frequency="Annual",
            risk_level=RiskLevel.HIGH,
        )

    def ultra_aggressive(self, age: int, score: float, horizon: int) -> ScenarioParameters:
        equity = min(95, max(80, 140 - age))
        return ScenarioParameters(
            **_complete_allocation(equity, 15),
            expected_return=13 + (1 if horizon > 20 else 0),
            volatility=20 + (3 if score > 85 else 0),
            max_drawdown=35,
            rebalancing_frequency="Annual",
            risk_level=RiskLevel.VERY_HIGH,
        )

    @staticmethod
    def optimal_contribution(monthly_income: float, risk_level: RiskLevel) -> int:
        """Share of income by risk level, rounded to the nearest 1,000."""
        return int(round(monthly_income * CONTRIBUTION_RATES[risk_level] / 1000)) * 1000

    @staticmethod
    def projected_returns(parameters: ScenarioParameters) -> Dict[str, float]:
        return {label: round(parameters.expected_return * factor, 2)
                for label, factor in PROJECTION_FACTORS}

    @staticmethod
    def suitability_score(parameters: ScenarioParameters, risk_percentage: float, age: int) -> int:
        """Weighted fit of a strategy to the client.

        Risk alignment 40%, age appropriateness 30%, return per unit of
        volatility 20%, closeness to a 60% equity split 10%.
        """
        risk_alignment = 100 - abs(risk_percentage - RISK_TARGETS[parameters.risk_level])

        equity_cap = 100 - age
        if parameters.equity_allocation <= equity_cap:
            age_score = 100.0
        else:
            age_score = max(0.0, 100 - (parameters.equity_allocation - equity_cap) * 2)

        if parameters.volatility > 0:
            return_score = min(100.0, parameters.expected_return / parameters.volatility * 100 * 10)
        else:
            return_score = 100.0

        diversification = 100 - abs(parameters.equity_allocation - 60)

        score = risk_alignment * 0.4 + age_score * 0.3 + return_score * 0.2 + diversification * 0.1
        # Halves round up
        return int(math.floor(score + 0.5))

    def generate(self,
                 risk_percentage: float,
                 age: Optional[int] = None,
                 monthly_income: Optional[float] = None) -> List[GeneratedScenario]:
        """Generate every strategy template the client qualifies for.

        Args:
            risk_percentage: Risk score from the questionnaire (0-100)
            age: Client age; defaults to 25
            monthly_income: Client monthly income; defaults to 50,000

        Returns:
            Generated scenarios in template order
        """
        age = DEFAULT_AGE if age is None else int(age)
        income = DEFAULT_MONTHLY_INCOME if monthly_income is None else float(monthly_income)
        if age < 0:
            raise ValidationError(f"Client age cannot be negative: {age}")
        if not 0 <= risk_percentage <= 100:
            raise ValidationError(f"risk_percentage must be between 0 and 100, got {risk_percentage}")
        if income < 0:
            raise ValidationError(f"monthly_income cannot be negative: {income}")

        horizon = max(1, RETIREMENT_AGE - age)
        templates = [
            ("conservative", "Conservative Strategy",
             "Capital preservation with steady, predictable returns",
             True, self.conservative),
            ("moderate", "Moderate Growth",
             "Balanced approach with moderate risk for steady growth",
             risk_percentage >= 25, self.moderate),
            ("aggressive", "Aggressive Growth",
             "High growth potential with higher volatility",
             risk_percentage >= 50 and age < 50, self.aggressive),
            ("ultra_aggressive", "Ultra Aggressive",
             "Maximum growth focus for very long-term wealth building",
             risk_percentage >= 75 and age < 40 and horizon > 15, self.ultra_aggressive),
        ]

        generated = []
        for scenario_id, name, description, eligible, build in templates:
            if not eligible:
                continue
            params = build(age, risk_percentage, horizon)
            generated.append(GeneratedScenario(
                scenario=Scenario(
                    id=scenario_id,
                    name=name,
                    parameters=params,
                    monthly_investment=self.optimal_contribution(income, params.risk_level),
                ),
                description=description,
                projected_returns=self.projected_returns(params),
                suitability_score=self.suitability_score(params, risk_percentage, age),
            ))
        return generated

    @staticmethod
    def top_scenarios(generated: Sequence[GeneratedScenario], n: int = 3) -> List[GeneratedScenario]:
        """Best ``n`` scenarios by suitability; ties keep template order."""
        return sorted(generated, key=lambda g: g.suitability_score, reverse=True)[:n]
