# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Scenario and goal definitions supplied by the surrounding advisory system.

A scenario is one candidate investment strategy (asset allocation plus a
fixed monthly contribution). Goals are the client's target amounts that the
simulated outcomes are measured against. Both are validated on construction
so that no simulation work ever starts from malformed input.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ValidationError

# Allocation percentages may drift from 100 by rounding in upstream systems
ALLOCATION_TOLERANCE = 1.0


class RiskLevel(Enum):
    """Risk level attached to a scenario, also used as the client's risk tolerance."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @classmethod
    def parse(cls, value: Any) -> 'RiskLevel':
        """Parse a risk level from its display value or enum name.

        Accepts "Very High", "very_high", "VeryHigh" and the enum itself.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        normalized = text.replace("_", "").replace(" ", "").lower()
        for level in cls:
            if level.value.replace(" ", "").lower() == normalized:
                return level
        raise ValidationError(f"Unknown risk level: {value!r}")


class GoalKind(Enum):
    RETIREMENT = "retirement"
    MAJOR = "major"


def _require_finite(name: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def _require_int(name: str, value: Any) -> int:
    return int(_require_finite(name, value))


@dataclass(frozen=True)
class ScenarioParameters:
    """Asset allocation and market assumptions of one scenario.

    Attributes:
        equity_allocation: Equity share in percent (0-100)
        debt_allocation: Debt share in percent (0-100)
        alternatives_allocation: Alternatives share in percent (0-100)
        expected_return: Annual expected return in percent (e.g. 10 for 10%)
        volatility: Annual volatility in percent, must be >= 0
        max_drawdown: Target maximum drawdown in percent (informational)
        rebalancing_frequency: Rebalancing cadence (informational)
        risk_level: Risk level of the strategy
    """
    equity_allocation: float
    debt_allocation: float
    alternatives_allocation: float
    expected_return: float
    volatility: float
    max_drawdown: float = 0.0
    rebalancing_frequency: str = "Annual"
    risk_level: RiskLevel = RiskLevel.MEDIUM

    def __post_init__(self):
        for name in ("equity_allocation", "debt_allocation", "alternatives_allocation",
                     "expected_return", "volatility", "max_drawdown"):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))
        object.__setattr__(self, "risk_level", RiskLevel.parse(self.risk_level))

        for name in ("equity_allocation", "debt_allocation", "alternatives_allocation"):
            value = getattr(self, name)
            if value < 0 or value > 100:
                raise ValidationError(f"{name} must be between 0 and 100, got {value}")

        total = self.total_allocation
        if abs(total - 100.0) > ALLOCATION_TOLERANCE:
            raise ValidationError(f"Allocations must sum to 100, got {total}")

        if self.volatility < 0:
            raise ValidationError(f"Volatility cannot be negative: {self.volatility}")
        if self.expected_return <= -100:
            raise ValidationError(
                f"Expected return must be greater than -100%, got {self.expected_return}"
            )

    @property
    def total_allocation(self) -> float:
        return self.equity_allocation + self.debt_allocation + self.alternatives_allocation

    @property
    def annual_return_fraction(self) -> float:
        return self.expected_return / 100.0

    @property
    def annual_volatility_fraction(self) -> float:
        return self.volatility / 100.0

    @property
    def monthly_expected_return(self) -> float:
        return self.expected_return / 100.0 / 12.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScenarioParameters':
        """Build parameters from a snake_case or camelCase mapping."""
        if not isinstance(data, dict):
            raise ValidationError("Scenario parameters must be an object")
        return cls(
            equity_allocation=_pick(data, "equity_allocation", "equityAllocation"),
            debt_allocation=_pick(data, "debt_allocation", "debtAllocation"),
            alternatives_allocation=_pick(data, "alternatives_allocation",
                                          "alternativesAllocation", default=0.0),
            expected_return=_pick(data, "expected_return", "expectedReturn"),
            volatility=_pick(data, "volatility"),
            max_drawdown=_pick(data, "max_drawdown", "maxDrawdown", default=0.0),
            rebalancing_frequency=str(
                _pick(data, "rebalancing_frequency", "rebalancingFrequency", default="Annual")
            ),
            risk_level=_pick(data, "risk_level", "riskLevel", default=RiskLevel.MEDIUM),
        )


@dataclass(frozen=True)
class Scenario:
    """One candidate investment strategy under comparison."""
    id: str
    name: str
    parameters: ScenarioParameters
    monthly_investment: float = 0.0

    def __post_init__(self):
        if not str(self.id).strip():
            raise ValidationError("Scenario id is required")
        amount = _require_finite("monthly_investment", self.monthly_investment)
        if amount < 0:
            raise ValidationError(f"monthly_investment cannot be negative: {amount}")
        object.__setattr__(self, "monthly_investment", amount)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scenario':
        if not isinstance(data, dict):
            raise ValidationError("Scenario must be an object")
        scenario_id = str(_pick(data, "id", "scenario_id", "scenarioId"))
        return cls(
            id=scenario_id,
            name=str(data.get("name") or scenario_id),
            parameters=ScenarioParameters.from_dict(data.get("parameters", {})),
            monthly_investment=_pick(data, "monthly_investment", "monthlyInvestment", default=0.0),
        )


@dataclass(frozen=True)
class GoalDefinition:
    """A client goal the simulated outcomes are measured against.

    Either ``horizon_years`` or ``target_year`` must be given; when only the
    target year is known the horizon is derived from ``reference_year``
    (defaults to the current year) and floored at one year.
    """
    name: str
    target_amount: float
    horizon_years: Optional[int] = None
    target_year: Optional[int] = None
    kind: GoalKind = GoalKind.MAJOR
    reference_year: Optional[int] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        target = _require_finite("target_amount", self.target_amount)
        if target <= 0:
            raise ValidationError(f"Goal '{self.name}' target_amount must be positive, got {target}")
        object.__setattr__(self, "target_amount", target)

        if not isinstance(self.kind, GoalKind):
            try:
                object.__setattr__(self, "kind", GoalKind(str(self.kind).lower()))
            except ValueError as e:
                raise ValidationError(f"Unknown goal kind: {self.kind!r}") from e

        horizon = self.horizon_years
        if horizon is None:
            if self.target_year is None:
                raise ValidationError(
                    f"Goal '{self.name}' needs either horizon_years or target_year"
                )
            reference = self.reference_year or date.today().year
            horizon = max(1, _require_int("target_year", self.target_year) - reference)
        horizon = _require_int("horizon_years", horizon)
        if horizon < 1:
            raise ValidationError(f"Goal '{self.name}' horizon must be at least 1 year, got {horizon}")
        object.__setattr__(self, "horizon_years", horizon)

    @property
    def horizon_months(self) -> int:
        return self.horizon_years * 12

    @classmethod
    def from_dict(cls, data: Dict[str, Any], reference_year: Optional[int] = None) -> 'GoalDefinition':
        if not isinstance(data, dict):
            raise ValidationError("Goal must be an object")
        horizon = _pick(data, "horizon_years", "years", "horizonYears", default=None)
        target_year = _pick(data, "target_year", "targetYear", default=None)
        return cls(
            name=str(_pick(data, "name", "goal_name", "goalName", default="Goal")),
            target_amount=_pick(data, "target_amount", "targetAmount"),
            horizon_years=_require_int("horizon_years", horizon) if horizon is not None else None,
            target_year=_require_int("target_year", target_year) if target_year is not None else None,
            kind=data.get("kind", GoalKind.MAJOR),
            reference_year=reference_year,
        )


def simulation_horizon(age: Optional[int], default_age: int = 25) -> int:
    """Years to simulate for a client: ``min(30, max(10, 65 - age))``."""
    client_age = default_age if age is None else _require_int("age", age)
    if client_age < 0:
        raise ValidationError(f"Client age cannot be negative: {client_age}")
    return min(30, max(10, 65 - client_age))


def goals_from_client(client: Dict[str, Any], reference_year: Optional[int] = None) -> List[GoalDefinition]:
    """Build the goal list from the surrounding system's client record.

    The retirement goal is always present (defaults: retire at 60 with a
    corpus of 10,000,000); major goals, child education and home purchase
    are added when the record carries them.
    """
    reference = reference_year or date.today().year
    age = _require_int("age", client.get("age") or 25)
    retirement = client.get("retirementPlanning") or client.get("retirement_planning") or {}
    retirement_age = _require_int(
        "retirement_age", _pick(retirement, "retirement_age", "retirementAge", default=60) or 60)
    corpus = _pick(retirement, "target_retirement_corpus", "targetRetirementCorpus",
                   default=10_000_000) or 10_000_000

    goals = [GoalDefinition(
        name="Retirement Planning",
        target_amount=corpus,
        horizon_years=max(1, retirement_age - age),
        kind=GoalKind.RETIREMENT,
    )]

    for goal in client.get("majorGoals") or client.get("major_goals") or []:
        goals.append(GoalDefinition.from_dict(goal, reference_year=reference))

    enhanced = client.get("enhancedFinancialGoals") or client.get("enhanced_financial_goals") or {}
    for key, name in (("childEducation", "Child Education"), ("homePurchase", "Home Purchase")):
        entry = enhanced.get(key) or {}
        if entry.get("isApplicable") or entry.get("is_applicable"):
            goals.append(GoalDefinition(
                name=name,
                target_amount=_pick(entry, "target_amount", "targetAmount"),
                target_year=_require_int("target_year", _pick(entry, "target_year", "targetYear")),
                reference_year=reference,
            ))

    return goals


_MISSING = object()


def _pick(data: Dict[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    if default is _MISSING:
        raise ValidationError(f"Missing required field: {keys[0]}")
    return default
