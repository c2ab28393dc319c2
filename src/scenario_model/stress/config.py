# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Configuration for deterministic crisis stress tests."""

from dataclasses import dataclass, field
from typing import Dict

from ..errors import ValidationError


def _default_contribution_shares() -> Dict[str, float]:
    return {"retirement": 1.0, "major": 0.5}


@dataclass
class StressTestConfig:
    """Calibration constants of the stress test.

    Attributes:
        equity_multiplier: Share of the headline crash applied to equity. Default 1.2.
        debt_multiplier: Share of the headline crash applied to debt. Default 0.3.
        alternatives_multiplier: Share of the headline crash applied to alternatives. Default 0.6.
        recovery_target_fraction: Fraction of the recovery window in which the
            additional contribution should recoup the loss. Default 0.8.
        goal_contribution_shares: Fraction of the monthly contribution assumed
            to fund each goal kind when estimating goal delays.
        resilience_loss_weight: Resilience points lost per percent of crash loss.
        resilience_recovery_divisor: Recovery months costing one resilience point.
    """
    equity_multiplier: float = 1.2
    debt_multiplier: float = 0.3
    alternatives_multiplier: float = 0.6
    recovery_target_fraction: float = 0.8
    goal_contribution_shares: Dict[str, float] = field(default_factory=_default_contribution_shares)
    resilience_loss_weight: float = 2.0
    resilience_recovery_divisor: float = 6.0

    def __post_init__(self):
        for name in ("equity_multiplier", "debt_multiplier", "alternatives_multiplier"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} cannot be negative")
        if not 0 < self.recovery_target_fraction <= 1:
            raise ValidationError("recovery_target_fraction must be in (0, 1]")
        for kind, share in self.goal_contribution_shares.items():
            if not 0 < share <= 1:
                raise ValidationError(f"Contribution share for '{kind}' goals must be in (0, 1]")
        if self.resilience_recovery_divisor <= 0:
            raise ValidationError("resilience_recovery_divisor must be positive")

    def contribution_share(self, kind: str) -> float:
        return self.goal_contribution_shares.get(kind, 1.0)


@dataclass
class BehavioralRules:
    """Loss thresholds (percent) separating the three behavioral bands."""
    panic_loss_threshold: float = 25.0
    hold_loss_threshold: float = 15.0

    def __post_init__(self):
        if self.hold_loss_threshold < 0:
            raise ValidationError("hold_loss_threshold cannot be negative")
        if self.panic_loss_threshold < self.hold_loss_threshold:
            raise ValidationError("panic_loss_threshold must be >= hold_loss_threshold")
