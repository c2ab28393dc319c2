# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Qualitative investor reaction to a crisis loss."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..scenario import RiskLevel
from .config import BehavioralRules

KEY_MESSAGES: Tuple[str, ...] = (
    "Market downturns are temporary and part of normal cycles",
    "Continuing investments during crisis often yields better long-term returns",
    "Focus on long-term goals rather than short-term volatility",
    "Emergency fund should be maintained separately from investments",
)

PANIC_SELL = "Panic Sell"
HOLD_STEADY = "Hold Steady"
BUY_MORE = "Buy More"


@dataclass(frozen=True)
class BehavioralConsiderations:
    likely_client_reaction: str
    recommended_action: str
    emotional_support_required: bool
    key_messages: List[str] = field(default_factory=lambda: list(KEY_MESSAGES))


class BehavioralAdvisor:
    """Maps a loss magnitude and risk tolerance to a likely reaction.

    Three bands, checked in order:
        loss > panic threshold or Low tolerance    -> "Panic Sell"
        loss > hold threshold or Medium tolerance  -> "Hold Steady"
        otherwise                                  -> "Buy More"
    """

    RECOMMENDATIONS = {
        PANIC_SELL: ("Hold steady, increase emergency fund, consider reducing "
                     "equity allocation by 10-15%", True),
        HOLD_STEADY: ("Continue SIPs, review asset allocation, prepare for volatility", True),
        BUY_MORE: ("Consider increasing SIP by 20-30% during crisis for better returns", False),
    }

    def __init__(self, rules: Optional[BehavioralRules] = None):
        self.rules = rules or BehavioralRules()

    def likely_reaction(self, loss_percentage: float, risk_tolerance: RiskLevel) -> str:
        loss = abs(loss_percentage)
        if loss > self.rules.panic_loss_threshold or risk_tolerance is RiskLevel.LOW:
            return PANIC_SELL
        if loss > self.rules.hold_loss_threshold or risk_tolerance is RiskLevel.MEDIUM:
            return HOLD_STEADY
        return BUY_MORE

    def advise(self, loss_percentage: float, risk_tolerance) -> BehavioralConsiderations:
        """Build the behavioral considerations for a crisis loss.

        Args:
            loss_percentage: Crisis loss in percent; the sign is ignored
            risk_tolerance: Scenario risk level (RiskLevel or its display value)

        Returns:
            BehavioralConsiderations with the reaction, action and key messages
        """
        reaction = self.likely_reaction(loss_percentage, RiskLevel.parse(risk_tolerance))
        action, needs_support = self.RECOMMENDATIONS[reaction]
        return BehavioralConsiderations(
            likely_client_reaction=reaction,
            recommended_action=action,
            emotional_support_required=needs_support,
        )
