# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Deterministic stress testing against historical crises.

This module applies named historical market shocks to a scenario's simulated
portfolio value and reports the immediate loss, the recovery trajectory, the
effect on client goals and the likely investor reaction.
"""

from .config import StressTestConfig, BehavioralRules
from .crisis_catalog import CATALOG_VERSION, CrisisProfile, CrisisProfileCatalog
from .behavioral import BehavioralAdvisor, BehavioralConsiderations, KEY_MESSAGES
from .engine import (
    StressTestEngine,
    StressTestResult,
    ImmediateImpact,
    RecoveryPoint,
    RecoveryAnalysis,
    GoalImpact,
    StressRiskMetrics,
)

__all__ = [
    'StressTestConfig',
    'BehavioralRules',
    'CATALOG_VERSION',
    'CrisisProfile',
    'CrisisProfileCatalog',
    'BehavioralAdvisor',
    'BehavioralConsiderations',
    'KEY_MESSAGES',
    'StressTestEngine',
    'StressTestResult',
    'ImmediateImpact',
    'RecoveryPoint',
    'RecoveryAnalysis',
    'GoalImpact',
    'StressRiskMetrics',
]
