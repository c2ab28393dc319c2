# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Planning helpers that produce the scenarios under comparison.

Risk profiling turns questionnaire answers into a risk score, and the
scenario generator turns that score and the client's age into candidate
investment strategies.
"""

from .risk_profile import QUESTIONS, RISK_BANDS, RiskProfile, RiskProfiler, RiskQuestion
from .scenario_generator import GeneratedScenario, ScenarioGenerator

__all__ = [
    'QUESTIONS',
    'RISK_BANDS',
    'RiskProfile',
    'RiskProfiler',
    'RiskQuestion',
    'GeneratedScenario',
    'ScenarioGenerator',
]
