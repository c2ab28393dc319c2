# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Tests for risk profiling and scenario generation.
"""

import unittest

from ..errors import ValidationError
from ..scenario import RiskLevel
from ..planning.risk_profile import QUESTIONS, RiskProfiler
from ..planning.scenario_generator import ScenarioGenerator


def answers(*options):
    return {q.id: option for q, option in zip(QUESTIONS, options)}


class TestRiskProfiler(unittest.TestCase):
    """Tests for RiskProfiler."""

    def setUp(self):
        self.profiler = RiskProfiler()

    def test_max_score(self):
        """Test that six questions score up to 60 points."""
        self.assertEqual(len(QUESTIONS), 6)
        self.assertEqual(self.profiler.max_score, 60)

    def test_lowest_answers_are_conservative(self):
        """Test that the most cautious answers give a conservative profile."""
        profile = self.profiler.assess(answers(1, 1, 1, 1, 1, 1))
        self.assertEqual(profile.total_score, 12)
        self.assertEqual(profile.risk_percentage, 20)
        self.assertEqual(profile.category, 'Conservative')
        self.assertEqual(profile.risk_level, RiskLevel.LOW)
        self.assertEqual(profile.recommended_allocation, {"equity": 30, "debt": 60, "alternatives": 10})

    def test_bands(self):
        """Test each band of the risk percentage."""
        moderate = self.profiler.assess(answers(2, 2, 2, 2, 2, 2))
        self.assertEqual(moderate.total_score, 25)
        self.assertEqual(moderate.risk_percentage, 42)
        self.assertEqual(moderate.category, 'Moderate')

        aggressive = self.profiler.assess(answers(3, 3, 3, 3, 3, 3))
        self.assertEqual(aggressive.total_score, 43)
        self.assertEqual(aggressive.category, 'Aggressive')
        self.assertEqual(aggressive.risk_level, RiskLevel.HIGH)

        very = self.profiler.assess(answers(4, 4, 4, 4, 4, 4))
        self.assertEqual(very.risk_percentage, 100)
        self.assertEqual(very.category, 'Very Aggressive')
        self.assertEqual(len(very.warnings), 4)

    def test_band_boundaries_are_inclusive(self):
        """Test that exactly 35% and 60% stay in the lower band."""
        at_35 = self.profiler.assess(answers(2, 2, 2, 2, 1, 1))
        self.assertEqual(at_35.total_score, 21)
        self.assertEqual(at_35.category, 'Conservative')

        at_60 = self.profiler.assess(answers(4, 3, 3, 2, 2, 2))
        self.assertEqual(at_60.total_score, 36)
        self.assertEqual(at_60.category, 'Moderate')

    def test_invalid_answers(self):
        """Test that incomplete or unknown answers are rejected."""
        full = answers(1, 1, 1, 1, 1, 1)
        with self.assertRaises(ValidationError):
            self.profiler.assess(dict(full, favourite_colour=1))
        with self.assertRaises(ValidationError):
            self.profiler.assess({k: v for k, v in full.items() if k != 'loss_tolerance'})
        with self.assertRaises(ValidationError):
            self.profiler.assess(dict(full, loss_tolerance=5))
        with self.assertRaises(ValidationError):
            self.profiler.assess(dict(full, loss_tolerance='abc'))

    def test_to_dict(self):
        """Test plain-dictionary output."""
        data = self.profiler.assess(answers(2, 2, 2, 2, 2, 2)).to_dict()
        self.assertEqual(data['risk_level'], 'Medium')
        self.assertEqual(data['scores']['loss_tolerance'], 5)


class TestScenarioGenerator(unittest.TestCase):
    """Tests for ScenarioGenerator."""

    def setUp(self):
        self.generator = ScenarioGenerator()

    def test_young_aggressive_client_gets_all_templates(self):
        """Test a 30-year-old with a high risk score."""
        generated = self.generator.generate(80, age=30, monthly_income=100000)
        by_id = {g.id: g for g in generated}
        self.assertEqual(list(by_id), ['conservative', 'moderate', 'aggressive', 'ultra_aggressive'])

        conservative = by_id['conservative'].scenario
        self.assertEqual(conservative.parameters.equity_allocation, 30)
        self.assertEqual(conservative.parameters.alternatives_allocation, 15)
        self.assertEqual(conservative.parameters.debt_allocation, 55)
        self.assertEqual(conservative.parameters.expected_return, 7)
        self.assertEqual(conservative.parameters.volatility, 10)
        self.assertEqual(conservative.monthly_investment, 15000)

        moderate = by_id['moderate'].scenario
        self.assertEqual(moderate.parameters.equity_allocation, 70)
        self.assertEqual(moderate.parameters.expected_return, 10)
        self.assertEqual(moderate.parameters.volatility, 14)
        self.assertEqual(moderate.monthly_investment, 20000)

        aggressive = by_id['aggressive'].scenario
        self.assertEqual(aggressive.parameters.equity_allocation, 85)
        self.assertEqual(aggressive.parameters.expected_return, 12)
        self.assertEqual(aggressive.parameters.volatility, 18)
        self.assertEqual(aggressive.monthly_investment, 25000)

        ultra = by_id['ultra_aggressive'].scenario
        self.assertEqual(ultra.parameters.equity_allocation, 95)
        self.assertEqual(ultra.parameters.risk_level, RiskLevel.VERY_HIGH)
        self.assertEqual(ultra.monthly_investment, 30000)

    def test_suitability_and_top_scenarios(self):
        """Test suitability scoring and top-three selection."""
        generated = self.generator.generate(80, age=30, monthly_income=100000)
        scores = {g.id: g.suitability_score for g in generated}
        self.assertEqual(scores['conservative'], 75)
        self.assertEqual(scores['moderate'], 87)
        self.assertEqual(scores['aggressive'], 87)
        self.assertEqual(scores['ultra_aggressive'], 78)

        top = self.generator.top_scenarios(generated)
        self.assertEqual([g.id for g in top], ['moderate', 'aggressive', 'ultra_aggressive'])

    def test_eligibility(self):
        """Test that riskier templates need a higher score and younger age."""
        low = self.generator.generate(20, age=30)
        self.assertEqual([g.id for g in low], ['conservative'])

        older = self.generator.generate(90, age=55)
        self.assertEqual([g.id for g in older], ['conservative', 'moderate'])

        mid = self.generator.generate(80, age=42)
        self.assertEqual([g.id for g in mid], ['conservative', 'moderate', 'aggressive'])

    def test_allocations_always_sum_to_100(self):
        """Test that every generated allocation is complete."""
        for age in range(18, 75, 3):
            for score in range(0, 101, 5):
                for g in self.generator.generate(score, age=age):
                    params = g.scenario.parameters
                    self.assertAlmostEqual(params.total_allocation, 100)
                    self.assertGreaterEqual(params.debt_allocation, 0)

    def test_defaults(self):
        """Test default age and income."""
        generated = self.generator.generate(50)
        conservative = generated[0].scenario
        self.assertEqual(conservative.monthly_investment, 8000)
        self.assertEqual(conservative.parameters.expected_return, 8)

    def test_projected_returns(self):
        """Test the projected-return ladder."""
        generated = self.generator.generate(50, age=30)
        ladder = {g.id: g.projected_returns for g in generated}['moderate']
        self.assertEqual(ladder['year1'], 8.0)
        self.assertEqual(ladder['year5'], 10.0)
        self.assertEqual(ladder['year10'], 11.0)

    def test_optimal_contribution(self):
        """Test contribution rounding to the nearest thousand."""
        self.assertEqual(ScenarioGenerator.optimal_contribution(50000, RiskLevel.MEDIUM), 10000)
        self.assertEqual(ScenarioGenerator.optimal_contribution(52600, RiskLevel.LOW), 8000)

    def test_invalid_inputs(self):
        """Test that out-of-range inputs are rejected."""
        with self.assertRaises(ValidationError):
            self.generator.generate(120, age=30)
        with self.assertRaises(ValidationError):
            self.generator.generate(50, age=-1)
        with self.assertRaises(ValidationError):
            self.generator.generate(50, age=30, monthly_income=-10)

    def test_to_dict(self):
        """Test plain-dictionary output."""
        data = self.generator.generate(50, age=30)[0].to_dict()
        self.assertEqual(data['id'], 'conservative')
        self.assertEqual(data['parameters']['risk_level'], 'Low')
        self.assertIn('suitability_score', data)


if __name__ == '__main__':
    unittest.main()
