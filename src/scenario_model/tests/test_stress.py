# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Tests for the crisis stress test module.
"""

import json
import math
import unittest

from ..errors import UnknownCrisisError, ValidationError
from ..scenario import GoalDefinition, GoalKind, RiskLevel, Scenario, ScenarioParameters
from ..montecarlo.config import MonteCarloConfig
from ..montecarlo.results import ResultAggregator
from ..montecarlo.simulator import MonteCarloEngine
from ..stress.behavioral import KEY_MESSAGES, BehavioralAdvisor
from ..stress.config import BehavioralRules, StressTestConfig
from ..stress.crisis_catalog import CATALOG_VERSION, CrisisProfile, CrisisProfileCatalog
from ..stress.engine import StressTestEngine


def make_scenario(allocation=(80, 15, 5), expected_return=12, volatility=18,
                  monthly_investment=20000, risk_level=RiskLevel.HIGH, scenario_id="aggressive"):
    params = ScenarioParameters(
        equity_allocation=allocation[0],
        debt_allocation=allocation[1],
        alternatives_allocation=allocation[2],
        expected_return=expected_return,
        volatility=volatility,
        risk_level=risk_level,
    )
    return Scenario(id=scenario_id, name=scenario_id.title(), parameters=params,
                    monthly_investment=monthly_investment)


def make_crisis(crash=-25, recovery=18, crisis_id="test_crisis"):
    return CrisisProfile(id=crisis_id, name="Test Crisis", market_crash_percentage=crash,
                         recovery_time_months=recovery)


class TestCrisisProfileCatalog(unittest.TestCase):
    """Tests for CrisisProfileCatalog."""

    def test_create_default(self):
        """Test the built-in historical crises."""
        catalog = CrisisProfileCatalog.create_default()
        self.assertEqual(catalog.ids, ['covid_2020', 'financial_crisis_2008',
                                       'high_inflation_1980s', 'dot_com_bubble_2000'])
        self.assertEqual(catalog.version, CATALOG_VERSION)
        self.assertEqual(len(catalog), 4)

        covid = catalog.get('covid_2020')
        self.assertEqual(covid.market_crash_percentage, -25)
        self.assertEqual(covid.recovery_time_months, 18)
        self.assertEqual(covid.sector_impacts['travel'], -50)

        gfc = catalog.get('financial_crisis_2008')
        self.assertEqual(gfc.market_crash_percentage, -40)
        self.assertEqual(gfc.recovery_time_months, 36)
        self.assertEqual(catalog.get('high_inflation_1980s').recovery_time_months, 42)
        self.assertEqual(catalog.get('dot_com_bubble_2000').market_crash_percentage, -30)

    def test_unknown_crisis_raises(self):
        """Test that looking up a missing id raises a lookup error."""
        catalog = CrisisProfileCatalog.create_default()
        with self.assertRaises(UnknownCrisisError):
            catalog.get('tulip_mania_1637')
        with self.assertRaises(LookupError):
            catalog.get('')
        self.assertNotIn('tulip_mania_1637', catalog)

    def test_from_records_list(self):
        """Test loading crises from a list of camelCase records."""
        catalog = CrisisProfileCatalog.from_records([
            {"id": "flash_crash", "name": "Flash Crash", "marketCrashPercentage": -9,
             "recoveryTimeMonths": 1, "sectorImpacts": {"technology": -12}},
        ])
        crisis = catalog.get('flash_crash')
        self.assertEqual(crisis.market_crash_percentage, -9)
        self.assertEqual(crisis.sector_impacts, {"technology": -12})

    def test_from_records_json_document(self):
        """Test loading a versioned JSON document keyed by crisis id."""
        document = json.dumps({
            "version": "2030.2",
            "crises": {
                "taper_tantrum": {"name": "Taper Tantrum", "market_crash_percentage": -6,
                                  "recovery_time_months": 4, "inflation_spike": 0.5},
            },
        })
        catalog = CrisisProfileCatalog.from_records(document)
        self.assertEqual(catalog.version, "2030.2")
        self.assertEqual(catalog.get('taper_tantrum').inflation_spike, 0.5)

    def test_invalid_records_raise(self):
        """Test that malformed crisis data is rejected."""
        with self.assertRaises(ValidationError):
            CrisisProfileCatalog.from_records("not json")
        with self.assertRaises(ValidationError):
            CrisisProfileCatalog.from_records([{"id": "boom", "market_crash_percentage": 10,
                                                "recovery_time_months": 3}])
        with self.assertRaises(ValidationError):
            CrisisProfileCatalog.from_records([{"id": "partial", "market_crash_percentage": -10}])
        with self.assertRaises(ValidationError):
            CrisisProfileCatalog([make_crisis(), make_crisis()])
        with self.assertRaises(ValidationError):
            make_crisis(recovery=-1)

    def test_malformed_numbers_raise_validation_error(self):
        """Test that non-numeric crisis fields are rejected as invalid data."""
        bad_records = [
            {"id": "a", "market_crash_percentage": "steep", "recovery_time_months": 3},
            {"id": "b", "market_crash_percentage": None, "recovery_time_months": 3},
            {"id": "c", "market_crash_percentage": -10, "recovery_time_months": "soon"},
            {"id": "d", "market_crash_percentage": -10, "recovery_time_months": 2.5},
            {"id": "e", "market_crash_percentage": -10, "recovery_time_months": [3]},
            {"id": "f", "market_crash_percentage": -10, "recovery_time_months": 3,
             "sector_impacts": {"energy": "down"}},
            {"id": "g", "market_crash_percentage": -10, "recovery_time_months": 3,
             "sector_impacts": [1, 2]},
        ]
        for record in bad_records:
            with self.assertRaises(ValidationError, msg=record["id"]):
                CrisisProfileCatalog.from_records([record])

    def test_unhashable_id_is_unknown(self):
        """Test that a non-string lookup key is reported as an unknown crisis."""
        catalog = CrisisProfileCatalog.create_default()
        with self.assertRaises(UnknownCrisisError):
            catalog.get(["covid_2020"])


class TestBehavioralAdvisor(unittest.TestCase):
    """Tests for BehavioralAdvisor."""

    def test_bands(self):
        """Test the three reaction bands."""
        advisor = BehavioralAdvisor()
        self.assertEqual(advisor.advise(30, RiskLevel.VERY_HIGH).likely_client_reaction, 'Panic Sell')
        self.assertEqual(advisor.advise(5, RiskLevel.LOW).likely_client_reaction, 'Panic Sell')
        self.assertEqual(advisor.advise(20, RiskLevel.HIGH).likely_client_reaction, 'Hold Steady')
        self.assertEqual(advisor.advise(10, RiskLevel.MEDIUM).likely_client_reaction, 'Hold Steady')
        self.assertEqual(advisor.advise(10, RiskLevel.HIGH).likely_client_reaction, 'Buy More')

    def test_sign_of_loss_ignored(self):
        """Test that negative losses are treated by magnitude."""
        advisor = BehavioralAdvisor()
        self.assertEqual(advisor.advise(-26, 'High').likely_client_reaction, 'Panic Sell')

    def test_support_and_messages(self):
        """Test emotional support flag and key messages."""
        advisor = BehavioralAdvisor()
        panic = advisor.advise(40, RiskLevel.HIGH)
        calm = advisor.advise(3, RiskLevel.HIGH)
        self.assertTrue(panic.emotional_support_required)
        self.assertFalse(calm.emotional_support_required)
        self.assertEqual(calm.key_messages, list(KEY_MESSAGES))
        self.assertEqual(len(calm.key_messages), 4)

    def test_custom_rules(self):
        """Test configurable thresholds."""
        advisor = BehavioralAdvisor(BehavioralRules(panic_loss_threshold=10, hold_loss_threshold=5))
        self.assertEqual(advisor.advise(12, RiskLevel.HIGH).likely_client_reaction, 'Panic Sell')
        with self.assertRaises(ValidationError):
            BehavioralRules(panic_loss_threshold=5, hold_loss_threshold=10)


class TestStressTestEngine(unittest.TestCase):
    """Tests for StressTestEngine."""

    def setUp(self):
        self.engine = StressTestEngine()
        self.goals = [
            GoalDefinition("Retirement Planning", 50_000_000, horizon_years=20, kind=GoalKind.RETIREMENT),
            GoalDefinition("Home Purchase", 5_000_000, horizon_years=5),
        ]

    def test_example_crisis(self):
        """Test an 80% equity portfolio of 10,000,000 in a -25% crash."""
        result = self.engine.apply(make_scenario(), 10_000_000, make_crisis(), self.goals)
        impact = result.immediate_impact

        # 0.8*(-25*1.2) + 0.15*(-25*0.3) + 0.05*(-25*0.6)
        self.assertAlmostEqual(impact.portfolio_loss_percentage, 25.88, places=2)
        self.assertGreater(impact.portfolio_loss_percentage, 24)
        self.assertLess(impact.portfolio_loss_percentage, 26)
        self.assertEqual(impact.portfolio_value_after_crisis, 7_412_500)
        self.assertEqual(impact.portfolio_loss_amount, 2_587_500)
        self.assertEqual(impact.original_value, 10_000_000)

        self.assertEqual(result.behavioral_considerations.likely_client_reaction, 'Panic Sell')
        self.assertEqual(result.risk_metrics.max_drawdown_from_peak, impact.portfolio_loss_percentage)
        self.assertEqual(result.risk_metrics.time_to_breakeven, 15)
        self.assertAlmostEqual(result.risk_metrics.additional_required_contribution,
                               2_587_500 / (18 * 0.8), delta=1)
        self.assertEqual(result.resilience_score, 45)

    def test_value_after_never_exceeds_original(self):
        """Test that a crisis never increases portfolio value."""
        catalog = CrisisProfileCatalog.create_default()
        allocations = [(100, 0, 0), (0, 100, 0), (0, 0, 100), (60, 35, 5), (20, 65, 15)]
        for allocation in allocations:
            for crisis in catalog:
                for value in (0, 1, 123_456.78, 10_000_000):
                    result = self.engine.apply(make_scenario(allocation=allocation), value, crisis)
                    impact = result.immediate_impact
                    self.assertLessEqual(impact.portfolio_value_after_crisis, impact.original_value)
                    self.assertGreaterEqual(impact.portfolio_loss_amount, 0)

    def test_loss_floored_at_total(self):
        """Test that amplified crashes never lose more than everything."""
        engine = StressTestEngine(StressTestConfig(equity_multiplier=3.0))
        result = engine.apply(make_scenario(allocation=(100, 0, 0)), 1_000_000,
                              make_crisis(crash=-50))
        self.assertEqual(result.immediate_impact.portfolio_loss_percentage, 100.0)
        self.assertEqual(result.immediate_impact.portfolio_value_after_crisis, 0)

    def test_recovery_trajectory(self):
        """Test the month-by-month recovery path."""
        result = self.engine.apply(make_scenario(), 10_000_000, make_crisis(), self.goals)
        recovery = result.recovery_analysis
        path = recovery.recovery_trajectory

        self.assertEqual(recovery.time_to_recovery_months, 18)
        self.assertEqual(len(path), 18)
        self.assertEqual([p.month for p in path], list(range(1, 19)))
        self.assertTrue(all(b.value > a.value for a, b in zip(path, path[1:])))
        self.assertTrue(all(p.recovery_percentage <= 100 for p in path))
        self.assertEqual(recovery.final_recovery_value, path[-1].value)
        self.assertEqual(recovery.total_recovery_gain, path[-1].value - 7_412_500)

        df = result.recovery_dataframe()
        self.assertEqual(len(df), 18)
        self.assertEqual(df.index.name, 'month')
        self.assertEqual(int(df.loc[18, 'value']), path[-1].value)

    def test_recovery_first_month_uses_scaled_return(self):
        """Test that month one earns 1/R of the expected monthly return."""
        path = self.engine.recovery_path(1_000_000.0, 2_000_000.0, 10, 0.0, 12)
        self.assertEqual(path[0].value, round(1_000_000 * (1 + 0.01 / 10)))
        self.assertAlmostEqual(path[-1].value, path[-2].value * 1.01, delta=1)

    def test_breakeven_month(self):
        """Test breakeven detection within the recovery window."""
        scenario = make_scenario(monthly_investment=500_000)
        result = self.engine.apply(scenario, 1_000_000, make_crisis(crash=-10, recovery=12))
        breakeven = result.recovery_analysis.breakeven_month
        self.assertIsNotNone(breakeven)
        point = result.recovery_analysis.recovery_trajectory[breakeven - 1]
        self.assertGreaterEqual(point.value, 1_000_000)

        no_contribution = make_scenario(monthly_investment=0, expected_return=1)
        slow = self.engine.apply(no_contribution, 1_000_000, make_crisis(crash=-40, recovery=6))
        self.assertIsNone(slow.recovery_analysis.breakeven_month)

    def test_zero_recovery_window(self):
        """Test a crisis with no recovery window."""
        result = self.engine.apply(make_scenario(), 1_000_000, make_crisis(recovery=0))
        self.assertEqual(result.recovery_analysis.recovery_trajectory, [])
        self.assertEqual(result.recovery_analysis.final_recovery_value,
                         result.immediate_impact.portfolio_value_after_crisis)
        self.assertEqual(result.risk_metrics.additional_required_contribution, 0)
        self.assertEqual(result.risk_metrics.time_to_breakeven, 0)

    def test_flat_crisis(self):
        """Test that a zero crash leaves goals untouched."""
        result = self.engine.apply(make_scenario(), 1_000_000, make_crisis(crash=0), self.goals)
        self.assertEqual(result.immediate_impact.portfolio_loss_amount, 0)
        self.assertTrue(all(p.recovery_percentage == 100 for p in result.recovery_analysis.recovery_trajectory))
        for impact in result.goal_impacts:
            self.assertEqual(impact.delay_months, 0)
            self.assertEqual(impact.additional_contribution_required, 0)
            self.assertEqual(impact.severity, 'Low')

    def test_goal_impacts(self):
        """Test goal delays and extra contributions."""
        result = self.engine.apply(make_scenario(), 10_000_000, make_crisis(), self.goals)
        retirement, home = result.goal_impacts

        self.assertEqual(retirement.goal_name, "Retirement Planning")
        self.assertEqual(retirement.delay_months, math.ceil(2_587_500 / 20000))
        self.assertEqual(retirement.additional_contribution_required, round(2_587_500 / 240))
        self.assertEqual(retirement.severity, 'High')

        # Major goals are assumed to receive half of the contribution
        self.assertEqual(home.delay_months, math.ceil(2_587_500 / 10000))
        self.assertEqual(home.additional_contribution_required, round(2_587_500 / 60))

    def test_goal_impact_severity(self):
        """Test severity thresholds on small losses."""
        goal = [GoalDefinition("Car", 1_000_000, horizon_years=3, kind=GoalKind.RETIREMENT)]
        low = self.engine.goal_impacts(goal, 100_000, 20000)[0]
        medium = self.engine.goal_impacts(goal, 300_000, 20000)[0]
        high = self.engine.goal_impacts(goal, 600_000, 20000)[0]
        self.assertEqual((low.delay_months, low.severity), (5, 'Low'))
        self.assertEqual((medium.delay_months, medium.severity), (15, 'Medium'))
        self.assertEqual((high.delay_months, high.severity), (30, 'High'))

    def test_goal_impact_without_contribution(self):
        """Test that a loss cannot be made up without contributions."""
        result = self.engine.apply(make_scenario(monthly_investment=0), 1_000_000,
                                   make_crisis(), self.goals)
        for impact in result.goal_impacts:
            self.assertIsNone(impact.delay_months)
            self.assertEqual(impact.severity, 'High')

    def test_run_uses_median_value(self):
        """Test that run() stresses the scenario's median simulated value."""
        scenario = make_scenario()
        batch = MonteCarloEngine(MonteCarloConfig(num_simulations=50, random_seed=3)).run(scenario, 5)
        sim_result = ResultAggregator().aggregate(batch, scenario)

        result = self.engine.run(scenario, sim_result, make_crisis())
        self.assertEqual(result.immediate_impact.original_value, sim_result.portfolio_value.p50)
        self.assertEqual(result.scenario_id, scenario.id)
        self.assertEqual(result.crisis_id, 'test_crisis')

        other = make_scenario(scenario_id="other")
        with self.assertRaises(ValidationError):
            self.engine.run(other, sim_result, make_crisis())

    def test_invalid_current_value(self):
        """Test that negative or non-finite values are rejected."""
        with self.assertRaises(ValidationError):
            self.engine.apply(make_scenario(), -1, make_crisis())
        with self.assertRaises(ValidationError):
            self.engine.apply(make_scenario(), float('nan'), make_crisis())

    def test_config_validation(self):
        """Test stress configuration limits."""
        with self.assertRaises(ValidationError):
            StressTestConfig(debt_multiplier=-0.1)
        with self.assertRaises(ValidationError):
            StressTestConfig(recovery_target_fraction=0)
        with self.assertRaises(ValidationError):
            StressTestConfig(goal_contribution_shares={"major": 1.5})

    def test_to_dict(self):
        """Test that results serialize to plain dictionaries."""
        data = self.engine.apply(make_scenario(), 1_000_000, make_crisis(), self.goals).to_dict()
        self.assertEqual(data['crisis_id'], 'test_crisis')
        self.assertEqual(len(data['recovery_analysis']['recovery_trajectory']), 18)
        self.assertEqual(len(data['goal_impacts']), 2)
        self.assertIn('likely_client_reaction', data['behavioral_considerations'])


if __name__ == '__main__':
    unittest.main()
