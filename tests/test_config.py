"""
Unit tests for pick_risk.core.config

Tests defaults, validation, input coercion and the JSON config store.
"""

import json
import shutil
import tempfile
import unittest
from dataclasses import FrozenInstanceError
from pathlib import Path

from pick_risk.core.config import (
    DEFAULT_AVG_PL_MIN,
    ConfigError,
    ConfigStore,
    RiskConfig,
    Thresholds,
    coerce_bool,
    coerce_float,
    coerce_positive_float,
    ensure_valid,
    validate_config,
)


class TestDefaults(unittest.TestCase):

    def test_factory_values(self):
        config = RiskConfig()
        self.assertEqual(config.avg_pick_list_minutes, 13.5)
        self.assertEqual(config.thresholds, Thresholds(safe=1.35, low=1.25, high=1.00))
        self.assertEqual(config.shift_end_display, "11:50")
        self.assertFalse(config.show_safe_rows)

    def test_frozen(self):
        with self.assertRaises(FrozenInstanceError):
            RiskConfig().avg_pick_list_minutes = 10

    def test_to_dict_uses_external_names(self):
        self.assertEqual(RiskConfig().to_dict(), {
            'avgPLMin': 13.5,
            'thresholds': {'safe': 1.35, 'low': 1.25, 'high': 1.0},
            'shiftEndDisplay': '11:50',
            'showSafeRows': False,
        })

    def test_from_dict_merges_over_base(self):
        config = RiskConfig.from_dict({'avgPLMin': 12, 'thresholds': {'low': 1.2}})
        self.assertEqual(config.avg_pick_list_minutes, 12.0)
        self.assertEqual(config.thresholds, Thresholds(safe=1.35, low=1.2, high=1.0))
        self.assertEqual(config.shift_end_display, "11:50")

    def test_from_dict_ignores_bad_values(self):
        config = RiskConfig.from_dict({'avgPLMin': 'fast', 'thresholds': [1, 2], 'showSafeRows': 'maybe'})
        self.assertEqual(config, RiskConfig())


class TestValidation(unittest.TestCase):

    def test_defaults_valid(self):
        self.assertEqual(validate_config(RiskConfig()), [])
        self.assertEqual(ensure_valid(RiskConfig()), RiskConfig())

    def test_non_positive_average(self):
        for avg in (0, -1, float('nan'), float('inf')):
            with self.subTest(avg=avg):
                self.assertEqual(len(validate_config(RiskConfig(avg_pick_list_minutes=avg))), 1)

    def test_threshold_order(self):
        config = RiskConfig(thresholds=Thresholds(safe=1.25, low=1.25, high=1.0))
        problems = validate_config(config)
        self.assertEqual(len(problems), 1)
        self.assertIn('safe > low > high', problems[0])

    def test_non_finite_threshold(self):
        config = RiskConfig(thresholds=Thresholds(safe=float('inf')))
        self.assertIn('thresholds.safe', validate_config(config)[0])

    def test_ensure_valid_raises(self):
        with self.assertRaises(ConfigError) as context:
            ensure_valid(RiskConfig(avg_pick_list_minutes=0))
        self.assertIn('avgPLMin', str(context.exception))
        self.assertIsInstance(context.exception, ValueError)


class TestCoercion(unittest.TestCase):

    def test_coerce_float(self):
        self.assertEqual(coerce_float(" 14 ", 1.0), 14.0)
        self.assertEqual(coerce_float(2, 1.0), 2.0)
        self.assertEqual(coerce_float("abc", 1.0), 1.0)
        self.assertEqual(coerce_float("inf", 1.0), 1.0)
        self.assertEqual(coerce_float(None, 1.0), 1.0)
        self.assertEqual(coerce_float(True, 1.0), 1.0)

    def test_coerce_positive_float(self):
        self.assertEqual(coerce_positive_float("14.5", DEFAULT_AVG_PL_MIN), 14.5)
        self.assertEqual(coerce_positive_float("0", DEFAULT_AVG_PL_MIN), DEFAULT_AVG_PL_MIN)
        self.assertEqual(coerce_positive_float("-3", DEFAULT_AVG_PL_MIN), DEFAULT_AVG_PL_MIN)
        self.assertEqual(coerce_positive_float("", DEFAULT_AVG_PL_MIN), DEFAULT_AVG_PL_MIN)

    def test_coerce_bool(self):
        self.assertTrue(coerce_bool(True, False))
        self.assertTrue(coerce_bool("Yes", False))
        self.assertFalse(coerce_bool("off", True))
        self.assertTrue(coerce_bool("maybe", True))
        self.assertFalse(coerce_bool(None, False))


class TestConfigStore(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.path = self.test_dir / "nested" / "config.json"
        self.store = ConfigStore(self.path)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(self.store.load(), RiskConfig())

    def test_round_trip(self):
        config = RiskConfig(avg_pick_list_minutes=11.0, shift_end_display="12:10", show_safe_rows=True)
        self.store.save(config)
        self.assertTrue(self.path.exists())
        self.assertEqual(self.store.load(), config)

    def test_corrupt_file_gives_defaults(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding='utf-8')
        with self.assertLogs('pick_risk.core.config', level='WARNING'):
            self.assertEqual(self.store.load(), RiskConfig())

    def test_non_object_gives_defaults(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2]", encoding='utf-8')
        with self.assertLogs('pick_risk.core.config', level='WARNING'):
            self.assertEqual(self.store.load(), RiskConfig())

    def test_partial_file_merges_defaults(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({'showSafeRows': True}), encoding='utf-8')
        config = self.store.load()
        self.assertTrue(config.show_safe_rows)
        self.assertEqual(config.avg_pick_list_minutes, DEFAULT_AVG_PL_MIN)

    def test_apply_user_edits(self):
        config = self.store.apply_user_edits(avg_pl_min="14", shift_end=" 12:00 ", show_safe=True)
        self.assertEqual(config.avg_pick_list_minutes, 14.0)
        self.assertEqual(config.shift_end_display, "12:00")
        self.assertTrue(config.show_safe_rows)
        self.assertEqual(self.store.load(), config)

    def test_invalid_edit_keeps_previous_value(self):
        current = RiskConfig(avg_pick_list_minutes=12.0)
        config = self.store.apply_user_edits(avg_pl_min="zero", shift_end="  ", current=current)
        self.assertEqual(config.avg_pick_list_minutes, 12.0)
        self.assertEqual(config.shift_end_display, "11:50")


if __name__ == '__main__':
    unittest.main()
