import json
import os
import shutil
import tempfile
import unittest

from setpointopt.config import (
    load_config,
    EvaluationConfig,
    ExtractorConfig,
    ElectricityRates,
    ScheduleConfig,
    Window,
    ENCODING_DIRECT,
)


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.test_dir, 'config.json')

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def write(self, text):
        with open(self.path, 'w') as f:
            f.write(text)

    def test_empty_config_uses_defaults(self):
        self.write("{}")
        cfg = load_config(self.path)
        self.assertEqual(cfg, EvaluationConfig())

    def test_comments_are_stripped(self):
        self.write("""
        {
            // Five-zone VRF model
            "extractor": {
                "columns": {"pmv": [10, 11, 12]}  // one PMV per floor
            }
        }
        """)
        cfg = load_config(self.path)
        self.assertEqual(cfg.extractor.pmv_columns, (10, 11, 12))
        self.assertEqual(cfg.extractor.electric_columns, (13,))

    def test_full_config(self):
        self.write(json.dumps({
            "schedule": {
                "num_variables": 24,
                "length": 25,
                "initial_value": 26.0,
                "encoding": "direct"
            },
            "extractor": {
                "timesteps_per_hour": 4,
                "columns": {"pmv": [5], "cooling": [7], "electric": [6], "setpoint": [2]},
                "windows": {
                    "comfort": {"start_hour": 8, "end_hour": 18},
                    "energy": {"start": 0, "end": 95},
                    "setpoint": {"start": 24, "end": 95}
                },
                "rates": {"basic_rate_unit": 1500.0, "energy_rate_unit": 20.0, "power_factor": 0.95},
                "peak_includes_cooling": False
            }
        }))
        cfg = load_config(self.path)

        self.assertEqual(cfg.schedule.offset, 1)
        self.assertEqual(cfg.schedule.encoding, ENCODING_DIRECT)
        self.assertEqual(cfg.schedule.initial_value, 26.0)

        ext = cfg.extractor
        self.assertEqual(ext.timesteps_per_hour, 4)
        self.assertEqual(ext.comfort_window, Window(31, 71))
        self.assertEqual(ext.energy_window, Window(0, 95))
        self.assertEqual(ext.setpoint_window, Window(24, 95))
        self.assertEqual(ext.rates, ElectricityRates(1500.0, 20.0, 0.95))
        self.assertEqual(ext.peak_power_columns, (6,))

    def test_bad_window_shape(self):
        self.write('{"extractor": {"windows": {"comfort": {"from": 1}}}}')
        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_invalid_values_rejected(self):
        self.write('{"schedule": {"setpoint_min": 25, "setpoint_max": 20}}')
        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_unknown_keys_rejected(self):
        for text in ('{"schedule": {"n_vars": 3}}',
                     '{"extractor": {"rates": {"peak_rate": 1.0}}}',
                     '{"extractor": {"column": {"pmv": [11]}}}'):
            self.write(text)
            with self.assertRaises(ValueError):
                load_config(self.path)


class TestConfigObjects(unittest.TestCase):
    def test_columns_normalized_to_int_tuples(self):
        cfg = ExtractorConfig(pmv_columns=[11.0, 12])
        self.assertEqual(cfg.pmv_columns, (11, 12))

    def test_empty_columns_rejected(self):
        with self.assertRaises(ValueError):
            ExtractorConfig(setpoint_columns=())

    def test_power_factor_bounds(self):
        with self.assertRaises(ValueError):
            ElectricityRates(power_factor=1.5)

    def test_schedule_offset(self):
        self.assertEqual(ScheduleConfig().offset, 6)
        self.assertEqual(ScheduleConfig(num_variables=25).offset, 0)


if __name__ == '__main__':
    unittest.main()
