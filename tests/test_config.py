import pathlib
import sys
import tempfile
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from prometeo.analysis.bands import DEFAULT_BANDS  # noqa: E402
from prometeo.config import (  # noqa: E402
    PipelineConfig,
    config_from_mapping,
    load_config,
    save_config,
)


class PipelineConfigTest(unittest.TestCase):
    def test_defaults(self):
        cfg = PipelineConfig()
        self.assertEqual(cfg.update_interval_ms, 250)
        self.assertEqual(cfg.window_length, 256)
        self.assertEqual(cfg.baseline_window, 200)
        self.assertEqual(cfg.fallback_baseline, 512.0)
        self.assertEqual(cfg.history_capacity, 120)
        self.assertEqual(cfg.min_history, 10)
        self.assertEqual(cfg.estimator, "spectral")
        self.assertEqual(cfg.transform, "fft")
        self.assertEqual(cfg.bands, DEFAULT_BANDS)

    def test_sanitized_clamps_values(self):
        cfg = PipelineConfig(
            update_interval_ms=-5,
            window_length=4096,
            sample_capacity=1024,
            estimator=" RMS ",
            transform="wavelet",
            control_threshold=0.0,
            baseline_window=0,
        ).sanitized()

        self.assertEqual(cfg.update_interval_ms, 0)
        self.assertEqual(cfg.window_length, 1024)
        self.assertEqual(cfg.estimator, "rms")
        self.assertEqual(cfg.transform, "fft")
        self.assertEqual(cfg.control_threshold, 25.0)
        self.assertEqual(cfg.baseline_window, 1)

    def test_mapping_accepts_pipeline_section_and_ignores_unknown_keys(self):
        with self.assertLogs("prometeo.config.runtime", level="WARNING") as logs:
            cfg = config_from_mapping(
                {
                    "pipeline": {"update_interval_ms": 500, "transform": "dft", "window_length": 64},
                    "window_length": 128,
                    "colour": "blue",
                }
            )
        self.assertIn("colour", logs.output[0])
        self.assertEqual(cfg.update_interval_ms, 500)
        self.assertEqual(cfg.transform, "dft")
        self.assertEqual(cfg.window_length, 128)
        self.assertEqual(config_from_mapping(None), PipelineConfig())

    def test_yaml_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "nested" / "pipeline.yaml"
            original = PipelineConfig(
                update_interval_ms=100,
                bands={"alpha": (8.0, 13.0), "beta": (13.0, 30.0)},
                require_end_byte=True,
            )

            save_config(path, original)
            loaded = load_config(path)

            self.assertEqual(loaded.update_interval_ms, 100)
            self.assertTrue(loaded.require_end_byte)
            self.assertEqual(loaded.bands, {"alpha": (8.0, 13.0), "beta": (13.0, 30.0)})

    def test_missing_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = load_config(pathlib.Path(tmpdir) / "absent.yaml")
        self.assertEqual(cfg, PipelineConfig())
        self.assertEqual(load_config(None), PipelineConfig())

    def test_empty_yaml_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "empty.yaml"
            path.write_text("# nothing set\n", encoding="utf-8")
            self.assertEqual(load_config(path), PipelineConfig())

    def test_non_mapping_yaml_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "list.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)


if __name__ == "__main__":
    unittest.main()
