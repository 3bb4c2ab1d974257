import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from streamwave.core.config import build_codec, find_config_path, load_config
from streamwave.core.models import AudioFormat


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults_when_file_missing(self):
        config = load_config(str(self.root / "absent.yaml"))
        self.assertFalse(config.logging.debug)
        self.assertEqual(config.logging.output_mode, "standard")
        self.assertIsNone(config.codec.temp_dir)
        self.assertIsNone(config.headers.sfx)

    def test_partial_sections_merge_over_defaults(self):
        path = self.root / "streamwave.yaml"
        path.write_text("logging:\n  debug: true\ncodec:\n  temp_dir: /var/tmp/sw\n")

        config = load_config(str(path))
        self.assertTrue(config.logging.debug)
        self.assertEqual(config.logging.output_mode, "standard")
        self.assertEqual(config.codec.temp_dir, "/var/tmp/sw")

    def test_env_var_points_at_config(self):
        path = self.root / "custom.yaml"
        path.write_text("logging:\n  output_mode: silent\n")

        with patch.dict(os.environ, {"STREAMWAVE_CONFIG": str(path)}):
            self.assertEqual(find_config_path(), path)
            self.assertEqual(load_config().logging.output_mode, "silent")

    def test_invalid_header_hex_is_rejected(self):
        path = self.root / "bad.yaml"
        path.write_text("headers:\n  sfx: 'zz11'\n")

        with self.assertRaises(ValueError):
            load_config(str(path))

    def test_build_codec_applies_overrides(self):
        path = self.root / "streamwave.yaml"
        path.write_text(
            f"codec:\n  temp_dir: '{self.root / 'staging'}'\n"
            "headers:\n  vo: 'ff fb'\n"
        )

        codec = build_codec(load_config(str(path)))
        self.assertEqual(codec.registry.signature_for(AudioFormat.VO), (b"\xff\xfb", 2))
        self.assertEqual(codec.registry.signature_for(AudioFormat.SFX)[1], 58)
        self.assertEqual(codec.files.temp_paths.directory, self.root / "staging")


if __name__ == '__main__':
    unittest.main()
