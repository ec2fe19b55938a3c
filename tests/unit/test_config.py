import shutil
import tempfile
import unittest

from pathlib import Path

from layoutsmith.config import DEFAULT_CONFIG_PATH, load_config


class TestLoadConfig(unittest.TestCase):
    """Test configuration loading and merging."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test fixtures."""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_defaults(self):
        """Test the packaged defaults."""
        self.assertTrue(DEFAULT_CONFIG_PATH.exists())
        cfg = load_config()

        self.assertEqual(cfg.room.default_width, 20.0)
        self.assertEqual(cfg.room.wall_height, 3.5)
        self.assertEqual(cfg.room.wall_thickness, 0.5)
        self.assertEqual(cfg.resources.placeholder_size, 1.0)
        self.assertEqual(cfg.client.base_url, "http://localhost:5000")

    def test_user_file_overrides_defaults(self):
        """Test a user YAML file is merged on top."""
        path = self.temp_dir / "local.yaml"
        path.write_text("room:\n  wall_height: 2.8\n", encoding="utf-8")

        cfg = load_config(path)

        self.assertEqual(cfg.room.wall_height, 2.8)
        self.assertEqual(cfg.room.default_depth, 20.0)

    def test_dotlist_overrides_apply_last(self):
        """Test dotlist overrides win over the user file."""
        path = self.temp_dir / "local.yaml"
        path.write_text("server:\n  port: 6000\n", encoding="utf-8")

        cfg = load_config(path, overrides=["server.port=7000"])

        self.assertEqual(cfg.server.port, 7000)

    def test_missing_file(self):
        """Test a missing user file raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_config(self.temp_dir / "absent.yaml")


if __name__ == "__main__":
    unittest.main()
