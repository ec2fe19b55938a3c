import json
import shutil
import tempfile
import unittest

from pathlib import Path

from layoutsmith.config import load_config
from layoutsmith.descriptions.server_app import LayoutDescriptionApp
from layoutsmith.descriptions.store import LayoutDescriptionStore
from tests.unit.mock_utils import sample_layout_description


class TestLayoutDescriptionApp(unittest.TestCase):
    """Test the description HTTP endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.db_path = self.temp_dir / "layout.json"
        self.db_path.write_text(
            json.dumps({"apartment-1": sample_layout_description()}), encoding="utf-8"
        )
        self.app = LayoutDescriptionApp(LayoutDescriptionStore(self.db_path))
        self.client = self.app.test_client()

    def tearDown(self):
        """Clean up test fixtures."""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_health(self):
        """Test the health endpoint."""
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"status": "healthy"})

    def test_get_layout(self):
        """Test a known layout is returned verbatim."""
        response = self.client.get("/api/layout/apartment-1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), sample_layout_description())

    def test_unknown_layout(self):
        """Test unknown ids answer 404."""
        response = self.client.get("/api/layout/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json(), {"error": "Layout not found"})

    def test_unreadable_store(self):
        """Test store failures answer 500."""
        self.db_path.write_text("{broken", encoding="utf-8")
        response = self.client.get("/api/layout/apartment-1")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"error": "Failed to read layout data"})

    def test_from_config(self):
        """Test the store path comes from config."""
        cfg = load_config(overrides=[f"store.db_path={self.db_path}"])
        app = LayoutDescriptionApp.from_config(cfg)
        response = app.test_client().get("/api/layout/apartment-1")
        self.assertEqual(response.status_code, 200)


if __name__ == "__main__":
    unittest.main()
