import asyncio
import shutil
import tempfile
import unittest

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import requests

from omegaconf import OmegaConf

from layoutsmith.assets.fetchers import (
    HttpAssetFetcher,
    LocalAssetFetcher,
    RoutingAssetFetcher,
)
from layoutsmith.config import load_config
from layoutsmith.errors import AssetFetchError


def _response(status_code: int, content: bytes = b"") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


class TestHttpAssetFetcher(unittest.TestCase):
    """Test HttpAssetFetcher retries and error mapping."""

    def setUp(self):
        """Set up test fixtures."""
        self.session = MagicMock()
        self.fetcher = HttpAssetFetcher(max_retries=2, session=self.session)
        self.url = "https://assets.example.com/sofa.glb"

    def test_success(self):
        """Test the response body is returned."""
        self.session.get.return_value = _response(200, b"glb-bytes")

        data = asyncio.run(self.fetcher.fetch(self.url))

        self.assertEqual(data, b"glb-bytes")
        self.session.get.assert_called_once_with(self.url, timeout=(10.0, 60.0))

    @patch("layoutsmith.assets.fetchers.time.sleep")
    def test_retries_server_errors(self, mock_sleep):
        """Test 5xx responses are retried."""
        self.session.get.side_effect = [_response(503), _response(200, b"ok")]

        self.assertEqual(asyncio.run(self.fetcher.fetch(self.url)), b"ok")
        self.assertEqual(self.session.get.call_count, 2)
        mock_sleep.assert_called_once_with(0.5)

    @patch("layoutsmith.assets.fetchers.time.sleep")
    def test_gives_up_after_retries(self, mock_sleep):
        """Test persistent connection errors raise AssetFetchError."""
        self.session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(AssetFetchError) as ctx:
            asyncio.run(self.fetcher.fetch(self.url))

        self.assertEqual(self.session.get.call_count, 3)
        self.assertIn("gave up after 3 attempts", str(ctx.exception))
        self.assertEqual(ctx.exception.url, self.url)
        self.assertEqual(mock_sleep.call_count, 2)

    def test_client_errors_are_not_retried(self):
        """Test 4xx responses fail immediately."""
        self.session.get.return_value = _response(404)

        with self.assertRaises(AssetFetchError) as ctx:
            asyncio.run(self.fetcher.fetch(self.url))

        self.assertEqual(self.session.get.call_count, 1)
        self.assertIn("HTTP 404", str(ctx.exception))

    def test_from_config(self):
        """Test timeouts and retries are read from config."""
        fetcher = HttpAssetFetcher.from_config(
            load_config(overrides=["assets.http.max_retries=0"])
        )
        self.assertEqual(fetcher.max_retries, 0)
        self.assertEqual(fetcher.connect_timeout_s, 10.0)


class TestLocalAssetFetcher(unittest.TestCase):
    """Test LocalAssetFetcher path resolution."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / "models").mkdir()
        (self.temp_dir / "models" / "chair.glb").write_bytes(b"chair")

    def tearDown(self):
        """Clean up test fixtures."""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_relative_path(self):
        """Test relative paths resolve against the base directory."""
        fetcher = LocalAssetFetcher(base_dir=self.temp_dir)
        self.assertEqual(asyncio.run(fetcher.fetch("models/chair.glb")), b"chair")

    def test_file_url(self):
        """Test file:// URLs."""
        fetcher = LocalAssetFetcher()
        url = (self.temp_dir / "models" / "chair.glb").as_uri()
        self.assertEqual(asyncio.run(fetcher.fetch(url)), b"chair")

    def test_missing_file(self):
        """Test missing files raise AssetFetchError."""
        fetcher = LocalAssetFetcher(base_dir=self.temp_dir)
        with self.assertRaises(AssetFetchError):
            asyncio.run(fetcher.fetch("models/missing.glb"))


class TestRoutingAssetFetcher(unittest.TestCase):
    """Test RoutingAssetFetcher dispatch."""

    def test_dispatch_by_scheme(self):
        """Test http(s) URLs go to HTTP, everything else to local files."""
        http = MagicMock(spec=HttpAssetFetcher)
        http.fetch = AsyncMock(return_value=b"http")
        local = MagicMock(spec=LocalAssetFetcher)
        local.fetch = AsyncMock(return_value=b"local")
        fetcher = RoutingAssetFetcher(http=http, local=local)

        self.assertEqual(asyncio.run(fetcher.fetch("HTTPS://cdn/a.glb")), b"http")
        self.assertEqual(asyncio.run(fetcher.fetch("models/a.glb")), b"local")
        self.assertEqual(asyncio.run(fetcher.fetch("file:///tmp/a.glb")), b"local")

    def test_from_config(self):
        """Test construction from config."""
        cfg = OmegaConf.create(
            {
                "assets": {
                    "http": {
                        "connect_timeout_s": 1,
                        "read_timeout_s": 2,
                        "max_retries": 0,
                    }
                }
            }
        )
        fetcher = RoutingAssetFetcher.from_config(cfg, base_dir="/srv/assets")
        self.assertEqual(fetcher.http.read_timeout_s, 2.0)
        self.assertEqual(fetcher.local.base_dir, Path("/srv/assets"))


if __name__ == "__main__":
    unittest.main()
