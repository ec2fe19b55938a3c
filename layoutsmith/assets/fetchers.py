"""Asynchronous fetchers for raw furniture model bytes.

Blocking I/O (``requests`` and file reads) runs in worker threads via
``asyncio.to_thread`` so fetches for different furniture overlap on the event
loop.
"""

import asyncio
import logging
import time

from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from omegaconf import DictConfig

from layoutsmith.errors import AssetFetchError

console_logger = logging.getLogger(__name__)


class AssetFetcher(ABC):
    """Source of raw model bytes addressed by URL or path."""

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        """Fetch the asset.

        Raises:
            AssetFetchError: If the asset cannot be retrieved.
        """


class HttpAssetFetcher(AssetFetcher):
    """Fetches assets over HTTP(S) with a persistent session and retries.

    Retries apply to connection errors, timeouts and 5xx responses; 4xx
    responses fail immediately.
    """

    def __init__(
        self,
        connect_timeout_s: float = 10.0,
        read_timeout_s: float = 60.0,
        max_retries: int = 2,
        session: requests.Session | None = None,
    ):
        """
        Args:
            connect_timeout_s: Connection timeout per attempt.
            read_timeout_s: Read timeout per attempt.
            max_retries: Extra attempts after the first one for transient errors.
            session: Optional preconfigured session (e.g. for tests).
        """
        self.connect_timeout_s = connect_timeout_s
        self.read_timeout_s = read_timeout_s
        self.max_retries = max_retries
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "HttpAssetFetcher":
        http_cfg = cfg.assets.http
        return cls(
            connect_timeout_s=float(http_cfg.connect_timeout_s),
            read_timeout_s=float(http_cfg.read_timeout_s),
            max_retries=int(http_cfg.max_retries),
        )

    def _fetch_blocking(self, url: str) -> bytes:
        last_error = "no attempts made"
        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.get(
                    url, timeout=(self.connect_timeout_s, self.read_timeout_s)
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error = f"{type(e).__name__}: {e}"
                console_logger.debug(
                    f"Fetch attempt {attempt + 1} for {url} failed: {last_error}"
                )
                if attempt < self.max_retries:
                    time.sleep(min(2**attempt * 0.5, 5.0))
                continue
            except requests.RequestException as e:
                raise AssetFetchError(url, str(e)) from e

            if response.status_code >= 500:
                last_error = f"HTTP {response.status_code}"
                console_logger.debug(
                    f"Fetch attempt {attempt + 1} for {url} failed: {last_error}"
                )
                if attempt < self.max_retries:
                    time.sleep(min(2**attempt * 0.5, 5.0))
                continue
            if response.status_code >= 400:
                raise AssetFetchError(url, f"HTTP {response.status_code}")

            return response.content

        raise AssetFetchError(
            url, f"gave up after {self.max_retries + 1} attempts ({last_error})"
        )

    async def fetch(self, url: str) -> bytes:
        return await asyncio.to_thread(self._fetch_blocking, url)


class LocalAssetFetcher(AssetFetcher):
    """Reads assets from the local filesystem (plain paths or file:// URLs)."""

    def __init__(self, base_dir: Path | str | None = None):
        """
        Args:
            base_dir: Directory that relative paths are resolved against.
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def resolve(self, url: str) -> Path:
        parsed = urlparse(url)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def _read(self, url: str) -> bytes:
        path = self.resolve(url)
        try:
            return path.read_bytes()
        except OSError as e:
            raise AssetFetchError(url, f"cannot read {path}: {e}") from e

    async def fetch(self, url: str) -> bytes:
        return await asyncio.to_thread(self._read, url)


class RoutingAssetFetcher(AssetFetcher):
    """Dispatches by URL scheme: http(s) to HTTP, everything else to local files."""

    def __init__(self, http: HttpAssetFetcher, local: LocalAssetFetcher):
        self.http = http
        self.local = local

    @classmethod
    def from_config(
        cls, cfg: DictConfig, base_dir: Path | str | None = None
    ) -> "RoutingAssetFetcher":
        return cls(
            http=HttpAssetFetcher.from_config(cfg),
            local=LocalAssetFetcher(base_dir=base_dir),
        )

    async def fetch(self, url: str) -> bytes:
        scheme = urlparse(url).scheme.lower()
        if scheme in ("http", "https"):
            return await self.http.fetch(url)
        return await self.local.fetch(url)
