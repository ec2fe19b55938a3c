import logging

from typing import Any

import requests

from omegaconf import DictConfig

from layoutsmith.errors import (
    DescriptionSourceError,
    MalformedDescriptionError,
    NotFoundError,
)

console_logger = logging.getLogger(__name__)


class LayoutDescriptionClient:
    """Client for the layout description server.

    Example:
        >>> client = LayoutDescriptionClient("http://localhost:5000")
        >>> description = client.get_description("living-room")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        timeout_s: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        console_logger.debug(
            f"Layout description client initialized for {self.base_url}"
        )

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "LayoutDescriptionClient":
        return cls(
            base_url=str(cfg.client.base_url), timeout_s=float(cfg.client.timeout_s)
        )

    def get_description(self, layout_id: str) -> dict[str, Any]:
        """Fetch the raw description for a layout.

        Raises:
            NotFoundError: If the server answers 404.
            DescriptionSourceError: If the server is unreachable, answers with
                another error status or returns invalid JSON.
            MalformedDescriptionError: If the payload is empty.
        """
        url = f"{self.base_url}/api/layout/{layout_id}"
        try:
            response = self.session.get(url, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise DescriptionSourceError(
                f"Description server unreachable at {self.base_url}: {e}"
            ) from e

        if response.status_code == 404:
            raise NotFoundError(layout_id, where=self.base_url)
        if not response.ok:
            raise DescriptionSourceError(
                f"Description server returned HTTP {response.status_code} for "
                f"{layout_id}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DescriptionSourceError(
                f"Invalid JSON for layout {layout_id}: {e}"
            ) from e

        if not data:
            raise MalformedDescriptionError(f"Layout {layout_id} is empty")
        return data
