"""Flask application serving raw layout descriptions."""

import logging

import flask

from omegaconf import DictConfig

from layoutsmith.descriptions.store import LayoutDescriptionStore
from layoutsmith.errors import DescriptionSourceError, NotFoundError

console_logger = logging.getLogger(__name__)


class LayoutDescriptionApp(flask.Flask):
    """Serves ``GET /api/layout/<layout_id>`` from a description store."""

    def __init__(self, store: LayoutDescriptionStore) -> None:
        super().__init__("layout_description_server")
        self._store = store

        self.add_url_rule("/health", "health", self._health_endpoint, methods=["GET"])
        self.add_url_rule(
            "/api/layout/<layout_id>",
            "get_layout",
            self._get_layout_endpoint,
            methods=["GET"],
        )

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "LayoutDescriptionApp":
        return cls(store=LayoutDescriptionStore.from_config(cfg))

    def _health_endpoint(self) -> flask.Response:
        return flask.jsonify({"status": "healthy"})

    def _get_layout_endpoint(self, layout_id: str):
        console_logger.info(f"Received request for layout: {layout_id}")
        try:
            description = self._store.get_description(layout_id)
        except NotFoundError:
            return flask.jsonify({"error": "Layout not found"}), 404
        except DescriptionSourceError as e:
            console_logger.error(str(e))
            return flask.jsonify({"error": "Failed to read layout data"}), 500
        return flask.jsonify(description)
