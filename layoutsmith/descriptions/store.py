import json
import logging

from pathlib import Path
from typing import Any

from omegaconf import DictConfig

from layoutsmith.errors import DescriptionSourceError, NotFoundError

console_logger = logging.getLogger(__name__)


class LayoutDescriptionStore:
    """Layout descriptions kept in one JSON file keyed by layout id.

    The file is re-read on every lookup so edits show up without a restart.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "LayoutDescriptionStore":
        return cls(db_path=cfg.store.db_path)

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.db_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise DescriptionSourceError(
                f"Cannot read layout store {self.db_path}: {e}"
            ) from e
        except json.JSONDecodeError as e:
            raise DescriptionSourceError(
                f"Failed to parse layout store {self.db_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise DescriptionSourceError(
                f"Layout store {self.db_path} must contain an object keyed by id"
            )
        return data

    def get_description(self, layout_id: str) -> dict[str, Any]:
        """Return the raw description for a layout.

        Raises:
            NotFoundError: If the store has no entry for the id.
            DescriptionSourceError: If the store file is unreadable.
        """
        data = self._load()
        description = data.get(layout_id)
        if description is None:
            raise NotFoundError(layout_id, where=str(self.db_path))
        console_logger.debug(f"Loaded description {layout_id} from {self.db_path}")
        return description

    def list_ids(self) -> list[str]:
        return list(self._load())
