import logging

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar

from layoutsmith.scene.resource_pool import ResourcePool
from layoutsmith.scene.visual_node import UniqueID, VisualNode

console_logger = logging.getLogger(__name__)


class EntityType(Enum):
    """Closed set of domain entity variants."""

    WALL = "wall"
    FURNITURE = "furniture"
    ROOM = "room"
    LAYOUT = "layout"


class Entity(ABC):
    """Contract shared by every domain entity.

    An entity exclusively owns one root ``VisualNode`` and its child entities.
    Subclasses implement ``hydrate`` (construction from a description),
    ``clone`` (deep copy with fresh node ids and shared resources) and
    ``_release`` (freeing exclusively-owned resources).
    """

    entity_type: ClassVar[EntityType]

    def __init__(self, root: VisualNode, pool: ResourcePool):
        self._root = root
        self._pool = pool
        self._disposed = False
        self._root.metadata["entity_type"] = self.entity_type.value

    @property
    def root(self) -> VisualNode:
        """Root node consumed by the rendering surface."""
        return self._root

    @property
    def node_id(self) -> UniqueID:
        return self._root.node_id

    @property
    def pool(self) -> ResourcePool:
        return self._pool

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @classmethod
    @abstractmethod
    def hydrate(cls, description: Any, pool: ResourcePool, defaults=None) -> "Entity":
        """Build an entity from a raw or parsed description.

        Raises:
            MalformedDescriptionError: If required fields are missing or invalid.
        """

    @abstractmethod
    def clone(self) -> "Entity":
        """Return a reference-distinct deep copy that shares heavy resources."""

    def _release(self) -> None:
        """Release exclusively-owned resources. Default: nothing owned."""

    def dispose(self) -> None:
        """Release exclusively-owned resources.

        Idempotent and never raises; release failures are logged.
        """
        if self._disposed:
            return
        self._disposed = True
        try:
            self._release()
        except Exception as e:
            console_logger.warning(
                f"Failed to release resources of {self.entity_type.value} "
                f"{self.node_id}: {e}"
            )
