import logging

from typing import Any

from layoutsmith.entities.base import Entity, EntityType
from layoutsmith.entities.description import ZERO, parse_vector
from layoutsmith.errors import MalformedDescriptionError
from layoutsmith.scene.resource_pool import ResourceKind, ResourcePool
from layoutsmith.scene.visual_node import VisualNode

console_logger = logging.getLogger(__name__)


class Wall(Entity):
    """A box-shaped wall segment.

    Every wall references the pooled unit box; its dimensions live in the node
    scale, so per-instance state is the transform only.
    """

    entity_type = EntityType.WALL

    def __init__(self, width: float, height: float, depth: float, pool: ResourcePool):
        for label, value in (("width", width), ("height", height), ("depth", depth)):
            if value <= 0:
                raise ValueError(f"Wall {label} must be positive, got {value}")

        node = VisualNode(name="wall", resource=pool.get(ResourceKind.UNIT_WALL_BOX))
        node.transform.set_scale(width, height, depth)
        super().__init__(node, pool)

        self.width = float(width)
        self.height = float(height)
        self.depth = float(depth)

    def __repr__(self) -> str:
        return f"Wall(width={self.width}, height={self.height}, depth={self.depth})"

    @property
    def resource(self):
        """Shared geometry/material handle."""
        return self._root.resource

    def set_position(self, x: float, y: float, z: float) -> None:
        self._root.transform.set_position(x, y, z)

    @classmethod
    def hydrate(cls, description: Any, pool: ResourcePool, defaults=None) -> "Wall":
        """Build a wall from ``{width, height, depth, position?, rotation?}``."""
        if not isinstance(description, dict):
            raise MalformedDescriptionError(
                f"Wall description must be an object, got {type(description).__name__}"
            )
        dimensions = []
        for key in ("width", "height", "depth"):
            value = description.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise MalformedDescriptionError(
                    f"Wall description field '{key}' must be a number, got {value!r}"
                )
            if value <= 0:
                raise MalformedDescriptionError(
                    f"Wall description field '{key}' must be positive, got {value}"
                )
            dimensions.append(float(value))

        position = parse_vector(description.get("position"), ZERO, "Wall position")
        rotation = parse_vector(description.get("rotation"), ZERO, "Wall rotation")

        wall = cls(*dimensions, pool=pool)
        wall.set_position(*position)
        wall.root.transform.set_rotation(*rotation)
        return wall

    def clone(self) -> "Wall":
        copy = Wall(self.width, self.height, self.depth, self._pool)
        copy.root.transform.position = self._root.transform.position.copy()
        copy.root.transform.rotation = self._root.transform.rotation.copy()
        return copy
