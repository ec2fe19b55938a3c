import logging

from typing import Any

from layoutsmith.entities.base import Entity, EntityType
from layoutsmith.entities.description import LayoutDefaults, RoomDescription
from layoutsmith.entities.furniture import Furniture
from layoutsmith.entities.wall import Wall
from layoutsmith.scene.resource_pool import ResourcePool
from layoutsmith.scene.visual_node import VisualNode

console_logger = logging.getLogger(__name__)


class Room(Entity):
    """A rectangular room with four generated walls and placed furniture.

    Walls are a pure function of the room geometry and are regenerated whenever
    a room is constructed or cloned. Furniture is always copied.
    """

    entity_type = EntityType.ROOM

    def __init__(
        self,
        name: str,
        pool: ResourcePool,
        width: float | None = None,
        depth: float | None = None,
        defaults: LayoutDefaults | None = None,
    ):
        """
        Args:
            name: Room name.
            pool: Shared resource pool.
            width: Extent along X. None uses the default width.
            depth: Extent along Z. None uses the default depth.
            defaults: Default dimensions and wall sizes.
        """
        defaults = defaults or LayoutDefaults()
        super().__init__(VisualNode(name=name), pool)

        self.name = name
        self.width = float(width if width is not None else defaults.room_width)
        self.depth = float(depth if depth is not None else defaults.room_depth)
        self.wall_height = defaults.wall_height
        self.wall_thickness = defaults.wall_thickness
        self._defaults = defaults
        self._walls: list[Wall] = []
        self._furniture: list[Furniture] = []
        self._root.metadata["name"] = name

        self.generate_walls()

    def __repr__(self) -> str:
        return (
            f"Room(name={self.name!r}, width={self.width}, depth={self.depth}, "
            f"furniture={len(self._furniture)})"
        )

    @property
    def walls(self) -> tuple[Wall, ...]:
        return tuple(self._walls)

    @property
    def furniture(self) -> tuple[Furniture, ...]:
        return tuple(self._furniture)

    def generate_walls(self) -> None:
        """Replace the walls with the four walls implied by the room geometry.

        Order: back (-Z), front (+Z), left (-X), right (+X). Walls sit on the
        floor, centered on the room edges.
        """
        for wall in self._walls:
            self._root.remove(wall.root)
            wall.dispose()
        self._walls = []

        h = self.wall_height
        t = self.wall_thickness
        placements = [
            ((self.width, h, t), (0.0, h / 2, -self.depth / 2)),
            ((self.width, h, t), (0.0, h / 2, self.depth / 2)),
            ((t, h, self.depth), (-self.width / 2, h / 2, 0.0)),
            ((t, h, self.depth), (self.width / 2, h / 2, 0.0)),
        ]
        for (width, height, depth), position in placements:
            wall = Wall(width, height, depth, self._pool)
            wall.set_position(*position)
            self._walls.append(wall)
            self._root.add(wall.root)

    def add_furniture(self, furniture: Furniture) -> None:
        self._furniture.append(furniture)
        self._root.add(furniture.root)

    def remove_furniture(self, furniture: Furniture) -> bool:
        """Detach furniture from the room. Returns True if it was present.

        The furniture is not disposed; the caller now owns it.
        """
        for index, existing in enumerate(self._furniture):
            if existing is furniture:
                del self._furniture[index]
                self._root.remove(furniture.root)
                return True
        return False

    @classmethod
    def hydrate(
        cls,
        description: RoomDescription | dict[str, Any],
        pool: ResourcePool,
        defaults: LayoutDefaults | None = None,
    ) -> "Room":
        if not isinstance(description, RoomDescription):
            description = RoomDescription.from_dict(description)

        room = cls(
            name=description.name,
            pool=pool,
            width=description.width,
            depth=description.depth,
            defaults=defaults,
        )
        for item in description.furniture:
            room.add_furniture(Furniture.hydrate(item, pool))
        return room

    def clone(self) -> "Room":
        copy = Room(
            name=self.name,
            pool=self._pool,
            width=self.width,
            depth=self.depth,
            defaults=self._defaults,
        )
        # Wall sizes may have been changed after construction.
        if (copy.wall_height, copy.wall_thickness) != (
            self.wall_height,
            self.wall_thickness,
        ):
            copy.wall_height = self.wall_height
            copy.wall_thickness = self.wall_thickness
            copy.generate_walls()

        copy._root.transform = self._root.transform.copy()
        for item in self._furniture:
            copy.add_furniture(item.clone())
        return copy

    def _release(self) -> None:
        for wall in self._walls:
            wall.dispose()
        for item in self._furniture:
            item.dispose()
