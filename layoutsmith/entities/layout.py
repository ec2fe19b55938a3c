import logging

from typing import Any, Iterator

from layoutsmith.assets.fetchers import AssetFetcher
from layoutsmith.assets.hydrator import AssetHydrator, HydrationReport
from layoutsmith.entities.base import Entity, EntityType
from layoutsmith.entities.description import (
    CameraView,
    LayoutDefaults,
    LayoutDescription,
)
from layoutsmith.entities.furniture import Furniture
from layoutsmith.entities.room import Room
from layoutsmith.scene.resource_pool import ResourcePool
from layoutsmith.scene.visual_node import VisualNode

console_logger = logging.getLogger(__name__)


class Layout(Entity):
    """Top-level unit of hydration, asset loading and cloning.

    The root node id is the layout id, shared by a master and all of its
    sessions, so a rendered tree always names the template it came from.
    """

    entity_type = EntityType.LAYOUT

    def __init__(
        self,
        layout_id: str,
        description: str,
        pool: ResourcePool,
        camera_view: CameraView | None = None,
        defaults: LayoutDefaults | None = None,
    ):
        super().__init__(VisualNode(name=description, node_id=layout_id), pool)

        self.layout_id = layout_id
        self.description = description
        self.camera_view = camera_view
        self._defaults = defaults or LayoutDefaults()
        self._rooms: list[Room] = []
        self._is_master = False
        self._assets_loaded = False
        self._root.metadata["is_master"] = False

    def __repr__(self) -> str:
        role = "master" if self._is_master else "session"
        return f"Layout(layout_id={self.layout_id!r}, rooms={len(self._rooms)}, {role})"

    @property
    def rooms(self) -> tuple[Room, ...]:
        return tuple(self._rooms)

    @property
    def defaults(self) -> LayoutDefaults:
        return self._defaults

    @property
    def is_master(self) -> bool:
        return self._is_master

    def _set_master(self, value: bool) -> None:
        # Only the registry flips this flag.
        self._is_master = value
        self._root.metadata["is_master"] = value

    @property
    def assets_loaded(self) -> bool:
        """Whether a full asset hydration pass has completed on this instance."""
        return self._assets_loaded

    @property
    def has_model_references(self) -> bool:
        return any(furniture.model_url for furniture in self.iter_furniture())

    def add_room(self, room: Room) -> None:
        self._rooms.append(room)
        self._root.add(room.root)

    def iter_furniture(self) -> Iterator[Furniture]:
        """Yield every furniture, room by room in order."""
        for room in self._rooms:
            yield from room.furniture

    @classmethod
    def hydrate(
        cls,
        description: LayoutDescription | dict[str, Any],
        pool: ResourcePool,
        defaults: LayoutDefaults | None = None,
    ) -> "Layout":
        """Build a layout (without models) from a description.

        Raises:
            MalformedDescriptionError: If the description is malformed. No
                partial layout is returned.
        """
        if not isinstance(description, LayoutDescription):
            description = LayoutDescription.from_dict(description)

        layout = cls(
            layout_id=description.layout_id,
            description=description.name,
            pool=pool,
            camera_view=description.camera_view,
            defaults=defaults,
        )
        for room_description in description.rooms:
            layout.add_room(Room.hydrate(room_description, pool, defaults=defaults))

        console_logger.debug(
            f"Hydrated layout {layout.layout_id} with {len(layout.rooms)} rooms"
        )
        return layout

    async def load_assets(
        self,
        fetcher: AssetFetcher,
        max_concurrency: int | None = None,
        timeout_s: float | None = None,
    ) -> HydrationReport:
        """Load all furniture models concurrently, tolerating failures.

        Must complete before the layout is cloned into sessions, since clones
        copy whatever content each furniture currently holds.
        """
        hydrator = AssetHydrator(
            fetcher, max_concurrency=max_concurrency, timeout_s=timeout_s
        )
        return await self.load_assets_with(hydrator)

    async def load_assets_with(self, hydrator: AssetHydrator) -> HydrationReport:
        report = await hydrator.hydrate(self)
        self._assets_loaded = True
        return report

    def clone(self) -> "Layout":
        copy = Layout(
            layout_id=self.layout_id,
            description=self.description,
            pool=self._pool,
            camera_view=self.camera_view,
            defaults=self._defaults,
        )
        copy._root.transform = self._root.transform.copy()
        for room in self._rooms:
            copy.add_room(room.clone())
        copy._assets_loaded = self._assets_loaded
        return copy

    def _release(self) -> None:
        for room in self._rooms:
            room.dispose()
