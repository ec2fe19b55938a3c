import logging

from typing import TYPE_CHECKING, Any

import numpy as np

from layoutsmith.assets.normalization import NormalizationResult, load_normalized_model
from layoutsmith.entities.base import Entity, EntityType
from layoutsmith.entities.description import FurnitureDescription
from layoutsmith.scene.resource_pool import ResourceKind, ResourcePool
from layoutsmith.scene.visual_node import VisualNode

if TYPE_CHECKING:
    from layoutsmith.assets.fetchers import AssetFetcher

console_logger = logging.getLogger(__name__)


class Furniture(Entity):
    """A piece of furniture with an optional external model.

    The root node carries the furniture transform from the description and has
    exactly one child, the content node: the pooled placeholder box until a
    model loads, then the normalized model subtree.
    """

    entity_type = EntityType.FURNITURE

    def __init__(
        self,
        name: str,
        type: str,
        pool: ResourcePool,
        model_url: str | None = None,
    ):
        root = VisualNode(name=name)
        super().__init__(root, pool)

        self.name = name
        self.type = type
        self.model_url = model_url

        self.normalization: NormalizationResult | None = None
        """Set once a model has been loaded and normalized."""

        # Whether this instance loaded (and so owns) the model resources.
        # Clones reference the same resources without owning them.
        self._owns_model = False

        self._content = self._make_placeholder()
        self._root.add(self._content)
        self._root.metadata["name"] = name

    def __repr__(self) -> str:
        return (
            f"Furniture(name={self.name!r}, type={self.type!r}, "
            f"model_url={self.model_url!r}, loaded={self.has_loaded_model})"
        )

    def _make_placeholder(self) -> VisualNode:
        return VisualNode(
            name="placeholder",
            resource=self._pool.get(ResourceKind.PLACEHOLDER_FURNITURE_BOX),
        )

    @property
    def content(self) -> VisualNode:
        """Placeholder or loaded model node under the root."""
        return self._content

    @property
    def has_loaded_model(self) -> bool:
        return self.normalization is not None

    @property
    def is_placeholder(self) -> bool:
        return self._content.resource is self._pool.get(
            ResourceKind.PLACEHOLDER_FURNITURE_BOX
        )

    @property
    def position(self) -> np.ndarray:
        return self._root.transform.position

    def set_position(self, x: float, y: float, z: float) -> None:
        self._root.transform.set_position(x, y, z)

    def set_rotation(self, x: float, y: float, z: float) -> None:
        self._root.transform.set_rotation(x, y, z)

    def set_scale(self, x: float, y: float, z: float) -> None:
        self._root.transform.set_scale(x, y, z)

    @classmethod
    def hydrate(
        cls,
        description: FurnitureDescription | dict[str, Any],
        pool: ResourcePool,
        defaults=None,
    ) -> "Furniture":
        if not isinstance(description, FurnitureDescription):
            description = FurnitureDescription.from_dict(description)

        furniture = cls(
            name=description.name,
            type=description.type,
            pool=pool,
            model_url=description.model_url,
        )
        furniture.set_position(*description.position)
        furniture.set_rotation(*description.rotation)
        furniture.set_scale(*description.scale)
        return furniture

    async def load_model(self, fetcher: "AssetFetcher") -> NormalizationResult | None:
        """Fetch, normalize and install the external model.

        The root node keeps its identity and transform; only the content child
        is swapped. On failure the current content stays in place.

        Args:
            fetcher: Source of the raw model bytes.

        Returns:
            The normalization applied, or None if there is no model URL.

        Raises:
            AssetFetchError: If fetching or decoding fails.
        """
        if not self.model_url:
            return None

        data = await fetcher.fetch(self.model_url)
        model, result = load_normalized_model(data, self.model_url, name=self.name)

        # A previously loaded model is detached but not released: sessions
        # cloned from this furniture may still reference its resources.
        self._root.replace(self._content, model)
        self._content = model
        self._owns_model = True
        self.normalization = result

        console_logger.info(f"Loaded and normalized model for {self.name}")
        return result

    def clone(self) -> "Furniture":
        copy = Furniture(
            name=self.name, type=self.type, pool=self._pool, model_url=self.model_url
        )
        copy._root.transform = self._root.transform.copy()
        copy._root.metadata = dict(self._root.metadata)

        content = self._content.clone(recursive=True)
        copy._root.replace(copy._content, content)
        copy._content = content
        copy.normalization = self.normalization
        return copy

    def _release(self) -> None:
        if not self._owns_model:
            return
        released = 0
        for resource in self._content.iter_resources():
            if self._pool.contains(resource):
                continue
            resource.release()
            released += 1
        self._owns_model = False
        console_logger.debug(f"Released {released} model resources of {self.name}")
