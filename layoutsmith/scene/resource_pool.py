"""Process-wide pool of shared rendering resources.

Entities never own pooled resources. They read a handle from the pool and
attach it to their own nodes. Creation is memoized per resource kind, so every
Wall in every layout and session references the same unit box.
"""

import logging

from dataclasses import dataclass
from enum import Enum
from typing import Callable

import trimesh

from omegaconf import DictConfig

from layoutsmith.errors import ResourcePoolError

console_logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    """Kinds of pooled default resources."""

    UNIT_WALL_BOX = "unit_wall_box"
    PLACEHOLDER_FURNITURE_BOX = "placeholder_furniture_box"


@dataclass(frozen=True)
class Material:
    """Flat PBR material parameters."""

    color: int
    """RGB color as 0xRRGGBB."""

    roughness: float = 1.0
    metalness: float = 0.0
    double_sided: bool = False


class SharedResource:
    """Geometry and material buffers referenced by visual nodes.

    Nodes hold non-owning references. Whoever created the resource decides when
    it is released: the pool never releases its resources, a Furniture releases
    the resources of an asset it loaded itself.
    """

    def __init__(
        self,
        kind: str,
        geometry: trimesh.Trimesh | None,
        material: Material | None = None,
        pooled: bool = False,
    ):
        self.kind = kind
        self.geometry = geometry
        self.material = material
        self.pooled = pooled
        self.released = False

    def __repr__(self) -> str:
        return (
            f"SharedResource(kind={self.kind!r}, pooled={self.pooled}, "
            f"released={self.released})"
        )

    def release(self) -> None:
        """Drop the buffers. Idempotent; pooled resources are never released."""
        if self.pooled:
            console_logger.warning(
                f"Refusing to release pooled resource {self.kind}; it is shared "
                "by every entity"
            )
            return
        if self.released:
            return
        self.geometry = None
        self.material = None
        self.released = True


ResourceFactory = Callable[[], SharedResource]


class ResourcePool:
    """Memoizing registry of shared default resources keyed by kind."""

    def __init__(self, placeholder_size: float = 1.0) -> None:
        """
        Args:
            placeholder_size: Edge length of the placeholder furniture box.
        """
        if placeholder_size <= 0:
            raise ResourcePoolError(
                f"Placeholder size must be positive, got {placeholder_size}"
            )
        self._resources: dict[str, SharedResource] = {}
        self._factories: dict[str, ResourceFactory] = {
            ResourceKind.UNIT_WALL_BOX.value: _make_unit_wall_box,
            ResourceKind.PLACEHOLDER_FURNITURE_BOX.value: lambda: _make_placeholder_box(
                placeholder_size
            ),
        }

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "ResourcePool":
        return cls(placeholder_size=float(cfg.resources.placeholder_size))

    def register_factory(self, kind: str, factory: ResourceFactory) -> None:
        """Register or replace the factory for a kind.

        Raises:
            ResourcePoolError: If the kind was already created; replacing it
                would split entities across two different buffers.
        """
        kind = _kind_key(kind)
        if kind in self._resources:
            raise ResourcePoolError(
                f"Resource {kind} already created; cannot replace its factory"
            )
        self._factories[kind] = factory

    def get(self, kind: str) -> SharedResource:
        """Return the shared resource for a kind, creating it on first use.

        Raises:
            ResourcePoolError: If no factory is known for the kind, the factory
                fails, or it returns an unusable resource.
        """
        kind = _kind_key(kind)
        resource = self._resources.get(kind)
        if resource is not None:
            return resource

        factory = self._factories.get(kind)
        if factory is None:
            raise ResourcePoolError(f"No factory registered for resource {kind}")

        try:
            resource = factory()
        except Exception as e:
            raise ResourcePoolError(f"Failed to create resource {kind}: {e}") from e

        if not isinstance(resource, SharedResource):
            raise ResourcePoolError(
                f"Factory for {kind} returned {type(resource).__name__}, "
                "expected SharedResource"
            )
        if resource.geometry is None or len(resource.geometry.vertices) == 0:
            raise ResourcePoolError(f"Factory for {kind} returned empty geometry")

        resource.pooled = True
        self._resources[kind] = resource
        console_logger.debug(f"Created shared resource {kind}")
        return resource

    def contains(self, resource: SharedResource) -> bool:
        """Whether the resource object is one of the pool's own."""
        return any(existing is resource for existing in self._resources.values())

    def size(self) -> int:
        """Number of resources created so far."""
        return len(self._resources)


def _kind_key(kind: str) -> str:
    return kind.value if isinstance(kind, ResourceKind) else str(kind)


def _make_unit_wall_box() -> SharedResource:
    # Unit cube; each wall scales its node to its own dimensions.
    return SharedResource(
        kind=ResourceKind.UNIT_WALL_BOX.value,
        geometry=trimesh.creation.box(extents=[1.0, 1.0, 1.0]),
        material=Material(color=0xF5F5F5, roughness=0.8, double_sided=True),
    )


def _make_placeholder_box(size: float) -> SharedResource:
    return SharedResource(
        kind=ResourceKind.PLACEHOLDER_FURNITURE_BOX.value,
        geometry=trimesh.creation.box(extents=[size, size, size]),
        material=Material(color=0x888888),
    )
