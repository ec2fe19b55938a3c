"""Transformable scene-graph nodes.

A ``VisualNode`` is the unit the rendering surface consumes: a named node with
its own transform, an ordered list of children and an optional non-owning
reference to a heavy ``SharedResource`` (geometry + material buffers).
"""

import logging
import uuid

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

import numpy as np

from trimesh import transformations

if TYPE_CHECKING:
    from layoutsmith.scene.resource_pool import SharedResource

console_logger = logging.getLogger(__name__)


class UniqueID(str):
    """Type-safe unique identifier string."""

    @classmethod
    def generate(cls) -> "UniqueID":
        """Generate a new unique ID using UUID4."""
        return cls(str(uuid.uuid4()))


def _as_vector(value: Any, default: float) -> np.ndarray:
    if value is None:
        return np.full(3, default, dtype=float)
    vector = np.array(value, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vector.shape}")
    return vector


@dataclass
class Transform:
    """Local transform of a node.

    Rotation is stored as XYZ Euler angles in radians.
    """

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    """Translation relative to the parent node."""

    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    """XYZ Euler angles in radians."""

    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    """Per-axis scale."""

    def __post_init__(self) -> None:
        self.position = _as_vector(self.position, 0.0)
        self.rotation = _as_vector(self.rotation, 0.0)
        self.scale = _as_vector(self.scale, 1.0)

    def copy(self) -> "Transform":
        """Return an independent copy (no shared arrays)."""
        return Transform(
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            scale=self.scale.copy(),
        )

    def set_position(self, x: float, y: float, z: float) -> None:
        self.position = np.array([x, y, z], dtype=float)

    def set_rotation(self, x: float, y: float, z: float) -> None:
        self.rotation = np.array([x, y, z], dtype=float)

    def set_scale(self, x: float, y: float, z: float) -> None:
        self.scale = np.array([x, y, z], dtype=float)

    def matrix(self) -> np.ndarray:
        """Compose the 4x4 homogeneous matrix (scale, then rotate, then translate)."""
        return transformations.compose_matrix(
            scale=self.scale,
            angles=self.rotation,
            translate=self.position,
        )

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "Transform":
        """Decompose a 4x4 matrix without shear or perspective.

        Raises:
            ValueError: If the matrix is singular.
        """
        scale, _, angles, translate, _ = transformations.decompose_matrix(matrix)
        return cls(position=translate, rotation=angles, scale=scale)


class VisualNode:
    """A node in the visual tree.

    Node ids are generated per instantiation and never reused by clones. The
    only caller that passes an explicit id is ``Layout``, whose root node is
    named after the layout template.
    """

    def __init__(
        self,
        name: str = "",
        resource: "SharedResource | None" = None,
        transform: Transform | None = None,
        node_id: str | None = None,
    ):
        self.node_id = UniqueID(node_id) if node_id is not None else UniqueID.generate()
        self.name = name
        self.resource = resource
        self.transform = transform if transform is not None else Transform()
        self.metadata: dict[str, Any] = {}
        self.parent: VisualNode | None = None
        self._children: list[VisualNode] = []

    def __repr__(self) -> str:
        return (
            f"VisualNode(name={self.name!r}, node_id={self.node_id!r}, "
            f"children={len(self._children)})"
        )

    @property
    def children(self) -> tuple["VisualNode", ...]:
        """Children in insertion order."""
        return tuple(self._children)

    def add(self, child: "VisualNode") -> None:
        """Append a child, detaching it from any previous parent."""
        if child is self:
            raise ValueError("A node cannot be its own child")
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self._children.append(child)

    def remove(self, child: "VisualNode") -> bool:
        """Remove a direct child. Returns True if removed."""
        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                child.parent = None
                return True
        return False

    def replace(self, old: "VisualNode", new: "VisualNode") -> None:
        """Replace a direct child in place, keeping its position in the order.

        Raises:
            ValueError: If old is not a child of this node.
        """
        for index, existing in enumerate(self._children):
            if existing is old:
                if new.parent is not None:
                    new.parent.remove(new)
                old.parent = None
                new.parent = self
                self._children[index] = new
                return
        raise ValueError(f"{old!r} is not a child of {self!r}")

    def clear(self) -> None:
        """Detach all children."""
        for child in self._children:
            child.parent = None
        self._children = []

    def traverse(self) -> Iterator["VisualNode"]:
        """Yield this node and all descendants, depth-first pre-order."""
        yield self
        for child in self._children:
            yield from child.traverse()

    def iter_resources(self) -> Iterator["SharedResource"]:
        """Yield the resource of every node in the subtree that has one."""
        for node in self.traverse():
            if node.resource is not None:
                yield node.resource

    def clone(self, recursive: bool = True) -> "VisualNode":
        """Copy this node with a fresh id.

        Transforms and metadata are copied, resources are shared by reference.

        Args:
            recursive: Whether to clone the whole subtree or only this node.

        Returns:
            The detached copy.
        """
        copy = VisualNode(
            name=self.name,
            resource=self.resource,
            transform=self.transform.copy(),
        )
        copy.metadata = dict(self.metadata)
        if recursive:
            for child in self._children:
                copy.add(child.clone(recursive=True))
        return copy

    def world_matrix(self) -> np.ndarray:
        """Compose transforms from the tree root down to this node."""
        matrix = self.transform.matrix()
        node = self.parent
        while node is not None:
            matrix = node.transform.matrix() @ matrix
            node = node.parent
        return matrix
