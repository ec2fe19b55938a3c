"""Decoding and normalization of external furniture models.

Loaded models are converted into a ``VisualNode`` subtree and normalized so the
bounding-box center sits at the furniture origin and the largest dimension is
one unit. Furniture scale from the layout description is then applied on top
by the furniture root, which keeps authoring-unit errors (millimeters vs
meters) separate from the intended real-world size.
"""

import io
import logging

from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlparse

import numpy as np
import trimesh

from layoutsmith.errors import AssetFetchError
from layoutsmith.scene.resource_pool import Material, SharedResource
from layoutsmith.scene.visual_node import Transform, VisualNode

console_logger = logging.getLogger(__name__)

DEFAULT_FILE_TYPE = "glb"
SUPPORTED_FILE_TYPES = {"glb", "gltf", "obj", "stl", "ply", "off"}

# Material used for loaded leaves when the source carries no usable color.
DEFAULT_ASSET_MATERIAL = Material(color=0xCCCCCC)


@dataclass(frozen=True)
class NormalizationResult:
    """Outcome of normalizing one model."""

    bbox_min: np.ndarray
    """Source-space bounding box minimum corner."""

    bbox_max: np.ndarray
    """Source-space bounding box maximum corner."""

    scale_factor: float
    """Uniform scale applied to the model (1 / largest extent)."""

    @property
    def center(self) -> np.ndarray:
        return (self.bbox_min + self.bbox_max) / 2.0

    @property
    def extents(self) -> np.ndarray:
        return self.bbox_max - self.bbox_min


def infer_file_type(url: str) -> str:
    """Guess the model format from the URL or path suffix."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lower().lstrip(".")
    if suffix in SUPPORTED_FILE_TYPES:
        return suffix
    return DEFAULT_FILE_TYPE


def decode_model(data: bytes, url: str) -> trimesh.Scene:
    """Decode raw model bytes into a trimesh scene.

    Raises:
        AssetFetchError: If the bytes cannot be decoded or contain no geometry.
    """
    file_type = infer_file_type(url)
    try:
        scene = trimesh.load(
            file_obj=io.BytesIO(data), file_type=file_type, force="scene"
        )
    except Exception as e:
        raise AssetFetchError(url, f"could not decode {file_type}: {e}") from e

    if not isinstance(scene, trimesh.Scene) or len(scene.geometry) == 0:
        raise AssetFetchError(url, "model contains no geometry")
    return scene


def _material_of(geometry: trimesh.Trimesh) -> Material:
    visual = getattr(geometry, "visual", None)
    material = getattr(visual, "material", None)
    color = getattr(material, "baseColorFactor", None)
    if color is None:
        color = getattr(material, "main_color", None)
    if color is None or len(color) < 3:
        return DEFAULT_ASSET_MATERIAL
    rgb = [int(max(0, min(255, round(float(c))))) for c in np.asarray(color)[:3]]
    return Material(color=(rgb[0] << 16) | (rgb[1] << 8) | rgb[2])


def build_model_node(scene: trimesh.Scene, url: str, name: str = "model") -> VisualNode:
    """Convert a trimesh scene into a visual subtree.

    One leaf is created per geometry instance in the scene graph, carrying that
    instance's transform relative to the model node. Each distinct geometry gets
    one ``SharedResource``, so instanced geometry stays shared inside the model.

    Raises:
        AssetFetchError: If an instance transform cannot be decomposed.
    """
    model = VisualNode(name=name)
    model.metadata["source_url"] = url
    resources: dict[str, SharedResource] = {}

    for node_name in scene.graph.nodes_geometry:
        matrix, geometry_name = scene.graph[node_name]
        geometry = scene.geometry.get(geometry_name)
        if not isinstance(geometry, trimesh.Trimesh):
            console_logger.debug(f"Skipping non-mesh geometry {geometry_name} in {url}")
            continue

        resource = resources.get(geometry_name)
        if resource is None:
            resource = SharedResource(
                kind=f"asset:{url}#{geometry_name}",
                geometry=geometry,
                material=_material_of(geometry),
            )
            resources[geometry_name] = resource

        try:
            transform = Transform.from_matrix(matrix)
        except ValueError as e:
            raise AssetFetchError(url, f"invalid transform on {node_name}: {e}") from e
        model.add(VisualNode(name=str(node_name), resource=resource, transform=transform))

    if not model.children:
        raise AssetFetchError(url, "model contains no mesh geometry")
    return model


def mesh_instance_bounds(scene: trimesh.Scene) -> np.ndarray | None:
    """Axis-aligned bounds of the mesh instances ``build_model_node`` keeps.

    Paths, point clouds and other non-mesh geometry are ignored.

    Returns:
        (2, 3) array of min and max corners, or None if there is no mesh vertex.
    """
    corners = []
    for node_name in scene.graph.nodes_geometry:
        matrix, geometry_name = scene.graph[node_name]
        geometry = scene.geometry.get(geometry_name)
        if not isinstance(geometry, trimesh.Trimesh) or len(geometry.vertices) == 0:
            continue
        points = trimesh.transform_points(geometry.vertices, matrix)
        corners.append(points.min(axis=0))
        corners.append(points.max(axis=0))

    if not corners:
        return None
    corners = np.vstack(corners)
    return np.array([corners.min(axis=0), corners.max(axis=0)])


def normalize_model(model: VisualNode, bounds: np.ndarray) -> NormalizationResult:
    """Recenter and unit-scale a model node in place.

    The model transform becomes ``scale = s`` and ``position = -s * center`` so
    the bounding-box center maps to the parent origin and the largest extent
    becomes one unit. Degenerate (zero-size) models are recentered but not
    scaled.

    Args:
        model: Model node whose children hold the geometry.
        bounds: (2, 3) array of bounding box min and max in model space.

    Returns:
        The applied normalization.
    """
    bbox_min = np.asarray(bounds[0], dtype=float)
    bbox_max = np.asarray(bounds[1], dtype=float)
    center = (bbox_min + bbox_max) / 2.0
    max_dim = float(np.max(bbox_max - bbox_min))

    scale_factor = 1.0 / max_dim if max_dim > 0 else 1.0

    model.transform = Transform(
        position=-scale_factor * center,
        rotation=np.zeros(3),
        scale=np.full(3, scale_factor),
    )
    return NormalizationResult(
        bbox_min=bbox_min, bbox_max=bbox_max, scale_factor=scale_factor
    )


def load_normalized_model(
    data: bytes, url: str, name: str = "model"
) -> tuple[VisualNode, NormalizationResult]:
    """Decode bytes, build the model subtree and normalize it.

    Raises:
        AssetFetchError: If decoding fails or the model has no usable geometry.
    """
    scene = decode_model(data, url)
    model = build_model_node(scene, url, name=name)

    bounds = mesh_instance_bounds(scene)
    if bounds is None:
        raise AssetFetchError(url, "model has no mesh vertices")
    result = normalize_model(model, bounds)
    console_logger.debug(
        f"Normalized {url}: extents={result.extents.tolist()}, "
        f"scale_factor={result.scale_factor:.4f}"
    )
    return model, result
