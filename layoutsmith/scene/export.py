"""Flatten visual trees into trimesh scenes for renderers and GLB export."""

import logging

import numpy as np
import trimesh

from layoutsmith.scene.visual_node import VisualNode

console_logger = logging.getLogger(__name__)


def to_trimesh_scene(root: VisualNode) -> trimesh.Scene:
    """Build a trimesh scene with one instance per resource-bearing node.

    Each distinct resource is added to the scene once; nodes that share a
    resource become extra graph instances of the same geometry. Transforms are
    expressed in the frame of the root's parent, so the root's own transform is
    included. Released resources are skipped.

    Args:
        root: Root of the subtree to export.

    Returns:
        Scene whose graph node names are the visual node ids.
    """
    scene = trimesh.Scene()
    geometry_names: dict[int, str] = {}
    skipped = 0

    stack: list[tuple[VisualNode, np.ndarray]] = [(root, np.eye(4))]
    while stack:
        node, parent_matrix = stack.pop()
        matrix = parent_matrix @ node.transform.matrix()

        if node.resource is not None:
            if node.resource.geometry is None:
                skipped += 1
            elif id(node.resource) in geometry_names:
                scene.graph.update(
                    frame_to=str(node.node_id),
                    frame_from=scene.graph.base_frame,
                    matrix=matrix,
                    geometry=geometry_names[id(node.resource)],
                )
            else:
                geom_name = f"{node.resource.kind}_{len(geometry_names)}"
                scene.add_geometry(
                    node.resource.geometry,
                    node_name=str(node.node_id),
                    geom_name=geom_name,
                    transform=matrix,
                )
                geometry_names[id(node.resource)] = geom_name

        # Reverse so children are visited in insertion order.
        for child in reversed(node.children):
            stack.append((child, matrix))

    if skipped:
        console_logger.warning(f"Skipped {skipped} released resources during export")
    return scene
