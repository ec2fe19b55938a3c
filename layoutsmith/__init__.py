"""Master/session entity model for 3D property layouts."""

from .entities.furniture import Furniture  # noqa: F401
from .entities.layout import Layout  # noqa: F401
from .entities.room import Room  # noqa: F401
from .entities.wall import Wall  # noqa: F401
from .registry import LayoutRegistry  # noqa: F401
from .scene.resource_pool import ResourcePool  # noqa: F401

__all__ = [
    "Furniture",
    "Layout",
    "LayoutRegistry",
    "ResourcePool",
    "Room",
    "Wall",
]
