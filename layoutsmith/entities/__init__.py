from .base import Entity, EntityType
from .description import (
    CameraView,
    FurnitureDescription,
    LayoutDefaults,
    LayoutDescription,
    RoomDescription,
)
from .furniture import Furniture
from .layout import Layout
from .room import Room
from .wall import Wall

__all__ = [
    "CameraView",
    "Entity",
    "EntityType",
    "Furniture",
    "FurnitureDescription",
    "Layout",
    "LayoutDefaults",
    "LayoutDescription",
    "Room",
    "RoomDescription",
    "Wall",
]
