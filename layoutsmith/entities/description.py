"""Typed records for raw layout descriptions.

The storage backend serves JSON shaped as::

    {"id": ..., "name": ..., "cameraView": {...}?,
     "rooms": [{"name": ..., "width": ?, "depth": ?,
                "furniture": [{"name": ..., "type": ..., "modelUrl": ?,
                               "position": ?, "rotation": ?, "scale": ?}]}]}

Vectors may be ``{"x": .., "y": .., "z": ..}`` objects or 3-element lists.
Parsing is strict on required fields and types and raises
``MalformedDescriptionError`` without producing partial records.
"""

from dataclasses import dataclass, field
from typing import Any

from omegaconf import DictConfig

from layoutsmith.errors import MalformedDescriptionError

Vector3 = tuple[float, float, float]

ZERO: Vector3 = (0.0, 0.0, 0.0)
ONE: Vector3 = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class LayoutDefaults:
    """Values used where a description is silent."""

    room_width: float = 20.0
    room_depth: float = 20.0
    wall_height: float = 3.5
    wall_thickness: float = 0.5

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "LayoutDefaults":
        return cls(
            room_width=float(cfg.room.default_width),
            room_depth=float(cfg.room.default_depth),
            wall_height=float(cfg.room.wall_height),
            wall_thickness=float(cfg.room.wall_thickness),
        )


def _require(data: dict[str, Any], key: str, context: str) -> Any:
    if key not in data or data[key] is None:
        raise MalformedDescriptionError(f"{context} is missing required field '{key}'")
    return data[key]


def _require_str(data: dict[str, Any], key: str, context: str) -> str:
    value = _require(data, key, context)
    if not isinstance(value, str) or not value.strip():
        raise MalformedDescriptionError(
            f"{context} field '{key}' must be a non-empty string, got {value!r}"
        )
    return value


def _optional_number(
    data: dict[str, Any], key: str, default: float | None, context: str
) -> float | None:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDescriptionError(
            f"{context} field '{key}' must be a number, got {value!r}"
        )
    if value <= 0:
        raise MalformedDescriptionError(
            f"{context} field '{key}' must be positive, got {value}"
        )
    return float(value)


def _optional_list(data: dict[str, Any], key: str, context: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedDescriptionError(
            f"{context} field '{key}' must be a list, got {type(value).__name__}"
        )
    return value


def _ensure_dict(data: Any, context: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedDescriptionError(
            f"{context} must be an object, got {type(data).__name__}"
        )
    return data


def parse_vector(value: Any, default: Vector3, context: str) -> Vector3:
    """Parse an ``{x, y, z}`` object or 3-element list.

    Missing components of an object take the matching default component.

    Raises:
        MalformedDescriptionError: If the value has the wrong shape or types.
    """
    if value is None:
        return default

    if isinstance(value, dict):
        components = [value.get(axis, fallback) for axis, fallback in zip("xyz", default)]
    elif isinstance(value, (list, tuple)) and len(value) == 3:
        components = list(value)
    else:
        raise MalformedDescriptionError(
            f"{context} must be an {{x, y, z}} object or a 3-element list, "
            f"got {value!r}"
        )

    for component in components:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise MalformedDescriptionError(
                f"{context} components must be numbers, got {value!r}"
            )
    return (float(components[0]), float(components[1]), float(components[2]))


@dataclass(frozen=True)
class CameraView:
    """Initial camera placement suggested by the layout author."""

    position: Vector3
    look_target: Vector3

    @classmethod
    def from_dict(cls, data: Any) -> "CameraView":
        data = _ensure_dict(data, "cameraView")
        target = data.get("target", data.get("lookAt"))
        return cls(
            position=parse_vector(
                _require(data, "position", "cameraView"), ZERO, "cameraView.position"
            ),
            look_target=parse_vector(target, ZERO, "cameraView.target"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"position": list(self.position), "target": list(self.look_target)}


@dataclass(frozen=True)
class FurnitureDescription:
    name: str
    type: str
    model_url: str | None = None
    position: Vector3 = ZERO
    rotation: Vector3 = ZERO
    scale: Vector3 = ONE

    @classmethod
    def from_dict(cls, data: Any) -> "FurnitureDescription":
        data = _ensure_dict(data, "Furniture description")
        name = _require_str(data, "name", "Furniture description")
        context = f"Furniture '{name}'"
        model_url = data.get("modelUrl")
        if model_url is not None and not isinstance(model_url, str):
            raise MalformedDescriptionError(
                f"{context} field 'modelUrl' must be a string, got {model_url!r}"
            )
        return cls(
            name=name,
            type=_require_str(data, "type", context),
            model_url=model_url or None,
            position=parse_vector(data.get("position"), ZERO, f"{context} position"),
            rotation=parse_vector(data.get("rotation"), ZERO, f"{context} rotation"),
            scale=parse_vector(data.get("scale"), ONE, f"{context} scale"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "modelUrl": self.model_url,
            "position": list(self.position),
            "rotation": list(self.rotation),
            "scale": list(self.scale),
        }


@dataclass(frozen=True)
class RoomDescription:
    name: str
    width: float | None = None
    """None means the configured default width."""

    depth: float | None = None
    """None means the configured default depth."""

    furniture: tuple[FurnitureDescription, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> "RoomDescription":
        data = _ensure_dict(data, "Room description")
        name = _require_str(data, "name", "Room description")
        context = f"Room '{name}'"
        return cls(
            name=name,
            width=_optional_number(data, "width", None, context),
            depth=_optional_number(data, "depth", None, context),
            furniture=tuple(
                FurnitureDescription.from_dict(item)
                for item in _optional_list(data, "furniture", context)
            ),
        )


@dataclass(frozen=True)
class LayoutDescription:
    layout_id: str
    name: str
    camera_view: CameraView | None = None
    rooms: tuple[RoomDescription, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> "LayoutDescription":
        """Parse a full layout record.

        Raises:
            MalformedDescriptionError: If the record is empty, not an object, or
                any nested record is malformed.
        """
        data = _ensure_dict(data, "Layout description")
        if not data:
            raise MalformedDescriptionError("Layout description is empty")

        layout_id = _require_str(data, "id", "Layout description")
        context = f"Layout '{layout_id}'"
        camera_data = data.get("cameraView")
        return cls(
            layout_id=layout_id,
            name=_require_str(data, "name", context),
            camera_view=(
                CameraView.from_dict(camera_data) if camera_data is not None else None
            ),
            rooms=tuple(
                RoomDescription.from_dict(room)
                for room in _optional_list(data, "rooms", context)
            ),
        )
