from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .errors import CoordinateOutOfBounds, ZeroCoordinate
from .project_constants import MAX_AXIS, MAX_RADIUS


def _check_axis(axis: str, value: int, limit: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{axis} must be an int, got {type(value).__name__}")
    if value < 1 or value > limit:
        raise CoordinateOutOfBounds(axis, value, limit)


def _check_point(x: int, y: int) -> None:
    if x == 0 and y == 0:
        raise ZeroCoordinate("(0, 0) is the unset position")
    _check_axis("x", x, MAX_AXIS)
    _check_axis("y", y, MAX_AXIS)


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def validate(self) -> None:
        _check_point(self.x, self.y)

    @property
    def key(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def to_json(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}

    @staticmethod
    def from_json(obj: Dict[str, Any]) -> "Position":
        return Position(int(obj["x"]), int(obj["y"]))


@dataclass(frozen=True)
class WinningCircle:
    x: int
    y: int
    radius: int

    def validate(self) -> None:
        _check_point(self.x, self.y)
        _check_axis("radius", self.radius, MAX_RADIUS)

    def squared_distance(self, position: Position) -> int:
        dx = position.x - self.x
        dy = position.y - self.y
        return dx * dx + dy * dy

    def contains(self, position: Position) -> bool:
        # Boundary is inclusive; integers only, no sqrt.
        return self.squared_distance(position) <= self.radius * self.radius

    def to_json(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "radius": self.radius}

    @staticmethod
    def from_json(obj: Dict[str, Any]) -> "WinningCircle":
        return WinningCircle(int(obj["x"]), int(obj["y"]), int(obj["radius"]))
