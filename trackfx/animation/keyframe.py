"""
Keyframe curves for animatable effect parameters.

A Keyframe maps a frame number to a float value. The value is defined by
user-placed control points; frames between two points are interpolated
with the mode of the left point (bezier, linear or constant).

Example:
    >>> kf = Keyframe()
    >>> kf.add_point(1, 0.0, Interpolation.LINEAR)
    >>> kf.add_point(11, 1.0)
    >>> kf.get_value(6)
    0.5
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterator

from trackfx.core.errors import InvalidJSON


class Interpolation(IntEnum):
    """Interpolation mode of the segment starting at a point."""
    BEZIER = 0
    LINEAR = 1
    CONSTANT = 2


# Bezier handles are relative to the segment: (0, 0) is the left point
# and (1, 1) the right point. These defaults give an ease-in-out.
DEFAULT_HANDLE_LEFT = (0.5, 1.0)
DEFAULT_HANDLE_RIGHT = (0.5, 0.0)

BEZIER_ITERATIONS = 40


@dataclass
class Point:
    """A single control point of a Keyframe."""
    x: float
    y: float
    interpolation: Interpolation = Interpolation.BEZIER
    handle_left: tuple[float, float] = field(default=DEFAULT_HANDLE_LEFT)
    handle_right: tuple[float, float] = field(default=DEFAULT_HANDLE_RIGHT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "co": {"X": self.x, "Y": self.y},
            "interpolation": int(self.interpolation),
            "handle_left": {"X": self.handle_left[0], "Y": self.handle_left[1]},
            "handle_right": {"X": self.handle_right[0], "Y": self.handle_right[1]},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Point":
        """
        Build a Point from its JSON form.

        Raises:
            InvalidJSON: If required keys are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise InvalidJSON("Keyframe point must be an object")
        co = data.get("co")
        if not isinstance(co, dict):
            raise InvalidJSON("Keyframe point is missing coordinates", key="co")

        x = _number(co.get("X"), "co.X")
        y = _number(co.get("Y"), "co.Y")

        interp = data.get("interpolation", Interpolation.BEZIER)
        try:
            interpolation = Interpolation(interp)
        except ValueError:
            raise InvalidJSON(
                f"Unknown interpolation mode: {interp!r}", key="interpolation"
            ) from None

        return cls(
            x=x,
            y=y,
            interpolation=interpolation,
            handle_left=_handle(data.get("handle_left"), DEFAULT_HANDLE_LEFT, "handle_left"),
            handle_right=_handle(data.get("handle_right"), DEFAULT_HANDLE_RIGHT, "handle_right"),
        )


def _number(value: Any, key: str) -> float:
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidJSON(f"Expected a number, got {value!r}", key=key)
    return float(value)


def _handle(data: Any, default: tuple[float, float], key: str) -> tuple[float, float]:
    if data is None:
        return default
    if not isinstance(data, dict):
        raise InvalidJSON("Bezier handle must be an object", key=key)
    return (_number(data.get("X"), f"{key}.X"), _number(data.get("Y"), f"{key}.Y"))


def _cubic(p0: float, p1: float, p2: float, p3: float, t: float) -> float:
    u = 1.0 - t
    return u * u * u * p0 + 3 * u * u * t * p1 + 3 * u * t * t * p2 + t * t * t * p3


class Keyframe:
    """
    A user-editable curve from frame number to value.

    Evaluation never mutates the curve, so a Keyframe can be read from
    several render threads at once. Editing is not synchronized.

    Attributes:
        points: Control points sorted by frame number
    """

    def __init__(self, value: float | None = None):
        """
        Create a curve.

        Args:
            value: If given, the curve starts with a single point at frame 1
        """
        self.points: list[Point] = []
        if value is not None:
            self.add_point(1, value)

    def add_point(
        self,
        x: float,
        y: float,
        interpolation: Interpolation = Interpolation.BEZIER,
    ) -> Point:
        """Insert a point, replacing any point already at frame ``x``."""
        point = Point(float(x), float(y), Interpolation(interpolation))
        return self.insert(point)

    def insert(self, point: Point) -> Point:
        """Insert an existing Point object, keeping points sorted."""
        for i, existing in enumerate(self.points):
            if existing.x == point.x:
                self.points[i] = point
                return point
        index = bisect_right([p.x for p in self.points], point.x)
        self.points.insert(index, point)
        return point

    def remove_point(self, x: float) -> bool:
        """Remove the point at frame ``x``. Returns True if one was removed."""
        for i, existing in enumerate(self.points):
            if existing.x == x:
                del self.points[i]
                return True
        return False

    def get_value(self, frame: float) -> float:
        """Evaluate the curve at a frame number."""
        if not self.points:
            return 0.0

        first, last = self.points[0], self.points[-1]
        if frame <= first.x:
            return first.y
        if frame >= last.x:
            return last.y

        index = bisect_right([p.x for p in self.points], frame)
        left = self.points[index - 1]
        right = self.points[index]
        return self._interpolate(left, right, frame)

    def _interpolate(self, left: Point, right: Point, frame: float) -> float:
        dx = right.x - left.x
        dy = right.y - left.y

        if left.interpolation == Interpolation.CONSTANT:
            return left.y

        if left.interpolation == Interpolation.LINEAR:
            return left.y + dy * (frame - left.x) / dx

        # Control points in absolute coordinates
        c1x = left.x + left.handle_right[0] * dx
        c1y = left.y + left.handle_right[1] * dy
        c2x = left.x + right.handle_left[0] * dx
        c2y = left.y + right.handle_left[1] * dy

        # Solve x(t) == frame by bisection; x(t) is monotonic when the
        # handle X values stay inside the segment.
        lo, hi = 0.0, 1.0
        t = 0.5
        for _ in range(BEZIER_ITERATIONS):
            t = (lo + hi) / 2
            x = _cubic(left.x, c1x, c2x, right.x, t)
            if x < frame:
                lo = t
            else:
                hi = t
        return _cubic(left.y, c1y, c2y, right.y, t)

    def get_closest_point(self, frame: float) -> Point | None:
        """Return the last point at or before ``frame`` (or the first point)."""
        if not self.points:
            return None
        index = bisect_right([p.x for p in self.points], frame)
        return self.points[max(index - 1, 0)]

    def json_value(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {"Points": [p.to_dict() for p in self.points]}

    def set_json_value(self, data: Any) -> None:
        """
        Replace all points from a JSON-compatible dict.

        Raises:
            InvalidJSON: If the document is malformed. The curve is left
                unchanged in that case.
        """
        if not isinstance(data, dict):
            raise InvalidJSON("Keyframe must be an object")
        raw_points = data.get("Points", [])
        if not isinstance(raw_points, list):
            raise InvalidJSON("Keyframe points must be a list", key="Points")

        parsed = [Point.from_dict(p) for p in raw_points]
        self.points = []
        for point in parsed:
            self.insert(point)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keyframe):
            return NotImplemented
        return self.points == other.points

    def __repr__(self) -> str:
        return f"Keyframe(points={len(self.points)})"
