"""
Base classes for the trackfx framework.

This module defines the frame container, the frame-rate pair and the
effect base class that concrete effects build upon.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Any

import numpy as np

from trackfx.core.errors import InvalidJSON


@dataclass(frozen=True)
class FrameRate:
    """A rational frame rate, e.g. 30000/1001."""
    num: int = 30
    den: int = 1

    def __post_init__(self):
        if self.den == 0:
            raise ValueError("Frame rate denominator cannot be zero")

    @property
    def fps(self) -> float:
        """Frame rate as a float."""
        return self.num / self.den

    def to_fraction(self) -> Fraction:
        return Fraction(self.num, self.den)

    def to_dict(self) -> dict[str, int]:
        return {"num": self.num, "den": self.den}


class Frame:
    """
    A single video frame passed through effects.

    Holds a BGR pixel buffer as a numpy array. Effects read the image with
    get_image(), may draw into it, and store it back with set_image().
    """

    def __init__(self, number: int = 1, image: np.ndarray | None = None):
        self.number = number
        self._image = image

    def get_image(self) -> np.ndarray | None:
        return self._image

    def set_image(self, image: np.ndarray | None) -> None:
        self._image = image

    @property
    def has_image(self) -> bool:
        """True if the frame carries non-empty pixel content."""
        return self._image is not None and self._image.size > 0

    @property
    def width(self) -> int:
        return 0 if not self.has_image else self._image.shape[1]

    @property
    def height(self) -> int:
        return 0 if not self.has_image else self._image.shape[0]

    def __repr__(self) -> str:
        return f"Frame(number={self.number}, size={self.width}x{self.height})"


@dataclass
class EffectInfo:
    """Static description of an effect type."""
    class_name: str = ""
    name: str = ""
    description: str = ""
    has_audio: bool = False
    has_video: bool = True


def _random_id() -> str:
    return uuid.uuid4().hex[:10].upper()


class EffectBase(ABC):
    """
    Abstract base class for all effects.

    Holds the timeline metadata every effect shares (id, position, layer,
    start, end) and merges it to and from JSON. Subclasses implement
    get_frame() and extend json_value()/set_json_value() with their own
    fields.
    """

    def __init__(self):
        self.info = EffectInfo()
        self.id: str = _random_id()
        self.position: float = 0.0
        self.layer: int = 0
        self.start: float = 0.0
        self.end: float = 0.0
        self._initialized = False

    @property
    def duration(self) -> float:
        """Length of the effect on the timeline, in seconds."""
        return self.end - self.start

    @abstractmethod
    def get_frame(self, frame: Frame, frame_number: int) -> Frame:
        """
        Apply the effect to a frame.

        Args:
            frame: Frame to modify (may be mutated in place)
            frame_number: Timeline frame number of this frame

        Returns:
            The modified frame
        """
        pass

    def initialize(self, video_props: dict[str, Any]) -> None:
        """
        Initialize the effect with video properties.

        Args:
            video_props: Dictionary containing 'width', 'height', 'fps', 'frame_count'
        """
        self._initialized = True

    def process_frame(self, frame_num: int, frame: np.ndarray) -> np.ndarray | None:
        """Apply the effect to a bare numpy image."""
        return self.get_frame(Frame(frame_num, frame), frame_num).get_image()

    def finalize(self) -> Any:
        """Release resources held by the effect."""
        self._initialized = False

    def json_value(self) -> dict[str, Any]:
        """Serialize the shared effect fields."""
        return {
            "id": self.id,
            "position": self.position,
            "layer": self.layer,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
        }

    def set_json_value(self, root: dict[str, Any]) -> None:
        """
        Merge the shared effect fields from a JSON dict.

        Keys that are missing leave the current value unchanged.

        Raises:
            InvalidJSON: If a present key has the wrong type
        """
        if not isinstance(root, dict):
            raise InvalidJSON("Effect JSON root must be an object")

        if root.get("id") is not None:
            if not isinstance(root["id"], str):
                raise InvalidJSON("Effect id must be a string", key="id")
            self.id = root["id"]
        for key in ("position", "start", "end"):
            if root.get(key) is not None:
                setattr(self, key, _as_float(root[key], key))
        if root.get("layer") is not None:
            self.layer = int(_as_float(root["layer"], "layer"))

    def add_property_json(
        self,
        name: str,
        value: Any,
        type_: str,
        memo: str = "",
        keyframe: Any = None,
        min_value: float = 0.0,
        max_value: float = 0.0,
        readonly: bool = False,
        requested_frame: int = 1,
    ) -> dict[str, Any]:
        """
        Describe one editable property for an external editor.

        Args:
            name: Human readable label
            value: Current value at ``requested_frame``
            type_: "string", "int" or "float"
            memo: Free-form extra text
            keyframe: Curve backing the property, if it is animatable
            min_value: Lowest value the editor should allow
            max_value: Highest value the editor should allow
            readonly: True if the editor must not change it
            requested_frame: Frame the value was evaluated at
        """
        prop = {
            "name": name,
            "value": value,
            "memo": memo,
            "type": type_,
            "min": min_value,
            "max": max_value,
            "readonly": readonly,
            "keyframe": False,
            "points": 0,
            "interpolation": -1,
            "closest_point_x": -1,
            "frame": requested_frame,
        }
        if keyframe is not None:
            closest = keyframe.get_closest_point(requested_frame)
            prop["keyframe"] = any(p.x == requested_frame for p in keyframe.points)
            prop["points"] = len(keyframe)
            if closest is not None:
                prop["interpolation"] = int(closest.interpolation)
                prop["closest_point_x"] = closest.x
        return prop

    def base_properties(self, requested_frame: int) -> dict[str, Any]:
        """Read-only descriptors of the shared timeline fields."""
        max_time = 1000 * 60 * 30
        return {
            "id": self.add_property_json("ID", self.id, "string", readonly=True,
                                         min_value=-1, max_value=-1,
                                         requested_frame=requested_frame),
            "position": self.add_property_json("Position", self.position, "float",
                                               max_value=max_time,
                                               requested_frame=requested_frame),
            "layer": self.add_property_json("Track", self.layer, "int", max_value=20,
                                            requested_frame=requested_frame),
            "start": self.add_property_json("Start", self.start, "float",
                                            max_value=max_time,
                                            requested_frame=requested_frame),
            "end": self.add_property_json("End", self.end, "float",
                                          max_value=max_time,
                                          requested_frame=requested_frame),
            "duration": self.add_property_json("Duration", self.duration, "float",
                                               max_value=max_time, readonly=True,
                                               requested_frame=requested_frame),
        }

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures finalize is called."""
        self.finalize()
        return False


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidJSON(f"Expected a number, got {value!r}", key=key)
    return float(value)
