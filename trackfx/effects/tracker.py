"""
Tracker effect.

Draws a previously tracked bounding box over each frame. The box comes
from a tracking data file; five keyframe curves offset, resize and rotate
it per frame.

Example:
    >>> tracker = Tracker("clip.data")
    >>> tracker.delta_x.add_point(1, 0.05)
    >>> frame = tracker.get_frame(frame, 20)
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

import cv2
import numpy as np

from trackfx.animation import Keyframe
from trackfx.core.base import EffectBase, Frame, FrameRate
from trackfx.core.config import OverlayStyle, parse_json, register_effect
from trackfx.core.errors import InvalidJSON, TrackingFileError
from trackfx.tracking.track_io import load_tracked_data
from trackfx.tracking.track_store import BoundingBox, TrackStore, time_scale_between

logger = logging.getLogger(__name__)

# Curve name -> (label, min, max) shown in the properties descriptor
CURVES = {
    "delta_x": ("Displacement X-axis", -1.0, 1.0),
    "delta_y": ("Displacement Y-axis", -1.0, 1.0),
    "scale_x": ("Scale (Width)", -1.0, 1.0),
    "scale_y": ("Scale (Height)", -1.0, 1.0),
    "rotation": ("Rotation", 0.0, 360.0),
}


@dataclass(frozen=True)
class OverlayGeometry:
    """
    Final box in pixel space, anchored at its top-left corner.

    Attributes:
        x: Left edge in pixels
        y: Top edge in pixels
        width: Width in pixels
        height: Height in pixels
        angle: Clockwise rotation in degrees, about the box center
    """
    x: float
    y: float
    width: float
    height: float
    angle: float = 0.0

    @property
    def is_rotated(self) -> bool:
        return self.angle % 360.0 != 0.0

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def to_rect(self) -> tuple[int, int, int, int]:
        """Axis-aligned (x1, y1, x2, y2) corners, rounded to the nearest pixel."""
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.x + self.width)),
            int(round(self.y + self.height)),
        )

    def corners(self) -> np.ndarray:
        """Corners of the box rotated about its center, as an int32 (4, 2) array."""
        rect = (self.center, (self.width, self.height), self.angle)
        return np.round(cv2.boxPoints(rect)).astype(np.int32)


@register_effect("Tracker")
class Tracker(EffectBase):
    """
    Overlay a tracked object's bounding box, adjusted by keyframe curves.

    Per frame, the stored box (normalized top-left corner and size) is
    combined with the curves evaluated at that frame:

        x = (x1 + delta_x) * frame_width
        y = (y1 + delta_y) * frame_height
        w = (width + scale_x) * frame_width
        h = (height + scale_y) * frame_height

    and drawn as an unfilled rectangle with its top-left corner at (x, y),
    rotated by ``rotation`` degrees about its center. Scale curves grow
    the box right and down.
    Frames without tracking data pass through untouched.

    Rendering only reads the track store and curves. Loading data or
    applying JSON must not overlap with rendering; callers serialize them.

    Attributes:
        tracked_data: TrackStore holding the boxes
        protobuf_data_path: Tracking file the boxes came from ("" if none)
        base_fps: Frame rate the tracking data was recorded at
        time_scale: Factor between file frame numbers and stored frame
            numbers, re-applied after every load
        delta_x, delta_y: Position offsets, normalized
        scale_x, scale_y: Size offsets, normalized
        rotation: Rotation in degrees
        style: Stroke color and thickness
    """

    def __init__(self, tracker_data_path: str = "", style: OverlayStyle | None = None):
        """
        Create the effect.

        Args:
            tracker_data_path: Optional tracking file to load immediately
            style: Overlay stroke; defaults come from TRACKFX_* env vars
        """
        super().__init__()
        self._init_effect_details()

        self.tracked_data = TrackStore()
        self.protobuf_data_path = ""
        self.base_fps = FrameRate()
        self.time_scale = 1.0
        self.style = style or OverlayStyle.from_env()

        self.delta_x = Keyframe(0.0)
        self.delta_y = Keyframe(0.0)
        self.scale_x = Keyframe(0.0)
        self.scale_y = Keyframe(0.0)
        self.rotation = Keyframe(0.0)

        if tracker_data_path:
            self.load_tracked_data(tracker_data_path)

    def _init_effect_details(self) -> None:
        self.info.class_name = "Tracker"
        self.info.name = "Tracker"
        self.info.description = "Track the selected bounding box through the video."
        self.info.has_audio = False
        self.info.has_video = True

    @property
    def curves(self) -> dict[str, Keyframe]:
        """The five animatable parameters, by JSON key."""
        return {name: getattr(self, name) for name in CURVES}

    def load_tracked_data(self, path: str) -> bool:
        """
        Replace the tracked boxes with the contents of a tracking file.

        The current time_scale is applied to the freshly loaded frames.

        Returns:
            True on success. On failure the store is empty and
            protobuf_data_path is cleared.
        """
        if load_tracked_data(path, self.tracked_data):
            self.protobuf_data_path = str(path)
            self._apply_time_scale()
            return True
        self.protobuf_data_path = ""
        return False

    def set_time_scale(self, factor: float) -> None:
        """
        Set the factor between file frame numbers and stored frame numbers.

        The factor is absolute: setting 2.0 twice leaves the boxes at twice
        their file numbering.

        Raises:
            ValueError: If factor is not a positive finite number
        """
        if not (factor > 0 and math.isfinite(factor)):
            raise ValueError(f"Time scale factor must be positive and finite: {factor}")
        self.time_scale = float(factor)
        self._apply_time_scale()

    def match_frame_rate(self, rate: FrameRate) -> float:
        """Rescale the data recorded at base_fps onto a timeline at ``rate``."""
        factor = time_scale_between(self.base_fps, rate)
        self.set_time_scale(factor)
        return factor

    def _apply_time_scale(self) -> None:
        # The store remembers what it already holds; only apply the difference
        relative = self.time_scale / self.tracked_data.time_scale
        if not math.isclose(relative, 1.0):
            self.tracked_data.scale_points(relative)

    def get_tracked_data(self, frame_index: int) -> BoundingBox:
        """Stored box for a frame. Check tracked_data.contains() first."""
        return self.tracked_data.get_value(frame_index)

    def compute_box(
        self,
        frame_index: int,
        frame_width: int,
        frame_height: int,
    ) -> OverlayGeometry | None:
        """
        Compute the overlay geometry for a frame, without drawing.

        Returns:
            Pixel-space geometry, or None if the frame has no tracking data
        """
        if not self.tracked_data.contains(frame_index):
            return None

        box = self.tracked_data.get_value(frame_index)
        delta_x = self.delta_x.get_value(frame_index)
        delta_y = self.delta_y.get_value(frame_index)
        scale_x = self.scale_x.get_value(frame_index)
        scale_y = self.scale_y.get_value(frame_index)
        rotation = self.rotation.get_value(frame_index)

        return OverlayGeometry(
            x=(box.x1 + delta_x) * frame_width,
            y=(box.y1 + delta_y) * frame_height,
            width=(box.width + scale_x) * frame_width,
            height=(box.height + scale_y) * frame_height,
            angle=rotation,
        )

    def draw(self, image: np.ndarray, geometry: OverlayGeometry) -> np.ndarray:
        """Draw the box outline into ``image`` in place."""
        if geometry.is_rotated:
            cv2.polylines(
                image, [geometry.corners()], True,
                self.style.color, self.style.thickness, cv2.LINE_8,
            )
        else:
            x1, y1, x2, y2 = geometry.to_rect()
            cv2.rectangle(
                image, (x1, y1), (x2, y2),
                self.style.color, self.style.thickness, cv2.LINE_8,
            )
        return image

    def render(self, image: np.ndarray | None, frame_index: int) -> np.ndarray | None:
        """
        Draw the tracked box for ``frame_index`` onto ``image``.

        The image is modified in place and returned. Empty images and
        frames without tracking data are returned unchanged.
        """
        if image is None or image.size == 0:
            return image

        height, width = image.shape[:2]
        geometry = self.compute_box(frame_index, width, height)
        if geometry is None:
            return image

        return self.draw(image, geometry)

    def get_frame(self, frame: Frame | None, frame_number: int) -> Frame | None:
        """Apply the overlay to a Frame and return it."""
        if frame is None or not frame.has_image:
            return frame
        frame.set_image(self.render(frame.get_image(), frame_number))
        return frame

    def json(self) -> str:
        """Serialize the effect to a JSON string."""
        return json.dumps(self.json_value(), indent=2)

    def json_value(self) -> dict[str, Any]:
        """Serialize the effect to a JSON-compatible dict."""
        root = super().json_value()
        root["type"] = self.info.class_name
        root["protobuf_data_path"] = self.protobuf_data_path
        root["BaseFPS"] = self.base_fps.to_dict()
        root["TimeScale"] = self.time_scale
        for name, curve in self.curves.items():
            root[name] = curve.json_value()
        return root

    def set_json(self, value: str) -> None:
        """
        Load the effect from a JSON string.

        Raises:
            InvalidJSON: If the document is malformed
            TrackingFileError: If the referenced tracking file can't be loaded
        """
        self.set_json_value(parse_json(value))

    def set_json_value(self, root: dict[str, Any]) -> None:
        """
        Merge a JSON dict into the effect.

        Fields are applied in order: shared effect fields, BaseFPS and
        TimeScale (applied to the track store), the tracking file, then the
        curves. TimeScale is absolute and also applies to a file loaded by
        the same document. Missing keys leave the current value unchanged.
        A malformed field raises InvalidJSON after the fields before it were
        applied.
        If the tracking file fails to load, the path is cleared, the curves
        are still applied and TrackingFileError is raised at the end.

        Raises:
            InvalidJSON: If a field is malformed
            TrackingFileError: If the tracking file can't be loaded
        """
        super().set_json_value(root)

        base_fps = root.get("BaseFPS")
        if base_fps is not None:
            self.base_fps = _parse_frame_rate(base_fps, self.base_fps)

        time_scale = root.get("TimeScale")
        if time_scale is not None:
            time_scale = _parse_time_scale(time_scale)

        self.tracked_data.set_base_rate(self.base_fps)
        if time_scale is not None:
            self.set_time_scale(time_scale)

        load_error = None
        data_path = root.get("protobuf_data_path")
        if data_path is not None:
            if not isinstance(data_path, str):
                raise InvalidJSON("Tracking data path must be a string", key="protobuf_data_path")
            if not data_path:
                self.tracked_data.clear()
                self.protobuf_data_path = ""
            elif not self.load_tracked_data(data_path):
                logger.warning(f"Invalid tracking data path: {data_path}")
                load_error = TrackingFileError(
                    f"Could not load tracking data from {data_path}", data_path
                )

        for name, curve in self.curves.items():
            if root.get(name) is not None:
                curve.set_json_value(root[name])

        if load_error is not None:
            raise load_error

    def properties(self, requested_frame: int) -> dict[str, Any]:
        """
        Describe every editable property at a frame.

        Read-only; intended for an external editing UI.
        """
        root = self.base_properties(requested_frame)
        for name, curve in self.curves.items():
            label, min_value, max_value = CURVES[name]
            root[name] = self.add_property_json(
                label, curve.get_value(requested_frame), "float",
                keyframe=curve, min_value=min_value, max_value=max_value,
                requested_frame=requested_frame,
            )
        return root

    def properties_json(self, requested_frame: int) -> str:
        """properties() as a JSON string."""
        return json.dumps(self.properties(requested_frame), indent=2)

    def __repr__(self) -> str:
        return f"Tracker(id={self.id}, data={self.protobuf_data_path!r}, boxes={len(self.tracked_data)})"


def _parse_frame_rate(data: Any, current: FrameRate) -> FrameRate:
    if not isinstance(data, dict):
        raise InvalidJSON("BaseFPS must be an object", key="BaseFPS")

    num, den = current.num, current.den
    for key in ("num", "den"):
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidJSON(f"Expected an integer, got {value!r}", key=f"BaseFPS.{key}")
        if key == "num":
            num = value
        else:
            den = value

    if num <= 0:
        raise InvalidJSON(f"Frame rate must be positive, got {num}", key="BaseFPS.num")
    if den <= 0:
        raise InvalidJSON(f"Frame rate denominator must be positive, got {den}", key="BaseFPS.den")
    return FrameRate(num, den)


def _parse_time_scale(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidJSON(f"Expected a number, got {value!r}", key="TimeScale")
    try:
        value = float(value)
    except OverflowError:
        raise InvalidJSON("TimeScale is out of range", key="TimeScale") from None
    # json.loads accepts NaN and Infinity
    if not math.isfinite(value) or value <= 0:
        raise InvalidJSON(f"TimeScale must be a positive finite number: {value}", key="TimeScale")
    return value
