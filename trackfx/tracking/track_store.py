"""
Frame-indexed storage of tracked bounding boxes.

The TrackStore is a partial function from frame number to BoundingBox:
frames without tracking data simply have no entry. Frame numbers can be
rescaled to align data recorded at one frame rate with a timeline
running at another.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterator

from trackfx.core.base import FrameRate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """
    A tracked box in normalized (0-1) frame coordinates.

    Attributes:
        center_x: Horizontal center, relative to frame width
        center_y: Vertical center, relative to frame height
        width: Box width, relative to frame width
        height: Box height, relative to frame height
        frame_index: Frame number the box belongs to
        rotation: Rotation recorded by the tracker (not used for drawing)
    """
    center_x: float
    center_y: float
    width: float
    height: float
    frame_index: int = 0
    rotation: float = 0.0

    @property
    def x1(self) -> float:
        return self.center_x - self.width / 2

    @property
    def y1(self) -> float:
        return self.center_y - self.height / 2

    @property
    def x2(self) -> float:
        return self.center_x + self.width / 2

    @property
    def y2(self) -> float:
        return self.center_y + self.height / 2

    def to_dict(self) -> dict[str, float]:
        return {
            "frame": self.frame_index,
            "cx": self.center_x,
            "cy": self.center_y,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
        }


def scale_frame_index(frame_index: int, factor: float) -> int:
    """Map a frame number through a time-scale factor, rounding half up."""
    return int(math.floor(frame_index * factor + 0.5))


def time_scale_between(base: FrameRate, target: FrameRate) -> float:
    """
    Return the factor that maps frame numbers sampled at ``base`` onto a
    timeline running at ``target``.

    Example:
        >>> time_scale_between(FrameRate(30, 1), FrameRate(60, 1))
        2.0
    """
    if base.fps <= 0:
        raise ValueError(f"Base frame rate must be positive: {base.num}/{base.den}")
    return float(target.to_fraction() / base.to_fraction())


class TrackStore:
    """
    Ordered mapping of frame number to BoundingBox.

    Reads (contains/get_value/iteration) never mutate the store, so several
    render calls may query it concurrently. clear/add_box/scale_points must
    not run while renders are in flight; the store does no locking.

    Attributes:
        base_rate: Frame rate the stored frame numbers were sampled at
        time_scale: Product of all factors applied since the last clear()

    Example:
        >>> store = TrackStore()
        >>> store.add_box(10, 0.2, 0.2, 0.4, 0.4)
        >>> store.contains(10)
        True
        >>> store.get_value(10).center_x
        0.4
    """

    def __init__(self, base_rate: FrameRate | None = None):
        self._boxes: dict[int, BoundingBox] = {}
        self.base_rate = base_rate or FrameRate()
        self.time_scale = 1.0

    def clear(self) -> None:
        """Remove all boxes."""
        self._boxes.clear()
        self.time_scale = 1.0

    def add_box(
        self,
        frame_index: int,
        x1: float,
        y1: float,
        width: float,
        height: float,
        rotation: float = 0.0,
    ) -> BoundingBox:
        """
        Insert or overwrite the box for a frame.

        Args:
            frame_index: Frame number (non-negative)
            x1: Left edge, normalized
            y1: Top edge, normalized
            width: Box width, normalized
            height: Box height, normalized
            rotation: Rotation recorded by the tracker

        Returns:
            The stored BoundingBox
        """
        box = BoundingBox(
            center_x=x1 + width / 2,
            center_y=y1 + height / 2,
            width=width,
            height=height,
            frame_index=int(frame_index),
            rotation=rotation,
        )
        self._boxes[box.frame_index] = box
        return box

    def contains(self, frame_index: int) -> bool:
        return frame_index in self._boxes

    def get_value(self, frame_index: int) -> BoundingBox:
        """
        Return the box for a frame.

        Callers must check contains() first; a missing frame raises KeyError.
        """
        return self._boxes[frame_index]

    def set_base_rate(self, rate: FrameRate) -> None:
        """Record the frame rate the data was sampled at. No recomputation."""
        self.base_rate = rate

    def scale_points(self, factor: float) -> None:
        """
        Re-key every box by ``round_half_up(frame_index * factor)``.

        Boxes are processed in ascending frame order; if two frames land on
        the same new index the later one wins and a warning is logged.
        Repeated calls compound.

        Raises:
            ValueError: If factor is not a positive finite number
        """
        if not (factor > 0 and math.isfinite(factor)):
            raise ValueError(f"Time scale factor must be positive and finite: {factor}")
        if factor == 1.0:
            return

        scaled: dict[int, BoundingBox] = {}
        sources: dict[int, int] = {}
        for frame_index in sorted(self._boxes):
            new_index = scale_frame_index(frame_index, factor)
            if new_index in scaled:
                logger.warning(
                    f"Frames {sources[new_index]} and {frame_index} both rescale "
                    f"to {new_index} (factor {factor}); keeping frame {frame_index}"
                )
            scaled[new_index] = replace(self._boxes[frame_index], frame_index=new_index)
            sources[new_index] = frame_index

        self._boxes = scaled
        self.time_scale *= factor
        logger.debug(f"Rescaled {len(scaled)} boxes by {factor}")

    def frames(self) -> list[int]:
        """Return stored frame numbers in ascending order."""
        return sorted(self._boxes)

    @property
    def first_frame(self) -> int | None:
        return min(self._boxes) if self._boxes else None

    @property
    def last_frame(self) -> int | None:
        return max(self._boxes) if self._boxes else None

    def __len__(self) -> int:
        return len(self._boxes)

    def __iter__(self) -> Iterator[int]:
        return iter(self.frames())

    def __contains__(self, frame_index: object) -> bool:
        return frame_index in self._boxes

    def __repr__(self) -> str:
        return (
            f"TrackStore(boxes={len(self)}, base_rate={self.base_rate.num}/"
            f"{self.base_rate.den}, time_scale={self.time_scale})"
        )
