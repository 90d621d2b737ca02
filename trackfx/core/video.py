"""
Clip I/O for the render command.

Frames are numbered from 1, the same numbering tracking files use, so a
frame number read here can be passed straight to an effect.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import cv2
import numpy as np

from trackfx.core.base import FrameRate


@dataclass
class VideoProperties:
    """Size and timing of a clip."""
    width: int
    height: int
    fps: float
    frame_count: int
    fourcc: str = "mp4v"

    @classmethod
    def from_capture(cls, cap: cv2.VideoCapture) -> "VideoProperties":
        return cls(
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=cap.get(cv2.CAP_PROP_FPS),
            frame_count=int(cap.get(cv2.CAP_PROP_FRAME_COUNT)),
        )

    def to_dict(self) -> dict:
        """The dict EffectBase.initialize() expects."""
        return {
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "frame_count": self.frame_count,
        }

    @property
    def frame_rate(self) -> FrameRate:
        """fps as a rational, using the 1001 denominator for NTSC rates."""
        if self.fps <= 0:
            return FrameRate()
        rounded = round(self.fps)
        if abs(self.fps - rounded) < 1e-3:
            return FrameRate(int(rounded), 1)
        return FrameRate(int(round(self.fps * 1001)), 1001)


class VideoReader:
    """
    Yield ``(frame_number, image)`` pairs for a range of a clip.

    Example:
        with VideoReader("input.mp4", first_frame=10, last_frame=50) as reader:
            for frame_num, image in reader:
                tracker.render(image, frame_num)
    """

    def __init__(self, path: str | Path, first_frame: int = 1, last_frame: int | None = None):
        self.path = Path(path)
        self.first_frame = max(first_frame, 1)
        self.last_frame = last_frame
        self.properties: VideoProperties | None = None
        self._cap: cv2.VideoCapture | None = None

    def __enter__(self) -> "VideoReader":
        if not self.path.exists():
            raise FileNotFoundError(f"Video file not found: {self.path}")

        self._cap = cv2.VideoCapture(str(self.path))
        if not self._cap.isOpened():
            raise RuntimeError(f"Failed to open video: {self.path}")

        self.properties = VideoProperties.from_capture(self._cap)
        if self.first_frame > 1:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, self.first_frame - 1)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        return False

    def __iter__(self) -> Iterator[tuple[int, np.ndarray]]:
        if self._cap is None:
            raise RuntimeError("VideoReader must be used as a context manager")

        frame_num = self.first_frame
        # Container frame counts are estimates, so read until the decoder stops
        while self.last_frame is None or frame_num <= self.last_frame:
            ok, image = self._cap.read()
            if not ok:
                return
            yield frame_num, image
            frame_num += 1


class VideoWriter:
    """Write BGR frames with the size, rate and codec of ``props``."""

    def __init__(self, path: str | Path, props: VideoProperties):
        self.path = Path(path)
        self.props = props
        self.frames_written = 0
        self._writer: cv2.VideoWriter | None = None

    def __enter__(self) -> "VideoWriter":
        self._writer = cv2.VideoWriter(
            str(self.path),
            cv2.VideoWriter_fourcc(*self.props.fourcc),
            self.props.fps,
            (self.props.width, self.props.height),
        )
        if not self._writer.isOpened():
            raise RuntimeError(f"Failed to open video for writing: {self.path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._writer is not None:
            self._writer.release()
            self._writer = None
        return False

    def write(self, image: np.ndarray) -> None:
        if self._writer is None:
            raise RuntimeError("VideoWriter must be used as a context manager")
        self._writer.write(image)
        self.frames_written += 1
