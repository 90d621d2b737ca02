"""
trackfx - Tracked object overlay effect
=======================================

Replays a pre-computed object tracking trajectory over video frames and
lets it be adjusted with keyframe curves.

Main modules:
- trackfx.tracking: Tracked box storage and tracking file I/O
- trackfx.animation: Keyframe curves
- trackfx.effects: The Tracker overlay effect
- trackfx.core: Frames, effect base class, configuration, video I/O

Quick start:
    >>> from trackfx import Tracker
    >>> tracker = Tracker("clip.data")
    >>> tracker.delta_x.add_point(1, 0.1)
    >>> image = tracker.render(image, 20)
"""

__version__ = "0.1.0"

# Convenience imports
from trackfx.animation import Keyframe, Interpolation
from trackfx.core.base import Frame, FrameRate
from trackfx.core.config import load_effect, save_effect
from trackfx.core.errors import InvalidJSON, TrackingFileError
from trackfx.effects import Tracker
from trackfx.tracking import TrackStore, BoundingBox, load_tracked_data

__all__ = [
    "__version__",
    "Keyframe",
    "Interpolation",
    "Frame",
    "FrameRate",
    "load_effect",
    "save_effect",
    "InvalidJSON",
    "TrackingFileError",
    "Tracker",
    "TrackStore",
    "BoundingBox",
    "load_tracked_data",
]
