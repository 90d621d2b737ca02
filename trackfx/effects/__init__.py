"""
Effects module - Frame effects driven by tracking data.

Example:
    >>> from trackfx.effects import Tracker
    >>> tracker = Tracker("clip.data")
    >>> image = tracker.render(image, frame_number)
"""

from trackfx.effects.tracker import Tracker, OverlayGeometry

__all__ = [
    "Tracker",
    "OverlayGeometry",
]
