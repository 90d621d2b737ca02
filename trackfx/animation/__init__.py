"""
Animation module - Keyframe curves for effect parameters.

Example:
    >>> from trackfx.animation import Keyframe
    >>> delta_x = Keyframe(0.0)
    >>> delta_x.get_value(100)
    0.0
"""

from trackfx.animation.keyframe import Keyframe, Point, Interpolation

__all__ = [
    "Keyframe",
    "Point",
    "Interpolation",
]
