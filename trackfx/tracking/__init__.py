"""
Tracking module - Tracked bounding box storage and tracking file I/O.

This module provides:
- TrackStore: Frame-indexed storage of tracked boxes with frame-rate rescaling
- BoundingBox: A single normalized tracked box
- Tracking data file I/O utilities

Example:
    >>> from trackfx.tracking import TrackStore, load_tracked_data
    >>> store = TrackStore()
    >>> if load_tracked_data("clip.data", store):
    ...     box = store.get_value(store.first_frame)
"""

from trackfx.tracking.track_store import (
    TrackStore,
    BoundingBox,
    scale_frame_index,
    time_scale_between,
)
from trackfx.tracking.track_io import (
    TrackedFrame,
    TrackingData,
    read_tracking_file,
    load_tracked_data,
    write_tracking_file,
)

__all__ = [
    "TrackStore",
    "BoundingBox",
    "scale_frame_index",
    "time_scale_between",
    "TrackedFrame",
    "TrackingData",
    "read_tracking_file",
    "load_tracked_data",
    "write_tracking_file",
]
