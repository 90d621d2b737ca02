"""
Shared fixtures for trackfx tests.
"""

from datetime import datetime, timezone

import numpy as np
import pytest

from trackfx.tracking.track_io import TrackedFrame, write_tracking_file


@pytest.fixture
def track_file(tmp_path):
    """Tracking file with boxes at frames 10, 20 and 30."""
    path = tmp_path / "clip.data"
    write_tracking_file(path, [
        TrackedFrame(10, 0.1, 0.1, 0.5, 0.5),
        TrackedFrame(20, 0.2, 0.2, 0.6, 0.6, rotation=15.0),
        TrackedFrame(30, 0.3, 0.3, 0.7, 0.7),
    ], last_updated=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
    return path


@pytest.fixture
def empty_track_file(tmp_path):
    """Well-formed tracking file with no records."""
    path = tmp_path / "empty.data"
    write_tracking_file(path, [])
    return path


@pytest.fixture
def corrupt_track_file(tmp_path):
    """File whose bytes are a truncated message."""
    path = tmp_path / "corrupt.data"
    path.write_bytes(b"\x0a\x05\x01")
    return path


@pytest.fixture
def blank_frame():
    """Black 100x50 BGR image."""
    return np.zeros((50, 100, 3), dtype=np.uint8)


@pytest.fixture
def video_file(tmp_path):
    """Five black 160x120 frames at 30 fps."""
    import cv2

    path = tmp_path / "clip.mp4"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"mp4v"), 30.0, (160, 120))
    for _ in range(5):
        writer.write(np.zeros((120, 160, 3), dtype=np.uint8))
    writer.release()
    return path
