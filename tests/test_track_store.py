"""
Tests for the tracked box store.
"""

import logging

import pytest


class TestTrackStore:
    """Tests for TrackStore lookups."""

    def test_starts_empty(self):
        """A new store has no boxes."""
        from trackfx.tracking import TrackStore

        store = TrackStore()
        assert len(store) == 0
        assert store.contains(1) is False
        assert store.first_frame is None

    def test_add_box(self):
        """Boxes are stored by frame with their center computed."""
        from trackfx.tracking import TrackStore

        store = TrackStore()
        box = store.add_box(10, 0.25, 0.5, 0.5, 0.25)

        assert store.contains(10)
        assert store.get_value(10) is box
        assert box.center_x == 0.5
        assert box.center_y == 0.625
        assert box.width == 0.5
        assert box.height == 0.25
        assert box.frame_index == 10
        assert (box.x1, box.y1, box.x2, box.y2) == (0.25, 0.5, 0.75, 0.75)

    def test_overwrite(self):
        """Adding a box at an existing frame replaces it."""
        from trackfx.tracking import TrackStore

        store = TrackStore()
        store.add_box(5, 0.0, 0.0, 0.5, 0.5)
        store.add_box(5, 0.25, 0.25, 0.5, 0.5)

        assert len(store) == 1
        assert store.get_value(5).center_x == 0.5

    def test_missing_frame(self):
        """get_value on a frame without data is a KeyError."""
        from trackfx.tracking import TrackStore

        store = TrackStore()
        with pytest.raises(KeyError):
            store.get_value(3)

    def test_clear(self):
        """clear() removes everything."""
        from trackfx.tracking import TrackStore

        store = TrackStore()
        store.add_box(1, 0.0, 0.0, 0.1, 0.1)
        store.add_box(2, 0.0, 0.0, 0.1, 0.1)
        store.clear()

        assert len(store) == 0
        assert store.contains(1) is False

    def test_frames_sorted(self):
        """Iteration yields frame numbers in order."""
        from trackfx.tracking import TrackStore

        store = TrackStore()
        for frame in (30, 10, 20):
            store.add_box(frame, 0.0, 0.0, 0.1, 0.1)

        assert list(store) == [10, 20, 30]
        assert store.first_frame == 10
        assert store.last_frame == 30

    def test_boxes_immutable(self):
        """BoundingBox values can't be modified."""
        from dataclasses import FrozenInstanceError
        from trackfx.tracking import TrackStore

        store = TrackStore()
        box = store.add_box(1, 0.0, 0.0, 0.1, 0.1)
        with pytest.raises(FrozenInstanceError):
            box.width = 1.0


class TestScalePoints:
    """Tests for frame-rate rescaling."""

    def _store(self, frames):
        from trackfx.tracking import TrackStore

        store = TrackStore()
        for i, frame in enumerate(frames):
            store.add_box(frame, 0.1 * i, 0.0, 0.25, 0.25)
        return store

    def test_double(self):
        """Factor 2 moves frame i to 2i with the same box."""
        store = self._store([10, 20, 30])
        before = store.get_value(20)

        store.scale_points(2.0)

        assert store.frames() == [20, 40, 60]
        after = store.get_value(40)
        assert (after.center_x, after.center_y, after.width, after.height) == (
            before.center_x, before.center_y, before.width, before.height
        )
        assert after.frame_index == 40

    def test_round_half_up(self):
        """Fractional frames round half up."""
        store = self._store([3, 5, 8])
        store.scale_points(0.5)

        # 1.5 -> 2, 2.5 -> 3, 4.0 -> 4
        assert store.frames() == [2, 3, 4]

    def test_identity(self):
        """Factor 1 leaves the store untouched."""
        store = self._store([7, 9])
        store.scale_points(1.0)
        assert store.frames() == [7, 9]

    def test_collision_last_wins(self, caplog):
        """When two frames land on one index, the later frame's box is kept."""
        store = self._store([3, 4])
        kept = store.get_value(4)

        with caplog.at_level(logging.WARNING, logger="trackfx.tracking.track_store"):
            store.scale_points(0.5)

        assert store.frames() == [2]
        assert store.get_value(2).center_x == kept.center_x
        assert "rescale to 2" in caplog.text

    def test_compounds(self):
        """Repeated scaling compounds."""
        store = self._store([5])
        store.scale_points(2.0)
        store.scale_points(2.0)

        assert store.frames() == [20]
        assert store.time_scale == 4.0

    def test_clear_resets_time_scale(self):
        """clear() forgets previously applied factors."""
        store = self._store([5])
        store.scale_points(3.0)
        store.clear()
        assert store.time_scale == 1.0

    @pytest.mark.parametrize("factor", [0, -1.0, float("inf"), float("nan")])
    def test_invalid_factor(self, factor):
        """Non-positive and non-finite factors are rejected."""
        store = self._store([5])
        with pytest.raises(ValueError):
            store.scale_points(factor)
        assert store.frames() == [5]

    def test_base_rate_is_metadata(self):
        """set_base_rate doesn't move any frames."""
        from trackfx.core.base import FrameRate

        store = self._store([10, 20])
        store.set_base_rate(FrameRate(24, 1))

        assert store.base_rate == FrameRate(24, 1)
        assert store.frames() == [10, 20]


class TestTimeScaleHelpers:
    """Tests for frame-rate helper functions."""

    def test_scale_frame_index(self):
        """Round half up, including exact halves."""
        from trackfx.tracking import scale_frame_index

        assert scale_frame_index(3, 0.5) == 2
        assert scale_frame_index(1, 0.5) == 1
        assert scale_frame_index(10, 1.0) == 10
        assert scale_frame_index(0, 7.3) == 0

    def test_time_scale_between(self):
        """Factor is the ratio of the target rate to the base rate."""
        from trackfx.core.base import FrameRate
        from trackfx.tracking import time_scale_between

        assert time_scale_between(FrameRate(30, 1), FrameRate(60, 1)) == 2.0
        assert time_scale_between(FrameRate(50, 1), FrameRate(25, 1)) == 0.5
        assert time_scale_between(
            FrameRate(30000, 1001), FrameRate(30000, 1001)
        ) == 1.0

    def test_time_scale_between_zero_base(self):
        """A zero base rate is rejected instead of dividing by zero."""
        from trackfx.core.base import FrameRate
        from trackfx.tracking import time_scale_between

        with pytest.raises(ValueError):
            time_scale_between(FrameRate(0, 1), FrameRate(30, 1))
