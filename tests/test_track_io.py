"""
Tests for tracking file I/O.
"""

import logging
from datetime import datetime, timezone

import pytest


class TestLoadTrackedData:
    """Tests for load_tracked_data."""

    def test_load(self, track_file):
        """All valid records end up in the store."""
        from trackfx.tracking import TrackStore, load_tracked_data

        store = TrackStore()
        assert load_tracked_data(track_file, store) is True
        assert store.frames() == [10, 20, 30]

        box = store.get_value(20)
        assert box.width == pytest.approx(0.4)
        assert box.height == pytest.approx(0.4)
        assert box.center_x == pytest.approx(0.4)
        assert box.center_y == pytest.approx(0.4)
        assert box.rotation == pytest.approx(15.0)

    def test_skips_negative_records(self, tmp_path):
        """Records with a negative coordinate are dropped, the rest load."""
        from trackfx.tracking import TrackStore, TrackedFrame, load_tracked_data, write_tracking_file

        path = tmp_path / "partial.data"
        write_tracking_file(path, [
            TrackedFrame(1, 0.1, 0.1, 0.2, 0.2),
            TrackedFrame(2, -0.1, 0.1, 0.2, 0.2),
            TrackedFrame(3, 0.1, 0.1, 0.2, 0.2),
            TrackedFrame(4, 0.1, 0.1, 0.2, -0.5),
            TrackedFrame(5, 0.1, 0.1, 0.2, 0.2),
        ])

        store = TrackStore()
        assert load_tracked_data(path, store) is True
        assert len(store) == 3
        assert store.frames() == [1, 3, 5]

    def test_empty_file(self, empty_track_file):
        """A well-formed file without records loads as an empty store."""
        from trackfx.tracking import TrackStore, load_tracked_data

        store = TrackStore()
        assert load_tracked_data(empty_track_file, store) is True
        assert len(store) == 0

    def test_missing_file(self, tmp_path):
        """An unreadable file fails and leaves the store empty."""
        from trackfx.tracking import TrackStore, load_tracked_data

        store = TrackStore()
        store.add_box(1, 0.0, 0.0, 0.1, 0.1)

        assert load_tracked_data(tmp_path / "missing.data", store) is False
        assert len(store) == 0

    def test_corrupt_file(self, corrupt_track_file):
        """Undecodable bytes fail and leave the store empty."""
        from trackfx.tracking import TrackStore, load_tracked_data

        store = TrackStore()
        store.add_box(1, 0.0, 0.0, 0.1, 0.1)

        assert load_tracked_data(corrupt_track_file, store) is False
        assert len(store) == 0

    def test_load_replaces(self, track_file, tmp_path):
        """Loading replaces previous boxes instead of merging."""
        from trackfx.tracking import TrackStore, TrackedFrame, load_tracked_data, write_tracking_file

        other = tmp_path / "other.data"
        write_tracking_file(other, [TrackedFrame(99, 0.0, 0.0, 0.5, 0.5)])

        store = TrackStore()
        load_tracked_data(track_file, store)
        load_tracked_data(other, store)

        assert store.frames() == [99]

    def test_logs_timestamp(self, track_file, caplog):
        """The saved timestamp is logged."""
        from trackfx.tracking import TrackStore, load_tracked_data

        with caplog.at_level(logging.INFO, logger="trackfx.tracking.track_io"):
            load_tracked_data(track_file, TrackStore())

        assert "2024-05-01T12:30:00" in caplog.text

    def test_load_is_repeatable(self, track_file):
        """Loading the same file twice gives the same store."""
        from trackfx.tracking import TrackStore, load_tracked_data

        first, second = TrackStore(), TrackStore()
        load_tracked_data(track_file, first)
        load_tracked_data(track_file, second)

        assert first.frames() == second.frames()
        assert all(first.get_value(f) == second.get_value(f) for f in first)


class TestReadTrackingFile:
    """Tests for raw tracking file access."""

    def test_keeps_invalid_records(self, tmp_path):
        """read_tracking_file returns every record, valid or not."""
        from trackfx.tracking import TrackedFrame, read_tracking_file, write_tracking_file

        path = tmp_path / "raw.data"
        write_tracking_file(path, [
            TrackedFrame(1, 0.5, 0.5, 0.75, 0.75),
            TrackedFrame(2, -0.5, 0.5, 0.75, 0.75),
        ])

        data = read_tracking_file(path)
        assert [f.id for f in data.frames] == [1, 2]
        assert [f.id for f in data.valid_frames] == [1]
        assert data.frames[0].x2 == 0.75
        assert data.last_updated is None

    def test_timestamp(self, track_file):
        """last_updated is read back as an aware datetime."""
        from trackfx.tracking import read_tracking_file

        data = read_tracking_file(track_file)
        assert data.last_updated == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_errors(self, tmp_path, corrupt_track_file):
        """Unreadable or corrupt files raise TrackingFileError."""
        from trackfx.core.errors import TrackingFileError
        from trackfx.tracking import read_tracking_file

        with pytest.raises(TrackingFileError):
            read_tracking_file(tmp_path / "missing.data")
        with pytest.raises(TrackingFileError):
            read_tracking_file(corrupt_track_file)

    def test_record_validity(self):
        """Any negative corner makes a record invalid."""
        from trackfx.tracking import TrackedFrame

        assert TrackedFrame(1, 0.0, 0.0, 0.0, 0.0).is_valid
        assert not TrackedFrame(1, 0.0, 0.0, 0.0, -0.01).is_valid
