"""
Tracking data file I/O.

Tracking files are protobuf-encoded ``trackfx.Tracker`` messages:

    message Tracker {
        repeated Frame frame = 1;
        google.protobuf.Timestamp last_updated = 2;
    }
    message Frame {
        int32 id = 1;
        float rotation = 2;
        message Box { float x1 = 1; float y1 = 2; float x2 = 3; float y2 = 4; }
        Box bounding_box = 3;
    }

Box corners are normalized (0-1) frame coordinates. The message classes are
built once, at import time, from a descriptor kept in a private pool.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, timestamp_pb2
from google.protobuf.message import DecodeError

from trackfx.core.errors import TrackingFileError
from trackfx.tracking.track_store import TrackStore

logger = logging.getLogger(__name__)

_Field = descriptor_pb2.FieldDescriptorProto


def _build_schema() -> type:
    proto = descriptor_pb2.FileDescriptorProto(
        name="trackfx/trackerdata.proto",
        package="trackfx",
        syntax="proto3",
        dependency=["google/protobuf/timestamp.proto"],
    )

    frame = proto.message_type.add(name="Frame")
    box = frame.nested_type.add(name="Box")
    for number, name in enumerate(("x1", "y1", "x2", "y2"), start=1):
        box.field.add(name=name, number=number, type=_Field.TYPE_FLOAT,
                      label=_Field.LABEL_OPTIONAL)
    frame.field.add(name="id", number=1, type=_Field.TYPE_INT32,
                    label=_Field.LABEL_OPTIONAL)
    frame.field.add(name="rotation", number=2, type=_Field.TYPE_FLOAT,
                    label=_Field.LABEL_OPTIONAL)
    frame.field.add(name="bounding_box", number=3, type=_Field.TYPE_MESSAGE,
                    label=_Field.LABEL_OPTIONAL, type_name=".trackfx.Frame.Box")

    tracker = proto.message_type.add(name="Tracker")
    tracker.field.add(name="frame", number=1, type=_Field.TYPE_MESSAGE,
                      label=_Field.LABEL_REPEATED, type_name=".trackfx.Frame")
    tracker.field.add(name="last_updated", number=2, type=_Field.TYPE_MESSAGE,
                      label=_Field.LABEL_OPTIONAL,
                      type_name=".google.protobuf.Timestamp")

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(timestamp_pb2.DESCRIPTOR.serialized_pb)
    pool.AddSerializedFile(proto.SerializeToString())

    return message_factory.GetMessageClass(pool.FindMessageTypeByName("trackfx.Tracker"))


TrackerMessage = _build_schema()


@dataclass
class TrackedFrame:
    """One raw record of a tracking file."""
    id: int
    x1: float
    y1: float
    x2: float
    y2: float
    rotation: float = 0.0

    @property
    def is_valid(self) -> bool:
        """Records with any negative corner coordinate are rejected on load."""
        return min(self.x1, self.y1, self.x2, self.y2) >= 0.0


@dataclass
class TrackingData:
    """Contents of a tracking file."""
    frames: list[TrackedFrame] = field(default_factory=list)
    last_updated: datetime | None = None

    @property
    def valid_frames(self) -> list[TrackedFrame]:
        return [f for f in self.frames if f.is_valid]


def read_tracking_file(path: str | Path) -> TrackingData:
    """
    Parse a tracking file without validating its records.

    Args:
        path: Path to the tracking data file

    Returns:
        TrackingData with every record in file order

    Raises:
        TrackingFileError: If the file can't be read or isn't a valid message
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            payload = f.read()
    except OSError as e:
        raise TrackingFileError(f"Cannot read tracking file {path}: {e}", str(path)) from e

    message = TrackerMessage()
    try:
        message.ParseFromString(payload)
    except DecodeError as e:
        raise TrackingFileError(f"Failed to parse tracking file {path}: {e}", str(path)) from e

    data = TrackingData()
    for pb_frame in message.frame:
        box = pb_frame.bounding_box
        data.frames.append(TrackedFrame(
            id=pb_frame.id,
            x1=box.x1,
            y1=box.y1,
            x2=box.x2,
            y2=box.y2,
            rotation=pb_frame.rotation,
        ))

    if message.HasField("last_updated"):
        ts = message.last_updated
        data.last_updated = datetime.fromtimestamp(
            ts.seconds + ts.nanos / 1e9, tz=timezone.utc
        )

    return data


def load_tracked_data(path: str | Path, store: TrackStore) -> bool:
    """
    Replace the contents of ``store`` with the boxes of a tracking file.

    The store is cleared first. Records with a negative coordinate are
    skipped. A file with no valid records still loads successfully.

    Args:
        path: Path to the tracking data file
        store: TrackStore to fill

    Returns:
        True on success, False if the file could not be read or parsed
        (the store is left empty)
    """
    store.clear()

    try:
        data = read_tracking_file(path)
    except TrackingFileError as e:
        logger.error(str(e))
        return False

    skipped = 0
    for record in data.frames:
        if not record.is_valid:
            logger.debug(f"Skipping frame {record.id}: negative box coordinates")
            skipped += 1
            continue
        store.add_box(
            record.id,
            record.x1,
            record.y1,
            record.x2 - record.x1,
            record.y2 - record.y1,
            rotation=record.rotation,
        )

    logger.info(f"Loaded {len(store)} tracked frames from {path} ({skipped} skipped)")
    if data.last_updated is not None:
        logger.info(f"Tracking data saved at {data.last_updated.isoformat()}")

    return True


def write_tracking_file(
    path: str | Path,
    frames: Iterable[TrackedFrame],
    last_updated: datetime | None = None,
) -> None:
    """
    Write records to a tracking file.

    Example:
        >>> write_tracking_file("clip.data", [TrackedFrame(1, 0.1, 0.1, 0.3, 0.4)])
    """
    message = TrackerMessage()
    for record in frames:
        pb_frame = message.frame.add()
        pb_frame.id = record.id
        pb_frame.rotation = record.rotation
        pb_frame.bounding_box.x1 = record.x1
        pb_frame.bounding_box.y1 = record.y1
        pb_frame.bounding_box.x2 = record.x2
        pb_frame.bounding_box.y2 = record.y2

    if last_updated is not None:
        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        stamp = last_updated.timestamp()
        message.last_updated.seconds = int(stamp)
        message.last_updated.nanos = min(int(round((stamp - int(stamp)) * 1e9)), 999_999_999)

    with open(Path(path), "wb") as f:
        f.write(message.SerializeToString())
