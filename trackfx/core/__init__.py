"""
Core module - Base classes, configuration and shared abstractions.
"""

from trackfx.core.base import EffectBase, EffectInfo, Frame, FrameRate
from trackfx.core.errors import TrackFXError, InvalidJSON, TrackingFileError
from trackfx.core.config import (
    OverlayStyle,
    load_effect,
    save_effect,
    register_effect,
    get_env_config,
)
from trackfx.core.video import VideoReader, VideoWriter, VideoProperties

__all__ = [
    "EffectBase",
    "EffectInfo",
    "Frame",
    "FrameRate",
    "TrackFXError",
    "InvalidJSON",
    "TrackingFileError",
    "OverlayStyle",
    "load_effect",
    "save_effect",
    "register_effect",
    "get_env_config",
    "VideoReader",
    "VideoWriter",
    "VideoProperties",
]
