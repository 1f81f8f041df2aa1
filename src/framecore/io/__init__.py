"""Synchronized multi-view frame sources."""

from .frameset import FrameSource
from .images import ImageDirectorySource, create_source
from .video import VideoSource, WebcamSource

__all__ = [
    "FrameSource",
    "ImageDirectorySource",
    "VideoSource",
    "WebcamSource",
    "create_source",
]
