"""FrameCore: synchronized multi-view frame acquisition for vision pipelines."""

from importlib.metadata import PackageNotFoundError, version

from .datum import Datum, DatumBatch
from .errors import ChannelLayoutError, ProducerError, SourceIOError, StallError
from .io import (
    FrameSource,
    ImageDirectorySource,
    VideoSource,
    WebcamSource,
    create_source,
)
from .normalize import channel_count, ensure_bgr
from .producer import DatumProducer, ProducerConfig, ProducerState
from .seek import SeekChannel, SeekRequest
from .stall import STALL_THRESHOLD, StallGuard
from .types import POS_FRAMES, UNBOUNDED, SourceType

__all__ = [
    "POS_FRAMES",
    "STALL_THRESHOLD",
    "UNBOUNDED",
    "ChannelLayoutError",
    "Datum",
    "DatumBatch",
    "DatumProducer",
    "FrameSource",
    "ImageDirectorySource",
    "ProducerConfig",
    "ProducerError",
    "ProducerState",
    "SeekChannel",
    "SeekRequest",
    "SourceIOError",
    "SourceType",
    "StallError",
    "StallGuard",
    "VideoSource",
    "WebcamSource",
    "channel_count",
    "create_source",
    "ensure_bgr",
]

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"
