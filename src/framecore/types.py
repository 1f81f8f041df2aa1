"""Shared type aliases, enums and constants for frame acquisition."""

from __future__ import annotations

import enum
from typing import TypeAlias

import cv2
import numpy as np

Image: TypeAlias = np.ndarray
"""Image buffer, ``(H, W)`` or ``(H, W, C)`` ``uint8``. BGR when 3-channel."""

CameraMatrix: TypeAlias = np.ndarray
"""Projection matrix ``K @ [R | t]``, shape ``(3, 4)``."""

Extrinsics: TypeAlias = np.ndarray
"""World-to-camera transform ``[R | t]``, shape ``(3, 4)``."""

Intrinsics: TypeAlias = np.ndarray
"""Pinhole intrinsic matrix ``K``, shape ``(3, 3)``."""

POS_FRAMES: int = cv2.CAP_PROP_POS_FRAMES
"""Positional property key for the frame cursor (OpenCV convention)."""

UNBOUNDED: int = -1
"""Sentinel for an open-ended frame range (``frame_last``)."""


class SourceType(enum.Enum):
    """Kind of frame source.

    Only ``WEBCAM`` is treated as live: its cursor cannot be moved, so the
    producer never seeks it.
    """

    WEBCAM = "webcam"
    VIDEO = "video"
    IMAGE_DIRECTORY = "image_directory"

    @property
    def is_seekable(self) -> bool:
        return self is not SourceType.WEBCAM
