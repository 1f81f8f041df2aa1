"""3-channel BGR enforcement for the primary view of a batch."""

import logging

import cv2
import numpy as np

from .errors import ChannelLayoutError

logger = logging.getLogger(__name__)


def is_empty(image: np.ndarray | None) -> bool:
    """Return True if ``image`` is missing or holds no pixels."""
    return image is None or image.size == 0


def channel_count(image: np.ndarray) -> int:
    """Return the channel count of an ``(H, W)`` or ``(H, W, C)`` array.

    Raises:
        ChannelLayoutError: If ``image`` is neither 2D nor 3D.
    """
    if image.ndim == 2:
        return 1
    if image.ndim == 3:
        return int(image.shape[2])
    raise ChannelLayoutError(None, "channel_count", shape=tuple(image.shape))


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    """Return ``image`` as a 3-channel BGR array.

    3-channel input is returned unchanged (same object). Single-channel
    input, either ``(H, W)`` or ``(H, W, 1)``, is expanded by channel
    replication. Empty images are returned unchanged so the caller can
    discard them.

    Args:
        image: Image array from a frame source.

    Returns:
        ``(H, W, 3)`` image.

    Raises:
        ChannelLayoutError: If the channel count is neither 1 nor 3.
    """
    if is_empty(image):
        return image

    channels = channel_count(image)
    if channels == 3:
        return image
    if channels == 1:
        logger.warning(
            "Input images must be 3-channel BGR. Converting grey image into BGR."
        )
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    raise ChannelLayoutError(channels, "ensure_bgr")
