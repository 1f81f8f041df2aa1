"""Consecutive-empty-read detection."""

from .errors import StallError

STALL_THRESHOLD = 500


class StallGuard:
    """Counts consecutive empty reads and fails once ``threshold`` is reached.

    The guard is stateless; the running count lives with its owner and is
    threaded through :meth:`check`.

    Args:
        threshold: Number of consecutive empty reads treated as a stall.
    """

    def __init__(self, threshold: int = STALL_THRESHOLD) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        self.threshold = threshold

    def check(self, consecutive_empty: int, empty_frame: bool) -> int:
        """Return the updated count, raising if it reaches the threshold.

        Args:
            consecutive_empty: Count before this read.
            empty_frame: Whether this read produced no usable image.

        Returns:
            ``consecutive_empty + 1`` for an empty read, else ``0``.

        Raises:
            StallError: If the updated count is ``>= threshold``.
        """
        count = consecutive_empty + 1 if empty_frame else 0
        if count >= self.threshold:
            raise StallError(count, "StallGuard.check")
        return count
