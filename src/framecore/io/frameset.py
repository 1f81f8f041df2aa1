"""FrameSource protocol: the capability contract consumed by the producer."""

from typing import Protocol, runtime_checkable

import numpy as np

from ..types import SourceType


@runtime_checkable
class FrameSource(Protocol):
    """Protocol for a device yielding synchronized multi-view frames.

    Any class implementing these members with the correct signatures
    satisfies this protocol structurally; no import of ``FrameSource`` is
    needed in the implementing class.

    The ``@runtime_checkable`` decorator enables both static type-checking
    and runtime ``isinstance()`` checks.

    Frame format contract:
        ``get_frames`` returns one ``uint8`` array per view, either
        ``(H, W, 3)`` BGR or ``(H, W)`` grayscale. An empty list, or an
        empty first array, means "no data this read".
    """

    @property
    def source_type(self) -> SourceType:
        """Kind of source. Only non-``WEBCAM`` sources may be seeked."""
        ...

    def is_opened(self) -> bool:
        """Return whether the source can still produce frames."""
        ...

    def release(self) -> None:
        """Stop the source and free its resources. Idempotent."""
        ...

    def get(self, prop: int) -> float:
        """Return a positional property (only ``POS_FRAMES`` is required).

        Args:
            prop: Property key, e.g. ``framecore.types.POS_FRAMES``.

        Returns:
            Property value. For ``POS_FRAMES``, the index of the frame the
            next ``get_frames`` call returns.
        """
        ...

    def set(self, prop: int, value: float) -> None:
        """Set a positional property. Live sources treat this as a no-op.

        Args:
            prop: Property key.
            value: New value.
        """
        ...

    def get_next_frame_name(self) -> str:
        """Return the label of the frame the next ``get_frames`` returns."""
        ...

    def get_frames(self) -> list[np.ndarray]:
        """Read the next synchronized set of view images, advancing the cursor.

        Returns:
            One image per view, in view order. May be empty.
        """
        ...

    def get_camera_matrices(self) -> list[np.ndarray]:
        """Return per-view ``(3, 4)`` projection matrices (possibly fewer than views)."""
        ...

    def get_camera_extrinsics(self) -> list[np.ndarray]:
        """Return per-view ``(3, 4)`` ``[R | t]`` matrices (possibly fewer than views)."""
        ...

    def get_camera_intrinsics(self) -> list[np.ndarray]:
        """Return per-view ``(3, 3)`` ``K`` matrices (possibly fewer than views)."""
        ...
