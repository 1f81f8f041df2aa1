"""Shared cursor and calibration bookkeeping for concrete frame sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from ..types import POS_FRAMES, SourceType


class _BaseSource(ABC):
    """Base class for the bundled ``FrameSource`` implementations.

    Routes ``get``/``set`` of ``POS_FRAMES`` to ``_position``/``_seek``,
    stores per-view calibration supplied at construction, and releases the
    source on context-manager exit. Subclasses implement the device I/O.

    Args:
        camera_matrices: Per-view ``(3, 4)`` projection matrices.
        camera_extrinsics: Per-view ``(3, 4)`` ``[R | t]`` matrices.
        camera_intrinsics: Per-view ``(3, 3)`` ``K`` matrices.

    Raises:
        ValueError: If the three calibration sequences differ in length.
    """

    def __init__(
        self,
        camera_matrices: Sequence[np.ndarray] | None = None,
        camera_extrinsics: Sequence[np.ndarray] | None = None,
        camera_intrinsics: Sequence[np.ndarray] | None = None,
    ) -> None:
        self._camera_matrices = list(camera_matrices or [])
        self._camera_extrinsics = list(camera_extrinsics or [])
        self._camera_intrinsics = list(camera_intrinsics or [])
        lengths = {
            len(self._camera_matrices),
            len(self._camera_extrinsics),
            len(self._camera_intrinsics),
        }
        if len(lengths) != 1:
            raise ValueError(
                f"Calibration sequences must have equal length, got "
                f"{len(self._camera_matrices)} camera matrices, "
                f"{len(self._camera_extrinsics)} extrinsics, "
                f"{len(self._camera_intrinsics)} intrinsics."
            )

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """Kind of source."""

    @abstractmethod
    def is_opened(self) -> bool:
        """Return whether the source can still produce frames."""

    @abstractmethod
    def release(self) -> None:
        """Free device handles. Must be idempotent."""

    @abstractmethod
    def get_next_frame_name(self) -> str:
        """Label of the frame the next read returns."""

    @abstractmethod
    def get_frames(self) -> list[np.ndarray]:
        """Read one image per view and advance the cursor."""

    @abstractmethod
    def _position(self) -> int:
        """Index of the frame the next read returns."""

    @abstractmethod
    def _seek(self, frame_index: int) -> None:
        """Move the cursor to ``frame_index``."""

    def get(self, prop: int) -> float:
        if prop != POS_FRAMES:
            raise ValueError(f"Unsupported property {prop}; only POS_FRAMES is supported")
        return float(self._position())

    def set(self, prop: int, value: float) -> None:
        if prop != POS_FRAMES:
            raise ValueError(f"Unsupported property {prop}; only POS_FRAMES is supported")
        self._seek(int(value))

    def get_camera_matrices(self) -> list[np.ndarray]:
        return list(self._camera_matrices)

    def get_camera_extrinsics(self) -> list[np.ndarray]:
        return list(self._camera_extrinsics)

    def get_camera_intrinsics(self) -> list[np.ndarray]:
        return list(self._camera_intrinsics)

    def __enter__(self) -> _BaseSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.release()
