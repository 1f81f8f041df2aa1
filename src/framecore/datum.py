"""Per-view frame records and the batch that groups synchronized views."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
import torch

from .types import CameraMatrix, Extrinsics, Image, Intrinsics


@dataclass
class Datum:
    """One view of one logical capture instant.

    Attributes:
        name: Frame label reported by the source (shared across views).
        frame_number: Cursor position of the frame in its source.
        input_image: Image as read (primary view normalized to BGR).
        output_image: Working copy for downstream stages, initialized from
            ``input_image``.
        camera_matrix: Projection matrix ``(3, 4)``, or None if uncalibrated.
        camera_extrinsics: ``[R | t]`` ``(3, 4)``, or None.
        camera_intrinsics: ``K`` ``(3, 3)``, or None.
    """

    name: str = ""
    frame_number: int = 0
    input_image: Image | None = None
    output_image: Image | None = None
    camera_matrix: CameraMatrix | None = None
    camera_extrinsics: Extrinsics | None = None
    camera_intrinsics: Intrinsics | None = None

    def to_tensor(self, device: torch.device | None = None) -> torch.Tensor:
        """Convert ``output_image`` to a ``(C, H, W)`` float32 tensor in ``[0, 1]``.

        3-channel BGR images are reordered to RGB; single-channel images
        become ``(1, H, W)``.

        Args:
            device: Target device. Defaults to CPU.

        Returns:
            Image tensor, independent of ``output_image`` memory.

        Raises:
            ValueError: If ``output_image`` is None.
        """
        if self.output_image is None:
            raise ValueError(f"Datum '{self.name}' has no output image")

        image = self.output_image
        if image.ndim == 2:
            image = image[..., np.newaxis]
        if image.shape[2] == 3:
            image = image[..., ::-1]
        # .copy() is required: the channel flip has negative stride which
        # torch.from_numpy cannot accept.
        tensor = torch.from_numpy(image.copy()).permute(2, 0, 1).float() / 255.0
        return tensor.to(device) if device is not None else tensor


class DatumBatch:
    """Ordered per-view datums for one logical capture instant.

    All elements share ``name`` and ``frame_number``; element 0 is the
    primary view.
    """

    def __init__(self, datums: list[Datum]) -> None:
        self._datums = datums

    @classmethod
    def with_views(cls, num_views: int) -> DatumBatch:
        """Allocate a batch of ``num_views`` default datums."""
        return cls([Datum() for _ in range(num_views)])

    @property
    def name(self) -> str:
        return self._datums[0].name

    @property
    def frame_number(self) -> int:
        return self._datums[0].frame_number

    def to_tensors(self, device: torch.device | None = None) -> list[torch.Tensor]:
        """Return one ``(C, H, W)`` tensor per view, in view order."""
        return [datum.to_tensor(device) for datum in self._datums]

    def __getitem__(self, idx: int) -> Datum:
        return self._datums[idx]

    def __len__(self) -> int:
        return len(self._datums)

    def __iter__(self) -> Iterator[Datum]:
        return iter(self._datums)

    def __repr__(self) -> str:
        return (
            f"DatumBatch(name={self.name!r}, frame_number={self.frame_number}, "
            f"views={len(self)})"
        )
