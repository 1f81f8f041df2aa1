"""Shared pytest fixtures for all FrameCore tests."""

from __future__ import annotations

import numpy as np
import pytest
import torch

from framecore.types import SourceType


@pytest.fixture(
    params=[
        "cpu",
        pytest.param(
            "cuda",
            marks=pytest.mark.skipif(
                not torch.cuda.is_available(), reason="CUDA not available"
            ),
        ),
    ]
)
def device(request: pytest.FixtureRequest) -> torch.device:
    """Parametrized device fixture yielding CPU and (if available) CUDA.

    Tensor conversion tests should accept this fixture to ensure
    device-agnostic correctness. Never call .cuda() directly in tests.
    """
    return torch.device(request.param)


class FakeSource:
    """Scripted in-memory FrameSource.

    Each entry of ``reads`` is what one ``get_frames`` call returns. Once
    the script is exhausted the source closes itself and returns ``[]``,
    mirroring a file-backed source hitting end-of-stream. The cursor is the
    script index, so seeking replays earlier entries.

    ``fail_on`` maps a method name to an exception raised on every call to
    that method.
    """

    def __init__(
        self,
        reads: list[list[np.ndarray]],
        source_type: SourceType = SourceType.VIDEO,
        camera_matrices: list[np.ndarray] | None = None,
        camera_extrinsics: list[np.ndarray] | None = None,
        camera_intrinsics: list[np.ndarray] | None = None,
        fail_on: dict[str, Exception] | None = None,
    ) -> None:
        self.reads = reads
        self._source_type = source_type
        self.camera_matrices = camera_matrices or []
        self.camera_extrinsics = camera_extrinsics or []
        self.camera_intrinsics = camera_intrinsics or []
        self.fail_on = fail_on or {}
        self.pos = 0
        self.opened = True
        self.set_calls: list[tuple[int, float]] = []
        self.release_calls = 0
        self.read_calls = 0

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_on:
            raise self.fail_on[method]

    @property
    def source_type(self) -> SourceType:
        return self._source_type

    def is_opened(self) -> bool:
        self._maybe_fail("is_opened")
        return self.opened

    def release(self) -> None:
        self.release_calls += 1
        self.opened = False

    def get(self, prop: int) -> float:
        self._maybe_fail("get")
        return float(self.pos)

    def set(self, prop: int, value: float) -> None:
        self._maybe_fail("set")
        self.set_calls.append((prop, value))
        self.pos = max(int(value), 0)

    def get_next_frame_name(self) -> str:
        return f"frame_{self.pos:04d}"

    def get_frames(self) -> list[np.ndarray]:
        self._maybe_fail("get_frames")
        self.read_calls += 1
        if self.pos >= len(self.reads):
            self.opened = False
            return []
        frames = self.reads[self.pos]
        self.pos += 1
        return frames

    def get_camera_matrices(self) -> list[np.ndarray]:
        return list(self.camera_matrices)

    def get_camera_extrinsics(self) -> list[np.ndarray]:
        return list(self.camera_extrinsics)

    def get_camera_intrinsics(self) -> list[np.ndarray]:
        return list(self.camera_intrinsics)


def make_bgr(value: int, height: int = 8, width: int = 10) -> np.ndarray:
    """Return a constant-valued ``(H, W, 3)`` uint8 image."""
    return np.full((height, width, 3), value, dtype=np.uint8)


@pytest.fixture
def fake_source_cls() -> type[FakeSource]:
    """The scripted ``FakeSource`` class, for building per-test sources."""
    return FakeSource


@pytest.fixture
def mono_source() -> FakeSource:
    """Single-view source with 10 frames whose pixel value equals the frame index."""
    return FakeSource([[make_bgr(i)] for i in range(10)])
