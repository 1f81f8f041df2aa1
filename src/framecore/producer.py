"""Pull-based producer turning a FrameSource into per-frame DatumBatches.

One call to :meth:`DatumProducer.produce` reads one logical frame (all
synchronized views) from the source and returns ``(running, batch)``:

- ``(True, batch)``: a frame was delivered.
- ``(True, None)``: the source is open but this read yielded no image.
  Repeated empty reads accumulate toward a stall (see ``StallGuard``).
- ``(False, None)``: the source is closed; the stream is exhausted.

Terminal conditions raise a ``ProducerError`` subclass out of the call.
"""

from __future__ import annotations

import dataclasses
import logging
import warnings
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

import numpy as np

from .datum import Datum, DatumBatch
from .errors import ProducerError, SourceIOError
from .io.frameset import FrameSource
from .normalize import ensure_bgr, is_empty
from .seek import SeekChannel, SeekRequest
from .stall import StallGuard
from .types import POS_FRAMES, UNBOUNDED

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class ProducerConfig:
    """Frame range for a producer, half-open ``[frame_first, frame_last)``.

    Attributes:
        frame_first: First source frame to read. Seekable sources are moved
            here at construction.
        frame_last: One past the last frame to deliver, or ``UNBOUNDED``.

    Raises:
        ValueError: If ``frame_first`` is negative or a bounded
            ``frame_last`` is not greater than ``frame_first``.
    """

    frame_first: int = 0
    frame_last: int = UNBOUNDED

    def __post_init__(self) -> None:
        if self.frame_first < 0:
            raise ValueError(f"frame_first must be >= 0, got {self.frame_first}")
        if self.frame_last != UNBOUNDED and self.frame_last <= self.frame_first:
            raise ValueError(
                f"frame_last must be greater than frame_first ({self.frame_first}) "
                f"or UNBOUNDED, got {self.frame_last}"
            )

    @property
    def is_bounded(self) -> bool:
        return self.frame_last != UNBOUNDED

    @property
    def frames_to_process(self) -> int | None:
        """Maximum number of batches to deliver, or None if unbounded."""
        return self.frame_last - self.frame_first if self.is_bounded else None


@dataclass
class ProducerState:
    """Acquisition-loop counters owned by one producer."""

    processed_count: int = 0
    consecutive_empty_count: int = 0
    range_start: int = 0
    range_end: int = UNBOUNDED


class DatumProducer:
    """Produces one ``DatumBatch`` per call from a ``FrameSource``.

    Args:
        source: Frame source to pull from.
        frame_first: First frame of the range (see ``ProducerConfig``).
        frame_last: One past the last frame, or ``UNBOUNDED``.
        seek_channel: Optional pause/seek control written by another thread.
        stall_guard: Empty-read guard; defaults to a 500-read threshold.

    Raises:
        ValueError: If the frame range is invalid.

    Note:
        If moving a seekable source to ``frame_first`` fails, a
        ``UserWarning`` is emitted, a WARNING is logged, and construction
        still succeeds; the first ``produce`` call may then fail with
        ``SourceIOError``.
    """

    def __init__(
        self,
        source: FrameSource,
        frame_first: int = 0,
        frame_last: int = UNBOUNDED,
        seek_channel: SeekChannel | None = None,
        stall_guard: StallGuard | None = None,
    ) -> None:
        self._config = ProducerConfig(frame_first, frame_last)
        self._source = source
        self._seek_channel = seek_channel
        self._stall_guard = stall_guard if stall_guard is not None else StallGuard()
        self._state = ProducerState(range_start=frame_first, range_end=frame_last)

        try:
            if self._source.source_type.is_seekable:
                self._source.set(POS_FRAMES, float(frame_first))
        except Exception as err:
            message = (
                f"Could not move source to frame {frame_first}: "
                f"{type(err).__name__}: {err}"
            )
            logger.warning("%s", message)
            warnings.warn(message, UserWarning, stacklevel=2)

    @classmethod
    def from_config(
        cls,
        source: FrameSource,
        config: ProducerConfig,
        seek_channel: SeekChannel | None = None,
    ) -> DatumProducer:
        return cls(source, config.frame_first, config.frame_last, seek_channel)

    @property
    def config(self) -> ProducerConfig:
        return self._config

    @property
    def state(self) -> ProducerState:
        """Snapshot of the loop counters."""
        return dataclasses.replace(self._state)

    def produce(self) -> tuple[bool, DatumBatch | None]:
        """Pull the next logical frame from the source.

        Returns:
            ``(running, batch)``; see the module docstring.

        Raises:
            StallError: After too many consecutive empty reads.
            ChannelLayoutError: If the primary view is neither 1- nor 3-channel.
            SourceIOError: If any source call raises.
        """
        budget = self._config.frames_to_process
        if budget is not None and self._state.processed_count >= budget:
            self._call("release", self._source.release)

        running = bool(self._call("is_opened", self._source.is_opened))
        if not running:
            return False, None

        if self._seek_channel is not None:
            self._apply_seek(self._seek_channel.consume())

        name = self._call("get_next_frame_name", self._source.get_next_frame_name)
        frame_number = int(self._call("get", self._source.get, POS_FRAMES))
        images = list(self._call("get_frames", self._source.get_frames))
        matrices = list(self._call("get_camera_matrices", self._source.get_camera_matrices))
        extrinsics = list(
            self._call("get_camera_extrinsics", self._source.get_camera_extrinsics)
        )
        intrinsics = list(
            self._call("get_camera_intrinsics", self._source.get_camera_intrinsics)
        )

        empty_frame = not images or is_empty(images[0])
        self._state.consecutive_empty_count = self._stall_guard.check(
            self._state.consecutive_empty_count, empty_frame
        )
        if not images:
            return running, None

        batch = DatumBatch.with_views(len(images))
        primary = batch[0]
        primary.name = name
        primary.frame_number = frame_number
        primary.input_image = ensure_bgr(images[0])
        primary.output_image = _copy_image(primary.input_image)
        if matrices:
            _assign_calibration(primary, 0, matrices, extrinsics, intrinsics)

        for i in range(1, len(images)):
            datum = batch[i]
            datum.name = primary.name
            datum.frame_number = primary.frame_number
            datum.input_image = images[i]
            datum.output_image = _copy_image(images[i])
            if len(matrices) > i:
                _assign_calibration(datum, i, matrices, extrinsics, intrinsics)

        if is_empty(primary.input_image):
            return running, None

        self._state.processed_count += 1
        return running, batch

    def __iter__(self) -> Iterator[DatumBatch]:
        """Yield delivered batches until the source reports closed."""
        while True:
            running, batch = self.produce()
            if not running:
                return
            if batch is not None:
                yield batch

    def _apply_seek(self, request: SeekRequest) -> None:
        delta = request.delta
        if delta == 0:
            return
        position = self._call("get", self._source.get, POS_FRAMES)
        logger.debug("Seeking %+d frames from frame %d", delta, int(position))
        self._call("set", self._source.set, POS_FRAMES, position + delta)

    def _call(self, site: str, fn: Callable[..., _T], *args: Any) -> _T:
        try:
            return fn(*args)
        except ProducerError:
            raise
        except Exception as err:
            raise SourceIOError(
                f"{type(err).__name__}: {err}", f"DatumProducer.produce:{site}"
            ) from err

    def __repr__(self) -> str:
        return (
            f"DatumProducer(source={type(self._source).__name__}, "
            f"range=[{self._config.frame_first}, {self._config.frame_last}), "
            f"processed={self._state.processed_count})"
        )


def _copy_image(image: np.ndarray | None) -> np.ndarray | None:
    return None if image is None else image.copy()


def _assign_calibration(
    datum: Datum,
    idx: int,
    matrices: list[np.ndarray],
    extrinsics: list[np.ndarray],
    intrinsics: list[np.ndarray],
) -> None:
    datum.camera_matrix = matrices[idx].copy()
    if len(extrinsics) > idx:
        datum.camera_extrinsics = extrinsics[idx].copy()
    if len(intrinsics) > idx:
        datum.camera_intrinsics = intrinsics[idx].copy()
