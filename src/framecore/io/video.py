"""Video-file and live-device implementations of the FrameSource protocol."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from pathlib import Path

import cv2
import numpy as np

from ..types import SourceType
from .base import _BaseSource

logger = logging.getLogger(__name__)


def _release_all(caps: dict[str, cv2.VideoCapture]) -> None:
    for cap in caps.values():
        cap.release()
    caps.clear()


class VideoSource(_BaseSource):
    """Seekable synchronized frames from per-camera video files.

    Opens one ``cv2.VideoCapture`` per camera at construction time. All
    captures share one cursor: seeking moves every capture, and each read
    returns one frame per camera in ``camera_map`` insertion order.
    Reading at or past the last frame releases the source.

    Example::

        camera_map = {
            "cam0": Path("data/cam0.mp4"),
            "cam1": Path("data/cam1.mp4"),
        }
        with VideoSource(camera_map) as source:
            frames = source.get_frames()  # [cam0 BGR, cam1 BGR]

    Args:
        camera_map: Mapping from camera name to video file path. All
            files must exist and be openable by ``cv2.VideoCapture``.
        camera_matrices: Optional per-camera ``(3, 4)`` projection matrices.
        camera_extrinsics: Optional per-camera ``(3, 4)`` ``[R | t]``.
        camera_intrinsics: Optional per-camera ``(3, 3)`` ``K``.

    Raises:
        ValueError: If ``camera_map`` is empty, or any file does not exist,
            is a directory, or cannot be opened by ``cv2.VideoCapture``.
    """

    def __init__(
        self,
        camera_map: dict[str, str | Path],
        camera_matrices: Sequence[np.ndarray] | None = None,
        camera_extrinsics: Sequence[np.ndarray] | None = None,
        camera_intrinsics: Sequence[np.ndarray] | None = None,
    ) -> None:
        super().__init__(camera_matrices, camera_extrinsics, camera_intrinsics)
        if not camera_map:
            raise ValueError("camera_map must not be empty")
        self._paths: dict[str, Path] = {name: Path(p) for name, p in camera_map.items()}
        self._caps: dict[str, cv2.VideoCapture] = {}
        self._frame_count: int = 0
        self._pos: int = 0
        self._open_captures()

    def _open_captures(self) -> None:
        """Validate files and open one cv2.VideoCapture per camera.

        If any capture fails to open, releases all already-opened captures
        before re-raising to prevent handle leaks.

        Raises:
            ValueError: If any file does not exist, is a directory, or
                ``cv2.VideoCapture.isOpened()`` returns False.
        """
        try:
            for cam_name, path in self._paths.items():
                if not path.exists():
                    raise ValueError(f"Video file does not exist: {path}")
                if path.is_dir():
                    raise ValueError(f"Video path is a directory, not a file: {path}")

                cap = cv2.VideoCapture(str(path))
                if not cap.isOpened():
                    cap.release()
                    raise ValueError(
                        f"cv2.VideoCapture failed to open video for camera "
                        f"'{cam_name}': {path}"
                    )
                self._caps[cam_name] = cap
        except Exception:
            _release_all(self._caps)
            raise

        counts: dict[str, int] = {
            name: int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
            for name, cap in self._caps.items()
        }
        self._frame_count = min(counts.values())
        if len(set(counts.values())) > 1:
            warnings.warn(
                f"Frame counts differ across cameras: {counts}. "
                f"Using minimum frame count: {self._frame_count}.",
                UserWarning,
                stacklevel=3,
            )

        logger.info(
            "VideoSource: %d frames, %d cameras",
            self._frame_count,
            len(self._caps),
        )

    @property
    def source_type(self) -> SourceType:
        return SourceType.VIDEO

    @property
    def frame_count(self) -> int:
        """Total frame count (minimum across all cameras)."""
        return self._frame_count

    def is_opened(self) -> bool:
        return bool(self._caps) and all(cap.isOpened() for cap in self._caps.values())

    def release(self) -> None:
        _release_all(self._caps)

    def get_next_frame_name(self) -> str:
        stem = next(iter(self._paths.values())).stem
        return f"{stem}_{self._pos:012d}"

    def _position(self) -> int:
        return self._pos

    def _seek(self, frame_index: int) -> None:
        frame_index = min(max(frame_index, 0), self._frame_count)
        for cap in self._caps.values():
            cap.set(cv2.CAP_PROP_POS_FRAMES, frame_index)
        self._pos = frame_index

    def get_frames(self) -> list[np.ndarray]:
        """Read the frame at the cursor from every camera.

        Captures are read sequentially; a seek is only issued on failure.

        Returns:
            One BGR image per camera, or an empty list if the source is
            exhausted (it is then released) or any camera fails to read.
            After a failed read every capture is re-seeked to the next
            frame so the views stay in step.
        """
        if not self._caps:
            return []
        if self._pos >= self._frame_count:
            self.release()
            return []

        frame_idx = self._pos
        self._pos += 1
        frames: list[np.ndarray] = []
        for cam_name, cap in self._caps.items():
            ok, frame = cap.read()
            if not ok or frame is None:
                warnings.warn(
                    f"Failed to read frame {frame_idx} from camera '{cam_name}'",
                    UserWarning,
                    stacklevel=2,
                )
                self._seek(self._pos)
                return []
            frames.append(frame)
        return frames


class WebcamSource(_BaseSource):
    """Live synchronized frames from one or more capture devices.

    Live devices cannot seek: ``set(POS_FRAMES, ...)`` is ignored and
    ``get(POS_FRAMES)`` reports how many frame sets have been read.

    Args:
        device_ids: OpenCV device indices, one per view.
        camera_matrices: Optional per-device ``(3, 4)`` projection matrices.
        camera_extrinsics: Optional per-device ``(3, 4)`` ``[R | t]``.
        camera_intrinsics: Optional per-device ``(3, 3)`` ``K``.

    Raises:
        ValueError: If ``device_ids`` is empty or any device fails to open.
    """

    def __init__(
        self,
        device_ids: Sequence[int],
        camera_matrices: Sequence[np.ndarray] | None = None,
        camera_extrinsics: Sequence[np.ndarray] | None = None,
        camera_intrinsics: Sequence[np.ndarray] | None = None,
    ) -> None:
        super().__init__(camera_matrices, camera_extrinsics, camera_intrinsics)
        if not device_ids:
            raise ValueError("device_ids must not be empty")
        self._caps: dict[str, cv2.VideoCapture] = {}
        self._frames_read: int = 0
        try:
            for device_id in device_ids:
                cap = cv2.VideoCapture(int(device_id))
                if not cap.isOpened():
                    cap.release()
                    raise ValueError(f"cv2.VideoCapture failed to open device {device_id}")
                self._caps[f"webcam{device_id}"] = cap
        except Exception:
            _release_all(self._caps)
            raise
        logger.info("WebcamSource: %d devices", len(self._caps))

    @property
    def source_type(self) -> SourceType:
        return SourceType.WEBCAM

    def is_opened(self) -> bool:
        return bool(self._caps) and all(cap.isOpened() for cap in self._caps.values())

    def release(self) -> None:
        _release_all(self._caps)

    def get_next_frame_name(self) -> str:
        return f"{self._frames_read:012d}"

    def _position(self) -> int:
        return self._frames_read

    def _seek(self, frame_index: int) -> None:
        logger.debug("WebcamSource: ignoring seek to frame %d on live device", frame_index)

    def get_frames(self) -> list[np.ndarray]:
        """Grab one frame from every device.

        All devices are grabbed before any is retrieved to keep the views
        as close in time as the hardware allows.

        Returns:
            One BGR image per device, or an empty list if any device fails.
        """
        if not self._caps:
            return []
        for cam_name, cap in self._caps.items():
            if not cap.grab():
                warnings.warn(f"Failed to grab frame from '{cam_name}'", UserWarning, stacklevel=2)
                return []

        frames: list[np.ndarray] = []
        for cam_name, cap in self._caps.items():
            ok, frame = cap.retrieve()
            if not ok or frame is None:
                warnings.warn(
                    f"Failed to retrieve frame from '{cam_name}'", UserWarning, stacklevel=2
                )
                return []
            frames.append(frame)
        self._frames_read += 1
        return frames
