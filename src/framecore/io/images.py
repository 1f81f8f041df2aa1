"""Image-directory implementation of the FrameSource protocol and create_source factory."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from pathlib import Path

import cv2
import numpy as np

from ..types import SourceType
from .base import _BaseSource
from .video import VideoSource, WebcamSource

logger = logging.getLogger(__name__)

# Both-case extensions for cross-platform compatibility (case-sensitive filesystems).
_IMAGE_EXTENSIONS = (
    "*.png",
    "*.PNG",
    "*.jpg",
    "*.JPG",
    "*.jpeg",
    "*.JPEG",
    "*.tiff",
    "*.TIFF",
    "*.tif",
    "*.TIF",
    "*.bmp",
    "*.BMP",
)


class ImageDirectorySource(_BaseSource):
    """Seekable synchronized frames from per-camera image directories.

    Validates directory existence, globs image files for each camera,
    enforces matching filenames across cameras, and builds the sorted frame
    index at construction time. The cursor indexes that sorted list;
    reading at or past the end releases the source.

    Example::

        camera_map = {
            "cam0": Path("data/cam0"),
            "cam1": Path("data/cam1"),
        }
        with ImageDirectorySource(camera_map) as source:
            name = source.get_next_frame_name()  # "frame_0000"
            frames = source.get_frames()

    Args:
        camera_map: Mapping from camera name to image directory path. All
            directories must exist, be non-empty, and contain images with
            matching filenames across cameras.
        camera_matrices: Optional per-camera ``(3, 4)`` projection matrices.
        camera_extrinsics: Optional per-camera ``(3, 4)`` ``[R | t]``.
        camera_intrinsics: Optional per-camera ``(3, 3)`` ``K``.

    Raises:
        ValueError: If ``camera_map`` is empty, any directory does not
            exist, is not a directory, contains no image files, or if
            filenames do not match across cameras.
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
        self._dirs: dict[str, Path] = {name: Path(p) for name, p in camera_map.items()}
        self._frame_files: dict[str, list[Path]] = {}
        self._frame_count: int = 0
        self._pos: int = 0
        self._released: bool = False
        self._validate_and_index()

    def _validate_and_index(self) -> None:
        """Validate directories and build the sorted frame index.

        Raises:
            ValueError: If any directory is missing, empty, or filenames
                differ across cameras.
        """
        for cam_name, cam_dir in self._dirs.items():
            if not cam_dir.exists():
                raise ValueError(f"Camera directory does not exist: {cam_dir}")
            if not cam_dir.is_dir():
                raise ValueError(f"Camera path is not a directory: {cam_dir}")

            # Deduplicate by name: on case-insensitive filesystems *.png and
            # *.PNG match the same files.
            seen: dict[str, Path] = {}
            for ext in _IMAGE_EXTENSIONS:
                for f in cam_dir.glob(ext):
                    seen.setdefault(f.name, f)

            if not seen:
                raise ValueError(
                    f"No image files found in directory for camera '{cam_name}': {cam_dir}"
                )
            self._frame_files[cam_name] = sorted(seen.values(), key=lambda p: p.name)

        reference_cam = next(iter(self._frame_files))
        reference_names = [f.name for f in self._frame_files[reference_cam]]
        for cam_name, files in self._frame_files.items():
            if [f.name for f in files] != reference_names:
                raise ValueError(
                    f"Image filenames do not match between camera '{reference_cam}' "
                    f"and camera '{cam_name}'. All camera directories must contain "
                    f"images with identical filenames."
                )

        self._frame_count = len(reference_names)
        logger.info(
            "ImageDirectorySource: %d frames, %d cameras",
            self._frame_count,
            len(self._dirs),
        )

    @property
    def source_type(self) -> SourceType:
        return SourceType.IMAGE_DIRECTORY

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def is_opened(self) -> bool:
        return not self._released

    def release(self) -> None:
        self._released = True

    def get_next_frame_name(self) -> str:
        if self._pos >= self._frame_count:
            return ""
        return next(iter(self._frame_files.values()))[self._pos].stem

    def _position(self) -> int:
        return self._pos

    def _seek(self, frame_index: int) -> None:
        self._pos = min(max(frame_index, 0), self._frame_count)

    def get_frames(self) -> list[np.ndarray]:
        """Read the image at the cursor from every camera.

        Returns:
            One BGR image per camera, or an empty list if the source is
            exhausted (it is then released) or any image cannot be read.
        """
        if self._released:
            return []
        if self._pos >= self._frame_count:
            self.release()
            return []

        idx = self._pos
        self._pos += 1
        frames: list[np.ndarray] = []
        for cam_name, files in self._frame_files.items():
            bgr = cv2.imread(str(files[idx]))
            if bgr is None:
                warnings.warn(
                    f"Failed to read image: {files[idx]} "
                    f"(camera '{cam_name}', frame {idx})",
                    UserWarning,
                    stacklevel=2,
                )
                return []
            frames.append(bgr)
        return frames


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------

_VIDEO_EXTENSIONS = {".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv"}


def create_source(
    source: int | Sequence[int] | dict[str, str | Path],
    camera_matrices: Sequence[np.ndarray] | None = None,
    camera_extrinsics: Sequence[np.ndarray] | None = None,
    camera_intrinsics: Sequence[np.ndarray] | None = None,
) -> ImageDirectorySource | VideoSource | WebcamSource:
    """Auto-detect input type and return the matching FrameSource.

    Detection rules (in order):

    1. An int or a sequence of ints: ``WebcamSource`` on those devices.
    2. Empty map: raise ``ValueError``.
    3. All paths are existing directories: ``ImageDirectorySource``.
    4. All paths are existing files: ``VideoSource``.
    5. No path exists: infer from extension. All paths have a video
       extension → ``VideoSource``; otherwise → ``ImageDirectorySource``
       (whose constructor then reports the missing directories).
    6. Mixed types (some dirs, some files): raise ``ValueError``.

    Args:
        source: Device index/indices, or mapping from camera name to path.
        camera_matrices: Optional per-view ``(3, 4)`` projection matrices.
        camera_extrinsics: Optional per-view ``(3, 4)`` ``[R | t]``.
        camera_intrinsics: Optional per-view ``(3, 3)`` ``K``.

    Returns:
        The constructed source.

    Raises:
        ValueError: If the map is empty or mixes directories and files, or
            if the chosen source fails validation.
    """
    calibration = (camera_matrices, camera_extrinsics, camera_intrinsics)

    if isinstance(source, int):
        return WebcamSource([source], *calibration)
    if not isinstance(source, dict):
        return WebcamSource(list(source), *calibration)

    if not source:
        raise ValueError("camera_map must not be empty")

    paths = [Path(p) for p in source.values()]
    existing_dirs = [p for p in paths if p.is_dir()]
    existing_files = [p for p in paths if p.is_file()]
    total = len(paths)

    if len(existing_dirs) == total:
        return ImageDirectorySource(source, *calibration)

    if len(existing_files) == total:
        return VideoSource(source, *calibration)

    if not existing_dirs and not existing_files:
        extensions = {p.suffix.lower() for p in paths}
        if extensions and extensions.issubset(_VIDEO_EXTENSIONS):
            return VideoSource(source, *calibration)
        return ImageDirectorySource(source, *calibration)

    raise ValueError(
        "camera_map contains a mix of directory and file paths. "
        "All paths must be either directories (ImageDirectorySource) "
        "or video files (VideoSource)."
    )
