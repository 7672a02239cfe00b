"""
Image and video transformers used by the dispatcher.

PillowTransformer does the real work: undo the EXIF orientation, shrink the
image into the quality tier's bounding box and re-encode it as JPEG.
CopyTransformer copies bytes verbatim and stands in for the codec in tests.
"""

import shutil
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from copier import copy_file
from exif_reader import read_orientation
from models import QualityTier

# EXIF orientation value -> Pillow transposition that undoes it
ORIENTATION_TRANSPOSES = {
    1: None,
    2: Image.Transpose.FLIP_LEFT_RIGHT,
    3: Image.Transpose.ROTATE_180,
    4: Image.Transpose.FLIP_TOP_BOTTOM,
    5: Image.Transpose.TRANSPOSE,
    6: Image.Transpose.ROTATE_270,
    7: Image.Transpose.TRANSVERSE,
    8: Image.Transpose.ROTATE_90,
}

DEFAULT_ORIENTATION = 1


class TransformError(Exception):
    """A single file could not be transformed; the run should go on."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class UnsupportedOrientation(TransformError):
    def __init__(self, path: Path, orientation: int):
        super().__init__(path, f"unsupported EXIF orientation {orientation}")
        self.orientation = orientation


def apply_orientation(img: Image.Image, orientation: Optional[int]) -> Image.Image:
    """Return img rotated/flipped upright. Raises KeyError for unknown values."""
    if orientation is None:
        orientation = DEFAULT_ORIENTATION
    method = ORIENTATION_TRANSPOSES[orientation]
    if method is None:
        return img
    return img.transpose(method)


class Transformer:
    """Produces destination files from source files."""

    def transform_image(self, source_path: Path, dest_path: Path, quality: QualityTier) -> None:
        raise NotImplementedError

    def copy_video(self, source_path: Path, dest_path: Path) -> None:
        try:
            copy_file(source_path, dest_path)
        except OSError as e:
            raise TransformError(source_path, f"copy failed: {e}") from e


class PillowTransformer(Transformer):

    def transform_image(self, source_path: Path, dest_path: Path, quality: QualityTier) -> None:
        orientation = read_orientation(source_path)
        if orientation is not None and orientation not in ORIENTATION_TRANSPOSES:
            raise UnsupportedOrientation(source_path, orientation)

        try:
            with Image.open(source_path) as img:
                img.load()
                # convert() always hands back a new image, detached from the open file
                upright = apply_orientation(img, orientation).convert("RGB")
                # thumbnail() only ever shrinks and keeps the aspect ratio
                upright.thumbnail(quality.bounding_box, Image.Resampling.LANCZOS)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise TransformError(source_path, f"cannot decode image: {e}") from e

        try:
            upright.save(dest_path, "JPEG", quality=quality.jpeg_quality, optimize=True)
        except (OSError, ValueError) as e:
            dest_path.unlink(missing_ok=True)
            raise TransformError(source_path, f"cannot encode image: {e}") from e


class CopyTransformer(Transformer):
    """Copies images unchanged instead of re-encoding them."""

    def transform_image(self, source_path: Path, dest_path: Path, quality: QualityTier) -> None:
        try:
            shutil.copyfile(source_path, dest_path)
        except OSError as e:
            dest_path.unlink(missing_ok=True)
            raise TransformError(source_path, f"copy failed: {e}") from e
