"""
Shared fixtures for the image-mapper test suite.
"""
from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

import pytest
from PIL import Image

from models import QualityTier, Settings


# ── File-creation helpers ─────────────────────────────────────────────────────

def make_file(path: Path, content: bytes = b"dummy content") -> Path:
    """Create a file with the given content; create parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def make_real_image(
    path: Path,
    size=(64, 32),
    color=(200, 30, 30),
    mode: str = "RGB",
    orientation: Optional[int] = None,
) -> Path:
    """Write a small genuine image with Pillow, optionally tagged with an orientation."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new(mode, size, color)
    kwargs = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = orientation
        kwargs["exif"] = exif.tobytes()
    img.save(path, **kwargs)
    return path


def tree(root: Path) -> set:
    """All paths under root, relative and as posix strings."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*")}


def exif_tags(date: Optional[str] = None, orientation: Optional[int] = None) -> dict:
    """Fake exifread tag dict."""
    tags = {}
    if date is not None:
        date_tag = MagicMock()
        date_tag.__str__ = lambda self: date
        tags["EXIF DateTimeOriginal"] = date_tag
    if orientation is not None:
        orientation_tag = MagicMock()
        orientation_tag.values = [orientation]
        tags["Image Orientation"] = orientation_tag
    return tags


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def src(tmp_path: Path) -> Path:
    """Empty source directory."""
    d = tmp_path / "source"
    d.mkdir()
    return d


@pytest.fixture
def tgt(tmp_path: Path) -> Path:
    """Empty target directory."""
    d = tmp_path / "target"
    d.mkdir()
    return d


@pytest.fixture
def settings() -> Settings:
    return Settings(quality=QualityTier.MOBILE)


@pytest.fixture
def video_settings() -> Settings:
    return Settings(quality=QualityTier.MOBILE, include_videos=True)
