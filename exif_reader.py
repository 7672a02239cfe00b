from datetime import datetime
from pathlib import Path
from typing import Optional

import exifread

CAPTURE_DATE_TAG = "EXIF DateTimeOriginal"
ORIENTATION_TAG = "Image Orientation"

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _parse_exif_date(raw_value: str) -> Optional[datetime]:
    """Parse an EXIF date string, returning None if invalid or zeroed."""
    try:
        return datetime.strptime(raw_value.strip(), EXIF_DATE_FORMAT)
    except (ValueError, AttributeError):
        return None


def _read_tags(file_path: Path, stop_tag: Optional[str] = None) -> dict:
    with open(file_path, "rb") as f:
        if stop_tag is None:
            return exifread.process_file(f, details=False)
        return exifread.process_file(f, stop_tag=stop_tag, details=False)


def read_capture_timestamp(file_path: Path) -> Optional[str]:
    """
    Return the EXIF capture time as "YYYY-MM-DD HH:MM:SS", or None when the
    file has no usable DateTimeOriginal tag. Unreadable files yield None.
    """
    try:
        tags = _read_tags(file_path, stop_tag="DateTimeOriginal")
    except Exception:
        return None

    if CAPTURE_DATE_TAG not in tags:
        return None
    dt = _parse_exif_date(str(tags[CAPTURE_DATE_TAG]))
    if dt is None:
        return None
    return dt.strftime(TIMESTAMP_FORMAT)


def read_orientation(file_path: Path) -> Optional[int]:
    """
    Return the raw EXIF orientation value, or None if the tag is missing or
    cannot be read. Range checking is left to the caller.
    """
    try:
        tags = _read_tags(file_path, stop_tag="Orientation")
    except Exception:
        return None

    tag = tags.get(ORIENTATION_TAG)
    if tag is None:
        return None
    try:
        return int(tag.values[0])
    except (AttributeError, IndexError, TypeError, ValueError):
        return None
