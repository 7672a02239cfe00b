"""
Reversible mapping between source file names and derived image names.

A derived name carries the original file name and, when known, the EXIF
capture time of the source image:

    "   2010-03-14 11;22;33 photo.jpg.jpg"   (with capture time)
    "photo.jpg.jpg"                          (without)

The leading three spaces sort dated images ahead of undated ones, and the
semicolons stand in for colons, which several file systems reject.

Known limitation: an undated source file whose own name already starts with
three spaces and a "YYYY-MM-DD HH;MM;SS " prefix decodes to the name without
that prefix. The dated reading wins, which keeps existing destination trees
valid.
"""

import re
from typing import Optional

DESTINATION_SUFFIX = ".jpg"
DATE_PREFIX = "   "

_DERIVED_NAME_RE = re.compile(
    r"(?:   \d{4}-\d{2}-\d{2} \d{2};\d{2};\d{2} )?(?P<name>.+)\.jpg",
    re.DOTALL,
)


def format_timestamp(timestamp: str) -> str:
    """Turn "YYYY-MM-DD HH:MM:SS" into the file-system safe "YYYY-MM-DD HH;MM;SS"."""
    return timestamp.replace(":", ";")


def encode_name(original_name: str, timestamp: Optional[str] = None) -> str:
    """Build the derived image name for a source file."""
    if timestamp:
        return f"{DATE_PREFIX}{format_timestamp(timestamp)} {original_name}{DESTINATION_SUFFIX}"
    return f"{original_name}{DESTINATION_SUFFIX}"


def decode_name(derived_name: str) -> Optional[str]:
    """
    Recover the source file name from a derived name.
    Returns None when the name was not produced by encode_name.
    """
    match = _DERIVED_NAME_RE.fullmatch(derived_name)
    if match is None:
        return None
    return match.group("name")


def is_destination_image_name(name: str) -> bool:
    """True for names carrying the derived-image suffix (any case)."""
    return name.lower().endswith(DESTINATION_SUFFIX)
