import sys
from pathlib import Path
from typing import Optional

from copier import ensure_directory
from exif_reader import read_capture_timestamp
from models import EntryKind, Outcome, ReconcileSummary, Settings
from name_codec import encode_name
from scanner import classify_entry
from transforms import TransformError, Transformer


def derived_image_name(source_path: Path) -> str:
    """Destination file name for a source image, dated when EXIF allows."""
    return encode_name(source_path.name, read_capture_timestamp(source_path))


def _occupied(dest_path: Path) -> bool:
    """
    True if dest_path already holds an entry. A dangling symlink is removed
    so nothing gets written through it to outside the destination tree.
    """
    if dest_path.is_symlink() and not dest_path.exists():
        dest_path.unlink()
        return False
    return dest_path.exists()


def _warn(summary: Optional[ReconcileSummary], path: Path, message: str) -> None:
    print(f"  WARN  {path}: {message}", file=sys.stderr)
    if summary is not None:
        summary.record_error(path, message)


def ensure_destination_for(
    source_entry: Path,
    destination_dir: Path,
    settings: Settings,
    transformer: Transformer,
    summary: Optional[ReconcileSummary] = None,
    kind: Optional[EntryKind] = None,
) -> Outcome:
    """
    Make sure destination_dir holds whatever source_entry maps to.

    Directories are created (replacing a file of the same name) and
    reported as RECURSE. Images are transformed under their derived name,
    videos copied when enabled. Existing destinations are left alone.
    Per-file transform failures are printed and reported as FAILED; an
    OSError from preparing a directory propagates to the caller.
    """
    if kind is None:
        kind = classify_entry(source_entry)
    verbose = settings.verbose

    if kind is EntryKind.DIRECTORY:
        dest_path = destination_dir / source_entry.name
        if ensure_directory(dest_path) and verbose:
            print(f"  MKDIR {dest_path}")
        return Outcome.RECURSE

    if kind is EntryKind.IMAGE:
        dest_path = destination_dir / derived_image_name(source_entry)
        if _occupied(dest_path):
            if verbose:
                print(f"  SKIP  {source_entry}")
            return Outcome.SKIPPED
        try:
            transformer.transform_image(source_entry, dest_path, settings.quality)
        except TransformError as e:
            _warn(summary, source_entry, str(e))
            return Outcome.FAILED
        if verbose:
            print(f"  CREATE {source_entry}  →  {dest_path}")
        return Outcome.CREATED

    if kind is EntryKind.VIDEO and settings.include_videos:
        dest_path = destination_dir / source_entry.name
        if _occupied(dest_path):
            if verbose:
                print(f"  SKIP  {source_entry}")
            return Outcome.SKIPPED
        try:
            transformer.copy_video(source_entry, dest_path)
        except TransformError as e:
            _warn(summary, source_entry, str(e))
            return Outcome.FAILED
        if verbose:
            print(f"  COPY  {source_entry}  →  {dest_path}")
        return Outcome.CREATED

    return Outcome.IGNORED
