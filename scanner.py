from pathlib import Path

from models import EntryKind


IMAGE_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".nef", ".tif", ".tiff",
}

VIDEO_EXTENSIONS = {
    ".mov", ".avi", ".mp4", ".m4v", ".mpg", ".mpeg",
}


def classify_name(name: str) -> EntryKind:
    """Return IMAGE, VIDEO or OTHER based on the file name's extension."""
    ext = Path(name).suffix.lower()
    if ext in IMAGE_EXTENSIONS:
        return EntryKind.IMAGE
    if ext in VIDEO_EXTENSIONS:
        return EntryKind.VIDEO
    return EntryKind.OTHER


def is_real_directory(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def classify_entry(path: Path) -> EntryKind:
    """
    Classify an existing path. Directories are reported as DIRECTORY,
    everything else by extension. Symlinked directories are not walked, so
    link cycles cannot trap the reconciler. May raise OSError if the entry
    vanished or cannot be stat-ed.
    """
    if is_real_directory(path):
        return EntryKind.DIRECTORY
    return classify_name(path.name)


def count_source_files(source_path: Path, include_videos: bool = False) -> int:
    """Count the media files a run would process, for progress bar sizing."""
    total = 0
    for file_path in source_path.rglob("*"):
        try:
            if not file_path.is_file():
                continue
        except OSError:
            continue
        kind = classify_name(file_path.name)
        if kind is EntryKind.IMAGE or (include_videos and kind is EntryKind.VIDEO):
            total += 1
    return total
