import shutil
from pathlib import Path


def ensure_directory(path: Path) -> bool:
    """
    Make sure path is a directory. A file (or symlink) occupying the path is
    removed first. Returns True if the directory had to be created.
    """
    if path.is_symlink() or (path.exists() and not path.is_dir()):
        path.unlink()
    if path.is_dir():
        return False
    path.mkdir()
    return True


def copy_file(source_path: Path, dest_path: Path) -> bool:
    """
    Copy source to dest byte-for-byte (preserving timestamps) unless dest
    already exists. Returns True if a copy was made. A partially written
    dest is removed before the error propagates.
    """
    if dest_path.exists():
        return False
    try:
        shutil.copy2(source_path, dest_path)
    except OSError:
        dest_path.unlink(missing_ok=True)
        raise
    return True


def remove_path(path: Path) -> None:
    """Delete a file, symlink or whole directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
