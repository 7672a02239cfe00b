"""
Pre-flight checks on a (source, destination) pair of roots.

Nothing here touches the file system beyond read-only queries. Every check
runs before the reconciler makes its first change, so a wrong destination
argument fails loudly instead of being "synchronised" into an empty tree.
"""

from pathlib import Path
from typing import Set, Tuple

from name_codec import decode_name, is_destination_image_name
from models import EntryKind
from scanner import classify_name, is_real_directory


class ValidationError(Exception):
    """Base for all root-pair validation failures."""

    def __init__(self, path: Path, message: str):
        super().__init__(message)
        self.path = path


class SourceNotDirectory(ValidationError):
    def __init__(self, path: Path):
        super().__init__(path, f"Source path is not an existing directory: {path}")


class DestinationNotDirectory(ValidationError):
    def __init__(self, path: Path):
        super().__init__(path, f"Destination path is not an existing directory: {path}")


class DestinationInsideSource(ValidationError):
    def __init__(self, path: Path, source: Path):
        super().__init__(
            path, f"Destination {path} is the same as, or inside, source {source}"
        )
        self.source = source


class SourceInsideDestination(ValidationError):
    def __init__(self, path: Path, destination: Path):
        super().__init__(
            path, f"Source {path} is the same as, or inside, destination {destination}"
        )
        self.destination = destination


class DestinationTopLevelEntryNotInSource(ValidationError):
    def __init__(self, path: Path):
        super().__init__(
            path,
            f"Destination entry {path} has no counterpart in the source root; "
            "refusing to delete it. Check the destination argument, or pass "
            "--force if it really is the right directory.",
        )


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def has_source_counterpart(dest_entry: Path, source_root: Path) -> bool:
    """
    True if a top-level destination entry has a source counterpart: any
    same-named source entry, or a source image the entry was derived from.
    """
    name = dest_entry.name
    source_entry = source_root / name
    if source_entry.exists() or source_entry.is_symlink():
        return True
    if is_real_directory(dest_entry):
        return False
    if is_destination_image_name(name):
        original = decode_name(name)
        if original is not None and classify_name(original) is EntryKind.IMAGE:
            if (source_root / original).is_file():
                return True
    return False


class PathValidator:
    """
    Validates root pairs. The top-level destination guard runs only on the
    first successful validation of a given pair.
    """

    def __init__(self, check_top_level: bool = True) -> None:
        self._check_top_level = check_top_level
        self._approved: Set[Tuple[Path, Path]] = set()

    def validate(self, source_root: Path, destination_root: Path) -> None:
        source_root = Path(source_root)
        destination_root = Path(destination_root)

        if not source_root.is_dir():
            raise SourceNotDirectory(source_root)
        if not destination_root.is_dir():
            raise DestinationNotDirectory(destination_root)

        source = source_root.resolve()
        destination = destination_root.resolve()

        if _is_within(destination, source):
            raise DestinationInsideSource(destination_root, source_root)
        if _is_within(source, destination):
            raise SourceInsideDestination(source_root, destination_root)

        key = (source, destination)
        if key in self._approved:
            return

        if self._check_top_level:
            for entry in sorted(destination.iterdir()):
                if not has_source_counterpart(entry, source):
                    raise DestinationTopLevelEntryNotInSource(destination_root / entry.name)

        self._approved.add(key)


def validate(source_root: Path, destination_root: Path, check_top_level: bool = True) -> None:
    """One-shot validation of a root pair; raises a ValidationError subclass."""
    PathValidator(check_top_level=check_top_level).validate(source_root, destination_root)
