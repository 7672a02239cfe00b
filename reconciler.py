"""
Two-pass synchronisation of a destination tree against a source tree.

For every (source dir, destination dir) pair:
  1. prepare   - the destination dir exists and is a directory
  2. create    - each source entry is handed to the dispatcher; source
                 sub-directories are queued as new pairs
  3. delete    - each destination entry without a valid source counterpart
                 is removed

Pairs live on an explicit stack, so deep trees do not hit the recursion
limit. A pair's delete pass only removes destination sub-directories with
no source counterpart, which are never queued, so it cannot race a
not-yet-processed pair.
"""

import sys
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from copier import ensure_directory, remove_path
from dispatcher import ensure_destination_for
from models import EntryKind, Outcome, ReconcileSummary, Settings
from name_codec import decode_name, is_destination_image_name
from path_safety import PathValidator
from scanner import classify_entry, classify_name, count_source_files, is_real_directory
from transforms import PillowTransformer, Transformer


class ReconcileError(Exception):
    """A destination directory or file could not be created or removed."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Cannot modify {path}: {cause}")
        self.path = path
        self.cause = cause


class Reconciler:
    def __init__(
        self,
        settings: Settings,
        transformer: Optional[Transformer] = None,
        validator: Optional[PathValidator] = None,
    ) -> None:
        self.settings = settings
        self.transformer = transformer if transformer is not None else PillowTransformer()
        self.validator = validator if validator is not None else PathValidator()
        self._bar = None

    # ── Public API ────────────────────────────────────────────────────────────

    def run(self, source_root: Path, destination_root: Path) -> ReconcileSummary:
        """
        Validate the roots, then reconcile the whole tree. Raises a
        ValidationError before any change, or ReconcileError if a
        destructive operation fails midway.
        """
        source_root = Path(source_root)
        destination_root = Path(destination_root)
        self.validator.validate(source_root, destination_root)

        summary = ReconcileSummary(
            source_path=str(source_root), destination_path=str(destination_root)
        )
        total = 0
        if self.settings.show_progress:
            total = count_source_files(source_root, self.settings.include_videos)

        with tqdm(
            total=total,
            unit="file",
            desc=source_root.name,
            ncols=80,
            disable=not self.settings.show_progress,
        ) as bar:
            self._bar = bar
            try:
                stack: List[Tuple[Path, Path]] = [(source_root, destination_root)]
                while stack:
                    source_dir, destination_dir = stack.pop()
                    stack.extend(
                        reversed(self.reconcile_directory(source_dir, destination_dir, summary))
                    )
            finally:
                self._bar = None

        return summary

    def reconcile_directory(
        self,
        source_dir: Path,
        destination_dir: Path,
        summary: ReconcileSummary,
    ) -> List[Tuple[Path, Path]]:
        """Reconcile one directory level; return the sub-directory pairs to visit."""
        summary.directories_entered += 1
        if self.settings.verbose:
            print(f"ENTER {source_dir}  →  {destination_dir}")

        try:
            ensure_directory(destination_dir)
        except OSError as e:
            raise ReconcileError(destination_dir, e) from e

        children = self._create_pass(source_dir, destination_dir, summary)
        self._delete_pass(source_dir, destination_dir, summary)
        return children

    # ── Passes ────────────────────────────────────────────────────────────────

    def _create_pass(
        self,
        source_dir: Path,
        destination_dir: Path,
        summary: ReconcileSummary,
    ) -> List[Tuple[Path, Path]]:
        children: List[Tuple[Path, Path]] = []

        for source_entry in self._list_directory(source_dir, summary):
            try:
                kind = classify_entry(source_entry)
            except OSError as e:
                self._warn(summary, source_entry, f"cannot read entry: {e}")
                continue

            try:
                outcome = ensure_destination_for(
                    source_entry,
                    destination_dir,
                    self.settings,
                    self.transformer,
                    summary=summary,
                    kind=kind,
                )
            except OSError as e:
                raise ReconcileError(destination_dir / source_entry.name, e) from e

            if outcome is Outcome.RECURSE:
                children.append((source_entry, destination_dir / source_entry.name))
                continue
            if outcome is Outcome.CREATED:
                summary.files_created += 1
            elif outcome is Outcome.SKIPPED:
                summary.files_skipped += 1
            if outcome is not Outcome.IGNORED and self._bar is not None:
                self._bar.update(1)

        return children

    def _delete_pass(
        self,
        source_dir: Path,
        destination_dir: Path,
        summary: ReconcileSummary,
    ) -> None:
        for dest_entry in self._list_directory(destination_dir, summary):
            try:
                is_dir = is_real_directory(dest_entry)
                keep = self._has_valid_source(dest_entry, is_dir, source_dir)
            except OSError as e:
                self._warn(summary, dest_entry, f"cannot read entry: {e}")
                continue
            if keep:
                continue

            try:
                remove_path(dest_entry)
            except OSError as e:
                raise ReconcileError(dest_entry, e) from e

            if is_dir:
                summary.directories_deleted += 1
                if self.settings.verbose:
                    print(f"  RMDIR {dest_entry}")
            else:
                summary.files_deleted += 1
                if self.settings.verbose:
                    print(f"  DELETE {dest_entry}")

    def _has_valid_source(self, dest_entry: Path, is_dir: bool, source_dir: Path) -> bool:
        """True if dest_entry is the current derivative of an entry in source_dir."""
        name = dest_entry.name

        # Already reconciled during the create pass when the source has it
        if is_dir:
            return is_real_directory(source_dir / name)

        if is_destination_image_name(name):
            original = decode_name(name)
            if original is None or classify_name(original) is not EntryKind.IMAGE:
                return False
            return (source_dir / original).is_file()

        if classify_name(name) is EntryKind.VIDEO:
            return self.settings.include_videos and (source_dir / name).is_file()

        return False

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _list_directory(self, path: Path, summary: ReconcileSummary) -> List[Path]:
        """Entries of path in a stable order; an unreadable directory yields none."""
        try:
            return sorted(path.iterdir())
        except OSError as e:
            self._warn(summary, path, f"cannot open directory: {e}")
            return []

    def _warn(self, summary: ReconcileSummary, path: Path, message: str) -> None:
        print(f"  WARN  {path}: {message}", file=sys.stderr)
        summary.record_error(path, message)


def reconcile(
    source_root: Path,
    destination_root: Path,
    settings: Settings,
    transformer: Optional[Transformer] = None,
) -> ReconcileSummary:
    """Convenience wrapper: one validated run with a fresh Reconciler."""
    return Reconciler(settings, transformer=transformer).run(source_root, destination_root)
