#!/usr/bin/env python3
"""
image-mapper: Mirror a directory tree of photos into a smaller, derived tree.

Images are downscaled, recompressed to JPEG and renamed with their EXIF
capture time; videos are optionally copied as-is; everything else is left
out. Re-running keeps the destination in sync: missing files are created
and anything without a source counterpart is deleted.

Usage:
    python image_mapper.py ~/Pictures /Volumes/Phone/Pictures --quality Mobile
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from models import QualityTier, ReconcileSummary, Settings
from path_safety import PathValidator, ValidationError
from reconciler import ReconcileError, Reconciler


# ── Output ────────────────────────────────────────────────────────────────────

def print_summary(summary: ReconcileSummary) -> None:
    print("\n" + "=" * 44)
    print("  Image Mapper Summary")
    print("=" * 44)
    print(f"\nSource      : {summary.source_path}")
    print(f"Destination : {summary.destination_path}")
    print(f"  Dirs     : {summary.directories_entered:>6,} visited")
    print(f"  Created  : {summary.files_created:>6,} files")
    print(f"  Skipped  : {summary.files_skipped:>6,} files (already present)")
    print(f"  Deleted  : {summary.files_deleted:>6,} files, "
          f"{summary.directories_deleted:,} directories")
    print(f"  Errors   : {summary.files_errored:>6,} entries")
    if summary.errors:
        show = summary.errors[:20]
        for path, msg in show:
            print(f"    ! {path}: {msg}")
        if len(summary.errors) > 20:
            print(f"    ... and {len(summary.errors) - 20} more errors")
    print()


# ── CLI ───────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image_mapper.py",
        description=(
            "Map the source directory structure to an equivalent structure in "
            "the destination directory. Images are downscaled and compressed "
            "and get their EXIF date/time prepended to their file names. "
            "Only images (and optionally videos) are kept in the destination."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python image_mapper.py ~/Pictures /Volumes/Phone/Pictures --quality Mobile\n"
            "  python image_mapper.py ~/Pictures /Volumes/TV --quality TV --include-videos -v\n"
        ),
    )
    parser.add_argument(
        "source",
        metavar="SOURCE",
        help="The directory that will be mapped.",
    )
    parser.add_argument(
        "destination",
        metavar="DESTINATION",
        help="The directory where the result of the mapping will be placed.",
    )
    parser.add_argument(
        "--quality",
        required=True,
        choices=QualityTier.cli_names(),
        help=(
            "Output quality: Thumbnail (300x300), Mobile (1024x1024) "
            "or TV (1920x1080)."
        ),
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help=(
            "Print when a directory is entered and when a file is added or "
            "deleted. Warnings and errors are always printed."
        ),
    )
    parser.add_argument(
        "-i", "--include-videos",
        action="store_true",
        help="Also copy videos to the destination, as-is without conversion.",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar over the source media files.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help=(
            "Skip the check that every top-level destination entry has a "
            "counterpart in the source. Orphans there will be deleted."
        ),
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings(
        quality=QualityTier.from_cli_name(args.quality),
        include_videos=args.include_videos,
        verbose=args.verbose,
        show_progress=args.progress,
    )
    source = Path(args.source).expanduser()
    destination = Path(args.destination).expanduser()

    reconciler = Reconciler(settings, validator=PathValidator(check_top_level=not args.force))
    try:
        summary = reconciler.run(source, destination)
    except (ValidationError, ReconcileError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if settings.verbose:
        print_summary(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
