from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple


class QualityTier(Enum):
    """Target bounding box and JPEG quality for derived images."""

    THUMBNAIL = ("Thumbnail", 300, 300, 50)
    MOBILE = ("Mobile", 1024, 1024, 60)
    TELEVISION = ("TV", 1920, 1080, 85)

    def __init__(self, cli_name: str, max_width: int, max_height: int, jpeg_quality: int):
        self.cli_name = cli_name
        self.max_width = max_width
        self.max_height = max_height
        self.jpeg_quality = jpeg_quality

    @property
    def bounding_box(self) -> Tuple[int, int]:
        return self.max_width, self.max_height

    @classmethod
    def from_cli_name(cls, name: str) -> "QualityTier":
        for tier in cls:
            if tier.cli_name == name:
                return tier
        raise ValueError(f"Unknown quality tier: {name!r}")

    @classmethod
    def cli_names(cls) -> List[str]:
        return [tier.cli_name for tier in cls]


class EntryKind(Enum):
    DIRECTORY = "directory"
    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"


class Outcome(Enum):
    """What the dispatcher did with one source entry."""

    RECURSE = "recurse"      # directory prepared, walk into it
    CREATED = "created"
    SKIPPED = "skipped"      # destination already present
    IGNORED = "ignored"      # not mirrored (other files, videos when disabled)
    FAILED = "failed"        # per-file error, logged and skipped


@dataclass(frozen=True)
class Settings:
    quality: QualityTier = QualityTier.MOBILE
    include_videos: bool = False
    verbose: bool = False
    show_progress: bool = False


@dataclass
class ReconcileSummary:
    source_path: str
    destination_path: str
    directories_entered: int = 0
    files_created: int = 0
    files_skipped: int = 0
    files_deleted: int = 0
    directories_deleted: int = 0
    files_errored: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    def record_error(self, path, message: str) -> None:
        self.files_errored += 1
        self.errors.append((str(path), message))

    @property
    def mutations(self) -> int:
        """Number of destination changes made during the run."""
        return self.files_created + self.files_deleted + self.directories_deleted
