from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from . import config
from .metadata.source import MediaSource


@dataclass
class RenameOptions:
    """
    Parsed command line handed to the pipeline.
    """
    pattern: str = config.DEFAULT_PATTERN
    no_dry_run: bool = False
    case_insensitive: bool = False
    format: str = config.DEFAULT_FORMAT
    time_offset: Optional[str] = None   # "+HH:MM" / "-HH:MM", parsed by the app
    include_symlinks: bool = False

    @property
    def dry_run(self) -> bool:
        return not self.no_dry_run


class RenameOutcome(Enum):
    SKIPPED = "skipped"
    RENAMED = "renamed"
    FAILED = "failed"


@dataclass
class RenameResult:
    outcome: RenameOutcome
    source: Path
    target: Optional[Path] = None
    error: Optional[Exception] = None


@dataclass
class Statistics:
    """
    Per-run counters. Only ever incremented; printed once at the end.
    """
    failed_files: int = 0
    skipped_files: int = 0
    renamed_files: int = 0

    def record(self, outcome: RenameOutcome):
        if outcome is RenameOutcome.RENAMED:
            self.renamed_files += 1
        elif outcome is RenameOutcome.SKIPPED:
            self.skipped_files += 1
        else:
            self.failed_files += 1

    def record_failures(self, count: int = 1):
        if count < 0:
            raise ValueError("Failure count cannot be negative")
        self.failed_files += count


class DiscoveryErrorKind(Enum):
    PATTERN_MATCH = "pattern_match"   # directory could not be listed
    CANONICALIZE = "canonicalize"     # matched entry could not be resolved


@dataclass(frozen=True)
class DiscoveryError:
    kind: DiscoveryErrorKind
    path: Path
    description: str

    def __str__(self) -> str:
        return f"Failed to evaluate glob: {self.description}"


@dataclass
class MediaAsset:
    """
    A discovered file whose handle is only opened on demand.
    """
    path: Path
    _source: Optional[MediaSource] = field(default=None, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self._source is not None

    @contextmanager
    def open(self) -> Iterator[MediaSource]:
        """
        Opens the file and sniffs its metadata family.
        The handle is closed when the block exits, however it exits.
        """
        with self.path.open('rb') as handle:
            self._source = MediaSource.from_handle(self.path, handle)
            try:
                yield self._source
            finally:
                self._source = None
