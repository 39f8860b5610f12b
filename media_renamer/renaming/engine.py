import os
import errno
import logging
from pathlib import Path
from typing import Optional, Set

from ..models import RenameOutcome, RenameResult
from ..scanning.filesystem import display_path


class RenameEngine:
    """
    Decides and applies the rename of a single file.

    Outcomes:
      - SKIPPED: the file already has the target name (no filesystem call).
      - RENAMED: renamed, or would be renamed in a dry run.
      - FAILED:  the target name is unusable, already taken, or the OS
                 refused the rename.

    One engine serves one run. It remembers the targets it handed out and
    the sources it moved away, so a dry run fails exactly the collisions a
    real run would.
    """

    def __init__(self, display_root: Optional[Path] = None):
        # Paths below this directory are logged relative to it
        self.display_root = display_root
        self._claimed: Set[Path] = set()
        self._vacated: Set[Path] = set()

    def rename(self, source: Path, desired_stem: str, dry_run: bool = True) -> RenameResult:
        try:
            target = self.build_target(source, desired_stem)
        except ValueError as e:
            logging.warning(f"Cannot rename {self._show(source)} to '{desired_stem}': {e}")
            return RenameResult(RenameOutcome.FAILED, source, error=e)

        if target == source:
            logging.info(f"This file has already the correct name: {self._show(target)}")
            self._claimed.add(target)
            return RenameResult(RenameOutcome.SKIPPED, source, target)

        try:
            self._check_target_free(source, target)
            if not dry_run:
                os.rename(source, target)
        except OSError as e:
            logging.warning(f"Failed to rename {self._show(source)} to {self._show(target)}: {e}")
            return RenameResult(RenameOutcome.FAILED, source, target, error=e)

        self._claimed.add(target)
        self._vacated.add(source)

        prefix = "[DRY RUN] " if dry_run else ""
        logging.info(f"{prefix}Renaming: {self._show(source)} ==> {self._show(target)}")
        return RenameResult(RenameOutcome.RENAMED, source, target)

    @staticmethod
    def build_target(source: Path, desired_stem: str) -> Path:
        """
        Same directory, new stem, source extension lower-cased.

        Raises:
            ValueError: if desired_stem cannot be used as a file name.
        """
        if not desired_stem or desired_stem in ('.', '..'):
            raise ValueError(f"Invalid file name '{desired_stem}'")
        if '/' in desired_stem or os.sep in desired_stem:
            raise ValueError(f"File name '{desired_stem}' contains a path separator")

        name = desired_stem
        if source.suffix:
            name = f"{desired_stem}.{source.suffix[1:].lower()}"
        return source.with_name(name)

    def _check_target_free(self, source: Path, target: Path):
        """
        os.rename silently replaces an existing target on POSIX, so a taken
        name is refused. A target that is the source itself (case-only
        rename on a case-insensitive filesystem) is allowed.
        """
        taken = target in self._claimed
        if not taken and target not in self._vacated and os.path.lexists(target):
            taken = not os.path.samefile(source, target)
        if taken:
            raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(target))

    def _show(self, path: Path) -> str:
        return display_path(path, self.display_root)
