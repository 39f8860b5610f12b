import os
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..models import DiscoveryError, DiscoveryErrorKind, MediaAsset
from .pattern import GlobPattern


class GlobMatcher:
    """
    Resolves a glob pattern into canonical paths.

    Unreadable directories and unresolvable matches are collected as
    DiscoveryErrors instead of aborting; only a malformed pattern is fatal.

    Symlinks: directories written literally in the pattern are always
    followed. Symlinked directories reached through a wildcard or '**' are
    only descended into when include_symlinks is set, and a matched entry
    that is itself a symlink is dropped unless include_symlinks is set.
    """

    def evaluate(self,
                 pattern: str,
                 case_insensitive: bool = False,
                 include_symlinks: bool = False) -> Tuple[List[Path], List[DiscoveryError]]:
        """
        Returns (paths, errors), both sorted by their lowercased path.

        Raises:
            InvalidPatternError: if the pattern is not syntactically valid.
        """
        glob = GlobPattern.compile(pattern, case_insensitive)
        errors: Dict[str, DiscoveryError] = {}

        paths: List[Path] = []
        seen = set()
        for match in self._expand(glob, include_symlinks, errors):
            if not include_symlinks and os.path.islink(match):
                continue

            try:
                canonical = self._canonicalize(match)
            except (OSError, RuntimeError) as e:
                errors.setdefault(match, DiscoveryError(
                    kind=DiscoveryErrorKind.CANONICALIZE,
                    path=Path(match),
                    description=f"Failed to canonicalize path '{match}': {e}",
                ))
                continue

            # Two links to the same file must not be renamed twice
            if canonical in seen:
                continue
            seen.add(canonical)
            paths.append(canonical)

        paths.sort(key=lambda p: str(p).lower())
        sorted_errors = sorted(errors.values(), key=lambda e: str(e.path).lower())
        return paths, sorted_errors

    def _canonicalize(self, path: str) -> Path:
        return Path(path).resolve(strict=True)

    # --- Pattern Expansion ---

    def _expand(self,
                glob: GlobPattern,
                include_symlinks: bool,
                errors: Dict[str, DiscoveryError]) -> Iterator[str]:
        if not glob.components:
            return
        base = os.sep if glob.absolute else ''
        yield from self._match_from(base, glob, 0, include_symlinks, errors)

    def _match_from(self,
                    base: str,
                    glob: GlobPattern,
                    idx: int,
                    include_symlinks: bool,
                    errors: Dict[str, DiscoveryError]) -> Iterator[str]:
        """Yields every path below `base` matching glob.components[idx:]."""
        component = glob.components[idx]
        is_last = idx == len(glob.components) - 1

        # 1. '**': zero or more directories. Trailing, it matches only those directories.
        if component.recursive:
            for directory, _ in self._walk(base, include_symlinks, errors):
                if is_last:
                    yield directory or os.curdir
                else:
                    yield from self._match_from(directory, glob, idx + 1, include_symlinks, errors)
            return

        # 2. Literal component: no listing needed unless case folding applies
        if component.literal and (not glob.case_insensitive or component.text.lower() == component.text.upper()):
            candidate = os.path.join(base, component.text)
            if is_last:
                if os.path.lexists(candidate):
                    yield candidate
            elif os.path.isdir(candidate):
                yield from self._match_from(candidate, glob, idx + 1, include_symlinks, errors)
            return

        # 3. Wildcard component: list the directory and filter by name
        for entry in self._list_dir(base, errors):
            if not component.matches(entry.name):
                continue
            path = os.path.join(base, entry.name)
            if is_last:
                yield path
            elif self._is_traversable(entry, include_symlinks):
                yield from self._match_from(path, glob, idx + 1, include_symlinks, errors)

    def _walk(self,
              root: str,
              include_symlinks: bool,
              errors: Dict[str, DiscoveryError]) -> Iterator[Tuple[str, list]]:
        """
        Depth-first walker yielding (directory, entries) for root and every
        directory below it. Real paths are tracked so symlink loops end.
        """
        visited = {os.path.realpath(root or os.curdir)}
        stack = [root]
        while stack:
            current = stack.pop()
            entries = self._list_dir(current, errors)
            yield current, entries

            subdirs = []
            for entry in entries:
                if not self._is_traversable(entry, include_symlinks):
                    continue
                path = os.path.join(current, entry.name)
                real = os.path.realpath(path)
                if real in visited:
                    continue
                visited.add(real)
                subdirs.append(path)

            # Push reversed so we process A before Z
            for d in reversed(subdirs):
                stack.append(d)

    def _list_dir(self, directory: str, errors: Dict[str, DiscoveryError]) -> list:
        target = directory or os.curdir
        try:
            with os.scandir(target) as it:
                entries = list(it)
        except OSError as e:
            errors.setdefault(target, DiscoveryError(
                kind=DiscoveryErrorKind.PATTERN_MATCH,
                path=Path(target),
                description=f"Failed to read directory '{target}': {e}",
            ))
            return []

        # Sort for stable traversal order
        entries.sort(key=lambda e: e.name.lower())
        return entries

    def _is_traversable(self, entry: os.DirEntry, include_symlinks: bool) -> bool:
        try:
            if entry.is_symlink():
                return include_symlinks and entry.is_dir()
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False


def iter_media_assets(paths: Iterable[Path]) -> Iterator[MediaAsset]:
    """
    Lazily turns discovered paths into MediaAssets.

    Nothing is opened here: the caller opens each asset in a `with` block,
    so at most one file handle is live no matter how many paths matched.
    Directories and other non-regular files are skipped silently.
    """
    for path in paths:
        if not path.is_file():
            logging.debug(f"Skipping non-file match: {path}")
            continue
        yield MediaAsset(path)


def display_path(path: Path, root: Optional[Path] = None) -> str:
    """Shows `path` relative to `root` when it lies below it."""
    if root is not None:
        try:
            return str(path.relative_to(root))
        except ValueError:
            pass
    return str(path)
