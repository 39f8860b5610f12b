import logging
from datetime import timezone
from pathlib import Path
from typing import Optional

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .exceptions import InvalidPatternError, InvalidTimeOffsetError, MetadataExtractionError
from .metadata.extract import MetadataExtractor
from .metadata.timestamps import parse_time_offset, render_timestamp
from .models import MediaAsset, RenameOptions, Statistics
from .renaming.engine import RenameEngine
from .reporting import log_discovery_errors, print_summary
from .scanning.filesystem import GlobMatcher, display_path, iter_media_assets

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class MediaRenamerApp:
    def __init__(self,
                 options: RenameOptions,
                 matcher: Optional[GlobMatcher] = None,
                 extractor: Optional[MetadataExtractor] = None):
        self.options = options
        self.matcher = matcher or GlobMatcher()
        self.extractor = extractor or MetadataExtractor()

    def run(self, statistics: Statistics) -> int:
        """
        Executes the rename pipeline and returns the process exit code.
        1. Parse configuration (fatal errors abort before discovery)
        2. Discover (glob -> canonical paths + discovery errors)
        3. Extract & Rename, one file at a time
        4. Summarize
        """
        opts = self.options

        try:
            working_dir = Path.cwd().resolve()
        except OSError as e:
            logging.error(f"Cannot determine current working directory: {e}")
            return EXIT_FAILURE

        # --- Step 1: Configuration ---
        offset: Optional[timezone] = None
        if opts.time_offset is not None:
            try:
                offset = parse_time_offset(opts.time_offset)
            except InvalidTimeOffsetError as e:
                logging.error(str(e))
                return EXIT_FAILURE

        # --- Step 2: Discovery ---
        try:
            paths, errors = self.matcher.evaluate(opts.pattern, opts.case_insensitive, opts.include_symlinks)
        except InvalidPatternError as e:
            logging.error(f"Failed to interpret glob pattern '{opts.pattern}': {e}")
            return EXIT_FAILURE

        statistics.record_failures(len(errors))
        log_discovery_errors(opts.pattern, errors)

        if not paths and not errors:
            logging.warning(f"No media files will be processed. Make sure the glob pattern '{opts.pattern}' is correct.")
            return EXIT_SUCCESS
        elif not paths:
            logging.warning(
                f"No media files will be processed. Make sure the glob pattern '{opts.pattern}' "
                "is correct and you have adequate permissions."
            )
            return EXIT_FAILURE

        logging.debug(f"Discovered {len(paths)} paths for pattern '{opts.pattern}'")

        # --- Step 3: Extract & Rename ---
        engine = RenameEngine(display_root=working_dir)
        # total is an upper bound, directories are dropped by the cursor
        with logging_redirect_tqdm():
            assets = iter_media_assets(paths)
            for asset in tqdm(assets, total=len(paths), desc="Renaming", unit="file", disable=None):
                self._process_asset(asset, engine, offset, working_dir, statistics)

        # --- Step 4: Summary ---
        print_summary(statistics)

        if opts.dry_run:
            logging.warning("This was just a dry run. To actually apply the renaming, use the '--no-dry-run' flag.")

        return EXIT_FAILURE if statistics.failed_files > 0 else EXIT_SUCCESS

    def _process_asset(self,
                       asset: MediaAsset,
                       engine: RenameEngine,
                       offset: Optional[timezone],
                       working_dir: Path,
                       statistics: Statistics):
        shown = display_path(asset.path, working_dir)

        # The handle only lives for the extraction
        try:
            with asset.open() as source:
                timestamp = self.extractor.extract(source)
        except MetadataExtractionError as e:
            statistics.record_failures()
            logging.warning(f"Cannot extract creation datetime from {shown}: {e}")
            return
        except OSError as e:
            statistics.record_failures()
            logging.warning(f"Cannot process {shown}: {e}")
            return

        try:
            new_stem = render_timestamp(timestamp, self.options.format, offset)
        except ValueError as e:
            statistics.record_failures()
            logging.warning(f"Cannot format the creation datetime of {shown} with '{self.options.format}': {e}")
            return

        result = engine.rename(asset.path, new_stem, dry_run=self.options.dry_run)
        statistics.record(result.outcome)
