import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import config
from .core import EXIT_FAILURE, MediaRenamerApp
from .models import RenameOptions, Statistics


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Sets up logging to stderr and, optionally, to a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # stdout is reserved for the summary
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="[%(levelname)s] %(message)s",
        handlers=handlers,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="media-renamer",
        description="Rename photos and videos to the creation time stored in their metadata.",
    )

    p.add_argument("pattern", nargs="?", default=config.DEFAULT_PATTERN,
                   help="Glob pattern of the files to rename. Use '**/*' to match all files recursively. "
                        "Quote it to keep your shell from expanding it.")

    p.add_argument("--no-dry-run", action="store_true",
                   help="Apply the renaming. For safety, the default is a dry run.")
    p.add_argument("-i", "--case-insensitive", action="store_true",
                   help="Match the pattern case insensitively.")
    p.add_argument("-f", "--format", default=config.DEFAULT_FORMAT,
                   help="strftime format of the new file name, without extension (default: %(default)s).")
    p.add_argument("-t", "--time-offset", default=None,
                   help="Override the UTC offset, like '+01:00'. Pass negative offsets as '--time-offset=-02:30'.")
    p.add_argument("-s", "--include-symlinks", action="store_true",
                   help="Include and follow symlinks.")

    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")

    return p.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> RenameOptions:
    return RenameOptions(
        pattern=args.pattern,
        no_dry_run=args.no_dry_run,
        case_insensitive=args.case_insensitive,
        format=args.format,
        time_offset=args.time_offset,
        include_symlinks=args.include_symlinks,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    app = MediaRenamerApp(options_from_args(args))
    statistics = Statistics()

    try:
        return app.run(statistics)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
