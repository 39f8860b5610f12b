import logging
from typing import List

from . import config
from .models import DiscoveryError, Statistics


def log_discovery_errors(pattern: str, errors: List[DiscoveryError]):
    """Warns once for the batch, then once per unreadable path."""
    if not errors:
        return

    logging.warning(
        f"Some paths could not be read to determine if their contents match the given glob pattern '{pattern}'. "
        "Make sure you have the permissions for these paths and symlinks are not broken."
    )
    for error in errors:
        logging.warning(str(error))


def print_summary(statistics: Statistics):
    """
    Writes the end-of-run summary to stdout. Log records go to stderr,
    so stdout carries nothing else.
    """
    print(config.SUMMARY_RULE)
    print(f"Failed files:  {statistics.failed_files}")
    print(f"Skipped files: {statistics.skipped_files}")
    print(f"Renamed files: {statistics.renamed_files}")
