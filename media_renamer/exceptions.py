"""
Custom exception hierarchy for the media renamer.

Configuration errors are fatal and abort a run before any file is touched.
Metadata errors are per-file: they are counted as failures and the batch
moves on to the next file.
"""


class MediaRenamerError(Exception):
    """Base exception for all media renamer errors."""
    pass


class ConfigurationError(MediaRenamerError):
    """Raised when the run configuration cannot be used."""
    pass


class InvalidPatternError(ConfigurationError):
    """Raised when a glob pattern is not syntactically valid."""

    def __init__(self, pattern: str, reason: str, position: int):
        super().__init__(f"Pattern syntax error near position {position}: {reason}")
        self.pattern = pattern
        self.reason = reason
        self.position = position


class InvalidTimeOffsetError(ConfigurationError):
    """Raised when a time offset is not of the form +HH:MM / -HH:MM."""
    pass


class MetadataExtractionError(MediaRenamerError):
    """Raised when a creation timestamp cannot be extracted from a file."""
    pass


class NoMetadataError(MetadataExtractionError):
    """Raised when a file carries neither EXIF nor track metadata."""
    pass


class TagNotFoundError(MetadataExtractionError):
    """Raised when none of the probed tags holds a parseable time."""
    pass


class MetadataParseError(MetadataExtractionError):
    """Raised when the metadata block itself cannot be parsed."""
    pass
