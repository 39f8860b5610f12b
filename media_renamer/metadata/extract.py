import logging
from datetime import datetime
from typing import Any, Dict, List

import exifread
from pymediainfo import MediaInfo

from .. import config
from ..exceptions import MetadataParseError, NoMetadataError, TagNotFoundError
from .source import MediaSource, MetadataFamily
from .timestamps import parse_metadata_datetime, parse_offset


class MetadataExtractor:
    """
    Reads the creation timestamp of an opened media file.

    Strategies:
      - Images (EXIF): 'exifread', probing config.EXIF_DATE_TAGS in order.
      - Movies (track metadata): 'pymediainfo', probing config.TRACK_DATE_TAGS.

    The first tag holding a parseable time wins. A missing or unparseable
    higher-priority tag is not an error; only an exhausted list is.
    """

    def extract(self, source: MediaSource) -> datetime:
        """
        Returns the creation timestamp as an aware datetime.

        Raises:
            NoMetadataError: the file carries neither EXIF nor track metadata.
            TagNotFoundError: no probed tag holds a parseable time.
            MetadataParseError: the metadata block itself could not be read.
        """
        if source.family is MetadataFamily.EXIF:
            tags = self._read_exif_tags(source)
            return self._probe_exif_tags(tags)
        elif source.family is MetadataFamily.TRACK:
            track = self._read_general_track(source)
            return self._probe_track_tags(track)
        raise NoMetadataError("The media source has no EXIF or track data!")

    # --- EXIF ---

    def _read_exif_tags(self, source: MediaSource) -> Dict[str, Any]:
        source.handle.seek(0)
        try:
            # details=False skips MakerNotes and thumbnails
            tags = exifread.process_file(source.handle, details=False)
        except Exception as e:
            raise MetadataParseError(f"Failed to parse EXIF data: {e}") from e

        if not tags:
            raise MetadataParseError("Failed to parse EXIF data: no EXIF block found")
        return tags

    def _probe_exif_tags(self, tags: Dict[str, Any]) -> datetime:
        for tag in config.EXIF_DATE_TAGS:
            key = config.EXIF_TAG_KEYS[tag]
            if key not in tags:
                continue

            offset_key = config.EXIF_OFFSET_TAGS.get(tag)
            companion = parse_offset(str(tags[offset_key])) if offset_key in tags else None

            dt = parse_metadata_datetime(tags[key], default_offset=companion)
            if dt:
                return dt
            logging.debug(f"EXIF tag {tag} holds no usable time: {tags[key]!r}")

        raise TagNotFoundError("Could not get the creation datetime from EXIF data!")

    # --- Track Metadata ---

    def _read_general_track(self, source: MediaSource) -> Any:
        source.handle.seek(0)
        try:
            mi = MediaInfo.parse(source.handle)
        except Exception as e:
            raise MetadataParseError(f"Failed to parse track info: {e}") from e

        general: List[Any] = [t for t in mi.tracks if t.track_type == "General"]
        if not general:
            raise MetadataParseError("Failed to parse track info: no general track found")
        return general[0]

    def _probe_track_tags(self, track: Any) -> datetime:
        for tag in config.TRACK_DATE_TAGS:
            for field in config.TRACK_TAG_FIELDS[tag]:
                value = getattr(track, field, None)
                if not value:
                    continue

                # Without a written offset QuickTime times are UTC
                dt = parse_metadata_datetime(value)
                if dt:
                    return dt
                logging.debug(f"Track tag {tag} ({field}) holds no usable time: {value!r}")

        raise TagNotFoundError("Could not get the creation datetime from track info data!")
