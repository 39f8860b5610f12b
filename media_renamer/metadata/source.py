from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from .. import config


class MetadataFamily(Enum):
    EXIF = "exif"     # still images: JPEG, TIFF/RAW, PNG, WebP, HEIF
    TRACK = "track"   # movie containers: MP4/MOV/3GP, Matroska/WebM


def sniff_metadata_family(header: bytes) -> Optional[MetadataFamily]:
    """
    Decides from the leading bytes of a file which metadata family it carries.
    Returns None for formats with neither.
    """
    # JPEG
    if header[:3] == b'\xff\xd8\xff':
        return MetadataFamily.EXIF

    # TIFF and the TIFF-based RAW formats (CR2, NEF, ARW, DNG, ORF, RW2)
    if header[:4] in (b'II*\x00', b'MM\x00*', b'IIRO', b'IIRS', b'IIU\x00'):
        return MetadataFamily.EXIF

    if header[:8] == b'\x89PNG\r\n\x1a\n':
        return MetadataFamily.EXIF

    if header[:4] == b'RIFF' and header[8:12] == b'WEBP':
        return MetadataFamily.EXIF

    # Matroska / WebM
    if header[:4] == b'\x1a\x45\xdf\xa3':
        return MetadataFamily.TRACK

    # ISO base media: the major brand decides between HEIF-style images and movies
    atom = header[4:8].decode('latin-1')
    if atom == 'ftyp':
        brand = header[8:12].decode('latin-1').lower()
        if brand in config.IMAGE_BRANDS:
            return MetadataFamily.EXIF
        return MetadataFamily.TRACK
    if atom in config.QUICKTIME_ATOMS:
        return MetadataFamily.TRACK

    return None


@dataclass
class MediaSource:
    """
    An opened media file. Owned by a single MediaAsset.open() block.
    """
    path: Path
    handle: BinaryIO
    family: Optional[MetadataFamily]

    @classmethod
    def from_handle(cls, path: Path, handle: BinaryIO) -> "MediaSource":
        header = handle.read(config.SIGNATURE_READ_SIZE)
        handle.seek(0)
        return cls(path=path, handle=handle, family=sniff_metadata_family(header))

    @property
    def has_exif(self) -> bool:
        return self.family is MetadataFamily.EXIF

    @property
    def has_track(self) -> bool:
        return self.family is MetadataFamily.TRACK
