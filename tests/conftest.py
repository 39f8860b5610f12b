import struct
from datetime import datetime, timezone

import pytest
from PIL import Image

# EXIF sub-IFD tag ids
DATE_TIME_ORIGINAL = 0x9003
CREATE_DATE = 0x9004
OFFSET_TIME_ORIGINAL = 0x9011
OFFSET_TIME_DIGITIZED = 0x9012


def build_exif(tags):
    """
    Builds a minimal little-endian EXIF block: IFD0 holding only the
    ExifOffset pointer, and an Exif IFD holding `tags` as ASCII values.
    """
    entries = sorted(tags.items())
    exif_ifd_offset = 8 + 2 + 12 + 4
    data_offset = exif_ifd_offset + 2 + 12 * len(entries) + 4

    ifd0 = struct.pack('<H', 1) + struct.pack('<HHII', 0x8769, 4, 1, exif_ifd_offset) + struct.pack('<I', 0)

    exif_ifd = struct.pack('<H', len(entries))
    data = b''
    for tag, value in entries:
        raw = value.encode('ascii') + b'\x00'
        exif_ifd += struct.pack('<HHII', tag, 2, len(raw), data_offset + len(data))
        data += raw
    exif_ifd += struct.pack('<I', 0)

    return b'Exif\x00\x00' + b'II*\x00' + struct.pack('<I', 8) + ifd0 + exif_ifd + data


@pytest.fixture
def make_jpeg(tmp_path):
    """Factory writing a small JPEG, optionally with EXIF date tags."""
    def _make(name, tags=None, directory=None):
        path = (directory or tmp_path) / name
        with Image.new("RGB", (8, 8), color="red") as im:
            if tags:
                im.save(path, "JPEG", exif=build_exif(tags))
            else:
                im.save(path, "JPEG")
        return path
    return _make


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Runs the test with tmp_path as working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class StubExtractor:
    """
    Stands in for MetadataExtractor. Maps file names to a datetime, or to an
    exception instance that extract() raises.
    """
    def __init__(self, results=None, default=None):
        self.results = results or {}
        self.default = default or datetime(2022, 3, 4, 10, 0, 0, tzinfo=timezone.utc)
        self.calls = []

    def extract(self, source):
        self.calls.append(source.path.name)
        result = self.results.get(source.path.name, self.default)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def stub_extractor():
    return StubExtractor()
