"""
Configuration constants for the media renamer.
"""

VERSION = "0.4.0"

# --- Command Line Defaults ---
DEFAULT_PATTERN = "*"
DEFAULT_FORMAT = "%Y-%m-%d_%H-%M-%S"

# --- Metadata Parsing ---
# Probed in order, first parseable value wins. Do not reorder:
# users rely on DateTimeOriginal taking precedence over CreateDate.
EXIF_DATE_TAGS = [
    'DateTimeOriginal',
    'OffsetTimeOriginal',
    'CreateDate',
]

# Tag name -> exifread key
EXIF_TAG_KEYS = {
    'DateTimeOriginal': 'EXIF DateTimeOriginal',
    'OffsetTimeOriginal': 'EXIF OffsetTimeOriginal',
    'CreateDate': 'EXIF DateTimeDigitized',
}

# Tag name -> exifread key of the offset written alongside it
EXIF_OFFSET_TAGS = {
    'DateTimeOriginal': 'EXIF OffsetTimeOriginal',
    'CreateDate': 'EXIF OffsetTimeDigitized',
}

TRACK_DATE_TAGS = [
    'CreateDate',
]

# Tag name -> attributes of the MediaInfo "General" track, first one set wins.
# The Apple key carries the local offset, encoded_date is the mvhd time in UTC.
# The Apple attribute name depends on the MediaInfo release.
TRACK_TAG_FIELDS = {
    'CreateDate': [
        'comapplequicktimecreationdate',
        'com_apple_quicktime_creationdate',
        'encoded_date',
    ],
}

# --- File Signatures ---
SIGNATURE_READ_SIZE = 32

# ISO-BMFF brands that carry an image (EXIF inside), everything else is a movie
IMAGE_BRANDS = {
    'heic', 'heix', 'hevc', 'hevx', 'heim', 'heis', 'hevm', 'hevs',
    'mif1', 'msf1', 'avif', 'avis', 'crx ',
}

# Leading QuickTime atoms seen in movies without an ftyp box
QUICKTIME_ATOMS = {'ftyp', 'moov', 'mdat', 'wide', 'free', 'skip', 'pnot'}

# --- Reporting ---
SUMMARY_RULE = "=" * 30
