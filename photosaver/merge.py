from __future__ import annotations

from logging import getLogger
from typing import Optional

from photosaver.gps import gps_metadata
from photosaver.location import HeadingReading, LocationFix
from photosaver.typing import MetadataDictionary, TagDictionary

_log = getLogger(__name__)


def merge_metadata(
    base: MetadataDictionary,
    source_exif: Optional[TagDictionary],
    location: Optional[LocationFix] = None,
    heading: Optional[HeadingReading] = None,
) -> MetadataDictionary:
    """Merge the live image's EXIF and an optional GPS block into ``base``.

    ``base`` is left unmodified. Its "EXIF" namespace is always replaced by
    ``source_exif``. Its "GPS" namespace is replaced by a freshly computed block
    when ``location`` is given and kept as-is otherwise, so a heading without a
    location is not recorded.
    """
    merged = {namespace: dict(tags) for namespace, tags in base.items()}
    merged["EXIF"] = dict(source_exif or {})

    if location is not None:
        merged["GPS"] = gps_metadata(location, heading)
    elif heading is not None:
        _log.debug("Heading given without a location, not embedding it")

    return merged
