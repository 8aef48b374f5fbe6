"""Build the GPS block of an image's metadata from a location fix."""
from __future__ import annotations

from typing import Optional

from photosaver.location import HeadingReading, LocationFix
from photosaver.typing import TagDictionary

DATE_FORMAT = "%Y:%m:%d"
TIME_FORMAT = "%H:%M:%S.%f"


def gps_metadata(
    location: LocationFix, heading: Optional[HeadingReading] = None
) -> TagDictionary:
    """Return the GPS tags describing ``location`` and, optionally, ``heading``.

    Coordinates are stored as absolute decimal degrees with the hemisphere in the
    matching ``Ref`` tag. The altitude is truncated to whole metres. The
    direction tags are only present when a heading is given, and the heading is
    written exactly as received.

    :param location: Position and time of the fix
    :type location: LocationFix
    :param heading: Direction the camera was facing, defaults to None
    :type heading: HeadingReading, optional
    :return: Tag name to value mapping for the "GPS" namespace
    :rtype: dict
    """
    timestamp = location.utc_timestamp
    gps = {
        "GPSLatitude": abs(location.latitude),
        "GPSLatitudeRef": "S" if location.latitude < 0 else "N",
        "GPSLongitude": abs(location.longitude),
        "GPSLongitudeRef": "W" if location.longitude < 0 else "E",
        "GPSAltitude": int(abs(location.altitude)),
        "GPSAltitudeRef": 1 if location.altitude < 0 else 0,
        "GPSTimeStamp": timestamp.strftime(TIME_FORMAT),
        "GPSDateStamp": timestamp.strftime(DATE_FORMAT),
    }
    if heading is not None:
        gps["GPSImgDirectionRef"] = "T"
        gps["GPSImgDirection"] = heading.true_heading
    return gps
