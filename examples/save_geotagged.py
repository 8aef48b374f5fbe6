#!/usr/bin/python3

# Save a photo into a directory library with a location and heading, then
# read the GPS block back out of the stored file.

from datetime import datetime, timezone
from tempfile import TemporaryDirectory

from photosaver import (
    DirectoryPhotoLibrary,
    HeadingReading,
    ImageSaver,
    LocationFix,
    SaveRequest,
    read_metadata,
)
from photosaver.logger import initialize_logger
from photosaver.testing import make_jpeg_bytes, make_test_image

initialize_logger(1)

image = make_test_image((320, 240))
camera_bytes = make_jpeg_bytes(image, {"TIFF": {"Make": "Example", "Model": "Camera"}})

location = LocationFix(
    latitude=51.5,
    longitude=-0.125,
    altitude=-3.0,
    timestamp=datetime(2024, 3, 1, 13, 45, 30, 123456, tzinfo=timezone.utc),
)

with TemporaryDirectory() as tmpdir:
    saver = ImageSaver(DirectoryPhotoLibrary(tmpdir))
    request = SaveRequest(image, camera_bytes, location, HeadingReading(270.0))
    asset = saver.save(request).result(timeout=10)

    metadata = read_metadata(asset.path.read_bytes())

print(metadata["GPS"])

assert metadata["TIFF"]["Model"] == "Camera"
assert metadata["GPS"]["GPSLatitudeRef"] == "N"
assert metadata["GPS"]["GPSLongitudeRef"] == "W"
assert metadata["GPS"]["GPSAltitudeRef"] == 1
assert metadata["GPS"]["GPSImgDirection"] == 270
assert metadata["GPS"]["GPSTimeStamp"] == "13:45:30.123456"
