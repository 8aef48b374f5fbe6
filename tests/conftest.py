from datetime import datetime, timezone

import pytest

from photosaver import FakePhotoLibrary, LocationFix, SaverConfig
from photosaver.testing import make_jpeg_bytes, make_test_image

TIMESTAMP = datetime(2024, 3, 1, 13, 45, 30, 123456, tzinfo=timezone.utc)


@pytest.fixture
def location():
    return LocationFix(latitude=37.0, longitude=-122.0, altitude=10.0, timestamp=TIMESTAMP)


@pytest.fixture
def image():
    return make_test_image((64, 48))


@pytest.fixture
def camera_bytes(image):
    return make_jpeg_bytes(
        image,
        {
            "TIFF": {"Make": "Raspberry Pi", "Model": "imx708", "Orientation": 1},
            "EXIF": {"ISOSpeedRatings": 800},
            "GPS": {"GPSLatitudeRef": "S", "GPSLatitude": 1.5, "GPSMapDatum": "WGS-84"},
        },
    )


@pytest.fixture
def config(tmp_path):
    temp_dir = tmp_path / "staging"
    temp_dir.mkdir()
    return SaverConfig(temp_dir=temp_dir)


@pytest.fixture
def library():
    return FakePhotoLibrary()
