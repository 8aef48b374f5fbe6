import io

import numpy as np
import pytest
from PIL import Image

from photosaver import (
    HeadingReading,
    MetadataExtractionFailed,
    MissingInput,
    SaverConfig,
    produce_final_image_bytes,
    read_metadata,
)
from photosaver.image import ImageBuffer
from photosaver.pipeline import live_image_exif
from photosaver.testing import make_jpeg_bytes, make_test_image, open_with_exif


def test_missing_image(camera_bytes):
    with pytest.raises(MissingInput):
        produce_final_image_bytes(None, camera_bytes)


@pytest.mark.parametrize("data", [None, b""])
def test_missing_bytes(image, data):
    with pytest.raises(MissingInput):
        produce_final_image_bytes(image, data)


def test_raw_bytes_not_an_image(image):
    with pytest.raises(MetadataExtractionFailed):
        produce_final_image_bytes(image, b"\x00\x01 this is not an image")


@pytest.mark.parametrize("image_format", ["PNG", "TIFF"])
def test_raw_bytes_not_jpeg(image, image_format):
    out = io.BytesIO()
    image.save(out, format=image_format)
    with pytest.raises(MetadataExtractionFailed):
        produce_final_image_bytes(image, out.getvalue())
    with pytest.raises(MetadataExtractionFailed):
        read_metadata(out.getvalue())


def test_read_metadata_without_exif(image):
    assert read_metadata(make_jpeg_bytes(image)) == {"TIFF": {}, "EXIF": {}, "GPS": {}}


def test_live_image_without_exif(image):
    assert live_image_exif(image) == {}


def test_live_image_exif(image):
    live = open_with_exif(make_jpeg_bytes(image, {"EXIF": {"ISOSpeedRatings": 100}}))
    assert live_image_exif(live) == {"ISOSpeedRatings": 100}


def test_tiff_tags_come_from_raw_bytes(image, camera_bytes):
    metadata = read_metadata(produce_final_image_bytes(image, camera_bytes))
    assert metadata["TIFF"] == {"Make": "Raspberry Pi", "Model": "imx708", "Orientation": 1}


def test_exif_comes_from_live_image(image, camera_bytes):
    live = open_with_exif(make_jpeg_bytes(image, {"EXIF": {"ISOSpeedRatings": 100}}))
    metadata = read_metadata(produce_final_image_bytes(live, camera_bytes))
    assert metadata["EXIF"] == {"ISOSpeedRatings": 100}


def test_live_image_without_exif_drops_raw_exif(image, camera_bytes):
    metadata = read_metadata(produce_final_image_bytes(image, camera_bytes))
    assert metadata["EXIF"] == {}


def test_without_location_raw_gps_is_kept(image, camera_bytes):
    metadata = read_metadata(produce_final_image_bytes(image, camera_bytes))
    assert metadata["GPS"] == {"GPSLatitudeRef": "S", "GPSLatitude": 1.5, "GPSMapDatum": "WGS-84"}


def test_heading_without_location_is_ignored(image, camera_bytes):
    metadata = read_metadata(
        produce_final_image_bytes(image, camera_bytes, heading=HeadingReading(10.0))
    )
    assert "GPSImgDirection" not in metadata["GPS"]


def test_location_replaces_gps(image, camera_bytes, location):
    jpeg = produce_final_image_bytes(image, camera_bytes, location, HeadingReading(45.0))
    assert read_metadata(jpeg)["GPS"] == {
        "GPSLatitude": 37.0,
        "GPSLatitudeRef": "N",
        "GPSLongitude": 122.0,
        "GPSLongitudeRef": "W",
        "GPSAltitude": 10,
        "GPSAltitudeRef": 0,
        "GPSTimeStamp": "13:45:30.123456",
        "GPSDateStamp": "2024:03:01",
        "GPSImgDirection": 45.0,
        "GPSImgDirectionRef": "T",
    }


def test_pixels_come_from_live_image(camera_bytes):
    live = make_test_image((64, 48)).transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    jpeg = produce_final_image_bytes(live, camera_bytes)
    decoded = ImageBuffer.from_bytes(jpeg)
    expected = ImageBuffer.from_image(live)
    difference = np.abs(decoded.array.astype(int) - expected.array.astype(int))
    assert difference.mean() < 3


def test_config_quality(camera_bytes):
    noise = np.random.default_rng(0).integers(0, 256, (48, 64, 3), dtype=np.uint8)
    image = Image.fromarray(noise)
    high = produce_final_image_bytes(image, camera_bytes, config=SaverConfig(quality=100))
    low = produce_final_image_bytes(image, camera_bytes, config=SaverConfig(quality=5))
    assert len(low) < len(high)


@pytest.mark.parametrize("degrees", [-15.0, -1.0, 360.0, 725.5])
def test_out_of_range_heading_is_kept(image, camera_bytes, location, degrees):
    jpeg = produce_final_image_bytes(image, camera_bytes, location, HeadingReading(degrees))
    gps = read_metadata(jpeg)["GPS"]
    assert gps["GPSImgDirection"] == degrees
    assert gps["GPSImgDirectionRef"] == "T"
