import io

import numpy as np
import piexif
import pytest
from PIL import Image

from photosaver.encoder import JpegReencoder
from photosaver.errors import DestinationCreationFailed, FinalizeFailed
from photosaver.image import ImageBuffer
from photosaver.pipeline import read_metadata
from photosaver.testing import make_test_array, make_test_image

METADATA = {
    "TIFF": {"Make": "Raspberry Pi"},
    "EXIF": {"ISOSpeedRatings": 100},
    "GPS": {"GPSLatitude": 37.0, "GPSLatitudeRef": "N", "GPSAltitude": 10, "GPSAltitudeRef": 0},
}


@pytest.fixture
def pixels():
    return ImageBuffer.from_image(make_test_image((64, 48)))


def test_app1_follows_soi(pixels):
    jpeg = JpegReencoder().reencode(pixels, METADATA)
    assert jpeg[:2] == b"\xff\xd8"
    assert jpeg[2:4] == b"\xff\xe1"
    length = int.from_bytes(jpeg[4:6], "big")
    assert jpeg[6:12] == b"Exif\x00\x00"
    assert jpeg[4 + length : 4 + length + 2][:1] == b"\xff"


def test_metadata_reads_back(pixels):
    jpeg = JpegReencoder().reencode(pixels, METADATA)
    assert read_metadata(jpeg) == METADATA


def test_piexif_sees_gps(pixels):
    jpeg = JpegReencoder().reencode(pixels, METADATA)
    exif = piexif.load(Image.open(io.BytesIO(jpeg)).info["exif"])
    assert exif["GPS"][piexif.GPSIFD.GPSLatitudeRef] == b"N"
    assert exif["Exif"][piexif.ExifIFD.ISOSpeedRatings] == 100


def test_single_frame(pixels):
    with Image.open(io.BytesIO(JpegReencoder().reencode(pixels, METADATA))) as image:
        assert image.format == "JPEG"
        assert getattr(image, "n_frames", 1) == 1
        assert image.size == (64, 48)


def test_no_metadata_no_app1(pixels):
    jpeg = JpegReencoder().reencode(pixels, {"TIFF": {}, "EXIF": {}, "GPS": {}})
    assert jpeg[2:4] != b"\xff\xe1"
    assert b"Exif\x00\x00" not in jpeg


def test_pixels_survive(pixels):
    jpeg = JpegReencoder().reencode(pixels, METADATA)
    decoded = ImageBuffer.from_bytes(jpeg)
    assert decoded.size == pixels.size
    difference = np.abs(decoded.array.astype(int) - pixels.array.astype(int))
    assert difference.mean() < 3


def test_quality_changes_size():
    pixels = ImageBuffer.from_image(
        Image.fromarray(np.random.default_rng(0).integers(0, 256, (64, 64, 3), dtype=np.uint8))
    )
    high = JpegReencoder(quality=100).reencode(pixels, {})
    low = JpegReencoder(quality=10).reencode(pixels, {})
    assert len(low) < len(high)


def test_greyscale():
    pixels = ImageBuffer.from_image(make_test_image((32, 32)).convert("L"))
    jpeg = JpegReencoder(colour_subsampling="420").reencode(pixels, METADATA)
    with Image.open(io.BytesIO(jpeg)) as image:
        assert image.mode == "L"


def test_wrong_dtype():
    pixels = ImageBuffer(make_test_array((16, 16)).astype(np.float32), "RGB")
    with pytest.raises(DestinationCreationFailed):
        JpegReencoder().reencode(pixels, METADATA)


def test_wrong_channel_count():
    pixels = ImageBuffer(make_test_array((16, 16)), "RGBA")
    with pytest.raises(DestinationCreationFailed):
        JpegReencoder().reencode(pixels, METADATA)


def test_unknown_colour_space():
    pixels = ImageBuffer(make_test_array((16, 16)), "YUV")
    with pytest.raises(DestinationCreationFailed):
        JpegReencoder().reencode(pixels, METADATA)


def test_empty_image():
    pixels = ImageBuffer(np.zeros((0, 16, 3), dtype=np.uint8), "RGB")
    with pytest.raises(DestinationCreationFailed):
        JpegReencoder().reencode(pixels, METADATA)


def test_metadata_too_large(pixels):
    metadata = {"EXIF": {"UserComment": b"\x00" * 70000}}
    with pytest.raises(FinalizeFailed):
        JpegReencoder().reencode(pixels, metadata)


def test_bad_metadata(pixels):
    with pytest.raises(FinalizeFailed):
        JpegReencoder().reencode(pixels, {"EXIF": {"NotATag": 1}})
