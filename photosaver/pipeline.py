"""The metadata merge-and-encode pipeline.

``produce_final_image_bytes`` takes the image as the application holds it in
memory together with the bytes the camera produced for it, and returns a new
JPEG whose TIFF tags come from those bytes, whose EXIF tags come from the
in-memory image, and whose GPS tags describe the given location.
"""
from __future__ import annotations

import io
from logging import getLogger
from typing import Optional

from PIL import Image

from photosaver.configuration import SaverConfig
from photosaver.encoder import JpegReencoder
from photosaver.errors import MetadataExtractionFailed, MissingInput
from photosaver.image import ImageBuffer
from photosaver.location import HeadingReading, LocationFix
from photosaver.merge import merge_metadata
from photosaver.tags import decode_exif, empty_metadata
from photosaver.typing import MetadataDictionary, TagDictionary

_log = getLogger(__name__)


def _decode_exif_or_fail(exif_bytes: bytes, source: str) -> MetadataDictionary:
    try:
        return decode_exif(exif_bytes)
    except Exception as e:
        raise MetadataExtractionFailed(f"Cannot decode EXIF of {source}: {e}") from e


def read_metadata(jpeg_bytes: bytes) -> MetadataDictionary:
    """Return the "TIFF", "EXIF" and "GPS" tags of an encoded JPEG.

    A JPEG without an EXIF segment gives empty namespaces.

    :raises MetadataExtractionFailed: ``jpeg_bytes`` is not a readable JPEG
    """
    try:
        with Image.open(io.BytesIO(jpeg_bytes)) as image:
            image_format = image.format
            exif_bytes = image.info.get("exif")
    except OSError as e:
        raise MetadataExtractionFailed("Image data cannot be decoded") from e

    if image_format != "JPEG":
        raise MetadataExtractionFailed(f"Expected JPEG data, got {image_format}")
    if not exif_bytes:
        _log.debug("Image data carries no EXIF segment")
        return empty_metadata()
    return _decode_exif_or_fail(exif_bytes, "image data")


def live_image_exif(image: Image.Image) -> TagDictionary:
    """Return the EXIF namespace attached to an in-memory PIL image.

    Images that were built in memory rather than opened from a file usually carry
    no EXIF block, in which case the result is empty.
    """
    exif_bytes = image.info.get("exif")
    if not exif_bytes:
        return {}
    return _decode_exif_or_fail(exif_bytes, "in-memory image")["EXIF"]


def produce_final_image_bytes(
    original_image: Optional[Image.Image],
    raw_image_bytes: Optional[bytes],
    location: Optional[LocationFix] = None,
    heading: Optional[HeadingReading] = None,
    config: Optional[SaverConfig] = None,
) -> bytes:
    """Produce the JPEG to store for a captured photo.

    :param original_image: The image as held in memory, the source of the pixels
        and of the EXIF tags
    :type original_image: PIL.Image.Image
    :param raw_image_bytes: The encoded capture, the source of every other tag
    :type raw_image_bytes: bytes
    :param location: Where the photo was taken, defaults to None
    :type location: LocationFix, optional
    :param heading: Which way the camera faced, only used with a location,
        defaults to None
    :type heading: HeadingReading, optional
    :param config: Encoder settings, defaults to None
    :type config: SaverConfig, optional
    :raises MissingInput: The image or its bytes are missing
    :raises MetadataExtractionFailed: An input cannot be decoded
    :raises EncodeError: The final JPEG cannot be produced
    :return: The final JPEG
    :rtype: bytes
    """
    if original_image is None:
        raise MissingInput("No image to save")
    if not raw_image_bytes:
        raise MissingInput("No image data to save")
    if config is None:
        config = SaverConfig()

    base = read_metadata(bytes(raw_image_bytes))
    source_exif = live_image_exif(original_image)
    pixels = ImageBuffer.from_image(original_image)

    merged = merge_metadata(base, source_exif, location, heading)
    _log.debug(f"Merged metadata: {merged}")

    reencoder = JpegReencoder(config.quality, config.colour_subsampling)
    return reencoder.reencode(pixels, merged)
