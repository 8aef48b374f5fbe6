"""JPEG encoder functionality"""
import struct
import time
from logging import getLogger

import numpy as np
import simplejpeg

from photosaver.errors import DestinationCreationFailed, FinalizeFailed
from photosaver.image import CHANNELS, ImageBuffer
from photosaver.tags import encode_exif
from photosaver.typing import MetadataDictionary

_log = getLogger(__name__)

SOI = b"\xff\xd8"
APP1 = b"\xff\xe1"

# The APP1 length field is 16 bits and counts itself.
MAX_APP1_PAYLOAD = 0xFFFF - 2

SUBSAMPLINGS = ("444", "422", "420", "440", "411", "Gray")


class JpegReencoder:
    """Encodes pixels and a metadata dictionary into a single JPEG image."""

    def __init__(self, quality=100, colour_subsampling="444"):
        """Initialise the reencoder

        :param quality: JPEG quality, 1 to 100, defaults to 100
        :type quality: int, optional
        :param colour_subsampling: Chroma subsampling, one of ``SUBSAMPLINGS``.
            Greyscale images are always written with "Gray". Defaults to '444'.
        :type colour_subsampling: str, optional
        """
        self.q = quality
        self.colour_subsampling = colour_subsampling

    def _check_pixels(self, pixels: ImageBuffer) -> None:
        array = pixels.array
        channels = CHANNELS.get(pixels.colour_space)
        if channels is None:
            raise DestinationCreationFailed(
                f"Colour space {pixels.colour_space} not supported"
            )
        if array.dtype != np.uint8 or array.ndim != 3 or array.shape[2] != channels:
            raise DestinationCreationFailed(
                f"Pixels of shape {array.shape} and type {array.dtype} "
                f"do not match colour space {pixels.colour_space}"
            )
        if array.shape[0] == 0 or array.shape[1] == 0:
            raise DestinationCreationFailed("Cannot encode an empty image")

    def encode_pixels(self, pixels: ImageBuffer) -> bytes:
        """Encode the pixels alone, without any metadata."""
        self._check_pixels(pixels)
        subsampling = self.colour_subsampling
        if pixels.colour_space == "GRAY":
            subsampling = "Gray"
        try:
            return simplejpeg.encode_jpeg(
                np.ascontiguousarray(pixels.array),
                quality=self.q,
                colorspace=pixels.colour_space,
                colorsubsampling=subsampling,
            )
        except (ValueError, TypeError, RuntimeError) as e:
            raise DestinationCreationFailed(f"JPEG encoder failed: {e}") from e

    def reencode(self, pixels: ImageBuffer, metadata: MetadataDictionary) -> bytes:
        """Encode ``pixels`` and embed ``metadata`` as an EXIF APP1 segment.

        :param pixels: Pixels to encode
        :type pixels: ImageBuffer
        :param metadata: "TIFF", "EXIF" and "GPS" tags to embed
        :type metadata: dict
        :raises DestinationCreationFailed: The pixels could not be encoded
        :raises FinalizeFailed: The metadata could not be written
        :return: The JPEG file contents
        :rtype: bytes
        """
        start_time = time.monotonic()
        output_bytes = self.encode_pixels(pixels)

        try:
            exif = encode_exif(metadata)
        except (ValueError, struct.error) as e:
            raise FinalizeFailed(f"Cannot serialise metadata: {e}") from e
        if len(exif) > MAX_APP1_PAYLOAD:
            raise FinalizeFailed(
                f"Metadata is {len(exif)} bytes, more than fits in one APP1 segment"
            )
        if not output_bytes.startswith(SOI):
            raise FinalizeFailed("Encoder output does not start with a JPEG SOI marker")

        if exif:
            # Splice in the exif data straight after the SOI marker.
            output_bytes = (
                output_bytes[:2]
                + APP1
                + (len(exif) + 2).to_bytes(2, "big")
                + exif
                + output_bytes[2:]
            )

        end_time = time.monotonic()
        _log.info(f"Encoded {pixels.width}x{pixels.height} JPEG, {len(output_bytes)} bytes.")
        _log.info(f"Time taken for encode: {(end_time - start_time) * 1000} ms.")
        return output_bytes
