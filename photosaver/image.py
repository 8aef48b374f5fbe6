from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image

from photosaver.errors import MetadataExtractionFailed

# PIL mode -> colour space understood by simplejpeg. Anything else is
# converted to RGB first.
MODE_TABLE = {"RGB": "RGB", "RGBA": "RGBA", "RGBX": "RGBX", "L": "GRAY", "CMYK": "CMYK"}

CHANNELS = {"RGB": 3, "RGBA": 4, "RGBX": 4, "GRAY": 1, "CMYK": 4}


@dataclass(frozen=True)
class ImageBuffer:
    array: np.ndarray
    """Pixel data, shape (height, width, channels), dtype uint8."""

    colour_space: str
    """One of the simplejpeg colour spaces in ``CHANNELS``."""

    @property
    def width(self) -> int:
        return self.array.shape[1]

    @property
    def height(self) -> int:
        return self.array.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_image(cls, image: Image.Image) -> ImageBuffer:
        """Make an ImageBuffer from a PIL image, copying the pixels out of it."""
        try:
            colour_space = MODE_TABLE.get(image.mode)
            if colour_space is None:
                image = image.convert("RGB")
                colour_space = "RGB"
            array = np.array(image, dtype=np.uint8)
        except (OSError, ValueError) as e:
            raise MetadataExtractionFailed(f"Cannot read pixels from {image}") from e

        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        return cls(array=np.ascontiguousarray(array), colour_space=colour_space)

    @classmethod
    def from_bytes(cls, data: bytes) -> ImageBuffer:
        """Decode an encoded image into an ImageBuffer."""
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return cls.from_image(image)
        except OSError as e:
            raise MetadataExtractionFailed("Cannot decode image data") from e

    def make_image(self) -> Image.Image:
        """Make a PIL image from a copy of the pixels."""
        mode = "L" if self.colour_space == "GRAY" else self.colour_space
        return Image.frombytes(mode, self.size, self.array.tobytes())
