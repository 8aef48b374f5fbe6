import io
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from photosaver.image import ImageBuffer
from photosaver.tags import encode_exif
from photosaver.typing import MetadataDictionary


def make_test_array(size: Tuple[int, int], dtype=np.uint8) -> np.ndarray:
    """Red, green and blue horizontal bands, shape (height, width, 3)."""
    w, h = size
    img = np.zeros((h, w, 3), dtype=dtype)
    img[0 : h // 3, :, 0] = 255
    img[h // 3 : 2 * h // 3, :, 1] = 255
    img[2 * h // 3 :, :, 2] = 255
    return img


def make_test_image(size: Tuple[int, int] = (64, 48)) -> Image.Image:
    return ImageBuffer(make_test_array(size), "RGB").make_image()


def make_jpeg_bytes(
    image: Image.Image,
    metadata: Optional[MetadataDictionary] = None,
    quality: int = 95,
) -> bytes:
    """Encode ``image`` with Pillow, embedding ``metadata`` when given."""
    keywords = {"format": "JPEG", "quality": quality}
    exif = encode_exif(metadata or {})
    if exif:
        keywords["exif"] = exif
    out = io.BytesIO()
    image.save(out, **keywords)
    return out.getvalue()


def open_with_exif(data: bytes) -> Image.Image:
    """Open encoded image data and load it, keeping its EXIF in ``info``."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image
