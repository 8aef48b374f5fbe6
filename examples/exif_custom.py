#!/usr/bin/python3

import io

import piexif
import PIL.Image

from photosaver import produce_final_image_bytes
from photosaver.testing import make_jpeg_bytes, make_test_image

# We'll produce a jpeg in memory with some custom exif in it...
my_name = "My Random Camera"
image = make_test_image()
camera_bytes = make_jpeg_bytes(image, {"TIFF": {"Model": my_name}})

jpeg = produce_final_image_bytes(image, camera_bytes)

# And read it back with piexif to check it was there!
exif_check = piexif.load(PIL.Image.open(io.BytesIO(jpeg)).info["exif"])
my_name_check = exif_check["0th"][piexif.ImageIFD.Model]

if my_name_check.decode("ascii") != my_name:
    print("ERROR: custom exif data was not respected")
    raise SystemExit(1)
