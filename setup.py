#! /usr/bin/env python3

# Copyright (c) 2023 Exclosure Corporation
# Copyright (c) 2021-2022 Raspberry Pi & Raspberry Pi Foundation
# SPDX-License-Identifier: BSD-2-Clause

from setuptools import setup

version = "0.1.0"


with open("README.md") as readme:
    long_description = readme.read()

setup(
    name="photosaver",
    version=version,
    description="Save captured photos to a photo library with EXIF and GPS metadata embedded",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="BSD 2-Clause",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3.9",
        "Topic :: Multimedia :: Graphics :: Capture :: Digital Camera",
    ],
    packages=["photosaver"],
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "piexif",
        "pillow",
        "simplejpeg",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
