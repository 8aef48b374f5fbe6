import importlib.metadata

from photosaver.configuration import SaverConfig
from photosaver.encoder import JpegReencoder
from photosaver.errors import (
    AssetFetchFailed,
    DestinationCreationFailed,
    EncodeError,
    FinalizeFailed,
    ImageSaverError,
    MetadataExtractionFailed,
    MissingInput,
    PermissionDenied,
    PersistenceFailed,
)
from photosaver.fake import FakePhotoLibrary
from photosaver.gps import gps_metadata
from photosaver.image import ImageBuffer
from photosaver.library import Asset, AssetPlaceholder, DirectoryPhotoLibrary, PhotoLibrary
from photosaver.location import HeadingReading, LocationFix
from photosaver.merge import merge_metadata
from photosaver.pipeline import produce_final_image_bytes, read_metadata
from photosaver.saver import ImageSaver, SaveRequest

__all__ = [
    "Asset",
    "AssetFetchFailed",
    "AssetPlaceholder",
    "DestinationCreationFailed",
    "DirectoryPhotoLibrary",
    "EncodeError",
    "FakePhotoLibrary",
    "FinalizeFailed",
    "HeadingReading",
    "ImageBuffer",
    "ImageSaver",
    "ImageSaverError",
    "JpegReencoder",
    "LocationFix",
    "MetadataExtractionFailed",
    "MissingInput",
    "PermissionDenied",
    "PersistenceFailed",
    "PhotoLibrary",
    "SaveRequest",
    "SaverConfig",
    "gps_metadata",
    "merge_metadata",
    "produce_final_image_bytes",
    "read_metadata",
]

__version__ = importlib.metadata.version(__package__ or __name__)
