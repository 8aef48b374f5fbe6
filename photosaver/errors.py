"""Exceptions raised while producing and saving an image."""


class ImageSaverError(RuntimeError):
    """Base class for every failure of a single save attempt."""


class MissingInput(ImageSaverError):
    """The image or its encoded bytes were not supplied."""


class MetadataExtractionFailed(ImageSaverError):
    """An input could not be decoded into metadata or pixels."""


class EncodeError(ImageSaverError):
    """The JPEG encoder could not produce output."""


class DestinationCreationFailed(EncodeError):
    """The pixel buffer could not be turned into a JPEG stream."""


class FinalizeFailed(EncodeError):
    """The metadata could not be written into the JPEG stream."""


class PermissionDenied(ImageSaverError):
    """The photo library refused access."""


class PersistenceFailed(ImageSaverError):
    """Writing the temporary file or creating the asset failed."""


class AssetFetchFailed(ImageSaverError):
    """The asset was created but could not be fetched back.

    The image is in the library at this point, but no reference to it can be
    handed back to the caller.
    """

    def __init__(self, identifier: str):
        super().__init__(f"Asset {identifier} was created but cannot be fetched")
        self.identifier = identifier
