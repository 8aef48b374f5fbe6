from __future__ import annotations

import time
import uuid
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import getLogger
from pathlib import Path
from threading import Thread
from typing import Optional

from PIL import Image

from photosaver.configuration import SaverConfig
from photosaver.errors import (
    AssetFetchFailed,
    ImageSaverError,
    PermissionDenied,
    PersistenceFailed,
)
from photosaver.library import Asset, PhotoLibrary
from photosaver.location import HeadingReading, LocationFix
from photosaver.pipeline import produce_final_image_bytes
from photosaver.typing import TypedFuture

_log = getLogger(__name__)


@dataclass(frozen=True)
class SaveRequest:
    image: Optional[Image.Image]
    """The photo as held in memory."""

    image_data: Optional[bytes]
    """The encoded photo as the camera delivered it."""

    location: Optional[LocationFix] = None

    heading: Optional[HeadingReading] = None


class ImageSaver:
    """Saves photos, with their location, into a photo library."""

    def __init__(self, library: PhotoLibrary, config: Optional[SaverConfig] = None):
        self.library = library
        self.config = config if config is not None else SaverConfig()

    def _write_temp_file(self, data: bytes) -> Path:
        name = f"{self.config.filename_prefix}{int(time.time())}-{uuid.uuid4().hex[:8]}.jpg"
        path = self.config.temp_path / name
        try:
            path.write_bytes(data)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise PersistenceFailed(f"Cannot write {path}") from e
        return path

    def _authorize(self) -> None:
        try:
            self.library.authorize()
        except ImageSaverError:
            raise
        except Exception as e:
            raise PermissionDenied(f"Library authorization failed: {e}") from e

    def _create_asset(self, path: Path, location: Optional[LocationFix]):
        try:
            return self.library.create_asset(
                path, creation_date=datetime.now(timezone.utc), location=location
            )
        except ImageSaverError:
            raise
        except Exception as e:
            raise PersistenceFailed(f"Library could not store {path}: {e}") from e
        finally:
            path.unlink(missing_ok=True)

    def _fetch_asset(self, identifier: str) -> Optional[Asset]:
        try:
            return self.library.fetch_asset(identifier)
        except ImageSaverError:
            raise
        except Exception as e:
            raise AssetFetchFailed(identifier) from e

    def save_sync(self, request: SaveRequest) -> Asset:
        """Save the photo and wait for the result.

        :raises PermissionDenied: The library refused access; nothing was encoded
        :raises MissingInput: The request has no image or no image data
        :raises MetadataExtractionFailed: An input could not be decoded
        :raises EncodeError: The final JPEG could not be produced
        :raises PersistenceFailed: The file could not be written or stored
        :raises AssetFetchFailed: The photo was stored but cannot be fetched
        """
        self._authorize()

        start_time = time.monotonic()
        data = produce_final_image_bytes(
            request.image,
            request.image_data,
            request.location,
            request.heading,
            self.config,
        )
        path = self._write_temp_file(data)
        placeholder = self._create_asset(path, request.location)

        asset = self._fetch_asset(placeholder.identifier)
        if asset is None:
            raise AssetFetchFailed(placeholder.identifier)

        end_time = time.monotonic()
        _log.info(f"Saved asset {asset.identifier}.")
        _log.info(f"Time taken for save: {(end_time - start_time) * 1000} ms.")
        return asset

    def save(self, request: SaveRequest) -> TypedFuture[Asset]:
        """Save the photo on a worker thread.

        Returns a future that matures with the stored Asset, or with the
        exception ``save_sync`` would have raised.
        """
        future = Future()
        future.set_running_or_notify_cancel()

        def run():
            try:
                future.set_result(self.save_sync(request))
            except Exception as e:
                _log.warning(f"Saving image failed: {e}")
                future.set_exception(e)

        Thread(target=run, daemon=True).start()
        return future
