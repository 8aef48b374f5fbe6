from __future__ import annotations

import os
import shutil
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from pathlib import Path
from typing import Dict, Optional, Union

from photosaver.errors import PermissionDenied
from photosaver.location import LocationFix

_log = getLogger(__name__)


@dataclass(frozen=True)
class AssetPlaceholder:
    """Returned as soon as an asset is created; resolve it with fetch_asset."""

    identifier: str


@dataclass(frozen=True)
class Asset:
    identifier: str

    path: Path
    """Where the stored image lives."""

    creation_date: datetime

    location: Optional[LocationFix] = None


class PhotoLibrary(ABC):
    """Where saved photos end up."""

    @abstractmethod
    def authorize(self) -> None:
        """Raise PermissionDenied if photos may not be added."""

    @abstractmethod
    def create_asset(
        self,
        path: Path,
        creation_date: datetime,
        location: Optional[LocationFix] = None,
    ) -> AssetPlaceholder:
        """Add the image file at ``path`` to the library.

        The library takes its own copy, ``path`` may be removed afterwards.
        """

    @abstractmethod
    def fetch_asset(self, identifier: str) -> Optional[Asset]:
        """Return the asset with this identifier, or None if there is none."""


class DirectoryPhotoLibrary(PhotoLibrary):
    """A photo library that is just a directory of JPEG files."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self._assets: Dict[str, Asset] = {}
        self._lock = threading.Lock()

    def authorize(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PermissionDenied(f"Cannot create library at {self.root}") from e
        if not os.access(self.root, os.W_OK | os.X_OK):
            raise PermissionDenied(f"Library at {self.root} is not writable")

    def create_asset(
        self,
        path: Path,
        creation_date: datetime,
        location: Optional[LocationFix] = None,
    ) -> AssetPlaceholder:
        identifier = uuid.uuid4().hex
        destination = self.root / f"{identifier}.jpg"
        shutil.copyfile(path, destination)
        with self._lock:
            self._assets[identifier] = Asset(
                identifier, destination, creation_date, location
            )
        _log.info(f"Stored {path} as {destination}.")
        return AssetPlaceholder(identifier)

    def fetch_asset(self, identifier: str) -> Optional[Asset]:
        with self._lock:
            asset = self._assets.get(identifier)
        if asset is None or not asset.path.is_file():
            return None
        return asset
