from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from photosaver.errors import PermissionDenied
from photosaver.library import Asset, AssetPlaceholder, PhotoLibrary
from photosaver.location import LocationFix


class FakePhotoLibrary(PhotoLibrary):
    """In-memory photo library for tests.

    Stored files are kept as bytes in ``contents``. The flags make the library
    refuse access, break while authorizing, fail to create assets, lose
    assets right after creating them, or break while fetching them.
    """

    def __init__(
        self,
        authorized: bool = True,
        fail_create: bool = False,
        lose_assets: bool = False,
        fail_authorize: bool = False,
        fail_fetch: bool = False,
    ) -> None:
        self.authorized = authorized
        self.fail_create = fail_create
        self.lose_assets = lose_assets
        self.fail_authorize = fail_authorize
        self.fail_fetch = fail_fetch
        self.authorize_calls = 0
        self.assets: Dict[str, Asset] = {}
        self.contents: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def authorize(self) -> None:
        with self._lock:
            self.authorize_calls += 1
        if self.fail_authorize:
            raise OSError("Fake library authorization broke")
        if not self.authorized:
            raise PermissionDenied("Access to the fake library was denied")

    def create_asset(
        self,
        path: Path,
        creation_date: datetime,
        location: Optional[LocationFix] = None,
    ) -> AssetPlaceholder:
        if self.fail_create:
            raise OSError("Fake library refused to create the asset")
        data = Path(path).read_bytes()
        with self._lock:
            identifier = f"fake-{len(self.contents)}"
            self.contents[identifier] = data
            if not self.lose_assets:
                self.assets[identifier] = Asset(
                    identifier, Path(identifier), creation_date, location
                )
        return AssetPlaceholder(identifier)

    def fetch_asset(self, identifier: str) -> Optional[Asset]:
        if self.fail_fetch:
            raise OSError(f"Fake library cannot read {identifier}")
        with self._lock:
            return self.assets.get(identifier)
