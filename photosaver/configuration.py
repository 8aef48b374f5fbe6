from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from photosaver.encoder import SUBSAMPLINGS


def _assert_type(thing: Any, type_) -> None:
    if not isinstance(thing, type_):
        raise TypeError(f"{thing} should be a {type_} not {type(thing)}")


@dataclass(frozen=True)
class SaverConfig:
    """Everything a save needs to know up front. Checked on construction."""

    quality: int = 100
    """JPEG quality of the final encode, 1 to 100."""

    colour_subsampling: str = "444"
    """Chroma subsampling of the final encode."""

    temp_dir: Optional[Union[str, Path]] = None
    """Where the encoded file is staged before it is handed to the library.
    Defaults to the system temporary directory."""

    filename_prefix: str = "image"

    def __post_init__(self) -> None:
        self.check()

    def check(self) -> None:
        """Raise TypeError or ValueError if the configuration is invalid."""
        _assert_type(self.quality, int)
        if isinstance(self.quality, bool) or not 1 <= self.quality <= 100:
            raise ValueError(f"quality should be between 1 and 100 got: {self.quality}")

        _assert_type(self.colour_subsampling, str)
        if self.colour_subsampling not in SUBSAMPLINGS:
            raise ValueError(
                f"colour_subsampling should be one of {SUBSAMPLINGS} "
                f"got: {self.colour_subsampling}"
            )

        if self.temp_dir is not None:
            _assert_type(self.temp_dir, (str, Path))

        _assert_type(self.filename_prefix, str)
        if not self.filename_prefix or any(c in self.filename_prefix for c in "/\\"):
            raise ValueError(f"Bad filename_prefix {self.filename_prefix!r}")

    @property
    def temp_path(self) -> Path:
        if self.temp_dir is None:
            return Path(tempfile.gettempdir())
        return Path(self.temp_dir)
