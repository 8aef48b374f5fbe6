from __future__ import annotations

from concurrent.futures import Future
from fractions import Fraction
from typing import Any, Callable, Dict, Generic, Tuple, TypeVar, Union

T = TypeVar("T")

# A single tag value. Rationals are Fractions so that they compare equal to the
# ints and floats they were built from.
MetadataValue = Union[str, int, Fraction, bytes, Tuple["MetadataValue", ...]]

# Tag name -> value, for one namespace ("TIFF", "EXIF" or "GPS").
TagDictionary = Dict[str, MetadataValue]

# Namespace -> tags.
MetadataDictionary = Dict[str, TagDictionary]


class TypedFuture(Future, Generic[T]):
    def add_done_callback(
        self: TypedFuture, fn: Callable[[TypedFuture[T]], Any]
    ) -> None:
        ...

    def cancel(self: TypedFuture) -> bool:
        ...

    def cancelled(self: TypedFuture) -> bool:
        ...

    def done(self: TypedFuture) -> bool:
        ...

    def exception(self, timeout: float | None = ...) -> BaseException | None:
        ...

    def result(self: TypedFuture[T], timeout: float | None = ...) -> T:
        ...

    def set_result(self: TypedFuture[T], result: T) -> None:
        ...

    def set_exception(self: TypedFuture[T], exception: BaseException) -> None:
        ...
