"""Conversion between name-keyed metadata dictionaries and EXIF APP1 payloads.

The binary side is handled by ``piexif``. This module only translates tag ids
to names and converts values to and from the shapes ``piexif`` expects:

- rationals become :class:`~fractions.Fraction` (a raw ``(num, den)`` tuple is
  kept when the denominator is zero),
- GPS coordinates become decimal degrees instead of degree/minute/second
  rationals,
- ``GPSTimeStamp`` becomes an ``HH:MM:SS.ffffff`` string,
- ``GPSImgDirection`` keeps negative values, stored with signed bits in its
  unsigned rational slot.
"""
from __future__ import annotations

import re
from fractions import Fraction
from logging import getLogger
from numbers import Integral, Real
from typing import Any, Dict, Tuple

import piexif

from photosaver.typing import MetadataDictionary, MetadataValue, TagDictionary

_log = getLogger(__name__)

EXIF_HEADER = b"Exif\x00\x00"

# Our namespace name -> (piexif IFD name, piexif.TAGS table).
NAMESPACES = {
    "TIFF": ("0th", "Image"),
    "EXIF": ("Exif", "Exif"),
    "GPS": ("GPS", "GPS"),
}

# Offsets to other IFDs. piexif rewrites these itself when dumping.
_POINTER_TAGS = {
    "0th": {piexif.ImageIFD.ExifTag, piexif.ImageIFD.GPSTag},
    "Exif": {piexif.ExifIFD.InteroperabilityTag},
    "GPS": set(),
}

COORDINATE_TAGS = {"GPSLatitude", "GPSLongitude", "GPSDestLatitude", "GPSDestLongitude"}
TIME_STAMP_TAG = "GPSTimeStamp"

# Unsigned RATIONAL tags that may hold negative values, such as an invalid
# heading of -1. Negative values are stored with the two's complement bit
# pattern of an SRATIONAL numerator.
SIGNED_TAGS = {"GPSImgDirection"}

# Largest denominator used when a float has to be written as a rational.
RATIONAL_PRECISION = 1_000_000

_MICRO = 1_000_000
_INT32 = 1 << 31
_UINT32 = 1 << 32
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{1,2}):(\d{1,2})(?:\.(\d{1,6}))?$")

_RATIONAL_TYPES = (piexif.TYPES.Rational, piexif.TYPES.SRational)
_INTEGER_TYPES = (
    piexif.TYPES.Byte,
    piexif.TYPES.Short,
    piexif.TYPES.Long,
    piexif.TYPES.SShort,
    piexif.TYPES.SLong,
)


def _tag_table(namespace: str) -> Dict[int, Dict[str, Any]]:
    return piexif.TAGS[NAMESPACES[namespace][1]]


def _tag_ids(namespace: str) -> Dict[str, Tuple[int, int]]:
    return {
        info["name"]: (tag, info["type"])
        for tag, info in _tag_table(namespace).items()
    }


_TAG_IDS = {namespace: _tag_ids(namespace) for namespace in NAMESPACES}


def empty_metadata() -> MetadataDictionary:
    return {namespace: {} for namespace in NAMESPACES}


# Decoding


def _fraction(pair: Tuple[int, int]) -> MetadataValue:
    num, den = pair
    if den == 0:
        return (num, den)
    return Fraction(num, den)


def _decode_rational(value) -> MetadataValue:
    if value and isinstance(value[0], tuple):
        return tuple(_fraction(pair) for pair in value)
    return _fraction(value)


def _is_rational_triple(value) -> bool:
    return (
        len(value) == 3
        and all(isinstance(v, tuple) and len(v) == 2 for v in value)
        and all(den != 0 for _, den in value)
    )


def _decode_coordinate(value) -> MetadataValue:
    if not _is_rational_triple(value):
        return _decode_rational(value)
    degrees, minutes, seconds = (Fraction(num, den) for num, den in value)
    return float(degrees + minutes / 60 + seconds / 3600)


def _decode_time_stamp(value) -> MetadataValue:
    if not _is_rational_triple(value):
        return _decode_rational(value)
    hours, minutes, seconds = (Fraction(num, den) for num, den in value)
    whole_seconds, micros = divmod(round(seconds * _MICRO), _MICRO)
    return f"{int(hours):02d}:{int(minutes):02d}:{whole_seconds:02d}.{micros:06d}"


def _decode_signed(value) -> MetadataValue:
    if not _is_pair(value):
        return _decode_rational(value)
    num, den = value
    if num >= _INT32:
        num -= _UINT32
    return _fraction((num, den))


def _decode_value(name: str, value, value_type: int) -> MetadataValue:
    if name in SIGNED_TAGS and isinstance(value, tuple):
        return _decode_signed(value)
    if name in COORDINATE_TAGS and isinstance(value, tuple):
        return _decode_coordinate(value)
    if name == TIME_STAMP_TAG and isinstance(value, tuple):
        return _decode_time_stamp(value)
    if value_type == piexif.TYPES.Ascii and isinstance(value, bytes):
        return value.decode("latin-1").rstrip("\x00")
    if value_type in _RATIONAL_TYPES and isinstance(value, tuple):
        return _decode_rational(value)
    return value


def decode_ifd(namespace: str, ifd: Dict[int, Any]) -> TagDictionary:
    """Turn one ``piexif`` IFD into a tag name to value mapping."""
    table = _tag_table(namespace)
    pointers = _POINTER_TAGS[NAMESPACES[namespace][0]]
    tags = {}
    for tag, value in ifd.items():
        if tag in pointers:
            continue
        info = table.get(tag)
        if info is None:
            _log.debug(f"Dropping unknown {namespace} tag {tag}")
            continue
        tags[info["name"]] = _decode_value(info["name"], value, info["type"])
    return tags


def decode_exif(exif_bytes: bytes) -> MetadataDictionary:
    """Decode an EXIF payload, with or without its ``Exif\\0\\0`` header.

    Raises ``ValueError`` if the payload is not a TIFF structure.
    """
    if exif_bytes.startswith(EXIF_HEADER):
        exif_bytes = exif_bytes[len(EXIF_HEADER) :]
    if exif_bytes[:4] not in (b"II*\x00", b"MM\x00*"):
        raise ValueError("EXIF payload does not hold a TIFF header")
    exif_dict = piexif.load(exif_bytes)
    return {
        namespace: decode_ifd(namespace, exif_dict.get(ifd_name) or {})
        for namespace, (ifd_name, _) in NAMESPACES.items()
    }


# Encoding


def _require(condition: bool, name: str, value) -> None:
    if not condition:
        raise ValueError(f"Invalid value for {name}: {value!r}")


def _is_pair(value) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and all(isinstance(v, Integral) for v in value)
    )


def _to_rational(name: str, value) -> Tuple[int, int]:
    if _is_pair(value):
        return (int(value[0]), int(value[1]))
    _require(isinstance(value, Real) and not isinstance(value, bool), name, value)
    try:
        fraction = Fraction(value).limit_denominator(RATIONAL_PRECISION)
    except (OverflowError, ValueError) as e:
        raise ValueError(f"Invalid value for {name}: {value!r}") from e
    return (fraction.numerator, fraction.denominator)


def _encode_rational(name: str, value):
    if isinstance(value, tuple) and not _is_pair(value):
        return tuple(_to_rational(name, v) for v in value)
    return _to_rational(name, value)


def _encode_signed(name: str, value):
    num, den = _to_rational(name, value)
    if den < 0:
        num, den = -num, -den
    if not -_INT32 <= num < _INT32 and den > 0:
        # Trade precision for range so the numerator fits in 32 bits.
        limit = max(1, int((_INT32 - 1) // (abs(Fraction(num, den)) + 1)))
        fraction = Fraction(num, den).limit_denominator(limit)
        num, den = fraction.numerator, fraction.denominator
    if not -_INT32 <= num < _INT32 or den >= _UINT32:
        raise ValueError(f"Value for {name} out of range: {value!r}")
    return (num % _UINT32, den)


def _encode_coordinate(name: str, value):
    if isinstance(value, tuple):
        return _encode_rational(name, value)
    _require(isinstance(value, Real) and value >= 0, name, value)
    try:
        total = round(Fraction(value) * 3600 * _MICRO)
    except (OverflowError, ValueError) as e:
        raise ValueError(f"Invalid value for {name}: {value!r}") from e
    degrees, rest = divmod(total, 3600 * _MICRO)
    minutes, micro_seconds = divmod(rest, 60 * _MICRO)
    return ((degrees, 1), (minutes, 1), (micro_seconds, _MICRO))


def _encode_time_stamp(name: str, value):
    if isinstance(value, tuple):
        return _encode_rational(name, value)
    _require(isinstance(value, str), name, value)
    match = _TIME_RE.match(value)
    _require(match is not None, name, value)
    hours, minutes, seconds, fraction = match.groups()
    micros = int((fraction or "").ljust(6, "0"))
    return ((int(hours), 1), (int(minutes), 1), (int(seconds) * _MICRO + micros, _MICRO))


def _encode_value(name: str, value, value_type: int):
    if name in SIGNED_TAGS:
        return _encode_signed(name, value)
    if name in COORDINATE_TAGS:
        return _encode_coordinate(name, value)
    if name == TIME_STAMP_TAG:
        return _encode_time_stamp(name, value)
    if value_type in _RATIONAL_TYPES:
        return _encode_rational(name, value)
    if value_type == piexif.TYPES.Ascii:
        _require(isinstance(value, (str, bytes)), name, value)
        return value
    if value_type == piexif.TYPES.Undefined:
        if isinstance(value, int):
            return bytes([value])
        if isinstance(value, str):
            return value.encode("latin-1")
        _require(isinstance(value, bytes), name, value)
        return value
    if value_type in _INTEGER_TYPES:
        _require(
            isinstance(value, int)
            or (isinstance(value, tuple) and all(isinstance(v, int) for v in value)),
            name,
            value,
        )
    return value


def encode_ifd(namespace: str, tags: TagDictionary) -> Dict[int, Any]:
    """Turn a tag name to value mapping into a ``piexif`` IFD.

    Raises ``ValueError`` for unknown tag names and badly typed values.
    """
    ids = _TAG_IDS[namespace]
    ifd = {}
    for name, value in tags.items():
        if name not in ids:
            raise ValueError(f"Unknown {namespace} tag {name!r}")
        tag, value_type = ids[name]
        ifd[tag] = _encode_value(name, value, value_type)
    return ifd


def encode_exif(metadata: MetadataDictionary) -> bytes:
    """Serialise ``metadata`` into an APP1 payload starting with ``Exif\\0\\0``.

    Namespaces other than "TIFF", "EXIF" and "GPS" are ignored. Returns an empty
    bytes object when there is nothing to write.
    """
    exif_dict = {}
    for namespace, (ifd_name, _) in NAMESPACES.items():
        tags = metadata.get(namespace)
        if tags:
            exif_dict[ifd_name] = encode_ifd(namespace, tags)
    if not exif_dict:
        return b""
    return piexif.dump(exif_dict)
