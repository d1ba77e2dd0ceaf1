"""Multi-resolution .ico container holding PNG-compressed images."""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Dict, List, Sequence

from config import ICON_SIZES

HEADER = struct.Struct("<HHH")  # reserved, type (1 = icon), image count
ENTRY = struct.Struct("<BBBBHHII")  # width, height, colors, reserved, planes, bpp, size, offset
ICON_TYPE = 1

RasterSet = Dict[int, bytes]


class IconEncodeError(ValueError):
    """Raised when the raster set cannot be packed into an icon container."""


@dataclass(frozen=True)
class DirectoryEntry:
    width: int
    height: int
    color_count: int
    planes: int
    bit_count: int
    size: int
    offset: int


def _dimension_byte(size: int) -> int:
    # The directory stores 256 as 0
    return 0 if size >= 256 else size


def encode(raster_set: RasterSet, sizes: Sequence[int] = ICON_SIZES) -> bytes:
    """
    Pack PNG buffers into an icon container, one directory entry per size.

    Every size in `sizes` must be present and non-empty.
    """
    sizes = list(sizes)
    if not sizes:
        raise IconEncodeError("No icon sizes requested")
    missing = [size for size in sizes if not raster_set.get(size)]
    if missing:
        raise IconEncodeError(f"Missing raster data for sizes: {', '.join(str(s) for s in missing)}")
    for size in sizes:
        if size <= 0:
            raise IconEncodeError(f"Icon size {size} must be positive")

    header = HEADER.pack(0, ICON_TYPE, len(sizes))
    offset = HEADER.size + ENTRY.size * len(sizes)
    entries: List[bytes] = []
    for size in sizes:
        data = raster_set[size]
        dim = _dimension_byte(size)
        entries.append(ENTRY.pack(dim, dim, 0, 0, 1, 32, len(data), offset))
        offset += len(data)

    return header + b"".join(entries) + b"".join(raster_set[size] for size in sizes)


def decode_directory(data: bytes) -> List[DirectoryEntry]:
    """Parse the header and directory entries of an icon container."""
    if len(data) < HEADER.size:
        raise IconEncodeError("Truncated icon header")
    reserved, kind, count = HEADER.unpack_from(data, 0)
    if reserved != 0 or kind != ICON_TYPE:
        raise IconEncodeError("Not an icon container")
    if len(data) < HEADER.size + ENTRY.size * count:
        raise IconEncodeError("Truncated icon directory")

    entries = []
    for index in range(count):
        width, height, colors, _, planes, bpp, size, offset = ENTRY.unpack_from(data, HEADER.size + ENTRY.size * index)
        entries.append(
            DirectoryEntry(
                width=width or 256,
                height=height or 256,
                color_count=colors,
                planes=planes,
                bit_count=bpp,
                size=size,
                offset=offset,
            )
        )
    return entries


def extract_images(data: bytes) -> Dict[int, bytes]:
    """Return the embedded image buffers keyed by their pixel width."""
    return {entry.width: data[entry.offset : entry.offset + entry.size] for entry in decode_directory(data)}
