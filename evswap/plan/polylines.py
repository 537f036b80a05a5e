from __future__ import annotations

import logging
from typing import List, Sequence

import polyline

from .schema import Coordinate

logger = logging.getLogger(__name__)

PRECISION = 5  # 1e-5 degrees


def decode_path(encoded: str | None) -> List[Coordinate]:
    """Decode an encoded polyline; blank or malformed input decodes to []."""
    if not encoded or not str(encoded).strip():
        return []
    try:
        pairs = polyline.decode(str(encoded), PRECISION)
    except (ValueError, IndexError, TypeError) as e:
        logger.warning("Could not decode polyline (%d chars): %s", len(str(encoded)), e)
        return []
    return [Coordinate(lat=float(lat), lng=float(lng)) for lat, lng in pairs]


def encode_path(path: Sequence[Coordinate]) -> str:
    return polyline.encode([p.as_tuple() for p in path], PRECISION)


def merge_encoded(first: str, second: str) -> str:
    """
    Join two legs that meet at a shared point (the swap branch).
    The first point of `second` duplicates the last point of `first` and is dropped.
    """
    head = decode_path(first)
    tail = decode_path(second)
    return encode_path(head + tail[1:])
