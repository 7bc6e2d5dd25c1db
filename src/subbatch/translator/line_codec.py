"""Delimiter-based codec for sending a batch of segments as one payload."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from subbatch.common.exceptions import CardinalityMismatchError

logger = logging.getLogger(__name__)

# Marker placed on its own line between consecutive segments
SPLIT_DELIMITER = "---SPLIT---"
SEGMENT_SEPARATOR = f"\n{SPLIT_DELIMITER}\n"


class DecodePath(str, Enum):
    """Which decoding strategy produced the segments."""

    EMPTY = "empty"
    DELIMITER = "delimiter"
    LINE_BREAK = "line_break"
    FALLBACK = "fallback"


@dataclass
class DecodeResult:
    """Decoded segments together with the path that produced them."""

    segments: List[str]
    path: DecodePath

    @property
    def fell_back(self) -> bool:
        return self.path == DecodePath.FALLBACK


def encode(segments: Sequence[str]) -> str:
    """
    Join segments into one payload, separated by the delimiter line.

    Args:
        segments: Segment texts in document order (may contain line breaks)

    Returns:
        Payload string; empty when there are no segments
    """
    return SEGMENT_SEPARATOR.join(segments)


def split_payload(payload: str, expected_count: int) -> DecodeResult:
    """
    Split a backend payload into exactly expected_count segments.

    The delimiter split is tried first; if its count is wrong, the payload
    is split on line breaks with blank lines discarded.

    Args:
        payload: Text returned by the backend
        expected_count: Number of segments that were sent

    Returns:
        DecodeResult on the delimiter or line-break path

    Raises:
        CardinalityMismatchError: If neither split yields expected_count pieces
    """
    by_delimiter = [piece.strip() for piece in payload.split(SPLIT_DELIMITER)]
    if payload.strip() and len(by_delimiter) == expected_count:
        return DecodeResult(by_delimiter, DecodePath.DELIMITER)

    by_line = [line.strip() for line in payload.splitlines() if line.strip()]
    if by_line and len(by_line) == expected_count:
        return DecodeResult(by_line, DecodePath.LINE_BREAK)

    raise CardinalityMismatchError(
        expected_count=expected_count,
        delimiter_count=len(by_delimiter),
        line_count=len(by_line),
    )


def decode_payload(payload: str, originals: Sequence[str]) -> DecodeResult:
    """
    Decode a backend payload for a batch, falling back to the originals.

    The expected count is len(originals). When the count cannot be
    reconciled, the original segments are returned unchanged rather than
    guessing an alignment.

    Args:
        payload: Text returned by the backend
        originals: Segment texts that were encoded

    Returns:
        DecodeResult whose segments always have len(originals) items
    """
    expected_count = len(originals)
    if expected_count == 0:
        return DecodeResult([], DecodePath.EMPTY)

    try:
        return split_payload(payload, expected_count)
    except CardinalityMismatchError as e:
        logger.warning(f"⚠️  {e}. Returning originals for safety.")
        return DecodeResult(list(originals), DecodePath.FALLBACK)


def decode(payload: str, originals: Sequence[str]) -> List[str]:
    """Decode a backend payload into one string per original segment."""
    return decode_payload(payload, originals).segments
