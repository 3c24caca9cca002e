"""
Byte range models used for segmented retrieval.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ByteRange:
    """
    Inclusive byte interval into a logical file.

    Bounds are validated against the file by the range planner, not here.
    """

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True, slots=True)
class Piece:
    """Decoded-byte window [start, end] to extract from one segment."""

    message_id: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1
