"""
Byte range planning over segmented files.

Maps an inclusive byte range of a logical file onto the minimal ordered
set of segments and the decoded-byte window needed from each.
"""

from collections.abc import Sequence

from nzbtools.exceptions import RangeOutOfBoundsError
from nzbtools.models.nzb import Segment
from nzbtools.models.ranges import ByteRange, Piece


def segment_offsets(segments: Sequence[Segment]) -> list[tuple[int, int]]:
    """
    Absolute inclusive [start, end] of every segment within the file.

    Zero-sized segments get an empty span (end == start - 1).
    """
    spans = []
    offset = 0
    for segment in segments:
        spans.append((offset, offset + segment.size - 1))
        offset += segment.size
    return spans


def plan_pieces(segments: Sequence[Segment], byte_range: ByteRange) -> list[Piece]:
    """
    Plan which part of which segment covers the requested range.

    Args:
        segments: Segments in file order with declared sizes.
        byte_range: Inclusive range into the logical file.

    Returns:
        Pieces in file order. The first piece may start mid-segment and
        the last may end mid-segment; all others cover whole segments.

    Raises:
        RangeOutOfBoundsError: If either bound is negative, start > end,
            or end falls beyond the sum of declared sizes.
    """
    start, end = byte_range.start, byte_range.end
    total = sum(s.size for s in segments)
    if start < 0 or end < 0 or start > end or end >= total:
        msg = f"Invalid range {start}-{end} for file size {total}"
        raise RangeOutOfBoundsError(msg, start=start, end=end, size=total)

    pieces: list[Piece] = []
    offset = 0
    for segment in segments:
        size = segment.size
        seg_end = offset + size - 1
        if size == 0 or seg_end < start:
            offset += size
            continue

        piece_start = start - offset if not pieces else 0
        if seg_end >= end:
            pieces.append(Piece(segment.message_id, piece_start, size - 1 - (seg_end - end)))
            break
        pieces.append(Piece(segment.message_id, piece_start, size - 1))
        offset += size

    return pieces
