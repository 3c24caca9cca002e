"""
Byte range retrieval service.

Streams an exact byte range of a segmented file: plans the pieces, fetches
each segment body over one NNTP session, decodes the yEnc lines and emits
only the overlapping slices, in order.
"""

from collections.abc import AsyncGenerator
from contextlib import aclosing
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from nzbtools.models.nzb import NzbFile
from nzbtools.models.ranges import ByteRange, Piece
from nzbtools.nntp.commands import fetch_body
from nzbtools.nntp.session import NNTPSession
from nzbtools.services.range_planner import plan_pieces
from nzbtools.yenc.codec import decode_line, is_metadata_line, undot

logger = structlog.get_logger(__name__)


@runtime_checkable
class ByteSink(Protocol):
    """Anything with a binary write(), e.g. an open file or BytesIO."""

    def write(self, data: bytes, /) -> object: ...


class RangeService:
    """
    Service for retrieving byte ranges of files described by an NZB.

    Segments are fetched strictly one after another on the given session.
    """

    def __init__(self, session: NNTPSession) -> None:
        """
        Args:
            session: Connected (and, if needed, authenticated) NNTP session.
        """
        self._session = session

    async def stream_range(self, file: NzbFile, byte_range: ByteRange) -> AsyncGenerator[bytes, None]:
        """
        Stream the decoded bytes of a range.

        Args:
            file: Manifest entry with ordered segments.
            byte_range: Inclusive byte range into the file.

        Yields:
            Consecutive slices of the requested range.

        Raises:
            RangeOutOfBoundsError: If the range does not fit the file.
            MalformedEscapeError: If a segment line has a truncated escape.
            NNTPError: If fetching a segment fails.
        """
        pieces = plan_pieces(file.segments, byte_range)
        logger.debug(
            "Planned range",
            file=file.name,
            start=byte_range.start,
            end=byte_range.end,
            pieces=len(pieces),
        )
        for piece in pieces:
            async with aclosing(self._stream_piece(piece)) as chunks:
                async for chunk in chunks:
                    yield chunk

    async def fetch_range(self, file: NzbFile, byte_range: ByteRange, sink: ByteSink) -> int:
        """
        Write a range of a file to a sink.

        On failure, bytes already written stay in the sink.

        Returns:
            Number of bytes written.
        """
        written = 0
        async with aclosing(self.stream_range(file, byte_range)) as chunks:
            async for chunk in chunks:
                sink.write(chunk)
                written += len(chunk)
        logger.info("Range fetched", file=file.name, bytes=written)
        return written

    async def download_to_file(
        self, file: NzbFile, destination: Path, byte_range: ByteRange | None = None
    ) -> int:
        """
        Save a file, or a range of it, to disk.

        Args:
            file: Manifest entry.
            destination: Local path to write to.
            byte_range: Range to save. Defaults to the whole file.

        Returns:
            Number of bytes written.
        """
        byte_range = byte_range or ByteRange(0, file.size - 1)
        destination.parent.mkdir(parents=True, exist_ok=True)

        with destination.open("wb") as f:
            written = await self.fetch_range(file, byte_range, f)

        logger.info("File saved", file=file.name, destination=str(destination))
        return written

    async def _stream_piece(self, piece: Piece) -> AsyncGenerator[bytes, None]:
        logger.debug("Fetching segment", message_id=piece.message_id, start=piece.start, end=piece.end)
        lines = await fetch_body(self._session, piece.message_id)

        seg_written = 0
        for line in lines:
            if is_metadata_line(line):
                continue
            decoded = decode_line(undot(line).encode("latin-1"))
            if not decoded:
                continue

            chunk_len = len(decoded)
            start_off = max(0, piece.start - seg_written)
            end_off = min(chunk_len - 1, piece.end - seg_written)
            if start_off <= end_off:
                yield decoded[start_off : end_off + 1]

            seg_written += chunk_len
            if seg_written > piece.end:
                break


async def fetch_range(
    session: NNTPSession, file: NzbFile, byte_range: ByteRange, sink: ByteSink
) -> int:
    """Write a byte range of a file to a sink using the given session."""
    return await RangeService(session).fetch_range(file, byte_range, sink)
