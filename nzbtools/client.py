"""
nzbtools client facade.

This is the main entry point for users of the library. It owns one NNTP
session for the lifetime of an `async with` block and exposes range
retrieval, availability checks and posting on top of it.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Self

import structlog

from nzbtools.config import NzbConfig, ServerConfig
from nzbtools.exceptions import NNTPConnectionError
from nzbtools.models.nntp import CheckReport
from nzbtools.models.nzb import NzbFile
from nzbtools.models.ranges import ByteRange
from nzbtools.nntp.session import NNTPSession
from nzbtools.services.check_service import CheckService
from nzbtools.services.range_service import ByteSink, RangeService

logger = structlog.get_logger(__name__)


class NzbClient:
    """
    Async client for one NNTP server.

    Example:
        ```python
        nzb = await load_nzb("release.nzb")
        file = nzb.get_file("movie.mkv")

        async with NzbClient(server) as client:
            with open("head.bin", "wb") as f:
                await client.fetch_range(file, ByteRange(0, 1023), f)
        ```

    Args:
        server: Server hostname, port, TLS flag and credentials.
        config: Client configuration. Uses defaults if not provided.
    """

    def __init__(self, server: ServerConfig, config: NzbConfig | None = None) -> None:
        self._server = server
        self._config = config or NzbConfig()
        self._session: NNTPSession | None = None

    async def __aenter__(self) -> Self:
        """Connect and authenticate."""
        await self.connect()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Close the session."""
        await self.close()

    async def connect(self) -> None:
        """
        Open the session and log in if credentials are configured.

        Raises:
            NNTPConnectionError: If the server has no hostname or port, or
                cannot be reached.
            AuthenticationError: If login fails.
        """
        if self._session is not None:
            return
        if not self._server.is_complete:
            msg = "Missing NNTP host/port"
            raise NNTPConnectionError(msg, host=self._server.hostname, port=self._server.port)

        session = NNTPSession(self._config)
        try:
            await session.connect(self._server.hostname, self._server.port, use_ssl=self._server.ssl)
            await session.authenticate(self._server.username, self._server.password)
        except Exception:
            await session.close()
            raise
        self._session = session
        logger.debug("Client connected", server=self._server.name or self._server.hostname)

    async def close(self) -> None:
        """Close the session and release the connection."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("Client closed")

    @property
    def session(self) -> NNTPSession:
        """The underlying session. Only available while connected."""
        if self._session is None:
            msg = "Client not connected. Use 'async with' first."
            raise RuntimeError(msg)
        return self._session

    async def fetch_range(self, file: NzbFile, byte_range: ByteRange, sink: ByteSink) -> int:
        """
        Write an inclusive byte range of a file to a sink.

        Returns:
            Number of bytes written.

        Raises:
            RangeOutOfBoundsError: If the range does not fit the file.
            NNTPError: If a segment cannot be fetched.
        """
        return await RangeService(self.session).fetch_range(file, byte_range, sink)

    def stream_range(self, file: NzbFile, byte_range: ByteRange) -> AsyncGenerator[bytes, None]:
        """
        Stream an inclusive byte range of a file.

        Returns:
            An async generator of consecutive slices of the range. Call
            aclose() on it when stopping early.
        """
        return RangeService(self.session).stream_range(file, byte_range)

    async def download_to_file(
        self, file: NzbFile, destination: Path | str, byte_range: ByteRange | None = None
    ) -> int:
        """Save a file, or a range of it, to disk."""
        return await RangeService(self.session).download_to_file(
            file, Path(destination), byte_range
        )

    async def check_file(self, file: NzbFile, method: str = "STAT") -> CheckReport:
        """Report which segments of a file the server is missing."""
        return await CheckService(self.session).check_file(file, method)

    async def post(self, article: str) -> str:
        """
        Post an article.

        Returns:
            The article's Message-ID header, or "" if it has none.
        """
        return await self.session.post(article)
