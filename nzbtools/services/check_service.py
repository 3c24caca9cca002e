"""
Article availability checks.

Asks the server about every segment of a file and reports the ones it
does not have.
"""

import time

import structlog

from nzbtools.models.nntp import CheckReport, MissingArticle
from nzbtools.models.nzb import NzbFile
from nzbtools.nntp.commands import CHECK_METHODS, format_message_id
from nzbtools.nntp.session import NNTPCode, NNTPSession

logger = structlog.get_logger(__name__)


class CheckService:
    """Service for checking segment availability on one session."""

    def __init__(self, session: NNTPSession) -> None:
        self._session = session

    async def check_file(self, file: NzbFile, method: str = "STAT") -> CheckReport:
        """
        Request every segment of a file and collect the missing ones.

        Args:
            file: Manifest entry to check.
            method: STAT, HEAD, BODY or ARTICLE.

        Returns:
            CheckReport listing segments answered with 430.

        Raises:
            ValueError: If method is not a supported check method.
            NNTPError: If a request fails.
        """
        method = method.upper()
        if method not in CHECK_METHODS:
            msg = f"Unsupported check method: {method}"
            raise ValueError(msg)

        logger.info("Checking file", file=file.name, segments=len(file.segments), method=method)
        started = time.monotonic()
        missing: list[MissingArticle] = []
        for segment in file.segments:
            message_id = format_message_id(segment.message_id)
            response = await self._session.request(method, message_id)
            if response.code == NNTPCode.NO_SUCH_ARTICLE:
                logger.warning("Article missing", file=file.name, message_id=message_id)
                missing.append(MissingArticle(message_id=message_id, response=response.line))

        return CheckReport(
            file_name=file.name,
            checked=len(file.segments),
            missing=tuple(missing),
            elapsed=time.monotonic() - started,
        )
