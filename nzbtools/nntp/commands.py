"""Article retrieval commands built on NNTPSession."""

from nzbtools.exceptions import ArticleNotFoundError, NNTPProtocolError
from nzbtools.models.nntp import NNTPResponse
from nzbtools.nntp.session import NNTPCode, NNTPSession

CHECK_METHODS = ("STAT", "HEAD", "BODY", "ARTICLE")

_NOT_FOUND_CODES = frozenset({NNTPCode.NO_SUCH_ARTICLE, NNTPCode.NO_SUCH_ARTICLE_NUMBER})


def format_message_id(message_id: str) -> str:
    """Wrap a bare message id in angle brackets as NNTP expects."""
    message_id = message_id.strip()
    if message_id.startswith("<") and message_id.endswith(">"):
        return message_id
    return f"<{message_id}>"


async def fetch_body(session: NNTPSession, message_id: str) -> list[str]:
    """
    Fetch an article body.

    Args:
        session: Connected NNTP session.
        message_id: Message id, with or without angle brackets.

    Returns:
        Payload lines with dot framing removed.

    Raises:
        ArticleNotFoundError: If the server has no such article.
        NNTPProtocolError: For any other non-success status.
    """
    response = await _fetch(session, "BODY", message_id)
    return list(response.lines or ())


async def fetch_head(session: NNTPSession, message_id: str) -> list[str]:
    """Fetch an article's header lines."""
    response = await _fetch(session, "HEAD", message_id)
    return list(response.lines or ())


async def stat_article(session: NNTPSession, message_id: str) -> bool:
    """
    Check whether an article exists without transferring it.

    Returns:
        True for 223, False when the server reports it missing.
    """
    response = await session.request("STAT", format_message_id(message_id))
    if response.code in _NOT_FOUND_CODES:
        return False
    if response.code != NNTPCode.ARTICLE_STATUS:
        msg = f"Unexpected STAT response: {response.line}"
        raise NNTPProtocolError(msg, code=response.code, line=response.line)
    return True


async def _fetch(session: NNTPSession, method: str, message_id: str) -> NNTPResponse:
    article_id = format_message_id(message_id)
    response = await session.request(method, article_id)
    if response.code in _NOT_FOUND_CODES:
        msg = f"No such article: {article_id}"
        raise ArticleNotFoundError(
            msg, message_id=article_id, code=response.code, line=response.line
        )
    if not response.is_success:
        msg = f"{method} {article_id} failed: {response.line}"
        raise NNTPProtocolError(msg, code=response.code, line=response.line)
    return response
