from unittest.mock import AsyncMock, Mock

import pytest

from nzbtools.config import NzbConfig
from nzbtools.exceptions import ArticleNotFoundError, NNTPProtocolError
from nzbtools.models.nntp import NNTPResponse
from nzbtools.nntp.commands import fetch_body, fetch_head, format_message_id, stat_article
from nzbtools.nntp.session import NNTPSession
from nzbtools.tests.utils.fake_nntp import StartServer


@pytest.fixture
def mock_session() -> Mock:
    session = Mock(spec=NNTPSession)
    session.request = AsyncMock()
    return session


@pytest.mark.parametrize(
    ("message_id", "expected"),
    [
        ("part1@test", "<part1@test>"),
        ("<part1@test>", "<part1@test>"),
        ("  part1@test ", "<part1@test>"),
    ],
)
def test_format_message_id(message_id: str, expected: str) -> None:
    assert format_message_id(message_id) == expected


@pytest.mark.asyncio
async def test_fetch_body_returns_payload(start_server: StartServer, config: NzbConfig) -> None:
    server = await start_server(articles={"<a@test>": ["line one", "line two"]})

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        lines = await fetch_body(session, "a@test")

    assert lines == ["line one", "line two"]
    assert "BODY <a@test>" in server.commands


@pytest.mark.asyncio
async def test_fetch_head_returns_headers(start_server: StartServer, config: NzbConfig) -> None:
    server = await start_server(articles={"<a@test>": ["body"]})

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        lines = await fetch_head(session, "<a@test>")

    assert "Message-ID: <a@test>" in lines


@pytest.mark.asyncio
async def test_fetch_body_missing_article(start_server: StartServer, config: NzbConfig) -> None:
    server = await start_server()

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        with pytest.raises(ArticleNotFoundError) as exc_info:
            await fetch_body(session, "gone@test")

    assert exc_info.value.code == 430
    assert exc_info.value.message_id == "<gone@test>"


@pytest.mark.asyncio
async def test_fetch_body_unknown_article_number(mock_session: Mock) -> None:
    mock_session.request.return_value = NNTPResponse(code=423, line="423 no such article number")

    with pytest.raises(ArticleNotFoundError) as exc_info:
        await fetch_body(mock_session, "a@test")

    assert exc_info.value.code == 423
    assert exc_info.value.line == "423 no such article number"


@pytest.mark.asyncio
async def test_fetch_body_other_failure(mock_session: Mock) -> None:
    mock_session.request.return_value = NNTPResponse(code=502, line="502 access denied")

    with pytest.raises(NNTPProtocolError) as exc_info:
        await fetch_body(mock_session, "a@test")

    assert exc_info.value.code == 502
    assert not isinstance(exc_info.value, ArticleNotFoundError)


@pytest.mark.asyncio
async def test_stat_article(start_server: StartServer, config: NzbConfig) -> None:
    server = await start_server(articles={"<a@test>": ["x"]})

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        assert await stat_article(session, "a@test") is True
        assert await stat_article(session, "b@test") is False


@pytest.mark.asyncio
async def test_stat_article_unexpected_status(mock_session: Mock) -> None:
    mock_session.request.return_value = NNTPResponse(code=480, line="480 auth required")

    with pytest.raises(NNTPProtocolError):
        await stat_article(mock_session, "a@test")
