import pytest

from nzbtools.config import NzbConfig
from nzbtools.exceptions import NNTPProtocolError
from nzbtools.models.nzb import NzbFile
from nzbtools.nntp.session import NNTPSession
from nzbtools.services.check_service import CheckService
from nzbtools.tests.utils.fake_nntp import StartServer

SplitFile = tuple[NzbFile, dict[str, list[str]]]


@pytest.mark.asyncio
async def test_all_segments_present(
    start_server: StartServer, config: NzbConfig, split_file: SplitFile
) -> None:
    file, articles = split_file
    server = await start_server(articles=articles)

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        report = await CheckService(session).check_file(file)

    assert report.is_complete
    assert report.checked == 3
    assert report.file_name == "file.bin"
    assert report.elapsed >= 0
    assert [c.split(" ")[0] for c in server.commands if c != "QUIT"] == ["STAT"] * 3


@pytest.mark.asyncio
async def test_missing_segments_are_reported(
    start_server: StartServer, config: NzbConfig, split_file: SplitFile
) -> None:
    file, articles = split_file
    del articles["<part1@test>"]
    del articles["<part3@test>"]
    server = await start_server(articles=articles)

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        report = await CheckService(session).check_file(file, "stat")

    assert not report.is_complete
    assert [m.message_id for m in report.missing] == ["<part1@test>", "<part3@test>"]
    assert report.missing[0].response.startswith("430")


@pytest.mark.asyncio
async def test_body_method_reads_payloads(
    start_server: StartServer, config: NzbConfig, split_file: SplitFile
) -> None:
    file, articles = split_file
    server = await start_server(articles=articles)

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        report = await CheckService(session).check_file(file, "BODY")
        # Payloads were fully consumed, so the session is still in step
        assert (await session.request("STAT", "<part1@test>")).code == 223

    assert report.is_complete


@pytest.mark.asyncio
async def test_unsupported_method_raises(split_file: SplitFile) -> None:
    file, _ = split_file

    with pytest.raises(ValueError, match="Unsupported check method"):
        await CheckService(NNTPSession()).check_file(file, "GROUP")


@pytest.mark.asyncio
async def test_request_errors_propagate(
    start_server: StartServer, config: NzbConfig, split_file: SplitFile
) -> None:
    file, articles = split_file
    server = await start_server(articles=articles, payload_mode="truncated")

    async with await NNTPSession.open("127.0.0.1", server.port, config=config) as session:
        with pytest.raises(NNTPProtocolError):
            await CheckService(session).check_file(file, "ARTICLE")
