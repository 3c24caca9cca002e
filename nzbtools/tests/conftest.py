from collections.abc import AsyncIterator, Iterator
from typing import Any

import pytest
import structlog

from nzbtools.config import NzbConfig
from nzbtools.models.nzb import NzbFile, Segment
from nzbtools.tests.utils.fake_nntp import FakeNNTPServer, StartServer, yenc_body


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


@pytest.fixture
def config() -> NzbConfig:
    return NzbConfig(read_timeout=2.0, connect_timeout=2.0)


@pytest.fixture
async def start_server() -> AsyncIterator[StartServer]:
    servers: list[FakeNNTPServer] = []

    async def _start(**options: Any) -> FakeNNTPServer:
        server = FakeNNTPServer(**options)
        await server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        await server.stop()


@pytest.fixture
def file_data() -> bytes:
    return bytes(range(256)) * 2 + b"tail of the file"


@pytest.fixture
def split_file(file_data: bytes) -> tuple[NzbFile, dict[str, list[str]]]:
    """A file cut into three segments of 200, 200 and the rest, with their articles."""
    chunks = [file_data[:200], file_data[200:400], file_data[400:]]
    segments = []
    articles = {}
    for number, chunk in enumerate(chunks, start=1):
        message_id = f"part{number}@test"
        segments.append(Segment(message_id=message_id, size=len(chunk), number=number))
        articles[f"<{message_id}>"] = yenc_body(chunk, line_length=64)
    file = NzbFile(name="file.bin", subject='"file.bin" yEnc (1/3)', segments=tuple(segments))
    return file, articles
